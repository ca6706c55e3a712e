"""Scoring domain service - core business logic for lead scoring."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from core.config import get_settings
from core.exceptions import ContactNotFoundError
from core.logging_config import get_logger
from core.models import (
    Campaign,
    Contact,
    ContactList,
    LeadStatus,
    Reply,
    SentMessage,
    SentMessageStatus,
)
from core.utils import round_half_up, utcnow
from scoring.engine import (
    ContactScore,
    ReplySignal,
    ScoringWeights,
    adjust_score_for_reply,
    compute_contact_score,
)

LOGGER = get_logger(__name__)
SETTINGS = get_settings()


@dataclass
class ScoringStats:
    """Aggregate lead-score statistics for an organization."""

    total_scored: int
    average_score: int
    status_distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "totalScored": self.total_scored,
            "averageScore": self.average_score,
            "statusDistribution": dict(self.status_distribution),
        }


class ScoringService:
    """Service for contact lead-scoring operations."""

    def __init__(self, session: Session, weights: Optional[ScoringWeights] = None) -> None:
        """Initialize the scoring service with a database session."""
        self.session = session
        self.weights = weights or ScoringWeights.from_settings()

    def _load_contact(self, contact_id: str) -> Contact:
        contact = self.session.get(Contact, contact_id)
        if contact is None:
            raise ContactNotFoundError()
        return contact

    def get_contact(self, contact_id: str, organization_id: str) -> Contact:
        """
        Fetch a contact that belongs to the given organization.

        Raises:
            ContactNotFoundError: If the contact does not exist in that organization.
        """
        contact = self.session.scalars(
            select(Contact)
            .join(Contact.contact_list)
            .where(Contact.id == contact_id, ContactList.organization_id == organization_id)
        ).one_or_none()
        if contact is None:
            raise ContactNotFoundError()
        return contact

    def score_contact(self, contact_id: str) -> ContactScore:
        """
        Score a contact from its whole interaction history and persist the result.

        Only replies to campaigns of the contact's own organization count.

        Args:
            contact_id: The contact to score.

        Returns:
            ContactScore with details.
        """
        contact = self._load_contact(contact_id)
        organization_id = contact.contact_list.organization_id

        replies = self.session.scalars(
            select(Reply)
            .join(Reply.campaign)
            .where(Reply.contact_id == contact.id, Campaign.organization_id == organization_id)
            .order_by(Reply.received_at.asc())
        ).all()

        last_sent_at = self.session.scalars(
            select(SentMessage.sent_at)
            .where(
                SentMessage.contact_id == contact.id,
                SentMessage.status == SentMessageStatus.SENT.value,
                SentMessage.sent_at.is_not(None),
            )
            .order_by(SentMessage.sent_at.desc())
            .limit(1)
        ).first()

        result = compute_contact_score(
            [ReplySignal(content=r.content or "", received_at=r.received_at) for r in replies],
            last_sent_at=last_sent_at,
            weights=self.weights,
        )

        contact.lead_score = result.score
        contact.lead_status = result.status.value
        contact.scored_at = utcnow()
        contact.score_metadata = result.metadata
        self.session.flush()

        LOGGER.debug(
            f"Scored contact {contact.id}: {result.score} ({result.status.value})",
            extra={"extra_data": {"contact_id": contact.id, "replies": len(replies)}},
        )
        return result

    def score_from_reply(self, contact_id: str, reply_text: str) -> ContactScore:
        """
        Adjust a contact's score from a single new reply and persist it.

        Returns:
            ContactScore without component metadata.
        """
        contact = self._load_contact(contact_id)

        result = adjust_score_for_reply(contact.lead_score, reply_text)

        contact.lead_score = result.score
        contact.lead_status = result.status.value
        contact.scored_at = utcnow()
        self.session.flush()

        return result

    def get_scoring_stats(self, organization_id: str) -> ScoringStats:
        """
        Summarize scored contacts of an organization.

        Args:
            organization_id: Tenant to summarize.

        Returns:
            ScoringStats with a count for every lead status.
        """
        rows = self.session.execute(
            select(Contact.lead_score, Contact.lead_status)
            .join(Contact.contact_list)
            .where(
                ContactList.organization_id == organization_id,
                Contact.lead_score.is_not(None),
            )
        ).all()

        distribution = {status.value: 0 for status in LeadStatus}
        total_score = 0
        for lead_score, lead_status in rows:
            if lead_status in distribution:
                distribution[lead_status] += 1
            total_score += lead_score or 0

        total = len(rows)
        return ScoringStats(
            total_scored=total,
            average_score=round_half_up(total_score / total) if total else 0,
            status_distribution=distribution,
        )

    def bulk_score_contacts(self, organization_id: str, limit: Optional[int] = None) -> int:
        """
        Score contacts of an organization that were never scored.

        A contact counts as unscored when it has no score or no scoring
        timestamp. Each contact is scored inside its own savepoint, so a failed
        contact is rolled back and logged without stopping the run.

        Args:
            organization_id: Tenant whose contacts are scored.
            limit: Maximum contacts per call (defaults to BULK_SCORE_LIMIT).

        Returns:
            Number of contacts selected for scoring.
        """
        batch_limit = limit if limit is not None else SETTINGS.bulk_score_limit

        contact_ids: List[str] = list(
            self.session.scalars(
                select(Contact.id)
                .join(Contact.contact_list)
                .where(
                    ContactList.organization_id == organization_id,
                    or_(Contact.lead_score.is_(None), Contact.scored_at.is_(None)),
                )
                .order_by(Contact.created_at.asc(), Contact.id.asc())
                .limit(batch_limit)
            ).all()
        )

        LOGGER.info(
            f"Bulk scoring {len(contact_ids)} contacts",
            extra={"extra_data": {"organization_id": organization_id, "limit": batch_limit}},
        )

        failed = 0
        for contact_id in contact_ids:
            try:
                with self.session.begin_nested():
                    self.score_contact(contact_id)
            except Exception:
                failed += 1
                LOGGER.exception(f"Failed to score contact {contact_id}")

        if failed:
            LOGGER.warning(
                f"Bulk scoring finished with {failed} failures",
                extra={"extra_data": {"organization_id": organization_id, "failed": failed}},
            )

        return len(contact_ids)


__all__ = ["ScoringService", "ScoringStats"]
