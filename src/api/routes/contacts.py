"""Contact lead-scoring endpoints."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from api.auth_deps import require_permission
from api.deps import get_db, get_readonly_db
from core.logging_config import get_logger
from core.types import SessionUser
from core.utils import ensure_aware
from domain.scoring import ScoringService

router = APIRouter()
LOGGER = get_logger(__name__)


class ScoreContactRequest(BaseModel):
    """Optional reply text for a quick score adjustment."""

    model_config = ConfigDict(populate_by_name=True)

    reply_text: Optional[str] = Field(default=None, alias="replyText")


@router.get("/scoring")
async def get_scoring_stats(
    user: SessionUser = Depends(require_permission("contacts:read")),
    db: Session = Depends(get_readonly_db),
) -> Dict[str, Any]:
    """Lead-score statistics for the active organization."""
    stats = ScoringService(db).get_scoring_stats(user.current_org_id)
    return {"stats": stats.to_dict()}


@router.post("/scoring")
async def score_unscored_contacts(
    user: SessionUser = Depends(require_permission("contacts:update")),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Score contacts of the active organization that were never scored."""
    scored_count = ScoringService(db).bulk_score_contacts(user.current_org_id)

    LOGGER.info(
        f"Bulk scoring requested by {user.id}",
        extra={"extra_data": {"organization_id": user.current_org_id, "scored": scored_count}},
    )
    return {
        "message": f"{scored_count} contatos foram pontuados",
        "scoredCount": scored_count,
    }


@router.get("/{contact_id}/score")
async def get_contact_score(
    contact_id: str,
    user: SessionUser = Depends(require_permission("contacts:read")),
    db: Session = Depends(get_readonly_db),
) -> Dict[str, Any]:
    """Current stored score of one contact."""
    contact = ScoringService(db).get_contact(contact_id, user.current_org_id)
    scored_at = ensure_aware(contact.scored_at)
    return {
        "contact": {
            "id": contact.id,
            "name": contact.name,
            "phoneNumber": contact.phone_number,
            "leadScore": contact.lead_score,
            "leadStatus": contact.lead_status,
            "scoredAt": scored_at.isoformat() if scored_at else None,
            "scoreMetadata": contact.score_metadata,
        }
    }


@router.post("/{contact_id}/score")
async def score_contact(
    contact_id: str,
    body: Optional[ScoreContactRequest] = None,
    user: SessionUser = Depends(require_permission("contacts:update")),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Rescore one contact.

    With ``replyText`` the stored score is nudged by that single reply;
    otherwise the full interaction history is scored again.
    """
    service = ScoringService(db)
    contact = service.get_contact(contact_id, user.current_org_id)

    if body is not None and body.reply_text:
        result = service.score_from_reply(contact.id, body.reply_text)
    else:
        result = service.score_contact(contact.id)

    return result.to_dict()
