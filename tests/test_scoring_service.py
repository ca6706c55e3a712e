"""Test the scoring domain service against a real session."""
from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError

from core.exceptions import ContactNotFoundError
from core.models import Campaign, Contact, ContactList, LeadStatus, Reply, SentMessage
from core.utils import utcnow
from domain.scoring import ScoringService


class TestScoreContact:
    def test_scores_and_persists(self, db_session, engaged_contact):
        service = ScoringService(db_session)

        result = service.score_contact(engaged_contact.id)

        db_session.refresh(engaged_contact)
        assert result.status is LeadStatus.QUENTE
        assert engaged_contact.lead_score == result.score
        assert engaged_contact.lead_status == "quente"
        assert engaged_contact.scored_at is not None
        assert engaged_contact.score_metadata["repliesCount"] == 1
        assert engaged_contact.score_metadata["responseTimeScore"] == 100

    def test_ignores_replies_to_other_organizations(
        self, db_session, engaged_contact, other_organization
    ):
        foreign_campaign = Campaign(organization_id=other_organization.id, name="Alheia")
        db_session.add(foreign_campaign)
        db_session.flush()
        db_session.add(
            Reply(
                contact_id=engaged_contact.id,
                campaign_id=foreign_campaign.id,
                content="nunca",
                received_at=utcnow(),
            )
        )
        db_session.flush()

        result = ScoringService(db_session).score_contact(engaged_contact.id)

        assert result.metadata["repliesCount"] == 1
        assert result.metadata["sentimentScore"] == 100

    def test_only_sent_messages_count(self, db_session, make_contact, campaign):
        contact = make_contact()
        sent_at = utcnow() - timedelta(hours=1)
        db_session.add(
            SentMessage(contact_id=contact.id, campaign_id=campaign.id, status="failed", sent_at=sent_at)
        )
        db_session.add(
            Reply(
                contact_id=contact.id,
                campaign_id=campaign.id,
                content="ok",
                received_at=sent_at + timedelta(minutes=1),
            )
        )
        db_session.flush()

        result = ScoringService(db_session).score_contact(contact.id)

        assert result.metadata["responseTimeScore"] == 0

    def test_contact_without_history(self, db_session, make_contact):
        contact = make_contact()

        result = ScoringService(db_session).score_contact(contact.id)

        assert result.score == 25
        assert result.status is LeadStatus.NOVO

    def test_missing_contact(self, db_session, tables):
        with pytest.raises(ContactNotFoundError, match="Contato não encontrado"):
            ScoringService(db_session).score_contact("does-not-exist")


class TestScoreFromReply:
    def test_adjusts_stored_score(self, db_session, make_contact):
        contact = make_contact(lead_score=50, lead_status="frio", scored=True)

        result = ScoringService(db_session).score_from_reply(contact.id, "Sim, quero!")

        db_session.refresh(contact)
        assert result.score == 67
        assert contact.lead_score == 67
        assert contact.lead_status == "morno"

    def test_keeps_component_metadata(self, db_session, make_contact):
        contact = make_contact(lead_score=50, scored=True)
        contact.score_metadata = {"repliesCount": 3}
        db_session.flush()

        ScoringService(db_session).score_from_reply(contact.id, "ok")

        db_session.refresh(contact)
        assert contact.score_metadata == {"repliesCount": 3}


class TestGetContact:
    def test_scoped_to_organization(self, db_session, make_contact, organization, other_organization):
        contact = make_contact()
        service = ScoringService(db_session)

        assert service.get_contact(contact.id, organization.id).id == contact.id
        with pytest.raises(ContactNotFoundError):
            service.get_contact(contact.id, other_organization.id)


class TestScoringStats:
    def test_aggregates_scored_contacts(self, db_session, make_contact, organization, other_organization):
        make_contact(lead_score=80, lead_status="quente", scored=True)
        make_contact(lead_score=60, lead_status="morno", scored=True)
        make_contact(lead_score=26, lead_status="novo", scored=True)
        make_contact()

        foreign_list = ContactList(organization_id=other_organization.id, name="Outra")
        db_session.add(foreign_list)
        db_session.flush()
        make_contact(lead_score=10, lead_status="novo", scored=True, target_list=foreign_list)

        stats = ScoringService(db_session).get_scoring_stats(organization.id)

        assert stats.total_scored == 3
        assert stats.average_score == 55
        assert stats.status_distribution == {
            "novo": 1,
            "quente": 1,
            "morno": 1,
            "frio": 0,
            "convertido": 0,
            "perdido": 0,
        }

    def test_average_rounds_half_up(self, db_session, make_contact, organization):
        make_contact(lead_score=50, lead_status="frio", scored=True)
        make_contact(lead_score=51, lead_status="frio", scored=True)

        stats = ScoringService(db_session).get_scoring_stats(organization.id)

        assert stats.average_score == 51

    def test_no_scored_contacts(self, db_session, organization):
        stats = ScoringService(db_session).get_scoring_stats(organization.id)

        assert stats.to_dict() == {
            "totalScored": 0,
            "averageScore": 0,
            "statusDistribution": {
                "novo": 0,
                "quente": 0,
                "morno": 0,
                "frio": 0,
                "convertido": 0,
                "perdido": 0,
            },
        }


class TestBulkScore:
    def test_scores_only_unscored(self, db_session, make_contact, organization):
        unscored = [make_contact(name=f"Contato {i}") for i in range(3)]
        already = make_contact(lead_score=90, lead_status="quente", scored=True)
        score_without_timestamp = make_contact(lead_score=40, lead_status="frio")

        count = ScoringService(db_session).bulk_score_contacts(organization.id)

        assert count == 4
        for contact in unscored + [score_without_timestamp]:
            db_session.refresh(contact)
            assert contact.scored_at is not None
            assert contact.lead_score == 25
        db_session.refresh(already)
        assert already.lead_score == 90

    def test_respects_limit(self, db_session, make_contact, organization):
        for i in range(5):
            make_contact(name=f"Contato {i}")

        service = ScoringService(db_session)

        assert service.bulk_score_contacts(organization.id, limit=2) == 2
        assert service.bulk_score_contacts(organization.id) == 3
        assert service.bulk_score_contacts(organization.id) == 0

    def test_other_organizations_untouched(self, db_session, make_contact, other_organization):
        make_contact()

        assert ScoringService(db_session).bulk_score_contacts(other_organization.id) == 0

    def test_failures_do_not_stop_the_run(self, db_session, make_contact, organization, monkeypatch):
        first = make_contact(name="Falha")
        second = make_contact(name="Sucesso")
        service = ScoringService(db_session)
        original = service.score_contact

        def flaky(contact_id):
            if contact_id == first.id:
                raise RuntimeError("boom")
            return original(contact_id)

        monkeypatch.setattr(service, "score_contact", flaky)

        assert service.bulk_score_contacts(organization.id) == 2
        db_session.refresh(second)
        db_session.refresh(first)
        assert second.lead_score == 25
        assert first.lead_score is None

    def test_database_failure_is_rolled_back(self, db_session, make_contact, organization):
        first = make_contact(name="Falha")
        second = make_contact(name="Sucesso")

        def reject_first(mapper, connection, target):
            if target.id == first.id:
                raise IntegrityError("UPDATE contact", {}, Exception("constraint failed"))

        event.listen(Contact, "before_update", reject_first)
        try:
            scored = ScoringService(db_session).bulk_score_contacts(organization.id)
        finally:
            event.remove(Contact, "before_update", reject_first)

        assert scored == 2
        assert db_session.is_active
        db_session.refresh(first)
        db_session.refresh(second)
        assert first.lead_score is None
        assert second.lead_score == 25
