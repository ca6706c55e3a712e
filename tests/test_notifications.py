"""Tests for the notification service and inbox endpoints."""
from __future__ import annotations

import pytest

from core.exceptions import ValidationError
from core.models import Notification
from domain.notifications import NotificationService


@pytest.fixture
def inbox(db_session, vendedor, organization, other_organization):
    """Three unread and one read notification in the org, one unread elsewhere."""
    service = NotificationService(db_session)
    created = [
        service.notify(vendedor.id, organization.id, "lead_hot", f"Lead quente {i}", data={"n": i})
        for i in range(3)
    ]
    read = service.notify(vendedor.id, organization.id, "campaign_done", "Campanha concluída")
    read.read = True
    service.notify(vendedor.id, other_organization.id, "lead_hot", "Outra organização")
    db_session.flush()
    return created


class TestNotificationService:
    def test_count_unread_is_scoped(self, db_session, inbox, vendedor, organization, other_organization):
        service = NotificationService(db_session)

        assert service.count_unread(vendedor.id, organization.id) == 3
        assert service.count_unread(vendedor.id, other_organization.id) == 1

    def test_count_unread_other_user(self, db_session, inbox, gerente, organization):
        assert NotificationService(db_session).count_unread(gerente.id, organization.id) == 0

    def test_list_pagination(self, db_session, inbox, vendedor, organization):
        page = NotificationService(db_session).list_notifications(
            vendedor.id, organization.id, page=2, limit=3
        )

        data = page.to_dict()
        assert data["pagination"] == {"page": 2, "limit": 3, "total": 4, "pages": 2}
        assert len(data["notifications"]) == 1

    def test_list_filters(self, db_session, inbox, vendedor, organization):
        service = NotificationService(db_session)

        unread = service.list_notifications(vendedor.id, organization.id, unread_only=True)
        typed = service.list_notifications(vendedor.id, organization.id, notification_type="campaign_done")

        assert unread.total == 3
        assert all(not n.read for n in unread.notifications)
        assert [n.title for n in typed.notifications] == ["Campanha concluída"]

    def test_list_clamps_arguments(self, db_session, inbox, vendedor, organization):
        page = NotificationService(db_session).list_notifications(
            vendedor.id, organization.id, page=0, limit=1000
        )

        assert page.page == 1
        assert page.limit == 100

    def test_mark_selected_read(self, db_session, inbox, vendedor, organization):
        service = NotificationService(db_session)

        updated = service.mark_read(vendedor.id, organization.id, ids=[inbox[0].id, inbox[1].id])

        assert updated == 2
        assert service.count_unread(vendedor.id, organization.id) == 1
        db_session.refresh(inbox[0])
        assert inbox[0].read is True
        assert inbox[0].read_at is not None

    def test_mark_all_read_stays_in_organization(
        self, db_session, inbox, vendedor, organization, other_organization
    ):
        service = NotificationService(db_session)

        assert service.mark_read(vendedor.id, organization.id, mark_all=True) == 3
        assert service.count_unread(vendedor.id, organization.id) == 0
        assert service.count_unread(vendedor.id, other_organization.id) == 1

    def test_cannot_mark_other_users_notifications(self, db_session, inbox, gerente, organization):
        updated = NotificationService(db_session).mark_read(gerente.id, organization.id, ids=[inbox[0].id])

        assert updated == 0

    def test_ids_required(self, db_session, vendedor, organization):
        with pytest.raises(ValidationError, match="IDs de notificações são obrigatórios"):
            NotificationService(db_session).mark_read(vendedor.id, organization.id, ids=[])


class TestNotificationRoutes:
    def test_unread_count(self, client, inbox, vendedor, organization, auth_headers):
        resp = client.get(
            "/api/notifications/unread-count",
            headers=auth_headers(vendedor, organization, "vendedor"),
        )

        assert resp.status_code == 200
        assert resp.json() == {"count": 3}

    def test_unread_count_requires_auth(self, client):
        resp = client.get("/api/notifications/unread-count")

        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized"}

    def test_unread_count_requires_organization(self, client, vendedor, auth_headers):
        resp = client.get("/api/notifications/unread-count", headers=auth_headers(vendedor))

        assert resp.status_code == 403
        assert resp.json() == {"error": "Nenhuma organização selecionada"}

    def test_list(self, client, inbox, vendedor, organization, auth_headers):
        resp = client.get(
            "/api/notifications",
            params={"unreadOnly": "true", "limit": 2},
            headers=auth_headers(vendedor, organization, "vendedor"),
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["pages"] == 2
        assert len(data["notifications"]) == 2
        first = data["notifications"][0]
        assert set(first) == {"id", "type", "title", "message", "metadata", "read", "readAt", "createdAt"}

    def test_mark_all(self, client, inbox, vendedor, organization, auth_headers):
        headers = auth_headers(vendedor, organization, "vendedor")

        resp = client.put("/api/notifications", json={"markAll": True}, headers=headers)

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "updated": 3}
        assert client.get("/api/notifications/unread-count", headers=headers).json() == {"count": 0}

    def test_mark_without_ids(self, client, vendedor, organization, auth_headers):
        resp = client.put(
            "/api/notifications",
            json={},
            headers=auth_headers(vendedor, organization, "vendedor"),
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "IDs de notificações são obrigatórios"}

    def test_unexpected_error_keeps_request_id(
        self, client, vendedor, organization, auth_headers, monkeypatch
    ):
        def broken_count(self, user_id, organization_id):
            raise RuntimeError("database went away")

        monkeypatch.setattr(NotificationService, "count_unread", broken_count)

        resp = client.get(
            "/api/notifications/unread-count",
            headers={**auth_headers(vendedor, organization, "vendedor"), "X-Request-ID": "req-500"},
        )

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}
        assert resp.headers["X-Request-ID"] == "req-500"
