"""Notification domain service - per-user, per-organization inbox."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from core.exceptions import ValidationError
from core.logging_config import get_logger
from core.models import Notification
from core.utils import ensure_aware, utcnow

LOGGER = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    aware = ensure_aware(value)
    return aware.isoformat() if aware else None


@dataclass
class NotificationPage:
    """One page of notifications plus pagination info."""

    notifications: List[Notification]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "notifications": [
                {
                    "id": n.id,
                    "type": n.type,
                    "title": n.title,
                    "message": n.message,
                    "metadata": n.data,
                    "read": n.read,
                    "readAt": _isoformat(n.read_at),
                    "createdAt": _isoformat(n.created_at),
                }
                for n in self.notifications
            ],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "pages": self.pages,
            },
        }


class NotificationService:
    """Service for reading and acknowledging notifications."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @staticmethod
    def _scope(user_id: str, organization_id: str) -> list:
        return [
            Notification.user_id == user_id,
            Notification.organization_id == organization_id,
        ]

    def count_unread(self, user_id: str, organization_id: str) -> int:
        """Count unread notifications for a user within one organization."""
        count = self.session.scalar(
            select(func.count(Notification.id)).where(
                *self._scope(user_id, organization_id),
                Notification.read.is_(False),
            )
        )
        return int(count or 0)

    def list_notifications(
        self,
        user_id: str,
        organization_id: str,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        unread_only: bool = False,
        notification_type: Optional[str] = None,
    ) -> NotificationPage:
        """
        List notifications newest first.

        Args:
            user_id: Recipient.
            organization_id: Active organization.
            page: 1-based page number (values below 1 are treated as 1).
            limit: Page size, clamped to 1..100.
            unread_only: Only return unread notifications.
            notification_type: Optional type filter.

        Returns:
            NotificationPage.
        """
        page = max(1, page)
        limit = min(MAX_PAGE_SIZE, max(1, limit))

        filters = self._scope(user_id, organization_id)
        if unread_only:
            filters.append(Notification.read.is_(False))
        if notification_type:
            filters.append(Notification.type == notification_type)

        notifications = self.session.scalars(
            select(Notification)
            .where(*filters)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        total = self.session.scalar(select(func.count(Notification.id)).where(*filters)) or 0

        return NotificationPage(
            notifications=list(notifications),
            page=page,
            limit=limit,
            total=int(total),
        )

    def mark_read(
        self,
        user_id: str,
        organization_id: str,
        ids: Optional[Sequence[str]] = None,
        mark_all: bool = False,
    ) -> int:
        """
        Mark notifications as read.

        Only unread notifications of this user in this organization are touched.

        Returns:
            Number of notifications updated.

        Raises:
            ValidationError: When neither ``ids`` nor ``mark_all`` is given.
        """
        filters = self._scope(user_id, organization_id)
        filters.append(Notification.read.is_(False))

        if not mark_all:
            if not ids:
                raise ValidationError("IDs de notificações são obrigatórios")
            filters.append(Notification.id.in_(list(ids)))

        self.session.flush()
        result = self.session.execute(
            update(Notification)
            .where(*filters)
            .values(read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        # Loaded notifications are stale after a bulk update
        self.session.expire_all()

        updated = result.rowcount or 0
        LOGGER.info(
            f"Marked {updated} notifications as read",
            extra={"extra_data": {"user_id": user_id, "organization_id": organization_id}},
        )
        return updated

    def notify(
        self,
        user_id: str,
        organization_id: str,
        notification_type: str,
        title: str,
        message: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """Create an unread notification."""
        notification = Notification(
            user_id=user_id,
            organization_id=organization_id,
            type=notification_type,
            title=title,
            message=message,
            data=data,
            read=False,
        )
        self.session.add(notification)
        self.session.flush()
        return notification


__all__ = ["NotificationService", "NotificationPage"]
