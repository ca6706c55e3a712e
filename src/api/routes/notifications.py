"""Notification inbox endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from api.auth_deps import require_permission
from api.deps import get_db, get_readonly_db
from core.types import SessionUser
from domain.notifications import DEFAULT_PAGE_SIZE, NotificationService

router = APIRouter()


class MarkReadRequest(BaseModel):
    """Notifications to acknowledge."""

    model_config = ConfigDict(populate_by_name=True)

    ids: Optional[List[str]] = None
    mark_all: bool = Field(default=False, alias="markAll")


@router.get("")
async def list_notifications(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    notification_type: Optional[str] = Query(default=None, alias="type"),
    user: SessionUser = Depends(require_permission("notifications:read")),
    db: Session = Depends(get_readonly_db),
) -> Dict[str, Any]:
    """List notifications of the current user in the active organization."""
    result = NotificationService(db).list_notifications(
        user.id,
        user.current_org_id,
        page=page,
        limit=limit,
        unread_only=unread_only,
        notification_type=notification_type,
    )
    return result.to_dict()


@router.put("")
async def mark_notifications_read(
    body: MarkReadRequest,
    user: SessionUser = Depends(require_permission("notifications:read")),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Mark selected notifications, or all of them, as read."""
    updated = NotificationService(db).mark_read(
        user.id,
        user.current_org_id,
        ids=body.ids,
        mark_all=body.mark_all,
    )
    return {"success": True, "updated": updated}


@router.get("/unread-count")
async def get_unread_count(
    user: SessionUser = Depends(require_permission("notifications:read")),
    db: Session = Depends(get_readonly_db),
) -> Dict[str, int]:
    """Number of unread notifications in the active organization."""
    count = NotificationService(db).count_unread(user.id, user.current_org_id)
    return {"count": count}
