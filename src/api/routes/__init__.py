"""API route modules."""
from __future__ import annotations

from . import auth, contacts, dashboard, health, notifications

__all__ = [
    "auth",
    "contacts",
    "dashboard",
    "health",
    "notifications",
]
