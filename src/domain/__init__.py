"""Domain layer for RevSend business logic.

This module provides a clean separation between business logic and
infrastructure (CLI, API, etc.). All core operations should go through
the domain services.
"""
from __future__ import annotations

from .accounts import AccountService, OrganizationSwitch
from .notifications import NotificationPage, NotificationService
from .scoring import ScoringService, ScoringStats

__all__ = [
    # Account Service
    "AccountService",
    "OrganizationSwitch",
    # Notification Service
    "NotificationService",
    "NotificationPage",
    # Scoring Service
    "ScoringService",
    "ScoringStats",
]
