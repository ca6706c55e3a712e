"""Scoring utilities for lead score calculations."""
from __future__ import annotations

from .engine import (
    ContactScore,
    ReplySignal,
    ScoringWeights,
    adjust_score_for_reply,
    analyze_sentiment,
    compute_contact_score,
    get_lead_status,
)

__all__ = [
    "ContactScore",
    "ReplySignal",
    "ScoringWeights",
    "adjust_score_for_reply",
    "analyze_sentiment",
    "compute_contact_score",
    "get_lead_status",
]
