"""
Lead scoring engine based on reply sentiment and engagement.

Scores contacts from their interaction history:
- Reply sentiment (positive/negative/neutral)
- Response time (faster = more engaged)
- Engagement frequency (number of replies)
- Keywords indicating interest or disinterest

Pure functions only. NO DATABASE ACCESS.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from core.config import get_settings
from core.models import LeadStatus
from core.utils import ensure_aware, round_half_up

# =============================================================================
# THRESHOLDS (EXPOSED FOR CONFIG)
# =============================================================================

HOT_THRESHOLD = 80    # quente
WARM_THRESHOLD = 60   # morno
COLD_THRESHOLD = 30   # frio

DEFAULT_QUICK_SCORE = 50
REPLY_ENGAGEMENT_BONUS = 2

# Positive keywords indicating interest (Portuguese/English)
POSITIVE_KEYWORDS: tuple[str, ...] = (
    # Portuguese
    "interessado", "interessada", "quero", "sim", "vamos", "pode",
    "me liga", "me chama", "enviar", "quanto custa", "preço", "proposta",
    "agendar", "reunião", "conversar", "mais informações", "detalhes",
    "gostei", "ótimo", "excelente", "perfeito", "bom", "legal",
    # English
    "interested", "yes", "want", "price", "proposal", "meeting",
    "schedule", "more information", "details", "great", "excellent",
)

# Negative keywords indicating disinterest
NEGATIVE_KEYWORDS: tuple[str, ...] = (
    # Portuguese
    "não", "nunca", "parar", "sair", "cancelar", "remove",
    "não quero", "não tenho interesse", "sem interesse", "não preciso",
    "outro momento", "agora não", "ocupado", "não posso",
    # English
    "no", "never", "stop", "unsubscribe", "not interested", "busy",
)

POSITIVE_EMOJIS: tuple[str, ...] = (
    "😀", "😃", "😄", "😁", "😊", "🙂", "😉", "👍", "👏", "❤", "💪", "🎉", "✅",
)
NEGATIVE_EMOJIS: tuple[str, ...] = ("😡", "😠", "😤", "😞", "😢", "👎", "❌")

# (upper bound in minutes, score)
RESPONSE_TIME_BANDS: tuple[tuple[float, float], ...] = (
    (5, 1.0),      # Immediate response
    (30, 0.9),     # Very quick
    (60, 0.8),     # Quick
    (180, 0.6),    # Moderate
    (720, 0.4),    # Slow (same day)
    (1440, 0.2),   # Very slow (next day)
)
SLOWEST_RESPONSE_SCORE = 0.1


@dataclass(frozen=True)
class ScoringWeights:
    """Relative weight of each component in the final score."""
    sentiment: float = 0.35
    response_time: float = 0.25
    engagement: float = 0.25
    keywords: float = 0.15

    def to_dict(self) -> Dict[str, float]:
        return {
            "sentiment": self.sentiment,
            "responseTime": self.response_time,
            "engagement": self.engagement,
            "keywords": self.keywords,
        }

    @classmethod
    def from_settings(cls) -> "ScoringWeights":
        settings = get_settings()
        return cls(
            sentiment=settings.score_weight_sentiment,
            response_time=settings.score_weight_response_time,
            engagement=settings.score_weight_engagement,
            keywords=settings.score_weight_keywords,
        )


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class ReplySignal:
    """The parts of a reply the engine looks at."""
    content: str
    received_at: Optional[datetime]


@dataclass
class ContactScore:
    """Result of scoring a contact."""
    score: int
    status: LeadStatus
    metadata: Optional[Dict[str, Any]] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "status": self.status.value,
            "metadata": self.metadata,
        }


def _count_keywords(lower_message: str) -> tuple[int, int]:
    positive = sum(1 for kw in POSITIVE_KEYWORDS if kw in lower_message)
    negative = sum(1 for kw in NEGATIVE_KEYWORDS if kw in lower_message)
    return positive, negative


def analyze_sentiment(message: str) -> float:
    """
    Rule-based sentiment of a message.

    Keywords are matched as case-insensitive substrings.

    Returns:
        Score from -1 (very negative) to 1 (very positive).
    """
    positive, negative = _count_keywords(message.lower())

    score = 0.0
    if positive or negative:
        score = (positive - negative) / (positive + negative)

    # Exclamation marks only amplify an already positive message
    exclamations = message.count("!")
    if exclamations and positive > negative:
        score = min(1.0, score + 0.1 * exclamations)

    # Questions signal engagement
    questions = message.count("?")
    if questions:
        score = min(1.0, score + 0.05 * questions)

    positive_emojis = sum(1 for emoji in POSITIVE_EMOJIS if emoji in message)
    negative_emojis = sum(1 for emoji in NEGATIVE_EMOJIS if emoji in message)
    score += 0.1 * (positive_emojis - negative_emojis)

    return max(-1.0, min(1.0, score))


def calculate_response_time_score(response_time_minutes: float) -> float:
    """Faster responses score higher."""
    for upper_bound, band_score in RESPONSE_TIME_BANDS:
        if response_time_minutes <= upper_bound:
            return band_score
    return SLOWEST_RESPONSE_SCORE


def calculate_engagement_score(reply_count: int) -> float:
    """Engagement from the number of replies."""
    if reply_count <= 0:
        return 0.0
    if reply_count == 1:
        return 0.3
    if reply_count <= 3:
        return 0.5
    if reply_count <= 5:
        return 0.7
    if reply_count <= 10:
        return 0.9
    return 1.0


def calculate_keyword_score(message: str) -> float:
    """Share of positive keyword hits; 0.5 (neutral) when nothing matched."""
    positive, negative = _count_keywords(message.lower())
    if positive == 0 and negative == 0:
        return 0.5
    return positive / (positive + negative)


def get_lead_status(score: int) -> LeadStatus:
    """Map a 0-100 score onto a lead status."""
    if score >= HOT_THRESHOLD:
        return LeadStatus.QUENTE
    if score >= WARM_THRESHOLD:
        return LeadStatus.MORNO
    if score >= COLD_THRESHOLD:
        return LeadStatus.FRIO
    return LeadStatus.NOVO


def compute_contact_score(
    replies: Sequence[ReplySignal],
    last_sent_at: Optional[datetime] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ContactScore:
    """
    Score a contact from its full interaction history.

    Args:
        replies: Replies ordered by received time, oldest first.
        last_sent_at: When the most recent outbound message was sent.
        weights: Component weights.

    Returns:
        ContactScore with the 0-100 score, status and component metadata.
    """
    sentiment_score = 0.5  # neutral
    response_time_score = 0.0
    engagement_score = 0.0
    keyword_score = 0.5  # neutral

    if replies:
        sentiments = [analyze_sentiment(r.content or "") for r in replies]
        # Normalize [-1, 1] to [0, 1]
        sentiment_score = (sum(sentiments) / len(sentiments) + 1) / 2

        # Measured from the last sent message to the first reply
        first_received = ensure_aware(replies[0].received_at)
        last_sent = ensure_aware(last_sent_at)
        if first_received is not None and last_sent is not None:
            minutes = (first_received - last_sent).total_seconds() / 60
            response_time_score = calculate_response_time_score(minutes)

        engagement_score = calculate_engagement_score(len(replies))

        keyword_scores = [calculate_keyword_score(r.content or "") for r in replies]
        keyword_score = sum(keyword_scores) / len(keyword_scores)

    raw_score = (
        sentiment_score * weights.sentiment
        + response_time_score * weights.response_time
        + engagement_score * weights.engagement
        + keyword_score * weights.keywords
    )
    score = round_half_up(raw_score * 100)

    last_reply_at = ensure_aware(replies[-1].received_at) if replies else None
    metadata: Dict[str, Any] = {
        "sentimentScore": round_half_up(sentiment_score * 100),
        "responseTimeScore": round_half_up(response_time_score * 100),
        "engagementScore": round_half_up(engagement_score * 100),
        "keywordScore": round_half_up(keyword_score * 100),
        "repliesCount": len(replies),
        "lastReplyAt": last_reply_at.isoformat() if last_reply_at else None,
        "weights": weights.to_dict(),
    }

    return ContactScore(score=score, status=get_lead_status(score), metadata=metadata)


def adjust_score_for_reply(current_score: Optional[int], reply_text: str) -> ContactScore:
    """
    Quick incremental re-score from a single new reply.

    Cheaper than a full history scan; used for real-time updates.
    """
    score = current_score or DEFAULT_QUICK_SCORE

    sentiment = analyze_sentiment(reply_text)
    keyword_score = calculate_keyword_score(reply_text)

    adjustment = round_half_up(sentiment * 10 + (keyword_score - 0.5) * 10)
    score = max(0, min(100, score + adjustment))

    # Any reply at all is engagement
    score = min(100, score + REPLY_ENGAGEMENT_BONUS)

    return ContactScore(score=score, status=get_lead_status(score))


__all__ = [
    "HOT_THRESHOLD",
    "WARM_THRESHOLD",
    "COLD_THRESHOLD",
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
    "ReplySignal",
    "ContactScore",
    "analyze_sentiment",
    "calculate_response_time_score",
    "calculate_engagement_score",
    "calculate_keyword_score",
    "get_lead_status",
    "compute_contact_score",
    "adjust_score_for_reply",
]
