"""Data models for recommendation assembly and session analytics."""

from .interaction import InteractionEvent, InteractionType
from .session import SessionContext, SessionPhase, SessionStats, SessionSummary
from .video import FALLBACK_THUMBNAIL, RecommendationResult, SourceCounts, Video

__all__ = [
    "FALLBACK_THUMBNAIL",
    "InteractionEvent",
    "InteractionType",
    "RecommendationResult",
    "SessionContext",
    "SessionPhase",
    "SessionStats",
    "SessionSummary",
    "SourceCounts",
    "Video",
]
