"""
Survey recommendation core

- models/: Video, RecommendationResult, InteractionEvent, SessionContext, SessionSummary
- assembler: RecommendationAssembler (service ids + catalog filler + fallbacks)
- aggregator: session-scoped interaction tracking and accuracy summaries
"""

from .aggregator import (
    InteractionAggregator,
    InteractionSink,
    compute_accuracy,
    new_session,
    reset,
    session_stats,
    set_recommended,
)
from .assembler import (
    DEFAULT_RECOMMENDED_TARGET,
    DEFAULT_TARGET_TOTAL,
    RecommendationAssembler,
    RecommendationSource,
    VideoSource,
)
from .errors import (
    CatalogError,
    PersistenceError,
    RecommendationServiceError,
    SurveyError,
    UpstreamError,
)
from .fallback import FALLBACK_VIDEOS

__all__ = [
    "CatalogError",
    "DEFAULT_RECOMMENDED_TARGET",
    "DEFAULT_TARGET_TOTAL",
    "FALLBACK_VIDEOS",
    "InteractionAggregator",
    "InteractionSink",
    "PersistenceError",
    "RecommendationAssembler",
    "RecommendationServiceError",
    "RecommendationSource",
    "SurveyError",
    "UpstreamError",
    "VideoSource",
    "compute_accuracy",
    "new_session",
    "reset",
    "session_stats",
    "set_recommended",
]
