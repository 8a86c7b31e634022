"""Pydantic request/response models for the API."""

from .analytics import AnalyticsRequest, InteractionIn, SessionDataIn
from .common import VideoCard
from .recommendations import RecommendationRequest, RecommendationResponse, SourceInfo
from .sessions import (
    CreateSessionRequest,
    SessionInfo,
    SetRecommendedRequest,
    SummaryRequest,
    SummaryResponse,
    TrackRequest,
    TrackResponse,
)
from .users import PreferencesRequest, PreferencesResponse, SelectedVideosRequest

__all__ = [
    "AnalyticsRequest",
    "CreateSessionRequest",
    "InteractionIn",
    "PreferencesRequest",
    "PreferencesResponse",
    "RecommendationRequest",
    "RecommendationResponse",
    "SelectedVideosRequest",
    "SessionDataIn",
    "SessionInfo",
    "SetRecommendedRequest",
    "SourceInfo",
    "SummaryRequest",
    "SummaryResponse",
    "TrackRequest",
    "TrackResponse",
    "VideoCard",
]
