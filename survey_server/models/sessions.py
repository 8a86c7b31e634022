"""Session (analytics cycle) request/response models."""

from typing import Dict, List, Optional

from pydantic import BaseModel


class CreateSessionRequest(BaseModel):
    user_id: Optional[str] = None
    recommended_video_ids: Optional[List[str]] = None


class SetRecommendedRequest(BaseModel):
    video_ids: List[str] = []


class TrackRequest(BaseModel):
    user_id: Optional[str] = None
    video_id: Optional[str] = None
    interaction_type: str = "click"
    selected_videos: List[str] = []


class SummaryRequest(BaseModel):
    user_id: Optional[str] = None
    selected_videos: List[str] = []


class SessionInfo(BaseModel):
    session_id: str
    user_id: Optional[str] = None
    phase: str
    recommended_videos: List[str]
    total_interactions: int
    interactions_by_type: Dict[str, int]
    created_at: str


class TrackResponse(BaseModel):
    status: str = "ok"
    session_id: str
    video_id: str
    interaction_type: str
    is_recommended: bool
    total_interactions: int


class SummaryResponse(BaseModel):
    session_id: str
    user_id: str
    recommended_videos: List[str]
    selected_videos: List[str]
    selected_recommended: int
    total_recommended: int
    recommendation_accuracy: float
    persisted: bool
