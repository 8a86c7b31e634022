"""Analytics ingest models (the batch shape sent by survey clients)."""

from typing import List, Optional

from pydantic import BaseModel


class InteractionIn(BaseModel):
    user_id: Optional[str] = None
    video_id: str
    interaction_type: str
    is_recommended: bool = False
    timestamp: Optional[str] = None
    session_id: Optional[str] = None


class SessionDataIn(BaseModel):
    recommended_videos: List[str] = []
    selected_videos: List[str] = []
    recommendation_accuracy: Optional[float] = None


class AnalyticsRequest(BaseModel):
    user_id: Optional[str] = None
    interactions: List[InteractionIn] = []
    session_data: Optional[SessionDataIn] = None
