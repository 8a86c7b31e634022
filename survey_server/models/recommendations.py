"""Recommendation request/response models."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .common import VideoCard


class RecommendationRequest(BaseModel):
    user_id: Optional[str] = None
    top_k: Optional[int] = Field(default=None, ge=0)
    total: Optional[int] = Field(default=None, ge=0)


class SourceInfo(BaseModel):
    from_microservice: int
    from_catalog: int
    from_fallback: int


class RecommendationResponse(BaseModel):
    user_id: str
    session_id: str
    videos: List[VideoCard]
    count: int
    recommended_count: int
    additional_count: int
    source_info: SourceInfo
