"""Participant preference and survey submission models."""

from typing import List, Optional

from pydantic import BaseModel


class PreferencesRequest(BaseModel):
    categories: List[str] = []
    email: Optional[str] = None


class PreferencesResponse(BaseModel):
    user_id: str
    topic: str
    categories: List[str]


class SelectedVideosRequest(BaseModel):
    user_id: Optional[str] = None
    selected_videos: List[str] = []
    email: Optional[str] = None
