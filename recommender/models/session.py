"""
Session models: explicit per-session analytics state and its end-of-session summary.

A SessionContext is a value: aggregator operations take one and return a new one.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .interaction import InteractionEvent, utc_now_iso


class SessionPhase(str, Enum):
    EMPTY = "empty"
    RECOMMENDED_SET = "recommended_set"
    TRACKING = "tracking"
    SUMMARIZED = "summarized"


class SessionContext(BaseModel):
    """State of one recommendation cycle: ground-truth recommended ids and the event log."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    session_id: str
    user_id: Optional[str] = None
    phase: SessionPhase = SessionPhase.EMPTY
    recommended_video_ids: List[str] = Field(default_factory=list)
    events: List[InteractionEvent] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now_iso)

    @property
    def has_recommended_set(self) -> bool:
        return self.phase != SessionPhase.EMPTY


class SessionSummary(BaseModel):
    """Accuracy summary for one session, computed once the user has made a selection."""

    user_id: str
    session_id: str
    recommended_video_ids: List[str] = Field(default_factory=list)
    selected_video_ids: List[str] = Field(default_factory=list)
    accuracy_percent: float = 0.0
    selected_recommended_count: int = 0
    total_recommended: int = 0
    persisted: bool = False
    timestamp: str = Field(default_factory=utc_now_iso)

    def to_record(self) -> dict:
        """Row shape for the recommendation_sessions table."""
        return {
            "user_id": self.user_id,
            "session_id": self.session_id,
            "recommended_videos": list(self.recommended_video_ids),
            "selected_videos": list(self.selected_video_ids),
            "total_recommended": self.total_recommended,
            "selected_recommended": self.selected_recommended_count,
            "recommendation_accuracy": self.accuracy_percent,
            "timestamp": self.timestamp,
        }


class SessionStats(BaseModel):
    session_id: str
    total_interactions: int
    recommended_videos: List[str]
    interactions_by_type: Dict[str, int]
