"""
Interaction model: one user action on a video during a survey session.

Events are frozen once created; the aggregator only ever appends them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class InteractionType(str, Enum):
    VIEW = "view"
    CLICK = "click"
    SELECT = "select"
    DESELECT = "deselect"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InteractionEvent(BaseModel):
    """
    A single tracked interaction.

    is_recommended: whether video_id was in the session's recommended set when tracked.
    recommended_videos / selected_videos: snapshots taken at tracking time.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    user_id: str
    video_id: str
    interaction_type: InteractionType
    is_recommended: bool = False
    session_id: str = ""
    timestamp: str = Field(default_factory=utc_now_iso)
    recommended_videos: List[str] = Field(default_factory=list)
    selected_videos: List[str] = Field(default_factory=list)

    def to_record(self) -> dict:
        """Flat row for the persistence boundary (snapshots are not stored)."""
        return {
            "user_id": self.user_id,
            "video_id": self.video_id,
            "interaction_type": self.interaction_type,
            "is_recommended": self.is_recommended,
            "session_id": self.session_id,
            "timestamp": self.timestamp,
        }
