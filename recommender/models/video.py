"""
Video models: catalog records and the assembled recommendation result.

Built from catalog/API dicts via Video.from_row(d) (accepts the catalog's
video_id/thumbnail_url column names as well as the public id/thumbnail_url shape).
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

FALLBACK_THUMBNAIL = "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg"


class Video(BaseModel):
    """A display-ready video card. Read from the catalog, never mutated by the core."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    thumbnail_url: str = FALLBACK_THUMBNAIL
    description: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Video":
        """
        Normalize a catalog row.

        Empty title becomes "Video <id>", empty thumbnail the fallback thumbnail,
        empty description falls back to the title.
        """
        video_id = str(row.get("video_id") or row.get("id") or "")
        title = row.get("title") or f"Video {video_id}"
        thumbnail = row.get("thumbnail_url") or row.get("thumbnail") or FALLBACK_THUMBNAIL
        description = row.get("description") or title
        return cls(id=video_id, title=title, thumbnail_url=thumbnail, description=description)

    @classmethod
    def placeholder(cls, video_id: str) -> "Video":
        """Stand-in for a recommended id the catalog does not know."""
        return cls(
            id=video_id,
            title=f"Recommended Video {video_id}",
            thumbnail_url=FALLBACK_THUMBNAIL,
            description=f"Recommended video content for {video_id}",
        )


class SourceCounts(BaseModel):
    """Provenance of the entries in a RecommendationResult."""

    from_service: int = 0
    from_catalog_random: int = 0
    from_fallback: int = 0


class RecommendationResult(BaseModel):
    """
    Fixed-size, de-duplicated recommendation list.

    The first recommended_count videos came from the recommendation service;
    everything after them is filler and never counts as recommended.
    """

    user_id: str
    videos: List[Video] = Field(default_factory=list)
    recommended_count: int = 0
    source_counts: SourceCounts = Field(default_factory=SourceCounts)

    @property
    def recommended_videos(self) -> List[Video]:
        return self.videos[: self.recommended_count]

    @property
    def filler_videos(self) -> List[Video]:
        return self.videos[self.recommended_count :]

    @property
    def recommended_ids(self) -> List[str]:
        return [v.id for v in self.recommended_videos]
