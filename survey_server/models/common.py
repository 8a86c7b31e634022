"""Common Pydantic models shared across routes."""

from typing import Optional

from pydantic import BaseModel


class VideoCard(BaseModel):
    id: str
    title: str
    thumbnail: str
    description: str
    is_recommended: bool = False
    position: Optional[int] = None
