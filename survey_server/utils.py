"""Pure helpers: video card formatting and CSV export."""

import csv
import io
import json
from typing import Any, Dict, List

from recommender.models import RecommendationResult, Video

from .models import VideoCard


def to_video_card(video: Video, position: int, is_recommended: bool = False) -> VideoCard:
    """Convert a catalog Video to the card shape the survey UI renders."""
    return VideoCard(
        id=video.id,
        title=video.title,
        thumbnail=video.thumbnail_url,
        description=video.description,
        is_recommended=is_recommended,
        position=position,
    )


def result_cards(result: RecommendationResult) -> List[VideoCard]:
    return [
        to_video_card(video, i + 1, is_recommended=i < result.recommended_count)
        for i, video in enumerate(result.videos)
    ]


def _csv_value(value: Any) -> str:
    """Nested lists/dicts and null are JSON-encoded; booleans are lowercase like JSON."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None or isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def rows_to_csv(rows: List[Dict[str, Any]]) -> str:
    """
    Flatten rows to CSV text.

    The header comes from the first row's keys; each row is written in that key
    order (missing keys become null).
    """
    if not rows:
        return ""
    headers = list(rows[0].keys())
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_csv_value(row.get(h)) for h in headers])
    return buf.getvalue()


def csv_filename(file_type: str) -> str:
    return f"{file_type}_analytics.csv"
