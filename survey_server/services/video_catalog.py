"""
Video Catalog abstraction.

Supplies video display metadata (title, thumbnail, description) by id and random
samples used as filler. Implementations: in-memory list, JSON file (local),
Firestore `videos` collection (cloud). Swap via DATA_SOURCE.
"""

import json
import logging
import random
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set, Union

from recommender.errors import CatalogError
from recommender.models import Video

logger = logging.getLogger(__name__)

# Firestore "in" filters accept at most 30 values
FIRESTORE_IN_LIMIT = 30
# Extra docs fetched per random sample so exclusions still leave enough candidates
RANDOM_OVERFETCH = 5
RANDOM_FETCH_CAP = 200


class VideoCatalog(Protocol):
    """Protocol for catalog access. Implement for JSON file or Firestore."""

    def get_videos(self, video_ids: Sequence[str]) -> List[Video]:
        """Return videos for the ids that exist. Raises CatalogError."""
        ...

    def random_videos(self, exclude_ids: Set[str], limit: int) -> List[Video]:
        """Return up to limit random videos whose ids are not excluded. Raises CatalogError."""
        ...

    def count(self) -> int:
        """Number of videos in the catalog (best-effort; -1 if unknown)."""
        ...


class InMemoryVideoCatalog:
    """Catalog backed by a list of rows. Used by the JSON catalog and by tests."""

    def __init__(self, rows: Iterable[Union[Dict, Video]] = ()):
        self._videos: Dict[str, Video] = {}
        for row in rows:
            video = row if isinstance(row, Video) else Video.from_row(row)
            if video.id:
                self._videos[video.id] = video

    def get_videos(self, video_ids: Sequence[str]) -> List[Video]:
        return [self._videos[vid] for vid in video_ids if vid in self._videos]

    def random_videos(self, exclude_ids: Set[str], limit: int) -> List[Video]:
        if limit <= 0:
            return []
        pool = [v for vid, v in self._videos.items() if vid not in exclude_ids]
        random.shuffle(pool)
        return pool[:limit]

    def count(self) -> int:
        return len(self._videos)


class JsonVideoCatalog(InMemoryVideoCatalog):
    """
    Catalog loaded from a JSON file: a list of
    {video_id, title, thumbnail_url, description?} rows (or {"videos": [...]}).
    A missing or unreadable file yields an empty catalog so fallbacks still work.
    """

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)
        super().__init__(r for r in self._read_rows() if isinstance(r, dict))
        logger.info("[catalog] loaded %d videos from %s", self.count(), self._path)

    def _read_rows(self) -> List[Dict]:
        if not self._path.exists():
            logger.warning("[catalog] %s not found, starting with an empty catalog", self._path)
            return []
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("[catalog] could not read %s, starting with an empty catalog: %s", self._path, e)
            return []
        rows = data.get("videos", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            logger.error("[catalog] %s has no list of videos, starting with an empty catalog", self._path)
            return []
        return rows


class FirestoreVideoCatalog:
    """
    Catalog backed by the Firestore `videos` collection.
    Documents: {video_id, title, thumbnail_url, description?}; doc id may differ from video_id.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
        *,
        collection: str = "videos",
    ):
        from .firebase import get_firestore_client

        self._db = get_firestore_client(project_id, credentials_path)
        self._coll = self._db.collection(collection)

    def _doc_to_video(self, doc) -> Video:
        d = doc.to_dict() or {}
        d.setdefault("video_id", doc.id)
        return Video.from_row(d)

    def get_videos(self, video_ids: Sequence[str]) -> List[Video]:
        ids = [vid for vid in video_ids if vid]
        out: List[Video] = []
        try:
            for i in range(0, len(ids), FIRESTORE_IN_LIMIT):
                chunk = ids[i:i + FIRESTORE_IN_LIMIT]
                for doc in self._coll.where("video_id", "in", chunk).stream():
                    out.append(self._doc_to_video(doc))
        except Exception as e:
            raise CatalogError(f"Firestore video lookup failed: {e}") from e
        return out

    def random_videos(self, exclude_ids: Set[str], limit: int) -> List[Video]:
        """
        Random sample via a random document-id cursor, wrapping to the start of the
        collection when the cursor lands near the end.
        """
        if limit <= 0:
            return []
        fetch = min(limit + len(exclude_ids) + RANDOM_OVERFETCH, RANDOM_FETCH_CAP)
        pivot = self._coll.document(uuid.uuid4().hex[:20])
        try:
            docs = list(self._coll.where("__name__", ">=", pivot).limit(fetch).stream())
            if len(docs) < fetch:
                docs += list(self._coll.where("__name__", "<", pivot).limit(fetch - len(docs)).stream())
        except Exception as e:
            raise CatalogError(f"Firestore random sample failed: {e}") from e
        pool = [v for v in (self._doc_to_video(d) for d in docs) if v.id not in exclude_ids]
        random.shuffle(pool)
        return pool[:limit]

    def count(self) -> int:
        try:
            result = self._coll.count().get()
            return int(result[0][0].value)
        except Exception as e:
            logger.warning("[catalog] Firestore count failed: %s", e)
            return -1
