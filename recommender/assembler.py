"""
Recommendation assembly

Builds the fixed-size video page shown to a survey participant:
service-recommended videos first, then random catalog filler, then static
fallback videos, with no id appearing twice.

Upstream failures never escape: a broken recommendation service or catalog only
means fewer recommended entries (or a shorter page when every source runs dry).

The public entry point is RecommendationAssembler.assemble.
"""

import logging
from typing import Iterable, List, Optional, Protocol, Sequence, Set

from .errors import CatalogError, RecommendationServiceError
from .fallback import FALLBACK_VIDEOS
from .models import RecommendationResult, SourceCounts, Video

logger = logging.getLogger(__name__)

DEFAULT_TARGET_TOTAL = 8
DEFAULT_RECOMMENDED_TARGET = 4


class RecommendationSource(Protocol):
    """Ranked video ids for a user (the external recommendation service)."""

    def recommend(self, user_id: str, top_k: int) -> List[str]:
        """Return up to top_k video ids. Raises RecommendationServiceError on failure."""
        ...


class VideoSource(Protocol):
    """Catalog lookups needed for assembly."""

    def get_videos(self, video_ids: Sequence[str]) -> List[Video]:
        """Return catalog rows for the ids that exist (any order). Raises CatalogError."""
        ...

    def random_videos(self, exclude_ids: Set[str], limit: int) -> List[Video]:
        """Return up to limit random videos not in exclude_ids. Raises CatalogError."""
        ...


def _clean_ids(video_ids: Iterable, limit: int) -> List[str]:
    """Drop non-string/empty ids and duplicates (first occurrence wins), cap at limit."""
    out: List[str] = []
    seen: Set[str] = set()
    for vid in video_ids or []:
        if not isinstance(vid, str) or not vid.strip() or vid in seen:
            continue
        seen.add(vid)
        out.append(vid)
        if len(out) >= limit:
            break
    return out


def _take_unique(candidates: Iterable[Video], excluded: Set[str], limit: int) -> List[Video]:
    """Take up to limit videos whose ids are not excluded, adding each taken id to excluded."""
    taken: List[Video] = []
    if limit <= 0:
        return taken
    for video in candidates:
        if not video.id or video.id in excluded:
            continue
        excluded.add(video.id)
        taken.append(video)
        if len(taken) >= limit:
            break
    return taken


def _validate_targets(user_id: str, target_total: int, recommended_target: int) -> None:
    if not user_id or not str(user_id).strip():
        raise ValueError("user_id is required")
    if target_total < 0:
        raise ValueError(f"target_total must be >= 0, got {target_total}")
    if recommended_target < 0 or recommended_target > target_total:
        raise ValueError(
            f"recommended_target must be between 0 and target_total ({target_total}), got {recommended_target}"
        )


class RecommendationAssembler:
    """Merges service recommendations, random catalog videos and fallbacks into one page."""

    def __init__(
        self,
        service: RecommendationSource,
        catalog: VideoSource,
        fallback_videos: Optional[Sequence[Video]] = None,
    ):
        self._service = service
        self._catalog = catalog
        self._fallback_videos = list(FALLBACK_VIDEOS if fallback_videos is None else fallback_videos)

    def _fetch_recommended_ids(self, user_id: str, top_k: int) -> List[str]:
        if top_k <= 0:
            return []
        try:
            ids = self._service.recommend(user_id, top_k)
        except RecommendationServiceError as e:
            logger.warning("[recommendations] service unavailable for user=%r: %s", user_id, e)
            return []
        return _clean_ids(ids, top_k)

    def _resolve(self, video_ids: List[str]) -> List[Video]:
        """Resolve ids to catalog rows in service order; unknown ids get a placeholder."""
        if not video_ids:
            return []
        try:
            rows = self._catalog.get_videos(video_ids)
        except CatalogError as e:
            logger.warning("[recommendations] catalog lookup failed, dropping %d service ids: %s", len(video_ids), e)
            return []
        by_id = {v.id: v for v in rows}
        resolved = []
        for vid in video_ids:
            video = by_id.get(vid)
            if video is None:
                logger.warning("[recommendations] video details not found for id=%s", vid)
                video = Video.placeholder(vid)
            resolved.append(video)
        return resolved

    def _random_filler(self, excluded: Set[str], needed: int) -> List[Video]:
        if needed <= 0:
            return []
        try:
            candidates = self._catalog.random_videos(set(excluded), needed)
        except CatalogError as e:
            logger.warning("[recommendations] random catalog sample failed: %s", e)
            return []
        return _take_unique(candidates, excluded, needed)

    def assemble(
        self,
        user_id: str,
        target_total: int = DEFAULT_TARGET_TOTAL,
        recommended_target: int = DEFAULT_RECOMMENDED_TARGET,
    ) -> RecommendationResult:
        """
        Assemble up to target_total unique videos for user_id.

        Order: service recommendations (at most recommended_target), random catalog
        videos, static fallbacks. recommended_count counts only service entries.
        Raises ValueError for invalid arguments; never raises for upstream failures.
        """
        _validate_targets(user_id, target_total, recommended_target)

        recommended = self._resolve(self._fetch_recommended_ids(user_id, recommended_target))
        recommended_count = len(recommended)

        excluded = {v.id for v in recommended}
        needed = target_total - recommended_count
        from_catalog = self._random_filler(excluded, needed)
        from_fallback = _take_unique(self._fallback_videos, excluded, needed - len(from_catalog))

        videos = (recommended + from_catalog + from_fallback)[:target_total]
        if len(videos) < target_total:
            logger.warning(
                "[recommendations] sources exhausted for user=%r: %d of %d videos",
                user_id, len(videos), target_total,
            )
        logger.info(
            "[recommendations] user=%r total=%d service=%d catalog=%d fallback=%d",
            user_id, len(videos), recommended_count, len(from_catalog), len(from_fallback),
        )
        return RecommendationResult(
            user_id=user_id,
            videos=videos,
            recommended_count=recommended_count,
            source_counts=SourceCounts(
                from_service=recommended_count,
                from_catalog_random=len(from_catalog),
                from_fallback=len(from_fallback),
            ),
        )
