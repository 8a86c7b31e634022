"""
HTTP client for the external recommendation microservice.

POST {base_url}/run-workflow/run-workflow-video-ids  {user_id, top_k}
  -> {"user_id": ..., "video_ids": [...], "total_count": ...}

Every failure (connection, timeout, non-2xx, bad JSON, wrong shape) surfaces as
RecommendationServiceError so the assembler can degrade to filler videos.
"""

import logging
from typing import List

import requests

from recommender.errors import RecommendationServiceError

logger = logging.getLogger(__name__)

RECOMMEND_PATH = "/run-workflow/run-workflow-video-ids"


class HttpRecommendationClient:
    """Recommendation source backed by the workflow microservice."""

    def __init__(self, base_url: str, timeout: float = 5.0, session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = session or requests

    def recommend(self, user_id: str, top_k: int) -> List[str]:
        url = f"{self.base_url}{RECOMMEND_PATH}"
        logger.info("[recommendations] calling recommendation service at %s (user=%r, top_k=%d)", url, user_id, top_k)
        try:
            response = self._http.post(
                url,
                json={"user_id": user_id, "top_k": top_k},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout:
            raise RecommendationServiceError(f"Recommendation service timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            raise RecommendationServiceError(f"Recommendation service request failed: {e}") from e
        except ValueError as e:
            raise RecommendationServiceError(f"Recommendation service returned invalid JSON: {e}") from e

        video_ids = data.get("video_ids") if isinstance(data, dict) else None
        if not isinstance(video_ids, list):
            raise RecommendationServiceError("Recommendation service response has no video_ids list")
        return [vid for vid in video_ids if isinstance(vid, str)]

    def is_available(self) -> bool:
        """Best-effort reachability probe for the health endpoint."""
        try:
            self._http.get(self.base_url, timeout=min(self.timeout, 2.0))
            return True
        except requests.exceptions.RequestException:
            return False
