"""Application state: backends, assembler, aggregator and live session contexts."""

import logging
import threading
from typing import Any, Dict, Optional

from recommender import InteractionAggregator, RecommendationAssembler
from recommender.models import SessionContext

from .config import ServerConfig, get_config
from .services import (
    CsvInteractionStore,
    FirestoreInteractionStore,
    FirestoreUserStore,
    FirestoreVideoCatalog,
    HttpRecommendationClient,
    InMemoryInteractionStore,
    JsonUserStore,
    JsonVideoCatalog,
)

logger = logging.getLogger(__name__)

# Upper bound on live session contexts kept in memory
MAX_SESSIONS = 1000


class AppState:
    """Global application state."""

    def __init__(self, config: ServerConfig):
        self.config = config

        self.recommendation_client = HttpRecommendationClient(
            config.recommender_url,
            timeout=config.recommender_timeout_seconds,
        )
        self.catalog, self.interaction_store, self.user_store = self._create_backends(config)
        logger.info(
            "[startup] Backends: catalog=%s interactions=%s users=%s",
            type(self.catalog).__name__,
            type(self.interaction_store).__name__,
            type(self.user_store).__name__,
        )

        self.assembler = RecommendationAssembler(self.recommendation_client, self.catalog)
        self.aggregator = InteractionAggregator(self.interaction_store)

        # Session storage
        self.sessions: Dict[str, SessionContext] = {}
        self._sessions_lock = threading.Lock()

    def _create_backends(self, config: ServerConfig):
        if config.data_source == "firebase":
            try:
                return self._create_firestore_backends(config)
            except Exception as e:
                logger.warning("[startup] Firestore init failed: %s, using CSV/JSON backends", e)
            return self._create_file_backends(config)
        if config.data_source == "memory":
            return (
                JsonVideoCatalog(config.videos_json_path),
                InMemoryInteractionStore(),
                JsonUserStore(None),
            )
        return self._create_file_backends(config)

    def _create_firestore_backends(self, config: ServerConfig):
        if not config.firebase_credentials_path or not config.firebase_credentials_path.is_file():
            raise FileNotFoundError(
                f"credentials path not found or not a file: {config.firebase_credentials_path}"
            )
        kwargs = {
            "project_id": config.firebase_project_id,
            "credentials_path": config.firebase_credentials_path,
        }
        return (
            FirestoreVideoCatalog(**kwargs),
            FirestoreInteractionStore(**kwargs),
            FirestoreUserStore(**kwargs),
        )

    def _create_file_backends(self, config: ServerConfig):
        return (
            JsonVideoCatalog(config.videos_json_path),
            CsvInteractionStore(config.data_dir),
            JsonUserStore(config.data_dir / "users.json"),
        )

    def get_session(self, session_id: str) -> Optional[SessionContext]:
        return self.sessions.get(session_id)

    def put_session(self, ctx: SessionContext) -> SessionContext:
        """
        Store ctx as the user's live session. A user keeps one live session: opening
        a new cycle drops the previous one. Beyond MAX_SESSIONS the least recently
        updated session is evicted.
        """
        with self._sessions_lock:
            if ctx.user_id:
                stale = [
                    sid for sid, other in self.sessions.items()
                    if other.user_id == ctx.user_id and sid != ctx.session_id
                ]
                for sid in stale:
                    del self.sessions[sid]
            self.sessions.pop(ctx.session_id, None)
            self.sessions[ctx.session_id] = ctx
            while len(self.sessions) > MAX_SESSIONS:
                oldest = next(iter(self.sessions))
                del self.sessions[oldest]
                logger.info("[analytics] evicted session %s (limit %d)", oldest, MAX_SESSIONS)
        return ctx

    def describe(self) -> Dict[str, Any]:
        """Backend summary for the root and health endpoints."""
        return {
            "data_source": self.config.data_source,
            "catalog": type(self.catalog).__name__,
            "interaction_store": type(self.interaction_store).__name__,
            "user_store": type(self.user_store).__name__,
            "recommender_url": self.config.recommender_url,
            "active_sessions": len(self.sessions),
        }


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Install a prepared state (tests) or clear it so the next get_state() rebuilds."""
    global _state
    _state = state
