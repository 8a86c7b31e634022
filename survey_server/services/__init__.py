"""Backing services: recommendation client, catalogs, analytics and user stores."""

from .firestore_interaction_store import FirestoreInteractionStore
from .interaction_store import (
    CsvInteractionStore,
    InMemoryInteractionStore,
    InteractionStore,
    summarize_by_day,
)
from .recommendation_client import HttpRecommendationClient
from .user_store import DEFAULT_PREFERENCES, FirestoreUserStore, JsonUserStore, UserStore
from .video_catalog import FirestoreVideoCatalog, InMemoryVideoCatalog, JsonVideoCatalog, VideoCatalog

__all__ = [
    "CsvInteractionStore",
    "DEFAULT_PREFERENCES",
    "FirestoreInteractionStore",
    "FirestoreUserStore",
    "FirestoreVideoCatalog",
    "HttpRecommendationClient",
    "InMemoryInteractionStore",
    "InMemoryVideoCatalog",
    "InteractionStore",
    "JsonUserStore",
    "JsonVideoCatalog",
    "UserStore",
    "VideoCatalog",
    "summarize_by_day",
]
