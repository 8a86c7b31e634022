"""
Firestore interaction store: analytics rows in top-level collections
video_interactions, recommendation_sessions and submissions.

Used when DATA_SOURCE=firebase. Shares the Firebase app with the Firestore
catalog and user store (same credentials_path and project_id).
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from recommender.errors import PersistenceError
from recommender.models import InteractionEvent, SessionSummary

from .firebase import get_firestore_client
from .interaction_store import (
    INTERACTIONS_TABLE,
    SESSIONS_TABLE,
    SUBMISSIONS_TABLE,
    interaction_row,
    session_row,
    submission_row,
    summarize_by_day,
)

logger = logging.getLogger(__name__)

# Firestore batches accept at most 500 writes
BATCH_LIMIT = 500
# Upper bound on rows read for the daily summary
SUMMARY_READ_LIMIT = 2000


class FirestoreInteractionStore:
    """Interaction store backed by Firestore. Document id = row id."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        self._db = get_firestore_client(project_id, credentials_path)

    def _write(self, table: str, rows: List[Dict]) -> None:
        coll = self._db.collection(table)
        try:
            for i in range(0, len(rows), BATCH_LIMIT):
                batch = self._db.batch()
                for row in rows[i:i + BATCH_LIMIT]:
                    batch.set(coll.document(row["id"]), row)
                batch.commit()
        except Exception as e:
            raise PersistenceError(f"Failed to insert into {table}: {e}") from e

    def _query(self, table: str, filters: Dict[str, Optional[str]], limit: Optional[int]) -> List[Dict]:
        from firebase_admin import firestore

        query = self._db.collection(table)
        for field, value in filters.items():
            if value:
                query = query.where(field, "==", value)
        query = query.order_by("timestamp", direction=firestore.Query.DESCENDING)
        if limit is not None:
            query = query.limit(limit)
        try:
            return [doc.to_dict() for doc in query.stream()]
        except Exception as e:
            raise PersistenceError(f"Failed to fetch {table}: {e}") from e

    def save_interactions(self, user_id: str, events: Sequence[InteractionEvent]) -> None:
        rows = [interaction_row(e) for e in events]
        if rows:
            self._write(INTERACTIONS_TABLE, rows)
            logger.info("[analytics] added %d interactions to Firestore for user=%r", len(rows), user_id)

    def save_session(self, summary: SessionSummary) -> None:
        self._write(SESSIONS_TABLE, [session_row(summary)])
        logger.info("[analytics] added session summary %s to Firestore", summary.session_id)

    def save_submission(self, user_id: str, selected_videos: List[str], email: Optional[str] = None) -> Dict:
        row = submission_row(user_id, selected_videos, email)
        self._write(SUBMISSIONS_TABLE, [row])
        return row

    def list_interactions(
        self,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Dict]:
        return self._query(INTERACTIONS_TABLE, {"user_id": user_id, "session_id": session_id}, limit)

    def list_sessions(self, user_id: Optional[str] = None, limit: int = 100) -> List[Dict]:
        return self._query(SESSIONS_TABLE, {"user_id": user_id}, limit)

    def daily_summary(self, user_id: str, limit: int = 100) -> List[Dict]:
        if not user_id:
            return []
        sessions = self.list_sessions(user_id, limit=SUMMARY_READ_LIMIT)
        interactions = self.list_interactions(user_id, limit=SUMMARY_READ_LIMIT)
        return summarize_by_day(sessions, interactions)[:limit]

    def counts(self) -> Dict[str, int]:
        out = {}
        for table in (INTERACTIONS_TABLE, SESSIONS_TABLE, SUBMISSIONS_TABLE):
            try:
                out[table] = int(self._db.collection(table).count().get()[0][0].value)
            except Exception as e:
                raise PersistenceError(f"Failed to count {table}: {e}") from e
        return out
