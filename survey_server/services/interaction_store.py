"""
Interaction Store abstraction.

The analytics persistence boundary: interaction events, session summaries and
survey submissions, plus read-back queries for the analytics endpoints.
Implementations: in-memory (tests/dev), flat CSV files (local), Firestore
(production, see firestore_interaction_store). Swap via DATA_SOURCE.
"""

import csv
import json
import logging
import threading
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Union

from recommender.errors import PersistenceError
from recommender.models import InteractionEvent, SessionSummary
from recommender.models.interaction import utc_now_iso

logger = logging.getLogger(__name__)

INTERACTIONS_TABLE = "video_interactions"
SESSIONS_TABLE = "recommendation_sessions"
SUBMISSIONS_TABLE = "submissions"

INTERACTION_FIELDS = ["id", "user_id", "video_id", "interaction_type", "is_recommended", "session_id", "timestamp"]
SESSION_FIELDS = [
    "id",
    "user_id",
    "session_id",
    "recommended_videos",
    "selected_videos",
    "total_recommended",
    "selected_recommended",
    "recommendation_accuracy",
    "timestamp",
]
SUBMISSION_FIELDS = ["id", "user_id", "selected_videos", "email", "timestamp"]


class InteractionStore(Protocol):
    """Protocol for analytics persistence. Implement for in-memory, CSV files or Firestore."""

    def save_interactions(self, user_id: str, events: Sequence[InteractionEvent]) -> None:
        """Persist interaction events. Raises PersistenceError."""
        ...

    def save_session(self, summary: SessionSummary) -> None:
        """Persist one session summary. Raises PersistenceError."""
        ...

    def save_submission(self, user_id: str, selected_videos: List[str], email: Optional[str] = None) -> Dict:
        """Persist a final survey submission and return the stored row."""
        ...

    def list_interactions(
        self,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Dict]:
        """Interaction rows, newest first."""
        ...

    def list_sessions(self, user_id: Optional[str] = None, limit: int = 100) -> List[Dict]:
        """Session summary rows, newest first."""
        ...

    def daily_summary(self, user_id: str, limit: int = 100) -> List[Dict]:
        """Per-day aggregates for one user, newest day first. Empty for a missing user_id."""
        ...

    def counts(self) -> Dict[str, int]:
        """Record counts per table."""
        ...


def interaction_row(event: InteractionEvent) -> Dict:
    return {"id": uuid.uuid4().hex, **event.to_record()}


def session_row(summary: SessionSummary) -> Dict:
    return {"id": uuid.uuid4().hex, **summary.to_record()}


def submission_row(user_id: str, selected_videos: List[str], email: Optional[str]) -> Dict:
    return {
        "id": uuid.uuid4().hex,
        "user_id": user_id,
        "selected_videos": list(selected_videos),
        "email": email or "",
        "timestamp": utc_now_iso(),
    }


def _newest_first(rows: List[Dict], limit: Optional[int]) -> List[Dict]:
    rows = sorted(rows, key=lambda r: r.get("timestamp") or "", reverse=True)
    return rows if limit is None else rows[:limit]


def summarize_by_day(sessions: List[Dict], interactions: List[Dict]) -> List[Dict]:
    """
    Aggregate one user's rows per calendar day (UTC date prefix of the timestamp):
    session count, interaction count, recommended-interaction count, average accuracy.
    """
    days: Dict[str, Dict] = defaultdict(
        lambda: {"sessions": 0, "interactions": 0, "recommended_interactions": 0, "_accuracy_sum": 0.0}
    )
    for s in sessions:
        day = days[(s.get("timestamp") or "")[:10]]
        day["sessions"] += 1
        day["_accuracy_sum"] += float(s.get("recommendation_accuracy") or 0)
    for i in interactions:
        day = days[(i.get("timestamp") or "")[:10]]
        day["interactions"] += 1
        if i.get("is_recommended"):
            day["recommended_interactions"] += 1
    out = []
    for date, d in days.items():
        accuracy_sum = d.pop("_accuracy_sum")
        d["avg_accuracy"] = round(accuracy_sum / d["sessions"], 2) if d["sessions"] else 0.0
        out.append({"date": date, **d})
    out.sort(key=lambda r: r["date"], reverse=True)
    return out


class InMemoryInteractionStore:
    """
    Store that keeps rows in process memory (no persistence across restarts).
    Used for local testing and DATA_SOURCE=memory.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tables: Dict[str, List[Dict]] = {
            INTERACTIONS_TABLE: [],
            SESSIONS_TABLE: [],
            SUBMISSIONS_TABLE: [],
        }

    def _append(self, table: str, rows: List[Dict]) -> None:
        with self._lock:
            self._tables[table].extend(rows)

    def _rows(self, table: str) -> List[Dict]:
        with self._lock:
            return [dict(r) for r in self._tables[table]]

    def save_interactions(self, user_id: str, events: Sequence[InteractionEvent]) -> None:
        rows = [interaction_row(e) for e in events]
        if rows:
            self._append(INTERACTIONS_TABLE, rows)
            logger.info("[analytics] added %d interactions for user=%r", len(rows), user_id)

    def save_session(self, summary: SessionSummary) -> None:
        self._append(SESSIONS_TABLE, [session_row(summary)])
        logger.info("[analytics] added session summary %s", summary.session_id)

    def save_submission(self, user_id: str, selected_videos: List[str], email: Optional[str] = None) -> Dict:
        row = submission_row(user_id, selected_videos, email)
        self._append(SUBMISSIONS_TABLE, [row])
        return row

    def list_interactions(
        self,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Dict]:
        rows = self._rows(INTERACTIONS_TABLE)
        if user_id:
            rows = [r for r in rows if r.get("user_id") == user_id]
        if session_id:
            rows = [r for r in rows if r.get("session_id") == session_id]
        return _newest_first(rows, limit)

    def list_sessions(self, user_id: Optional[str] = None, limit: int = 100) -> List[Dict]:
        rows = self._rows(SESSIONS_TABLE)
        if user_id:
            rows = [r for r in rows if r.get("user_id") == user_id]
        return _newest_first(rows, limit)

    def daily_summary(self, user_id: str, limit: int = 100) -> List[Dict]:
        if not user_id:
            return []
        sessions = self.list_sessions(user_id, limit=None)
        interactions = self.list_interactions(user_id, limit=None)
        return summarize_by_day(sessions, interactions)[:limit]

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return {table: len(rows) for table, rows in self._tables.items()}


def _decode_csv_row(table: str, row: Dict[str, str]) -> Dict:
    """Restore the types flattened by the CSV writer."""
    out: Dict = dict(row)
    if table == INTERACTIONS_TABLE:
        out["is_recommended"] = row.get("is_recommended") == "true"
    elif table == SESSIONS_TABLE:
        for key in ("recommended_videos", "selected_videos"):
            out[key] = json.loads(row.get(key) or "[]")
        out["total_recommended"] = int(row.get("total_recommended") or 0)
        out["selected_recommended"] = int(row.get("selected_recommended") or 0)
        out["recommendation_accuracy"] = float(row.get("recommendation_accuracy") or 0)
    elif table == SUBMISSIONS_TABLE:
        out["selected_videos"] = json.loads(row.get("selected_videos") or "[]")
    return out


def _encode_csv_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return value


class CsvInteractionStore(InMemoryInteractionStore):
    """
    Store backed by one flat CSV file per table under data_dir
    (video_interactions.csv, recommendation_sessions.csv, submissions.csv).
    Rows are appended on write and re-read on every query.
    """

    FIELDS = {
        INTERACTIONS_TABLE: INTERACTION_FIELDS,
        SESSIONS_TABLE: SESSION_FIELDS,
        SUBMISSIONS_TABLE: SUBMISSION_FIELDS,
    }

    def __init__(self, data_dir: Union[Path, str]):
        super().__init__()
        self._dir = Path(data_dir)
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, table: str) -> Path:
        return self._dir / f"{table}.csv"

    def _append(self, table: str, rows: List[Dict]) -> None:
        path = self._path(table)
        fields = self.FIELDS[table]
        try:
            with self._lock:
                is_new = not path.exists() or path.stat().st_size == 0
                with open(path, "a", newline="") as f:
                    writer = csv.DictWriter(f, fieldnames=fields, extrasaction="ignore")
                    if is_new:
                        writer.writeheader()
                    for row in rows:
                        writer.writerow({k: _encode_csv_value(row.get(k)) for k in fields})
        except OSError as e:
            raise PersistenceError(f"Failed to write {path.name}: {e}") from e

    def _rows(self, table: str) -> List[Dict]:
        path = self._path(table)
        if not path.exists():
            return []
        try:
            with self._lock:
                with open(path, newline="") as f:
                    return [_decode_csv_row(table, row) for row in csv.DictReader(f)]
        except (OSError, csv.Error, ValueError) as e:
            raise PersistenceError(f"Failed to read {path.name}: {e}") from e

    def counts(self) -> Dict[str, int]:
        return {table: len(self._rows(table)) for table in self.FIELDS}
