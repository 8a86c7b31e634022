"""
User store: survey participants and their topic preferences.
Persistence to a JSON file or Firestore depending on DATA_SOURCE.

Identity comes from the authentication provider; this store only keeps the
participant record {user_id, email, created_at, preferences}.
Preferences are {"topic": "<comma-joined category slugs>"}.
"""

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from recommender.errors import PersistenceError
from recommender.models.interaction import utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = {"topic": "Technology, Science, Innovation"}


class UserStore(Protocol):
    """Protocol for participant persistence. Implement for JSON file or Firestore."""

    def get_by_id(self, user_id: str) -> Optional[Dict]:
        """Return user dict if exists, else None."""
        ...

    def ensure_user(self, user_id: str, email: Optional[str] = None, preferences: Optional[Dict] = None) -> Dict:
        """Return the existing user or create one with default preferences."""
        ...

    def get_preferences(self, user_id: str) -> Optional[Dict]:
        """Return the user's preferences, or None if the user does not exist."""
        ...

    def update_preferences(self, user_id: str, preferences: Dict) -> Optional[Dict]:
        """Replace preferences for an existing user. Returns the updated user or None if not found."""
        ...


def _new_user(user_id: str, email: Optional[str], preferences: Optional[Dict]) -> Dict:
    return {
        "user_id": user_id,
        "email": email or "",
        "created_at": utc_now_iso(),
        "preferences": dict(preferences or DEFAULT_PREFERENCES),
    }


class JsonUserStore:
    """User store backed by a JSON file (e.g. data/users.json). path=None keeps users in memory only."""

    def __init__(self, path: Optional[Union[Path, str]] = None):
        self._path = Path(path) if path else None
        self._lock = threading.Lock()
        self._users: Dict[str, Dict] = {}
        if self._path:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("[users] could not read %s, starting empty: %s", self._path, e)
            return
        users = data.get("users", data) if isinstance(data, dict) else data
        for u in users if isinstance(users, list) else []:
            uid = u.get("user_id")
            if uid:
                self._users[uid] = u

    def _save(self, users: Dict[str, Dict]) -> None:
        if not self._path:
            return
        try:
            with open(self._path, "w") as f:
                json.dump({"users": list(users.values())}, f, indent=2)
        except IOError as e:
            raise PersistenceError(f"Failed to write {self._path}: {e}") from e

    def get_by_id(self, user_id: str) -> Optional[Dict]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    def ensure_user(self, user_id: str, email: Optional[str] = None, preferences: Optional[Dict] = None) -> Dict:
        with self._lock:
            existing = self._users.get(user_id)
            if existing:
                return copy.deepcopy(existing)
            user = _new_user(user_id, email, preferences)
            self._commit({**self._users, user_id: user})
        logger.info("[users] created user record %s", user_id)
        return copy.deepcopy(user)

    def get_preferences(self, user_id: str) -> Optional[Dict]:
        user = self.get_by_id(user_id)
        return dict(user.get("preferences") or {}) if user else None

    def update_preferences(self, user_id: str, preferences: Dict) -> Optional[Dict]:
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            updated = {**user, "preferences": dict(preferences)}
            self._commit({**self._users, user_id: updated})
        return copy.deepcopy(updated)

    def _commit(self, users: Dict[str, Dict]) -> None:
        """Write the new user map, then swap it in. A failed write leaves memory unchanged."""
        self._save(users)
        self._users = users


class FirestoreUserStore:
    """User store backed by the Firestore 'users' collection. Document ID = user_id."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        from .firebase import get_firestore_client

        self._db = get_firestore_client(project_id, credentials_path)
        self._coll = self._db.collection("users")

    def _doc_to_user(self, doc) -> Dict:
        d = doc.to_dict()
        d["user_id"] = doc.id
        prefs = d.get("preferences")
        if isinstance(prefs, str):
            try:
                d["preferences"] = json.loads(prefs)
            except json.JSONDecodeError:
                d["preferences"] = {"topic": prefs}
        return d

    def get_by_id(self, user_id: str) -> Optional[Dict]:
        try:
            doc = self._coll.document(user_id).get()
        except Exception as e:
            raise PersistenceError(f"Failed to read user {user_id}: {e}") from e
        if doc.exists:
            return self._doc_to_user(doc)
        return None

    def ensure_user(self, user_id: str, email: Optional[str] = None, preferences: Optional[Dict] = None) -> Dict:
        existing = self.get_by_id(user_id)
        if existing:
            return existing
        user = _new_user(user_id, email, preferences)
        try:
            self._coll.document(user_id).set(user)
        except Exception as e:
            raise PersistenceError(f"Failed to create user {user_id}: {e}") from e
        logger.info("[users] created Firestore user record %s", user_id)
        return user

    def get_preferences(self, user_id: str) -> Optional[Dict]:
        user = self.get_by_id(user_id)
        return dict(user.get("preferences") or {}) if user else None

    def update_preferences(self, user_id: str, preferences: Dict) -> Optional[Dict]:
        doc_ref = self._coll.document(user_id)
        try:
            if not doc_ref.get().exists:
                return None
            doc_ref.update({"preferences": dict(preferences)})
            return self._doc_to_user(doc_ref.get())
        except Exception as e:
            raise PersistenceError(f"Failed to update preferences for {user_id}: {e}") from e
