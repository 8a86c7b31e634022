"""User store and category helper tests."""

import json

import pytest

from recommender.errors import PersistenceError
from survey_server.categories import CATEGORIES, categories_to_topic, normalize_category, topic_to_categories
from survey_server.services import DEFAULT_PREFERENCES, JsonUserStore


class TestJsonUserStore:
    def test_ensure_user_creates_with_default_preferences(self):
        store = JsonUserStore()
        user = store.ensure_user("u1", email="a@example.com")
        assert user["preferences"] == DEFAULT_PREFERENCES
        assert user["email"] == "a@example.com"
        assert store.ensure_user("u1", email="other@example.com")["email"] == "a@example.com"

    def test_update_preferences_requires_existing_user(self):
        store = JsonUserStore()
        assert store.update_preferences("ghost", {"topic": "x"}) is None
        assert store.get_preferences("ghost") is None

    def test_persists_to_file(self, tmp_path):
        path = tmp_path / "users.json"
        store = JsonUserStore(path)
        store.ensure_user("u1")
        store.update_preferences("u1", {"topic": "deep_learning, robotics"})

        saved = json.loads(path.read_text())
        assert saved["users"][0]["user_id"] == "u1"
        assert JsonUserStore(path).get_preferences("u1") == {"topic": "deep_learning, robotics"}

    def test_failed_create_leaves_store_unchanged(self, tmp_path):
        path = tmp_path / "users.json"
        store = JsonUserStore(path)
        path.mkdir()
        with pytest.raises(PersistenceError):
            store.ensure_user("u1")
        assert store.get_by_id("u1") is None

    def test_failed_update_keeps_previous_preferences(self, tmp_path):
        path = tmp_path / "users.json"
        store = JsonUserStore(path)
        store.ensure_user("u1")
        path.unlink()
        path.mkdir()
        with pytest.raises(PersistenceError):
            store.update_preferences("u1", {"topic": "robotics"})
        assert store.get_preferences("u1") == DEFAULT_PREFERENCES

    def test_returned_records_are_copies(self):
        store = JsonUserStore()
        store.ensure_user("u1")["preferences"]["topic"] = "changed"
        store.get_by_id("u1")["email"] = "changed@example.com"
        user = store.get_by_id("u1")
        assert user["preferences"] == DEFAULT_PREFERENCES
        assert user["email"] == ""


class TestCategories:
    def test_checklist(self):
        assert len(CATEGORIES) == 47
        assert len(set(CATEGORIES)) == 47
        assert "machine_learning" in CATEGORIES

    def test_normalize_custom_category(self):
        assert normalize_category("  Quantum   Computing ") == "quantum_computing"

    def test_topic_round_trip(self):
        topic = categories_to_topic(["deep_learning", "Graph Neural Networks", "  "])
        assert topic == "deep_learning, graph_neural_networks"
        assert topic_to_categories(topic) == ["deep_learning", "graph_neural_networks"]
        assert topic_to_categories(DEFAULT_PREFERENCES["topic"]) == ["Technology", "Science", "Innovation"]
