"""
HTTP API tests

Runs the FastAPI app in-process with TestClient against an in-memory AppState.
The recommendation microservice is stubbed by monkeypatching requests.post.

Run:
    pytest survey_server/tests/test_api_routes.py -v
"""

import json

import pytest
import requests
from fastapi.testclient import TestClient

from recommender.errors import PersistenceError
from survey_server.app import app
from survey_server.config import ServerConfig
from survey_server.services import InMemoryInteractionStore
from survey_server.state import AppState, set_state

RECOMMENDER_URL = "http://recommender.test"
CATALOG = [
    {"video_id": f"v{i}", "title": f"Video title {i}", "thumbnail_url": f"https://img/v{i}.jpg"}
    for i in range(1, 11)
]


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


class FailingStore(InMemoryInteractionStore):
    """Raises on writes to the given tables (all tables when none are given)."""

    def __init__(self, tables=None):
        super().__init__()
        self.failing_tables = tables

    def _append(self, table, rows):
        if self.failing_tables is None or table in self.failing_tables:
            raise PersistenceError("disk full")
        super()._append(table, rows)


def _make_state(tmp_path, catalog_rows):
    videos_path = tmp_path / "videos.json"
    videos_path.write_text(json.dumps(catalog_rows))
    config = ServerConfig(
        recommender_url=RECOMMENDER_URL,
        data_source="memory",
        data_dir=tmp_path,
        videos_json_path=videos_path,
    )
    return AppState(config)


@pytest.fixture
def service_ids(monkeypatch):
    """Ids the stubbed recommendation service returns; set to None to make it fail."""
    box = {"ids": ["v1", "v2"]}

    def fake_post(url, json=None, timeout=None):
        if box["ids"] is None:
            raise requests.exceptions.ConnectionError("connection refused")
        return FakeResponse({"user_id": json["user_id"], "video_ids": box["ids"], "total_count": len(box["ids"])})

    monkeypatch.setattr(requests, "post", fake_post)
    monkeypatch.setattr(requests, "get", lambda url, timeout=None: FakeResponse({}))
    return box


@pytest.fixture
def state(tmp_path, service_ids):
    s = _make_state(tmp_path, CATALOG)
    set_state(s)
    yield s
    set_state(None)


@pytest.fixture
def client(state):
    return TestClient(app)


class TestRoot:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "ok"
        assert body["backends"]["data_source"] == "memory"

    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert body["recommendation_service"]["available"] is True
        assert body["catalog_videos"] == 10


class TestRecommendations:
    def test_end_to_end_page(self, client, state):
        res = client.post("/api/recommendations", json={"user_id": "u1", "top_k": 4})
        assert res.status_code == 200
        body = res.json()

        ids = [v["id"] for v in body["videos"]]
        assert body["count"] == 8
        assert len(set(ids)) == 8
        assert ids[:2] == ["v1", "v2"]
        assert body["recommended_count"] == 2
        assert body["additional_count"] == 6
        assert body["source_info"] == {"from_microservice": 2, "from_catalog": 6, "from_fallback": 0}
        assert [v["is_recommended"] for v in body["videos"]] == [True, True] + [False] * 6
        assert body["videos"][0]["title"] == "Video title 1"

        ctx = state.sessions[body["session_id"]]
        assert ctx.recommended_video_ids == ["v1", "v2"]
        assert ctx.user_id == "u1"

    def test_service_down_degrades_to_filler(self, client, service_ids):
        service_ids["ids"] = None
        body = client.post("/api/recommendations", json={"user_id": "u1"}).json()
        assert body["count"] == 8
        assert body["recommended_count"] == 0
        assert not any(v["is_recommended"] for v in body["videos"])

    def test_empty_catalog_uses_fallbacks(self, tmp_path, service_ids):
        service_ids["ids"] = []
        set_state(_make_state(tmp_path, []))
        try:
            body = TestClient(app).post("/api/recommendations", json={"user_id": "u1"}).json()
        finally:
            set_state(None)
        assert body["recommended_count"] == 0
        assert body["source_info"]["from_fallback"] == 4
        assert [v["id"] for v in body["videos"]] == ["fallback_1", "fallback_2", "fallback_3", "fallback_4"]

    def test_unknown_service_id_gets_placeholder(self, client, service_ids):
        service_ids["ids"] = ["v1", "zz"]
        body = client.post("/api/recommendations", json={"user_id": "u1"}).json()
        assert body["recommended_count"] == 2
        assert body["videos"][1]["title"] == "Recommended Video zz"

    def test_user_id_required(self, client):
        assert client.post("/api/recommendations", json={}).status_code == 400

    def test_top_k_above_total_rejected(self, client):
        res = client.post("/api/recommendations", json={"user_id": "u1", "top_k": 5, "total": 4})
        assert res.status_code == 400


class TestSessionRetention:
    def test_new_cycle_replaces_the_users_previous_session(self, client, state):
        session_ids = []
        for _ in range(50):
            sid = client.post("/api/recommendations", json={"user_id": "u1"}).json()["session_id"]
            client.post(f"/api/sessions/{sid}/summary", json={"selected_videos": ["v1"]})
            session_ids.append(sid)

        assert list(state.sessions) == [session_ids[-1]]
        assert client.get(f"/api/sessions/{session_ids[0]}").status_code == 404
        assert client.get(f"/api/sessions/{session_ids[-1]}").json()["phase"] == "summarized"

    def test_other_users_keep_their_sessions(self, client, state):
        first = client.post("/api/recommendations", json={"user_id": "u1"}).json()["session_id"]
        second = client.post("/api/recommendations", json={"user_id": "u2"}).json()["session_id"]
        assert set(state.sessions) == {first, second}
        assert client.get("/").json()["backends"]["active_sessions"] == 2

    def test_oldest_sessions_are_evicted_beyond_the_cap(self, client, state, monkeypatch):
        monkeypatch.setattr("survey_server.state.MAX_SESSIONS", 3)
        ids = [client.post("/api/sessions/create", json={}).json()["session_id"] for _ in range(5)]
        # touching a session makes it the most recent
        client.post(f"/api/sessions/{ids[2]}/recommended", json={"video_ids": ["A"]})
        client.post("/api/sessions/create", json={})

        assert len(state.sessions) == 3
        assert ids[2] in state.sessions
        assert ids[3] not in state.sessions
        assert ids[4] in state.sessions


class TestSessions:
    def test_track_and_summarize(self, client, state):
        session = client.post(
            "/api/sessions/create",
            json={"user_id": "u1", "recommended_video_ids": ["A", "B", "C", "D"]},
        ).json()
        sid = session["session_id"]
        assert session["phase"] == "recommended_set"

        hit = client.post(f"/api/sessions/{sid}/track", json={"video_id": "A", "interaction_type": "select"}).json()
        miss = client.post(f"/api/sessions/{sid}/track", json={"video_id": "Z", "interaction_type": "select"}).json()
        assert hit["is_recommended"] is True
        assert miss["is_recommended"] is False
        assert miss["total_interactions"] == 2

        info = client.get(f"/api/sessions/{sid}").json()
        assert info["phase"] == "tracking"
        assert info["interactions_by_type"] == {"select": 2}

        summary = client.post(f"/api/sessions/{sid}/summary", json={"selected_videos": ["A", "C", "Z"]}).json()
        assert summary["recommendation_accuracy"] == 50.0
        assert summary["selected_recommended"] == 2
        assert summary["total_recommended"] == 4
        assert summary["persisted"] is True

        (row,) = state.interaction_store.list_sessions(user_id="u1")
        assert row["recommendation_accuracy"] == 50.0
        assert client.get(f"/api/sessions/{sid}").json()["total_interactions"] == 0

    def test_summary_failure_keeps_events(self, client, state):
        state.aggregator = type(state.aggregator)(FailingStore())
        sid = client.post("/api/sessions/create", json={"user_id": "u1", "recommended_video_ids": ["A"]}).json()["session_id"]
        client.post(f"/api/sessions/{sid}/track", json={"video_id": "A"})
        summary = client.post(f"/api/sessions/{sid}/summary", json={"selected_videos": ["A"]}).json()
        assert summary["persisted"] is False
        assert summary["recommendation_accuracy"] == 100.0
        assert client.get(f"/api/sessions/{sid}").json()["total_interactions"] == 1

    def test_set_recommended_later(self, client):
        sid = client.post("/api/sessions/create", json={"user_id": "u1"}).json()["session_id"]
        info = client.post(f"/api/sessions/{sid}/recommended", json={"video_ids": ["A", "A", "B"]}).json()
        assert info["recommended_videos"] == ["A", "B"]

    def test_reset_issues_new_id(self, client):
        sid = client.post("/api/sessions/create", json={"user_id": "u1", "recommended_video_ids": ["A"]}).json()["session_id"]
        fresh = client.post(f"/api/sessions/{sid}/reset").json()
        assert fresh["session_id"] != sid
        assert fresh["user_id"] == "u1"
        assert fresh["recommended_videos"] == []
        assert fresh["total_interactions"] == 0
        assert client.get(f"/api/sessions/{sid}").status_code == 404

    def test_validation_errors(self, client):
        sid = client.post("/api/sessions/create", json={}).json()["session_id"]
        assert client.post(f"/api/sessions/{sid}/track", json={"video_id": "A"}).status_code == 400
        res = client.post(f"/api/sessions/{sid}/track", json={"user_id": "u1", "video_id": "A", "interaction_type": "like"})
        assert res.status_code == 400

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/nope").status_code == 404
        assert client.post("/api/sessions/nope/track", json={"video_id": "A"}).status_code == 404


class TestAnalytics:
    PAYLOAD = {
        "user_id": "u1",
        "interactions": [
            {"video_id": "A", "interaction_type": "select", "is_recommended": True, "session_id": "s1",
             "timestamp": "2025-01-01T10:00:00+00:00"},
            {"video_id": "Z", "interaction_type": "click", "session_id": "s1",
             "timestamp": "2025-01-01T10:01:00+00:00"},
        ],
        "session_data": {"recommended_videos": ["A", "B", "C", "D"], "selected_videos": ["A", "C", "Z"]},
    }

    def test_ingest_computes_accuracy(self, client, state):
        body = client.post("/api/analytics", json=self.PAYLOAD).json()
        assert body["success"] is True
        assert body["summary"] == {"total_interactions": 2, "tables_updated": 2}
        assert body["results"][1]["metrics"]["accuracy"] == "50%"

        (row,) = state.interaction_store.list_sessions()
        assert row["session_id"] == "s1"
        assert row["recommendation_accuracy"] == 50.0

    def test_ingest_requires_user(self, client):
        assert client.post("/api/analytics", json={"interactions": []}).status_code == 400

    def test_ingest_persistence_failure(self, client, state):
        state.interaction_store = FailingStore()
        res = client.post("/api/analytics", json=self.PAYLOAD)
        assert res.status_code == 500
        assert res.json() == {"error": "Internal server error", "details": "disk full", "saved": []}

    def test_ingest_reports_rows_already_saved(self, client, state):
        state.interaction_store = FailingStore(tables={"recommendation_sessions"})
        res = client.post("/api/analytics", json=self.PAYLOAD)
        assert res.status_code == 500
        assert res.json()["saved"] == ["video_interactions"]
        assert len(state.interaction_store.list_interactions()) == 2
        assert state.interaction_store.list_sessions() == []

    def test_invalid_batch_writes_nothing(self, client, state):
        payload = {**self.PAYLOAD, "interactions": self.PAYLOAD["interactions"] + [{"video_id": "Q", "interaction_type": "like"}]}
        assert client.post("/api/analytics", json=payload).status_code == 400
        assert state.interaction_store.counts()["video_interactions"] == 0

    def test_summary_is_scoped_to_one_user(self, client):
        client.post("/api/analytics", json=self.PAYLOAD)
        client.post("/api/analytics", json={**self.PAYLOAD, "user_id": "u2"})

        anonymous = client.get("/api/analytics", params={"type": "summary"}).json()
        assert anonymous == {"success": True, "data": [], "count": 0}

        own = client.get("/api/analytics", params={"type": "summary", "user_id": "u2"}).json()
        assert sum(d["sessions"] for d in own["data"]) == 1

    def test_read_back(self, client):
        client.post("/api/analytics", json=self.PAYLOAD)

        interactions = client.get("/api/analytics", params={"type": "interactions", "user_id": "u1"}).json()
        assert interactions["count"] == 2
        assert interactions["data"][0]["video_id"] == "Z"

        sessions = client.get("/api/analytics", params={"type": "sessions"}).json()
        assert sessions["count"] == 1

        summary = client.get("/api/analytics", params={"type": "summary", "user_id": "u1"}).json()
        by_date = {d["date"]: d for d in summary["data"]}
        assert by_date["2025-01-01"]["interactions"] == 2
        assert by_date["2025-01-01"]["recommended_interactions"] == 1

    def test_download_csv(self, client):
        client.post("/api/analytics", json=self.PAYLOAD)
        res = client.get("/api/analytics", params={"type": "download", "file": "sessions"})
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("text/csv")
        assert res.headers["content-disposition"] == 'attachment; filename="sessions_analytics.csv"'
        header = res.text.splitlines()[0]
        assert header.startswith("id,user_id,session_id,recommended_videos")

    def test_download_without_data(self, client):
        res = client.get("/api/analytics", params={"type": "download"})
        assert res.status_code == 404
        assert res.json() == {"error": "No data found"}

    def test_status(self, client):
        client.post("/api/analytics", json=self.PAYLOAD)
        body = client.get("/api/analytics").json()
        assert body["tables"]["video_interactions"]["total_records"] == 2
        assert body["tables"]["recommendation_sessions"]["total_records"] == 1
        assert "GET ?type=summary" in body["available_endpoints"]


class TestUsers:
    def test_categories(self, client):
        body = client.get("/api/categories").json()
        assert body["count"] == 47

    def test_preferences_default_then_update(self, client):
        body = client.get("/api/users/u1/preferences").json()
        assert body["categories"] == ["Technology", "Science", "Innovation"]

        res = client.put("/api/users/u1/preferences", json={"categories": ["deep_learning", "Quantum Computing"]})
        assert res.json()["topic"] == "deep_learning, quantum_computing"
        assert client.get("/api/users/u1/preferences").json()["categories"] == ["deep_learning", "quantum_computing"]

    def test_preferences_require_a_category(self, client):
        assert client.put("/api/users/u1/preferences", json={"categories": []}).status_code == 400

    def test_selected_videos(self, client, state):
        res = client.post(
            "/api/ab-testing/selected-videos",
            json={"user_id": "u1", "selected_videos": ["v1", "v3"], "email": "a@example.com"},
        )
        assert res.status_code == 200
        assert res.json()["message"] == "selected videos stored successfully"
        assert state.interaction_store.counts()["submissions"] == 1
        assert client.post("/api/ab-testing/selected-videos", json={"selected_videos": []}).status_code == 400
