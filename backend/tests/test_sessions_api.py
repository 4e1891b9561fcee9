"""HTTP API tests: sessions, turns, persistence, stateless validation, starter ideas."""

import os
import random
import sys
from unittest.mock import patch

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from brainstormer import __version__
from brainstormer.agents.idea_gate import create_idea_gate_graph
from brainstormer.database import Base, get_db
from brainstormer.main import _cors_origins, _debug_enabled, app
from brainstormer.services.session_dependency import get_conversation_registry, get_functions_client
from brainstormer.services.session_registry import ConversationRegistry
from brainstormer.services.session_store import SqlSessionRepository
from fakes import NOT_AN_IDEA, SCENARIO_IDEA, VAGUE_IDEA, FakeFunctionsClient, offline, verdict_json

# ---------------------------------------------------------------------------
# Test database setup (file-based SQLite for compatibility)
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite:///./test_sessions.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


client = TestClient(app)


@pytest.fixture
def fake():
    return FakeFunctionsClient()


@pytest.fixture
def registry():
    return ConversationRegistry(rng=random.Random(4))


@pytest.fixture(autouse=True)
def setup_db(fake, registry):
    """Create tables and wire the fake functions client before each test."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_functions_client] = lambda: fake
    app.dependency_overrides[get_conversation_registry] = lambda: registry
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides.clear()


def _create_session(name="Babysitter Network"):
    res = client.post("/sessions", json={"name": name})
    assert res.status_code == 201, res.text
    return res.json()


def _send(session_id, message):
    res = client.post(f"/sessions/{session_id}/messages", json={"message": message})
    assert res.status_code == 200, res.text
    return res.json()


# ===================================================================== #
#  Session lifecycle                                                      #
# ===================================================================== #

class TestSessionLifecycle:
    def test_create_named_session(self):
        data = _create_session()
        assert data["stage"] == "awaiting_idea"
        assert data["messages"] == []
        assert data["wrinkles"]["points"] == 0.0
        assert data["response_mode"] == "verbose"

    def test_create_without_body_is_gated(self):
        res = client.post("/sessions")
        assert res.status_code == 201
        assert res.json()["stage"] == "gating"
        assert res.json()["name"] == "New Chat Session"

    def test_gated_session_answers_with_name_gate(self, fake):
        session_id = client.post("/sessions").json()["session_id"]

        data = _send(session_id, SCENARIO_IDEA)

        assert data["status"] == "name_required"
        assert len(data["session"]["messages"]) == 1
        assert fake.calls == []

    def test_rename_opens_gated_session(self):
        session_id = client.post("/sessions").json()["session_id"]
        res = client.put(f"/sessions/{session_id}/name", json={"name": "  Sitter Network  "})
        assert res.status_code == 200
        assert res.json()["name"] == "Sitter Network"
        assert res.json()["stage"] == "awaiting_idea"

    def test_blank_rename_rejected(self):
        session_id = _create_session()["session_id"]
        res = client.put(f"/sessions/{session_id}/name", json={"name": "   "})
        assert res.status_code == 422

    def test_response_mode(self):
        session_id = _create_session()["session_id"]
        res = client.put(f"/sessions/{session_id}/response-mode", json={"mode": "summary"})
        assert res.status_code == 200
        assert res.json()["response_mode"] == "summary"

        bad = client.put(f"/sessions/{session_id}/response-mode", json={"mode": "poetry"})
        assert bad.status_code == 422

    def test_unknown_session_404(self):
        assert client.get("/sessions/not-a-uuid").status_code == 404
        assert client.get("/sessions/6f1c7c9e-3f3a-4c1e-9a55-2a4f1f0f7b11").status_code == 404

    def test_delete_session(self):
        session_id = _create_session()["session_id"]
        assert client.delete(f"/sessions/{session_id}").status_code == 204
        assert client.get(f"/sessions/{session_id}").status_code == 404
        assert client.delete(f"/sessions/{session_id}").status_code == 404


# ===================================================================== #
#  Conversation turns                                                     #
# ===================================================================== #

class TestTurns:
    def test_scenario_idea_accepted(self):
        session_id = _create_session()["session_id"]

        data = _send(session_id, SCENARIO_IDEA)

        assert data["status"] == "answered"
        session = data["session"]
        assert session["has_valid_idea"] is True
        assert session["current_idea"]
        assert session["stage"] == "refining"
        assert [m["role"] for m in session["messages"]] == ["user", "bot"]
        assert session["wrinkles"]["points"] == 2.0

    def test_scenario_vague_idea_rejected(self, fake):
        fake.validation_reply = verdict_json(False, "too vague")
        session_id = _create_session()["session_id"]

        data = _send(session_id, VAGUE_IDEA)

        assert data["status"] == "rejected"
        assert data["session"]["has_valid_idea"] is False
        assert "NOT APPROVED" in data["session"]["messages"][-1]["content"]
        assert data["session"]["wrinkles"]["points"] == 0.0

    def test_connection_error_returns_retry_text(self, fake):
        session_id = _create_session()["session_id"]
        _send(session_id, SCENARIO_IDEA)
        fake.chat_reply = offline()

        data = _send(session_id, "What should the MVP include?")

        assert data["status"] == "error"
        assert data["error"] == "Connection Error"
        assert data["retry_text"] == "What should the MVP include?"
        assert len(data["session"]["messages"]) == 2

    def test_empty_message_ignored(self):
        session_id = _create_session()["session_id"]
        data = _send(session_id, "")
        assert data["status"] == "ignored"
        assert data["session"]["messages"] == []

    def test_reset(self):
        session_id = _create_session()["session_id"]
        _send(session_id, SCENARIO_IDEA)

        res = client.post(f"/sessions/{session_id}/reset")

        assert res.status_code == 200
        assert res.json()["messages"] == []
        assert res.json()["has_valid_idea"] is False
        assert res.json()["stage"] == "awaiting_idea"

    def test_summary(self, fake):
        session_id = _create_session()["session_id"]
        _send(session_id, SCENARIO_IDEA)

        res = client.get(f"/sessions/{session_id}/summary")

        assert res.status_code == 200
        assert res.json()["summary"] == fake.conversation_summary_reply


# ===================================================================== #
#  Persistence                                                            #
# ===================================================================== #

class TestPersistence:
    def test_session_reloads_from_database(self, fake):
        session_id = _create_session()["session_id"]
        _send(session_id, SCENARIO_IDEA)
        _send(session_id, "uber for dogs")

        # Fresh registry forces a reload from the chat_sessions table
        app.dependency_overrides[get_conversation_registry] = lambda: ConversationRegistry()
        res = client.get(f"/sessions/{session_id}")

        assert res.status_code == 200
        data = res.json()
        assert len(data["messages"]) == 4
        assert data["has_valid_idea"] is True
        assert data["persistence_level"] == 1
        # 2.0 from the answered turn, -5 from trickery, clamped
        assert data["wrinkles"]["points"] == 0.0
        assert data["messages"][1]["suggestions"][0]["text"] == "Who is the first paying customer?"

    def test_idle_sessions_are_not_kept_in_memory(self, registry):
        ids = [_create_session()["session_id"] for _ in range(5)]
        for session_id in ids:
            assert client.get(f"/sessions/{session_id}").status_code == 200
        _send(ids[0], SCENARIO_IDEA)
        client.put(f"/sessions/{ids[1]}/name", json={"name": "Sitter Co-op"})

        assert len(registry) == 0

    def test_database_changes_are_visible_on_next_request(self):
        session_id = _create_session()["session_id"]
        _send(session_id, SCENARIO_IDEA)

        db = TestingSessionLocal()
        try:
            repository = SqlSessionRepository(db)
            snapshot = repository.load(session_id)
            snapshot.name = "Renamed Elsewhere"
            repository.save(snapshot)
        finally:
            db.close()

        data = client.get(f"/sessions/{session_id}").json()
        assert data["name"] == "Renamed Elsewhere"
        assert data["has_valid_idea"] is True


# ===================================================================== #
#  Validation graph reuse                                                 #
# ===================================================================== #

class TestOrchestratorReuse:
    def test_graph_built_once_across_requests(self):
        with patch(
            "brainstormer.services.validation_orchestrator.create_idea_gate_graph",
            wraps=create_idea_gate_graph,
        ) as build:
            ids = [_create_session()["session_id"] for _ in range(3)]
            for session_id in ids:
                client.get(f"/sessions/{session_id}")
            _send(ids[0], SCENARIO_IDEA)
            client.post("/validate-idea", json={"text": SCENARIO_IDEA})

        assert build.call_count == 1

    def test_policy_change_rebuilds_graph_for_existing_sessions(self, fake):
        session_id = _create_session()["session_id"]
        assert _send(session_id, NOT_AN_IDEA)["status"] == "rejected"

        with patch.dict(os.environ, {"VALIDATION_POLICY": "lenient"}):
            data = _send(session_id, NOT_AN_IDEA)

        assert data["status"] == "answered"
        assert data["session"]["has_valid_idea"] is True


# ===================================================================== #
#  Stateless endpoints                                                    #
# ===================================================================== #

class TestValidateIdea:
    def test_valid_idea(self):
        res = client.post("/validate-idea", json={"text": SCENARIO_IDEA})
        assert res.status_code == 200
        assert res.json()["valid"] is True
        assert res.json()["preview"]

    def test_remote_failure_glitch(self, fake):
        fake.validation_reply = offline()
        res = client.post("/validate-idea", json={"text": NOT_AN_IDEA})
        data = res.json()
        assert data["valid"] is False
        assert data["source"] == "heuristic_fallback"
        assert "Glitch" in data["gate_message"]["content"]

    def test_existing_idea_skips_remote(self, fake):
        res = client.post("/validate-idea", json={"text": "anything", "has_existing_valid_idea": True})
        assert res.json()["source"] == "existing"
        assert res.json()["preview"] is None
        assert fake.calls == []

    def test_lenient_policy_from_env(self):
        with patch.dict(os.environ, {"VALIDATION_POLICY": "lenient"}):
            res = client.post("/validate-idea", json={"text": NOT_AN_IDEA})
        assert res.json()["valid"] is True

    def test_empty_text_rejected(self):
        assert client.post("/validate-idea", json={"text": ""}).status_code == 422


class TestGeneral:
    def test_starter_suggestions(self):
        res = client.get("/suggestions/starter", params={"count": 3})
        assert res.status_code == 200
        assert len(res.json()["suggestions"]) == 3

    def test_starter_default_count(self):
        assert len(client.get("/suggestions/starter").json()["suggestions"]) == 4

    def test_starter_count_validated(self):
        assert client.get("/suggestions/starter", params={"count": 0}).status_code == 422

    def test_health(self):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json()["status"] == "healthy"

    def test_root(self):
        assert "endpoints" in client.get("/").json()

    def test_root_lists_registered_routes(self):
        registered = {(method, route.path) for route in app.routes for method in getattr(route, "methods", ())}
        for entry in client.get("/").json()["endpoints"].values():
            method, path = entry.split(" ", 1)
            path = path.replace("{id}", "{session_id}")
            assert (method, path) in registered

    def test_health_reports_package_version(self):
        assert client.get("/health").json()["version"] == __version__

    def test_cors_origins_from_env(self):
        with patch.dict(os.environ, {"CORS_ORIGINS": "https://a.example, ,https://b.example"}):
            assert _cors_origins() == ["https://a.example", "https://b.example"]
        with patch.dict(os.environ, {"DEBUG": "false"}):
            assert _debug_enabled() is False
