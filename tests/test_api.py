from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from discovery_flow.app import create_app
from discovery_flow.errors import UpstreamAgentFailure
from discovery_flow.routers.sessions import get_manager, get_user_id
from discovery_flow.schemas import DiscoveryPhase


client = TestClient(create_app())


def _headers() -> dict[str, str]:
    return {"X-User-Id": f"user-{uuid.uuid4().hex[:8]}"}


def _start(headers: dict[str, str], command: str = "brainstorm", args: str = "") -> dict:
    response = client.post("/discovery/sessions/start", json={"command": command, "args": args}, headers=headers)
    assert response.status_code == 200
    return response.json()


def test_healthcheck() -> None:
    response = client.get("/discovery/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_techniques_endpoint_lists_catalog() -> None:
    response = client.get("/discovery/techniques")
    assert response.status_code == 200
    techniques = response.json()
    assert len(techniques) == 20
    assert techniques[5]["id"] == "six_hats"


def test_commands_endpoint() -> None:
    response = client.get("/discovery/commands")
    assert response.status_code == 200
    assert {item["key"] for item in response.json()} == {"help", "brainstorm", "analyst", "pm", "architect", "validator"}


def test_help_command_creates_no_session() -> None:
    headers = _headers()
    data = _start(headers, "help")

    assert data["session_id"] == ""
    assert "Available Commands" in data["response"]
    assert client.get("/discovery/sessions", headers=headers).json() == []


def test_unknown_command_is_bad_request() -> None:
    response = client.post("/discovery/sessions/start", json={"command": "juggle"}, headers=_headers())
    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown command: juggle"


def test_brainstorm_flow_over_http() -> None:
    headers = _headers()
    started = _start(headers)
    session_id = started["session_id"]
    assert started["phase"] == "brainstorming"

    reply = client.post(f"/discovery/sessions/{session_id}/message", json={"message": "6,8,10"}, headers=headers)
    assert reply.status_code == 200
    assert "Six Thinking Hats" in reply.json()["response"]

    answer = client.post(
        "/discovery/sessions/continue",
        json={"session_id": session_id, "message": "We know little about seasonal demand"},
        headers=headers,
    )
    assert answer.status_code == 200

    facilitation = client.get(f"/discovery/sessions/{session_id}/facilitation", headers=headers).json()
    assert facilitation["selected_techniques"] == ["six_hats", "yes_and_building", "random_stimulation"]
    assert facilitation["current_step"] == 2

    ideas = client.get(f"/discovery/sessions/{session_id}/ideas", headers=headers).json()
    assert [idea["source"] for idea in ideas] == ["six_hats"]

    clusters = client.get(f"/discovery/sessions/{session_id}/clusters", headers=headers)
    assert clusters.status_code == 200

    messages = client.get(f"/discovery/sessions/{session_id}/messages", headers=headers).json()
    assert [message["type"] for message in messages] == ["user", "agent"] * 3

    status = client.get(f"/discovery/sessions/{session_id}", headers=headers).json()
    assert status["ideas_count"] == 1
    assert status["status"] == "active"


def test_problem_statement_session() -> None:
    headers = _headers()
    response = client.post(
        "/discovery/sessions",
        json={"problem_statement": "Reduce food waste in school cafeterias", "title": "Food waste"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["phase"] == "setup"

    sessions = client.get("/discovery/sessions", headers=headers).json()
    assert [item["title"] for item in sessions] == ["Food waste"]


def test_blank_problem_statement_is_rejected() -> None:
    response = client.post("/discovery/sessions", json={"problem_statement": "   "}, headers=_headers())
    assert response.status_code == 400


def test_sessions_are_scoped_to_user() -> None:
    owner = _headers()
    session_id = _start(owner)["session_id"]

    response = client.get(f"/discovery/sessions/{session_id}", headers=_headers())

    assert response.status_code == 404
    assert response.json()["detail"] == "Session not found or access denied"


def test_phase_update_and_end_session() -> None:
    headers = _headers()
    session_id = _start(headers, "pm")["session_id"]

    phase = client.post(f"/discovery/sessions/{session_id}/phase", json={"phase": "architecture"}, headers=headers)
    assert phase.status_code == 200
    assert phase.json()["phase"] == DiscoveryPhase.ARCHITECTURE.value
    assert phase.json()["next_steps"]

    bad_phase = client.post(f"/discovery/sessions/{session_id}/phase", json={"phase": "dreaming"}, headers=headers)
    assert bad_phase.status_code == 422

    ended = client.post(f"/discovery/sessions/{session_id}/end", headers=headers)
    assert ended.status_code == 200
    assert ended.json()["success"] is True

    rejected = client.post(f"/discovery/sessions/{session_id}/message", json={"message": "hello"}, headers=headers)
    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "Session already ended"


def test_delete_session() -> None:
    headers = _headers()
    session_id = _start(headers, "analyst")["session_id"]

    deleted = client.delete(f"/discovery/sessions/{session_id}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"/discovery/sessions/{session_id}", headers=headers).status_code == 404


def test_upstream_failure_maps_to_bad_gateway() -> None:
    class FailingManager:
        async def continue_session(self, session_id: str, message: str):
            raise UpstreamAgentFailure("model unavailable")

    app = create_app()
    app.dependency_overrides[get_manager] = lambda: FailingManager()
    failing_client = TestClient(app)

    response = failing_client.post("/discovery/sessions/abc/message", json={"message": "hi"})

    assert response.status_code == 502
    assert "please try again" in response.json()["detail"]


def test_user_id_header_resolution() -> None:
    assert get_user_id(None) == "anonymous"
    assert get_user_id("   ") == "anonymous"
    assert get_user_id(" founder-42 ") == "founder-42"
