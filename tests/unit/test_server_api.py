from __future__ import annotations

import json
from pathlib import Path

from fastapi.testclient import TestClient

from workflow_engine.engine.config import EngineSettings
from workflow_engine.engine.registry import WorkflowRegistry
from workflow_engine.server.app import create_app
from workflow_engine.server.config import ServerSettings

LEAVE_APPROVAL: dict[str, object] = {
    "id": "leave-approval",
    "name": "Leave approval",
    "states": [
        {"id": "draft", "name": "Draft", "isInitial": True},
        {"id": "approved", "name": "Approved", "isFinal": True},
        {"id": "rejected", "name": "Rejected", "isFinal": True},
    ],
    "actions": [
        {"id": "approve", "name": "Approve", "fromStates": ["draft"], "toState": "approved"},
        {"id": "reject", "name": "Reject", "fromStates": ["draft"], "toState": "rejected"},
    ],
}


def _client(tmp_path: Path) -> TestClient:
    engine_settings = EngineSettings(_env_file=tmp_path / "missing.env")
    app = create_app(
        ServerSettings(_env_file=tmp_path / "missing.env"),
        engine_settings=engine_settings,
        registry=WorkflowRegistry(),
    )
    return TestClient(app)


def test_welcome_and_health(tmp_path: Path) -> None:
    client = _client(tmp_path)

    assert client.get("/").text == "Welcome to the Workflow Engine API"
    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert "version" in health


def test_leave_approval_over_http(tmp_path: Path) -> None:
    client = _client(tmp_path)

    created = client.post("/workflows", json=LEAVE_APPROVAL)
    assert created.status_code == 200
    assert created.json()["states"][0]["isInitial"] is True
    assert created.json()["actions"][0]["fromStates"] == ["draft"]

    assert client.get("/workflows/leave-approval").json()["id"] == "leave-approval"
    assert [w["id"] for w in client.get("/workflows").json()] == ["leave-approval"]

    started = client.post("/workflows/leave-approval/instances")
    assert started.status_code == 200
    instance = started.json()
    assert instance["definitionId"] == "leave-approval"
    assert instance["currentStateId"] == "draft"
    assert instance["history"] == []

    available = client.get(f"/instances/{instance['id']}/actions").json()
    assert available == {
        "instanceId": instance["id"],
        "currentStateId": "draft",
        "actions": ["approve", "reject"],
    }

    approved = client.post(f"/instances/{instance['id']}/actions/approve")
    assert approved.status_code == 200
    body = approved.json()
    assert body["currentStateId"] == "approved"
    assert [h["actionId"] for h in body["history"]] == ["approve"]
    assert body["history"][0]["timestamp"]

    final = client.post(f"/instances/{instance['id']}/actions/reject")
    assert final.status_code == 400
    assert final.json()["detail"]["kind"] == "CurrentStateIsFinal"

    fetched = client.get(f"/instances/{instance['id']}").json()
    assert fetched["currentStateId"] == "approved"
    assert len(client.get("/instances").json()) == 1


def test_invalid_definition_returns_all_defects(tmp_path: Path) -> None:
    client = _client(tmp_path)
    payload = {
        "id": "bad",
        "states": [{"id": "a"}, {"id": "a"}],
        "actions": [{"id": "go", "fromStates": ["a"], "toState": "nowhere"}],
    }

    response = client.post("/workflows", json=payload)

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["kind"] == "InvalidInitialStateCount"
    assert [d["kind"] for d in detail["defects"]] == [
        "InvalidInitialStateCount",
        "DuplicateStateId",
        "InvalidActionTarget",
    ]
    assert client.get("/workflows/bad").status_code == 404


def test_duplicate_definition_returns_400(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/workflows", json=LEAVE_APPROVAL)

    response = client.post("/workflows", json=LEAVE_APPROVAL)

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "DuplicateOrMissingDefinitionId"


def test_malformed_definition_returns_422(tmp_path: Path) -> None:
    client = _client(tmp_path)

    response = client.post("/workflows", json={"id": "x", "states": [{"name": "no id"}]})

    assert response.status_code == 422


def test_not_found_mapping(tmp_path: Path) -> None:
    client = _client(tmp_path)

    assert client.get("/workflows/missing").json()["detail"]["kind"] == "DefinitionNotFound"
    assert client.post("/workflows/missing/instances").status_code == 404
    assert client.get("/instances/missing").status_code == 404
    assert client.get("/instances/missing/actions").status_code == 404
    missing = client.post("/instances/missing/actions/approve")
    assert missing.status_code == 404
    assert missing.json()["detail"]["kind"] == "InstanceNotFound"


def test_unknown_action_returns_400(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/workflows", json=LEAVE_APPROVAL)
    instance_id = client.post("/workflows/leave-approval/instances").json()["id"]

    response = client.post(f"/instances/{instance_id}/actions/escalate")

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "ActionNotFound"


def test_definitions_are_loaded_from_directory(monkeypatch, tmp_path: Path) -> None:
    definitions = tmp_path / "definitions"
    definitions.mkdir()
    (definitions / "leave.json").write_text(json.dumps(LEAVE_APPROVAL), encoding="utf-8")
    (definitions / "broken.json").write_text(
        json.dumps({"id": "broken", "states": []}), encoding="utf-8"
    )
    monkeypatch.setenv("WORKFLOW_ENGINE_DEFINITIONS_PATH", str(definitions))

    client = TestClient(create_app(ServerSettings(_env_file=tmp_path / "missing.env")))

    assert [w["id"] for w in client.get("/workflows").json()] == ["leave-approval"]


def test_unparseable_definition_files_are_skipped(monkeypatch, tmp_path: Path) -> None:
    definitions = tmp_path / "definitions"
    definitions.mkdir()
    (definitions / "a-garbled.json").write_text("{not json", encoding="utf-8")
    # A directory matching the pattern cannot be read as a file.
    (definitions / "b-folder.json").mkdir()
    (definitions / "c-leave.json").write_text(json.dumps(LEAVE_APPROVAL), encoding="utf-8")
    monkeypatch.setenv("WORKFLOW_ENGINE_DEFINITIONS_PATH", str(definitions))

    client = TestClient(create_app(ServerSettings(_env_file=tmp_path / "missing.env")))

    assert [w["id"] for w in client.get("/workflows").json()] == ["leave-approval"]


def test_cors_is_enabled_when_origins_configured(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("WORKFLOW_ENGINE_CORS_ORIGINS", "http://localhost:5173")
    client = TestClient(create_app(engine_settings=EngineSettings(_env_file=tmp_path / "x.env")))

    response = client.get("/health", headers={"Origin": "http://localhost:5173"})

    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
