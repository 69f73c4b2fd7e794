from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict

from fastapi.testclient import TestClient


def _as(principal: str) -> Dict[str, str]:
    return {"X-Principal": principal}


def _create(
    client: TestClient,
    principal: str = "A",
    *,
    description: str = "Clean the yard",
    reward: int = 1000,
    supplied_value: int | None = None,
) -> Any:
    return client.post(
        "/v1/quests",
        headers=_as(principal),
        json={
            "description": description,
            "reward": reward,
            "supplied_value": reward if supplied_value is None else supplied_value,
        },
    )


def test_healthz_ok(client: TestClient) -> None:
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_quest_lifecycle_end_to_end(client: TestClient) -> None:
    response = _create(client)
    assert response.status_code == HTTPStatus.CREATED, response.text
    quest = response.json()
    assert quest["quest_id"] == 1
    assert quest["status"] == "OPEN"
    assert quest["creator"] == "A"
    assert quest.get("completer") is None

    response = client.post("/v1/quests/1:take", headers=_as("B"))
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["status"] == "TAKEN"
    assert response.json()["taker"] == "B"
    assert response.json()["taken_at"] is not None
    assert response.json()["completed_at"] is None

    response = client.get("/v1/principals/B")
    assert response.json() == {"principal": "B", "creating": None, "taking": 1, "balance": 0}

    response = client.post("/v1/quests:complete", headers=_as("B"))
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["completer"] == "B"

    response = client.post("/v1/quests:verify", headers=_as("A"))
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["status"] == "VERIFIED"
    assert response.json()["verified_at"] is not None

    assert client.get("/v1/principals/B").json()["balance"] == 1000
    assert client.get("/v1/quests/1/escrow").json() == {"quest_id": 1, "balance": 0}
    assert client.get("/v1/principals/A").json()["creating"] is None


def test_create_validation_errors_carry_codes(client: TestClient) -> None:
    response = _create(client, supplied_value=500)
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"detail": "Reward should be paid", "code": "RewardMismatch"}

    response = _create(client, reward=0)
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["code"] == "ZeroReward"

    response = _create(client, description="")
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["code"] == "EmptyDescription"


def test_busy_creator_conflict(client: TestClient) -> None:
    _create(client)
    response = _create(client, description="Another")
    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json()["code"] == "CreatorBusy"


def test_take_errors(client: TestClient) -> None:
    _create(client)

    response = client.post("/v1/quests/999:take", headers=_as("B"))
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()["code"] == "QuestNotFound"

    response = client.post("/v1/quests/1:take", headers=_as("A"))
    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json()["code"] == "SelfTake"

    client.post("/v1/quests/1:take", headers=_as("B"))
    response = client.post("/v1/quests/1:take", headers=_as("C"))
    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json()["code"] == "QuestNotOpen"


def test_get_missing_quest(client: TestClient) -> None:
    response = client.get("/v1/quests/5")
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()["detail"] == "Quest does not exist"


def test_complete_and_verify_without_quest(client: TestClient) -> None:
    response = client.post("/v1/quests:complete", headers=_as("B"))
    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json()["code"] == "NoActiveQuest"

    response = client.post("/v1/quests:verify", headers=_as("A"))
    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json()["code"] == "NoActiveQuest"


def test_verify_before_completion(client: TestClient) -> None:
    _create(client)
    response = client.post("/v1/quests:verify", headers=_as("A"))
    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json()["code"] == "QuestNotCompleted"


def test_missing_principal_is_unauthorized(client: TestClient) -> None:
    response = client.post(
        "/v1/quests",
        json={"description": "Clean the yard", "reward": 1, "supplied_value": 1},
    )
    assert response.status_code == HTTPStatus.UNAUTHORIZED


def test_failed_transfer_is_bad_gateway(failing_client: TestClient) -> None:
    _create(failing_client)
    failing_client.post("/v1/quests/1:take", headers=_as("B"))
    failing_client.post("/v1/quests:complete", headers=_as("B"))

    response = failing_client.post("/v1/quests:verify", headers=_as("A"))

    assert response.status_code == HTTPStatus.BAD_GATEWAY
    assert response.json()["code"] == "TransferFailed"
    quest = failing_client.get("/v1/quests/1").json()
    assert quest["status"] == "COMPLETED"
    assert failing_client.get("/v1/quests/1/escrow").json()["balance"] == 1000
