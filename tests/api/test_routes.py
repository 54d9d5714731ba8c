"""HTTP layer tests: the FastAPI app wired with a file-backed SQLite database and a recording notifier."""

from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from src.core.config import Settings
from src.main import create_app
from tests.fakes import RecordingNotifier

NO_PACING = {"enabled": False, "base_delay_seconds": 0, "increment_seconds": 0}


@pytest.fixture
def app_settings(tmp_path: Path) -> Settings:
    return Settings(database_url=f"sqlite:///{tmp_path / 'games.db'}")


@pytest.fixture
def client(app_settings: Settings) -> Generator[TestClient, None, None]:
    with TestClient(create_app(app_settings, notifier=RecordingNotifier())) as test_client:
        yield test_client


def start_game(client: TestClient, key: str = "ch1", pacing: dict | None = None) -> None:
    body = {"key": key, "channel_name": "Chess Club"}
    if pacing is not None:
        body["pacing"] = pacing
    assert client.post("/games", json=body).status_code == 201
    assert client.post(f"/games/{key}/join", json={"actor_id": "alice", "team": "white"}).status_code == 200
    assert client.post(f"/games/{key}/join", json={"actor_id": "bob", "team": "black"}).status_code == 200


def test_create_and_list_games(client: TestClient) -> None:
    response = client.post("/games", json={"key": "ch1"})
    assert response.status_code == 201
    payload = response.json()
    assert payload["ok"]
    assert payload["state"]["key"] == "ch1"
    assert payload["state"]["side_to_move"] == "white"

    listing = client.get("/games").json()
    assert [game["key"] for game in listing["games"]] == ["ch1"]


def test_create_duplicate_game(client: TestClient) -> None:
    client.post("/games", json={"key": "ch1"})
    response = client.post("/games", json={"key": "ch1"})
    assert response.status_code == 409
    assert response.json()["error"] == "already_exists"


def test_invalid_requests_are_rejected(client: TestClient) -> None:
    response = client.post("/games", json={"key": "   "})
    assert response.status_code == 422
    assert response.json()["error"] == "invalid_request"

    client.post("/games", json={"key": "ch1"})
    response = client.post(
        "/games/ch1/moves", json={"actor_id": "alice", "notation": "e2 e4"}
    )
    assert response.status_code == 422


def test_unknown_game(client: TestClient) -> None:
    response = client.post("/games/nope/join", json={"actor_id": "alice"})
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_move_flow_and_pacing(client: TestClient) -> None:
    start_game(client)

    first = client.post("/games/ch1/moves", json={"actor_id": "alice", "notation": "e2e4"})
    assert first.status_code == 200
    assert first.json()["move"]["move"]["san"] == "e4"

    wrong = client.post("/games/ch1/moves", json={"actor_id": "alice", "notation": "d2d4"})
    assert wrong.status_code == 403
    assert wrong.json()["error"] == "wrong_team"

    second = client.post("/games/ch1/moves", json={"actor_id": "bob", "notation": "e7e5"})
    assert second.json()["state"]["move_number"] == 2

    blocked = client.post("/games/ch1/moves", json={"actor_id": "alice", "notation": "g1f3"})
    assert blocked.status_code == 429
    assert blocked.json()["error"] == "pacing_blocked"
    assert 0 < blocked.json()["remaining_seconds"] <= 900


def test_illegal_move(client: TestClient) -> None:
    start_game(client)
    response = client.post("/games/ch1/moves", json={"actor_id": "alice", "notation": "e2e5"})
    assert response.status_code == 422
    assert response.json()["error"] == "illegal_move"


def test_legal_moves_and_history(client: TestClient) -> None:
    start_game(client, pacing=NO_PACING)
    legal = client.get("/games/ch1/moves").json()
    assert len(legal["legal_moves"]) == 20

    client.post("/games/ch1/moves", json={"actor_id": "alice", "notation": "e4"})
    history = client.get("/games/ch1/history").json()
    assert [move["san"] for move in history["history"]["moves"]] == ["e4"]


def test_resign_ends_game(client: TestClient) -> None:
    start_game(client)
    response = client.post("/games/ch1/resign", json={"actor_id": "bob"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["vote"]["resigned"]
    assert payload["state"]["result"] == "resigned"
    assert payload["state"]["winner"] == "white"

    assert client.get("/games").json()["games"] == []


def test_callback_buttons(client: TestClient) -> None:
    for actor_id, data in [
        ("alice", "start_newgame"),
        ("alice", "join_white"),
        ("bob", "join_black"),
    ]:
        response = client.post(
            "/callbacks", json={"actor_id": actor_id, "chat_id": "ch1", "data": data}
        )
        assert response.status_code in (200, 201) and response.json()["ok"]

    move = client.post(
        "/callbacks", json={"actor_id": "alice", "chat_id": "ch1", "data": "move_e2e4"}
    )
    assert move.json()["state"]["move_number"] == 1

    unknown = client.post(
        "/callbacks", json={"actor_id": "alice", "chat_id": "ch1", "data": "castle_now"}
    )
    assert unknown.status_code == 422


def test_unknown_key_does_not_move_another_game(client: TestClient) -> None:
    start_game(client)
    response = client.post("/games/ch2/moves", json={"actor_id": "alice", "notation": "e2e4"})
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"

    game = client.get("/games/ch1/history").json()
    assert game["state"]["move_number"] == 0


def test_text_commands(client: TestClient) -> None:
    def command(actor_id: str, chat_id: str, text: str):
        return client.post(
            "/commands", json={"actor_id": actor_id, "chat_id": chat_id, "text": text}
        )

    assert command("alice", "ch1", "/newgame").json()["state"]["channel_bound"]
    assert command("alice", "ch1", "/join white").json()["state"]["white_team"] == ["alice"]
    assert command("bob", "ch1", "/join@ChessBot black").json()["state"]["black_team"] == ["bob"]

    # from a private chat, routed to the game alice joined
    moved = command("alice", "dm-alice", "/move e2e4")
    assert moved.status_code == 200
    assert moved.json()["state"]["key"] == "ch1"

    illegal = command("bob", "ch1", "/move e7e4")
    assert illegal.status_code == 422
    assert illegal.json()["error"] == "illegal_move"
    assert "Legal moves: " in illegal.json()["message"]
    assert "e7e5" in illegal.json()["message"]

    help_reply = command("carol", "ch1", "/help")
    assert help_reply.status_code == 200
    assert "/newgame" in help_reply.json()["message"]

    assert command("alice", "ch1", "hello").status_code == 422
    assert command("alice", "ch1", "/castle").status_code == 422


def test_games_survive_restart(app_settings: Settings) -> None:
    with TestClient(create_app(app_settings, notifier=RecordingNotifier())) as client:
        start_game(client)
        client.post("/games/ch1/moves", json={"actor_id": "alice", "notation": "e2e4"})

    with TestClient(create_app(app_settings, notifier=RecordingNotifier())) as client:
        games = client.get("/games").json()["games"]
        assert [game["key"] for game in games] == ["ch1"]
        assert games[0]["move_number"] == 1
        assert games[0]["white_team"] == ["alice"]

        reply = client.post("/games/ch1/moves", json={"actor_id": "bob", "notation": "e7e5"})
        assert reply.status_code == 200
