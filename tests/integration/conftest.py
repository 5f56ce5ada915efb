"""
Fixtures for integration tests

The app runs with SCORE_STORE_BACKEND=memory (set in tests/conftest.py), so the
stores live in app.state and are replaced with fresh ones for every test.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.security import create_access_token
from app.ledger import get_ledger_client
from app.main import app
from app.repositories.claim_repository import InMemoryClaimRepository
from app.repositories.score_repository import InMemoryScoreRepository
from app.services.quiz_service import QuizSessionRegistry

PLAYER = "0x" + "a1" * 32


@pytest.fixture
def api_ledger(make_ledger):
    """Ledger used by the API; tests flip its failure flags."""
    return make_ledger()


@pytest.fixture
async def client(api_ledger):
    """
    HTTP client for testing API endpoints.

    Fresh in-memory stores and session registry, ledger dependency overridden.
    """
    app.state.quiz_sessions = QuizSessionRegistry()
    app.state.score_store = InMemoryScoreRepository()
    app.state.claim_store = InMemoryClaimRepository()
    app.dependency_overrides[get_ledger_client] = lambda: api_ledger

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.state.quiz_sessions.clear()
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Headers of a connected identity."""
    return headers_for(PLAYER)


def headers_for(identity: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity)}"}


@pytest.fixture
def auth_for():
    """Factory: headers for any identity."""
    return headers_for


@pytest.fixture
def play_quiz(client):
    """Play a full quiz over HTTP with the given answers and return the last snapshot."""

    async def play(headers: dict, answers: list[int]) -> dict:
        response = await client.post("/quiz/start", headers=headers)
        assert response.status_code == 201
        identity = response.json()["identity"]

        for index in answers:
            response = await client.post("/quiz/answer", json={"index": index}, headers=headers)
            assert response.json()["accepted"] is True
            await app.state.quiz_sessions.get(identity).wait_for_reveal()

        snapshot = (await client.get("/quiz", headers=headers)).json()
        return snapshot

    return play
