"""
Pytest fixtures and configuration for all tests.
"""

import os

# Settings() needs a JWT secret before anything under app/ is imported
os.environ.setdefault("JWT_SECRET", "test-secret-key-at-least-32-chars-long")
os.environ.setdefault("SCORE_STORE_BACKEND", "memory")
os.environ.setdefault("REVEAL_DELAY_SECONDS", "0")
os.environ.setdefault("LEDGER_API_URL", "")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:5173")

import itertools
from typing import AsyncGenerator, Optional

import pytest
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.question_bank import DEFAULT_QUESTIONS
from app.models.leaderboard import UpsertResult
from app.repositories.claim_repository import InMemoryClaimRepository
from app.repositories.score_repository import (
    InMemoryScoreRepository,
    ScoreRepository,
    ScoreStoreError,
)
from app.services.ledger_client import (
    LedgerClient,
    LedgerReceipt,
    LedgerTransactionError,
    LedgerUnavailableError,
)

# MongoDB test database
TEST_DB_URI = os.getenv("TEST_MONGODB_URI", "mongodb://localhost:27017")
TEST_DB_NAME = "quiz_leaderboard_test"


class FakeLedgerClient(LedgerClient):
    """In-process ledger that records every call and can be told to fail."""

    def __init__(self, fail_submit: bool = False, fail_claim: bool = False, supports_reads: bool = False):
        self.fail_submit = fail_submit
        self.fail_claim = fail_claim
        self.supports_reads = supports_reads
        self.scores: dict[str, int] = {}
        self.submitted: list[tuple[str, int]] = []
        self.claimed: list[str] = []

    async def submit_score(self, identity: str, score: int) -> LedgerReceipt:
        self.submitted.append((identity, score))
        if self.fail_submit:
            raise LedgerUnavailableError("network partition")
        self.scores[identity] = max(self.scores.get(identity, 0), score)
        return LedgerReceipt(tx_hash=f"0xsubmit{len(self.submitted)}")

    async def claim_reward(self, identity: str) -> LedgerReceipt:
        self.claimed.append(identity)
        if self.fail_claim:
            raise LedgerTransactionError("insufficient funds")
        return LedgerReceipt(tx_hash=f"0xclaim{len(self.claimed)}")

    async def get_score(self, identity: str) -> Optional[int]:
        return self.scores.get(identity)


class BrokenScoreRepository(ScoreRepository):
    """Local store that is unreachable."""

    async def get(self, identity):
        raise ScoreStoreError("disk full")

    async def get_all(self):
        raise ScoreStoreError("disk full")

    async def upsert_max(self, identity, score, updated_at) -> UpsertResult:
        raise ScoreStoreError("disk full")


@pytest.fixture(scope="session")
def worker_id(request):
    """
    Return the worker ID when using pytest-xdist, otherwise 'master'.
    This allows each worker to use its own test database.
    """
    if hasattr(request.config, 'workerinput'):
        return request.config.workerinput['workerid']
    return 'master'


@pytest.fixture(scope="function")
async def test_db(worker_id) -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """
    Provide a clean test database for each test.

    Skips the test when no MongoDB is reachable.
    Automatically cleans up after each test.
    """
    client = AsyncIOMotorClient(TEST_DB_URI, serverSelectionTimeoutMS=1000)
    try:
        await client.admin.command("ping")
    except PyMongoError:
        client.close()
        pytest.skip(f"MongoDB not available at {TEST_DB_URI}")

    # Use different database per worker to avoid conflicts in parallel execution
    db_name = f"{TEST_DB_NAME}_{worker_id}" if worker_id != "master" else TEST_DB_NAME
    db = client[db_name]

    yield db

    # Cleanup: drop all collections after test
    collection_names = await db.list_collection_names()
    for collection_name in collection_names:
        await db[collection_name].drop()

    client.close()


@pytest.fixture
def clock():
    """Deterministic millisecond clock: 1, 2, 3, ..."""
    counter = itertools.count(1)
    return lambda: next(counter)


@pytest.fixture
def score_store():
    return InMemoryScoreRepository()


@pytest.fixture
def claim_store():
    return InMemoryClaimRepository()


@pytest.fixture
def ledger():
    return FakeLedgerClient()


@pytest.fixture
def failing_ledger():
    return FakeLedgerClient(fail_submit=True, fail_claim=True)


@pytest.fixture
def broken_store():
    return BrokenScoreRepository()


@pytest.fixture
def sample_questions():
    return list(DEFAULT_QUESTIONS)


@pytest.fixture
def correct_answers(sample_questions):
    """Correct option index for each default question."""
    return [q.correct_index for q in sample_questions]


@pytest.fixture
def make_ledger():
    """Factory for FakeLedgerClient with custom failure modes."""
    return FakeLedgerClient
