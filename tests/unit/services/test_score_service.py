"""
Unit tests for ScoreService (score reconciliation)
"""

import itertools

import httpx
import pytest

from app.models.submission import SubmissionStatus
from app.repositories.score_repository import InMemoryScoreRepository, ScoreStoreError
from app.services.ledger_client import AptosLedgerClient
from app.services.score_service import InvalidScoreError, ScoreService

ALICE = "0x" + "a1" * 32
BOB = "0x" + "b2" * 32


class FlakyScoreRepository(InMemoryScoreRepository):
    """In-memory store whose writes start failing after `working_writes` calls."""

    def __init__(self, working_writes: int):
        super().__init__()
        self.working_writes = working_writes

    async def upsert_max(self, identity, score, updated_at):
        if self.working_writes <= 0:
            raise ScoreStoreError("disk full")
        self.working_writes -= 1
        return await super().upsert_max(identity, score, updated_at)


class TestScoreService:
    """Test suite for upsert-with-max reconciliation."""

    @pytest.mark.asyncio
    async def test_first_submission_creates_entry(self, score_store, ledger, clock):
        service = ScoreService(score_store, ledger, clock=clock)

        outcome = await service.submit(ALICE, 80)

        assert outcome.status == SubmissionStatus.ACCEPTED
        assert outcome.newly_stored is True
        assert outcome.degraded is False
        assert outcome.stored_score == 80
        assert outcome.tx_hash == "0xsubmit1"

        entry = await score_store.get(ALICE)
        assert entry.score == 80
        assert ledger.submitted == [(ALICE, 80)]

    @pytest.mark.asyncio
    async def test_higher_score_updates_entry(self, score_store, ledger, clock):
        service = ScoreService(score_store, ledger, clock=clock)
        await service.submit(ALICE, 50)

        outcome = await service.submit(ALICE, 90)

        assert outcome.status == SubmissionStatus.ACCEPTED
        assert outcome.newly_stored is False
        entry = await score_store.get(ALICE)
        assert entry.score == 90
        assert entry.updated_at == 2

    @pytest.mark.asyncio
    async def test_equal_or_lower_score_is_superseded(self, score_store, ledger, clock):
        service = ScoreService(score_store, ledger, clock=clock)
        await service.submit(ALICE, 70)

        same = await service.submit(ALICE, 70)
        lower = await service.submit(ALICE, 40)

        assert same.status == SubmissionStatus.SUPERSEDED
        assert lower.status == SubmissionStatus.SUPERSEDED
        assert lower.stored_score == 70

        entry = await score_store.get(ALICE)
        assert entry.score == 70
        # updated_at is the time the best score was first reached
        assert entry.updated_at == 1

    @pytest.mark.asyncio
    async def test_stored_score_is_max_in_any_order(self, ledger):
        scores = [30, 100, 0, 70, 100, 50]

        for order in itertools.permutations(scores, len(scores)):
            store = InMemoryScoreRepository()
            service = ScoreService(store, ledger)
            for score in order:
                await service.submit(ALICE, score)

            entry = await store.get(ALICE)
            assert entry.score == max(scores)

    @pytest.mark.asyncio
    async def test_one_entry_per_identity(self, score_store, ledger):
        service = ScoreService(score_store, ledger)

        for score in (10, 20, 30):
            await service.submit(ALICE, score)
            await service.submit(BOB, score + 5)

        entries = await score_store.get_all()
        assert sorted(e.identity for e in entries) == sorted([ALICE, BOB])

    @pytest.mark.asyncio
    async def test_ledger_failure_falls_back_to_local_store(self, score_store, failing_ledger, clock):
        service = ScoreService(score_store, failing_ledger, clock=clock)

        outcome = await service.submit(ALICE, 60)

        assert outcome.status == SubmissionStatus.ACCEPTED
        assert outcome.newly_stored is True
        assert outcome.degraded is True
        assert outcome.tx_hash is None
        assert (await score_store.get(ALICE)).score == 60

    @pytest.mark.asyncio
    async def test_fallback_keeps_max_semantics(self, score_store, failing_ledger):
        service = ScoreService(score_store, failing_ledger)
        await service.submit(ALICE, 90)

        outcome = await service.submit(ALICE, 20)

        assert outcome.status == SubmissionStatus.SUPERSEDED
        assert outcome.degraded is True
        assert (await score_store.get(ALICE)).score == 90

    @pytest.mark.asyncio
    async def test_fails_only_when_both_tiers_fail(self, broken_store, failing_ledger):
        service = ScoreService(broken_store, failing_ledger)

        outcome = await service.submit(ALICE, 60)

        assert outcome.status == SubmissionStatus.FAILED
        assert outcome.ok is False
        assert "network partition" in outcome.reason
        assert "disk full" in outcome.reason

    @pytest.mark.asyncio
    async def test_ledger_success_with_broken_cache_is_accepted(self, broken_store, ledger):
        service = ScoreService(broken_store, ledger)

        outcome = await service.submit(ALICE, 60)

        assert outcome.status == SubmissionStatus.ACCEPTED
        assert outcome.newly_stored is False
        assert outcome.tx_hash == "0xsubmit1"
        assert "cache" in outcome.reason

    @pytest.mark.asyncio
    async def test_ledger_read_path_refreshes_local_cache(self, score_store, make_ledger):
        ledger = make_ledger(supports_reads=True)
        # Best score already on the ledger from another device
        ledger.scores[ALICE] = 100
        service = ScoreService(score_store, ledger)

        outcome = await service.submit(ALICE, 40)

        assert outcome.status == SubmissionStatus.ACCEPTED
        assert (await score_store.get(ALICE)).score == 100

    @pytest.mark.asyncio
    async def test_garbled_ledger_response_falls_back(self, score_store, clock):
        ledger = AptosLedgerClient(
            "https://relayer.test/v1",
            "0xe951",
            http_client=httpx.AsyncClient(
                transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))
            ),
        )
        service = ScoreService(score_store, ledger, clock=clock)

        outcome = await service.submit(ALICE, 70)

        assert outcome.status == SubmissionStatus.ACCEPTED
        assert outcome.degraded is True
        assert outcome.newly_stored is True
        assert (await score_store.get(ALICE)).score == 70

    @pytest.mark.asyncio
    async def test_mirror_failure_keeps_upsert_result(self, make_ledger):
        store = FlakyScoreRepository(working_writes=1)
        ledger = make_ledger(supports_reads=True)
        service = ScoreService(store, ledger)

        outcome = await service.submit(ALICE, 40)

        assert outcome.status == SubmissionStatus.ACCEPTED
        assert outcome.newly_stored is True
        assert outcome.stored_score == 40
        assert outcome.tx_hash == "0xsubmit1"
        assert "mirror" in outcome.reason
        assert (await store.get(ALICE)).score == 40

    @pytest.mark.asyncio
    async def test_invalid_score_rejected_before_io(self, score_store, ledger):
        service = ScoreService(score_store, ledger, max_score=100)

        with pytest.raises(InvalidScoreError):
            await service.submit(ALICE, 110)

        with pytest.raises(InvalidScoreError):
            await service.submit(ALICE, -10)

        assert ledger.submitted == []
        assert await score_store.get_all() == []
