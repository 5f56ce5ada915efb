"""
ScoreService - Reconciles a final quiz score with the leaderboard stores.

Two tiers:
1. Ledger (remote, authoritative). Its acknowledgment is the success signal.
2. Local store. Always receives the same upsert-with-max write, either as the
   cached view after a ledger success or as the fallback when the ledger fails.

A stored score never goes down: submitting the same or a lower score is a
no-op reported as SUPERSEDED.
"""

import logging
from typing import Callable, Optional

from app.core.logging_config import mask_identity
from app.models.leaderboard import UpsertResult, now_ms
from app.models.submission import SubmissionOutcome
from app.repositories.score_repository import ScoreRepository, ScoreStoreError
from app.services.ledger_client import LedgerClient, LedgerError, LedgerReceipt

logger = logging.getLogger(__name__)


class ScoreServiceError(Exception):
    """Base exception for score service errors."""
    pass


class InvalidScoreError(ScoreServiceError):
    """Raised when a score is outside the achievable range."""
    pass


class ScoreService:
    def __init__(
        self,
        store: ScoreRepository,
        ledger: LedgerClient,
        max_score: int = 100,
        clock: Callable[[], int] = now_ms
    ):
        self.store = store
        self.ledger = ledger
        self.max_score = max_score
        self.clock = clock

    def _outcome_from_upsert(self, result: UpsertResult, **kwargs) -> SubmissionOutcome:
        if result.changed:
            return SubmissionOutcome.accepted(
                newly_stored=result.created,
                stored_score=result.stored_score,
                **kwargs
            )
        return SubmissionOutcome.superseded(stored_score=result.stored_score, **kwargs)

    async def submit(self, identity: str, score: int) -> SubmissionOutcome:
        """
        Persist a score for an identity.

        Returns:
            ACCEPTED when the entry was created (newly_stored=True) or raised,
            SUPERSEDED when the stored score was already >= score,
            FAILED only when both the ledger and the local store failed.
        """
        if not 0 <= score <= self.max_score:
            raise InvalidScoreError(f"Score {score} outside [0, {self.max_score}]")

        masked = mask_identity(identity)

        try:
            receipt = await self.ledger.submit_score(identity, score)
        except LedgerError as ledger_error:
            logger.warning(f"⚠️ Ledger write failed for {masked}, falling back to local store: {ledger_error}")
            return await self._submit_local_only(identity, score, ledger_error)

        return await self._refresh_local_cache(identity, score, receipt)

    async def _submit_local_only(
        self,
        identity: str,
        score: int,
        ledger_error: LedgerError
    ) -> SubmissionOutcome:
        try:
            result = await self.store.upsert_max(identity, score, self.clock())
        except ScoreStoreError as store_error:
            logger.error(
                f"❌ Score submission failed for {mask_identity(identity)}: "
                f"ledger: {ledger_error}; local store: {store_error}"
            )
            return SubmissionOutcome.failed(
                reason=f"Ledger unavailable ({ledger_error}) and local store unavailable ({store_error})",
                degraded=True,
            )

        return self._outcome_from_upsert(result, degraded=True)

    async def _refresh_local_cache(
        self,
        identity: str,
        score: int,
        receipt: LedgerReceipt
    ) -> SubmissionOutcome:
        try:
            result = await self.store.upsert_max(identity, score, self.clock())
        except ScoreStoreError as store_error:
            # El ledger es la fuente de verdad: la escritura cuenta aunque la caché quede vieja
            logger.warning(
                f"⚠️ Ledger accepted score for {mask_identity(identity)} "
                f"but local cache refresh failed: {store_error}"
            )
            return SubmissionOutcome.accepted(
                newly_stored=False,
                tx_hash=receipt.tx_hash,
                reason=f"Local cache refresh failed: {store_error}",
            )

        try:
            await self._mirror_ledger_score(identity)
        except ScoreStoreError as store_error:
            # La puntuación enviada ya quedó guardada; solo falló copiar la del ledger
            logger.warning(
                f"⚠️ Could not mirror ledger score for {mask_identity(identity)}: {store_error}"
            )
            return self._outcome_from_upsert(
                result,
                tx_hash=receipt.tx_hash,
                reason=f"Ledger score mirror failed: {store_error}",
            )

        return self._outcome_from_upsert(result, tx_hash=receipt.tx_hash)

    async def _mirror_ledger_score(self, identity: str) -> Optional[int]:
        """Copy the ledger's stored score into the local store (max semantics)."""
        if not self.ledger.supports_reads:
            return None

        try:
            ledger_score = await self.ledger.get_score(identity)
        except LedgerError as e:
            logger.warning(f"⚠️ Could not read back score for {mask_identity(identity)}: {e}")
            return None

        if ledger_score is not None:
            await self.store.upsert_max(identity, ledger_score, self.clock())
        return ledger_score
