"""
RewardService - Top-N reward eligibility and one-time claims.

Eligibility is always recomputed from a fresh ranking, including at claim
time. A claim is reserved in the claim store before the ledger transaction
runs, and released again if the transaction fails, so a participant can retry
a failed claim but can never claim twice in the same epoch.
"""

import logging

from app.core.logging_config import mask_identity
from app.models.reward import ClaimOutcome, DenialReason, RewardStatus
from app.repositories.claim_repository import ClaimRepository
from app.services.leaderboard_service import LeaderboardService
from app.services.ledger_client import LedgerClient, LedgerError

logger = logging.getLogger(__name__)


class RewardService:
    def __init__(
        self,
        leaderboard: LeaderboardService,
        claims: ClaimRepository,
        ledger: LedgerClient,
        epoch: int = 1,
        top_n: int = 3
    ):
        self.leaderboard = leaderboard
        self.claims = claims
        self.ledger = ledger
        self.epoch = epoch
        self.top_n = top_n

    def _in_reward_zone(self, rank) -> bool:
        return rank is not None and 1 <= rank <= self.top_n

    async def is_eligible(self, identity: str) -> bool:
        """True if the identity ranks in the top N and has not claimed in this epoch."""
        rank = await self.leaderboard.rank_of(identity)
        if not self._in_reward_zone(rank):
            return False
        return not await self.claims.is_claimed(identity, self.epoch)

    async def reward_status(self, identity: str) -> RewardStatus:
        rank = await self.leaderboard.rank_of(identity)
        claimed = await self.claims.is_claimed(identity, self.epoch)

        return RewardStatus(
            identity=identity,
            rank=rank,
            eligible=self._in_reward_zone(rank) and not claimed,
            claimed=claimed,
            epoch=self.epoch,
        )

    async def claim(self, identity: str) -> ClaimOutcome:
        """
        Claim the reward for an identity.

        Order matters:
        1. Already claimed -> DENIED(already_claimed), the ledger is not called
        2. Rank re-validated from the store -> DENIED(not_eligible) outside top N
        3. Claim reserved (claimed=True) before the transaction
        4. Transaction fails -> reservation released, FAILED
        """
        masked = mask_identity(identity)

        if await self.claims.is_claimed(identity, self.epoch):
            return ClaimOutcome.denied(DenialReason.ALREADY_CLAIMED)

        rank = await self.leaderboard.rank_of(identity)
        if not self._in_reward_zone(rank):
            logger.info(f"🚫 Claim denied for {masked}: rank {rank} outside top {self.top_n}")
            return ClaimOutcome.denied(DenialReason.NOT_ELIGIBLE, rank=rank)

        if not await self.claims.reserve(identity, self.epoch):
            # Otro claim concurrente ganó la reserva
            return ClaimOutcome.denied(DenialReason.ALREADY_CLAIMED, rank=rank)

        try:
            receipt = await self.ledger.claim_reward(identity)
        except LedgerError as e:
            await self.claims.release(identity, self.epoch)
            logger.error(f"❌ Claim transaction failed for {masked}, claim released: {e}")
            return ClaimOutcome.failed(reason=str(e), rank=rank)
        except BaseException:
            # Error inesperado o request cancelado: la reserva no puede quedar colgada
            await self.claims.release(identity, self.epoch)
            logger.exception(f"❌ Claim for {masked} interrupted, claim released")
            raise

        await self.claims.confirm(identity, self.epoch, receipt.tx_hash)
        logger.info(f"🎁 Reward claimed by {masked} (rank {rank}, tx {receipt.tx_hash})")
        return ClaimOutcome.claimed(rank=rank, tx_hash=receipt.tx_hash)
