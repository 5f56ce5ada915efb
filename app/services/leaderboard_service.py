"""
LeaderboardService - Ranks leaderboard entries on demand.

The ranking is computed from the score store every time it is requested and is
never persisted. For a fixed snapshot of the store the order is always the same:
score descending, then earliest updated_at (first to reach the score wins),
then identity as a last resort.
"""

from typing import Optional

from app.models.leaderboard import LeaderboardEntry, RankedEntry
from app.repositories.score_repository import ScoreRepository


class LeaderboardService:
    def __init__(self, store: ScoreRepository):
        self.store = store

    @staticmethod
    def order(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
        return sorted(entries, key=LeaderboardEntry.sort_key)

    async def rank(self, limit: Optional[int] = None) -> list[RankedEntry]:
        """Get the ordered leaderboard (optionally only the first `limit` entries)."""
        entries = self.order(await self.store.get_all())

        if limit is not None:
            entries = entries[:limit]

        return [
            RankedEntry(
                rank=idx + 1,
                identity=entry.identity,
                score=entry.score,
                updated_at=entry.updated_at,
            )
            for idx, entry in enumerate(entries)
        ]

    async def rank_of(self, identity: str) -> Optional[int]:
        """1-based position of an identity, or None if it has no entry."""
        ranked = await self.get_identity_rank(identity)
        return ranked.rank if ranked else None

    async def get_identity_rank(self, identity: str) -> Optional[RankedEntry]:
        """
        Get an identity's ranked entry.

        Returns None if the identity never submitted a score.
        """
        for entry in await self.rank():
            if entry.identity == identity:
                return entry
        return None
