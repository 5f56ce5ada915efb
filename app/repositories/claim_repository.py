"""
🎁 ClaimRepository - Historial de claims de recompensas

Un registro por (identidad, epoch). `reserve` es atómico: marca claimed=True
antes de ejecutar la transacción, y `release` lo revierte si la transacción falla.
"""

import asyncio
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.models.reward import ClaimRecord


class ClaimStoreError(Exception):
    """El almacén de claims no se pudo leer o escribir"""
    pass


class ClaimRepository:
    """Contrato del almacén de claims"""

    async def get(self, identity: str, epoch: int) -> Optional[ClaimRecord]:
        raise NotImplementedError

    async def reserve(self, identity: str, epoch: int) -> bool:
        """Marca el claim como hecho. False si ya estaba reclamado."""
        raise NotImplementedError

    async def confirm(self, identity: str, epoch: int, tx_hash: Optional[str]) -> None:
        raise NotImplementedError

    async def release(self, identity: str, epoch: int) -> None:
        """Vuelve a dejar el claim sin reclamar (rollback)"""
        raise NotImplementedError

    async def is_claimed(self, identity: str, epoch: int) -> bool:
        record = await self.get(identity, epoch)
        return record is not None and record.claimed


class MongoClaimRepository(ClaimRepository):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["reward_claims"]

    async def get(self, identity: str, epoch: int) -> Optional[ClaimRecord]:
        try:
            doc = await self.collection.find_one({"_id": ClaimRecord.make_id(identity, epoch)})
        except PyMongoError as e:
            raise ClaimStoreError(f"Could not read claim for {identity}: {e}") from e
        return ClaimRecord(**doc) if doc else None

    async def reserve(self, identity: str, epoch: int) -> bool:
        claim_id = ClaimRecord.make_id(identity, epoch)
        now = datetime.now(timezone.utc)

        try:
            await self.collection.insert_one({
                "_id": claim_id,
                "identity": identity,
                "epoch": epoch,
                "claimed": True,
                "tx_hash": None,
                "claimed_at": now,
            })
            return True
        except DuplicateKeyError:
            pass
        except PyMongoError as e:
            raise ClaimStoreError(f"Could not reserve claim for {identity}: {e}") from e

        # Ya existe: solo se puede reservar si quedó sin reclamar tras un rollback
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": claim_id, "claimed": False},
                {"$set": {"claimed": True, "claimed_at": now}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise ClaimStoreError(f"Could not reserve claim for {identity}: {e}") from e

        return doc is not None

    async def confirm(self, identity: str, epoch: int, tx_hash: Optional[str]) -> None:
        try:
            await self.collection.update_one(
                {"_id": ClaimRecord.make_id(identity, epoch)},
                {"$set": {"tx_hash": tx_hash}},
            )
        except PyMongoError as e:
            raise ClaimStoreError(f"Could not confirm claim for {identity}: {e}") from e

    async def release(self, identity: str, epoch: int) -> None:
        try:
            await self.collection.update_one(
                {"_id": ClaimRecord.make_id(identity, epoch)},
                {"$set": {"claimed": False, "tx_hash": None, "claimed_at": None}},
            )
        except PyMongoError as e:
            raise ClaimStoreError(f"Could not release claim for {identity}: {e}") from e


class InMemoryClaimRepository(ClaimRepository):
    def __init__(self):
        self._records: dict[str, ClaimRecord] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get(self, identity: str, epoch: int) -> Optional[ClaimRecord]:
        return self._records.get(ClaimRecord.make_id(identity, epoch))

    async def reserve(self, identity: str, epoch: int) -> bool:
        claim_id = ClaimRecord.make_id(identity, epoch)

        async with self._locks[claim_id]:
            record = self._records.get(claim_id)
            if record is not None and record.claimed:
                return False

            self._records[claim_id] = ClaimRecord(
                _id=claim_id,
                identity=identity,
                epoch=epoch,
                claimed=True,
                claimed_at=datetime.now(timezone.utc),
            )
            return True

    async def confirm(self, identity: str, epoch: int, tx_hash: Optional[str]) -> None:
        claim_id = ClaimRecord.make_id(identity, epoch)
        record = self._records.get(claim_id)
        if record is not None:
            self._records[claim_id] = record.model_copy(update={"tx_hash": tx_hash})

    async def release(self, identity: str, epoch: int) -> None:
        claim_id = ClaimRecord.make_id(identity, epoch)
        record = self._records.get(claim_id)
        if record is not None:
            self._records[claim_id] = record.model_copy(
                update={"claimed": False, "tx_hash": None, "claimed_at": None}
            )
