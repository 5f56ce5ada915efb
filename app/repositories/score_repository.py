"""
🏆 ScoreRepository - Almacén local de puntuaciones del leaderboard

Una entrada por identidad. La única escritura permitida es condicional:
solo se guarda si la nueva puntuación es estrictamente mayor que la guardada.

Dos implementaciones:
- MongoScoreRepository: colección `leaderboard_scores` (persistente)
- InMemoryScoreRepository: diccionario del proceso (desarrollo/testing)
"""

import asyncio
from collections import defaultdict
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.models.leaderboard import LeaderboardEntry, UpsertResult


class ScoreStoreError(Exception):
    """El almacén local no se pudo leer o escribir"""
    pass


class ScoreRepository:
    """Contrato del almacén local de puntuaciones"""

    async def get(self, identity: str) -> Optional[LeaderboardEntry]:
        raise NotImplementedError

    async def get_all(self) -> list[LeaderboardEntry]:
        raise NotImplementedError

    async def upsert_max(self, identity: str, score: int, updated_at: int) -> UpsertResult:
        """Escribe la puntuación solo si supera la guardada (o no hay ninguna)"""
        raise NotImplementedError


class MongoScoreRepository(ScoreRepository):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["leaderboard_scores"]

    @staticmethod
    def _to_entry(doc: dict) -> LeaderboardEntry:
        return LeaderboardEntry(
            identity=doc["identity"],
            score=doc["score"],
            updated_at=doc["updated_at"],
        )

    # ============================================
    # 📌 READ
    # ============================================

    async def get(self, identity: str) -> Optional[LeaderboardEntry]:
        try:
            doc = await self.collection.find_one({"_id": identity})
        except PyMongoError as e:
            raise ScoreStoreError(f"Could not read score for {identity}: {e}") from e
        return self._to_entry(doc) if doc else None

    async def get_all(self) -> list[LeaderboardEntry]:
        try:
            docs = await self.collection.find({}).to_list(length=None)
        except PyMongoError as e:
            raise ScoreStoreError(f"Could not read leaderboard: {e}") from e
        return [self._to_entry(doc) for doc in docs]

    # ============================================
    # 📌 CONDITIONAL WRITE
    # ============================================

    async def upsert_max(self, identity: str, score: int, updated_at: int) -> UpsertResult:
        """
        Compare-and-swap por clave.

        El filtro solo matchea si la puntuación guardada es menor. Si ya existe
        una igual o mayor, el upsert intenta insertar el mismo _id y Mongo
        responde DuplicateKeyError. Como el documento también puede haberse
        creado en paralelo, se reintenta la escritura condicional sin upsert.
        """
        query = {"_id": identity, "score": {"$lt": score}}
        update = {"$set": {
            "identity": identity,
            "score": score,
            "updated_at": updated_at,
        }}

        try:
            result = await self.collection.update_one(query, update, upsert=True)
        except DuplicateKeyError:
            return await self._update_existing(identity, query, update)
        except PyMongoError as e:
            raise ScoreStoreError(f"Could not write score for {identity}: {e}") from e

        if result.upserted_id is not None:
            return UpsertResult(created=True, stored_score=score)

        return UpsertResult(updated=result.modified_count > 0, stored_score=score)

    async def _update_existing(self, identity: str, query: dict, update: dict) -> UpsertResult:
        try:
            result = await self.collection.update_one(query, update)
        except PyMongoError as e:
            raise ScoreStoreError(f"Could not write score for {identity}: {e}") from e

        if result.modified_count > 0:
            return UpsertResult(updated=True, stored_score=update["$set"]["score"])

        existing = await self.get(identity)
        return UpsertResult(stored_score=existing.score if existing else None)


class InMemoryScoreRepository(ScoreRepository):
    def __init__(self, entries: Optional[list[LeaderboardEntry]] = None):
        self._entries: dict[str, LeaderboardEntry] = {}
        # Un lock por identidad: no hay lock global entre identidades
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

        for entry in entries or []:
            self._entries[entry.identity] = entry

    async def get(self, identity: str) -> Optional[LeaderboardEntry]:
        return self._entries.get(identity)

    async def get_all(self) -> list[LeaderboardEntry]:
        return list(self._entries.values())

    async def upsert_max(self, identity: str, score: int, updated_at: int) -> UpsertResult:
        async with self._locks[identity]:
            existing = self._entries.get(identity)

            if existing is not None and existing.score >= score:
                return UpsertResult(stored_score=existing.score)

            self._entries[identity] = LeaderboardEntry(
                identity=identity,
                score=score,
                updated_at=updated_at,
            )

            if existing is None:
                return UpsertResult(created=True, stored_score=score)
            return UpsertResult(updated=True, stored_score=score)
