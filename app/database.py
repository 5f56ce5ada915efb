"""
🔌 Database Connection Setup - MongoDB

Configuración centralizada para conectar a MongoDB (almacén local del leaderboard)
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class Database:
    """Singleton para la conexión a MongoDB"""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect(cls):
        """Conecta a MongoDB"""
        if cls.client is None:
            settings = get_settings()

            if not settings.mongodb_uri:
                raise ValueError("MONGODB_URI not configured")

            cls.client = AsyncIOMotorClient(
                settings.mongodb_uri,
                maxPoolSize=10,
                minPoolSize=2,
            )

            # Nombre de la base de datos
            cls.db = cls.client[settings.mongodb_db_name]

            # Test de conexión
            await cls.client.admin.command("ping")
            logger.info(f"✅ Connected to MongoDB: {settings.mongodb_db_name}")

    @classmethod
    async def disconnect(cls):
        """Cierra la conexión"""
        if cls.client is not None:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("❌ Disconnected from MongoDB")

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Retorna la instancia de la base de datos"""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db


# ============================================
# 🏗️ CREAR ÍNDICES (al arrancar con SCORE_STORE_BACKEND=mongo)
# ============================================

async def create_indexes():
    """
    Crea los índices necesarios para optimizar queries

    El _id de cada colección ya es único: una entrada por identidad
    en leaderboard_scores y un claim por (epoch, identidad) en reward_claims.
    """
    db = Database.get_db()

    # Índices para leaderboard_scores
    await db.leaderboard_scores.create_index([("score", -1), ("updated_at", 1)])

    # Índices para reward_claims
    await db.reward_claims.create_index([("epoch", 1), ("claimed", 1)])
    await db.reward_claims.create_index("identity")

    # Índices para questions
    await db.questions.create_index("order", unique=True)

    logger.info("✅ Indexes created successfully")
