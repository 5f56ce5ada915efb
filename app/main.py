"""
Entry point de la API
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.database import Database, create_indexes
from app.ledger import Ledger
from app.repositories.claim_repository import InMemoryClaimRepository
from app.repositories.score_repository import InMemoryScoreRepository
from app.services.quiz_service import QuizSessionRegistry

from app.controllers.auth_controller import router as auth_router
from app.controllers.quiz_controller import router as quiz_router
from app.controllers.leaderboard_controller import router as leaderboard_router
from app.controllers.rewards_controller import router as rewards_router
from app.controllers.health_controller import router as health_router

settings = get_settings()
logger = configure_logging(settings.log_level)

# Orígenes permitidos (el frontend con la wallet)
CORS_ORIGINS = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.score_store_backend == "mongo":
        await Database.connect()
        await create_indexes()
    else:
        logger.warning("⚠️ SCORE_STORE_BACKEND=memory - scores are lost on restart")
    await Ledger.connect()

    yield

    # Los quizzes a medias se descartan, nunca se guardan
    app.state.quiz_sessions.clear()
    await Ledger.disconnect()
    await Database.disconnect()


app = FastAPI(
    title="Quiz Leaderboard API",
    description="Quiz, leaderboard y recompensas para el top 3",
    version="1.0.0",
    lifespan=lifespan
)

# Estado del proceso: sesiones de quiz vivas y stores en memoria (SCORE_STORE_BACKEND=memory)
app.state.quiz_sessions = QuizSessionRegistry()
app.state.score_store = InMemoryScoreRepository()
app.state.claim_store = InMemoryClaimRepository()

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(quiz_router)
app.include_router(leaderboard_router)
app.include_router(rewards_router)


@app.get("/")
async def root():
    # Sirve para verificar que la API está levantada
    return {
        "name": "Quiz Leaderboard API",
        "version": "1.0.0",
        "docs": "/docs"
    }
