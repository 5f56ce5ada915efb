"""
Dependencies de FastAPI para identidad e inyección de stores y servicios
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import Settings, get_settings
from app.core.security import decode_access_token
from app.database import Database
from app.ledger import get_ledger_client
from app.repositories.claim_repository import ClaimRepository, MongoClaimRepository
from app.repositories.question_repository import QuestionRepository
from app.repositories.score_repository import MongoScoreRepository, ScoreRepository
from app.services.leaderboard_service import LeaderboardService
from app.services.ledger_client import LedgerClient
from app.services.quiz_service import QuizService, QuizSessionRegistry
from app.services.reward_service import RewardService
from app.services.score_service import ScoreService

# Esquema de seguridad: espera un header "Authorization: Bearer <token>"
# auto_error=False para responder siempre 401 IdentityRequired
security = HTTPBearer(auto_error=False)

IDENTITY_REQUIRED = "IdentityRequired"


def _identity_required(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": IDENTITY_REQUIRED, "message": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_identity(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> str:
    """
    Dependency que valida el JWT de la wallet conectada.

    Se usa en los endpoints que requieren identidad.
    Retorna la dirección (identity) si el token es válido.
    """
    if credentials is None:
        raise _identity_required("Conecta tu wallet primero")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _identity_required("Token invalido o expirado")

    identity = payload.get("sub")
    if not identity:
        raise _identity_required("Payload del token invalido")

    return identity


# ============================================
# 📦 STORES
# ============================================

def get_score_repository(request: Request) -> ScoreRepository:
    """Almacén local de puntuaciones según SCORE_STORE_BACKEND"""
    if get_settings().score_store_backend == "memory":
        return request.app.state.score_store
    return MongoScoreRepository(Database.get_db())


def get_claim_repository(request: Request) -> ClaimRepository:
    if get_settings().score_store_backend == "memory":
        return request.app.state.claim_store
    return MongoClaimRepository(Database.get_db())


def get_question_repository() -> QuestionRepository:
    if get_settings().score_store_backend == "memory":
        return QuestionRepository()
    return QuestionRepository(Database.get_db())


def get_quiz_registry(request: Request) -> QuizSessionRegistry:
    return request.app.state.quiz_sessions


# ============================================
# 🧠 SERVICES
# ============================================

def get_score_service(
    store: Annotated[ScoreRepository, Depends(get_score_repository)],
    ledger: Annotated[LedgerClient, Depends(get_ledger_client)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> ScoreService:
    return ScoreService(store, ledger, max_score=settings.max_score)


def get_leaderboard_service(
    store: Annotated[ScoreRepository, Depends(get_score_repository)]
) -> LeaderboardService:
    return LeaderboardService(store)


def get_reward_service(
    leaderboard: Annotated[LeaderboardService, Depends(get_leaderboard_service)],
    claims: Annotated[ClaimRepository, Depends(get_claim_repository)],
    ledger: Annotated[LedgerClient, Depends(get_ledger_client)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> RewardService:
    return RewardService(
        leaderboard,
        claims,
        ledger,
        epoch=settings.leaderboard_epoch,
        top_n=settings.reward_top_n,
    )


def get_quiz_service(
    registry: Annotated[QuizSessionRegistry, Depends(get_quiz_registry)],
    question_repo: Annotated[QuestionRepository, Depends(get_question_repository)],
    score_service: Annotated[ScoreService, Depends(get_score_service)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> QuizService:
    return QuizService(
        registry,
        question_repo,
        score_service,
        reveal_delay=settings.reveal_delay_seconds,
        points_per_correct=settings.points_per_correct,
    )


# Alias de tipos para que se vea mas limpio en los endpoints
CurrentIdentity = Annotated[str, Depends(get_current_identity)]
Quiz = Annotated[QuizService, Depends(get_quiz_service)]
Leaderboard = Annotated[LeaderboardService, Depends(get_leaderboard_service)]
Rewards = Annotated[RewardService, Depends(get_reward_service)]
