"""
Controlador de leaderboards - Endpoints de clasificación

La clasificación se calcula en cada request a partir del almacén de
puntuaciones (no se guarda precomputada).
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from app.core.dependencies import CurrentIdentity, Leaderboard
from app.models.leaderboard import RankedEntry
from app.repositories.score_repository import ScoreStoreError


router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


def _store_unavailable(error: ScoreStoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(error)
    )


class LeaderboardResponse(BaseModel):
    """Leaderboard ordenado (score desc, primero en llegar gana el empate)."""
    entries: list[RankedEntry]
    total: int


class MyPositionResponse(BaseModel):
    """Posición de la identidad conectada (rank=None si no tiene puntuación)."""
    rank: Optional[int] = None
    entry: Optional[RankedEntry] = None


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(
    leaderboard: Leaderboard,
    limit: Optional[int] = Query(None, ge=1, le=500)
):
    """
    Obtener el leaderboard completo (o los primeros `limit`).
    """
    try:
        entries = await leaderboard.rank()
    except ScoreStoreError as e:
        raise _store_unavailable(e)

    return LeaderboardResponse(
        entries=entries[:limit] if limit else entries,
        total=len(entries)
    )


@router.get("/me", response_model=MyPositionResponse)
async def get_my_leaderboard_position(identity: CurrentIdentity, leaderboard: Leaderboard):
    """
    Obtener la posición de la identidad actual en el leaderboard.
    """
    try:
        entry = await leaderboard.get_identity_rank(identity)
    except ScoreStoreError as e:
        raise _store_unavailable(e)

    if not entry:
        return MyPositionResponse()

    return MyPositionResponse(rank=entry.rank, entry=entry)
