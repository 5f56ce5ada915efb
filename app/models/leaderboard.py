from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field


def now_ms() -> int:
    """Timestamp actual en milisegundos (epoch)"""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class LeaderboardEntry(BaseModel):
    """Mejor puntuación registrada para una identidad (una por identidad)"""

    identity: str
    score: int = Field(..., ge=0)
    updated_at: int  # epoch ms de cuando se alcanzó esta puntuación

    def sort_key(self) -> tuple[int, int, str]:
        # score desc, el primero en llegar gana el empate
        return (-self.score, self.updated_at, self.identity)


class RankedEntry(BaseModel):
    """Entrada del leaderboard con su posición (1-based)"""

    rank: int
    identity: str
    score: int
    updated_at: int


class UpsertResult(BaseModel):
    """Resultado de una escritura condicional (solo si mejora la puntuación)"""

    created: bool = False   # primera entrada para esta identidad
    updated: bool = False   # entrada existente mejorada
    stored_score: Optional[int] = None  # puntuación que queda guardada

    @property
    def changed(self) -> bool:
        return self.created or self.updated
