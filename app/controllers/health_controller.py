"""
Controlador de salud - Endpoint de comprobación del servicio
"""

from fastapi import APIRouter
from pydantic import BaseModel

from app.core.config import get_settings
from app.database import Database
from app.ledger import Ledger
from app.services.ledger_client import DisabledLedgerClient


router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Respuesta del chequeo de estado."""
    status: str
    score_store: str
    database: str
    ledger: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Endpoint de verificación de estado.

    Comprueba que la API esté en funcionamiento, qué almacén de puntuaciones
    usa y si el ledger está configurado (si no, modo degradado).
    """
    db_status = "connected" if Database.db is not None else "disconnected"

    if Ledger.client is None:
        ledger_status = "disconnected"
    elif isinstance(Ledger.client, DisabledLedgerClient):
        ledger_status = "disabled"
    else:
        ledger_status = "configured"

    return HealthResponse(
        status="ok",
        score_store=get_settings().score_store_backend,
        database=db_status,
        ledger=ledger_status
    )
