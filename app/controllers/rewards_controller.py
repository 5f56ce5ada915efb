"""
Controlador de recompensas - Elegibilidad y claim del top 3
"""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from app.core.dependencies import CurrentIdentity, Rewards
from app.models.reward import ClaimOutcome, ClaimStatus, RewardStatus
from app.repositories.claim_repository import ClaimStoreError
from app.repositories.score_repository import ScoreStoreError


router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("/me", response_model=RewardStatus)
async def get_my_reward_status(identity: CurrentIdentity, rewards: Rewards):
    """
    Obtener si la identidad actual puede reclamar la recompensa.
    """
    try:
        return await rewards.reward_status(identity)
    except (ClaimStoreError, ScoreStoreError) as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )


@router.post("/claim", response_model=ClaimOutcome)
async def claim_reward(identity: CurrentIdentity, rewards: Rewards):
    """
    Reclamar la recompensa.

    La posición se vuelve a validar en el momento del claim. Un claim
    denegado (no elegible o ya reclamado) no es un error: responde 200.
    Si la transacción falla responde 502 y se puede reintentar.
    """
    try:
        outcome = await rewards.claim(identity)
    except (ClaimStoreError, ScoreStoreError) as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    if outcome.status == ClaimStatus.FAILED:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=outcome.model_dump(mode="json")
        )

    return outcome
