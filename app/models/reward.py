from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ClaimRecord(BaseModel):
    """Registro de claim de una identidad en un epoch del leaderboard"""

    id: str = Field(..., alias="_id")  # "{epoch}:{identity}"
    identity: str
    epoch: int
    claimed: bool = False
    tx_hash: Optional[str] = None
    claimed_at: Optional[datetime] = None

    class Config:
        populate_by_name = True

    @staticmethod
    def make_id(identity: str, epoch: int) -> str:
        return f"{epoch}:{identity}"


class ClaimStatus(str, Enum):
    CLAIMED = "claimed"
    DENIED = "denied"
    FAILED = "failed"


class DenialReason(str, Enum):
    NOT_ELIGIBLE = "not_eligible"
    ALREADY_CLAIMED = "already_claimed"


class ClaimOutcome(BaseModel):
    """Resultado de intentar reclamar la recompensa"""

    status: ClaimStatus
    denial: Optional[DenialReason] = None
    rank: Optional[int] = None
    tx_hash: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def claimed(cls, rank: int, tx_hash: Optional[str]) -> "ClaimOutcome":
        return cls(status=ClaimStatus.CLAIMED, rank=rank, tx_hash=tx_hash)

    @classmethod
    def denied(cls, denial: DenialReason, rank: Optional[int] = None) -> "ClaimOutcome":
        return cls(status=ClaimStatus.DENIED, denial=denial, rank=rank)

    @classmethod
    def failed(cls, reason: str, rank: Optional[int] = None) -> "ClaimOutcome":
        return cls(status=ClaimStatus.FAILED, reason=reason, rank=rank)


class RewardStatus(BaseModel):
    """Estado de recompensa de una identidad (para el banner del leaderboard)"""

    identity: str
    rank: Optional[int] = None
    eligible: bool
    claimed: bool
    epoch: int
