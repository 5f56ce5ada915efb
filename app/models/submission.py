from enum import Enum
from typing import Optional
from pydantic import BaseModel


class SubmissionStatus(str, Enum):
    ACCEPTED = "accepted"
    SUPERSEDED = "superseded"  # ya había una puntuación igual o mayor
    FAILED = "failed"          # ni el ledger ni el almacén local respondieron


class SubmissionOutcome(BaseModel):
    """Resultado observable de enviar una puntuación"""

    status: SubmissionStatus
    newly_stored: bool = False
    degraded: bool = False  # persistido solo en el almacén local (ledger caído)
    stored_score: Optional[int] = None
    tx_hash: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def accepted(cls, newly_stored: bool, **kwargs) -> "SubmissionOutcome":
        return cls(status=SubmissionStatus.ACCEPTED, newly_stored=newly_stored, **kwargs)

    @classmethod
    def superseded(cls, **kwargs) -> "SubmissionOutcome":
        return cls(status=SubmissionStatus.SUPERSEDED, **kwargs)

    @classmethod
    def failed(cls, reason: str, **kwargs) -> "SubmissionOutcome":
        return cls(status=SubmissionStatus.FAILED, reason=reason, **kwargs)

    @property
    def ok(self) -> bool:
        return self.status != SubmissionStatus.FAILED
