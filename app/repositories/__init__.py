from .score_repository import (
    ScoreRepository,
    MongoScoreRepository,
    InMemoryScoreRepository,
    ScoreStoreError,
)
from .claim_repository import (
    ClaimRepository,
    MongoClaimRepository,
    InMemoryClaimRepository,
    ClaimStoreError,
)
from .question_repository import QuestionRepository

__all__ = [
    "ScoreRepository",
    "MongoScoreRepository",
    "InMemoryScoreRepository",
    "ScoreStoreError",
    "ClaimRepository",
    "MongoClaimRepository",
    "InMemoryClaimRepository",
    "ClaimStoreError",
    "QuestionRepository",
]
