from .question import Question
from .leaderboard import LeaderboardEntry, RankedEntry, UpsertResult
from .submission import SubmissionOutcome, SubmissionStatus
from .reward import ClaimRecord, ClaimOutcome, ClaimStatus, DenialReason, RewardStatus
from .quiz import QuizSnapshot, QuizState

__all__ = [
    "Question",
    "LeaderboardEntry",
    "RankedEntry",
    "UpsertResult",
    "SubmissionOutcome",
    "SubmissionStatus",
    "ClaimRecord",
    "ClaimOutcome",
    "ClaimStatus",
    "DenialReason",
    "RewardStatus",
    "QuizSnapshot",
    "QuizState",
]
