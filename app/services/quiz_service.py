"""
QuizService - Quiz runs per identity and hand-off of the final score.

Sessions live in a QuizSessionRegistry kept for the lifetime of the process,
one live session per identity. Starting a new quiz discards the previous one.
"""

import logging
from typing import Optional

from app.core.logging_config import mask_identity
from app.models.quiz import QuizSnapshot, QuizState
from app.models.submission import SubmissionOutcome
from app.repositories.question_repository import QuestionRepository
from app.services.quiz_session import IdentityRequiredError, QuizSession, QuizSessionError
from app.services.score_service import ScoreService

logger = logging.getLogger(__name__)

__all__ = [
    "QuizService",
    "QuizSessionRegistry",
    "QuizServiceError",
    "IdentityRequiredError",
    "QuizNotStartedError",
    "QuizNotCompletedError",
    "QuizSessionError",
]


class QuizServiceError(Exception):
    """Base exception for quiz service errors."""
    pass


class QuizNotStartedError(QuizServiceError):
    """Raised when there is no live quiz for the identity."""
    pass


class QuizNotCompletedError(QuizServiceError):
    """Raised when submitting a score before the quiz is completed."""
    pass


class QuizSessionRegistry:
    """Live quiz sessions keyed by identity."""

    def __init__(self):
        self._sessions: dict[str, QuizSession] = {}

    def get(self, identity: str) -> Optional[QuizSession]:
        return self._sessions.get(identity)

    def put(self, identity: str, session: QuizSession) -> None:
        previous = self._sessions.get(identity)
        if previous is not None and previous is not session:
            previous.abandon()
        self._sessions[identity] = session

    def discard(self, identity: str) -> Optional[QuizSession]:
        session = self._sessions.pop(identity, None)
        if session is not None:
            session.abandon()
        return session

    def clear(self) -> None:
        for identity in list(self._sessions):
            self.discard(identity)

    def __len__(self) -> int:
        return len(self._sessions)


class QuizService:
    def __init__(
        self,
        registry: QuizSessionRegistry,
        question_repo: QuestionRepository,
        score_service: ScoreService,
        reveal_delay: float = 1.5,
        points_per_correct: int = 10
    ):
        self.registry = registry
        self.question_repo = question_repo
        self.score_service = score_service
        self.reveal_delay = reveal_delay
        self.points_per_correct = points_per_correct

    def _require_identity(self, identity: Optional[str]) -> str:
        if not identity:
            raise IdentityRequiredError("Connect an identity first")
        return identity

    def get_session(self, identity: Optional[str]) -> QuizSession:
        identity = self._require_identity(identity)
        session = self.registry.get(identity)
        if session is None:
            raise QuizNotStartedError("No quiz in progress")
        return session

    async def start_quiz(self, identity: Optional[str]) -> QuizSnapshot:
        """Create a fresh session and move it to ANSWERING."""
        identity = self._require_identity(identity)
        questions = await self.question_repo.get_quiz_questions()

        session = QuizSession(
            questions,
            reveal_delay=self.reveal_delay,
            points_per_correct=self.points_per_correct,
        )
        session.start(identity)
        self.registry.put(identity, session)
        return session.snapshot()

    def answer(self, identity: Optional[str], index: int) -> tuple[bool, QuizSnapshot]:
        """Select an answer. The bool is False when the input was ignored."""
        session = self.get_session(identity)
        accepted = session.select_answer(index)
        return accepted, session.snapshot()

    def restart(self, identity: Optional[str]) -> QuizSnapshot:
        session = self.get_session(identity)
        session.restart()
        return session.snapshot()

    def abandon(self, identity: Optional[str]) -> bool:
        identity = self._require_identity(identity)
        return self.registry.discard(identity) is not None

    def disconnect(self, identity: str) -> None:
        """Identity disconnected: drop whatever quiz it had running."""
        if self.registry.discard(identity) is not None:
            logger.info(f"🔌 Discarded quiz of disconnected identity {mask_identity(identity)}")

    async def submit_final_score(self, identity: Optional[str]) -> SubmissionOutcome:
        """Persist the score of a completed quiz."""
        session = self.get_session(identity)
        if session.state != QuizState.COMPLETED:
            raise QuizNotCompletedError("Finish the quiz before submitting the score")

        outcome = await self.score_service.submit(session.identity, session.score)
        logger.info(
            f"📤 Score {session.score} for {mask_identity(session.identity)}: "
            f"{outcome.status.value} (degraded={outcome.degraded})"
        )
        return outcome
