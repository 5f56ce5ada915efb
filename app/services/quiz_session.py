"""
QuizSession - State machine for a single quiz run.

    READY -> ANSWERING -> (REVEALING -> ANSWERING)* -> COMPLETED
    any non-terminal state -> ABANDONED

Scoring is fixed: each correct answer adds `points_per_correct`, so the final
score is always points_per_correct * correct answers. After an answer the
session stays in REVEALING for `reveal_delay` seconds; that wait is an asyncio
task owned by the session, cancelled by restart() and abandon().
"""

import asyncio
import logging
from typing import Optional, Sequence

from app.core.logging_config import mask_identity
from app.models.question import Question
from app.models.quiz import QuizSnapshot, QuizState

logger = logging.getLogger(__name__)


class QuizSessionError(Exception):
    """Base exception for quiz session errors."""
    pass


class IdentityRequiredError(QuizSessionError):
    """Raised when an identity-gated action runs without a connected identity."""
    pass


class QuizSession:
    def __init__(
        self,
        questions: Sequence[Question],
        reveal_delay: float = 1.5,
        points_per_correct: int = 10
    ):
        if not questions:
            raise ValueError("A quiz needs at least one question")

        self.questions: tuple[Question, ...] = tuple(questions)
        self.reveal_delay = reveal_delay
        self.points_per_correct = points_per_correct

        self.identity: Optional[str] = None
        self.state = QuizState.READY
        self.current_index = 0
        self.score = 0
        self.selected: Optional[int] = None
        self.completed = False

        self._reveal_task: Optional[asyncio.Task] = None

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def max_score(self) -> int:
        return self.points_per_correct * self.question_count

    @property
    def current_question(self) -> Question:
        return self.questions[self.current_index]

    @property
    def reveal_pending(self) -> bool:
        return self._reveal_task is not None and not self._reveal_task.done()

    def _reset(self) -> None:
        self.current_index = 0
        self.score = 0
        self.selected = None
        self.completed = False

    def _cancel_reveal(self) -> None:
        if self._reveal_task is not None and not self._reveal_task.done():
            self._reveal_task.cancel()
        self._reveal_task = None

    # ============================================
    # TRANSITIONS
    # ============================================

    def start(self, identity: Optional[str]) -> None:
        """Start (or start over) the quiz for a connected identity."""
        if not identity:
            raise IdentityRequiredError("Connect an identity before starting the quiz")
        if self.state == QuizState.ABANDONED:
            raise QuizSessionError("Session was abandoned; create a new one")

        self._cancel_reveal()
        self._reset()
        self.identity = identity
        self.state = QuizState.ANSWERING
        logger.info(f"📝 Quiz started for {mask_identity(identity)} ({self.question_count} questions)")

    def select_answer(self, index: int) -> bool:
        """
        Record the answer for the current question.

        Returns False (and changes nothing) when the session is not waiting for
        an answer or the index is not one of the options. Duplicate input events
        land here while REVEALING.
        """
        if self.state != QuizState.ANSWERING:
            return False
        if not 0 <= index < len(self.current_question.options):
            return False

        self.selected = index
        if self.current_question.is_correct(index):
            self.score += self.points_per_correct

        self.state = QuizState.REVEALING
        self._reveal_task = asyncio.get_running_loop().create_task(self._reveal_then_advance())
        return True

    async def _reveal_then_advance(self) -> None:
        await asyncio.sleep(self.reveal_delay)
        self._advance()

    def _advance(self) -> None:
        if self.state != QuizState.REVEALING:
            return

        if self.current_index >= self.question_count - 1:
            self.completed = True
            self.state = QuizState.COMPLETED
            logger.info(
                f"🏁 Quiz completed for {mask_identity(self.identity)}: {self.score}/{self.max_score}"
            )
            return

        self.current_index += 1
        self.selected = None
        self.state = QuizState.ANSWERING

    async def wait_for_reveal(self) -> None:
        """Wait until the pending reveal (if any) has advanced the session."""
        task = self._reveal_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    def restart(self) -> None:
        """Back to READY, dropping any progress."""
        if self.state == QuizState.ABANDONED:
            raise QuizSessionError("Session was abandoned; create a new one")
        self._cancel_reveal()
        self._reset()
        self.state = QuizState.READY

    def abandon(self) -> bool:
        """Discard the session. Returns False if it already finished or was discarded."""
        if self.state in (QuizState.COMPLETED, QuizState.ABANDONED):
            return False

        self._cancel_reveal()
        self.state = QuizState.ABANDONED
        logger.info(f"🚪 Quiz abandoned by {mask_identity(self.identity)}")
        return True

    # ============================================
    # READ
    # ============================================

    def snapshot(self) -> QuizSnapshot:
        showing_question = self.state in (QuizState.ANSWERING, QuizState.REVEALING)
        question = self.current_question if showing_question else None

        return QuizSnapshot(
            state=self.state,
            identity=self.identity,
            question_index=self.current_index,
            question_count=self.question_count,
            score=self.score,
            max_score=self.max_score,
            completed=self.completed,
            prompt=question.prompt if question else None,
            options=list(question.options) if question else [],
            selected=self.selected,
            correct_index=question.correct_index if self.state == QuizState.REVEALING else None,
        )
