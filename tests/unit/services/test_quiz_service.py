"""
Unit tests for QuizService and the session registry
"""

import pytest

from app.models.quiz import QuizState
from app.models.submission import SubmissionStatus
from app.repositories.question_repository import QuestionRepository
from app.services.quiz_service import (
    IdentityRequiredError,
    QuizNotCompletedError,
    QuizNotStartedError,
    QuizService,
    QuizSessionRegistry,
)
from app.services.score_service import ScoreService

ALICE = "0x" + "a1" * 32
BOB = "0x" + "b2" * 32


@pytest.fixture
def registry():
    return QuizSessionRegistry()


@pytest.fixture
def quiz(registry, score_store, ledger):
    return QuizService(
        registry,
        QuestionRepository(),
        ScoreService(score_store, ledger),
        reveal_delay=0,
    )


async def finish(quiz: QuizService, identity: str, answers: list[int]) -> None:
    for index in answers:
        quiz.answer(identity, index)
        await quiz.get_session(identity).wait_for_reveal()


class TestQuizService:

    @pytest.mark.asyncio
    async def test_start_requires_identity(self, quiz):
        with pytest.raises(IdentityRequiredError):
            await quiz.start_quiz(None)

    @pytest.mark.asyncio
    async def test_start_quiz(self, quiz, registry):
        snapshot = await quiz.start_quiz(ALICE)

        assert snapshot.state == QuizState.ANSWERING
        assert snapshot.question_index == 0
        assert snapshot.question_count == 10
        assert snapshot.max_score == 100
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_start_replaces_previous_session(self, quiz, correct_answers):
        await quiz.start_quiz(ALICE)
        old = quiz.get_session(ALICE)
        quiz.answer(ALICE, correct_answers[0])

        await quiz.start_quiz(ALICE)

        assert old.state == QuizState.ABANDONED
        assert quiz.get_session(ALICE) is not old
        assert quiz.get_session(ALICE).score == 0

    @pytest.mark.asyncio
    async def test_sessions_are_per_identity(self, quiz, correct_answers):
        await quiz.start_quiz(ALICE)
        await quiz.start_quiz(BOB)

        quiz.answer(ALICE, correct_answers[0])

        assert quiz.get_session(ALICE).score == 10
        assert quiz.get_session(BOB).score == 0

    @pytest.mark.asyncio
    async def test_answer_without_session(self, quiz):
        with pytest.raises(QuizNotStartedError):
            quiz.answer(ALICE, 0)

    @pytest.mark.asyncio
    async def test_duplicate_answer_is_ignored(self, quiz, correct_answers):
        quiz.reveal_delay = 60
        await quiz.start_quiz(ALICE)

        accepted, _ = quiz.answer(ALICE, correct_answers[0])
        ignored, snapshot = quiz.answer(ALICE, correct_answers[0])

        assert accepted is True
        assert ignored is False
        assert snapshot.score == 10

        quiz.abandon(ALICE)

    @pytest.mark.asyncio
    async def test_submit_requires_completed_quiz(self, quiz):
        await quiz.start_quiz(ALICE)

        with pytest.raises(QuizNotCompletedError):
            await quiz.submit_final_score(ALICE)

    @pytest.mark.asyncio
    async def test_submit_final_score(self, quiz, score_store, correct_answers):
        await quiz.start_quiz(ALICE)
        await finish(quiz, ALICE, correct_answers)

        outcome = await quiz.submit_final_score(ALICE)

        assert outcome.status == SubmissionStatus.ACCEPTED
        assert outcome.newly_stored is True
        assert (await score_store.get(ALICE)).score == 100

    @pytest.mark.asyncio
    async def test_abandon(self, quiz):
        await quiz.start_quiz(ALICE)

        assert quiz.abandon(ALICE) is True
        assert quiz.abandon(ALICE) is False

        with pytest.raises(QuizNotStartedError):
            quiz.get_session(ALICE)

    @pytest.mark.asyncio
    async def test_disconnect_discards_session(self, quiz, registry):
        await quiz.start_quiz(ALICE)
        session = quiz.get_session(ALICE)

        quiz.disconnect(ALICE)

        assert session.state == QuizState.ABANDONED
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_restart(self, quiz, correct_answers):
        await quiz.start_quiz(ALICE)
        quiz.answer(ALICE, correct_answers[0])

        snapshot = quiz.restart(ALICE)

        assert snapshot.state == QuizState.READY
        assert snapshot.score == 0

    @pytest.mark.asyncio
    async def test_registry_clear(self, quiz, registry):
        await quiz.start_quiz(ALICE)
        await quiz.start_quiz(BOB)

        registry.clear()

        assert len(registry) == 0
