"""
Controlador del quiz - Endpoints para jugar y enviar la puntuación
"""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.dependencies import CurrentIdentity, Quiz
from app.models.quiz import QuizSnapshot
from app.models.submission import SubmissionOutcome, SubmissionStatus
from app.services.quiz_service import (
    QuizNotCompletedError,
    QuizNotStartedError,
    QuizSessionError,
)
from app.services.score_service import InvalidScoreError


router = APIRouter(prefix="/quiz", tags=["quiz"])


class AnswerRequest(BaseModel):
    """Índice de la opción elegida (0-3). Fuera de rango se ignora."""
    index: int


class AnswerResponse(BaseModel):
    """Resultado de responder: accepted=False si la respuesta se ignoró."""
    accepted: bool
    quiz: QuizSnapshot


class QuestionSummary(BaseModel):
    prompt: str
    options: list[str]


class QuestionsResponse(BaseModel):
    """Preguntas del quiz sin las respuestas correctas."""
    count: int
    max_score: int
    questions: list[QuestionSummary]


@router.get("/questions", response_model=QuestionsResponse)
async def get_questions(quiz: Quiz):
    """
    Obtener las preguntas del quiz (sin revelar la respuesta correcta).
    """
    questions = await quiz.question_repo.get_quiz_questions()

    return QuestionsResponse(
        count=len(questions),
        max_score=len(questions) * quiz.points_per_correct,
        questions=[
            QuestionSummary(prompt=q.prompt, options=list(q.options))
            for q in questions
        ]
    )


@router.post("/start", response_model=QuizSnapshot, status_code=status.HTTP_201_CREATED)
async def start_quiz(identity: CurrentIdentity, quiz: Quiz):
    """
    Empezar un quiz nuevo.

    Si había uno en curso, se descarta.
    """
    return await quiz.start_quiz(identity)


@router.get("", response_model=QuizSnapshot)
async def get_quiz(identity: CurrentIdentity, quiz: Quiz):
    """
    Obtener el estado del quiz en curso.
    """
    try:
        return quiz.get_session(identity).snapshot()
    except QuizNotStartedError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.post("/answer", response_model=AnswerResponse)
async def answer_question(request: AnswerRequest, identity: CurrentIdentity, quiz: Quiz):
    """
    Responder la pregunta actual.

    Las respuestas duplicadas o fuera de tiempo se ignoran (accepted=False),
    no son un error.
    """
    try:
        accepted, snapshot = quiz.answer(identity, request.index)
    except QuizNotStartedError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return AnswerResponse(accepted=accepted, quiz=snapshot)


@router.post("/restart", response_model=QuizSnapshot)
async def restart_quiz(identity: CurrentIdentity, quiz: Quiz):
    """
    Volver al estado inicial (READY) del quiz en curso.
    """
    try:
        return quiz.restart(identity)
    except QuizNotStartedError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except QuizSessionError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.post("/abandon", status_code=status.HTTP_204_NO_CONTENT)
async def abandon_quiz(identity: CurrentIdentity, quiz: Quiz):
    """
    Abandonar el quiz en curso. No se guarda ninguna puntuación parcial.
    """
    if not quiz.abandon(identity):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No quiz in progress"
        )


@router.post("/submit", response_model=SubmissionOutcome)
async def submit_score(identity: CurrentIdentity, quiz: Quiz):
    """
    Enviar la puntuación final del quiz completado.

    Se intenta primero el ledger; si falla, se guarda en el almacén local
    (degraded=True). Solo responde 503 si ambos fallan.
    """
    try:
        outcome = await quiz.submit_final_score(identity)
    except QuizNotStartedError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except QuizNotCompletedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except InvalidScoreError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    if outcome.status == SubmissionStatus.FAILED:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=outcome.model_dump(mode="json")
        )

    return outcome
