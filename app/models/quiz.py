from enum import Enum
from typing import Optional
from pydantic import BaseModel


class QuizState(str, Enum):
    READY = "ready"
    ANSWERING = "answering"
    REVEALING = "revealing"   # mostrando la respuesta correcta antes de avanzar
    COMPLETED = "completed"
    ABANDONED = "abandoned"   # sesión descartada, no se persiste nada


class QuizSnapshot(BaseModel):
    """Vista de solo lectura del estado de una sesión de quiz"""

    state: QuizState
    identity: Optional[str] = None
    question_index: int
    question_count: int
    score: int
    max_score: int
    completed: bool

    prompt: Optional[str] = None
    options: list[str] = []
    selected: Optional[int] = None
    # Solo se revela después de responder
    correct_index: Optional[int] = None
