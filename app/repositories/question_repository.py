"""
QuestionRepository - Lectura del banco de preguntas.

Las preguntas son contenido estático: se leen de la colección `questions`
(ordenadas por `order`). Si no hay ninguna, o no son exactamente 10,
se usa el banco por defecto.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.question_bank import DEFAULT_QUESTIONS, QUIZ_LENGTH
from app.models.question import Question

logger = logging.getLogger(__name__)


class QuestionRepository:
    def __init__(self, db: Optional[AsyncIOMotorDatabase] = None):
        self.db = db
        self.collection = db["questions"] if db is not None else None

    async def get_quiz_questions(self) -> list[Question]:
        """Retorna las preguntas del quiz en orden"""
        if self.collection is None:
            return list(DEFAULT_QUESTIONS)

        cursor = self.collection.find({}).sort("order", 1)
        docs = await cursor.to_list(length=None)

        if not docs:
            return list(DEFAULT_QUESTIONS)

        if len(docs) != QUIZ_LENGTH:
            # Con otra cantidad la puntuación final no cabe en [0, max_score]
            logger.warning(
                f"⚠️ `questions` has {len(docs)} questions, expected {QUIZ_LENGTH}; using the default bank"
            )
            return list(DEFAULT_QUESTIONS)

        logger.info(f"📚 Loaded {len(docs)} questions from MongoDB")
        return [
            Question(
                prompt=doc["prompt"],
                options=doc["options"],
                correct_index=doc["correct_index"],
            )
            for doc in docs
        ]
