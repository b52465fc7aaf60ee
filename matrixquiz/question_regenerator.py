"""
Single-question regeneration for MatrixQuiz.

Regenerates one question at a time through the generation service. Only one
request per question id may be in flight; a second request for the same id
while the first is running is ignored. Requests for different ids run
concurrently.
"""

import asyncio
import logging
import threading
from typing import Optional, Set

from matrixquiz.figures import FigureBoard
from matrixquiz.generation import regenerate_question
from matrixquiz.questions import Question

logger = logging.getLogger(__name__)


class QuestionRegenerator:
    """Single-flight wrapper around :func:`regenerate_question`.

    Args:
        provider: LLMProvider used for the calls.
        figures: Optional board whose snapshot for a regenerated question is
            dropped, since it belongs to the old figure.
        grade, subject: Context passed to the prompt.
    """

    def __init__(self, provider, figures: Optional[FigureBoard] = None, grade: str = "", subject: str = ""):
        self.provider = provider
        self.figures = figures
        self.grade = grade
        self.subject = subject
        self._busy: Set[str] = set()
        self._lock = threading.Lock()

    def is_busy(self, question_id: str) -> bool:
        with self._lock:
            return question_id in self._busy

    def _claim(self, question_id: str) -> bool:
        with self._lock:
            if question_id in self._busy:
                return False
            self._busy.add(question_id)
            return True

    def _release(self, question_id: str):
        with self._lock:
            self._busy.discard(question_id)

    async def regenerate(
        self,
        question: Question,
        notes: Optional[str] = None,
        grade: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> Optional[Question]:
        """Regenerate ``question``.

        ``grade`` and ``subject`` override the values given at construction.

        Returns:
            The replacement (same id), or ``None`` when a request for this
            question is already in flight.

        Raises:
            GenerationError: if the call fails; no state is changed.
        """
        if not self._claim(question.id):
            logger.info("Regeneration already running for question %s; ignoring request", question.id)
            return None
        try:
            fresh = await asyncio.to_thread(
                regenerate_question,
                self.provider,
                question,
                self.grade if grade is None else grade,
                self.subject if subject is None else subject,
                notes,
            )
        finally:
            self._release(question.id)
        if self.figures is not None:
            self.figures.forget(question.id)
        logger.info("Regenerated question %s", question.id)
        return fresh
