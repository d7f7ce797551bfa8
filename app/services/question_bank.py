"""
Question bank reader - read-only ground truth for server-side scoring
"""
import logging
from dataclasses import dataclass
from typing import List
from sqlalchemy.orm import Session

from app.config import settings
from app.models import Question

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BankQuestion:
    """Scoring view of a question. Never serialized to students."""
    id: str
    options: List[str]
    correct_answer: int

    @property
    def option_count(self) -> int:
        return len(self.options)


class QuestionBank:
    """Fetches the current, ordered question set for a topic"""

    def is_known_topic(self, topic_id: str) -> bool:
        return topic_id in settings.QUIZ_TOPICS

    def get_questions(self, db: Session, topic_id: str) -> List[BankQuestion]:
        rows = (
            db.query(Question)
            .filter(Question.topic_id == topic_id)
            .order_by(Question.position, Question.id)
            .all()
        )
        logger.debug(f"Loaded {len(rows)} questions for topic {topic_id}")
        return [
            BankQuestion(id=str(row.id), options=list(row.options or []), correct_answer=row.correct_answer)
            for row in rows
        ]

    def count_questions(self, db: Session, topic_id: str) -> int:
        return db.query(Question).filter(Question.topic_id == topic_id).count()


# Global instance
question_bank = QuestionBank()
