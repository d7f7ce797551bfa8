"""
Submission ledger - authoritative server-side quiz scoring

Scoring strategy:
- Client sends raw answers only ({question_id: option_index})
- The question set is re-fetched from the question bank on every submit
- Score, total and percentage are computed here; any client-supplied values
  are kept for audit and never persisted as the result
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import AlreadyCompleted, InvalidAnswer, QuestionsNotFound, UnknownTopic
from app.models import SessionStatus, Submission
from app.services.question_bank import BankQuestion, question_bank
from app.services.session_service import session_service
from app.utils import clock
from app.utils.locks import keyed_locks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreResult:
    correct_count: int
    total_questions: int
    score: int
    percentage: int


def _is_option_index(value: Any) -> bool:
    # bool is an int subclass; True must not count as option 1
    return isinstance(value, int) and not isinstance(value, bool)


def validate_answers(
    questions: List[BankQuestion],
    answers: Dict[str, Any],
    max_options: int = None,
) -> None:
    """
    Reject any answer that is not an in-range option index

    Answers to known questions are checked against that question's own
    option count; answers keyed by unknown ids against the fixed ceiling.
    ``None`` means unanswered.

    Raises:
        InvalidAnswer
    """
    max_options = max_options or settings.MAX_OPTIONS_PER_QUESTION
    option_counts = {q.id: q.option_count for q in questions}

    for question_id, value in answers.items():
        if value is None:
            continue
        if not _is_option_index(value):
            raise InvalidAnswer(f"Answer for question {question_id} must be an option index")

        upper = option_counts.get(question_id) or max_options
        if value < 0 or value > upper - 1:
            raise InvalidAnswer(f"Answer for question {question_id} is out of range")


def score_answers(
    questions: List[BankQuestion],
    answers: Dict[str, Any],
    points_per_question: int = None,
) -> ScoreResult:
    """
    Compare answers against the bank's correct answers

    Percentage rounds half up.
    """
    if points_per_question is None:
        points_per_question = settings.POINTS_PER_QUESTION

    correct_count = 0
    for question in questions:
        value = answers.get(question.id)
        if _is_option_index(value) and value == question.correct_answer:
            correct_count += 1

    total_questions = len(questions)
    percentage = math.floor(correct_count / total_questions * 100 + 0.5) if total_questions else 0

    return ScoreResult(
        correct_count=correct_count,
        total_questions=total_questions,
        score=correct_count * points_per_question,
        percentage=percentage,
    )


class SubmissionService:
    """At most one graded submission per (subject, topic)"""

    def submit_quiz(
        self,
        db: Session,
        subject_id: str,
        topic_id: str,
        answers: Dict[str, Any],
        time_spent_seconds: int,
        session_token: Optional[str] = None,
        client_score: Optional[float] = None,
        client_percentage: Optional[float] = None,
    ) -> Submission:
        """
        Validate, score and persist a quiz submission

        Raises:
            UnknownTopic, AlreadyCompleted, QuestionsNotFound, InvalidAnswer
        """
        if not question_bank.is_known_topic(topic_id):
            raise UnknownTopic(f"Unknown quiz topic: {topic_id}")

        answers = {str(k): v for k, v in (answers or {}).items()}

        with keyed_locks.hold(keyed_locks.quiz_key(subject_id, topic_id)):
            if session_service.has_submission(db, subject_id, topic_id):
                logger.warning(f"Duplicate submission blocked - subject: {subject_id}, topic: {topic_id}")
                raise AlreadyCompleted()

            questions = question_bank.get_questions(db, topic_id)
            if not questions:
                logger.error(f"No questions configured for topic {topic_id}")
                raise QuestionsNotFound()

            validate_answers(questions, answers)
            result = score_answers(questions, answers)

            self._audit_client_values(subject_id, topic_id, result, client_score, client_percentage)

            now = clock.utcnow()
            session = session_service.get_latest_session(db, subject_id, topic_id)
            is_late = bool(session and session.is_expired(now))
            token_matches = bool(session and session_token and session.session_token == session_token)
            if session and session_token and not token_matches:
                logger.warning(f"Submission token does not match latest session - subject: {subject_id}, topic: {topic_id}")

            submission = Submission(
                subject_id=subject_id,
                topic_id=topic_id,
                session_id=session.id if session else None,
                answers=answers,
                correct_count=result.correct_count,
                score=result.score,
                total_questions=result.total_questions,
                percentage=result.percentage,
                time_spent_seconds=time_spent_seconds,
                tab_switches=session.tab_switch_count if session else 0,
                is_late=is_late,
                client_reported_score=client_score,
            )
            db.add(submission)

            if token_matches and session.status == SessionStatus.ACTIVE.value:
                session.status = SessionStatus.COMPLETED.value

            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.warning(f"Concurrent duplicate submission rejected - subject: {subject_id}, topic: {topic_id}")
                raise AlreadyCompleted()

            db.refresh(submission)

        logger.info(
            f"Quiz submitted - subject: {subject_id}, topic: {topic_id}, "
            f"score: {result.score} ({result.correct_count}/{result.total_questions} correct), late: {is_late}"
        )
        return submission

    def _audit_client_values(
        self,
        subject_id: str,
        topic_id: str,
        result: ScoreResult,
        client_score: Optional[float],
        client_percentage: Optional[float],
    ) -> None:
        """Log a tamper signal when the client claims a different result"""
        mismatched = (
            (client_score is not None and client_score != result.score)
            or (client_percentage is not None and client_percentage != result.percentage)
        )
        if mismatched:
            logger.warning(
                f"Tamper signal - subject: {subject_id}, topic: {topic_id}, "
                f"client score/percentage: {client_score}/{client_percentage}, "
                f"computed: {result.score}/{result.percentage}"
            )

    def get_submission(self, db: Session, subject_id: str, topic_id: str) -> Optional[Submission]:
        return (
            db.query(Submission)
            .filter(Submission.subject_id == subject_id, Submission.topic_id == topic_id)
            .first()
        )

    def list_for_subject(self, db: Session, subject_id: str) -> List[Submission]:
        return (
            db.query(Submission)
            .filter(Submission.subject_id == subject_id)
            .order_by(Submission.created_at.desc())
            .all()
        )


# Global instance
submission_service = SubmissionService()
