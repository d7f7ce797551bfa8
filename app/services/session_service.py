"""
Quiz session store - issues and restores time-boxed session tokens
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import AlreadyCompleted, RequestInProgress, UnknownTopic
from app.models import QuizSession, SessionStatus, Submission
from app.services.question_bank import question_bank
from app.utils import clock
from app.utils.locks import keyed_locks

logger = logging.getLogger(__name__)


class SessionService:
    """
    One active session per (subject, topic)

    - Retakes are refused once a submission exists
    - An unexpired active session is restored, never re-issued, so a page
      reload does not grant a fresh timer
    - Expiry is evaluated lazily on access
    """

    TOKEN_BYTES = 32

    def start_session(
        self,
        db: Session,
        subject_id: str,
        topic_id: str,
        origin_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[QuizSession, bool]:
        """
        Start or restore a quiz session

        Returns:
            Tuple of (session, restored)

        Raises:
            UnknownTopic, AlreadyCompleted, RequestInProgress
        """
        if not question_bank.is_known_topic(topic_id):
            raise UnknownTopic(f"Unknown quiz topic: {topic_id}")

        with keyed_locks.hold(keyed_locks.quiz_key(subject_id, topic_id)):
            if self.has_submission(db, subject_id, topic_id):
                logger.info(f"Session refused, quiz already completed - subject: {subject_id}, topic: {topic_id}")
                raise AlreadyCompleted()

            now = clock.utcnow()
            existing = self.get_active_session(db, subject_id, topic_id)

            if existing and not existing.is_expired(now):
                logger.info(f"Quiz session restored - subject: {subject_id}, topic: {topic_id}")
                return existing, True

            if existing:
                existing.status = SessionStatus.EXPIRED.value
                db.flush()
                logger.info(f"Quiz session expired - subject: {subject_id}, topic: {topic_id}")

            session = QuizSession(
                subject_id=subject_id,
                topic_id=topic_id,
                session_token=secrets.token_urlsafe(self.TOKEN_BYTES),
                started_at=now,
                expires_at=now + timedelta(minutes=settings.QUIZ_SESSION_DURATION_MINUTES),
                status=SessionStatus.ACTIVE.value,
                tab_switch_count=0,
                origin_ip=origin_ip or "unknown",
                user_agent=user_agent,
            )
            db.add(session)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                return self._restore_winner(db, subject_id, topic_id)
            db.refresh(session)

        logger.info(f"Quiz session started - subject: {subject_id}, topic: {topic_id}, expires: {session.expires_at}")
        return session, False

    def _restore_winner(self, db: Session, subject_id: str, topic_id: str) -> Tuple[QuizSession, bool]:
        """
        A concurrent start inserted the active session first; hand that one back

        Raises:
            AlreadyCompleted: the pair was submitted in the meantime
            RequestInProgress: the competing session is gone again
        """
        if self.has_submission(db, subject_id, topic_id):
            raise AlreadyCompleted()

        winner = self.get_active_session(db, subject_id, topic_id)
        if not winner or winner.is_expired(clock.utcnow()):
            logger.warning(f"Concurrent session start lost without a winner - subject: {subject_id}, topic: {topic_id}")
            raise RequestInProgress()

        logger.info(f"Concurrent session start resolved to existing session - subject: {subject_id}, topic: {topic_id}")
        return winner, True

    def has_submission(self, db: Session, subject_id: str, topic_id: str) -> bool:
        return (
            db.query(Submission.id)
            .filter(Submission.subject_id == subject_id, Submission.topic_id == topic_id)
            .first()
            is not None
        )

    def get_active_session(self, db: Session, subject_id: str, topic_id: str) -> Optional[QuizSession]:
        """Most recent session still marked active for the pair (may be past expiry)"""
        return (
            db.query(QuizSession)
            .filter(
                QuizSession.subject_id == subject_id,
                QuizSession.topic_id == topic_id,
                QuizSession.status == SessionStatus.ACTIVE.value,
            )
            .order_by(QuizSession.started_at.desc())
            .first()
        )

    def get_latest_session(self, db: Session, subject_id: str, topic_id: str) -> Optional[QuizSession]:
        """Most recent session for the pair in any status"""
        return (
            db.query(QuizSession)
            .filter(QuizSession.subject_id == subject_id, QuizSession.topic_id == topic_id)
            .order_by(QuizSession.started_at.desc())
            .first()
        )


# Global instance
session_service = SessionService()
