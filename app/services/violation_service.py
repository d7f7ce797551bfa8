"""
Violation classification and logging

Severity is a pure, total function of (violation type, count). Reports are an
append-only log: they never block the quiz, and reports against an expired
session are dropped.
"""
import enum
import logging
from typing import Optional
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.exceptions import SessionNotFound, SessionExpired
from app.models import QuizSession, QuizViolation, SessionStatus
from app.utils import clock

logger = logging.getLogger(__name__)


class ViolationType(str, enum.Enum):
    TAB_SWITCH = "tab_switch"
    PAGE_FOCUS_LOSS = "page_focus_loss"
    COPY_PASTE = "copy_paste"
    DEVTOOLS = "devtools"


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# (high_above, medium_above): count > high_above -> high, count > medium_above -> medium.
# None means the type is always high.
SEVERITY_TABLE = {
    ViolationType.TAB_SWITCH: (5, 2),
    ViolationType.PAGE_FOCUS_LOSS: (3, 1),
    ViolationType.DEVTOOLS: None,
    ViolationType.COPY_PASTE: None,
}


def classify_severity(violation_type, count: int) -> Severity:
    """
    Map a violation report to its severity

    Args:
        violation_type: ViolationType or its string value
        count: Occurrences carried by this report

    Returns:
        Severity

    Raises:
        ValueError: unknown violation type
    """
    violation_type = ViolationType(violation_type)
    thresholds = SEVERITY_TABLE[violation_type]
    if thresholds is None:
        return Severity.HIGH

    high_above, medium_above = thresholds
    if count > high_above:
        return Severity.HIGH
    if count > medium_above:
        return Severity.MEDIUM
    return Severity.LOW


class ViolationService:
    """Records integrity violations against an active quiz session"""

    def report_violation(
        self,
        db: Session,
        session_token: str,
        subject_id: str,
        violation_type,
        count: int = 1,
        time_into_quiz_seconds: Optional[int] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> QuizViolation:
        """
        Append a violation record for the caller's own session

        Raises:
            SessionNotFound: token unknown, issued to another subject, or not active
            SessionExpired: session is past expires_at; nothing is recorded
        """
        violation_type = ViolationType(violation_type)

        # Token and subject must match: tokens are not transferable
        session = (
            db.query(QuizSession)
            .filter(
                QuizSession.session_token == session_token,
                QuizSession.subject_id == subject_id,
                QuizSession.status == SessionStatus.ACTIVE.value,
            )
            .first()
        )
        if not session:
            logger.warning(f"Violation report for unknown session - subject: {subject_id}")
            raise SessionNotFound("Session not found or expired")

        now = clock.utcnow()
        if session.is_expired(now):
            session.status = SessionStatus.EXPIRED.value
            db.commit()
            logger.info(
                f"Violation dropped on expired session - subject: {subject_id}, "
                f"topic: {session.topic_id}, type: {violation_type.value}"
            )
            raise SessionExpired()

        severity = classify_severity(violation_type, count)

        violation = QuizViolation(
            session_id=session.id,
            subject_id=subject_id,
            topic_id=session.topic_id,
            violation_type=violation_type.value,
            severity=severity.value,
            count=count,
            details={
                "ip": ip or "unknown",
                "userAgent": user_agent,
                "timeIntoQuizSeconds": time_into_quiz_seconds,
            },
            timestamp=now,
        )
        db.add(violation)

        if violation_type == ViolationType.TAB_SWITCH:
            db.execute(
                update(QuizSession)
                .where(QuizSession.id == session.id)
                .values(tab_switch_count=QuizSession.tab_switch_count + count)
            )

        db.commit()
        db.refresh(violation)

        logger.info(
            f"Violation logged - subject: {subject_id}, topic: {session.topic_id}, "
            f"type: {violation_type.value}, severity: {severity.value}, count: {count}"
        )
        return violation

    def list_violations(
        self,
        db: Session,
        subject_id: Optional[str] = None,
        severity: Optional[str] = None,
        limit: int = 100,
    ):
        """Admin view of the violation log, newest first"""
        query = db.query(QuizViolation)
        if subject_id:
            query = query.filter(QuizViolation.subject_id == subject_id)
        if severity:
            query = query.filter(QuizViolation.severity == Severity(severity).value)
        return query.order_by(QuizViolation.timestamp.desc()).limit(limit).all()


# Global instance
violation_service = ViolationService()
