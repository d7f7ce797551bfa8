"""
QuizViolation model - append-only integrity signal log
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.database import Base, JSONType
import uuid


class QuizViolation(Base):
    """
    Quiz violations table - one row per client report, never updated.
    Severity is derived server-side from (violation_type, count).
    """
    __tablename__ = "quiz_violations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid(as_uuid=True), ForeignKey("quiz_sessions.id"), nullable=False, index=True)
    subject_id = Column(String(64), nullable=False, index=True)
    topic_id = Column(String(64), nullable=False)
    violation_type = Column(String(30), nullable=False)
    severity = Column(String(10), nullable=False)
    count = Column(Integer, nullable=False, default=1)
    details = Column(JSONType)  # {"ip", "userAgent", "timeIntoQuizSeconds"}
    timestamp = Column(DateTime, nullable=False, index=True)

    session = relationship("QuizSession")

    def __repr__(self):
        return f"<QuizViolation(type={self.violation_type}, severity={self.severity}, subject_id={self.subject_id})>"
