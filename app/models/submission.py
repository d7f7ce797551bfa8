"""
Submission model - the graded quiz result, one per (subject, topic)
"""
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from app.database import Base, JSONType
import uuid


class Submission(Base):
    """
    Submissions table - score, total_questions and percentage are computed by
    the server; client_reported_score is kept for audit only
    """
    __tablename__ = "submissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subject_id = Column(String(64), nullable=False, index=True)
    topic_id = Column(String(64), nullable=False)
    session_id = Column(Uuid(as_uuid=True), ForeignKey("quiz_sessions.id"), nullable=True)
    answers = Column(JSONType, nullable=False)  # {question_id: option_index}
    correct_count = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)
    time_spent_seconds = Column(Integer, nullable=False)
    tab_switches = Column(Integer, nullable=False, default=0)
    is_late = Column(Boolean, nullable=False, default=False)
    client_reported_score = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    # Second writer for the same pair fails at insert time
    __table_args__ = (
        UniqueConstraint("subject_id", "topic_id", name="uq_submission_subject_topic"),
    )

    def __repr__(self):
        return f"<Submission(subject_id={self.subject_id}, topic_id={self.topic_id}, score={self.score})>"
