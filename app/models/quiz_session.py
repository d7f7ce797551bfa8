"""
QuizSession model - one time-boxed attempt at a topic
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, Index, Uuid, text
from sqlalchemy.sql import func
from app.database import Base
import enum
import uuid


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"


class QuizSession(Base):
    """
    Quiz sessions table - the session token is a bearer credential scoped to
    one (subject, topic) pair and valid only while active and unexpired
    """
    __tablename__ = "quiz_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subject_id = Column(String(64), nullable=False)
    topic_id = Column(String(64), nullable=False)
    session_token = Column(String(128), unique=True, nullable=False, index=True)
    started_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=SessionStatus.ACTIVE.value)
    tab_switch_count = Column(Integer, nullable=False, default=0)
    origin_ip = Column(String(64))
    user_agent = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_quiz_sessions_subject_topic", "subject_id", "topic_id"),
        # At most one active session per (subject, topic)
        Index(
            "uq_quiz_sessions_active_pair",
            "subject_id",
            "topic_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    def is_expired(self, now) -> bool:
        return now > self.expires_at

    def is_valid(self, now) -> bool:
        """Valid for scoring and violation purposes"""
        return self.status == SessionStatus.ACTIVE.value and not self.is_expired(now)

    def __repr__(self):
        return f"<QuizSession(subject_id={self.subject_id}, topic_id={self.topic_id}, status={self.status})>"
