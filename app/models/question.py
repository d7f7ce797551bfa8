"""
Question model - read-only ground truth for scoring
"""
from sqlalchemy import Column, String, Integer, Text, Index
from app.database import Base, JSONType
import uuid


def _question_id():
    return str(uuid.uuid4())


class Question(Base):
    """
    Questions table - maintained by the question-bank tooling; this service
    only reads it
    """
    __tablename__ = "questions"

    id = Column(String(64), primary_key=True, default=_question_id)
    topic_id = Column(String(64), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    prompt = Column(Text, nullable=False)
    options = Column(JSONType, nullable=False)  # ["A", "B", "C", "D"]
    correct_answer = Column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_questions_topic_position", "topic_id", "position"),
    )

    def __repr__(self):
        return f"<Question(id={self.id}, topic_id={self.topic_id})>"
