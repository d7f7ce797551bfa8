"""
Database models package
"""
from app.models.quiz_session import QuizSession, SessionStatus
from app.models.quiz_violation import QuizViolation
from app.models.submission import Submission
from app.models.group import Group, GroupMember, GroupSubmission
from app.models.question import Question

__all__ = [
    "QuizSession",
    "SessionStatus",
    "QuizViolation",
    "Submission",
    "Group",
    "GroupMember",
    "GroupSubmission",
    "Question",
]
