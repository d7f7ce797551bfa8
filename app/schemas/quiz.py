"""
Pydantic schemas for quiz session, violation and submission requests and responses
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, Any, List, Optional
from datetime import datetime
from uuid import UUID

from app.services.violation_service import ViolationType, Severity


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionStartRequest(CamelModel):
    """Request schema for starting (or restoring) a quiz session"""
    topic_id: str = Field(..., min_length=1, max_length=64)


class SessionStartResponse(CamelModel):
    session_token: str
    expires_at: datetime
    restored: bool
    message: str


class ViolationReport(CamelModel):
    """Client-observed integrity signal; severity is never accepted from the client"""
    session_token: str = Field(..., min_length=1)
    violation_type: ViolationType
    count: int = Field(1, ge=1, le=10000)
    time_into_quiz_seconds: Optional[int] = Field(None, ge=0)


class ViolationResponse(CamelModel):
    id: UUID
    severity: Severity
    violation_type: ViolationType
    count: int


class QuizSubmitRequest(CamelModel):
    """
    Raw answers only. ``score`` and ``percentage`` are tolerated for older
    clients but never trusted; they are kept for tamper auditing.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    topic_id: str = Field(..., min_length=1, max_length=64)
    answers: Dict[str, Any]  # {question_id: option_index}, validated by the ledger
    time_spent_seconds: int = Field(..., ge=0)
    session_token: Optional[str] = None
    score: Optional[float] = None
    percentage: Optional[float] = None


class QuizSubmitResponse(CamelModel):
    submission_id: UUID
    score: int
    total_questions: int
    percentage: int
    correct_answers: int
    is_late: bool


class CompletionSubmission(CamelModel):
    id: UUID
    score: int
    percentage: int
    completed_at: Optional[datetime] = None


class CompletionStatus(CamelModel):
    completed: bool
    submission: Optional[CompletionSubmission] = None


class SubmissionSummary(CamelModel):
    id: UUID
    topic_id: str
    score: int
    total_questions: int
    percentage: int
    time_spent_seconds: int
    tab_switches: int
    is_late: bool
    created_at: Optional[datetime] = None


class SubmissionList(CamelModel):
    submissions: List[SubmissionSummary]
