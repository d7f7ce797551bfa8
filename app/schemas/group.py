"""
Pydantic schemas for group assignment upload, grading and roster management
"""
from pydantic import Field
from typing import Any, List, Optional
from datetime import datetime
from uuid import UUID

from app.schemas.quiz import CamelModel


class GroupUploadResponse(CamelModel):
    group_submission_id: UUID
    group_number: int
    file_url: str
    file_name: str


class GroupSubmissionFile(CamelModel):
    file_name: str
    file_url: str
    uploaded_at: datetime


class GroupStatus(CamelModel):
    """What a student sees about their group's assignment"""
    group_number: int
    locked: bool
    has_submitted: bool
    score: Optional[float] = None
    submission: Optional[GroupSubmissionFile] = None


class GradeRequest(CamelModel):
    """
    ``score`` is validated by the grading gateway so that non-numeric input
    maps to ``invalid_score`` instead of a schema error
    """
    score: Any = None
    feedback: Optional[str] = Field(None, max_length=5000)


class GradeResponse(CamelModel):
    id: UUID
    group_number: int
    score: float
    feedback: Optional[str] = None
    graded_by: str
    graded_at: datetime


class GroupSubmissionDetail(CamelModel):
    id: UUID
    group_number: int
    file_name: str
    file_url: str
    uploaded_by: str
    uploaded_at: datetime
    members: List[str] = []
    score: Optional[float] = None
    feedback: Optional[str] = None
    graded_by: Optional[str] = None
    graded_at: Optional[datetime] = None


class GroupSubmissionList(CamelModel):
    submissions: List[GroupSubmissionDetail]


class GroupRosterRequest(CamelModel):
    group_number: int = Field(..., ge=1)
    member_ids: List[str] = Field(default_factory=list)


class GroupRosterResponse(CamelModel):
    group_number: int
    locked: bool
    member_ids: List[str]
