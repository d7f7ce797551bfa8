"""
Pydantic schemas for admin review endpoints
"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID

from app.schemas.quiz import CamelModel
from app.services.violation_service import ViolationType, Severity


class ViolationRecord(CamelModel):
    id: UUID
    session_id: UUID
    subject_id: str
    topic_id: str
    violation_type: ViolationType
    severity: Severity
    count: int
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime


class ViolationList(CamelModel):
    violations: List[ViolationRecord]


class SubjectResult(CamelModel):
    """Aggregated result row: individual quiz scores plus the shared group score"""
    subject_id: str
    group_number: Optional[int] = None
    quiz_scores: Dict[str, int]
    group_score: Optional[float] = None
    total: float


class ResultsResponse(CamelModel):
    results: List[SubjectResult]
    max_possible_score: float
