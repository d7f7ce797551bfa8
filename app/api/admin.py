"""
Admin API endpoints: grading, violation review, results and group rosters
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from app.api.deps import require_admin
from app.database import get_db
from app.models import GroupSubmission
from app.schemas.admin import ResultsResponse, SubjectResult, ViolationList, ViolationRecord
from app.schemas.group import (
    GradeRequest,
    GradeResponse,
    GroupRosterRequest,
    GroupRosterResponse,
    GroupSubmissionDetail,
    GroupSubmissionList,
)
from app.services.grading_service import grading_service
from app.services.group_service import group_service
from app.services.identity_service import Principal
from app.services.results_service import results_service
from app.services.violation_service import Severity, violation_service

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)


def _submission_detail(submission: GroupSubmission) -> GroupSubmissionDetail:
    return GroupSubmissionDetail(
        id=submission.id,
        group_number=submission.group_number,
        file_name=submission.file_name,
        file_url=submission.file_url,
        uploaded_by=submission.uploaded_by,
        uploaded_at=submission.uploaded_at,
        members=[m.subject_id for m in submission.group.members],
        score=submission.score,
        feedback=submission.feedback,
        graded_by=submission.graded_by,
        graded_at=submission.graded_at,
    )


@router.put("/submissions/{submission_id}/grade", response_model=GradeResponse)
async def grade_group_submission(
    submission_id: UUID,
    grade: GradeRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Grade a group submission

    The score (0-100) is copied to the group, so every member shares it.
    Re-grading overwrites the previous grade.
    """
    submission = grading_service.grade_group_submission(
        db,
        grader=principal,
        submission_id=submission_id,
        score=grade.score,
        feedback=grade.feedback,
    )

    return GradeResponse(
        id=submission.id,
        group_number=submission.group_number,
        score=submission.score,
        feedback=submission.feedback,
        graded_by=submission.graded_by,
        graded_at=submission.graded_at,
    )


@router.get("/submissions/groups", response_model=GroupSubmissionList)
async def list_group_submissions(
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All group submissions ordered by group number"""
    return GroupSubmissionList(
        submissions=[_submission_detail(s) for s in grading_service.list_submissions(db)]
    )


@router.get("/submissions/groups/{submission_id}", response_model=GroupSubmissionDetail)
async def get_group_submission(
    submission_id: UUID,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """One group submission with its roster"""
    return _submission_detail(grading_service.get_submission(db, submission_id))


@router.get("/violations", response_model=ViolationList)
async def list_violations(
    subject_id: Optional[str] = Query(None, alias="subjectId"),
    severity: Optional[Severity] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Violation log, newest first"""
    rows = violation_service.list_violations(
        db,
        subject_id=subject_id,
        severity=severity.value if severity else None,
        limit=limit,
    )
    return ViolationList(
        violations=[
            ViolationRecord(
                id=row.id,
                session_id=row.session_id,
                subject_id=row.subject_id,
                topic_id=row.topic_id,
                violation_type=row.violation_type,
                severity=row.severity,
                count=row.count,
                details=row.details,
                timestamp=row.timestamp,
            )
            for row in rows
        ]
    )


@router.get("/results", response_model=ResultsResponse)
async def get_results(
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Per-subject quiz scores plus shared group score and total"""
    return ResultsResponse(
        results=[SubjectResult(**row) for row in results_service.get_results(db)],
        max_possible_score=results_service.max_possible_score(db),
    )


@router.post("/groups", response_model=GroupRosterResponse, status_code=201)
async def register_group(
    roster: GroupRosterRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Create a group or add members to its roster"""
    group = group_service.register_group(db, roster.group_number, roster.member_ids)
    return GroupRosterResponse(
        group_number=group.group_number,
        locked=group.locked,
        member_ids=[m.subject_id for m in group.members],
    )
