"""
Quiz session, violation and submission API endpoints
"""

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session
import logging

from app.api.deps import client_ip, get_current_principal
from app.database import get_db
from app.schemas.quiz import (
    CompletionStatus,
    CompletionSubmission,
    QuizSubmitRequest,
    QuizSubmitResponse,
    SessionStartRequest,
    SessionStartResponse,
    SubmissionList,
    SubmissionSummary,
    ViolationReport,
    ViolationResponse,
)
from app.services.identity_service import Principal
from app.services.session_service import session_service
from app.services.submission_service import submission_service
from app.services.violation_service import violation_service


router = APIRouter(prefix="/api/quiz", tags=["quiz"])
logger = logging.getLogger(__name__)


# Plain def: FastAPI runs it in the threadpool, so waiting on the keyed lock never blocks the event loop
@router.post("/start", response_model=SessionStartResponse, status_code=201)
def start_quiz_session(
    payload: SessionStartRequest,
    request: Request,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Start a quiz session, or restore the caller's unexpired one

    - Refused once the quiz has been submitted (no retakes)
    - 201 for a new session, 200 for a restored one
    """
    session, restored = session_service.start_session(
        db,
        subject_id=principal.subject_id,
        topic_id=payload.topic_id,
        origin_ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    if restored:
        response.status_code = 200

    return SessionStartResponse(
        session_token=session.session_token,
        expires_at=session.expires_at,
        restored=restored,
        message="Existing session restored" if restored else "Session created successfully",
    )


@router.post("/violations", response_model=ViolationResponse, status_code=201)
async def report_violation(
    report: ViolationReport,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Log an integrity violation for the caller's active session

    Severity is derived server-side. Reports never block the quiz.
    """
    violation = violation_service.report_violation(
        db,
        session_token=report.session_token,
        subject_id=principal.subject_id,
        violation_type=report.violation_type,
        count=report.count,
        time_into_quiz_seconds=report.time_into_quiz_seconds,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    return ViolationResponse(
        id=violation.id,
        severity=violation.severity,
        violation_type=violation.violation_type,
        count=violation.count,
    )


# Sync: holds the keyed lock, see start_quiz_session
@router.post("/submit", response_model=QuizSubmitResponse, status_code=201)
def submit_quiz(
    submission: QuizSubmitRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Submit raw answers and receive the server-computed score

    Any score/percentage in the payload is ignored for grading.
    """
    result = submission_service.submit_quiz(
        db,
        subject_id=principal.subject_id,
        topic_id=submission.topic_id,
        answers=submission.answers,
        time_spent_seconds=submission.time_spent_seconds,
        session_token=submission.session_token,
        client_score=submission.score,
        client_percentage=submission.percentage,
    )

    return QuizSubmitResponse(
        submission_id=result.id,
        score=result.score,
        total_questions=result.total_questions,
        percentage=result.percentage,
        correct_answers=result.correct_count,
        is_late=result.is_late,
    )


@router.get("/check-completion", response_model=CompletionStatus)
async def check_completion(
    topic_id: str = Query(..., alias="topicId", min_length=1),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Whether the caller has already completed the topic's quiz"""
    existing = submission_service.get_submission(db, principal.subject_id, topic_id)
    if not existing:
        return CompletionStatus(completed=False, submission=None)

    return CompletionStatus(
        completed=True,
        submission=CompletionSubmission(
            id=existing.id,
            score=existing.score,
            percentage=existing.percentage,
            completed_at=existing.created_at,
        ),
    )


@router.get("/submissions", response_model=SubmissionList)
async def list_my_submissions(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """The caller's own quiz results, newest first"""
    rows = submission_service.list_for_subject(db, principal.subject_id)
    return SubmissionList(
        submissions=[
            SubmissionSummary(
                id=row.id,
                topic_id=row.topic_id,
                score=row.score,
                total_questions=row.total_questions,
                percentage=row.percentage,
                time_spent_seconds=row.time_spent_seconds,
                tab_switches=row.tab_switches,
                is_late=row.is_late,
                created_at=row.created_at,
            )
            for row in rows
        ]
    )
