"""
Group assignment API endpoints (student side)
"""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
import logging

from app.api.deps import get_blob_store, require_student
from app.config import settings
from app.database import get_db
from app.schemas.group import GroupStatus, GroupSubmissionFile, GroupUploadResponse
from app.services.blob_store import BlobStore
from app.services.group_service import group_service
from app.services.identity_service import Principal

router = APIRouter(prefix="/api/groups", tags=["groups"])
logger = logging.getLogger(__name__)


@router.post("/submission", response_model=GroupUploadResponse, status_code=201)
async def upload_group_assignment(
    file: UploadFile = File(...),
    principal: Principal = Depends(require_student),
    blob_store: BlobStore = Depends(get_blob_store),
    db: Session = Depends(get_db),
):
    """
    Upload the group's assignment document

    - One upload per group, whichever member submits first
    - PDF only, at most 10 MiB
    """
    # Read one byte past the limit so oversize uploads are detected without buffering them whole
    content = await file.read(settings.GROUP_SUBMISSION_MAX_BYTES + 1)

    submission = await group_service.submit_group_assignment(
        db,
        blob_store,
        subject_id=principal.subject_id,
        file_bytes=content,
        file_name=file.filename,
        content_type=file.content_type,
    )

    return GroupUploadResponse(
        group_submission_id=submission.id,
        group_number=submission.group_number,
        file_url=submission.file_url,
        file_name=submission.file_name,
    )


@router.get("/status", response_model=GroupStatus)
async def get_group_status(
    principal: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    """Lock state and submitted file for the caller's group"""
    group, submission = group_service.get_status(db, principal.subject_id)

    return GroupStatus(
        group_number=group.group_number,
        locked=group.locked,
        has_submitted=group.submission_id is not None,
        score=group.score,
        submission=GroupSubmissionFile(
            file_name=submission.file_name,
            file_url=submission.file_url,
            uploaded_at=submission.uploaded_at,
        ) if submission else None,
    )
