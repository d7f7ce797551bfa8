"""
Group lock manager - exactly one assignment submission per group
"""
import logging
import uuid
from typing import List, Optional, Tuple
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    AlreadySubmitted, FileTooLarge, GroupMembershipConflict, InvalidFile,
    NoGroupAssigned, StorageFailure,
)
from app.models import Group, GroupMember, GroupSubmission
from app.services.blob_store import BlobStore
from app.utils import clock

logger = logging.getLogger(__name__)


class GroupService:
    """
    Upload flow:
    1. resolve the caller's group, refuse if already locked
    2. validate the document
    3. store the file
    4. insert the submission row and, in the same transaction, flip the lock
       with ``UPDATE ... WHERE locked = false``

    A caller that loses the conditional update rolls back its row and
    discards its blob. A storage failure leaves the group unlocked.
    """

    # GroupSubmission.file_name column width
    MAX_FILE_NAME_LENGTH = 255

    def get_group_for_subject(self, db: Session, subject_id: str) -> Optional[Group]:
        member = db.query(GroupMember).filter(GroupMember.subject_id == subject_id).first()
        return member.group if member else None

    def validate_file(self, data: bytes, content_type: Optional[str], file_name: Optional[str] = None) -> None:
        if content_type != settings.GROUP_SUBMISSION_CONTENT_TYPE:
            raise InvalidFile()
        if file_name and len(file_name) > self.MAX_FILE_NAME_LENGTH:
            raise InvalidFile(f"File name must be at most {self.MAX_FILE_NAME_LENGTH} characters")
        if not data:
            raise InvalidFile("Uploaded file is empty")
        if len(data) > settings.GROUP_SUBMISSION_MAX_BYTES:
            raise FileTooLarge()

    async def submit_group_assignment(
        self,
        db: Session,
        blob_store: BlobStore,
        subject_id: str,
        file_bytes: bytes,
        file_name: str,
        content_type: Optional[str],
    ) -> GroupSubmission:
        """
        Accept the group's single assignment upload

        Raises:
            NoGroupAssigned, AlreadySubmitted, InvalidFile, FileTooLarge, StorageFailure
        """
        group = self.get_group_for_subject(db, subject_id)
        if not group:
            raise NoGroupAssigned()

        if group.locked:
            logger.info(f"Group upload blocked, already locked - group: {group.group_number}, subject: {subject_id}")
            raise AlreadySubmitted()

        self.validate_file(file_bytes, content_type, file_name)

        group_id = group.id
        group_number = group.group_number
        key = f"group-{group_number}-{int(clock.utcnow().timestamp())}-{uuid.uuid4().hex[:8]}.pdf"

        try:
            file_url = await blob_store.upload(key, file_bytes, content_type)
        except Exception as e:
            logger.error(f"Blob upload failed for group {group_number}: {str(e)}")
            raise StorageFailure()

        submission = GroupSubmission(
            group_id=group_id,
            group_number=group_number,
            file_name=file_name or key,
            file_url=file_url,
            uploaded_by=subject_id,
            uploaded_at=clock.utcnow(),
        )
        db.add(submission)
        db.flush()

        result = db.execute(
            update(Group)
            .where(Group.id == group_id, Group.locked.is_(False))
            .values(locked=True, submission_id=submission.id)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            db.rollback()
            logger.warning(f"Group upload lost the lock race - group: {group_number}, subject: {subject_id}")
            await self._discard_blob(blob_store, file_url)
            raise AlreadySubmitted()

        db.commit()
        db.refresh(submission)

        logger.info(f"Group assignment accepted - group: {group_number}, subject: {subject_id}, submission: {submission.id}")
        return submission

    async def _discard_blob(self, blob_store: BlobStore, file_url: str) -> None:
        try:
            await blob_store.delete(file_url)
        except Exception as e:
            # Unreferenced blob is left for garbage collection
            logger.warning(f"Failed to discard orphaned blob {file_url}: {str(e)}")

    def get_status(self, db: Session, subject_id: str) -> Tuple[Group, Optional[GroupSubmission]]:
        group = self.get_group_for_subject(db, subject_id)
        if not group:
            raise NoGroupAssigned()

        submission = None
        if group.submission_id:
            submission = db.query(GroupSubmission).filter(GroupSubmission.id == group.submission_id).first()
        return group, submission

    def register_group(self, db: Session, group_number: int, member_ids: List[str]) -> Group:
        """Create a group (or extend its roster); a subject belongs to one group only"""
        group = db.query(Group).filter(Group.group_number == group_number).first()
        if not group:
            group = Group(group_number=group_number, locked=False)
            db.add(group)
            db.flush()

        existing = {m.subject_id for m in group.members}
        for subject_id in member_ids:
            if subject_id in existing:
                continue
            db.add(GroupMember(group_id=group.id, subject_id=subject_id))
            existing.add(subject_id)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise GroupMembershipConflict()

        db.refresh(group)
        logger.info(f"Group {group_number} roster: {len(group.members)} members")
        return group


# Global instance
group_service = GroupService()
