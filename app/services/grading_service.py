"""
Grading gateway for group submissions
Admin assigns one score per group; every member shares it
"""
import logging
import math
from typing import Any, List, Optional
from uuid import UUID
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import InvalidScore, SubmissionNotFound, Unauthorized
from app.models import Group, GroupSubmission
from app.services.identity_service import Principal, Role
from app.utils import clock

logger = logging.getLogger(__name__)


class GradingService:
    """
    Applies (and re-applies) grades to group submissions

    Only the submission is locked, not the grade: grading again overwrites
    score, feedback, grader and timestamp.
    """

    def validate_score(self, score: Any) -> float:
        """
        Args:
            score: Raw score from the request

        Returns:
            The score as float

        Raises:
            InvalidScore: not a finite number within [0, MAX_GROUP_SCORE]
        """
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise InvalidScore()
        if math.isnan(score) or score < 0 or score > settings.MAX_GROUP_SCORE:
            raise InvalidScore()
        return float(score)

    def grade_group_submission(
        self,
        db: Session,
        grader: Principal,
        submission_id: UUID,
        score: Any,
        feedback: Optional[str] = None,
    ) -> GroupSubmission:
        """
        Grade a group submission and propagate the score to its group

        Raises:
            Unauthorized, InvalidScore, SubmissionNotFound
        """
        if grader.role != Role.ADMIN:
            raise Unauthorized("Only admins can grade submissions")

        score = self.validate_score(score)

        submission = db.query(GroupSubmission).filter(GroupSubmission.id == submission_id).first()
        if not submission:
            raise SubmissionNotFound()

        submission.score = score
        submission.feedback = feedback or None
        submission.graded_by = grader.subject_id
        submission.graded_at = clock.utcnow()

        # Group score mirrors the submission grade; no per-member override
        db.execute(
            update(Group)
            .where(Group.id == submission.group_id)
            .values(score=score)
        )
        db.commit()
        db.refresh(submission)

        logger.info(
            f"Group submission graded - group: {submission.group_number}, score: {score}, grader: {grader.subject_id}"
        )
        return submission

    def get_submission(self, db: Session, submission_id: UUID) -> GroupSubmission:
        submission = db.query(GroupSubmission).filter(GroupSubmission.id == submission_id).first()
        if not submission:
            raise SubmissionNotFound()
        return submission

    def list_submissions(self, db: Session) -> List[GroupSubmission]:
        return db.query(GroupSubmission).order_by(GroupSubmission.group_number).all()


# Global instance
grading_service = GradingService()
