"""
Results service - aggregates individual quiz scores and shared group scores
"""
import logging
from typing import Dict, List, Any
from sqlalchemy.orm import Session

from app.config import settings
from app.models import Group, GroupMember, Submission
from app.services.question_bank import question_bank

logger = logging.getLogger(__name__)


class ResultsService:
    """Read-only admin view over the ledger and group grades"""

    def get_results(self, db: Session) -> List[Dict[str, Any]]:
        """
        One row per subject that has a submission or a group membership

        Returns:
            List of {subject_id, group_number, quiz_scores, group_score, total}
        """
        rows: Dict[str, Dict[str, Any]] = {}

        def row_for(subject_id: str) -> Dict[str, Any]:
            if subject_id not in rows:
                rows[subject_id] = {
                    "subject_id": subject_id,
                    "group_number": None,
                    "quiz_scores": {},
                    "group_score": None,
                }
            return rows[subject_id]

        for submission in db.query(Submission).all():
            row_for(submission.subject_id)["quiz_scores"][submission.topic_id] = submission.score

        memberships = (
            db.query(GroupMember.subject_id, Group.group_number, Group.score)
            .join(Group, GroupMember.group_id == Group.id)
            .all()
        )
        for subject_id, group_number, group_score in memberships:
            row = row_for(subject_id)
            row["group_number"] = group_number
            row["group_score"] = group_score

        results = []
        for subject_id in sorted(rows):
            row = rows[subject_id]
            row["total"] = float(sum(row["quiz_scores"].values()) + (row["group_score"] or 0))
            results.append(row)

        logger.info(f"Aggregated results for {len(results)} subjects")
        return results

    def max_possible_score(self, db: Session) -> float:
        quiz_points = sum(
            question_bank.count_questions(db, topic_id) * settings.POINTS_PER_QUESTION
            for topic_id in settings.QUIZ_TOPICS
        )
        return float(quiz_points + settings.MAX_GROUP_SCORE)


# Global instance
results_service = ResultsService()
