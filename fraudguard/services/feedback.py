"""Investigator feedback and rating submission"""

from typing import Any, Dict

from fraudguard.domain.feedback import CaseFeedback, InvestigatorRating, validate_case_feedback, validate_rating
from fraudguard.infrastructure.backend.base import DataAccess


class FeedbackService:
    """Validates submissions before any write reaches the backend"""

    def __init__(self, data: DataAccess):
        self.data = data

    async def submit_case_feedback(self, feedback: CaseFeedback) -> Dict[str, Any]:
        validate_case_feedback(feedback)
        return await self.data.insert(
            "case_feedback",
            {
                "case_id": feedback.case_id,
                "investigator_id": feedback.investigator_id,
                "category": feedback.category,
                "subcategory": feedback.subcategory,
                "investigation_note": feedback.investigation_note.strip(),
                "comment": (feedback.comment or "").strip() or None,
                "approval_status": "PENDING",
            },
        )

    async def submit_rating(self, rating: InvestigatorRating) -> Dict[str, Any]:
        validate_rating(rating)
        return await self.data.insert(
            "investigator_ratings",
            {
                "case_id": rating.case_id,
                "investigator_id": rating.investigator_id,
                "customer_id": rating.customer_id,
                "overall_rating": rating.overall,
                "communication_rating": rating.communication,
                "speed_rating": rating.speed,
                "professionalism_rating": rating.professionalism,
                "feedback_comment": (rating.feedback or "").strip() or None,
                "flagged_for_review": rating.flagged_for_review,
            },
        )
