"""Investigator feedback and customer rating validation"""

from dataclasses import dataclass
from typing import Optional

from fraudguard.domain.exceptions import FeedbackValidationError

FEEDBACK_SUBCATEGORIES = {
    "EVIDENCE_REVIEW": {
        "SCREENSHOT_VERIFIED",
        "TRANSACTION_LOG_CHECKED",
        "DOCUMENT_VERIFIED",
        "EVIDENCE_INSUFFICIENT",
    },
    "CUSTOMER_CLARIFICATION": {
        "ADDITIONAL_DOCUMENTS_REQUESTED",
        "MISSING_INFORMATION",
        "CONTACT_ATTEMPTED",
        "IDENTITY_VERIFICATION",
    },
    "RECOMMENDATION": {
        "CONFIRMED_FRAUD",
        "LIKELY_FRAUD",
        "INSUFFICIENT_EVIDENCE",
        "REJECT_CASE",
        "ESCALATE_TO_ADMIN",
    },
}

MIN_FEEDBACK_CHARS = 10
LOW_RATING_MAX = 2


@dataclass
class CaseFeedback:
    case_id: int
    investigator_id: str
    category: str
    subcategory: str
    investigation_note: str
    comment: Optional[str] = None


@dataclass
class InvestigatorRating:
    case_id: int
    investigator_id: str
    customer_id: int
    overall: int
    communication: int
    speed: int
    professionalism: int
    feedback: Optional[str] = None

    @property
    def flagged_for_review(self) -> bool:
        return self.overall <= LOW_RATING_MAX


def validate_case_feedback(feedback: CaseFeedback) -> None:
    if not feedback.category:
        raise FeedbackValidationError("category", "Please select a feedback category")
    if feedback.category not in FEEDBACK_SUBCATEGORIES:
        raise FeedbackValidationError("category", f"Unknown feedback category: {feedback.category}")
    if not feedback.subcategory:
        raise FeedbackValidationError("subcategory", "Please select a subcategory")
    if feedback.subcategory not in FEEDBACK_SUBCATEGORIES[feedback.category]:
        raise FeedbackValidationError(
            "subcategory",
            f"Subcategory {feedback.subcategory} does not belong to {feedback.category}",
        )
    if not feedback.investigation_note.strip():
        raise FeedbackValidationError("investigation_note", "Investigation Note is required")


def validate_rating(rating: InvestigatorRating) -> None:
    """
    Check a customer's rating of an investigator.

    All four categories must be rated 1..5. A low overall rating (<= 2)
    requires written feedback; any feedback given must meet the minimum length.
    """
    for name in ("overall", "communication", "speed", "professionalism"):
        value = getattr(rating, name)
        if not 1 <= value <= 5:
            raise FeedbackValidationError(name, "Please rate all categories")

    text = (rating.feedback or "").strip()
    if rating.flagged_for_review and len(text) < MIN_FEEDBACK_CHARS:
        raise FeedbackValidationError(
            "feedback", "Feedback is required for low ratings (min 10 characters)"
        )
    if text and len(text) < MIN_FEEDBACK_CHARS:
        raise FeedbackValidationError("feedback", "Feedback must be at least 10 characters")
