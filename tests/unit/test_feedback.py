"""Unit tests for feedback and rating validation"""

import pytest

from fraudguard.domain.exceptions import FeedbackValidationError
from fraudguard.domain.feedback import CaseFeedback, InvestigatorRating, validate_case_feedback, validate_rating


def feedback(**overrides) -> CaseFeedback:
    values = dict(
        case_id=1,
        investigator_id="inv-1",
        category="EVIDENCE_REVIEW",
        subcategory="SCREENSHOT_VERIFIED",
        investigation_note="Screenshots match the bKash statement",
    )
    values.update(overrides)
    return CaseFeedback(**values)


def rating(**overrides) -> InvestigatorRating:
    values = dict(
        case_id=1,
        investigator_id="inv-1",
        customer_id=101,
        overall=4,
        communication=5,
        speed=3,
        professionalism=4,
    )
    values.update(overrides)
    return InvestigatorRating(**values)


def test_complete_case_feedback_passes():
    validate_case_feedback(feedback())


@pytest.mark.parametrize(
    "overrides,field,message",
    [
        ({"category": ""}, "category", "Please select a feedback category"),
        ({"subcategory": ""}, "subcategory", "Please select a subcategory"),
        ({"subcategory": "CONTACT_ATTEMPTED"}, "subcategory", None),
        ({"investigation_note": "   "}, "investigation_note", "Investigation Note is required"),
    ],
)
def test_incomplete_case_feedback_is_rejected(overrides, field, message):
    with pytest.raises(FeedbackValidationError) as exc_info:
        validate_case_feedback(feedback(**overrides))

    assert exc_info.value.field == field
    if message:
        assert str(exc_info.value) == message


def test_good_rating_without_feedback_passes():
    validate_rating(rating())
    assert rating().flagged_for_review is False


def test_unrated_category_is_rejected():
    with pytest.raises(FeedbackValidationError, match="Please rate all categories"):
        validate_rating(rating(speed=0))


def test_low_rating_requires_feedback():
    with pytest.raises(FeedbackValidationError, match="required for low ratings"):
        validate_rating(rating(overall=2, feedback="bad"))


def test_low_rating_with_feedback_is_flagged():
    low = rating(overall=1, feedback="Never called me back about the case")

    validate_rating(low)
    assert low.flagged_for_review is True


def test_short_optional_feedback_is_rejected():
    with pytest.raises(FeedbackValidationError, match="at least 10 characters"):
        validate_rating(rating(feedback="ok"))
