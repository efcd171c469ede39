"""Unit tests for blacklist recommendation rules"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fraudguard.domain.models import (
    CaseDecision,
    CaseTransactionLink,
    Channel,
    DecisionCategory,
    DecisionStatus,
    Recommendation,
    Thresholds,
    Transaction,
)
from fraudguard.domain.recommendations import (
    build_reasons,
    evaluate_recipient,
    evaluate_recipients,
    format_bdt,
    sort_recommendations,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def txn(txn_id: int, customer_id: int, amount: str, recipient: str | None = "01700000000") -> Transaction:
    return Transaction(
        txn_id=txn_id,
        customer_id=customer_id,
        amount=Decimal(amount),
        channel=Channel.BKASH,
        recipient_account=recipient,
        location="Dhaka",
        occurred_at=NOW,
    )


def decision(decision_id: int, case_id: int, category=DecisionCategory.FRAUD_CONFIRMED) -> CaseDecision:
    return CaseDecision(decision_id=decision_id, case_id=case_id, category=category, status=DecisionStatus.FINAL)


def test_format_bdt_drops_zero_fraction():
    assert format_bdt(Decimal("600000.00")) == "600,000"
    assert format_bdt(Decimal("1234.5")) == "1,234.50"


def test_build_reasons_exact_strings():
    reasons = build_reasons(3, Decimal("600000"), 1, Thresholds())

    assert reasons == [
        "High Complaint Risk (3 complaints from different users)",
        "High Financial Risk (৳600,000 BDT total reported)",
        "Confirmed Fraud Signal (1 confirmed fraud case)",
    ]


def test_build_reasons_pluralizes_confirmed_cases():
    reasons = build_reasons(0, Decimal("0"), 2, Thresholds())
    assert reasons == ["Confirmed Fraud Signal (2 confirmed fraud cases)"]


def test_build_reasons_thresholds_are_inclusive():
    thresholds = Thresholds(min_complaints=2, high_amount_threshold=Decimal("1000"))

    assert len(build_reasons(2, Decimal("1000"), 0, thresholds)) == 2
    assert build_reasons(1, Decimal("999.99"), 0, thresholds) == []


def test_evaluate_recipient_all_three_rules():
    transactions = [txn(1, 101, "200000"), txn(2, 102, "250000"), txn(3, 103, "150000")]
    links = [CaseTransactionLink(case_id=7, txn_id=1)]

    rec = evaluate_recipient("01700000000", transactions, links, [decision(1, 7)], False, Thresholds())

    assert rec.complaint_count == 3
    assert rec.total_reported_amount == Decimal("600000")
    assert rec.confirmed_fraud_cases == 1
    assert len(rec.reasons) == 3
    assert rec.is_already_blacklisted is False


def test_complaints_count_distinct_customers():
    """Five reports from two customers are two complaints"""
    transactions = [txn(i, 101 if i % 2 else 102, "100") for i in range(1, 6)]

    rec = evaluate_recipient("01700000000", transactions, [], [], False, Thresholds(min_complaints=2))

    assert rec.complaint_count == 2
    assert rec.reasons == ["High Complaint Risk (2 complaints from different users)"]


def test_evaluate_recipient_returns_none_when_no_rule_fires():
    transactions = [txn(1, 101, "100"), txn(2, 102, "200")]
    assert evaluate_recipient("01700000000", transactions, [], [], True, Thresholds()) is None


def test_evaluate_recipient_without_transactions():
    assert evaluate_recipient("01700000000", [], [], [], False, Thresholds()) is None


def test_evaluate_recipient_ignores_other_recipients():
    transactions = [txn(1, 101, "900000", recipient="01899999999"), txn(2, 102, "100")]
    assert evaluate_recipient("01700000000", transactions, [], [], False, Thresholds()) is None


def test_non_confirmed_decisions_do_not_count():
    transactions = [txn(1, 101, "100")]
    links = [CaseTransactionLink(case_id=7, txn_id=1)]
    decisions = [decision(1, 7, DecisionCategory.CLEARED), decision(2, 7, DecisionCategory.PARTIAL_FRAUD)]

    assert evaluate_recipient("01700000000", transactions, links, decisions, False, Thresholds()) is None


def test_single_and_batch_evaluation_agree_on_repeated_decisions():
    """Two FRAUD_CONFIRMED rows on one case count twice in both paths"""
    transactions = [txn(1, 101, "100"), txn(2, 102, "100")]
    links = [CaseTransactionLink(case_id=7, txn_id=1), CaseTransactionLink(case_id=7, txn_id=2)]
    decisions = [decision(1, 7), decision(2, 7)]

    one = evaluate_recipient("01700000000", transactions, links, decisions, False, Thresholds())
    (batch,) = evaluate_recipients(transactions, links, decisions, set(), Thresholds())

    assert one.confirmed_fraud_cases == 2
    assert batch == one


def test_evaluate_recipients_skips_missing_recipient_and_flags_blacklist():
    transactions = [
        txn(1, 101, "600000", recipient="01700000000"),
        txn(2, 102, "900000", recipient=None),
        txn(3, 103, "700000", recipient="01811111111"),
    ]

    recs = evaluate_recipients(transactions, [], [], {"01811111111"}, Thresholds())

    assert [r.recipient_account for r in recs] == ["01811111111", "01700000000"]
    assert recs[0].is_already_blacklisted is True
    assert recs[1].is_already_blacklisted is False


def test_sort_by_reason_count_then_amount():
    def rec(name: str, reasons: int, amount: str) -> Recommendation:
        return Recommendation(
            recipient_account=name,
            complaint_count=0,
            total_reported_amount=Decimal(amount),
            confirmed_fraud_cases=0,
            reasons=["r"] * reasons,
        )

    ordered = sort_recommendations([rec("a", 1, "900"), rec("b", 2, "100"), rec("c", 2, "500"), rec("d", 1, "900")])

    assert [r.recipient_account for r in ordered] == ["c", "b", "a", "d"]


@pytest.mark.parametrize("min_complaints,expected", [(1, 2), (3, 1), (4, 0)])
def test_lowering_threshold_widens_results(min_complaints, expected):
    transactions = [txn(1, 101, "10"), txn(2, 102, "10"), txn(3, 103, "10"), txn(4, 104, "10", recipient="B")]
    thresholds = Thresholds(min_complaints=min_complaints)

    assert len(evaluate_recipients(transactions, [], [], set(), thresholds)) == expected


def test_complaint_rule_boundary_at_min_complaints():
    transactions = [txn(1, 101, "200000"), txn(2, 102, "250000"), txn(3, 103, "150000")]
    links = [CaseTransactionLink(case_id=1, txn_id=1)]
    decisions = [decision(1, 1)]

    at_limit = evaluate_recipient("01700000000", transactions, links, decisions, False, Thresholds(min_complaints=3))
    above_limit = evaluate_recipient("01700000000", transactions, links, decisions, False, Thresholds(min_complaints=4))

    assert len(at_limit.reasons) == 3
    assert above_limit.reasons == [
        "High Financial Risk (৳600,000 BDT total reported)",
        "Confirmed Fraud Signal (1 confirmed fraud case)",
    ]
