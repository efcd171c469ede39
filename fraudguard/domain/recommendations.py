"""Blacklist recommendation rules - core business logic for recipient screening"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from fraudguard.domain.models import (
    CaseDecision,
    CaseTransactionLink,
    DecisionCategory,
    Recommendation,
    Thresholds,
    Transaction,
)


def format_bdt(amount: Decimal) -> str:
    """Format an amount with thousands separators, dropping a zero fraction"""
    if amount == amount.to_integral_value():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def build_reasons(
    complaint_count: int,
    total_amount: Decimal,
    confirmed_fraud_cases: int,
    thresholds: Thresholds,
) -> List[str]:
    """
    Apply the three independent recommendation rules.

    Any subset may fire:
    - complaints from distinct customers >= min_complaints
    - total reported amount >= high_amount_threshold
    - at least one FRAUD_CONFIRMED decision on a linked case
    """
    reasons = []
    if complaint_count >= thresholds.min_complaints:
        reasons.append(f"High Complaint Risk ({complaint_count} complaints from different users)")
    if total_amount >= thresholds.high_amount_threshold:
        reasons.append(f"High Financial Risk (৳{format_bdt(total_amount)} BDT total reported)")
    if confirmed_fraud_cases > 0:
        plural = "s" if confirmed_fraud_cases > 1 else ""
        reasons.append(f"Confirmed Fraud Signal ({confirmed_fraud_cases} confirmed fraud case{plural})")
    return reasons


def count_confirmed_decisions(
    case_ids: Iterable[int],
    decisions: Iterable[CaseDecision],
) -> int:
    """Count FRAUD_CONFIRMED decision rows on the given cases (every row counts)"""
    wanted = set(case_ids)
    return sum(
        1 for d in decisions
        if d.case_id in wanted and d.category == DecisionCategory.FRAUD_CONFIRMED
    )


def evaluate_recipient(
    recipient: str,
    transactions: List[Transaction],
    links: List[CaseTransactionLink],
    decisions: List[CaseDecision],
    is_blacklisted: bool,
    thresholds: Thresholds,
) -> Optional[Recommendation]:
    """
    Decide whether a single recipient should be recommended for blacklisting.

    Only transactions addressed to ``recipient`` are considered; callers may
    pass a wider set. Returns None when no rule fires.
    """
    own = [t for t in transactions if t.recipient_account == recipient]
    if not own:
        return None

    complaint_count = len({t.customer_id for t in own})
    total_amount = sum((t.amount for t in own), Decimal("0"))

    txn_ids = {t.txn_id for t in own}
    case_ids = {link.case_id for link in links if link.txn_id in txn_ids}
    confirmed = count_confirmed_decisions(case_ids, decisions)

    reasons = build_reasons(complaint_count, total_amount, confirmed, thresholds)
    if not reasons:
        return None

    return Recommendation(
        recipient_account=recipient,
        complaint_count=complaint_count,
        total_reported_amount=total_amount,
        confirmed_fraud_cases=confirmed,
        reasons=reasons,
        is_already_blacklisted=is_blacklisted,
    )


def evaluate_recipients(
    transactions: List[Transaction],
    links: List[CaseTransactionLink],
    decisions: List[CaseDecision],
    blacklisted_values: Set[str],
    thresholds: Thresholds,
) -> List[Recommendation]:
    """
    Evaluate every recipient in one pass over pre-fetched rows.

    Returns recommendations sorted most-justified first.
    """
    customers: Dict[str, Set[int]] = defaultdict(set)
    totals: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    txn_ids: Dict[str, List[int]] = defaultdict(list)

    for txn in transactions:
        if not txn.recipient_account:
            continue
        customers[txn.recipient_account].add(txn.customer_id)
        totals[txn.recipient_account] += txn.amount
        txn_ids[txn.recipient_account].append(txn.txn_id)

    cases_by_txn: Dict[int, Set[int]] = defaultdict(set)
    for link in links:
        cases_by_txn[link.txn_id].add(link.case_id)

    confirmed_by_case: Dict[int, int] = defaultdict(int)
    for decision in decisions:
        if decision.category == DecisionCategory.FRAUD_CONFIRMED:
            confirmed_by_case[decision.case_id] += 1

    results = []
    for recipient, customer_ids in customers.items():
        linked_cases: Set[int] = set()
        for txn_id in txn_ids[recipient]:
            linked_cases |= cases_by_txn.get(txn_id, set())
        confirmed = sum(confirmed_by_case.get(case_id, 0) for case_id in linked_cases)

        reasons = build_reasons(len(customer_ids), totals[recipient], confirmed, thresholds)
        if not reasons:
            continue

        results.append(
            Recommendation(
                recipient_account=recipient,
                complaint_count=len(customer_ids),
                total_reported_amount=totals[recipient],
                confirmed_fraud_cases=confirmed,
                reasons=reasons,
                is_already_blacklisted=recipient in blacklisted_values,
            )
        )

    return sort_recommendations(results)


def sort_recommendations(recommendations: List[Recommendation]) -> List[Recommendation]:
    """Most reasons first, ties broken by larger total reported amount"""
    return sorted(
        recommendations,
        key=lambda r: (len(r.reasons), r.total_reported_amount),
        reverse=True,
    )
