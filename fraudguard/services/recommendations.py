"""Fetch-and-evaluate orchestration for blacklist recommendations"""

from typing import List, Optional

from fraudguard.domain.models import DecisionCategory, Recommendation, Thresholds
from fraudguard.domain.recommendations import evaluate_recipient, evaluate_recipients
from fraudguard.infrastructure.backend.base import DataAccess, Query
from fraudguard.infrastructure.backend.rows import (
    decode_case_decision,
    decode_case_link,
    decode_rows,
    decode_transaction,
)
from fraudguard.infrastructure.observability.metrics import aggregation_latency_histogram, record_evaluation

TXN_COLUMNS = (
    "txn_id",
    "customer_id",
    "txn_amount",
    "txn_channel",
    "recipient_account",
    "txn_location",
    "occurred_at",
)


class RecommendationService:
    """
    Evaluates recipients against the blacklist rules.

    Every backend read goes through the DataAccess collaborator. Any
    DataAccessError aborts the whole evaluation: no partial recommendation is
    ever returned.
    """

    def __init__(self, data: DataAccess):
        self.data = data

    async def _confirmed_decisions(self, txn_ids: List[int]):
        link_rows = await self.data.select(
            Query.select("case_transactions", "case_id", "txn_id").in_("txn_id", txn_ids)
        )
        links = decode_rows(link_rows, decode_case_link, "case_transactions")

        case_ids = sorted({link.case_id for link in links})
        decision_rows = await self.data.select(
            Query.select("case_decisions", "decision_id", "case_id", "category", "status")
            .in_("case_id", case_ids)
            .eq("category", DecisionCategory.FRAUD_CONFIRMED.value)
        )
        decisions = decode_rows(decision_rows, decode_case_decision, "case_decisions")
        return links, decisions

    async def evaluate_one(self, recipient: str, thresholds: Thresholds) -> Optional[Recommendation]:
        if not recipient:
            raise ValueError("recipient must be a non-empty identifier")

        with aggregation_latency_histogram.labels(view="recommendation_one").time():
            txn_rows = await self.data.select(
                Query.select("transactions", *TXN_COLUMNS).eq("recipient_account", recipient)
            )
            transactions = decode_rows(txn_rows, decode_transaction, "transactions")
            if not transactions:
                record_evaluation("one", [])
                return None

            links, decisions = await self._confirmed_decisions([t.txn_id for t in transactions])

            blacklist_rows = await self.data.select(
                Query.select("blacklisted_recipients", "id").eq("recipient_value", recipient)
            )

            recommendation = evaluate_recipient(
                recipient,
                transactions,
                links,
                decisions,
                is_blacklisted=bool(blacklist_rows),
                thresholds=thresholds,
            )

        record_evaluation("one", [recommendation] if recommendation else [])
        return recommendation

    async def evaluate_all(self, thresholds: Thresholds) -> List[Recommendation]:
        with aggregation_latency_histogram.labels(view="recommendation_all").time():
            txn_rows = await self.data.select(
                Query.select("transactions", *TXN_COLUMNS).not_null("recipient_account")
            )
            transactions = decode_rows(txn_rows, decode_transaction, "transactions")
            if not transactions:
                record_evaluation("all", [])
                return []

            links, decisions = await self._confirmed_decisions([t.txn_id for t in transactions])

            blacklist_rows = await self.data.select(
                Query.select("blacklisted_recipients", "recipient_value")
            )
            blacklisted = {row["recipient_value"] for row in blacklist_rows if row.get("recipient_value")}

            recommendations = evaluate_recipients(transactions, links, decisions, blacklisted, thresholds)

        record_evaluation("all", recommendations)
        return recommendations
