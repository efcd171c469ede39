"""Fetch-and-aggregate orchestration for channel rankings and hotspots"""

from datetime import datetime
from typing import List, Optional

from fraudguard.domain.models import (
    ChannelRanking,
    ChannelSeverityRanking,
    FraudHotspots,
    RepeatCustomer,
    RiskRecord,
    Transaction,
)
from fraudguard.domain.rankings import (
    date_cutoff,
    fraud_hotspots,
    rank_channel_severity,
    rank_channels,
    rank_repeat_customers,
)
from fraudguard.domain.risk_labels import RuleHit, display_risk_label, risk_breakdown
from fraudguard.infrastructure.backend.base import DataAccess, Query
from fraudguard.infrastructure.backend.rows import (
    decode_case_link,
    decode_fraud_case,
    decode_risk_record,
    decode_rows,
    decode_transaction,
)
from fraudguard.infrastructure.observability.metrics import aggregation_latency_histogram
from fraudguard.services.recommendations import TXN_COLUMNS
from fraudguard.utils.date_utils import utcnow

RISK_COLUMNS = ("txn_id", "risk_score", "risk_level", "reasons")
CASE_COLUMNS = ("case_id", "customer_id", "severity", "status", "created_at")


class AnalyticsService:
    """Channel-level suspicious activity rankings over backend rows"""

    def __init__(self, data: DataAccess):
        self.data = data

    async def _transactions(self, window: str, now: Optional[datetime]) -> List[Transaction]:
        cutoff = date_cutoff(window, now or utcnow())
        query = Query.select("transactions", *TXN_COLUMNS)
        if cutoff is not None:
            query = query.gte("occurred_at", cutoff)
        rows = await self.data.select(query)
        return decode_rows(rows, decode_transaction, "transactions")

    async def _risks(self, txn_ids: List[int]) -> List[RiskRecord]:
        rows = await self.data.select(
            Query.select("suspicious_transactions", *RISK_COLUMNS).in_("txn_id", txn_ids)
        )
        return decode_rows(rows, decode_risk_record, "suspicious_transactions")

    async def channel_ranking(self, window: str = "all", now: Optional[datetime] = None) -> List[ChannelRanking]:
        with aggregation_latency_histogram.labels(view="channel_ranking").time():
            transactions = await self._transactions(window, now)
            if not transactions:
                return []
            risks = await self._risks([t.txn_id for t in transactions])
            return rank_channels(transactions, risks)

    async def channel_severity_ranking(
        self, window: str = "all", now: Optional[datetime] = None
    ) -> List[ChannelSeverityRanking]:
        with aggregation_latency_histogram.labels(view="channel_severity_ranking").time():
            transactions = await self._transactions(window, now)
            if not transactions:
                return []
            txn_ids = [t.txn_id for t in transactions]
            risks = await self._risks(txn_ids)

            link_rows = await self.data.select(
                Query.select("case_transactions", "case_id", "txn_id").in_("txn_id", txn_ids)
            )
            links = decode_rows(link_rows, decode_case_link, "case_transactions")

            case_rows = await self.data.select(
                Query.select("fraud_cases", *CASE_COLUMNS)
                .in_("case_id", sorted({link.case_id for link in links}))
            )
            cases = decode_rows(case_rows, decode_fraud_case, "fraud_cases")

            return rank_channel_severity(transactions, risks, links, cases)

    async def hotspots(self, top_n: int = 10) -> FraudHotspots:
        with aggregation_latency_histogram.labels(view="hotspots").time():
            risk_rows = await self.data.select(Query.select("suspicious_transactions", *RISK_COLUMNS))
            risks = decode_rows(risk_rows, decode_risk_record, "suspicious_transactions")
            if not risks:
                return FraudHotspots(total_suspicious=0, channels=[], recipients=[])

            txn_rows = await self.data.select(
                Query.select("transactions", *TXN_COLUMNS).in_("txn_id", [r.txn_id for r in risks])
            )
            transactions = decode_rows(txn_rows, decode_transaction, "transactions")
            return fraud_hotspots(risks, transactions, top_n=top_n)

    async def repeat_customers(self, min_cases: int = 2) -> List[RepeatCustomer]:
        with aggregation_latency_histogram.labels(view="repeat_customers").time():
            rows = await self.data.select(Query.select("fraud_cases", *CASE_COLUMNS))
            cases = decode_rows(rows, decode_fraud_case, "fraud_cases")
            return rank_repeat_customers(cases, min_cases=min_cases)

    async def risk_explanation(self, txn_id: int) -> Optional[tuple[RiskRecord, str, List[RuleHit]]]:
        """Risk record, display label and provisional rule breakdown; None if never flagged"""
        risk_rows = await self.data.select(
            Query.select("suspicious_transactions", *RISK_COLUMNS).eq("txn_id", txn_id)
        )
        risks = decode_rows(risk_rows, decode_risk_record, "suspicious_transactions")
        if not risks:
            return None

        txn_rows = await self.data.select(Query.select("transactions", *TXN_COLUMNS).eq("txn_id", txn_id))
        transactions = decode_rows(txn_rows, decode_transaction, "transactions")
        if not transactions:
            return None

        risk = risks[0]
        return risk, display_risk_label(risk.risk_level), risk_breakdown(transactions[0].amount, risk.reasons)
