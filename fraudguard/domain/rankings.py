"""Channel and severity rankings of suspicious transaction volume"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from fraudguard.domain.models import (
    CaseTransactionLink,
    Channel,
    ChannelHotspot,
    ChannelRanking,
    ChannelSeverityRanking,
    FraudCase,
    FraudHotspots,
    RecipientHotspot,
    RepeatCustomer,
    RiskRecord,
    Severity,
    Transaction,
)

# Top two tiers count as suspicious; both naming schemes appear in backend rows
SUSPICIOUS_LEVELS = frozenset({"HIGH", "MEDIUM", "high", "suspicious", "SUSPICIOUS"})

DATE_WINDOWS = {"7days": 7, "30days": 30, "all": None}

TWO_PLACES = Decimal("0.01")


def is_suspicious(risk: Optional[RiskRecord]) -> bool:
    return risk is not None and risk.risk_level in SUSPICIOUS_LEVELS


def date_cutoff(window: str, now: datetime) -> Optional[datetime]:
    """Earliest occurred_at included by a date window, None for all time"""
    if window not in DATE_WINDOWS:
        raise ValueError(f"Unknown date window: {window}")
    days = DATE_WINDOWS[window]
    return None if days is None else now - timedelta(days=days)


def round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass
class _Bucket:
    total: int = 0
    suspicious: int = 0
    score_sum: int = 0
    scored: int = 0

    def add(self, risk: Optional[RiskRecord]) -> None:
        self.total += 1
        if is_suspicious(risk):
            self.suspicious += 1
        if risk is not None:
            self.score_sum += risk.risk_score
            self.scored += 1

    @property
    def avg_risk_score(self) -> Decimal:
        # Transactions without a risk record stay out of the denominator
        if self.scored == 0:
            return Decimal("0.00")
        return round2(Decimal(self.score_sum) / Decimal(self.scored))

    @property
    def suspicious_rate_pct(self) -> Decimal:
        if self.total == 0:
            return Decimal("0.00")
        return round2(Decimal(self.suspicious) * 100 / Decimal(self.total))


def _risk_map(risks: List[RiskRecord]) -> Dict[int, RiskRecord]:
    return {r.txn_id: r for r in risks}


def rank_channels(
    transactions: List[Transaction],
    risks: List[RiskRecord],
) -> List[ChannelRanking]:
    """
    Rank payment channels by suspicious volume.

    Sort: suspicious_txn desc, then avg_risk_score desc.
    """
    by_txn = _risk_map(risks)
    buckets: Dict[Channel, _Bucket] = defaultdict(_Bucket)
    for txn in transactions:
        buckets[txn.channel].add(by_txn.get(txn.txn_id))

    rows = [
        ChannelRanking(
            channel=channel,
            total_txn=b.total,
            suspicious_txn=b.suspicious,
            avg_risk_score=b.avg_risk_score,
            suspicious_rate_pct=b.suspicious_rate_pct,
        )
        for channel, b in buckets.items()
    ]
    rows.sort(key=lambda r: (r.suspicious_txn, r.avg_risk_score), reverse=True)
    return rows


def rank_channel_severity(
    transactions: List[Transaction],
    risks: List[RiskRecord],
    links: List[CaseTransactionLink],
    cases: List[FraudCase],
) -> List[ChannelSeverityRanking]:
    """
    Rank (channel, case severity) pairs by suspicious volume.

    Transactions with no linked case, or whose case severity is unknown,
    fall into the None ("No Case") bucket.
    """
    by_txn = _risk_map(risks)
    case_by_txn = {link.txn_id: link.case_id for link in links}
    severity_by_case = {c.case_id: c.severity for c in cases}

    buckets: Dict[Tuple[Channel, Optional[Severity]], _Bucket] = defaultdict(_Bucket)
    for txn in transactions:
        case_id = case_by_txn.get(txn.txn_id)
        severity = severity_by_case.get(case_id) if case_id is not None else None
        buckets[(txn.channel, severity)].add(by_txn.get(txn.txn_id))

    rows = [
        ChannelSeverityRanking(
            channel=channel,
            severity=severity,
            total_txn=b.total,
            suspicious_txn=b.suspicious,
            avg_risk_score=b.avg_risk_score,
            suspicious_rate_pct=b.suspicious_rate_pct,
        )
        for (channel, severity), b in buckets.items()
    ]
    rows.sort(key=lambda r: (r.suspicious_txn, r.avg_risk_score), reverse=True)
    return rows


def _dominant_level(levels: List[str]) -> str:
    upper = {level.upper() for level in levels}
    if "HIGH" in upper:
        return "HIGH"
    if "MEDIUM" in upper or "SUSPICIOUS" in upper:
        return "MEDIUM"
    return "LOW"


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def fraud_hotspots(
    risks: List[RiskRecord],
    transactions: List[Transaction],
    top_n: int = 10,
) -> FraudHotspots:
    """Channel and recipient concentration of flagged transactions"""
    txn_map = {t.txn_id: t for t in transactions}

    channel_stats: Dict[Channel, dict] = {}
    recipient_stats: Dict[str, dict] = {}

    for risk in risks:
        txn = txn_map.get(risk.txn_id)
        if txn is None:
            continue

        ch = channel_stats.setdefault(
            txn.channel, {"count": 0, "score": 0, "amount": Decimal("0"), "high": 0}
        )
        ch["count"] += 1
        ch["score"] += risk.risk_score
        ch["amount"] += txn.amount
        if risk.risk_level.upper() == "HIGH":
            ch["high"] += 1

        recipient = txn.recipient_account or txn.location or "Unknown"
        rc = recipient_stats.setdefault(
            recipient, {"count": 0, "score": 0, "amount": Decimal("0"), "levels": []}
        )
        rc["count"] += 1
        rc["score"] += risk.risk_score
        rc["amount"] += txn.amount
        rc["levels"].append(risk.risk_level)

    channels = [
        ChannelHotspot(
            channel=channel,
            count=s["count"],
            avg_risk_score=_round_half_up(Decimal(s["score"]) / s["count"]),
            total_amount=s["amount"],
            high_risk_count=s["high"],
        )
        for channel, s in channel_stats.items()
    ]
    channels.sort(key=lambda c: c.count, reverse=True)

    recipients = [
        RecipientHotspot(
            recipient=recipient,
            count=s["count"],
            avg_risk_score=_round_half_up(Decimal(s["score"]) / s["count"]),
            total_amount=s["amount"],
            risk_level=_dominant_level(s["levels"]),
        )
        for recipient, s in recipient_stats.items()
    ]
    recipients.sort(key=lambda r: r.count, reverse=True)

    return FraudHotspots(
        total_suspicious=len(risks),
        channels=channels,
        recipients=recipients[:top_n],
    )


def rank_repeat_customers(cases: List[FraudCase], min_cases: int = 2) -> List[RepeatCustomer]:
    """Customers with at least ``min_cases`` fraud cases, most cases first"""
    counts: Dict[int, int] = defaultdict(int)
    latest: Dict[int, datetime] = {}
    for case in cases:
        counts[case.customer_id] += 1
        if case.customer_id not in latest or case.created_at > latest[case.customer_id]:
            latest[case.customer_id] = case.created_at

    rows = [
        RepeatCustomer(customer_id=customer_id, case_count=count, latest_case_at=latest[customer_id])
        for customer_id, count in counts.items()
        if count >= min_cases
    ]
    rows.sort(key=lambda r: (r.case_count, r.latest_case_at), reverse=True)
    return rows
