"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class Channel(str, Enum):
    BKASH = "BKASH"
    NAGAD = "NAGAD"
    CARD = "CARD"
    BANK = "BANK"
    CASH = "CASH"
    OTHER = "OTHER"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class CaseStatus(str, Enum):
    OPEN = "OPEN"
    UNDER_INVESTIGATION = "UNDER_INVESTIGATION"
    CLOSED = "CLOSED"


class DecisionCategory(str, Enum):
    FRAUD_CONFIRMED = "FRAUD_CONFIRMED"
    CLEARED = "CLEARED"
    PARTIAL_FRAUD = "PARTIAL_FRAUD"
    INVESTIGATION_ONGOING = "INVESTIGATION_ONGOING"
    INSUFFICIENT_EVIDENCE = "INSUFFICIENT_EVIDENCE"
    REFERRED_TO_AUTHORITIES = "REFERRED_TO_AUTHORITIES"


class DecisionStatus(str, Enum):
    DRAFT = "DRAFT"
    FINAL = "FINAL"
    COMMUNICATED = "COMMUNICATED"


@dataclass
class Transaction:
    """Customer-reported transaction"""

    txn_id: int
    customer_id: int
    amount: Decimal
    channel: Channel
    recipient_account: Optional[str]
    location: Optional[str]
    occurred_at: datetime


@dataclass
class RiskRecord:
    """Backend risk evaluation of a transaction (suspicious_transactions row)"""

    txn_id: int
    risk_score: int
    risk_level: str  # LOW | MEDIUM | HIGH, older rows use low | suspicious | high
    reasons: Optional[str] = None


@dataclass
class CaseTransactionLink:
    case_id: int
    txn_id: int


@dataclass
class FraudCase:
    case_id: int
    customer_id: int
    severity: Severity
    status: CaseStatus
    created_at: datetime


@dataclass
class CaseDecision:
    decision_id: int
    case_id: int
    category: DecisionCategory
    status: DecisionStatus


@dataclass
class BlacklistEntry:
    id: int
    recipient_value: str
    reason: Optional[str]
    created_by: Optional[str]
    created_at: Optional[datetime]


@dataclass
class Thresholds:
    """Tunable blacklist recommendation thresholds"""

    min_complaints: int = 3
    high_amount_threshold: Decimal = Decimal("500000")


@dataclass
class Recommendation:
    """Blacklist recommendation for one recipient account"""

    recipient_account: str
    complaint_count: int
    total_reported_amount: Decimal
    confirmed_fraud_cases: int
    reasons: List[str] = field(default_factory=list)
    is_already_blacklisted: bool = False


@dataclass
class ChannelRanking:
    channel: Channel
    total_txn: int
    suspicious_txn: int
    avg_risk_score: Decimal
    suspicious_rate_pct: Decimal


@dataclass
class ChannelSeverityRanking:
    channel: Channel
    severity: Optional[Severity]  # None is the "No Case" bucket
    total_txn: int
    suspicious_txn: int
    avg_risk_score: Decimal
    suspicious_rate_pct: Decimal


@dataclass
class ChannelHotspot:
    channel: Channel
    count: int
    avg_risk_score: int
    total_amount: Decimal
    high_risk_count: int


@dataclass
class RecipientHotspot:
    recipient: str
    count: int
    avg_risk_score: int
    total_amount: Decimal
    risk_level: str


@dataclass
class FraudHotspots:
    total_suspicious: int
    channels: List[ChannelHotspot]
    recipients: List[RecipientHotspot]


@dataclass
class RepeatCustomer:
    """Customer with more than one fraud case against them"""

    customer_id: int
    case_count: int
    latest_case_at: datetime
