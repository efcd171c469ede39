"""Typed decoding of raw backend rows into domain models"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fraudguard.domain.exceptions import BackendValidationError
from fraudguard.domain.models import (
    BlacklistEntry,
    CaseDecision,
    CaseStatus,
    CaseTransactionLink,
    Channel,
    DecisionCategory,
    DecisionStatus,
    FraudCase,
    RiskRecord,
    Severity,
    Transaction,
)
from fraudguard.utils.date_utils import parse_timestamp

T = TypeVar("T")
Row = Dict[str, Any]


def _decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    return Decimal(value)


def _timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        # SQLite drops the offset of stored UTC values
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    return parse_timestamp(value)


def _optional_timestamp(value: Any) -> Optional[datetime]:
    return None if value is None else _timestamp(value)


def decode_transaction(row: Row) -> Transaction:
    amount = _decimal(row["txn_amount"])
    if amount < 0:
        raise ValueError(f"negative amount {amount}")
    return Transaction(
        txn_id=int(row["txn_id"]),
        customer_id=int(row["customer_id"]),
        amount=amount,
        channel=Channel(row.get("txn_channel") or Channel.OTHER.value),
        recipient_account=row.get("recipient_account"),
        location=row.get("txn_location"),
        occurred_at=_timestamp(row["occurred_at"]),
    )


def decode_risk_record(row: Row) -> RiskRecord:
    return RiskRecord(
        txn_id=int(row["txn_id"]),
        risk_score=int(row.get("risk_score") or 0),
        risk_level=str(row["risk_level"]),
        reasons=row.get("reasons"),
    )


def decode_case_link(row: Row) -> CaseTransactionLink:
    return CaseTransactionLink(case_id=int(row["case_id"]), txn_id=int(row["txn_id"]))


def decode_fraud_case(row: Row) -> FraudCase:
    return FraudCase(
        case_id=int(row["case_id"]),
        customer_id=int(row["customer_id"]),
        severity=Severity(row["severity"]),
        status=CaseStatus(row["status"]),
        created_at=_timestamp(row["created_at"]),
    )


def decode_case_decision(row: Row) -> CaseDecision:
    return CaseDecision(
        decision_id=int(row["decision_id"]),
        case_id=int(row["case_id"]),
        category=DecisionCategory(row["category"]),
        status=DecisionStatus(row["status"]),
    )


def decode_blacklist_entry(row: Row) -> BlacklistEntry:
    return BlacklistEntry(
        id=int(row["id"]),
        recipient_value=str(row["recipient_value"]),
        reason=row.get("reason"),
        created_by=row.get("created_by"),
        created_at=_optional_timestamp(row.get("created_at")),
    )


def decode_rows(rows: List[Row], decoder: Callable[[Row], T], table: str) -> List[T]:
    """
    Decode every row or fail as a whole.

    Raises:
        BackendValidationError: When any row is missing a column or holds a bad value
    """
    try:
        return [decoder(row) for row in rows]
    except (KeyError, ValueError, TypeError, InvalidOperation) as e:
        raise BackendValidationError(f"Malformed {table} row: {e!r}", table=table) from e
