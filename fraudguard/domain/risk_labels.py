"""Risk level display labels and the provisional rule breakdown"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

RISK_DISPLAY_MAP = {
    "low": "SAFE",
    "LOW": "SAFE",
    "suspicious": "SUSPICIOUS",
    "SUSPICIOUS": "SUSPICIOUS",
    "MEDIUM": "SUSPICIOUS",
    "high": "CRITICAL",
    "HIGH": "CRITICAL",
}

# Point values as labelled in the investigator UI. The backend scoring function
# is authoritative; these are not verified against it.
HIGH_AMOUNT_POINTS = 30
RAPID_REPORTS_POINTS = 25
BLACKLIST_POINTS = 50
LOCATION_MISMATCH_POINTS = 20

HIGH_AMOUNT_MIN = Decimal("10000")


def display_risk_label(risk_level: str) -> str:
    """Map an internal risk level to its display label (display only)"""
    return RISK_DISPLAY_MAP.get(risk_level, risk_level.upper())


@dataclass
class RuleHit:
    label: str
    max_points: int
    fired: bool

    @property
    def points(self) -> int:
        return self.max_points if self.fired else 0


def risk_breakdown(amount: Decimal, reasons: Optional[str]) -> List[RuleHit]:
    """Infer which scoring rules fired from the amount and the backend reasons string"""
    reasons = reasons or ""
    return [
        RuleHit("High Amount", HIGH_AMOUNT_POINTS, amount >= HIGH_AMOUNT_MIN),
        RuleHit("Rapid Reports", RAPID_REPORTS_POINTS, "FREQ_TXN" in reasons),
        RuleHit("Blacklisted Recipient", BLACKLIST_POINTS, "blacklist" in reasons.lower()),
        RuleHit("Location Mismatch", LOCATION_MISMATCH_POINTS, "LOC_MISMATCH" in reasons),
    ]
