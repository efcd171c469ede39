"""Unit tests for risk display labels and the rule breakdown"""

from decimal import Decimal

import pytest

from fraudguard.domain.risk_labels import display_risk_label, risk_breakdown


@pytest.mark.parametrize(
    "level,label",
    [
        ("LOW", "SAFE"),
        ("low", "SAFE"),
        ("MEDIUM", "SUSPICIOUS"),
        ("suspicious", "SUSPICIOUS"),
        ("HIGH", "CRITICAL"),
        ("high", "CRITICAL"),
        ("review", "REVIEW"),
    ],
)
def test_display_risk_label(level, label):
    assert display_risk_label(level) == label


def test_breakdown_from_reasons_and_amount():
    rules = {r.label: r for r in risk_breakdown(Decimal("10000"), "FREQ_TXN,Blacklisted recipient")}

    assert rules["High Amount"].points == 30
    assert rules["Rapid Reports"].points == 25
    assert rules["Blacklisted Recipient"].points == 50
    assert rules["Location Mismatch"].fired is False
    assert rules["Location Mismatch"].points == 0


def test_breakdown_without_reasons():
    rules = risk_breakdown(Decimal("9999.99"), None)

    assert [r.fired for r in rules] == [False, False, False, False]
    assert sum(r.points for r in rules) == 0
