"""Integration tests for API endpoints"""

import json
from decimal import Decimal

from fastapi.testclient import TestClient

from fraudguard.api.dependencies import get_data_access
from fraudguard.domain.exceptions import BackendUnavailableError, BackendValidationError
from fraudguard.infrastructure.backend.base import DataAccess


class DownBackend(DataAccess):
    def __init__(self, error):
        self.error = error

    async def select(self, query):
        raise self.error

    async def insert(self, table, record):
        raise self.error

    async def delete(self, table, column, value):
        raise self.error


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.get("/v1/recommendations")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "fraudguard_evaluation_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_list_recommendations(client: TestClient):
    response = client.get("/v1/recommendations")

    assert response.status_code == 200
    data = response.json()
    assert data["thresholds"]["min_complaints"] == 3
    (rec,) = data["recommendations"]
    assert rec["recipient_account"] == "01700000000"
    assert Decimal(rec["total_reported_amount"]) == Decimal("600000")
    assert len(rec["reasons"]) == 3
    assert rec["is_already_blacklisted"] is False


def test_threshold_update_applies_to_next_evaluation(client: TestClient):
    response = client.put("/v1/thresholds", json={"min_complaints": 1, "high_amount_threshold": 5000})
    assert response.status_code == 200

    assert client.get("/v1/thresholds").json()["min_complaints"] == 1
    recipients = [r["recipient_account"] for r in client.get("/v1/recommendations").json()["recommendations"]]
    assert recipients == ["01700000000", "01811111111"]


def test_threshold_bounds_are_enforced(client: TestClient):
    assert client.put("/v1/thresholds", json={"min_complaints": 0, "high_amount_threshold": 5000}).status_code == 422
    assert client.put("/v1/thresholds", json={"min_complaints": 2, "high_amount_threshold": 999}).status_code == 422


def test_out_of_range_stored_thresholds_are_still_readable(client: TestClient, threshold_store):
    threshold_store.path.write_text(json.dumps({"minComplaints": 0, "highAmountThreshold": 500}), encoding="utf-8")

    response = client.get("/v1/thresholds")
    assert response.status_code == 200
    assert response.json()["min_complaints"] == 0
    assert Decimal(response.json()["high_amount_threshold"]) == Decimal("500")

    listing = client.get("/v1/recommendations")
    assert listing.status_code == 200
    assert listing.json()["thresholds"]["min_complaints"] == 0
    assert {r["recipient_account"] for r in listing.json()["recommendations"]} == {"01700000000", "01811111111"}


def test_single_recipient(client: TestClient):
    data = client.get("/v1/recommendations/01700000000").json()
    assert data["recommended"] is True
    assert data["recommendation"]["confirmed_fraud_cases"] == 1

    clear = client.get("/v1/recommendations/01811111111").json()
    assert clear == {"recipient_account": "01811111111", "recommended": False, "recommendation": None}


def test_blacklist_lifecycle(client: TestClient):
    created = client.post("/v1/blacklist", json={"recipient_value": "01700000000", "reason": "mule", "created_by": "admin-1"})
    assert created.status_code == 201
    entry_id = created.json()["id"]

    duplicate = client.post("/v1/blacklist", json={"recipient_value": "01700000000"})
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Already blacklisted"

    rec = client.get("/v1/recommendations/01700000000").json()["recommendation"]
    assert rec["is_already_blacklisted"] is True

    assert [e["id"] for e in client.get("/v1/blacklist").json()["entries"]] == [entry_id]
    assert client.delete(f"/v1/blacklist/{entry_id}").status_code == 204
    assert client.delete(f"/v1/blacklist/{entry_id}").status_code == 404


def test_blank_blacklist_recipient_is_rejected(client: TestClient):
    assert client.post("/v1/blacklist", json={"recipient_value": "   "}).status_code == 422


def test_channel_rankings(client: TestClient):
    data = client.get("/v1/analytics/channels", params={"window": "all"}).json()

    assert data["rows"][0]["channel"] == "BKASH"
    assert data["total_txn"] == 6
    assert data["total_suspicious"] == 2

    severity = client.get("/v1/analytics/channels", params={"by_severity": "true"}).json()
    assert severity["rows"][0]["severity"] == "HIGH"
    assert severity["rows"][1]["severity"] is None


def test_unknown_window_is_rejected(client: TestClient):
    assert client.get("/v1/analytics/channels", params={"window": "90days"}).status_code == 422


def test_hotspots_and_risk_explanation(client: TestClient):
    hotspots = client.get("/v1/analytics/hotspots", params={"top_n": 1}).json()
    assert hotspots["total_suspicious"] == 3
    assert len(hotspots["recipients"]) == 1

    explanation = client.get("/v1/analytics/transactions/1/risk").json()
    assert explanation["display_label"] == "CRITICAL"
    assert [r["label"] for r in explanation["rules"] if r["fired"]] == ["High Amount", "Blacklisted Recipient"]

    assert client.get("/v1/analytics/transactions/6/risk").status_code == 404


def test_repeat_customers(client: TestClient):
    data = client.get("/v1/analytics/repeat-customers").json()

    assert data["min_cases"] == 2
    assert [(c["customer_id"], c["case_count"]) for c in data["customers"]] == [(101, 2)]
    assert client.get("/v1/analytics/repeat-customers", params={"min_cases": 3}).json()["customers"] == []
    assert client.get("/v1/analytics/repeat-customers", params={"min_cases": 1}).status_code == 422


def test_dashboard_loads_on_first_read(client: TestClient):
    data = client.get("/v1/dashboard").json()

    assert data["recommendations"]["sequence"] == 1
    assert data["recommendations"]["rows"][0]["recipient_account"] == "01700000000"
    assert data["channels"]["error"] is None

    refreshed = client.post("/v1/dashboard/refresh").json()
    assert refreshed["channel_severity"]["sequence"] == 2


def test_case_feedback_validation(client: TestClient):
    response = client.post(
        "/v1/feedback/case",
        json={"case_id": 1, "investigator_id": "inv-1", "category": "EVIDENCE_REVIEW", "subcategory": ""},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == {"field": "subcategory", "message": "Please select a subcategory"}


def test_case_feedback_submission(client: TestClient):
    response = client.post(
        "/v1/feedback/case",
        json={
            "case_id": 1,
            "investigator_id": "inv-1",
            "category": "RECOMMENDATION",
            "subcategory": "CONFIRMED_FRAUD",
            "investigation_note": "Three victims, same wallet",
        },
    )

    assert response.status_code == 201
    assert response.json()["record"]["approval_status"] == "PENDING"


def test_rating_requires_feedback_when_low(client: TestClient):
    response = client.post(
        "/v1/feedback/rating",
        json={"case_id": 1, "investigator_id": "inv-1", "customer_id": 101, "overall": 1, "communication": 3, "speed": 2, "professionalism": 2},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "feedback"


def test_realtime_event_reaches_watchers(client: TestClient):
    seen = []
    client.app.state.realtime.watch("fraud_cases", seen.append, event="UPDATE", row_filter=("case_id", 1))

    response = client.post(
        "/v1/realtime/events",
        json={"type": "update", "table": "fraud_cases", "record": {"case_id": 1, "status": "CLOSED"}},
    )

    assert response.status_code == 202
    assert response.json() == {"delivered": 1}
    assert seen[0].record["status"] == "CLOSED"


def test_case_messages_follow_webhook_events(client: TestClient):
    assert client.get("/v1/realtime/cases/1/messages").json() == {"case_id": 1, "messages": []}

    event = {"type": "INSERT", "table": "case_messages", "record": {"message_id": 7, "case_id": 1, "body": "Called the victim"}}
    client.post("/v1/realtime/events", json=event)
    client.post("/v1/realtime/events", json=event)

    messages = client.get("/v1/realtime/cases/1/messages").json()["messages"]
    assert messages == [{"message_id": 7, "case_id": 1, "body": "Called the victim"}]


def test_backend_errors_map_to_status_codes(client: TestClient):
    client.app.dependency_overrides[get_data_access] = lambda: DownBackend(BackendUnavailableError("down"))
    assert client.get("/v1/recommendations").status_code == 503
    assert client.get("/v1/analytics/channels").status_code == 503

    client.app.dependency_overrides[get_data_access] = lambda: DownBackend(BackendValidationError("bad row"))
    assert client.get("/v1/blacklist").status_code == 502
