"""Prometheus metrics for recommendation volume, backend health and view freshness"""

from prometheus_client import Counter, Histogram

# Recommendation metrics
evaluation_counter = Counter(
    "fraudguard_evaluation_total",
    "Blacklist recommendation evaluations run",
    ["scope", "outcome"],  # one | all ; recommended | clear | failed
)

recommendation_counter = Counter(
    "fraudguard_recommendations_emitted_total",
    "Recommendations emitted by reason",
    ["reason"],  # complaints | amount | confirmed_fraud
)

# Blacklist metrics
blacklist_outcome_counter = Counter(
    "fraudguard_blacklist_outcome_total",
    "Blacklist write outcomes",
    ["action", "outcome"],  # add | remove ; added | duplicate | removed | missing
)

# Backend metrics
backend_failure_counter = Counter(
    "fraudguard_backend_failures_total",
    "Failed backend calls by error kind",
    ["kind"],  # conflict | validation | network | unknown
)

aggregation_latency_histogram = Histogram(
    "fraudguard_aggregation_seconds",
    "Fetch-and-aggregate duration",
    ["view"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# View freshness
stale_response_counter = Counter(
    "fraudguard_stale_responses_total",
    "View refresh results discarded because a newer refresh was issued",
    ["view"],
)

realtime_event_counter = Counter(
    "fraudguard_realtime_events_total",
    "Change events delivered to the realtime hub",
    ["table", "event"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)

REASON_LABELS = (
    ("High Complaint Risk", "complaints"),
    ("High Financial Risk", "amount"),
    ("Confirmed Fraud Signal", "confirmed_fraud"),
)


def record_evaluation(scope: str, recommendations: list) -> None:
    """Record an evaluation run and the reasons it produced"""
    outcome = "recommended" if recommendations else "clear"
    evaluation_counter.labels(scope=scope, outcome=outcome).inc()

    for rec in recommendations:
        for reason in rec.reasons:
            for prefix, label in REASON_LABELS:
                if reason.startswith(prefix):
                    recommendation_counter.labels(reason=label).inc()
