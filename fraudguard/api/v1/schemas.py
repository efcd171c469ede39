"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fraudguard.domain.models import Channel, Severity


class ThresholdsSchema(BaseModel):
    """Threshold update request (PUT /v1/thresholds)"""

    min_complaints: int = Field(..., ge=1, description="Distinct complaining customers needed")
    high_amount_threshold: Decimal = Field(..., ge=1000, description="Total reported BDT needed")


class ThresholdsResponse(BaseModel):
    """Thresholds in effect, reported as stored without the request bounds"""

    min_complaints: int
    high_amount_threshold: Decimal


class RecommendationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    recipient_account: str
    complaint_count: int
    total_reported_amount: Decimal
    confirmed_fraud_cases: int
    reasons: List[str]
    is_already_blacklisted: bool


class RecommendationListResponse(BaseModel):
    thresholds: ThresholdsResponse
    recommendations: List[RecommendationSchema]


class RecipientRecommendationResponse(BaseModel):
    recipient_account: str
    recommended: bool
    recommendation: Optional[RecommendationSchema] = None


class BlacklistCreateRequest(BaseModel):
    recipient_value: str = Field(..., min_length=1, description="Recipient account to block")
    reason: Optional[str] = None
    created_by: Optional[str] = None


class BlacklistEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_value: str
    reason: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class BlacklistListResponse(BaseModel):
    entries: List[BlacklistEntrySchema]


class ChannelRankingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    channel: Channel
    severity: Optional[Severity] = None
    total_txn: int
    suspicious_txn: int
    avg_risk_score: Decimal
    suspicious_rate_pct: Decimal


class ChannelRankingResponse(BaseModel):
    window: str
    by_severity: bool
    rows: List[ChannelRankingSchema]
    total_txn: int
    total_suspicious: int


class ChannelHotspotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    channel: Channel
    count: int
    avg_risk_score: int
    total_amount: Decimal
    high_risk_count: int


class RecipientHotspotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    recipient: str
    count: int
    avg_risk_score: int
    total_amount: Decimal
    risk_level: str


class HotspotsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_suspicious: int
    channels: List[ChannelHotspotSchema]
    recipients: List[RecipientHotspotSchema]


class RepeatCustomerSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_id: int
    case_count: int
    latest_case_at: datetime


class RepeatCustomersResponse(BaseModel):
    min_cases: int
    customers: List[RepeatCustomerSchema]


class RuleHitSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    max_points: int
    fired: bool
    points: int


class RiskExplanationResponse(BaseModel):
    txn_id: int
    risk_score: int
    risk_level: str
    display_label: str
    rules: List[RuleHitSchema]


class CaseFeedbackRequest(BaseModel):
    case_id: int
    investigator_id: str
    category: str = ""
    subcategory: str = ""
    investigation_note: str = ""
    comment: Optional[str] = None


class RatingRequest(BaseModel):
    case_id: int
    investigator_id: str
    customer_id: int
    overall: int = 0
    communication: int = 0
    speed: int = 0
    professionalism: int = 0
    feedback: Optional[str] = None


class SubmissionResponse(BaseModel):
    status: str = "submitted"
    record: Dict[str, Any]


class ChangeEventRequest(BaseModel):
    """Database webhook payload"""

    type: str
    table: str
    record: Optional[Dict[str, Any]] = None
    old_record: Optional[Dict[str, Any]] = None


class ChangeEventResponse(BaseModel):
    delivered: int


class CaseMessagesResponse(BaseModel):
    case_id: int
    messages: List[Dict[str, Any]]


class ViewSnapshotSchema(BaseModel):
    rows: List[Any]
    error: Optional[str] = None
    sequence: int


class DashboardResponse(BaseModel):
    recommendations: ViewSnapshotSchema
    channels: ViewSnapshotSchema
    channel_severity: ViewSnapshotSchema
