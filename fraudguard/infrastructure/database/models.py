"""SQLAlchemy ORM models mirroring the hosted backend's public schema"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

# SQLite only autoincrements INTEGER primary keys
IdType = BigInteger().with_variant(Integer, "sqlite")


class TransactionRow(Base):
    """Customer-reported transaction"""

    __tablename__ = "transactions"

    txn_id = Column(IdType, primary_key=True, autoincrement=True)
    customer_id = Column(BigInteger, nullable=False, index=True)
    txn_amount = Column(Numeric(14, 2), nullable=False)
    txn_channel = Column(Text, nullable=False, default="OTHER")
    recipient_account = Column(Text, nullable=True, index=True)
    txn_location = Column(Text, nullable=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SuspiciousTransactionRow(Base):
    """Risk evaluation written by the backend scoring function"""

    __tablename__ = "suspicious_transactions"

    suspicious_id = Column(IdType, primary_key=True, autoincrement=True)
    txn_id = Column(BigInteger, ForeignKey("transactions.txn_id", ondelete="CASCADE"), nullable=False, unique=True)
    risk_score = Column(Integer, nullable=False)
    risk_level = Column(Text, nullable=False)
    reasons = Column(Text, nullable=True)
    flagged_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FraudCaseRow(Base):
    __tablename__ = "fraud_cases"

    case_id = Column(IdType, primary_key=True, autoincrement=True)
    customer_id = Column(BigInteger, nullable=False, index=True)
    title = Column(Text, nullable=False, default="")
    severity = Column(Text, nullable=False, default="LOW")
    status = Column(Text, nullable=False, default="OPEN")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CaseTransactionRow(Base):
    __tablename__ = "case_transactions"

    case_id = Column(BigInteger, ForeignKey("fraud_cases.case_id", ondelete="CASCADE"), primary_key=True)
    txn_id = Column(BigInteger, ForeignKey("transactions.txn_id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CaseDecisionRow(Base):
    __tablename__ = "case_decisions"

    decision_id = Column(IdType, primary_key=True, autoincrement=True)
    case_id = Column(BigInteger, ForeignKey("fraud_cases.case_id", ondelete="CASCADE"), nullable=False, index=True)
    admin_user_id = Column(Text, nullable=False, default="")
    category = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="DRAFT")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class BlacklistedRecipientRow(Base):
    __tablename__ = "blacklisted_recipients"
    __table_args__ = (UniqueConstraint("recipient_value", name="blacklisted_recipients_recipient_value_key"),)

    id = Column(IdType, primary_key=True, autoincrement=True)
    recipient_value = Column(Text, nullable=False)
    reason = Column(Text, nullable=True)
    created_by = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CaseFeedbackRow(Base):
    __tablename__ = "case_feedback"

    feedback_id = Column(IdType, primary_key=True, autoincrement=True)
    case_id = Column(BigInteger, ForeignKey("fraud_cases.case_id", ondelete="CASCADE"), nullable=False)
    investigator_id = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    subcategory = Column(Text, nullable=False)
    investigation_note = Column(Text, nullable=False)
    comment = Column(Text, nullable=True)
    approval_status = Column(Text, nullable=False, default="PENDING")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class InvestigatorRatingRow(Base):
    __tablename__ = "investigator_ratings"

    rating_id = Column(IdType, primary_key=True, autoincrement=True)
    case_id = Column(BigInteger, ForeignKey("fraud_cases.case_id", ondelete="CASCADE"), nullable=False)
    investigator_id = Column(Text, nullable=False)
    customer_id = Column(BigInteger, nullable=False)
    overall_rating = Column(Integer, nullable=False)
    communication_rating = Column(Integer, nullable=False)
    speed_rating = Column(Integer, nullable=False)
    professionalism_rating = Column(Integer, nullable=False)
    feedback_comment = Column(Text, nullable=True)
    flagged_for_review = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


TABLES = {
    model.__tablename__: model
    for model in (
        TransactionRow,
        SuspiciousTransactionRow,
        FraudCaseRow,
        CaseTransactionRow,
        CaseDecisionRow,
        BlacklistedRecipientRow,
        CaseFeedbackRow,
        InvestigatorRatingRow,
    )
}
