"""SQLAlchemy ORM models for persisted passport runs"""

import uuid
from sqlalchemy import Column, Float, DateTime, Integer, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class CreditPassportRun(Base):
    """One paid passport run: inputs, payment state and generated output"""

    __tablename__ = "credit_passport_runs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    company_id = Column(Text, nullable=False, index=True)
    input_data = Column(JSON, nullable=False, default=dict)
    output_data = Column(JSON, nullable=True)

    # Denormalized scores for querying
    fundability_score = Column(Float, nullable=True, index=True)
    financial_strength = Column(Float, nullable=True)
    compliance_maturity = Column(Float, nullable=True)
    credit_behaviour = Column(Float, nullable=True)
    digital_maturity = Column(Float, nullable=True)
    behavioural_score = Column(Float, nullable=True)
    risk_profile = Column(JSON, nullable=True)
    liquidity_index = Column(Float, nullable=True)
    resilience_score = Column(Float, nullable=True)
    repayment_capacity = Column(JSON, nullable=True)
    narrative_source = Column(Text, nullable=True)  # rules | llm | fallback
    generated_at = Column(DateTime(timezone=True), nullable=True)

    # Payment state
    payment_status = Column(Text, nullable=False, default="pending")
    amount = Column(Float, nullable=False)
    currency = Column(Text, nullable=False, default="ZMW")
    payment_reference = Column(Text, nullable=True)
    payment_gateway = Column(Text, nullable=True)

    # Paid actions
    pdf_url = Column(Text, nullable=True)
    share_count = Column(Integer, nullable=False, default=0)
    last_share_reference = Column(Text, nullable=True)
    last_share_gateway = Column(Text, nullable=True)
    last_pdf_reference = Column(Text, nullable=True)
    last_pdf_gateway = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
