"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from credit_passport.domain.monetization import PAYMENT_STATUSES, PAYMENT_SUCCESS

PAYMENT_STATUS_PATTERN = "^(" + "|".join(PAYMENT_STATUSES) + ")$"


class PricingSchema(BaseModel):
    generate: int
    share: int
    pdf: int
    currency: str


class ConfigResponse(BaseModel):
    """Response for GET /v1/credit-passports/config"""

    pricing: PricingSchema
    payment_rules: Dict[str, str]


class PayRequest(BaseModel):
    """Request body for POST /v1/credit-passports/pay"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    company_id: str = Field(..., min_length=1, description="Company identifier")
    payment_method: str = Field(..., min_length=1, description="e.g. mobile_money, card")
    payment_gateway: Optional[str] = None
    payment_reference: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0, description="Overrides the generation price")
    currency: Optional[str] = None
    auto_confirm: bool = False
    input_data: Dict[str, Any] = Field(default_factory=dict, description="Raw business signals; any field may be omitted")


class ConfirmPaymentRequest(BaseModel):
    """Request body for POST /v1/credit-passports/{id}/confirm-payment"""

    status: str = Field(PAYMENT_SUCCESS, pattern=PAYMENT_STATUS_PATTERN)
    gateway: Optional[str] = None
    reference: Optional[str] = None


class GenerateRequest(BaseModel):
    """Request body for POST /v1/credit-passports/{id}/generate"""

    user_id: str = Field(..., min_length=1)
    notes: Optional[str] = Field(None, description="Appended to the recommendations")


class PaidActionRequest(BaseModel):
    """Request body for share and PDF actions"""

    user_id: str = Field(..., min_length=1)
    payment_status: Optional[str] = None
    auto_confirm: bool = False
    payment_gateway: Optional[str] = None
    payment_reference: Optional[str] = None

    def resolved_payment_status(self) -> str:
        if self.payment_status:
            return self.payment_status
        return "success" if self.auto_confirm else "pending"


class RunSchema(BaseModel):
    """A persisted passport run"""

    id: str
    user_id: str
    company_id: str
    input_data: Dict[str, Any]
    output_data: Optional[Dict[str, Any]] = None
    fundability_score: Optional[float] = None
    risk_profile: Optional[Dict[str, str]] = None
    liquidity_index: Optional[float] = None
    resilience_score: Optional[float] = None
    repayment_capacity: Optional[Dict[str, Any]] = None
    narrative_source: Optional[str] = None
    payment_status: str
    amount: float
    currency: str
    payment_reference: Optional[str] = None
    payment_gateway: Optional[str] = None
    pdf_url: Optional[str] = None
    share_count: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    generated_at: Optional[str] = None


class PaymentInfo(BaseModel):
    status: str
    reference: Optional[str] = None
    requires_confirmation: bool
    message: str


class PayResponse(BaseModel):
    """Response for POST /v1/credit-passports/pay"""

    run: RunSchema
    payment: PaymentInfo


class RunResponse(BaseModel):
    run: RunSchema


class ActionReceipt(BaseModel):
    price: int
    status: str


class ShareResponse(BaseModel):
    run: RunSchema
    share: ActionReceipt


class PdfResponse(BaseModel):
    run: RunSchema
    pdf: ActionReceipt


class RunListResponse(BaseModel):
    runs: List[RunSchema]


class HistoryItem(BaseModel):
    """Single generated passport in history"""

    run_id: str
    company_id: str
    fundability_score: int
    interpretation: str
    overall_risk_level: str
    timestamp: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/credit-passports/history"""

    user_id: str
    runs: List[HistoryItem]


def to_run_schema(run: Any) -> RunSchema:
    """Map a CreditPassportRun row to its API representation"""

    def iso(value: Any) -> Optional[str]:
        return value.isoformat() if value is not None else None

    return RunSchema(
        id=str(run.id),
        user_id=run.user_id,
        company_id=run.company_id,
        input_data=run.input_data or {},
        output_data=run.output_data,
        fundability_score=run.fundability_score,
        risk_profile=run.risk_profile,
        liquidity_index=run.liquidity_index,
        resilience_score=run.resilience_score,
        repayment_capacity=run.repayment_capacity,
        narrative_source=run.narrative_source,
        payment_status=run.payment_status,
        amount=run.amount,
        currency=run.currency,
        payment_reference=run.payment_reference,
        payment_gateway=run.payment_gateway,
        pdf_url=run.pdf_url,
        share_count=run.share_count or 0,
        created_at=iso(run.created_at),
        updated_at=iso(run.updated_at),
        generated_at=iso(run.generated_at),
    )


class DiagnosisRequest(BaseModel):
    """Request body for POST /v1/diagnostics"""

    company_id: Optional[str] = None
    input_data: Dict[str, Any] = Field(default_factory=dict, description="Business profile sections; any may be omitted")


class DiagnosisResponse(BaseModel):
    diagnosis: Dict[str, Any]
