"""Domain models - pure Python dataclasses for credit passport inputs and results"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Raw inputs: every field optional, resolved later by the normalizer
# ---------------------------------------------------------------------------


@dataclass
class BusinessIdentity:
    """Who the SME is"""

    name: str = ""
    sector: str = ""
    registration_number: Optional[str] = None
    location: Optional[str] = None


@dataclass
class FinancialInputs:
    """Revenue history and financial ratios"""

    annual_revenue: Optional[List[Any]] = None
    monthly_revenue: Optional[List[Any]] = None
    profit_margin: Optional[float] = None  # %, signed
    cashflow_stability: Optional[float] = None  # 0-100
    cash_conversion_cycle: Optional[float] = None  # days
    customer_concentration: Optional[float] = None  # % of revenue from top customers
    debt_service_coverage: Optional[float] = None  # DSCR
    ebitda_margin: Optional[float] = None  # %
    negative_balance_frequency: Optional[float] = None  # count


@dataclass
class BankingInputs:
    """Banking channels and credit behaviour signals"""

    repayment_history: Optional[float] = None  # 0-100
    rejection_history: Optional[float] = None  # count
    overdraft_frequency: Optional[float] = None  # count
    cheque_bounce_history: Optional[float] = None  # count
    sales_channels: Optional[List[str]] = None


@dataclass
class ComplianceInputs:
    """Statutory compliance flags and governance coverage"""

    tax_registration: Optional[bool] = None
    tax_clearance: Optional[bool] = None
    annual_returns: Optional[bool] = None
    business_insurance: Optional[bool] = None
    licenses: Optional[List[str]] = None
    policy_coverage: Optional[float] = None  # 0-100


@dataclass
class OperationalInputs:
    """Digital maturity and operating exposure"""

    digital_footprint: Optional[float] = None  # 0-100
    erp_usage: Optional[float] = None  # 0-100
    delivery_reliability: Optional[float] = None  # 0-100
    customer_satisfaction: Optional[float] = None  # 0-100
    seasonality: Optional[float] = None  # % impact
    supply_chain_risk: Optional[float] = None  # %
    currency_exposure: Optional[float] = None  # %
    continuity_plans: Optional[float] = None  # 0-100


@dataclass
class BehavioralInputs:
    """Platform engagement signals"""

    profile_completion: Optional[float] = None
    engagement: Optional[float] = None
    responsiveness: Optional[float] = None
    data_freshness: Optional[float] = None


@dataclass
class CreditPassportInputs:
    """Raw business signals grouped by domain"""

    business_identity: BusinessIdentity = field(default_factory=BusinessIdentity)
    financials: FinancialInputs = field(default_factory=FinancialInputs)
    banking: BankingInputs = field(default_factory=BankingInputs)
    compliance: ComplianceInputs = field(default_factory=ComplianceInputs)
    digital_operational: OperationalInputs = field(default_factory=OperationalInputs)
    behavioral: BehavioralInputs = field(default_factory=BehavioralInputs)
    # Overrides: credit fields from credit_behavior win over banking,
    # exposure fields from operations win over digital_operational
    credit_behavior: Optional[BankingInputs] = None
    operations: Optional[OperationalInputs] = None


# ---------------------------------------------------------------------------
# Normalized inputs: every field concrete
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedInputs:
    """Inputs after defaulting - scorers read only this"""

    business_name: str
    sector: str

    revenue_series: Tuple[float, ...]
    profit_margin: float
    cashflow_stability: float
    cash_conversion_cycle: float
    customer_concentration: float
    debt_service_coverage: float
    ebitda_margin: float
    negative_balance_frequency: float

    repayment_history: float
    rejection_history: float
    overdraft_frequency: float
    cheque_bounce_history: float
    sales_channel_count: int

    tax_registration: bool
    tax_clearance: bool
    annual_returns: bool
    business_insurance: bool
    has_licenses: bool
    policy_coverage: float

    digital_footprint: float
    erp_usage: float
    delivery_reliability: float
    customer_satisfaction: float
    seasonality: float
    supply_chain_risk: float
    currency_exposure: float
    continuity_plans: float

    profile_completion: float
    engagement: float
    responsiveness: float
    data_freshness: float


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryScore:
    """Score of a single category plus the sub-factors behind it"""

    score: float
    components: Dict[str, float]


@dataclass(frozen=True)
class FundabilityBreakdown:
    """The five category scores feeding the composite"""

    financial_strength: float
    compliance_governance: float
    credit_behavior: float
    digital_operational: float
    behavioral: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "financialStrength": self.financial_strength,
            "complianceGovernance": self.compliance_governance,
            "creditBehavior": self.credit_behavior,
            "digitalOperational": self.digital_operational,
            "behavioral": self.behavioral,
        }


@dataclass(frozen=True)
class RiskProfile:
    """Categorical risk per dimension ("low" | "medium" | "high")"""

    financial_risk: str
    compliance_risk: str
    credit_risk: str
    market_risk: str
    operational_risk: str
    liquidity_concern: str
    overall_risk_level: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "financial_risk": self.financial_risk,
            "compliance_risk": self.compliance_risk,
            "credit_risk": self.credit_risk,
            "market_risk": self.market_risk,
            "operational_risk": self.operational_risk,
            "liquidity_concern": self.liquidity_concern,
            "overall_risk_level": self.overall_risk_level,
        }


@dataclass(frozen=True)
class RepaymentCapacity:
    """Ability to service debt, from DSCR and EBITDA margin"""

    label: str  # "Strong" | "Moderate" | "Weak"
    score: float  # 0-10
    dscr: float
    ebitda_margin: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "score": self.score,
            "details": {"dscr": self.dscr, "ebitdaMargin": self.ebitda_margin},
        }


@dataclass(frozen=True)
class NarrativeSummary:
    """Structured explanation of a passport"""

    headline: str
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()
    bank_concerns: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    suggested_partners: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headline": self.headline,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "bank_concerns": list(self.bank_concerns),
            "recommendations": list(self.recommendations),
            "suggested_partners": list(self.suggested_partners),
        }


@dataclass(frozen=True)
class CreditPassportResult:
    """Output of a passport run - immutable snapshot"""

    fundability_score: int
    breakdown: FundabilityBreakdown
    components: Dict[str, Dict[str, float]]
    interpretation: str
    risk_profile: RiskProfile
    liquidity_index: float
    repayment_capacity: RepaymentCapacity
    resilience_score: float
    narrative: NarrativeSummary
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fundabilityScore": self.fundability_score,
            "breakdown": self.breakdown.to_dict(),
            "components": {name: dict(values) for name, values in self.components.items()},
            "interpretation": self.interpretation,
            "riskProfile": self.risk_profile.to_dict(),
            "liquidityIndex": self.liquidity_index,
            "repaymentCapacity": self.repayment_capacity.to_dict(),
            "resilienceScore": self.resilience_score,
            "narrative": self.narrative.to_dict(),
            "timestamp": self.timestamp,
        }
