"""
SME auto-diagnosis - deterministic maturity and readiness scoring.

Six dimensions are scored from weighted yes/no factors over a loosely
structured business profile (snake_case sections such as ``profile``,
``financials``, ``compliance``). The scores then drive SWOT statements,
bottlenecks, prioritized recommendations and partner suggestions.
"""

import re
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from credit_passport.utils.numeric import clamp, is_finite_number, round_half_up, to_finite_float

MODEL_VERSION = "v1.0.0"

PARTIAL = "partial"

SECTIONS = (
    "profile",
    "financials",
    "compliance",
    "governance",
    "digital",
    "market",
    "operations",
    "documents",
    "behaviour",
)

# Minimum share of non-empty sections, checked in order
COVERAGE_LEVELS: Tuple[Tuple[float, str], ...] = (
    (0.8, "rich"),
    (0.5, "moderate"),
    (0.3, "basic"),
)
MINIMAL_COVERAGE = "minimal"

# Inclusive upper bounds on the average dimension score
HEALTH_BANDS: Tuple[Tuple[float, str], ...] = (
    (20, "critical"),
    (40, "developing"),
    (60, "emerging"),
    (80, "established"),
)
TOP_HEALTH_BAND = "thriving"

# Inclusive upper bounds on a single dimension score
SCORE_BANDS: Tuple[Tuple[float, str], ...] = (
    (30, "Not yet ready"),
    (60, "Emerging / Semi-ready"),
    (80, "Bankable with support"),
)
TOP_SCORE_BAND = "Strongly bankable"

DEFAULT_STRENGTHS = ("Strong customer understanding", "evidence of market traction")


@dataclass(frozen=True)
class Factor:
    """A weighted condition; met is True, PARTIAL (half weight) or anything else (none)"""

    weight: float
    met: Any


@dataclass(frozen=True)
class DiagnosticsScores:
    funding_readiness: float
    compliance_maturity: float
    governance_maturity: float
    digital_maturity: float
    market_readiness: float
    operational_efficiency: float

    def values(self) -> Tuple[float, ...]:
        return tuple(asdict(self).values())

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class SwotAnalysis:
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()
    opportunities: Tuple[str, ...] = ()
    threats: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "opportunities": list(self.opportunities),
            "threats": list(self.threats),
        }


@dataclass(frozen=True)
class Bottleneck:
    area: str
    severity: str  # high | medium
    description: str
    impact: str


@dataclass(frozen=True)
class Recommendation:
    priority: int
    area: str
    action: str
    why: str
    how: Tuple[str, ...]
    estimated_time: str
    difficulty: str  # low | medium | high

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["how"] = list(self.how)
        return data


@dataclass(frozen=True)
class PartnerSuggestion:
    partner_type: str
    partner_id: str
    name: str
    reason: str
    suggested_product: str
    fit_score: float


@dataclass(frozen=True)
class OpportunitySuggestion:
    opportunity_id: str
    title: str
    type: str
    reason: str


@dataclass(frozen=True)
class DiagnosisResult:
    id: str
    company_id: Optional[str]
    scores: DiagnosticsScores
    score_bands: Dict[str, str]
    health_band: str
    stage: str  # early | growth | scale
    summary_text: str
    swot: SwotAnalysis
    bottlenecks: Tuple[Bottleneck, ...]
    recommendations: Tuple[Recommendation, ...]
    recommended_partners: Tuple[PartnerSuggestion, ...]
    suggested_opportunities: Tuple[OpportunitySuggestion, ...]
    data_coverage_level: str
    last_updated: str
    model_version: str = MODEL_VERSION
    key_strengths: Tuple[str, ...] = ()
    top_gaps: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape returned by the API"""
        return {
            "id": self.id,
            "company_id": self.company_id,
            "overall_summary": {
                "summary_text": self.summary_text,
                "stage": self.stage,
                "health_band": self.health_band,
                "key_strengths": list(self.key_strengths),
                "top_gaps": list(self.top_gaps),
            },
            "swot_analysis": self.swot.to_dict(),
            "scores": self.scores.to_dict(),
            "score_bands": dict(self.score_bands),
            "bottlenecks": [asdict(item) for item in self.bottlenecks],
            "recommendations": [item.to_dict() for item in self.recommendations],
            "recommended_partners": [asdict(item) for item in self.recommended_partners],
            "suggested_opportunities": [asdict(item) for item in self.suggested_opportunities],
            "meta": {
                "last_updated": self.last_updated,
                "data_coverage_level": self.data_coverage_level,
                "model_version": self.model_version,
            },
        }


# ---------------------------------------------------------------------------
# Tolerant access to the raw profile
# ---------------------------------------------------------------------------


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    return value if isinstance(value, Mapping) else {}


def _items(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _present(value: Any) -> bool:
    """Truthiness that treats NaN and oversized numbers as absent"""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return is_finite_number(value) and value != 0
    return bool(value)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def score_from_factors(factors: Sequence[Factor]) -> float:
    """
    Achieved weight as a share of total weight, scaled to 0-100.

    A factor counts fully only when met is exactly True; PARTIAL counts half.
    Zero total weight -> 0.
    """
    total_weight = sum(factor.weight for factor in factors)
    if total_weight == 0:
        return 0.0

    achieved = 0.0
    for factor in factors:
        if factor.met is True:
            achieved += factor.weight
        elif isinstance(factor.met, str) and factor.met == PARTIAL:
            achieved += factor.weight * 0.5

    return clamp(achieved / total_weight * 100)


# ---------------------------------------------------------------------------
# Dimension evaluators
# ---------------------------------------------------------------------------


def evaluate_funding_readiness(data: Mapping[str, Any]) -> float:
    financials = _section(data, "financials")
    compliance = _section(data, "compliance")
    years = to_finite_float(data.get("years_in_operation")) or 0.0

    return score_from_factors(
        [
            Factor(15, _section(data, "registration").get("is_registered")),
            Factor(10, years >= 3),
            Factor(15, len(_items(financials.get("revenue_history"))) >= 2),
            Factor(10, financials.get("profit_trend") == "positive"),
            Factor(15, _present(financials.get("statements_available"))),
            Factor(10, financials.get("debt_status") == "on_time"),
            Factor(10, compliance.get("tax_clearance") is True),
            Factor(5, bool(_items(compliance.get("licenses")))),
            Factor(10, financials.get("cashflow_visibility") is True),
        ]
    )


def evaluate_compliance_maturity(data: Mapping[str, Any]) -> float:
    compliance = _section(data, "compliance")
    governance = _section(data, "governance")
    documents = _section(data, "documents")

    return score_from_factors(
        [
            Factor(15, compliance.get("tax_registered")),
            Factor(15, compliance.get("tax_clearance")),
            Factor(10, compliance.get("returns_on_time")),
            Factor(10, bool(_items(compliance.get("licenses")))),
            Factor(10, len(_items(governance.get("policies"))) >= 2),
            Factor(10, governance.get("board_present")),
            Factor(10, compliance.get("insurance_cover") is True),
            Factor(10, _present(documents.get("registration_certificate"))),
            Factor(10, _present(documents.get("tax_certificate"))),
        ]
    )


def evaluate_governance_maturity(data: Mapping[str, Any]) -> float:
    governance = _section(data, "governance")
    policies = _items(governance.get("policies"))

    return score_from_factors(
        [
            Factor(20, governance.get("board_present")),
            Factor(15, governance.get("advisory_board")),
            Factor(20, "finance" in policies),
            Factor(15, "hr" in policies),
            Factor(10, governance.get("segregation_of_roles")),
            Factor(10, governance.get("risk_management") is True),
            Factor(10, _present(_section(data, "documents").get("audited_financials"))),
        ]
    )


def evaluate_digital_maturity(data: Mapping[str, Any]) -> float:
    digital = _section(data, "digital")
    behaviour = _section(data, "behaviour")
    tools = _items(digital.get("business_tools"))

    return score_from_factors(
        [
            Factor(20, _present(digital.get("website"))),
            Factor(15, bool(_items(digital.get("social_links")))),
            Factor(15, _present(digital.get("online_store"))),
            Factor(15, "accounting" in tools),
            Factor(15, "pos" in tools),
            Factor(10, behaviour.get("response_time") == "fast"),
            Factor(10, behaviour.get("profile_completion") == "high"),
        ]
    )


def evaluate_market_readiness(data: Mapping[str, Any]) -> float:
    profile = _section(data, "profile")
    market = _section(data, "market")
    behaviour = _section(data, "behaviour")

    return score_from_factors(
        [
            Factor(20, _present(profile.get("sector"))),
            Factor(15, _present(profile.get("sub_sector"))),
            Factor(20, bool(_items(market.get("top_clients")))),
            Factor(15, market.get("revenue_concentration") == "balanced"),
            Factor(10, _present(market.get("contracts_active"))),
            Factor(10, behaviour.get("opportunities_engaged") == "high"),
            Factor(10, behaviour.get("course_completion") in ("medium", "high")),
        ]
    )


def evaluate_operational_efficiency(data: Mapping[str, Any]) -> float:
    operations = _section(data, "operations")

    return score_from_factors(
        [
            Factor(20, _present(operations.get("documented_processes"))),
            Factor(15, _present(operations.get("inventory_system"))),
            Factor(15, _present(operations.get("erp_or_pos"))),
            Factor(15, operations.get("delivery_on_time") is True),
            Factor(15, operations.get("quality_control") is True),
            Factor(10, operations.get("supplier_diversity") == "balanced"),
            Factor(10, operations.get("staff_training") is True),
        ]
    )


def score_dimensions(data: Mapping[str, Any]) -> DiagnosticsScores:
    return DiagnosticsScores(
        funding_readiness=evaluate_funding_readiness(data),
        compliance_maturity=evaluate_compliance_maturity(data),
        governance_maturity=evaluate_governance_maturity(data),
        digital_maturity=evaluate_digital_maturity(data),
        market_readiness=evaluate_market_readiness(data),
        operational_efficiency=evaluate_operational_efficiency(data),
    )


# ---------------------------------------------------------------------------
# Bands and labels
# ---------------------------------------------------------------------------


def coverage_level(data: Mapping[str, Any]) -> str:
    """How much of the profile was filled in, by share of non-empty sections"""
    provided = sum(1 for name in SECTIONS if _present(data.get(name)))
    ratio = provided / len(SECTIONS)
    for threshold, label in COVERAGE_LEVELS:
        if ratio >= threshold:
            return label
    return MINIMAL_COVERAGE


def score_band(score: float) -> str:
    for upper, label in SCORE_BANDS:
        if score <= upper:
            return label
    return TOP_SCORE_BAND


def health_band(scores: DiagnosticsScores) -> str:
    """Band of the average dimension score"""
    values = scores.values()
    average = sum(values) / len(values)
    for upper, label in HEALTH_BANDS:
        if average <= upper:
            return label
    return TOP_HEALTH_BAND


def business_stage(scores: DiagnosticsScores) -> str:
    if scores.funding_readiness >= 80:
        return "scale"
    if scores.funding_readiness >= 60:
        return "growth"
    return "early"


STAGE_DESCRIPTIONS = {
    "scale": "scale-ready SME with strong compliance discipline",
    "growth": "growth-stage SME showing bankable traits",
    "early": "emerging SME that needs compliance and financial visibility to unlock growth",
}


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------


def build_swot(data: Mapping[str, Any], scores: DiagnosticsScores) -> SwotAnalysis:
    strengths: List[str] = []
    weaknesses: List[str] = []
    opportunities: List[str] = []
    threats: List[str] = []

    profile = _section(data, "profile")
    market = _section(data, "market")
    operations = _section(data, "operations")

    if scores.funding_readiness >= 70:
        strengths.append("Shows bankable traits with evidence of compliance and financial discipline.")
    else:
        weaknesses.append("Funding readiness is below bankable thresholds; improve financial documentation and compliance.")

    if scores.compliance_maturity >= 70:
        strengths.append("Compliance discipline reduces friction with lenders and corporate buyers.")
    else:
        weaknesses.append("Compliance documentation is light; tax clearance and statutory filings need attention.")

    if scores.digital_maturity >= 70:
        strengths.append("Strong digital presence can accelerate market reach and lead capture.")
    else:
        opportunities.append("Digitising sales channels and customer engagement can drive efficiency and visibility.")

    if market.get("revenue_concentration") == "balanced":
        strengths.append("Revenue is diversified across clients, lowering concentration risk.")
    else:
        threats.append("High customer concentration exposes the business to revenue shocks.")

    if operations.get("supplier_diversity") != "balanced":
        threats.append("Operational dependencies on few suppliers can disrupt delivery.")

    if profile.get("country") == "Zambia":
        opportunities.append("Eligible for Zambian SME financing and tax incentives; optimise compliance to qualify.")

    sector = _text(profile.get("sector"))
    if sector:
        opportunities.append(f"Sector: {sector}, tap into tailored funds and accelerators.")

    return SwotAnalysis(
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
        opportunities=tuple(opportunities),
        threats=tuple(threats),
    )


def build_bottlenecks(scores: DiagnosticsScores) -> Tuple[Bottleneck, ...]:
    items: List[Bottleneck] = []

    if scores.compliance_maturity < 60:
        items.append(
            Bottleneck(
                area="Compliance",
                severity="high" if scores.compliance_maturity < 40 else "medium",
                description="Compliance evidence (tax clearance, licenses, returns) is incomplete or outdated.",
                impact="Blocks access to formal financing and large procurement opportunities.",
            )
        )

    if scores.funding_readiness < 60:
        items.append(
            Bottleneck(
                area="Funding Readiness",
                severity="high" if scores.funding_readiness < 40 else "medium",
                description="Financial records and visibility are insufficient for lenders.",
                impact="Delays or prevents approval for loans and grants.",
            )
        )

    if scores.digital_maturity < 60:
        items.append(
            Bottleneck(
                area="Digital",
                severity="medium",
                description="Limited digital presence and tooling reduce conversion and insight.",
                impact="Leads, collections and market data are not captured effectively.",
            )
        )

    if scores.operational_efficiency < 60:
        items.append(
            Bottleneck(
                area="Operations",
                severity="medium",
                description="Processes, quality control, or delivery tracking are not consistently documented.",
                impact="Operational inconsistency can erode margins and customer trust.",
            )
        )

    return tuple(items)


# (score attribute, recommendation without priority); each applies below 80
RECOMMENDATION_TABLE: Tuple[Tuple[str, Dict[str, Any]], ...] = (
    (
        "compliance_maturity",
        {
            "area": "Compliance",
            "action": "Obtain or renew tax clearance and submit pending statutory returns.",
            "why": "Banks and corporate buyers require valid compliance evidence before onboarding suppliers or granting credit.",
            "how": (
                "Confirm tax registrations (VAT, PAYE, turnover tax) on the revenue authority portal.",
                "Submit outstanding monthly/annual returns and settle arrears.",
                "Request a Tax Clearance Certificate and keep it with your company documents.",
            ),
            "estimated_time": "2-4 weeks",
            "difficulty": "medium",
        },
    ),
    (
        "funding_readiness",
        {
            "area": "Finance",
            "action": "Produce last 12 months management accounts and a cashflow forecast.",
            "why": "Lenders and donors need visibility on revenue trends, margins, and repayment capacity.",
            "how": (
                "Export transactions from bank/POS into accounting software (e.g., Zoho, Xero, or Wave).",
                "Prepare income statement, balance sheet, and cashflow for the last financial year.",
                "Highlight recurring revenue, top customers, and any arrears resolutions.",
            ),
            "estimated_time": "2-3 weeks",
            "difficulty": "medium",
        },
    ),
    (
        "digital_maturity",
        {
            "area": "Digital",
            "action": "Strengthen digital presence and lead capture.",
            "why": "SMEs with active online channels convert more opportunities and build trust.",
            "how": (
                "Launch or update a lightweight website with products/services and contact flows.",
                "Integrate WhatsApp or web chat with response-time SLAs.",
                "Enable digital invoicing and receipt tracking to improve collections.",
            ),
            "estimated_time": "1-2 weeks",
            "difficulty": "low",
        },
    ),
    (
        "operational_efficiency",
        {
            "area": "Operations",
            "action": "Document core processes and assign owners.",
            "why": "Clear SOPs and metrics reduce errors and increase consistency for corporate buyers.",
            "how": (
                "Document procurement-to-delivery workflows with quality checks.",
                "Track on-time delivery and defect rates weekly.",
                "Introduce supplier backups to de-risk supply chain interruptions.",
            ),
            "estimated_time": "2-4 weeks",
            "difficulty": "medium",
        },
    ),
)
RECOMMENDATION_THRESHOLD = 80


def build_recommendations(scores: DiagnosticsScores) -> Tuple[Recommendation, ...]:
    """Recommendations for every dimension below threshold, priorities numbered from 1"""
    selected = [
        template
        for attribute, template in RECOMMENDATION_TABLE
        if getattr(scores, attribute) < RECOMMENDATION_THRESHOLD
    ]
    return tuple(Recommendation(priority=index, **template) for index, template in enumerate(selected, start=1))


def _slug(text: str) -> str:
    return re.sub(r"\s+", "-", text.lower())


def build_partners(scores: DiagnosticsScores, profile: Mapping[str, Any]) -> Tuple[PartnerSuggestion, ...]:
    partners: List[PartnerSuggestion] = []

    if scores.funding_readiness >= 60:
        partners.append(
            PartnerSuggestion(
                partner_type="Bank",
                partner_id="bank_working_capital",
                name="ZamBank SME Unit",
                reason="Active SME working capital facility aligned to your revenue band.",
                suggested_product="Working Capital Facility",
                fit_score=scores.funding_readiness,
            )
        )

    if scores.compliance_maturity < 80:
        partners.append(
            PartnerSuggestion(
                partner_type="Consultant",
                partner_id="compliance_partner",
                name="Compliance & Tax Desk",
                reason="Can regularise filings and secure a tax clearance quickly.",
                suggested_product="Fast-track Tax Clearance",
                fit_score=85,
            )
        )

    partners.append(
        PartnerSuggestion(
            partner_type="Training",
            partner_id="digital_sales_bootcamp",
            name="Digital Sales Bootcamp",
            reason="Improve digital lead generation and conversion.",
            suggested_product="2-week cohort",
            fit_score=75,
        )
    )

    sector = _text(profile.get("sector"))
    if sector:
        partners.append(
            PartnerSuggestion(
                partner_type="Corporate Procurement",
                partner_id=f"{_slug(sector)}-anchor",
                name=f"{sector} Anchor Buyer",
                reason="Active procurement programmes seeking vetted SMEs in your sector.",
                suggested_product="Onboarding & RFP notifications",
                fit_score=70,
            )
        )

    return tuple(partners)


BASE_OPPORTUNITIES = (
    OpportunitySuggestion(
        opportunity_id="grant_early_growth",
        title="Early Growth Grant Window",
        type="Grant",
        reason="Supports SMEs formalising compliance and building systems.",
    ),
    OpportunitySuggestion(
        opportunity_id="market_linkage",
        title="Corporate Supplier Readiness Challenge",
        type="Market",
        reason="Preparation track for anchor buyer onboarding.",
    ),
)

ZAMBIA_OPPORTUNITY = OpportunitySuggestion(
    opportunity_id="zed_zambia_sme_finance",
    title="Zambia SME Blended Finance",
    type="Debt",
    reason="Local currency facility with technical assistance for Zambian SMEs.",
)


def build_opportunities(profile: Mapping[str, Any]) -> Tuple[OpportunitySuggestion, ...]:
    if profile.get("country") == "Zambia":
        return BASE_OPPORTUNITIES + (ZAMBIA_OPPORTUNITY,)
    return BASE_OPPORTUNITIES


def build_summary_text(scores: DiagnosticsScores, swot: SwotAnalysis) -> str:
    stage = STAGE_DESCRIPTIONS[business_stage(scores)]
    first = swot.strengths[0].rstrip(".") if len(swot.strengths) > 0 else DEFAULT_STRENGTHS[0]
    second = swot.strengths[1].rstrip(".") if len(swot.strengths) > 1 else DEFAULT_STRENGTHS[1]

    return " ".join(
        (
            f"Your business is positioned as a {stage}. "
            f"Funding readiness is {round_half_up(scores.funding_readiness)} / 100 and "
            f"compliance maturity is {round_half_up(scores.compliance_maturity)} / 100.",
            f"Key strengths: {first} and {second}.",
            "Top gaps to close in the next quarter: focus on compliance evidence, reliable management "
            "accounts, and a sharper digital presence to engage buyers and lenders.",
        )
    )


def run_diagnosis(data: Any, company_id: Optional[str] = None) -> DiagnosisResult:
    """
    Diagnose an SME profile.

    Total over any input: a non-mapping profile or section is treated as
    empty, and every dimension then scores 0.
    """
    if not isinstance(data, Mapping):
        data = {}

    scores = score_dimensions(data)
    swot = build_swot(data, scores)
    bottlenecks = build_bottlenecks(scores)
    profile = _section(data, "profile")

    return DiagnosisResult(
        id=str(uuid.uuid4()),
        company_id=company_id or None,
        scores=scores,
        score_bands={name: score_band(value) for name, value in scores.to_dict().items()},
        health_band=health_band(scores),
        stage=business_stage(scores),
        summary_text=build_summary_text(scores, swot),
        swot=swot,
        bottlenecks=bottlenecks,
        recommendations=build_recommendations(scores),
        recommended_partners=build_partners(scores, profile),
        suggested_opportunities=build_opportunities(profile),
        data_coverage_level=coverage_level(data),
        last_updated=datetime.now(timezone.utc).isoformat(),
        key_strengths=swot.strengths[:3],
        top_gaps=tuple(item.description for item in bottlenecks[:3]),
    )
