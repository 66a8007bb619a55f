"""Fundability scoring engine - core business logic for credit passports"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from credit_passport.domain.models import (
    CategoryScore,
    CreditPassportInputs,
    CreditPassportResult,
    FundabilityBreakdown,
    NormalizedInputs,
    RepaymentCapacity,
)
from credit_passport.domain.narrative import ScoreSummary, build_narrative
from credit_passport.domain.normalizer import normalize_inputs
from credit_passport.domain.risk import classify_risk
from credit_passport.utils.numeric import clamp, is_finite_number, round_half_up, round_to_tenth

CATEGORY_WEIGHTS: Dict[str, float] = {
    "financial_strength": 0.40,
    "compliance_governance": 0.20,
    "credit_behavior": 0.20,
    "digital_operational": 0.10,
    "behavioral": 0.10,
}

CATEGORY_DEFAULT = 55.0
TREND_DEFAULT = 55.0
LIQUIDITY_DEFAULT = 60.0
RESILIENCE_DEFAULT = 60.0

# Inclusive upper bounds
INTERPRETATION_BANDS: Tuple[Tuple[int, str], ...] = (
    (30, "Very Low Fundability"),
    (50, "Low Fundability"),
    (70, "Medium Fundability (Bankable with support)"),
    (90, "High Fundability"),
)
TOP_INTERPRETATION = "Very High Fundability"


def weighted_average(entries: Sequence[Tuple[float, float]], default: float = CATEGORY_DEFAULT) -> float:
    """
    Weighted mean of (score, weight) pairs, clamped to [0, 100].

    Entries with a non-finite score or weight are dropped. The sum is
    normalized by the weights actually used; with nothing left, default.
    """
    valid = [(score, weight) for score, weight in entries if is_finite_number(score) and is_finite_number(weight)]
    if not valid:
        return default

    total_weight = sum(weight for _, weight in valid) or 1.0
    score = sum(score * weight for score, weight in valid) / total_weight
    return clamp(score)


def trend_score(values: Sequence[Any]) -> float:
    """
    Positive momentum ratio of an ordered series.

    Share of consecutive pairs where the later value is >= the earlier one,
    scaled to 0-100. Fewer than 2 valid points -> TREND_DEFAULT.
    """
    cleaned = [v for v in values if is_finite_number(v)]
    if len(cleaned) < 2:
        return TREND_DEFAULT

    positive = sum(1 for prev, curr in zip(cleaned, cleaned[1:]) if curr >= prev)
    return clamp(positive / (len(cleaned) - 1) * 100)


def score_financial_strength(inputs: NormalizedInputs) -> CategoryScore:
    """
    Weights:
    - 35%: revenue momentum
    - 25%: profitability (50 + 2 x profit margin)
    - 25%: cashflow stability
    - 15%: customer diversification (40 + 10 per sales channel)
    """
    revenue = trend_score(inputs.revenue_series)
    profitability = clamp(50 + inputs.profit_margin * 2)
    diversification = clamp(40 + inputs.sales_channel_count * 10)

    score = weighted_average(
        [
            (revenue, 0.35),
            (profitability, 0.25),
            (inputs.cashflow_stability, 0.25),
            (diversification, 0.15),
        ]
    )
    return CategoryScore(
        score=score,
        components={
            "revenueScore": revenue,
            "profitabilityScore": profitability,
            "cashflowStability": inputs.cashflow_stability,
            "customerDiversification": diversification,
        },
    )


def score_compliance_governance(inputs: NormalizedInputs) -> CategoryScore:
    """40 base + up to 40 for filing completeness + 0.2 x policy coverage"""
    flags = [
        inputs.tax_registration,
        inputs.tax_clearance,
        inputs.annual_returns,
        inputs.business_insurance,
        inputs.has_licenses,
    ]
    completeness = sum(1 for flag in flags if flag) / len(flags)

    return CategoryScore(
        score=clamp(40 + completeness * 40 + inputs.policy_coverage * 0.2),
        components={
            "complianceCompleteness": clamp(completeness * 100),
            "governancePolicies": inputs.policy_coverage,
        },
    )


def score_credit_behavior(inputs: NormalizedInputs) -> CategoryScore:
    """Repayment history less 5 points per adverse event (capped at 40), plus 30"""
    adverse_events = inputs.rejection_history + inputs.overdraft_frequency + inputs.cheque_bounce_history
    penalty = clamp(adverse_events * 5, 0, 40)

    return CategoryScore(
        score=clamp(inputs.repayment_history - penalty + 30),
        components={
            "repaymentHistory": inputs.repayment_history,
            "penalty": penalty,
        },
    )


def score_digital_operational(inputs: NormalizedInputs) -> CategoryScore:
    components = {
        "digitalFootprint": inputs.digital_footprint,
        "erpUsage": inputs.erp_usage,
        "deliveryReliability": inputs.delivery_reliability,
        "customerSatisfaction": inputs.customer_satisfaction,
    }
    score = weighted_average([(value, 0.25) for value in components.values()])
    return CategoryScore(score=score, components=components)


def score_behavioral(inputs: NormalizedInputs) -> CategoryScore:
    score = weighted_average(
        [
            (inputs.profile_completion, 0.35),
            (inputs.engagement, 0.25),
            (inputs.responsiveness, 0.2),
            (inputs.data_freshness, 0.2),
        ]
    )
    return CategoryScore(
        score=score,
        components={
            "profileCompletion": inputs.profile_completion,
            "engagement": inputs.engagement,
            "responsiveness": inputs.responsiveness,
            "dataFreshness": inputs.data_freshness,
        },
    )


def calculate_fundability_score(breakdown: FundabilityBreakdown) -> int:
    """Weighted sum of the category scores, rounded half-up"""
    total = (
        breakdown.financial_strength * CATEGORY_WEIGHTS["financial_strength"]
        + breakdown.compliance_governance * CATEGORY_WEIGHTS["compliance_governance"]
        + breakdown.credit_behavior * CATEGORY_WEIGHTS["credit_behavior"]
        + breakdown.digital_operational * CATEGORY_WEIGHTS["digital_operational"]
        + breakdown.behavioral * CATEGORY_WEIGHTS["behavioral"]
    )
    return int(clamp(round_half_up(total)))


def interpret_score(score: float) -> str:
    """
    Map fundability score to an ordinal label.

    Bands: <=30 very low, <=50 low, <=70 medium (bankable with support),
    <=90 high, above that very high.
    """
    for upper, label in INTERPRETATION_BANDS:
        if score <= upper:
            return label
    return TOP_INTERPRETATION


def calculate_liquidity_index(inputs: NormalizedInputs) -> float:
    """0-10 short-term cash adequacy, 1 decimal place"""
    liquidity = weighted_average(
        [
            (inputs.cashflow_stability, 0.5),
            ((10 - inputs.negative_balance_frequency) * 10, 0.2),
            (100 - inputs.cash_conversion_cycle, 0.3),
        ],
        default=LIQUIDITY_DEFAULT,
    )
    return round_to_tenth(liquidity / 10)


def calculate_repayment_capacity(inputs: NormalizedInputs) -> RepaymentCapacity:
    """
    Strength = 40 + 20 x DSCR + 0.8 x EBITDA margin (clamped 0-100).

    Labels: Strong >= 75, Moderate >= 55, Weak below.
    """
    dscr = inputs.debt_service_coverage
    ebitda_margin = inputs.ebitda_margin
    strength = clamp(40 + dscr * 20 + ebitda_margin * 0.8)

    if strength >= 75:
        label = "Strong"
    elif strength >= 55:
        label = "Moderate"
    else:
        label = "Weak"

    return RepaymentCapacity(
        label=label,
        score=round_to_tenth(strength / 10),
        dscr=dscr,
        ebitda_margin=ebitda_margin,
    )


def calculate_resilience_score(inputs: NormalizedInputs) -> float:
    """Exposure to external shocks; each risk percentage is inverted"""
    return weighted_average(
        [
            (100 - inputs.customer_concentration, 0.25),
            (100 - inputs.supply_chain_risk, 0.2),
            (100 - inputs.currency_exposure, 0.2),
            (100 - inputs.seasonality, 0.2),
            (inputs.continuity_plans, 0.15),
        ],
        default=RESILIENCE_DEFAULT,
    )


def generate_credit_passport(
    inputs: Union[CreditPassportInputs, Mapping[str, Any], None],
    notes: Optional[Sequence[str]] = None,
) -> CreditPassportResult:
    """
    Main entry point: score raw business signals into a credit passport.

    Pure and total - partial or malformed inputs fall back to neutral
    defaults. Identical inputs give identical results apart from timestamp.
    """
    normalized = normalize_inputs(inputs)

    financial = score_financial_strength(normalized)
    compliance = score_compliance_governance(normalized)
    credit = score_credit_behavior(normalized)
    digital = score_digital_operational(normalized)
    behavioral = score_behavioral(normalized)

    breakdown = FundabilityBreakdown(
        financial_strength=financial.score,
        compliance_governance=compliance.score,
        credit_behavior=credit.score,
        digital_operational=digital.score,
        behavioral=behavioral.score,
    )
    fundability_score = calculate_fundability_score(breakdown)
    interpretation = interpret_score(fundability_score)

    liquidity_index = calculate_liquidity_index(normalized)
    repayment_capacity = calculate_repayment_capacity(normalized)
    resilience_score = calculate_resilience_score(normalized)
    risk_profile = classify_risk(breakdown, liquidity_index, resilience_score)

    narrative = build_narrative(
        normalized.business_name,
        ScoreSummary(
            fundability_score=fundability_score,
            interpretation=interpretation,
            breakdown=breakdown,
            liquidity_index=liquidity_index,
            resilience_score=resilience_score,
            risk_profile=risk_profile,
            seasonality=normalized.seasonality,
        ),
        notes=notes,
    )

    return CreditPassportResult(
        fundability_score=fundability_score,
        breakdown=breakdown,
        components={
            "financialStrength": financial.components,
            "complianceGovernance": compliance.components,
            "creditBehavior": credit.components,
            "digitalOperational": digital.components,
            "behavioral": behavioral.components,
        },
        interpretation=interpretation,
        risk_profile=risk_profile,
        liquidity_index=liquidity_index,
        repayment_capacity=repayment_capacity,
        resilience_score=resilience_score,
        narrative=narrative,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
