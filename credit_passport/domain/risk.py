"""Risk classification - maps scores to categorical risk levels"""

from typing import Sequence

from credit_passport.domain.models import FundabilityBreakdown, RiskProfile

LOW = "low"
MEDIUM = "medium"
HIGH = "high"


def risk_level(score: float) -> str:
    """
    Threshold a 0-100 score (higher is better) into a risk level.

    - 75+:   low
    - 55-75: medium
    - <55:   high
    """
    if score >= 75:
        return LOW
    elif score >= 55:
        return MEDIUM
    else:
        return HIGH


def liquidity_concern(liquidity_index: float) -> str:
    """Liquidity index is on a 0-10 scale with its own bands"""
    if liquidity_index < 5:
        return HIGH
    elif liquidity_index < 7:
        return MEDIUM
    else:
        return LOW


def overall_risk(levels: Sequence[str]) -> str:
    """
    Aggregate per-dimension levels.

    Two or more high dimensions dominate; otherwise three or more low
    dimensions make the profile low; anything else is medium.
    """
    if sum(1 for level in levels if level == HIGH) >= 2:
        return HIGH
    if sum(1 for level in levels if level == LOW) >= 3:
        return LOW
    return MEDIUM


def classify_risk(
    breakdown: FundabilityBreakdown,
    liquidity_index: float,
    resilience_score: float,
) -> RiskProfile:
    """Build the full risk profile from category scores and auxiliary indices"""
    financial = risk_level(breakdown.financial_strength)
    compliance = risk_level(breakdown.compliance_governance)
    credit = risk_level(breakdown.credit_behavior)
    market = risk_level(resilience_score)
    operational = risk_level(breakdown.digital_operational)
    liquidity = liquidity_concern(liquidity_index)

    return RiskProfile(
        financial_risk=financial,
        compliance_risk=compliance,
        credit_risk=credit,
        market_risk=market,
        operational_risk=operational,
        liquidity_concern=liquidity,
        overall_risk_level=overall_risk((financial, compliance, credit, market, operational, liquidity)),
    )
