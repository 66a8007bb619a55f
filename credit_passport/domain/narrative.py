"""
Narrative builder - rule-based explanation of a credit passport.

Each section is an ordered table of (predicate, text) rules evaluated against
the computed scores. The rule-based narrative is always produced; an external
text generator may enrich it through the NarrativeAugmenter hook, but any
failure there falls back to the rule-based output.
"""

from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Protocol, Sequence, Tuple

from credit_passport.domain.exceptions import NarrativeProviderError
from credit_passport.domain.models import (
    FundabilityBreakdown,
    NarrativeSummary,
    NormalizedInputs,
    RiskProfile,
)
from credit_passport.domain.risk import HIGH

NARRATIVE_SOURCE_RULES = "rules"
NARRATIVE_SOURCE_LLM = "llm"
NARRATIVE_SOURCE_FALLBACK = "fallback"

BASELINE_RECOMMENDATIONS = (
    "align repayment schedules with cash conversion cycles",
    "keep tax clearance and statutory filings up to date",
    "maintain digital transaction trails via bank/POS/mobile money",
)

SUGGESTED_PARTNERS = (
    "Commercial banks open to SME scoring",
    "Impact lenders with working capital products",
    "Guarantee providers",
)

DEFAULT_BUSINESS_NAME = "This SME"


@dataclass(frozen=True)
class ScoreSummary:
    """Everything the narrative rules may look at"""

    fundability_score: int
    interpretation: str
    breakdown: FundabilityBreakdown
    liquidity_index: float
    resilience_score: float
    risk_profile: RiskProfile
    seasonality: float


@dataclass(frozen=True)
class NarrativeRule:
    predicate: Callable[[ScoreSummary], bool]
    text: str


STRENGTH_RULES: Tuple[NarrativeRule, ...] = (
    NarrativeRule(lambda s: s.breakdown.financial_strength >= 70, "strong revenue traction and improving profitability"),
    NarrativeRule(lambda s: s.liquidity_index >= 7, "solid liquidity buffers and predictable cashflows"),
    NarrativeRule(lambda s: s.breakdown.compliance_governance >= 70, "good compliance hygiene and governance discipline"),
    NarrativeRule(lambda s: s.breakdown.digital_operational >= 65, "operational maturity with digital tooling"),
)

WEAKNESS_RULES: Tuple[NarrativeRule, ...] = (
    NarrativeRule(lambda s: s.breakdown.credit_behavior < 60, "credit behaviour needs improvement or deeper history"),
    NarrativeRule(lambda s: s.risk_profile.compliance_risk == HIGH, "compliance documentation needs tightening"),
    NarrativeRule(lambda s: s.liquidity_index < 6, "cashflow volatility may affect repayment timing"),
)

CONCERN_RULES: Tuple[NarrativeRule, ...] = (
    NarrativeRule(lambda s: s.risk_profile.market_risk == HIGH, "exposure to market swings and concentration risk"),
    NarrativeRule(lambda s: s.seasonality > 40, "seasonality may require structured repayment plans"),
)


def apply_rules(rules: Iterable[NarrativeRule], summary: ScoreSummary) -> Tuple[str, ...]:
    """Texts of the rules whose predicate holds, in table order"""
    return tuple(rule.text for rule in rules if rule.predicate(summary))


def build_headline(business_name: str, fundability_score: int, interpretation: str) -> str:
    name = business_name or DEFAULT_BUSINESS_NAME
    return f"{name} has a fundability score of {fundability_score} ({interpretation})."


def build_narrative(
    business_name: str,
    summary: ScoreSummary,
    notes: Optional[Sequence[str]] = None,
) -> NarrativeSummary:
    """
    Rule-based narrative. Always complete: recommendations and partners carry
    baseline entries even when no rule fires. Caller notes are appended to the
    recommendations.
    """
    extra = tuple(note.strip() for note in (notes or ()) if isinstance(note, str) and note.strip())

    return NarrativeSummary(
        headline=build_headline(business_name, summary.fundability_score, summary.interpretation),
        strengths=apply_rules(STRENGTH_RULES, summary),
        weaknesses=apply_rules(WEAKNESS_RULES, summary),
        bank_concerns=apply_rules(CONCERN_RULES, summary),
        recommendations=BASELINE_RECOMMENDATIONS + extra,
        suggested_partners=SUGGESTED_PARTNERS,
    )


class NarrativeAugmenter(Protocol):
    """Capability that rewrites a narrative with richer prose"""

    async def augment(self, base: NarrativeSummary, inputs: NormalizedInputs) -> NarrativeSummary:
        ...


NARRATIVE_SECTIONS = ("strengths", "weaknesses", "bank_concerns", "recommendations", "suggested_partners")


def _is_well_formed(narrative: object) -> bool:
    """A narrative with a non-blank headline and string-only sections"""
    if not isinstance(narrative, NarrativeSummary):
        return False
    if not isinstance(narrative.headline, str) or not narrative.headline.strip():
        return False
    for name in NARRATIVE_SECTIONS:
        items = getattr(narrative, name)
        if not isinstance(items, (tuple, list)) or not all(isinstance(item, str) for item in items):
            return False
    return True


@dataclass(frozen=True)
class NarrativeOutcome:
    narrative: NarrativeSummary
    source: str  # rules | llm | fallback
    error: Optional[str] = None


async def augment_narrative(
    base: NarrativeSummary,
    inputs: NormalizedInputs,
    augmenter: Optional[NarrativeAugmenter],
) -> NarrativeOutcome:
    """
    Try the augmenter; keep the rule-based narrative if it is absent or fails.

    Never raises: provider errors, unexpected exceptions and malformed
    narratives all yield the base narrative with source "fallback".
    """
    if augmenter is None:
        return NarrativeOutcome(narrative=base, source=NARRATIVE_SOURCE_RULES)

    try:
        narrative = await augmenter.augment(base, inputs)
    except NarrativeProviderError as e:
        return NarrativeOutcome(narrative=base, source=NARRATIVE_SOURCE_FALLBACK, error=str(e))
    except Exception as e:
        # Augmenters are caller-supplied; any failure keeps the rule-based text
        return NarrativeOutcome(
            narrative=base,
            source=NARRATIVE_SOURCE_FALLBACK,
            error=f"{type(e).__name__}: {e}",
        )

    if not _is_well_formed(narrative):
        return NarrativeOutcome(
            narrative=base,
            source=NARRATIVE_SOURCE_FALLBACK,
            error="Narrative provider returned an incomplete narrative",
        )

    # Baseline sections are never emptied by the provider
    if not narrative.recommendations:
        narrative = replace(narrative, recommendations=base.recommendations)
    if not narrative.suggested_partners:
        narrative = replace(narrative, suggested_partners=base.suggested_partners)

    return NarrativeOutcome(narrative=narrative, source=NARRATIVE_SOURCE_LLM)
