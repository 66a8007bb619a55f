"""
Input normalization - resolves partial business data to concrete values.

Every field of the passport inputs is optional. This module is the single
place where absent, malformed or non-finite values are replaced by neutral
defaults, so the scorers can stay free of None checks. Missing compliance
flags count as False; everything numeric gets the default below.
"""

import re
from dataclasses import fields
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from credit_passport.domain.models import (
    BankingInputs,
    BehavioralInputs,
    BusinessIdentity,
    ComplianceInputs,
    CreditPassportInputs,
    FinancialInputs,
    NormalizedInputs,
    OperationalInputs,
)
from credit_passport.utils.numeric import is_finite_number, to_finite_float

# Neutral defaults for absent fields. 0-100 maturity scores sit at 55,
# counts at 0; profit margin and sales channels are chosen so that their
# financial-strength components land on or just above the same 55 baseline.
NEUTRAL_DEFAULTS = {
    "profit_margin": 2.5,
    "cashflow_stability": 55.0,
    "cash_conversion_cycle": 50.0,
    "customer_concentration": 40.0,
    "debt_service_coverage": 1.1,
    "ebitda_margin": 15.0,
    "negative_balance_frequency": 0.0,
    "repayment_history": 55.0,
    "rejection_history": 0.0,
    "overdraft_frequency": 0.0,
    "cheque_bounce_history": 0.0,
    "sales_channel_count": 2,
    "policy_coverage": 50.0,
    "digital_footprint": 55.0,
    "erp_usage": 55.0,
    "delivery_reliability": 55.0,
    "customer_satisfaction": 55.0,
    "seasonality": 35.0,
    "supply_chain_risk": 35.0,
    "currency_exposure": 45.0,
    "continuity_plans": 55.0,
    "profile_completion": 55.0,
    "engagement": 55.0,
    "responsiveness": 55.0,
    "data_freshness": 55.0,
}

_TRUTHY_STRINGS = {"true", "yes", "y", "1"}

T = TypeVar("T")


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _from_mapping(raw: Mapping[str, Any], cls: Type[T]) -> T:
    by_snake = {_snake_case(k): v for k, v in raw.items() if isinstance(k, str)}
    known = {f.name for f in fields(cls)}
    return cls(**{name: value for name, value in by_snake.items() if name in known})


def _group(value: Any, cls: Type[T]) -> Optional[T]:
    """Coerce one input group; None when it is absent or unusable"""
    if isinstance(value, cls):
        return value
    if isinstance(value, Mapping):
        return _from_mapping(value, cls)
    return None


def _section(data: Mapping[str, Any], key: str, cls: Type[T]) -> Optional[T]:
    """Build one input group from a camelCase or snake_case key"""
    return _group(data.get(key, data.get(_snake_case(key))), cls)


def parse_inputs(data: Any) -> CreditPassportInputs:
    """
    Build CreditPassportInputs from a loosely-shaped mapping (e.g. JSON body).

    Unknown keys are ignored; sections that are not mappings are treated as
    empty. Values are kept as given - coercion happens in normalize_inputs.
    """
    if not isinstance(data, Mapping):
        return CreditPassportInputs()

    return CreditPassportInputs(
        business_identity=_section(data, "businessIdentity", BusinessIdentity) or BusinessIdentity(),
        financials=_section(data, "financials", FinancialInputs) or FinancialInputs(),
        banking=_section(data, "banking", BankingInputs) or BankingInputs(),
        compliance=_section(data, "compliance", ComplianceInputs) or ComplianceInputs(),
        digital_operational=_section(data, "digitalOperational", OperationalInputs) or OperationalInputs(),
        behavioral=_section(data, "behavioral", BehavioralInputs) or BehavioralInputs(),
        credit_behavior=_section(data, "creditBehavior", BankingInputs),
        operations=_section(data, "operations", OperationalInputs),
    )


def _number(name: str, *candidates: Any) -> float:
    """First finite candidate, else the neutral default for name"""
    for candidate in candidates:
        value = to_finite_float(candidate)
        if value is not None:
            return value
    return float(NEUTRAL_DEFAULTS[name])


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_STRINGS
    if isinstance(value, int):
        return value != 0
    if is_finite_number(value):
        return value != 0
    return False


def _as_list(value: Any) -> Optional[List[Any]]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return None


def _clean_series(values: Any) -> Tuple[float, ...]:
    items = _as_list(values) or []
    cleaned = (to_finite_float(v) for v in items)
    return tuple(v for v in cleaned if v is not None)


def _revenue_series(financials: FinancialInputs) -> Tuple[float, ...]:
    """Annual revenue when it has a trend, monthly revenue otherwise"""
    annual = _clean_series(financials.annual_revenue)
    if len(annual) >= 2:
        return annual
    monthly = _clean_series(financials.monthly_revenue)
    if len(monthly) >= 2:
        return monthly
    return annual


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _attrs(objects: Iterable[Any], name: str) -> List[Any]:
    return [getattr(obj, name, None) for obj in objects if obj is not None]


def normalize_inputs(inputs: Union[CreditPassportInputs, Mapping[str, Any], None]) -> NormalizedInputs:
    """
    Resolve every optional field to a concrete value.

    Total over arbitrary input shapes: never raises for missing or malformed
    data.
    """
    if not isinstance(inputs, CreditPassportInputs):
        inputs = parse_inputs(inputs)

    identity = _group(inputs.business_identity, BusinessIdentity) or BusinessIdentity()
    financials = _group(inputs.financials, FinancialInputs) or FinancialInputs()
    banking = _group(inputs.banking, BankingInputs) or BankingInputs()
    compliance = _group(inputs.compliance, ComplianceInputs) or ComplianceInputs()
    maturity = _group(inputs.digital_operational, OperationalInputs) or OperationalInputs()
    behavioral = _group(inputs.behavioral, BehavioralInputs) or BehavioralInputs()

    # Per-field precedence: explicit credit/operations groups first
    credit_sources = (_group(inputs.credit_behavior, BankingInputs), banking)
    exposure_sources = (_group(inputs.operations, OperationalInputs), maturity)

    channels = _as_list(banking.sales_channels)
    licenses = _as_list(compliance.licenses)

    return NormalizedInputs(
        business_name=_text(identity.name),
        sector=_text(identity.sector),
        revenue_series=_revenue_series(financials),
        profit_margin=_number("profit_margin", financials.profit_margin),
        cashflow_stability=_number("cashflow_stability", financials.cashflow_stability),
        cash_conversion_cycle=_number("cash_conversion_cycle", financials.cash_conversion_cycle),
        customer_concentration=_number("customer_concentration", financials.customer_concentration),
        debt_service_coverage=_number("debt_service_coverage", financials.debt_service_coverage),
        ebitda_margin=_number("ebitda_margin", financials.ebitda_margin),
        negative_balance_frequency=_number("negative_balance_frequency", financials.negative_balance_frequency),
        repayment_history=_number("repayment_history", *_attrs(credit_sources, "repayment_history")),
        rejection_history=_number("rejection_history", *_attrs(credit_sources, "rejection_history")),
        overdraft_frequency=_number("overdraft_frequency", *_attrs(credit_sources, "overdraft_frequency")),
        cheque_bounce_history=_number("cheque_bounce_history", *_attrs(credit_sources, "cheque_bounce_history")),
        sales_channel_count=len(channels) if channels is not None else NEUTRAL_DEFAULTS["sales_channel_count"],
        tax_registration=_flag(compliance.tax_registration),
        tax_clearance=_flag(compliance.tax_clearance),
        annual_returns=_flag(compliance.annual_returns),
        business_insurance=_flag(compliance.business_insurance),
        has_licenses=bool(licenses),
        policy_coverage=_number("policy_coverage", compliance.policy_coverage),
        digital_footprint=_number("digital_footprint", maturity.digital_footprint),
        erp_usage=_number("erp_usage", maturity.erp_usage),
        delivery_reliability=_number("delivery_reliability", maturity.delivery_reliability),
        customer_satisfaction=_number("customer_satisfaction", maturity.customer_satisfaction),
        seasonality=_number("seasonality", *_attrs(exposure_sources, "seasonality")),
        supply_chain_risk=_number("supply_chain_risk", *_attrs(exposure_sources, "supply_chain_risk")),
        currency_exposure=_number("currency_exposure", *_attrs(exposure_sources, "currency_exposure")),
        continuity_plans=_number("continuity_plans", *_attrs(exposure_sources, "continuity_plans")),
        profile_completion=_number("profile_completion", behavioral.profile_completion),
        engagement=_number("engagement", behavioral.engagement),
        responsiveness=_number("responsiveness", behavioral.responsiveness),
        data_freshness=_number("data_freshness", behavioral.data_freshness),
    )
