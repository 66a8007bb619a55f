"""Unit tests for input normalization"""

import math

from credit_passport.domain.models import BankingInputs, CreditPassportInputs, FinancialInputs
from credit_passport.domain.normalizer import NEUTRAL_DEFAULTS, normalize_inputs, parse_inputs


def test_empty_input_uses_neutral_defaults():
    """Every numeric field falls back to its neutral default"""
    normalized = normalize_inputs({})

    assert normalized.profit_margin == 2.5
    assert normalized.cashflow_stability == 55.0
    assert normalized.cash_conversion_cycle == 50.0
    assert normalized.debt_service_coverage == 1.1
    assert normalized.repayment_history == 55.0
    assert normalized.rejection_history == 0.0
    assert normalized.sales_channel_count == 2
    assert normalized.seasonality == 35.0
    assert normalized.revenue_series == ()
    assert normalized.business_name == ""


def test_missing_compliance_flags_are_false():
    normalized = normalize_inputs({"compliance": {}})

    assert normalized.tax_registration is False
    assert normalized.tax_clearance is False
    assert normalized.annual_returns is False
    assert normalized.business_insurance is False
    assert normalized.has_licenses is False


def test_none_and_garbage_inputs_are_tolerated():
    """Non-mapping input and non-mapping sections behave like empty input"""
    for raw in (None, [], "profit", 42, {"financials": "oops", "banking": [1, 2]}):
        normalized = normalize_inputs(raw)
        assert normalized.profit_margin == NEUTRAL_DEFAULTS["profit_margin"]
        assert normalized.repayment_history == NEUTRAL_DEFAULTS["repayment_history"]


def test_camel_and_snake_case_keys():
    camel = normalize_inputs({"financials": {"profitMargin": 12, "cashflowStability": 70}})
    snake = normalize_inputs({"financials": {"profit_margin": 12, "cashflow_stability": 70}})

    assert camel.profit_margin == snake.profit_margin == 12.0
    assert camel.cashflow_stability == snake.cashflow_stability == 70.0


def test_snake_case_section_names():
    normalized = normalize_inputs({"digital_operational": {"digital_footprint": 80}})

    assert normalized.digital_footprint == 80.0


def test_numeric_strings_are_coerced():
    normalized = normalize_inputs({"financials": {"profitMargin": " 12.5 ", "cashflowStability": "abc"}})

    assert normalized.profit_margin == 12.5
    assert normalized.cashflow_stability == NEUTRAL_DEFAULTS["cashflow_stability"]


def test_non_finite_and_boolean_numbers_are_rejected():
    """NaN, infinity and booleans are not valid numbers"""
    normalized = normalize_inputs(
        {
            "financials": {
                "profitMargin": math.nan,
                "cashflowStability": math.inf,
                "customerConcentration": True,
            }
        }
    )

    assert normalized.profit_margin == NEUTRAL_DEFAULTS["profit_margin"]
    assert normalized.cashflow_stability == NEUTRAL_DEFAULTS["cashflow_stability"]
    assert normalized.customer_concentration == NEUTRAL_DEFAULTS["customer_concentration"]


def test_credit_behavior_overrides_banking_per_field():
    normalized = normalize_inputs(
        {
            "banking": {"repaymentHistory": 30, "rejectionHistory": 2},
            "creditBehavior": {"repaymentHistory": 80},
        }
    )

    assert normalized.repayment_history == 80.0
    # Not given in creditBehavior, so banking still applies
    assert normalized.rejection_history == 2.0


def test_operations_overrides_digital_operational_exposure():
    normalized = normalize_inputs(
        {
            "digitalOperational": {"seasonality": 10, "supplyChainRisk": 20},
            "operations": {"seasonality": 60},
        }
    )

    assert normalized.seasonality == 60.0
    assert normalized.supply_chain_risk == 20.0


def test_revenue_series_prefers_annual():
    normalized = normalize_inputs(
        {"financials": {"annualRevenue": [100, 120], "monthlyRevenue": [5, 4, 3]}}
    )

    assert normalized.revenue_series == (100.0, 120.0)


def test_revenue_series_falls_back_to_monthly():
    """A single annual figure has no trend, so monthly revenue is used"""
    normalized = normalize_inputs(
        {"financials": {"annualRevenue": [100], "monthlyRevenue": [1, "2", None, 3]}}
    )

    assert normalized.revenue_series == (1.0, 2.0, 3.0)


def test_sales_channel_count():
    assert normalize_inputs({"banking": {}}).sales_channel_count == 2
    assert normalize_inputs({"banking": {"salesChannels": []}}).sales_channel_count == 0
    assert normalize_inputs({"banking": {"salesChannels": ["pos", "web", "mobile_money"]}}).sales_channel_count == 3
    # Not a list: treated as absent
    assert normalize_inputs({"banking": {"salesChannels": "pos"}}).sales_channel_count == 2


def test_flags_accept_truthy_strings_and_numbers():
    normalized = normalize_inputs(
        {
            "compliance": {
                "taxRegistration": "yes",
                "taxClearance": 1,
                "annualReturns": "no",
                "businessInsurance": 0,
                "licenses": ["trading"],
            }
        }
    )

    assert normalized.tax_registration is True
    assert normalized.tax_clearance is True
    assert normalized.annual_returns is False
    assert normalized.business_insurance is False
    assert normalized.has_licenses is True


def test_business_identity_is_trimmed():
    normalized = normalize_inputs({"businessIdentity": {"name": "  Chipata Mills ", "sector": 7}})

    assert normalized.business_name == "Chipata Mills"
    assert normalized.sector == ""


def test_dataclass_inputs_with_dict_sections():
    """Sections passed as plain dicts on the dataclass are still read"""
    inputs = CreditPassportInputs(financials={"profitMargin": 10})  # type: ignore[arg-type]

    assert normalize_inputs(inputs).profit_margin == 10.0


def test_parse_inputs_builds_typed_sections():
    inputs = parse_inputs(
        {
            "financials": {"profitMargin": 4, "unknownField": 1},
            "creditBehavior": {"overdraftFrequency": 3},
        }
    )

    assert isinstance(inputs.financials, FinancialInputs)
    assert inputs.financials.profit_margin == 4
    assert isinstance(inputs.credit_behavior, BankingInputs)
    assert inputs.credit_behavior.overdraft_frequency == 3
    assert inputs.operations is None


def test_integers_beyond_float_range():
    """Huge JSON integers fall back to defaults instead of overflowing"""
    normalized = normalize_inputs(
        {
            "financials": {"profitMargin": 10**400, "annualRevenue": [1, 10**400, 3]},
            "compliance": {"taxClearance": 10**400},
        }
    )

    assert normalized.profit_margin == NEUTRAL_DEFAULTS["profit_margin"]
    assert normalized.revenue_series == (1.0, 3.0)
    # Still a non-zero number, so the flag holds
    assert normalized.tax_clearance is True
