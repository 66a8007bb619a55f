"""Prometheus metrics for monitoring passport generation, risk mix and paid actions"""

from prometheus_client import Counter, Histogram

from credit_passport.domain.models import CreditPassportResult

# Run metrics
runs_created_counter = Counter(
    "credit_passport_runs_created_total",
    "Passport runs created",
    ["payment_status"],  # pending | success
)

passport_generated_counter = Counter(
    "credit_passport_generated_total",
    "Passports generated",
    ["interpretation"],
)

overall_risk_counter = Counter(
    "credit_passport_overall_risk_total",
    "Overall risk level of generated passports",
    ["level"],  # low | medium | high
)

fundability_score_histogram = Histogram(
    "credit_passport_fundability_score",
    "Distribution of fundability scores",
    buckets=[30, 50, 70, 90, 100],
)

# Monetization metrics
paid_action_counter = Counter(
    "credit_passport_paid_actions_total",
    "Paid actions recorded",
    ["action"],  # generate | share | pdf
)

payment_gate_rejections_counter = Counter(
    "credit_passport_payment_gate_rejections_total",
    "Actions refused because payment was missing",
    ["action"],
)

# Narrative provider metrics
narrative_outcome_counter = Counter(
    "credit_passport_narrative_total",
    "Narrative source used for generated passports",
    ["source"],  # rules | llm | fallback
)

narrative_latency_histogram = Histogram(
    "narrative_provider_latency_seconds",
    "Narrative provider response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_generation(result: CreditPassportResult, narrative_source: str) -> None:
    """Record generation metrics for monitoring score distribution and risk mix"""
    passport_generated_counter.labels(interpretation=result.interpretation).inc()
    overall_risk_counter.labels(level=result.risk_profile.overall_risk_level).inc()
    fundability_score_histogram.observe(result.fundability_score)
    narrative_outcome_counter.labels(source=narrative_source).inc()


# Diagnostics metrics
diagnoses_counter = Counter(
    "credit_passport_diagnoses_total",
    "SME diagnoses produced",
    ["health_band", "coverage"],
)


def record_diagnosis(health_band: str, coverage: str) -> None:
    diagnoses_counter.labels(health_band=health_band, coverage=coverage).inc()
