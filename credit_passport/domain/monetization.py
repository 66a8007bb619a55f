"""Pricing and payment gating for passport runs"""

from dataclasses import dataclass
from typing import Dict, Optional

from credit_passport.domain.exceptions import ActionPaymentRequiredError, GenerationNotPaidError

PAYMENT_PENDING = "pending"
PAYMENT_SUCCESS = "success"
PAYMENT_FAILED = "failed"
PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_SUCCESS, PAYMENT_FAILED)

ACTION_GENERATE = "generate"
ACTION_SHARE = "share"
ACTION_PDF = "pdf"


@dataclass(frozen=True)
class PricePoints:
    """Per-action prices, in whole currency units"""

    generate: int = 100
    share: int = 50
    pdf: int = 50
    currency: str = "ZMW"

    def to_dict(self) -> Dict[str, object]:
        return {
            "generate": self.generate,
            "share": self.share,
            "pdf": self.pdf,
            "currency": self.currency,
        }


PRICE_POINTS = PricePoints()

PAYMENT_RULES = {
    ACTION_GENERATE: "Payment required before generation",
    ACTION_SHARE: "Each share link requires a paid share event",
    ACTION_PDF: "PDF export requires its own payment",
}


def resolve_amount(action: Optional[str], prices: PricePoints = PRICE_POINTS) -> int:
    """Price of an action; anything unrecognised is priced as generation"""
    if action == ACTION_SHARE:
        return prices.share
    if action == ACTION_PDF:
        return prices.pdf
    return prices.generate


def initial_payment_status(auto_confirm: bool) -> str:
    return PAYMENT_SUCCESS if auto_confirm else PAYMENT_PENDING


def ensure_generation_paid(run_payment_status: str) -> None:
    """
    Raises:
        GenerationNotPaidError: run has not been paid for
    """
    if run_payment_status != PAYMENT_SUCCESS:
        raise GenerationNotPaidError("Payment not completed for this passport run")


def ensure_action_paid(action: str, action_payment_status: str, run_payment_status: str) -> None:
    """
    Share and PDF each need their own successful payment on top of a paid
    generation.

    Raises:
        ActionPaymentRequiredError: either payment is missing
    """
    if action_payment_status != PAYMENT_SUCCESS:
        label = "Share" if action == ACTION_SHARE else "PDF"
        raise ActionPaymentRequiredError(f"{label} payment must be completed first")

    if run_payment_status != PAYMENT_SUCCESS:
        raise ActionPaymentRequiredError("Passport generation payment missing. Pay for generation first.")


def pdf_storage_url(base_url: str, run_id: str) -> str:
    return f"{base_url.rstrip('/')}/{run_id}/passport.pdf"
