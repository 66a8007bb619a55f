"""Pricing, generation payment, and paid share/PDF actions"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from credit_passport.api.v1.schemas import (
    ActionReceipt,
    ConfigResponse,
    ConfirmPaymentRequest,
    PaidActionRequest,
    PayRequest,
    PayResponse,
    PaymentInfo,
    PdfResponse,
    PricingSchema,
    RunResponse,
    ShareResponse,
    to_run_schema,
)
from credit_passport.api.dependencies import get_request_id, parse_run_id
from credit_passport.config import settings
from credit_passport.infrastructure.database.session import get_db
from credit_passport.infrastructure.database.repositories import PassportRunRepository
from credit_passport.domain.exceptions import ActionPaymentRequiredError, PassportRunNotFoundError
from credit_passport.domain.monetization import (
    ACTION_GENERATE,
    ACTION_PDF,
    ACTION_SHARE,
    PAYMENT_RULES,
    PAYMENT_SUCCESS,
    PRICE_POINTS,
    ensure_action_paid,
    initial_payment_status,
    pdf_storage_url,
    resolve_amount,
)
from credit_passport.infrastructure.observability.metrics import (
    paid_action_counter,
    payment_gate_rejections_counter,
    runs_created_counter,
)
from credit_passport.infrastructure.observability.logging import log_paid_action

router = APIRouter()


@router.get("/credit-passports/config", response_model=ConfigResponse)
def get_config():
    """Prices and payment rules consumed by checkout flows"""
    return ConfigResponse(
        pricing=PricingSchema(**PRICE_POINTS.to_dict()),
        payment_rules=PAYMENT_RULES,
    )


@router.post("/credit-passports/pay", response_model=PayResponse, status_code=201)
def pay_for_passport(
    request_body: PayRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Open a passport run and record its generation payment.

    With auto_confirm the payment is recorded as successful straight away;
    otherwise it stays pending until confirmed.
    """
    request_id = get_request_id(request)

    try:
        payment_status = initial_payment_status(request_body.auto_confirm)
        repo = PassportRunRepository(db)
        run = repo.create_run(
            user_id=request_body.user_id,
            company_id=request_body.company_id,
            input_data=request_body.input_data,
            payment_status=payment_status,
            amount=request_body.amount or resolve_amount(ACTION_GENERATE),
            currency=request_body.currency or PRICE_POINTS.currency,
            payment_reference=request_body.payment_reference,
            payment_gateway=request_body.payment_gateway or request_body.payment_method,
        )
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    runs_created_counter.labels(payment_status=payment_status).inc()
    if payment_status == PAYMENT_SUCCESS:
        paid_action_counter.labels(action=ACTION_GENERATE).inc()
    log_paid_action(request_id, str(run.id), run.user_id, "pay", payment_status)

    confirmed = payment_status == PAYMENT_SUCCESS
    return PayResponse(
        run=to_run_schema(run),
        payment=PaymentInfo(
            status=run.payment_status,
            reference=run.payment_reference,
            requires_confirmation=not confirmed,
            message=(
                "Payment confirmed. You can generate the credit passport."
                if confirmed
                else "Payment initiated. Confirm before generation."
            ),
        ),
    )


@router.post("/credit-passports/{run_id}/confirm-payment", response_model=RunResponse)
def confirm_payment(
    run_id: str,
    request_body: ConfirmPaymentRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Record the gateway outcome of a pending generation payment"""
    run_uuid = parse_run_id(run_id)
    request_id = get_request_id(request)

    try:
        repo = PassportRunRepository(db)
        run = repo.get_run_or_raise(run_uuid)
        repo.update_payment_status(run, request_body.status, request_body.reference, request_body.gateway)
        db.commit()

    except PassportRunNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if request_body.status == PAYMENT_SUCCESS:
        paid_action_counter.labels(action=ACTION_GENERATE).inc()
    log_paid_action(request_id, str(run.id), run.user_id, "confirm_payment", request_body.status)

    return RunResponse(run=to_run_schema(run))


@router.post("/credit-passports/{run_id}/share", response_model=ShareResponse)
def share_passport(
    run_id: str,
    request_body: PaidActionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Issue a share event; each share needs its own successful payment"""
    run_uuid = parse_run_id(run_id)
    request_id = get_request_id(request)
    payment_status = request_body.resolved_payment_status()

    try:
        repo = PassportRunRepository(db)
        run = repo.get_run_or_raise(run_uuid, request_body.user_id)
        ensure_action_paid(ACTION_SHARE, payment_status, run.payment_status)
        repo.record_share(run, request_body.payment_reference, request_body.payment_gateway)
        db.commit()

    except PassportRunNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except ActionPaymentRequiredError as e:
        db.rollback()
        payment_gate_rejections_counter.labels(action=ACTION_SHARE).inc()
        logging.warning(f"Share refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=402, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    paid_action_counter.labels(action=ACTION_SHARE).inc()
    log_paid_action(request_id, str(run.id), run.user_id, ACTION_SHARE, payment_status)

    return ShareResponse(
        run=to_run_schema(run),
        share=ActionReceipt(price=resolve_amount(ACTION_SHARE), status=PAYMENT_SUCCESS),
    )


@router.post("/credit-passports/{run_id}/pdf", response_model=PdfResponse)
def request_pdf(
    run_id: str,
    request_body: PaidActionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Unlock the PDF export after its payment; the storage URL is issued once"""
    run_uuid = parse_run_id(run_id)
    request_id = get_request_id(request)
    payment_status = request_body.resolved_payment_status()

    try:
        repo = PassportRunRepository(db)
        run = repo.get_run_or_raise(run_uuid, request_body.user_id)
        ensure_action_paid(ACTION_PDF, payment_status, run.payment_status)
        repo.record_pdf_payment(
            run,
            pdf_storage_url(settings.pdf_base_url, str(run.id)),
            request_body.payment_reference,
            request_body.payment_gateway,
        )
        db.commit()

    except PassportRunNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except ActionPaymentRequiredError as e:
        db.rollback()
        payment_gate_rejections_counter.labels(action=ACTION_PDF).inc()
        logging.warning(f"PDF refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=402, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    paid_action_counter.labels(action=ACTION_PDF).inc()
    log_paid_action(request_id, str(run.id), run.user_id, ACTION_PDF, payment_status)

    return PdfResponse(
        run=to_run_schema(run),
        pdf=ActionReceipt(price=resolve_amount(ACTION_PDF), status=PAYMENT_SUCCESS),
    )
