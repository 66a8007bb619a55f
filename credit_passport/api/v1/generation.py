"""POST /v1/credit-passports/{id}/generate - credit passport generation endpoint"""

import time
import logging
from dataclasses import replace
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from credit_passport.api.v1.schemas import GenerateRequest, RunResponse, to_run_schema
from credit_passport.api.dependencies import get_narrative_augmenter, get_request_id, parse_run_id
from credit_passport.infrastructure.database.session import get_db
from credit_passport.infrastructure.database.repositories import PassportRunRepository
from credit_passport.domain.exceptions import GenerationNotPaidError, PassportRunNotFoundError
from credit_passport.domain.monetization import ACTION_GENERATE, ensure_generation_paid
from credit_passport.domain.narrative import NarrativeAugmenter, augment_narrative
from credit_passport.domain.normalizer import normalize_inputs
from credit_passport.domain.scoring import generate_credit_passport
from credit_passport.infrastructure.observability.metrics import payment_gate_rejections_counter, record_generation
from credit_passport.infrastructure.observability.logging import log_generation

router = APIRouter()


@router.post("/credit-passports/{run_id}/generate", response_model=RunResponse)
async def generate_passport(
    run_id: str,
    request_body: GenerateRequest,
    request: Request,
    db: Session = Depends(get_db),
    augmenter: Optional[NarrativeAugmenter] = Depends(get_narrative_augmenter),
):
    """
    Generate the credit passport of a paid run.

    Flow:
    1. Load the run (scoped to the user) and check its generation payment
    2. Score the stored inputs
    3. Enrich the narrative through the provider, if configured
    4. Persist output and denormalized scores
    """
    start_time = time.time()
    request_id = get_request_id(request)
    run_uuid = parse_run_id(run_id)

    try:
        # 1. Load and gate
        repo = PassportRunRepository(db)
        run = repo.get_run_or_raise(run_uuid, request_body.user_id)
        ensure_generation_paid(run.payment_status)

        # 2. Score
        notes = [request_body.notes] if request_body.notes else None
        result = generate_credit_passport(run.input_data, notes=notes)

        # 3. Narrative
        outcome = await augment_narrative(result.narrative, normalize_inputs(run.input_data), augmenter)
        if outcome.error:
            logging.warning(
                f"Narrative provider failed, using rule-based narrative: {outcome.error}",
                extra={"request_id": request_id},
            )
        result = replace(result, narrative=outcome.narrative)

        # 4. Persist
        repo.save_output(run, result, outcome.source)
        db.commit()

    except PassportRunNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except GenerationNotPaidError as e:
        db.rollback()
        payment_gate_rejections_counter.labels(action=ACTION_GENERATE).inc()
        logging.warning(f"Generation refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=403, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    record_generation(result, outcome.source)
    log_generation(
        request_id,
        str(run.id),
        run.user_id,
        result.fundability_score,
        result.risk_profile.overall_risk_level,
        outcome.source,
        duration_ms,
    )

    return RunResponse(run=to_run_schema(run))
