"""POST /v1/diagnostics - stateless SME auto-diagnosis"""

from fastapi import APIRouter, Request

from credit_passport.api.v1.schemas import DiagnosisRequest, DiagnosisResponse
from credit_passport.api.dependencies import get_request_id
from credit_passport.domain.diagnostics import run_diagnosis
from credit_passport.infrastructure.observability.logging import log_diagnosis
from credit_passport.infrastructure.observability.metrics import record_diagnosis

router = APIRouter()


@router.post("/diagnostics", response_model=DiagnosisResponse)
def diagnose(request_body: DiagnosisRequest, request: Request):
    """
    Score a business profile across six maturity dimensions.

    Nothing is persisted and no payment is required; the same profile
    always yields the same scores and findings.
    """
    result = run_diagnosis(request_body.input_data, company_id=request_body.company_id)

    record_diagnosis(result.health_band, result.data_coverage_level)
    log_diagnosis(
        get_request_id(request),
        result.company_id or "",
        result.health_band,
        result.stage,
        result.data_coverage_level,
    )

    return DiagnosisResponse(diagnosis=result.to_dict())
