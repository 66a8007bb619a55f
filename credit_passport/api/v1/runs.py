"""GET endpoints for passport runs and the bounded run history"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from credit_passport.api.v1.schemas import (
    HistoryItem,
    HistoryResponse,
    RunListResponse,
    RunResponse,
    to_run_schema,
)
from credit_passport.api.dependencies import parse_run_id
from credit_passport.config import settings
from credit_passport.infrastructure.database.session import get_db
from credit_passport.infrastructure.database.repositories import PassportRunRepository

router = APIRouter()


@router.get("/credit-passports/history", response_model=HistoryResponse)
def get_run_history(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    Latest generated passports for a user.

    Returns:
        At most run_history_limit entries, most recent first
    """
    repo = PassportRunRepository(db)
    runs = repo.list_generated_runs(user_id, limit=settings.run_history_limit)

    items = [
        HistoryItem(
            run_id=str(run.id),
            company_id=run.company_id,
            fundability_score=run.output_data["fundabilityScore"],
            interpretation=run.output_data["interpretation"],
            overall_risk_level=run.output_data["riskProfile"]["overall_risk_level"],
            timestamp=run.output_data["timestamp"],
        )
        for run in runs
        if run.output_data
    ]

    return HistoryResponse(user_id=user_id, runs=items)


@router.get("/credit-passports/{run_id}", response_model=RunResponse)
def get_run(
    run_id: str,
    user_id: Optional[str] = Query(None, description="Restrict lookup to this user"),
    db: Session = Depends(get_db),
):
    """Retrieve a single run with its payment state and output"""
    run_uuid = parse_run_id(run_id)

    repo = PassportRunRepository(db)
    run = repo.get_run(run_uuid, user_id)

    if not run:
        raise HTTPException(status_code=404, detail="Passport run not found")

    return RunResponse(run=to_run_schema(run))


@router.get("/credit-passports", response_model=RunListResponse)
def list_runs(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """All runs of a user, newest first"""
    repo = PassportRunRepository(db)
    return RunListResponse(runs=[to_run_schema(run) for run in repo.list_runs(user_id)])
