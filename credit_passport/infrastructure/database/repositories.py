"""Data access layer for passport runs"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from credit_passport.infrastructure.database.models import CreditPassportRun
from credit_passport.domain.exceptions import PassportRunNotFoundError
from credit_passport.domain.models import CreditPassportResult


class PassportRunRepository:
    """Repository for credit passport runs"""

    def __init__(self, db: Session):
        self.db = db

    def create_run(
        self,
        user_id: str,
        company_id: str,
        input_data: Dict[str, Any],
        payment_status: str,
        amount: float,
        currency: str,
        payment_reference: Optional[str] = None,
        payment_gateway: Optional[str] = None,
    ) -> CreditPassportRun:
        """Persist a new run awaiting (or holding) its generation payment"""
        run = CreditPassportRun(
            user_id=user_id,
            company_id=company_id,
            input_data=input_data,
            payment_status=payment_status,
            amount=amount,
            currency=currency,
            payment_reference=payment_reference,
            payment_gateway=payment_gateway,
            share_count=0,
        )
        self.db.add(run)
        self.db.flush()  # Get ID without committing
        return run

    def get_run(self, run_id: uuid.UUID, user_id: Optional[str] = None) -> Optional[CreditPassportRun]:
        """Fetch a run, optionally scoped to its owner"""
        query = self.db.query(CreditPassportRun).filter(CreditPassportRun.id == run_id)
        if user_id:
            query = query.filter(CreditPassportRun.user_id == user_id)
        return query.first()

    def get_run_or_raise(self, run_id: uuid.UUID, user_id: Optional[str] = None) -> CreditPassportRun:
        run = self.get_run(run_id, user_id)
        if run is None:
            raise PassportRunNotFoundError(f"Passport run {run_id} not found")
        return run

    def list_runs(self, user_id: str) -> List[CreditPassportRun]:
        """All runs of a user, newest first"""
        return (
            self.db.query(CreditPassportRun)
            .filter(CreditPassportRun.user_id == user_id)
            .order_by(CreditPassportRun.created_at.desc())
            .all()
        )

    def list_generated_runs(self, user_id: str, limit: int = 5) -> List[CreditPassportRun]:
        """Bounded run history: the latest generated passports, most recent first"""
        return (
            self.db.query(CreditPassportRun)
            .filter(CreditPassportRun.user_id == user_id)
            .filter(CreditPassportRun.generated_at.isnot(None))
            .order_by(CreditPassportRun.generated_at.desc())
            .limit(limit)
            .all()
        )

    def update_payment_status(
        self,
        run: CreditPassportRun,
        status: str,
        reference: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> CreditPassportRun:
        run.payment_status = status
        if reference:
            run.payment_reference = reference
        if gateway:
            run.payment_gateway = gateway
        self.db.flush()
        return run

    def save_output(
        self,
        run: CreditPassportRun,
        result: CreditPassportResult,
        narrative_source: str,
    ) -> CreditPassportRun:
        """Store a generated passport and its denormalized scores"""
        output = result.to_dict()
        run.output_data = output
        run.fundability_score = result.fundability_score
        run.financial_strength = result.breakdown.financial_strength
        run.compliance_maturity = result.breakdown.compliance_governance
        run.credit_behaviour = result.breakdown.credit_behavior
        run.digital_maturity = result.breakdown.digital_operational
        run.behavioural_score = result.breakdown.behavioral
        run.risk_profile = output["riskProfile"]
        run.liquidity_index = result.liquidity_index
        run.resilience_score = result.resilience_score
        run.repayment_capacity = output["repaymentCapacity"]
        run.narrative_source = narrative_source
        run.generated_at = datetime.now(timezone.utc)
        self.db.flush()
        return run

    def record_share(
        self,
        run: CreditPassportRun,
        reference: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> CreditPassportRun:
        run.share_count = (run.share_count or 0) + 1
        run.last_share_reference = reference
        run.last_share_gateway = gateway
        self.db.flush()
        return run

    def record_pdf_payment(
        self,
        run: CreditPassportRun,
        pdf_url: str,
        reference: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> CreditPassportRun:
        # Keep an already issued URL
        run.pdf_url = run.pdf_url or pdf_url
        run.last_pdf_reference = reference
        run.last_pdf_gateway = gateway
        self.db.flush()
        return run
