"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from credit_passport.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_generation(
    request_id: str,
    run_id: str,
    user_id: str,
    fundability_score: int,
    overall_risk_level: str,
    narrative_source: str,
    duration_ms: float,
) -> None:
    """Log structured generation outcome for analysis"""
    logging.info(
        "Passport generated",
        extra={
            "request_id": request_id,
            "run_id": run_id,
            "user_id": user_id,
            "step": "generation_complete",
            "fundability_score": fundability_score,
            "overall_risk_level": overall_risk_level,
            "narrative_source": narrative_source,
            "duration_ms": duration_ms,
        },
    )


def log_paid_action(request_id: str, run_id: str, user_id: str, action: str, payment_status: str) -> None:
    """Log a payment-gated action (pay, share, pdf)"""
    logging.info(
        "Paid action recorded",
        extra={
            "request_id": request_id,
            "run_id": run_id,
            "user_id": user_id,
            "step": f"{action}_recorded",
            "payment_status": payment_status,
        },
    )


def log_diagnosis(request_id: str, company_id: str, health_band: str, stage: str, coverage: str) -> None:
    logging.info(
        "Diagnosis produced",
        extra={
            "request_id": request_id,
            "company_id": company_id,
            "step": "diagnosis_complete",
            "health_band": health_band,
            "stage": stage,
            "data_coverage_level": coverage,
        },
    )
