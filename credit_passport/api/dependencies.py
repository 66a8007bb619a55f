"""Dependency injection for FastAPI endpoints"""

import uuid
from typing import Optional
from fastapi import HTTPException, Request
from credit_passport.config import settings
from credit_passport.domain.narrative import NarrativeAugmenter
from credit_passport.infrastructure.clients.narrative import OpenAINarrativeClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_narrative_augmenter() -> Optional[NarrativeAugmenter]:
    """Provide the narrative provider, or None when no API key is configured"""
    if not settings.narrative_provider_enabled:
        return None
    return OpenAINarrativeClient()


def parse_run_id(run_id: str) -> uuid.UUID:
    """Validate a run id path parameter"""
    try:
        return uuid.UUID(run_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid passport run ID format")
