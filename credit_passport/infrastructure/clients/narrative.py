"""Narrative provider HTTP client - OpenAI-compatible chat completions"""

import json
from dataclasses import asdict
from typing import Any, Dict, List, Optional

import httpx

from credit_passport.config import settings
from credit_passport.domain.exceptions import NarrativeProviderError
from credit_passport.domain.models import NarrativeSummary, NormalizedInputs
from credit_passport.domain.narrative import NARRATIVE_SECTIONS
from credit_passport.infrastructure.observability.metrics import narrative_latency_histogram

SYSTEM_PROMPT = (
    "You are a credit analyst writing for Zambian SME lenders. Rewrite the given "
    "credit passport narrative in clear, specific prose grounded in the business "
    "signals provided. Do not invent figures. Reply with a JSON object with the keys "
    "headline (string), strengths, weaknesses, bank_concerns, recommendations and "
    "suggested_partners (arrays of strings)."
)


def parse_narrative(payload: Any) -> NarrativeSummary:
    """
    Validate provider output into a NarrativeSummary.

    Raises:
        NarrativeProviderError: missing headline or a section that is not a list of strings
    """
    if not isinstance(payload, dict):
        raise NarrativeProviderError("Narrative payload is not an object")

    headline = payload.get("headline")
    if not isinstance(headline, str) or not headline.strip():
        raise NarrativeProviderError("Narrative payload has no headline")

    sections: Dict[str, tuple] = {}
    for key in NARRATIVE_SECTIONS:
        items = payload.get(key, [])
        if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
            raise NarrativeProviderError(f"Narrative section '{key}' must be a list of strings")
        sections[key] = tuple(item.strip() for item in items if item.strip())

    return NarrativeSummary(headline=headline.strip(), **sections)


class OpenAINarrativeClient:
    """Narrative augmenter backed by an OpenAI-compatible chat completions API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.openai_model
        self.timeout = timeout or settings.narrative_timeout_seconds
        self.transport = transport

    def build_messages(self, base: NarrativeSummary, inputs: NormalizedInputs) -> List[Dict[str, str]]:
        context = {
            "narrative": base.to_dict(),
            "business": asdict(inputs),
        }
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": json.dumps(context)},
        ]

    async def augment(self, base: NarrativeSummary, inputs: NormalizedInputs) -> NarrativeSummary:
        """
        Ask the provider for a richer narrative.

        Raises:
            NarrativeProviderError: On timeout, HTTP errors, or unusable response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with narrative_latency_histogram.time():
                    response = await client.post(
                        f"{self.base_url}/chat/completions",
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        json={
                            "model": self.model,
                            "messages": self.build_messages(base, inputs),
                            "response_format": {"type": "json_object"},
                            "temperature": 0.2,
                        },
                    )
                    response.raise_for_status()
                data = response.json()
                content = data["choices"][0]["message"]["content"]
                return parse_narrative(json.loads(content))

            except httpx.TimeoutException as e:
                raise NarrativeProviderError(f"Narrative provider timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise NarrativeProviderError(f"Narrative provider error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise NarrativeProviderError(f"Narrative provider unreachable: {e}") from e
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise NarrativeProviderError(f"Invalid narrative response: {e}") from e
