"""Unit tests for the narrative provider client"""

import json

import httpx
import pytest

from credit_passport.domain.exceptions import NarrativeProviderError
from credit_passport.domain.models import NarrativeSummary
from credit_passport.domain.normalizer import normalize_inputs
from credit_passport.infrastructure.clients.narrative import OpenAINarrativeClient, parse_narrative

BASE = NarrativeSummary(
    headline="This SME has a fundability score of 60 (Medium Fundability (Bankable with support)).",
    weaknesses=("compliance documentation needs tightening",),
    recommendations=("keep tax clearance and statutory filings up to date",),
)


def completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(handler) -> OpenAINarrativeClient:
    return OpenAINarrativeClient(
        api_key="sk-test",
        base_url="http://narrative.test/v1/",
        model="test-model",
        timeout=2,
        transport=httpx.MockTransport(handler),
    )


async def test_augment_success():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        payload = {
            "headline": "  Steady trader with room to formalise.  ",
            "strengths": ["consistent sales"],
            "weaknesses": ["thin compliance file", ""],
            "bank_concerns": [],
            "recommendations": ["file annual returns"],
            "suggested_partners": ["Commercial banks open to SME scoring"],
        }
        return httpx.Response(200, json=completion(json.dumps(payload)))

    narrative = await make_client(handler).augment(BASE, normalize_inputs({}))

    assert seen["url"] == "http://narrative.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["response_format"] == {"type": "json_object"}
    context = json.loads(seen["body"]["messages"][1]["content"])
    assert context["narrative"]["headline"] == BASE.headline
    assert context["business"]["profit_margin"] == 2.5

    assert narrative.headline == "Steady trader with room to formalise."
    assert narrative.weaknesses == ("thin compliance file",)
    assert narrative.bank_concerns == ()


async def test_augment_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "overloaded"})

    with pytest.raises(NarrativeProviderError, match="503"):
        await make_client(handler).augment(BASE, normalize_inputs({}))


async def test_augment_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NarrativeProviderError, match="timeout"):
        await make_client(handler).augment(BASE, normalize_inputs({}))


async def test_augment_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NarrativeProviderError, match="unreachable"):
        await make_client(handler).augment(BASE, normalize_inputs({}))


@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"unexpected": True},
        completion("not json at all"),
        completion(json.dumps({"strengths": ["no headline"]})),
    ],
)
async def test_augment_invalid_response(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    with pytest.raises(NarrativeProviderError):
        await make_client(handler).augment(BASE, normalize_inputs({}))


def test_parse_narrative_defaults_missing_sections():
    narrative = parse_narrative({"headline": "Bankable with support."})

    assert narrative.headline == "Bankable with support."
    assert narrative.strengths == ()
    assert narrative.suggested_partners == ()


@pytest.mark.parametrize(
    "payload",
    [
        ["headline"],
        {"headline": ""},
        {"headline": 42},
        {"headline": "ok", "strengths": "not a list"},
        {"headline": "ok", "recommendations": ["fine", 3]},
    ],
)
def test_parse_narrative_rejects_malformed_payload(payload):
    with pytest.raises(NarrativeProviderError):
        parse_narrative(payload)
