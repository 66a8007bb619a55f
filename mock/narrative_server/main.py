from fastapi import FastAPI, HTTPException, Request
import json
import os
import time

app = FastAPI(title="Mock Narrative Server", version="1.0.0")
# Set MOCK_NARRATIVE_FAIL=1 to exercise the rule-based fallback
FAIL = os.getenv("MOCK_NARRATIVE_FAIL") == "1"

@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/v1/chat/completions")
async def chat_completions(request: Request):
    if FAIL:
        raise HTTPException(status_code=503, detail="narrative model unavailable")
    body = await request.json()
    context = json.loads(body["messages"][-1]["content"])
    narrative = context["narrative"]
    sector = context["business"].get("sector") or "its sector"
    narrative["headline"] = f"{narrative['headline']} Lenders familiar with {sector} should review the breakdown below."
    narrative["recommendations"] = narrative["recommendations"] + ["share six months of mobile money statements with lenders"]
    return {
        "id": "chatcmpl-mock",
        "object": "chat.completion",
        "created": int(time.time()),
        "model": body.get("model", "mock"),
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": json.dumps(narrative)}, "finish_reason": "stop"}
        ],
    }
