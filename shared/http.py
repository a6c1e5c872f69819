from __future__ import annotations
import base64
import json
from typing import Any, Dict, Optional
import httpx
from .config import settings

JSON_HEADERS = {"Content-Type": "application/json"}

def upstream_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout or settings.upstream_timeout))

def respond(body: Any, code: int = 200) -> Dict[str, Any]:
    return {
        "statusCode": code,
        "headers": dict(JSON_HEADERS),
        "body": json.dumps(body, ensure_ascii=False),
    }

def error(message: str, code: int = 500) -> Dict[str, Any]:
    return respond({"error": message}, code)

def method_not_allowed() -> Dict[str, Any]:
    return {"statusCode": 405, "headers": {"Allow": "POST"}, "body": "Method Not Allowed"}

def request_method(event: Dict[str, Any]) -> str:
    # REST (v1) events carry httpMethod, HTTP API (v2) events nest it
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return (method or "").upper()

def json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Decode the event body, raising ValueError when it is not a JSON object."""
    raw = event.get("body") or ""
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(raw).decode("utf-8")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("Request body must be a JSON object")
    return payload
