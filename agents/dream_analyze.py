from __future__ import annotations
from typing import Any, Dict, Optional
import httpx
from loguru import logger
from shared.config import settings
from shared.errors import ConfigurationError, UpstreamError
from shared.http import upstream_client

def _payload(prompt: str) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"responseMimeType": "application/json"},
    }

def _upstream_message(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict):
            return err.get("message")
    return None

async def analyze_dream(prompt: str, *, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    """Send the analysis instruction to Gemini in JSON output mode.

    Returns the upstream body verbatim; the weaver digs the generated text
    out of ``candidates[0].content.parts[0].text`` itself.
    """
    api_key = settings.gemini_api_key
    if not api_key:
        raise ConfigurationError("Server Gemini Key missing")

    url = f"{settings.gemini_api_host}/v1beta/models/{settings.gemini_model_id}:generateContent"
    logger.info("Forwarding analysis prompt to {} ({} chars)", settings.gemini_model_id, len(prompt))

    owned = client is None
    client = client or upstream_client()
    try:
        response = await client.post(url, params={"key": api_key}, json=_payload(prompt))
    except httpx.TimeoutException as e:
        raise UpstreamError("Dream analysis timed out") from e
    except httpx.HTTPError as e:
        raise UpstreamError(f"Dream analysis request failed: {e}") from e
    finally:
        if owned:
            await client.aclose()

    try:
        data = response.json()
    except ValueError:
        data = None

    if response.is_error or data is None:
        raise UpstreamError(_upstream_message(data) or "Failed to analyze dream", response.status_code)
    return data
