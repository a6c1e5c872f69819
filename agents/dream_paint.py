from __future__ import annotations
import asyncio
import json
from typing import Any, Dict, Optional
import httpx
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from loguru import logger
from shared.aws import bedrock_runtime
from shared.config import settings
from shared.errors import ConfigurationError, UpstreamError
from shared.http import upstream_client

def _vendor_from_model_id(model_id: str) -> str:
    mid = (model_id or "").lower()
    if mid.startswith("stability.stable-diffusion"):
        return "sdxl"
    return "unknown"

def _payload_sdxl(prompt: str, cfg_scale: int = 7) -> Dict[str, Any]:
    return {
        "text_prompts": [{"text": prompt}],
        "cfg_scale": cfg_scale,
        "height": 1024,
        "width": 1024,
        "steps": 30,
        "samples": 1,
    }

async def _paint_stability(prompt: str, client: Optional[httpx.AsyncClient]) -> Dict[str, Any]:
    api_key = settings.stability_api_key
    if not api_key:
        raise ConfigurationError("Server Stability Key missing")

    url = f"{settings.stability_api_host}/v1/generation/{settings.stability_engine_id}/text-to-image"
    headers = {"Accept": "application/json", "Authorization": f"Bearer {api_key}"}

    owned = client is None
    client = client or upstream_client()
    try:
        response = await client.post(url, headers=headers, json=_payload_sdxl(prompt))
    except httpx.TimeoutException as e:
        raise UpstreamError("Image generation timed out") from e
    except httpx.HTTPError as e:
        raise UpstreamError(f"Image generation request failed: {e}") from e
    finally:
        if owned:
            await client.aclose()

    try:
        data = response.json()
    except ValueError:
        data = None

    if response.is_error or not isinstance(data, dict):
        message = data.get("message") if isinstance(data, dict) else None
        raise UpstreamError(message or "Failed to generate image", response.status_code)
    return data

def _invoke_bedrock(prompt: str) -> Dict[str, Any]:
    model_id = settings.bedrock_image_model_id
    if _vendor_from_model_id(model_id) != "sdxl":
        raise ConfigurationError(f"Model '{model_id}' is not a Stable Diffusion XL image model")
    try:
        res = bedrock_runtime().invoke_model(
            modelId=model_id,
            body=json.dumps(_payload_sdxl(prompt)),
            contentType="application/json",
            accept="application/json",
        )
    except NoCredentialsError as e:
        raise ConfigurationError("Server AWS credentials missing") from e
    except (ClientError, BotoCoreError) as e:
        raise UpstreamError(f"Bedrock image generation failed: {e}") from e
    try:
        return json.loads(res["body"].read())
    except ValueError as e:
        raise UpstreamError("Bedrock image generation returned an unreadable body") from e

async def synthesize_image(prompt: str, *, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    """Generate one 1024x1024 image; the body keeps the ``artifacts`` shape for both backends."""
    backend = settings.image_backend
    logger.info("Synthesizing image via {} ({} chars)", backend, len(prompt))
    if backend == "stability":
        return await _paint_stability(prompt, client)
    if backend == "bedrock":
        return await asyncio.to_thread(_invoke_bedrock, prompt)
    raise ConfigurationError(f"Unknown image backend '{backend}'")
