from __future__ import annotations
import asyncio
from typing import Any, List, Optional
import httpx
from loguru import logger
from shared.config import settings
from shared.errors import ConfigurationError
from shared.http import upstream_client

def _first_photo_url(data: Any, size: str) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    photos = data.get("photos") or []
    if not photos or not isinstance(photos[0], dict):
        return None
    return (photos[0].get("src") or {}).get(size) or None

async def _search_one(client: httpx.AsyncClient, keyword: str, api_key: str) -> Optional[str]:
    response = await client.get(
        f"{settings.pexels_api_host}/v1/search",
        params={"query": keyword, "per_page": 1},
        headers={"Authorization": api_key},
    )
    if response.is_error:
        logger.warning("Pexels search for '{}' returned {}", keyword, response.status_code)
        return None
    return _first_photo_url(response.json(), settings.pexels_photo_size)

async def search_images(keywords: List[str], *, client: Optional[httpx.AsyncClient] = None) -> List[str]:
    """One photo URL per keyword that matched, in keyword order.

    Every search runs concurrently and all of them settle before returning;
    a keyword whose search fails or finds nothing is dropped.
    """
    api_key = settings.pexels_api_key
    if not api_key:
        raise ConfigurationError("Server Pexels Key missing")
    if not keywords:
        return []

    owned = client is None
    client = client or upstream_client()
    try:
        results = await asyncio.gather(
            *(_search_one(client, kw, api_key) for kw in keywords),
            return_exceptions=True,
        )
    finally:
        if owned:
            await client.aclose()

    images: List[str] = []
    for kw, res in zip(keywords, results):
        if isinstance(res, BaseException):
            logger.warning("Pexels search for '{}' failed: {}", kw, res)
            continue
        if res:
            images.append(res)
    logger.info("Resolved {}/{} keyword images", len(images), len(keywords))
    return images
