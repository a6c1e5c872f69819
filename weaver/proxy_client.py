from __future__ import annotations
from typing import Any, Dict, List, Optional
import httpx
from shared.config import settings
from shared.errors import ProxyError


class ProxyClient:
    """Talks to the three proxy routes. One attempt per call, bounded by a timeout."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        analyze_path: Optional[str] = None,
        search_images_path: Optional[str] = None,
        synthesize_image_path: Optional[str] = None,
    ):
        self._owned = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.proxy_url,
            timeout=httpx.Timeout(timeout or settings.proxy_timeout),
        )
        self.analyze_path = analyze_path or settings.analyze_path
        self.search_images_path = search_images_path or settings.search_images_path
        self.synthesize_image_path = synthesize_image_path or settings.synthesize_image_path

    async def __aenter__(self) -> "ProxyClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owned:
            await self._client.aclose()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.TimeoutException as e:
            raise ProxyError(f"{path} timed out") from e
        except httpx.HTTPError as e:
            raise ProxyError(f"{path} unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            detail = data.get("error") if isinstance(data, dict) else None
            raise ProxyError(
                f"{path} failed with {response.status_code}: {detail or response.text or response.reason_phrase}",
                response.status_code,
            )
        if not isinstance(data, dict):
            raise ProxyError(f"{path} returned an unreadable body", response.status_code)
        return data

    async def analyze(self, prompt: str) -> Dict[str, Any]:
        return await self._post(self.analyze_path, {"prompt": prompt})

    async def search_images(self, keywords: List[str]) -> List[str]:
        data = await self._post(self.search_images_path, {"keywords": list(keywords)})
        images = data.get("images")
        if not isinstance(images, list):
            raise ProxyError(f"{self.search_images_path} returned no image list")
        return [u for u in images if isinstance(u, str) and u]

    async def synthesize_image(self, prompt: str) -> Dict[str, Any]:
        return await self._post(self.synthesize_image_path, {"prompt": prompt})
