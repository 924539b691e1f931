import logging
from typing import Optional

import httpx

from agentarium_client.config import Settings
from agentarium_client.errors import ApiError
from agentarium_client.schemas.events import HealthResponse
from agentarium_client.schemas.filesystem import FilesystemLayout

logger = logging.getLogger(__name__)


class ApiClient:
    """HTTP client for the Agentarium API (health check and filesystem scans)"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or Settings().api_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ApiClient":
        return cls(base_url=settings.api_url, timeout=settings.request_timeout, **kwargs)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def close(self):
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def health(self) -> HealthResponse:
        """Check that the API is up"""
        response = await self._get("/health")
        return HealthResponse.model_validate(response.json())

    async def get_filesystem(self, path: str) -> FilesystemLayout:
        """
        Ask the API to scan a directory.

        Args:
            path: Root directory to scan

        Returns:
            FilesystemLayout with positions calculated by the API
        """
        response = await self._get("/api/filesystem", params={"path": path})
        layout = FilesystemLayout.model_validate(response.json())
        logger.info(f"Fetched filesystem for {path}: {len(layout.folders)} folders, {len(layout.files)} files")
        return layout

    async def _get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ApiError(None, f"Request to {url} failed: {e}") from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("detail", response.text) if isinstance(body, dict) else response.text
            raise ApiError(response.status_code, str(detail))

        return response
