"""HTTP client for the ``/api/blogs`` resource."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from digiblog.config import settings
from digiblog.schemas.blog import Blog, BlogCreate, BlogUpdate

logger = logging.getLogger(__name__)


class BlogApiError(RuntimeError):
    """Raised when the blog API answers with a client error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BlogApiUnavailable(BlogApiError):
    """Raised when the blog API cannot be reached or fails server-side."""


def _parse_blog(item: Any) -> Blog:
    try:
        return Blog.model_validate(item)
    except ValidationError as e:
        raise BlogApiUnavailable("Blog API returned malformed blog data") from e


class BlogApiClient:
    """Async client for the blog resource surface.

    Args:
        base_url: API root, e.g. ``https://example.com/api``
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass a MockTransport)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.api_timeout,
            transport=transport,
        )

    async def _request(
        self, method: str, path: str, json: dict | None = None
    ) -> dict[str, Any]:
        try:
            response = await self.client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("Blog API %s %s unreachable: %s", method, path, e)
            raise BlogApiUnavailable(f"Blog API unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code >= 500:
            raise BlogApiUnavailable(
                data.get("error") or f"Blog API error {response.status_code}",
                status_code=response.status_code,
            )
        if response.is_error:
            raise BlogApiError(
                data.get("error") or f"Blog API error {response.status_code}",
                status_code=response.status_code,
            )
        if not data.get("success"):
            raise BlogApiUnavailable("Blog API returned an unexpected payload")
        return data

    async def list_blogs(self) -> list[Blog]:
        data = await self._request("GET", "/blogs")
        return [_parse_blog(item) for item in data.get("blogs", [])]

    async def get_blog(self, id_or_slug: str) -> Blog:
        data = await self._request("GET", f"/blogs/{id_or_slug}")
        return _parse_blog(data.get("blog"))

    async def create_blog(self, payload: BlogCreate) -> Blog:
        body = payload.model_dump(mode="json", by_alias=True)
        data = await self._request("POST", "/blogs", json=body)
        return _parse_blog(data.get("blog"))

    async def update_blog(self, blog_id: str, changes: BlogUpdate) -> Blog:
        body = changes.model_dump(mode="json", by_alias=True, exclude_unset=True)
        data = await self._request("PUT", f"/blogs/{blog_id}", json=body)
        return _parse_blog(data.get("blog"))

    async def delete_blog(self, blog_id: str) -> None:
        await self._request("DELETE", f"/blogs/{blog_id}")

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
