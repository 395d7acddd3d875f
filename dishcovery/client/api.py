"""HTTP client for the Dishcovery API."""
import logging
from typing import Any

import httpx

from dishcovery.core.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed API call: transport error, timeout, non-2xx status or unreadable body."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code >= 500


class DishcoveryClient:
    """Thin async wrapper over the v1 endpoints. Every failure surfaces as ApiError."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token = token
        self.timeout = httpx.Timeout(timeout or settings.CLIENT_TIMEOUT_SECONDS, connect=5.0)
        self.transport = transport
        self.client: httpx.AsyncClient | None = None

    async def start(self):
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            )

    async def stop(self):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> "DishcoveryClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info):
        await self.stop()

    def set_token(self, token: str | None) -> None:
        self.token = token

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        await self.start()
        headers = kwargs.pop("headers", {}) or {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = await self.client.request(method, path, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = e.response.text
            try:
                body = e.response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                detail = body.get("detail", detail)
            logger.warning("HTTP %s for %s %s: %s", e.response.status_code, method, path, detail)
            raise ApiError(str(detail), status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning("Request failed for %s %s: %s", method, path, e)
            raise ApiError(str(e) or e.__class__.__name__) from e
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning("Non-JSON %s body for %s %s", response.status_code, method, path)
            raise ApiError("Malformed response body", status_code=response.status_code) from e

    # Feed
    async def get_feed(self, page: int = 1, limit: int = 10) -> dict:
        return await self._request("GET", "/posts/feed", params={"page": page, "limit": limit})

    async def get_trending(self, page: int = 1, limit: int = 10, sort: str | None = None) -> dict:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if sort:
            params["sort"] = sort
        return await self._request("GET", "/posts/trending", params=params)

    async def search_posts(
        self,
        q: str | None = None,
        hashtag: str | None = None,
        sort: str = "new",
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        params: dict[str, Any] = {"sort": sort, "page": page, "limit": limit}
        if q:
            params["q"] = q
        if hashtag:
            params["hashtag"] = hashtag
        return await self._request("GET", "/posts/search", params=params)

    async def search(self, q: str, filter: str = "newest", type: str = "all") -> dict:
        return await self._request("GET", "/search/", params={"q": q, "filter": filter, "type": type})

    async def get_saved_posts(self, page: int = 1, limit: int = 10) -> dict:
        return await self._request("GET", "/users/me/saved-posts", params={"page": page, "limit": limit})

    async def get_post(self, post_id: str) -> dict:
        return await self._request("GET", f"/posts/{post_id}")

    # Engagement (set/unset discipline)
    async def like_post(self, post_id: str) -> dict:
        return await self._request("POST", f"/posts/{post_id}/like")

    async def unlike_post(self, post_id: str) -> dict:
        return await self._request("DELETE", f"/posts/{post_id}/like")

    async def save_post(self, post_id: str) -> dict:
        return await self._request("POST", f"/posts/{post_id}/save")

    async def unsave_post(self, post_id: str) -> dict:
        return await self._request("DELETE", f"/posts/{post_id}/save")

    async def list_comments(self, post_id: str, page: int = 1, limit: int = 20) -> dict:
        return await self._request("GET", f"/posts/{post_id}/comments", params={"page": page, "limit": limit})

    async def create_comment(self, post_id: str, content: str) -> dict:
        return await self._request("POST", f"/posts/{post_id}/comments", json={"content": content})

    # Restaurants
    async def get_restaurants(
        self,
        page: int = 1,
        limit: int = 10,
        cuisine: str | None = None,
        price: str | None = None,
        rating: float | None = None,
        type: str | None = None,
    ) -> dict:
        params: dict[str, Any] = {"page": page, "limit": limit}
        for name, value in (("cuisine", cuisine), ("price", price), ("rating", rating), ("type", type)):
            if value is not None and value != "":
                params[name] = value
        return await self._request("GET", "/restaurants/", params=params)

    async def get_restaurant_category(self, slug: str, page: int = 1, limit: int = 10) -> dict:
        return await self._request("GET", f"/restaurants/category/{slug}", params={"page": page, "limit": limit})

    async def get_top_restaurants(self) -> dict:
        return await self._request("GET", "/restaurants/top10")

    async def get_restaurant(self, restaurant_id: str) -> dict:
        return await self._request("GET", f"/restaurants/{restaurant_id}")
