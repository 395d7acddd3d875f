import httpx
import pytest

from dishcovery.client.api import ApiError, DishcoveryClient
from dishcovery.client.cursor import QueryIdentity, client_fetcher
from dishcovery.schemas.feed import FeedMode


def _client(handler, token=None) -> DishcoveryClient:
    return DishcoveryClient(base_url="http://api.test/api/v1", token=token, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_feed_request_shape_and_bearer_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"data": [], "page": 2, "hasMore": False})

    async with _client(handler, token="abc") as client:
        body = await client.get_feed(page=2, limit=5)

    assert body["hasMore"] is False
    assert seen == {"path": "/api/v1/posts/feed", "params": {"page": "2", "limit": "5"}, "auth": "Bearer abc"}


@pytest.mark.asyncio
async def test_anonymous_request_has_no_auth_header():
    def handler(request):
        assert "Authorization" not in request.headers
        return httpx.Response(200, json={"data": [], "page": 1, "hasMore": False})

    async with _client(handler) as client:
        await client.get_trending()


@pytest.mark.asyncio
async def test_error_status_becomes_api_error_with_detail():
    def handler(request):
        return httpx.Response(503, json={"detail": "Row store unavailable", "error": "StoreUnavailable"})

    async with _client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.like_post("p1")

    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "Row store unavailable"
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_client_error_is_not_retryable():
    def handler(request):
        return httpx.Response(400, text="bad page")

    async with _client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get_feed(page=0)

    assert exc_info.value.message == "bad page"
    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_non_json_success_body_is_api_error():
    def handler(request):
        return httpx.Response(200, text="<html>gateway</html>")

    async with _client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.like_post("p1")

    assert exc_info.value.status_code == 200
    assert exc_info.value.message == "Malformed response body"


@pytest.mark.asyncio
async def test_transport_failure_is_retryable_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get_feed()

    assert exc_info.value.status_code is None
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_set_unset_verbs():
    methods = []

    def handler(request):
        methods.append((request.method, request.url.path))
        return httpx.Response(200, json={"saved": True, "saves_count": 1})

    async with _client(handler) as client:
        await client.save_post("p1")
        await client.unsave_post("p1")
        await client.like_post("p1")
        await client.unlike_post("p1")

    assert methods == [
        ("POST", "/api/v1/posts/p1/save"),
        ("DELETE", "/api/v1/posts/p1/save"),
        ("POST", "/api/v1/posts/p1/like"),
        ("DELETE", "/api/v1/posts/p1/like"),
    ]


@pytest.mark.asyncio
async def test_fetcher_routes_identity_to_endpoint():
    paths = []

    def handler(request):
        paths.append((request.url.path, dict(request.url.params)))
        return httpx.Response(200, json={"data": [], "page": 1, "hasMore": False})

    async with _client(handler) as client:
        fetch = client_fetcher(client)
        await fetch(QueryIdentity(FeedMode.CHRONOLOGICAL), 1, 10)
        await fetch(QueryIdentity(FeedMode.TRENDING, sort="popular"), 1, 10)
        await fetch(QueryIdentity(FeedMode.SEARCH, hashtag="pho"), 1, 10)
        await fetch(QueryIdentity(FeedMode.SAVED), 2, 10)

    assert [p for p, _ in paths] == [
        "/api/v1/posts/feed", "/api/v1/posts/trending", "/api/v1/posts/search", "/api/v1/users/me/saved-posts",
    ]
    assert paths[3][1] == {"page": "2", "limit": "10"}
    assert paths[1][1]["sort"] == "popular"
    assert paths[2][1] == {"sort": "new", "page": "1", "limit": "10", "hashtag": "pho"}


@pytest.mark.asyncio
async def test_restaurant_requests():
    seen = []

    def handler(request):
        seen.append((request.url.path, dict(request.url.params)))
        return httpx.Response(200, json={"data": []})

    async with _client(handler) as client:
        await client.get_restaurants(cuisine="pho,bun", rating=4.5, type="")
        await client.get_restaurant_category("via-he")
        await client.get_top_restaurants()
        await client.get_restaurant("r1")

    assert seen == [
        ("/api/v1/restaurants/", {"page": "1", "limit": "10", "cuisine": "pho,bun", "rating": "4.5"}),
        ("/api/v1/restaurants/category/via-he", {"page": "1", "limit": "10"}),
        ("/api/v1/restaurants/top10", {}),
        ("/api/v1/restaurants/r1", {}),
    ]
