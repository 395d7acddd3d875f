import pytest

from factories import FakeGateway, make_post

from dishcovery.core.exceptions import StoreUnavailable
from dishcovery.services.social_state import SocialStateResolver


def _gateway_with_posts(n: int, viewer_id: str) -> tuple[FakeGateway, list[str]]:
    posts = [make_post(minutes=i) for i in range(n)]
    ids = [p["id"] for p in posts]
    gateway = FakeGateway({
        "posts": posts,
        "post_likes": [{"user_id": viewer_id, "post_id": pid} for pid in ids[::2]],
        "post_saves": [{"user_id": viewer_id, "post_id": pid} for pid in ids[:1]],
    })
    return gateway, ids


@pytest.mark.asyncio
async def test_anonymous_viewer_issues_no_queries():
    gateway, ids = _gateway_with_posts(5, "someone")
    state = await SocialStateResolver(gateway).resolve(None, ids)
    assert state.liked == frozenset()
    assert state.saved == frozenset()
    assert gateway.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("n", [0, 1, 50])
async def test_exactly_two_queries_regardless_of_batch_size(n, viewer_id):
    gateway, ids = _gateway_with_posts(n, viewer_id)
    await SocialStateResolver(gateway).resolve(viewer_id, ids)
    assert len(gateway.existence_calls) == 2
    assert {c["table"] for c in gateway.existence_calls} == {"post_likes", "post_saves"}
    assert gateway.page_calls == []


@pytest.mark.asyncio
async def test_resolves_liked_and_saved_subsets(viewer_id):
    gateway, ids = _gateway_with_posts(4, viewer_id)
    state = await SocialStateResolver(gateway).resolve(viewer_id, ids)
    assert state.liked == frozenset(ids[::2])
    assert state.saved == frozenset(ids[:1])
    assert state.degraded is False


@pytest.mark.asyncio
async def test_other_viewers_rows_do_not_leak(viewer_id):
    gateway, ids = _gateway_with_posts(3, "another-viewer")
    state = await SocialStateResolver(gateway).resolve(viewer_id, ids)
    assert state.liked == frozenset()
    assert state.saved == frozenset()


@pytest.mark.asyncio
async def test_failed_likes_query_degrades_to_empty(viewer_id, caplog):
    gateway, ids = _gateway_with_posts(4, viewer_id)
    gateway.fail_existence["post_likes"] = StoreUnavailable("down")
    state = await SocialStateResolver(gateway).resolve(viewer_id, ids)
    assert state.liked == frozenset()
    assert state.saved == frozenset(ids[:1])
    assert state.degraded is True
    assert "SocialStateDegraded" in caplog.text
