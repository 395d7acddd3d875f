import asyncio

import pytest

from factories import FakeGateway, make_post, make_restaurant

from dishcovery.core.exceptions import InvalidQuery, StoreUnavailable
from dishcovery.db.query import AnyOf, Eq, SortKey, TextMatch
from dishcovery.schemas.feed import FeedMode
from dishcovery.services.feed_service import FeedAssembler, normalize_hashtag, saved_query, search_query, trending_query


def _assembler(gateway: FakeGateway, **kwargs) -> FeedAssembler:
    return FeedAssembler(gateway, **kwargs)


class TestPagination:
    @pytest.mark.asyncio
    async def test_has_more_true_when_page_is_full(self):
        gateway = FakeGateway({"posts": [make_post(minutes=i) for i in range(10)]})
        page = await _assembler(gateway).chronological(page=1, limit=10)
        assert len(page.data) == 10
        assert page.has_more is True

    @pytest.mark.asyncio
    async def test_has_more_false_on_short_page(self):
        gateway = FakeGateway({"posts": [make_post(minutes=i) for i in range(13)]})
        page = await _assembler(gateway).chronological(page=2, limit=10)
        assert len(page.data) == 3
        assert page.has_more is False
        assert gateway.page_calls[-1]["offset"] == 10

    @pytest.mark.asyncio
    async def test_exact_multiple_costs_one_empty_page(self):
        gateway = FakeGateway({"posts": [make_post(minutes=i) for i in range(20)]})
        assembler = _assembler(gateway)
        second = await assembler.chronological(page=2, limit=10)
        assert second.has_more is True
        third = await assembler.chronological(page=3, limit=10)
        assert third.data == []
        assert third.has_more is False

    @pytest.mark.asyncio
    async def test_page_below_one_is_rejected(self):
        gateway = FakeGateway()
        with pytest.raises(InvalidQuery):
            await _assembler(gateway).chronological(page=0)
        assert gateway.calls == 0

    @pytest.mark.asyncio
    async def test_limit_is_clamped_to_fifty(self):
        gateway = FakeGateway({"posts": [make_post(minutes=i) for i in range(60)]})
        page = await _assembler(gateway).chronological(page=1, limit=500)
        assert len(page.data) == 50
        assert page.has_more is True
        assert gateway.page_calls[0]["limit"] == 50

    @pytest.mark.asyncio
    async def test_serialized_contract_uses_has_more_alias(self):
        gateway = FakeGateway({"posts": [make_post()]})
        page = await _assembler(gateway).chronological(page=1, limit=10)
        body = page.model_dump(by_alias=True)
        assert set(body) == {"data", "page", "hasMore"}
        assert body["page"] == 1


class TestOrdering:
    @pytest.mark.asyncio
    async def test_chronological_is_newest_first(self):
        posts = [make_post(minutes=i) for i in range(3)]
        page = await _assembler(FakeGateway({"posts": posts})).chronological()
        assert [p.id for p in page.data] == [p["id"] for p in reversed(posts)]

    @pytest.mark.asyncio
    async def test_trending_flag_precedes_recency(self):
        older_trending = make_post(minutes=0, is_trending=True)
        newer_plain = make_post(minutes=60, is_trending=False)
        page = await _assembler(FakeGateway({"posts": [newer_plain, older_trending]})).trending()
        assert [p.id for p in page.data] == [older_trending["id"], newer_plain["id"]]

    @pytest.mark.asyncio
    async def test_trending_ties_broken_by_recency(self):
        a = make_post(minutes=0, is_trending=True)
        b = make_post(minutes=5, is_trending=True)
        c = make_post(minutes=1)
        page = await _assembler(FakeGateway({"posts": [a, b, c]})).trending()
        assert [p.id for p in page.data] == [b["id"], a["id"], c["id"]]

    def test_trending_sub_modes(self):
        assert trending_query("popular").sort == (SortKey("likes_count"), SortKey("id"))
        assert trending_query("newest").sort == (SortKey("created_at"), SortKey("id"))
        assert trending_query(None).sort == (SortKey("is_trending"), SortKey("created_at"), SortKey("id"))

    @pytest.mark.asyncio
    async def test_trending_popular_orders_by_likes(self):
        low = make_post(minutes=10, likes_count=1, is_trending=True)
        high = make_post(minutes=0, likes_count=9)
        page = await _assembler(FakeGateway({"posts": [low, high]})).trending(sort="popular")
        assert [p.id for p in page.data] == [high["id"], low["id"]]


class TestSearch:
    @pytest.mark.asyncio
    async def test_blank_search_makes_no_store_round_trip(self):
        gateway = FakeGateway({"posts": [make_post()]})
        page = await _assembler(gateway).search(q="  ", hashtag="", page=3)
        assert page.data == []
        assert page.page == 3
        assert page.has_more is False
        assert gateway.calls == 0

    def test_hashtag_wins_over_text(self):
        query = search_query(q="noodles", hashtag="#phoviet")
        assert query.predicate == TextMatch("caption", "#phoviet")

    def test_text_matches_caption_or_restaurant_name(self):
        query = search_query(q=" banh mi ")
        assert query.predicate == AnyOf((TextMatch("caption", "banh mi"), TextMatch("restaurant.name", "banh mi")))

    def test_search_sort(self):
        assert search_query(q="x", sort="popular").sort == (SortKey("likes_count"), SortKey("id"))
        assert search_query(q="x", sort="new").sort == (SortKey("created_at"), SortKey("id"))
        assert search_query(q="x").sort == (SortKey("created_at"), SortKey("id"))

    def test_normalize_hashtag(self):
        assert normalize_hashtag("#pho") == "pho"
        assert normalize_hashtag("pho") == "pho"
        assert normalize_hashtag(" # ") == ""
        assert normalize_hashtag(None) == ""

    @pytest.mark.asyncio
    async def test_hashtag_search_matches_caption_tag(self):
        tagged = make_post(caption="Lunch #Pho today")
        other = make_post(caption="pho without tag")
        page = await _assembler(FakeGateway({"posts": [tagged, other]})).search(hashtag="#pho")
        assert [p.id for p in page.data] == [tagged["id"]]

    @pytest.mark.asyncio
    async def test_text_search_hits_restaurant_name(self):
        post = make_post(caption="dinner", restaurant=make_restaurant(name="Banh Mi Huynh Hoa"))
        page = await _assembler(FakeGateway({"posts": [post, make_post(caption="dinner")]})).search(q="huynh")
        assert [p.id for p in page.data] == [post["id"]]


class TestSaved:
    def test_saved_query(self, viewer_id):
        query = saved_query(viewer_id)
        assert query.mode == FeedMode.SAVED
        assert query.predicate == Eq("saves.user_id", viewer_id)
        assert query.sort == (SortKey("created_at"), SortKey("id"))

    @pytest.mark.asyncio
    async def test_only_viewer_saves_newest_first(self, viewer_id):
        older = make_post(minutes=0, saves=[{"user_id": viewer_id}])
        newer = make_post(minutes=5, saves=[{"user_id": "someone-else"}, {"user_id": viewer_id}])
        other = make_post(minutes=9, saves=[{"user_id": "someone-else"}])
        gateway = FakeGateway({
            "posts": [older, newer, other],
            "post_saves": [
                {"user_id": viewer_id, "post_id": older["id"]},
                {"user_id": viewer_id, "post_id": newer["id"]},
            ],
        })
        page = await _assembler(gateway).saved(viewer_id)
        assert [p.id for p in page.data] == [newer["id"], older["id"]]
        assert all(p.is_saved for p in page.data)
        assert page.has_more is False

class TestSocialAnnotation:
    @pytest.mark.asyncio
    async def test_anonymous_page_has_no_social_state(self):
        post = make_post()
        gateway = FakeGateway({"posts": [post], "post_likes": [{"user_id": "v", "post_id": post["id"]}]})
        page = await _assembler(gateway).chronological()
        assert page.data[0].is_liked is False
        assert page.data[0].is_saved is False
        assert gateway.existence_calls == []

    @pytest.mark.asyncio
    async def test_viewer_page_is_annotated(self, viewer_id):
        liked, saved = make_post(minutes=1), make_post(minutes=0)
        gateway = FakeGateway({
            "posts": [liked, saved],
            "post_likes": [{"user_id": viewer_id, "post_id": liked["id"]}],
            "post_saves": [{"user_id": viewer_id, "post_id": saved["id"]}],
        })
        page = await _assembler(gateway).chronological(viewer_id=viewer_id)
        flags = {p.id: (p.is_liked, p.is_saved) for p in page.data}
        assert flags == {liked["id"]: (True, False), saved["id"]: (False, True)}
        assert len(gateway.existence_calls) == 2

    @pytest.mark.asyncio
    async def test_social_failure_still_delivers_page(self, viewer_id):
        gateway = FakeGateway({"posts": [make_post()]})
        gateway.fail_existence["post_saves"] = StoreUnavailable("down")
        page = await _assembler(gateway).chronological(viewer_id=viewer_id)
        assert len(page.data) == 1
        assert page.data[0].is_saved is False


class TestFailures:
    @pytest.mark.asyncio
    async def test_store_failure_aborts_page(self):
        gateway = FakeGateway()
        gateway.fail_page = StoreUnavailable("down")
        with pytest.raises(StoreUnavailable):
            await _assembler(gateway).chronological()

    @pytest.mark.asyncio
    async def test_request_timeout_surfaces_as_store_unavailable(self):
        class SlowGateway(FakeGateway):
            async def fetch_page(self, *args, **kwargs):
                await asyncio.sleep(1)
                return []

        with pytest.raises(StoreUnavailable):
            await _assembler(SlowGateway(), timeout=0.01).chronological()

    @pytest.mark.asyncio
    async def test_get_post_not_found(self):
        from dishcovery.core.exceptions import NotFound

        with pytest.raises(NotFound):
            await _assembler(FakeGateway()).get_post("missing")
