from factories import make_post, make_restaurant

from dishcovery.services.normalizer import normalize_post, normalize_restaurant, resolve_cover_image


class TestPostNormalization:
    def test_image_url_is_first_image(self):
        row = make_post(images=["a.jpg", "b.jpg"])
        post = normalize_post(row)
        assert post.image_url == "a.jpg"
        assert post.images == ["a.jpg", "b.jpg"]

    def test_null_images_become_empty_list(self):
        post = normalize_post(make_post(images=None))
        assert post.images == []
        assert post.image_url is None

    def test_legacy_media_urls_alias(self):
        row = make_post()
        del row["images"]
        row["media_urls"] = ["legacy.jpg"]
        post = normalize_post(row)
        assert post.images == ["legacy.jpg"]
        assert post.image_url == "legacy.jpg"

    def test_missing_counts_default_to_zero(self):
        row = make_post()
        for field in ("likes_count", "comments_count", "saves_count"):
            row.pop(field)
        post = normalize_post(row)
        assert (post.likes_count, post.comments_count, post.saves_count) == (0, 0, 0)

    def test_null_counts_default_to_zero(self):
        post = normalize_post(make_post(likes_count=None, comments_count=None, saves_count=None))
        assert (post.likes_count, post.comments_count, post.saves_count) == (0, 0, 0)

    def test_aggregate_count_shape_is_collapsed(self):
        post = normalize_post(make_post(likes_count=[{"count": 7}], comments_count=[], saves_count={"count": 2}))
        assert post.likes_count == 7
        assert post.comments_count == 0
        assert post.saves_count == 2

    def test_social_flags_default_false(self):
        post = normalize_post(make_post())
        assert post.is_liked is False
        assert post.is_saved is False

    def test_social_flags_from_id_sets(self):
        row = make_post()
        post = normalize_post(row, liked_ids={row["id"]}, saved_ids=set())
        assert post.is_liked is True
        assert post.is_saved is False

    def test_orphaned_post_gets_sentinel_author(self):
        post = normalize_post(make_post(user=None))
        assert post.user.id == ""
        assert post.user.username == "unknown"
        assert post.user.avatar_url == ""

    def test_author_alias(self):
        row = make_post()
        author = row.pop("user")
        row["author"] = author
        assert normalize_post(row).user.username == author["username"]

    def test_no_restaurant(self):
        assert normalize_post(make_post(restaurant=None)).restaurant is None


class TestRestaurantNormalization:
    def test_explicit_cover_wins(self):
        r = normalize_restaurant(make_restaurant(cover_image="cover.jpg"))
        assert r.cover_image == "cover.jpg"
        assert r.image_url == "cover.jpg"

    def test_cover_falls_back_to_first_photo(self):
        r = normalize_restaurant(make_restaurant(cover_image="", photos=["p1.jpg", "p2.jpg"]))
        assert r.cover_image == "p1.jpg"

    def test_no_images_at_all(self):
        r = normalize_restaurant(make_restaurant(cover_image=None, photos=None))
        assert r.cover_image is None
        assert r.photos == []
        assert r.images == []
        assert r.has_images is False

    def test_photos_and_images_alias_carry_same_contents(self):
        r = normalize_restaurant(make_restaurant(photos=["x.jpg", "y.jpg"]))
        assert r.photos == ["x.jpg", "y.jpg"]
        assert r.images == r.photos

    def test_resolution_is_same_everywhere(self):
        row = make_restaurant(cover_image=None, photos=["first.jpg"])
        nested = normalize_post(make_post(restaurant=row)).restaurant
        assert nested.cover_image == resolve_cover_image(row) == normalize_restaurant(row).cover_image

    def test_missing_food_types(self):
        assert normalize_restaurant(make_restaurant(food_types=None)).food_types == []
