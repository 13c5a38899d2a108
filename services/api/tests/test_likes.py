from sqlalchemy import func, select

from app.models import Like
from app.services.likes import LikeService


async def make_post(client, login, owner="alice"):
    login(owner)
    resp = await client.post("/api/v1/posts", json={"content": "like me"})
    return resp.json()["id"]


class TestPostLikes:
    """Like toggle on posts"""

    async def test_toggle_alternates(self, client, login):
        post_id = await make_post(client, login)
        login("bob")

        results = []
        for _ in range(3):
            resp = await client.post(f"/api/v1/posts/{post_id}/like")
            assert resp.status_code == 200
            results.append(resp.json()["liked"])

        # like, unlike, like → net state liked
        assert results == [True, False, True]
        assert (await client.get(f"/api/v1/posts/{post_id}")).json()["like_count"] == 1

    async def test_likes_are_counted_on_read(self, client, login, get_profile):
        post_id = await make_post(client, login)
        for user in ("bob", "carol", "dave"):
            login(user)
            await client.post(f"/api/v1/posts/{post_id}/like")

        assert (await client.get(f"/api/v1/posts/{post_id}")).json()["like_count"] == 3
        # Likes never touch profile counters
        alice = await get_profile("alice")
        assert (alice.follower_count, alice.following_count, alice.post_count) == (0, 0, 1)
        assert await get_profile("bob") is None

    async def test_like_row_targets_post_only(self, client, login, session_factory):
        post_id = await make_post(client, login)
        await client.post(f"/api/v1/posts/{post_id}/like")

        async with session_factory() as session:
            like = (await session.execute(select(Like))).scalar_one()
        assert like.post_id == post_id
        assert like.comment_id is None
        assert like.user_id == "alice"

    async def test_like_missing_post(self, client, login):
        login("bob")
        assert (await client.post("/api/v1/posts/nope/like")).status_code == 404

    async def test_like_requires_session(self, client, login):
        post_id = await make_post(client, login)
        login(None)
        assert (await client.post(f"/api/v1/posts/{post_id}/like")).status_code == 401

    async def test_duplicate_insert_resolves_as_liked(
        self, client, login, session_factory, monkeypatch
    ):
        post_id = await make_post(client, login)
        login("bob")
        assert (await client.post(f"/api/v1/posts/{post_id}/like")).json() == {"liked": True}

        # Second toggle reads before the first one's insert is visible
        find = LikeService._find
        reads = []

        async def stale_first_read(self, actor_id, column, target_id):
            reads.append(target_id)
            if len(reads) == 1:
                return None
            return await find(self, actor_id, column, target_id)

        monkeypatch.setattr(LikeService, "_find", stale_first_read)

        resp = await client.post(f"/api/v1/posts/{post_id}/like")
        assert resp.status_code == 200
        assert resp.json() == {"liked": True}
        assert len(reads) == 2

        async with session_factory() as session:
            assert await session.scalar(select(func.count(Like.id))) == 1


class TestCommentLikes:
    """Like toggle on comments, keyed by (comment_id, user_id)"""

    async def test_toggle_and_count(self, client, login):
        post_id = await make_post(client, login)
        comment = (
            await client.post(f"/api/v1/posts/{post_id}/comments", json={"content": "first"})
        ).json()

        login("bob")
        resp = await client.post(f"/api/v1/comments/{comment['id']}/like")
        assert resp.json() == {"liked": True}

        comments = (await client.get(f"/api/v1/posts/{post_id}/comments")).json()["comments"]
        assert comments[0]["like_count"] == 1
        # A comment like is not a post like
        assert (await client.get(f"/api/v1/posts/{post_id}")).json()["like_count"] == 0

        resp = await client.post(f"/api/v1/comments/{comment['id']}/like")
        assert resp.json() == {"liked": False}
        comments = (await client.get(f"/api/v1/posts/{post_id}/comments")).json()["comments"]
        assert comments[0]["like_count"] == 0

    async def test_like_missing_comment(self, client, login):
        login("bob")
        assert (await client.post("/api/v1/comments/nope/like")).status_code == 404
