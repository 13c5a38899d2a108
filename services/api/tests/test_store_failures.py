from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.models import Follow
from app.services import follows as follows_service
from app.services.posts import PostService


def disk_failure() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("disk I/O error in /var/lib/mysql/ibdata1"))


class TestStoreFailure:
    """Database errors surface as a generic 500"""

    async def test_store_error_hides_internal_detail(self, client, monkeypatch):
        async def failing_list(self, page):
            raise disk_failure()

        monkeypatch.setattr(PostService, "list_posts", failing_list)

        resp = await client.get("/api/v1/posts")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "A database operation failed"}
        assert "disk I/O" not in resp.text
        assert "ibdata1" not in resp.text


class TestToggleRollback:
    """A toggle that fails partway leaves the edge and both counters untouched"""

    async def test_failure_after_edge_insert_rolls_back(
        self, client, login, session_factory, get_profile, monkeypatch
    ):
        for user in ("alice", "bob"):
            login(user)
            await client.get("/api/v1/users/me")

        increment = follows_service.increment_counter
        counters = []

        async def fail_on_second_counter(db, user_id, counter):
            counters.append(counter)
            if len(counters) == 2:
                raise disk_failure()
            await increment(db, user_id, counter)

        monkeypatch.setattr(follows_service, "increment_counter", fail_on_second_counter)

        login("alice")
        resp = await client.post("/api/v1/users/bob/follow")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "A database operation failed"}
        assert counters == ["follower_count", "following_count"]

        async with session_factory() as session:
            assert await session.scalar(select(func.count(Follow.id))) == 0
        assert (await get_profile("bob")).follower_count == 0
        assert (await get_profile("alice")).following_count == 0

        # Nothing half-written blocks the next toggle
        monkeypatch.undo()
        resp = await client.post("/api/v1/users/bob/follow")
        assert resp.json() == {"following": True}
        assert (await get_profile("bob")).follower_count == 1
        assert (await get_profile("alice")).following_count == 1
