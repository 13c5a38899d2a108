import random

from sqlalchemy import func, select

from app.models import Comment, Follow, Like, Post, Profile
from app.seed import BASE_USERS, seed


async def test_seed_produces_consistent_counters(session_factory):
    summary = await seed(session_factory, posts_per_user=2, rng=random.Random(7))

    assert len(summary.user_ids) == len(BASE_USERS)
    assert len(summary.post_ids) == 2 * len(BASE_USERS)
    assert summary.follows == 4 * len(BASE_USERS)

    async with session_factory() as session:
        assert await session.scalar(select(func.count(Follow.id))) == summary.follows
        assert await session.scalar(select(func.count(Like.id))) == summary.likes
        assert await session.scalar(select(func.count(Comment.id))) == summary.comments

        profiles = (await session.execute(select(Profile))).scalars().all()
        assert len(profiles) == len(BASE_USERS)
        for profile in profiles:
            followers = await session.scalar(
                select(func.count(Follow.id)).where(Follow.following_id == profile.user_id)
            )
            following = await session.scalar(
                select(func.count(Follow.id)).where(Follow.follower_id == profile.user_id)
            )
            posts = await session.scalar(
                select(func.count(Post.id)).where(Post.user_id == profile.user_id)
            )
            assert profile.follower_count == followers
            assert profile.following_count == following
            assert profile.post_count == posts == 2
            assert profile.bio
