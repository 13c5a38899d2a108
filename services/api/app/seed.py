"""
Seed script — fills the database with a small, realistic dataset.

Creates:
  • 10 profiles
  • A follow graph (each user follows up to 4 others)
  • 5 posts per user (50 total)
  • Some likes and comments across posts

Every write goes through the service layer, so the seeded counters are produced
by the same toggle/recount logic the API uses.

Run against the configured database:
  python -m app.seed --posts-per-user 5
"""
import argparse
import asyncio
import random
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.services.comments import CommentService
from app.services.follows import FollowService
from app.services.likes import LikeService
from app.services.posts import PostService
from app.services.profiles import ProfileService


BASE_USERS = [
    ("alice_ai", "Applied ML, mostly ranking models."),
    ("bob_builder", "Backend engineer. Queues and databases."),
    ("carol_codes", "Open source maintainer."),
    ("dave_designs", "Product designer, part-time illustrator."),
    ("eve_engineer", "SRE. Ask me about pagers."),
    ("frank_feeds", "Building feeds at scale."),
    ("grace_graphs", "Graph algorithms enthusiast."),
    ("henry_hpc", "HPC and numerical computing."),
    ("iris_infra", "Infrastructure as code."),
    ("jack_ml", "Training models, breaking GPUs."),
]

SAMPLE_POSTS = [
    "Just shipped a new feature to production 🚀 Zero downtime deploys are beautiful.",
    "TIL: a unique constraint is the cheapest way to make a toggle idempotent.",
    "Denormalized counters are fast until the first desync. Clamp at zero.",
    "Fan-out on write vs pull-on-read — the eternal debate in feed architecture.",
    "Pagination with offsets is fine until page 500. Then it is not.",
    "OpenTelemetry traces finally connected to Jaeger. The waterfall diagram is so satisfying.",
    "Prometheus metrics: the difference between knowing and guessing in production.",
    "Content moderation at scale is a harder problem than the ranking model.",
    "FastAPI dependencies make per-request context trivial to test.",
    "Row locks beat retry loops for small hot rows.",
    "Grafana dashboards are the first thing I build for any new service.",
    "The social graph is just two indexes and a lot of opinions.",
]

SAMPLE_COMMENTS = [
    "Great point!",
    "Hard agree.",
    "Have you measured it?",
    "This is the way.",
    "Saving this for later.",
]


@dataclass
class SeedSummary:
    user_ids: list[str] = field(default_factory=list)
    post_ids: list[str] = field(default_factory=list)
    follows: int = 0
    likes: int = 0
    comments: int = 0


async def seed(
    session_factory: async_sessionmaker[AsyncSession],
    posts_per_user: int = 5,
    max_follows: int = 4,
    max_likes_per_post: int = 5,
    rng: random.Random | None = None,
) -> SeedSummary:
    rng = rng or random.Random()
    summary = SeedSummary()

    async with session_factory() as db:
        profiles = ProfileService(db)
        follows = FollowService(db)
        posts = PostService(db)
        likes = LikeService(db)
        comments = CommentService(db)

        # ── Profiles ──────────────────────────────────────────────────────
        for username, bio in BASE_USERS:
            await profiles.update(username, {"bio": bio})
            summary.user_ids.append(username)

        # ── Follow graph ──────────────────────────────────────────────────
        for follower_id in summary.user_ids:
            others = [u for u in summary.user_ids if u != follower_id]
            for target_id in rng.sample(others, k=min(max_follows, len(others))):
                await follows.toggle_follow(follower_id, target_id)
                summary.follows += 1

        # ── Posts ─────────────────────────────────────────────────────────
        pool = SAMPLE_POSTS[:]
        rng.shuffle(pool)
        idx = 0
        for user_id in summary.user_ids:
            for _ in range(posts_per_user):
                post = await posts.create_post(user_id, pool[idx % len(pool)])
                summary.post_ids.append(post.id)
                idx += 1

        # ── Likes & comments ──────────────────────────────────────────────
        for post_id in summary.post_ids:
            k = rng.randint(0, min(max_likes_per_post, len(summary.user_ids)))
            for user_id in rng.sample(summary.user_ids, k=k):
                await likes.toggle_post_like(user_id, post_id)
                summary.likes += 1
            if rng.random() < 0.5:
                await comments.create_comment(
                    rng.choice(summary.user_ids), post_id, rng.choice(SAMPLE_COMMENTS)
                )
                summary.comments += 1

    return summary


async def main(posts_per_user: int) -> None:
    from app.database import AsyncSessionLocal, init_db

    await init_db()
    summary = await seed(AsyncSessionLocal, posts_per_user=posts_per_user)

    print("=" * 60)
    print(f"  ✓ {len(summary.user_ids)} profiles")
    print(f"  ✓ {summary.follows} follows")
    print(f"  ✓ {len(summary.post_ids)} posts")
    print(f"  ✓ {summary.likes} likes, {summary.comments} comments")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the Social Graph database")
    parser.add_argument("--posts-per-user", type=int, default=5)
    args = parser.parse_args()
    asyncio.run(main(args.posts_per_user))
