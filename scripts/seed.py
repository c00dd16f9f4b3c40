"""Populate a local database with users, categories, posts and comments."""
import argparse
import asyncio
import random
import time

from app.auth import create_access_token
from app.database import engine, async_session, Base
from app.models import Category, Comment, Post, User

CATEGORIES = ["Tech", "Travel", "Food", "Science", "Culture", "Sports"]

TOPICS = ["python", "fastapi", "postgresql", "redis", "docker", "testing",
          "performance", "security", "caching", "search"]


async def seed(small: bool = False):
    num_users = 5 if small else 50
    num_posts = 50 if small else 5000
    max_comments = 2 if small else 5

    print(f"Seeding: {num_users} users, {len(CATEGORIES)} categories, {num_posts} posts")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        categories = [Category(name=name) for name in CATEGORIES]
        session.add_all(categories)

        users = [
            User(username=f"user_{i:04d}", email=f"user_{i:04d}@example.com")
            for i in range(num_users)
        ]
        session.add_all(users)
        await session.flush()

        total_comments = 0
        for i in range(num_posts):
            topic = random.choice(TOPICS)
            post = Post(
                title=f"Post {i}: notes on {topic}",
                content=f"Everything we learned about {topic} this week. " * 10,
                category_id=random.choice(categories).id,
            )
            session.add(post)
            await session.flush()
            for _ in range(random.randint(0, max_comments)):
                session.add(Comment(
                    post_id=post.id,
                    user_id=random.choice(users).id,
                    content=f"Thanks for writing about {topic}!",
                ))
                total_comments += 1

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s ({total_comments} comments)")
    print(f"Token for {users[0].username}:\n  {create_access_token(users[0].id)}")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (50 posts)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
