"""Database seeder for local development of the blog backend."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta
from blog_backend.database import async_session, init_models
from blog_backend.models import User, UserSession, Article, Comment
from blog_backend.services.article_service import slugify

TOPICS = ["python", "fastapi", "postgresql", "docker", "kubernetes",
          "typescript", "testing", "performance", "security", "rest-api"]

async def seed(small: bool = False):
    num_users = 5 if small else 50
    num_articles = 30 if small else 2000
    max_comments_per_article = 2 if small else 5

    print(f"Seeding: {num_users} users, {num_articles} articles, "
          f"up to {num_articles * max_comments_per_article} comments")
    start = time.perf_counter()

    await init_models(drop=True)

    async with async_session() as session:
        users = []
        for i in range(num_users):
            user = User(
                username=f"user_{i:04d}",
                email=f"user_{i:04d}@example.com",
                display_name=f"User {i}",
                bio=f"I am test user number {i}. I write about technology.",
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        # One open session and a couple of ended ones per user.
        for user in users:
            session.add(UserSession(user_id=user.id))
            for _ in range(random.randint(0, 2)):
                session.add(UserSession(user_id=user.id, is_removed=True))
        await session.flush()

        total_comments = 0
        now = datetime.now(timezone.utc)
        for i in range(num_articles):
            created = now - timedelta(days=random.randint(0, 365), seconds=i)
            title = f"Article {i} How to optimize {random.choice(TOPICS)} applications"
            article = Article(
                title=title,
                slug=slugify(title),
                description=f"A guide to {random.choice(TOPICS)} in production.",
                body=f"This is the full body of article {i}. " * 20,
                views=random.randint(0, 10000),
                created_at=created,
                user_id=random.choice(users).id,
                comment_ids=[],
            )
            session.add(article)
            await session.flush()

            comment_ids = []
            for j in range(random.randint(0, max_comments_per_article)):
                author = random.choice(users)
                comment = Comment(
                    body=f"Great article! Comment by {author.username}.",
                    article_id=article.id,
                    user_id=author.id,
                    created_at=created + timedelta(hours=j + 1),
                )
                session.add(comment)
                await session.flush()
                comment_ids.append(comment.id)
            article.comment_ids = comment_ids
            total_comments += len(comment_ids)

            if (i + 1) % 500 == 0:
                print(f"  {i + 1} articles created")

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users}")
    print(f"  Articles: {num_articles}")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (30 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
