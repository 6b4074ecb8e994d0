"""
Article service: business logic for the Article aggregate.

Design notes
------------
- Every read that returns articles populates them the same way: the
  author is joined in with ``joinedload`` and the comments listed in
  ``comment_ids`` are fetched for the whole page in one extra query,
  newest first, each with its author.  Ids whose comment has been
  deleted are skipped.
- Title uniqueness is checked before each write against every *other*
  article; violations raise ``DuplicateTitleError``.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency in the router layer.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from blog_backend.config import settings
from blog_backend.exceptions import DuplicateTitleError
from blog_backend.models import Article, Comment
from blog_backend.schemas import ArticleCreate, ArticleUpdate
from blog_backend.services import cascade
from blog_backend.services.user_service import user_to_dict

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def slugify(title: str) -> str:
    """Spaces become hyphens, everything is lowercased.  Nothing else changes."""
    return "-".join(title.split(" ")).lower()


async def _ensure_unique_title(
    db: AsyncSession, title: str, exclude_id: int | None = None
) -> None:
    q = select(Article.id).where(Article.title == title)
    if exclude_id is not None:
        q = q.where(Article.id != exclude_id)
    if (await db.execute(q.limit(1))).first() is not None:
        raise DuplicateTitleError(title)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "article_id": comment.article_id,
        "user_id": comment.user_id,
        "body": comment.body,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
        "author": user_to_dict(comment.author),
    }


def article_to_dict(article: Article, comments: list[Comment] | None = None) -> dict:
    """Serialise an Article with its author and, when given, its comments."""
    return {
        "id": article.id,
        "title": article.title,
        "slug": article.slug,
        "description": article.description,
        "body": article.body,
        "views": article.views,
        "user_id": article.user_id,
        "created_at": article.created_at.isoformat() if article.created_at else None,
        "author": user_to_dict(article.author),
        "comments": [comment_to_dict(c) for c in comments or []],
    }


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------

async def _populate(db: AsyncSession, articles: list[Article]) -> list[dict]:
    """
    Resolve each article's ``comment_ids`` into comment dicts, newest
    first, with one query for the whole batch.
    """
    wanted = {cid for a in articles for cid in a.comment_ids}
    found: list[Comment] = []
    if wanted:
        result = await db.execute(
            select(Comment)
            .where(Comment.id.in_(wanted))
            .options(joinedload(Comment.author))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .execution_options(populate_existing=True)
        )
        found = list(result.scalars().all())

    populated = []
    for article in articles:
        refs = set(article.comment_ids)
        # ``found`` is already newest first.  A reused id that now belongs
        # to another article counts as missing.
        comments = [c for c in found if c.id in refs and c.article_id == article.id]
        missing = refs - {c.id for c in comments}
        if missing:
            logger.debug(
                "Article %s: skipping %d comment reference(s) with no comment: %s",
                article.id, len(missing), sorted(missing),
            )
        populated.append(article_to_dict(article, comments))
    return populated


def _with_author():
    return select(Article).options(joinedload(Article.author))


async def _slug_target(db: AsyncSession, slug: str) -> int | None:
    """Id of the article a slug resolves to: the oldest one carrying it."""
    result = await db.execute(
        select(Article.id)
        .where(Article.slug == slug)
        .order_by(Article.created_at.asc(), Article.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _find_by_id(db: AsyncSession, article_id: int) -> dict | None:
    result = await db.execute(
        _with_author()
        .where(Article.id == article_id)
        .execution_options(populate_existing=True)
    )
    article = result.scalar_one_or_none()
    if article is None:
        return None
    return (await _populate(db, [article]))[0]


async def _find_by_slug(db: AsyncSession, slug: str) -> dict | None:
    article_id = await _slug_target(db, slug)
    if article_id is None:
        return None
    return await _find_by_id(db, article_id)


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def get_articles(db: AsyncSession, skip: int = 0) -> list[dict]:
    """
    Return one page of articles, newest first, starting *skip* rows in.
    The page size is ``settings.ARTICLES_PAGE_SIZE``.
    """
    result = await db.execute(
        _with_author()
        .order_by(Article.created_at.desc(), Article.id.desc())
        .offset(skip)
        .limit(settings.ARTICLES_PAGE_SIZE)
        .execution_options(populate_existing=True)
    )
    return await _populate(db, list(result.scalars().all()))


async def get_article(db: AsyncSession, slug: str) -> dict | None:
    """Return the populated article for *slug*, or None."""
    return await _find_by_slug(db, slug)


async def view_article(db: AsyncSession, slug: str) -> dict | None:
    """
    Increment the view counter of the article *slug* resolves to in a
    single UPDATE and return the post-increment populated article, or
    None.  Other articles sharing the slug are left alone.
    """
    article_id = await _slug_target(db, slug)
    if article_id is None:
        return None
    await db.execute(
        update(Article)
        .where(Article.id == article_id)
        .values(views=Article.views + 1)
        .execution_options(synchronize_session=False)
    )
    return await _find_by_id(db, article_id)


async def create_article(db: AsyncSession, data: ArticleCreate) -> dict:
    """
    Create a new article and return it with its author populated.

    Raises ``DuplicateTitleError`` when another article already has this
    exact title; nothing is written in that case.
    """
    await _ensure_unique_title(db, data.title)

    article = Article(
        title=data.title,
        slug=slugify(data.title),
        description=data.description,
        body=data.body,
        user_id=data.user_id,
        comment_ids=[],
    )
    db.add(article)
    await db.flush()

    result = await db.execute(
        _with_author().where(Article.id == article.id).execution_options(populate_existing=True)
    )
    return article_to_dict(result.scalar_one())


async def update_article(
    db: AsyncSession, article_id: int, data: ArticleUpdate
) -> dict | None:
    """
    Partially update an article and return it populated.

    Returns None when the article does not exist.  A new title is checked
    for uniqueness against the other articles and regenerates the slug.
    """
    result = await db.execute(select(Article).where(Article.id == article_id))
    article = result.scalar_one_or_none()
    if article is None:
        return None

    update_data = data.model_dump(exclude_unset=True)
    if "title" in update_data:
        await _ensure_unique_title(db, update_data["title"], exclude_id=article_id)
        update_data["slug"] = slugify(update_data["title"])

    for field, value in update_data.items():
        setattr(article, field, value)
    await db.flush()

    return await _find_by_id(db, article_id)


async def delete_article(db: AsyncSession, article_id: int) -> dict | None:
    """
    Delete the article and its comments.  Returns the deleted article
    (author populated, no comments), or None when it does not exist.
    """
    article = await cascade.remove_article(db, article_id)
    if article is None:
        return None
    return article_to_dict(article)
