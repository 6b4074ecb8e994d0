"""
Cascade rules between users, sessions, articles and comments.

Design notes
------------
- Each model carries a ``__deletion_policy__`` tag.  ``remove_where``
  is the single path that turns a removal request into store writes:
  SOFT models get ``is_removed = true``, HARD models are deleted.
- Nothing here commits.  Every step of a cascade is flushed inside the
  caller's session, and the ``get_db`` dependency commits or rolls back
  the whole request, so a failure half-way leaves no partial cascade.
- Deleting a comment does not prune its id from the parent article
  unless ``settings.PRUNE_COMMENT_REFS`` is set; readers skip ids whose
  comment no longer exists.
"""
import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from blog_backend.config import settings
from blog_backend.models import Article, Comment, DeletionPolicy, User, UserSession
from blog_backend.schemas import CommentCreate

logger = logging.getLogger(__name__)


async def remove_where(db: AsyncSession, model, *criteria) -> int:
    """
    Remove every row of *model* matching *criteria* according to the
    model's deletion policy.  Returns the number of rows affected.
    """
    policy = model.__deletion_policy__
    if policy is DeletionPolicy.SOFT:
        criteria = (*criteria, model.is_removed.is_(False))
    ids = (await db.execute(select(model.id).where(*criteria))).scalars().all()
    if not ids:
        return 0

    if policy is DeletionPolicy.SOFT:
        stmt = update(model).where(model.id.in_(ids)).values(is_removed=True)
    else:
        stmt = delete(model).where(model.id.in_(ids))
    await db.execute(stmt.execution_options(synchronize_session="evaluate"))
    return len(ids)


async def _prune_comment_refs(db: AsyncSession, refs: dict[int, int]) -> None:
    """Drop comment ids from their articles.  *refs* maps comment id to article id."""
    if not refs:
        return
    result = await db.execute(select(Article).where(Article.id.in_(set(refs.values()))))
    for article in result.scalars().all():
        kept = [cid for cid in article.comment_ids if cid not in refs]
        if len(kept) != len(article.comment_ids):
            article.comment_ids = kept
    await db.flush()


async def load_comment(db: AsyncSession, comment_id: int) -> Comment | None:
    """Fetch one comment with its author populated."""
    result = await db.execute(
        select(Comment)
        .where(Comment.id == comment_id)
        .options(joinedload(Comment.author))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def remove_user(db: AsyncSession, user_id: int) -> User | None:
    """
    Soft-delete the user, end their sessions, and hard-delete everything
    they authored.  Returns the updated user, or None when it does not
    exist.

    Comments other users left on the removed user's articles stay in
    place.
    """
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        return None

    await remove_where(db, User, User.id == user_id)
    sessions = await remove_where(db, UserSession, UserSession.user_id == user_id)
    articles = await remove_where(db, Article, Article.user_id == user_id)

    authored = dict(
        (await db.execute(
            select(Comment.id, Comment.article_id).where(Comment.user_id == user_id)
        )).tuples().all()
    )
    comments = await remove_where(db, Comment, Comment.user_id == user_id)
    if settings.PRUNE_COMMENT_REFS:
        await _prune_comment_refs(db, authored)

    await db.refresh(user)
    logger.info(
        "Removed user %s: %d session(s) closed, %d article(s) and %d comment(s) deleted",
        user_id, sessions, articles, comments,
    )
    return user


async def remove_article(db: AsyncSession, article_id: int) -> Article | None:
    """
    Delete the article and every comment that belongs to it.  Returns the
    deleted article (author loaded), or None when it does not exist.
    """
    result = await db.execute(
        select(Article)
        .where(Article.id == article_id)
        .options(joinedload(Article.author))
        .execution_options(populate_existing=True)
    )
    article = result.scalar_one_or_none()
    if article is None:
        return None

    await remove_where(db, Article, Article.id == article_id)
    comments = await remove_where(db, Comment, Comment.article_id == article_id)

    logger.info("Removed article %s and %d comment(s)", article_id, comments)
    return article


async def attach_comment(db: AsyncSession, data: CommentCreate) -> Comment | None:
    """
    Create a comment and append its id to the parent article's sequence.
    Returns None, writing nothing, when the article does not exist.
    """
    result = await db.execute(select(Article).where(Article.id == data.article_id))
    article = result.scalar_one_or_none()
    if article is None:
        return None

    comment = Comment(article_id=data.article_id, user_id=data.user_id, body=data.body)
    db.add(comment)
    await db.flush()

    # Reassign so the JSON column is marked dirty.
    article.comment_ids = [*article.comment_ids, comment.id]
    await db.flush()

    return await load_comment(db, comment.id)


async def remove_comment(db: AsyncSession, comment_id: int) -> Comment | None:
    """
    Delete a single comment.  Returns the deleted comment (author loaded),
    or None when it does not exist.
    """
    comment = await load_comment(db, comment_id)
    if comment is None:
        return None

    await remove_where(db, Comment, Comment.id == comment_id)
    if settings.PRUNE_COMMENT_REFS:
        await _prune_comment_refs(db, {comment_id: comment.article_id})
    else:
        logger.debug("Comment %s deleted; article %s keeps its id", comment_id, comment.article_id)
    return comment
