"""
Comment service: comments are created against an existing article and
deleted individually.  Both writes go through the cascade module, which
keeps the article's ``comment_ids`` sequence in step.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from blog_backend.schemas import CommentCreate
from blog_backend.services import cascade
from blog_backend.services.article_service import comment_to_dict


async def add_comment(db: AsyncSession, data: CommentCreate) -> dict | None:
    """
    Create the comment and append it to its article.

    Returns the serialised comment with its author, or None when the
    target article does not exist.
    """
    comment = await cascade.attach_comment(db, data)
    if comment is None:
        return None
    return comment_to_dict(comment)


async def delete_comment(db: AsyncSession, comment_id: int) -> dict | None:
    """Delete one comment; None when it does not exist."""
    comment = await cascade.remove_comment(db, comment_id)
    if comment is None:
        return None
    return comment_to_dict(comment)
