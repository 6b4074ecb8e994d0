from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from blog_backend.config import settings
from blog_backend.database import get_db
from blog_backend.schemas import ArticleCreate, ArticleUpdate, CommentCreate
from blog_backend.services import article_service, comment_service

router = APIRouter(prefix=f"{settings.API_PREFIX}/articles", tags=["articles"])

# Fixed-path routes are registered before the ``/{slug}`` catch-all.

@router.get("/views/{slug}")
async def view_article(slug: str, db: AsyncSession = Depends(get_db)):
    return {"article": await article_service.view_article(db, slug)}

@router.post("/comments")
async def add_comment(data: CommentCreate, db: AsyncSession = Depends(get_db)):
    comment = await comment_service.add_comment(db, data)
    if not comment:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"comment": comment}

@router.delete("/comments/{comment_id}")
async def delete_comment(comment_id: int, db: AsyncSession = Depends(get_db)):
    comment = await comment_service.delete_comment(db, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return {"comment": comment}

@router.get("")
async def list_articles(
    skip: int = Query(0, ge=0, description="Number of articles to skip."),
    db: AsyncSession = Depends(get_db),
):
    return {"articles": await article_service.get_articles(db, skip)}

@router.post("")
async def create_article(data: ArticleCreate, db: AsyncSession = Depends(get_db)):
    return {"article": await article_service.create_article(db, data)}

@router.get("/{slug}")
async def get_article(slug: str, db: AsyncSession = Depends(get_db)):
    return {"article": await article_service.get_article(db, slug)}

@router.put("/{article_id}")
async def update_article(article_id: int, data: ArticleUpdate, db: AsyncSession = Depends(get_db)):
    article = await article_service.update_article(db, article_id, data)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"article": article}

@router.delete("/{article_id}")
async def delete_article(article_id: int, db: AsyncSession = Depends(get_db)):
    article = await article_service.delete_article(db, article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"article": article}
