"""News management route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.db import get_db_session
from liprobakin.services import news_service, audit_service
from liprobakin.api.auth_dependencies import require_permission
from liprobakin.models.schemas import NewsArticleCreate, NewsArticleUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/news")
async def create_article(
    payload: NewsArticleCreate,
    admin: dict = Depends(require_permission("can_manage_news")),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        article = await news_service.create_article(session, payload.model_dump(), created_by=admin["user_id"])
        await audit_service.log_audit_action(
            session, "news_created", admin["user_id"], admin.get("email"), "news", article["id"], article["title"]
        )
        return article
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating news article: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating news article")


@router.put("/api/news/{article_id}")
async def update_article(
    article_id: int,
    payload: NewsArticleUpdate,
    admin: dict = Depends(require_permission("can_manage_news")),
    session: AsyncSession = Depends(get_db_session),
):
    article = await news_service.update_article(session, article_id, payload.model_dump(exclude_unset=True))
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    await audit_service.log_audit_action(
        session, "news_updated", admin["user_id"], admin.get("email"), "news", article_id, article["title"]
    )
    return article


@router.delete("/api/news/{article_id}")
async def delete_article(
    article_id: int,
    admin: dict = Depends(require_permission("can_manage_news")),
    session: AsyncSession = Depends(get_db_session),
):
    if not await news_service.delete_article(session, article_id):
        raise HTTPException(status_code=404, detail="Article not found")
    await audit_service.log_audit_action(
        session, "news_deleted", admin["user_id"], admin.get("email"), "news", article_id
    )
    return {"status": "success", "message": "Article deleted"}
