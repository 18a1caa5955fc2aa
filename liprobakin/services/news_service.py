"""
News service layer.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.models import NewsArticle
from liprobakin.services import translation_service
from liprobakin.utils.datetime_utils import isoformat_or_none

logger = logging.getLogger(__name__)

NEWS_FIELDS = ("title", "headline", "summary", "category", "image_url", "title_en", "headline_en", "summary_en")


def _article_to_dict(article: NewsArticle) -> Dict:
    return {
        "id": article.id,
        "title": article.title,
        "headline": article.headline,
        "summary": article.summary,
        "category": article.category,
        "image_url": article.image_url,
        "title_en": article.title_en,
        "headline_en": article.headline_en,
        "summary_en": article.summary_en,
        "created_by": article.created_by,
        "published_at": isoformat_or_none(article.published_at),
        "updated_at": isoformat_or_none(article.updated_at),
    }


async def create_article(session: AsyncSession, data: Dict[str, Any], created_by: Optional[int] = None) -> Dict:
    if not data.get("title") or not data["title"].strip():
        raise ValueError("Title is required")
    article = NewsArticle(created_by=created_by, **{k: v for k, v in data.items() if k in NEWS_FIELDS})
    session.add(article)
    await session.commit()
    await session.refresh(article)
    logger.info(f"News article {article.id} created by {created_by}")
    return _article_to_dict(article)


async def update_article(session: AsyncSession, article_id: int, data: Dict[str, Any]) -> Optional[Dict]:
    article = await session.get(NewsArticle, article_id)
    if article is None:
        return None
    for key, value in data.items():
        if key in NEWS_FIELDS and value is not None:
            setattr(article, key, value)
    await session.commit()
    await session.refresh(article)
    return _article_to_dict(article)


async def delete_article(session: AsyncSession, article_id: int) -> bool:
    result = await session.execute(delete(NewsArticle).where(NewsArticle.id == article_id))
    await session.commit()
    return result.rowcount > 0


async def list_articles(session: AsyncSession, limit: int = 20, translate: bool = False) -> List[Dict]:
    """Newest articles first. With ``translate``, missing English fields are filled in."""
    result = await session.execute(
        select(NewsArticle).order_by(NewsArticle.published_at.desc(), NewsArticle.id.desc()).limit(limit)
    )
    articles = [_article_to_dict(a) for a in result.scalars().all()]
    if translate:
        articles = [await translation_service.translate_news_article(a) for a in articles]
    return articles
