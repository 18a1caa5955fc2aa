"""
Machine translation client for news articles.

French is the source language of league news. Falls back to the original
text on any failure so reading news is never blocked.
"""

import asyncio
import logging
import os
import re
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TRANSLATE_API_URL = "https://translate.googleapis.com/translate_a/single"

# Text containing any of these words is treated as English already
ENGLISH_MARKERS = re.compile(
    r"\b(the|and|with|after|their|have|been|was|were|championship|basketball|team|player)\b",
    re.IGNORECASE,
)

NEWS_FIELDS = (("title", "title_en"), ("headline", "headline_en"), ("summary", "summary_en"))


def _get_config():
    return (
        os.environ.get("TRANSLATE_API_URL", DEFAULT_TRANSLATE_API_URL),
        float(os.environ.get("TRANSLATE_TIMEOUT_SECONDS", "10")),
    )


def looks_english(text: str) -> bool:
    return bool(ENGLISH_MARKERS.search(text))


def _parse_translation(data: Any) -> Optional[str]:
    """The endpoint returns [[[translated, original, ...], ...], ...]."""
    if not data or not isinstance(data, list) or not data[0]:
        return None
    return "".join(chunk[0] for chunk in data[0] if chunk and chunk[0])


async def translate_text(text: Optional[str], source: str = "fr", target: str = "en") -> Optional[str]:
    """
    Translate text, returning it unchanged when empty, already English, or on failure.

    Args:
        text: Source text
        source: Source language code
        target: Target language code

    Returns:
        Translated text, or the original text
    """
    if not text or looks_english(text):
        return text

    url, timeout = _get_config()
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(
                url,
                params={"client": "gtx", "sl": source, "tl": target, "dt": "t", "q": text},
            )
            resp.raise_for_status()
            data = resp.json()

        translated = _parse_translation(data)
        return translated or text

    except Exception:
        logger.warning("Translation failed, keeping original text", exc_info=True)
        return text


async def translate_news_article(article: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill title_en/headline_en/summary_en. Articles that already have an
    English title are returned as they are.
    """
    if article.get("title_en"):
        return article

    translated = await asyncio.gather(*(translate_text(article.get(src)) for src, _ in NEWS_FIELDS))
    result = dict(article)
    for (_, dest), value in zip(NEWS_FIELDS, translated):
        result[dest] = value
    return result
