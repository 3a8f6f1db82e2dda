"""
Normalization of classifier output into ClassifiedArticle rows.
"""

import datetime
import logging
import re
from typing import Any, Dict, List, Optional, cast

from dateutil import parser as dateutil_parser
from news_hooks.models import ClassifiedArticle
from news_hooks.parsers.markup import canonicalize_url
from news_hooks.services.outlets import normalize_outlet

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATE_SENTINELS = frozenset({"recent", "today", "unknown", "n/a", "none", "null"})


def normalize_date(value: Any, today: str) -> str:
    """Returns value as YYYY-MM-DD, falling back to today."""
    if value is None:
        return today
    text = str(value).strip()
    if not text or text.lower() in DATE_SENTINELS:
        return today

    if ISO_DATE_RE.match(text):
        try:
            datetime.date.fromisoformat(text)
            return text
        except ValueError:
            return today

    # Missing fields are filled from today, not from the wall clock
    run_day = datetime.date.fromisoformat(today)
    default = datetime.datetime.combine(run_day, datetime.time())
    try:
        parsed = dateutil_parser.parse(text, default=default).date()
    except (ValueError, OverflowError):
        return today
    if parsed > run_day:
        return today
    return parsed.isoformat()


def _text(item: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = item.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _optional_text(item: Dict[str, Any], *keys: str) -> Optional[str]:
    return _text(item, *keys) or None


def normalize_item(item: Dict[str, Any], today: str, source: str) -> ClassifiedArticle:
    """Builds a ClassifiedArticle from one classifier item. Never raises."""
    raw_url = _text(item, "url")
    takeaway = _optional_text(item, "glossi_takeaway", "takeaway")
    return cast(
        ClassifiedArticle,
        {
            "headline": _text(item, "headline", "title"),
            "url": canonicalize_url(raw_url) or raw_url,
            "outlet": normalize_outlet(item.get("outlet")),
            "date": normalize_date(item.get("date"), today),
            "summary": _text(item, "summary"),
            "relevance": _text(item, "relevance"),
            "angle_title": _optional_text(item, "angle_title"),
            "angle_narrative": _optional_text(item, "angle_narrative") or takeaway,
            "takeaway": takeaway,
            "source": source,
        },
    )


def _incomplete_reason(article: ClassifiedArticle) -> Optional[str]:
    if not article["headline"]:
        return "no headline"
    if not canonicalize_url(article["url"]):
        return "invalid url"
    if not article["summary"]:
        return "empty summary"
    if not article["relevance"]:
        return "empty relevance"
    return None


def normalize_items(
    items: List[Dict[str, Any]], today: str, source: str
) -> List[ClassifiedArticle]:
    """Normalizes classifier items, dropping ones that cannot be stored."""
    normalized = []
    for item in items:
        article = normalize_item(item, today, source)
        reason = _incomplete_reason(article)
        if reason:
            logger.warning("Dropping classified item (%s): %s", reason, article["headline"])
            continue
        normalized.append(article)
    return normalized
