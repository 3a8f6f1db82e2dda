"""
URL-based deduplication of candidate articles.
"""

import logging
from typing import Dict, List

from news_hooks.models import CandidateArticle
from news_hooks.parsers.markup import canonicalize_url

logger = logging.getLogger(__name__)


def dedupe(candidates: List[CandidateArticle]) -> List[CandidateArticle]:
    """
    Keeps one candidate per canonical URL.

    The last candidate seen for a URL wins; output order follows the first
    time each URL appeared.
    """
    by_url: Dict[str, CandidateArticle] = {}
    for candidate in candidates:
        key = canonicalize_url(candidate["url"]) or candidate["url"]
        by_url[key] = candidate

    unique = list(by_url.values())
    logger.info("After dedup: %d unique of %d articles", len(unique), len(candidates))
    return unique
