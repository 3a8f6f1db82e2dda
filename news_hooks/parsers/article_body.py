"""
Best-effort full-text enrichment for candidate articles.
"""

import concurrent.futures
import logging
from typing import List, Optional

import requests
from news_hooks.models import CandidateArticle
from news_hooks.parsers.markup import extract_paragraphs

logger = logging.getLogger(__name__)

MIN_PARAGRAPH_LENGTH = 30
MAX_BODY_LENGTH = 5000
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
)


def fetch_full_text(
    url: str, timeout: float = 10, user_agent: str = BROWSER_USER_AGENT
) -> Optional[str]:
    """Returns the article's paragraph text, or None if unavailable."""
    try:
        resp = requests.get(url, timeout=timeout, headers={"User-Agent": user_agent})
        resp.raise_for_status()
    except requests.RequestException as req_err:
        logger.debug("Could not fetch body of %s: %s", url, req_err)
        return None

    if "html" not in resp.headers.get("Content-Type", "text/html"):
        return None

    paragraphs = extract_paragraphs(resp.text, MIN_PARAGRAPH_LENGTH)
    return "\n\n".join(paragraphs)[:MAX_BODY_LENGTH] or None


def enrich_full_text(
    articles: List[CandidateArticle], timeout: float = 10
) -> List[CandidateArticle]:
    """Fills full_text on every candidate in parallel. Never drops one."""
    with concurrent.futures.ThreadPoolExecutor() as executor:
        future_to_article = {
            executor.submit(fetch_full_text, a["url"], timeout): a for a in articles
        }
        for future in concurrent.futures.as_completed(future_to_article):
            article = future_to_article[future]
            try:
                article["full_text"] = future.result()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.error("%s generated an exception: %s", article["url"], exc)
                article["full_text"] = None

    for article in articles:
        status = (
            f"{len(article['full_text'])} chars" if article["full_text"] else "unavailable"
        )
        logger.info("  %s: %s... (%s)", article["outlet_domain"], article["title"][:55], status)
    return articles
