"""
News search parser backed by the Tavily API.

Each topical query is constrained to an outlet allow-list and a trailing time
window. A failing query contributes nothing.
"""

import logging
from typing import Any, Dict, List, Optional

from dateutil import parser as dateutil_parser
from tavily import TavilyClient  # type: ignore
from news_hooks.models import CandidateArticle
from news_hooks.parsers.base import CandidateSource, make_candidate

logger = logging.getLogger(__name__)


def _parse_published(value: Optional[str]):
    if not value:
        return None
    try:
        return dateutil_parser.parse(value)
    except (ValueError, OverflowError):
        return None


class TavilySearchParser(CandidateSource):
    """Runs fixed topical queries against Tavily news search."""

    def __init__(
        self,
        api_key: str,
        queries: List[str],
        include_domains: List[str],
        window_days: int = 30,
        max_results_per_query: int = 10,
        timeout: float = 15,
        client: Optional[TavilyClient] = None,
    ):
        self.queries = queries
        self.include_domains = include_domains
        self.window_days = window_days
        self.max_results_per_query = max_results_per_query
        self.timeout = timeout
        self.client = client or TavilyClient(api_key=api_key)

    def search(self, query: str) -> List[CandidateArticle]:
        """Runs one query and converts its results."""
        try:
            response: Dict[str, Any] = self.client.search(
                query,
                search_depth="basic",
                topic="news",
                days=self.window_days,
                max_results=self.max_results_per_query,
                include_domains=self.include_domains,
                timeout=self.timeout,
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error('  Tavily search error for query "%s": %s', query, e)
            return []

        results = response.get("results")
        if results is None:
            logger.info('  "%s": No results object returned', query)
            return []

        items: List[CandidateArticle] = []
        for result in results[: self.max_results_per_query]:
            candidate = make_candidate(
                result.get("url"),
                result.get("title", ""),
                (result.get("content") or "")[:1000],
                _parse_published(result.get("published_date")),
            )
            if candidate is not None:
                items.append(candidate)
        logger.info('  "%s": %d articles', query, len(items))
        return items

    def fetch(self) -> List[CandidateArticle]:
        """Runs every query in order and concatenates the results."""
        all_results: List[CandidateArticle] = []
        for query in self.queries:
            all_results.extend(self.search(query))
        logger.info("Tavily total: %d articles before dedup", len(all_results))
        return all_results
