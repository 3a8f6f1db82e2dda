"""
Newsletter archive parser.

Scrapes the day's issue of a newsletter archive (TLDR AI by default) and
falls back to the "latest" endpoint when today's issue is not published yet.
"""

import datetime
import logging
from typing import List, Optional

import requests
from news_hooks.models import CandidateArticle
from news_hooks.parsers.base import CandidateSource, make_candidate
from news_hooks.parsers.markup import extract_newsletter_blocks

logger = logging.getLogger(__name__)


class NewsletterParser(CandidateSource):
    """Extracts article blocks from a newsletter issue page."""

    def __init__(
        self,
        today_url: str,
        latest_url: str,
        timeout: float = 15,
        user_agent: str = "NewsHooksBot/1.0",
        today: Optional[datetime.date] = None,
    ):
        self.today_url = today_url
        self.latest_url = latest_url
        self.timeout = timeout
        self.user_agent = user_agent
        self.today = today or datetime.date.today()

    def _get(self, url: str) -> str:
        resp = requests.get(
            url, timeout=self.timeout, headers={"User-Agent": self.user_agent}
        )
        resp.raise_for_status()
        return resp.text

    def fetch_page(self) -> Optional[str]:
        """Returns today's issue, the latest issue, or None."""
        url = self.today_url.format(date=self.today.isoformat())
        logger.info("Fetching newsletter for %s: %s", self.today.isoformat(), url)
        try:
            return self._get(url)
        except requests.RequestException as req_err:
            logger.info("Today's newsletter not available (%s), trying latest...", req_err)

        try:
            return self._get(self.latest_url)
        except requests.RequestException as req_err:
            logger.error("Network error fetching latest newsletter: %s", req_err)
            return None

    def parse(self, page: str) -> List[CandidateArticle]:
        """Converts newsletter blocks to candidates, skipping sponsors."""
        published_at = datetime.datetime.combine(
            self.today, datetime.time(), tzinfo=datetime.timezone.utc
        )
        items: List[CandidateArticle] = []
        for url, title, description in extract_newsletter_blocks(page):
            if "sponsor" in title.lower():
                continue
            candidate = make_candidate(url, title, description, published_at)
            if candidate is not None:
                items.append(candidate)
        return items

    def fetch(self) -> List[CandidateArticle]:
        page = self.fetch_page()
        if page is None:
            return []
        try:
            items = self.parse(page)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error parsing newsletter: %s", e)
            return []
        logger.info("Found %d articles (excluding sponsors)", len(items))
        return items
