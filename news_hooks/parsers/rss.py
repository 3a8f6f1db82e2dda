"""
RSS feed parser implementation.

This module provides the RSSParser class for fetching a set of outlet feeds
in parallel and keeping the recent entries of each.
"""

import calendar
import concurrent.futures
import datetime
import logging
from typing import Dict, List, Optional

import requests
import feedparser  # type: ignore
from news_hooks.models import CandidateArticle
from news_hooks.parsers.base import CandidateSource, make_candidate

logger = logging.getLogger(__name__)


def _entry_published_at(entry) -> Optional[datetime.datetime]:
    """Returns the entry's publish time in UTC, if the feed gives one."""
    for attr in ("published_parsed", "updated_parsed"):
        parsed = entry.get(attr)
        if parsed:
            return datetime.datetime.fromtimestamp(
                calendar.timegm(parsed), tz=datetime.timezone.utc
            )
    return None


class RSSParser(CandidateSource):
    """Parses standard RSS/Atom feeds, one per outlet."""

    def __init__(
        self,
        feeds: Dict[str, str],
        window_days: int = 30,
        max_items_per_feed: int = 10,
        timeout: float = 10,
        user_agent: str = "NewsHooksBot/1.0",
        now: Optional[datetime.datetime] = None,
    ):
        self.feeds = feeds
        self.window_days = window_days
        self.max_items_per_feed = max_items_per_feed
        self.timeout = timeout
        self.user_agent = user_agent
        self.now = now

    def _cutoff(self) -> datetime.datetime:
        now = self.now or datetime.datetime.now(datetime.timezone.utc)
        return now - datetime.timedelta(days=self.window_days)

    def fetch_feed(self, outlet: str, url: str) -> List[CandidateArticle]:
        """Fetches and parses a single feed."""
        items: List[CandidateArticle] = []
        try:
            # Add a user-agent to prevent 403s from some strict publishers
            try:
                resp = requests.get(
                    url, timeout=self.timeout, headers={"User-Agent": self.user_agent}
                )
                resp.raise_for_status()
                feed_content = resp.content
            except requests.RequestException as req_err:
                logger.error("Network error fetching %s: %s", outlet, req_err)
                return []

            cutoff = self._cutoff()
            feed = feedparser.parse(feed_content)
            for entry in feed.entries:
                if len(items) >= self.max_items_per_feed:
                    break
                published_at = _entry_published_at(entry)
                if published_at is None or published_at < cutoff:
                    continue
                candidate = make_candidate(
                    entry.get("link"),
                    entry.get("title", ""),
                    entry.get("summary", ""),
                    published_at,
                    outlet=outlet,
                )
                if candidate is None:
                    logger.debug("Dropping %s entry without a usable link", outlet)
                    continue
                items.append(candidate)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error parsing %s: %s", outlet, e)
        logger.info("  %s: %d recent articles", outlet, len(items))
        return items

    def fetch(self) -> List[CandidateArticle]:
        """Fetches all feeds in parallel and concatenates their entries."""
        raw_items: List[CandidateArticle] = []

        with concurrent.futures.ThreadPoolExecutor() as executor:
            future_to_outlet = {
                executor.submit(self.fetch_feed, outlet, url): outlet
                for outlet, url in self.feeds.items()
            }
            results: Dict[str, List[CandidateArticle]] = {}
            for future in concurrent.futures.as_completed(future_to_outlet):
                outlet = future_to_outlet[future]
                try:
                    results[outlet] = future.result()
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    logger.error("%s generated an exception: %s", outlet, exc)

        # Keep the configured feed order regardless of completion order
        for outlet in self.feeds:
            raw_items.extend(results.get(outlet, []))

        logger.info("RSS total: %d articles from %d feeds", len(raw_items), len(self.feeds))
        return raw_items
