"""
Base classes and interfaces for candidate sources.

This module defines the contract that all fetchers must follow.
"""

import datetime
from typing import List, Optional, Protocol, cast

from news_hooks.models import CandidateArticle
from news_hooks.parsers.markup import canonicalize_url, clean_html, outlet_domain


class CandidateSource(Protocol):
    """
    Protocol for candidate sources.

    Classes implementing this protocol fetch articles from one source
    strategy and return them as CandidateArticle objects. Failures of a single
    feed, query or page are logged and skipped, never raised.
    """

    def fetch(self) -> List[CandidateArticle]:
        """Fetches candidate articles."""


def make_candidate(
    url: Optional[str],
    title: Optional[str],
    description: Optional[str] = None,
    published_at: Optional[datetime.datetime] = None,
    outlet: Optional[str] = None,
) -> Optional[CandidateArticle]:
    """Builds a CandidateArticle, or None if the URL is unusable."""
    canonical = canonicalize_url(url)
    if not canonical:
        return None
    return cast(
        CandidateArticle,
        {
            "url": canonical,
            "title": clean_html(title),
            "description": clean_html(description),
            "outlet_domain": outlet or outlet_domain(canonical),
            "published_at": published_at,
            "full_text": None,
        },
    )
