"""
Data models for the News Hooks aggregator.
"""

import datetime
from dataclasses import dataclass
from enum import Enum
from typing import TypedDict, Optional


class CandidateArticle(TypedDict):
    """An unclassified article produced by a fetcher."""

    url: str  # canonical, see parsers.markup.canonicalize_url
    title: str
    description: str
    outlet_domain: str
    published_at: Optional[datetime.datetime]
    full_text: Optional[str]  # Added by body enrichment


class ClassifiedArticle(TypedDict):
    """A candidate enriched by the relevance classifier and normalized."""

    headline: str
    url: str
    outlet: str
    date: str  # YYYY-MM-DD
    summary: str
    relevance: str
    angle_title: Optional[str]
    angle_narrative: Optional[str]
    takeaway: Optional[str]
    source: str


class SourceStrategy(str, Enum):
    """Where candidate articles come from."""

    RSS = "rss"
    SEARCH = "search"
    NEWSLETTER = "newsletter"


class SelectivityMode(str, Enum):
    """Prompt rubric used by the relevance classifier."""

    INCLUSIVE = "inclusive"
    STRICT = "strict"
    RANKED_WITH_TAKEAWAY = "ranked-with-takeaway"


class WriteDiscipline(str, Enum):
    """How classified articles are reconciled with the table."""

    REPLACE_ALL = "replace-all"
    UPSERT_WITH_SKIP = "upsert-with-skip"


class RunOutcome(str, Enum):
    """Terminal states of a pipeline run."""

    DONE = "done"
    EMPTY_EXIT = "empty_exit"
    FAILED = "failed"


@dataclass
class WriteResult:
    """Counts reported by a store write."""

    inserted: int = 0
    skipped: int = 0
    errored: int = 0


@dataclass
class RunReport:
    """Summary of one pipeline run."""

    outcome: RunOutcome
    fetched: int = 0
    unique: int = 0
    classified: int = 0
    pruned: int = 0
    written: Optional[WriteResult] = None

    @property
    def exit_code(self) -> int:
        return 1 if self.outcome is RunOutcome.FAILED else 0
