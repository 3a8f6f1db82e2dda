"""
News Hooks Pipeline
This script fetches candidate articles from RSS feeds, a news search API or a
newsletter archive, asks Google Gemini which ones matter to Glossi, and stores
the normalized results in PostgreSQL for the dashboard.

Exit status is 0 when the run completes or finds nothing to do, 1 on failure.
"""

import argparse
import collections
import datetime
import logging
import os
import sys
from typing import List, Optional

from news_hooks.config import Settings, load_config, load_settings
from news_hooks.errors import ConfigError, NewsHooksError
from news_hooks.models import RunOutcome, RunReport, SourceStrategy
from news_hooks.parsers.article_body import enrich_full_text
from news_hooks.parsers.base import CandidateSource
from news_hooks.parsers.newsletter import NewsletterParser
from news_hooks.parsers.rss import RSSParser
from news_hooks.parsers.search import TavilySearchParser
from news_hooks.services.db import NewsHookStore, create_pool, open_pool
from news_hooks.services.dedupe import dedupe
from news_hooks.services.llm import LLMService
from news_hooks.services.normalizer import normalize_items

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configures root logging for a run."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_source(settings: Settings) -> CandidateSource:
    """Returns the fetcher for the configured source strategy."""
    if settings.source is SourceStrategy.RSS:
        return RSSParser(
            settings.feeds,
            window_days=settings.window_days,
            max_items_per_feed=settings.max_items_per_feed,
            timeout=settings.timeouts.feed,
            user_agent=settings.user_agent,
        )
    if settings.source is SourceStrategy.SEARCH:
        return TavilySearchParser(
            settings.tavily_api_key or "",
            settings.search_queries,
            settings.search_domains,
            window_days=settings.window_days,
            max_results_per_query=settings.max_results_per_query,
            timeout=settings.timeouts.search,
        )
    return NewsletterParser(
        settings.today_url,
        settings.latest_url,
        timeout=settings.timeouts.newsletter,
        user_agent=settings.user_agent,
    )


def build_llm(settings: Settings) -> LLMService:
    return LLMService(
        settings.gemini_api_key,
        model=settings.model,
        max_output_tokens=settings.max_output_tokens,
        max_batch_size=settings.max_batch_size,
        strict_max_results=settings.strict_max_results,
        timeout=settings.timeouts.llm,
    )


def run_pipeline(
    source: CandidateSource,
    llm: LLMService,
    store: NewsHookStore,
    settings: Settings,
    today: Optional[str] = None,
) -> RunReport:
    """
    Prunes expired rows, then runs fetch -> dedupe -> classify -> normalize
    -> write once.

    Returns an EMPTY_EXIT report when there is nothing to classify or
    nothing relevant came back. Unrecoverable errors propagate.
    """
    today = today or datetime.date.today().isoformat()
    report = RunReport(outcome=RunOutcome.DONE)

    store.ensure_schema()
    report.pruned = store.prune_expired(settings.retention_days)

    logger.info("Step 1: Fetching candidates (%s)...", settings.source.value)
    candidates = source.fetch()
    report.fetched = len(candidates)
    if not candidates:
        logger.warning("No candidate articles found. Exiting without writing new hooks.")
        report.outcome = RunOutcome.EMPTY_EXIT
        return report

    unique = dedupe(candidates)
    report.unique = len(unique)
    outlet_counts = collections.Counter(a["outlet_domain"] for a in unique)
    logger.info("Outlets found: %s", dict(outlet_counts))

    if settings.enrich_full_text:
        logger.info("Fetching full article content...")
        enrich_full_text(unique[: settings.max_batch_size], settings.timeouts.article)

    logger.info("Step 2: Classifying relevance (%s)...", settings.mode.value)
    items = llm.classify(unique, settings.mode)
    articles = normalize_items(items, today, settings.source.value)
    report.classified = len(articles)
    if not articles:
        logger.warning("No relevant articles. Exiting without writing new hooks.")
        report.outcome = RunOutcome.EMPTY_EXIT
        return report

    logger.info("Step 3: Saving to database (%s)...", settings.write.value)
    report.written = store.write(articles, settings.write)

    final_counts = collections.Counter(a["outlet"] for a in articles)
    logger.info("News fetch completed: %d articles from %d outlets", len(articles), len(final_counts))
    for outlet, count in final_counts.most_common():
        logger.info("  %s: %d", outlet, count)
    return report


def execute(settings: Settings, today: Optional[str] = None) -> RunReport:
    """Opens the pool, runs the pipeline, and always closes the pool."""
    pool = create_pool(settings.database_url, timeout=settings.timeouts.database)
    try:
        open_pool(pool, timeout=settings.timeouts.database)
        store = NewsHookStore(pool)
        return run_pipeline(build_source(settings), build_llm(settings), store, settings, today)
    except NewsHooksError as e:
        logger.error("News fetch failed: %s", e)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("News fetch failed with an unexpected error")
    finally:
        pool.close()
    return RunReport(outcome=RunOutcome.FAILED)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch and rank news hooks.")
    parser.add_argument(
        "--source",
        default="rss",
        choices=[s.value for s in SourceStrategy],
        help="Where candidate articles come from.",
    )
    parser.add_argument("--mode", help="Selectivity mode (default depends on source).")
    parser.add_argument("--write", help="Write discipline (default depends on source).")
    parser.add_argument(
        "--enrich-full-text",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fetch article bodies before classification.",
    )
    parser.add_argument("--config", help="Path to a JSON config file.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Main execution entry point."""
    args = parse_args(argv)
    configure_logging()

    try:
        config = load_config(args.config)
        settings = load_settings(
            config,
            args.source,
            mode=args.mode,
            write=args.write,
            enrich_full_text=args.enrich_full_text,
        )
    except ConfigError as e:
        logger.error("Error: %s Workflow failed.", e)
        sys.exit(1)

    report = execute(settings)
    logger.info(
        "Run finished: %s (fetched %d, unique %d, classified %d)",
        report.outcome.value,
        report.fetched,
        report.unique,
        report.classified,
    )
    sys.exit(report.exit_code)


if __name__ == "__main__":
    main()
