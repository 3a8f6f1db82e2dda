"""
Database service for the news hooks table.

This module provides the NewsHookStore class, the only writer of the
pr_news_hooks table in PostgreSQL, and the lifecycle helpers for the
connection pool it is given.
"""

import logging
from typing import List

import psycopg
from psycopg_pool import ConnectionPool
from news_hooks.errors import StorageUnavailableError
from news_hooks.models import ClassifiedArticle, WriteDiscipline, WriteResult

logger = logging.getLogger(__name__)

TABLE = "pr_news_hooks"

CREATE_TABLE_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE} (
        id SERIAL PRIMARY KEY,
        headline TEXT NOT NULL,
        outlet VARCHAR(200),
        date DATE,
        url TEXT,
        summary TEXT,
        relevance TEXT,
        fetched_at TIMESTAMP DEFAULT NOW()
    )
"""

# Columns added after the table first shipped
ADD_COLUMNS_SQL = [
    f"ALTER TABLE {TABLE} ADD COLUMN IF NOT EXISTS source VARCHAR(50) DEFAULT 'rss'",
    f"ALTER TABLE {TABLE} ADD COLUMN IF NOT EXISTS glossi_takeaway TEXT",
    f"ALTER TABLE {TABLE} ADD COLUMN IF NOT EXISTS angle_title TEXT",
    f"ALTER TABLE {TABLE} ADD COLUMN IF NOT EXISTS angle_narrative TEXT",
]

PRUNE_SQL = f"DELETE FROM {TABLE} WHERE date < CURRENT_DATE - %s::integer"

CLEAR_SQL = f"DELETE FROM {TABLE}"

FIND_EXISTING_SQL = f"SELECT id FROM {TABLE} WHERE url = %s OR headline = %s LIMIT 1"

INSERT_SQL = f"""
    INSERT INTO {TABLE} (headline, outlet, date, url, summary, relevance,
                         angle_title, angle_narrative, glossi_takeaway, source, fetched_at)
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
"""


def create_pool(
    dsn: str,
    max_size: int = 10,
    timeout: float = 10,
    statement_timeout_ms: int = 10000,
) -> ConnectionPool:
    """Builds a closed, bounded connection pool."""
    return ConnectionPool(
        dsn,
        min_size=1,
        max_size=max_size,
        timeout=timeout,
        open=False,
        kwargs={
            "connect_timeout": int(timeout),
            "options": f"-c statement_timeout={statement_timeout_ms}",
        },
    )


def open_pool(pool: ConnectionPool, timeout: float = 10) -> None:
    """Opens the pool and waits for a first connection."""
    try:
        pool.open(wait=True, timeout=timeout)
    except psycopg.OperationalError as e:
        raise StorageUnavailableError(f"Database unreachable: {e}") from e


class NewsHookStore:
    """Reconciles classified articles with the pr_news_hooks table."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def _execute(self, sql: str, params=None, fetch: bool = False):
        """
        Runs one statement in its own transaction.

        Returns the first row when fetch is set, the row count otherwise.
        """
        try:
            with self.pool.connection() as conn:
                cur = conn.execute(sql, params)
                return cur.fetchone() if fetch else cur.rowcount
        except psycopg.errors.QueryCanceled:
            raise
        except psycopg.OperationalError as e:
            raise StorageUnavailableError(f"Database unreachable: {e}") from e

    def ensure_schema(self) -> None:
        """Creates the table and any missing columns. Idempotent."""
        self._execute(CREATE_TABLE_SQL)
        for statement in ADD_COLUMNS_SQL:
            self._execute(statement)
        logger.info("Schema for %s is up to date.", TABLE)

    def prune_expired(self, retention_days: int = 30) -> int:
        """Deletes rows whose article date is older than the window."""
        try:
            deleted = max(self._execute(PRUNE_SQL, (retention_days,)), 0)
        except psycopg.Error as e:
            logger.error("Error cleaning up old news: %s", e)
            return 0
        logger.info("Cleaned up %d old news hooks (>%d days)", deleted, retention_days)
        return deleted

    def _insert(self, article: ClassifiedArticle) -> None:
        self._execute(
            INSERT_SQL,
            (
                article["headline"],
                article["outlet"],
                article["date"],
                article["url"],
                article["summary"],
                article["relevance"],
                article.get("angle_title"),
                article.get("angle_narrative"),
                article.get("takeaway"),
                article["source"],
            ),
        )

    def _exists(self, article: ClassifiedArticle) -> bool:
        row = self._execute(
            FIND_EXISTING_SQL, (article["url"], article["headline"]), fetch=True
        )
        return row is not None

    def replace_all(self, articles: List[ClassifiedArticle], result: WriteResult) -> None:
        """Clears the table, then inserts every article."""
        self._execute(CLEAR_SQL)
        logger.info("Cleared old news from database")

        for article in articles:
            try:
                self._insert(article)
                result.inserted += 1
            except StorageUnavailableError:
                raise
            except psycopg.Error as e:
                result.errored += 1
                logger.error("Error inserting article: %s (%s)", e, article["headline"])

    def upsert_with_skip(
        self, articles: List[ClassifiedArticle], result: WriteResult
    ) -> None:
        """Inserts only articles whose URL and headline are not stored yet."""
        for article in articles:
            try:
                if self._exists(article):
                    result.skipped += 1
                    logger.info("  ~ Skipped (duplicate): %s", article["headline"])
                    continue
                self._insert(article)
                result.inserted += 1
                logger.info("  + %s", article["headline"])
            except StorageUnavailableError:
                raise
            except psycopg.Error as e:
                result.errored += 1
                logger.error("  x Error inserting %s: %s", article["headline"], e)

    def write(
        self,
        articles: List[ClassifiedArticle],
        discipline: WriteDiscipline,
    ) -> WriteResult:
        """
        Writes articles with the given discipline.

        A failing row, including one cancelled by statement_timeout, is
        counted as errored and the batch continues. Losing the database
        raises StorageUnavailableError.
        """
        result = WriteResult()

        if discipline is WriteDiscipline.REPLACE_ALL:
            self.replace_all(articles, result)
        else:
            self.upsert_with_skip(articles, result)

        logger.info(
            "Inserted %d of %d articles (%d skipped, %d errors)",
            result.inserted,
            len(articles),
            result.skipped,
            result.errored,
        )
        return result
