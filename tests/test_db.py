"""Unit tests for the news hooks store writer."""

import datetime
import unittest
from unittest.mock import MagicMock, patch

import psycopg

from news_hooks.errors import StorageUnavailableError
from news_hooks.models import WriteDiscipline
from news_hooks.services.db import NewsHookStore, create_pool, open_pool
from news_hooks.services.normalizer import normalize_item

from fakes import FakeDatabase, FakePool, UnreachablePool, stored_fields

TODAY = "2026-02-13"


def article(i, **overrides):
    raw = {
        "headline": f"Headline {i}",
        "outlet": "wired.com",
        "date": TODAY,
        "url": f"https://wired.com/{i}",
        "summary": f"Summary {i}",
        "relevance": f"Relevance {i}",
    }
    raw.update(overrides)
    return normalize_item(raw, TODAY, "rss")


class TestReplaceAll(unittest.TestCase):
    def setUp(self):
        self.pool = FakePool()
        self.store = NewsHookStore(self.pool)

    def test_replaces_previous_rows(self):
        self.store.write([article(1), article(2)], WriteDiscipline.REPLACE_ALL)
        result = self.store.write([article(3)], WriteDiscipline.REPLACE_ALL)

        self.assertEqual(result.inserted, 1)
        self.assertEqual([r["headline"] for r in self.pool.db.rows], ["Headline 3"])

    def test_idempotent(self):
        batch = [article(1), article(2, angle_title="Angle", glossi_takeaway="Do it")]
        self.store.write(batch, WriteDiscipline.REPLACE_ALL)
        once = stored_fields(self.pool.db.rows)
        self.store.write(batch, WriteDiscipline.REPLACE_ALL)
        twice = stored_fields(self.pool.db.rows)

        self.assertEqual(len(self.pool.db.rows), 2)
        self.assertEqual(once, twice)

    def test_row_error_does_not_abort_batch(self):
        self.pool.db.fail_on_headlines.add("Headline 2")
        result = self.store.write(
            [article(1), article(2), article(3)], WriteDiscipline.REPLACE_ALL
        )
        self.assertEqual((result.inserted, result.errored), (2, 1))
        self.assertEqual(len(self.pool.db.rows), 2)

    def test_stored_fields(self):
        self.store.write(
            [article(1, outlet="www.wired.com", date="Recent", glossi_takeaway="Say X")],
            WriteDiscipline.REPLACE_ALL,
        )
        row = self.pool.db.rows[0]
        self.assertEqual(row["outlet"], "WIRED")
        self.assertEqual(row["date"], TODAY)
        self.assertEqual(row["glossi_takeaway"], "Say X")
        self.assertEqual(row["angle_narrative"], "Say X")
        self.assertEqual(row["source"], "rss")


class TestUpsertWithSkip(unittest.TestCase):
    def setUp(self):
        self.pool = FakePool()
        self.store = NewsHookStore(self.pool)

    def test_same_url_across_runs(self):
        first = self.store.write([article(1)], WriteDiscipline.UPSERT_WITH_SKIP)
        second = self.store.write(
            [article(1, headline="Reworded headline")], WriteDiscipline.UPSERT_WITH_SKIP
        )

        self.assertEqual((first.inserted, first.skipped), (1, 0))
        self.assertEqual((second.inserted, second.skipped), (0, 1))
        urls = [r["url"] for r in self.pool.db.rows]
        self.assertEqual(urls.count("https://wired.com/1"), 1)

    def test_same_headline_is_duplicate(self):
        self.store.write([article(1)], WriteDiscipline.UPSERT_WITH_SKIP)
        result = self.store.write(
            [article(2, headline="Headline 1")], WriteDiscipline.UPSERT_WITH_SKIP
        )
        self.assertEqual(result.skipped, 1)
        self.assertEqual(len(self.pool.db.rows), 1)

    def test_history_accumulates(self):
        self.store.write([article(1)], WriteDiscipline.UPSERT_WITH_SKIP)
        self.store.write([article(2)], WriteDiscipline.UPSERT_WITH_SKIP)
        self.assertEqual(len(self.pool.db.rows), 2)

    def test_row_error_counted(self):
        self.pool.db.fail_on_headlines.add("Headline 1")
        result = self.store.write(
            [article(1), article(2)], WriteDiscipline.UPSERT_WITH_SKIP
        )
        self.assertEqual((result.inserted, result.skipped, result.errored), (1, 0, 1))

    def test_statement_timeout_counts_as_row_error(self):
        original = self.pool.db.execute

        def slow_insert(sql, params=None):
            if sql.lstrip().startswith("INSERT") and params[0] == "Headline 1":
                raise psycopg.errors.QueryCanceled("canceling statement due to timeout")
            return original(sql, params)

        self.pool.db.execute = slow_insert
        result = self.store.write(
            [article(1), article(2)], WriteDiscipline.UPSERT_WITH_SKIP
        )
        self.assertEqual((result.inserted, result.errored), (1, 1))
        self.assertEqual([r["headline"] for r in self.pool.db.rows], ["Headline 2"])


class TestRetentionAndSchema(unittest.TestCase):
    def test_prune_deletes_rows_outside_window(self):
        pool = FakePool(FakeDatabase(today=datetime.date(2026, 2, 13)))
        store = NewsHookStore(pool)
        store.write(
            [article(1, date="2025-12-01"), article(2, date="2026-02-01")],
            WriteDiscipline.UPSERT_WITH_SKIP,
        )

        self.assertEqual(store.prune_expired(30), 1)
        self.assertEqual([r["headline"] for r in pool.db.rows], ["Headline 2"])
        self.assertEqual(store.prune_expired(30), 0)

    def test_write_does_not_prune(self):
        for discipline in WriteDiscipline:
            pool = FakePool()
            store = NewsHookStore(pool)
            store.write([article(1, date="2025-12-01")], WriteDiscipline.UPSERT_WITH_SKIP)
            store.write([article(2)], discipline)
            prunes = [s for s in pool.db.statements if "WHERE date <" in s]
            self.assertEqual(prunes, [])

    def test_ensure_schema_adds_optional_columns(self):
        pool = FakePool()
        NewsHookStore(pool).ensure_schema()
        statements = pool.db.statements
        self.assertTrue(statements[0].startswith("CREATE TABLE IF NOT EXISTS pr_news_hooks"))
        joined = " ".join(statements)
        self.assertIn("ADD COLUMN IF NOT EXISTS source", joined)
        self.assertIn("ADD COLUMN IF NOT EXISTS glossi_takeaway", joined)

    def test_prune_failure_is_logged_not_fatal(self):
        pool = FakePool()
        store = NewsHookStore(pool)
        original = pool.db.execute

        def failing_prune(sql, params=None):
            if "WHERE date <" in sql:
                raise psycopg.errors.UndefinedColumn("column date does not exist")
            return original(sql, params)

        pool.db.execute = failing_prune
        with self.assertLogs("news_hooks.services.db", level="ERROR"):
            self.assertEqual(store.prune_expired(30), 0)


class TestConnectivity(unittest.TestCase):
    def test_unreachable_database_is_fatal(self):
        store = NewsHookStore(UnreachablePool())
        with self.assertRaises(StorageUnavailableError):
            store.write([article(1)], WriteDiscipline.REPLACE_ALL)
        with self.assertRaises(StorageUnavailableError):
            store.ensure_schema()

    def test_open_pool_timeout(self):
        pool = MagicMock()
        pool.open.side_effect = psycopg.OperationalError("timeout")
        with self.assertRaises(StorageUnavailableError):
            open_pool(pool, timeout=1)
        pool.open.assert_called_once_with(wait=True, timeout=1)

    def test_create_pool_is_bounded(self):
        with patch("news_hooks.services.db.ConnectionPool") as mock_pool:
            create_pool("postgresql://localhost/db")
        args, kwargs = mock_pool.call_args
        self.assertEqual(args[0], "postgresql://localhost/db")
        self.assertEqual(kwargs["max_size"], 10)
        self.assertEqual(kwargs["timeout"], 10)
        self.assertFalse(kwargs["open"])
        self.assertIn("statement_timeout=10000", kwargs["kwargs"]["options"])


if __name__ == "__main__":
    unittest.main()
