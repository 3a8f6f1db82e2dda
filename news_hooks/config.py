"""
Configuration for the News Hooks pipeline.

Static tables (feeds, queries, defaults) live in config.json next to this
module. Credentials only ever come from the environment.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from news_hooks.errors import ConfigError
from news_hooks.models import SelectivityMode, SourceStrategy, WriteDiscipline

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "config.json"


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Loads configuration from a JSON file."""
    if config_path is None:
        # Build absolute path relative to this module
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, DEFAULT_CONFIG_FILENAME)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using defaults.", config_path)
        return {}
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e


@dataclass
class Timeouts:
    feed: float = 10
    article: float = 10
    newsletter: float = 15
    search: float = 15
    # One generate_content call covers the whole batch and often runs past
    # the 10-15 s bounds of the fetchers. Set under "timeouts.llm" in config.json.
    llm: float = 120
    database: float = 10


@dataclass
class Settings:
    """Everything a run needs, resolved for one source strategy."""

    source: SourceStrategy
    mode: SelectivityMode
    write: WriteDiscipline
    gemini_api_key: str
    database_url: str
    tavily_api_key: Optional[str] = None
    model: str = "gemini-2.0-flash"
    max_output_tokens: int = 4096
    max_batch_size: int = 40
    strict_max_results: int = 15
    retention_days: int = 30
    user_agent: str = "NewsHooksBot/1.0"
    enrich_full_text: bool = False
    window_days: int = 30
    max_items_per_feed: int = 10
    max_results_per_query: int = 10
    today_url: str = "https://tldr.tech/ai/{date}"
    latest_url: str = "https://tldr.tech/api/latest/ai"
    timeouts: Timeouts = field(default_factory=Timeouts)
    feeds: Dict[str, str] = field(default_factory=dict)
    search_queries: List[str] = field(default_factory=list)
    search_domains: List[str] = field(default_factory=list)


def _enum_value(enum_cls, value: Any, option: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        choices = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"Invalid {option} {value!r} (expected one of: {choices})") from e


def load_settings(
    config: Dict[str, Any],
    source: str,
    mode: Optional[str] = None,
    write: Optional[str] = None,
    enrich_full_text: Optional[bool] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Resolves settings for a run and validates required credentials.

    Explicit mode/write/enrich arguments override the source's defaults from
    config. Raises ConfigError before any network I/O happens.
    """
    env = os.environ if environ is None else environ
    strategy = _enum_value(SourceStrategy, source, "source")
    source_cfg: Dict[str, Any] = config.get("sources", {}).get(strategy.value, {})

    gemini_api_key = env.get("GEMINI_KEY", "")
    database_url = env.get("DATABASE_URL", "")
    tavily_api_key = env.get("TAVILY_API_KEY") or None

    if not gemini_api_key:
        raise ConfigError("GEMINI_KEY not set.")
    if not database_url:
        raise ConfigError("DATABASE_URL not set.")
    if strategy is SourceStrategy.SEARCH and not tavily_api_key:
        raise ConfigError("TAVILY_API_KEY not set (required for the search source).")

    try:
        timeouts = Timeouts(**config.get("timeouts", {}))
    except TypeError as e:
        raise ConfigError(f"Invalid timeouts section: {e}") from e

    settings = Settings(
        source=strategy,
        mode=_enum_value(
            SelectivityMode, mode or source_cfg.get("mode", "inclusive"), "mode"
        ),
        write=_enum_value(
            WriteDiscipline, write or source_cfg.get("write", "replace-all"), "write"
        ),
        gemini_api_key=gemini_api_key,
        database_url=database_url,
        tavily_api_key=tavily_api_key,
        timeouts=timeouts,
        feeds=dict(config.get("feeds", {})),
        search_queries=list(config.get("search_queries", [])),
        search_domains=list(config.get("search_domains", [])),
    )

    for key in (
        "model",
        "max_output_tokens",
        "max_batch_size",
        "strict_max_results",
        "retention_days",
        "user_agent",
    ):
        if key in config:
            setattr(settings, key, config[key])

    for key in (
        "enrich_full_text",
        "window_days",
        "max_items_per_feed",
        "max_results_per_query",
        "today_url",
        "latest_url",
    ):
        if key in source_cfg:
            setattr(settings, key, source_cfg[key])

    if enrich_full_text is not None:
        settings.enrich_full_text = enrich_full_text

    if strategy is SourceStrategy.RSS and not settings.feeds:
        raise ConfigError("No RSS feeds configured.")
    if strategy is SourceStrategy.SEARCH and not settings.search_queries:
        raise ConfigError("No search queries configured.")

    return settings
