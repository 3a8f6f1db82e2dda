"""
LLM Service Module.

This module provides the LLMService class, which interfaces with the Google Gemini API
to judge candidate articles for relevance to Glossi's product narrative.
"""

import logging
from typing import Any, Dict, List, Optional

from google import genai
from news_hooks.errors import (
    ClassifierUnavailableError,
    DegenerateOutputError,
    StructuredOutputError,
)
from news_hooks.models import CandidateArticle, SelectivityMode
from news_hooks.services.extraction import parse_json_response
from news_hooks.services.prompts import SYSTEM_INSTRUCTIONS, build_prompt

logger = logging.getLogger(__name__)

HEADLINE_MARKERS = ("example", "placeholder")
SUMMARY_MARKERS = ("would be", "placeholder")


def extract_items(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Returns the article list from an {articles: [...]} or {news: [...]} payload."""
    items = payload.get("articles")
    if items is None:
        items = payload.get("news")
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def check_degenerate(items: List[Dict[str, Any]]) -> None:
    """Raises DegenerateOutputError if any item looks like fabricated filler."""
    for item in items:
        headline = str(item.get("headline") or item.get("title") or "").lower()
        summary = str(item.get("summary") or "").lower()
        for marker in HEADLINE_MARKERS:
            if marker in headline:
                raise DegenerateOutputError(
                    f"Headline contains {marker!r}: {headline[:80]}"
                )
        for marker in SUMMARY_MARKERS:
            if marker in summary:
                raise DegenerateOutputError(
                    f"Summary contains {marker!r}: {summary[:80]}"
                )


class LLMService:
    """
    Service for interacting with the Google Gemini API.

    One classify() call is one blocking generate_content request. Transport
    and API failures raise ClassifierUnavailableError; malformed or
    degenerate output is logged and treated as zero relevant articles.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        max_output_tokens: int = 4096,
        max_batch_size: int = 40,
        strict_max_results: int = 15,
        timeout: float = 120,
        client: Optional[genai.Client] = None,
    ):
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.max_batch_size = max_batch_size
        self.strict_max_results = strict_max_results
        self.client = client or genai.Client(
            api_key=api_key, http_options={"timeout": int(timeout * 1000)}
        )

    def _limit_for(self, mode: SelectivityMode) -> int:
        if mode is SelectivityMode.STRICT:
            return self.strict_max_results
        return self.max_batch_size

    def generate(self, prompt: str, system_instruction: str) -> str:
        """Sends one prompt and returns the raw response text."""
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config={
                    "system_instruction": system_instruction,
                    "max_output_tokens": self.max_output_tokens,
                    "response_mime_type": "application/json",
                },
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise ClassifierUnavailableError(f"Gemini API error: {e}") from e
        return response.text if response.text else ""

    def classify(
        self, candidates: List[CandidateArticle], mode: SelectivityMode
    ) -> List[Dict[str, Any]]:
        """Asks Gemini which candidates matter and returns its raw items."""
        batch = candidates[: self.max_batch_size]
        limit = self._limit_for(mode)
        logger.info(
            "Sending %d articles to Gemini for analysis (mode %s, limit %d)...",
            len(batch),
            mode.value,
            limit,
        )

        prompt = build_prompt(batch, mode, limit)
        response_text = self.generate(prompt, SYSTEM_INSTRUCTIONS[mode])

        try:
            payload = parse_json_response(response_text)
        except StructuredOutputError as e:
            logger.error("Failed to parse Gemini response: %s", e)
            logger.error("Gemini raw response: %s", response_text[:500])
            return []

        items = extract_items(payload)
        try:
            check_degenerate(items)
        except DegenerateOutputError as e:
            logger.warning(
                "Rejected Gemini output as placeholder content (%s). "
                "Discarding all %d items.",
                e,
                len(items),
            )
            return []

        if mode is SelectivityMode.STRICT:
            items = items[:limit]
        elif mode is SelectivityMode.RANKED_WITH_TAKEAWAY:
            with_takeaway = [
                item
                for item in items
                if str(item.get("glossi_takeaway") or item.get("takeaway") or "").strip()
            ]
            if len(with_takeaway) < len(items):
                logger.warning(
                    "Dropped %d items without a takeaway",
                    len(items) - len(with_takeaway),
                )
            items = with_takeaway

        logger.info("Gemini selected %d relevant articles", len(items))
        if not items and batch:
            logger.warning("Gemini filtered out all %d articles", len(batch))
        return items
