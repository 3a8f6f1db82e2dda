"""
Narrow HTML and URL helpers shared by the fetchers.

These are not general HTML parsers. They recognise exactly the shapes below:

- Newsletter article block::

      <article ...>
        <a ... href="URL" ...><h3>TITLE</h3></a>
        <div class="newsletter-html" ...>DESCRIPTION</div>
      </article>

- Article body paragraph: ``<p ...>TEXT</p>``
"""

import html
import re
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

TAG_RE = re.compile(r"<[^>]+>")

NEWSLETTER_BLOCK_RE = re.compile(
    r"<article[^>]*>\s*<a[^>]*href=\"([^\"]+)\"[^>]*>\s*<h3>([\s\S]*?)</h3>\s*</a>"
    r"\s*<div class=\"newsletter-html\"[^>]*>([\s\S]*?)</div>\s*</article>",
    re.IGNORECASE,
)

PARAGRAPH_RE = re.compile(r"<p[^>]*>([\s\S]*?)</p>", re.IGNORECASE)

READ_TIME_RE = re.compile(r"\s*\(\d+\s*minute\s*read\)\s*$", re.IGNORECASE)

TRACKING_PARAMS = frozenset({"fbclid", "gclid", "mc_cid", "mc_eid", "ref_src"})


def clean_html(raw_html: Optional[str]) -> str:
    """Removes tags, decodes entities and collapses whitespace."""
    if not raw_html:
        return ""
    text = html.unescape(TAG_RE.sub("", raw_html))
    return " ".join(text.split())


def _is_tracking_param(pair: str) -> bool:
    key = pair.split("=", 1)[0].lower()
    return key.startswith("utm_") or key in TRACKING_PARAMS


def canonicalize_url(url: Optional[str]) -> Optional[str]:
    """
    Strips tracking query parameters from an http(s) URL.

    Returns None when the URL is not absolute http(s) with a host.
    Other query parameters are kept byte-for-byte in their original order.
    """
    if not url:
        return None
    url = url.strip()
    try:
        parts = urlsplit(url)
        # Raises ValueError on a non-numeric or out-of-range port
        parts.port  # pylint: disable=pointless-statement
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None

    base, sep, rest = url.partition("?")
    if not sep:
        return url

    query, hash_sep, fragment = rest.partition("#")
    kept = [p for p in query.split("&") if p and not _is_tracking_param(p)]
    canonical = base + ("?" + "&".join(kept) if kept else "")
    canonical = canonical.rstrip("?&")
    if hash_sep:
        canonical += "#" + fragment
    return canonical


def outlet_domain(url: str) -> str:
    """Returns the bare hostname of a URL, without a leading www."""
    try:
        host = urlsplit(url).hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def extract_newsletter_blocks(page: str) -> List[Tuple[str, str, str]]:
    """Returns (url, title, description) for every newsletter block."""
    blocks = []
    for match in NEWSLETTER_BLOCK_RE.finditer(page or ""):
        raw_url = html.unescape(match.group(1))
        title = READ_TIME_RE.sub("", clean_html(match.group(2)))
        description = clean_html(match.group(3))
        blocks.append((raw_url, title, description))
    return blocks


def extract_paragraphs(page: str, min_length: int = 30) -> List[str]:
    """Returns the text of every paragraph longer than min_length."""
    paragraphs = []
    for match in PARAGRAPH_RE.finditer(page or ""):
        text = clean_html(match.group(1))
        if len(text) > min_length:
            paragraphs.append(text)
    return paragraphs
