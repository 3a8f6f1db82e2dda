"""
Outlet display names.

Maps raw outlet identifiers (hostnames, feed keys) to the brand name shown on
the dashboard.
"""

from typing import Dict, Optional

OUTLET_NAME_MAP: Dict[str, str] = {
    "techcrunch.com": "TechCrunch",
    "theverge.com": "The Verge",
    "wired.com": "WIRED",
    "venturebeat.com": "VentureBeat",
    "technologyreview.com": "MIT Technology Review",
    "arstechnica.com": "Ars Technica",
    "feeds.arstechnica.com": "Ars Technica",
    "fastcompany.com": "Fast Company",
    "businessinsider.com": "Business Insider",
    "forbes.com": "Forbes",
    "cnbc.com": "CNBC",
    "reuters.com": "Reuters",
    "bloomberg.com": "Bloomberg",
    "tldr.tech": "TLDR",
    "businessoffashion.com": "Business of Fashion",
    "theinterline.com": "The Interline",
    "blog.google": "Google",
    "ben-evans.com": "Ben Evans",
    "fortune.com": "Fortune",
    "9to5mac.com": "9to5Mac",
    "arxiv.org": "arXiv",
}


def normalize_outlet(raw_outlet: Optional[str]) -> str:
    """
    Returns the display name for an outlet.

    Unknown outlets come back exactly as passed in.
    """
    if not raw_outlet or not isinstance(raw_outlet, str):
        return "Unknown"
    cleaned = raw_outlet.lower().strip()
    if cleaned.startswith("www."):
        cleaned = cleaned[4:]
    return OUTLET_NAME_MAP.get(cleaned, raw_outlet)
