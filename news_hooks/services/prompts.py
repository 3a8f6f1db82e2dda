"""
Prompt templates for the relevance classifier, one per selectivity mode.
"""

from typing import List

from news_hooks.models import CandidateArticle, SelectivityMode

SNIPPET_LENGTH = 300
BODY_EXCERPT_LENGTH = 2000

SYSTEM_INSTRUCTIONS = {
    SelectivityMode.INCLUSIVE: (
        "You are a strategic communications analyst. Return only valid JSON."
    ),
    SelectivityMode.STRICT: (
        "You are a strategic communications analyst. Return only valid JSON."
    ),
    SelectivityMode.RANKED_WITH_TAKEAWAY: (
        "You are a strategic business analyst. Return only valid JSON."
    ),
}

_COMPANY_CONTEXT = """
GLOSSI CONTEXT:
- First AI-native 3D product visualization platform
- Core tech: compositing (not generation). Product 3D asset stays untouched, AI generates scenes around it
- Built on Unreal Engine 5, runs in browser
- Target: enterprise brands, e-commerce, CPG, fashion, beauty
- Buyers: CMOs, creative directors, e-commerce directors
- Key value: 80% reduction in product photo costs, unlimited variations, brand consistency
"""

_INCLUSIVE_PROMPT = """You are analyzing news articles for Glossi, an AI-native 3D product visualization platform.
{company_context}
TASK: Analyze each article and determine if it's broadly relevant to tech, AI, 3D, visualization, e-commerce, marketing, creative industries, or brand technology. Be INCLUSIVE rather than overly selective.

ARTICLES:
{articles}

Return articles in this JSON format:
{{
  "news": [
    {{
      "headline": "Original article title",
      "outlet": "Source domain (use the raw domain from SOURCE field)",
      "date": "YYYY-MM-DD format",
      "url": "Original URL",
      "summary": "One sentence summary of the article",
      "relevance": "ONE sentence explaining how this relates to Glossi or the industry"
    }}
  ]
}}

Rules:
- Include articles that are broadly relevant to tech, AI, 3D, visualization, e-commerce, creative industries, marketing, or brand technology
- Be INCLUSIVE - if there's any connection to these topics, include it
- Maximum {limit} articles
- Sort by date (most recent first)
- Keep summaries and relevance statements concise (one sentence each)
- Use the exact domain from the SOURCE field for the outlet name
- Only use articles from the list above. Never invent articles."""

_STRICT_PROMPT = """You are curating a short digest of news hooks for Glossi's communications team.
{company_context}
TASK: Select only the articles that clearly match one of the numbered topics below.

TOPICS (priority order):
1. AI creative/marketing tools, image generation for commercial use
2. E-commerce platforms, 3D/AR product visualization, visual commerce
3. Creative automation, brand asset management, content production at scale
4. DTC brand strategies, retail digital transformation, fashion tech
5. Enterprise AI adoption in marketing/creative operations
6. Funding/M&A in creative tech, martech, or adjacent markets

EXCLUDE:
- Pure AI research with no business application
- Cybersecurity, developer tools, healthcare, biotech, fintech, crypto
- Celebrity/corporate drama, politics, general AI philosophy

ARTICLES:
{articles}

Return JSON:
{{
  "news": [
    {{
      "headline": "Original article title",
      "outlet": "Source domain",
      "date": "YYYY-MM-DD format",
      "url": "Original URL",
      "topic": "Number of the matching topic",
      "summary": "One sentence summary of the article",
      "relevance": "ONE sentence justifying the match to that topic"
    }}
  ]
}}

Rules:
- Every selected article must name the topic it matches and justify it
- Maximum {limit} articles. Fewer is fine.
- Only use articles from the list above. Never invent articles."""

_TAKEAWAY_PROMPT = """You are a strategic analyst for Glossi, an AI-powered 3D product visualization platform.
{company_context}
TASK: For each RELEVANT article below, provide a relevance assessment and a specific "Glossi takeaway."

RELEVANCE CRITERIA (priority order):
1. AI creative/marketing tools, image generation for commercial use
2. E-commerce platforms, 3D/AR product visualization, visual commerce
3. Creative automation, brand asset management, content production at scale
4. DTC brand strategies, retail digital transformation, fashion tech
5. Enterprise AI adoption in marketing/creative operations
6. Funding/M&A in creative tech, martech, or adjacent markets
7. Platform partnerships, marketplace integrations, ecosystem plays

EXCLUDE:
- Pure AI research with no business application
- Cybersecurity, developer tools, healthcare, biotech, fintech, crypto
- Autonomous vehicles, robotics, gaming (unless product visualization)
- Celebrity/corporate drama, politics, general AI philosophy
- AI model benchmarks or capabilities (unless applied to creative/commerce)

ARTICLES:
{articles}

Return JSON:
{{
  "articles": [
    {{
      "title": "Clean article title",
      "url": "Article URL",
      "outlet": "Publication name",
      "summary": "1-2 sentence summary",
      "relevance": "Why this matters to Glossi's market (1 sentence)",
      "angle_title": "Short angle label (3-5 words, e.g. 'AI Creative Tools', 'Visual Commerce Growth')",
      "glossi_takeaway": "Specific, actionable insight for Glossi: what to say in investor meetings, how to position, sales angle, or strategic implication. Be concrete. 2-3 sentences."
    }}
  ]
}}

Rules:
- Only include articles with CLEAR relevance. Quality over quantity.
- glossi_takeaway must be specific and actionable, not generic
- Maximum {limit} articles. If fewer than 2 articles are relevant, that's fine
- Return ONLY the JSON, no other text"""

_TEMPLATES = {
    SelectivityMode.INCLUSIVE: _INCLUSIVE_PROMPT,
    SelectivityMode.STRICT: _STRICT_PROMPT,
    SelectivityMode.RANKED_WITH_TAKEAWAY: _TAKEAWAY_PROMPT,
}


def format_articles(candidates: List[CandidateArticle]) -> str:
    """Enumerates candidates for the prompt, 1-based."""
    blocks = []
    for i, article in enumerate(candidates, start=1):
        published = article.get("published_at")
        date = published.strftime("%Y-%m-%d") if published else "Recent"
        lines = [
            f"{i}. TITLE: {article['title']}",
            f"   SOURCE: {article['outlet_domain'] or 'Unknown'}",
            f"   URL: {article['url']}",
            f"   DATE: {date}",
            f"   SNIPPET: {article['description'][:SNIPPET_LENGTH] or 'No preview'}",
        ]
        if article.get("full_text"):
            lines.append(
                "   FULL ARTICLE EXCERPT:\n"
                + article["full_text"][:BODY_EXCERPT_LENGTH]  # type: ignore[index]
            )
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_prompt(
    candidates: List[CandidateArticle], mode: SelectivityMode, limit: int
) -> str:
    """Returns the user prompt for a batch of candidates."""
    return _TEMPLATES[mode].format(
        company_context=_COMPANY_CONTEXT,
        articles=format_articles(candidates),
        limit=limit,
    )
