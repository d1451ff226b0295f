#!/usr/bin/env python3
"""
Matching utilities for the Unlinked Mention Finder
Detects brand mentions without a hyperlink to the brand domain and extracts a context snippet
"""
import re
import logging
from typing import Optional, Pattern

from .models import Opportunity, STATUS_NEW, utcnow

logger = logging.getLogger(__name__)

# Pre-compiled regex patterns for snippet cleanup
RE_HTML_TAG = re.compile(r'<[^>]+>')
RE_WHITESPACE_NORMALIZE = re.compile(r'\s+')

SNIPPET_RADIUS = 75
ELLIPSIS = '...'

def brand_link_pattern(brand_domain: str) -> Pattern:
    """href="..." / href='...' pointing at the brand domain, scheme and www optional"""
    return re.compile(
        r'href\s*=\s*["\'](https?://)?(www\.)?' + re.escape(brand_domain.strip().lower()),
        re.IGNORECASE,
    )

def is_mentioned(content: str, brand_name: str) -> bool:
    return brand_name.lower() in content.lower()

def has_brand_link(content: str, brand_domain: str) -> bool:
    return brand_link_pattern(brand_domain).search(content) is not None

def clean_snippet(raw: str) -> str:
    """Replace tags with a space, collapse whitespace, trim"""
    text = RE_HTML_TAG.sub(' ', raw)
    return RE_WHITESPACE_NORMALIZE.sub(' ', text).strip()

def extract_context_snippet(content: str, brand_name: str, radius: int = SNIPPET_RADIUS) -> Optional[str]:
    """
    Window of `radius` characters either side of the first brand occurrence,
    at most 2 * radius raw characters, cleaned and wrapped in ellipses.
    """
    match = re.search(re.escape(brand_name), content, re.IGNORECASE)
    if not match:
        return None
    start = max(0, match.start() - radius)
    end = min(len(content), match.start() + radius)
    return f"{ELLIPSIS}{clean_snippet(content[start:end])}{ELLIPSIS}"

def analyze_content(content: str, brand_name: str, brand_domain: str,
                    radius: int = SNIPPET_RADIUS) -> Optional[str]:
    """Context snippet when the page mentions the brand and does not link to it, else None"""
    if not content or not is_mentioned(content, brand_name):
        return None
    if has_brand_link(content, brand_domain):
        return None
    return extract_context_snippet(content, brand_name, radius)


class MentionClassifier:
    """Fetch a candidate page and classify it as an unlinked mention or not"""

    def __init__(self, brand_name: str, brand_domain: str, fetcher, snippet_radius: int = SNIPPET_RADIUS):
        self.brand_name = brand_name
        self.brand_domain = brand_domain
        self.fetcher = fetcher
        self.snippet_radius = snippet_radius

    def classify(self, url: str) -> Optional[Opportunity]:
        try:
            content = self.fetcher.fetch_html(url)
            if content is None:
                return None

            snippet = analyze_content(content, self.brand_name, self.brand_domain, self.snippet_radius)
            if snippet is None:
                logger.debug(f"No unlinked mention at {url}")
                return None

            logger.info(f"Found unlinked mention at: {url}")
            return Opportunity(url=url, context_snippet=snippet, discovered_at=utcnow(), status=STATUS_NEW)

        except Exception as e:
            logger.error(f"Mention check failed for URL {url}: {e}")
            return None
