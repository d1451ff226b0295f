#!/usr/bin/env python3
"""
Content fetcher for the Unlinked Mention Finder
Plain HTTP GET of candidate pages (static HTML only)
"""
import logging
import requests
from typing import Optional

from config import GOOGLEBOT_USER_AGENT
from .exceptions import TransportError

logger = logging.getLogger(__name__)

class ContentFetcher:
    """Fetch candidate pages with a crawler user-agent to get past basic anti-bot checks"""

    def __init__(self, session: Optional[requests.Session] = None,
                 user_agent: str = GOOGLEBOT_USER_AGENT, timeout_s: int = 20):
        self.session = session or requests.Session()
        self.user_agent = user_agent
        self.timeout_s = timeout_s

    def fetch_html(self, url: str) -> Optional[str]:
        """Return the body text for a 200 response, None for any other status"""
        try:
            response = self.session.get(
                url,
                headers={'User-Agent': self.user_agent},
                timeout=self.timeout_s,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Fetch failed for {url}: {e}") from e

        if response.status_code != 200:
            logger.info(f"Could not fetch URL {url}. Status code: {response.status_code}")
            return None

        return response.text
