#!/usr/bin/env python3
"""
Google Custom Search Engine client for the Unlinked Mention Finder
Paged searcher with rate limiting, bounded retry and daily quota tracking
"""
import time
import random
import logging
import requests
from typing import List, Optional

from .exceptions import ParseError
from .models import SearchResultItem

logger = logging.getLogger(__name__)

CSE_ENDPOINT = 'https://www.googleapis.com/customsearch/v1'
BACKOFF_DELAYS = [0.25, 0.5, 1.0, 2.0, 4.0]

class CSESearcher:
    """Google Custom Search Engine pager: one request per page of 10 results"""

    def __init__(self, api_key: Optional[str], search_engine_id: Optional[str], quota=None,
                 session: Optional[requests.Session] = None, results_per_page: int = 10,
                 max_retries: int = 3, timeout_s: int = 15, min_interval: float = 1.0,
                 daily_cap: Optional[int] = None):
        self.api_key = api_key
        self.search_engine_id = search_engine_id
        self.quota = quota
        self.session = session or requests.Session()
        self.base_url = CSE_ENDPOINT
        self.results_per_page = min(results_per_page, 10)  # Google CSE API max per request is 10
        self.max_retries = max(1, max_retries)
        self.timeout_s = timeout_s
        self.min_interval = min_interval
        self.daily_cap = daily_cap
        self.last_request_time = 0.0
        self.error_429_count = 0

    @classmethod
    def from_config(cls, config, quota=None, session=None) -> 'CSESearcher':
        return cls(
            api_key=config.google_custom_search_api_key,
            search_engine_id=config.google_custom_search_engine_id,
            quota=quota,
            session=session,
            results_per_page=config.search.results_per_page,
            max_retries=config.search.max_retries,
            timeout_s=config.search.timeout_s,
            min_interval=config.rate_limit_delay,
            daily_cap=config.search.daily_cap,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.search_engine_id)

    def _rate_limit_delay(self):
        """Keep at least min_interval between API calls"""
        now = time.time()
        time_since_last = now - self.last_request_time

        if time_since_last < self.min_interval:
            sleep_time = self.min_interval - time_since_last
            jitter = random.uniform(0.1, 0.3)
            time.sleep(sleep_time + jitter)

        self.last_request_time = time.time()

    def _quota_exhausted(self) -> bool:
        if self.quota is None or self.daily_cap is None:
            return False
        return self.quota.remaining(self.daily_cap) <= 0

    def _retry_request(self, params: dict) -> Optional[dict]:
        """Make request with exponential backoff on 429/5xx errors and timeouts"""
        for attempt in range(self.max_retries):
            delay = BACKOFF_DELAYS[min(attempt, len(BACKOFF_DELAYS) - 1)]
            try:
                self._rate_limit_delay()
                response = self.session.get(self.base_url, params=params, timeout=self.timeout_s)

                if response.status_code == 200:
                    if self.quota is not None:
                        self.quota.record_call()
                    try:
                        return response.json()
                    except ValueError as e:
                        raise ParseError(f"Unparseable CSE response for {params.get('q')!r}: {e}") from e
                elif response.status_code == 429:
                    self.error_429_count += 1
                    try:
                        retry_after = float(response.headers.get('Retry-After', delay))
                    except (TypeError, ValueError):
                        retry_after = delay
                    logger.warning(f"Rate limited (429), retry after {retry_after}s (attempt {attempt+1}/{self.max_retries})")
                    time.sleep(retry_after)
                elif response.status_code >= 500:
                    logger.warning(f"Server error {response.status_code}, retrying in {delay}s (attempt {attempt+1}/{self.max_retries})")
                    time.sleep(delay)
                else:
                    logger.error(f"API Error for query {params.get('q')!r}. Response Code: {response.status_code}. Content: {response.text}")
                    return None

            except requests.exceptions.Timeout:
                logger.warning(f"Request timeout, retrying in {delay}s (attempt {attempt+1}/{self.max_retries})")
                time.sleep(delay)
            except requests.exceptions.RequestException as e:
                logger.error(f"CSE fetch error for query {params.get('q')!r}: {e}")
                return None

        logger.error(f"CSE request for {params.get('q')!r} gave up after {self.max_retries} attempts")
        return None

    def fetch_page(self, query: str, start_index: int) -> Optional[List[SearchResultItem]]:
        """
        Fetch one page of results starting at the 1-based start_index.

        Returns an empty list when the API reports no items and None when the
        call could not be made or failed; callers stop paginating on either.
        """
        if not query or not query.strip():
            raise ValueError("query must be non-empty")
        if start_index < 1:
            raise ValueError(f"start_index must be >= 1, got {start_index}")

        if not self.configured:
            logger.error("Search API credentials are not configured (GOOGLE_CUSTOM_SEARCH_API_KEY / GOOGLE_CUSTOM_SEARCH_ENGINE_ID)")
            return None

        if self._quota_exhausted():
            logger.warning(f"Daily search cap of {self.daily_cap} reached, skipping {query!r} start={start_index}")
            return None

        params = {
            'key': self.api_key,
            'cx': self.search_engine_id,
            'q': query,
            'num': self.results_per_page,
            'start': start_index,
        }

        logger.debug(f"CSE query {query!r} start={start_index}")
        try:
            data = self._retry_request(params)
        except ParseError as e:
            logger.error(str(e))
            return None
        if not isinstance(data, dict):
            return None

        results = []
        for item in data.get('items') or []:
            link = item.get('link')
            if not link:
                logger.debug(f"Skipping CSE item without link: {item.get('title', '')}")
                continue
            results.append(SearchResultItem(
                url=link,
                title=item.get('title', ''),
                display_link=item.get('displayLink', ''),
                snippet=item.get('snippet', ''),
            ))

        logger.info(f"CSE {query!r} start={start_index}: {len(results)} items")
        return results
