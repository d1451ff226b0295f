#!/usr/bin/env python3
"""
URL filtering for the Unlinked Mention Finder
Rejects excluded domains and URLs already recorded as active or archived opportunities
"""
import logging
from typing import Iterable, Set, Optional, Dict, Any, List

from .domains import hostname_of

logger = logging.getLogger(__name__)


def should_process(url: str, exclusion_list: Set[str], existing_urls: Set[str]) -> bool:
    """Decide whether a search result URL is worth fetching"""
    hostname = hostname_of(url)
    if not hostname:
        logger.warning(f"Could not parse domain from URL: {url}")
        return False

    if hostname in exclusion_list:
        logger.info(f"Skipping excluded domain: {url}")
        return False

    # Exact string match: two URLs differing only in path are distinct
    if url in existing_urls:
        logger.info(f"Skipping duplicate URL: {url}")
        return False

    return True


class ExistingUrlIndex:
    """In-memory view of the active + archived URL sets, kept current during a run"""

    def __init__(self, urls: Optional[Iterable[str]] = None):
        self.urls: Set[str] = set(u for u in (urls or []) if u)

    @classmethod
    def from_records(cls, *collections: List[Dict[str, Any]]) -> 'ExistingUrlIndex':
        urls = []
        for records in collections:
            urls.extend(r.get('url') for r in records)
        return cls(urls)

    @classmethod
    def from_store(cls, store, active_collection: str, archive_collection: str) -> 'ExistingUrlIndex':
        return cls.from_records(store.read_all(active_collection), store.read_all(archive_collection))

    def add(self, url: str):
        self.urls.add(url)

    def __contains__(self, url: str) -> bool:
        return url in self.urls

    def __len__(self) -> int:
        return len(self.urls)


class UrlFilter:
    """Accept/reject candidate URLs against the exclusion list and existing URLs"""

    def __init__(self, exclusion_list: Optional[Set[str]] = None, index: Optional[ExistingUrlIndex] = None):
        self.exclusion_list = exclusion_list or set()
        self.index = index or ExistingUrlIndex()

    def should_process(self, url: str) -> bool:
        return should_process(url, self.exclusion_list, self.index.urls)

    def remember(self, url: str):
        """Record a newly appended URL so it is not processed again this run"""
        self.index.add(url)
