#!/usr/bin/env python3
"""
Logging extensions for the Unlinked Mention Finder
JSONL decision log and run summary counters
"""
import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional, TextIO
from collections import Counter

logger = logging.getLogger(__name__)

class RunSummary:
    """Per-run counters, reported once the run ends"""

    def __init__(self):
        self.queries_processed = 0
        self.cse_calls = 0
        self.serp_items_total = 0
        self.excluded_or_duplicate = 0
        self.pages_fetched = 0
        self.opportunities_found = 0
        self.status = "ok"
        self.top_domains = Counter()

    def increment_query(self):
        self.queries_processed += 1

    def increment_cse_call(self, items: int = 0):
        self.cse_calls += 1
        self.serp_items_total += items

    def increment_skipped(self):
        self.excluded_or_duplicate += 1

    def increment_fetched(self):
        self.pages_fetched += 1

    def increment_found(self, domain: str = None):
        """Increment found count and optionally domain counter"""
        self.opportunities_found += 1
        if domain:
            self.top_domains[domain] += 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            'queries_processed': self.queries_processed,
            'cse_calls': self.cse_calls,
            'serp_items_total': self.serp_items_total,
            'excluded_or_duplicate': self.excluded_or_duplicate,
            'pages_fetched': self.pages_fetched,
            'opportunities_found': self.opportunities_found,
            'status': self.status,
            'top_domains': dict(self.top_domains),
        }

    def summary_lines(self):
        lines = [
            f"run status={self.status}",
            f"  queries={self.queries_processed} search_pages={self.cse_calls} results={self.serp_items_total}",
            f"  skipped={self.excluded_or_duplicate} fetched={self.pages_fetched} found={self.opportunities_found}",
        ]
        for domain, count in self.top_domains.most_common(10):
            lines.append(f"  found on {domain}: {count}")
        return lines

    def print_summary(self):
        print("\n".join(self.summary_lines()))

class JSONLWriter:
    """One JSON object per URL decision, appended and flushed as it happens"""

    def __init__(self, filepath: str):
        self.filepath = filepath
        self.jsonl_file: Optional[TextIO] = None

    def initialize(self):
        try:
            self.jsonl_file = open(self.filepath, 'a', encoding='utf-8')
            logger.debug(f"JSONL output initialized: {self.filepath}")
        except Exception as e:
            logger.error(f"Failed to initialize JSONL output {self.filepath}: {e}")
            self.jsonl_file = None

    def write_decision(self, query: str, url: str, domain: Optional[str], decision: str,
                       snippet: Optional[str] = None):
        """decision is one of skipped, no_unlinked_mention, found"""
        if not self.jsonl_file:
            return

        try:
            entry = {
                'query': query,
                'url': url,
                'domain': domain,
                'decision': decision,
                'snippet': snippet,
                'ts': datetime.now(timezone.utc).isoformat()
            }
            self.jsonl_file.write(json.dumps(entry, ensure_ascii=False) + '\n')
            self.jsonl_file.flush()
        except Exception as e:
            logger.error(f"Failed to write JSONL entry: {e}")

    def close(self):
        if self.jsonl_file:
            try:
                self.jsonl_file.close()
                self.jsonl_file = None
            except Exception as e:
                logger.error(f"Error closing JSONL file: {e}")
