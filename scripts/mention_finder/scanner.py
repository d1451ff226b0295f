#!/usr/bin/env python3
"""
Unlinked Mention Finder - scanner
Paginates search queries, filters candidate URLs, classifies pages and records opportunities
"""
import sys
import time
import logging
from datetime import datetime
from typing import List, Optional
from contextlib import contextmanager

import requests

from config import FinderConfig
from utils.api_usage import QuotaTracker
from utils.state_store import JSONKeyValueStore, KeyValueStore
from utils.tabular_store import TabularStore, create_store

from .config_resolver import resolve_config
from .cse_client import CSESearcher
from .content_fetcher import ContentFetcher
from .dedup import UrlFilter, ExistingUrlIndex
from .domains import hostname_of, parse_exclusion_list
from .exceptions import ConfigurationError, FatalRunError, StoreError
from .logging_ext import RunSummary, JSONLWriter
from .matching import MentionClassifier
from .models import Query, utcnow

logger = logging.getLogger(__name__)

STATUS_SCALAR = 'status'
EXCLUSIONS_SCALAR = 'excluded_domains'

@contextmanager
def performance_timer(operation: str, query: str = None):
    """Context manager for structured performance logging"""
    start_time = time.perf_counter()
    context = {"operation": operation}
    if query:
        context["query"] = query

    try:
        yield context
    except Exception as e:
        context["error"] = str(e)
        context["success"] = False
        raise
    else:
        context["success"] = True
    finally:
        context["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(f"[PERF] {operation}: {context['duration_ms']}ms", extra=context)


class UnlinkedMentionScanner:
    """Drives the per-query pagination loop and records unlinked mentions"""

    def __init__(self, config: FinderConfig, store: TabularStore, searcher: CSESearcher,
                 classifier: MentionClassifier, jsonl_writer: Optional[JSONLWriter] = None,
                 clock=utcnow):
        self.config = config
        self.store = store
        self.searcher = searcher
        self.classifier = classifier
        self.jsonl_writer = jsonl_writer
        self.clock = clock
        self.url_filter = UrlFilter()
        self.summary = RunSummary()

    # =============================================================================
    # STATUS
    # =============================================================================

    def set_status(self, text: str):
        try:
            self.store.write_scalar(STATUS_SCALAR, text)
        except Exception as e:
            logger.error(f"Failed to update status to {text!r}: {e}")

    # =============================================================================
    # PIPELINE
    # =============================================================================

    def load_queries(self) -> List[Query]:
        records = self.store.read_all(self.config.store.queries_collection)
        queries = [Query.from_record(record, row=i) for i, record in enumerate(records)]
        return [q for q in queries if q.text]

    def load_exclusions(self):
        return parse_exclusion_list(self.store.read_scalar(EXCLUSIONS_SCALAR, ''))

    def load_url_index(self) -> ExistingUrlIndex:
        return ExistingUrlIndex.from_store(
            self.store,
            self.config.store.results_collection,
            self.config.store.archive_collection,
        )

    def process_url(self, query: str, url: str) -> bool:
        """Filter then classify one search result; True when an opportunity was recorded"""
        domain = hostname_of(url)
        if not self.url_filter.should_process(url):
            self.summary.increment_skipped()
            self._audit(query, url, domain, 'skipped')
            return False

        opportunity = self.classifier.classify(url)
        self.summary.increment_fetched()
        if opportunity is None:
            self._audit(query, url, domain, 'no_unlinked_mention')
            return False

        try:
            self.store.append(self.config.store.results_collection, opportunity.to_record())
        except Exception as e:
            logger.error(f"Failed to record opportunity {url}: {e}")
            return False

        self.url_filter.remember(url)
        self.summary.increment_found(domain)
        self._audit(query, url, domain, 'found', opportunity.context_snippet)
        return True

    def process_query(self, query: Query, max_pages: int):
        """Page through results until an empty page or the page cap"""
        self.set_status(f'Digging deeper for query: "{query.text}"')
        per_page = self.searcher.results_per_page

        with performance_timer("query", query.text):
            for page in range(max_pages):
                start_index = page * per_page + 1
                items = self.searcher.fetch_page(query.text, start_index)
                if not items:
                    logger.info(f"No more results for {query.text!r} after {page} page(s)")
                    break

                self.summary.increment_cse_call(len(items))
                for item in items:
                    self.process_url(query.text, item.url)

        query.last_checked_at = self.clock()
        if query.row is not None:
            self.store.update_row(self.config.store.queries_collection, query.row, query.to_record())
        self.summary.increment_query()

    def run(self, queries: List[Query], max_pages_per_query: Optional[int] = None,
            exclusion_list=None, url_index: Optional[ExistingUrlIndex] = None) -> RunSummary:
        """Process queries in order; errors end the run with an error status and keep written rows"""
        self.summary = RunSummary()
        max_pages = max_pages_per_query if max_pages_per_query is not None else self.config.search.pages_per_query

        if not self.searcher.configured:
            message = "Search API credentials are not configured"
            self.set_status(f"Error! {message}")
            self.summary.status = "error"
            raise ConfigurationError(message)

        self.set_status('Running...')
        try:
            self.url_filter = UrlFilter(
                exclusion_list if exclusion_list is not None else self.load_exclusions(),
                url_index if url_index is not None else self.load_url_index(),
            )
            logger.info(f"Starting run: {len(queries)} queries, {max_pages} pages each, "
                        f"{len(self.url_filter.exclusion_list)} excluded domains, "
                        f"{len(self.url_filter.index)} known URLs")

            for query in queries:
                if not query.text:
                    continue
                self.process_query(query, max_pages)

            self.set_status(f"Complete. Last run: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

        except Exception as e:
            error = e if isinstance(e, FatalRunError) else FatalRunError(str(e))
            logger.exception(f"Run aborted: {error}")
            self.set_status(f"Error! Check logs. Message: {error}")
            self.summary.status = "error"

        return self.summary

    def run_from_store(self, max_pages_per_query: Optional[int] = None) -> RunSummary:
        """Scheduled job and manual entry point: load everything from the store, then run"""
        try:
            queries = self.load_queries()
        except Exception as e:
            logger.error(f"Failed to load queries: {e}")
            self.set_status(f"Error! Check logs. Message: {e}")
            self.summary = RunSummary()
            self.summary.status = "error"
            return self.summary
        return self.run(queries, max_pages_per_query)

    def _audit(self, query: str, url: str, domain: Optional[str], decision: str, snippet: str = None):
        if self.jsonl_writer:
            self.jsonl_writer.write_decision(query, url, domain, decision, snippet)


def build_scanner(config: FinderConfig, store: Optional[TabularStore] = None,
                  state: Optional[KeyValueStore] = None, session: Optional[requests.Session] = None,
                  jsonl_out: Optional[str] = None) -> UnlinkedMentionScanner:
    """Wire the scanner and its collaborators from a typed config"""
    if store is None:
        store = create_store(
            config.store.backend,
            config.store.data_dir,
            config.supabase_url,
            config.supabase_key,
        )
    if state is None:
        state = store if isinstance(store, KeyValueStore) else JSONKeyValueStore(config.store.state_file)

    session = session or requests.Session()
    quota = QuotaTracker(state, presentation=store, daily_cap=config.search.daily_cap)
    searcher = CSESearcher.from_config(config, quota=quota, session=session)
    fetcher = ContentFetcher(session, user_agent=config.http.user_agent, timeout_s=config.http.timeout_s)
    classifier = MentionClassifier(
        config.brand_name,
        config.brand_domain,
        fetcher,
        snippet_radius=config.http.snippet_radius,
    )

    jsonl_writer = None
    if jsonl_out:
        jsonl_writer = JSONLWriter(jsonl_out)
        jsonl_writer.initialize()

    return UnlinkedMentionScanner(config, store, searcher, classifier, jsonl_writer=jsonl_writer)


def main():
    """CLI interface for the Unlinked Mention Finder"""
    import argparse

    parser = argparse.ArgumentParser(description='Unlinked Mention Finder - brand mentions without a link')
    parser.add_argument('--config', help='Path to config.json')
    parser.add_argument('--daemon', action='store_true', help='Run daily at schedule.daily_at until interrupted')
    parser.add_argument('--daily-at', help='Time of day for --daemon runs (HH:MM)')
    parser.add_argument('--archive', action='store_true', help='Move reviewed (non-New) results to the archive and exit')
    parser.add_argument('--max-pages', type=int, help='Result pages of 10 to check per query (default 3)')
    parser.add_argument('--jsonl-out', help='Append one JSON line per URL decision to this file')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = FinderConfig.from_dict(resolve_config(args))
        scanner = build_scanner(config, jsonl_out=args.jsonl_out)
    except (ValueError, StoreError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        if args.archive:
            from .archiver import archive_reviewed
            archive_reviewed(scanner.store, config.store.results_collection, config.store.archive_collection)
            return 0

        if args.daemon:
            from .scheduler import FinderScheduler
            finder_scheduler = FinderScheduler(poll_seconds=config.schedule.poll_seconds)
            finder_scheduler.setup_daily_trigger(scanner.run_from_store, at=config.schedule.daily_at)
            finder_scheduler.run_forever()
            return 0

        summary = scanner.run_from_store()
        summary.print_summary()
        return 0

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    finally:
        if scanner.jsonl_writer:
            scanner.jsonl_writer.close()


if __name__ == "__main__":
    sys.exit(main())
