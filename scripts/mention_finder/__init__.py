#!/usr/bin/env python3
"""
Unlinked Mention Finder - Modular Components
Finds pages that mention the brand without linking to its domain
"""

# Main scanner class
from .scanner import UnlinkedMentionScanner, build_scanner

# Core components
from .cse_client import CSESearcher
from .content_fetcher import ContentFetcher
from .matching import MentionClassifier, analyze_content, extract_context_snippet
from .dedup import UrlFilter, ExistingUrlIndex, should_process
from .archiver import on_status_change, archive_reviewed

# Utilities
from .domains import hostname_of, parse_exclusion_list
from .config_resolver import resolve_config
from .logging_ext import JSONLWriter, RunSummary

__all__ = [
    'UnlinkedMentionScanner',
    'build_scanner',
    'CSESearcher',
    'ContentFetcher',
    'MentionClassifier',
    'UrlFilter',
    'ExistingUrlIndex',
    'should_process',
    'analyze_content',
    'extract_context_snippet',
    'on_status_change',
    'archive_reviewed',
    'hostname_of',
    'parse_exclusion_list',
    'resolve_config',
    'JSONLWriter',
    'RunSummary'
]
