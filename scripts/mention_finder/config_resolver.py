#!/usr/bin/env python3
"""
Unified Config Resolver for the Unlinked Mention Finder - Single Source of Truth
Handles CLI > ENV > config > defaults resolution and logs final values
"""
import os
import json
import copy
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'mention_finder': {
        'brand_name': 'Myntra',
        'brand_domain': 'myntra.com',
        'search': {
            'pages_per_query': 3,
            'results_per_page': 10,
            'max_retries': 3,
            'timeout_s': 15,
            'daily_cap': 100
        },
        'http': {
            'timeout_s': 20,
            'snippet_radius': 75
        },
        'serp_cost_control': {},
        'store': {
            'backend': 'json',
            'data_dir': 'data',
            'state_file': 'data/state.json'
        },
        'schedule': {
            'daily_at': '02:00',
            'poll_seconds': 60
        }
    }
}

def load_config(config_path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Read config.json from the first candidate path that exists (None when absent or invalid)"""
    possible_paths = [config_path] if config_path else [
        "config.json",
        "../config.json",
        os.path.join(os.path.dirname(__file__), "../../config.json")
    ]

    found_path = None
    for path in possible_paths:
        if os.path.exists(path):
            found_path = path
            break

    if not found_path:
        logger.warning(f"Config file not found in any of {possible_paths}, using defaults")
        return None

    try:
        with open(found_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
        logger.debug(f"Loaded config from {found_path}")
        return config
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Failed to load config from {found_path}: {e}")
        return None


# serp_cost_control key -> converter to seconds between calls
_DELAY_CONVERTERS = (
    ('qps', lambda v: 1.0 / v if v > 0 else None),
    ('rpm', lambda v: 60.0 / v if v > 0 else None),
    ('delay_s', float),
    ('backoff_ms', lambda v: v / 1000.0),
)

def _rate_limit_delay(cfg) -> float:
    """Seconds to wait between search API calls

    First of qps / rpm / delay_s / backoff_ms found under
    mention_finder.serp_cost_control wins; one call per second otherwise.
    """
    DEFAULT_DELAY = 1.0

    serp_cost_control = (cfg or {}).get('mention_finder', {}).get('serp_cost_control', {})
    for key, to_seconds in _DELAY_CONVERTERS:
        if key not in serp_cost_control:
            continue
        delay = to_seconds(serp_cost_control[key])
        if delay is None:
            break
        logger.debug(f"[RATE_LIMIT] delay={delay:.2f}s ({key}={serp_cost_control[key]})")
        return delay

    logger.debug(f"[RATE_LIMIT] delay={DEFAULT_DELAY:.2f}s (default)")
    return DEFAULT_DELAY


def resolve_config(cli_args=None, config_path: Optional[str] = None) -> Dict[str, Any]:
    """Single function that returns final config values (CLI > ENV > config > defaults) and logs them"""
    if cli_args is not None and getattr(cli_args, 'config', None):
        config_path = cli_args.config

    base_config = load_config(config_path)

    final_config = copy.deepcopy(DEFAULT_CONFIG)
    if base_config:
        _deep_merge(final_config, base_config)

    finder_config = final_config['mention_finder']

    # ENV overrides
    if os.getenv('BRAND_NAME'):
        finder_config['brand_name'] = os.getenv('BRAND_NAME')
    if os.getenv('BRAND_DOMAIN'):
        finder_config['brand_domain'] = os.getenv('BRAND_DOMAIN')
    if os.getenv('CSE_DAILY_CAP'):
        try:
            finder_config['search']['daily_cap'] = int(os.getenv('CSE_DAILY_CAP'))
        except ValueError:
            logger.warning(f"Ignoring invalid CSE_DAILY_CAP={os.getenv('CSE_DAILY_CAP')!r}")
    if os.getenv('STORE_BACKEND'):
        finder_config['store']['backend'] = os.getenv('STORE_BACKEND')

    # CLI overrides (highest priority)
    if cli_args is not None and getattr(cli_args, 'max_pages', None) is not None:
        if cli_args.max_pages < 0:
            raise ValueError(f"--max-pages must be >= 0, got {cli_args.max_pages}")
        finder_config['search']['pages_per_query'] = cli_args.max_pages
    if cli_args is not None and getattr(cli_args, 'daily_at', None):
        finder_config['schedule']['daily_at'] = cli_args.daily_at

    finder_config['rate_limit_delay'] = _rate_limit_delay(final_config)
    finder_config.pop('serp_cost_control', None)

    logger.info("RESOLVED CONFIG:")
    logger.info(f"  brand: {finder_config['brand_name']} ({finder_config['brand_domain']})")
    logger.info(f"  search.pages_per_query: {finder_config['search']['pages_per_query']}")
    logger.info(f"  search.daily_cap: {finder_config['search']['daily_cap']}")
    logger.info(f"  store.backend: {finder_config['store']['backend']}")
    logger.info(f"  schedule.daily_at: {finder_config['schedule']['daily_at']}")

    return final_config


def _deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    """Deep merge source dict into target dict"""
    for key, value in source.items():
        if key in target and isinstance(target[key], dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
