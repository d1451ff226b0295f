#!/usr/bin/env python3
"""
Domain utilities for the Unlinked Mention Finder
Handles hostname extraction and exclusion list parsing
"""
import re
from typing import Iterable, Optional, Set, Union

# Pre-compiled regex patterns for hostname extraction
RE_AUTHORITY = re.compile(r'://([^/?#]*)')
RE_USERINFO = re.compile(r'^[^@]*@')
RE_PORT = re.compile(r':\d*$')

def _clean_host(host: str) -> str:
    host = RE_USERINFO.sub('', host.strip())
    host = RE_PORT.sub('', host)
    host = host.strip().lower()
    if host.startswith('www.'):
        host = host[4:]
    return host

def hostname_of(url: str) -> Optional[str]:
    """
    Return the lowercased hostname of a URL without a leading 'www.'.
    Strategy:
      - Take the authority after '://' (up to the next '/', '?' or '#')
      - Without a scheme separator, fall back to the part before the first '/'
      - Drop userinfo and port, lowercase, strip leading 'www.'
      - Return None when nothing usable remains
    """
    if not url or not isinstance(url, str):
        return None

    url = url.strip()
    match = RE_AUTHORITY.search(url)
    if match:
        host = match.group(1)
    elif '://' in url:
        return None
    else:
        host = url.split('/')[0]

    host = _clean_host(host)
    return host or None

def parse_exclusion_list(raw: Union[str, Iterable[str], None]) -> Set[str]:
    """Comma-separated (or iterable) domains -> set of trimmed lowercase domains"""
    if not raw:
        return set()
    parts = raw.split(',') if isinstance(raw, str) else raw
    domains = set()
    for part in parts:
        domain = str(part).strip().lower()
        if domain.startswith('www.'):
            domain = domain[4:]
        if domain:
            domains.add(domain)
    return domains
