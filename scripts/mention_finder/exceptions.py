"""
Custom exceptions for the Unlinked Mention Finder
"""
from utils.tabular_store import StoreError

__all__ = [
    "MentionFinderError",
    "ConfigurationError",
    "TransportError",
    "ParseError",
    "FatalRunError",
    "StoreError",
]


class MentionFinderError(Exception):
    """Base exception for mention finder errors"""
    pass

class ConfigurationError(MentionFinderError):
    """Missing credentials or invalid configuration - halts before any call"""
    pass

class TransportError(MentionFinderError):
    """Network or API failure for one page or URL"""
    pass

class ParseError(MentionFinderError):
    """Malformed URL or unparseable response"""
    pass

class FatalRunError(MentionFinderError):
    """Uncaught failure that aborted the remaining run"""
    pass
