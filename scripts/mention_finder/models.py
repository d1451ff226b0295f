#!/usr/bin/env python3
"""
Record types for the Unlinked Mention Finder
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, Any, Optional

STATUS_NEW = 'New'

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _parse_ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None

@dataclass
class Query:
    """One operator-maintained search query"""
    text: str
    last_checked_at: Optional[datetime] = None
    row: Optional[int] = field(default=None, compare=False)  # position in the queries collection

    @classmethod
    def from_record(cls, record: Dict[str, Any], row: Optional[int] = None) -> 'Query':
        return cls(
            text=str(record.get('query') or '').strip(),
            last_checked_at=_parse_ts(record.get('last_checked_at')),
            row=row,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            'query': self.text,
            'last_checked_at': self.last_checked_at.isoformat() if self.last_checked_at else None,
        }

@dataclass
class SearchResultItem:
    """Search result as returned by the CSE API (only url is required)"""
    url: str
    title: str = ''
    display_link: str = ''
    snippet: str = ''

@dataclass
class Opportunity:
    """Page that mentions the brand without linking to it"""
    url: str
    context_snippet: str
    discovered_at: datetime = field(default_factory=utcnow)
    status: str = STATUS_NEW

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Opportunity':
        return cls(
            url=record['url'],
            context_snippet=record.get('context_snippet', ''),
            discovered_at=_parse_ts(record.get('discovered_at')) or utcnow(),
            status=record.get('status') or STATUS_NEW,
        )

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        record['discovered_at'] = self.discovered_at.isoformat()
        return record
