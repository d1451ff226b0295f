#!/usr/bin/env python3
"""
Archiver for the Unlinked Mention Finder
Moves reviewed opportunities from the active collection to the archive
"""
import logging
from typing import Dict, Any

from .exceptions import StoreError
from .models import STATUS_NEW

logger = logging.getLogger(__name__)


def _find_row(store, collection: str, url: str) -> int:
    for index, row in enumerate(store.read_all(collection)):
        if row.get('url') == url:
            return index
    return -1


def on_status_change(record: Dict[str, Any], old_status: str, new_status: str,
                     store, active_collection: str = 'results',
                     archive_collection: str = 'archive') -> bool:
    """
    Archive an opportunity whose status was changed away from "New".

    Appends to the archive first, then deletes from the active collection.
    Returns True when the record moved.
    """
    if old_status != STATUS_NEW or new_status == old_status:
        return False

    url = record.get('url')
    try:
        index = _find_row(store, active_collection, url)
        if index < 0:
            logger.warning(f"Opportunity not found in {active_collection}: {url}")
            return False

        archived = dict(record)
        archived['status'] = new_status
        store.append(archive_collection, archived)
        store.delete_row(active_collection, index)
    except Exception as e:
        logger.error(f"Error archiving {url}: {e}")
        raise StoreError(f"Error archiving {url}: {e}") from e

    logger.info(f"Moved opportunity to {archive_collection}: {url} ({new_status})")
    return True


def archive_reviewed(store, active_collection: str = 'results',
                     archive_collection: str = 'archive') -> int:
    """Move every active row whose status is no longer "New"; returns the count"""
    rows = store.read_all(active_collection)
    reviewed = [i for i, row in enumerate(rows) if (row.get('status') or STATUS_NEW) != STATUS_NEW]

    try:
        for index in reviewed:
            store.append(archive_collection, dict(rows[index]))
        # Delete from the bottom up so earlier indices stay valid
        for index in reversed(reviewed):
            store.delete_row(active_collection, index)
    except Exception as e:
        logger.error(f"Error archiving reviewed opportunities: {e}")
        raise StoreError(f"Error archiving reviewed opportunities: {e}") from e

    logger.info(f"Archived {len(reviewed)} reviewed opportunities")
    return len(reviewed)
