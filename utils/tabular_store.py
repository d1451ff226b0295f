#!/usr/bin/env python3
"""
Tabular Store - generic row store used by the mention finder
Collections of records with append/read/delete-row plus single-cell scalars
"""
import os
import json
import tempfile
import logging
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

SCALARS_FILE = "scalars.json"

class StoreError(Exception):
    """Base store error"""
    pass

class TabularStore:
    """Interface exposed to the core: collections of rows and single-cell scalars"""

    def append(self, collection: str, record: Dict[str, Any]) -> None:
        raise NotImplementedError

    def read_all(self, collection: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def delete_row(self, collection: str, index: int) -> None:
        raise NotImplementedError

    def update_row(self, collection: str, index: int, record: Dict[str, Any]) -> None:
        raise NotImplementedError

    def read_scalar(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def write_scalar(self, key: str, value: Any) -> None:
        raise NotImplementedError


def _atomic_write_json(path: str, payload: Any) -> None:
    """Write JSON to a temp file in the same directory, then replace"""
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(payload, f, ensure_ascii=False, indent=2, default=str)
        os.replace(tmp_path, path)
    except Exception:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


class JSONTabularStore(TabularStore):
    """File-backed store: one JSON array per collection plus a scalars file"""

    def __init__(self, data_dir: str = "data"):
        self.data_dir = data_dir
        self.ensure_data_dir()

    def ensure_data_dir(self):
        """Create data directory if it doesn't exist"""
        if not os.path.exists(self.data_dir):
            os.makedirs(self.data_dir)

    def _collection_file(self, collection: str) -> str:
        return os.path.join(self.data_dir, f"{collection}.json")

    def _load(self, path: str, empty: Any) -> Any:
        if not os.path.exists(path):
            return empty
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise StoreError(f"Corrupted store file {path}: {e}")

    def _save(self, path: str, payload: Any) -> None:
        try:
            _atomic_write_json(path, payload)
        except (IOError, OSError, TypeError) as e:
            raise StoreError(f"Failed to write store file {path}: {e}")

    def append(self, collection: str, record: Dict[str, Any]) -> None:
        path = self._collection_file(collection)
        rows = self._load(path, [])
        rows.append(dict(record))
        self._save(path, rows)
        logger.debug(f"Appended row to {collection} ({len(rows)} rows)")

    def read_all(self, collection: str) -> List[Dict[str, Any]]:
        return self._load(self._collection_file(collection), [])

    def delete_row(self, collection: str, index: int) -> None:
        path = self._collection_file(collection)
        rows = self._load(path, [])
        if index < 0 or index >= len(rows):
            raise StoreError(f"Row {index} out of range for {collection} ({len(rows)} rows)")
        del rows[index]
        self._save(path, rows)

    def update_row(self, collection: str, index: int, record: Dict[str, Any]) -> None:
        path = self._collection_file(collection)
        rows = self._load(path, [])
        if index < 0 or index >= len(rows):
            raise StoreError(f"Row {index} out of range for {collection} ({len(rows)} rows)")
        rows[index] = dict(record)
        self._save(path, rows)

    def read_scalar(self, key: str, default: Any = None) -> Any:
        scalars = self._load(os.path.join(self.data_dir, SCALARS_FILE), {})
        return scalars.get(key, default)

    def write_scalar(self, key: str, value: Any) -> None:
        path = os.path.join(self.data_dir, SCALARS_FILE)
        scalars = self._load(path, {})
        scalars[key] = value
        self._save(path, scalars)


def create_store(backend: str = "json", data_dir: str = "data",
                 supabase_url: Optional[str] = None, supabase_key: Optional[str] = None) -> TabularStore:
    """Build the configured tabular store"""
    if backend == "json":
        return JSONTabularStore(data_dir)
    if backend == "supabase":
        from utils.database import SupabaseManager
        return SupabaseManager(supabase_url, supabase_key)
    raise StoreError(f"Unknown store backend: {backend}")
