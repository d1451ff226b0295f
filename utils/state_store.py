#!/usr/bin/env python3
"""
Key/value persistence for small durable state that survives across runs
"""
import os
import json
import logging
from typing import Any, Dict

from utils.tabular_store import StoreError, _atomic_write_json

logger = logging.getLogger(__name__)

class KeyValueStore:
    """get/set interface for durable state"""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class JSONKeyValueStore(KeyValueStore):
    """Single JSON object on disk, re-read on every access"""

    def __init__(self, path: str = "data/state.json"):
        self.path = path
        directory = os.path.dirname(path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Corrupted state file {self.path}: {e}")
            return {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        state = self._read()
        state[key] = value
        try:
            _atomic_write_json(self.path, state)
        except (IOError, OSError) as e:
            raise StoreError(f"Failed to persist {key} to {self.path}: {e}")
