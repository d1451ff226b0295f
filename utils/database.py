import os
import logging
from typing import List, Dict, Any, Optional
from supabase import create_client, Client
from tenacity import retry, stop_after_attempt, wait_exponential

from utils.tabular_store import TabularStore, StoreError
from utils.state_store import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_TABLE = 'finder_settings'

class SupabaseManager(TabularStore, KeyValueStore):
    """Supabase-backed tabular store: one table per collection plus a key/value settings table"""

    def __init__(self, supabase_url: Optional[str] = None, supabase_key: Optional[str] = None):
        url = supabase_url or os.getenv('SUPABASE_URL')
        key = supabase_key or os.getenv('SUPABASE_KEY')
        if not url or not key:
            raise StoreError("SUPABASE_URL and SUPABASE_KEY are required for the supabase backend")
        self.client: Client = create_client(url, key)

    # =============================================================================
    # ROW METHODS
    # =============================================================================

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
    def append(self, collection: str, record: Dict[str, Any]) -> None:
        """Insert one row into the collection table."""
        try:
            self.client.table(collection).insert(record).execute()
            logger.info(f"Inserted row into {collection}: {record.get('url') or record.get('query', '')}")
        except Exception as e:
            logger.error(f"Error inserting into {collection}: {e}")
            raise StoreError(f"Error inserting into {collection}: {e}") from e

    def _rows_with_ids(self, collection: str) -> List[Dict[str, Any]]:
        try:
            result = self.client.table(collection)\
                .select('*')\
                .order('id')\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error reading {collection}: {e}")
            raise StoreError(f"Error reading {collection}: {e}")

    def read_all(self, collection: str) -> List[Dict[str, Any]]:
        """Full scan of a collection in insertion order, without the id column."""
        return [{k: v for k, v in row.items() if k != 'id'} for row in self._rows_with_ids(collection)]

    def _row_id(self, collection: str, index: int) -> Any:
        rows = self._rows_with_ids(collection)
        if index < 0 or index >= len(rows):
            raise StoreError(f"Row {index} out of range for {collection} ({len(rows)} rows)")
        return rows[index]['id']

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
    def delete_row(self, collection: str, index: int) -> None:
        """Delete the row at the given position."""
        row_id = self._row_id(collection, index)
        try:
            self.client.table(collection).delete().eq('id', row_id).execute()
        except Exception as e:
            logger.error(f"Error deleting row {row_id} from {collection}: {e}")
            raise StoreError(f"Error deleting row {row_id} from {collection}: {e}") from e

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
    def update_row(self, collection: str, index: int, record: Dict[str, Any]) -> None:
        """Replace the fields of the row at the given position."""
        row_id = self._row_id(collection, index)
        try:
            self.client.table(collection).update(record).eq('id', row_id).execute()
        except Exception as e:
            logger.error(f"Error updating row {row_id} in {collection}: {e}")
            raise StoreError(f"Error updating row {row_id} in {collection}: {e}") from e

    # =============================================================================
    # SCALAR / KEY-VALUE METHODS
    # =============================================================================

    def read_scalar(self, key: str, default: Any = None) -> Any:
        try:
            result = self.client.table(SETTINGS_TABLE)\
                .select('value')\
                .eq('key', key)\
                .execute()
            return result.data[0]['value'] if result.data else default
        except Exception as e:
            logger.error(f"Error reading setting {key}: {e}")
            return default

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
    def write_scalar(self, key: str, value: Any) -> None:
        try:
            self.client.table(SETTINGS_TABLE).upsert(
                {'key': key, 'value': value},
                on_conflict='key'
            ).execute()
        except Exception as e:
            logger.error(f"Error writing setting {key}: {e}")
            raise StoreError(f"Error writing setting {key}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self.read_scalar(key, default)

    def set(self, key: str, value: Any) -> None:
        self.write_scalar(key, value)
