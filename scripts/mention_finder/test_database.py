#!/usr/bin/env python3
"""
Tests for the Supabase store adapter
"""
from unittest.mock import Mock, patch

import pytest
from tenacity import wait_none

from scripts.mention_finder.exceptions import StoreError
from utils.database import SupabaseManager


class TestSupabaseManager:

    @pytest.fixture(autouse=True)
    def setup_manager(self):
        with patch('utils.database.create_client') as mock_create_client:
            self.client = Mock()
            mock_create_client.return_value = self.client
            self.table = self.client.table.return_value
            self.manager = SupabaseManager('https://project.supabase.co', 'service-key')
            yield

    def test_rows_and_settings(self):
        self.table.select.return_value.order.return_value.execute.return_value = Mock(
            data=[{'id': 7, 'url': 'https://a.com/1'}, {'id': 9, 'url': 'https://b.com/2'}]
        )

        assert self.manager.read_all('results') == [{'url': 'https://a.com/1'}, {'url': 'https://b.com/2'}]

        self.manager.delete_row('results', 1)
        self.table.delete.return_value.eq.assert_called_with('id', 9)

        self.manager.set('DAILY_QUERY_COUNT', 3)
        self.table.upsert.assert_called_with({'key': 'DAILY_QUERY_COUNT', 'value': 3}, on_conflict='key')

    def test_append_failure_raises_store_error_after_retries(self):
        self.table.insert.return_value.execute.side_effect = ConnectionError("connection reset")
        append = SupabaseManager.append.retry_with(wait=wait_none())

        with pytest.raises(StoreError, match="Error inserting into results"):
            append(self.manager, 'results', {'url': 'https://a.com/1'})

        assert self.table.insert.return_value.execute.call_count == 3

    def test_write_scalar_failure_raises_store_error(self):
        self.table.upsert.return_value.execute.side_effect = RuntimeError("boom")
        write_scalar = SupabaseManager.write_scalar.retry_with(wait=wait_none())

        with pytest.raises(StoreError):
            write_scalar(self.manager, 'status', 'Running...')

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv('SUPABASE_URL', raising=False)
        monkeypatch.delenv('SUPABASE_KEY', raising=False)
        with pytest.raises(StoreError):
            SupabaseManager()
