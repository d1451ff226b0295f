#!/usr/bin/env python3
"""
Tests for the paged CSE client
"""
from unittest.mock import Mock, patch

import pytest
import requests

from scripts.mention_finder.cse_client import CSESearcher, CSE_ENDPOINT


def _response(status_code=200, payload=None, headers=None, text=''):
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    response.json.return_value = payload if payload is not None else {}
    return response


class TestCSESearcher:

    def setup_method(self):
        self.session = Mock()
        self.quota = Mock()
        self.quota.remaining.return_value = 50
        self.searcher = CSESearcher('key-123', 'cx-456', quota=self.quota, session=self.session,
                                    min_interval=0, daily_cap=100)

    def test_request_parameters(self):
        self.session.get.return_value = _response(payload={'items': [{'link': 'https://a.com/1'}]})
        self.searcher.fetch_page('Myntra reviews', 11)

        args, kwargs = self.session.get.call_args
        assert args[0] == CSE_ENDPOINT
        assert kwargs['params'] == {'key': 'key-123', 'cx': 'cx-456', 'q': 'Myntra reviews', 'num': 10, 'start': 11}

    def test_items_returned_and_quota_recorded(self):
        self.session.get.return_value = _response(payload={'items': [
            {'link': 'https://a.com/1', 'title': 'A', 'displayLink': 'a.com', 'snippet': 's'},
            {'title': 'no link'},
            {'link': 'https://b.com/2'},
        ]})
        items = self.searcher.fetch_page('Myntra reviews', 1)

        assert [item.url for item in items] == ['https://a.com/1', 'https://b.com/2']
        assert items[0].display_link == 'a.com'
        self.quota.record_call.assert_called_once()

    def test_missing_items_is_empty_page(self):
        self.session.get.return_value = _response(payload={'searchInformation': {'totalResults': '0'}})
        assert self.searcher.fetch_page('Myntra reviews', 21) == []
        self.quota.record_call.assert_called_once()

    def test_client_error_returns_none_without_quota(self):
        self.session.get.return_value = _response(status_code=403, text='forbidden')
        assert self.searcher.fetch_page('Myntra reviews', 1) is None
        assert self.session.get.call_count == 1
        self.quota.record_call.assert_not_called()

    @patch('scripts.mention_finder.cse_client.time.sleep')
    def test_server_errors_retried_then_give_up(self, mock_sleep):
        self.session.get.return_value = _response(status_code=503)
        assert self.searcher.fetch_page('Myntra reviews', 1) is None
        assert self.session.get.call_count == 3

    @patch('scripts.mention_finder.cse_client.time.sleep')
    def test_rate_limit_then_success(self, mock_sleep):
        self.session.get.side_effect = [
            _response(status_code=429, headers={'Retry-After': '2'}),
            _response(payload={'items': [{'link': 'https://a.com/1'}]}),
        ]
        items = self.searcher.fetch_page('Myntra reviews', 1)
        assert len(items) == 1
        assert self.searcher.error_429_count == 1
        mock_sleep.assert_any_call(2.0)

    def test_transport_error_returns_none(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError('down')
        assert self.searcher.fetch_page('Myntra reviews', 1) is None

    def test_unparseable_body_returns_none(self):
        response = _response()
        response.json.side_effect = ValueError('not json')
        self.session.get.return_value = response
        assert self.searcher.fetch_page('Myntra reviews', 1) is None

    def test_missing_credentials(self):
        searcher = CSESearcher(None, 'cx', session=self.session, min_interval=0)
        assert searcher.fetch_page('Myntra reviews', 1) is None
        self.session.get.assert_not_called()

    def test_daily_cap_reached(self):
        self.quota.remaining.return_value = 0
        assert self.searcher.fetch_page('Myntra reviews', 1) is None
        self.session.get.assert_not_called()

    def test_argument_validation(self):
        with pytest.raises(ValueError):
            self.searcher.fetch_page('Myntra reviews', 0)
        with pytest.raises(ValueError):
            self.searcher.fetch_page('  ', 1)
