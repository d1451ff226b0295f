#!/usr/bin/env python3
"""
Tests for mention/link detection, snippet extraction and classification
"""
from unittest.mock import Mock

import requests

from scripts.mention_finder.content_fetcher import ContentFetcher
from scripts.mention_finder.matching import (
    MentionClassifier, analyze_content, extract_context_snippet, has_brand_link, is_mentioned
)
from scripts.mention_finder.models import STATUS_NEW

BRAND = 'Myntra'
DOMAIN = 'myntra.com'


class TestDetection:

    def test_mention_is_case_insensitive(self):
        assert is_mentioned('Shop at MYNTRA today', BRAND)
        assert not is_mentioned('Shop at Amazon today', BRAND)

    def test_link_variants(self):
        for html in [
            "<a href='https://www.myntra.com'>Myntra</a>",
            '<a href="http://myntra.com/men">x</a>',
            '<a HREF = "//nope">x</a><a href="MYNTRA.COM/sale">x</a>',
            "<a href='www.myntra.com'>x</a>",
        ]:
            assert has_brand_link(html, DOMAIN), html

    def test_dot_is_literal(self):
        assert not has_brand_link('<a href="https://myntraxcom.net">x</a>', DOMAIN)

    def test_plain_text_domain_is_not_a_link(self):
        assert not has_brand_link('Visit myntra.com for deals', DOMAIN)

    def test_unlinked_mention_gives_snippet(self):
        assert analyze_content('Shop at MYNTRA today', BRAND, DOMAIN) == '...Shop at MYNTRA today...'

    def test_linked_mention_gives_nothing(self):
        assert analyze_content("<a href='https://www.myntra.com'>Myntra</a>", BRAND, DOMAIN) is None

    def test_no_mention_gives_nothing(self):
        assert analyze_content('<p>nothing here</p>', BRAND, DOMAIN) is None
        assert analyze_content('', BRAND, DOMAIN) is None


class TestSnippet:

    def test_window_is_bounded(self):
        content = 'a' * 500 + 'Myntra' + 'b' * 500
        snippet = extract_context_snippet(content, BRAND)
        assert snippet.startswith('...') and snippet.endswith('...')
        body = snippet[3:-3]
        assert len(body) == 150
        assert body == 'a' * 75 + 'Myntra' + 'b' * 69

    def test_window_clamped_to_content(self):
        assert extract_context_snippet('Myntra', BRAND) == '...Myntra...'

    def test_tags_stripped_and_whitespace_collapsed(self):
        content = '<div>\n  <p>Best   deals on <b>myntra</b>\t\tthis week</p></div>'
        assert extract_context_snippet(content, BRAND) == '...Best deals on myntra this week...'

    def test_first_occurrence_used(self):
        content = 'x' * 200 + 'Myntra first' + 'y' * 200 + 'Myntra second'
        assert 'first' in extract_context_snippet(content, BRAND)

    def test_idempotent(self):
        content = '<p>Love <i>Myntra</i> sales</p>' * 20
        assert extract_context_snippet(content, BRAND) == extract_context_snippet(content, BRAND)


class TestMentionClassifier:

    def setup_method(self):
        self.fetcher = Mock()
        self.classifier = MentionClassifier(BRAND, DOMAIN, self.fetcher)

    def test_positive_classification(self):
        self.fetcher.fetch_html.return_value = '<p>I love shopping on Myntra.</p>'
        opportunity = self.classifier.classify('https://bar.com/b')
        assert opportunity is not None
        assert opportunity.url == 'https://bar.com/b'
        assert opportunity.status == STATUS_NEW
        assert opportunity.context_snippet == '...I love shopping on Myntra....'

    def test_linked_page(self):
        self.fetcher.fetch_html.return_value = '<a href="https://myntra.com">Myntra</a>'
        assert self.classifier.classify('https://bar.com/b') is None

    def test_fetch_failure_is_swallowed(self):
        self.fetcher.fetch_html.side_effect = RuntimeError('boom')
        assert self.classifier.classify('https://bar.com/b') is None

    def test_non_200(self):
        self.fetcher.fetch_html.return_value = None
        assert self.classifier.classify('https://bar.com/b') is None


class TestContentFetcher:

    def setup_method(self):
        self.session = Mock()
        self.fetcher = ContentFetcher(self.session, user_agent='TestBot/1.0', timeout_s=5)

    def test_sends_user_agent(self):
        self.session.get.return_value = Mock(status_code=200, text='<html>ok</html>')
        assert self.fetcher.fetch_html('https://bar.com/b') == '<html>ok</html>'
        _, kwargs = self.session.get.call_args
        assert kwargs['headers']['User-Agent'] == 'TestBot/1.0'
        assert kwargs['timeout'] == 5

    def test_non_200_returns_none(self):
        self.session.get.return_value = Mock(status_code=403, text='Forbidden')
        assert self.fetcher.fetch_html('https://bar.com/b') is None

    def test_transport_error_caught_by_classifier(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError('refused')
        classifier = MentionClassifier(BRAND, DOMAIN, self.fetcher)
        assert classifier.classify('https://bar.com/b') is None
