#!/usr/bin/env python3
"""
Tests for the daily search quota counter
"""
from unittest.mock import Mock

from utils.api_usage import QuotaTracker, DATE_KEY, COUNT_KEY, COUNTER_SCALAR
from utils.state_store import JSONKeyValueStore


class FakeClock:

    def __init__(self, day):
        self.day = day

    def __call__(self):
        return self.day


class TestQuotaTracker:

    def setup_method(self):
        self.clock = FakeClock('2026-10-19')
        self.presentation = Mock()

    def _tracker(self, state):
        return QuotaTracker(state, presentation=self.presentation, daily_cap=3, clock=self.clock)

    def test_counts_within_a_day_then_resets(self, tmp_path):
        tracker = self._tracker(JSONKeyValueStore(str(tmp_path / 'state.json')))

        assert [tracker.record_call() for _ in range(3)] == [1, 2, 3]
        self.clock.day = '2026-10-20'
        assert tracker.record_call() == 1

    def test_persists_across_instances(self, tmp_path):
        path = str(tmp_path / 'state.json')
        self._tracker(JSONKeyValueStore(path)).record_call()
        self._tracker(JSONKeyValueStore(path)).record_call()

        state = JSONKeyValueStore(path)
        assert state.get(DATE_KEY) == '2026-10-19'
        assert state.get(COUNT_KEY) == 2

    def test_stale_count_from_previous_day(self, tmp_path):
        state = JSONKeyValueStore(str(tmp_path / 'state.json'))
        state.set(DATE_KEY, '2026-10-18')
        state.set(COUNT_KEY, 97)
        tracker = self._tracker(state)

        assert tracker.current_count() == 0
        assert tracker.remaining() == 3
        assert tracker.record_call() == 1

    def test_updates_visible_counter(self, tmp_path):
        tracker = self._tracker(JSONKeyValueStore(str(tmp_path / 'state.json')))
        tracker.record_call()
        tracker.record_call()
        self.presentation.write_scalar.assert_called_with(COUNTER_SCALAR, 2)

    def test_persist_failure_is_not_fatal(self):
        state = Mock()
        state.get.return_value = None
        state.set.side_effect = IOError('disk full')
        self.presentation.write_scalar.side_effect = RuntimeError('sheet gone')

        assert self._tracker(state).record_call() == 1

    def test_remaining(self, tmp_path):
        tracker = self._tracker(JSONKeyValueStore(str(tmp_path / 'state.json')))
        for _ in range(3):
            tracker.record_call()
        assert tracker.remaining() == 0
        assert tracker.remaining(cap=10) == 7
