#!/usr/bin/env python3
"""
Tests for the daily trigger
"""
from unittest.mock import Mock

import schedule

from scripts.mention_finder.scheduler import FinderScheduler, JOB_TAG


class TestFinderScheduler:

    def test_single_daily_job(self):
        scheduler = schedule.Scheduler()
        finder_scheduler = FinderScheduler(scheduler=scheduler, poll_seconds=0)
        job = Mock()

        finder_scheduler.setup_daily_trigger(job, at="02:00")
        finder_scheduler.setup_daily_trigger(job, at="03:30")

        assert len(scheduler.jobs) == 1
        scheduled = scheduler.jobs[0]
        assert JOB_TAG in scheduled.tags
        assert scheduled.unit == 'days'
        assert scheduled.at_time.hour == 3 and scheduled.at_time.minute == 30

    def test_loop_stops_on_interrupt(self):
        scheduler = Mock()
        scheduler.run_pending.side_effect = KeyboardInterrupt
        finder_scheduler = FinderScheduler(scheduler=scheduler, poll_seconds=0)

        finder_scheduler.run_forever()

        assert finder_scheduler.is_running is False
