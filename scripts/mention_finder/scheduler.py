#!/usr/bin/env python3
"""
Daily trigger for the Unlinked Mention Finder
"""
import time
import logging
from typing import Callable, Optional

import schedule

logger = logging.getLogger(__name__)

JOB_TAG = 'mention-finder'

class FinderScheduler:
    """Runs the finder once a day at a fixed time"""

    def __init__(self, scheduler: Optional[schedule.Scheduler] = None, poll_seconds: int = 60):
        self.scheduler = scheduler or schedule.Scheduler()
        self.poll_seconds = poll_seconds
        self.is_running = False

    def setup_daily_trigger(self, job: Callable, at: str = "02:00") -> schedule.Job:
        """Replace any existing finder job with a single daily one"""
        self.scheduler.clear(JOB_TAG)
        scheduled = self.scheduler.every().day.at(at).do(job).tag(JOB_TAG)
        logger.info(f"Daily trigger set up for {at} (next run {scheduled.next_run})")
        return scheduled

    def run_forever(self):
        logger.info("Starting scheduler loop...")
        self.is_running = True

        while self.is_running:
            try:
                self.scheduler.run_pending()
                time.sleep(self.poll_seconds)
            except KeyboardInterrupt:
                logger.info("Received interrupt signal")
                self.is_running = False
            except Exception as e:
                logger.error(f"Scheduler loop error: {e}")
                time.sleep(self.poll_seconds)

    def stop(self):
        self.is_running = False
