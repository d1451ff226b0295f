import os
import datetime
import logging
from typing import Callable, Optional

from utils.state_store import KeyValueStore

logger = logging.getLogger(__name__)

API_TYPE = "cse"
DATE_KEY = "LAST_QUERY_DATE"
COUNT_KEY = "DAILY_QUERY_COUNT"
COUNTER_SCALAR = "queries_today"

def today_utc() -> str:
    return datetime.datetime.now(datetime.timezone.utc).date().isoformat()

def get_caps() -> int:
    cap = int(os.getenv("CSE_DAILY_CAP", "100"))
    return cap


class QuotaTracker:
    """
    Per-day counter of search API calls, persisted across runs.

    The stored date is re-read on every call so a long run that crosses
    midnight starts the new day at 1.
    """

    def __init__(self, state: KeyValueStore, presentation=None,
                 daily_cap: Optional[int] = None, clock: Callable[[], str] = today_utc):
        self.state = state
        self.presentation = presentation
        self.daily_cap = daily_cap if daily_cap is not None else get_caps()
        self.clock = clock

    def current_count(self) -> int:
        """Today's count without incrementing (0 on a new day)"""
        try:
            if self.state.get(DATE_KEY) != self.clock():
                return 0
            return int(self.state.get(COUNT_KEY) or 0)
        except Exception as e:
            logger.error(f"Failed to read {API_TYPE} usage: {e}")
            return 0

    def remaining(self, cap: Optional[int] = None) -> int:
        cap = self.daily_cap if cap is None else cap
        return max(0, cap - self.current_count())

    def record_call(self) -> int:
        """Increment today's counter and return the new value"""
        today = self.clock()
        count = 1
        try:
            if self.state.get(DATE_KEY) == today:
                count = int(self.state.get(COUNT_KEY) or 0) + 1
        except (TypeError, ValueError) as e:
            logger.warning(f"Stale {API_TYPE} usage counter ignored: {e}")
        except Exception as e:
            logger.error(f"Failed to read {API_TYPE} usage: {e}")

        try:
            self.state.set(DATE_KEY, today)
            self.state.set(COUNT_KEY, count)
        except Exception as e:
            logger.error(f"Failed to persist {API_TYPE} usage ({today}={count}): {e}")

        if self.presentation is not None:
            try:
                self.presentation.write_scalar(COUNTER_SCALAR, count)
            except Exception as e:
                logger.error(f"Failed to update {COUNTER_SCALAR} counter: {e}")

        logger.debug(f"{API_TYPE} usage {today}: {count}/{self.daily_cap}")
        return count
