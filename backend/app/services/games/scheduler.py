import logging
import threading
import time
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)


def start_daemon_task(target, *args):
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread


class RoundTimer:
    """Deferred players-selecting timeout, one pending task per round number.

    - ``schedule`` launches a background worker through ``start_background_task``
      (Socket.IO's in the app, a daemon thread otherwise)
    - A round is scheduled at most once while pending
    - ``cancel`` drops the round key; a worker that wakes up for a dropped key
      aborts instead of firing
    - Disabled timers log and do nothing (used by tests of the transport)
    """

    def __init__(
        self,
        duration: float,
        on_fire: Callable[[int], None],
        start_background_task: Optional[Callable] = None,
        sleep: Callable[[float], None] = time.sleep,
        heartbeat_sec: int = 0,
        enabled: bool = True,
        party_code: str = '',
    ):
        self.duration = duration
        self.on_fire = on_fire
        self.start_background_task = start_background_task or start_daemon_task
        self.sleep = sleep
        self.heartbeat_sec = heartbeat_sec
        self.enabled = enabled
        self.party_code = party_code
        self._pending: Set[int] = set()
        self._lock = threading.Lock()

    def is_pending(self, round_num: int) -> bool:
        with self._lock:
            return round_num in self._pending

    def schedule(self, round_num: int) -> bool:
        if not self.enabled:
            logger.info(f"[timer-disabled] party={self.party_code} round={round_num}")
            return False
        with self._lock:
            if round_num in self._pending:
                logger.info(f"[timer-skip] party={self.party_code} round={round_num} already scheduled")
                return False
            self._pending.add(round_num)
        logger.info(f"[timer-set] party={self.party_code} round={round_num} duration={self.duration}s")
        self.start_background_task(self._worker, round_num, self.duration)
        return True

    def cancel(self, round_num: int) -> bool:
        with self._lock:
            if round_num not in self._pending:
                return False
            self._pending.discard(round_num)
        logger.info(f"[timer-cancel] party={self.party_code} round={round_num}")
        return True

    def _worker(self, round_num: int, delay: float):
        if self.heartbeat_sec and self.heartbeat_sec > 0:
            slept = 0
            while slept < delay:
                step = min(self.heartbeat_sec, delay - slept)
                self.sleep(step)
                slept += step
                if not self.is_pending(round_num):
                    break
                logger.info(
                    f"[timer-heartbeat] party={self.party_code} round={round_num} remaining={max(0, delay - slept)}s"
                )
        else:
            self.sleep(delay)

        with self._lock:
            if round_num not in self._pending:
                logger.info(f"[timer-abort] party={self.party_code} round={round_num} cancelled before firing")
                return
            self._pending.discard(round_num)
        logger.info(f"[timer-fire] party={self.party_code} round={round_num}")
        self.on_fire(round_num)
