from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from lcu_client import LCUNotFound


# ---- fetch outcomes ----
@dataclass(frozen=True)
class Snapshot:
    data: Dict[str, Any]


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class TransientError:
    cause: BaseException


FetchOutcome = Union[Snapshot, NotFound, TransientError]


class SessionPoller:
    """
    Owns the recurring champ select session fetch.

    - one worker thread per instance; start() while running is a no-op
    - ticks never overlap: a tick that would start while the previous one is
      still running is skipped, not queued
    - stop() is idempotent; once it returns no new tick starts (a tick that
      already started may finish)
    """

    def __init__(self, context, on_outcome: Optional[Callable[[FetchOutcome], Any]] = None):
        self.context = context
        self.on_outcome = on_outcome
        self.interval: Optional[float] = None
        self.skipped_ticks = 0

        self._state_lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_evt: Optional[threading.Event] = None

    @property
    def running(self) -> bool:
        with self._state_lock:
            return self._thread is not None

    def fetch_once(self) -> FetchOutcome:
        try:
            data = self.context.lcu.get_champ_select_session()
        except LCUNotFound:
            return NotFound()
        except Exception as e:
            return TransientError(e)
        return Snapshot(data)

    def tick(self) -> Optional[FetchOutcome]:
        """One fetch-and-dispatch cycle. Returns None when skipped (another tick in flight)."""
        return self._tick(None)

    def _tick(self, stop_evt: Optional[threading.Event]) -> Optional[FetchOutcome]:
        if not self._tick_lock.acquire(blocking=False):
            self.skipped_ticks += 1
            self.context.logger.debug("poller", "tick skipped: previous tick still running")
            return None
        try:
            # stop() may have landed while this tick waited for the lock
            if stop_evt is not None:
                with self._state_lock:
                    if stop_evt.is_set():
                        return None
            outcome = self.fetch_once()
            if self.on_outcome is not None:
                try:
                    self.on_outcome(outcome)
                except Exception as e:
                    self.context.errors.report("poller", e)
            return outcome
        finally:
            self._tick_lock.release()

    def start(self, interval: float) -> bool:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")

        with self._state_lock:
            if self._thread is not None:
                return False
            self.interval = float(interval)
            stop_evt = threading.Event()
            t = threading.Thread(
                target=self._run,
                args=(stop_evt, float(interval)),
                name="champ-select-poller",
                daemon=True,
            )
            self._stop_evt = stop_evt
            self._thread = t
        t.start()
        self.context.logger.debug("poller", f"started (interval={interval:.2f}s)")
        return True

    def stop(self, wait: bool = False, timeout: float | None = None):
        with self._state_lock:
            t = self._thread
            evt = self._stop_evt
            self._thread = None
            self._stop_evt = None
            if evt is not None:
                evt.set()

        if t is None:
            return
        self.context.logger.debug("poller", "stopped")
        if wait and t is not threading.current_thread():
            t.join(timeout)

    def _run(self, stop_evt: threading.Event, interval: float):
        next_due = time.monotonic()
        while not stop_evt.is_set():
            self._tick(stop_evt)

            next_due += interval
            now = time.monotonic()
            if now > next_due:
                # overran one or more intervals: drop them instead of catching up
                missed = int((now - next_due) // interval) + 1
                self.skipped_ticks += missed
                next_due += missed * interval
                self.context.logger.debug("poller", f"tick overran, skipped {missed}")

            if stop_evt.wait(max(0.0, next_due - now)):
                break
