# tee_log.py
from __future__ import annotations

import sys
import threading
import time
from collections import Counter
from pathlib import Path
from typing import Optional


class TeeLogger:
    """
    console + log file at the same time.
    line format: [HH:MM:SS] [TAG] message
    """

    def __init__(self, log_path: Path | str | None = None, verbose: bool = False):
        self.log_path = Path(log_path) if log_path else None
        self.verbose = verbose
        self._lock = threading.Lock()
        self.f = None
        if self.log_path is not None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self.f = self.log_path.open("a", encoding="utf-8", errors="replace")

    def close(self):
        with self._lock:
            if self.f is None:
                return
            try:
                self.f.close()
            except OSError:
                pass
            self.f = None

    def write_line(self, s: str, stream=None):
        if not s.endswith("\n"):
            s += "\n"
        out = stream or sys.stdout
        with self._lock:
            out.write(s)
            out.flush()
            if self.f is not None:
                self.f.write(s)
                self.f.flush()

    def _fmt(self, tag: str, msg: str) -> str:
        return f"[{time.strftime('%H:%M:%S')}] [{tag}] {msg}"

    def info(self, tag: str, msg: str):
        self.write_line(self._fmt(tag, msg))

    def debug(self, tag: str, msg: str):
        if self.verbose:
            self.write_line(self._fmt(tag, msg))

    def error(self, tag: str, msg: str):
        self.write_line(self._fmt(tag, msg), stream=sys.stderr)


class ErrorSink:
    """Collects errors raised on the tick path. report() never raises."""

    def __init__(self, logger: TeeLogger):
        self.logger = logger
        self.counts: Counter[str] = Counter()
        self.last_error: Optional[BaseException] = None
        self.last_tag: Optional[str] = None

    def report(self, tag: str, err: BaseException):
        self.counts[tag] += 1
        self.last_error = err
        self.last_tag = tag
        try:
            self.logger.error(tag, f"{type(err).__name__}: {err}")
        except Exception:
            # a broken stdout must not take the poller down
            pass

    def total(self) -> int:
        return sum(self.counts.values())
