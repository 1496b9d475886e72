from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from champion_catalog import ChampionCatalog
from env_loader import Settings
from tee_log import ErrorSink, TeeLogger

CHAMP_SELECT_IN = "champion-select-in"
CHAMP_SELECT_OUT = "champion-select-out"

STATUS_MESSAGES: Dict[str, str] = {
    "champion-select-waiting": "Waiting for champion select",
    "champion-select-pick": "Pick a champion",
    "champion-updating-display": "Loading data for {0}",
    "runes-loaded": "Runes for {0} ({1}) loaded",
    "error": "Error: {0}",
}


class StatusBoard:
    """Current status line shown to the user (the UI only reads it)."""

    def __init__(self, logger: TeeLogger):
        self.logger = logger
        self.key = "champion-select-waiting"
        self.message = STATUS_MESSAGES[self.key]
        self._lock = threading.Lock()

    def set(self, key: str, *args: Any) -> str:
        tmpl = STATUS_MESSAGES.get(key, key)
        try:
            msg = tmpl.format(*args)
        except IndexError:
            msg = tmpl
        with self._lock:
            self.key = key
            self.message = msg
        self.logger.info("status", msg)
        return msg


class ProcessSignals:
    """
    process-level flags other subsystems can observe.
    send() raises a flag, clear() lowers it; subscribers get (name, is_set).
    """

    def __init__(self):
        self._active: Set[str] = set()
        self._subs: List[Callable[[str, bool], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, cb: Callable[[str, bool], None]) -> Callable[[], None]:
        with self._lock:
            self._subs.append(cb)

        def _unsubscribe():
            with self._lock:
                if cb in self._subs:
                    self._subs.remove(cb)

        return _unsubscribe

    def _notify(self, name: str, on: bool):
        with self._lock:
            subs = list(self._subs)
        for cb in subs:
            cb(name, on)

    def send(self, name: str):
        with self._lock:
            self._active.add(name)
        self._notify(name, True)

    def clear(self, name: str):
        with self._lock:
            was = name in self._active
            self._active.discard(name)
        if was:
            self._notify(name, False)

    def is_set(self, name: str) -> bool:
        with self._lock:
            return name in self._active


@dataclass
class SessionContext:
    lcu: Any
    settings: Settings
    catalog: ChampionCatalog
    logger: TeeLogger
    errors: ErrorSink
    status: StatusBoard
    signals: ProcessSignals = field(default_factory=ProcessSignals)

    @classmethod
    def create(cls, lcu: Any, settings: Settings, catalog: ChampionCatalog,
               logger: Optional[TeeLogger] = None) -> "SessionContext":
        logger = logger or TeeLogger(settings.log_file, verbose=settings.verbose)
        return cls(
            lcu=lcu,
            settings=settings,
            catalog=catalog,
            logger=logger,
            errors=ErrorSink(logger),
            status=StatusBoard(logger),
        )

    def get_game_mode(self) -> str:
        return self.lcu.get_game_mode()

    def enter_champ_select(self):
        self.signals.clear(CHAMP_SELECT_OUT)
        self.signals.send(CHAMP_SELECT_IN)

    def exit_champ_select(self):
        self.signals.clear(CHAMP_SELECT_IN)
        self.signals.send(CHAMP_SELECT_OUT)
