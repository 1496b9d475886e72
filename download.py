"""Provider download pipeline: a cancelable stream of named events per champion pick."""

from __future__ import annotations

import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence

SUMMONER_SPELLS = "summonerspells"
PERKS_PAGE = "perksPage"
ITEM_SET = "itemset"

EVENT_NAMES = (SUMMONER_SPELLS, PERKS_PAGE, ITEM_SET)

_END = object()


@dataclass(frozen=True)
class DownloadEvent:
    name: str
    provider: str
    position: Optional[str]
    payload: Any

    def __post_init__(self):
        if self.name not in EVENT_NAMES:
            raise ValueError(f"unknown download event {self.name!r}")


class Provider(ABC):
    """A source of builds (runes, summoner spells, item sets) for a champion."""

    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def fetch(self, champion, game_mode: str, position: Optional[str]) -> Iterable[DownloadEvent]:
        """Yield DownloadEvents for the champion.

        Args:
            champion: Champion from the catalog.
            game_mode: Resolved game mode id, e.g. "CLASSIC".
            position: Assigned role, or None when unresolved.

        Raises:
            Any exception; the coordinator reports it and moves on to the next provider.
        """
        ...


class DownloadStream:
    """
    Iterable of DownloadEvents produced by a worker thread.

    cancel() is idempotent: the producer sees it at its next emit, and
    iteration ends without delivering anything still queued.
    """

    def __init__(self, producer: Callable[[Callable[[DownloadEvent], bool], threading.Event], None],
                 label: str = "download"):
        self.label = label
        self._producer = producer
        self._q: "queue.Queue[Any]" = queue.Queue()
        self._cancel_evt = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def cancelled(self) -> bool:
        return self._cancel_evt.is_set()

    @property
    def done(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()

    def _emit(self, ev: DownloadEvent) -> bool:
        if self._cancel_evt.is_set():
            return False
        self._q.put(ev)
        return True

    def _run(self):
        try:
            self._producer(self._emit, self._cancel_evt)
        finally:
            self._q.put(_END)

    def start(self) -> "DownloadStream":
        if self._thread is not None:
            return self
        self._thread = threading.Thread(target=self._run, name=f"dl-{self.label}", daemon=True)
        self._thread.start()
        return self

    def cancel(self):
        if self._cancel_evt.is_set():
            return
        self._cancel_evt.set()
        self._q.put(_END)

    def wait(self, timeout: float | None = None) -> bool:
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def __iter__(self) -> Iterator[DownloadEvent]:
        while True:
            item = self._q.get()
            if item is _END or self._cancel_evt.is_set():
                return
            yield item

    def events(self, timeout: float = 5.0) -> List[DownloadEvent]:
        """Drain the stream (test/CLI helper); stops early after `timeout` seconds of silence."""
        out: List[DownloadEvent] = []
        while True:
            try:
                item = self._q.get(timeout=timeout)
            except queue.Empty:
                return out
            if item is _END or self._cancel_evt.is_set():
                return out
            out.append(item)


class DownloadCoordinator:
    def __init__(self, providers: Sequence[Provider], errors=None):
        self.providers = list(providers)
        self.errors = errors

    def start(self, champion, game_mode: str, position: Optional[str]) -> DownloadStream:
        providers = list(self.providers)

        def _produce(emit: Callable[[DownloadEvent], bool], cancel_evt: threading.Event):
            for p in providers:
                if cancel_evt.is_set():
                    return
                try:
                    for ev in p.fetch(champion, game_mode, position):
                        if not emit(ev):
                            return
                except Exception as e:
                    if self.errors is not None:
                        self.errors.report(f"provider:{p.name()}", e)

        label = f"{getattr(champion, 'key', champion)}-{position or 'any'}"
        return DownloadStream(_produce, label=label).start()
