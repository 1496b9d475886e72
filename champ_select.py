"""
Champion select state machine.

Turns one poll outcome per tick into de-duplicated domain events:

  Idle --Snapshot--> InChampionSelect   (PhaseEntered)
  InChampionSelect --NotFound--> Idle   (PhaseExited, strategy.end(), state reset)

While in champion select every snapshot goes through the game mode strategy;
a new non-zero champion id produces ChampionChosen (once per change) and starts
the download pipeline, a non-zero -> 0 change produces ChampionCleared.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from download import DownloadCoordinator, DownloadStream
from game_modes import GameModeStrategy, StrategyError, UnsupportedGameMode
from session_poller import FetchOutcome, NotFound, Snapshot, TransientError

__all__ = [
    "Phase",
    "SelectionState",
    "PhaseEntered",
    "PhaseExited",
    "ChampionChosen",
    "ChampionCleared",
    "DomainEvent",
    "SelectionStateMachine",
    "StrategyError",
    "UnsupportedGameMode",
]


class Phase(Enum):
    IDLE = "Idle"
    IN_CHAMPION_SELECT = "InChampionSelect"


@dataclass
class SelectionState:
    phase: Phase = Phase.IDLE
    game_mode: Optional[str] = None
    last_champion_id: Optional[int] = None


# ---- domain events ----
@dataclass(frozen=True)
class PhaseEntered:
    game_mode: str = field(default="", compare=False)


@dataclass(frozen=True)
class PhaseExited:
    pass


@dataclass(frozen=True)
class ChampionChosen:
    champion_id: int
    champion: Any = field(default=None, compare=False)
    game_mode: Optional[str] = field(default=None, compare=False)
    position: Optional[str] = field(default=None, compare=False)
    downloads: Optional[DownloadStream] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ChampionCleared:
    pass


DomainEvent = Union[PhaseEntered, PhaseExited, ChampionChosen, ChampionCleared]
Listener = Callable[[DomainEvent], Any]


class SelectionStateMachine:
    def __init__(
        self,
        context,
        game_modes: Dict[str, GameModeStrategy],
        coordinator: Optional[DownloadCoordinator] = None,
        item_sets=None,
    ):
        self.context = context
        self.game_modes = dict(game_modes)
        self.coordinator = coordinator
        self.item_sets = item_sets

        self._state = SelectionState()
        self._strategy: Optional[GameModeStrategy] = None
        self._champion = None
        self._stream: Optional[DownloadStream] = None
        # mode rejected for the current episode; snapshots are ignored until NotFound
        self._rejected_mode: Optional[str] = None

        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    # ---- read-only views ----
    @property
    def state(self) -> SelectionState:
        return replace(self._state)

    @property
    def strategy(self) -> Optional[GameModeStrategy]:
        return self._strategy

    @property
    def active_downloads(self) -> Optional[DownloadStream]:
        return self._stream

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---- tick entry point ----
    def process(self, outcome: FetchOutcome) -> List[DomainEvent]:
        """Handle one poll outcome. Never raises; failures go to the error sink."""
        events: List[DomainEvent] = []
        with self._lock:
            try:
                if isinstance(outcome, TransientError):
                    self.context.errors.report("fetch", outcome.cause)
                    self.context.status.set("error", outcome.cause)
                elif isinstance(outcome, NotFound):
                    self._rejected_mode = None
                    if self._state.phase is Phase.IN_CHAMPION_SELECT:
                        self._exit(events)
                elif isinstance(outcome, Snapshot):
                    self._on_snapshot(outcome.data, events)
                else:
                    raise TypeError(f"unknown poll outcome: {outcome!r}")
            except StrategyError as e:
                self.context.errors.report("strategy", e)
            except Exception as e:
                self.context.errors.report("champ_select", e)
        return events

    def shutdown(self) -> List[DomainEvent]:
        """Close the current episode (if any) as if the session disappeared."""
        return self.process(NotFound())

    # ---- internals ----
    def _emit(self, events: List[DomainEvent], ev: DomainEvent):
        events.append(ev)
        self.context.logger.debug("champ_select", f"event {ev}")
        for listener in list(self._listeners):
            try:
                listener(ev)
            except Exception as e:
                self.context.errors.report("listener", e)

    def _enter(self, data: Dict[str, Any], events: List[DomainEvent]) -> bool:
        mode = self.context.get_game_mode()
        strategy = self.game_modes.get(mode)
        if strategy is None:
            self._rejected_mode = mode
            err = UnsupportedGameMode(mode)
            self.context.errors.report("unsupported_game_mode", err)
            self.context.status.set("error", err)
            return False

        strategy.on_first_tick_event(data)

        self._strategy = strategy
        self._state.phase = Phase.IN_CHAMPION_SELECT
        self._state.game_mode = mode
        self.context.enter_champ_select()
        self.context.logger.info("champ_select", f"entered champion select (mode={mode})")
        self._emit(events, PhaseEntered(game_mode=mode))
        return True

    def _on_snapshot(self, data: Dict[str, Any], events: List[DomainEvent]):
        if self._rejected_mode is not None:
            return

        if self._state.phase is Phase.IDLE:
            if not self._enter(data, events):
                return

        strategy = self._strategy
        strategy.on_tick_event(data)

        pick = strategy.get_player()
        if pick.champion_id == self._state.last_champion_id:
            return

        if pick.champion_id == 0:
            previous = self._state.last_champion_id
            self._state.last_champion_id = 0
            if previous:
                self._emit(events, ChampionCleared())
            return

        self._change_champion(pick.champion_id, strategy, events)

    def _change_champion(self, champion_id: int, strategy: GameModeStrategy, events: List[DomainEvent]):
        champion = self.context.catalog.get(champion_id)
        previous = self._champion

        # previous pipeline is superseded
        if self._stream is not None:
            self._stream.cancel()
            self._stream = None

        # stale item sets go before anything new is downloaded
        if self.item_sets is not None:
            keys = [champion.key]
            if previous is not None and previous.key != champion.key:
                keys.insert(0, previous.key)
            for key in keys:
                removed = self.item_sets.delete_for_champion(key)
                if removed:
                    self.context.logger.debug("champ_select", f"deleted {removed} item set(s) for {key}")

        strategy.on_champion_change_event(champion)

        self._state.last_champion_id = champion_id
        self._champion = champion

        game_mode = self._state.game_mode
        position = strategy.get_position()
        stream = None
        if self.coordinator is not None:
            try:
                stream = self.coordinator.start(champion, game_mode, position)
            except Exception as e:
                self.context.errors.report("download", e)
        self._stream = stream

        self.context.logger.info(
            "champ_select", f"champion chosen: {champion.name} ({champion_id}) position={position or '-'}"
        )
        self._emit(events, ChampionChosen(
            champion_id=champion_id,
            champion=champion,
            game_mode=game_mode,
            position=position,
            downloads=stream,
        ))

    def _exit(self, events: List[DomainEvent]):
        if self._stream is not None:
            self._stream.cancel()
            self._stream = None

        strategy = self._strategy
        try:
            if strategy is not None:
                strategy.end()
        except Exception as e:
            self.context.errors.report("strategy", e)
        finally:
            self._state = SelectionState()
            self._strategy = None
            self._champion = None
            self.context.exit_champ_select()

        self.context.logger.info("champ_select", "exited champion select")
        self._emit(events, PhaseExited())
