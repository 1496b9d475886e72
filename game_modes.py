"""Per game mode champion/position extraction from champ select snapshots."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


_ROLE_MAP = {
    "TOP": "TOP",
    "JUNGLE": "JUNGLE",
    "JG": "JUNGLE",
    "MID": "MIDDLE",
    "MIDDLE": "MIDDLE",
    "BOT": "BOTTOM",
    "BOTTOM": "BOTTOM",
    "ADC": "BOTTOM",
    "SUP": "UTILITY",
    "SUPPORT": "UTILITY",
    "UTILITY": "UTILITY",
}


def normalize_position(raw: Any) -> Optional[str]:
    s = str(raw or "").strip().upper()
    return _ROLE_MAP.get(s)


class StrategyError(Exception):
    """Raised when a game mode strategy hook fails."""

    def __init__(self, mode: str, message: str) -> None:
        self.mode = mode
        super().__init__(f"[{mode}] {message}")


class UnsupportedGameMode(Exception):
    """No strategy registered for the resolved game mode."""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(f"unsupported game mode: {mode!r}")


@dataclass(frozen=True)
class PickInfo:
    champion_id: int
    position: Optional[str] = None
    cell_id: Optional[int] = None


def find_local_player(snapshot: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    cell = snapshot.get("localPlayerCellId")
    if cell is None:
        return None
    for p in snapshot.get("myTeam") or []:
        if p.get("cellId") == cell:
            return p
    return None


class GameModeStrategy(ABC):
    """
    Lifecycle per episode:
      on_first_tick_event -> on_tick_event (every tick) -> ... -> end
    on_champion_change_event fires when a new non-zero champion is locked in.
    """

    mode = ""

    def __init__(self) -> None:
        self._player: Optional[PickInfo] = None

    @abstractmethod
    def on_first_tick_event(self, snapshot: Dict[str, Any]) -> None:
        ...

    def on_tick_event(self, snapshot: Dict[str, Any]) -> None:
        p = find_local_player(snapshot)
        if p is None:
            self._player = PickInfo(champion_id=0, position=self.get_position())
            return
        try:
            cid = int(p.get("championId") or 0)
        except (TypeError, ValueError) as e:
            raise StrategyError(self.mode, f"bad championId {p.get('championId')!r}") from e
        self._player = PickInfo(champion_id=cid, position=self.get_position(), cell_id=p.get("cellId"))

    def get_player(self) -> PickInfo:
        if self._player is None:
            raise StrategyError(self.mode, "get_player() called before any tick")
        return self._player

    @abstractmethod
    def get_position(self) -> Optional[str]:
        ...

    def on_champion_change_event(self, champion) -> None:
        pass

    def end(self) -> None:
        self._player = None


class ClassicMode(GameModeStrategy):
    """Summoner's Rift draft/blind. Position comes from assignedPosition."""

    mode = "CLASSIC"

    def __init__(self) -> None:
        super().__init__()
        self._position: Optional[str] = None
        self.champion = None

    def _resolve_position(self, snapshot: Dict[str, Any]):
        p = find_local_player(snapshot)
        if p is not None:
            self._position = normalize_position(p.get("assignedPosition"))

    def on_first_tick_event(self, snapshot: Dict[str, Any]) -> None:
        self._position = None
        self.champion = None
        self._resolve_position(snapshot)

    def on_tick_event(self, snapshot: Dict[str, Any]) -> None:
        # blind pick has no assignedPosition; keep trying until one shows up
        if self._position is None:
            self._resolve_position(snapshot)
        super().on_tick_event(snapshot)

    def get_position(self) -> Optional[str]:
        return self._position

    def on_champion_change_event(self, champion) -> None:
        self.champion = champion

    def end(self) -> None:
        super().end()
        self._position = None
        self.champion = None


class AramMode(GameModeStrategy):
    """Howling Abyss. No lanes."""

    mode = "ARAM"

    def on_first_tick_event(self, snapshot: Dict[str, Any]) -> None:
        self._player = None

    def get_position(self) -> Optional[str]:
        return None


def build_game_modes() -> Dict[str, GameModeStrategy]:
    return {s.mode: s for s in (ClassicMode(), AramMode())}
