"""Shared pytest fixtures."""

from typing import Iterable, Optional
from unittest.mock import MagicMock

import pytest

from champ_select import SelectionStateMachine
from champion_catalog import Champion, ChampionCatalog
from download import DownloadEvent, Provider
from env_loader import Settings
from game_modes import build_game_modes
from session_context import SessionContext
from tee_log import TeeLogger

LEE_SIN = Champion(id=64, key="LeeSin", name="Lee Sin")
AHRI = Champion(id=103, key="Ahri", name="Ahri")


def champ_select_session(champion_id: int = 0, position: str = "top", cell: int = 2) -> dict:
    """Minimal /lol-champ-select/v1/session body with the local player at `cell`."""
    return {
        "localPlayerCellId": cell,
        "myTeam": [
            {"cellId": 0, "championId": 99, "assignedPosition": "jungle"},
            {"cellId": cell, "championId": champion_id, "assignedPosition": position},
        ],
        "theirTeam": [],
        "actions": [],
    }


class FakeProvider(Provider):
    """Test double Provider yielding a fixed list of events."""

    def __init__(self, provider_name: str = "fake", events: Optional[list] = None, error: Exception | None = None):
        self._name = provider_name
        self._events = events or []
        self._error = error
        self.calls = []

    def name(self) -> str:
        return self._name

    def fetch(self, champion, game_mode, position) -> Iterable[DownloadEvent]:
        self.calls.append((champion, game_mode, position))
        for ev in self._events:
            yield ev
        if self._error is not None:
            raise self._error


@pytest.fixture
def settings() -> Settings:
    return Settings(poll_interval=0.05)


@pytest.fixture
def catalog() -> ChampionCatalog:
    return ChampionCatalog({LEE_SIN.id: LEE_SIN, AHRI.id: AHRI}, version="test")


@pytest.fixture
def lcu() -> MagicMock:
    m = MagicMock()
    m.get_game_mode.return_value = "CLASSIC"
    m.get_champ_select_session.return_value = champ_select_session()
    return m


@pytest.fixture
def context(lcu, settings, catalog) -> SessionContext:
    return SessionContext.create(lcu, settings, catalog, logger=TeeLogger())


@pytest.fixture
def coordinator() -> MagicMock:
    m = MagicMock()
    m.start.side_effect = lambda champion, mode, position: MagicMock(name=f"stream-{champion.key}")
    return m


@pytest.fixture
def item_sets() -> MagicMock:
    m = MagicMock()
    m.delete_for_champion.return_value = 0
    return m


@pytest.fixture
def machine(context, coordinator, item_sets) -> SelectionStateMachine:
    return SelectionStateMachine(context, build_game_modes(), coordinator=coordinator, item_sets=item_sets)
