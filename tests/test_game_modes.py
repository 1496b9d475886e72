"""Unit tests for game_modes.py."""

import pytest

from game_modes import (
    AramMode,
    ClassicMode,
    PickInfo,
    StrategyError,
    UnsupportedGameMode,
    build_game_modes,
    normalize_position,
)

from tests.conftest import LEE_SIN, champ_select_session


@pytest.mark.parametrize("raw,expected", [
    ("top", "TOP"),
    ("jungle", "JUNGLE"),
    ("mid", "MIDDLE"),
    ("middle", "MIDDLE"),
    ("bottom", "BOTTOM"),
    ("ADC", "BOTTOM"),
    ("utility", "UTILITY"),
    ("support", "UTILITY"),
    ("", None),
    (None, None),
    ("nowhere", None),
])
def test_normalize_position(raw, expected):
    assert normalize_position(raw) == expected


def test_dispatch_table():
    modes = build_game_modes()
    assert set(modes) == {"CLASSIC", "ARAM"}
    assert isinstance(modes["CLASSIC"], ClassicMode)
    assert isinstance(modes["ARAM"], AramMode)


def test_classic_reads_local_player():
    s = ClassicMode()
    snap = champ_select_session(64, "middle", cell=2)

    s.on_first_tick_event(snap)
    s.on_tick_event(snap)

    assert s.get_position() == "MIDDLE"
    assert s.get_player() == PickInfo(champion_id=64, position="MIDDLE", cell_id=2)


def test_classic_blind_pick_resolves_later():
    """No assignedPosition on entry; position fills in once the client sends one."""
    s = ClassicMode()
    s.on_first_tick_event(champ_select_session(0, ""))
    s.on_tick_event(champ_select_session(0, ""))
    assert s.get_position() is None

    s.on_tick_event(champ_select_session(0, "bottom"))
    assert s.get_position() == "BOTTOM"

    # stable once resolved
    s.on_tick_event(champ_select_session(0, "top"))
    assert s.get_position() == "BOTTOM"


def test_missing_local_player_reads_as_no_pick():
    s = ClassicMode()
    snap = {"localPlayerCellId": 7, "myTeam": [{"cellId": 0, "championId": 99}]}
    s.on_first_tick_event(snap)
    s.on_tick_event(snap)
    assert s.get_player().champion_id == 0


def test_get_player_before_tick_raises():
    with pytest.raises(StrategyError, match="before any tick"):
        ClassicMode().get_player()


def test_bad_champion_id_raises_strategy_error():
    s = ClassicMode()
    snap = champ_select_session(0)
    snap["myTeam"][1]["championId"] = "x"
    s.on_first_tick_event(snap)
    with pytest.raises(StrategyError):
        s.on_tick_event(snap)


def test_classic_champion_change_and_end():
    s = ClassicMode()
    snap = champ_select_session(64)
    s.on_first_tick_event(snap)
    s.on_tick_event(snap)
    s.on_champion_change_event(LEE_SIN)
    assert s.champion == LEE_SIN

    s.end()

    assert s.champion is None
    assert s.get_position() is None
    with pytest.raises(StrategyError):
        s.get_player()


def test_aram_has_no_position():
    s = AramMode()
    snap = champ_select_session(103, "top")
    s.on_first_tick_event(snap)
    s.on_tick_event(snap)
    assert s.get_position() is None
    assert s.get_player().champion_id == 103


def test_unsupported_game_mode_message():
    err = UnsupportedGameMode("TFT")
    assert err.mode == "TFT"
    assert "TFT" in str(err)
