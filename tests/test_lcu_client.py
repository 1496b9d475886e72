"""Unit tests for lcu_client.py: no real client, requests.Session is mocked."""

from unittest.mock import MagicMock

import pytest
import requests

from lcu_client import (
    CHAMP_SELECT_SESSION,
    LCUClient,
    LCUConn,
    LCUError,
    LCUNotFound,
    read_lockfile,
)


def _response(status: int, body=None, text: str | None = None) -> MagicMock:
    r = MagicMock()
    r.status_code = status
    if text is None:
        text = "" if body is None else "json"
    r.text = text
    r.json.return_value = body
    return r


def _client(*responses) -> tuple:
    session = MagicMock()
    session.request.side_effect = list(responses)
    conn = LCUConn(port=51234, password="pw")
    return LCUClient(conn, timeout=1.5, session=session), session


def test_conn_urls():
    conn = LCUConn(port=51234, password="secret")
    assert conn.base_url == "https://127.0.0.1:51234"
    assert conn.auth == ("riot", "secret")


def test_read_lockfile(tmp_path):
    p = tmp_path / "lockfile"
    p.write_text("LeagueClient:1234:51234:abcDEF:https", encoding="utf-8")

    conn = read_lockfile(str(p))

    assert conn == LCUConn(port=51234, password="abcDEF", protocol="https")


def test_read_lockfile_invalid(tmp_path):
    p = tmp_path / "lockfile"
    p.write_text("LeagueClient:1234", encoding="utf-8")
    with pytest.raises(ValueError):
        read_lockfile(str(p))


def test_from_env_or_guess_uses_given_lockfile(tmp_path):
    p = tmp_path / "lockfile"
    p.write_text("LeagueClient:1:40000:pw:https", encoding="utf-8")

    client = LCUClient.from_env_or_guess(timeout=0.5, lockfile=str(p))

    assert client.conn.port == 40000
    assert client.timeout == 0.5


def test_from_env_or_guess_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        LCUClient.from_env_or_guess(lockfile=str(tmp_path / "nope"))


def test_session_is_configured():
    client, session = _client()
    assert session.verify is False
    assert session.auth == ("riot", "pw")


def test_get_champ_select_session_ok():
    body = {"localPlayerCellId": 1, "myTeam": []}
    client, session = _client(_response(200, body))

    assert client.get_champ_select_session() == body
    session.request.assert_called_once_with(
        "GET", "https://127.0.0.1:51234" + CHAMP_SELECT_SESSION, json=None, timeout=1.5
    )


def test_404_is_not_found():
    client, _ = _client(_response(404, text='{"message":"No active delegate"}'))
    with pytest.raises(LCUNotFound) as ei:
        client.get_champ_select_session()
    assert ei.value.status_code == 404


def test_other_status_is_lcu_error():
    client, _ = _client(_response(500, text="internal"))
    with pytest.raises(LCUError) as ei:
        client.get_champ_select_session()
    assert not isinstance(ei.value, LCUNotFound)
    assert ei.value.status_code == 500


def test_transport_error_is_wrapped():
    session = MagicMock()
    session.request.side_effect = requests.ConnectionError("refused")
    client = LCUClient(LCUConn(port=1, password="pw"), session=session)

    with pytest.raises(LCUError) as ei:
        client.get_json("/x")
    assert ei.value.status_code is None
    assert isinstance(ei.value.__cause__, requests.ConnectionError)


def test_non_dict_session_is_error():
    client, _ = _client(_response(200, ["unexpected"]))
    with pytest.raises(LCUError):
        client.get_champ_select_session()


def test_get_game_mode():
    client, _ = _client(_response(200, {"gameData": {"queue": {"gameMode": "classic"}}}))
    assert client.get_game_mode() == "CLASSIC"


def test_get_game_mode_missing():
    client, _ = _client(_response(200, {"gameData": {}}))
    with pytest.raises(LCUError):
        client.get_game_mode()


def test_item_set_path_uses_cached_summoner_id():
    client, session = _client(
        _response(200, {"summonerId": 42}),
        _response(200, {"itemSets": []}),
        _response(200, {"itemSets": []}),
    )

    client.get_item_sets()
    client.get_item_sets()

    urls = [c.args[1] for c in session.request.call_args_list]
    assert urls[0].endswith("/lol-summoner/v1/current-summoner")
    assert urls[1].endswith("/lol-item-sets/v1/item-sets/42/sets")
    assert urls[2].endswith("/lol-item-sets/v1/item-sets/42/sets")


def test_set_summoner_spells():
    client, session = _client(_response(204))
    client.set_summoner_spells(4, "14")
    session.request.assert_called_once_with(
        "PATCH",
        "https://127.0.0.1:51234" + CHAMP_SELECT_SESSION + "/my-selection",
        json={"spell1Id": 4, "spell2Id": 14},
        timeout=1.5,
    )
