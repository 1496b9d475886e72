"""Unit tests for champion_catalog.py: Data Dragon calls are mocked."""

import json
from unittest.mock import MagicMock

import champion_catalog
from champion_catalog import Champion, ChampionCatalog, load_champions

DDRAGON = {
    "data": {
        "LeeSin": {"id": "LeeSin", "key": "64", "name": "Lee Sin"},
        "Ahri": {"id": "Ahri", "key": "103", "name": "Ahri"},
    }
}


def _fake_get(version="15.1.1"):
    calls = []

    def get(url, timeout=None):
        calls.append(url)
        r = MagicMock()
        r.raise_for_status.return_value = None
        r.json.return_value = [version, "14.24.1"] if url.endswith("versions.json") else DDRAGON
        return r

    return get, calls


def test_load_downloads_and_caches(tmp_path, monkeypatch):
    get, calls = _fake_get()
    monkeypatch.setattr(champion_catalog.requests, "get", get)
    cache = tmp_path / "champs.json"

    out = load_champions("en_US", cache_path=str(cache))

    assert out["version"] == "15.1.1"
    assert out["champions"]["64"] == {"key": "LeeSin", "name": "Lee Sin"}
    assert json.loads(cache.read_text(encoding="utf-8"))["champions"] == out["champions"]
    assert any("/cdn/15.1.1/data/en_US/champion.json" in u for u in calls)


def test_cache_hit_skips_download(tmp_path, monkeypatch):
    cache = tmp_path / "champs.json"
    cache.write_text(json.dumps({
        "version": "15.1.1",
        "locale": "en_US",
        "champions": {"1": {"key": "Annie", "name": "Annie"}},
    }), encoding="utf-8")
    get, calls = _fake_get()
    monkeypatch.setattr(champion_catalog.requests, "get", get)

    out = load_champions("en_US", cache_path=str(cache))

    assert out["champions"] == {"1": {"key": "Annie", "name": "Annie"}}
    assert len(calls) == 1


def test_cache_for_other_locale_is_refreshed(tmp_path, monkeypatch):
    cache = tmp_path / "champs.json"
    cache.write_text(json.dumps({"version": "15.1.1", "locale": "ko_KR", "champions": {}}), encoding="utf-8")
    get, calls = _fake_get()
    monkeypatch.setattr(champion_catalog.requests, "get", get)

    out = load_champions("en_US", cache_path=str(cache))

    assert "103" in out["champions"]
    assert len(calls) == 2


def test_catalog_lookup():
    cat = ChampionCatalog.from_payload({"version": "v", "champions": {"64": {"key": "LeeSin", "name": "Lee Sin"}}})

    assert len(cat) == 1
    assert cat.get(64) == Champion(64, "LeeSin", "Lee Sin")
    assert cat.find(1) is None
    assert cat.get(1) == Champion(1, "1", "1")
