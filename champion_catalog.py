import json
import os
import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests

CACHE_PATH = "ddragon_champions.json"


@dataclass(frozen=True)
class Champion:
    id: int
    key: str   # ddragon id, e.g. "MissFortune"
    name: str  # display name for the locale


def _get_latest_ddragon_version(timeout=10) -> str:
    url = "https://ddragon.leagueoflegends.com/api/versions.json"
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    return r.json()[0]


def _download_champion_json(version: str, locale: str, timeout=15) -> dict:
    url = f"https://ddragon.leagueoflegends.com/cdn/{version}/data/{locale}/champion.json"
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    return r.json()


def load_champions(locale: str = "en_US", force_refresh: bool = False, cache_path: str = CACHE_PATH) -> dict:
    """
    returns:
      {
        "version": "15.24.1",
        "locale": "en_US",
        "champions": { "21": {"key": "MissFortune", "name": "Miss Fortune"}, ... }
      }
    """
    latest = _get_latest_ddragon_version()

    if not force_refresh and os.path.exists(cache_path):
        try:
            with open(cache_path, "r", encoding="utf-8") as f:
                cached = json.load(f)
            if cached.get("version") == latest and cached.get("locale") == locale and "champions" in cached:
                return cached
        except (OSError, ValueError):
            pass

    raw = _download_champion_json(latest, locale)
    data = raw.get("data", {})

    champions = {}
    for champ in data.values():
        # champ["key"] = "21" (championId), champ["id"] = "MissFortune"
        champions[str(int(champ["key"]))] = {"key": champ["id"], "name": champ["name"]}

    out = {
        "version": latest,
        "locale": locale,
        "fetched_at": int(time.time()),
        "champions": champions,
    }

    with open(cache_path, "w", encoding="utf-8") as f:
        json.dump(out, f, ensure_ascii=False, indent=2)

    return out


class ChampionCatalog:
    def __init__(self, champions: Dict[int, Champion], version: str = ""):
        self._by_id = dict(champions)
        self.version = version

    @classmethod
    def from_payload(cls, payload: dict) -> "ChampionCatalog":
        champs = {}
        for cid, c in (payload.get("champions") or {}).items():
            i = int(cid)
            champs[i] = Champion(id=i, key=c["key"], name=c["name"])
        return cls(champs, version=str(payload.get("version") or ""))

    @classmethod
    def load(cls, locale: str = "en_US", force_refresh: bool = False) -> "ChampionCatalog":
        return cls.from_payload(load_champions(locale=locale, force_refresh=force_refresh))

    def __len__(self):
        return len(self._by_id)

    def find(self, champion_id: int) -> Optional[Champion]:
        return self._by_id.get(int(champion_id))

    def get(self, champion_id: int) -> Champion:
        # unknown id (catalog older than the client): placeholder instead of failing the tick
        c = self.find(champion_id)
        if c is None:
            return Champion(id=int(champion_id), key=str(champion_id), name=str(champion_id))
        return c
