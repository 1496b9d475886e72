from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests

try:
    import urllib3
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
except ImportError:
    pass


CHAMP_SELECT_SESSION = "/lol-champ-select/v1/session"
GAMEFLOW_SESSION = "/lol-gameflow/v1/session"
CURRENT_SUMMONER = "/lol-summoner/v1/current-summoner"


class LCUError(Exception):
    """Any LCU request failure other than 404."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class LCUNotFound(LCUError):
    """404: the resource does not exist right now (e.g. no champ select session)."""


@dataclass
class LCUConn:
    port: int
    password: str
    protocol: str = "https"
    host: str = "127.0.0.1"

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"

    @property
    def auth(self) -> Tuple[str, str]:
        return ("riot", self.password)


def read_lockfile(path: str) -> LCUConn:
    """
    Riot lockfile format:
      name:pid:port:password:protocol
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read().strip()
    parts = raw.split(":")
    if len(parts) < 5:
        raise ValueError(f"Invalid lockfile format: {raw}")
    port = int(parts[2])
    password = parts[3]
    protocol = parts[4]
    return LCUConn(port=port, password=password, protocol=protocol)


def guess_lockfile_paths() -> List[str]:
    candidates: List[str] = []
    env_path = os.getenv("LOL_LOCKFILE")
    if env_path:
        candidates.append(env_path)

    candidates.extend([
        "C:/Riot Games/League of Legends/lockfile",
        "C:/Program Files/Riot Games/League of Legends/lockfile",
        "C:/Program Files (x86)/Riot Games/League of Legends/lockfile",
        "/Applications/League of Legends.app/Contents/LoL/lockfile",
    ])

    seen = set()
    uniq = []
    for p in candidates:
        if not p or p in seen:
            continue
        seen.add(p)
        uniq.append(p)
    return uniq


class LCUClient:
    def __init__(self, conn: LCUConn, timeout: float = 2.0, session: Optional[requests.Session] = None):
        self.conn = conn
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.verify = False
        self._session.auth = conn.auth
        self._summoner_id: Optional[int] = None

    @classmethod
    def from_env_or_guess(cls, timeout: float = 2.0, lockfile: str | None = None) -> "LCUClient":
        paths = [lockfile] if lockfile else guess_lockfile_paths()
        last_err = None
        for p in paths:
            try:
                if os.path.exists(p):
                    return cls(read_lockfile(p), timeout=timeout)
            except (OSError, ValueError) as e:
                last_err = e
                continue

        raise FileNotFoundError(
            "LCU lockfile not found.\n"
            "Fix: set LOL_LOCKFILE=... in .env (or the environment).\n"
            "e.g. LOL_LOCKFILE=C:/Riot Games/League of Legends/lockfile\n"
            f"(last error: {last_err})"
        )

    # ---- raw requests ----
    def _request(self, method: str, path: str, body: Any = None) -> requests.Response:
        url = self.conn.base_url + path
        try:
            r = self._session.request(method, url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise LCUError(f"{method} {path}: {e}") from e

        if r.status_code == 404:
            raise LCUNotFound(f"404 {method} {path}", status_code=404)
        if r.status_code >= 400:
            raise LCUError(f"{r.status_code} {method} {path}: {r.text[:200]}", status_code=r.status_code)
        return r

    @staticmethod
    def _json(r: requests.Response) -> Any:
        if not r.text:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise LCUError(f"invalid JSON body: {r.text[:200]}", status_code=r.status_code) from e

    def get_json(self, path: str) -> Any:
        return self._json(self._request("GET", path))

    def put_json(self, path: str, body: Any) -> Any:
        return self._json(self._request("PUT", path, body))

    def post_json(self, path: str, body: Any) -> Any:
        return self._json(self._request("POST", path, body))

    def patch_json(self, path: str, body: Any) -> Any:
        return self._json(self._request("PATCH", path, body))

    def delete(self, path: str) -> None:
        self._request("DELETE", path)

    # ---- champ select ----
    def get_champ_select_session(self) -> Dict[str, Any]:
        """Raises LCUNotFound when the client is not in champion select."""
        sess = self.get_json(CHAMP_SELECT_SESSION)
        if not isinstance(sess, dict):
            raise LCUError(f"unexpected champ select session body: {type(sess).__name__}")
        return sess

    def get_game_mode(self) -> str:
        sess = self.get_json(GAMEFLOW_SESSION) or {}
        game_data = sess.get("gameData") or {}
        queue = game_data.get("queue") or {}
        mode = queue.get("gameMode") or (sess.get("map") or {}).get("gameMode")
        if not mode:
            raise LCUError("gameflow session has no gameMode")
        return str(mode).upper()

    def set_summoner_spells(self, spell1_id: int, spell2_id: int) -> None:
        self.patch_json(
            CHAMP_SELECT_SESSION + "/my-selection",
            {"spell1Id": int(spell1_id), "spell2Id": int(spell2_id)},
        )

    # ---- summoner ----
    def get_current_summoner(self) -> Dict[str, Any]:
        return self.get_json(CURRENT_SUMMONER) or {}

    def summoner_id(self) -> int:
        if self._summoner_id is None:
            self._summoner_id = int(self.get_current_summoner().get("summonerId") or 0)
        return self._summoner_id

    # ---- item sets ----
    def _item_sets_path(self) -> str:
        return f"/lol-item-sets/v1/item-sets/{self.summoner_id()}/sets"

    def get_item_sets(self) -> Dict[str, Any]:
        return self.get_json(self._item_sets_path()) or {"itemSets": []}

    def put_item_sets(self, body: Dict[str, Any]) -> None:
        self.put_json(self._item_sets_path(), body)

    # ---- perks ----
    def get_perk_pages(self) -> List[Dict[str, Any]]:
        return self.get_json("/lol-perks/v1/pages") or []

    def get_perk_inventory(self) -> Dict[str, Any]:
        return self.get_json("/lol-perks/v1/inventory") or {}

    def delete_perk_page(self, page_id: int) -> None:
        self.delete(f"/lol-perks/v1/pages/{int(page_id)}")

    def create_perk_page(self, page: Dict[str, Any]) -> Dict[str, Any]:
        return self.post_json("/lol-perks/v1/pages", page) or {}
