from __future__ import annotations

import threading
import time
from typing import Any, Dict, List

UID_PREFIX = "mana-"


def champion_uid_prefix(champion_key: str) -> str:
    return f"{UID_PREFIX}{champion_key}-"


class ItemSetStore:
    """
    Item sets stored in the client, per summoner.
    Sets written by this tool have uid "mana-<championKey>-..." so they can be found again.

    The client only accepts the whole document, so every load/modify/store runs
    under `lock`. Callers that must check something atomically with a write
    (e.g. "is this download still current?") can hold `lock` themselves; it is reentrant.
    """

    def __init__(self, lcu):
        self.lcu = lcu
        self.lock = threading.RLock()

    def _load(self) -> Dict[str, Any]:
        body = self.lcu.get_item_sets() or {}
        body.setdefault("itemSets", [])
        return body

    def _store(self, body: Dict[str, Any]):
        body["timestamp"] = int(time.time() * 1000)
        self.lcu.put_item_sets(body)

    def get_item_sets_by_champion_key(self, champion_key: str) -> List[Dict[str, Any]]:
        prefix = champion_uid_prefix(champion_key)
        return [s for s in self._load()["itemSets"] if str(s.get("uid") or "").startswith(prefix)]

    def delete_item_sets(self, sets: List[Dict[str, Any]]) -> int:
        uids = {s.get("uid") for s in sets or [] if s.get("uid")}
        if not uids:
            return 0
        with self.lock:
            body = self._load()
            kept = [s for s in body["itemSets"] if s.get("uid") not in uids]
            removed = len(body["itemSets"]) - len(kept)
            if removed:
                body["itemSets"] = kept
                self._store(body)
        return removed

    def delete_for_champion(self, champion_key: str) -> int:
        with self.lock:
            return self.delete_item_sets(self.get_item_sets_by_champion_key(champion_key))

    def save(self, item_set: Dict[str, Any]):
        uid = item_set.get("uid")
        if not uid:
            raise ValueError("item set without uid")
        with self.lock:
            body = self._load()
            body["itemSets"] = [s for s in body["itemSets"] if s.get("uid") != uid]
            body["itemSets"].append(item_set)
            self._store(body)
