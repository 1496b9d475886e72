from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from champ_select import ChampionChosen, ChampionCleared, PhaseEntered, PhaseExited
from download import ITEM_SET, PERKS_PAGE, SUMMONER_SPELLS, DownloadEvent, DownloadStream

PAGE_PREFIX = "Mana: "


class PerksInventory:
    """Rune pages owned by the summoner. Counts are cached per episode."""

    def __init__(self, lcu):
        self.lcu = lcu
        self._page_count: Optional[int] = None
        self._pages: Optional[List[Dict[str, Any]]] = None

    def reset(self):
        self._page_count = None
        self._pages = None

    def page_count(self) -> int:
        if self._page_count is None:
            inv = self.lcu.get_perk_inventory()
            self._page_count = int(inv.get("ownedPageCount") or 0)
        return self._page_count

    def pages(self) -> List[Dict[str, Any]]:
        if self._pages is None:
            self._pages = list(self.lcu.get_perk_pages())
        return self._pages

    def update_perks_pages(self, pages: List[Dict[str, Any]]) -> int:
        """Replace the pages this tool created with `pages`. Returns how many were written."""
        own = [p for p in self.pages() if str(p.get("name") or "").startswith(PAGE_PREFIX) and p.get("isEditable", True)]
        for p in own:
            self.lcu.delete_perk_page(p["id"])

        others = len(self.pages()) - len(own)
        room = max(0, self.page_count() - others) if self.page_count() else len(pages)

        created = []
        for page in pages[:room]:
            body = dict(page)
            name = str(body.get("name") or "")
            if not name.startswith(PAGE_PREFIX):
                body["name"] = PAGE_PREFIX + name
            body["current"] = not created
            created.append(self.lcu.create_perk_page(body))

        self._pages = None
        return len(created)


class CustomizationApplier:
    """
    Consumes the download stream of each chosen champion and applies what the
    settings allow: item sets, summoner spells, rune pages.
    """

    def __init__(self, context, item_sets, perks: Optional[PerksInventory] = None):
        self.context = context
        self.item_sets = item_sets
        self.perks = perks or PerksInventory(context.lcu)

        self.champion = None
        self.positions: List[str] = []
        self.perks_by_position: Dict[str, List[Dict[str, Any]]] = {}
        self.selected_position: Optional[str] = None
        self.pending_perks: Optional[List[Dict[str, Any]]] = None
        self.pending_spells: Optional[tuple] = None

        self._lock = threading.RLock()
        self._threads: List[threading.Thread] = []

    def attach(self, machine):
        return machine.subscribe(self)

    def __call__(self, ev):
        if isinstance(ev, ChampionChosen):
            self._on_champion_chosen(ev)
        elif isinstance(ev, (PhaseEntered, ChampionCleared)):
            self.context.status.set("champion-select-pick")
        elif isinstance(ev, PhaseExited):
            self._on_exit()

    def _reset_display(self):
        with self._lock:
            self.positions = []
            self.perks_by_position = {}
            self.selected_position = None
            self.pending_perks = None
            self.pending_spells = None

    def _on_champion_chosen(self, ev: ChampionChosen):
        self._reset_display()
        self.champion = ev.champion
        self.context.status.set("champion-updating-display", ev.champion.name)
        if ev.downloads is None:
            return
        t = threading.Thread(
            target=self.consume,
            args=(ev.champion, ev.downloads),
            name=f"apply-{ev.champion.key}",
            daemon=True,
        )
        self._threads = [x for x in self._threads if x.is_alive()] + [t]
        t.start()

    def _on_exit(self):
        self._reset_display()
        self.champion = None
        self.perks.reset()
        self.context.status.set("champion-select-waiting")

    def wait_idle(self, timeout: float | None = None):
        for t in list(self._threads):
            t.join(timeout)

    def consume(self, champion, stream: DownloadStream):
        for dl in stream:
            try:
                self.handle(champion, dl, stream)
            except Exception as e:
                self.context.errors.report("customization", e)

    def handle(self, champion, dl: DownloadEvent, stream: Optional[DownloadStream] = None):
        """Apply one download. Events from a cancelled stream are dropped; the check
        is made under the lock guarding the write so a champion change cannot interleave."""
        settings = self.context.settings

        def stale() -> bool:
            return stream is not None and stream.cancelled

        if dl.name == ITEM_SET:
            if settings.enable_item_sets:
                with self.item_sets.lock:
                    if stale():
                        return
                    self.item_sets.save(dl.payload)

        elif dl.name == SUMMONER_SPELLS:
            spells = _spell_pair(dl.payload)
            with self._lock:
                if stale():
                    return
                if settings.enable_summoner_spells:
                    self.context.lcu.set_summoner_spells(*spells)
                else:
                    self.pending_spells = spells

        elif dl.name == PERKS_PAGE:
            pos = dl.position or "ANY"
            with self._lock:
                if stale():
                    return
                if pos not in self.perks_by_position:
                    self.positions.append(pos)
                self.perks_by_position[pos] = list(dl.payload or [])
                if self.selected_position is None:
                    self.select_position(champion, pos)

    def select_position(self, champion, position: str):
        with self._lock:
            pages = self.perks_by_position.get(position)
            if pages is None:
                raise KeyError(f"no rune pages for position {position!r}")
            self.selected_position = position

            if self.context.settings.load_runes_automatically:
                self.perks.update_perks_pages(pages)
                self.pending_perks = None
            else:
                self.pending_perks = pages

        self.context.status.set("runes-loaded", champion.name, position)

    def load_pending(self):
        """Manual "load" button: apply what auto-apply settings held back."""
        if self.pending_perks:
            self.perks.update_perks_pages(self.pending_perks)
            self.pending_perks = None
        if self.pending_spells:
            self.context.lcu.set_summoner_spells(*self.pending_spells)
            self.pending_spells = None


def _spell_pair(payload) -> tuple:
    if isinstance(payload, dict):
        return int(payload["spell1Id"]), int(payload["spell2Id"])
    a, b = list(payload)[:2]
    return int(a), int(b)
