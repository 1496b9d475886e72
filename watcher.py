from __future__ import annotations

from typing import Optional

from champ_select import SelectionStateMachine
from session_poller import FetchOutcome, SessionPoller


class ChampionSelectWatcher:
    """Poller -> state machine wiring. load() starts polling, stop() ends it."""

    def __init__(self, context, machine: SelectionStateMachine, poller: Optional[SessionPoller] = None):
        self.context = context
        self.machine = machine
        self.poller = poller or SessionPoller(context)
        self.poller.on_outcome = self._on_outcome

    def _on_outcome(self, outcome: FetchOutcome):
        # tick boundary: nothing escapes into the poller thread
        try:
            self.machine.process(outcome)
        except Exception as e:
            self.context.errors.report("tick", e)

    def load(self, interval: float | None = None) -> bool:
        self.context.status.set("champion-select-waiting")
        return self.poller.start(interval or self.context.settings.poll_interval)

    def tick(self):
        return self.poller.tick()

    def stop(self, wait: bool = False):
        self.poller.stop(wait=wait)
