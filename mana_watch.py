# mana_watch.py
from __future__ import annotations

import argparse
import os
import time
from dataclasses import replace

import requests

from champ_select import SelectionStateMachine
from champion_catalog import ChampionCatalog
from customization import CustomizationApplier
from download import DownloadCoordinator
from env_loader import load_project_env, load_settings
from game_modes import build_game_modes
from item_sets import ItemSetStore
from lcu_client import LCUClient
from session_context import SessionContext
from tee_log import TeeLogger
from watcher import ChampionSelectWatcher


def build_watcher(context: SessionContext, providers=()) -> ChampionSelectWatcher:
    item_sets = ItemSetStore(context.lcu)
    machine = SelectionStateMachine(
        context,
        build_game_modes(),
        coordinator=DownloadCoordinator(providers, errors=context.errors),
        item_sets=item_sets,
    )
    CustomizationApplier(context, item_sets).attach(machine)
    return ChampionSelectWatcher(context, machine)


def _load_catalog(locale: str, logger: TeeLogger) -> ChampionCatalog:
    try:
        return ChampionCatalog.load(locale=locale)
    except (requests.RequestException, OSError, ValueError) as e:
        logger.error("catalog", f"champion list unavailable, ids shown raw ({e})")
        return ChampionCatalog({})


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Watch champion select and apply builds.")
    ap.add_argument("--profile", default=None, help="env profile (.env.<profile>)")
    ap.add_argument("--interval", type=float, default=None, help="poll interval in seconds")
    ap.add_argument("--verbose", action="store_true")
    ap.add_argument("--once", action="store_true", help="poll a single time and exit")
    args = ap.parse_args(argv)

    profile = load_project_env(args.profile)
    settings = load_settings()
    if args.interval:
        settings = replace(settings, poll_interval=max(0.1, args.interval))
    if args.verbose:
        settings = replace(settings, verbose=True)

    logger = TeeLogger(settings.log_file, verbose=settings.verbose)
    try:
        lcu = LCUClient.from_env_or_guess(timeout=settings.lcu_timeout, lockfile=settings.lockfile)
    except FileNotFoundError as e:
        logger.error("lcu", str(e))
        return 2

    context = SessionContext.create(lcu, settings, _load_catalog(settings.champion_locale, logger), logger=logger)
    watcher = build_watcher(context)
    watcher.machine.subscribe(lambda ev: logger.info("event", repr(ev)))

    logger.info("mana", f"profile={profile} lcu={lcu.conn.base_url} interval={settings.poll_interval:.2f}s pid={os.getpid()}")

    if args.once:
        outcome = watcher.tick()
        logger.info("mana", f"outcome={type(outcome).__name__}")
        return 0

    watcher.load()
    try:
        while True:
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop(wait=True)
        watcher.machine.shutdown()
        logger.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
