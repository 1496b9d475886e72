# env_loader.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

_LOADED = False


def _project_dir() -> Path:
    # folder of this file is the project root
    return Path(__file__).resolve().parent


def _truthy(v: str | None) -> bool:
    s = (v or "").strip().lower()
    return s in ("1", "true", "yes", "y", "on")


def load_project_env(profile: str | None = None, override: bool = False) -> str:
    """
    profile precedence:
      1) explicit profile argument
      2) env APP_PROFILE
      3) default "personal"

    load order:
      - .env.<profile> first, when present
      - then .env (profile values win unless override=True)
    """
    global _LOADED
    if _LOADED:
        # safe to call from several modules
        return os.getenv("APP_PROFILE", profile or "") or ""

    proj = _project_dir()

    p = (profile or os.getenv("APP_PROFILE") or "personal").strip().lower() or "personal"
    os.environ["APP_PROFILE"] = p

    env_profile = proj / f".env.{p}"
    env_default = proj / ".env"

    loaded = False
    if env_profile.exists():
        load_dotenv(dotenv_path=env_profile, override=override)
        loaded = True

    if env_default.exists():
        load_dotenv(dotenv_path=env_default, override=False if loaded else override)

    _LOADED = True
    return p


def _float_env(env: Mapping[str, str], name: str, default: float, floor: float | None = None) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        v = float(raw)
    except ValueError:
        return default
    if floor is not None and v < floor:
        return floor
    return v


def _bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return _truthy(raw)


@dataclass
class Settings:
    poll_interval: float = 1.0
    lockfile: Optional[str] = None
    lcu_timeout: float = 2.0
    enable_item_sets: bool = True
    enable_summoner_spells: bool = True
    load_runes_automatically: bool = False
    champion_locale: str = "en_US"
    log_file: Optional[str] = None
    verbose: bool = False


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the process env (call load_project_env() first)."""
    env = os.environ if environ is None else environ

    return Settings(
        poll_interval=_float_env(env, "MANA_POLL_INTERVAL", 1.0, floor=0.1),
        lockfile=(env.get("LOL_LOCKFILE") or "").strip() or None,
        lcu_timeout=_float_env(env, "LCU_TIMEOUT", 2.0, floor=0.1),
        enable_item_sets=_bool_env(env, "MANA_ENABLE_ITEMSETS", True),
        enable_summoner_spells=_bool_env(env, "MANA_ENABLE_SUMMONER_SPELLS", True),
        load_runes_automatically=_bool_env(env, "MANA_LOAD_RUNES_AUTOMATICALLY", False),
        champion_locale=(env.get("MANA_CHAMPION_LOCALE") or "en_US").strip() or "en_US",
        log_file=(env.get("MANA_LOG_FILE") or "").strip() or None,
        verbose=_bool_env(env, "MANA_VERBOSE", False),
    )
