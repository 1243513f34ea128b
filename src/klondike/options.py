"""Persistent user options stored as JSON in the user's home directory."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from .dealer import DEAL_MODES, MAX_DEAL_ATTEMPTS
from .drag import DROP_SENSITIVITY

logger = logging.getLogger(__name__)

USER_DIR = Path.home() / ".klondike"
OPTIONS_FILE = USER_DIR / "options.json"

DEFAULT_OPTIONS = {
    "deal_mode": "solvable",
    "auto_collect": True,
    "max_deal_attempts": MAX_DEAL_ATTEMPTS,
    "drop_sensitivity": DROP_SENSITIVITY,
}


def _under_pytest(path: Path) -> bool:
    return bool(os.getenv("PYTEST_CURRENT_TEST")) and path == USER_DIR / "options.json"


def load_options(path: str | Path | None = None) -> dict:
    """Return the saved options merged over :data:`DEFAULT_OPTIONS`.

    Missing or unreadable files fall back to the defaults.
    """
    opts = dict(DEFAULT_OPTIONS)
    path = Path(path) if path is not None else OPTIONS_FILE
    if _under_pytest(path) or not path.exists():
        return opts
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load options: %s", exc)
        return opts
    if not isinstance(data, dict):
        logger.warning("Ignoring options file %s: not a JSON object", path)
        return opts

    if data.get("deal_mode") in DEAL_MODES:
        opts["deal_mode"] = data["deal_mode"]
    if "auto_collect" in data:
        opts["auto_collect"] = bool(data["auto_collect"])
    for key, cast in (("max_deal_attempts", int), ("drop_sensitivity", float)):
        if key in data:
            try:
                opts[key] = cast(data[key])
            except (TypeError, ValueError):
                logger.warning("Invalid %s %r; using %r", key, data[key], opts[key])
    return opts


def save_options(data: dict, path: str | Path | None = None) -> None:
    path = Path(path) if path is not None else OPTIONS_FILE
    if _under_pytest(path):
        return
    opts = {k: data.get(k, v) for k, v in DEFAULT_OPTIONS.items()}
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(opts, f)
    except OSError as exc:
        logger.warning("Failed to save options: %s", exc)
