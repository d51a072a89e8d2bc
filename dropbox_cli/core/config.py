"""Configuration helpers for dropbox CLI."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigError
from .client import DropboxClient
from .http import Transport

CONFIG_PATH = Path(os.path.expanduser("~")) / ".dropbox-cli.json"

# config key -> environment variable overriding it
ENV_KEYS = {
    "access_token": "DROPBOX_ACCESS_TOKEN",
    "refresh_token": "DROPBOX_REFRESH_TOKEN",
    "app_key": "DROPBOX_APP_KEY",
    "app_secret": "DROPBOX_APP_SECRET",
}


def load_config() -> Dict[str, Any]:
    """Load configuration from disk and environment."""
    cfg: Dict[str, Any] = {}
    if CONFIG_PATH.exists():
        try:
            cfg = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except ValueError:
            cfg = {}
    for key, env in ENV_KEYS.items():
        if os.getenv(env):
            cfg[key] = os.getenv(env)
    return cfg


def save_config(**values: str | None) -> None:
    """Persist the non-``None`` *values* to CONFIG_PATH."""
    cfg: Dict[str, Any] = {}
    if CONFIG_PATH.exists():
        try:
            cfg = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except ValueError:
            cfg = {}
    for key, value in values.items():
        if key not in ENV_KEYS:
            raise ValueError(f"Unknown config key: {key}")
        if value is not None:
            cfg[key] = value
    CONFIG_PATH.write_text(json.dumps(cfg, ensure_ascii=False, indent=2), encoding="utf-8")
    # tokens live in this file
    CONFIG_PATH.chmod(0o600)
    print(f"Saved config to {CONFIG_PATH}")


def get_transport(verbose: bool = False) -> Transport:
    """Return a :class:`Transport` built from the stored credentials.

    Raises :class:`ConfigError` when neither an access token nor a refresh
    token with an app key is available.
    """
    cfg = load_config()
    if not cfg.get("access_token") and not (cfg.get("refresh_token") and cfg.get("app_key")):
        raise ConfigError(
            "Missing token. Run: dropbox auth set --token <ACCESS_TOKEN> "
            "(or --refresh-token <TOKEN> --app-key <KEY>)"
        )
    return Transport(
        cfg.get("access_token"),
        refresh_token=cfg.get("refresh_token"),
        app_key=cfg.get("app_key"),
        app_secret=cfg.get("app_secret"),
        verbose=verbose,
    )


def get_client(verbose: bool = False) -> DropboxClient:
    return DropboxClient(get_transport(verbose))
