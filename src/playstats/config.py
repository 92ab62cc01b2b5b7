from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import yaml

DEFAULT_RECENT_LIMIT = 50

CREDENTIAL_VARS = ("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET", "SPOTIFY_REFRESH_TOKEN")


@dataclass
class Config:
    raw: Dict[str, Any]

    @property
    def bucket(self) -> str:
        return self.raw["bucket"]

    @property
    def region(self) -> str:
        return self.raw.get("region", "us-east-1")

    @property
    def api(self) -> Dict[str, Any]:
        return self.raw["api"]

    @property
    def store(self) -> Dict[str, str]:
        return self.raw.get("store", {})

    @property
    def history_key(self) -> str:
        return _store_key(self.store, "history_key", "plays.json")

    @property
    def stats_key(self) -> str:
        return _store_key(self.store, "stats_key", "stats.json")

    @property
    def recent_limit(self) -> int:
        return int(self.raw.get("recent_limit", DEFAULT_RECENT_LIMIT))

    @property
    def enrichment(self) -> Dict[str, Any]:
        return self.raw.get("enrichment", {"enabled": False})


def _store_key(store: Dict[str, str], name: str, default: str) -> str:
    key = store.get(name, default)
    prefix = store.get("prefix")
    if not prefix:
        return key
    return f"{prefix.strip('/')}/{key.lstrip('/')}"


def load_config(path: str = "config.yaml") -> Config:
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    bucket = os.getenv("BUCKET_NAME") or raw.get("bucket")
    if not bucket:
        raise ValueError("bucket must be set in config.yaml or BUCKET_NAME")
    raw["bucket"] = bucket
    return Config(raw)


def get_spotify_credentials() -> Tuple[str, str, str]:
    values = [os.getenv(name) for name in CREDENTIAL_VARS]
    missing = [name for name, value in zip(CREDENTIAL_VARS, values) if not value]
    if missing:
        raise RuntimeError(f"Missing Spotify credentials; set {', '.join(missing)}")
    client_id, client_secret, refresh_token = values
    return client_id, client_secret, refresh_token
