"""Process configuration.

Defaults live on the models below. Environment variables override them,
named CHESSLEDGER_<SECTION>__<FIELD>, e.g. CHESSLEDGER_STORE__URL or
CHESSLEDGER_HISTORY__WINDOW. A .env file is loaded first unless
CHESSLEDGER_TEST_MODE is set.
"""

from __future__ import annotations

import os
from typing import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "CHESSLEDGER_"


class StoreSettings(BaseModel):
    url: str = "http://127.0.0.1:8300"
    api_token: str | None = None
    gateway_url: str | None = "https://ipfs.io/ipfs"
    timeout: float = Field(default=30.0, gt=0)


class LedgerSettings(BaseModel):
    url: str = "http://127.0.0.1:8400"
    timeout: float = Field(default=60.0, gt=0)


class HistorySettings(BaseModel):
    window: int = Field(default=5, ge=0)


class NodeSettings(BaseModel):
    """Reference content store + ledger nodes (``serve`` command)."""

    data_dir: str = "chessledger/data/node"
    host: str = "127.0.0.1"
    store_port: int = 8300
    ledger_port: int = 8400


class WalletSettings(BaseModel):
    key_file: str | None = None


class Settings(BaseModel):
    store: StoreSettings = Field(default_factory=StoreSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    node: NodeSettings = Field(default_factory=NodeSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)


def is_test_mode(env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    return env.get(f"{ENV_PREFIX}TEST_MODE", "").lower() in ("true", "1")


def _env_overrides(env: Mapping[str, str]) -> dict[str, dict[str, str]]:
    """Collect CHESSLEDGER_<SECTION>__<FIELD> variables into nested dicts."""
    overrides: dict[str, dict[str, str]] = {}
    for key, value in env.items():
        if not key.startswith(ENV_PREFIX) or "__" not in key:
            continue
        section, _, field = key[len(ENV_PREFIX):].lower().partition("__")
        if section in Settings.model_fields and field:
            overrides.setdefault(section, {})[field] = value
    return overrides


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from defaults overridden by environment variables.

    Raises pydantic.ValidationError on malformed values.
    """
    if env is None:
        if not is_test_mode():
            load_dotenv()
        env = os.environ
    return Settings.model_validate(_env_overrides(env))


__all__ = [
    "HistorySettings",
    "LedgerSettings",
    "NodeSettings",
    "Settings",
    "StoreSettings",
    "WalletSettings",
    "load_settings",
]
