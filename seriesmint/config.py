"""
Series-mint configuration.

Typed configuration objects for:
- mint policy (capacity enforcement, whether minting is role-gated)
- storage URI for registries, ledger, roles and events
- logging level for the CLI / RPC host

Provides:
- Dataclass-based configs with validation
- Loading from environment variables (prefix configurable)
- Loading from a JSON or YAML file (PyYAML)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict

import yaml

from .store.factory import SCHEMES

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass
class StorageConfig:
    """
    Where the engine persists its state.

    uri:
      - ``memory://``              process-local, lost on exit
      - ``sqlite:///path/to.db``   durable SQLite file
    """

    uri: str = "memory://"

    def validate(self) -> None:
        if "://" not in self.uri:
            raise ValueError("storage uri must be a URI (e.g., sqlite:///data/series.db)")
        scheme = self.uri.split("://", 1)[0]
        if scheme not in SCHEMES:
            raise ValueError(f"unsupported storage scheme {scheme!r}; expected one of {SCHEMES}")


@dataclass
class SeriesMintConfig:
    """
    Mint policy:
      - enforce_capacity: reject mints once ``issued_count`` reaches the
        series' declared capacity. Off by default, matching the historical
        behaviour where the capacity is recorded but not enforced.
      - permissionless_mint: skip the MINTER_ROLE gate on ``mint``; anyone
        holding a valid proof may trigger issuance.

    Host:
      - engine_address: identity the engine presents to its issuer (hex).
      - log_level: stdlib logging level name.
    """

    enforce_capacity: bool = False
    permissionless_mint: bool = False
    engine_address: str = "0x" + "5e" * 20
    log_level: str = "INFO"

    storage: StorageConfig = field(default_factory=StorageConfig)

    def validate(self) -> None:
        if self.log_level.upper() not in _LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LEVELS)}")
        addr = self.engine_address
        body = addr[2:] if addr.startswith(("0x", "0X")) else addr
        if not body or len(body) % 2 or any(c not in "0123456789abcdefABCDEF" for c in body):
            raise ValueError("engine_address must be a non-empty hex string")
        self.storage.validate()

    def engine_address_bytes(self) -> bytes:
        a = self.engine_address
        return bytes.fromhex(a[2:] if a.startswith(("0x", "0X")) else a)

    def log_level_int(self) -> int:
        return getattr(logging, self.log_level.upper())

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_env(prefix: str = "ANIMICA_SERIES_") -> "SeriesMintConfig":
        """
        Load configuration from environment variables. All are optional.

          - ANIMICA_SERIES_ENFORCE_CAPACITY=true
          - ANIMICA_SERIES_PERMISSIONLESS_MINT=false
          - ANIMICA_SERIES_ENGINE_ADDRESS=0x5e5e...
          - ANIMICA_SERIES_LOG_LEVEL=DEBUG
          - ANIMICA_SERIES_STORE=sqlite:///data/series.db
        """

        def _get(name: str, cast: Any, default: Any) -> Any:
            key = prefix + name
            raw = os.getenv(key)
            if raw is None:
                return default
            try:
                if cast is bool:
                    return raw.lower() in {"1", "true", "yes", "on"}
                return cast(raw)
            except Exception as e:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from e

        defaults = SeriesMintConfig()
        cfg = SeriesMintConfig(
            enforce_capacity=_get("ENFORCE_CAPACITY", bool, defaults.enforce_capacity),
            permissionless_mint=_get("PERMISSIONLESS_MINT", bool, defaults.permissionless_mint),
            engine_address=_get("ENGINE_ADDRESS", str, defaults.engine_address),
            log_level=_get("LOG_LEVEL", str, defaults.log_level),
            storage=StorageConfig(uri=_get("STORE", str, defaults.storage.uri)),
        )
        cfg.validate()
        return cfg

    @staticmethod
    def from_file(path: str) -> "SeriesMintConfig":
        """
        Load configuration from a JSON or YAML file. Keys mirror the dataclass
        structure. Example (YAML):

            enforce_capacity: true
            log_level: DEBUG
            storage:
              uri: "sqlite:///data/series.db"
        """
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        data = _parse_json_or_yaml(text, path)

        defaults = SeriesMintConfig()
        storage_d = data.pop("storage", {}) or {}
        cfg = SeriesMintConfig(
            enforce_capacity=bool(data.pop("enforce_capacity", defaults.enforce_capacity)),
            permissionless_mint=bool(data.pop("permissionless_mint", defaults.permissionless_mint)),
            engine_address=str(data.pop("engine_address", defaults.engine_address)),
            log_level=str(data.pop("log_level", defaults.log_level)),
            storage=StorageConfig(uri=str(storage_d.get("uri", defaults.storage.uri))),
        )
        if data:
            raise ValueError(f"unknown config keys in {path!r}: {sorted(data)}")
        cfg.validate()
        return cfg


def _parse_json_or_yaml(text: str, path_hint: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse {path_hint!r} as JSON or YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"{path_hint!r} must contain a mapping at the top level")
    return data


DEFAULT: SeriesMintConfig = SeriesMintConfig()

__all__ = ["StorageConfig", "SeriesMintConfig", "DEFAULT"]
