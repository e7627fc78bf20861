"""Load config.yaml, expand ${VAR} references from the environment and validate."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30
    receipt_poll_interval: float = 1.0


@dataclass(frozen=True)
class MarginConfig:
    chain: str = ""
    address: str = ""
    gas: int | None = None
    gas_price: int | None = None

    def default_options(self) -> dict[str, int]:
        """Call options applied to every write unless the caller overrides them."""
        options: dict[str, int] = {}
        if self.gas is not None:
            options["gas"] = self.gas
        if self.gas_price is not None:
            options["gasPrice"] = self.gas_price
        return options


@dataclass(frozen=True)
class AppConfig:
    chains: dict[str, ChainConfig] = field(default_factory=dict)
    margin: MarginConfig = field(default_factory=MarginConfig)

    @property
    def margin_chain(self) -> ChainConfig:
        return self.chains[self.margin.chain]


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _build_chains(raw: dict[str, Any]) -> dict[str, ChainConfig]:
    chains: dict[str, ChainConfig] = {}
    for name, cfg in raw.items():
        chains[name] = ChainConfig(
            rpc_endpoints=tuple(e for e in cfg.get("rpc_endpoints", []) if e),
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
            receipt_poll_interval=float(cfg.get("receipt_poll_interval", 1.0)),
        )
    return chains


def _build_margin(raw: dict[str, Any]) -> MarginConfig:
    return MarginConfig(
        chain=raw.get("chain", ""),
        address=raw.get("address", ""),
        gas=_optional_int(raw.get("gas")),
        gas_price=_optional_int(raw.get("gas_price")),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate client configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            current working directory.
    """
    load_dotenv()

    if config_path is None:
        config_path = Path.cwd() / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chains=_build_chains(raw.get("chains", {})),
        margin=_build_margin(raw.get("margin", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.margin.address:
        raise ValueError("Margin contract address is not configured")

    if cfg.margin.chain not in cfg.chains:
        raise ValueError(
            f"Margin contract references unknown chain '{cfg.margin.chain}'"
        )

    if not cfg.margin_chain.rpc_endpoints:
        raise ValueError(f"Chain '{cfg.margin.chain}' has no RPC endpoints")
