"""Environment settings for contract-deployer."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

from .artifacts import ArtifactLayout
from .constants import (
    DEFAULT_ABI_SUB_DIR,
    DEFAULT_ABI_SUFFIX,
    DEFAULT_BATCH_INTERVAL,
    DEFAULT_BATCH_SIZE,
    DEFAULT_BIN_SUB_DIR,
    DEFAULT_BIN_SUFFIX,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_RPC_URL,
    ENV_ABI_SUB_DIR,
    ENV_ABI_SUFFIX,
    ENV_BATCH_INTERVAL,
    ENV_BATCH_SIZE,
    ENV_BIN_SUB_DIR,
    ENV_BIN_SUFFIX,
    ENV_CONFIG_PATH,
    ENV_LOG_JSON,
    ENV_LOG_LEVEL,
    ENV_RECEIPT_TIMEOUT,
    ENV_RPC_URL,
    ENV_RPC_URL_LEGACY,
)
from .exceptions import SettingsError


def _get_int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise SettingsError(f"{name} must be at least {minimum}, got {value}")
    return value


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise SettingsError(f"{name} must not be negative, got {value}")
    return value


def _get_bool(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup."""

    rpc_url: str = DEFAULT_RPC_URL
    config_path: Optional[Path] = None
    layout: ArtifactLayout = field(default_factory=ArtifactLayout)
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_interval: float = DEFAULT_BATCH_INTERVAL
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[Union[Path, str]] = None,
    ) -> "Settings":
        """
        Build settings from the environment.

        Values from a .env file fill in anything the environment does not
        set; the process environment always wins.

        Args:
            env: Environment mapping (defaults to os.environ)
            dotenv_path: .env file to read (defaults to ./.env if present and
                         env is not given)

        Returns:
            Settings instance

        Raises:
            SettingsError: If a numeric setting is malformed
        """
        if dotenv_path is None and env is None and Path(".env").is_file():
            dotenv_path = Path(".env")

        merged = {}
        if dotenv_path is not None:
            merged.update({k: v for k, v in dotenv_values(dotenv_path).items() if v is not None})
        merged.update(os.environ if env is None else env)

        rpc_url = merged.get(ENV_RPC_URL) or merged.get(ENV_RPC_URL_LEGACY) or DEFAULT_RPC_URL
        config_path = merged.get(ENV_CONFIG_PATH)

        layout = ArtifactLayout(
            abi_dir=merged.get(ENV_ABI_SUB_DIR) or DEFAULT_ABI_SUB_DIR,
            abi_suffix=merged.get(ENV_ABI_SUFFIX, DEFAULT_ABI_SUFFIX),
            bin_dir=merged.get(ENV_BIN_SUB_DIR) or DEFAULT_BIN_SUB_DIR,
            bin_suffix=merged.get(ENV_BIN_SUFFIX, DEFAULT_BIN_SUFFIX),
        )

        return cls(
            rpc_url=rpc_url,
            config_path=Path(config_path) if config_path else None,
            layout=layout,
            batch_size=_get_int(merged, ENV_BATCH_SIZE, DEFAULT_BATCH_SIZE, minimum=1),
            batch_interval=_get_float(merged, ENV_BATCH_INTERVAL, DEFAULT_BATCH_INTERVAL),
            receipt_timeout=_get_float(merged, ENV_RECEIPT_TIMEOUT, DEFAULT_RECEIPT_TIMEOUT),
            log_level=merged.get(ENV_LOG_LEVEL) or "INFO",
            log_json=_get_bool(merged, ENV_LOG_JSON),
        )
