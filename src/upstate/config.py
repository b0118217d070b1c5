"""Application configuration models and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator


class AppPaths(BaseModel):
    """Resolved directories for upstate runtime assets."""

    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("UPSTATE_HOME", Path.home() / ".upstate"))
    )

    @property
    def config_dir(self) -> Path:
        return self.base_dir / "config"

    @property
    def logs_dir(self) -> Path:
        return self.base_dir / "logs"

    @property
    def data_dir(self) -> Path:
        return self.base_dir / "data"

    def ensure(self) -> None:
        for path in (self.base_dir, self.config_dir, self.logs_dir, self.data_dir):
            path.mkdir(parents=True, exist_ok=True)


class LoggingSettings(BaseModel):
    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_enabled: bool = True


class NetworkSettings(BaseModel):
    """Known environments and the network each one expects a wallet to be on."""

    environments: dict[str, str] = Field(
        default_factory=lambda: {
            "testnet": "testnet",
            "mainnet": "mainnet",
            "devnet": "devnet",
        }
    )
    default_environment: str = "testnet"

    @model_validator(mode="after")
    def _default_is_known(self) -> NetworkSettings:
        if self.default_environment not in self.environments:
            raise ValueError(
                f"default_environment {self.default_environment!r} is not one of "
                f"{sorted(self.environments)}"
            )
        return self


class EmulatorSettings(BaseModel):
    account: str = "0x0000000000000000000000000000000000000001"
    network: str | None = None
    latency: float = Field(default=0.25, ge=0.0, le=30.0)


class WalletSettings(BaseModel):
    connect_timeout: float = Field(default=30.0, ge=1.0, le=600.0)
    emulator: EmulatorSettings = Field(default_factory=EmulatorSettings)


class UpstateSettings(BaseModel):
    app_name: str = "upstate"
    is_dev: bool = False
    is_experimental: bool = False
    paths: AppPaths = Field(default_factory=AppPaths)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)


def _maybe_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _maybe_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    lowered = value.lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return None


def load_settings(env_path: Path | None = None) -> UpstateSettings:
    """Load user settings from environment variables and defaults."""

    env_file = env_path or Path('.env')
    if env_file.exists():
        load_dotenv(env_file)

    overrides: dict[str, Any] = {}

    if (mode := os.getenv('UPSTATE_ENV')) is not None:
        overrides['is_dev'] = mode.lower() == 'development'

    if (experimental := _maybe_bool(os.getenv('UPSTATE_EXPERIMENTAL'))) is not None:
        overrides['is_experimental'] = experimental

    if level := os.getenv('UPSTATE_LOG_LEVEL'):
        overrides.setdefault('logging', {})['level'] = level.upper()

    if environment := os.getenv('UPSTATE_ENVIRONMENT'):
        overrides.setdefault('network', {})['default_environment'] = environment.lower()

    if (timeout := _maybe_float(os.getenv('UPSTATE_CONNECT_TIMEOUT'))) is not None:
        overrides.setdefault('wallet', {})['connect_timeout'] = timeout

    settings = UpstateSettings(**overrides)
    settings.paths.ensure()
    return settings
