"""Selected network environment and the network each environment expects."""

from __future__ import annotations

from typing import Protocol

from upstate.config import NetworkSettings
from upstate.core.store import DerivedStore, Readable, WritableStore
from upstate.logging import get_logger


class UnknownEnvironmentError(ValueError):
    """Raised when selecting an environment the settings do not define."""


class EnvironmentSelector(Protocol):
    @property
    def environment(self) -> Readable[str]: ...

    def supported_network(self, environment: str) -> str: ...


class NetworkEnvironment:
    """Settings-backed environment selector.

    The selected environment lives in its own store so views and the wallet
    mismatch check follow changes made after a wallet connected.
    """

    def __init__(self, settings: NetworkSettings) -> None:
        self.settings = settings
        self.logger = get_logger("network")
        self._selected = WritableStore(settings.default_environment, name="environment")
        self._view = self._selected.readonly()

    @property
    def environment(self) -> DerivedStore[str]:
        return self._view

    @property
    def available(self) -> list[str]:
        return sorted(self.settings.environments)

    def supported_network(self, environment: str) -> str:
        try:
            return self.settings.environments[environment]
        except KeyError:
            raise UnknownEnvironmentError(
                f"unknown environment {environment!r}; expected one of {self.available}"
            ) from None

    def select(self, environment: str) -> None:
        self.supported_network(environment)
        if environment != self._selected.get():
            self.logger.info("Environment switched to {}", environment)
        self._selected.set(environment)
