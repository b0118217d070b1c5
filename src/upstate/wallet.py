"""Wallet connection lifecycle.

``NotConnected -> Connecting -> Connected`` on success, back to
``NotConnected`` on failure or ``disconnect()``. Every attempt is numbered; a
provider answer that arrives for an attempt which is no longer current is
dropped instead of applied.

The provider request itself is never cancelled by ``disconnect()``. It runs to
completion and its result is discarded; a late success that finds no newer
attempt running has its session torn down.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

from upstate.config import WalletSettings
from upstate.core.events import EventBus
from upstate.core.state import Connected, Connecting, ConnectionState, NotConnected
from upstate.core.store import DerivedStore, WritableStore, derive
from upstate.logging import get_logger
from upstate.network import EnvironmentSelector


@dataclass(frozen=True, slots=True)
class WalletAccount:
    account: str
    network: str


class WalletProviderError(Exception):
    """Raised by a provider when authorization is rejected or fails."""


class WalletProvider(Protocol):
    async def request_account(self, network: str) -> WalletAccount: ...

    def teardown_session(self) -> None: ...


class WalletController:
    def __init__(
        self,
        provider: WalletProvider,
        environments: EnvironmentSelector,
        settings: WalletSettings | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.provider = provider
        self.environments = environments
        self.settings = settings or WalletSettings()
        self.events = events or EventBus()
        self.logger = get_logger("wallet")
        self._state: WritableStore[ConnectionState] = WritableStore(NotConnected(), name="wallet")
        self._generation = 0
        self.store: DerivedStore[ConnectionState] = self._state.readonly()
        self.network_mismatch: DerivedStore[bool] = derive(
            (self._state, environments.environment),
            self._is_mismatched,
            name="wallet:network-mismatch",
        )

    async def connect(self) -> None:
        current = self._state.get()
        if not isinstance(current, NotConnected):
            self.logger.debug("connect() ignored while {}", type(current).__name__)
            return

        self._generation += 1
        generation = self._generation
        environment = self.environments.environment.get()
        expected = self.environments.supported_network(environment)

        self._state.set(Connecting())
        self.events.emit("wallet.connecting", {"environment": environment, "network": expected})
        self.logger.info("Requesting wallet account on {} ({})", expected, environment)

        try:
            result = await asyncio.wait_for(
                self.provider.request_account(expected),
                timeout=self.settings.connect_timeout,
            )
        except asyncio.CancelledError:
            self._fail(generation, "connection attempt cancelled")
            raise
        except asyncio.TimeoutError:
            self._fail(generation, f"no answer from wallet within {self.settings.connect_timeout:g}s")
            return
        except Exception as exc:
            self._fail(generation, str(exc) or type(exc).__name__)
            return

        if generation != self._generation:
            self.logger.debug("Discarding wallet answer for superseded attempt {}", generation)
            # No newer attempt is in flight, so the session just opened is ours to close.
            if isinstance(self._state.get(), NotConnected):
                self._release_session()
            return

        if result.network != expected:
            self._release_session()
            self._fail(generation, f"wallet is on {result.network}, expected {expected}")
            return

        self._state.set(Connected(account=result.account, network=result.network))
        self.logger.info("Wallet {} connected on {}", result.account, result.network)
        self.events.emit("wallet.connected", {"account": result.account, "network": result.network})

    def disconnect(self) -> None:
        current = self._state.get()
        if isinstance(current, NotConnected):
            return

        self._generation += 1
        self._state.set(NotConnected())
        # While Connecting no session exists yet; a late answer releases its own.
        if isinstance(current, Connected):
            self._release_session()
        self.logger.info("Wallet disconnected")
        self.events.emit("wallet.disconnected", None)

    def _fail(self, generation: int, reason: str) -> None:
        if generation != self._generation:
            self.logger.debug("Ignoring failure of superseded attempt {}: {}", generation, reason)
            return
        self._state.set(NotConnected())
        self.logger.warning("Wallet connection failed: {}", reason)
        self.events.emit("wallet.connect_failed", {"reason": reason})

    def _release_session(self) -> None:
        try:
            self.provider.teardown_session()
        except Exception:
            self.logger.exception("Wallet provider teardown failed")

    def _is_mismatched(self, state: ConnectionState, environment: str) -> bool:
        if not isinstance(state, Connected):
            return False
        return state.network != self.environments.supported_network(environment)


def describe(state: ConnectionState) -> dict[str, Any]:
    """Flat view of a connection state, for logs and the CLI."""
    if isinstance(state, Connected):
        return {"status": "connected", "account": state.account, "network": state.network}
    if isinstance(state, Connecting):
        return {"status": "connecting"}
    return {"status": "not_connected"}
