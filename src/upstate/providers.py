"""In-process wallet provider for development runs and the CLI."""

from __future__ import annotations

import asyncio

from upstate.config import EmulatorSettings
from upstate.logging import get_logger
from upstate.wallet import WalletAccount, WalletProviderError


class EmulatorWalletProvider:
    """Answers account requests after a fixed latency, like a local wallet would.

    ``network`` pins the network the emulated wallet reports; left unset, it
    reports whatever network was requested.
    """

    def __init__(
        self,
        account: str,
        network: str | None = None,
        latency: float = 0.0,
        reject: bool = False,
    ) -> None:
        self.account = account
        self.network = network
        self.latency = latency
        self.reject = reject
        self.sessions_open = 0
        self.logger = get_logger("wallet-emulator")

    @classmethod
    def from_settings(cls, settings: EmulatorSettings, reject: bool = False) -> EmulatorWalletProvider:
        return cls(
            account=settings.account,
            network=settings.network,
            latency=settings.latency,
            reject=reject,
        )

    async def request_account(self, network: str) -> WalletAccount:
        if self.latency:
            await asyncio.sleep(self.latency)
        if self.reject:
            raise WalletProviderError("user rejected the request")
        self.sessions_open += 1
        self.logger.debug("Emulated session opened for {}", self.account)
        return WalletAccount(account=self.account, network=self.network or network)

    def teardown_session(self) -> None:
        self.sessions_open -= 1
