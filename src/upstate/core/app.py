"""upstate application composition root."""

from __future__ import annotations

from dataclasses import dataclass

from upstate.config import UpstateSettings
from upstate.core.events import EventBus
from upstate.logging import get_logger
from upstate.network import NetworkEnvironment
from upstate.overlay import OverlayController
from upstate.providers import EmulatorWalletProvider
from upstate.wallet import WalletController, WalletProvider


@dataclass(slots=True)
class AppContext:
    settings: UpstateSettings
    events: EventBus
    network: NetworkEnvironment
    overlay: OverlayController
    wallet: WalletController

    def stop(self) -> None:
        self.overlay.hide()
        self.wallet.disconnect()


def build_context(
    settings: UpstateSettings,
    provider: WalletProvider | None = None,
) -> AppContext:
    events = EventBus()
    network = NetworkEnvironment(settings.network)
    overlay = OverlayController(events)
    wallet = WalletController(
        provider or EmulatorWalletProvider.from_settings(settings.wallet.emulator),
        network,
        settings.wallet,
        events,
    )

    logger = get_logger("bootstrap")
    logger.info("upstate context ready (environment {})", network.environment.get())

    return AppContext(
        settings=settings,
        events=events,
        network=network,
        overlay=overlay,
        wallet=wallet,
    )
