"""Runtime state variants held by the application stores."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

OnHide = Callable[[], None]


def do_nothing() -> None:
    return None


class OnceCallback:
    """Wraps a zero-argument callback so only its first invocation runs it."""

    __slots__ = ("_callback", "_consumed")

    def __init__(self, callback: OnHide) -> None:
        self._callback = callback
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def __call__(self) -> None:
        if self._consumed:
            return
        self._consumed = True
        self._callback()

    def __repr__(self) -> str:
        name = getattr(self._callback, "__qualname__", repr(self._callback))
        return f"OnceCallback({name}, consumed={self._consumed})"


# --- Overlay ---


@dataclass(frozen=True, slots=True)
class Hidden:
    pass


@dataclass(frozen=True, slots=True)
class Shown:
    route: str
    on_hide: OnceCallback = field(compare=False)


OverlayState = Hidden | Shown


# --- Wallet connection ---


@dataclass(frozen=True, slots=True)
class NotConnected:
    pass


@dataclass(frozen=True, slots=True)
class Connecting:
    pass


@dataclass(frozen=True, slots=True)
class Connected:
    account: str
    network: str


ConnectionState = NotConnected | Connecting | Connected
