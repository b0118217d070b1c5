"""Single global overlay surface.

At most one overlay is shown at a time. Opening a route that is already shown
closes it, and closing runs the callback the opener supplied, once.
"""

from __future__ import annotations

from upstate.core.events import EventBus
from upstate.core.state import Hidden, OnceCallback, OnHide, OverlayState, Shown, do_nothing
from upstate.core.store import DerivedStore, WritableStore
from upstate.logging import get_logger


class OverlayController:
    def __init__(self, events: EventBus | None = None) -> None:
        self.events = events or EventBus()
        self.logger = get_logger("overlay")
        self._state: WritableStore[OverlayState] = WritableStore(Hidden(), name="overlay")
        self.store: DerivedStore[OverlayState] = self._state.readonly()

    def toggle(self, route: str, on_hide: OnHide = do_nothing) -> None:
        current = self._state.get()
        if isinstance(current, Shown) and current.route == route:
            self.hide()
            return

        # Switching routes replaces the overlay; the previous on_hide does not run.
        if isinstance(current, Shown):
            self.logger.debug("Overlay {} replaced by {}", current.route, route)
        self._state.set(Shown(route=route, on_hide=OnceCallback(on_hide)))
        self.events.emit("overlay.shown", route)

    def hide(self) -> None:
        current = self._state.get()
        if isinstance(current, Shown):
            try:
                current.on_hide()
            except Exception:
                self.logger.exception("on_hide callback for overlay {} failed", current.route)

        self._state.set(Hidden())
        if isinstance(current, Shown):
            self.events.emit("overlay.hidden", current.route)

    def is_shown(self, route: str | None = None) -> bool:
        current = self._state.get()
        if not isinstance(current, Shown):
            return False
        return route is None or current.route == route
