from upstate.core.events import EventBus
from upstate.core.state import Hidden, Shown
from upstate.overlay import OverlayController


def test_starts_hidden():
    overlay = OverlayController()
    assert overlay.store.get() == Hidden()
    assert not overlay.is_shown()


def test_toggle_same_route_hides_and_fires_callback_once():
    overlay = OverlayController()
    calls = []
    overlay.toggle("settings", lambda: calls.append("c1"))

    state = overlay.store.get()
    assert isinstance(state, Shown)
    assert state.route == "settings"

    overlay.toggle("settings")
    assert overlay.store.get() == Hidden()
    assert calls == ["c1"]


def test_toggle_other_route_replaces_without_callback():
    overlay = OverlayController()
    calls = []
    overlay.toggle("settings", lambda: calls.append("c1"))
    overlay.toggle("help")

    state = overlay.store.get()
    assert isinstance(state, Shown)
    assert state.route == "help"
    assert overlay.is_shown("help")
    assert not overlay.is_shown("settings")

    overlay.hide()
    assert calls == []


def test_hide_when_hidden_is_noop():
    events = EventBus()
    hidden = []
    events.subscribe("overlay.hidden", hidden.append)
    overlay = OverlayController(events)

    overlay.hide()
    assert overlay.store.get() == Hidden()
    assert hidden == []


def test_hide_runs_callback_before_clearing_state():
    overlay = OverlayController()
    observed = []
    overlay.toggle("modal", lambda: observed.append(overlay.store.get()))
    overlay.hide()

    assert len(observed) == 1
    assert isinstance(observed[0], Shown)
    assert overlay.store.get() == Hidden()


def test_reentrant_hide_from_callback_fires_once():
    overlay = OverlayController()
    calls = []

    def on_hide():
        calls.append("hide")
        overlay.hide()

    overlay.toggle("modal", on_hide)
    overlay.hide()
    assert calls == ["hide"]
    assert overlay.store.get() == Hidden()


def test_failing_callback_still_hides():
    overlay = OverlayController()

    def on_hide():
        raise RuntimeError("boom")

    overlay.toggle("modal", on_hide)
    overlay.hide()
    assert overlay.store.get() == Hidden()


def test_state_is_always_hidden_or_shown():
    overlay = OverlayController()
    seen = []
    overlay.store.subscribe(seen.append)
    for route in ["a", "b", "a", "a", "c", "c", "b"]:
        overlay.toggle(route)
        if route == "c":
            overlay.hide()

    assert len(seen) == 10
    assert all(isinstance(state, (Hidden, Shown)) for state in seen)


def test_transitions_are_published():
    events = EventBus()
    log = []
    events.subscribe("overlay.shown", lambda route: log.append(("shown", route)))
    events.subscribe("overlay.hidden", lambda route: log.append(("hidden", route)))
    overlay = OverlayController(events)

    overlay.toggle("settings")
    overlay.toggle("help")
    overlay.toggle("help")
    assert log == [("shown", "settings"), ("shown", "help"), ("hidden", "help")]
