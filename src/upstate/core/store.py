"""Reactive value cells with ordered, synchronous subscriber fan-out."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Sequence
from typing import Any, Generic, Protocol, TypeVar

from upstate.logging import get_logger

T = TypeVar("T")
U = TypeVar("U")

Subscriber = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class Readable(Protocol[T]):
    """Read capability shared by every store: no way to write through it."""

    def get(self) -> T: ...

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe: ...


class _Subscription:
    __slots__ = ("callback", "active")

    def __init__(self, callback: Subscriber) -> None:
        self.callback = callback
        self.active = True


class _Fanout:
    """Ordered subscriber list that delivers values one at a time.

    Values pushed while a delivery round is running are queued and delivered
    after it, so every subscriber sees the same sequence of values.
    """

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self.logger = get_logger("store")
        self._subscriptions: list[_Subscription] = []
        self._pending: deque[Any] = deque()
        self._draining = False

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add(
        self,
        callback: Subscriber,
        current: Any,
        on_empty: Callable[[], None] | None = None,
    ) -> Unsubscribe:
        subscription = _Subscription(callback)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if not subscription.active:
                return
            subscription.active = False
            self._subscriptions.remove(subscription)
            if on_empty is not None and not self._subscriptions:
                on_empty()

        self._deliver(subscription, current)
        return unsubscribe

    def push(self, value: Any) -> None:
        self._pending.append(value)
        if self._draining:
            return
        self._draining = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for subscription in list(self._subscriptions):
                    if subscription.active:
                        self._deliver(subscription, current)
        finally:
            self._draining = False

    def _deliver(self, subscription: _Subscription, value: Any) -> None:
        try:
            subscription.callback(value)
        except Exception:
            name = getattr(subscription.callback, "__qualname__", repr(subscription.callback))
            self.logger.exception("Subscriber {} of store '{}' failed", name, self.owner)


class WritableStore(Generic[T]):
    """Mutable cell. Every ``set`` notifies all subscribers in registration order."""

    def __init__(self, value: T, *, name: str = "store") -> None:
        self.name = name
        self._value = value
        self._fanout = _Fanout(name)
        self._lock = threading.RLock()

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
            self._fanout.push(value)

    def update(self, fn: Callable[[T], T]) -> None:
        with self._lock:
            self.set(fn(self._value))

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        with self._lock:
            return self._fanout.add(callback, self._value)

    def readonly(self) -> DerivedStore[T]:
        """Return a view of this cell that can be read and subscribed to, never written."""
        return DerivedStore((self,), _identity, name=f"{self.name}:readonly")

    def __repr__(self) -> str:
        return f"WritableStore(name={self.name!r}, value={self._value!r})"


class DerivedStore(Generic[T]):
    """Read-only projection of one or more upstream stores.

    ``get`` always recomputes from the sources, so it is never stale even when
    nothing is subscribed. Upstream subscriptions are held only while the
    derived store itself has subscribers.
    """

    def __init__(
        self,
        sources: Sequence[Readable[Any]],
        projection: Callable[..., T],
        *,
        name: str = "derived",
    ) -> None:
        if not sources:
            raise ValueError("a derived store needs at least one source")
        self.name = name
        self._sources = tuple(sources)
        self._projection = projection
        self._fanout = _Fanout(name)
        self._upstream: list[Unsubscribe] = []
        self._attaching = False
        self._lock = threading.RLock()

    def get(self) -> T:
        return self._projection(*(source.get() for source in self._sources))

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        with self._lock:
            if not self._upstream:
                self._attach()
            release = self._fanout.add(callback, self.get(), on_empty=self._detach)

        def unsubscribe() -> None:
            with self._lock:
                release()

        return unsubscribe

    def _attach(self) -> None:
        # Sources call back immediately on subscribe; that first call carries nothing new.
        self._attaching = True
        try:
            self._upstream = [source.subscribe(self._on_source_change) for source in self._sources]
        finally:
            self._attaching = False

    def _detach(self) -> None:
        with self._lock:
            upstream, self._upstream = self._upstream, []
            for unsubscribe in upstream:
                unsubscribe()

    def _on_source_change(self, _value: Any) -> None:
        if self._attaching:
            return
        self._fanout.push(self.get())

    def __repr__(self) -> str:
        return f"DerivedStore(name={self.name!r}, sources={len(self._sources)})"


def _identity(value: T) -> T:
    return value


def writable(value: T, *, name: str = "store") -> WritableStore[T]:
    return WritableStore(value, name=name)


def derive(
    source: Readable[Any] | Sequence[Readable[Any]],
    projection: Callable[..., U],
    *,
    name: str = "derived",
) -> DerivedStore[U]:
    """Build a read-only store whose value is ``projection`` applied to its source(s).

    With a single source the projection receives its value; with a tuple or list
    of sources it receives one positional argument per source, in order.
    """
    sources = tuple(source) if isinstance(source, (tuple, list)) else (source,)
    return DerivedStore(sources, projection, name=name)
