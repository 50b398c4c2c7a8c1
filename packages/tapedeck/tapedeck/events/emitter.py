"""EventRegistry — publish/subscribe over a closed set of event names.

The registry only accepts the event names it was created with; subscribing
to or emitting anything else raises ``InvalidEventError``.  Listeners are
kept per event in subscription order.  Subscribing the same listener twice
creates two subscriptions (no deduplication) and ``off`` removes the first
matching one, so every ``on`` needs its own ``off``.

Two dispatch flavours exist:

``emit_sync``
    Calls listeners synchronously.  Used during recording construction,
    where nothing may suspend.

``emit``
    Calls listeners in order and awaits whatever each one returns before
    calling the next, so the caller resumes only once all listener work
    has finished.

Listener errors propagate to the emitter's caller.

Thread / asyncio safety
-----------------------
Subscriptions are not locked.  The process-wide registry is expected to be
mutated from the thread running the event loop only.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Union

from tapedeck.exceptions import InvalidEventError
from tapedeck.logging import get_logger

log = get_logger(__name__)

Listener = Callable[..., Union[Awaitable[Any], Any]]


@dataclass
class _Subscription:
    listener: Listener
    once: bool = False


class EventRegistry:
    """Ordered listener lists keyed by a fixed set of event names.

    Usage::

        events = EventRegistry(event_names=["register", "create", "stop"])
        events.on("create", lambda recording: print(recording.recording_id))
        events.emit_sync("create", recording)
        await events.emit("stop", recording)
    """

    def __init__(self, event_names: Iterable[str]) -> None:
        self._event_names: tuple[str, ...] = tuple(event_names)
        self._subscriptions: dict[str, list[_Subscription]] = {
            name: [] for name in self._event_names
        }

    @property
    def event_names(self) -> tuple[str, ...]:
        return self._event_names

    # ------------------------------------------------------------------
    # Subscription management
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> "EventRegistry":
        """Subscribe *listener* to *event*."""
        self._subscribe(event, listener, once=False)
        return self

    def once(self, event: str, listener: Listener) -> "EventRegistry":
        """Subscribe *listener* to the next emission of *event* only."""
        self._subscribe(event, listener, once=True)
        return self

    def off(self, event: str, listener: Listener | None = None) -> "EventRegistry":
        """Remove the first subscription of *listener* to *event*.

        Without a listener every subscription of *event* is removed.
        Removing a listener that is not subscribed is a no-op.
        """
        subscriptions = self._subscriptions_for(event)
        if listener is None:
            subscriptions.clear()
            log.debug("event_listeners_cleared", event_name=event)
            return self

        for i, subscription in enumerate(subscriptions):
            if subscription.listener == listener:
                subscriptions.pop(i)
                log.debug("event_listener_removed", event_name=event)
                break
        return self

    def has_listener(self, event: str, listener: Listener) -> bool:
        return any(s.listener == listener for s in self._subscriptions_for(event))

    def listener_count(self, event: str) -> int:
        return len(self._subscriptions_for(event))

    def listeners(self, event: str) -> list[Listener]:
        return [s.listener for s in self._subscriptions_for(event)]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def emit_sync(self, event: str, *args: Any) -> None:
        """Call every listener of *event* synchronously, in subscription order."""
        for subscription in self._take(event):
            result = subscription.listener(*args)
            if inspect.isawaitable(result):
                # Nothing can await it here; close coroutines so they do
                # not leak "never awaited" warnings.
                log.warning(
                    "event_listener_returned_awaitable",
                    event_name=event,
                    listener=getattr(subscription.listener, "__qualname__", repr(subscription.listener)),
                )
                if inspect.iscoroutine(result):
                    result.close()

    async def emit(self, event: str, *args: Any) -> None:
        """Call every listener of *event* in order, awaiting each one's result."""
        for subscription in self._take(event):
            result = subscription.listener(*args)
            if inspect.isawaitable(result):
                await result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _subscribe(self, event: str, listener: Listener, *, once: bool) -> None:
        subscriptions = self._subscriptions_for(event)
        if not callable(listener):
            raise TypeError(f"Event listener must be callable, got {listener!r}")
        subscriptions.append(_Subscription(listener=listener, once=once))
        log.debug("event_listener_added", event_name=event, once=once)

    def _subscriptions_for(self, event: str) -> list[_Subscription]:
        if event not in self._subscriptions:
            raise InvalidEventError(event, list(self._event_names))
        return self._subscriptions[event]

    def _take(self, event: str) -> list[_Subscription]:
        """Snapshot the listeners of *event*, dropping ``once`` subscriptions."""
        subscriptions = self._subscriptions_for(event)
        snapshot = list(subscriptions)
        subscriptions[:] = [s for s in subscriptions if not s.once]
        return snapshot
