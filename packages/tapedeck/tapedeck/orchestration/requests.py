"""Orchestration layer — In-flight request tracking.

Adapters report every intercepted call through ``register_request`` and
receive a :class:`TrackedRequest`.  The adapter settles it either by
attaching the awaitable performing the call or by calling ``resolve`` /
``reject`` once the call finished.

``flush()`` waits for the completion of every request registered *before*
it was called.  Outcomes are observed and discarded: a failed or cancelled
request never makes ``flush()`` raise.  Requests are never removed from
the tracker.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, Awaitable, Iterator

from tapedeck.logging import get_logger

if TYPE_CHECKING:
    from tapedeck.core import Tapedeck

log = get_logger(__name__)


class TrackedRequest:
    """One observed request and its completion signal.

    Every request owns exactly one completion future.  It is created on
    the running loop the first time anything needs it, so requests can be
    registered before the loop starts.  A request that has not settled
    keeps ``flush()`` waiting, whether the adapter later attaches the
    call's awaitable or settles the request with :meth:`resolve` /
    :meth:`reject`.
    """

    def __init__(self, recording: "Tapedeck", data: dict[str, Any], order: int) -> None:
        self.recording = recording
        self.data = data
        self.order = order
        self.created_at = time.time()
        self._completion: asyncio.Future[Any] | None = None
        self._source: asyncio.Future[Any] | None = None

    @property
    def completion(self) -> "asyncio.Future[Any]":
        """The request's completion future.  Requires a running loop."""
        if self._completion is None:
            self._completion = asyncio.get_running_loop().create_future()
        return self._completion

    @property
    def settled(self) -> bool:
        return self._completion is not None and self._completion.done()

    def attach(self, awaitable: Awaitable[Any]) -> "asyncio.Future[Any]":
        """Settle this request with the outcome of *awaitable*.

        Coroutines are scheduled as tasks; futures are used as-is.  Returns
        the request's completion future.

        Raises:
            asyncio.InvalidStateError: The request already settled, or an
                awaitable is already attached.
        """
        completion = self.completion
        if completion.done() or self._source is not None:
            raise asyncio.InvalidStateError(
                f"Request #{self.order} already has a completion signal"
            )
        self._source = asyncio.ensure_future(awaitable)
        self._source.add_done_callback(self._copy_outcome)
        return completion

    def resolve(self, value: Any = None) -> None:
        """Settle the request successfully with *value*."""
        self.completion.set_result(value)

    def reject(self, exc: BaseException) -> None:
        """Settle the request with *exc* as its failure."""
        self.completion.set_exception(exc)

    def _copy_outcome(self, source: "asyncio.Future[Any]") -> None:
        completion = self.completion
        if completion.done():
            return
        if source.cancelled():
            completion.cancel()
        elif source.exception() is not None:
            completion.set_exception(source.exception())
        else:
            completion.set_result(source.result())

    async def wait(self) -> None:
        """Wait until the request settles, whatever the outcome."""
        completion = self.completion
        try:
            # shield: cancelling a flush must not settle the request
            await asyncio.shield(completion)
        except asyncio.CancelledError:
            if not completion.cancelled():
                raise
        except Exception as exc:
            log.debug("request_completion_failed", order=self.order, error=str(exc))

    def __repr__(self) -> str:
        return f"<TrackedRequest #{self.order} settled={self.settled}>"


class RequestTracker:
    """Append-only sequence of the requests observed by one recording."""

    def __init__(self, recording: "Tapedeck") -> None:
        self._recording = recording
        self._requests: list[TrackedRequest] = []

    def register(self, data: dict[str, Any]) -> TrackedRequest:
        request = TrackedRequest(self._recording, dict(data), order=len(self._requests))
        self._requests.append(request)
        return request

    async def flush(self) -> None:
        """Wait for every request registered so far to settle."""
        pending = list(self._requests)
        if not pending:
            return
        await asyncio.gather(*(request.wait() for request in pending))
        log.debug("requests_flushed", count=len(pending))

    def __len__(self) -> int:
        return len(self._requests)

    def __iter__(self) -> Iterator[TrackedRequest]:
        return iter(list(self._requests))
