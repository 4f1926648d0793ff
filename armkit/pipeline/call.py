"""Deferred service calls and their three invocation forms.

A :class:`ServiceCall` wraps one not-yet-started logical operation. Nothing is
sent until the caller picks a form:

- deferred: ``await call``
- callback: ``call.subscribe(on_success, on_failure)``
- blocking: ``call.result()``

The call dispatches at most once. Whichever form starts it, the other forms
observe the same outcome instead of sending the request again.

Example:
    >>> call = client.traffic_manager_profiles.inner.get_async("rg", "web")
    >>> profile = await call            # deferred
    >>> call.result() is profile        # same outcome, no second request
    True
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine, Generator
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BlockingRunner:
    """Owns the private event loop used by the blocking call forms.

    Reusing one loop keeps the transport's HTTP client (which is bound to a
    loop) alive between blocking calls.
    """

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
        return self._loop

    @property
    def active(self) -> bool:
        """True while the private loop exists and has not been closed."""
        return self._loop is not None and not self._loop.is_closed()

    def owns(self, future: asyncio.Future[Any]) -> bool:
        return self._loop is not None and future.get_loop() is self._loop

    def check_blocking_allowed(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Blocking call made from inside a running event loop; await the call instead"
            )

    def run(self, awaitable: Awaitable[T]) -> T:
        """Run ``awaitable`` to completion on the private loop."""
        self.check_blocking_allowed()
        return self.loop.run_until_complete(awaitable)

    def create_task(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        return self.loop.create_task(coro)

    def close(self) -> None:
        if self._loop is not None and not self._loop.is_closed():
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            self._loop.close()
        self._loop = None


class ServiceCall(Generic[T]):
    """A lazily started operation producing a single result."""

    def __init__(
        self,
        factory: Callable[[], Coroutine[Any, Any, T]],
        runner: BlockingRunner,
        description: str = "",
    ) -> None:
        self._factory = factory
        self._runner = runner
        self._task: asyncio.Task[T] | None = None
        self._cancelled_before_start = False
        self.description = description

    def __repr__(self) -> str:
        if self._cancelled_before_start:
            state = "cancelled"
        elif self._task is None:
            state = "pending"
        elif self._task.cancelled():
            state = "cancelled"
        elif self._task.done():
            state = "done"
        else:
            state = "running"
        return f"<ServiceCall {self.description or '?'} {state}>"

    @property
    def dispatched(self) -> bool:
        """True once a form has started the call."""
        return self._task is not None

    def _start(self) -> asyncio.Task[T]:
        if self._cancelled_before_start:
            raise asyncio.CancelledError()
        if self._task is None:
            loop = asyncio.get_running_loop()
            self._task = loop.create_task(self._factory())
        return self._task

    def __await__(self) -> Generator[Any, None, T]:
        return self._start().__await__()

    def subscribe(
        self,
        on_success: Callable[[T], Any],
        on_failure: Callable[[BaseException], Any] | None = None,
    ) -> ServiceCall[T]:
        """Start the call on the running loop and report through callbacks.

        Callbacks run on the event loop once the call finishes. A cancelled
        call invokes neither callback.
        """
        if self._cancelled_before_start:
            return self
        task = self._start()

        def _done(t: asyncio.Task[T]) -> None:
            if t.cancelled():
                return
            error = t.exception()
            if error is None:
                on_success(t.result())
            elif on_failure is not None:
                on_failure(error)
            else:
                logger.error(f"Unhandled failure in {self.description or 'service call'}: {error}")

        task.add_done_callback(_done)
        return self

    def result(self) -> T:
        """Block until the call completes and return its result."""
        if self._cancelled_before_start:
            raise asyncio.CancelledError()
        if self._task is not None and self._task.done():
            return self._task.result()
        self._runner.check_blocking_allowed()
        if self._task is None:
            self._task = self._runner.create_task(self._factory())
        if not self._runner.owns(self._task):
            raise RuntimeError(
                f"{self.description or 'Service call'} is running on another event loop; await it"
            )
        return self._runner.run(self._task)

    def cancel(self) -> bool:
        """Cancel the call; returns False if it already finished."""
        if self._task is None:
            self._cancelled_before_start = True
            return True
        return self._task.cancel()

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def cancelled(self) -> bool:
        return self._cancelled_before_start or (
            self._task is not None and self._task.cancelled()
        )
