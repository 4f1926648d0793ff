"""Lazy pagination over next-link list responses.

A :class:`PagedCall` presents every page of a list operation as one flat
sequence. Pages are fetched one at a time: page N+1 is requested only when
the items of page N have been consumed. The sequence is single-pass; iterate
it again by invoking the list operation again.

Several consumers may drain one sequence at once (for example ``subscribe``
alongside ``async for``). Page requests are serialized, so each page is
fetched once and each item is handed to exactly one consumer. A page failure
is raised to every consumer still reading.

Example:
    >>> async for profile in client.traffic_manager_profiles.inner.list_by_resource_group("rg"):
    ...     print(profile.name)

    >>> for profile in client.traffic_manager_profiles.inner.list_by_resource_group("rg"):
    ...     print(profile.name)   # blocking, still lazy
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator, Callable, Coroutine, Iterator
from typing import Any, Generic, TypeVar

from armkit.pipeline.call import BlockingRunner
from armkit.pipeline.codec import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

PageFetcher = Callable[[str | None], Coroutine[Any, Any, Page[T]]]

_EXHAUSTED = object()


class PagedCall(Generic[T]):
    """A lazy, single-pass sequence of items spread over pages.

    Args:
        fetch_page: Coroutine factory. Called with ``None`` for the first
            page and with the previous page's next link afterwards.
        runner: Event loop owner for the blocking forms.
        description: Operation name used in logs and reprs.
    """

    def __init__(
        self,
        fetch_page: PageFetcher[T],
        runner: BlockingRunner,
        description: str = "",
    ) -> None:
        self._fetch_page = fetch_page
        self._runner = runner
        self.description = description
        self._buffer: deque[T] = deque()
        self._next_link: str | None = None
        self._started = False
        self._exhausted = False
        self._closed = False
        self._inflight: asyncio.Task[Page[T]] | None = None
        self._lock = asyncio.Lock()
        self._error: Exception | None = None
        self.pages_fetched = 0

    def __repr__(self) -> str:
        return f"<PagedCall {self.description or '?'} pages_fetched={self.pages_fetched}>"

    @property
    def exhausted(self) -> bool:
        return self._exhausted or self._closed

    def map(self, func: Callable[[T], U]) -> PagedCall[U]:
        """A new, unstarted sequence whose items are ``func(item)``.

        Must be called before this sequence is iterated.
        """
        if self._started:
            raise RuntimeError(f"{self.description or 'list call'} already started")
        fetch_page = self._fetch_page

        async def _fetch(next_link: str | None) -> Page[U]:
            page = await fetch_page(next_link)
            return Page(items=[func(item) for item in page.items], next_link=page.next_link)

        return PagedCall(_fetch, self._runner, description=self.description)

    async def _fetch_next_page(self) -> Page[T] | None:
        """Fetch the page after the last one; callers hold ``self._lock``."""
        if self._error is not None:
            raise self._error
        if self._started and not self._next_link:
            self._exhausted = True
            return None

        link = self._next_link if self._started else None
        self._started = True
        self._inflight = asyncio.ensure_future(self._fetch_page(link))
        try:
            page = await self._inflight
        except asyncio.CancelledError:
            if self._closed:
                return None
            raise
        except Exception as e:
            self._error = e
            raise
        finally:
            self._inflight = None

        self.pages_fetched += 1
        self._next_link = page.next_link
        if page.is_last:
            self._exhausted = True
        logger.debug(
            f"{self.description or 'list'}: page {self.pages_fetched} with "
            f"{len(page.items)} items, next link {'present' if page.next_link else 'absent'}"
        )
        return page

    async def by_page(self) -> AsyncIterator[Page[T]]:
        """Iterate whole pages instead of items."""
        if self._buffer:
            yield Page(items=list(self._buffer), next_link=self._next_link)
            self._buffer.clear()
        while not self.exhausted:
            async with self._lock:
                page = await self._fetch_next_page()
            if page is None:
                return
            yield page

    def __aiter__(self) -> PagedCall[T]:
        return self

    async def __anext__(self) -> T:
        item = await self._next_item()
        if item is _EXHAUSTED:
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    async def _next_item(self) -> Any:
        while not self._buffer:
            if self.exhausted:
                return _EXHAUSTED
            async with self._lock:
                # another consumer may have filled the buffer while we waited
                if self._buffer or self.exhausted:
                    continue
                page = await self._fetch_next_page()
                if page is None:
                    return _EXHAUSTED
                self._buffer.extend(page.items)
        return self._buffer.popleft()

    async def collect(self) -> list[T]:
        """Consume the remaining items into a list."""
        return [item async for item in self]

    async def aclose(self) -> None:
        """Stop paging and cancel any in-flight page request."""
        self.close()

    def close(self) -> None:
        self._closed = True
        self._buffer.clear()
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        item = self._runner.run(self._next_item())
        if item is _EXHAUSTED:
            raise StopIteration
        return item  # type: ignore[no-any-return]

    def result(self) -> list[T]:
        """Block until every remaining page is fetched; return all items."""
        return self._runner.run(self.collect())

    def subscribe(
        self,
        on_success: Callable[[list[T]], Any],
        on_failure: Callable[[BaseException], Any] | None = None,
    ) -> asyncio.Task[list[T]]:
        """Collect all items on the running loop and report through callbacks."""
        task = asyncio.get_running_loop().create_task(self.collect())

        def _done(t: asyncio.Task[list[T]]) -> None:
            if t.cancelled() or self._closed:
                return
            error = t.exception()
            if error is None:
                on_success(t.result())
            elif on_failure is not None:
                on_failure(error)
            else:
                logger.error(f"Unhandled failure in {self.description or 'list call'}: {error}")

        task.add_done_callback(_done)
        return task
