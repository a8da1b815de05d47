"""
Concurrent Screen Loads

A screen that needs several independent reads (users + projects + clients,
dashboard counts, ...) fires them together with load_all(). The join is
all-or-nothing: the first failure cancels the rest and the caller gets a
single DataFetchError, never a partial result.

ScreenScope ties in-flight loads to the lifetime of whatever asked for them.
Once the scope is closed, pending work is cancelled and results that arrive
late are dropped instead of being applied.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict

from starlette.concurrency import run_in_threadpool

from taskboard.core.exceptions import DataFetchError

logger = logging.getLogger(__name__)


class ScreenClosed(Exception):
    """The scope was closed before the result could be delivered."""


async def _load(name: str, loader: Callable[[], Any]) -> Any:
    try:
        if inspect.iscoroutinefunction(loader):
            return await loader()
        # Loaders are blocking database calls
        return await run_in_threadpool(loader)
    except Exception as exc:
        raise DataFetchError(f"Failed to load {name}") from exc


async def load_all(**loaders: Callable[[], Any]) -> Dict[str, Any]:
    """
    Run every loader concurrently and return ``{name: result}``.

    Raises:
        DataFetchError: as soon as any loader fails; the cause is chained.
    """
    names = list(loaders)
    tasks = [asyncio.ensure_future(_load(name, loaders[name])) for name in names]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException as exc:
        for task in tasks:
            task.cancel()
        if isinstance(exc, DataFetchError):
            logger.warning("%s: %s", exc.detail, exc.__cause__)
        raise
    return dict(zip(names, results))


class ScreenScope:
    def __init__(self):
        self._tasks = set()
        self._closed = False
        self._watcher = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def run(self, awaitable: Awaitable) -> Any:
        if self._closed:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise ScreenClosed()

        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        try:
            result = await task
        except asyncio.CancelledError:
            if self._closed and task.cancelled():
                raise ScreenClosed()
            raise
        finally:
            self._tasks.discard(task)

        if self._closed:
            raise ScreenClosed()
        return result

    def cancel_when(self, predicate: Callable[[], Awaitable[bool]], interval: float = 0.5) -> None:
        """Poll ``predicate`` in the background and close the scope once it returns True."""

        async def watch():
            while not self._closed:
                if await predicate():
                    logger.debug("Scope condition met; cancelling %d pending load(s)", len(self._tasks))
                    self.close()
                    return
                await asyncio.sleep(interval)

        self._watcher = asyncio.ensure_future(watch())

    def close(self) -> None:
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        watcher, self._watcher = self._watcher, None
        if watcher is not None and not watcher.done():
            watcher.cancel()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.close()
