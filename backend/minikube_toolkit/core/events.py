"""
In-process event emitters and disposables

Observers subscribe at activation and dispose their subscription at
deactivation. A failing listener is logged and never breaks the emitter
or the other listeners.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], Awaitable[None] | None]


class Disposable:
    """Releases a resource exactly once."""

    def __init__(self, callback: Callable[[], Any] | None = None):
        self._callback = callback
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self._callback is not None:
            self._callback()


class DisposableStore:
    """
    Collects disposables owned by one lifetime (e.g. an extension activation)
    and releases them together, most recent first.
    """

    def __init__(self):
        self._items: list[Any] = []

    def add(self, item: Any) -> Any:
        self._items.append(item)
        return item

    def __len__(self) -> int:
        return len(self._items)

    def dispose(self) -> None:
        while self._items:
            item = self._items.pop()
            try:
                item.dispose()
            except Exception as e:
                logger.error(f"Failed to dispose {item!r}: {e}")


class EventEmitter(Generic[T]):
    """
    Typed observer channel

    Listeners may be plain functions or coroutine functions. fire() awaits
    coroutine listeners in subscription order.

    Example:
        on_update: EventEmitter[ManagedBinary | None] = EventEmitter()
        subscription = on_update.subscribe(handle_update)
        await on_update.fire(binary)
        subscription.dispose()
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._listeners: list[Listener] = []
        self._disposed = False

    def subscribe(self, listener: Listener) -> Disposable:
        """
        Register a listener

        Returns:
            Disposable removing the listener
        """
        if self._disposed:
            raise RuntimeError(f"Event emitter {self.name or id(self)} is disposed")
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Disposable(_remove)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def fire(self, value: T) -> None:
        """Deliver value to every listener subscribed at the time of the call."""
        for listener in list(self._listeners):
            try:
                result = listener(value)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Listener {getattr(listener, '__name__', listener)!r} failed on {self.name or 'event'}: {e}")

    def dispose(self) -> None:
        self._listeners.clear()
        self._disposed = True
