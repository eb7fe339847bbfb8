"""
Cancellation utilities for long-running minikube invocations

A CancellationToken is handed to an operation by its caller (the host's
"create cluster" dialog, a Ctrl-C handler). The process executor watches the
token and terminates the child when cancellation is requested.
"""

import asyncio
import logging
from typing import Callable

from minikube_toolkit.core.events import Disposable

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    One-shot cancellation signal

    Example:
        token = CancellationToken()
        task = asyncio.create_task(create_cluster(params, ..., token=token))
        token.cancel()
        await task  # raises ExecutionCancelledError
    """

    def __init__(self):
        self._event = asyncio.Event()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if self._event.is_set():
            return
        logger.debug("Cancellation requested")
        self._event.set()
        for callback in list(self._callbacks):
            try:
                callback()
            except Exception as e:
                logger.error(f"Cancellation callback failed: {e}")

    def on_cancellation_requested(self, callback: Callable[[], None]) -> Disposable:
        """Run callback when cancel() is called (immediately if it already was)."""
        if self._event.is_set():
            callback()
            return Disposable()
        self._callbacks.append(callback)
        return Disposable(lambda: self._callbacks.remove(callback) if callback in self._callbacks else None)

    async def wait(self) -> None:
        """Block until cancellation is requested"""
        await self._event.wait()
