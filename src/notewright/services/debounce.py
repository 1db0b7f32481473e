"""Trailing-edge debouncing on the asyncio event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable


class Debouncer:
    """Run *callback* once, *delay* seconds after the last :meth:`schedule`.

    Only one timer is ever outstanding: scheduling while one is pending
    re-arms it. There is no leading-edge call.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.delay = delay
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()
