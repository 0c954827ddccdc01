"""
Debounce primitive for the search box.

Each trigger() cancels the pending call and schedules a new one after
the delay, so only the last value typed within the window is committed.
Runs on the current asyncio event loop via loop.call_later.
"""

import asyncio
from typing import Any, Callable, Optional


class Debouncer:
    """
    Cancellable delayed call.

    Attributes:
        delay: Seconds to wait after the last trigger()
        callback: Called with the arguments of the last trigger()
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay: float = 0.5,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.callback = callback
        self.delay = delay
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._args: tuple = ()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def trigger(self, *args: Any) -> None:
        """(Re)schedule the callback with args after delay."""
        self.cancel()
        self._args = args
        self._handle = self._get_loop().call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Run the pending call now, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def _fire(self) -> None:
        self._handle = None
        args, self._args = self._args, ()
        self.callback(*args)
