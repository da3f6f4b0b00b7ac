"""Running blocking file writes from async code."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any


async def write_through(write: Callable[..., None], *args: Any) -> None:
    """Run ``write(*args)`` in a worker thread and wait for it to finish.

    Cancelling the caller cannot stop a write that is already running in a
    thread, so cancellation is held back until the write is done. The
    caller then sees ``CancelledError`` only after the write succeeded,
    and can publish the written state before re-raising. A failed write
    raises its own error instead.
    """
    job = asyncio.ensure_future(asyncio.to_thread(write, *args))
    cancelled = False
    while not job.done():
        try:
            await asyncio.wait({job})
        except asyncio.CancelledError:
            cancelled = True
    job.result()
    if cancelled:
        raise asyncio.CancelledError
