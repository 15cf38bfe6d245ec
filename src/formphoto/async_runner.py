"""Drive pipeline coroutines from synchronous callers."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, TypeVar

from formphoto.exceptions import AsyncExecutionError

if TYPE_CHECKING:
    from collections.abc import Coroutine

T = TypeVar("T")


def _run_on_worker_loop(coro: Coroutine[Any, Any, T]) -> T:
    """Run `coro` with `asyncio.run` on a single worker thread and wait for it.

    Raises:
        AsyncExecutionError: Wrapping whatever the coroutine raised.
    """
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="formphoto-async") as pool:
        future = pool.submit(asyncio.run, coro)
        try:
            return future.result()
        except Exception as exc:
            raise AsyncExecutionError(result=exc) from exc


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion and return its result.

    Without a running loop the coroutine gets its own `asyncio.run` and its
    exceptions propagate unchanged. Inside a running loop, blocking on that
    loop would deadlock, so the coroutine runs on a worker thread instead and
    failures surface as `AsyncExecutionError`.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    return _run_on_worker_loop(coro)
