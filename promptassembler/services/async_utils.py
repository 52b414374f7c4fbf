# promptassembler/services/async_utils.py
import asyncio
from typing import Awaitable, Callable, TypeVar
from loguru import logger

T = TypeVar("T")

async def run_blocking(func: Callable[..., T], *args, **kwargs) -> T:
    """
    Runs blocking I/O (file reads, directory walks, subprocesses) in the default thread pool.

    Callers bound the wait themselves: subprocesses pass a timeout to
    subprocess.run and dynamic resolution is wrapped in asyncio.wait_for.
    """
    logger.trace(f"Running {getattr(func, '__name__', func)!s} in a worker thread")
    return await asyncio.to_thread(func, *args, **kwargs)

def run_sync(awaitable_factory: Callable[[], Awaitable[T]]) -> T:
    """Drives one coroutine to completion from synchronous code (CLI commands)."""
    return asyncio.run(_await(awaitable_factory))

async def _await(awaitable_factory: Callable[[], Awaitable[T]]) -> T:
    return await awaitable_factory()
