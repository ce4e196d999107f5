"""Fixed-size pool of pre-built synthesizer handles."""

import asyncio
import random
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

import structlog

from src.speech_translator.config import PoolMode

logger = structlog.get_logger()

T = TypeVar("T")


class SynthesizerPool(Generic[T]):
    """Pool of M handles built once at startup and never resized.

    In ``lease`` mode a handle is held by at most one caller at a time and
    ``acquire`` waits for a free one. In ``shared`` mode handles are picked
    at random with no exclusivity, so two callers may hold the same handle;
    only use it for clients that tolerate concurrent calls.
    """

    def __init__(self, factory: Callable[[], T], size: int, mode: PoolMode = PoolMode.lease) -> None:
        if not callable(factory):
            raise TypeError("Factory must be a callable")
        if size <= 0:
            raise ValueError(f"Pool size must be positive, got {size}")

        self._factory = factory
        self.size = size
        self.mode = PoolMode(mode)
        self._handles: tuple[T, ...] = ()
        self._free: asyncio.Queue[T] = asyncio.Queue(maxsize=size)

    @property
    def ready(self) -> bool:
        return bool(self._handles)

    @property
    def handles(self) -> tuple[T, ...]:
        return self._handles

    @property
    def available(self) -> int:
        if self.mode is PoolMode.shared:
            return len(self._handles)
        return self._free.qsize()

    def prepare(self) -> None:
        """Build every handle. Any factory error propagates and leaves the pool empty."""
        if self.ready:
            return

        logger.info("Preparing synthesizer pool", size=self.size, mode=self.mode.value)
        handles = [self._factory() for _ in range(self.size)]

        self._handles = tuple(handles)
        for handle in handles:
            self._free.put_nowait(handle)
        if self.mode is PoolMode.shared:
            logger.warning(
                "Synthesizer pool handles are shared without exclusivity",
                size=self.size,
            )
        logger.info("Synthesizer pool ready", size=self.size)

    async def acquire(self, timeout: float | None = None) -> T:
        if not self.ready:
            raise RuntimeError("Pool must be prepared before acquiring handles")

        if self.mode is PoolMode.shared:
            return random.choice(self._handles)

        try:
            return await asyncio.wait_for(self._free.get(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"No synthesizer became free within {timeout}s") from e

    def release(self, handle: T) -> None:
        if not any(handle is h for h in self._handles):
            raise ValueError("Handle does not belong to this pool")
        if self.mode is PoolMode.shared:
            return
        self._free.put_nowait(handle)

    @asynccontextmanager
    async def lease(self, timeout: float | None = None) -> AsyncIterator[T]:
        handle = await self.acquire(timeout=timeout)
        try:
            yield handle
        finally:
            self.release(handle)

    def close(self) -> None:
        self._handles = ()
        self._free = asyncio.Queue(maxsize=self.size)
        logger.info("Synthesizer pool closed")
