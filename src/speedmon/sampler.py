from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator, Callable, List, Optional

import logging
import time

from .constants import RESOLUTION, CHUNK_SIZE
from .exceptions import DegenerateDurationFault


@dataclass(frozen=True)
class WindowBoundary:
    index: int
    timestamp: float  # milliseconds


@dataclass(frozen=True)
class IntervalSample:
    index: int
    duration: float  # milliseconds


class IntervalTimer:
    """
    Timing context owned by a single measurement run.

    Wraps a monotonic clock returning seconds and reports timestamps in milliseconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.last_mark: Optional[float] = None

    def now(self) -> float:
        return self._clock() * 1000

    def mark(self) -> float:
        self.last_mark = self.now()
        return self.last_mark


def chunks_per_window(resolution: int, chunk_size: int) -> int:
    if resolution <= 0 or chunk_size <= 0:
        raise ValueError(f"Resolution and chunk size must be positive, {resolution=}, {chunk_size=}")
    if resolution % chunk_size != 0:
        raise ValueError(f"Resolution must be a multiple of the chunk size, {resolution=}, {chunk_size=}")

    return resolution // chunk_size


class WindowSampler:
    """
    Splits a stream of fixed-size chunks into windows of `resolution` bytes and
    emits a WindowBoundary each time a window is complete.
    """

    def __init__(self, timer: IntervalTimer, resolution: int = RESOLUTION, chunk_size: int = CHUNK_SIZE):
        self.timer = timer
        self.resolution = resolution
        self.chunk_size = chunk_size
        self.chunks_per_window = chunks_per_window(resolution, chunk_size)
        self.chunks_received = 0

    def _boundary(self) -> WindowBoundary:
        boundary = WindowBoundary(
            index=self.chunks_received // self.chunks_per_window,
            timestamp=self.timer.mark()
        )
        logging.debug(f"Window boundary {boundary.index} at {self.chunks_received=}")
        return boundary

    async def boundaries(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[WindowBoundary]:
        """
        Consume `chunks` and yield window boundaries in index order.

        Boundary 0 is yielded before the first chunk is requested. A stream
        shorter than one window yields only boundary 0. A chunk shorter than
        `chunk_size` (the tail of the body) is not counted. Stream errors propagate.
        """

        yield self._boundary()

        async for chunk in chunks:
            if len(chunk) < self.chunk_size:
                continue
            self.chunks_received += 1
            if self.chunks_received % self.chunks_per_window == 0:
                yield self._boundary()


@dataclass
class IntervalRecorder:
    """
    Collects the intervals between consecutive window boundaries of one run.

    Use as a context manager; the recorder is closed on exit and rejects
    further boundaries so a finished run cannot receive samples from another.
    """

    intervals: List[IntervalSample] = field(default_factory=list)
    closed: bool = False
    _previous: Optional[WindowBoundary] = field(default=None, init=False, repr=False)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        self.closed = True
        self._previous = None

    def record(self, boundary: WindowBoundary) -> Optional[IntervalSample]:
        if self.closed:
            raise RuntimeError(f"Interval recorder is closed, rejected {boundary=}")

        previous = self._previous
        if previous is None:
            self._previous = boundary
            return None

        if boundary.index <= previous.index:
            raise ValueError(f"Window boundaries out of order: {previous.index=}, {boundary.index=}")

        duration = boundary.timestamp - previous.timestamp
        if duration <= 0:
            raise DegenerateDurationFault(duration, boundary.index)

        sample = IntervalSample(index=boundary.index, duration=duration)
        self.intervals.append(sample)
        self._previous = boundary
        return sample


__all__ = ["chunks_per_window", "WindowBoundary", "IntervalSample", "IntervalTimer", "WindowSampler", "IntervalRecorder"]
