from typing import AsyncIterator, Iterable, List

from speedmon.constants import CHUNK_SIZE, RESOLUTION

CHUNKS_PER_WINDOW = RESOLUTION // CHUNK_SIZE

class FakeClock:
    """
    Stand-in for time.monotonic, advanced manually by the tests and mock responses.
    """
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


async def async_iter(items: Iterable) -> AsyncIterator:
    for item in items:
        yield item


def make_chunks(n_windows: int, chunks_per_window: int = CHUNKS_PER_WINDOW, chunk_size: int = CHUNK_SIZE) -> List[bytes]:
    chunk = bytes(chunk_size)
    return [chunk] * (n_windows * chunks_per_window)


def chunk_delays(window_durations_ms: Iterable[float], chunks_per_window: int = CHUNKS_PER_WINDOW) -> List[float]:
    """
    Per-chunk clock advances, in seconds, so each window takes the given number of milliseconds.
    """
    delays = []
    for duration_ms in window_durations_ms:
        delays.extend([duration_ms / 1000 / chunks_per_window] * chunks_per_window)
    return delays
