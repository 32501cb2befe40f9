from enum import Enum
from dataclasses import dataclass
from typing import Callable, List, Optional
from datetime import datetime

import logging
import asyncio
import aiohttp
import traceback
import time

from .constants import RESOLUTION, CHUNK_SIZE, MIN_PAYLOAD_WINDOWS, REQUEST_TIMEOUT
from .aggregator import trimmed_mean
from .exceptions import PreconditionFault, StreamFault, UnexpectedStatusException
from .sampler import IntervalRecorder, IntervalTimer, WindowSampler, chunks_per_window
from .speedcalculator import SpeedCalculator
from .stream import read_response_chunks

class MeasurementState(Enum):
    COMPLETED = 0
    ERROR = 1


@dataclass
class MeasurementResult:
    url: str
    state: MeasurementState
    speed_mbps: Optional[int] = None
    sample_count: int = 0
    error_string: Optional[str] = ""
    time: datetime = None

    def __post_init__(self):
        self.time = datetime.now()

    @property
    def ok(self) -> bool:
        return self.state == MeasurementState.COMPLETED


def normalize_url(url: str) -> str:
    if not url.startswith("http"):
        url = f"https://{url}"
    return url


class ThroughputMeter:
    """
    Async downstream throughput meter using asyncio and aiohttp.
    """

    def __init__(
            self,
            request_timeout: float = REQUEST_TIMEOUT,
            resolution: int = RESOLUTION,
            chunk_size: int = CHUNK_SIZE,
            min_payload_windows: int = MIN_PAYLOAD_WINDOWS,
            aggregate_partial_on_error: bool = False,
            clock: Callable[[], float] = time.monotonic
        ) -> None:

        chunks_per_window(resolution, chunk_size)

        self._session: aiohttp.ClientSession = None

        self._request_timeout = request_timeout
        self._resolution = resolution
        self._chunk_size = chunk_size
        self._min_payload_windows = min_payload_windows
        self._aggregate_partial_on_error = aggregate_partial_on_error
        self._clock = clock
        self._speed_calc = SpeedCalculator(resolution=resolution)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.shutdown()
        return False

    async def shutdown(self):
        if self._session is not None:
            try:
                await self._session.close()
            except asyncio.CancelledError:
                pass
            self._session = None

    @property
    def minimum_payload_bytes(self) -> int:
        return self._min_payload_windows * self._resolution

    async def run(self, url: str) -> MeasurementResult:
        """
        Measure the download speed of `url` and report the outcome.

        Never raises for measurement failures; they are logged and returned as
        an ERROR result. Cancellation is propagated.
        """

        url = normalize_url(url)
        try:
            samples = await self.collect_samples(url)
            speed = trimmed_mean(samples)
        except asyncio.CancelledError:
            raise
        except Exception as err:
            tb = traceback.format_exc()
            logging.error(f"Traceback: {tb}")
            logging.error(f"{repr(err)}, {err}")
            return MeasurementResult(
                url=url,
                state=MeasurementState.ERROR,
                error_string=str(err)
            )

        logging.info(f"Measured {speed} megabits per second over {len(samples)} windows, {url=}")
        return MeasurementResult(
            url=url,
            state=MeasurementState.COMPLETED,
            speed_mbps=speed,
            sample_count=len(samples)
        )

    async def measure(self, url: str) -> int:
        """
        Measure the download speed of `url` in megabits per second.

        Raises:
            MeasurementFault: If the request, the stream or the aggregation fails.
        """

        samples = await self.collect_samples(normalize_url(url))
        return trimmed_mean(samples)

    async def collect_samples(self, url: str) -> List[float]:
        """
        Download `url` once and return one speed sample per complete window.

        - Validates the response status and declared payload size
        - Times each window with a timer owned by this run
        - Converts the recorded intervals into speed samples
        """

        if not self._session:
            self._session = aiohttp.ClientSession(auto_decompress=False)

        timer = IntervalTimer(self._clock)
        sampler = WindowSampler(timer, resolution=self._resolution, chunk_size=self._chunk_size)

        with IntervalRecorder() as recorder:
            try:
                async with self._session.get(url, timeout=aiohttp.ClientTimeout(total=self._request_timeout)) as resp:
                    if resp.status >= 300 or resp.status < 200:
                        raise UnexpectedStatusException(resp.status, expected=(200,), url=url)

                    logging.debug(f"Response headers for {url=}: {dict(resp.headers)}")
                    self._check_payload_size(resp)

                    async for boundary in sampler.boundaries(read_response_chunks(resp, self._chunk_size, url)):
                        recorder.record(boundary)
            except (aiohttp.ClientError, asyncio.TimeoutError) as err:
                raise StreamFault(f"{repr(err)}, {err}", url=url) from err
            except StreamFault as err:
                if not self._aggregate_partial_on_error or sampler.chunks_received == 0:
                    raise
                logging.warning(f"Stream failed after {sampler.chunks_received} chunks, aggregating {len(recorder.intervals)} partial samples. {err}")

        logging.debug(f"Recorded {len(recorder.intervals)} intervals from {sampler.chunks_received} chunks")
        return self._speed_calc.speeds(recorder.intervals)

    def _check_payload_size(self, resp: aiohttp.ClientResponse):
        content_length = resp.headers.get("Content-Length")
        try:
            content_length = int(content_length) if content_length is not None else None
        except ValueError:
            content_length = None

        if content_length is None or content_length < self.minimum_payload_bytes:
            raise PreconditionFault(content_length, self.minimum_payload_bytes)


__all__ = ["ThroughputMeter", "MeasurementResult", "MeasurementState", "normalize_url"]
