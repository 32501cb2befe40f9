import math
import logging

from typing import Iterable

from .exceptions import InsufficientSamplesFault

# Number of fastest samples always dropped, independent of the sample count
FASTEST_TRIM_COUNT = 2


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, ties towards +infinity (round_half_up(2.5) == 3).
    """
    return math.floor(value + 0.5)


def trim_bounds(n: int) -> tuple[int, int]:
    """
    Return the half-open (start, end) range of sorted samples kept for n samples.

    The slowest quarter is dropped to remove slow-start windows and the two
    fastest to remove buffering spikes. end <= start means nothing is kept.
    """
    return round_half_up(n / 4), n - FASTEST_TRIM_COUNT


def trimmed_mean(samples: Iterable[float]) -> int:
    """
    Reduce the speed samples of one run to a single floored trimmed mean.

    Raises:
        InsufficientSamplesFault: If no samples remain after trimming.
    """

    ordered = sorted(samples)
    trim_start, trim_end = trim_bounds(len(ordered))

    # Guard explicitly, a negative end would count from the back of the list
    if trim_end <= trim_start:
        raise InsufficientSamplesFault(len(ordered))

    kept = ordered[trim_start:trim_end]
    logging.debug(f"Trimmed mean over {len(kept)} of {len(ordered)} samples, {trim_start=}, {trim_end=}")

    return math.floor(sum(kept) / len(kept))

__all__ = ["trimmed_mean", "trim_bounds", "round_half_up", "FASTEST_TRIM_COUNT"]
