from typing import Iterable, List

from .constants import CONVERSION_FACTOR, RESOLUTION
from .exceptions import DegenerateDurationFault
from .sampler import IntervalSample

class SpeedCalculator:
    def __init__(self, resolution: int = RESOLUTION, conversion_factor: float = CONVERSION_FACTOR):
        self.resolution = resolution
        self.conversion_factor = conversion_factor

    def speed(self, duration: float, index: int = None) -> float:  # megabits/sec
        if duration <= 0:
            raise DegenerateDurationFault(duration, index)

        return self.conversion_factor * self.resolution / duration

    def speeds(self, intervals: Iterable[IntervalSample]) -> List[float]:
        return [self.speed(interval.duration, interval.index) for interval in intervals]

__all__ = ["SpeedCalculator"]
