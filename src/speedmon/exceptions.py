class MeasurementFault(Exception):
    """
    Base class for every failure of a throughput measurement run.
    """


class StreamFault(MeasurementFault):
    """
    Raised when the byte source fails, has no readable body or terminates abnormally.

    Attributes:
        url (str | None): Request URL.
        message (str): Human-readable error message.
    """

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        url_str = f", url={url}" if url else ""
        self.message = f"Stream failed: {message}{url_str}"

        super().__init__(self.message)


class UnexpectedStatusException(StreamFault):
    """
    Raised when an HTTP response returns an unexpected status code.

    Attributes:
        status (int): The HTTP status code received.
        expected (tuple[int, ...] | None): Expected status codes.
        url (str | None): Request URL.
    """

    def __init__(
        self,
        status: int,
        expected: tuple[int, ...] | None = None,
        url: str | None = None,
    ):
        self.status = status
        self.expected = expected

        expected_str = f", expected={expected}" if expected else ""
        super().__init__(f"Unexpected HTTP status: {status}{expected_str}", url=url)


class PreconditionFault(MeasurementFault):
    """
    Raised when the declared payload size is missing or below the configured minimum.
    """

    def __init__(self, content_length: int | None, minimum: int):
        self.content_length = content_length
        self.minimum = minimum
        self.message = f"This payload is too small: {content_length=}, {minimum=} bytes"

        super().__init__(self.message)


class InsufficientSamplesFault(MeasurementFault):
    """
    Raised when too few windows were recorded to form a trimmed mean.
    """

    def __init__(self, sample_count: int):
        self.sample_count = sample_count
        self.message = f"Not enough speed measurements recorded: {sample_count=}"

        super().__init__(self.message)


class DegenerateDurationFault(MeasurementFault):
    """
    Raised for a window interval with a non-positive duration, usually a clock too coarse for the window size.
    """

    def __init__(self, duration: float, index: int | None = None):
        self.duration = duration
        self.index = index
        self.message = f"Non-positive window duration: {duration=}, {index=}"

        super().__init__(self.message)


__all__ = [
    "MeasurementFault",
    "StreamFault",
    "UnexpectedStatusException",
    "PreconditionFault",
    "InsufficientSamplesFault",
    "DegenerateDurationFault",
]
