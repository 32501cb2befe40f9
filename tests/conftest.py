import pytest

from tests.helpers import FakeClock

class MockResponse:
    def __init__(self, status, headers=None, chunks=None, clock=None, seconds_per_chunk=0.0):
        self.status = status
        self.headers = headers if headers is not None else {}
        self.content = self
        self.chunks = list(chunks or [])
        self.clock = clock
        self.seconds_per_chunk = seconds_per_chunk
        self.exception = None
        self.exception_after = None
        self.requested_chunk_size = None
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True
        return False

    def _delay(self, i):
        if isinstance(self.seconds_per_chunk, (list, tuple)):
            return self.seconds_per_chunk[i]
        return self.seconds_per_chunk

    async def iter_chunked(self, chunk_size_limit):
        self.requested_chunk_size = chunk_size_limit
        for i, chunk in enumerate(self.chunks):
            if self.exception is not None and i == self.exception_after:
                raise self.exception
            if self.clock is not None:
                self.clock.advance(self._delay(i))
            yield chunk

        if self.exception is not None and self.exception_after >= len(self.chunks):
            raise self.exception

    def set_exception(self, exception: Exception, after_n_chunks: int = 0):
        self.exception = exception
        self.exception_after = after_n_chunks


class MockSession:
    def __init__(self, responses):
        self._responses = responses
        self.closed = False
        self.requests = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        pass

    def get(self, url, headers=None, timeout=None):
        self.requests.append(url)
        response = self._responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True
        return


@pytest.fixture
def fake_clock():
    return FakeClock()

@pytest.fixture
def create_mock_response_and_set_mock_session(monkeypatch):
    """
    Replace aiohttp.ClientSession with a MockSession serving a single MockResponse.
    """

    sessions = []

    def factory(return_status, headers, mock_url, **response_kwargs):
        mock_res = MockResponse(return_status, headers, **response_kwargs)

        def session_factory(**kwargs):
            session = MockSession({mock_url: mock_res})
            session.kwargs = kwargs
            sessions.append(session)
            return session

        monkeypatch.setattr("aiohttp.ClientSession", session_factory)
        mock_res.sessions = sessions
        return mock_res

    return factory

@pytest.fixture
def set_failing_mock_session(monkeypatch):

    def factory(mock_url, exception):
        session = MockSession({mock_url: exception})
        monkeypatch.setattr("aiohttp.ClientSession", lambda **kwargs: session)
        return session

    return factory

@pytest.fixture
def create_mock_response():

    def factory(return_status, headers=None, **response_kwargs):
        return MockResponse(return_status, headers, **response_kwargs)

    return factory
