import asyncio
import logging

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from tests.demo_app import create_demo_app


class MemoryStream:
    """Async byte stream over an in-memory buffer.

    ``max_read`` caps how much a single read returns, mimicking a network
    stream that delivers data in small pieces.
    """

    def __init__(self, data, max_read=None):
        self._data = data
        self._pos = 0
        self.max_read = max_read
        self.reads = 0

    async def read(self, n=-1):
        self.reads += 1
        if n < 0:
            n = len(self._data) - self._pos
        if self.max_read is not None:
            n = min(n, self.max_read)
        chunk = self._data[self._pos:self._pos + n]
        self._pos += len(chunk)
        return chunk


class FailingStream(MemoryStream):
    """Serves ``data`` and then raises ``error`` instead of signalling EOF."""

    def __init__(self, data, error=None, max_read=None):
        super().__init__(data, max_read=max_read)
        self.error = error or asyncio.TimeoutError()

    async def read(self, n=-1):
        chunk = await super().read(n)
        if not chunk:
            raise self.error
        return chunk


@pytest.fixture
def capture_logger():
    """A dedicated logger whose records are kept in a list."""
    records = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    log = logging.getLogger("fuzzhawk.tests")
    log.setLevel(logging.DEBUG)
    log.propagate = False
    handler = ListHandler()
    log.addHandler(handler)
    log.records = records
    yield log
    log.removeHandler(handler)


@pytest_asyncio.fixture
async def demo_server():
    server = TestServer(create_demo_app())
    await server.start_server()
    yield server
    await server.close()
