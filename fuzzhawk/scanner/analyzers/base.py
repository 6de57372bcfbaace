"""
Base Analyzer for FuzzHawk Response Analysis

Provides the result type and chunked reading shared by all analyzers.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from dataclasses import dataclass
import asyncio
import logging

import aiohttp

from fuzzhawk.scanner.errors import ConfigurationError, PartialReadError

# Bytes requested per read operation
DEFAULT_CHUNK_SIZE = 32 * 1024

# Rolling seam window size; half of it bounds the detectable match width
DEFAULT_WINDOW_CAPACITY = 4096

LINE_SEPARATOR = b'\n'

# Transport failures that abort a body read
READ_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


@dataclass
class AnalysisResult:
    """
    Statistics gathered from one response body.
    """
    byte_count: int = 0
    line_count: int = 0
    matched: bool = False

    def add_chunk(self, chunk: bytes):
        """Account for one chunk of body bytes."""
        self.byte_count += len(chunk)
        self.line_count += chunk.count(LINE_SEPARATOR)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'size': self.byte_count,
            'lines': self.line_count,
            'matched': self.matched
        }


class BaseAnalyzer(ABC):
    """
    Base class for streaming response analyzers.
    """

    name = "base"

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 logger: Optional[logging.Logger] = None):
        if chunk_size <= 0:
            raise ConfigurationError(
                f"Chunk size must be positive, got {chunk_size}"
            )
        self.chunk_size = chunk_size
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    async def analyze(self, stream) -> AnalysisResult:
        """Analyze a response body read from ``stream``."""


async def read_chunk(stream, size: int) -> bytes:
    """
    Read up to ``size`` bytes, returning fewer only at end-of-stream.

    A single ``read()`` on a network stream may return whatever happens to
    be buffered, so keep reading until the chunk is full or the stream ends.

    Args:
        stream: Object with an async ``read(n)`` method (e.g. aiohttp StreamReader)
        size: Chunk capacity in bytes

    Returns:
        The chunk bytes

    Raises:
        PartialReadError: If a read fails; carries the bytes read so far
    """
    parts = []
    filled = 0

    try:
        while filled < size:
            data = await stream.read(size - filled)
            if not data:
                break
            parts.append(data)
            filled += len(data)
    except READ_ERRORS as e:
        raise PartialReadError(b''.join(parts), e) from e

    if len(parts) == 1:
        return parts[0]
    return b''.join(parts)
