"""
Bounded-memory regex scanner for FuzzHawk

Streams a response body in fixed-size chunks and reports byte count, line
count and whether a pattern occurs anywhere in the body, while holding at
most one chunk plus a small seam window in memory.

Matches contained in a chunk are found by searching the chunk itself.
Matches that straddle two chunks are found by a rolling seam window that
joins the last half-window of one chunk to the first half-window of the
next. A match wider than half the window can be missed: the pattern's
maximal match width must not exceed ``window_capacity // 2`` bytes. This
limit is not checked at runtime.

Each chunk and each seam is searched as a buffer of its own, so anchors,
word boundaries and lookarounds see chunk and seam edges as the start or
end of the text. A pattern such as ``^foo`` or ``foo$`` can therefore match
in the middle of a body, and a word-boundary match can appear where the
full body has none.
"""

import re
from enum import Enum
from typing import Optional, Union
import logging

from fuzzhawk.scanner.analyzers.base import (
    BaseAnalyzer, AnalysisResult, DEFAULT_CHUNK_SIZE, DEFAULT_WINDOW_CAPACITY,
    read_chunk
)
from fuzzhawk.scanner.errors import (
    ConfigurationError, InvalidPatternError, PartialReadError, StreamReadError,
    WindowStateError
)


def compile_pattern(pattern: Union[str, bytes, 're.Pattern']) -> 're.Pattern':
    """
    Compile an exclusion pattern for matching against raw body bytes.

    Args:
        pattern: Regex source (str is UTF-8 encoded) or a compiled pattern

    Returns:
        Compiled bytes pattern

    Raises:
        InvalidPatternError: If the pattern does not compile
    """
    flags = 0
    if isinstance(pattern, re.Pattern):
        if isinstance(pattern.pattern, bytes):
            return pattern
        flags = pattern.flags & ~re.UNICODE
        pattern = pattern.pattern

    source = pattern.encode('utf-8') if isinstance(pattern, str) else pattern

    try:
        return re.compile(source, flags)
    except re.error as e:
        raise InvalidPatternError(str(pattern), str(e)) from e


class WindowState(Enum):
    """Fill states of the seam window."""
    EMPTY = 'empty'
    HALF_TAIL = 'half_tail'
    FULL = 'full'


class SeamWindow:
    """
    Fixed-capacity buffer reconstructing the seam between two chunks.

    The window moves EMPTY -> HALF_TAIL (tail of chunk N) -> FULL (head of
    chunk N+1) -> EMPTY (after the seam is scanned). Any other move raises
    WindowStateError.
    """

    _TRANSITIONS = {
        (WindowState.EMPTY, 'store_tail'): WindowState.HALF_TAIL,
        (WindowState.HALF_TAIL, 'append_head'): WindowState.FULL,
        (WindowState.FULL, 'reset'): WindowState.EMPTY,
    }

    def __init__(self, capacity: int = DEFAULT_WINDOW_CAPACITY):
        if capacity <= 0 or capacity % 2:
            raise ConfigurationError(
                f"Window capacity must be a positive even number, got {capacity}"
            )

        self.capacity = capacity
        self.half = capacity // 2
        self.state = WindowState.EMPTY
        self._buffer = bytearray(capacity)

    def _transition(self, action: str):
        next_state = self._TRANSITIONS.get((self.state, action))
        if next_state is None:
            raise WindowStateError(
                f"Cannot {action} while window is {self.state.value}"
            )
        self.state = next_state

    @property
    def fill(self) -> int:
        """Number of bytes currently held."""
        if self.state is WindowState.EMPTY:
            return 0
        if self.state is WindowState.HALF_TAIL:
            return self.half
        return self.capacity

    def store_tail(self, chunk: bytes):
        """Keep the last half-window of a chunk."""
        if len(chunk) < self.half:
            raise WindowStateError(
                f"Chunk of {len(chunk)} bytes is shorter than half the window"
            )
        self._transition('store_tail')
        self._buffer[:self.half] = chunk[-self.half:]

    def append_head(self, chunk: bytes):
        """Complete the seam with the first half-window of the next chunk."""
        if len(chunk) < self.half:
            raise WindowStateError(
                f"Chunk of {len(chunk)} bytes is shorter than half the window"
            )
        self._transition('append_head')
        self._buffer[self.half:] = chunk[:self.half]

    def reset(self):
        self._transition('reset')

    def tail(self) -> bytes:
        """The stored tail; only valid while HALF_TAIL."""
        if self.state is not WindowState.HALF_TAIL:
            raise WindowStateError(f"No tail held while window is {self.state.value}")
        return bytes(self._buffer[:self.half])

    def contents(self) -> bytes:
        """The reconstructed seam; only valid while FULL."""
        if self.state is not WindowState.FULL:
            raise WindowStateError(f"Seam incomplete while window is {self.state.value}")
        return bytes(self._buffer)


class BoundedRegexScanner(BaseAnalyzer):
    """
    Counts bytes and lines and searches for a pattern in a single pass.

    Memory use is O(chunk_size + window_capacity) regardless of body length.
    Once the pattern has been found the rest of the body is still read and
    counted, but no longer searched.
    """

    name = "regex"

    def __init__(
            self,
            pattern: Union[str, bytes, 're.Pattern'],
            chunk_size: int = DEFAULT_CHUNK_SIZE,
            window_capacity: int = DEFAULT_WINDOW_CAPACITY,
            logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the scanner.

        Args:
            pattern: Exclusion regex (source or compiled)
            chunk_size: Bytes read per I/O operation
            window_capacity: Seam window size; matches up to half of it are
                detected across chunk boundaries
            logger: Logger to report through

        Raises:
            InvalidPatternError: If the pattern does not compile
            ConfigurationError: If the window does not fit the chunk size
        """
        super().__init__(chunk_size=chunk_size, logger=logger)

        if window_capacity <= 0 or window_capacity % 2:
            raise ConfigurationError(
                f"Window capacity must be a positive even number, got {window_capacity}"
            )
        if window_capacity // 2 > chunk_size:
            raise ConfigurationError(
                f"Half the window ({window_capacity // 2}) exceeds the chunk size ({chunk_size})"
            )

        self.pattern = compile_pattern(pattern)
        self.window_capacity = window_capacity

    @property
    def max_match_width(self) -> int:
        """Widest match guaranteed to be found across a chunk boundary."""
        return self.window_capacity // 2

    def _search(self, data: bytes) -> bool:
        return self.pattern.search(data) is not None

    def _scan_full_chunk(self, window: SeamWindow, chunk: bytes, offset: int) -> bool:
        if self._search(chunk):
            self.logger.debug(f"Pattern found in chunk at offset {offset}")
            return True

        if window.state is WindowState.HALF_TAIL:
            window.append_head(chunk)
            found = self._search(window.contents())
            window.reset()
            if found:
                self.logger.debug(f"Pattern found across chunk boundary at offset {offset}")
                return True

        window.store_tail(chunk)
        return False

    def _scan_last_chunk(self, window: SeamWindow, chunk: bytes, offset: int) -> bool:
        if self._search(chunk):
            self.logger.debug(f"Pattern found in final chunk at offset {offset}")
            return True

        # An empty final chunk adds nothing to the seam
        if window.state is WindowState.HALF_TAIL and chunk:
            if self._search(window.tail() + chunk[:window.half]):
                self.logger.debug(f"Pattern found across final boundary at offset {offset}")
                return True

        return False

    async def analyze(self, stream) -> AnalysisResult:
        result = AnalysisResult()
        window = SeamWindow(self.window_capacity)

        while True:
            offset = result.byte_count

            try:
                chunk = await read_chunk(stream, self.chunk_size)
            except PartialReadError as e:
                # Bytes that arrived before the failure are counted and searched
                result.add_chunk(e.data)
                if not result.matched:
                    result.matched = self._scan_last_chunk(window, e.data, offset)
                self.logger.warning(
                    f"Read failed after {result.byte_count} bytes: {e.cause}"
                )
                raise StreamReadError(
                    result, str(e.cause) or type(e.cause).__name__
                ) from e.cause

            result.add_chunk(chunk)

            if len(chunk) < self.chunk_size:
                if not result.matched:
                    result.matched = self._scan_last_chunk(window, chunk, offset)
                return result

            if not result.matched:
                result.matched = self._scan_full_chunk(window, chunk, offset)
