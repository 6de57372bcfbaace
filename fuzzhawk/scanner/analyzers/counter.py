"""
Byte and line counting analyzer.
"""

from fuzzhawk.scanner.analyzers.base import BaseAnalyzer, AnalysisResult, read_chunk
from fuzzhawk.scanner.errors import PartialReadError, StreamReadError


class ByteLineCounter(BaseAnalyzer):
    """Counts body bytes and newline bytes in a single linear pass."""

    name = "counter"

    async def analyze(self, stream) -> AnalysisResult:
        result = AnalysisResult()

        while True:
            try:
                chunk = await read_chunk(stream, self.chunk_size)
            except PartialReadError as e:
                result.add_chunk(e.data)
                self.logger.warning(
                    f"Read failed after {result.byte_count} bytes: {e.cause}"
                )
                raise StreamReadError(
                    result, str(e.cause) or type(e.cause).__name__
                ) from e.cause

            result.add_chunk(chunk)

            if len(chunk) < self.chunk_size:
                return result
