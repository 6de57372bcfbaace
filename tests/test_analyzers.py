import aiohttp
import pytest

from fuzzhawk.scanner.analyzers import AnalysisResult, BoundedRegexScanner, ByteLineCounter
from fuzzhawk.scanner.analyzers.base import read_chunk
from fuzzhawk.scanner.errors import ConfigurationError, PartialReadError, StreamReadError
from tests.conftest import FailingStream, MemoryStream


@pytest.mark.asyncio
async def test_read_chunk_fills_from_short_reads():
    stream = MemoryStream(b"abcdefghij", max_read=3)

    assert await read_chunk(stream, 8) == b"abcdefgh"
    assert await read_chunk(stream, 8) == b"ij"
    assert await read_chunk(stream, 8) == b""


@pytest.mark.asyncio
async def test_read_chunk_failure_carries_bytes_already_read():
    stream = FailingStream(b"abcde", error=ConnectionResetError("reset"), max_read=2)

    with pytest.raises(PartialReadError) as excinfo:
        await read_chunk(stream, 8)

    assert excinfo.value.data == b"abcde"
    assert isinstance(excinfo.value.cause, ConnectionResetError)


@pytest.mark.asyncio
async def test_counter_read_error_inside_first_chunk_counts_what_arrived():
    counter = ByteLineCounter(chunk_size=32 * 1024)
    stream = FailingStream(b"ab\ncd\ne", max_read=3)

    with pytest.raises(StreamReadError) as excinfo:
        await counter.analyze(stream)

    assert excinfo.value.result.byte_count == 7
    assert excinfo.value.result.line_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [
    b"",
    b"no newline",
    b"one\n",
    b"a\nb\nc",
    b"\n" * 100,
    b"x" * 16,
    (b"line of text\n" * 500) + b"tail",
])
async def test_counter_counts_bytes_and_newlines(data):
    counter = ByteLineCounter(chunk_size=16)

    result = await counter.analyze(MemoryStream(data, max_read=5))

    assert result.byte_count == len(data)
    assert result.line_count == data.count(b"\n")
    assert result.matched is False


@pytest.mark.asyncio
async def test_counter_with_default_chunk_size():
    data = b"0123456789abcdef\n" * 10000

    result = await ByteLineCounter().analyze(MemoryStream(data))

    assert result == AnalysisResult(byte_count=len(data), line_count=10000)


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [b"", b"abc\n", b"a\nb\nc\n" * 2, b"z" * 15, b"y" * 16])
async def test_counter_and_scanner_agree_within_one_chunk(data):
    counted = await ByteLineCounter(chunk_size=16).analyze(MemoryStream(data))
    scanned = await BoundedRegexScanner(
        "nomatch", chunk_size=16, window_capacity=8
    ).analyze(MemoryStream(data))

    assert (counted.byte_count, counted.line_count) == (scanned.byte_count, scanned.line_count)


@pytest.mark.asyncio
async def test_counter_read_error_keeps_partial_counts(capture_logger):
    counter = ByteLineCounter(chunk_size=4, logger=capture_logger)
    stream = FailingStream(b"ab\ncd\ne", error=aiohttp.ClientPayloadError("connection lost"))

    with pytest.raises(StreamReadError) as excinfo:
        await counter.analyze(stream)

    assert excinfo.value.result.byte_count == 7
    assert excinfo.value.result.line_count == 2
    assert "connection lost" in excinfo.value.reason
    assert isinstance(excinfo.value.__cause__, aiohttp.ClientPayloadError)
    assert any("Read failed" in r.getMessage() for r in capture_logger.records)


@pytest.mark.asyncio
async def test_analysis_is_idempotent():
    data = (b"<html>\n" + b"content " * 5000 + b"\n</html>\n")
    scanner = BoundedRegexScanner(b"</html>", chunk_size=1024, window_capacity=64)

    first = await scanner.analyze(MemoryStream(data))
    second = await scanner.analyze(MemoryStream(data))

    assert first == second
    assert first.matched is True


def test_counter_rejects_non_positive_chunk_size():
    with pytest.raises(ConfigurationError):
        ByteLineCounter(chunk_size=0)


def test_analysis_result_to_dict():
    result = AnalysisResult(byte_count=10, line_count=2, matched=True)

    assert result.to_dict() == {'size': 10, 'lines': 2, 'matched': True}
