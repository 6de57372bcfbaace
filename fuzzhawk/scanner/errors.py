"""
FuzzHawk Exceptions

Errors raised by the analyzers, the requester and the fuzzing engine.
"""


class FuzzHawkError(Exception):
    """Base class for all FuzzHawk errors."""


class ConfigurationError(FuzzHawkError):
    """Invalid scanner configuration (chunk/window sizes, options)."""


class InvalidPatternError(ConfigurationError):
    """The exclusion regex failed to compile."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid regex {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class TemplateError(ConfigurationError):
    """The URL template is empty or lacks the fuzz keyword."""


class WordlistError(FuzzHawkError):
    """The wordlist could not be opened or read."""


class RequestError(FuzzHawkError):
    """An HTTP request could not be built or sent."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Request to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class RequestBuildError(RequestError):
    """The request could not be constructed (malformed URL or method)."""


class PartialReadError(FuzzHawkError):
    """
    A read failed partway through filling a chunk.

    ``data`` holds the bytes that arrived before the failure and ``cause``
    the transport exception.
    """

    def __init__(self, data: bytes, cause: BaseException):
        super().__init__(f"Read failed after {len(data)} bytes of chunk: {cause}")
        self.data = data
        self.cause = cause


class StreamReadError(FuzzHawkError):
    """
    The response body failed mid-read.

    ``result`` holds the counts (and match state) accumulated before the
    failure so the caller can decide what to do with a partial result.
    """

    def __init__(self, result, reason: str):
        super().__init__(f"Error while reading response body: {reason}")
        self.result = result
        self.reason = reason


class WindowStateError(FuzzHawkError):
    """Illegal transition of the rolling seam window."""
