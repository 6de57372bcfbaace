"""
FuzzHawk Response Analyzers

Streaming analyzers that reduce a response body to (size, lines, matched).
"""

from fuzzhawk.scanner.analyzers.base import (
    AnalysisResult, BaseAnalyzer, DEFAULT_CHUNK_SIZE, DEFAULT_WINDOW_CAPACITY
)
from fuzzhawk.scanner.analyzers.counter import ByteLineCounter
from fuzzhawk.scanner.analyzers.regex_scanner import (
    BoundedRegexScanner, SeamWindow, WindowState, compile_pattern
)

__all__ = [
    'AnalysisResult', 'BaseAnalyzer', 'ByteLineCounter', 'BoundedRegexScanner',
    'SeamWindow', 'WindowState', 'compile_pattern',
    'DEFAULT_CHUNK_SIZE', 'DEFAULT_WINDOW_CAPACITY'
]
