"""
FuzzHawk Scanner Engine

Sequential content-discovery fuzzer with bounded-memory response analysis.
"""

from fuzzhawk.scanner.core.engine import FuzzEngine, FuzzConfig
from fuzzhawk.scanner.core.requester import AsyncRequester

__all__ = ['FuzzEngine', 'FuzzConfig', 'AsyncRequester']
