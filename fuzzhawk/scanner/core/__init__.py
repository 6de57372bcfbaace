"""
FuzzHawk Scanner Core Components

Contains the fuzzing engine, HTTP requester, exclusion policy and wordlist helpers.
"""

from fuzzhawk.scanner.core.engine import FuzzEngine, FuzzConfig, FuzzResult
from fuzzhawk.scanner.core.requester import AsyncRequester, RequestMethod
from fuzzhawk.scanner.core.filters import ExclusionPolicy

__all__ = [
    'FuzzEngine', 'FuzzConfig', 'FuzzResult',
    'AsyncRequester', 'RequestMethod', 'ExclusionPolicy'
]
