"""
Response exclusion policy.

A response is hidden when ANY configured filter fires: exact byte count,
exact line count, or presence of the exclusion pattern. Filters that are
not configured never fire.
"""

from typing import List, Optional

from fuzzhawk.scanner.analyzers.base import AnalysisResult


def _unset_if_negative(value: Optional[int]) -> Optional[int]:
    if value is None or value < 0:
        return None
    return value


class ExclusionPolicy:
    """OR-combination of exact-match exclusion filters."""

    def __init__(
            self,
            exclude_size: Optional[int] = None,
            exclude_lines: Optional[int] = None,
            pattern: Optional[str] = None
    ):
        """
        Args:
            exclude_size: Hide responses with exactly this many bytes
            exclude_lines: Hide responses with exactly this many lines
            pattern: Hide responses whose body matches this regex

        Negative numbers and an empty pattern count as unset.
        """
        self.exclude_size = _unset_if_negative(exclude_size)
        self.exclude_lines = _unset_if_negative(exclude_lines)
        self.pattern = pattern or None

    @property
    def has_pattern(self) -> bool:
        return self.pattern is not None

    def reasons(self, result: AnalysisResult) -> List[str]:
        """Names of the filters that exclude this result."""
        reasons = []
        if self.exclude_size is not None and result.byte_count == self.exclude_size:
            reasons.append(f"size={self.exclude_size}")
        if self.exclude_lines is not None and result.line_count == self.exclude_lines:
            reasons.append(f"lines={self.exclude_lines}")
        if self.has_pattern and result.matched:
            reasons.append("regex")
        return reasons

    def excludes(self, result: AnalysisResult) -> bool:
        return bool(self.reasons(result))

    def __repr__(self):
        return (
            f"ExclusionPolicy(exclude_size={self.exclude_size}, "
            f"exclude_lines={self.exclude_lines}, pattern={self.pattern!r})"
        )
