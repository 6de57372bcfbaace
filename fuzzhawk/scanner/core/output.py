"""
Result row rendering for the console.
"""

HEADER = "Word\t\t\tSize\tLines"


def format_header() -> str:
    return HEADER


def format_row(result) -> str:
    """Render one shown result as ``word<TAB>size<TAB>lines``."""
    return f"{result.word}\t\t\t{result.byte_count}\t{result.line_count}"
