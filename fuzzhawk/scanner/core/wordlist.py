"""
Wordlist loading and URL template substitution.
"""

import logging
from typing import List

from fuzzhawk.scanner.errors import TemplateError, WordlistError

logger = logging.getLogger(__name__)

DEFAULT_KEYWORD = 'FUZZ'


def load_wordlist(path: str) -> List[str]:
    """
    Read a newline-delimited wordlist fully into memory.

    Line terminators are stripped; blank lines are kept as empty words.

    Raises:
        WordlistError: If the file cannot be opened or read
    """
    try:
        with open(path, 'r', encoding='utf-8', errors='replace', newline='\n') as f:
            words = [line.rstrip('\r\n') for line in f]
    except OSError as e:
        raise WordlistError(f"Error opening wordlist {path}: {e}") from e

    logger.info(f"Loaded {len(words)} words from {path}")
    return words


def validate_template(template: str, keyword: str = DEFAULT_KEYWORD):
    """Ensure the URL template contains the fuzz keyword."""
    if not keyword:
        raise TemplateError("Fuzz keyword must not be empty")
    if not template:
        raise TemplateError("Missing URL")
    if keyword not in template:
        raise TemplateError(f"URL is missing {keyword} keyword")


def build_url(template: str, word: str, keyword: str = DEFAULT_KEYWORD) -> str:
    """Substitute every occurrence of the keyword with the word."""
    return template.replace(keyword, word)
