"""
FuzzHawk - Web Content Discovery Fuzzer
"""

import logging

__version__ = '1.0.0'

LOG_FORMAT = '%(levelname)s: %(asctime)s %(message)s'
LOG_DATE_FORMAT = '%Y/%m/%d %H:%M:%S'


def configure_logging(level: str = 'INFO'):
    """Send log records to stderr so result rows on stdout stay clean."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT
    )
