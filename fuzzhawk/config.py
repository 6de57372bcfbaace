"""
FuzzHawk Configuration Module

Defaults for the command line, overridable through environment
variables or a .env file.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


class BaseConfig:
    """Base configuration."""

    # Application
    APP_NAME = 'FuzzHawk'
    APP_VERSION = '1.0.0'

    # Fuzzing
    WORDLIST = os.environ.get('FUZZHAWK_WORDLIST', '/usr/share/wordlists/common.txt')
    FUZZ_KEYWORD = os.environ.get('FUZZHAWK_KEYWORD', 'FUZZ')
    HTTP_METHOD = os.environ.get('FUZZHAWK_METHOD', 'GET')

    # Response analysis
    CHUNK_SIZE = _env_int('FUZZHAWK_CHUNK_SIZE', 32 * 1024)
    WINDOW_SIZE = _env_int('FUZZHAWK_WINDOW_SIZE', 4096)  # 2 KiB max match width

    # Requester
    TIMEOUT = _env_float('FUZZHAWK_TIMEOUT', 30)
    DELAY_BETWEEN_REQUESTS = _env_float('FUZZHAWK_DELAY', 0.0)
    MAX_RETRIES = _env_int('FUZZHAWK_RETRIES', 1)
    VERIFY_SSL = True
    USER_AGENT = os.environ.get('FUZZHAWK_USER_AGENT', 'FuzzHawk/1.0 Content Discovery')

    # Logging
    LOG_LEVEL = os.environ.get('FUZZHAWK_LOG_LEVEL', 'INFO')


class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    LOG_LEVEL = 'DEBUG'


class TestingConfig(BaseConfig):
    """Testing configuration."""

    WORDLIST = ''
    TIMEOUT = 5
    MAX_RETRIES = 1
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(BaseConfig):
    """Production configuration."""

    LOG_LEVEL = os.environ.get('FUZZHAWK_LOG_LEVEL', 'WARNING')


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': BaseConfig
}


def get_config(name: str = None):
    """Select a configuration class, by default from FUZZHAWK_ENV."""
    name = name or os.environ.get('FUZZHAWK_ENV', 'default')
    return config.get(name, BaseConfig)
