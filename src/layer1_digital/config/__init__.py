"""
Configuration management for Layer1 Digital SDK
"""

from .settings import (
    Layer1Config,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
)

__all__ = [
    'Layer1Config',
    'DEFAULT_BASE_URL',
    'DEFAULT_TIMEOUT',
]
