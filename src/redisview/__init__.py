"""redisview: interactive terminal browser for Redis."""

from redisview.config import ViewerConfig
from redisview.exceptions import ConfigError, FilterSyntaxError, KeyFormatError, RedisViewError

__all__ = [
    "ConfigError",
    "FilterSyntaxError",
    "KeyFormatError",
    "RedisViewError",
    "ViewerConfig",
]
