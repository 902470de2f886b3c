"""Exceptions raised by redisview."""


class RedisViewError(Exception):
    """Base exception for redisview errors."""

    pass


class FilterSyntaxError(RedisViewError):
    """Filter text is not a valid pattern for the selected filter mode."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"Invalid filter pattern {text!r}: {reason}")
        self.text = text
        self.reason = reason


class KeyFormatError(RedisViewError, ValueError):
    """Display string does not carry a database header."""

    pass


class ConfigError(RedisViewError):
    """Configuration value could not be parsed."""

    pass
