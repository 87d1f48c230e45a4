"""
Exceptions raised during synchronization.

Defined in snipsync.exceptions so the snippet store does not depend on the
sync package.
"""

from snipsync.exceptions import (
    ConfigError,
    ParseError,
    RemoteError,
    SerializationError,
    SnippetError,
    SnippetIOError,
    TokenError,
)

__all__ = [
    "ConfigError",
    "ParseError",
    "RemoteError",
    "SerializationError",
    "SnippetError",
    "SnippetIOError",
    "TokenError",
]
