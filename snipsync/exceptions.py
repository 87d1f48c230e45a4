"""
Exceptions shared by the snippet store, settings and remote sync.
"""


class SnippetError(Exception):
    """
    Base class for all snipsync errors.
    """
    pass


class ConfigError(SnippetError):
    """
    Raised when a configured path or value is missing or invalid.

    The user must fix configuration (usually by running
    `snipsync configure`) before retrying.
    """
    pass


class TokenError(ConfigError):
    """
    Raised when the access token for a remote backend is missing.
    """
    pass


class SnippetIOError(SnippetError, OSError):
    """
    Raised on stat/read/write/create failures other than "not found".
    """
    pass


class ParseError(SnippetError):
    """
    Raised when a snippet file holds malformed TOML.
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class SerializationError(SnippetError):
    """
    Raised when a collection cannot be encoded to TOML.
    """
    pass


class RemoteError(SnippetError):
    """
    Wrapped failure from a remote client.

    `phase` tells which step failed: "init", "fetch" or "push".
    """

    PHASES = ("init", "fetch", "push")

    def __init__(self, message: str, phase: str):
        if phase not in self.PHASES:
            raise ValueError(f"Unknown remote phase: {phase}")
        super().__init__(message)
        self.phase = phase
