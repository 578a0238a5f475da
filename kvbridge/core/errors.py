"""
kvbridge exception hierarchy.

Every error in the system inherits from KVBridgeError.
Envelope outcomes (failed, invalid_param) are NOT exceptions: they are
reported through the result channel. These classes cover the places
where something is raised to a caller instead.

Usage:
    try:
        router.dispatch(command)
    except UnknownCommandError as e:
        # Caller asked for a command the bridge does not expose
    except KVBridgeError as e:
        # Handle any kvbridge error
"""


class KVBridgeError(Exception):
    """Base exception for all kvbridge errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(KVBridgeError):
    """Configuration is invalid, missing, or malformed."""

    pass


# ━━━ Storage ━━━


class StorageError(KVBridgeError):
    """Storage backend failure: database errors, closed store."""

    pass


class QuotaExceededError(StorageError):
    """A write would push the store past its size quota."""

    def __init__(
        self,
        message: str,
        quota: int = 0,
        requested: int = 0,
        details: dict | None = None,
    ):
        self.quota = quota
        self.requested = requested
        super().__init__(message, details)


# ━━━ Command boundary ━━━


class CommandError(KVBridgeError):
    """Command does not match its declared arity or argument types."""

    def __init__(
        self,
        message: str,
        command: str = "",
        details: dict | None = None,
    ):
        self.command = command
        super().__init__(message, details)


class UnknownCommandError(CommandError):
    """Requested command is not exposed by the bridge."""

    pass
