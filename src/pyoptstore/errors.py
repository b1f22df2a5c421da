class OptionStoreError(Exception):
    """Base class for option store errors."""


class ConfigurationError(OptionStoreError, ValueError):
    """Raised for invalid schemas, scope arguments or entities."""


class UnknownScopeError(ConfigurationError):
    pass


class AuthorizationDenied(OptionStoreError):
    """Raised in strict mode when a write policy or persist filter vetoes."""


class StorageFailure(OptionStoreError):
    """Base class for failures reported by the host platform."""


class StorageLoadError(StorageFailure):
    """Raised when a host file backend fails to parse its file."""
