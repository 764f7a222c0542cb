class DbVisorError(Exception):
    """Base error for all user-facing dbvisor exceptions."""


class ConfigurationError(DbVisorError):
    """Raised when configuration is invalid or incomplete."""


class ValidationError(DbVisorError):
    """Raised when request arguments fail basic checks."""


class SourceUnavailableError(DbVisorError):
    """Raised when a target database cannot be opened or queried at all."""


class DatabaseNotFoundError(DbVisorError):
    """Raised when no metadata record matches a database id or path."""


class TableNotFoundError(DbVisorError):
    """Raised when a requested table is not part of the source schema."""


class AnalysisCancelledError(DbVisorError):
    """Raised inside a scan once its cancellation flag has been signalled."""


class PersistenceError(DbVisorError):
    """Raised when an analysis result cannot be written to the metadata store."""
