"""
mongo-entity Exceptions.

Custom exception hierarchy for the package.
"""


class MongoEntityError(Exception):
    """Base exception for all mongo-entity errors."""

    def __init__(self, message: str, code: int | None = None):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(MongoEntityError):
    """Raised when the client configuration is invalid."""

    pass


class ConnectionError(MongoEntityError):
    """Raised when connection to MongoDB fails or is not established."""

    pass


class OperationError(MongoEntityError):
    """Raised when a driver operation fails."""

    def __init__(self, message: str, entity: str | None = None, code: int | None = None):
        self.entity = entity
        super().__init__(message, code)


class DuplicateKeyError(OperationError):
    """Raised when a write violates a unique index."""

    pass


class MissingKeyError(MongoEntityError):
    """Raised when an update carries neither an id, a key field nor an ``_id``."""

    pass


class NotFoundError(MongoEntityError):
    """Raised when a read matches no record."""

    pass


class NoMatchError(MongoEntityError):
    """Raised when an update matches no record."""

    pass


class DeleteError(MongoEntityError):
    """Raised when a delete does not remove exactly one record."""

    pass
