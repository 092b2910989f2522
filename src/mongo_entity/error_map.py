"""
Error normalization for mongo-entity.

An ``ErrorMap`` maps a substring of a driver (or package) error message to a
replacement message chosen by the calling application, so applications can
handle a stable vocabulary without depending on MongoDB wording.

Matching order is deterministic: keys are tried longest first, and keys of the
same length in insertion order.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from pymongo import errors as mongo_errors

from .exceptions import (
    ConnectionError,
    DuplicateKeyError,
    MongoEntityError,
    OperationError,
)

# Message prefixes raised by the client; usable as ErrorMap keys.
ERR_NO_DOCUMENTS = "no documents in result"
ERR_NO_MATCH = "no match found for entity="
ERR_DELETE_FAILED = "failed to delete entity="
ERR_MISSING_KEY = "missing key field"

DEFAULT_ERRORS: dict[str, str] = {
    ERR_NO_DOCUMENTS: "not found",
}


class ErrorMap(Mapping[str, str]):
    """
    Ordered table of ``substring -> replacement`` pairs.

    Example:
        errors = ErrorMap()
        errors.set("E11000 duplicate key", "already exists")
        raise errors.normalize(exc) from exc
    """

    def __init__(self, errors: Mapping[str, str] | None = None, *, defaults: bool = True):
        self._errors: dict[str, str] = {}
        if defaults:
            self._errors.update(DEFAULT_ERRORS)
        for substring, replacement in (errors or {}).items():
            self.set(substring, replacement)

    def __getitem__(self, substring: str) -> str:
        return self._errors[substring]

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __repr__(self) -> str:
        return f"ErrorMap({self._errors!r})"

    def set(self, substring: str, replacement: str) -> None:
        """Add or replace the replacement message for ``substring``."""
        if not substring:
            raise ValueError("Error substring must not be empty")
        self._errors[substring] = replacement

    def remove(self, substring: str) -> None:
        """Remove ``substring`` from the table if present."""
        self._errors.pop(substring, None)

    def copy(self) -> ErrorMap:
        return ErrorMap(self._errors, defaults=False)

    def match(self, message: str) -> str | None:
        """Return the replacement for the first key contained in ``message``."""
        # sorted() is stable, so equal lengths keep insertion order
        for substring in sorted(self._errors, key=len, reverse=True):
            if substring in message:
                return self._errors[substring]
        return None

    def normalize(self, error: BaseException, entity: str | None = None) -> BaseException:
        """
        Normalize an error against the table.

        Args:
            error: The error raised by the driver or by the client
            entity: Collection the failed operation targeted, recorded on
                the resulting ``OperationError``

        Returns:
            A new exception carrying the replacement message when a key
            matches, otherwise ``error`` itself.
        """
        replacement = self.match(str(error))
        if replacement is None:
            return error
        return _rebuild(error, replacement, entity)


def _rebuild(error: BaseException, message: str, entity: str | None = None) -> MongoEntityError:
    """Build a package exception of the matching category carrying ``message``."""
    if isinstance(error, OperationError):
        return type(error)(message, entity=error.entity or entity, code=error.code)
    if isinstance(error, MongoEntityError):
        return type(error)(message, code=error.code)

    code = getattr(error, "code", None)
    if isinstance(error, mongo_errors.DuplicateKeyError):
        return DuplicateKeyError(message, entity=entity, code=code)
    if isinstance(error, (mongo_errors.ConnectionFailure, mongo_errors.ConfigurationError)):
        return ConnectionError(message, code=code)
    return OperationError(message, entity=entity, code=code)


__all__ = [
    "DEFAULT_ERRORS",
    "ERR_DELETE_FAILED",
    "ERR_MISSING_KEY",
    "ERR_NO_DOCUMENTS",
    "ERR_NO_MATCH",
    "ErrorMap",
]
