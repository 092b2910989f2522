"""
mongo-entity - generic key-addressed records on top of MongoDB.

Provides:
- A validated connection configuration (named fields, ordered options or environment)
- An async client with create / read / find / read_all / update / delete per entity
- Conversion of BSON driver values into plain Python values
- A per-client table normalizing driver error messages
"""

from .client import DELETE_COLLATION, ID_FIELD, EntityClient, connect
from .config import (
    DEFAULT_COMM_TIMEOUT_MS,
    DEFAULT_KEY_FIELD,
    ClientConfig,
    ClientOption,
    auth_db_name,
    comm_timeout,
    db_name,
    db_password,
    db_user,
    host_port,
    key_field_name,
)
from .convert import to_native, to_native_record
from .error_map import (
    DEFAULT_ERRORS,
    ERR_DELETE_FAILED,
    ERR_MISSING_KEY,
    ERR_NO_DOCUMENTS,
    ERR_NO_MATCH,
    ErrorMap,
)
from .exceptions import (
    ConfigurationError,
    ConnectionError,
    DeleteError,
    DuplicateKeyError,
    MissingKeyError,
    MongoEntityError,
    NoMatchError,
    NotFoundError,
    OperationError,
)

__version__ = "0.1.0"
__all__ = [
    # Client
    "EntityClient",
    "connect",
    "DELETE_COLLATION",
    "ID_FIELD",
    # Configuration
    "ClientConfig",
    "ClientOption",
    "DEFAULT_COMM_TIMEOUT_MS",
    "DEFAULT_KEY_FIELD",
    "auth_db_name",
    "comm_timeout",
    "db_name",
    "db_password",
    "db_user",
    "host_port",
    "key_field_name",
    # Conversion
    "to_native",
    "to_native_record",
    # Errors
    "ErrorMap",
    "DEFAULT_ERRORS",
    "ERR_DELETE_FAILED",
    "ERR_MISSING_KEY",
    "ERR_NO_DOCUMENTS",
    "ERR_NO_MATCH",
    "MongoEntityError",
    "ConfigurationError",
    "ConnectionError",
    "OperationError",
    "DuplicateKeyError",
    "MissingKeyError",
    "NotFoundError",
    "NoMatchError",
    "DeleteError",
]
