"""
Entity client for mongo-entity.

``EntityClient`` owns one MongoDB connection and exposes generic CRUD
operations against named collections ("entities"), where each record is
identified by a configurable key field.

Every record returned is converted to plain Python values, and every failure
goes through the client's ``ErrorMap`` so applications see their own error
vocabulary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Self

from bson.objectid import ObjectId
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.collation import Collation, CollationStrength
from pymongo.errors import PyMongoError

from .config import ClientConfig
from .convert import to_native_record
from .error_map import ERR_DELETE_FAILED, ERR_MISSING_KEY, ERR_NO_DOCUMENTS, ERR_NO_MATCH, ErrorMap
from .exceptions import (
    ConnectionError,
    DeleteError,
    MissingKeyError,
    NoMatchError,
    NotFoundError,
)

if TYPE_CHECKING:
    from pymongo.asynchronous.collection import AsyncCollection

logger = logging.getLogger(__name__)

ID_FIELD = "_id"

# Case-insensitive match used by delete
DELETE_COLLATION = Collation(
    locale="en_US",
    strength=CollationStrength.PRIMARY,
    caseLevel=False,
)


class EntityClient:
    """
    Async MongoDB client for key-addressed records.

    Usage:
        config = ClientConfig(hosts=["localhost:27017"], user="u", password="p", database="d")
        async with EntityClient(config) as client:
            await client.create("rooms", "306", {"RoomNum": "306", "BedSize": "Twin"})
            room = await client.read("rooms", "306")
    """

    def __init__(self, config: ClientConfig, error_map: ErrorMap | None = None):
        """
        Initialize the client. No connection is made until ``connect()``.

        Args:
            config: Validated connection configuration
            error_map: Error normalization table (defaults to ``ErrorMap()``)
        """
        self.config = config
        self.error_map = error_map if error_map is not None else ErrorMap()
        self._client: AsyncMongoClient[dict[str, Any]] | None = None
        self._connected = False

    @property
    def key_field(self) -> str:
        """Name of the field identifying records."""
        return self.config.key_field

    @property
    def is_connected(self) -> bool:
        """Check if connection is established."""
        return self._connected

    # Connection lifecycle

    async def connect(self) -> Self:
        """
        Open the connection and verify it with a ``ping``.

        The driver gets the communication timeout as socket timeout and twice
        that value as connect and server selection timeout.

        Returns:
            self, for fluent use

        Raises:
            ConnectionError: If the server cannot be reached or authentication
                fails (or the error the ErrorMap maps the failure to)
        """
        if self._connected:
            return self

        logger.info(f"Connecting to {self.config.redacted_uri} (database={self.config.database})")
        try:
            client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(
                self.config.connection_uri,
                socketTimeoutMS=self.config.comm_timeout_ms,
                connectTimeoutMS=self.config.connect_timeout_ms,
                serverSelectionTimeoutMS=self.config.connect_timeout_ms,
            )
        except (PyMongoError, ValueError) as e:
            raise self._connect_error(e) from e

        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            await client.close()
            raise self._connect_error(e) from e

        self._client = client
        self._connected = True
        return self

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info(f"Closed connection to {self.config.redacted_uri}")
        self._connected = False

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return await self.connect()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def ping(self) -> bool:
        """Round trip a ``ping`` command to the server."""
        client = self._require_client()
        with self._driver_errors():
            await client.admin.command("ping")
        return True

    # Entity operations

    async def create(self, entity: str, key_value: Any, record: Mapping[str, Any]) -> dict[str, Any]:
        """
        Insert a new record into ``entity``.

        The key field is set to ``key_value`` when ``record`` does not carry it.
        ``record`` itself is left untouched.

        Returns:
            ``{"_id": <inserted id>, <key_field>: <key>}``

        Raises:
            DuplicateKeyError: If a unique index rejects the record and the
                ErrorMap maps the failure
        """
        document = dict(record)
        document.setdefault(self.key_field, key_value)
        collection = self._collection(entity)

        with self._driver_errors(entity):
            result = await collection.insert_one(document)

        logger.debug(f"Record created -> {entity}:{document[self.key_field]!r}")
        return to_native_record({ID_FIELD: result.inserted_id, self.key_field: document[self.key_field]})

    async def read(self, entity: str, key_value: Any) -> dict[str, Any]:
        """
        Read the record of ``entity`` whose key field equals ``key_value``.

        Raises:
            NotFoundError: If no record matches
        """
        collection = self._collection(entity)

        with self._driver_errors(entity):
            document = await collection.find_one(
                {self.key_field: key_value},
                sort=[(self.key_field, ASCENDING)],
            )

        if document is None:
            raise self.error_map.normalize(
                NotFoundError(f"{ERR_NO_DOCUMENTS}: entity={entity} key={key_value}")
            )
        return to_native_record(document)

    async def find(self, entity: str, field: str = "", value: Any = "") -> list[dict[str, Any]]:
        """
        Find every record of ``entity`` where ``field`` equals ``value``.

        When both ``field`` and ``value`` are empty, every record is returned.
        An empty or missing collection yields an empty list.
        """
        query: dict[str, Any] = {}
        if field or value not in ("", None):
            query = {field: value}
        collection = self._collection(entity)

        with self._driver_errors(entity):
            documents = await collection.find(query).to_list(None)

        logger.debug(f"Found {len(documents)} records in {entity} for {query!r}")
        return [to_native_record(document) for document in documents]

    async def read_all(self, entity: str) -> list[dict[str, Any]]:
        """Return every record of ``entity``."""
        return await self.find(entity, "", "")

    async def update(self, entity: str, record_id: str, record: Mapping[str, Any]) -> None:
        """
        Merge ``record`` into an existing record of ``entity``.

        The target is looked up by, in order: ``record_id`` against the key
        field, the key field inside ``record``, then ``record["_id"]``. Fields
        of ``record`` are applied with ``$set``; other stored fields are kept.

        Raises:
            MissingKeyError: If no lookup value is available
            NoMatchError: If no record matches the lookup
        """
        if record_id:
            query, lookup = {self.key_field: record_id}, record_id
        elif record.get(self.key_field) is not None:
            lookup = record[self.key_field]
            query = {self.key_field: lookup}
        elif record.get(ID_FIELD) is not None:
            lookup = record[ID_FIELD]
            query = {ID_FIELD: _object_id(lookup)}
        else:
            raise self.error_map.normalize(MissingKeyError(ERR_MISSING_KEY))

        # _id is immutable and may come back as a string from read()
        changes = {name: value for name, value in record.items() if name != ID_FIELD}
        collection = self._collection(entity)

        with self._driver_errors(entity):
            result = await collection.update_one(query, {"$set": changes}, upsert=False)

        if result.matched_count == 0:
            raise self.error_map.normalize(NoMatchError(f"{ERR_NO_MATCH}{entity} id={lookup}"))
        logger.debug(f"Record updated -> {entity}:{lookup!r}")

    async def delete(self, entity: str, record_id: str) -> None:
        """
        Delete the record of ``entity`` whose key field equals ``record_id``.

        Matching is case-insensitive (en_US collation, primary strength).

        Raises:
            DeleteError: If the delete did not remove exactly one record
        """
        collection = self._collection(entity)

        with self._driver_errors(entity):
            result = await collection.delete_one({self.key_field: record_id}, collation=DELETE_COLLATION)

        if result.deleted_count != 1:
            raise self.error_map.normalize(DeleteError(f"{ERR_DELETE_FAILED}{entity} id={record_id}"))
        logger.debug(f"Record deleted -> {entity}:{record_id!r}")

    # Helpers

    def _connect_error(self, error: Exception) -> BaseException:
        logger.error(f"Failed to connect to {self.config.redacted_uri}: {error}")
        normalized = self.error_map.normalize(error)
        if normalized is error:
            return ConnectionError(f"Failed to connect to MongoDB: {error}")
        return normalized

    def _require_client(self) -> AsyncMongoClient[dict[str, Any]]:
        if self._client is None:
            raise ConnectionError("Not connected. Call connect() first.")
        return self._client

    def _collection(self, entity: str) -> AsyncCollection[dict[str, Any]]:
        return self._require_client()[self.config.database][entity]

    @contextmanager
    def _driver_errors(self, entity: str | None = None) -> Iterator[None]:
        """Re-raise driver errors through the ErrorMap, tagged with ``entity``."""
        try:
            yield
        except PyMongoError as e:
            normalized = self.error_map.normalize(e, entity=entity)
            if normalized is e:
                raise
            raise normalized from e


def _object_id(value: Any) -> Any:
    """Turn the string form of an ObjectId back into an ObjectId."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


async def connect(config: ClientConfig, error_map: ErrorMap | None = None) -> EntityClient:
    """Create an ``EntityClient`` for ``config`` and open its connection."""
    return await EntityClient(config, error_map).connect()


__all__ = ["DELETE_COLLATION", "EntityClient", "ID_FIELD", "connect"]
