"""Unit tests for mongo_entity.convert - BSON to plain value conversion."""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from bson.binary import Binary
from bson.code import Code
from bson.datetime_ms import DatetimeMS
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.objectid import ObjectId
from bson.regex import Regex
from bson.son import SON
from bson.timestamp import Timestamp

from mongo_entity.convert import to_native, to_native_record

OID = ObjectId("64b7f0c2a1b2c3d4e5f60718")


class TestScalars:
    def test_object_id_to_str(self) -> None:
        assert to_native(OID) == "64b7f0c2a1b2c3d4e5f60718"
        assert type(to_native(OID)) is str

    def test_timestamp_to_datetime(self) -> None:
        result = to_native(Timestamp(1_700_000_000, 1))
        assert result == datetime.fromtimestamp(1_700_000_000, UTC)

    def test_datetime_ms_to_datetime(self) -> None:
        result = to_native(DatetimeMS(1_700_000_000_000))
        assert result == datetime.fromtimestamp(1_700_000_000, UTC)

    def test_datetime_ms_out_of_range_is_clamped(self) -> None:
        result = to_native(DatetimeMS(2**62))
        assert isinstance(result, datetime)
        assert result.year == 9999

    def test_code_to_plain_str(self) -> None:
        result = to_native(Code("function () {}"))
        assert result == "function () {}"
        assert type(result) is str

    def test_int64_to_int(self) -> None:
        result = to_native(Int64(42))
        assert result == 42
        assert type(result) is int

    def test_decimal128_to_decimal(self) -> None:
        assert to_native(Decimal128("12.50")) == Decimal("12.50")

    def test_regex_to_pattern(self) -> None:
        assert to_native(Regex("^ab", "i")) == "^ab"

    def test_binary_to_bytes(self) -> None:
        result = to_native(Binary(b"\x00\x01", 128))
        assert result == b"\x00\x01"
        assert type(result) is bytes

    def test_plain_values_unchanged(self) -> None:
        now = datetime.now(UTC)
        uid = UUID("12345678-1234-5678-1234-567812345678")
        for value in ("text", 3, 2.5, True, None, now, uid, Decimal("1.1")):
            assert to_native(value) == value


class TestContainers:
    def test_nested_document(self) -> None:
        document = {
            "_id": OID,
            "key": "306",
            "beds": [{"size": "Twin", "added": Timestamp(1_700_000_000, 0)}],
            "meta": SON([("count", Int64(2)), ("owner", OID)]),
        }

        result = to_native(document)

        assert result == {
            "_id": str(OID),
            "key": "306",
            "beds": [{"size": "Twin", "added": datetime.fromtimestamp(1_700_000_000, UTC)}],
            "meta": {"count": 2, "owner": str(OID)},
        }
        assert type(result["meta"]) is dict

    def test_tuple_becomes_list(self) -> None:
        assert to_native((OID, 1)) == [str(OID), 1]

    def test_record_conversion(self) -> None:
        assert to_native_record({"_id": OID, "n": Int64(1)}) == {"_id": str(OID), "n": 1}

    def test_empty_containers(self) -> None:
        assert to_native({}) == {}
        assert to_native([]) == []


class TestIdempotence:
    def test_converting_twice_is_stable(self) -> None:
        document = {
            "_id": OID,
            "when": DatetimeMS(1_700_000_000_000),
            "tags": [Code("x"), Int64(7), {"ts": Timestamp(5, 0)}],
            "price": Decimal128("9.99"),
        }

        once = to_native(document)
        twice = to_native(once)

        assert once == twice
