"""Record codec: ledger records <-> store bytes."""

from typing import TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ledger.exceptions import StoreError

RecordT = TypeVar("RecordT", bound=BaseModel)

_index_adapter = TypeAdapter(list[str])


def encode(record: BaseModel) -> bytes:
    """Serialize a record using its persisted field names."""
    return record.model_dump_json(by_alias=True).encode()


def decode(model: type[RecordT], data: bytes) -> RecordT:
    """Deserialize bytes into a record of the given type.

    Raises:
        StoreError: If the bytes are not a valid record of that type
    """
    try:
        return model.model_validate_json(data)
    except PydanticValidationError as e:
        raise StoreError(f"Could not decode {model.__name__} record") from e


def is_record(model: type[BaseModel], data: bytes) -> bool:
    """Check whether bytes decode as the given record type."""
    try:
        model.model_validate_json(data)
    except PydanticValidationError:
        return False
    return True


def encode_index(ids: list[str]) -> bytes:
    """Serialize an index as a JSON array of identifiers."""
    return _index_adapter.dump_json(ids)


def decode_index(data: bytes | None) -> list[str]:
    """Deserialize an index; absent data is an empty index.

    Raises:
        StoreError: If the bytes are not a JSON array of strings
    """
    if data is None:
        return []
    try:
        return _index_adapter.validate_json(data)
    except PydanticValidationError as e:
        raise StoreError("Could not decode index") from e
