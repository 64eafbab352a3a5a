"""Base representation of an entity stored in the key/value namespace.

Entities are dataclasses serialized to JSON documents. Field names in the
documents are the stable capitalised names read by other agents (e.g. the
load balancer controller), declared as aliases on each field.
"""

from dataclasses import dataclass
import json
from typing import Any, TypeVar

from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig

from .exceptions import DecodeError

__all__ = [
    "BaseEntity",
    "encode_document",
    "decode_document",
]

DOCUMENT_INDENT = 2

T = TypeVar("T", bound="BaseEntity")


@dataclass
class BaseEntity(DataClassDictMixin):
    """Base class for all stored entities."""

    class Config(BaseConfig):
        serialize_by_alias = True
        allow_deserialization_not_by_alias = True


def encode_document(entity: BaseEntity, indent: int | None = DOCUMENT_INDENT) -> bytes:
    """Serialize an entity into a canonical JSON document.

    With an indent the output is deterministic for equal entities: keys are
    written in field declaration order and nested mappings keep their order.
    """
    separators = None if indent else (",", ":")
    return json.dumps(
        entity.to_dict(), indent=indent, separators=separators, ensure_ascii=False
    ).encode()


def decode_document(cls: type[T], key: str, value: bytes) -> T:
    """Deserialize a stored document into an entity of the given type.

    Raises:
        DecodeError: If the value is not a valid document of the expected shape.
    """
    try:
        doc: Any = json.loads(value)
    except ValueError as err:
        raise DecodeError(key, str(err)) from err
    if not isinstance(doc, dict):
        raise DecodeError(key, f"expected an object, got {type(doc).__name__}")
    try:
        return cls.from_dict(doc)
    except (ValueError, LookupError, TypeError) as err:
        raise DecodeError(key, str(err)) from err
