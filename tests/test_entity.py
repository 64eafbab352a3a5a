"""Tests for entity documents."""

from dataclasses import dataclass, field

from mashumaro import field_options
import pytest

from shipdock_kvstore.entity import BaseEntity, decode_document, encode_document
from shipdock_kvstore.exceptions import DecodeError


@dataclass
class Gadget(BaseEntity):
    name: str = field(metadata=field_options(alias="Name"))
    tags: dict[str, str] = field(
        metadata=field_options(alias="Tags"), default_factory=dict
    )


def test_encode_indented() -> None:
    """Test the document written by default."""
    assert encode_document(Gadget(name="é", tags={"b": "1", "a": "2"})) == (
        '{\n  "Name": "é",\n  "Tags": {\n    "b": "1",\n    "a": "2"\n  }\n}'
    ).encode()


def test_encode_compact() -> None:
    """Test the compact document form."""
    assert encode_document(Gadget(name="x"), indent=None) == b'{"Name":"x","Tags":{}}'


def test_decode_field_names() -> None:
    """Test decoding by stored names and by attribute names."""
    assert decode_document(Gadget, "k", b'{"Name": "x"}') == Gadget(name="x")
    assert decode_document(Gadget, "k", b'{"name": "x"}') == Gadget(name="x")


def test_decode_error_carries_key() -> None:
    """Test that decode failures name the offending key."""
    with pytest.raises(DecodeError) as exc_info:
        decode_document(Gadget, "root/kind/k", b"{")
    assert exc_info.value.key == "root/kind/k"
    assert "root/kind/k" in str(exc_info.value)
