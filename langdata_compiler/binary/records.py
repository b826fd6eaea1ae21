"""
Fixed Records - Typed fixed-width record packing.

A RecordLayout lists typed fields in order. Fields are laid out
sequentially with natural alignment capped at 4 bytes, and the record
size is rounded up to the largest field alignment, matching a
``Pack=4`` sequential struct. Text fields hold N UTF-16 code units:
the text is truncated to N-1 units and NUL padded, so the runtime can
always rely on a terminator.

Layouts used by the module compilers:
    PHONE_DATA   u16 id, text[20] name, u32 duration, u32 feature    (52 bytes)
    POS_DATA     u32 id, text[32] name                                (68 bytes)
    CHAR_DATA    u32 spell_char, u16 flags, u32 word, u32 pron        (16 bytes)
    WORD_DATA    u32 pos, text[20] text                               (44 bytes)
    SUFFIX_DATA  text[10] text                                        (20 bytes)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Mapping

from langdata_compiler.binary.stringpool import encode_text
from langdata_compiler.errors import FieldOverflowError

MAX_ALIGNMENT = 4

_STRUCT_FORMATS = {
    "u8": ("<B", 1),
    "u16": ("<H", 2),
    "i16": ("<h", 2),
    "u32": ("<I", 4),
    "i32": ("<i", 4),
}


@dataclass(frozen=True)
class RecordField:
    """One field of a fixed record.

    Attributes:
        name: Field name, used as the key when packing.
        kind: One of u8, u16, i16, u32, i32, text.
        length: Number of UTF-16 code units for text fields.
    """

    name: str
    kind: str
    length: int = 0

    @property
    def size(self) -> int:
        if self.kind == "text":
            return self.length * 2
        return _STRUCT_FORMATS[self.kind][1]

    @property
    def alignment(self) -> int:
        if self.kind == "text":
            return 2
        return min(_STRUCT_FORMATS[self.kind][1], MAX_ALIGNMENT)


def u16(name: str) -> RecordField:
    return RecordField(name, "u16")


def u32(name: str) -> RecordField:
    return RecordField(name, "u32")


def text(name: str, length: int) -> RecordField:
    return RecordField(name, "text", length)


def pack_fixed_text(value: str, length: int) -> bytes:
    """Encode ``value`` into exactly ``length`` UTF-16 code units.

    The last unit is always a terminator; a surrogate pair that would be
    cut in half is dropped whole.
    """
    encoded = encode_text(value)[: (length - 1) * 2]
    if len(encoded) >= 2 and 0xD800 <= int.from_bytes(encoded[-2:], "little") <= 0xDBFF:
        encoded = encoded[:-2]
    return encoded.ljust(length * 2, b"\0")


class RecordLayout:
    """Sequential record layout with computed offsets and size."""

    def __init__(self, name: str, fields: list[RecordField]):
        self.name = name
        self.fields = tuple(fields)
        self.offsets: dict[str, int] = {}

        position = 0
        for f in self.fields:
            position += (-position) % f.alignment
            self.offsets[f.name] = position
            position += f.size

        max_alignment = max((f.alignment for f in self.fields), default=1)
        self.size = position + (-position) % max_alignment

    def pack(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> bytes:
        """Pack one record.

        Missing numeric fields are written as zero, missing text as empty.

        Raises:
            FieldOverflowError: If a numeric value does not fit its field.
        """
        merged = {**(values or {}), **kwargs}
        buffer = bytearray(self.size)
        for f in self.fields:
            offset = self.offsets[f.name]
            value = merged.get(f.name)
            if f.kind == "text":
                buffer[offset:offset + f.size] = pack_fixed_text(value or "", f.length)
                continue
            fmt = _STRUCT_FORMATS[f.kind][0]
            try:
                struct.pack_into(fmt, buffer, offset, value or 0)
            except struct.error as e:
                raise FieldOverflowError(f"{self.name}.{f.name}", value, f.kind) from e
        return bytes(buffer)

    def __repr__(self) -> str:
        return f"RecordLayout({self.name!r}, size={self.size})"


PHONE_DATA = RecordLayout("PhoneData", [
    u16("id"),
    text("name", 20),
    u32("duration"),
    u32("feature"),
])

POS_DATA = RecordLayout("PosData", [
    u32("id"),
    text("name", 32),
])

CHAR_DATA = RecordLayout("CharData", [
    u32("spell_char"),
    u16("flags"),
    u32("word_offset"),
    u32("pron_offset"),
])

WORD_DATA = RecordLayout("WordData", [
    u32("pos"),
    text("text", 20),
])

SUFFIX_DATA = RecordLayout("SuffixData", [
    text("text", 10),
])
