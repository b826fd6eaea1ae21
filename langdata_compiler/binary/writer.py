"""
Binary Writer - Little-endian buffer writer with back-patching.

Every compiled module is fully materialized in memory. Headers that hold
offsets of later sections are written as placeholders first and patched
once the section positions are known.

Example:
    writer = BinaryWriter()
    writer.write_u32(0)              # placeholder
    writer.write_bytes(pool)
    pad_to(writer, 4)
    offset = writer.position
    writer.write_bytes(table)
    writer.patch_u32(0, offset)
    data = writer.getvalue()
"""

from __future__ import annotations

import io
import struct

from langdata_compiler.errors import FieldOverflowError

ALIGNMENT = 4


class BinaryWriter:
    """Little-endian writer over an in-memory buffer."""

    def __init__(self):
        self._buffer = io.BytesIO()

    def _pack(self, fmt: str, value, width: str, field_name: str) -> None:
        try:
            self._buffer.write(struct.pack(fmt, value))
        except struct.error as e:
            raise FieldOverflowError(field_name, value, width) from e

    def write_u8(self, value: int, field_name: str = "value") -> None:
        self._pack("<B", value, "u8", field_name)

    def write_u16(self, value: int, field_name: str = "value") -> None:
        self._pack("<H", value, "u16", field_name)

    def write_i16(self, value: int, field_name: str = "value") -> None:
        self._pack("<h", value, "i16", field_name)

    def write_u32(self, value: int, field_name: str = "value") -> None:
        self._pack("<I", value, "u32", field_name)

    def write_i32(self, value: int, field_name: str = "value") -> None:
        self._pack("<i", value, "i32", field_name)

    def write_f32(self, value: float, field_name: str = "value") -> None:
        self._pack("<f", value, "f32", field_name)

    def write_bytes(self, data: bytes) -> None:
        self._buffer.write(data)

    def write_char(self, char: str) -> None:
        """Write one UTF-16 code unit."""
        self.write_u16(ord(char))

    @property
    def position(self) -> int:
        return self._buffer.tell()

    def seek(self, position: int) -> None:
        self._buffer.seek(position)

    def seek_end(self) -> None:
        self._buffer.seek(0, io.SEEK_END)

    def patch_u32(self, offset: int, value: int) -> None:
        """Overwrite a u32 at ``offset`` and return to the end of the buffer."""
        self._buffer.seek(offset)
        self.write_u32(value)
        self.seek_end()

    def patch_i32(self, offset: int, value: int) -> None:
        self._buffer.seek(offset)
        self.write_i32(value)
        self.seek_end()

    def pad_to(self, alignment: int = ALIGNMENT) -> int:
        """Write zero bytes until the position is a multiple of ``alignment``.

        Returns:
            Number of padding bytes written.
        """
        count = padding_for(self.position, alignment)
        if count:
            self._buffer.write(b"\0" * count)
        return count

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()

    def __len__(self) -> int:
        return len(self._buffer.getbuffer())


def padding_for(position: int, alignment: int = ALIGNMENT) -> int:
    """Number of bytes needed to bring ``position`` to ``alignment``."""
    return (alignment - (position % alignment)) % alignment


def pad_to(writer: BinaryWriter, alignment: int = ALIGNMENT) -> int:
    """Pad ``writer`` to the next multiple of ``alignment``."""
    return writer.pad_to(alignment)
