"""
String Pool - Append-only text and byte buffer.

Offsets returned by the pool are simply the pool length before the append.
There is no deduplication: the same word put twice is stored twice, and
offsets depend only on append order.
"""

from __future__ import annotations

from typing import Iterable

TEXT_ENCODING = "utf-16-le"
TERMINATOR = b"\0\0"


def encode_text(text: str) -> bytes:
    """Encode text the way the runtime reads it (UTF-16LE, no terminator)."""
    return text.encode(TEXT_ENCODING, "surrogatepass")


class StringPool:
    """Append-only pool of NUL-terminated UTF-16LE strings and raw blobs."""

    def __init__(self):
        self._chunks = bytearray()

    def put_string(self, text: str) -> int:
        """Append ``text`` plus a 2-byte terminator, return its offset."""
        offset = len(self._chunks)
        self._chunks += encode_text(text)
        self._chunks += TERMINATOR
        return offset

    def put_bytes(self, data: bytes) -> int:
        """Append raw bytes, return their offset."""
        offset = len(self._chunks)
        self._chunks += data
        return offset

    @property
    def position(self) -> int:
        return len(self._chunks)

    def to_bytes(self) -> bytes:
        return bytes(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)


def words_to_pool(words: Iterable[str], pool: StringPool) -> list[int]:
    """Append each word in order and return the parallel offsets."""
    return [pool.put_string(word) for word in words]
