"""
Binary encoding toolkit shared by every module compiler.

Components:
    BinaryWriter   - Little-endian writer with back-patching
    pad_to         - 4-byte alignment helper
    StringPool     - Append-only string/blob pool returning offsets
    RecordLayout   - Fixed-width record packing
    Trie           - Pattern dictionary with stable ids
"""

from langdata_compiler.binary.writer import (
    ALIGNMENT,
    BinaryWriter,
    pad_to,
    padding_for,
)
from langdata_compiler.binary.stringpool import (
    StringPool,
    encode_text,
    words_to_pool,
)
from langdata_compiler.binary.records import (
    RecordField,
    RecordLayout,
    PHONE_DATA,
    POS_DATA,
    CHAR_DATA,
    WORD_DATA,
    SUFFIX_DATA,
    pack_fixed_text,
)
from langdata_compiler.binary.trie import (
    Trie,
    lookup,
    wildcard_to_placeholder,
)

__all__ = [
    "ALIGNMENT",
    "BinaryWriter",
    "pad_to",
    "padding_for",
    "StringPool",
    "encode_text",
    "words_to_pool",
    "RecordField",
    "RecordLayout",
    "PHONE_DATA",
    "POS_DATA",
    "CHAR_DATA",
    "WORD_DATA",
    "SUFFIX_DATA",
    "pack_fixed_text",
    "Trie",
    "lookup",
    "wildcard_to_placeholder",
]
