"""
Tests for the binary encoding toolkit.
"""

import struct

import pytest
from hypothesis import given, settings, strategies as st

from langdata_compiler.binary import (
    CHAR_DATA,
    PHONE_DATA,
    POS_DATA,
    SUFFIX_DATA,
    WORD_DATA,
    BinaryWriter,
    RecordField,
    RecordLayout,
    StringPool,
    Trie,
    lookup,
    pack_fixed_text,
    pad_to,
    padding_for,
    wildcard_to_placeholder,
    words_to_pool,
)
from langdata_compiler.errors import FieldOverflowError


# =============================================================================
# Writer
# =============================================================================

class TestBinaryWriter:
    """Tests for BinaryWriter."""

    def test_little_endian(self):
        writer = BinaryWriter()
        writer.write_u32(0x01020304)
        writer.write_u16(0x0506)
        writer.write_i16(-1)

        assert writer.getvalue() == b"\x04\x03\x02\x01\x06\x05\xff\xff"

    def test_char_is_utf16_code_unit(self):
        writer = BinaryWriter()
        writer.write_char("A")
        writer.write_char("中")

        assert writer.getvalue() == b"A\x00\x2d\x4e"

    def test_patch_returns_to_end(self):
        writer = BinaryWriter()
        writer.write_u32(0)
        writer.write_u32(7)
        writer.patch_u32(0, 99)
        writer.write_u32(8)

        assert struct.unpack("<III", writer.getvalue()) == (99, 7, 8)

    def test_overflow_raises(self):
        writer = BinaryWriter()
        with pytest.raises(FieldOverflowError):
            writer.write_u16(0x10000)
        with pytest.raises(FieldOverflowError):
            writer.write_u32(-1)

    def test_overflow_names_field(self):
        writer = BinaryWriter()

        with pytest.raises(FieldOverflowError) as info:
            writer.write_u16(0x10000, "PhoneData.id")

        assert info.value.field_name == "PhoneData.id"
        assert "'PhoneData.id' (u16)" in str(info.value)
        assert "<H" not in str(info.value)

    def test_pad_to(self):
        writer = BinaryWriter()
        writer.write_u16(1)
        assert pad_to(writer) == 2
        assert len(writer) == 4
        assert pad_to(writer) == 0

    @pytest.mark.parametrize("position,expected", [(0, 0), (1, 3), (2, 2), (3, 1), (4, 0), (5, 3)])
    def test_padding_for(self, position, expected):
        assert padding_for(position) == expected


# =============================================================================
# String pool
# =============================================================================

class TestStringPool:
    """Tests for the append-only string pool."""

    def test_offsets_follow_append_order(self):
        pool = StringPool()
        assert pool.put_string("ab") == 0
        assert pool.put_string("c") == 6
        assert pool.to_bytes() == b"a\0b\0\0\0c\0\0\0"

    def test_no_deduplication(self):
        pool = StringPool()
        offsets = words_to_pool(["x", "x"], pool)
        assert offsets == [0, 4]
        assert len(pool) == 8

    def test_put_bytes(self):
        pool = StringPool()
        pool.put_string("a")
        assert pool.put_bytes(b"\x01\x02") == 4
        assert pool.position == 6

    def test_empty_string_is_terminator_only(self):
        pool = StringPool()
        pool.put_string("")
        assert pool.to_bytes() == b"\0\0"


# =============================================================================
# Fixed records
# =============================================================================

class TestRecordLayout:
    """Tests for fixed-width records."""

    def test_layout_sizes(self):
        assert PHONE_DATA.size == 52
        assert POS_DATA.size == 68
        assert CHAR_DATA.size == 16
        assert WORD_DATA.size == 44
        assert SUFFIX_DATA.size == 20

    def test_phone_data_offsets(self):
        assert PHONE_DATA.offsets == {"id": 0, "name": 2, "duration": 44, "feature": 48}

    def test_char_data_pads_after_u16(self):
        assert CHAR_DATA.offsets["word_offset"] == 8

    def test_pack_phone(self):
        record = PHONE_DATA.pack(id=2, name="P", duration=0, feature=2)

        assert len(record) == 52
        assert struct.unpack_from("<H", record, 0) == (2,)
        assert record[2:6] == b"P\0\0\0"
        assert struct.unpack_from("<II", record, 44) == (0, 2)

    def test_missing_fields_are_zero(self):
        assert POS_DATA.pack() == b"\0" * 68

    def test_text_truncated_with_terminator(self):
        assert pack_fixed_text("ABC", 3) == b"A\0B\0\0\0"
        assert pack_fixed_text("", 2) == b"\0\0\0\0"

    def test_text_truncation_keeps_surrogate_pairs_whole(self):
        packed = pack_fixed_text("A\U0001F600", 3)

        assert packed == b"A\0\0\0\0\0"
        assert pack_fixed_text("\U0001F600", 3) == "\U0001F600".encode("utf-16-le") + b"\0\0"

    def test_numeric_overflow(self):
        with pytest.raises(FieldOverflowError) as info:
            PHONE_DATA.pack(id=0x10000)
        assert info.value.field_name == "PhoneData.id"

    def test_custom_layout(self):
        layout = RecordLayout("Pair", [RecordField("a", "u8"), RecordField("b", "u32")])
        assert layout.offsets == {"a": 0, "b": 4}
        assert layout.size == 8


# =============================================================================
# Trie
# =============================================================================

def _node(unit, child_count, first_child, word_id):
    return struct.pack("<HHIi", unit, child_count, first_child, word_id)


class TestTrie:
    """Tests for the trie dictionary."""

    def test_ids_are_lexicographic(self):
        trie = Trie(["b", "ab", "a"])
        assert trie.patterns == ["a", "ab", "b"]
        assert trie.id_of("ab") == 1

    def test_golden_bytes(self):
        trie = Trie(["ab", "a", "b"])

        expected = (
            struct.pack("<II", 4, 3)
            + _node(0, 2, 1, -1)
            + _node(ord("a"), 1, 3, 0)
            + _node(ord("b"), 0, 0, 2)
            + _node(ord("b"), 0, 0, 1)
        )
        assert trie.to_bytes() == expected

    def test_input_order_does_not_matter(self):
        assert Trie(["x", "xy", "z"]).to_bytes() == Trie(["z", "xy", "x"]).to_bytes()

    def test_utf16_ordering(self):
        # High surrogate 0xD83D sorts before U+FF21.
        trie = Trie(["Ａ", "\U0001f600"])
        assert trie.patterns == ["\U0001f600", "Ａ"]

    def test_lookup(self):
        trie = Trie(["New,York", "Los,Angeles", "New"])
        data = trie.to_bytes()

        assert lookup(data, "New") == trie.id_of("New")
        assert lookup(data, "New,York") == trie.id_of("New,York")
        assert lookup(data, "Ne") == -1
        assert lookup(data, "Boston") == -1

    def test_empty_pattern_rejected(self):
        with pytest.raises(ValueError):
            Trie(["a", ""])

    def test_empty_trie(self):
        trie = Trie([])
        assert len(trie) == 0
        assert trie.to_bytes() == struct.pack("<II", 1, 0) + _node(0, 0, 0, -1)

    def test_order_values(self):
        trie = Trie({"b": 2, "a": 1})
        assert trie.order_values({"b": 2, "a": 1}) == [1, 2]

    def test_wildcard_placeholders(self):
        assert wildcard_to_placeholder("*,of,?") == "/1,of,/2"
        assert wildcard_to_placeholder("plain") == "plain"


class TestTrieProperties:
    """Property: ids and serialized lookups agree for any pattern set."""

    @given(st.sets(st.text(min_size=1, max_size=6), min_size=1, max_size=25))
    @settings(max_examples=100)
    def test_pattern_of_id_of(self, patterns):
        trie = Trie(patterns)
        for pattern in patterns:
            assert trie.pattern_of(trie.id_of(pattern)) == pattern

    @given(st.sets(st.text(alphabet="abcxyz,", min_size=1, max_size=5), min_size=1, max_size=20))
    @settings(max_examples=100)
    def test_runtime_lookup_matches_ids(self, patterns):
        trie = Trie(patterns)
        values = {p: f"value-{p}" for p in patterns}
        ordered = trie.order_values(values)
        data = trie.to_bytes()

        for pattern in patterns:
            assert ordered[lookup(data, pattern)] == values[pattern]

    @given(st.lists(st.integers(min_value=0, max_value=3), max_size=10), st.binary(max_size=9))
    def test_alignment_after_pool(self, lengths, blob):
        pool = StringPool()
        for n in lengths:
            pool.put_string("x" * n)
        pool.put_bytes(blob)

        writer = BinaryWriter()
        writer.write_u32(len(lengths))
        writer.write_bytes(pool.to_bytes())
        writer.pad_to(4)

        assert writer.position % 4 == 0
