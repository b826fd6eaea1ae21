"""
POS Set Compilers - Part-of-speech tables.

PosSet layout:
    u32 record_size (68)
    u32 count
    count x PosData {u32 id, text[32] name}, sorted by id

PosTaggerPos layout:
    u32 count
    count x u16 id, in schema order
"""

from __future__ import annotations

from langdata_compiler.binary import POS_DATA, BinaryWriter
from langdata_compiler.errors import ErrorSet, FieldOverflowError, Severity
from langdata_compiler.rawdata.models import LexicalSchema, PosSet

MAX_TAGGER_POS_ID = 0xFFFE


def compile_pos_set(pos_set: PosSet) -> tuple[bytes, ErrorSet]:
    errors = pos_set.validate()
    if errors.contains(Severity.MUST_FIX):
        return b"", errors

    writer = BinaryWriter()
    writer.write_u32(POS_DATA.size)
    writer.write_u32(len(pos_set))
    for name, pos_id in sorted(pos_set.items.items(), key=lambda item: item[1]):
        writer.write_bytes(POS_DATA.pack(id=pos_id, name=name))
    return writer.getvalue(), errors


def compile_pos_tagger_pos(schema: LexicalSchema) -> tuple[bytes, ErrorSet]:
    """Encode the POS values flagged for tagging.

    Raises:
        InvalidDataError: If the schema does not start with the POS category.
        FieldOverflowError: If an id is above 0xFFFE.
    """
    pos_set = schema.pos_tagging_set()
    errors = ErrorSet().merge(pos_set.errors)

    writer = BinaryWriter()
    writer.write_u32(len(pos_set))
    for pos_id in pos_set.items.values():
        if pos_id > MAX_TAGGER_POS_ID:
            raise FieldOverflowError("PosTaggerPos.id", pos_id, "u16")
        writer.write_u16(pos_id)
    return writer.getvalue(), errors
