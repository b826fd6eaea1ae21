"""
Parallel Struct Compiler - Segment and trigger words with their POS.

Layout:
    u32 lcid
    u32 record_size (44)
    u32 segment_count
    WordData {u32 pos, text[20] text} per valid segment word
    u32 trigger_count
    WordData per valid trigger word

Counts are the number of listed items; an item whose POS is not a
tagging POS is reported and not written, which blocks the module.
"""

from __future__ import annotations

from langdata_compiler.binary import WORD_DATA, BinaryWriter
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.models import ParallelStructItem, ParallelStructTable, PosSet


class ParallelStructError(ErrorKind):
    INVALID_POS_STRING = (
        "There is invalid POS string data [{0}] (symbol of whitespace will be ignored).",
        Severity.MUST_FIX)
    EMPTY_DATA = ("There is no data (symbol of whitespace will be ignored): {0}", Severity.MUST_FIX)


def _write_items(
    writer: BinaryWriter,
    items: list[ParallelStructItem],
    pos_set: PosSet,
    errors: ErrorSet,
) -> None:
    writer.write_u32(len(items))
    for item in items:
        if item.pos not in pos_set:
            errors.add(ParallelStructError.INVALID_POS_STRING, item.pos)
            continue
        writer.write_bytes(WORD_DATA.pack(pos=pos_set.items[item.pos], text=item.text))


def compile_parallel_struct(table: ParallelStructTable, pos_set: PosSet) -> tuple[bytes, ErrorSet]:
    """Encode a parallel struct table; POS names resolve through ``pos_set``."""
    errors = ErrorSet()
    if not table.segment_items:
        errors.add(ParallelStructError.EMPTY_DATA, "Empty segment word.")
    if not table.trigger_items:
        errors.add(ParallelStructError.EMPTY_DATA, "Empty trigger word.")

    writer = BinaryWriter()
    writer.write_u32(table.language.lcid)
    writer.write_u32(WORD_DATA.size)
    _write_items(writer, table.segment_items, pos_set, errors)
    _write_items(writer, table.trigger_items, pos_set, errors)
    return writer.getvalue(), errors
