"""
Quotation Mark Compiler.

Layout:
    u32 lcid
    u32 count
    count x {u16 left, u16 right, u32 direct}
"""

from __future__ import annotations

from langdata_compiler.binary import BinaryWriter
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.models import QuotationMarkTable


class QuotationMarkError(ErrorKind):
    EMPTY_DATA = (
        "There is no data (symbol of whitespace will be ignored) in quotation mark table",
        Severity.MUST_FIX)
    DUPLICATE_SYMBOL = (
        "Duplicate symbol \"{0}\" is found, which will be skipped for compiling", Severity.WARNING)


def compile_quotation_mark(table: QuotationMarkTable) -> tuple[bytes, ErrorSet]:
    errors = ErrorSet()
    if not table.items:
        errors.add(QuotationMarkError.EMPTY_DATA)
        return b"", errors

    items = []
    seen: set[tuple[str, str]] = set()
    for item in table.items:
        key = (item.left, item.right)
        if key in seen:
            errors.add(QuotationMarkError.DUPLICATE_SYMBOL, item.left + item.right)
            continue
        seen.add(key)
        items.append(item)

    writer = BinaryWriter()
    writer.write_u32(table.language.lcid)
    writer.write_u32(len(items))
    for item in items:
        writer.write_char(item.left)
        writer.write_char(item.right)
        writer.write_u32(item.direct.value)
    return writer.getvalue(), errors
