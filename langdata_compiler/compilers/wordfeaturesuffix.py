"""
Word Feature Suffix Compiler.

Layout:
    u32 lcid
    u32 record_size (20)
    four lists (noun, adjective, verb, separator), each:
        u32 count
        count x SuffixData {text[10] text}
"""

from __future__ import annotations

from langdata_compiler.binary import SUFFIX_DATA, BinaryWriter
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.models import WordFeatureSuffixTable


class WordFeatureSuffixError(ErrorKind):
    EMPTY_DATA = ("There is no data (symbol of whitespace will be ignored): {0}", Severity.MUST_FIX)


def compile_word_feature_suffix(table: WordFeatureSuffixTable) -> tuple[bytes, ErrorSet]:
    errors = ErrorSet()
    lists = (
        (table.noun_items, "Empty noun suffix."),
        (table.adj_items, "Empty adjective suffix."),
        (table.verb_items, "Empty verb suffix."),
        (table.separator_items, "Empty separator character."),
    )
    for items, message in lists:
        if not items:
            errors.add(WordFeatureSuffixError.EMPTY_DATA, message)

    writer = BinaryWriter()
    writer.write_u32(table.language.lcid)
    writer.write_u32(SUFFIX_DATA.size)
    for items, _ in lists:
        writer.write_u32(len(items))
        for text in items:
            writer.write_bytes(SUFFIX_DATA.pack(text=text))
    return writer.getvalue(), errors
