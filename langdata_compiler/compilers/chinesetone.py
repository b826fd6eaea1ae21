"""
Chinese Tone Compiler - Reduplication tone pattern tables.

The data file has an ``[ABAB]`` section and an ``[AAB]`` section, each
holding ``a,b`` pairs. Every pair is stored as three strings: ``a``, ``b``
and an empty terminator.

Layout:
    u32 table_count (2)
    u32 word_count[2]
    per table:
        u32 table_size      (4 * word_count + aligned pool size)
        u32 offsets[word_count]
        string pool, pad to 4
"""

from __future__ import annotations

from pathlib import Path

from langdata_compiler.binary import BinaryWriter, StringPool, padding_for, words_to_pool
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.loaders import read_text_lines

SECTION_MARKERS = ("[ABAB]", "[AAB]")


class ChineseToneError(ErrorKind):
    DATA_FILE_NOT_FOUND = ("ChineseTone data file '{0}' could not be found.", Severity.MUST_FIX)
    INVALID_PATTERN_FORM_DATA = ("Invalid pattern form data.", Severity.MUST_FIX)


def parse_tables(path: str | Path) -> tuple[list[list[str]], ErrorSet]:
    """Word lists of the two sections."""
    errors = ErrorSet()
    tables: list[list[str]] = [[], []]
    current = -1

    for line in read_text_lines(path):
        marker = next((i for i, m in enumerate(SECTION_MARKERS) if m in line), None)
        if marker is not None:
            current = marker
            continue
        if current < 0 or not line.strip() or line.startswith("//"):
            continue

        segments = [s for s in line.split("//", 1)[0].strip().split(",") if s]
        if len(segments) != 2:
            errors.add(ChineseToneError.INVALID_PATTERN_FORM_DATA)
            continue
        tables[current].extend([segments[0].strip(), segments[1].strip(), ""])

    return tables, errors


def compile_chinese_tone(path: str | Path) -> tuple[bytes, ErrorSet]:
    path = Path(path)
    errors = ErrorSet()
    if not path.is_file():
        errors.add(ChineseToneError.DATA_FILE_NOT_FOUND, str(path))
        return b"", errors

    tables, parse_errors = parse_tables(path)
    errors.merge(parse_errors)
    if len(errors):
        return b"", errors

    writer = BinaryWriter()
    writer.write_u32(len(tables))
    for words in tables:
        writer.write_u32(len(words))

    for words in tables:
        pool = StringPool()
        offsets = words_to_pool(words, pool)
        pool_bytes = pool.to_bytes()
        writer.write_u32(4 * len(offsets) + len(pool_bytes) + padding_for(len(pool_bytes)))
        for offset in offsets:
            writer.write_u32(offset)
        writer.write_bytes(pool_bytes)
        writer.pad_to(4)
    return writer.getvalue(), errors
