"""
Word Breaker Compiler - Breaking characters and special-word tries.

Layout:
    3 x char section (whitespace, emit, boundary breaking chars):
        i32 count
        u16 chars[count], sorted
        u16 0             (only when count is even)
        u16 0
    new format:
        i32 trie_size, special-word trie, pad to 4
        i32 trie_size, end-word trie
    old format:
        special-word trie

Char files hold one ``0xHHHH`` code per line. Special words come from the
abbreviation, special word and title lists; end words from the end
abbreviation and special word lists.
"""

from __future__ import annotations

import re
from pathlib import Path

from langdata_compiler.binary import BinaryWriter, Trie
from langdata_compiler.compilers.wordfile import load_words
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.modules import WORD_BREAKER_NEW_FORMAT, WORD_BREAKER_OLD_FORMAT
from langdata_compiler.rawdata.loaders import read_text_lines

BASIC_DATA_FILE = "whitespacebreakingchar.txt"

BREAKING_CHAR_FILES = (
    BASIC_DATA_FILE,
    "emitbreakingchar.txt",
    "boundarybreakingchar.txt",
)

SPECIAL_WORD_FILES = (
    "abbrev.txt",
    "specialwords.txt",
    "wordbreakerspecialwords.txt",
    "titles.txt",
)

END_WORD_FILES = (
    "endabbr.txt",
    "specialwords.txt",
    "wordbreakerspecialwords.txt",
)

_HEX_CHAR = re.compile(r"0[x]([0-9,a-f]{4})", re.IGNORECASE)


class WordBreakerError(ErrorKind):
    DATA_FOLDER_NOT_FOUND = ("WordBreaker data folder '{0}' could not be found.", Severity.MUST_FIX)
    INVALID_LINE = (
        "Invalid line (line number: {1}) \"{2}\" in wordbreaker data file '{0}'.", Severity.WARNING)
    BASIC_DATA_NOT_FOUND = (
        "Basic data could not be found for wordbreaker data: '{0}'.", Severity.MUST_FIX)
    NOT_FIND_WORD_BREAKER_FILE = ("Can't find word break file : [{0}].", Severity.MUST_FIX)
    INVALID_FORMAT_GUID = ("Invalid word breaker format guid : [{0}].", Severity.MUST_FIX)


def load_breaking_chars(path: Path) -> tuple[list[str], ErrorSet]:
    """Distinct characters listed as hex codes in ``path``, sorted."""
    errors = ErrorSet()
    chars: set[str] = set()
    for line_number, line in enumerate(read_text_lines(path), start=1):
        line = line.split("//", 1)[0].strip()
        if not line:
            continue
        match = _HEX_CHAR.search(line)
        if match is None or "," in match.group(1):
            errors.add(WordBreakerError.INVALID_LINE, str(path), line_number, line)
            continue
        chars.add(chr(int(match.group(1), 16)))
    return sorted(chars), errors


def _write_breaking_chars(writer: BinaryWriter, chars: list[str]) -> None:
    writer.write_i32(len(chars))
    for char in chars:
        writer.write_char(char)
    if len(chars) % 2 == 0:
        writer.write_u16(0)
    writer.write_u16(0)


def _word_trie(
    data_dir: Path,
    file_names: tuple[str, ...],
    errors: ErrorSet,
    added_files: list[str] | None,
) -> Trie:
    words: list[str] = []
    for file_name in file_names:
        path = data_dir / file_name
        if not path.is_file():
            errors.add(WordBreakerError.NOT_FIND_WORD_BREAKER_FILE, file_name)
            continue
        if added_files is not None:
            added_files.append(file_name)
        errors.merge(load_words(path, words))
    return Trie(words)


def _normalize_format(format_token: str | None) -> str:
    return (format_token or "").strip().strip("{}").upper()


def compile_word_breaker(
    data_dir: str | Path,
    format_token: str | None = None,
    added_files: list[str] | None = None,
) -> tuple[bytes, ErrorSet]:
    """Encode the word breaker data found in ``data_dir``.

    Args:
        data_dir: Folder holding the char and word list files.
        format_token: Payload format; empty selects the old format.
        added_files: Receives the names of the files that were compiled.

    Returns:
        ``(data, errors)``; data is empty when the folder or the basic
        data file is missing.
    """
    data_dir = Path(data_dir)
    errors = ErrorSet()

    if not data_dir.is_dir():
        errors.add(WordBreakerError.DATA_FOLDER_NOT_FOUND, str(data_dir))
        return b"", errors

    basic_data = data_dir / BASIC_DATA_FILE
    if not basic_data.is_file():
        errors.add(WordBreakerError.BASIC_DATA_NOT_FOUND, str(basic_data))
        return b"", errors

    writer = BinaryWriter()
    for file_name in BREAKING_CHAR_FILES:
        path = data_dir / file_name
        if not path.is_file():
            writer.write_i32(0)
            writer.write_u16(0)
            writer.write_u16(0)
            errors.add(WordBreakerError.NOT_FIND_WORD_BREAKER_FILE, file_name)
            continue
        if added_files is not None:
            added_files.append(file_name)
        chars, char_errors = load_breaking_chars(path)
        errors.merge(char_errors)
        _write_breaking_chars(writer, chars)

    fmt = _normalize_format(format_token)
    if fmt == WORD_BREAKER_NEW_FORMAT.upper():
        special = _word_trie(data_dir, SPECIAL_WORD_FILES, errors, added_files)
        if not errors.contains(Severity.MUST_FIX):
            trie_bytes = special.to_bytes()
            writer.write_i32(len(trie_bytes))
            writer.write_bytes(trie_bytes)
            writer.pad_to(4)

        end = _word_trie(data_dir, END_WORD_FILES, errors, added_files)
        if not errors.contains(Severity.MUST_FIX):
            trie_bytes = end.to_bytes()
            writer.write_i32(len(trie_bytes))
            writer.write_bytes(trie_bytes)
    elif fmt in ("", WORD_BREAKER_OLD_FORMAT.upper()):
        special = _word_trie(data_dir, SPECIAL_WORD_FILES, errors, added_files)
        if not errors.contains(Severity.MUST_FIX):
            writer.write_bytes(special.to_bytes())
    else:
        errors.add(WordBreakerError.INVALID_FORMAT_GUID, format_token)

    return writer.getvalue(), errors
