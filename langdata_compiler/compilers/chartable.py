"""
Char Table Compiler - Per-character readouts and pronunciations.

Layout:
    i32 count
    count x CharData {u32 spell_char, u16 flags, u32 word_offset, u32 pron_offset},
        sorted by spell_char
    string pool

``word_offset`` points at the isolated readout string; ``pron_offset``
points at the pronunciation as u16 phone ids followed by ``0x0000``.
"""

from __future__ import annotations

from langdata_compiler.binary import CHAR_DATA, BinaryWriter, StringPool
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.models import CharTable, CharType, PhoneSet

SYLLABLE_MARKS = {"-", ".", "&", "_"}


class CharTableCompilerError(ErrorKind):
    CONVERTING_PRONUNCIATION_ERROR = (
        "Converting Pronunciation error for character \"{0}\"", Severity.WARNING, ":")
    EMPTY_DATA = (
        "There is no data (symbol of whitespace will be ignored) in chartable", Severity.MUST_FIX)
    DUPLICATE_SYMBOL = (
        "Duplicate symbol \"{0}\" is found, which will be skipped for compiling", Severity.WARNING)


class CharTableError(ErrorKind):
    """Content checks run before compiling a char table."""

    EMPTY_SYMBOL = ("Symbol cannot be empty", Severity.MUST_FIX)
    SYMBOL_NOT_SINGLE_CHAR = (
        "Symbol [{0}] in chartable is not single char, only first char take effect.",
        Severity.WARNING)
    CASE_MISMATCH = (
        "Uppercase [{0}] and lowercase [{1}] count doesn't match.", Severity.WARNING)
    EMPTY_ISOLATED_SYMBOL = (
        "Isolated symbol readout cannot be empty for no-alphabet char [{0}]", Severity.MUST_FIX)
    INVALID_PRONUNCIATION = ("Invalid symbol [{0}] pronunciation [{1}].", Severity.MUST_FIX)


class PronunciationError(ErrorKind):
    INVALID_PHONE = ("Invalid phone [{0}] in pronunciation [{1}].", Severity.MUST_FIX)


def split_pronunciation(pronunciation: str, phone_set: PhoneSet) -> tuple[list[int], ErrorSet]:
    """Phone ids of a space separated pronunciation.

    Syllable and word boundary marks are skipped.
    """
    errors = ErrorSet()
    ids: list[int] = []
    for token in pronunciation.split():
        if token in SYLLABLE_MARKS:
            continue
        phone = phone_set.get_phone(token)
        if phone is None:
            errors.add(PronunciationError.INVALID_PHONE, token, pronunciation)
            continue
        ids.append(phone.id)
    return ids, errors


def _pronunciation_bytes(pronunciation: str, phone_set: PhoneSet) -> tuple[bytes, ErrorSet]:
    writer = BinaryWriter()
    errors = ErrorSet()
    if pronunciation.strip():
        ids, errors = split_pronunciation(pronunciation, phone_set)
        if not errors.contains(Severity.MUST_FIX):
            for phone_id in ids:
                writer.write_u16(phone_id)
    writer.write_u16(0)
    return writer.getvalue(), errors


def compile_char_table(table: CharTable, phone_set: PhoneSet) -> tuple[bytes, ErrorSet]:
    """Encode a char table against ``phone_set``."""
    errors = ErrorSet()
    pool = StringPool()
    records: list[dict[str, int]] = []
    seen: set[str] = set()

    for element in table.chars:
        if element.symbol in seen:
            errors.add(CharTableCompilerError.DUPLICATE_SYMBOL, element.symbol)
            continue
        seen.add(element.symbol)

        word_offset = pool.put_string(element.isolated_readout)
        pron, pron_errors = _pronunciation_bytes(element.pronunciation, phone_set)
        for error in pron_errors:
            errors.add(CharTableCompilerError.CONVERTING_PRONUNCIATION_ERROR, element.symbol, inner=error)

        records.append({
            "spell_char": element.encoded_symbol,
            "flags": int(element.feature),
            "word_offset": word_offset,
            "pron_offset": pool.put_bytes(pron),
        })

    if not table.chars:
        errors.add(CharTableCompilerError.EMPTY_DATA)
        return b"", errors

    writer = BinaryWriter()
    writer.write_i32(len(records))
    for record in sorted(records, key=lambda r: r["spell_char"]):
        writer.write_bytes(CHAR_DATA.pack(record))
    writer.write_bytes(pool.to_bytes())
    return writer.getvalue(), errors


def validate_char_table(table: CharTable, phone_set: PhoneSet) -> ErrorSet:
    """Content checks for a char table."""
    errors = ErrorSet()
    upper = lower = 0
    alphabet = (CharType.UPPER_CASE, CharType.LOWER_CASE)

    for element in table.chars:
        if not element.symbol:
            errors.add(CharTableError.EMPTY_SYMBOL)
            continue
        if len(element.symbol) != 1:
            errors.add(CharTableError.SYMBOL_NOT_SINGLE_CHAR, element.symbol)

        if element.char_type is CharType.UPPER_CASE:
            upper += 1
        elif element.char_type is CharType.LOWER_CASE:
            lower += 1

        if element.char_type not in alphabet and not element.isolated_readout:
            errors.add(CharTableError.EMPTY_ISOLATED_SYMBOL, element.symbol)

        if element.pronunciation:
            _, pron_errors = split_pronunciation(element.pronunciation, phone_set)
            if pron_errors.contains(Severity.MUST_FIX):
                errors.add(CharTableError.INVALID_PRONUNCIATION, element.symbol, element.pronunciation)

    if upper != lower:
        errors.add(CharTableError.CASE_MISMATCH, upper, lower)
    return errors
