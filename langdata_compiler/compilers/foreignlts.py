"""
Foreign LTS Collection Compiler - Phone sets and LTS rules of other languages.

The collection is configured by one string:

    "en-US: Lexicon/en-US/phoneset.xml ; Lexicon/en-US/lts.bin ; ja-JP: ..."

Entries are ``;`` separated pairs of ``[language:] phone set path`` and
LTS rule path. Relative paths are resolved against the data root. When the
language is omitted the phone set's own language is used.

Layout:
    u16 count
    count x {u16 language, u16 phoneset_language}
    u32 phoneset_offsets[count]
    u32 lts_offsets[count]
    phone set blobs (phone set layout)
    LTS rule blobs (copied verbatim)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from langdata_compiler.binary import BinaryWriter
from langdata_compiler.compilers.phoneset import compile_phone_set
from langdata_compiler.errors import ErrorSet, InvalidDataError, Severity
from langdata_compiler.languages import Language
from langdata_compiler.rawdata.loaders import load_phone_set
from langdata_compiler.rawdata.models import PhoneSet

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = ";"
LANGUAGE_SEPARATOR = ":"


@dataclass
class ForeignLtsEntry:
    """One configured language of the collection."""

    language: Language
    phone_set_path: Path
    lts_path: Path
    phone_set: PhoneSet | None = None


def _resolve(path: str, data_root: Path | None) -> Path:
    resolved = Path(path)
    if not resolved.is_absolute() and data_root is not None:
        resolved = data_root / resolved
    return resolved


def parse_configuration(configuration: str, data_root: str | Path | None = None) -> list[ForeignLtsEntry]:
    """Entries of a collection configuration string.

    A trailing unpaired item is ignored.

    Raises:
        InvalidDataError: If an entry names an unknown language.
    """
    root = Path(data_root) if data_root else None
    items = [item for item in configuration.split(ENTRY_SEPARATOR) if item.strip()]
    entries = []
    for i in range(len(items) // 2):
        phone_set_item = items[i * 2].strip()
        language = Language.NEUTRAL
        if LANGUAGE_SEPARATOR in phone_set_item:
            code, phone_set_item = phone_set_item.split(LANGUAGE_SEPARATOR, 1)
            try:
                language = Language.from_code(code.strip())
            except ValueError as e:
                raise InvalidDataError(str(e), {"entry": items[i * 2]}) from e
        entries.append(ForeignLtsEntry(
            language=language,
            phone_set_path=_resolve(phone_set_item.strip(), root),
            lts_path=_resolve(items[i * 2 + 1].strip(), root),
        ))
    return entries


def compile_foreign_lts_collection(
    configuration: str,
    data_root: str | Path | None = None,
) -> tuple[bytes, ErrorSet]:
    """Encode the foreign LTS collection described by ``configuration``.

    Raises:
        FileNotFoundError: If a phone set or LTS rule file is missing.
    """
    errors = ErrorSet()
    entries = parse_configuration(configuration, data_root)

    for entry in entries:
        phone_set, load_errors = load_phone_set(entry.phone_set_path, entry.language)
        load_errors.merge(phone_set.validate())
        errors.merge(load_errors)
        if entry.language is Language.NEUTRAL:
            entry.language = phone_set.language
        if not load_errors.contains(Severity.MUST_FIX):
            entry.phone_set = phone_set

    if errors.contains(Severity.MUST_FIX):
        return b"", errors

    writer = BinaryWriter()
    writer.write_u16(len(entries), "ForeignLts.count")
    for entry in entries:
        writer.write_u16(entry.language.lcid)
        writer.write_u16(entry.phone_set.language.lcid)

    phone_set_table = writer.position
    for _ in entries:
        writer.write_u32(0)
    lts_table = writer.position
    for _ in entries:
        writer.write_u32(0)

    for i, entry in enumerate(entries):
        writer.patch_u32(phone_set_table + i * 4, writer.position)
        data, _ = compile_phone_set(entry.phone_set)
        writer.write_bytes(data)

    for i, entry in enumerate(entries):
        writer.patch_u32(lts_table + i * 4, writer.position)
        writer.write_bytes(entry.lts_path.read_bytes())

    logger.debug("Packed %d foreign LTS entries", len(entries))
    return writer.getvalue(), errors
