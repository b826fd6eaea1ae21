"""
CRF Model Compiler - Packs a folder of ``*.crf`` models with their tags.

Layout:
    u32 tag_offset
    u32 model_offset
    u32 count
    u32 model_offsets[count]     (relative to the model pool)
    u32 tag_offsets[count]       (relative to the tag pool)
    model pool
    tag pool

Tags are the upper-cased model file stems. For Chinese and Japanese the
folder's parent may hold ``CRFLocalizedMapping.txt`` which maps model
file names to localized tags; models without a mapping are left out.
"""

from __future__ import annotations

import logging
from pathlib import Path

from langdata_compiler.binary import BinaryWriter, StringPool, words_to_pool
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.languages import Language
from langdata_compiler.rawdata.loaders import read_text_lines

logger = logging.getLogger(__name__)

MAPPING_FILE = "CRFLocalizedMapping.txt"
MAPPING_FLAG = "Map between polyphony model:"
MAPPING_IN_USE = "Being_used"
LOCALIZED_LANGUAGES = (Language.ZH_CN, Language.JA_JP)


class CrfModelError(ErrorKind):
    DATA_FOLDER_NOT_FOUND = ("Crf model folder '{0}' could not be found.", Severity.MUST_FIX)
    INVALID_CRF_MODEL = (
        "Invalid crf model file '{0}' whose size mod 4 is not zero.", Severity.MUST_FIX)
    INVALID_MAPPING_FORMAT = (
        "Invalid Format About crf model mapping file '{0}'.", Severity.MUST_FIX)
    MAPPING_FILE_NOT_FOUND = ("Crf model mapping file could not be found in '{0}'.", Severity.MUST_FIX)
    MAPPING_DATA_NOT_FOUND = ("Crf model mapping data could not be found in '{0}'.", Severity.MUST_FIX)


def load_localized_mapping(path: Path) -> tuple[dict[str, str] | None, ErrorSet]:
    """Model file name to localized tag.

    Returns None when the file does not start with the mapping flag.
    """
    errors = ErrorSet()
    lines = read_text_lines(path)
    if not lines or lines[0] != MAPPING_FLAG:
        return None, errors

    mapping: dict[str, str] = {}
    for line in lines[1:]:
        columns = line.split("\t")
        if len(columns) < 4:
            errors.add(CrfModelError.INVALID_MAPPING_FORMAT, str(path))
            break
        if columns[3] == MAPPING_IN_USE:
            mapping[columns[2]] = columns[0]

    if not mapping:
        errors.add(CrfModelError.MAPPING_DATA_NOT_FOUND, str(path))
    return mapping, errors


def compile_crf_models(
    model_dir: str | Path,
    language: Language = Language.NEUTRAL,
    added_files: list[str] | None = None,
) -> tuple[bytes, ErrorSet]:
    """Pack every ``*.crf`` model of ``model_dir``."""
    model_dir = Path(model_dir)
    errors = ErrorSet()
    if not model_dir.is_dir():
        errors.add(CrfModelError.DATA_FOLDER_NOT_FOUND, str(model_dir))
        return b"", errors

    mapping: dict[str, str] | None = None
    if language in LOCALIZED_LANGUAGES:
        mapping_file = model_dir.resolve().parent / MAPPING_FILE
        if mapping_file.is_file():
            mapping, mapping_errors = load_localized_mapping(mapping_file)
            errors.merge(mapping_errors)
        else:
            errors.add(CrfModelError.MAPPING_FILE_NOT_FOUND, str(mapping_file))

    tags: list[str] = []
    model_pool = StringPool()
    model_offsets: list[int] = []
    for model_file in sorted(model_dir.glob("*.crf")):
        if not model_file.is_file():
            continue
        if mapping is not None:
            if model_file.name not in mapping:
                logger.debug("No localized tag for %s, skipped", model_file.name)
                continue
            tags.append(mapping[model_file.name].upper())
        else:
            tags.append(model_file.stem.upper())

        model_bytes = model_file.read_bytes()
        if len(model_bytes) % 4:
            errors.add(CrfModelError.INVALID_CRF_MODEL, str(model_file))
        model_offsets.append(model_pool.put_bytes(model_bytes))
        if added_files is not None:
            added_files.append(str(model_file))

    tag_pool = StringPool()
    tag_offsets = words_to_pool(tags, tag_pool)

    writer = BinaryWriter()
    writer.write_u32(0)
    writer.write_u32(0)
    writer.write_u32(len(tag_offsets))
    for offset in model_offsets:
        writer.write_u32(offset)
    for offset in tag_offsets:
        writer.write_u32(offset)

    model_offset = writer.position
    writer.write_bytes(model_pool.to_bytes())
    tag_offset = writer.position
    writer.write_bytes(tag_pool.to_bytes())

    writer.patch_u32(0, tag_offset)
    writer.patch_u32(4, model_offset)
    return writer.getvalue(), errors
