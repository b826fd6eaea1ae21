"""
RNN Polyphony Compiler - Packs an RNN polyphony model with its character list.

Layout:
    u32 model_offset
    u32 count
    f32 thresholds[count]
    u32 char_offsets[count]      (relative to the char pool)
    char pool
    pad to 4
    model bytes

The character list ``RNNPolyphoneList.txt`` sits two folders above the
model file and holds one ``char<TAB>threshold`` line per polyphonic
character enabled in the product.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from langdata_compiler.binary import BinaryWriter, StringPool, words_to_pool
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.loaders import read_text_lines

logger = logging.getLogger(__name__)

CHARACTER_LIST_FILE = "RNNPolyphoneList.txt"


class RnnPolyphonyError(ErrorKind):
    MODEL_DATA_NOT_FOUND = ("RNN model '{0}' could not be found.", Severity.MUST_FIX)
    INVALID_CHARACTER_LIST_FORMAT = (
        "Invalid Format About rnn model polyphonic character file '{0}'.", Severity.MUST_FIX)
    POLYPHONIC_CHAR_FILE_NOT_FOUND = (
        "RNN model polyphonic character file could not be found in '{0}'.", Severity.MUST_FIX)
    POLYPHONIC_CHAR_NOT_FOUND = (
        "RNN model polyphonic character could not be found in '{0}'.", Severity.MUST_FIX)


def load_character_list(path: Path) -> tuple[dict[str, float], ErrorSet]:
    """Polyphonic characters and their thresholds, in file order."""
    errors = ErrorSet()
    characters: dict[str, float] = {}
    for line in read_text_lines(path):
        if not line:
            continue
        parts = line.split("\t")
        if len(parts) != 2 or len(parts[0]) != 1 or parts[0] in characters:
            errors.add(RnnPolyphonyError.INVALID_CHARACTER_LIST_FORMAT, str(path))
            continue
        try:
            characters[parts[0]] = float(parts[1])
        except ValueError:
            errors.add(RnnPolyphonyError.INVALID_CHARACTER_LIST_FORMAT, str(path))

    if not characters:
        errors.add(RnnPolyphonyError.POLYPHONIC_CHAR_NOT_FOUND, str(path))
    return characters, errors


def compile_rnn_polyphony(
    model_path: str | Path,
    added_files: list[str] | None = None,
) -> tuple[bytes, ErrorSet]:
    """Pack the RNN model at ``model_path``."""
    model_path = Path(model_path)
    errors = ErrorSet()
    if not model_path.is_file():
        errors.add(RnnPolyphonyError.MODEL_DATA_NOT_FOUND, str(model_path))
        return b"", errors

    characters: dict[str, float] = {}
    list_file = model_path.resolve().parent.parent / CHARACTER_LIST_FILE
    if list_file.is_file():
        characters, list_errors = load_character_list(list_file)
        errors.merge(list_errors)
    else:
        errors.add(RnnPolyphonyError.POLYPHONIC_CHAR_FILE_NOT_FOUND, str(list_file))

    pool = StringPool()
    offsets = words_to_pool(characters, pool)
    thresholds = np.asarray(list(characters.values()), dtype="<f4")

    writer = BinaryWriter()
    writer.write_u32(0)
    writer.write_u32(len(offsets))
    writer.write_bytes(thresholds.tobytes())
    for offset in offsets:
        writer.write_u32(offset)
    writer.write_bytes(pool.to_bytes())
    writer.pad_to(4)

    model_offset = writer.position
    writer.write_bytes(model_path.read_bytes())
    writer.patch_u32(0, model_offset)

    if added_files is not None:
        added_files.append(str(model_path))
    logger.debug("Packed RNN model %s with %d polyphonic chars", model_path, len(offsets))
    return writer.getvalue(), errors
