"""
Sentence Separator Compiler - Word lists used to find sentence boundaries.

Layout:
    i32 file_count (12)
    i32 counts[file_count]
    i32 offsets[sum(counts)]
    string pool

Each file's words are sorted ordinally and appended to one shared pool in
the fixed file order below. A missing file contributes a count of zero.
"""

from __future__ import annotations

from pathlib import Path

from langdata_compiler.binary import BinaryWriter, StringPool, words_to_pool
from langdata_compiler.compilers.wordfile import load_words
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity

SENTENCE_SEPARATOR_FILES = (
    "abbrev.txt",
    "bible.txt",
    "conjunct.txt",
    "endabbr.txt",
    "frstwrds.txt",
    "notend.txt",
    "numbers.txt",
    "numintro.txt",
    "smtm.txt",
    "specialwords.txt",
    "titles.txt",
    "wordend.txt",
)


class SentenceSeparatorError(ErrorKind):
    NOT_FIND_SENTENCE_SEPARATOR_FILE = (
        "Can't find sentence separator file : [{0}].", Severity.WARNING)


def compile_sentence_separator(
    data_dir: str | Path,
    added_files: list[str] | None = None,
) -> tuple[bytes, ErrorSet]:
    """Encode the sentence separator word lists found in ``data_dir``.

    Args:
        data_dir: Folder holding the list files.
        added_files: Receives the names of the files that were compiled.
    """
    data_dir = Path(data_dir)
    errors = ErrorSet()
    pool = StringPool()
    counts: list[int] = []
    offsets: list[int] = []

    for file_name in SENTENCE_SEPARATOR_FILES:
        path = data_dir / file_name
        if not path.is_file():
            errors.add(SentenceSeparatorError.NOT_FIND_SENTENCE_SEPARATOR_FILE, file_name)
            counts.append(0)
            continue

        if added_files is not None:
            added_files.append(file_name)
        words: list[str] = []
        errors.merge(load_words(path, words, sort=True, reject_whitespace=True))
        offsets.extend(words_to_pool(words, pool))
        counts.append(len(words))

    writer = BinaryWriter()
    writer.write_i32(len(counts))
    for count in counts:
        writer.write_i32(count)
    for offset in offsets:
        writer.write_i32(offset)
    writer.write_bytes(pool.to_bytes())
    return writer.getvalue(), errors
