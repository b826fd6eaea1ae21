"""
Word Files - Plain word lists shared by the word breaker and sentence separator.

One word per line; ``//`` starts a comment; blank lines are skipped.
"""

from __future__ import annotations

from pathlib import Path

from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.loaders import read_text_lines


class WordFileError(ErrorKind):
    CONTAIN_WHITE_SPACE = (
        "Word of \"{0}\" contains invalid white space in file '{1}'.", Severity.MUST_FIX)
    DUPLICATE_WORD = ("Word of \"{0}\" in file '{1}' is duplicate in List.", Severity.WARNING)
    DUPLICATE_WORDS_IN_ONE_FILE = (
        "There're duplicate Words of \"{0}\" in file '{1}'.", Severity.MUST_FIX)


def load_words(
    path: str | Path,
    words: list[str],
    sort: bool = False,
    reject_whitespace: bool = False,
) -> ErrorSet:
    """Append the words of ``path`` to ``words``.

    Args:
        path: Word list file.
        words: Shared list; words already present are reported and skipped.
        sort: Sort ``words`` ordinally afterwards.
        reject_whitespace: Report words containing white space.

    Returns:
        Errors found while reading.
    """
    errors = ErrorSet()
    in_file: list[str] = []
    seen: set[str] = set()

    for line in read_text_lines(path):
        word = line.split("//", 1)[0].strip()
        if not word:
            continue
        if word in seen:
            errors.add(WordFileError.DUPLICATE_WORDS_IN_ONE_FILE, word, str(path))
            continue
        if reject_whitespace and any(char.isspace() for char in word):
            errors.add(WordFileError.CONTAIN_WHITE_SPACE, word, str(path))
        seen.add(word)
        in_file.append(word)

    existing = set(words)
    for word in in_file:
        if word in existing:
            errors.add(WordFileError.DUPLICATE_WORD, word, str(path))
            continue
        existing.add(word)
        words.append(word)

    if sort:
        words.sort(key=ordinal_key)
    return errors


def ordinal_key(word: str) -> bytes:
    """Sort key matching an ordinal compare of UTF-16 code units."""
    return word.encode("utf-16-be", "surrogatepass")
