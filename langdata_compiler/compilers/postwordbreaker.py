"""
Post Word Breaker Compiler - Word sequence rewrite rules.

Each rule line reads ``pattern => replacement`` where both sides are
comma-separated word lists. ``*`` and ``?`` in the replacement become
positional placeholders ``/1``, ``/2``, ...

Layout:
    u32 trie_offset
    u32 trie_size
    u32 count
    u32 offsets[count]      (replacements in trie id order)
    string pool
    pad to 4
    trie over the patterns
"""

from __future__ import annotations

from pathlib import Path

from langdata_compiler.binary import BinaryWriter, StringPool, Trie, wildcard_to_placeholder, words_to_pool
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.loaders import read_text_lines

MAX_GRAMS = 5
PAIR_SEPARATOR = "=>"
WORD_LIST_SEPARATOR = ","


class PostWordBreakerError(ErrorKind):
    DATA_FILE_NOT_FOUND = ("PostWordBreaker data file '{0}' could not be found.", Severity.MUST_FIX)
    INVALID_LINE = (
        "Invalid line (line number: {1}) \"{2}\" in PostWordBreaker data file '{0}' : {3}",
        Severity.MUST_FIX)


def _words(segment: str) -> list[str]:
    return [word for word in segment.split(WORD_LIST_SEPARATOR) if word]


def parse_rules(path: str | Path) -> tuple[dict[str, str], ErrorSet]:
    """Pattern to replacement mapping of a rule file, in file order."""
    errors = ErrorSet()
    rules: dict[str, str] = {}

    for index, original in enumerate(read_text_lines(path)):
        if not original.strip() or original.startswith("//"):
            continue

        line = original.split("//", 1)[0].strip()
        if PAIR_SEPARATOR not in line:
            errors.add(PostWordBreakerError.INVALID_LINE, str(path), index, original,
                       "No word list separator (=>) found.")
            continue

        segments = [s for s in line.split(PAIR_SEPARATOR) if s]
        if len(segments) != 2:
            errors.add(PostWordBreakerError.INVALID_LINE, str(path), index, original,
                       "More than 2 word lists found.")
            continue

        pattern = segments[0].replace(" ", "")
        replacement = segments[1].replace(" ", "")
        pattern_words = _words(pattern)
        replacement_words = _words(replacement)

        if len(pattern_words) == 1 and len(replacement_words) == 1:
            errors.add(PostWordBreakerError.INVALID_LINE, str(path), index, original,
                       "Both pattern and replacement contain only one word.")
        elif len(pattern_words) > MAX_GRAMS or len(replacement_words) > MAX_GRAMS:
            errors.add(PostWordBreakerError.INVALID_LINE, str(path), index, original,
                       "Either pattern or replacement contain more than 5 words.")
        elif not pattern:
            errors.add(PostWordBreakerError.INVALID_LINE, str(path), index, original,
                       "Empty pattern found.")
        elif pattern in rules:
            errors.add(PostWordBreakerError.INVALID_LINE, str(path), index, original,
                       "Duplicate pattern found.")
        else:
            rules[pattern] = wildcard_to_placeholder(replacement)

    return rules, errors


def compile_post_word_breaker(path: str | Path) -> tuple[bytes, ErrorSet]:
    """Encode the rewrite rules of ``path``."""
    path = Path(path)
    errors = ErrorSet()
    if not path.is_file():
        errors.add(PostWordBreakerError.DATA_FILE_NOT_FOUND, str(path))
        return b"", errors

    rules, parse_errors = parse_rules(path)
    errors.merge(parse_errors)

    trie = Trie(rules)
    replacements = trie.order_values(rules)
    pool = StringPool()
    offsets = words_to_pool(replacements, pool)

    writer = BinaryWriter()
    writer.write_u32(0)
    writer.write_u32(0)
    writer.write_u32(len(replacements))
    for offset in offsets:
        writer.write_u32(offset)
    writer.write_bytes(pool.to_bytes())
    writer.pad_to(4)

    trie_offset = writer.position
    writer.write_bytes(trie.to_bytes())
    writer.patch_u32(0, trie_offset)
    writer.patch_u32(4, writer.position - trie_offset)
    return writer.getvalue(), errors
