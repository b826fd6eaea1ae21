"""
Rule File Checks - Pre-compile checks for rule sources handed to external tools.

    duplicate_rule_keys      - ``CurW = "...";`` entries defined twice
    validate_compound_rule   - phones of ``[...]/PRONUNCIATION`` outputs
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from xml.parsers import expat

from langdata_compiler.compilers.polyrule import key_line_pattern
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.loaders import read_text_lines
from langdata_compiler.rawdata.models import PhoneSet

RULE_ENTRY_KEY = "CurW"
RULE_ENTRY_LINE = key_line_pattern(RULE_ENTRY_KEY)

COMPOUND_OUTPUT_ELEMENT = "out"
PRONUNCIATION_OUTPUT = re.compile(r"\[([^\[\]]+)\]/PRONUNCIATION")
PHONE_SEPARATORS = re.compile(r"[ +]+")


class DataFileError(ErrorKind):
    INVALID_PHONE_IN_PRON = (
        "Invalid phone [{0}] in pronunciation [{1}] in line [{2}]", Severity.MUST_FIX)


def duplicate_rule_keys(path: str | Path) -> list[str]:
    """Entry keys defined more than once, one item per repeat."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for line in read_text_lines(path):
        match = RULE_ENTRY_LINE.match(line)
        if match is None:
            continue
        key = match.group(1)
        if key in seen:
            duplicates.append(key)
        seen.add(key)
    return duplicates


def _check_pronunciation(text: str, phone_set: PhoneSet, line_number: int, errors: ErrorSet) -> None:
    match = PRONUNCIATION_OUTPUT.search(text)
    if match is None:
        return
    pron = match.group(1)
    for phone in PHONE_SEPARATORS.split(pron):
        if phone and not phone_set.is_phone(phone):
            errors.add(DataFileError.INVALID_PHONE_IN_PRON, phone, pron, line_number)


def validate_compound_rule(path: str | Path, phone_set: PhoneSet) -> ErrorSet:
    """Check every phone of the pronunciation outputs of a compound rule.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ET.ParseError: If the file is not well-formed XML.
    """
    errors = ErrorSet()
    state: dict = {"capturing": False, "chunks": [], "line": 0}

    def flush() -> None:
        if state["capturing"]:
            text = "".join(state["chunks"]).strip()
            if text:
                _check_pronunciation(text, phone_set, state["line"], errors)
        state["capturing"] = False
        state["chunks"] = []

    def start(name: str, attributes: dict) -> None:
        flush()
        if name.rsplit(":", 1)[-1] == COMPOUND_OUTPUT_ELEMENT:
            state["capturing"] = True

    def end(name: str) -> None:
        flush()

    def characters(data: str) -> None:
        if state["capturing"]:
            if not state["chunks"]:
                state["line"] = parser.CurrentLineNumber
            state["chunks"].append(data)

    parser = expat.ParserCreate()
    parser.StartElementHandler = start
    parser.EndElementHandler = end
    parser.CharacterDataHandler = characters
    try:
        parser.Parse(Path(path).read_bytes(), True)
    except expat.ExpatError as e:
        raise ET.ParseError(f"{path}: {e}") from e
    return errors
