"""
Test Fixtures - Raw data files for testing.

Provides:
    - Sample phone, POS and schema definitions
    - Writers for the XML tables the loaders read
    - A minimal data root covering the necessary modules
    - A tool folder with placeholder executables
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable

from langdata_compiler.languages import Language
from langdata_compiler.rawdata.loaders import TOOLSUITE_NAMESPACE, TTS_NAMESPACE
from langdata_compiler.tools import DEFAULT_TOOL_NAMES

# (name, id, features)
SAMPLE_PHONES = [
    ("AA", 1, "Vowel"),
    ("P", 2, "Consonant"),
    ("T", 3, "Consonant"),
    ("IY", 4, "Vowel"),
]

# (name, hex id)
SAMPLE_POS = [
    ("noun", 0x10),
    ("verb", 0x20),
    ("adj", 0x30),
]

# (name, id, posTagging)
SAMPLE_SCHEMA_POS = [
    ("noun", 1, True),
    ("verb", 2, True),
    ("punct", 3, False),
]

SAMPLE_WORD_BREAKER_FILES = {
    "whitespacebreakingchar.txt": "0x0020\n0x0009 // tab\n",
    "emitbreakingchar.txt": "0x002C\n0x002E\n",
    "boundarybreakingchar.txt": "0x0021\n",
    "abbrev.txt": "Mr.\nDr.\n",
    "specialwords.txt": "C++\n",
    "wordbreakerspecialwords.txt": "e.g.\n",
    "titles.txt": "Prof.\n",
    "endabbr.txt": "etc.\n",
}


def _tts(tag: str) -> str:
    return f"{{{TTS_NAMESPACE}}}{tag}"


def _write(root: ET.Element, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    ET.ElementTree(root).write(path, encoding="utf-8", xml_declaration=True)
    return path


def write_phone_set(
    path: str | Path,
    phones: Iterable[tuple[str, int, str]] = SAMPLE_PHONES,
    language: Language = Language.EN_US,
) -> Path:
    root = ET.Element(_tts("phoneSet"), {"lang": language.code})
    for name, phone_id, features in phones:
        phone = ET.SubElement(root, _tts("phone"), {"name": name, "id": str(phone_id)})
        ET.SubElement(phone, _tts("feature")).text = features
    return _write(root, Path(path))


def write_pos_set(
    path: str | Path,
    items: Iterable[tuple[str, int]] = SAMPLE_POS,
    language: Language = Language.EN_US,
) -> Path:
    root = ET.Element(_tts("posTable"), {"lang": language.code})
    for name, pos_id in items:
        ET.SubElement(root, _tts("pos"), {"name": name, "id": f"{pos_id:X}"})
    return _write(root, Path(path))


def write_lexical_schema(
    path: str | Path,
    pos_values: Iterable[tuple[str, int, bool]] = SAMPLE_SCHEMA_POS,
    language: Language = Language.EN_US,
    category: str = "POS",
) -> Path:
    root = ET.Element(_tts("lexAttributeTable"), {"lang": language.code})
    pos = ET.SubElement(root, _tts("Category"), {"name": category, "ID": "1"})
    for name, value_id, tagging in pos_values:
        ET.SubElement(pos, _tts("Value"), {
            "name": name,
            "ID": str(value_id),
            "posTagging": "true" if tagging else "false",
        })
    return _write(root, Path(path))


def write_char_table(
    path: str | Path,
    chars: Iterable[dict[str, str]] | None = None,
    language: Language = Language.EN_US,
) -> Path:
    if chars is None:
        chars = [
            {"symbol": "A", "type": "UpperCase", "isolatedSymbolReadout": "a", "pron": "aa", "feature": "Vowel"},
            {"symbol": "a", "type": "LowerCase", "isolatedSymbolReadout": "a", "pron": "aa", "feature": "Vowel"},
            {"symbol": "P", "type": "UpperCase", "isolatedSymbolReadout": "p", "pron": "p iy", "feature": "Consonant"},
            {"symbol": "p", "type": "LowerCase", "isolatedSymbolReadout": "p", "pron": "p iy", "feature": "Consonant"},
        ]
    root = ET.Element(_tts("chartable"), {"lang": language.code})
    for attributes in chars:
        ET.SubElement(root, _tts("char"), dict(attributes))
    return _write(root, Path(path))


def write_truncate_rules(path: str | Path, rules: Iterable[tuple[str, list[str]]] = ()) -> Path:
    """``<offline><truncateRules>`` with ``(side, phones)`` rules."""
    root = ET.Element(f"{{{TOOLSUITE_NAMESPACE}}}offline")
    rules_element = ET.SubElement(root, f"{{{TOOLSUITE_NAMESPACE}}}truncateRules")
    for side, phones in rules or [("Left", ["AA", "P"])]:
        rule = ET.SubElement(rules_element, f"{{{TOOLSUITE_NAMESPACE}}}truncateRule", {"side": side})
        for phone in phones:
            ET.SubElement(rule, f"{{{TOOLSUITE_NAMESPACE}}}phone", {"value": phone})
    return _write(root, Path(path))


def write_syllabify_rules(path: str | Path, rules: Iterable[list[str]] = ()) -> Path:
    root = ET.Element(_tts("syllabifyRules"))
    for phones in rules or [["P", "T"]]:
        initial = ET.SubElement(root, _tts("initialConsonants"))
        for phone in phones:
            ET.SubElement(initial, _tts("phone"), {"value": phone})
    return _write(root, Path(path))


def write_word_breaker_dir(path: str | Path, files: dict[str, str] | None = None) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    for name, text in (SAMPLE_WORD_BREAKER_FILES if files is None else files).items():
        (path / name).write_text(text, encoding="utf-8")
    return path


def create_data_root(root: str | Path, language: Language = Language.EN_US) -> Path:
    """Data root holding the raw sources of every necessary module."""
    root = Path(root)
    write_phone_set(root / "Lexicon/Lexicon/phoneset.xml", language=language)
    write_pos_set(root / "Lexicon/Lexicon/postable.xml", language=language)
    write_lexical_schema(root / "Lexicon/Lexicon/schema.xml", language=language)
    (root / "Lexicon/Lexicon/Lexicon.xml").write_text("<lexicon />", encoding="utf-8")
    write_char_table(root / "TAData/Misc/chartable.xml", language=language)
    write_truncate_rules(root / "TAData/TruncateRules.xml")
    write_syllabify_rules(root / "TAData/SyllabifyRules.xml")
    write_word_breaker_dir(root / "TAData")
    return root


def create_tool_dir(path: str | Path, names: Iterable[str] | None = None) -> Path:
    """Folder with an empty placeholder file per external tool."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    for name in names if names is not None else DEFAULT_TOOL_NAMES.values():
        (path / name).write_bytes(b"")
    return path
