"""
Raw Data Loaders - Parse raw source files into in-memory models.

Every loader takes ``(path, language)`` and returns ``(object, ErrorSet)``.
Problems that only make the data imperfect are reported in the ErrorSet;
a file that cannot be understood at all raises ``InvalidDataError`` or
``ElementTree.ParseError``, which the dispatcher turns into a
RAW_DATA_NOT_FOUND entry for the module being built.

XML tables use the ``http://schemas.microsoft.com/tts`` namespace; element
matching below goes by local name so hand-written files without the
namespace declaration load as well.
"""

from __future__ import annotations

import codecs
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator

from langdata_compiler.errors import ErrorSet, InvalidDataError
from langdata_compiler.languages import Language
from langdata_compiler.rawdata.models import (
    AttributeCategory,
    AttributeValue,
    CharElement,
    CharFeature,
    CharTable,
    CharType,
    LexicalSchema,
    ParallelStructItem,
    ParallelStructTable,
    Phone,
    PhoneFeature,
    PhoneSet,
    PhoneSetError,
    PosSet,
    QuotationDirect,
    QuotationMark,
    QuotationMarkTable,
    WordFeatureSuffixTable,
)

logger = logging.getLogger(__name__)

TTS_NAMESPACE = "http://schemas.microsoft.com/tts"
TOOLSUITE_NAMESPACE = "http://schemas.microsoft.com/tts/toolsuite"

_HEX_ESCAPE = re.compile(r"(?:\\x|0x)([0-9a-fA-F]{4})")


# =============================================================================
# Text and XML helpers
# =============================================================================

def detect_encoding(raw: bytes) -> str:
    """Text encoding of a raw file.

    A byte order mark wins. Without one, NUL bytes mean UTF-16 and the
    side they fall on picks the byte order; anything else is UTF-8.
    """
    if raw.startswith(codecs.BOM_UTF16_LE) or raw.startswith(codecs.BOM_UTF16_BE):
        return "utf-16"
    if b"\0" in raw:
        if raw[1::2].count(0) >= raw[0::2].count(0):
            return "utf-16-le"
        return "utf-16-be"
    return "utf-8-sig"


def read_text(path: str | Path) -> str:
    """Read a text file as UTF-8 or UTF-16, see ``detect_encoding``."""
    raw = Path(path).read_bytes()
    return raw.decode(detect_encoding(raw))


def read_text_lines(path: str | Path) -> list[str]:
    """Lines of a text file without line terminators."""
    return read_text(path).splitlines()


def local_name(tag: str) -> str:
    """Tag without its ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1]


def children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Direct children with the given local name."""
    for child in element:
        if isinstance(child.tag, str) and local_name(child.tag) == name:
            yield child


def child(element: ET.Element, name: str) -> ET.Element | None:
    return next(children(element, name), None)


def descend(element: ET.Element, *names: str) -> Iterator[ET.Element]:
    """Elements reached by following ``names`` from ``element``."""
    if not names:
        yield element
        return
    for sub in children(element, names[0]):
        yield from descend(sub, *names[1:])


def parse_xml(path: str | Path, root_name: str) -> ET.Element:
    """Parse an XML file and check its root element.

    Raises:
        ET.ParseError: If the file is not well-formed XML.
        InvalidDataError: If the root element is not ``root_name``.
    """
    root = ET.fromstring(Path(path).read_bytes())
    if local_name(root.tag) != root_name:
        raise InvalidDataError(
            f"Expected <{root_name}> as root element of {path}, found <{local_name(root.tag)}>",
            {"path": str(path)},
        )
    return root


def element_language(root: ET.Element, fallback: Language) -> Language:
    """Language from the ``lang`` attribute.

    Raises:
        InvalidDataError: If the attribute names an unknown language.
    """
    code = root.get("lang")
    if not code:
        return fallback
    try:
        return Language.from_code(code)
    except ValueError as e:
        raise InvalidDataError(str(e), {"lang": code}) from e


def replace_hex_escapes(text: str) -> str:
    """Expand ``\\xHHHH`` and ``0xHHHH`` escapes into characters."""
    return _HEX_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), text)


def _required(element: ET.Element, attribute: str, path: str | Path) -> str:
    value = element.get(attribute)
    if value is None:
        raise InvalidDataError(
            f"Missing attribute '{attribute}' on <{local_name(element.tag)}> in {path}",
            {"path": str(path), "attribute": attribute},
        )
    return value


def _parse_int(value: str, base: int, path: str | Path) -> int:
    try:
        return int(value.strip(), base)
    except ValueError as e:
        raise InvalidDataError(f"Invalid number '{value}' in {path}", {"path": str(path)}) from e


# =============================================================================
# Loaders
# =============================================================================

def load_path(path: Path, language: Language) -> tuple[Path, ErrorSet]:
    """Loader for raw data consumed by path only (rules, folders, lexicon)."""
    return path, ErrorSet()


def load_phone_set(path: Path, language: Language) -> tuple[PhoneSet, ErrorSet]:
    """Load ``<phoneSet>`` with ``<phone name id><feature>...</feature></phone>``."""
    errors = ErrorSet()
    root = parse_xml(path, "phoneSet")
    phone_set = PhoneSet(language=element_language(root, language))

    for element in children(root, "phone"):
        name = _required(element, "name", path)
        phone_id = _parse_int(_required(element, "id", path), 10, path)
        features = PhoneFeature.SILENCE
        feature_element = child(element, "feature")
        text = feature_element.text if feature_element is not None else ""
        for feature_name in (text or "").split():
            feature = PhoneFeature.parse(feature_name)
            if feature is None:
                errors.add(PhoneSetError.UNRECOGNIZED_PHONE_FEATURE, name, feature_name)
                continue
            features |= feature
        phone_set.phones.append(Phone(name=name, id=phone_id, features=features))

    logger.debug("Loaded %d phones from %s", len(phone_set.phones), path)
    return phone_set, errors


def load_pos_set(path: Path, language: Language) -> tuple[PosSet, ErrorSet]:
    """Load ``<posTable>`` with ``<pos name id>``; ids are hexadecimal."""
    root = parse_xml(path, "posTable")
    pos_set = PosSet(element_language(root, language))
    for element in children(root, "pos"):
        name = _required(element, "name", path)
        pos_set.add(name, _parse_int(_required(element, "id", path), 16, path))
    return pos_set, ErrorSet()


def _load_category(element: ET.Element, path: Path) -> AttributeCategory:
    category = AttributeCategory(
        name=_required(element, "name", path).strip(),
        id=_parse_int(element.get("ID", "0"), 10, path),
    )
    for value_element in children(element, "Value"):
        value = AttributeValue(
            name=_required(value_element, "name", path).strip(),
            id=_parse_int(_required(value_element, "ID", path), 10, path),
            pos_tagging=value_element.get("posTagging", "false").strip().lower() == "true",
        )
        value.categories = [_load_category(sub, path) for sub in children(value_element, "Category")]
        category.values.append(value)
    return category


def load_lexical_schema(path: Path, language: Language) -> tuple[LexicalSchema, ErrorSet]:
    """Load ``<lexAttributeTable>`` with nested ``<Category>``/``<Value>`` elements."""
    root = parse_xml(path, "lexAttributeTable")
    schema = LexicalSchema(language=element_language(root, language))
    schema.categories = [_load_category(element, path) for element in children(root, "Category")]
    return schema, ErrorSet()


def _parse_char_type(value: str, path: Path) -> CharType:
    wanted = value.strip().lower()
    for char_type in CharType:
        if char_type.value.lower() == wanted:
            return char_type
    raise InvalidDataError(f"Unknown char type '{value}' in {path}", {"path": str(path)})


def load_char_table(path: Path, language: Language) -> tuple[CharTable, ErrorSet]:
    """Load ``<chartable>`` with ``<char symbol ...>`` entries."""
    root = parse_xml(path, "chartable")
    table = CharTable(language=element_language(root, language))

    for element in children(root, "char"):
        feature = CharFeature.NONE
        for name in element.get("feature", "").split():
            flag = CharFeature.__members__.get(name.upper())
            if flag is None:
                raise InvalidDataError(f"Unknown char feature '{name}' in {path}", {"path": str(path)})
            feature |= flag

        table.chars.append(CharElement(
            symbol=element.get("symbol", "").strip(),
            isolated_readout=re.sub(" +", " ", element.get("isolatedSymbolReadout", "").strip()),
            contextual_readout=element.get("contextualSymbolReadout", "").strip(),
            pronunciation=element.get("pron", "").strip(),
            feature=feature,
            char_type=_parse_char_type(element.get("type", "Symbol"), path),
        ))
    return table, ErrorSet()


def _single_char(value: str, side: str, path: Path) -> str:
    value = replace_hex_escapes(value).strip()
    if len(value) != 1:
        raise InvalidDataError(
            f"Invalid {side} side quotation mark [{value}] is found, which should be single character.",
            {"path": str(path)},
        )
    return value


def load_quotation_mark_table(path: Path, language: Language) -> tuple[QuotationMarkTable, ErrorSet]:
    """Load ``<quotationMarkTable>`` with ``<mark left right direct>`` entries."""
    root = parse_xml(path, "quotationMarkTable")
    table = QuotationMarkTable(language=element_language(root, language))
    for element in children(root, "mark"):
        direct_name = element.get("direct", "Neutral").strip().upper()
        if direct_name not in QuotationDirect.__members__:
            raise InvalidDataError(f"Unknown quotation direction '{direct_name}' in {path}")
        table.items.append(QuotationMark(
            left=_single_char(element.get("left", ""), "left", path),
            right=_single_char(element.get("right", ""), "right", path),
            direct=QuotationDirect[direct_name],
        ))
    return table, ErrorSet()


def load_parallel_struct_table(path: Path, language: Language) -> tuple[ParallelStructTable, ErrorSet]:
    root = parse_xml(path, "parallelStructTable")
    table = ParallelStructTable(language=element_language(root, language))
    for element in descend(root, "segmentWords", "segmentWord"):
        table.segment_items.append(ParallelStructItem(element.get("text", ""), element.get("pos", "")))
    for element in descend(root, "triggerWords", "triggerWord"):
        table.trigger_items.append(ParallelStructItem(element.get("text", ""), element.get("pos", "")))
    return table, ErrorSet()


def load_word_feature_suffix_table(path: Path, language: Language) -> tuple[WordFeatureSuffixTable, ErrorSet]:
    root = parse_xml(path, "wordFeatureSuffixTable")
    table = WordFeatureSuffixTable(language=element_language(root, language))
    sections = {
        "noun_items": ("nounSuffixes", "nounSuffix"),
        "adj_items": ("adjSuffixes", "adjSuffix"),
        "verb_items": ("verbSuffixes", "verbSuffix"),
        "separator_items": ("separatorChars", "separatorChar"),
    }
    for attribute, names in sections.items():
        items = getattr(table, attribute)
        for element in descend(root, *names):
            items.append(element.get("text", ""))
    return table, ErrorSet()
