"""
Tests for raw data loading and the registry.
"""

import xml.etree.ElementTree as ET

import pytest

from langdata_compiler.errors import (
    DataCompilerError,
    InvalidDataError,
    Severity,
    UnknownRawDataError,
)
from langdata_compiler.languages import Language
from langdata_compiler.rawdata import RawDataRegistry
from langdata_compiler.rawdata.loaders import (
    load_char_table,
    load_lexical_schema,
    load_phone_set,
    load_pos_set,
    detect_encoding,
    read_text_lines,
    replace_hex_escapes,
)
from langdata_compiler.rawdata.models import (
    CharFeature,
    CharType,
    Phone,
    PhoneFeature,
    PhoneSet,
    PhoneSetError,
)
from langdata_compiler.testing import (
    SAMPLE_PHONES,
    write_char_table,
    write_lexical_schema,
    write_phone_set,
    write_pos_set,
)


# =============================================================================
# Loaders
# =============================================================================

class TestLoaders:
    """Tests for the XML and text loaders."""

    def test_phone_set(self, tmp_path):
        path = write_phone_set(tmp_path / "ps.xml")
        phone_set, errors = load_phone_set(path, Language.NEUTRAL)

        assert len(errors) == 0
        assert phone_set.language is Language.EN_US
        assert [(p.name, p.id) for p in phone_set.phones] == [(n, i) for n, i, _ in SAMPLE_PHONES]
        assert phone_set.get_phone("aa").features == PhoneFeature.VOWEL

    def test_unknown_phone_feature_is_warning(self, tmp_path):
        path = write_phone_set(tmp_path / "ps.xml", [("AA", 1, "Vowel Sparkly")])
        phone_set, errors = load_phone_set(path, Language.EN_US)

        assert errors.kinds() == [PhoneSetError.UNRECOGNIZED_PHONE_FEATURE]
        assert errors.highest_severity is Severity.WARNING
        assert phone_set.phones[0].features == PhoneFeature.VOWEL

    def test_pos_set_ids_are_hex(self, tmp_path):
        path = write_pos_set(tmp_path / "pos.xml", [("noun", 0x1A)])
        pos_set, _ = load_pos_set(path, Language.EN_US)

        assert pos_set.items == {"noun": 0x1A}

    def test_lexical_schema_tagging_set(self, tmp_path):
        path = write_lexical_schema(tmp_path / "schema.xml")
        schema, _ = load_lexical_schema(path, Language.EN_US)

        assert schema.pos_tagging_set().items == {"noun": 1, "verb": 2}

    def test_schema_without_pos_category(self, tmp_path):
        path = write_lexical_schema(tmp_path / "schema.xml", category="Gender")
        schema, _ = load_lexical_schema(path, Language.EN_US)

        with pytest.raises(InvalidDataError):
            schema.pos_tagging_set()

    def test_char_table(self, tmp_path):
        path = write_char_table(tmp_path / "ct.xml")
        table, _ = load_char_table(path, Language.EN_US)

        assert [c.symbol for c in table.chars] == ["A", "a", "P", "p"]
        assert table.chars[0].char_type is CharType.UPPER_CASE
        assert table.chars[2].feature == CharFeature.CONSONANT

    def test_wrong_root_element(self, tmp_path):
        path = write_pos_set(tmp_path / "pos.xml")
        with pytest.raises(InvalidDataError):
            load_phone_set(path, Language.EN_US)

    def test_malformed_xml(self, tmp_path):
        path = tmp_path / "bad.xml"
        path.write_text("<phoneSet>", encoding="utf-8")
        with pytest.raises(ET.ParseError):
            load_phone_set(path, Language.EN_US)

    def test_utf16_text_with_bom(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_bytes("alpha\r\nbeta\r\n".encode("utf-16"))
        assert read_text_lines(path) == ["alpha", "beta"]

    def test_utf16le_text_without_bom(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_bytes("行\r\nbeta\r\n".encode("utf-16-le"))
        assert read_text_lines(path) == ["行", "beta"]

    @pytest.mark.parametrize("raw, encoding", [
        ("ab".encode("utf-16-le"), "utf-16-le"),
        ("ab".encode("utf-16-be"), "utf-16-be"),
        ("ab".encode("utf-8"), "utf-8-sig"),
    ])
    def test_detect_encoding_without_bom(self, raw, encoding):
        assert detect_encoding(raw) == encoding

    def test_hex_escapes(self):
        assert replace_hex_escapes("\\x0041 0x0042") == "A B"


class TestPhoneSetValidation:
    """Tests for phone set structural checks."""

    def test_duplicates_and_zero_id(self):
        phone_set = PhoneSet(phones=[
            Phone("AA", 1),
            Phone("aa", 1),
            Phone("T", 0),
        ])
        errors = phone_set.validate()

        assert PhoneSetError.DUPLICATE_PHONE_NAME in errors.kinds()
        assert PhoneSetError.DUPLICATE_PHONE_ID in errors.kinds()
        assert PhoneSetError.ZERO_ID in errors.kinds()

    def test_empty(self):
        assert PhoneSet().validate().kinds() == [PhoneSetError.EMPTY_PHONE_SET]

    def test_feature_beyond_runtime_mask(self):
        phone_set = PhoneSet(phones=[Phone("SP", 1, PhoneFeature.SHORTPAUSE)])
        errors = phone_set.validate()

        assert errors.kinds() == [PhoneSetError.UNSUPPORTED_FEATURE_IN_RUNTIME]
        assert phone_set.phones[0].runtime_feature == 0


# =============================================================================
# Registry
# =============================================================================

class TestRawDataRegistry:
    """Tests for RawDataRegistry."""

    def test_paths_resolve_under_root(self, tmp_path):
        registry = RawDataRegistry(Language.EN_US)
        registry.set_data_root(tmp_path)

        assert registry.path_of("PhoneSet") == tmp_path / "Lexicon/Lexicon/phoneset.xml"
        assert registry.path_of("TnRule") == tmp_path / "Rules/TnRule/tn1033.xml"

    def test_lookup_is_case_insensitive(self, tmp_path):
        registry = RawDataRegistry(Language.EN_US)
        registry.set_data_root(tmp_path)
        assert registry.path_of("phoneset") == registry.path_of("PhoneSet")
        assert "PHONESET" in registry

    def test_unset_root_gives_path_not_initialized(self):
        registry = RawDataRegistry(Language.EN_US)
        obj, errors = registry.get("PhoneSet")

        assert obj is None
        assert errors.kinds() == [DataCompilerError.PATH_NOT_INITIALIZED]

    def test_load_once_and_cache(self, data_root):
        registry = RawDataRegistry(Language.EN_US)
        registry.set_data_root(data_root)

        first, errors = registry.get("PhoneSet")
        second, _ = registry.get("PhoneSet")

        assert len(errors) == 0
        assert first is second

    def test_attempt_once(self, tmp_path):
        registry = RawDataRegistry(Language.EN_US)
        registry.set_data_root(tmp_path)

        obj, errors = registry.get("PhoneSet")
        assert obj is None
        assert errors.kinds() == [DataCompilerError.RAW_DATA_NOT_FOUND]

        # The file appearing later is not picked up.
        write_phone_set(tmp_path / "Lexicon/Lexicon/phoneset.xml")
        obj, errors = registry.get("PhoneSet")

        assert obj is None
        assert errors.kinds() == [DataCompilerError.RAW_DATA_ERROR]

    def test_reset_allows_retry(self, tmp_path):
        registry = RawDataRegistry(Language.EN_US)
        registry.set_data_root(tmp_path)
        registry.get("PhoneSet")

        write_phone_set(tmp_path / "Lexicon/Lexicon/phoneset.xml")
        registry.reset()
        obj, errors = registry.get("PhoneSet")

        assert obj is not None
        assert len(errors) == 0

    def test_override_survives_root_and_language(self, tmp_path):
        override = write_phone_set(tmp_path / "elsewhere.xml")
        registry = RawDataRegistry(Language.EN_US)

        errors = registry.prepare_data_path(tmp_path / "root", {"PhoneSet": str(override)})
        registry.set_data_root(tmp_path / "other")
        registry.set_language(Language.DE_DE)

        assert len(errors) == 0
        assert registry.path_of("PhoneSet") == override

    def test_unknown_override(self, tmp_path):
        registry = RawDataRegistry(Language.EN_US)
        errors = registry.prepare_data_path(tmp_path, {"NoSuchData": "x"})

        assert errors.kinds() == [DataCompilerError.INVALID_RAW_DATA]
        assert not errors.contains(Severity.MUST_FIX)

    def test_set_language_rerenders_templates(self, tmp_path):
        registry = RawDataRegistry(Language.EN_US)
        registry.set_data_root(tmp_path)
        registry.set_language(Language.DE_DE)

        assert registry.path_of("PosLexicalRule") == tmp_path / "Rules/PostaggerRule/de-DE_lexical_rule"
        assert registry.path_of("TnRule") == tmp_path / "Rules/TnRule/tn1031.xml"

    def test_config_value(self):
        registry = RawDataRegistry(Language.EN_US)
        registry.set_raw_data_path("ForeignLtsCollection", "ja-JP: a.xml ; b.bin")

        assert registry.value_of("ForeignLtsCollection") == "ja-JP: a.xml ; b.bin"
        assert registry.path_of("ForeignLtsCollection") is None

    def test_set_object(self):
        registry = RawDataRegistry(Language.EN_US)
        phone_set = PhoneSet(phones=[Phone("AA", 1)])
        registry.set_object("PhoneSet", phone_set)

        obj, errors = registry.get("PhoneSet")
        assert obj is phone_set
        assert len(errors) == 0

    def test_set_object_unknown(self):
        registry = RawDataRegistry(Language.EN_US)
        with pytest.raises(UnknownRawDataError):
            registry.set_object("NoSuchData", object())

    def test_get_unknown_name(self):
        registry = RawDataRegistry(Language.EN_US)
        obj, errors = registry.get("NoSuchData")

        assert obj is None
        assert errors.kinds() == [DataCompilerError.INVALID_MODULE_DATA]
