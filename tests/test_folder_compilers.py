"""
Tests for the compilers that read text folders, rule files and models.
"""

import struct

import pytest

from langdata_compiler.binary import Trie, lookup
from langdata_compiler.compilers import (
    compile_chinese_tone,
    compile_crf_models,
    compile_post_word_breaker,
    compile_rnn_polyphony,
    compile_sentence_separator,
    compile_syllabify_rule,
    compile_unit_generator,
    compile_word_breaker,
)
from langdata_compiler.compilers.chinesetone import ChineseToneError
from langdata_compiler.compilers.crfmodel import CrfModelError
from langdata_compiler.compilers.postwordbreaker import PostWordBreakerError
from langdata_compiler.compilers.rnnpolyphony import RnnPolyphonyError
from langdata_compiler.compilers.sentenceseparator import (
    SENTENCE_SEPARATOR_FILES,
    SentenceSeparatorError,
)
from langdata_compiler.compilers.syllabify import SyllabifyRuleError
from langdata_compiler.compilers.unitgenerator import UnitGeneratorError
from langdata_compiler.compilers.wordbreaker import WordBreakerError
from langdata_compiler.compilers.wordfile import WordFileError, load_words, ordinal_key
from langdata_compiler.errors import Severity
from langdata_compiler.languages import Language
from langdata_compiler.modules import WORD_BREAKER_NEW_FORMAT, WORD_BREAKER_OLD_FORMAT
from langdata_compiler.rawdata.models import PhoneSet
from langdata_compiler.testing import (
    SAMPLE_WORD_BREAKER_FILES,
    write_syllabify_rules,
    write_truncate_rules,
    write_word_breaker_dir,
)


def _read_utf16(data, position):
    end = position
    while data[end:end + 2] != b"\0\0":
        end += 2
    return data[position:end].decode("utf-16-le")


# =============================================================================
# Word lists
# =============================================================================

class TestWordFiles:
    """Tests for the shared word list reader."""

    def test_comments_and_blank_lines(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("Mr. // title\n\n  Dr.  \n", encoding="utf-8")
        words = []

        assert len(load_words(path, words)) == 0
        assert words == ["Mr.", "Dr."]

    def test_duplicates(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("a\na\nb\n", encoding="utf-8")
        words = ["b"]

        errors = load_words(path, words)

        assert errors.kinds() == [WordFileError.DUPLICATE_WORDS_IN_ONE_FILE, WordFileError.DUPLICATE_WORD]
        assert words == ["b", "a"]

    def test_sorted_ordinally(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("b\nB\na\n", encoding="utf-8")
        words = []
        load_words(path, words, sort=True)

        assert words == ["B", "a", "b"]
        assert ordinal_key("B") < ordinal_key("a")


# =============================================================================
# Word breaker
# =============================================================================

class TestWordBreakerCompiler:
    """Tests for compile_word_breaker."""

    CHAR_SECTIONS = (
        struct.pack("<iHHHH", 2, 0x09, 0x20, 0, 0)
        + struct.pack("<iHHHH", 2, 0x2C, 0x2E, 0, 0)
        + struct.pack("<iHH", 1, 0x21, 0)
    )

    def test_missing_folder(self, tmp_path):
        data, errors = compile_word_breaker(tmp_path / "nowhere")

        assert data == b""
        assert errors.kinds() == [WordBreakerError.DATA_FOLDER_NOT_FOUND]

    def test_missing_basic_data(self, tmp_path):
        data_dir = write_word_breaker_dir(tmp_path / "wb", {"abbrev.txt": "Mr.\n"})
        data, errors = compile_word_breaker(data_dir)

        assert data == b""
        assert errors.kinds() == [WordBreakerError.BASIC_DATA_NOT_FOUND]

    def test_old_format(self, tmp_path):
        data_dir = write_word_breaker_dir(tmp_path / "wb")
        added = []

        data, errors = compile_word_breaker(data_dir, "", added)

        assert len(errors) == 0
        assert data.startswith(self.CHAR_SECTIONS)
        special = Trie(["Mr.", "Dr.", "C++", "e.g.", "Prof."])
        assert data[len(self.CHAR_SECTIONS):] == special.to_bytes()
        assert "whitespacebreakingchar.txt" in added
        assert "titles.txt" in added

    def test_old_format_token_is_explicit(self, tmp_path):
        data_dir = write_word_breaker_dir(tmp_path / "wb")
        implicit, _ = compile_word_breaker(data_dir)
        explicit, _ = compile_word_breaker(data_dir, "{" + WORD_BREAKER_OLD_FORMAT.lower() + "}")
        assert implicit == explicit

    def test_new_format(self, tmp_path):
        data_dir = write_word_breaker_dir(tmp_path / "wb")
        data, errors = compile_word_breaker(data_dir, WORD_BREAKER_NEW_FORMAT)

        assert len(errors) == 0
        position = len(self.CHAR_SECTIONS)
        special = Trie(["Mr.", "Dr.", "C++", "e.g.", "Prof."]).to_bytes()
        end = Trie(["etc.", "C++", "e.g."]).to_bytes()

        assert struct.unpack_from("<i", data, position) == (len(special),)
        position += 4
        assert data[position:position + len(special)] == special
        position += len(special)
        assert struct.unpack_from("<i", data, position) == (len(end),)
        assert data[position + 4:] == end
        assert lookup(data[position + 4:], "etc.") == 2

    def test_unknown_format(self, tmp_path):
        data_dir = write_word_breaker_dir(tmp_path / "wb")
        _, errors = compile_word_breaker(data_dir, "00000000-0000-0000-0000-000000000001")
        assert errors.kinds() == [WordBreakerError.INVALID_FORMAT_GUID]

    def test_missing_word_file(self, tmp_path):
        files = dict(SAMPLE_WORD_BREAKER_FILES)
        del files["titles.txt"]
        data_dir = write_word_breaker_dir(tmp_path / "wb", files)

        data, errors = compile_word_breaker(data_dir)

        assert errors.kinds() == [WordBreakerError.NOT_FIND_WORD_BREAKER_FILE]
        assert data == self.CHAR_SECTIONS

    def test_invalid_char_line(self, tmp_path):
        files = dict(SAMPLE_WORD_BREAKER_FILES, **{"boundarybreakingchar.txt": "0x0021\nbang\n"})
        data_dir = write_word_breaker_dir(tmp_path / "wb", files)

        data, errors = compile_word_breaker(data_dir)

        assert errors.kinds() == [WordBreakerError.INVALID_LINE]
        assert errors.highest_severity is Severity.WARNING
        assert data.startswith(self.CHAR_SECTIONS)


# =============================================================================
# Sentence separator
# =============================================================================

class TestSentenceSeparatorCompiler:
    """Tests for compile_sentence_separator."""

    def test_empty_folder(self, tmp_path):
        data, errors = compile_sentence_separator(tmp_path)

        assert errors.kinds() == [SentenceSeparatorError.NOT_FIND_SENTENCE_SEPARATOR_FILE] * 12
        assert not errors.contains(Severity.MUST_FIX)
        assert data == struct.pack("<i", 12) + b"\0" * 48

    def test_layout(self, tmp_path):
        (tmp_path / "abbrev.txt").write_text("Mr.\nDr.\n", encoding="utf-8")
        added = []

        data, _ = compile_sentence_separator(tmp_path, added)

        counts = struct.unpack_from("<12i", data, 4)
        assert counts[SENTENCE_SEPARATOR_FILES.index("abbrev.txt")] == 2
        assert sum(counts) == 2
        assert struct.unpack_from("<ii", data, 52) == (0, 8)
        pool = 60
        assert _read_utf16(data, pool) == "Dr."
        assert _read_utf16(data, pool + 8) == "Mr."
        assert len(data) == 76
        assert added == ["abbrev.txt"]

    def test_white_space_in_word(self, tmp_path):
        (tmp_path / "titles.txt").write_text("Vice President\n", encoding="utf-8")
        _, errors = compile_sentence_separator(tmp_path)

        assert errors.contains_kind(WordFileError.CONTAIN_WHITE_SPACE)
        assert errors.contains(Severity.MUST_FIX)


# =============================================================================
# Post word breaker
# =============================================================================

class TestPostWordBreakerCompiler:
    """Tests for compile_post_word_breaker."""

    def test_lookup_through_trie(self, tmp_path):
        path = tmp_path / "post.txt"
        path.write_text(
            "// rewrite rules\n"
            "New, York => NewYork\n"
            "Los,Angeles => LosAngeles\n",
            encoding="utf-8",
        )
        data, errors = compile_post_word_breaker(path)

        assert len(errors) == 0
        trie_offset, trie_size, count = struct.unpack_from("<III", data)
        assert count == 2
        assert trie_offset % 4 == 0
        assert trie_offset + trie_size == len(data)

        trie = data[trie_offset:]
        word_id = lookup(trie, "New,York")
        offset = struct.unpack_from("<I", data, 12 + 4 * word_id)[0]
        assert _read_utf16(data, 12 + 4 * count + offset) == "NewYork"

    def test_wildcards_become_placeholders(self, tmp_path):
        path = tmp_path / "post.txt"
        path.write_text("*,of,? => *,of,?\n", encoding="utf-8")

        data, errors = compile_post_word_breaker(path)

        assert len(errors) == 0
        assert _read_utf16(data, 16) == "/1,of,/2"

    @pytest.mark.parametrize("line", [
        "a b c",
        "a => b => c",
        "a => b",
        "a,b,c,d,e,f => x",
    ])
    def test_invalid_lines(self, tmp_path, line):
        path = tmp_path / "post.txt"
        path.write_text(line + "\n", encoding="utf-8")

        _, errors = compile_post_word_breaker(path)

        assert errors.kinds() == [PostWordBreakerError.INVALID_LINE]
        assert errors.contains(Severity.MUST_FIX)

    def test_duplicate_pattern(self, tmp_path):
        path = tmp_path / "post.txt"
        path.write_text("a,b => ab\na, b => x\n", encoding="utf-8")

        _, errors = compile_post_word_breaker(path)

        assert "Duplicate pattern found." in errors.errors[0].message

    def test_missing_file(self, tmp_path):
        data, errors = compile_post_word_breaker(tmp_path / "missing.txt")
        assert data == b""
        assert errors.kinds() == [PostWordBreakerError.DATA_FILE_NOT_FOUND]


# =============================================================================
# Chinese tone
# =============================================================================

class TestChineseToneCompiler:
    """Tests for compile_chinese_tone."""

    def test_layout(self, tmp_path):
        path = tmp_path / "tone.txt"
        path.write_text("[ABAB]\n高,兴\n[AAB]\n看,看\n", encoding="utf-8")

        data, errors = compile_chinese_tone(path)

        assert len(errors) == 0
        assert struct.unpack_from("<III", data) == (2, 3, 3)
        assert struct.unpack_from("<IIII", data, 12) == (24, 0, 4, 8)
        assert _read_utf16(data, 28) == "高"
        assert struct.unpack_from("<I", data, 40) == (24,)
        assert len(data) == 68

    def test_lines_before_section_ignored(self, tmp_path):
        path = tmp_path / "tone.txt"
        path.write_text("stray line\n[ABAB]\n", encoding="utf-8")

        data, errors = compile_chinese_tone(path)

        assert len(errors) == 0
        assert struct.unpack_from("<III", data) == (2, 0, 0)

    def test_invalid_pair_drops_data(self, tmp_path):
        path = tmp_path / "tone.txt"
        path.write_text("[AAB]\n看\n", encoding="utf-8")

        data, errors = compile_chinese_tone(path)

        assert data == b""
        assert errors.kinds() == [ChineseToneError.INVALID_PATTERN_FORM_DATA]

    def test_missing_file(self, tmp_path):
        data, errors = compile_chinese_tone(tmp_path / "none.txt")
        assert data == b""
        assert errors.kinds() == [ChineseToneError.DATA_FILE_NOT_FOUND]


# =============================================================================
# Models
# =============================================================================

class TestCrfModelCompiler:
    """Tests for compile_crf_models."""

    def _model_dir(self, tmp_path):
        model_dir = tmp_path / "models" / "crf"
        model_dir.mkdir(parents=True)
        (model_dir / "a.crf").write_bytes(b"AAAAAAAA")
        (model_dir / "b.crf").write_bytes(b"BBBB")
        (model_dir / "notes.txt").write_text("ignored", encoding="utf-8")
        return model_dir

    def test_layout(self, tmp_path):
        data, errors = compile_crf_models(self._model_dir(tmp_path), Language.EN_US)

        assert len(errors) == 0
        tag_offset, model_offset, count = struct.unpack_from("<III", data)
        assert count == 2
        assert struct.unpack_from("<IIII", data, 12) == (0, 8, 0, 4)
        assert model_offset == 28
        assert data[model_offset:tag_offset] == b"AAAAAAAABBBB"
        assert _read_utf16(data, tag_offset) == "A"
        assert _read_utf16(data, tag_offset + 4) == "B"

    def test_unaligned_model(self, tmp_path):
        model_dir = self._model_dir(tmp_path)
        (model_dir / "a.crf").write_bytes(b"AAA")

        _, errors = compile_crf_models(model_dir)

        assert errors.kinds() == [CrfModelError.INVALID_CRF_MODEL]

    def test_single_unaligned_model(self, tmp_path):
        model_dir = tmp_path / "crf"
        model_dir.mkdir()
        (model_dir / "a.crf").write_bytes(b"AAAAAA")

        _, errors = compile_crf_models(model_dir)

        assert errors.kinds() == [CrfModelError.INVALID_CRF_MODEL]

    def test_unaligned_model_names_its_own_file(self, tmp_path):
        model_dir = self._model_dir(tmp_path)
        (model_dir / "a.crf").write_bytes(b"AAA")

        _, errors = compile_crf_models(model_dir)

        (error,) = list(errors)
        assert "a.crf" in error.message
        assert "b.crf" not in error.message

    def test_missing_folder(self, tmp_path):
        data, errors = compile_crf_models(tmp_path / "none")
        assert data == b""
        assert errors.kinds() == [CrfModelError.DATA_FOLDER_NOT_FOUND]

    def test_localized_without_mapping(self, tmp_path):
        _, errors = compile_crf_models(self._model_dir(tmp_path), Language.ZH_CN)
        assert errors.kinds() == [CrfModelError.MAPPING_FILE_NOT_FOUND]

    def test_localized_mapping(self, tmp_path):
        model_dir = self._model_dir(tmp_path)
        (tmp_path / "models" / "CRFLocalizedMapping.txt").write_text(
            "Map between polyphony model:\n"
            "行\tx\ta.crf\tBeing_used\n"
            "长\tx\tb.crf\tRetired\n",
            encoding="utf-8",
        )

        data, errors = compile_crf_models(model_dir, Language.ZH_CN)

        assert len(errors) == 0
        tag_offset, _, count = struct.unpack_from("<III", data)
        assert count == 1
        assert _read_utf16(data, tag_offset) == "行"


class TestRnnPolyphonyCompiler:
    """Tests for compile_rnn_polyphony."""

    def _model(self, tmp_path):
        model = tmp_path / "models" / "rnn" / "model.bin"
        model.parent.mkdir(parents=True)
        model.write_bytes(b"MODEL")
        return model

    def test_layout(self, tmp_path):
        model = self._model(tmp_path)
        (tmp_path / "models" / "RNNPolyphoneList.txt").write_text("行\t0.5\n", encoding="utf-8")

        data, errors = compile_rnn_polyphony(model)

        assert len(errors) == 0
        model_offset, count = struct.unpack_from("<II", data)
        assert count == 1
        assert struct.unpack_from("<f", data, 8) == (0.5,)
        assert struct.unpack_from("<I", data, 12) == (0,)
        assert _read_utf16(data, 16) == "行"
        assert model_offset == 20
        assert data[model_offset:] == b"MODEL"

    def test_missing_character_list(self, tmp_path):
        _, errors = compile_rnn_polyphony(self._model(tmp_path))

        assert errors.kinds() == [RnnPolyphonyError.POLYPHONIC_CHAR_FILE_NOT_FOUND]
        assert errors.contains(Severity.MUST_FIX)

    def test_bad_character_list(self, tmp_path):
        model = self._model(tmp_path)
        (tmp_path / "models" / "RNNPolyphoneList.txt").write_text("行行\t0.5\n", encoding="utf-8")

        _, errors = compile_rnn_polyphony(model)

        assert errors.kinds() == [
            RnnPolyphonyError.INVALID_CHARACTER_LIST_FORMAT,
            RnnPolyphonyError.POLYPHONIC_CHAR_NOT_FOUND,
        ]

    def test_missing_model(self, tmp_path):
        data, errors = compile_rnn_polyphony(tmp_path / "model.bin")
        assert data == b""
        assert errors.kinds() == [RnnPolyphonyError.MODEL_DATA_NOT_FOUND]


# =============================================================================
# Phone rules
# =============================================================================

class TestSyllabifyRuleCompiler:
    """Tests for compile_syllabify_rule."""

    def test_layout(self, tmp_path, phone_set):
        path = write_syllabify_rules(tmp_path / "syl.xml")
        data, errors = compile_syllabify_rule(path, phone_set)

        assert len(errors) == 0
        assert data == struct.pack("<i4H", 1, 2, 3, 0, 0)

    def test_long_rule_skipped(self, tmp_path, phone_set):
        path = write_syllabify_rules(tmp_path / "syl.xml", [["P", "T", "P", "T"], ["T"]])
        data, errors = compile_syllabify_rule(path, phone_set)

        assert errors.kinds() == [SyllabifyRuleError.RULE_LENGTH_EXCEEDED]
        assert data == struct.pack("<i4H", 1, 3, 0, 0, 0)

    def test_invalid_phone(self, tmp_path, phone_set):
        path = write_syllabify_rules(tmp_path / "syl.xml", [["P", "ZZ"]])
        _, errors = compile_syllabify_rule(path, phone_set)

        assert errors.kinds() == [SyllabifyRuleError.INVALID_PHONE]
        assert errors.contains(Severity.MUST_FIX)

    def test_invalid_phone_set(self, tmp_path):
        path = write_syllabify_rules(tmp_path / "syl.xml")
        data, errors = compile_syllabify_rule(path, PhoneSet())

        assert data == b""
        assert errors.kinds() == [SyllabifyRuleError.INVALID_PHONE_SET]


class TestUnitGeneratorCompiler:
    """Tests for compile_unit_generator."""

    def test_layout(self, tmp_path, phone_set):
        path = write_truncate_rules(tmp_path / "trunc.xml")
        data, errors = compile_unit_generator(path, phone_set)

        assert len(errors) == 0
        assert data == struct.pack("<ii6h", 1, 1, 1, 2, 0, 0, 0, 0)

    def test_right_side(self, tmp_path, phone_set):
        path = write_truncate_rules(tmp_path / "trunc.xml", [("right", ["IY"])])
        data, _ = compile_unit_generator(path, phone_set)

        assert struct.unpack_from("<ih", data, 4) == (2, 4)

    def test_problems_are_warnings(self, tmp_path, phone_set):
        path = write_truncate_rules(tmp_path / "trunc.xml", [
            ("Up", ["AA"]),
            ("Left", ["AA"] * 6),
            ("Left", ["ZZ", "T"]),
        ])
        data, errors = compile_unit_generator(path, phone_set)

        assert errors.kinds() == [
            UnitGeneratorError.WRONG_RULE_SIDE,
            UnitGeneratorError.RULE_LENGTH_EXCEEDED,
            UnitGeneratorError.INVALID_PHONE,
        ]
        assert errors.highest_severity is Severity.WARNING
        assert struct.unpack_from("<i", data) == (2,)
        assert struct.unpack_from("<ih", data, 4) == (0, 1)
        assert struct.unpack_from("<ihh", data, 20) == (1, 3, 0)
