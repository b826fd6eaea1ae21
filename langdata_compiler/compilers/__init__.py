"""
Module compilers - One binary encoder per runtime module.

Every compiler takes loaded raw data (or a path), validates it and returns
``(bytes, ErrorSet)``. Data is empty when a MUST_FIX error was found.

Components:
    compile_phone_set            - Phone table records
    compile_pos_set              - POS table records
    compile_pos_tagger_pos       - Tagging POS ids from the lexical schema
    compile_char_table           - Character table with expansions
    compile_word_breaker         - Breaking chars and word tries
    compile_post_word_breaker    - Re-segmentation patterns
    compile_sentence_separator   - Sentence separator word lists
    compile_chinese_tone         - ABAB / AAB tone tables
    compile_quotation_mark       - Quotation mark pairs
    compile_parallel_struct      - Parallel structure words
    compile_word_feature_suffix  - Word feature suffix lists
    compile_crf_models           - CRF model folders
    compile_rnn_polyphony        - RNN polyphony model and thresholds
    compile_syllabify_rule       - Syllabify initial consonants
    compile_unit_generator       - Truncate rules
    compile_phone_event          - Viseme and SAPI phone events
    compile_foreign_lts_collection - Foreign phone sets and LTS rules
    external                     - Recipes driving the legacy tools
"""

from langdata_compiler.compilers.phoneset import compile_phone_set
from langdata_compiler.compilers.posset import compile_pos_set, compile_pos_tagger_pos
from langdata_compiler.compilers.chartable import (
    compile_char_table,
    split_pronunciation,
    validate_char_table,
)
from langdata_compiler.compilers.wordbreaker import compile_word_breaker
from langdata_compiler.compilers.postwordbreaker import compile_post_word_breaker
from langdata_compiler.compilers.sentenceseparator import compile_sentence_separator
from langdata_compiler.compilers.chinesetone import compile_chinese_tone
from langdata_compiler.compilers.quotationmark import compile_quotation_mark
from langdata_compiler.compilers.parallelstruct import compile_parallel_struct
from langdata_compiler.compilers.wordfeaturesuffix import compile_word_feature_suffix
from langdata_compiler.compilers.crfmodel import compile_crf_models
from langdata_compiler.compilers.rnnpolyphony import compile_rnn_polyphony
from langdata_compiler.compilers.syllabify import compile_syllabify_rule
from langdata_compiler.compilers.unitgenerator import compile_unit_generator
from langdata_compiler.compilers.phoneevent import (
    PhoneConverter,
    TablePhoneConverter,
    compile_phone_event,
)
from langdata_compiler.compilers.foreignlts import compile_foreign_lts_collection
from langdata_compiler.compilers.polyrule import PolyphonyRuleFile, validate_polyphony_rule
from langdata_compiler.compilers.rulefile import duplicate_rule_keys, validate_compound_rule
from langdata_compiler.compilers.external import ToolSetup

__all__ = [
    # Table compilers
    "compile_phone_set",
    "compile_pos_set",
    "compile_pos_tagger_pos",
    "compile_char_table",
    "split_pronunciation",
    "validate_char_table",
    "compile_quotation_mark",
    "compile_parallel_struct",
    "compile_word_feature_suffix",
    # Folder compilers
    "compile_word_breaker",
    "compile_post_word_breaker",
    "compile_sentence_separator",
    "compile_chinese_tone",
    "compile_crf_models",
    "compile_rnn_polyphony",
    # Phone rules
    "compile_syllabify_rule",
    "compile_unit_generator",
    "PhoneConverter",
    "TablePhoneConverter",
    "compile_phone_event",
    "compile_foreign_lts_collection",
    # Rule validators
    "PolyphonyRuleFile",
    "validate_polyphony_rule",
    "duplicate_rule_keys",
    "validate_compound_rule",
    # External tools
    "ToolSetup",
]
