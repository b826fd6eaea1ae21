"""
Testing utilities for the language data compiler.

Components:
    StaticToolRunner   - Canned external tool runner
    CallRecord         - One recorded tool invocation
    fixtures           - Raw data writers and sample data roots

Usage:
    from langdata_compiler.testing import StaticToolRunner, create_data_root

    root = create_data_root(tmp_path / "en-US")
    runner = StaticToolRunner({"bldVendorV2": ToolResult(0, "", b"LEXI")})
    builder = LanguageDataBuilder(BuildConfig(data_root=root, tool_dir=tools), runner=runner)
"""

from langdata_compiler.testing.mock import (
    CallRecord,
    StaticToolRunner,
)

from langdata_compiler.testing.fixtures import (
    SAMPLE_PHONES,
    SAMPLE_POS,
    SAMPLE_SCHEMA_POS,
    SAMPLE_WORD_BREAKER_FILES,
    create_data_root,
    create_tool_dir,
    write_char_table,
    write_lexical_schema,
    write_phone_set,
    write_pos_set,
    write_syllabify_rules,
    write_truncate_rules,
    write_word_breaker_dir,
)

__all__ = [
    # Mock
    "CallRecord",
    "StaticToolRunner",
    # Fixtures
    "SAMPLE_PHONES",
    "SAMPLE_POS",
    "SAMPLE_SCHEMA_POS",
    "SAMPLE_WORD_BREAKER_FILES",
    "create_data_root",
    "create_tool_dir",
    "write_char_table",
    "write_lexical_schema",
    "write_phone_set",
    "write_pos_set",
    "write_syllabify_rules",
    "write_truncate_rules",
    "write_word_breaker_dir",
]
