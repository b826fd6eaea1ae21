"""
Tests for LanguageDataBuilder sessions.
"""

import dataclasses
import json

from langdata_compiler.builder import LanguageDataBuilder
from langdata_compiler.errors import DataCompilerError, Severity
from langdata_compiler.modules import MODULE_TOKENS, NECESSARY_MODULES
from langdata_compiler.testing import StaticToolRunner

BUILD_SET = [*NECESSARY_MODULES, "WordBreaker", "SyllabifyRule", "PosSet"]


def _events(log_stream):
    return [json.loads(line)["event"] for line in log_stream.getvalue().splitlines() if line]


class TestBuild:
    """Tests for single module builds."""

    def test_build_does_not_register(self, builder):
        result = builder.build("PhoneSet")

        assert result.ok
        assert "PhoneSet" not in builder.container

    def test_compile_and_register(self, builder):
        errors = builder.compile_and_register("PhoneSet")

        assert not errors.contains(Severity.MUST_FIX)
        assert builder.container.get("PhoneSet").data

    def test_failed_module_marked_absent(self, builder):
        builder.compile_and_register("SentenceDetector")

        module = builder.container.get("SentenceDetector")
        assert module is not None
        assert module.data is None

    def test_logs_compiled_module(self, builder, log_stream):
        builder.build("PhoneSet")

        record = json.loads(log_stream.getvalue().splitlines()[-1])
        assert record["event"] == "module_compiled"
        assert record["module"] == "PhoneSet"
        assert record["language"] == "en-US"

    def test_logs_failed_module(self, builder, log_stream):
        builder.build("SentenceDetector")

        assert "module_failed" in _events(log_stream)

    def test_format_token_override(self, config, runner, quiet_logger):
        fmt = "C4235FEF-CC38-4597-8928-ADD7CB186C79"
        config.format_tokens = {"WordBreaker": fmt}
        builder = LanguageDataBuilder(config, runner=runner, logger=quiet_logger)

        builder.compile_and_register("WordBreaker")

        assert str(builder.container.get("WordBreaker").format_token).upper() == fmt


class TestAdd:
    """Tests for registering prebuilt data."""

    def test_reserved_token(self, builder):
        errors = builder.add("Lexicon", b"prebuilt")

        assert len(errors) == 0
        assert str(builder.container.get("Lexicon").token).upper() == MODULE_TOKENS["Lexicon"].upper()

    def test_custom_module_needs_token(self, builder):
        errors = builder.add("MyModule", b"x")
        assert errors.kinds() == [DataCompilerError.INVALID_MODULE_DATA]

    def test_custom_token(self, builder):
        token = "12345678-1234-1234-1234-123456789abc"
        errors = builder.add("MyModule", b"x", token=token)

        assert len(errors) == 0
        assert str(builder.container.get("MyModule").token) == token


class TestBuildAll:
    """Tests for whole-session builds."""

    def test_builds_and_registers(self, builder):
        results = builder.build_all(BUILD_SET)

        assert set(results) == set(BUILD_SET)
        for name in BUILD_SET:
            assert results[name].ok, results[name].errors
            assert builder.container.get(name).data

    def test_parallel_matches_sequential(self, config, quiet_logger):
        sequential = LanguageDataBuilder(config, runner=StaticToolRunner(), logger=quiet_logger)
        parallel = LanguageDataBuilder(
            dataclasses.replace(config, max_workers=4), runner=StaticToolRunner(), logger=quiet_logger)

        sequential.build_all(BUILD_SET)
        parallel.build_all(list(reversed(BUILD_SET)))

        assert parallel.container.to_bytes() == sequential.container.to_bytes()

    def test_configured_modules(self, config, runner, quiet_logger):
        config.modules = ["PhoneSet", "CharTable"]
        builder = LanguageDataBuilder(config, runner=runner, logger=quiet_logger)

        results = builder.build_all()

        assert sorted(results) == ["CharTable", "PhoneSet"]

    def test_summary_logged(self, builder, log_stream):
        builder.build_all(["PhoneSet", "SentenceDetector"])

        record = json.loads(log_stream.getvalue().splitlines()[-1])
        assert record["event"] == "build_all_complete"
        assert record["failed"] == ["SentenceDetector"]


class TestCombine:
    """Tests for writing the session's container."""

    def test_auto_compiles_necessary_modules(self, builder, runner, tmp_path):
        output = tmp_path / "en-US.dat"

        errors = builder.combine(output)

        assert not errors.contains(Severity.MUST_FIX)
        assert errors.kinds().count(DataCompilerError.NECESSARY_DATA_MISSING) == len(NECESSARY_MODULES)
        for name in NECESSARY_MODULES:
            assert builder.container.get(name).data
        assert runner.last_call.tool == "bldVendorV2"
        assert output.read_bytes() == builder.container.to_bytes()

    def test_after_build_all(self, builder, tmp_path, log_stream):
        builder.build_all(BUILD_SET)
        output = tmp_path / "en-US.dat"

        errors = builder.combine(output)

        assert not errors.contains_kind(DataCompilerError.NECESSARY_DATA_MISSING)
        assert errors.count(Severity.INFO) == len(BUILD_SET)
        assert _events(log_stream)[-1] == "container_written"

    def test_prebuilt_domain_data(self, config, runner, quiet_logger, tmp_path):
        config.domain = "address"
        builder = LanguageDataBuilder(config, runner=runner, logger=quiet_logger)
        builder.add("PolyphoneRule", b"rule")

        errors = builder.combine(tmp_path / "address.dat")

        assert not errors.contains(Severity.WARNING)
        assert runner.call_count == 0

    def test_empty_domain(self, config, runner, quiet_logger, tmp_path):
        config.domain = "address"
        builder = LanguageDataBuilder(config, runner=runner, logger=quiet_logger)

        errors = builder.combine(tmp_path / "address.dat")

        assert errors.kinds() == [DataCompilerError.DOMAIN_DATA_MISSING]
        assert not (tmp_path / "address.dat").exists()
