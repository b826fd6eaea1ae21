"""
Module Compiler Dispatch - Module name to compile recipe.

A Recipe names what a module needs (loaded raw objects, raw paths,
configuration values, other compiled modules) and the function that turns
them into bytes. The dispatcher resolves those inputs through the raw data
registry, folds dependency failures into the module's ErrorSet, runs an
optional content validator and finally the compiler.

Usage:
    dispatcher = ModuleDispatcher(registry, tools=ToolSetup(tool_dir="/opt/tts/tools"))
    result = dispatcher.build("PhoneSet")
    if result.ok:
        container.register("PhoneSet", result.data, MODULE_TOKENS["PhoneSet"])

Layout of a build:
    1. unknown module          -> INVALID_MODULE_DATA
    2. raw data dependencies   -> DEPENDENCIES_NOT_VALID + compiling logs
    3. module dependencies     -> working set, or a nested build
    4. content validator       -> MUST_FIX downgraded unless validating
    5. compiler                -> bytes and errors
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Protocol

from langdata_compiler import compilers
from langdata_compiler.compilers import external
from langdata_compiler.compilers.external import ToolSetup
from langdata_compiler.compilers.phoneevent import PhoneConverter
from langdata_compiler.errors import (
    DataCompilerError,
    ErrorSet,
    InvalidDataError,
    Severity,
    merge_as_logs,
    merge_dependency_errors,
)
from langdata_compiler.languages import Language
from langdata_compiler.rawdata.registry import RawDataRegistry
from langdata_compiler.tools import default_tool_dir

logger = logging.getLogger(__name__)

PHONE_MAPPING_NOT_COMPILED = "Please make sure that PhoneMappingRule has been compiled before PhoneEvent"

PhoneConverterFactory = Callable[[Language, bytes], "PhoneConverter | None"]


class CompiledModule(Protocol):
    """What the dispatcher needs from a working-set entry."""

    data: bytes | None


WorkingSetLookup = Callable[[str], "CompiledModule | None"]


@dataclass
class BuildResult:
    """Outcome of building one module.

    Attributes:
        module_name: Module that was built.
        data: Compiled bytes; empty on failure.
        errors: Everything reported while building.
    """

    module_name: str
    data: bytes = b""
    errors: ErrorSet = field(default_factory=ErrorSet)

    @property
    def ok(self) -> bool:
        return not self.errors.contains(Severity.MUST_FIX)


@dataclass
class CompileContext:
    """Inputs handed to a recipe's compile and validator functions."""

    module_name: str
    registry: RawDataRegistry
    tools: ToolSetup
    validate: bool = False
    format_token: str | None = None
    objects: dict[str, Any] = field(default_factory=dict)
    module_data: dict[str, bytes] = field(default_factory=dict)
    added_files: list[str] = field(default_factory=list)
    phone_converter_factory: PhoneConverterFactory | None = None

    @property
    def language(self) -> Language:
        return self.registry.language

    @property
    def data_root(self) -> Path | None:
        return self.registry.data_root

    def obj(self, name: str) -> Any:
        return self.objects[name]

    def path(self, name: str) -> Path | None:
        return self.registry.path_of(name)


CompileFn = Callable[[CompileContext], "tuple[bytes, ErrorSet]"]
ValidatorFn = Callable[[CompileContext], ErrorSet]


@dataclass(frozen=True)
class Recipe:
    """How one module is built.

    Attributes:
        compile_fn: Produces ``(bytes, errors)`` from a CompileContext.
        raw_data: Raw sources loaded through the registry before compiling.
        paths: Raw sources only located; the compiler reads them itself.
        configs: Configuration-string raw sources.
        modules: Compiled modules this one needs.
        optional_modules: Compiled modules used when their raw data exists.
        validator_fn: Content check run before compiling.
        report_type: Name used when reporting consumed files.
    """

    compile_fn: CompileFn
    raw_data: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()
    configs: tuple[str, ...] = ()
    modules: tuple[str, ...] = ()
    optional_modules: tuple[str, ...] = ()
    validator_fn: ValidatorFn | None = None
    report_type: str | None = None

    @property
    def module_dependencies(self) -> tuple[str, ...]:
        return self.modules + self.optional_modules


# =============================================================================
# Compile functions
# =============================================================================

def _phone_set(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_phone_set(ctx.obj("PhoneSet"))


def _backend_phone_set(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_phone_set(ctx.obj("BackendPhoneSet"))


def _pos_set(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_pos_set(ctx.obj("PosSet"))


def _pos_tagger_pos(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_pos_tagger_pos(ctx.obj("LexicalAttributeSchema"))


def _lexicon(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return external.compile_lexicon(
        ctx.tools, ctx.language, ctx.path("LexicalAttributeSchema"), ctx.path("Lexicon"))


def _char_table(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_char_table(ctx.obj("CharTable"), ctx.obj("PhoneSet"))


def _validate_char_table(ctx: CompileContext) -> ErrorSet:
    return compilers.validate_char_table(ctx.obj("CharTable"), ctx.obj("PhoneSet"))


def _sentence_separator(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_sentence_separator(
        ctx.path("SentenceSeparatorDataPath"), ctx.added_files)


def _word_breaker(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_word_breaker(
        ctx.path("WordBreakerDataPath"), ctx.format_token, ctx.added_files)


def _post_word_breaker(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_post_word_breaker(ctx.path("PostWordBreaker"))


def _chinese_tone(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_chinese_tone(ctx.path("ChineseTone"))


def _crf_models(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_crf_models(ctx.path(ctx.module_name), ctx.language, ctx.added_files)


def _rnn_polyphony(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_rnn_polyphony(ctx.path("RNNPolyphonyModel"), ctx.added_files)


def _syllabify_rule(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_syllabify_rule(ctx.path("SyllabifyRule"), ctx.obj("PhoneSet"))


def _unit_generator(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_unit_generator(ctx.path("TruncateRule"), ctx.obj("PhoneSet"))


def _polyphone_rule(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return external.compile_general_rule(ctx.tools, ctx.path("PolyphoneRule"))


def _validate_polyphone_rule(ctx: CompileContext) -> ErrorSet:
    return compilers.validate_polyphony_rule(ctx.path("PolyphoneRule"), ctx.obj("PhoneSet"))


def _boundary_pron_change_rule(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return external.compile_general_rule(ctx.tools, ctx.path("BoundaryPronChangeRule"))


def _sentence_detector(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    rule_path = ctx.path("SentenceDetectRule")
    duplicates = compilers.duplicate_rule_keys(rule_path)
    if duplicates:
        errors = ErrorSet()
        for key in duplicates:
            errors.add(DataCompilerError.DUPLICATE_ITEM_KEY, key)
        return b"", errors
    return external.compile_general_rule(ctx.tools, rule_path)


def _quotation_mark_table(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_quotation_mark(ctx.obj("QuotationMarkTable"))


def _parallel_struct_table(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    pos_set = ctx.obj("LexicalAttributeSchema").pos_tagging_set()
    return compilers.compile_parallel_struct(ctx.obj("ParallelStructTable"), pos_set)


def _word_feature_suffix_table(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_word_feature_suffix(ctx.obj("WordFeatureSuffixTable"))


def _lts_rule(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return external.compile_lts_rule(ctx.tools, ctx.path("LtsRuleDataPath"))


def _phone_event(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    converter = None
    mapping = ctx.module_data.get("PhoneMappingRule")
    if mapping is not None and ctx.phone_converter_factory is not None:
        converter = ctx.phone_converter_factory(ctx.language, mapping)
    elif mapping is not None:
        logger.debug("No phone converter factory; phone events carry no visemes")
    return compilers.compile_phone_event(ctx.obj("PhoneSet"), converter)


def _pos_rule(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    pos_set = ctx.obj("LexicalAttributeSchema").pos_tagging_set()
    return external.compile_pos_rule(
        ctx.tools, ctx.path("PosLexicalRule"), ctx.path("PosContextualRule"), pos_set)


def _tn_rule(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return external.compile_tnml(
        ctx.tools, ctx.language, ctx.path("TnRule"), ctx.path("LexicalAttributeSchema"), tn_mode=True)


def _fst_ne_rule(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return external.compile_fst_ne(ctx.tools, ctx.language, ctx.path("FstNERule"))


def _tnml_rule(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return external.compile_tnml(
        ctx.tools, ctx.language, ctx.path(ctx.module_name), ctx.path("LexicalAttributeSchema"))


def _validate_compound_rule(ctx: CompileContext) -> ErrorSet:
    return compilers.validate_compound_rule(ctx.path("CompoundRule"), ctx.obj("PhoneSet"))


def _foreign_lts_collection(ctx: CompileContext) -> tuple[bytes, ErrorSet]:
    return compilers.compile_foreign_lts_collection(
        ctx.registry.value_of("ForeignLtsCollection"), ctx.data_root)


# =============================================================================
# Recipe table
# =============================================================================

RECIPES: dict[str, Recipe] = {
    "PhoneSet": Recipe(_phone_set, raw_data=("PhoneSet",)),
    "BackendPhoneSet": Recipe(_backend_phone_set, raw_data=("BackendPhoneSet",)),
    "PosSet": Recipe(_pos_set, raw_data=("PosSet",)),
    "PosTaggerPos": Recipe(_pos_tagger_pos, raw_data=("LexicalAttributeSchema",)),
    "Lexicon": Recipe(
        _lexicon,
        raw_data=("LexicalAttributeSchema", "PhoneSet"),
        paths=("Lexicon",),
    ),
    "CharTable": Recipe(
        _char_table,
        raw_data=("CharTable", "PhoneSet"),
        validator_fn=_validate_char_table,
    ),
    "SentenceSeparator": Recipe(
        _sentence_separator,
        paths=("SentenceSeparatorDataPath",),
        report_type="sentence separator",
    ),
    "WordBreaker": Recipe(
        _word_breaker,
        paths=("WordBreakerDataPath",),
        report_type="word breaker",
    ),
    "PostWordBreaker": Recipe(_post_word_breaker, paths=("PostWordBreaker",)),
    "ChineseTone": Recipe(_chinese_tone, paths=("ChineseTone",)),
    "AcronymDisambiguation": Recipe(
        _crf_models, paths=("AcronymDisambiguation",), report_type="AcronymDisambiguation"),
    "NEDisambiguation": Recipe(
        _crf_models, paths=("NEDisambiguation",), report_type="NEDisambiguation"),
    "PolyphonyModel": Recipe(
        _crf_models, paths=("PolyphonyModel",), report_type="PolyphonyModel"),
    "RNNPolyphonyModel": Recipe(
        _rnn_polyphony, paths=("RNNPolyphonyModel",), report_type="PolyphonyModel"),
    "SyllabifyRule": Recipe(_syllabify_rule, raw_data=("PhoneSet",), paths=("SyllabifyRule",)),
    "UnitGenerator": Recipe(_unit_generator, raw_data=("PhoneSet",), paths=("TruncateRule",)),
    "PolyphoneRule": Recipe(
        _polyphone_rule,
        raw_data=("PhoneSet",),
        paths=("PolyphoneRule",),
        validator_fn=_validate_polyphone_rule,
    ),
    "BoundaryPronChangeRule": Recipe(
        _boundary_pron_change_rule, paths=("BoundaryPronChangeRule",)),
    "SentenceDetector": Recipe(_sentence_detector, paths=("SentenceDetectRule",)),
    "QuotationMarkTable": Recipe(_quotation_mark_table, raw_data=("QuotationMarkTable",)),
    "ParallelStructTable": Recipe(
        _parallel_struct_table, raw_data=("ParallelStructTable", "LexicalAttributeSchema")),
    "WordFeatureSuffixTable": Recipe(
        _word_feature_suffix_table, raw_data=("WordFeatureSuffixTable", "LexicalAttributeSchema")),
    "LtsRule": Recipe(_lts_rule, paths=("LtsRuleDataPath",)),
    "PhoneEventData": Recipe(
        _phone_event, raw_data=("PhoneSet",), optional_modules=("PhoneMappingRule",)),
    "PosRule": Recipe(
        _pos_rule,
        raw_data=("LexicalAttributeSchema",),
        paths=("PosLexicalRule", "PosContextualRule"),
    ),
    "TnRule": Recipe(_tn_rule, paths=("TnRule",)),
    "FstNERule": Recipe(_fst_ne_rule, paths=("FstNERule",)),
    "CompoundRule": Recipe(
        _tnml_rule,
        raw_data=("PhoneSet",),
        paths=("CompoundRule",),
        validator_fn=_validate_compound_rule,
    ),
    "PhoneMappingRule": Recipe(_tnml_rule, paths=("PhoneMappingRule",)),
    "BackendPhoneMappingRule": Recipe(_tnml_rule, paths=("BackendPhoneMappingRule",)),
    "FrontendBackendPhoneMappingRule": Recipe(
        _tnml_rule, paths=("FrontendBackendPhoneMappingRule",)),
    "MixLingualPOSConverterData": Recipe(_tnml_rule, paths=("MixLingualPOSConverterData",)),
    "ForeignLtsCollection": Recipe(_foreign_lts_collection, configs=("ForeignLtsCollection",)),
}


def dependency_levels(
    names: Iterable[str],
    recipes: Mapping[str, Recipe] | None = None,
) -> list[list[str]]:
    """Group ``names`` so every module comes after the modules it needs.

    Only dependencies that are themselves in ``names`` count. Names inside
    a level are sorted.
    """
    recipes = RECIPES if recipes is None else recipes
    wanted = list(dict.fromkeys(names))
    levels: dict[str, int] = {}

    def level_of(name: str, trail: tuple[str, ...] = ()) -> int:
        if name in levels:
            return levels[name]
        recipe = recipes.get(name)
        level = 0
        if recipe is not None:
            for dep in recipe.module_dependencies:
                if dep in wanted and dep not in trail:
                    level = max(level, level_of(dep, trail + (name,)) + 1)
        levels[name] = level
        return level

    grouped: dict[int, list[str]] = {}
    for name in wanted:
        grouped.setdefault(level_of(name), []).append(name)
    return [sorted(grouped[level]) for level in sorted(grouped)]


def dependency_order(names: Iterable[str], recipes: Mapping[str, Recipe] | None = None) -> list[str]:
    """Flat topological order of ``names``."""
    return [name for level in dependency_levels(names, recipes) for name in level]


def report_compiled_files(report_type: str, files: list[str]) -> ErrorSet:
    """Compiling log entry listing the files a multi-file compiler consumed."""
    errors = ErrorSet()
    if files:
        listing = "\n\t".join(files)
        text = f"\nThe following {report_type} files are compiled to binary:\n\t{listing}"
        errors.add(DataCompilerError.COMPILING_LOG_WITH_DATA_NAME, report_type, text)
    return errors


# =============================================================================
# Dispatcher
# =============================================================================

class ModuleDispatcher:
    """
    Builds modules by name from the raw data of one registry.

    Args:
        registry: Raw data of the session.
        tools: External tool setup; defaults to ``LANGDATA_TOOL_DIR``.
        lookup: Returns the working-set entry of a module, or None.
        phone_converter_factory: Builds a PhoneConverter from compiled
            PhoneMappingRule bytes; without one phone events carry no
            visemes or SAPI ids.
        recipes: Recipe table override.
    """

    def __init__(
        self,
        registry: RawDataRegistry,
        tools: ToolSetup | None = None,
        lookup: WorkingSetLookup | None = None,
        phone_converter_factory: PhoneConverterFactory | None = None,
        recipes: Mapping[str, Recipe] | None = None,
    ):
        self.registry = registry
        self.tools = tools or ToolSetup(tool_dir=default_tool_dir())
        self.lookup = lookup
        self.phone_converter_factory = phone_converter_factory
        self.recipes = dict(RECIPES if recipes is None else recipes)

    def names(self) -> list[str]:
        return list(self.recipes)

    def recipe(self, module_name: str) -> Recipe | None:
        return self.recipes.get(module_name)

    def build(
        self,
        module_name: str,
        validate: bool = False,
        format_token: str | None = None,
    ) -> BuildResult:
        """Compile one module.

        Args:
            module_name: Module to build.
            validate: Keep MUST_FIX findings of content validators; when
                False they are downgraded to warnings.
            format_token: Payload format, for modules that have several.

        Returns:
            BuildResult; ``data`` is empty when the build failed.
        """
        result = BuildResult(module_name)
        recipe = self.recipes.get(module_name)
        if recipe is None:
            result.errors.add(DataCompilerError.INVALID_MODULE_DATA, module_name)
            return result

        ctx = CompileContext(
            module_name=module_name,
            registry=self.registry,
            tools=self.tools,
            validate=validate,
            format_token=format_token,
            phone_converter_factory=self.phone_converter_factory,
        )
        try:
            data = self._run(recipe, ctx, result.errors)
        except (FileNotFoundError, ET.ParseError, InvalidDataError) as e:
            logger.debug("Building %s failed: %s", module_name, e)
            result.errors.add(DataCompilerError.RAW_DATA_NOT_FOUND, module_name, str(e))
            return result

        if result.errors.contains(Severity.MUST_FIX):
            return result

        result.data = data
        if recipe.report_type:
            result.errors.merge(report_compiled_files(recipe.report_type, ctx.added_files))
        return result

    def _run(self, recipe: Recipe, ctx: CompileContext, errors: ErrorSet) -> bytes:
        self._resolve_inputs(recipe, ctx, errors)
        if errors.contains(Severity.MUST_FIX):
            return b""

        self._resolve_modules(recipe, ctx, errors)
        if errors.contains(Severity.MUST_FIX):
            return b""

        if recipe.validator_fn is not None:
            found = recipe.validator_fn(ctx)
            if not ctx.validate:
                found = found.downgrade()
            merge_as_logs(errors, found, ctx.module_name)
            if errors.contains(Severity.MUST_FIX):
                return b""

        data, compile_errors = recipe.compile_fn(ctx)
        errors.merge(compile_errors)
        return data

    def _resolve_inputs(self, recipe: Recipe, ctx: CompileContext, errors: ErrorSet) -> None:
        for name in recipe.raw_data:
            obj, sub_errors = self.registry.get(name)
            merge_dependency_errors(errors, sub_errors, name)
            if obj is not None:
                ctx.objects[name] = obj

        for name in recipe.paths:
            if self.registry.path_of(name) is None:
                errors.add(DataCompilerError.PATH_NOT_INITIALIZED, name)

        for name in recipe.configs:
            if not self.registry.value_of(name):
                errors.add(DataCompilerError.PATH_NOT_INITIALIZED, name)

    def _resolve_modules(self, recipe: Recipe, ctx: CompileContext, errors: ErrorSet) -> None:
        for name in recipe.modules:
            self._resolve_module(name, ctx, errors)

        for name in recipe.optional_modules:
            path = self.registry.path_of(name)
            if self._in_working_set(name) or (path is not None and path.exists()):
                self._resolve_module(name, ctx, errors)

    def _in_working_set(self, name: str) -> bool:
        return self.lookup is not None and self.lookup(name) is not None

    def _resolve_module(self, name: str, ctx: CompileContext, errors: ErrorSet) -> None:
        entry = self.lookup(name) if self.lookup is not None else None
        if entry is not None:
            if entry.data is None:
                errors.add(DataCompilerError.DEPENDENCIES_NOT_VALID, _not_compiled_message(name))
            else:
                ctx.module_data[name] = entry.data
            return

        logger.debug("Building dependency %s of %s", name, ctx.module_name)
        sub = self.build(name, validate=ctx.validate)
        merge_dependency_errors(errors, sub.errors, name)
        if sub.ok:
            ctx.module_data[name] = sub.data


def _not_compiled_message(name: str) -> str:
    if name == "PhoneMappingRule":
        return PHONE_MAPPING_NOT_COMPILED
    return name
