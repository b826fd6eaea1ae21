"""
Language Data Compiler - Build pipeline for text-to-speech language data.

Architecture:
    Raw data → RawDataRegistry → ModuleDispatcher → compilers → DataContainer → file

Public API (stable):
    LanguageDataBuilder - One build session. Call .build_all() then .combine().
    BuildConfig         - Session settings, loaded from YAML or JSON.
    DataContainer       - Working set of compiled modules and the final file.
    ModuleDispatcher    - Builds one module by name.
    ErrorSet            - Severity-tagged errors returned by every step.

Packages:
    binary          - Writer, string pool, fixed records, trie dictionary
    rawdata         - Raw data registry, loaders and in-memory tables
    compilers       - One compiler per module, plus external tool recipes
    monitoring      - Structured logging
    adapters        - Command-line interface
    testing         - Canned tool runner and raw data fixtures

Example:
    from langdata_compiler import BuildConfig, LanguageDataBuilder, Language

    builder = LanguageDataBuilder(BuildConfig(data_root="data/en-US", language=Language.EN_US))
    builder.build_all(["PhoneSet", "PosTaggerPos", "CharTable"])
    errors = builder.combine("out/en-US.dat")
    print(errors)
"""

__version__ = "1.0.0"

from langdata_compiler.errors import (
    DataCompilerError,
    Error,
    ErrorKind,
    ErrorSet,
    Severity,
    LangDataError,
    InvalidDataError,
    FieldOverflowError,
    UnknownRawDataError,
)
from langdata_compiler.languages import Language
from langdata_compiler.modules import (
    MODULE_TOKENS,
    NECESSARY_MODULES,
    reserved_token,
)
from langdata_compiler.config import BuildConfig, load_config, save_config
from langdata_compiler.container import DataContainer, ModuleOutput
from langdata_compiler.dispatch import BuildResult, ModuleDispatcher, RECIPES
from langdata_compiler.builder import LanguageDataBuilder

__all__ = [
    "__version__",
    # Errors
    "DataCompilerError",
    "Error",
    "ErrorKind",
    "ErrorSet",
    "Severity",
    "LangDataError",
    "InvalidDataError",
    "FieldOverflowError",
    "UnknownRawDataError",
    # Modules
    "Language",
    "MODULE_TOKENS",
    "NECESSARY_MODULES",
    "reserved_token",
    # Build
    "BuildConfig",
    "load_config",
    "save_config",
    "DataContainer",
    "ModuleOutput",
    "BuildResult",
    "ModuleDispatcher",
    "RECIPES",
    "LanguageDataBuilder",
]
