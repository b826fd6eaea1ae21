"""
Language Data Builder - One build session: registry, dispatcher and container.

Usage:
    config = load_config("en-US.yaml")
    builder = LanguageDataBuilder(config)
    results = builder.build_all()
    errors = builder.combine("out/en-US.dat")
    if errors.contains(Severity.MUST_FIX):
        ...

Parallel builds:
    Modules are grouped into dependency levels. Each level is compiled on a
    thread pool and its results are registered in module-name order before
    the next level starts, so a module always sees the modules it needs.
    The container sorts by token, so the written file does not depend on
    completion order.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable

from langdata_compiler.compilers.external import ToolSetup
from langdata_compiler.config import BuildConfig
from langdata_compiler.container import DataContainer
from langdata_compiler.dispatch import (
    BuildResult,
    ModuleDispatcher,
    PhoneConverterFactory,
    dependency_levels,
)
from langdata_compiler.errors import ErrorSet, Severity
from langdata_compiler.modules import NECESSARY_MODULES, reserved_token
from langdata_compiler.monitoring.logging import StructuredLogger, get_logger, log_error_set
from langdata_compiler.rawdata.registry import RawDataRegistry
from langdata_compiler.tools import SubprocessToolRunner, ToolRunner


class LanguageDataBuilder:
    """
    Build session for one language.

    Args:
        config: Build settings.
        runner: External tool runner; defaults to a subprocess runner
            with the configured timeout.
        container: Working set to build into; a fresh one by default.
        phone_converter_factory: Passed to the dispatcher for phone events.
        logger: Structured logger; defaults to the global one.
    """

    def __init__(
        self,
        config: BuildConfig | None = None,
        runner: ToolRunner | None = None,
        container: DataContainer | None = None,
        phone_converter_factory: PhoneConverterFactory | None = None,
        logger: StructuredLogger | None = None,
    ):
        self.config = config or BuildConfig()
        self.logger = (logger or get_logger()).bind(language=self.config.language.code)

        self.registry = RawDataRegistry(self.config.language)
        self.setup_errors = self.registry.prepare_data_path(self.config.data_root, self.config.raw_data)

        self.tools = ToolSetup(
            runner=runner or SubprocessToolRunner(timeout=self.config.tool_timeout),
            tool_dir=self.config.tool_dir,
            tool_names=dict(self.config.tool_names),
        )

        self.container = container or DataContainer(self.config.language)
        self.container.builder = self.compile_and_register

        self.dispatcher = ModuleDispatcher(
            self.registry,
            tools=self.tools,
            lookup=self.container.get,
            phone_converter_factory=phone_converter_factory,
        )

    def module_names(self) -> list[str]:
        """Modules this session builds by default."""
        return list(self.config.modules) or self.dispatcher.names()

    def format_token(self, module_name: str) -> str | None:
        return self.config.format_tokens.get(module_name)

    # =========================================================================
    # Single module
    # =========================================================================

    def build(self, module_name: str, validate: bool | None = None) -> BuildResult:
        """Compile one module without registering it."""
        validate = self.config.validate if validate is None else validate
        start = time.perf_counter()
        result = self.dispatcher.build(module_name, validate, self.format_token(module_name))
        duration_ms = (time.perf_counter() - start) * 1000

        log_error_set(self.logger, result.errors, module=module_name)
        if result.ok:
            self.logger.module_compiled(module_name, len(result.data), duration_ms)
        else:
            self.logger.module_failed(module_name, result.errors)
        return result

    def register(self, result: BuildResult) -> ErrorSet:
        """Put a build result into the working set."""
        token = reserved_token(result.module_name)
        format_token = self.format_token(result.module_name) or ""
        if result.ok:
            return self.container.register(result.module_name, result.data, token, format_token)
        return self.container.mark_absent(result.module_name, token, format_token)

    def compile_and_register(self, module_name: str, validate: bool | None = None) -> ErrorSet:
        """Compile ``module_name`` and register the outcome."""
        result = self.build(module_name, validate)
        errors = ErrorSet().merge(result.errors)
        errors.merge(self.register(result))
        return errors

    def add(
        self,
        module_name: str,
        data: bytes,
        token: str | None = None,
        format_token: str | None = None,
    ) -> ErrorSet:
        """Register prebuilt bytes; the token defaults to the module's reserved one."""
        token = token or reserved_token(module_name)
        format_token = format_token or self.format_token(module_name) or ""
        return self.container.register(module_name, data, token, format_token)

    # =========================================================================
    # Whole session
    # =========================================================================

    def build_all(
        self,
        names: Iterable[str] | None = None,
        validate: bool | None = None,
    ) -> dict[str, BuildResult]:
        """Compile and register modules level by level.

        Returns:
            Build result per module name.
        """
        names = list(names) if names is not None else self.module_names()
        results: dict[str, BuildResult] = {}
        workers = max(1, self.config.max_workers)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            for level in dependency_levels(names, self.dispatcher.recipes):
                if workers == 1:
                    level_results = [self.build(name, validate) for name in level]
                else:
                    level_results = list(pool.map(lambda name: self.build(name, validate), level))

                for result in sorted(level_results, key=lambda r: r.module_name):
                    result.errors.merge(self.register(result))
                    results[result.module_name] = result

        failed = [name for name, result in results.items() if not result.ok]
        self.logger.info(
            "build_all_complete",
            f"Built {len(results) - len(failed)} of {len(results)} modules",
            failed=failed,
        )
        return results

    def combine(
        self,
        output_path: str | Path,
        necessary_modules: Iterable[str] = NECESSARY_MODULES,
        validate: bool | None = None,
    ) -> ErrorSet:
        """Write the container of the working set."""
        validate = self.config.validate if validate is None else validate
        errors = self.container.combine(output_path, necessary_modules, self.config.domain, validate)
        path = Path(output_path)
        if errors.contains(Severity.MUST_FIX) or not path.is_file():
            log_error_set(self.logger, errors)
        else:
            self.logger.container_written(
                str(path), len(self.container.sorted_modules()), path.stat().st_size)
        return errors
