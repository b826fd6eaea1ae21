"""
Raw Data Registry - Name to raw source lookup with lazy, attempt-once loading.

Each known raw source is a RawDataDescriptor. The registry resolves
descriptor paths against a data root, applies per-name overrides, renders
language-templated paths and loads each source on first access. A load is
attempted exactly once per session: a source that failed stays failed and
later accesses report RAW_DATA_ERROR without touching the file system.

Usage:
    registry = RawDataRegistry(Language.EN_US)
    errors = registry.prepare_data_path("/data/en-US", {"PhoneSet": "/tmp/ps.xml"})
    phone_set, errors = registry.get("PhoneSet")
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Iterable, Mapping

from langdata_compiler.errors import (
    DataCompilerError,
    ErrorSet,
    Severity,
    UnknownRawDataError,
)
from langdata_compiler.languages import Language
from langdata_compiler.monitoring.logging import get_logger
from langdata_compiler.rawdata.descriptors import (
    RawDataDescriptor,
    RawDataKind,
    default_descriptors,
)

logger = logging.getLogger(__name__)


class RawDataRegistry:
    """
    Registry of raw sources for one build session.

    The load path is guarded by a lock so concurrent module compiles may
    request the same source; the first caller loads it, the others wait
    and see the cached outcome.
    """

    def __init__(
        self,
        language: Language = Language.NEUTRAL,
        descriptors: Iterable[RawDataDescriptor] | None = None,
    ):
        self.language = language
        self.data_root: Path | None = None
        self._descriptors: dict[str, RawDataDescriptor] = {}
        self._lock = threading.RLock()

        for descriptor in descriptors if descriptors is not None else default_descriptors(language):
            self.register(descriptor)

    # =========================================================================
    # Registration and paths
    # =========================================================================

    def register(self, descriptor: RawDataDescriptor) -> None:
        """Add or replace a descriptor under its name."""
        with self._lock:
            self._descriptors[descriptor.name] = descriptor

    def names(self) -> list[str]:
        return list(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._find(name) is not None

    def descriptor(self, name: str) -> RawDataDescriptor | None:
        return self._find(name)

    def _find(self, name: str) -> RawDataDescriptor | None:
        if name in self._descriptors:
            return self._descriptors[name]
        lowered = name.lower()
        for key, descriptor in self._descriptors.items():
            if key.lower() == lowered:
                return descriptor
        return None

    def set_data_root(self, root: str | Path) -> None:
        """Resolve every unset path below ``root``."""
        with self._lock:
            self.data_root = Path(root)
            for descriptor in self._descriptors.values():
                if descriptor.path is None and descriptor.relative_path:
                    descriptor.path = self.data_root / descriptor.relative_path
                    descriptor.path_from_root = True

    def set_raw_data_path(self, name: str, path: str | Path) -> ErrorSet:
        """Override the location (or configuration value) of one raw source.

        The override survives later ``set_data_root`` and ``set_language``
        calls. An unknown name is reported as INVALID_RAW_DATA.
        """
        errors = ErrorSet()
        with self._lock:
            descriptor = self._find(name)
            if descriptor is None:
                errors.add(DataCompilerError.INVALID_RAW_DATA, name)
                return errors

            descriptor.relative_path = ""
            descriptor.path_from_root = False
            descriptor.reset()
            if descriptor.kind is RawDataKind.CONFIG:
                descriptor.value = str(path)
            else:
                descriptor.path = Path(path) if str(path) else None
        return errors

    def prepare_data_path(
        self,
        root: str | Path | None,
        overrides: Mapping[str, str | Path] | None = None,
    ) -> ErrorSet:
        """Resolve paths under ``root`` then apply non-empty overrides."""
        errors = ErrorSet()
        if root:
            self.set_data_root(root)
        for name, value in (overrides or {}).items():
            if value is None or not str(value):
                continue
            result = self.set_raw_data_path(name, value)
            if result.contains(Severity.WARNING):
                logger.warning("Ignoring path override for unknown raw data %s", name)
            errors.merge(result)
        return errors

    def set_language(self, language: Language) -> None:
        """Switch language and re-render language-templated paths."""
        with self._lock:
            self.language = language
            for descriptor in self._descriptors.values():
                descriptor.language = language
                if not descriptor.relative_path or not descriptor.templated:
                    continue
                descriptor.relative_path = descriptor.render(language)
                if descriptor.path_from_root and self.data_root is not None:
                    descriptor.path = self.data_root / descriptor.relative_path
                    descriptor.reset()

    def path_of(self, name: str) -> Path | None:
        descriptor = self._find(name)
        return descriptor.path if descriptor is not None else None

    def value_of(self, name: str) -> str:
        """Configuration value of a CONFIG raw source."""
        descriptor = self._find(name)
        return descriptor.value if descriptor is not None else ""

    # =========================================================================
    # Objects
    # =========================================================================

    def set_object(self, name: str, obj: Any) -> None:
        """Inject an already loaded object.

        Raises:
            UnknownRawDataError: If ``name`` is not registered.
        """
        with self._lock:
            descriptor = self._find(name)
            if descriptor is None:
                raise UnknownRawDataError(name)
            descriptor.obj = obj
            descriptor.load_attempted = True

    def get(self, name: str) -> tuple[Any, ErrorSet]:
        """Object of a raw source, loading it on first access.

        Returns:
            ``(object, errors)``; object is None when loading failed.
        """
        errors = ErrorSet()
        descriptor = self._find(name)
        if descriptor is None:
            errors.add(DataCompilerError.INVALID_MODULE_DATA, name)
            return None, errors

        with self._lock:
            if descriptor.obj is not None:
                return descriptor.obj, errors

            if descriptor.load_attempted:
                errors.add(DataCompilerError.RAW_DATA_ERROR, descriptor.name)
                return None, errors

            descriptor.load_attempted = True
            obj = self._load(descriptor, errors)
            if obj is not None and not errors.contains(Severity.MUST_FIX):
                descriptor.obj = obj
            return descriptor.obj, errors

    def _load(self, descriptor: RawDataDescriptor, errors: ErrorSet) -> Any:
        if descriptor.kind is RawDataKind.CONFIG:
            if not descriptor.value:
                errors.add(DataCompilerError.PATH_NOT_INITIALIZED, descriptor.name)
                return None
            return descriptor.value

        if descriptor.path is None or not str(descriptor.path):
            errors.add(DataCompilerError.PATH_NOT_INITIALIZED, descriptor.name)
            return None

        if not descriptor.path.exists():
            errors.add(DataCompilerError.RAW_DATA_NOT_FOUND, descriptor.name, str(descriptor.path))
            return None

        obj, load_errors = descriptor.loader(descriptor.path, descriptor.language)
        errors.merge(load_errors)
        logger.debug("Loaded raw data %s from %s", descriptor.name, descriptor.path)
        get_logger().raw_data_loaded(descriptor.name, str(descriptor.path))
        return obj

    def reset(self) -> None:
        """Forget every cached object and load attempt."""
        with self._lock:
            for descriptor in self._descriptors.values():
                descriptor.reset()
