"""
Binary Container - Working set of compiled modules and the final data file.

Modules are registered under their name with a 128-bit token and a format
token. ``combine`` writes every registered module into one tagged file:

    u32 version = 1
    u32 build = 0
    u32 language_id
    per module, sorted by canonical token string:
        16 bytes token         (GUID mixed-endian)
        16 bytes format token
        u32 length
        payload

Example:
    container = DataContainer(Language.EN_US)
    container.register("PhoneSet", data, MODULE_TOKENS["PhoneSet"])
    errors = container.combine("out/en-US.dat")
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from langdata_compiler.binary import BinaryWriter
from langdata_compiler.errors import DataCompilerError, ErrorSet, Severity
from langdata_compiler.languages import Language
from langdata_compiler.modules import (
    GENERAL_DOMAIN,
    NECESSARY_MODULES,
    canonical_token,
    default_format_token,
    parse_token,
)

logger = logging.getLogger(__name__)

CONTAINER_VERSION = 1
CONTAINER_BUILD = 0

SESSION_FILE = "session.json"

# Compiles and registers one module: (module_name, validate) -> errors.
ModuleBuilder = Callable[[str, bool], ErrorSet]


@dataclass
class ModuleOutput:
    """One working-set entry; ``data`` is None for a module that failed to compile."""

    module_name: str
    token: uuid.UUID
    format_token: uuid.UUID
    data: bytes | None = None

    @property
    def sort_key(self) -> str:
        return canonical_token(self.token).lower()


class DataContainer:
    """
    Working set of compiled modules for one language.

    Registration and combining are guarded by a lock so that parallel
    module builds can register their results directly.

    Args:
        language: Language written into the file header.
        builder: Callback used by ``combine`` to compile missing
            necessary modules.
    """

    def __init__(self, language: Language = Language.NEUTRAL, builder: ModuleBuilder | None = None):
        self.language = language
        self.builder = builder
        self._modules: dict[str, ModuleOutput] = {}
        self._lock = threading.RLock()

    # =========================================================================
    # Working set
    # =========================================================================

    def register(
        self,
        module_name: str,
        data: bytes | None,
        token: str | uuid.UUID | None,
        format_token: str | uuid.UUID | None = "",
    ) -> ErrorSet:
        """Add compiled bytes to the working set.

        Empty data is reported as ZERO_MODULE_DATA and not registered.
        An empty format token falls back to the module's default one.
        """
        errors = ErrorSet()
        if not data:
            errors.add(DataCompilerError.ZERO_MODULE_DATA, module_name)

        parsed = self._parse_tokens(module_name, token, format_token, errors)
        if errors or parsed is None:
            return errors

        self._put(ModuleOutput(module_name, parsed[0], parsed[1], bytes(data)))
        return errors

    def mark_absent(
        self,
        module_name: str,
        token: str | uuid.UUID | None,
        format_token: str | uuid.UUID | None = "",
    ) -> ErrorSet:
        """Record a module whose compile failed; it is never written."""
        errors = ErrorSet()
        parsed = self._parse_tokens(module_name, token, format_token, errors)
        if parsed is not None and not errors:
            self._put(ModuleOutput(module_name, parsed[0], parsed[1], None))
        return errors

    def _parse_tokens(
        self,
        module_name: str,
        token: str | uuid.UUID | None,
        format_token: str | uuid.UUID | None,
        errors: ErrorSet,
    ) -> tuple[uuid.UUID, uuid.UUID] | None:
        if not token:
            errors.add(DataCompilerError.INVALID_MODULE_DATA, module_name)
            return None

        current = token
        try:
            parsed_token = parse_token(current)
            current = format_token or default_format_token(module_name) or parsed_token
            parsed_format = parse_token(current)
        except ValueError as e:
            errors.add(DataCompilerError.INVALID_GUID_STRING, module_name, str(current), str(e))
            return None
        return parsed_token, parsed_format

    def _put(self, output: ModuleOutput) -> None:
        with self._lock:
            for name, existing in list(self._modules.items()):
                if name != output.module_name and existing.token == output.token:
                    logger.debug("Token %s moves from %s to %s", output.token, name, output.module_name)
                    del self._modules[name]
            self._modules[output.module_name] = output

    def get(self, module_name: str) -> ModuleOutput | None:
        with self._lock:
            return self._modules.get(module_name)

    def remove(self, module_name: str) -> bool:
        with self._lock:
            return self._modules.pop(module_name, None) is not None

    def modules(self) -> list[ModuleOutput]:
        """Working-set entries in registration order."""
        with self._lock:
            return list(self._modules.values())

    def __contains__(self, module_name: object) -> bool:
        with self._lock:
            return module_name in self._modules

    def __len__(self) -> int:
        with self._lock:
            return len(self._modules)

    # =========================================================================
    # Output
    # =========================================================================

    def sorted_modules(self) -> list[ModuleOutput]:
        """Entries with data, in container order."""
        with self._lock:
            present = [m for m in self._modules.values() if m.data is not None]
        return sorted(present, key=lambda m: m.sort_key)

    def to_bytes(self) -> bytes:
        """Serialized container of the current working set."""
        writer = BinaryWriter()
        writer.write_u32(CONTAINER_VERSION)
        writer.write_u32(CONTAINER_BUILD)
        writer.write_u32(self.language.lcid)
        for module in self.sorted_modules():
            writer.write_bytes(module.token.bytes_le)
            writer.write_bytes(module.format_token.bytes_le)
            writer.write_u32(len(module.data))
            writer.write_bytes(module.data)
        return writer.getvalue()

    def combine(
        self,
        output_path: str | Path,
        necessary_modules: Iterable[str] = NECESSARY_MODULES,
        domain: str = GENERAL_DOMAIN,
        validate: bool = False,
    ) -> ErrorSet:
        """Write the container file.

        Args:
            output_path: File to write; parent folders are created.
            necessary_modules: Modules a general-domain file must hold;
                missing ones are compiled through ``builder``.
            domain: Domain of the data; empty means general.
            validate: Passed to the builder for auto-compiled modules.
        """
        errors = ErrorSet()
        domain = (domain or "").strip() or GENERAL_DOMAIN

        with self._lock:
            if domain.lower() == GENERAL_DOMAIN:
                for name in necessary_modules:
                    if name in self._modules:
                        continue
                    errors.add(DataCompilerError.NECESSARY_DATA_MISSING, name)
                    if self.builder is not None:
                        errors.merge(self.builder(name, validate))
            elif not self._modules:
                errors.add(DataCompilerError.DOMAIN_DATA_MISSING, domain)

            if errors.contains(Severity.MUST_FIX):
                return errors

            for module in self.sorted_modules():
                errors.add(DataCompilerError.COMPILING_LOG,
                           f"Added {{{module.token}}} ({module.module_name}) data.")
            data = self.to_bytes()

        path = Path(output_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            errors.add(DataCompilerError.SAVE_BINARY_FILE_FAIL, str(path), str(e))
            return errors

        logger.debug("Wrote %d bytes to %s", len(data), path)
        return errors

    # =========================================================================
    # Session
    # =========================================================================

    def save_session(self, directory: str | Path) -> None:
        """Persist the working set as ``session.json`` plus one blob per module."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        entries = []
        for module in self.modules():
            entry = {
                "module": module.module_name,
                "token": str(module.token),
                "format_token": str(module.format_token),
                "file": None,
            }
            if module.data is not None:
                entry["file"] = f"{module.module_name}.bin"
                (directory / entry["file"]).write_bytes(module.data)
            entries.append(entry)

        manifest = {"language": self.language.code, "modules": entries}
        (directory / SESSION_FILE).write_text(json.dumps(manifest, indent=2), encoding="utf-8")

    @classmethod
    def load_session(cls, directory: str | Path, builder: ModuleBuilder | None = None) -> DataContainer:
        """Working set saved by ``save_session``; an absent session gives an empty container.

        Raises:
            ValueError: If the manifest names an unknown language.
        """
        directory = Path(directory)
        manifest_path = directory / SESSION_FILE
        if not manifest_path.is_file():
            return cls(builder=builder)

        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        container = cls(Language.from_code(manifest.get("language")), builder=builder)
        for entry in manifest.get("modules", []):
            data = None
            if entry.get("file"):
                data = (directory / entry["file"]).read_bytes()
            container._put(ModuleOutput(
                entry["module"],
                parse_token(entry["token"]),
                parse_token(entry["format_token"]),
                data,
            ))
        return container
