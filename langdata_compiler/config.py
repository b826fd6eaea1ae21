"""
Build Configuration - Settings of one language data build.

Configuration is read from a YAML or JSON file; every key is optional.

Example (YAML):
    data_root: /data/en-US
    language: en-US
    tool_dir: /opt/tts/tools
    output_dir: out
    validate: true
    max_workers: 4
    raw_data:
      PhoneSet: /tmp/phoneset.xml
      ForeignLtsCollection: "ja-JP: Lexicon/ja-JP/phoneset.xml ; Lexicon/ja-JP/lts.bin"
    modules: [PhoneSet, PosSet, CharTable]
    format_tokens:
      WordBreaker: C4235FEF-CC38-4597-8928-ADD7CB186C79
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from langdata_compiler.languages import Language
from langdata_compiler.modules import GENERAL_DOMAIN
from langdata_compiler.tools import default_tool_dir


@dataclass
class BuildConfig:
    """Settings of one build session.

    Attributes:
        data_root: Root folder of the raw data.
        language: Language of the data.
        tool_dir: Folder of the external compilers; defaults to
            ``LANGDATA_TOOL_DIR``.
        output_dir: Folder for compiled files and sessions.
        domain: Domain of the container.
        validate: Keep MUST_FIX findings of content validators.
        max_workers: Threads used by ``build_all``; 1 builds sequentially.
        tool_timeout: Seconds an external tool may run, None for no limit.
        raw_data: Per-name path (or configuration value) overrides.
        modules: Modules to build; empty means every known module.
        format_tokens: Per-module format token.
        tool_names: Per-tool executable name overrides.
        log_level: Level of the structured logger.
        json_logs: Emit JSON log lines instead of human-readable ones.
    """

    data_root: Path | None = None
    language: Language = Language.NEUTRAL
    tool_dir: Path | None = field(default_factory=default_tool_dir)
    output_dir: Path = Path(".")
    domain: str = GENERAL_DOMAIN
    validate: bool = False
    max_workers: int = 1
    tool_timeout: float | None = None
    raw_data: dict[str, str] = field(default_factory=dict)
    modules: list[str] = field(default_factory=list)
    format_tokens: dict[str, str] = field(default_factory=dict)
    tool_names: dict[str, str] = field(default_factory=dict)
    log_level: str = "info"
    json_logs: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        return {
            "data_root": str(self.data_root) if self.data_root else None,
            "language": self.language.code,
            "tool_dir": str(self.tool_dir) if self.tool_dir else None,
            "output_dir": str(self.output_dir),
            "domain": self.domain,
            "validate": self.validate,
            "max_workers": self.max_workers,
            "tool_timeout": self.tool_timeout,
            "raw_data": dict(self.raw_data),
            "modules": list(self.modules),
            "format_tokens": dict(self.format_tokens),
            "tool_names": dict(self.tool_names),
            "log_level": self.log_level,
            "json_logs": self.json_logs,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildConfig:
        """Deserialize from a dictionary.

        Raises:
            ValueError: If the language is unknown or ``max_workers`` is below 1.
        """
        tool_dir = data.get("tool_dir")
        config = cls(
            data_root=Path(data["data_root"]) if data.get("data_root") else None,
            language=Language.from_code(data.get("language")),
            tool_dir=Path(tool_dir) if tool_dir else default_tool_dir(),
            output_dir=Path(data.get("output_dir") or "."),
            domain=data.get("domain") or GENERAL_DOMAIN,
            validate=bool(data.get("validate", False)),
            max_workers=int(data.get("max_workers", 1)),
            tool_timeout=data.get("tool_timeout"),
            raw_data={k: str(v) for k, v in (data.get("raw_data") or {}).items()},
            modules=list(data.get("modules") or []),
            format_tokens=dict(data.get("format_tokens") or {}),
            tool_names=dict(data.get("tool_names") or {}),
            log_level=data.get("log_level", "info"),
            json_logs=bool(data.get("json_logs", False)),
        )
        if config.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {config.max_workers}")
        return config


def load_config(path: str | Path) -> BuildConfig:
    """Load a BuildConfig from a YAML or JSON file.

    Relative ``data_root`` and ``output_dir`` values are resolved against
    the folder of the file.

    Raises:
        ValueError: If the file format is not supported.
    """
    path = Path(path)

    if path.suffix in (".yaml", ".yml"):
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    elif path.suffix == ".json":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported file format: {path.suffix}")

    config = BuildConfig.from_dict(data or {})
    base = path.parent
    if config.data_root is not None and not config.data_root.is_absolute():
        config.data_root = base / config.data_root
    if not config.output_dir.is_absolute():
        config.output_dir = base / config.output_dir
    return config


def save_config(config: BuildConfig, path: str | Path) -> None:
    """Write ``config`` as YAML or JSON by suffix."""
    path = Path(path)
    data = config.to_dict()

    if path.suffix in (".yaml", ".yml"):
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False)
    elif path.suffix == ".json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unsupported file format: {path.suffix}")
