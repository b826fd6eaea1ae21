"""
External Tools - Running the legacy command-line compilers.

Several modules (lexicon, LTS, TNML, POS and general rules) are compiled by
external executables. They are modelled as an opaque capability: run a
command with arguments, capture its console output and the bytes of the
output file it produced.

Usage:
    runner = SubprocessToolRunner(timeout=120)
    result = runner.run("/opt/tools/polycomp", ["rule.txt", "rule.bin"],
                        output_path="rule.bin")
    if result.ok:
        data = result.output_bytes
"""

from __future__ import annotations

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

TOOL_DIR_ENV = "LANGDATA_TOOL_DIR"

# Logical tool name -> executable file name.
DEFAULT_TOOL_NAMES: dict[str, str] = {
    "RuleCompiler": "polycomp",
    "BldVendor2": "bldVendorV2",
    "PosRuleCompiler": "rule_text2bin_U",
    "TnmlCompiler": "CompTNML",
    "FstNECompiler": "CompFstNE",
    "LtsCompiler": "ltscomp",
}


@dataclass
class ToolResult:
    """Outcome of one tool run.

    Attributes:
        exit_code: Process exit code.
        output: Captured stdout and stderr text.
        output_bytes: Content of the tool's output file, if it wrote one.
    """

    exit_code: int
    output: str = ""
    output_bytes: bytes = b""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ToolRunner(ABC):
    """Runs external compilers."""

    @abstractmethod
    def run(
        self,
        command: str | Path,
        args: Sequence[str],
        working_dir: str | Path | None = None,
        output_path: str | Path | None = None,
    ) -> ToolResult:
        """Run ``command`` and collect its output.

        Args:
            command: Executable path.
            args: Command-line arguments.
            working_dir: Working directory, defaults to the current one.
            output_path: File the tool writes; read back into
                ``ToolResult.output_bytes`` after a successful run.
        """


class SubprocessToolRunner(ToolRunner):
    """ToolRunner backed by ``subprocess.run``."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def run(
        self,
        command: str | Path,
        args: Sequence[str],
        working_dir: str | Path | None = None,
        output_path: str | Path | None = None,
    ) -> ToolResult:
        argv = [str(command), *[str(a) for a in args]]
        logger.debug("Running %s", " ".join(argv))
        try:
            completed = subprocess.run(
                argv,
                cwd=str(working_dir) if working_dir else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", command, self.timeout)
            return ToolResult(exit_code=-1, output=f"Timed out after {self.timeout}s")
        except OSError as e:
            logger.warning("Could not start %s: %s", command, e)
            return ToolResult(exit_code=-1, output=str(e))
        output = completed.stdout.decode("utf-8", errors="replace").strip()

        data = b""
        if completed.returncode == 0 and output_path is not None and Path(output_path).is_file():
            data = Path(output_path).read_bytes()
        return ToolResult(exit_code=completed.returncode, output=output, output_bytes=data)


def default_tool_dir() -> Path | None:
    """Tool directory from the ``LANGDATA_TOOL_DIR`` environment variable."""
    value = os.environ.get(TOOL_DIR_ENV)
    return Path(value) if value else None


def resolve_tool(
    name: str,
    tool_dir: str | Path | None,
    tool_names: dict[str, str] | None = None,
) -> Path:
    """Path of a logical tool inside ``tool_dir``.

    Args:
        name: Logical tool name, e.g. ``"RuleCompiler"``.
        tool_dir: Folder holding the executables.
        tool_names: Overrides of the executable file names.
    """
    names = {**DEFAULT_TOOL_NAMES, **(tool_names or {})}
    file_name = names.get(name, name)
    return Path(tool_dir or ".") / file_name
