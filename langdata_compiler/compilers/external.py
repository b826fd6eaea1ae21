"""
External Tool Recipes - Modules compiled by legacy command-line tools.

Each recipe checks that the tool and its inputs exist, runs the tool
through a ToolRunner into a temporary output file and returns the bytes
the tool wrote. Console output of the tool is kept as a compiling log
entry: informational on success, MUST_FIX on a non-zero exit code.

Recipes:
    compile_lexicon       bldVendorV2   -v {lcid} V2 "{schema}" "{lexicon}" "{out}" TTS
    compile_lts_rule      ltscomp       letter.sym phone.sym letter.q phone.q tree.tree 0 0 1e-08 train.smp out
    compile_tnml          CompTNML      -lcid {lcid} -tnml {rule} -schema {schema} -tnbin {out}
    compile_fst_ne        CompFstNE     -lang {code} -intnml {rule} -outfst {out}
    compile_pos_rule      rule_text2bin_U  {lexical} {contextual} {posset} {out}
    compile_general_rule  polycomp      {txt} {out}
"""

from __future__ import annotations

import tempfile
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from langdata_compiler.errors import DataCompilerError, ErrorSet, Severity
from langdata_compiler.languages import Language
from langdata_compiler.monitoring.logging import get_logger
from langdata_compiler.rawdata.loaders import TTS_NAMESPACE
from langdata_compiler.rawdata.models import PosSet
from langdata_compiler.tools import SubprocessToolRunner, ToolRunner, resolve_tool

LTS_INPUT_FILES = ("letter.sym", "phone.sym", "letter.q", "phone.q", "tree.tree")
LTS_TRAIN_FILE = "train.smp"
LTS_PARAMETERS = ("0", "0", "1e-08")

TNML_DATA_NAME = "TNML rule"
FST_NE_DATA_NAME = "FstNE rule"
GENERAL_RULE_DATA_NAME = "General Rule"


@dataclass
class ToolSetup:
    """Where the tools live and how they are run."""

    runner: ToolRunner = field(default_factory=SubprocessToolRunner)
    tool_dir: Path | None = None
    tool_names: dict[str, str] = field(default_factory=dict)
    working_dir: Path | None = None

    def path(self, name: str) -> Path:
        return resolve_tool(name, self.tool_dir, self.tool_names)


def check_tool(path: Path, errors: ErrorSet) -> None:
    if not path.is_file():
        errors.add(DataCompilerError.TOOL_NOT_FOUND, path.name, str(path))


def check_input(name: str, path: str | Path | None, errors: ErrorSet) -> None:
    if path is None or not Path(path).is_file():
        errors.add(DataCompilerError.RAW_DATA_NOT_FOUND, name, str(path))


def run_tool(
    setup: ToolSetup,
    tool: str,
    data_name: str,
    args: list[str],
    output_path: Path,
    errors: ErrorSet,
) -> bytes:
    """Run ``tool`` unless ``errors`` already holds MUST_FIX; returns the output file bytes."""
    command = setup.path(tool)
    check_tool(command, errors)
    if errors.contains(Severity.MUST_FIX):
        return b""

    result = setup.runner.run(command, args, setup.working_dir, output_path)
    get_logger().tool_invoked(command.name, result.exit_code, data=data_name)
    if result.output:
        if result.ok:
            errors.add(DataCompilerError.COMPILING_LOG_WITH_DATA_NAME, data_name, result.output)
        else:
            errors.add(DataCompilerError.COMPILING_LOG_WITH_ERROR, data_name, result.output)
    return result.output_bytes if result.ok else b""


# =============================================================================
# Recipes
# =============================================================================

def compile_lexicon(
    setup: ToolSetup,
    language: Language,
    schema_path: Path | None,
    lexicon_path: Path | None,
) -> tuple[bytes, ErrorSet]:
    errors = ErrorSet()
    check_input("LexicalAttributeSchema", schema_path, errors)
    check_input("Lexicon", lexicon_path, errors)
    with tempfile.TemporaryDirectory() as tmp:
        out = Path(tmp) / "lexicon.bin"
        args = ["-v", str(language.lcid), "V2", str(schema_path), str(lexicon_path), str(out), "TTS"]
        data = run_tool(setup, "BldVendor2", "Lexicon", args, out, errors)
    return data, errors


def compile_lts_rule(setup: ToolSetup, lts_dir: Path) -> tuple[bytes, ErrorSet]:
    """Compile the LTS rule found in ``lts_dir``."""
    errors = ErrorSet()
    inputs = [lts_dir / name for name in LTS_INPUT_FILES]
    train = lts_dir / LTS_TRAIN_FILE
    for path in [*inputs, train]:
        check_input(path.name, path, errors)

    with tempfile.TemporaryDirectory() as tmp:
        out = Path(tmp) / "lts.bin"
        args = [*map(str, inputs), *LTS_PARAMETERS, str(train), str(out)]
        data = run_tool(setup, "LtsCompiler", "LtsRule", args, out, errors)
    return data, errors


def compile_tnml(
    setup: ToolSetup,
    language: Language,
    rule_path: Path | None,
    schema_path: Path | None,
    tn_mode: bool = False,
) -> tuple[bytes, ErrorSet]:
    """Compile a TNML rule; ``tn_mode`` selects text normalization mode."""
    errors = ErrorSet()
    check_input(TNML_DATA_NAME, rule_path, errors)
    check_input("LexicalAttributeSchema", schema_path, errors)

    with tempfile.TemporaryDirectory() as tmp:
        out = Path(tmp) / "tnml.bin"
        args = ["-lcid", str(language.lcid), "-tnml", str(rule_path),
                "-schema", str(schema_path), "-tnbin", str(out)]
        if tn_mode:
            args += ["-mode", "TTS", "-norulename", "FALSE"]
        data = run_tool(setup, "TnmlCompiler", TNML_DATA_NAME, args, out, errors)
    return data, errors


def compile_fst_ne(setup: ToolSetup, language: Language, rule_path: Path | None) -> tuple[bytes, ErrorSet]:
    errors = ErrorSet()
    check_input(FST_NE_DATA_NAME, rule_path, errors)
    with tempfile.TemporaryDirectory() as tmp:
        out = Path(tmp) / "fstne.bin"
        args = ["-lang", language.code, "-intnml", str(rule_path), "-outfst", str(out)]
        data = run_tool(setup, "FstNECompiler", FST_NE_DATA_NAME, args, out, errors)
    return data, errors


def write_pos_table(pos_set: PosSet, path: Path) -> None:
    """Save ``pos_set`` as a ``<posTable>`` file with four digit hex ids."""
    root = ET.Element(f"{{{TTS_NAMESPACE}}}posTable", {"lang": pos_set.language.code})
    for name, pos_id in pos_set.items.items():
        ET.SubElement(root, f"{{{TTS_NAMESPACE}}}pos", {"name": name, "id": f"{pos_id:04X}"})
    ET.register_namespace("", TTS_NAMESPACE)
    ET.ElementTree(root).write(path, encoding="utf-16", xml_declaration=True)


def compile_pos_rule(
    setup: ToolSetup,
    lexical_path: Path | None,
    contextual_path: Path | None,
    pos_set: PosSet,
) -> tuple[bytes, ErrorSet]:
    """Compile the POS tagger rules; ``pos_set`` is handed over as a temporary file."""
    errors = ErrorSet()
    check_input("PosLexicalRule", lexical_path, errors)
    check_input("PosContextualRule", contextual_path, errors)

    with tempfile.TemporaryDirectory() as tmp:
        pos_file = Path(tmp) / "postable.xml"
        write_pos_table(pos_set, pos_file)
        out = Path(tmp) / "posrule.bin"
        args = [str(lexical_path), str(contextual_path), str(pos_file), str(out)]
        data = run_tool(setup, "PosRuleCompiler", "PosRule", args, out, errors)
    return data, errors


def compile_general_rule(setup: ToolSetup, rule_path: Path | None) -> tuple[bytes, ErrorSet]:
    errors = ErrorSet()
    check_input(GENERAL_RULE_DATA_NAME, rule_path, errors)
    with tempfile.TemporaryDirectory() as tmp:
        out = Path(tmp) / "rule.bin"
        data = run_tool(setup, "RuleCompiler", GENERAL_RULE_DATA_NAME, [str(rule_path), str(out)], out, errors)
    return data, errors
