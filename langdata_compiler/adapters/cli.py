"""
CLI Adapter - Command-line interface.

Thin wrapper over the builder and the container. ``add`` and ``combine``
work on a session directory so that a container can be assembled over
several invocations.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from langdata_compiler.errors import ErrorSet, Severity


def main(args: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="langdata-compiler",
        description="Compile language data for text-to-speech runtimes",
    )
    parser.add_argument("-c", "--config", help="Build configuration (YAML or JSON)")
    parser.add_argument("-d", "--data-root", help="Root folder of the raw data")
    parser.add_argument("-l", "--language", help="Language code (e.g., en-US)")
    parser.add_argument("-t", "--tool-dir", help="Folder of the external compilers")
    parser.add_argument("-s", "--session", help="Session directory for add/combine")
    parser.add_argument("--validate", action="store_true", help="Keep content validation errors")
    parser.add_argument("--log-level", help="Log level (debug, info, warning, error)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # compile command
    compile_parser = subparsers.add_parser("compile", help="Compile one module to a file")
    compile_parser.add_argument("module", help="Module name (e.g., PhoneSet)")
    compile_parser.add_argument("-o", "--output", required=True, help="Output filename")

    # add command
    add_parser = subparsers.add_parser("add", help="Add a module to the session")
    add_parser.add_argument("module", help="Module name")
    add_parser.add_argument("--data", help="Prebuilt module bytes instead of compiling")
    add_parser.add_argument("--token", help="Token override for prebuilt data")
    add_parser.add_argument("--format-token", help="Format token override")

    # combine command
    combine_parser = subparsers.add_parser("combine", help="Write the session container")
    combine_parser.add_argument("-o", "--output", required=True, help="Output filename")

    # build command
    build_parser = subparsers.add_parser("build", help="Compile modules and write the container")
    build_parser.add_argument("modules", nargs="*", help="Modules to build (default: all)")
    build_parser.add_argument("-o", "--output", required=True, help="Output filename")
    build_parser.add_argument("-j", "--jobs", type=int, help="Parallel compile threads")

    # modules command
    modules_parser = subparsers.add_parser("modules", help="List module names and tokens")
    modules_parser.add_argument(
        "--all",
        action="store_true",
        help="Include reserved modules that can only be added prebuilt",
    )

    # version command
    subparsers.add_parser("version", help="Show version")

    parsed = parser.parse_args(args)

    if parsed.command is None:
        parser.print_help()
        return 0

    if parsed.command == "version":
        from langdata_compiler import __version__
        print(f"langdata-compiler {__version__}")
        return 0

    if parsed.command == "modules":
        return _cmd_modules(parsed)

    try:
        config = _load_config(parsed)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if parsed.command == "compile":
        return _cmd_compile(parsed, config)

    if parsed.command == "add":
        return _cmd_add(parsed, config)

    if parsed.command == "combine":
        return _cmd_combine(parsed, config)

    if parsed.command == "build":
        return _cmd_build(parsed, config)

    return 1


def _load_config(args: argparse.Namespace):
    """Config file settings overridden by command-line options."""
    from langdata_compiler.config import BuildConfig, load_config
    from langdata_compiler.languages import Language
    from langdata_compiler.monitoring import configure_logging

    config = load_config(args.config) if args.config else BuildConfig()
    if args.data_root:
        config.data_root = Path(args.data_root)
    if args.language:
        config.language = Language.from_code(args.language)
    if args.tool_dir:
        config.tool_dir = Path(args.tool_dir)
    if args.validate:
        config.validate = True
    if args.log_level:
        config.log_level = args.log_level
    if args.json_logs:
        config.json_logs = True
    if getattr(args, "jobs", None):
        config.max_workers = max(1, args.jobs)

    configure_logging(config.log_level, json_format=config.json_logs)
    return config


def _session_dir(args: argparse.Namespace, config) -> Path:
    return Path(args.session) if args.session else config.output_dir / "session"


def _load_session(args: argparse.Namespace, config):
    from langdata_compiler.builder import LanguageDataBuilder
    from langdata_compiler.container import DataContainer

    container = DataContainer.load_session(_session_dir(args, config))
    if len(container) == 0:
        container.language = config.language
    return LanguageDataBuilder(config, container=container)


def _report(errors: ErrorSet) -> int:
    """Print every error; exit code 1 when any is MUST_FIX."""
    for error in errors:
        stream = sys.stderr if error.severity is Severity.MUST_FIX else sys.stdout
        print(str(error), file=stream)
    return 1 if errors.contains(Severity.MUST_FIX) else 0


def _cmd_compile(args: argparse.Namespace, config) -> int:
    """Compile one module to a file."""
    from langdata_compiler.builder import LanguageDataBuilder

    builder = LanguageDataBuilder(config)
    result = builder.build(args.module)
    errors = ErrorSet().merge(builder.setup_errors).merge(result.errors)

    if result.ok:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(result.data)
        print(f"{args.module} saved to: {output} ({len(result.data)} bytes)")

    return _report(errors)


def _cmd_add(args: argparse.Namespace, config) -> int:
    """Compile (or load) one module into the session."""
    builder = _load_session(args, config)
    errors = ErrorSet().merge(builder.setup_errors)

    if args.data:
        data_path = Path(args.data)
        if not data_path.is_file():
            print(f"Error: File not found: {data_path}", file=sys.stderr)
            return 1
        errors.merge(builder.add(args.module, data_path.read_bytes(), args.token, args.format_token))
    else:
        errors.merge(builder.compile_and_register(args.module))

    builder.container.save_session(_session_dir(args, config))
    return _report(errors)


def _cmd_combine(args: argparse.Namespace, config) -> int:
    """Write the container of the session."""
    builder = _load_session(args, config)
    errors = ErrorSet().merge(builder.setup_errors)
    errors.merge(builder.combine(args.output))

    # Necessary modules compiled during combine stay in the session.
    builder.container.save_session(_session_dir(args, config))
    code = _report(errors)
    if code == 0:
        print(f"Container saved to: {args.output}")
    return code


def _cmd_build(args: argparse.Namespace, config) -> int:
    """Compile all (or the listed) modules and write the container."""
    from langdata_compiler.builder import LanguageDataBuilder

    builder = LanguageDataBuilder(config)
    errors = ErrorSet().merge(builder.setup_errors)

    results = builder.build_all(args.modules or None)
    for result in results.values():
        errors.merge(result.errors)
    errors.merge(builder.combine(args.output))

    code = _report(errors)
    built = sum(1 for result in results.values() if result.ok)
    print(f"Built {built} of {len(results)} modules")
    return code


def _cmd_modules(args: argparse.Namespace) -> int:
    """List module names and tokens."""
    from langdata_compiler.dispatch import RECIPES
    from langdata_compiler.modules import MODULE_TOKENS

    print("Modules:")
    print()
    for name, token in MODULE_TOKENS.items():
        buildable = name in RECIPES
        if not buildable and not args.all:
            continue
        marker = "" if buildable else "  (prebuilt only)"
        print(f"  {name:32} {token}{marker}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
