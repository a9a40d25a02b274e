"""Command-line interface router for confmend."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import structlog

from confmend import __version__
from confmend.config import (
    ParseError,
    UnrecoverableConfig,
    ensure_config,
    load_jsonc_file,
    migrate,
    read_all,
    read_config,
    serialize,
    update_config,
)
from confmend.observability.logging import LOG_FORMATS, configure_logging
from confmend.schema import PROJECT_CONTEXT, ConfigContext, ValidationIssue, describe, validate
from confmend.settings import EngineSettings, SettingsError, load_settings
from confmend.ui.render import CLIRenderer, create_renderer

_logger = structlog.get_logger(__name__)


class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="confmend",
        description=(
            "confmend: validate, repair, and durably persist confmend.jsonc.\n\n"
            "Common workflows:\n"
            "  confmend check              Validate without writing\n"
            "  confmend read               Read with automatic repair\n"
            "  confmend set key=value      Apply a partial update\n"
            "  confmend init               Create or load the project config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to the config document (default: ./confmend.jsonc).",
    )
    common.add_argument(
        "--log-level",
        default=None,
        help="Minimum log level (default: INFO, or CONFMEND_LOG_LEVEL).",
    )
    common.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Log output format on stderr (default: text, or CONFMEND_LOG_FORMAT).",
    )
    common.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Emit machine-readable JSON on stdout.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=None,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Parse and validate the config without modifying it.",
    )
    check_parser.set_defaults(handler=_cmd_check)

    read_parser = subparsers.add_parser(
        "read",
        parents=[common],
        help="Read the config, repairing and persisting it when needed.",
    )
    read_parser.add_argument(
        "--fallback",
        action="store_true",
        default=False,
        help="Print the default document instead of failing when nothing is recoverable.",
    )
    read_parser.set_defaults(handler=_cmd_read)

    set_parser = subparsers.add_parser(
        "set",
        parents=[common],
        help="Deep-merge dotted KEY=VALUE assignments into the config.",
    )
    set_parser.add_argument(
        "assignments",
        nargs="+",
        metavar="KEY=VALUE",
        help="VALUE is parsed as JSON when possible, otherwise used as a string.",
    )
    set_parser.set_defaults(handler=_cmd_set)

    migrate_parser = subparsers.add_parser(
        "migrate",
        parents=[common],
        help="Import recognized fields from a legacy document, then delete it.",
    )
    migrate_parser.add_argument("source", help="Path to the legacy JSONC document.")
    migrate_parser.set_defaults(handler=_cmd_migrate)

    read_all_parser = subparsers.add_parser(
        "read-all",
        parents=[common],
        help="Read every *confmend.jsonc document in a directory.",
    )
    read_all_parser.add_argument("directory", help="Directory to scan.")
    read_all_parser.set_defaults(handler=_cmd_read_all)

    init_parser = subparsers.add_parser(
        "init",
        parents=[common],
        help="Load the project config, creating it from detected settings if absent.",
    )
    init_parser.add_argument(
        "--project-dir",
        default=".",
        help="Project root directory (default: current working directory).",
    )
    init_parser.set_defaults(handler=_cmd_init)

    defaults_parser = subparsers.add_parser(
        "defaults",
        parents=[common],
        help="Print the annotated default document.",
    )
    defaults_parser.set_defaults(handler=_cmd_defaults)

    schema_parser = subparsers.add_parser(
        "schema",
        parents=[common],
        help="Print a JSON description of the config schema.",
    )
    schema_parser.set_defaults(handler=_cmd_schema)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        settings = load_settings(
            overrides={
                "log_level": namespace.log_level,
                "log_format": namespace.log_format,
                "no_color": namespace.no_color,
            }
        )
    except SettingsError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    configure_logging(
        settings.log_level,
        settings.log_format,
        colors=False if settings.no_color else None,
    )

    try:
        result = handler(namespace, settings)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace, settings: EngineSettings) -> int:
    path = _config_path(args, settings)
    if not path.is_file():
        raise CLIError(f"config file not found: {path}", exit_code=2)

    issues: list[dict[str, str]]
    try:
        document = load_jsonc_file(path)
    except ParseError as exc:
        issues = [{"path": "<root>", "message": exc.reason}]
    else:
        issues = [_issue_payload(issue) for issue in validate(PROJECT_CONTEXT.schema, document)]

    valid = not issues
    if args.json:
        _emit_json({"command": "check", "path": str(path), "valid": valid, "issues": issues})
        return 0 if valid else 1

    renderer = _get_renderer(args, settings)
    if valid:
        renderer.success(f"{path}: valid")
        return 0
    renderer.table(
        ("Field", "Problem"),
        [(item["path"], item["message"]) for item in issues],
        title=f"{path}: {len(issues)} issue(s)",
    )
    return 1


def _cmd_read(args: argparse.Namespace, settings: EngineSettings) -> int:
    path = _config_path(args, settings)
    document = asyncio.run(read_config(path, context=_context()))
    source = "file"
    if document is None:
        if not args.fallback:
            raise UnrecoverableConfig(path)
        _logger.warning("config_fallback_to_defaults", path=str(path))
        document = _context().default_document()
        source = "defaults"

    if args.json:
        _emit_json({"command": "read", "path": str(path), "source": source, "config": document})
        return 0

    renderer = _get_renderer(args, settings)
    if source == "defaults":
        renderer.warning(f"{path} could not be recovered; showing defaults")
    renderer.document(document)
    return 0


def _cmd_set(args: argparse.Namespace, settings: EngineSettings) -> int:
    path = _config_path(args, settings)
    updates = parse_assignments(args.assignments)
    if not path.parent.is_dir():
        raise CLIError(f"config directory does not exist: {path.parent}", exit_code=2)

    success = asyncio.run(update_config(path, updates, context=_context()))
    if args.json:
        _emit_json({"command": "set", "path": str(path), "updated": success, "fields": sorted(updates)})
    elif success:
        _get_renderer(args, settings).success(f"updated {', '.join(sorted(updates))} in {path}")
    else:
        _get_renderer(args, settings).warning(f"update rejected for {path}; see log for details")
    return 0 if success else 1


def _cmd_migrate(args: argparse.Namespace, settings: EngineSettings) -> int:
    path = _config_path(args, settings)
    source = Path(args.source).expanduser()
    if not source.is_file():
        raise CLIError(f"migration source not found: {source}", exit_code=2)

    success = asyncio.run(migrate(source, path, context=_context()))
    if args.json:
        _emit_json({"command": "migrate", "path": str(path), "source": str(source), "migrated": success})
    elif success:
        _get_renderer(args, settings).success(f"migrated {source} into {path}")
    else:
        _get_renderer(args, settings).warning(f"migration from {source} failed; source left in place")
    return 0 if success else 1


def _cmd_read_all(args: argparse.Namespace, settings: EngineSettings) -> int:
    directory = Path(args.directory).expanduser()
    documents = asyncio.run(
        read_all(
            directory,
            context=_context(),
            max_concurrency=settings.max_concurrent_reads,
            suffix=settings.config_file_name,
        )
    )
    names = [str(document.get("projectName", "")) for document in documents]
    if args.json:
        _emit_json(
            {
                "command": "read-all",
                "directory": str(directory),
                "count": len(documents),
                "projects": names,
            }
        )
        return 0

    renderer = _get_renderer(args, settings)
    renderer.kv("Valid documents", len(documents))
    renderer.items(names)
    return 0


def _cmd_init(args: argparse.Namespace, settings: EngineSettings) -> int:
    project_dir = Path(args.project_dir).expanduser().resolve()
    if not project_dir.is_dir():
        raise CLIError(f"project directory does not exist: {project_dir}", exit_code=2)

    loaded = asyncio.run(
        ensure_config(
            project_dir,
            context=_context(),
            config_file_name=settings.config_file_name,
            max_concurrency=settings.max_concurrent_reads,
        )
    )
    path = project_dir / settings.config_file_name
    if args.json:
        _emit_json(
            {
                "command": "init",
                "path": str(path),
                "source": loaded.source,
                "extra_documents": len(loaded.extra),
                "config": loaded.config,
            }
        )
        return 0

    renderer = _get_renderer(args, settings)
    renderer.kv("Config", path)
    renderer.kv("Source", loaded.source)
    renderer.kv("Auxiliary documents", len(loaded.extra))
    if loaded.source == "defaults":
        renderer.warning("using fallback defaults because the config could not be validated")
    return 0


def _cmd_defaults(args: argparse.Namespace, settings: EngineSettings) -> int:
    context = _context()
    document = context.default_document()
    if args.json:
        _emit_json({"command": "defaults", "config": document})
        return 0
    _get_renderer(args, settings).raw(serialize(document, context.schema))
    return 0


def _cmd_schema(args: argparse.Namespace, settings: EngineSettings) -> int:
    description = describe(_context().schema)
    if args.json:
        _emit_json({"command": "schema", "schema": description})
        return 0
    _get_renderer(args, settings).document(description)
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_assignments(assignments: Sequence[str]) -> dict[str, Any]:
    """Turn ``a.b=VALUE`` strings into one nested partial document."""

    updates: dict[str, Any] = {}
    for assignment in assignments:
        key, separator, raw_value = assignment.partition("=")
        segments = key.strip().split(".")
        if not separator or any(not segment for segment in segments):
            raise CLIError(f"invalid assignment {assignment!r}; expected KEY=VALUE", exit_code=2)
        _set_nested(updates, segments, _parse_value(raw_value))
    return updates


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _set_nested(target: dict[str, Any], segments: Sequence[str], value: Any) -> None:
    cursor = target
    for segment in segments[:-1]:
        child = cursor.get(segment)
        if not isinstance(child, dict):
            child = {}
            cursor[segment] = child
        cursor = child
    cursor[segments[-1]] = value


def _context() -> ConfigContext:
    return PROJECT_CONTEXT


def _config_path(args: argparse.Namespace, settings: EngineSettings) -> Path:
    raw = getattr(args, "config_path", None)
    if isinstance(raw, str) and raw.strip():
        return Path(raw).expanduser()
    return Path.cwd() / settings.config_file_name


def _issue_payload(issue: ValidationIssue) -> dict[str, str]:
    return {"path": issue.dotted, "message": issue.message}


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace, settings: EngineSettings) -> CLIRenderer:
    return create_renderer(no_color=bool(getattr(args, "no_color", False)) or settings.no_color)


__all__ = ["CLIError", "build_parser", "parse_assignments", "run_cli"]
