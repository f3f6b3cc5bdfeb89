"""Command-line interface router for shapekit."""

from __future__ import annotations

import argparse
import importlib
import json
import sys
import tomllib
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Final

import yaml

from shapekit.config import SettingsError, ShapekitSettings, load_settings
from shapekit.errors import ErrorCode, ShapeError, json_safe
from shapekit.observability import get_logger, setup_logging
from shapekit.shapes.base import Shape

EXIT_OK: Final[int] = 0
EXIT_INVALID: Final[int] = 1
EXIT_USAGE: Final[int] = 2

STDIN_DOCUMENT: Final[str] = "-"

_LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = EXIT_USAGE

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class DocumentReport:
    document: str
    error: ShapeError | None

    @property
    def valid(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="shapekit",
        description=(
            "shapekit — validate structured documents against declared shapes.\n\n"
            "Common workflows:\n"
            "  shapekit check app.schemas:CONFIG config.toml    Validate a document\n"
            "  shapekit describe app.schemas:CONFIG            Print a shape as JSON\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to pyproject.toml holding [tool.shapekit] (default: ./pyproject.toml if present).",
    )
    common.add_argument(
        "--log-level",
        default=None,
        help="Override log level (DEBUG, INFO, WARNING, ERROR).",
    )
    common.add_argument(
        "--no-redact",
        action="store_true",
        default=False,
        help="Show values at sensitive paths in error output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # check ---------------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Validate documents against a shape",
        description=(
            "Load each document (.json, .yaml/.yml, .toml, or '-' for JSON on stdin)\n"
            "and validate it with the shape named by SCHEMA (module:attribute).\n\n"
            "Examples:\n"
            "  shapekit check app.schemas:USER user.json\n"
            "  shapekit check app.schemas:USER a.yaml b.yaml --format json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument("schema", help="Shape reference as module:attribute")
    check_parser.add_argument("documents", nargs="+", help="Documents to validate")
    check_parser.add_argument(
        "--format",
        dest="output_format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text)",
    )
    check_parser.set_defaults(handler=_cmd_check)

    # describe ------------------------------------------------------------
    describe_parser = subparsers.add_parser(
        "describe",
        parents=[common],
        help="Print the effective configuration of a shape as JSON",
    )
    describe_parser.add_argument("schema", help="Shape reference as module:attribute")
    describe_parser.set_defaults(handler=_cmd_describe)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    stdout: IO[str] | None = None,
    stdin: IO[str] | None = None,
) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    out = stdout if stdout is not None else sys.stdout
    try:
        settings = _load_effective_settings(namespace)
        setup_logging(settings)
        result = handler(namespace, settings, out, stdin if stdin is not None else sys.stdin)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    return run_cli(argv)


def cli_entrypoint() -> None:
    """Console-script entrypoint."""

    raise SystemExit(run_cli())


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(
    args: argparse.Namespace, settings: ShapekitSettings, out: IO[str], stdin: IO[str]
) -> int:
    shape = load_shape(args.schema)
    reports = [
        DocumentReport(
            document=document,
            error=shape.safe_parse(_load_document(document, stdin)).error,
        )
        for document in args.documents
    ]
    _LOGGER.info(
        "checked documents",
        extra={
            "schema": args.schema,
            "documents": len(reports),
            "invalid": sum(1 for report in reports if not report.valid),
        },
    )

    if args.output_format == "json":
        payload = [_report_payload(report, settings) for report in reports]
        out.write(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n")
    else:
        for report in reports:
            for line in render_report_text(report, max_union_details=settings.max_union_details):
                out.write(line + "\n")

    return EXIT_OK if all(report.valid for report in reports) else EXIT_INVALID


def _cmd_describe(
    args: argparse.Namespace, settings: ShapekitSettings, out: IO[str], stdin: IO[str]
) -> int:
    shape = load_shape(args.schema)
    payload = json_safe(shape.describe())
    out.write(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_shape(reference: str) -> Shape:
    """Resolve ``package.module:attr.path`` to a shape instance."""

    module_name, separator, attribute_path = reference.partition(":")
    if not separator or not module_name or not attribute_path:
        raise CLIError(f"schema reference must look like module:attribute, got {reference!r}")
    try:
        target: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise CLIError(f"cannot import schema module {module_name!r}: {exc}") from exc
    for part in attribute_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise CLIError(f"{reference!r}: no attribute {part!r}") from exc
    if not isinstance(target, Shape):
        raise CLIError(f"{reference!r} is not a shape (got {type(target).__name__})")
    return target


def _load_document(document: str, stdin: IO[str]) -> Any:
    if document == STDIN_DOCUMENT:
        try:
            return json.loads(stdin.read())
        except json.JSONDecodeError as exc:
            raise CLIError(f"stdin: invalid JSON: {exc}") from exc

    path = Path(document)
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        if suffix in {".yaml", ".yml"}:
            with path.open("r", encoding="utf-8") as handle:
                return yaml.safe_load(handle)
        if suffix == ".toml":
            with path.open("rb") as handle:
                return tomllib.load(handle)
    except OSError as exc:
        raise CLIError(f"{document}: unable to read document: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise CLIError(f"{document}: unable to parse document: {exc}") from exc
    raise CLIError(f"{document}: unsupported document type {suffix or '<none>'!r}")


def _load_effective_settings(args: argparse.Namespace) -> ShapekitSettings:
    overrides: dict[str, object] = {"log_level": args.log_level}
    if args.no_redact:
        overrides["redact_values"] = False
    try:
        return load_settings(args.config_path, overrides=overrides)
    except SettingsError as exc:
        raise CLIError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_report_text(report: DocumentReport, *, max_union_details: int) -> list[str]:
    if report.error is None:
        return [f"{report.document}: OK"]
    return [
        f"{report.document}: {line}"
        for line in render_error_lines(report.error, max_union_details=max_union_details)
    ]


def render_error_lines(
    error: ShapeError, *, max_union_details: int, indent: str = ""
) -> list[str]:
    """One line per leaf error; union candidates are nested and capped."""

    if error.code == ErrorCode.NO_MATCHING_UNION_MEMBER:
        lines = [indent + _render_leaf(error)]
        shown = error.details[:max_union_details]
        for detail in shown:
            lines.extend(
                render_error_lines(detail, max_union_details=max_union_details, indent=indent + "  ")
            )
        hidden = len(error.details) - len(shown)
        if hidden > 0:
            lines.append(f"{indent}  ... {hidden} more candidate(s)")
        return lines
    if error.details:
        collected: list[str] = []
        for detail in error.details:
            collected.extend(
                render_error_lines(detail, max_union_details=max_union_details, indent=indent)
            )
        return collected
    return [indent + _render_leaf(error)]


def _render_leaf(error: ShapeError) -> str:
    return f"{error.path_text or '<root>'}: {error.message} [{error.code}]"


def _report_payload(report: DocumentReport, settings: ShapekitSettings) -> dict[str, object]:
    return {
        "document": report.document,
        "valid": report.valid,
        "error": None
        if report.error is None
        else report.error.to_dict(
            redact=settings.redact_values, sensitive_keys=settings.sensitive_keys
        ),
    }


__all__ = [
    "CLIError",
    "DocumentReport",
    "EXIT_INVALID",
    "EXIT_OK",
    "EXIT_USAGE",
    "build_parser",
    "cli_entrypoint",
    "load_shape",
    "main",
    "render_error_lines",
    "render_report_text",
    "run_cli",
]
