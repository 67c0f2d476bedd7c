"""Command-line interface for tgmark."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tgmark.dialects import Dialect, parse_dialect
from tgmark.errors import GenerationError, InvalidTokenError, ParseError
from tgmark.parser import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

CONFIG_NAME = "tgmark.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    dialect: Dialect
    max_depth: int
    strict: bool
    detect: list[str]
    currencies: list[tuple[str, str]]
    log_level: str
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="tgmark",
        description="Render tgmark inline markup as Telegram MarkdownV2 or HTML",
    )
    p.add_argument("input", help="Input markup file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-d",
        "--dialect",
        choices=[d.value for d in Dialect],
        default=None,
        help="Output dialect (default: markdownv2)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--max-depth",
        type=int,
        default=None,
        metavar="N",
        help=f"Maximum nesting depth of styled spans (default: {DEFAULT_MAX_DEPTH})",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Reject NUL characters and ragged tables",
    )
    p.add_argument(
        "--detect",
        action="append",
        default=[],
        metavar="NAME",
        help="Detect values for this formatter in plain text (repeatable)",
    )
    p.add_argument("--debug", action="store_true", help="Dump the document tree to stderr")
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more (-v for info, -vv for debug)",
    )
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    logger.debug("Loading config from %s", path)
    with open(path, "rb") as f:
        return tomllib.load(f)


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _log_level(verbose: int, configured: object) -> str:
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    if isinstance(configured, str):
        level = configured.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {configured!r}")
        return level
    return "WARNING"


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags. Raises ValueError for unusable values.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    render_cfg = _section(config, "render")
    parser_cfg = _section(config, "parser")
    formatters_cfg = _section(config, "formatters")
    logging_cfg = _section(config, "logging")

    # Dialect: config < CLI
    dialect = Dialect.MARKDOWN_V2
    cfg_dialect = render_cfg.get("dialect")
    if isinstance(cfg_dialect, str):
        dialect = parse_dialect(cfg_dialect)
    if args.dialect is not None:
        dialect = parse_dialect(args.dialect)

    # Parser limits: config < CLI
    max_depth = DEFAULT_MAX_DEPTH
    cfg_depth = parser_cfg.get("max_depth")
    if isinstance(cfg_depth, int) and not isinstance(cfg_depth, bool):
        max_depth = cfg_depth
    if args.max_depth is not None:
        max_depth = args.max_depth
    if max_depth < 1:
        raise ValueError(f"max depth must be at least 1, got {max_depth}")

    strict = False
    cfg_strict = parser_cfg.get("strict")
    if isinstance(cfg_strict, bool):
        strict = cfg_strict
    if args.strict is not None:
        strict = args.strict

    # Detected formatters: config < CLI, without duplicates
    detect: list[str] = []
    cfg_detect = formatters_cfg.get("detect")
    if isinstance(cfg_detect, list):
        detect.extend(str(name) for name in cfg_detect)
    for name in args.detect:
        if name not in detect:
            detect.append(name)

    currencies: list[tuple[str, str]] = []
    cfg_currency = formatters_cfg.get("currency")
    if isinstance(cfg_currency, list):
        for entry in cfg_currency:
            if not isinstance(entry, dict) or "symbol" not in entry or "code" not in entry:
                raise ValueError("each [[formatters.currency]] needs a symbol and a code")
            currencies.append((str(entry["symbol"]), str(entry["code"])))

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        dialect=dialect,
        max_depth=max_depth,
        strict=strict,
        detect=detect,
        currencies=currencies,
        log_level=_log_level(args.verbose, logging_cfg.get("level")),
        debug=args.debug,
    )


def render_file(options: CliOptions) -> str:
    """Read, parse, and render a markup file in the configured dialect."""
    from tgmark.debug import dump_tree
    from tgmark.formatters import CurrencyFormatter, FormatterRegistry, detect_custom
    from tgmark.generator import Generator
    from tgmark.parser import parse

    source = options.input_file.read_text(encoding="utf-8")
    nodes = parse(source, max_depth=options.max_depth, strict=options.strict)

    registry = FormatterRegistry.with_builtins()
    for symbol, code in options.currencies:
        registry.register(CurrencyFormatter(symbol, code))

    if options.detect:
        nodes = list(detect_custom(nodes, registry, options.detect))

    if options.debug:
        dump_tree(nodes)

    generator = Generator(options.dialect, formatters=registry, strict_tables=options.strict)
    return generator.render_all(nodes)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(level=options.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        output = render_file(options)
    except (ParseError, InvalidTokenError) as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except GenerationError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 2

    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    return 0
