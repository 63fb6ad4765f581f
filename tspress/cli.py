"""CLI entrypoints for tspress commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List

from .config import ConfigError, load_config
from .logging import configure_logging
from .models import collect_map_to_dict
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _parse_alias(value: str) -> tuple[str, str]:
    prefix, sep, target = value.partition("=")
    if not sep or not prefix or not target:
        raise argparse.ArgumentTypeError(f"Expected PREFIX=DIR, got {value!r}")
    return prefix, target


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tspress",
        description="Generate Markdown docs for the exported types and functions of a TypeScript project.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log output to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Collect exports and write Markdown pages.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory containing the TypeScript sources (defaults to current directory).",
    )
    build_parser.add_argument(
        "-o",
        "--out",
        default=None,
        help="Output directory for generated pages (defaults to out_dir from .tspress.yml).",
    )
    build_parser.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print the collected data as JSON instead of writing pages.",
    )
    build_parser.add_argument(
        "-@",
        "--alias",
        dest="aliases",
        action="append",
        type=_parse_alias,
        default=[],
        metavar="PREFIX=DIR",
        help="Resolve imports starting with PREFIX relative to DIR (repeatable).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP resolution service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default=None, help="Interface to bind.")
    serve_parser.add_argument("-p", "--port", type=int, default=None, help="Port to listen on.")
    serve_parser.add_argument(
        "--config",
        default=".",
        help="Directory holding .tspress.yml (defaults to current directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tspress commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    if args.command == "build":
        _run_build(parser, args)
    elif args.command == "serve":
        _run_serve(parser, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_build(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        config = load_config(Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    aliases: Dict[str, str] = dict(config.aliases)
    aliases.update(dict(args.aliases))
    config.aliases = aliases

    orchestrator = Orchestrator(config=config)
    try:
        if args.print_only:
            collect_map = orchestrator.collect(args.path)
            print(json.dumps(collect_map_to_dict(collect_map), indent=2, ensure_ascii=False))
            return
        written = orchestrator.build(args.path, args.out)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except Exception as exc:  # pragma: no cover
        parser.exit(1, f"tspress build failed: {exc}\nRun with --verbose for more details.\n")
    print(f"Wrote {len(written)} page(s)")
    for path in _relativize_all(written):
        print(f"  {path}")


def _run_serve(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    from .service import run_service

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    host = args.host or config.service.host
    port = args.port or config.service.port
    try:
        run_service(host=host, port=port, project_root=str(config.effective_project_root))
    except RuntimeError as exc:
        parser.exit(1, f"{exc}\n")


def _relativize_all(paths: List[Path]) -> List[str]:
    relative = []
    for path in paths:
        try:
            relative.append(str(path.relative_to(Path.cwd())))
        except ValueError:
            relative.append(str(path))
    return relative


if __name__ == "__main__":
    main(sys.argv[1:])
