"""CLI entrypoints for vtgen commands."""

from __future__ import annotations

import argparse
import sys

from .logging import configure_logging
from .orchestrator import Orchestrator


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    default: object = argparse.SUPPRESS if suppress_default else False
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Increase log verbosity for troubleshooting.",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only log warnings and errors to the console.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vtgen",
        description="Generate strongly-typed opaque identifier modules from @value_type declarations.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate value type modules for a project.",
    )
    _add_logging_options(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report which files would change without writing them.",
    )
    generate_parser.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 when generated files are out of date (implies --dry-run).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_logging_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for vtgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    if args.command == "generate":
        _run_generate(parser, args)
    elif args.command == "serve":
        from .service import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_generate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    check = bool(getattr(args, "check", False))
    dry_run = bool(getattr(args, "dry_run", False)) or check

    orchestrator = Orchestrator()
    try:
        outcome = orchestrator.run(args.path, dry_run=dry_run)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except RuntimeError as exc:
        parser.exit(1, f"vtgen generate failed: {exc}\nRun with --verbose for more details.\n")

    for diagnostic in outcome.result.diagnostics:
        print(diagnostic.format(), file=sys.stderr)

    write = outcome.write
    suffix = " (dry-run)" if dry_run else ""
    for rel_path in write.written:
        print(f"{'would write' if dry_run else 'wrote'} {rel_path}")
    for rel_path in write.removed:
        print(f"{'would remove' if dry_run else 'removed'} {rel_path}")
    for rel_path in write.kept:
        print(f"kept {rel_path} (not generated by vtgen)")
    print(
        f"{len(write.written)} written, {len(write.unchanged)} unchanged, "
        f"{len(write.removed)} removed, {len(write.kept)} kept{suffix}"
    )

    if outcome.result.has_errors:
        parser.exit(1, f"{len(outcome.result.diagnostics)} declaration error(s)\n")
    if check and not write.up_to_date:
        parser.exit(1, "Generated files are out of date. Run `vtgen generate`.\n")


if __name__ == "__main__":
    main(sys.argv[1:])
