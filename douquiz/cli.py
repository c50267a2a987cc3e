"""Command line entry point: export quizzes or serve the web application."""

from __future__ import annotations

import argparse
import sys
import zipfile

from douquiz.dou import TestStructure, export
from douquiz.webapp import run


def _structure(spec: str) -> TestStructure:
    parts = spec.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected STYPE:NUMBER:POINTS, got {spec!r}")
    stype, number, points = parts
    try:
        count = int(number)
        value = float(points)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid test structure {spec!r}") from exc
    if count < 0:
        raise argparse.ArgumentTypeError(f"invalid test structure {spec!r}")
    return TestStructure(stype, count, value)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="douquiz", description="Quiz documents to test archives.")
    commands = parser.add_subparsers(dest="command")

    exp = commands.add_parser("export", help="pack a Word quiz into an archive")
    exp.add_argument("source")
    exp.add_argument("output")
    exp.add_argument("--author", default="")
    exp.add_argument("--duration", type=int, default=0, help="test duration in seconds")
    exp.add_argument(
        "--structure",
        type=_structure,
        action="append",
        default=[],
        metavar="STYPE:NUMBER:POINTS",
    )
    exp.add_argument("--key", default=None, help="encrypt the archive with this key")

    serve = commands.add_parser("serve", help="start the web application")
    serve.add_argument("--root", default="app")
    serve.add_argument("--host", default="localhost")
    serve.add_argument("--port", type=int, default=8080)
    return parser


def main(argv=None) -> int:
    args = _parser().parse_args(argv)

    if args.command == "export":
        try:
            export(
                args.source,
                args.output,
                args.author,
                args.duration,
                bool(args.structure),
                args.structure,
                args.key is not None,
                args.key or "",
            )
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        return 0

    if args.command == "serve":
        run(args.root, args.host, args.port)
    else:
        run()
    return 0


if __name__ == "__main__":
    sys.exit(main())