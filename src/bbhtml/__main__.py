"""Command line entry point: ``python -m bbhtml [FILE ...]``."""

import argparse
import logging
import sys
from pathlib import Path

from .converter import Converter, ConverterOpts
from .errors import StrictModeError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="bbhtml", description="Convert BBCode markup to an HTML fragment")
    parser.add_argument(
        "files",
        nargs="*",
        default=["-"],
        help="Input files; '-' or nothing reads stdin",
    )
    parser.add_argument("-o", "--output", type=Path, default=None, help="Write HTML here instead of stdout")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Stop at the first malformed construct and exit with status 1",
    )
    parser.add_argument(
        "--errors",
        action="store_true",
        help="Print every malformed construct to stderr",
    )
    parser.add_argument(
        "--no-flush",
        action="store_true",
        help="Drop a partial tag at end of input instead of keeping it as text",
    )
    parser.add_argument("--discard-bom", action="store_true", help="Drop a leading byte order mark (U+FEFF)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Trace converter transitions")
    return parser.parse_args(argv)


def _read(name):
    if name == "-":
        return sys.stdin.read()
    return Path(name).read_text(encoding="utf-8")


def _write(html, output):
    if output is not None:
        output.write_text(html + "\n", encoding="utf-8")
    else:
        print(html)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    opts = ConverterOpts(
        collect_errors=args.errors,
        strict=args.strict,
        flush_partial_tags=not args.no_flush,
        discard_bom=args.discard_bom,
        debug=args.verbose,
    )
    converter = Converter(opts)

    # Fragments converted before a failure are still written out.
    parts = []
    status = 0
    for name in args.files:
        try:
            parts.append(converter.run(_read(name)))
        except OSError as exc:
            print(f"{name}:{exc.strerror or exc}", file=sys.stderr)
            status = 1
            break
        except StrictModeError as exc:
            print(f"{name}:{exc.error}", file=sys.stderr)
            status = 1
            break
        for error in converter.errors:
            print(f"{name}:{error}", file=sys.stderr)

    if parts or not status:
        _write("\n".join(parts), args.output)
    return status


if __name__ == "__main__":
    sys.exit(main())
