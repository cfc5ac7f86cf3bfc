"""Command-line entry point for patgrep.

Prints every match of the selected categories, one per line, in input order.

Usage:
    patgrep --ipv4-address access.log          # one category
    patgrep -4 -E --offsets dump.txt           # short aliases, start:end: prefix
    cat notes.txt | patgrep --category         # every category, name prefix
    patgrep -e 'ticket-[0-9]+' --url -         # custom pattern plus a category
    patgrep --list                             # registered category names

With no category flag and no ``-e``, ``scanner.default_categories`` from the
config is used; if that is empty too, every category is scanned.

Exit status:
    0  scan completed
    1  an input could not be opened or read
    2  unknown category, unusable ``--regexp`` pattern or oversized selection

When the reader of stdout goes away (``patgrep ... | head``) the remaining
input is not scanned and the status so far is returned, without an error.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional, Sequence

from patgrep import __version__
from patgrep.config import Config, load_config
from patgrep.errors import PatternError, UnknownPatternError
from patgrep.models.match import Match
from patgrep.scanner.definitions import REGISTRY
from patgrep.scanner.engine import list_categories, scan
from patgrep.scanner.selection import Selection, select
from patgrep.utils.logger import (
    PerformanceLogger,
    clear_scan_id,
    configure_logging,
    get_logger,
    set_scan_id,
)
from patgrep.utils.ulid import generate_ulid

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_USAGE = 2

# Short aliases for the most used categories. Every category also gets a
# long flag named after it (``--ipv4-address``).
SHORT_FLAGS: dict[str, str] = {
    "ipv4-address": "-4",
    "ipv6-address": "-6",
    "ip-address": "-I",
    "mac-address": "-M",
    "email-address": "-E",
    "domain-name": "-D",
    "url": "-U",
    "hash": "-H",
    "api-key": "-A",
    "private-key": "-K",
    "credit-card": "-C",
    "ssn": "-S",
    "phone-number": "-P",
    "number": "-N",
    "word": "-W",
    "path": "-F",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patgrep",
        description="Extract well-known kinds of data (addresses, hashes, keys, ...) from text.",
    )
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Files to scan ('-' or none: standard input)",
    )
    parser.add_argument(
        "-e",
        "--regexp",
        metavar="PATTERN",
        help="Also extract matches of this RE2 pattern (reported as 'custom')",
    )
    parser.add_argument(
        "-n",
        "--offsets",
        action="store_true",
        help="Prefix each match with its start:end character offsets",
    )
    parser.add_argument(
        "--category",
        action="store_true",
        help="Prefix each match with the name of the category that matched",
    )
    parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="List the available categories and exit",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="PATH",
        help="Config file (default: .patgrep/config.yaml, then ~/.patgrep/config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log scan progress to stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    group = parser.add_argument_group("categories")
    for entry in REGISTRY:
        flags = [f"--{entry.name}"]
        if entry.name in SHORT_FLAGS:
            flags.insert(0, SHORT_FLAGS[entry.name])
        group.add_argument(
            *flags,
            dest="categories",
            action="append_const",
            const=entry.name,
            help=entry.description or None,
        )
    return parser


def format_match(match: Match, offsets: bool = False, category: bool = False) -> str:
    """Render one output line (without the newline)."""
    prefix = ""
    if category:
        prefix += f"{match.pattern_name}:"
    if offsets:
        prefix += f"{match.start_offset}:{match.end_offset}:"
    return prefix + match.matched_text


def _scan_one(
    path: str,
    selection: Selection,
    config: Config,
    args: argparse.Namespace,
) -> bool:
    """Scan one input and write its matches to stdout.

    Returns False once stdout has been closed by its reader.

    Raises:
        OSError: The input could not be opened or read.
    """
    scan_id = generate_ulid()
    set_scan_id(scan_id)
    try:
        with PerformanceLogger(f"Scan of {path}", logger):
            if path == "-":
                stream = sys.stdin.buffer
                return _emit(stream, selection, config, args, scan_id)
            with open(path, "rb") as stream:
                return _emit(stream, selection, config, args, scan_id)
    finally:
        clear_scan_id()


def _emit(stream, selection: Selection, config: Config, args: argparse.Namespace, scan_id: str) -> bool:
    out = sys.stdout
    try:
        for match in scan(
            stream,
            selection,
            chunk_size=config.scanner.chunk_size,
            max_match_length=config.scanner.max_match_length,
            encoding=config.scanner.encoding,
            scan_id=scan_id,
        ):
            out.write(format_match(match, args.offsets, args.category))
            out.write("\n")
        out.flush()
    except BrokenPipeError:
        # Reader went away (``patgrep ... | head``): stop without a traceback.
        logger.debug("Output closed by reader", scan_id=scan_id)
        _silence_stdout()
        return False
    return True


def _silence_stdout() -> None:
    """Point stdout at the null device so the interpreter's final flush succeeds."""
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return  # Not backed by a file descriptor
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line. Returns the process exit status.

    Raises:
        SystemExit: From argparse on bad usage, or from load_config() on an
                    invalid config file.
    """
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    configure_logging(
        log_level="DEBUG" if args.verbose else config.logging.level,
        json_output=config.logging.json,
    )

    if args.list:
        try:
            for name in list_categories():
                print(name)
            sys.stdout.flush()
        except BrokenPipeError:
            _silence_stdout()
        return EXIT_OK

    names = args.categories or []
    if not names and args.regexp is None:
        names = config.scanner.default_categories

    try:
        selection = select(names, args.regexp, max_mem=config.scanner.re2_max_mem)
    except (UnknownPatternError, PatternError) as exc:
        print(f"patgrep: {exc.message}", file=sys.stderr)
        return EXIT_USAGE

    logger.debug("Selection resolved", categories=selection.names, config=config.path)

    status = EXIT_OK
    for path in args.files or ["-"]:
        try:
            if not _scan_one(path, selection, config, args):
                break
        except OSError as exc:
            print(f"patgrep: {path}: {exc.strerror or exc}", file=sys.stderr)
            status = EXIT_IO_ERROR
    return status


if __name__ == "__main__":
    sys.exit(main())
