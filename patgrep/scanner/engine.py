"""Extraction engine: the library boundary consumed by the CLI.

Provides:
  - ``list_categories()``: registered category names, registration order.
  - ``scan()``:            lazy, ordered, non-overlapping matches from a source.

``scan()`` resolves the selection eagerly, so ``UnknownPatternError`` is raised
by the call itself and never after output has started. The returned iterator
reads the source only as the consumer advances; abandoning it is the only
cancellation mechanism and needs no cleanup.

Sources:
  - ``str``                       scanned as is.
  - ``bytes`` / ``bytearray``     decoded with ``encoding``.
  - objects with ``read(n)``      text or binary file objects, sockets wrapped in
                                  ``makefile()``, ``sys.stdin`` / ``sys.stdin.buffer``.

Undecodable bytes are replaced with U+FFFD, which no category matches.
Errors raised by ``read()`` propagate to the consumer unchanged.

IMPORT RULES:
  - ``import re2`` ONLY; ``import re`` is PROHIBITED in patgrep/scanner/.
"""

from __future__ import annotations

import codecs
from typing import Any, Iterable, Iterator, Optional, Union

import re2  # noqa: F401  google-re2, never stdlib re

from patgrep.constants import DEFAULT_CHUNK_SIZE, DEFAULT_ENCODING, DEFAULT_MAX_MATCH_LENGTH
from patgrep.models.match import Match
from patgrep.scanner.definitions import REGISTRY
from patgrep.scanner.registry import PatternRegistry
from patgrep.scanner.selection import Selection, select
from patgrep.scanner.streaming_scanner import StreamingScanner
from patgrep.utils.logger import get_logger
from patgrep.utils.ulid import generate_ulid

logger = get_logger(__name__)

Source = Union[str, bytes, bytearray, Any]


def list_categories(registry: PatternRegistry = REGISTRY) -> list[str]:
    """Registered category names, in registration order."""
    return registry.names()


def scan(
    source: Source,
    selection: Optional[Selection] = None,
    *,
    names: Iterable[str] = (),
    custom: Optional[str] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_match_length: int = DEFAULT_MAX_MATCH_LENGTH,
    encoding: str = DEFAULT_ENCODING,
    scan_id: Optional[str] = None,
) -> Iterator[Match]:
    """Scan ``source`` and return a lazy iterator of matches.

    Either pass a prepared ``selection`` or let ``scan()`` build one from
    ``names`` and ``custom`` (an empty ``names`` with no ``custom`` selects
    every category).

    Args:
        source:           Text, bytes, or a readable object (see module docstring).
        selection:        Pre-resolved Selection; exclusive with names/custom.
        names:            Category names to select.
        custom:           Additional caller-supplied RE2 pattern.
        chunk_size:       Characters (or bytes) requested per read().
        max_match_length: Longest match guaranteed to be reported whole.
        encoding:         Encoding for binary sources.
        scan_id:          Log correlation id; a ULID is generated if omitted.

    Returns:
        Iterator of ``Match`` in strictly increasing ``start_offset`` order.

    Raises:
        UnknownPatternError: Unknown category name or unusable custom pattern.
        ValueError:          Conflicting or non-positive arguments.
        LookupError:         Unknown ``encoding``.
    """
    if selection is None:
        selection = select(names, custom)
    elif names or custom is not None:
        raise ValueError("Pass either a selection or names/custom, not both")
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    codecs.lookup(encoding)
    if not isinstance(source, (str, bytes, bytearray, memoryview)) and not hasattr(source, "read"):
        raise TypeError(f"Cannot scan object of type {type(source).__name__}")

    scanner = StreamingScanner(
        selection,
        max_match_length=max_match_length,
        scan_id=scan_id or generate_ulid(),
    )
    return _run(scanner, _read_chunks(source, chunk_size, encoding))


def _run(scanner: StreamingScanner, chunks: Iterator[str]) -> Iterator[Match]:
    logger.debug(
        "Scan started",
        scan_id=scanner.scan_id,
        categories=len(scanner.selection.entries),
    )
    for chunk in chunks:
        yield from scanner.feed(chunk)
    yield from scanner.flush()
    logger.debug(
        "Scan finished",
        scan_id=scanner.scan_id,
        chars=scanner.chars_consumed,
        matches=scanner.match_count,
        passes=scanner.pass_count,
    )


def _read_chunks(source: Source, chunk_size: int, encoding: str) -> Iterator[str]:
    """Yield decoded text chunks from ``source``."""
    if isinstance(source, str):
        for i in range(0, len(source), chunk_size):
            yield source[i:i + chunk_size]
        return

    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
        for i in range(0, len(data), chunk_size):
            text = decoder.decode(data[i:i + chunk_size])
            if text:
                yield text
    else:
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            if isinstance(chunk, str):
                yield chunk
                continue
            text = decoder.decode(chunk)
            if text:
                yield text

    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail
