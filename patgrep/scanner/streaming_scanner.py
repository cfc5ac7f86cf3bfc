"""StreamingScanner: chunk accumulator and leftmost-longest scanner.

Provides the ``StreamingScanner`` class used by ``scan()`` in
``patgrep/scanner/engine.py`` to scan arbitrarily large input chunk by chunk
while keeping memory bounded.

Key design constraints:
  - One pass, left to right. At each position the combined pattern's longest
    match wins; the cursor then moves past it. Matches are therefore ordered
    by start offset and never overlap.
  - A match is only reported once it is *final*: it starts more than
    ``max_match_length + CONTEXT_CHARS`` characters before the end of the
    buffer, or the input has ended. Every match of at most
    ``max_match_length`` characters starting there is then fully visible,
    right context included, so more input cannot change it.
  - A longer match is cut: its first ``max_match_length`` characters are
    reported and scanning resumes at the cut as if the input started there.
    The buffer therefore never holds more than
    ``max_match_length + 2 * CONTEXT_CHARS`` characters plus one chunk.
  - A match that ``Selection.classify()`` rejects as a fragment of a longer
    token is skipped whole.
  - ``CONTEXT_CHARS`` characters in front of the cursor are kept when the
    buffer is trimmed so that ``\\b`` assertions and boundary rules at the
    cursor see their left context.
  - No blocking I/O - the scanner never reads; callers ``feed()`` it text.

IMPORT RULE:
  ``import re2`` ONLY. Never ``import re``.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import re2  # noqa: F401  google-re2, never stdlib re

from patgrep.constants import CONTEXT_CHARS, DEFAULT_MAX_MATCH_LENGTH
from patgrep.models.match import Match
from patgrep.scanner.selection import Selection

logger = logging.getLogger(__name__)


class StreamingScanner:
    """Per-scan state machine for chunked scanning.

    Instantiated once per scan. Each ``feed()`` appends decoded text and
    returns the matches that became final; ``flush()`` is called once at end
    of input and returns the rest.

    Thread-safety:
      Owned by a single scan. NOT safe for concurrent access; concurrent scans
      each create their own scanner and share only the read-only Selection.

    Args:
        selection:        Resolved categories to scan for.
        max_match_length: Longest match guaranteed to be reported whole.
        scan_id:          Identifier for log correlation.
        on_chunk_scan:    Optional callback invoked with elapsed_ms after each
                          buffer pass.

    Usage::

        scanner = StreamingScanner(select(["ipv4-address"]), scan_id=scan_id)
        for chunk in chunks:
            for match in scanner.feed(chunk):
                ...
        for match in scanner.flush():
            ...
    """

    def __init__(
        self,
        selection: Selection,
        max_match_length: int = DEFAULT_MAX_MATCH_LENGTH,
        scan_id: str = "",
        on_chunk_scan: Optional[Callable[[float], None]] = None,
    ) -> None:
        if max_match_length <= 0:
            raise ValueError(f"max_match_length must be positive, got {max_match_length}")

        self.selection: Selection = selection
        self.max_match_length: int = max_match_length
        self.scan_id: str = scan_id

        #: Decoded text not yet scanned past, plus CONTEXT_CHARS of left context.
        self.buffer: str = ""

        #: Absolute offset of buffer[0] in the input stream.
        self.base_offset: int = 0

        #: Scan position, relative to buffer.
        self.cursor: int = 0

        #: Total characters fed so far.
        self.chars_consumed: int = 0

        #: Matches returned so far.
        self.match_count: int = 0

        #: Number of buffer passes performed.
        self.pass_count: int = 0

        #: True once flush() has run; further feed() calls are rejected.
        self.finished: bool = False

        self._on_chunk_scan: Optional[Callable[[float], None]] = on_chunk_scan

    # ── Public API ─────────────────────────────────────────────────────────────

    def feed(self, text: str) -> list[Match]:
        """Append ``text`` and return the matches that are now final.

        Raises:
            RuntimeError: If called after ``flush()``.
        """
        if self.finished:
            raise RuntimeError("feed() called after flush()")
        if not text:
            return []
        self.buffer += text
        self.chars_consumed += len(text)
        if self._safe_limit(final=False) <= self.cursor:
            return []  # Not enough lookahead yet
        return self._scan(final=False)

    def flush(self) -> list[Match]:
        """Scan the remaining buffer at end of input. Idempotent."""
        if self.finished:
            return []
        matches = self._scan(final=True)
        self.finished = True
        self.buffer = ""
        self.base_offset += self.cursor
        self.cursor = 0
        return matches

    # ── Private Scan Logic ────────────────────────────────────────────────────

    def _safe_limit(self, final: bool) -> int:
        """Matches starting before this buffer index are final."""
        if final:
            return len(self.buffer)
        return len(self.buffer) - self.max_match_length - CONTEXT_CHARS

    def _scan(self, final: bool) -> list[Match]:
        matches: list[Match] = []
        t0 = time.perf_counter()

        restart = True
        while restart:
            restart = False
            buffer = self.buffer
            safe_limit = self._safe_limit(final)
            for m in self.selection.regex.finditer(buffer, self.cursor):
                start, end = m.start(), m.end()
                if start >= safe_limit:
                    break  # May still change with more input
                if start == end:
                    continue  # Empty match (custom patterns only)

                found = self.selection.classify(buffer, start, end)
                if found is None:
                    # Fragment of a longer token: skip the whole token.
                    self.cursor = end
                    continue
                stop, name = found

                if stop - start > self.max_match_length:
                    # Over-long: report the first max_match_length characters
                    # and carry on as if the input started at the cut.
                    cut = start + self.max_match_length
                    matches.append(self._make_match(buffer, start, cut, name))
                    self._drop_before(cut)
                    restart = True
                    break

                matches.append(self._make_match(buffer, start, stop, name))
                self.cursor = stop
                if stop < end:
                    restart = True  # finditer has already moved past stop
                    break

        self.cursor = max(self.cursor, safe_limit)

        elapsed_ms = (time.perf_counter() - t0) * 1000
        self.pass_count += 1
        self.match_count += len(matches)
        if self._on_chunk_scan is not None:
            self._on_chunk_scan(elapsed_ms)

        logger.debug(
            "[%s] pass=%d buffer=%d matches=%d elapsed_ms=%.3f",
            self.scan_id,
            self.pass_count,
            len(self.buffer),
            len(matches),
            elapsed_ms,
        )

        if not final:
            self._trim()
        return matches

    def _make_match(self, buffer: str, start: int, end: int, name: str) -> Match:
        return Match(
            start_offset=self.base_offset + start,
            end_offset=self.base_offset + end,
            matched_text=buffer[start:end],
            pattern_name=name,
        )

    def _drop_before(self, index: int) -> None:
        """Discard buffer[:index] entirely, left context included."""
        self.buffer = self.buffer[index:]
        self.base_offset += index
        self.cursor = 0

    def _trim(self) -> None:
        """Drop scanned text, keeping CONTEXT_CHARS before the cursor."""
        keep_from = max(0, self.cursor - CONTEXT_CHARS)
        if keep_from:
            self.buffer = self.buffer[keep_from:]
            self.base_offset += keep_from
            self.cursor -= keep_from
