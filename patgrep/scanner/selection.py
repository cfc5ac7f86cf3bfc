"""Selection layer: category names (+ optional custom regex) → one union.

``select()`` resolves a set of requested category names through the registry
into a ``Selection``: the union of the resolved patterns, compiled once, plus
the per-category entries used to name each match.

  - Empty selection      → every registered category.
  - Unknown name         → ``UnknownPatternError`` before anything is scanned.
  - Custom pattern text  → compiled with the same leftmost-longest options and
                           appended as the last constituent, named ``custom``.
  - Boundary rules       → a match that is a fragment of a longer token (see
                           ``within_boundary``) is rejected by ``classify()``.

A Selection is read-only and lives for one invocation; it may be reused for
any number of scans.

IMPORT RULES:
  - ``import re2`` ONLY; ``import re`` is PROHIBITED in patgrep/scanner/.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import re2  # noqa: F401  google-re2, never stdlib re

from patgrep.constants import CUSTOM_PATTERN_NAME, DEFAULT_RE2_MAX_MEM
from patgrep.errors import PatternError, UnknownPatternError
from patgrep.scanner.combinators import Pattern, PatternKind, union
from patgrep.scanner.definitions import REGISTRY
from patgrep.scanner.regex_engine import compile_source, try_compile
from patgrep.scanner.registry import BOUNDARY_DOTTED, PatternEntry, PatternRegistry

logger = logging.getLogger(__name__)


def _is_token_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_" or unicodedata.category(ch).startswith("M")


def within_boundary(rule: Optional[str], text: str, start: int, end: int) -> bool:
    """Check ``text[start:end]`` against a registry boundary rule.

    ``None`` accepts everything. Needs two characters of context on each side
    of the match to decide ``BOUNDARY_DOTTED``.
    """
    if rule is None:
        return True
    dotted = rule == BOUNDARY_DOTTED
    if start > 0:
        before = text[start - 1]
        if _is_token_char(before):
            return False
        if dotted and before == "." and start > 1 and _is_token_char(text[start - 2]):
            return False
    if end < len(text):
        after = text[end]
        if _is_token_char(after):
            return False
        if dotted and after == "." and end + 1 < len(text) and _is_token_char(text[end + 1]):
            return False
    return True


@dataclass(frozen=True)
class Selection:
    """The resolved, compiled pattern for one invocation.

    Fields:
        entries: Selected categories in registration order; the custom
                 pattern, when present, is last.
        pattern: Union of the entries' patterns.
        regex:   ``pattern`` compiled leftmost-longest.
    """

    entries: tuple[PatternEntry, ...]
    pattern: Pattern
    regex: Any  # re2._Regexp

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def classify(self, text: str, start: int, end: int) -> Optional[tuple[int, str]]:
        """Decide which category owns the match the union found at ``text[start:end]``.

        Returns ``(end, name)``, or ``None`` when every constituent that
        matches at ``start`` breaks its boundary rule (the match is a fragment
        of a longer token and is dropped).

        The union's longest match at ``start`` is the longest of its
        constituents' matches there, so normally some constituent ends exactly
        at ``end``; the earliest such constituent names the match. When that
        constituent's boundary rule rejects it, the longest remaining
        constituent match wins instead and the returned end is shorter.

        Each constituent is matched against a window holding one character of
        context on either side (enough for ``\\b``). A constituent whose match
        runs to the very end of the window may have been misjudged at that
        edge and is re-checked against the full text.
        """
        if len(self.entries) == 1:
            entry = self.entries[0]
            if within_boundary(entry.boundary, text, start, end):
                return end, entry.name
            return None

        lo = max(0, start - 1)
        hi = min(len(text), end + 1)
        window = text[lo:hi]
        pos = start - lo

        best: Optional[tuple[int, str]] = None
        rejected = False
        for entry in self.entries:
            m = entry.regex.match(window, pos)
            if m is None:
                continue
            stop = m.end() + lo
            if m.end() == len(window) and hi < len(text):
                m = entry.regex.match(text, start)
                if m is None:
                    continue
                stop = m.end()
            if stop <= start or stop > end:
                continue
            if not within_boundary(entry.boundary, text, start, stop):
                rejected = True
                continue
            if stop == end:
                return end, entry.name
            if best is None or stop > best[0]:
                best = (stop, entry.name)

        if best is None and not rejected:
            # Unreachable for registry categories; a custom regex using ^ or $
            # can behave differently inside the window.
            return end, self.entries[-1].name
        return best


def _custom_entry(custom: str, order: int, max_mem: int) -> PatternEntry:
    regex, error = try_compile(custom, max_mem)
    if regex is None:
        raise UnknownPatternError(
            CUSTOM_PATTERN_NAME, f"Invalid custom pattern {custom!r}: {error}"
        )
    if regex.fullmatch("") is not None:
        raise UnknownPatternError(
            CUSTOM_PATTERN_NAME, f"Custom pattern {custom!r} matches the empty string"
        )
    pattern = Pattern(kind=PatternKind.ATOMIC, definition=custom, name=CUSTOM_PATTERN_NAME)
    return PatternEntry(name=CUSTOM_PATTERN_NAME, pattern=pattern, regex=regex, order=order)


def select(
    names: Iterable[str] = (),
    custom: Optional[str] = None,
    registry: PatternRegistry = REGISTRY,
    max_mem: int = DEFAULT_RE2_MAX_MEM,
) -> Selection:
    """Resolve ``names`` (and ``custom``) into a compiled Selection.

    Args:
        names:    Category names; order and duplicates are irrelevant.
        custom:   Optional RE2 pattern text supplied by the caller.
        registry: Registry to resolve against (the process-wide one by default).
        max_mem:  re2 memory budget for the combined program.

    Raises:
        UnknownPatternError: An unregistered name, or an unusable custom pattern.
    """
    requested = set(names)
    if requested:
        entries = sorted((registry.resolve(n) for n in requested), key=lambda e: e.order)
    elif custom is None:
        entries = list(registry)
    else:
        entries = []

    if custom is not None:
        entries.append(_custom_entry(custom, len(registry), max_mem))

    if not entries:
        raise UnknownPatternError("", "Empty selection: the registry has no categories")

    pattern = union(*(entry.pattern for entry in entries))
    try:
        regex = compile_source(pattern.source, max_mem)
    except re2.error as exc:
        # Each constituent compiled on its own; only the budget can fail here.
        raise PatternError(f"Combined pattern failed to compile: {exc}") from exc

    logger.debug("Selected %d categories: %s", len(entries), [e.name for e in entries])
    return Selection(entries=tuple(entries), pattern=pattern, regex=regex)
