"""Pattern values and the combinators that build them.

A ``Pattern`` is an immutable grammar node. Atomic nodes carry RE2 text;
composite nodes carry the Patterns they were built from. Composites are only
ever built from existing values, so a pattern can never contain itself.

Combinators:
  - ``atom(text)``                 : RE2 text, validated at construction.
  - ``union(*patterns)``           : alternation.
  - ``sequence(*patterns)``        : concatenation.
  - ``repeat(pattern, min, max)``  : bounded repetition (``max=None``: unbounded).
  - ``optional(pattern)``          : ``repeat(pattern, 0, 1)``.

Every combinator also accepts raw RE2 text in place of a Pattern. None of them
observes scan-time state; the scan semantics (leftmost-longest) come from how
``patgrep.scanner.regex_engine`` compiles the rendered source.

IMPORT RULES:
  - ``import re2`` ONLY; ``import re`` is PROHIBITED in patgrep/scanner/.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Iterator, Optional, Union

import re2  # noqa: F401  google-re2, never stdlib re

from patgrep.errors import PatternError
from patgrep.scanner.regex_engine import try_compile


class PatternKind(str, enum.Enum):
    ATOMIC = "atomic"
    UNION = "union"
    SEQUENCE = "sequence"
    REPETITION = "repetition"


@dataclass(frozen=True)
class Pattern:
    """An immutable grammar node.

    Fields:
        kind:       ATOMIC, UNION, SEQUENCE or REPETITION.
        definition: RE2 text (ATOMIC only).
        parts:      Constituent patterns (composites only; one part for REPETITION).
        min:        Lower repetition bound (REPETITION only).
        max:        Upper repetition bound, ``None`` for unbounded (REPETITION only).
        name:       Registry name; ``None`` for anonymous building blocks.
    """

    kind: PatternKind
    definition: Optional[str] = None
    parts: tuple["Pattern", ...] = ()
    min: int = 1
    max: Optional[int] = 1
    name: Optional[str] = field(default=None, compare=False)

    # ── Rendering ──────────────────────────────────────────────────────────

    @cached_property
    def source(self) -> str:
        """The node rendered as RE2 text."""
        if self.kind is PatternKind.ATOMIC:
            return self.definition or ""
        if self.kind is PatternKind.UNION:
            return "(?:" + "|".join(part.source for part in self.parts) + ")"
        if self.kind is PatternKind.SEQUENCE:
            return "".join(_group(part) for part in self.parts)
        return _group(self.parts[0]) + _quantifier(self.min, self.max)

    # ── Structure ──────────────────────────────────────────────────────────

    @cached_property
    def nullable(self) -> bool:
        """True if the pattern can match the empty string."""
        if self.kind is PatternKind.ATOMIC:
            regex, _ = try_compile(self.source)
            return regex is not None and regex.fullmatch("") is not None
        if self.kind is PatternKind.UNION:
            return any(part.nullable for part in self.parts)
        if self.kind is PatternKind.SEQUENCE:
            return all(part.nullable for part in self.parts)
        return self.min == 0 or self.parts[0].nullable

    def walk(self) -> Iterator["Pattern"]:
        """Yield this node and every descendant, depth first."""
        yield self
        for part in self.parts:
            yield from part.walk()

    def named(self, name: str) -> "Pattern":
        """Return a copy of this pattern carrying ``name``."""
        return replace(self, name=name)

    def __str__(self) -> str:
        return self.source


PatternLike = Union[Pattern, str]


def _group(pattern: Pattern) -> str:
    # Atomic text may contain a top-level '|', so it always needs a group when
    # it is embedded; unions render their own group.
    if pattern.kind is PatternKind.UNION:
        return pattern.source
    if pattern.kind is PatternKind.ATOMIC and len(pattern.source) == 1:
        return pattern.source
    return "(?:" + pattern.source + ")"


def _quantifier(low: int, high: Optional[int]) -> str:
    if high is None:
        return {0: "*", 1: "+"}.get(low, "{%d,}" % low)
    if (low, high) == (0, 1):
        return "?"
    if low == high:
        return "{%d}" % low
    return "{%d,%d}" % (low, high)


def _coerce(value: PatternLike) -> Pattern:
    if isinstance(value, Pattern):
        return value
    if isinstance(value, str):
        return atom(value)
    raise PatternError(f"Expected a Pattern or RE2 text, got {type(value).__name__}")


# ─── Combinators ─────────────────────────────────────────────────────────────


def atom(text: str) -> Pattern:
    """Build an atomic pattern from RE2 text.

    Raises:
        PatternError: If the text is empty or re2 rejects it.
    """
    if not text:
        raise PatternError("Atomic pattern text must not be empty")
    regex, error = try_compile(text)
    if regex is None:
        raise PatternError(f"Invalid pattern {text!r}: {error}")
    return Pattern(kind=PatternKind.ATOMIC, definition=text)


def union(*patterns: PatternLike) -> Pattern:
    """Match anything any constituent matches.

    At a given start position the longest alternative wins; among equally long
    alternatives the tie is resolved by the registry's order (see Selection).
    """
    if not patterns:
        raise PatternError("union() needs at least one pattern")
    parts = tuple(_coerce(p) for p in patterns)
    if len(parts) == 1:
        return parts[0]
    return Pattern(kind=PatternKind.UNION, parts=parts)


def sequence(*patterns: PatternLike) -> Pattern:
    """Match the constituents contiguously, in order."""
    if not patterns:
        raise PatternError("sequence() needs at least one pattern")
    parts = tuple(_coerce(p) for p in patterns)
    if len(parts) == 1:
        return parts[0]
    return Pattern(kind=PatternKind.SEQUENCE, parts=parts)


def repeat(pattern: PatternLike, min: int = 1, max: Optional[int] = None) -> Pattern:
    """Match ``pattern`` between ``min`` and ``max`` times (``max=None``: no limit).

    Raises:
        PatternError: On negative, inverted or all-zero bounds, or bounds above
                      re2's repetition limit of 1000.
    """
    if min < 0:
        raise PatternError(f"repeat() min must be >= 0, got {min}")
    if max is not None and (max < min or max == 0):
        raise PatternError(f"repeat() bounds are invalid: {{{min},{max}}}")
    if min > 1000 or (max is not None and max > 1000):
        raise PatternError("repeat() bounds must not exceed 1000")
    return Pattern(kind=PatternKind.REPETITION, parts=(_coerce(pattern),), min=min, max=max)


def optional(pattern: PatternLike) -> Pattern:
    """Match ``pattern`` or nothing."""
    return repeat(pattern, 0, 1)
