"""Pattern registry: named, compiled, immutable once frozen.

``PatternRegistry`` maps category names to ``PatternEntry`` values. Each entry
is compiled when it is registered, so no pattern compilation happens per scan.
Registration order is significant: it is the order ``list_categories()``
reports, and it breaks ties between equally long matches.

IMPORT RULES:
  - ``import re2`` ONLY; ``import re`` is PROHIBITED in patgrep/scanner/.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

import re2  # noqa: F401  google-re2, never stdlib re

from patgrep.constants import DEFAULT_RE2_MAX_MEM
from patgrep.errors import DuplicateNameError, PatternError, UnknownPatternError
from patgrep.scanner.combinators import Pattern, atom
from patgrep.scanner.regex_engine import compile_source

#: Category names are kebab-case: ``ipv4-address``, ``sha256``, ``api-key``.
_NAME_RE = re2.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")

# Boundary rules checked by the selection layer around each match. re2's \b is
# ASCII-only and re2 has no lookbehind, so these cannot live in the regex.
#
#   BOUNDARY_WORD:   no letter, digit, combining mark or "_" touches the match.
#   BOUNDARY_DOTTED: as BOUNDARY_WORD, and no "." that leads into such a
#                    character either ("v1.2.3" holds no version "2.3").
BOUNDARY_WORD = "word"
BOUNDARY_DOTTED = "dotted"
BOUNDARY_RULES = frozenset({BOUNDARY_WORD, BOUNDARY_DOTTED})


@dataclass(frozen=True)
class PatternEntry:
    """A registered category.

    Fields:
        name:        Kebab-case category name, unique within the registry.
        pattern:     The grammar node (carries ``name``).
        regex:       Compiled re2 program, leftmost-longest. Compiled once.
        order:       Registration index; lower wins ties between equal matches.
        description: One-line description, used for CLI help.
        boundary:    Optional boundary rule (``BOUNDARY_WORD`` or
                     ``BOUNDARY_DOTTED``) a match must satisfy.
    """

    name: str
    pattern: Pattern
    regex: Any  # re2._Regexp, compiled at registration
    order: int
    description: str = ""
    boundary: Optional[str] = None


class PatternRegistry:
    """Ordered name → PatternEntry table.

    Mutable only until ``freeze()``; after that it is read-only and may be
    shared by any number of concurrent scans without locking.
    """

    def __init__(self, max_mem: int = DEFAULT_RE2_MAX_MEM) -> None:
        self._entries: dict[str, PatternEntry] = {}
        self._max_mem = max_mem
        self._frozen = False

    # ── Construction ───────────────────────────────────────────────────────

    def register(
        self,
        name: str,
        definition: Union[Pattern, str],
        description: str = "",
        boundary: Optional[str] = None,
    ) -> Pattern:
        """Add ``definition`` under ``name`` and return the named Pattern.

        Raises:
            DuplicateNameError: ``name`` is already registered, frozen or not.
            PatternError:       The registry is frozen, the name is not
                                kebab-case, the boundary rule is unknown, or
                                the definition can match the empty string.
        """
        if isinstance(name, str) and name in self._entries:
            raise DuplicateNameError(name)
        if self._frozen:
            raise PatternError(f"Registry is frozen; cannot register {name!r}")
        if not isinstance(name, str) or _NAME_RE.fullmatch(name) is None:
            raise PatternError(f"Invalid category name: {name!r}")
        if boundary is not None and boundary not in BOUNDARY_RULES:
            raise PatternError(f"Unknown boundary rule for {name!r}: {boundary!r}")

        pattern = definition if isinstance(definition, Pattern) else atom(definition)
        if pattern.nullable:
            raise PatternError(f"Category {name!r} can match the empty string")
        pattern = pattern.named(name)

        self._entries[name] = PatternEntry(
            name=name,
            pattern=pattern,
            regex=compile_source(pattern.source, self._max_mem),
            order=len(self._entries),
            description=description,
            boundary=boundary,
        )
        return pattern

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ── Lookup ─────────────────────────────────────────────────────────────

    def resolve(self, name: str) -> PatternEntry:
        """Return the entry for ``name``.

        Raises:
            UnknownPatternError: ``name`` is not registered.
        """
        try:
            return self._entries[name]
        except (KeyError, TypeError):
            raise UnknownPatternError(str(name)) from None

    def names(self) -> list[str]:
        """Category names in registration order."""
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[PatternEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"<PatternRegistry {len(self)} categories, {state}>"
