"""re2 compilation for patgrep patterns.

Provides:
  - ``compile_source()``:  compile RE2 text with leftmost-longest semantics.
  - ``try_compile()``:     same, but returns the re2 error instead of logging it.
  - ``REGEXP_TYPE``:       the compiled-pattern type, for isinstance checks.

Every pattern in patgrep is compiled with ``longest_match=True``: at the
leftmost position where anything matches, re2 reports the longest match. This
is what makes a union of categories pick ``sha256`` over two overlapping
``md5`` runs, and a whole PEM block over its base64 lines.

IMPORT RULES:
  - ``import re2`` ONLY; ``import re`` is PROHIBITED in patgrep/scanner/.
    re2 runs in linear time; backtracking engines are not allowed here.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import re2  # google-re2, never stdlib re

from patgrep.constants import DEFAULT_RE2_MAX_MEM

logger = logging.getLogger(__name__)

#: The compiled-pattern type returned by re2.compile() (re2._Regexp).
REGEXP_TYPE = type(re2.compile(r"x"))


def _options(max_mem: int, log_errors: bool) -> Any:
    options = re2.Options()
    options.longest_match = True
    options.max_mem = max_mem
    options.log_errors = log_errors
    return options


def compile_source(source: str, max_mem: int = DEFAULT_RE2_MAX_MEM) -> Any:
    """Compile ``source`` with leftmost-longest match semantics.

    Raises:
        re2.error: If ``source`` is not valid RE2 syntax (lookarounds and
                   backreferences are not supported by re2).
    """
    return re2.compile(source, _options(max_mem, log_errors=False))


def try_compile(
    source: str, max_mem: int = DEFAULT_RE2_MAX_MEM
) -> tuple[Optional[Any], Optional[str]]:
    """Compile ``source``; return ``(regex, None)`` or ``(None, error_text)``.

    Used for caller-supplied patterns, where a syntax error is a user error
    rather than a programming error.
    """
    try:
        return compile_source(source, max_mem), None
    except re2.error as exc:
        logger.debug("re2 rejected pattern %r: %s", source, exc)
        return None, str(exc)
