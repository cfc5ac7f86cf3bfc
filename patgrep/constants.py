"""Shared constants for patgrep.

All size limits used across modules are defined here.
No magic numbers in other modules; import from here.
"""

# ─── Streaming scanner ───────────────────────────────────────────────────────

# Characters requested from the source per read() call.
DEFAULT_CHUNK_SIZE: int = 262_144  # 256 Ki characters (or bytes for binary sources)

# Upper bound on the length of a single match. A match is only emitted once it
# starts more than this many characters (plus CONTEXT_CHARS) before the end of
# the buffer, or the input has ended, so further input cannot change it.
# Longer matches are reported in pieces of this length.
DEFAULT_MAX_MATCH_LENGTH: int = 65_536  # 64 Ki characters

# Characters of left context kept in front of the cursor when the buffer is
# trimmed. Two characters cover \b and the dotted boundary rule (".5").
CONTEXT_CHARS: int = 2

# ─── re2 ─────────────────────────────────────────────────────────────────────

# Memory budget handed to re2 per compiled program. The union of every
# registered category is large; re2 falls back from the DFA to the NFA when
# this budget is exhausted, which is slower but still linear.
DEFAULT_RE2_MAX_MEM: int = 64 << 20  # 64 MiB

# ─── Input decoding ──────────────────────────────────────────────────────────

DEFAULT_ENCODING: str = "utf-8"

# Name given to a caller-supplied ad-hoc pattern inside a Selection.
CUSTOM_PATTERN_NAME: str = "custom"
