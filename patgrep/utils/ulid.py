"""ULID generation utility for patgrep.

Provides a single ``generate_ulid()`` function returning a 26-character ULID
used as the ``scan_id`` correlation key in structured log entries, so the
debug events of one scan can be told apart when several scans interleave.

Uses the ``python-ulid`` library. Do NOT hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: Crockford Base32 ULID, e.g. ``"01KJ0JRVHYA7KX32VPN5ZSCTMV"``.
    """
    return str(ULID())
