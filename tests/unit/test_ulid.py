"""Unit tests for patgrep/utils/ulid.py: scan correlation ids."""

from __future__ import annotations

import re2

from patgrep.utils.ulid import generate_ulid

# Crockford Base32 charset: 0-9 and A-Z, excluding I, L, O, U
ULID_CHARSET = re2.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")
ULID_LENGTH = 26


def test_generate_ulid_returns_string() -> None:
    assert isinstance(generate_ulid(), str)


def test_generate_ulid_format() -> None:
    result = generate_ulid()
    assert len(result) == ULID_LENGTH
    assert ULID_CHARSET.match(result), f"ULID {result!r} contains invalid characters"


def test_generate_ulid_unique() -> None:
    ids = {generate_ulid() for _ in range(1000)}
    assert len(ids) == 1000
