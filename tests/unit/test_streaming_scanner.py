"""Unit tests for StreamingScanner (patgrep/scanner/streaming_scanner.py).

Tests:
  - Lookahead accumulation: nothing is emitted until a match is final
  - Matches spanning feed() boundaries are reported once, whole
  - Absolute offsets survive buffer trimming; memory stays bounded
  - Left context is kept so \\b and boundary rules at the cursor are judged correctly
  - Matches longer than max_match_length are cut; the buffer never grows past
    the bound, however long a token is
  - Chunked output equals single-shot output
  - flush() idempotence and feed()-after-flush rejection
"""

from __future__ import annotations

import pytest

from patgrep.constants import CONTEXT_CHARS
from patgrep.models.match import Match
from patgrep.scanner.selection import select
from patgrep.scanner.streaming_scanner import StreamingScanner

SCAN_ID = "01HXXXXXXXXXXXXXXXXXXXTEST"

MD5_HEX = "d41d8cd98f00b204e9800998ecf8427e"

MIXED_TEXT = (
    "Contact a.b@example.com or ops@corp.example.org; "
    "hosts 10.0.0.5, 192.168.1.254 and 2001:db8::1. "
    f"digest {MD5_HEX} path /var/log/syslog "
    "see https://example.com/a?b=1 or call (555) 555-0100. "
    "value -3.14 version 1.2.3 'quoted' \"strings\" end"
)


def make_scanner(names=(), **kwargs) -> StreamingScanner:
    return StreamingScanner(select(names), scan_id=SCAN_ID, **kwargs)


def feed_in_chunks(scanner: StreamingScanner, text: str, size: int) -> list[Match]:
    matches: list[Match] = []
    for i in range(0, len(text), size):
        matches.extend(scanner.feed(text[i:i + size]))
    matches.extend(scanner.flush())
    return matches


# ─── Accumulation ─────────────────────────────────────────────────────────────


class TestAccumulation:
    def test_nothing_emitted_without_lookahead(self) -> None:
        scanner = make_scanner(["ipv4-address"], max_match_length=16)
        assert scanner.feed("10.0.0.1 ") == []
        assert scanner.pass_count == 0

    def test_flush_emits_pending(self) -> None:
        scanner = make_scanner(["ipv4-address"], max_match_length=16)
        scanner.feed("10.0.0.1 ")
        assert scanner.flush() == [Match(0, 8, "10.0.0.1", "ipv4-address")]

    def test_final_match_emitted_before_flush(self) -> None:
        scanner = make_scanner(["ipv4-address"], max_match_length=8)
        matches = scanner.feed("10.0.0.1 and more text")
        assert matches == [Match(0, 8, "10.0.0.1", "ipv4-address")]

    def test_empty_feed_is_noop(self) -> None:
        scanner = make_scanner(["word"])
        assert scanner.feed("") == []
        assert scanner.chars_consumed == 0

    def test_counters(self) -> None:
        scanner = make_scanner(["word"], max_match_length=8)
        matches = feed_in_chunks(scanner, "one two three four", 5)
        assert scanner.chars_consumed == 18
        assert scanner.match_count == len(matches) == 4
        assert scanner.pass_count >= 1


# ─── Chunk boundaries ─────────────────────────────────────────────────────────


class TestChunkBoundaries:
    def test_match_split_across_feeds(self) -> None:
        scanner = make_scanner(["ipv4-address"], max_match_length=16)
        matches = scanner.feed("ip 10.0.") + scanner.feed("0.1 ") + scanner.flush()
        assert matches == [Match(3, 11, "10.0.0.1", "ipv4-address")]

    def test_word_resumed_after_partial_scan(self) -> None:
        scanner = make_scanner(["word"], max_match_length=8)
        matches = scanner.feed("hel") + scanner.feed("lo wor") + scanner.feed("ld") + scanner.flush()
        assert matches == [
            Match(0, 5, "hello", "word"),
            Match(6, 11, "world", "word"),
        ]

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 13, 64, 1000])
    def test_chunked_equals_single_shot(self, size: int) -> None:
        expected = feed_in_chunks(make_scanner(max_match_length=64), MIXED_TEXT, len(MIXED_TEXT))
        actual = feed_in_chunks(make_scanner(max_match_length=64), MIXED_TEXT, size)
        assert actual == expected

    @pytest.mark.parametrize("size", [1, 2, 5])
    def test_word_boundary_context_kept(self, size: int) -> None:
        """A digest glued to a preceding letter must not be reported, however the input is cut."""
        text = "    " * 20 + "x" + MD5_HEX + " " + MD5_HEX + " " * 50
        matches = feed_in_chunks(make_scanner(["md5"], max_match_length=40), text, size)
        assert [m.start_offset for m in matches] == [80 + 1 + 32 + 1]

    def test_unclosed_quote_not_skipped(self) -> None:
        """An address inside a still-open string must not move the cursor past the quote."""
        scanner = make_scanner(["ipv4-address", "double-quoted-string"], max_match_length=24)
        matches = scanner.feed(" " * 20 + '"host 10.0.0.1') + scanner.feed(' up"  ') + scanner.flush()
        assert matches == [Match(20, 38, '"host 10.0.0.1 up"', "double-quoted-string")]

    def test_offsets_are_absolute_after_trimming(self) -> None:
        text = " " * 1000 + "10.1.2.3" + " " * 100
        scanner = make_scanner(["ipv4-address"], max_match_length=16)
        matches: list[Match] = []
        for i in range(0, len(text), 50):
            matches.extend(scanner.feed(text[i:i + 50]))
            assert len(scanner.buffer) <= 16 + 50 + 2 * CONTEXT_CHARS
        matches.extend(scanner.flush())
        assert matches == [Match(1000, 1008, "10.1.2.3", "ipv4-address")]

    def test_matches_ordered_and_non_overlapping(self) -> None:
        matches = feed_in_chunks(make_scanner(max_match_length=64), MIXED_TEXT, 3)
        for prev, cur in zip(matches, matches[1:]):
            assert prev.end_offset <= cur.start_offset
        for m in matches:
            assert MIXED_TEXT[m.start_offset:m.end_offset] == m.matched_text

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 64])
    def test_dotted_fragments_skipped_across_feeds(self, size: int) -> None:
        text = "oid 999.10.0.0.5 and 1.2.3.4.5 but 10.0.0.1. ok" + " " * 40
        matches = feed_in_chunks(make_scanner(["ipv4-address"], max_match_length=16), text, size)
        start = text.index("10.0.0.1.")
        assert matches == [Match(start, start + 8, "10.0.0.1", "ipv4-address")]

    @pytest.mark.parametrize("size", [1, 4, 64])
    def test_version_inside_tag_skipped_across_feeds(self, size: int) -> None:
        text = "release v1.2.3 replaces 1.2.2." + " " * 30
        matches = feed_in_chunks(make_scanner(["version-number"], max_match_length=16), text, size)
        assert [m.matched_text for m in matches] == ["1.2.2"]


# ─── Long matches ─────────────────────────────────────────────────────────────


class TestLongMatches:
    @pytest.mark.parametrize("size", [1, 7, 200])
    def test_over_long_word_reported_in_pieces(self, size: int) -> None:
        text = "x " + "A" * 100 + " y"
        scanner = make_scanner(["word"], max_match_length=16)
        matches: list[Match] = []
        for i in range(0, len(text), size):
            matches.extend(scanner.feed(text[i:i + size]))
            assert len(scanner.buffer) <= 16 + size + 2 * CONTEXT_CHARS
        matches.extend(scanner.flush())

        ends = [min(s + 16, 102) for s in range(2, 102, 16)]
        pieces = [Match(s, e, "A" * (e - s), "word") for s, e in zip(range(2, 102, 16), ends)]
        assert matches == [Match(0, 1, "x", "word"), *pieces, Match(103, 104, "y", "word")]

    def test_buffer_bounded_on_endless_token(self) -> None:
        scanner = make_scanner(["word"], max_match_length=64)
        matches: list[Match] = []
        for _ in range(500):
            matches.extend(scanner.feed("A" * 100))
            assert len(scanner.buffer) <= 64 + 100 + 2 * CONTEXT_CHARS
        matches.extend(scanner.flush())

        assert all(len(m) <= 64 for m in matches)
        assert "".join(m.matched_text for m in matches) == "A" * 50_000
        for prev, cur in zip(matches, matches[1:]):
            assert prev.end_offset == cur.start_offset

    def test_match_at_the_bound_reported_whole(self) -> None:
        text = "  " + "B" * 16 + "  " + " " * 20
        matches = feed_in_chunks(make_scanner(["word"], max_match_length=16), text, 3)
        assert matches == [Match(2, 18, "B" * 16, "word")]


# ─── Lifecycle ────────────────────────────────────────────────────────────────


class TestLifecycle:
    def test_non_positive_max_match_length(self) -> None:
        with pytest.raises(ValueError):
            make_scanner(["word"], max_match_length=0)

    def test_flush_idempotent(self) -> None:
        scanner = make_scanner(["word"])
        scanner.feed("alpha beta")
        assert len(scanner.flush()) == 2
        assert scanner.flush() == []
        assert scanner.finished is True

    def test_feed_after_flush_rejected(self) -> None:
        scanner = make_scanner(["word"])
        scanner.flush()
        with pytest.raises(RuntimeError):
            scanner.feed("late")

    def test_flush_on_empty_input(self) -> None:
        assert make_scanner(["word"]).flush() == []

    def test_on_chunk_scan_callback(self) -> None:
        timings: list[float] = []
        scanner = make_scanner(["word"], max_match_length=4, on_chunk_scan=timings.append)
        feed_in_chunks(scanner, "one two three four five", 6)
        assert len(timings) == scanner.pass_count
        assert all(isinstance(t, float) and t >= 0 for t in timings)
