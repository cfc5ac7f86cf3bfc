"""Match value type yielded by the extraction engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Match:
    """One located occurrence of a category in the scanned input.

    Fields:
        start_offset: Character offset of the first matched character.
        end_offset:   Character offset one past the last matched character
                      (half-open range, ``start_offset < end_offset``).
        matched_text: The matched characters, verbatim.
        pattern_name: Name of the top-level category that matched: the
                      selected category, not an inner constituent.

    Offsets count characters of the decoded input stream. The engine keeps no
    reference to a Match after yielding it.
    """

    start_offset: int
    end_offset: int
    matched_text: str
    pattern_name: str

    @property
    def span(self) -> tuple[int, int]:
        return (self.start_offset, self.end_offset)

    def __len__(self) -> int:
        return self.end_offset - self.start_offset
