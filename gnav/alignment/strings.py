"""Helpers for gapped alignment strings.

An aligned pair is two equal-length strings where GAP_CHAR marks a base
present in the other sequence only.
"""

import re
from dataclasses import dataclass
from typing import List

from gnav.config import GAP_CHAR

GAP_RUN = re.compile(re.escape(GAP_CHAR) + "+")


@dataclass
class SequenceSegment:
    """A run of a gapped string: either bases or gap characters."""
    is_gap: bool
    index: int     # string index where the run starts
    length: int    # run length in characters


def segment_sequence(sequence: str, min_gap_length: float, only_gaps = False) -> List[SequenceSegment]:
    """Split a gapped string into gap runs and base runs.

    Gap runs shorter than min_gap_length count as bases.  Gap runs come first in
    the result, followed by base runs; sort by index if order matters.

    Args:
        sequence: gapped string
        min_gap_length: shortest gap run reported as a gap
        only_gaps: return gap runs only
    """
    gaps = []
    for match in GAP_RUN.finditer(sequence):
        length = match.end() - match.start()
        if length >= min_gap_length:
            gaps.append(SequenceSegment(True, match.start(), length))
    if only_gaps:
        return gaps

    bases = []
    index = 0
    for gap in gaps:
        if gap.index > index:
            bases.append(SequenceSegment(False, index, gap.index - index))
        index = gap.index + gap.length
    if index < len(sequence):
        bases.append(SequenceSegment(False, index, len(sequence) - index))
    return gaps + bases


def make_base_number_lookup(sequence: str, base_at_start: int, is_reverse = False) -> List[int]:
    """Base number at every string index of a gapped string.

    Gap characters get the number of the next real base.  On the reverse strand
    numbers count down from base_at_start.
    """
    step = -1 if is_reverse else 1
    lookup = []
    base = base_at_start
    for char in sequence:
        lookup.append(base)
        if char != GAP_CHAR:
            base += step
    return lookup


def count_bases(sequence: str) -> int:
    """Number of non-gap characters."""
    return len(sequence) - sequence.count(GAP_CHAR)


def index_of_base(sequence: str, base: int) -> int:
    """String index just past the base-th real base of a gapped string.

    index_of_base(s, 0) is 0; for "A--CG", base 1 gives 1 and base 2 gives 4.
    """
    if base <= 0:
        return 0
    for index, char in enumerate(sequence):
        if char != GAP_CHAR:
            base -= 1
            if base == 0:
                return index + 1
    return len(sequence)
