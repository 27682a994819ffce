"""Insertion of gaps into an existing navigation context.

Used to open up room on the primary axis for bases that exist only in a query
genome, so aligned sequences of different lengths can be drawn base for base.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List

import numpy as np

from gnav.model.feature import Feature, Gap, NavEntry, is_gap
from gnav.model.interval import ChromosomeInterval
from gnav.model.navigation_context import NavigationContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GapDescriptor:
    """length gap bases to insert right before axis coordinate context_base."""
    context_base: int
    length: int


def _split_entry(entry: NavEntry, offset: int):
    """Cut an entry in two at an axis offset within it."""
    if is_gap(entry):
        return Gap(offset, entry.label), Gap(entry.length - offset, entry.label)

    locus = entry.locus
    if entry.is_reverse_strand():
        cut = locus.end - offset
        left = ChromosomeInterval(locus.chr, cut, locus.end)
        right = ChromosomeInterval(locus.chr, locus.start, cut)
    else:
        cut = locus.start + offset
        left = ChromosomeInterval(locus.chr, locus.start, cut)
        right = ChromosomeInterval(locus.chr, cut, locus.end)
    return Feature(entry.name, left, entry.strand), Feature(entry.name, right, entry.strand)


class NavContextBuilder:
    """Builds a copy of a navigation context with gaps spliced in."""

    def __init__(self, base_nav_context: NavigationContext):
        self._base_nav_context = base_nav_context
        self._sorted_gaps: List[GapDescriptor] = []
        self._gap_bases = np.zeros(0, dtype = np.int64)
        self._cumulative_lengths = np.zeros(0, dtype = np.int64)

    def set_gaps(self, gaps: Iterable[GapDescriptor]):
        gaps = [gap for gap in gaps if gap.length > 0]
        self._sorted_gaps = sorted(gaps, key = lambda gap: gap.context_base)
        self._gap_bases = np.array([gap.context_base for gap in self._sorted_gaps], dtype = np.int64)
        self._cumulative_lengths = np.cumsum([gap.length for gap in self._sorted_gaps], dtype = np.int64)
        return self

    def build(self) -> NavigationContext:
        """A new context equal to the base one except for the inserted gaps.

        Gaps are spliced in from the highest coordinate down, so the
        coordinates of lower insertion points stay valid throughout.
        """
        entries = list(self._base_nav_context.features)
        for gap in reversed(self._sorted_gaps):
            index, offset = self._locate(entries, gap.context_base)
            if offset > 0:
                left, right = _split_entry(entries[index], offset)
                entries[index:index + 1] = [left, right]
                index += 1
            entries.insert(index, Gap(gap.length))

        logger.debug(f"inserted {len(self._sorted_gaps)} gaps into {self._base_nav_context.name!r}")
        return NavigationContext(self._base_nav_context.name, entries)

    @staticmethod
    def _locate(entries: List[NavEntry], base: int):
        """Index of the entry containing base, and the offset of base within it."""
        start = 0
        for index, entry in enumerate(entries):
            if base < start + entry.length:
                return index, max(0, base - start)
            start += entry.length
        return len(entries), 0

    def convert_old_coordinates(self, base) -> int:
        """Coordinate in the built context of a coordinate in the base context.

        Adds up every gap inserted at or before base, since a gap is inserted
        immediately before its context_base.
        """
        index = int(np.searchsorted(self._gap_bases, base, side = "right"))
        if index == 0:
            return base
        return base + int(self._cumulative_lengths[index - 1])
