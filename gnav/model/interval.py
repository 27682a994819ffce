"""Interval primitives shared by the navigation axis and the alignment layout.

OpenInterval is a half-open [start, end) range over any linear axis (bases of
the navigation context, or pixels).  ChromosomeInterval is the same thing
pinned to a chromosome, in 0-indexed genomic coordinates.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# chr1:100-200, chr1:1,000-2,000, "chr1 100 200" and tab-delimited variants
LOCUS_PATTERN = re.compile(r"^([^\s:]+)[:\s]+([\d,]+)[-\s]+([\d,]+)$")


@dataclass(frozen=True)
class OpenInterval:
    """Half-open interval [start, end)."""
    start: float
    end: float

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Interval end ({self.end}) must not precede start ({self.start})")

    def __iter__(self):
        yield self.start
        yield self.end

    @property
    def length(self):
        return self.end - self.start

    def get_overlap(self, other: 'OpenInterval') -> Optional['OpenInterval']:
        """The overlapping part of the two intervals, or None if they do not overlap."""
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if start < end:
            return OpenInterval(start, end)
        return None

    def overlaps(self, other: 'OpenInterval') -> bool:
        return self.get_overlap(other) is not None

    def contains(self, other) -> bool:
        """Whether a point or an interval lies within this one."""
        if isinstance(other, OpenInterval):
            return self.start <= other.start and other.end <= self.end
        return self.start <= other < self.end

    def union(self, other: 'OpenInterval') -> 'OpenInterval':
        """Smallest interval covering both."""
        return OpenInterval(min(self.start, other.start), max(self.end, other.end))

    @staticmethod
    def merge_adjacent(intervals: Iterable['OpenInterval']) -> List['OpenInterval']:
        """Merge overlapping or touching intervals.  Result is sorted by start."""
        merged: List[OpenInterval] = []
        for interval in sorted(intervals, key = lambda iv: (iv.start, iv.end)):
            if merged and interval.start <= merged[-1].end:
                merged[-1] = merged[-1].union(interval)
            else:
                merged.append(interval)
        return merged

    def __str__(self):
        return f"[{self.start}, {self.end})"


@dataclass
class MergedLocus:
    """A group of sources whose loci were close enough to merge."""
    locus: 'ChromosomeInterval'
    sources: List[Any] = field(default_factory = list)


@dataclass(frozen=True, order=True)
class ChromosomeInterval:
    """0-indexed, half-open interval on one chromosome."""
    chr: str
    start: int
    end: int

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Locus end ({self.end}) must not precede start ({self.start}) on {self.chr}")

    @property
    def length(self):
        return self.end - self.start

    def get_overlap(self, other: 'ChromosomeInterval') -> Optional['ChromosomeInterval']:
        if self.chr != other.chr:
            return None
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if start < end:
            return ChromosomeInterval(self.chr, start, end)
        return None

    def to_open_interval(self) -> OpenInterval:
        return OpenInterval(self.start, self.end)

    def to_string(self):
        return f"{self.chr}:{self.start}-{self.end}"

    def __str__(self):
        return self.to_string()

    @classmethod
    def parse(cls, text: str) -> 'ChromosomeInterval':
        """Parse "chr:start-end" (or whitespace-delimited) into an interval.

        Raises:
            ValueError: if the text is not locus syntax, or end precedes start
        """
        match = LOCUS_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Could not parse locus: {text!r}")
        chrom, start, end = match.groups()
        start = int(start.replace(",", ""))
        end = int(end.replace(",", ""))
        if end < start:
            raise ValueError(f"Start of locus {text!r} must come before its end")
        return cls(chrom, start, end)

    @staticmethod
    def merge_advanced(sources: List[T], max_gap_bases: float,
                       locus_selector: Callable[[T], 'ChromosomeInterval']) -> List[MergedLocus]:
        """Group sources whose loci lie within max_gap_bases of each other.

        Sources are grouped per chromosome (in order of first appearance) and
        walked in order of locus start.  A source joins the current group when
        the distance between its locus and the group's envelope is at most
        max_gap_bases; otherwise it starts a new group.

        Args:
            sources: arbitrary objects carrying a locus
            max_gap_bases: largest gap, in bases, that still merges
            locus_selector: gets the locus of a source

        Returns:
            MergedLocus groups, each with the envelope locus and its sources
        """
        by_chr: Dict[str, List[T]] = {}
        for source in sources:
            by_chr.setdefault(locus_selector(source).chr, []).append(source)

        merges: List[MergedLocus] = []
        for chrom, chr_sources in by_chr.items():
            chr_sources = sorted(chr_sources, key = lambda s: locus_selector(s).start)
            current = None
            for source in chr_sources:
                locus = locus_selector(source)
                if current is not None and locus.start - current.locus.end <= max_gap_bases:
                    current.locus = ChromosomeInterval(chrom, current.locus.start, max(current.locus.end, locus.end))
                    current.sources.append(source)
                else:
                    current = MergedLocus(locus, [source])
                    merges.append(current)
        return merges

    @staticmethod
    def merge_overlaps(intervals: List['ChromosomeInterval']) -> List['ChromosomeInterval']:
        """Merge overlapping or touching loci."""
        return [merge.locus for merge in ChromosomeInterval.merge_advanced(intervals, 0, lambda locus: locus)]
