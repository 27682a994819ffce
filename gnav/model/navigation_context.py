"""The navigation axis: an ordered run of features and gaps laid end to end.

Every entry of a NavigationContext occupies a contiguous block of axis
coordinates ("context coordinates" or "bases"), in order, starting at 0.  A
reverse-strand feature is laid out from its genomic end to its genomic start.
Gaps occupy axis space without mapping to any genomic position.

Contexts are immutable; anything that needs a different axis builds a new one
(see gnav.alignment.nav_builder).
"""

import logging
from typing import Dict, List, Sequence

import numpy as np

from gnav.model.interval import OpenInterval, ChromosomeInterval, LOCUS_PATTERN
from gnav.model.feature import Feature, Gap, FeatureSegment, NavEntry, make_gap, is_gap

logger = logging.getLogger(__name__)


class NavigationContext:
    """Ordered list of features and gaps forming one linear coordinate axis."""

    def __init__(self, name: str, features: Sequence[NavEntry]):
        """
        Args:
            name: display name of the context (e.g. the genome name)
            features: features and gaps, in axis order

        Raises:
            TypeError: if an entry is neither a Feature nor a Gap
        """
        for entry in features:
            if not isinstance(entry, (Feature, Gap)):
                raise TypeError(f"Navigation context entries must be Features or Gaps, got {entry!r}")

        self._name = name
        self._features = tuple(features)

        lengths = np.array([int(entry.length) for entry in self._features], dtype=np.int64)
        ends = np.cumsum(lengths)
        self._feature_starts = ends - lengths
        self._total_bases = int(ends[-1]) if len(ends) else 0

        gap_lengths = np.array([int(entry.length) if is_gap(entry) else 0 for entry in self._features], dtype=np.int64)
        self._gap_bases_before = np.cumsum(gap_lengths) - gap_lengths

        self._index_by_id: Dict[int, int] = {}
        self._indices_for_chr: Dict[str, List[int]] = {}
        self._index_for_name: Dict[str, int] = {}
        for i, entry in enumerate(self._features):
            self._index_by_id.setdefault(id(entry), i)
            if is_gap(entry):
                continue
            self._indices_for_chr.setdefault(entry.locus.chr, []).append(i)
            self._index_for_name.setdefault(entry.name, i)

    make_gap = staticmethod(make_gap)
    is_gap_feature = staticmethod(is_gap)

    @property
    def name(self):
        return self._name

    @property
    def features(self):
        return self._features

    @property
    def total_bases(self) -> int:
        return self._total_bases

    def has_gaps(self):
        return any(is_gap(entry) for entry in self._features)

    def is_valid_base(self, base) -> bool:
        return 0 <= base < self._total_bases

    def get_feature_start(self, feature: NavEntry) -> int:
        """Axis coordinate at which an entry of this context starts.

        Raises:
            ValueError: if the entry is not part of this context
        """
        index = self._index_by_id.get(id(feature))
        if index is None:
            raise ValueError(f"Feature {feature} is not in navigation context {self._name!r}")
        return int(self._feature_starts[index])

    def convert_base_to_feature_index(self, base) -> int:
        if not self.is_valid_base(base):
            raise ValueError(f"Base {base} is outside navigation context {self._name!r} (0-{self._total_bases})")
        # last entry starting at or before the base; skips zero-length entries
        return int(np.searchsorted(self._feature_starts, base, side = "right")) - 1

    def convert_base_to_feature_coordinate(self, base) -> FeatureSegment:
        """The single-base segment of the entry containing an axis base."""
        index = self.convert_base_to_feature_index(base)
        entry = self._features[index]
        offset = int(base - self._feature_starts[index])
        if not is_gap(entry) and entry.is_reverse_strand():
            offset = entry.length - offset - 1
        return FeatureSegment(entry, offset, offset + 1)

    def get_features_in_interval(self, start, end, include_gaps = True) -> List[FeatureSegment]:
        """Segments of the entries overlapping axis interval [start, end).

        Partial overlaps at either boundary are cut down to the overlapping part.
        """
        start = max(0, start)
        end = min(end, self._total_bases)
        if end <= start:
            return []

        segments = []
        index = self.convert_base_to_feature_index(start)
        while index < len(self._features) and self._feature_starts[index] < end:
            entry = self._features[index]
            entry_start = int(self._feature_starts[index])
            index += 1
            if is_gap(entry) and not include_gaps:
                continue

            offset_start = max(start, entry_start) - entry_start
            offset_end = min(end, entry_start + entry.length) - entry_start
            if offset_end <= offset_start:
                continue
            if not is_gap(entry) and entry.is_reverse_strand():
                offset_start, offset_end = entry.length - offset_end, entry.length - offset_start
            segments.append(FeatureSegment(entry, offset_start, offset_end))
        return segments

    def get_loci_in_interval(self, start, end) -> List[ChromosomeInterval]:
        """Genomic loci covered by an axis interval, merged so none overlap."""
        loci = [segment.get_locus() for segment in self.get_features_in_interval(start, end, include_gaps = False)]
        return ChromosomeInterval.merge_overlaps(loci)

    def convert_genome_interval_to_bases(self, chr_interval: ChromosomeInterval) -> List[OpenInterval]:
        """All axis intervals showing part of a genomic interval.

        The same genomic bases may appear in several entries, so there can be
        more than one result.  Results are merged and sorted; no match gives [].
        """
        intervals = []
        for index in self._indices_for_chr.get(chr_interval.chr, []):
            feature = self._features[index]
            overlap = feature.locus.get_overlap(chr_interval)
            if overlap is None:
                continue
            if feature.is_reverse_strand():
                offset = feature.locus.end - overlap.end
            else:
                offset = overlap.start - feature.locus.start
            axis_start = int(self._feature_starts[index]) + offset
            intervals.append(OpenInterval(axis_start, axis_start + overlap.length))
        return OpenInterval.merge_adjacent(intervals)

    def to_gapless_coordinate(self, base) -> int:
        """Axis coordinate with every gap base before it removed.

        A base inside a gap maps to where that gap starts.
        """
        index = self.convert_base_to_feature_index(base)
        gapless = base - int(self._gap_bases_before[index])
        if is_gap(self._features[index]):
            gapless -= base - int(self._feature_starts[index])
        return gapless

    def parse(self, text: str) -> OpenInterval:
        """Parse a locus ("chr1:100-200") or feature name into axis coordinates.

        Raises:
            ValueError: if the text matches nothing in this context, or the
                locus ends before it starts
        """
        text = text.strip()
        if LOCUS_PATTERN.match(text):
            locus = ChromosomeInterval.parse(text)
            intervals = self.convert_genome_interval_to_bases(locus)
            if not intervals:
                raise ValueError(f"Location {text!r} is unavailable in {self._name!r}")
            return OpenInterval(min(iv.start for iv in intervals), max(iv.end for iv in intervals))

        index = self._index_for_name.get(text)
        if index is None:
            raise ValueError(f"Could not find feature or locus {text!r} in {self._name!r}")
        start = int(self._feature_starts[index])
        return OpenInterval(start, start + self._features[index].length)

    def __repr__(self):
        return f"NavigationContext({self._name!r}, {len(self._features)} entries, {self._total_bases} bases)"
