
from typing import List, Sequence

import numpy as np

from gnav.config import MARGIN
from gnav.model.interval import OpenInterval


class IntervalPlacer:
    """Places pixel intervals so that none of them overlap.

    Keeps the left and right extent of everything placed so far.  An interval
    that would overlap an earlier one is moved flush against whichever extent
    is nearer to its center.  Placement depends on call order only.
    """

    def __init__(self, margin = MARGIN):
        self.left_extent = float("inf")
        self.right_extent = float("-inf")
        self.margin = margin
        self._placements: List[OpenInterval] = []

    def place(self, preferred: OpenInterval) -> OpenInterval:
        final = preferred
        if any(placement.overlaps(preferred) for placement in self._placements):
            center = 0.5 * (preferred.start + preferred.end)
            insert_left = abs(center - self.left_extent) < abs(center - self.right_extent)
            if insert_left:
                final = OpenInterval(self.left_extent - preferred.length, self.left_extent)
            else:
                final = OpenInterval(self.right_extent, self.right_extent + preferred.length)

        self._placements.append(final)
        if final.start < self.left_extent:
            self.left_extent = final.start - self.margin
        if final.end > self.right_extent:
            self.right_extent = final.end + self.margin
        return final

    def retrieve_placements(self) -> List[OpenInterval]:
        return list(self._placements)


def compute_centroid(intervals: Sequence[OpenInterval]) -> float:
    """Length-weighted mean of the interval midpoints."""
    lengths = np.array([iv.length for iv in intervals], dtype = float)
    midpoints = np.array([0.5 * (iv.start + iv.end) for iv in intervals], dtype = float)
    total = lengths.sum()
    if total <= 0:
        return float(midpoints.mean()) if len(midpoints) else 0.0
    return float((lengths * midpoints).sum() / total)
