
import math
import logging
from typing import List

from gnav.model.interval import OpenInterval, ChromosomeInterval
from gnav.model.feature import FeatureSegment
from gnav.model.navigation_context import NavigationContext
from gnav.utils import is_finite_number

logger = logging.getLogger(__name__)

# Bases are 0-indexed; a lot of the layout code assumes it.
MIN_BASE = 0


def _round_half_up(value) -> int:
    return int(math.floor(value + 0.5))


class DisplayedRegionModel:
    """The current view window over a navigation context.

    Stored as a half-open interval of context coordinates, always rounded to
    whole bases and kept within [0, total bases].  The navigation context is
    shared and never modified; only the window moves, and only through
    set_region, pan and zoom.
    """

    def __init__(self, nav_context: NavigationContext, start = MIN_BASE, end = None):
        """
        Args:
            nav_context: the context in which navigation takes place
            start: initial start of the view region
            end: initial end of the view region; defaults to the end of the context
        """
        self._nav_context = nav_context
        self._start_base = MIN_BASE
        self._end_base = MIN_BASE
        if end is None:
            end = nav_context.total_bases
        self.set_region(start, end)

    def clone(self) -> 'DisplayedRegionModel':
        return DisplayedRegionModel(self._nav_context, self._start_base, self._end_base)

    @property
    def nav_context(self) -> NavigationContext:
        return self._nav_context

    def get_navigation_context(self) -> NavigationContext:
        return self._nav_context

    def get_width(self) -> int:
        return self._end_base - self._start_base

    def get_context_coordinates(self) -> OpenInterval:
        return OpenInterval(self._start_base, self._end_base)

    def get_feature_segments(self, include_gaps = True) -> List[FeatureSegment]:
        return self._nav_context.get_features_in_interval(self._start_base, self._end_base, include_gaps)

    def get_genome_intervals(self) -> List[ChromosomeInterval]:
        """Genomic loci in view; guaranteed not to overlap each other."""
        return self._nav_context.get_loci_in_interval(self._start_base, self._end_base)

    def set_region(self, start, end) -> 'DisplayedRegionModel':
        """Set the window to [start, end), keeping it inside the context.

        A window hanging off one edge is shifted back in, keeping its width;
        whatever still does not fit is cut off.  Both edges are rounded to
        whole bases.

        Raises:
            ValueError: if start or end is not a finite number, or end < start
        """
        if not is_finite_number(start) or not is_finite_number(end):
            raise ValueError("Start and end must be finite numbers")
        if end < start:
            raise ValueError(f"Start ({start}) must be less than or equal to end ({end})")

        width = end - start
        navigable = self._nav_context.total_bases
        if start < MIN_BASE:
            end = MIN_BASE + width
        elif end > navigable:
            start = navigable - width

        self._start_base = _round_half_up(max(MIN_BASE, start))
        self._end_base = _round_half_up(min(end, navigable))
        return self

    def pan(self, num_bases) -> 'DisplayedRegionModel':
        """Shift the window; positive numbers move toward the end of the context."""
        return self.set_region(self._start_base + num_bases, self._end_base + num_bases)

    def pan_left(self) -> 'DisplayedRegionModel':
        return self.pan(-self.get_width())

    def pan_right(self) -> 'DisplayedRegionModel':
        return self.pan(self.get_width())

    def zoom(self, factor, focal_point = 0.5) -> 'DisplayedRegionModel':
        """Multiply the window width by a factor, holding one point fixed.

        Factors below 1 zoom in, above 1 zoom out.  Because of rounding, a
        zoom(2) followed by zoom(0.5) may move the edges by a base.

        Args:
            factor: multiplier for the window width
            focal_point: the fixed point, in window widths from the left edge

        Raises:
            ValueError: if factor is not greater than 0
        """
        if not factor > 0:
            raise ValueError(f"Zoom factor must be greater than 0, got {factor}")

        width = self.get_width()
        new_width = width * factor
        focal_base = width * focal_point + self._start_base
        new_focal_base = new_width * focal_point + self._start_base
        pan_amount = focal_base - new_focal_base

        raw_start = self._start_base + pan_amount
        return self.set_region(raw_start, raw_start + new_width)

    def current_region_as_string(self) -> str:
        return self.custom_region_as_string(self._start_base, self._end_base)

    def custom_region_as_string(self, start, end) -> str:
        segments = self._nav_context.get_features_in_interval(start, end, True)
        if not segments:
            return ""
        if len(segments) == 1:
            return str(segments[0])
        return segments[0].to_string_with_other(segments[-1])

    def __eq__(self, other):
        if not isinstance(other, DisplayedRegionModel):
            return NotImplemented
        return (self._nav_context is other._nav_context
                and self._start_base == other._start_base and self._end_base == other._end_base)

    def __repr__(self):
        return f"DisplayedRegionModel({self._nav_context.name!r}, {self._start_base}, {self._end_base})"
