"""
Coordinate transformation between navigation-context bases and pixels.

This module handles the linear mapping from a displayed region onto a drawing
of a given pixel width, and the expansion of a view region into the wider
region that is actually laid out (so panning has something to show).
"""

import logging
from dataclasses import dataclass

from gnav.config import REGION_EXPANSION
from gnav.model.interval import OpenInterval
from gnav.model.displayed_region import DisplayedRegionModel

logger = logging.getLogger(__name__)


class LinearDrawingModel:
    """Maps context coordinates of a region linearly onto [0, draw_width] pixels."""

    def __init__(self, view_region: DisplayedRegionModel, draw_width: float):
        """Initialize the drawing model.

        Args:
            view_region: region of the navigation context being drawn
            draw_width: width of the drawing, in pixels
        """
        self.view_region = view_region
        self.draw_width = draw_width
        self._start_base = view_region.get_context_coordinates().start
        self._width = view_region.get_width()

    def bases_to_x_width(self, bases: float) -> float:
        return bases * self.draw_width / self._width

    def x_width_to_bases(self, pixels: float) -> float:
        return pixels * self._width / self.draw_width

    def base_to_x(self, base: float) -> float:
        return (base - self._start_base) * self.draw_width / self._width

    def x_to_base(self, x: float) -> float:
        return x * self._width / self.draw_width + self._start_base

    def base_span_to_x_span(self, base_span: OpenInterval) -> OpenInterval:
        return OpenInterval(self.base_to_x(base_span.start), self.base_to_x(base_span.end))

    def x_span_to_base_span(self, x_span: OpenInterval) -> OpenInterval:
        return OpenInterval(self.x_to_base(x_span.start), self.x_to_base(x_span.end))


@dataclass
class ViewExpansion:
    """A view region widened on both sides for drawing."""
    vis_region: DisplayedRegionModel          # region actually laid out
    vis_width: float                          # pixel width of vis_region
    view_window_region: DisplayedRegionModel  # region the user sees
    view_window: OpenInterval                 # pixel span of the visible part within vis_width


class RegionExpander:
    """Widens a view region by a multiple of its width on each side."""

    def __init__(self, multiple_on_each_side: float = REGION_EXPANSION):
        self.multiple_on_each_side = multiple_on_each_side

    def calculate_expansion(self, view_region: DisplayedRegionModel, visible_width: float) -> ViewExpansion:
        """
        Args:
            view_region: the region the user sees
            visible_width: pixel width the user sees

        Returns:
            ViewExpansion; the expansion is cut at the edges of the context, and
            vis_width keeps the pixels-per-base of the visible part
        """
        width = view_region.get_width()
        pixels_per_base = visible_width / width if width > 0 else 0
        expand_bases = round(width * self.multiple_on_each_side)
        start, end = view_region.get_context_coordinates()

        # cut at the context edges rather than letting set_region shift the window
        total = view_region.nav_context.total_bases
        vis_region = view_region.clone()
        vis_region.set_region(max(0, start - expand_bases), min(total, end + expand_bases))

        vis_start = vis_region.get_context_coordinates().start
        left_pixels = (start - vis_start) * pixels_per_base
        vis_width = vis_region.get_width() * pixels_per_base

        logger.debug(f"expanded {view_region} to {vis_region} ({vis_width:.1f}px)")
        return ViewExpansion(
            vis_region = vis_region,
            vis_width = vis_width,
            view_window_region = view_region.clone(),
            view_window = OpenInterval(left_pixels, left_pixels + visible_width),
        )
