
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from gnav.model.interval import OpenInterval, ChromosomeInterval
from gnav.model.feature import Feature, FeatureSegment
from gnav.model.displayed_region import DisplayedRegionModel
from gnav.model.drawing import LinearDrawingModel

logger = logging.getLogger(__name__)


@dataclass
class PlacedFeature:
    feature: Feature
    visible_part: FeatureSegment      # part of the feature inside the region
    context_location: OpenInterval   # where visible_part sits on the axis
    x_span: OpenInterval              # pixel span of context_location
    is_reverse: bool                  # drawn right-to-left relative to its own strand


@dataclass
class GenomeInteraction:
    """A pair of loci linked by some measurement (e.g. a Hi-C contact)."""
    locus1: ChromosomeInterval
    locus2: ChromosomeInterval
    score: float = 0
    name: str = ""


@dataclass
class PlacedInteraction:
    interaction: GenomeInteraction
    x_span1: Optional[OpenInterval]   # None if locus1 is not on the axis at all
    x_span2: Optional[OpenInterval]


class FeaturePlacer:
    """Lays features out against a view region and pixel width."""

    def place_features(self, features: Sequence[Feature], view_region: DisplayedRegionModel,
                       width: float) -> List[PlacedFeature]:
        """Place every visible occurrence of each feature.

        A feature whose locus appears more than once in the navigation context
        gives one placement per occurrence.  Features outside the region are
        left out.
        """
        nav_context = view_region.nav_context
        region_span = view_region.get_context_coordinates()
        draw_model = LinearDrawingModel(view_region, width)

        placements = []
        for feature in features:
            for context_location in nav_context.convert_genome_interval_to_bases(feature.locus):
                context_location = context_location.get_overlap(region_span)
                if context_location is None:
                    continue

                visible_part = self._locate_visible_part(feature, context_location, nav_context)
                if visible_part is None:
                    continue

                nav_segments = nav_context.get_features_in_interval(*context_location, include_gaps = False)
                is_reverse = any(s.feature.is_reverse_strand() for s in nav_segments) != feature.is_reverse_strand()
                placements.append(PlacedFeature(
                    feature = feature,
                    visible_part = visible_part,
                    context_location = context_location,
                    x_span = draw_model.base_span_to_x_span(context_location),
                    is_reverse = is_reverse,
                ))
        return placements

    def place_interactions(self, interactions: Sequence[GenomeInteraction], view_region: DisplayedRegionModel,
                           width: float) -> List[PlacedInteraction]:
        """Place both anchors of each interaction.

        Every pairing of the anchors' axis occurrences is placed as long as one
        of the two is in the region; the other may lie off screen, or off the
        axis entirely.  Interactions with neither anchor in view are left out.
        """
        nav_context = view_region.nav_context
        region_span = view_region.get_context_coordinates()
        draw_model = LinearDrawingModel(view_region, width)

        placements = []
        for interaction in interactions:
            locations1 = nav_context.convert_genome_interval_to_bases(interaction.locus1) or [None]
            locations2 = nav_context.convert_genome_interval_to_bases(interaction.locus2) or [None]
            for location1 in locations1:
                for location2 in locations2:
                    in_view = [loc for loc in (location1, location2)
                               if loc is not None and loc.overlaps(region_span)]
                    if not in_view:
                        continue
                    placements.append(PlacedInteraction(
                        interaction = interaction,
                        x_span1 = draw_model.base_span_to_x_span(location1) if location1 is not None else None,
                        x_span2 = draw_model.base_span_to_x_span(location2) if location2 is not None else None,
                    ))
        return placements

    def _locate_visible_part(self, feature, context_location, nav_context):
        """The part of a feature's locus shown in an axis interval."""
        overlaps = []
        for locus in nav_context.get_loci_in_interval(*context_location):
            overlap = locus.get_overlap(feature.locus)
            if overlap is not None:
                overlaps.append(overlap)
        if not overlaps:
            return None
        start = min(o.start for o in overlaps) - feature.locus.start
        end = max(o.end for o in overlaps) - feature.locus.start
        return FeatureSegment(feature, start, end)
