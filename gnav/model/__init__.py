
from gnav.model.interval import OpenInterval, ChromosomeInterval, MergedLocus
from gnav.model.feature import Feature, Gap, FeatureSegment, make_gap, is_gap
from gnav.model.navigation_context import NavigationContext
from gnav.model.displayed_region import DisplayedRegionModel
from gnav.model.drawing import LinearDrawingModel, RegionExpander, ViewExpansion
from gnav.model.feature_placer import FeaturePlacer, PlacedFeature, GenomeInteraction, PlacedInteraction

__all__ = ['OpenInterval', 'ChromosomeInterval', 'MergedLocus',
           'Feature', 'Gap', 'FeatureSegment', 'make_gap', 'is_gap',
           'NavigationContext', 'DisplayedRegionModel',
           'LinearDrawingModel', 'RegionExpander', 'ViewExpansion',
           'FeaturePlacer', 'PlacedFeature', 'GenomeInteraction', 'PlacedInteraction']
