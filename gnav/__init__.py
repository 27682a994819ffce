"""Genome navigation and alignment layout.

A navigation axis built from genomic features and gaps, a pannable and
zoomable view window over it, and the layout of multi-genome alignments
against that view.
"""

import logging

from gnav.config import get_config
from gnav.model import (OpenInterval, ChromosomeInterval, Feature, Gap, FeatureSegment,
                        NavigationContext, DisplayedRegionModel, LinearDrawingModel, RegionExpander, ViewExpansion)
from gnav.alignment import AlignmentRecord, MultiAlignmentViewCalculator, RecordListSource, GenomeAlignSource
from gnav.utils import nice_bp_count

__all__ = ['logger', 'get_config',
           'OpenInterval', 'ChromosomeInterval', 'Feature', 'Gap', 'FeatureSegment',
           'NavigationContext', 'DisplayedRegionModel', 'LinearDrawingModel', 'RegionExpander', 'ViewExpansion',
           'AlignmentRecord', 'MultiAlignmentViewCalculator', 'RecordListSource', 'GenomeAlignSource',
           'nice_bp_count']

# Configure logging
logger = logging.getLogger(__name__)


# End of module
