
from gnav.alignment.strings import SequenceSegment, segment_sequence, make_base_number_lookup, count_bases
from gnav.alignment.record import AlignmentRecord, AlignmentSegment
from gnav.alignment.nav_builder import NavContextBuilder, GapDescriptor
from gnav.alignment.placer import IntervalPlacer, compute_centroid
from gnav.alignment.sources import AlignmentSource, RecordListSource, GenomeAlignSource
from gnav.alignment.calculator import (MultiAlignmentViewCalculator, MultiAlignment, Alignment,
                                       PlacedAlignment, PlacedMergedAlignment, PlacedSequenceSegment, GapText)

__all__ = ['SequenceSegment', 'segment_sequence', 'make_base_number_lookup', 'count_bases',
           'AlignmentRecord', 'AlignmentSegment',
           'NavContextBuilder', 'GapDescriptor',
           'IntervalPlacer', 'compute_centroid',
           'AlignmentSource', 'RecordListSource', 'GenomeAlignSource',
           'MultiAlignmentViewCalculator', 'MultiAlignment', 'Alignment',
           'PlacedAlignment', 'PlacedMergedAlignment', 'PlacedSequenceSegment', 'GapText']
