"""Shared toy genomes for the navigation and alignment tests."""

import pytest

from gnav.model.interval import ChromosomeInterval, OpenInterval
from gnav.model.feature import Feature
from gnav.model.navigation_context import NavigationContext
from gnav.model.displayed_region import DisplayedRegionModel
from gnav.model.drawing import ViewExpansion
from gnav.alignment.record import AlignmentRecord


@pytest.fixture
def toy_features():
    return [
        Feature("f1", ChromosomeInterval("chr1", 0, 10)),
        Feature("f2", ChromosomeInterval("chr2", 0, 10), "-"),  # reverse strand
        Feature("f3", ChromosomeInterval("chr2", 5, 15)),       # overlaps f2 in the genome
    ]


@pytest.fixture
def toy_context(toy_features):
    return NavigationContext("Wow very genome", toy_features)


def make_view(nav_context, start, end, width):
    """A view expansion with no expansion: what you see is what is laid out."""
    region = DisplayedRegionModel(nav_context, start, end)
    return ViewExpansion(
        vis_region = region,
        vis_width = width,
        view_window_region = region.clone(),
        view_window = OpenInterval(0, width),
    )


def make_record(name, chrom, start, end, query_chr, query_start, query_end,
                target_seq = "", query_seq = "", query_strand = "+"):
    return AlignmentRecord(
        name = name,
        locus = ChromosomeInterval(chrom, start, end),
        strand = "+",
        query_locus = ChromosomeInterval(query_chr, query_start, query_end),
        query_strand = query_strand,
        target_seq = target_seq,
        query_seq = query_seq,
    )
