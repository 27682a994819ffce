"""Tests for DisplayedRegionModel: clamping, panning and zooming."""

import pytest

from gnav.model.interval import OpenInterval
from gnav.model.displayed_region import DisplayedRegionModel


def coords(region):
    return tuple(region.get_context_coordinates())


def test_defaults_to_whole_context(toy_context):
    region = DisplayedRegionModel(toy_context)
    assert coords(region) == (0, 30)
    assert region.get_width() == 30
    assert region.get_navigation_context() is toy_context


@pytest.mark.parametrize("requested, expected", [
    ((-1, 100), (0, 30)),
    ((25, 35), (20, 30)),
    ((40, 45), (25, 30)),
    ((-5, 10), (0, 15)),
    ((1.1, 1.9), (1, 2)),
    ((1.5, 2.5), (2, 3)),
    ((10, 10), (10, 10)),
])
def test_set_region_clamps_and_rounds(toy_context, requested, expected):
    region = DisplayedRegionModel(toy_context)
    region.set_region(*requested)
    assert coords(region) == expected


def test_set_region_errors(toy_context):
    region = DisplayedRegionModel(toy_context)
    with pytest.raises(ValueError):
        region.set_region(10, 5)
    with pytest.raises(ValueError):
        region.set_region(float("nan"), 5)
    with pytest.raises(ValueError):
        region.set_region(0, float("inf"))
    # a failed call leaves the region alone
    assert coords(region) == (0, 30)


def test_zoom_round_trip(toy_context):
    region = DisplayedRegionModel(toy_context, 10, 20)
    region.zoom(2)
    assert coords(region) == (5, 25)
    region.zoom(0.5)
    assert coords(region) == (10, 20)


def test_zoom_focal_point(toy_context):
    region = DisplayedRegionModel(toy_context, 10, 15)
    region.zoom(2, 0)
    assert coords(region) == (10, 20)
    region.zoom(0.5, 1)
    assert coords(region) == (15, 20)


def test_zoom_out_past_context(toy_context):
    region = DisplayedRegionModel(toy_context, 10, 20)
    region.zoom(10)
    assert coords(region) == (0, 30)


def test_zoom_rejects_non_positive_factor(toy_context):
    region = DisplayedRegionModel(toy_context, 10, 20)
    with pytest.raises(ValueError):
        region.zoom(0)
    with pytest.raises(ValueError):
        region.zoom(-1)


def test_pan(toy_context):
    region = DisplayedRegionModel(toy_context, 10, 20)
    region.pan(5)
    assert coords(region) == (15, 25)
    region.pan(-5)
    assert coords(region) == (10, 20)

    # panning off an edge keeps the width
    region.pan(100)
    assert coords(region) == (20, 30)
    region.pan(-100)
    assert coords(region) == (0, 10)


def test_pan_left_right(toy_context):
    region = DisplayedRegionModel(toy_context, 10, 20)
    region.pan_right()
    assert coords(region) == (20, 30)
    region.pan_left()
    assert coords(region) == (10, 20)


def test_region_as_string(toy_context):
    region = DisplayedRegionModel(toy_context, 4, 22)
    assert region.current_region_as_string() == "f1:4-f3:2"

    region.set_region(10, 20)
    assert region.current_region_as_string() == "f2:0-10"
    assert region.custom_region_as_string(0, 10) == "f1:0-10"


def test_genome_intervals(toy_context):
    region = DisplayedRegionModel(toy_context, 4, 30)
    assert [str(locus) for locus in region.get_genome_intervals()] == ["chr1:4-10", "chr2:0-15"]


def test_clone_is_independent(toy_context):
    region = DisplayedRegionModel(toy_context, 10, 20)
    copy = region.clone()
    assert copy == region
    copy.pan(5)
    assert coords(region) == (10, 20)
    assert copy != region
    assert copy.get_context_coordinates() == OpenInterval(15, 25)
