"""Tests for the non-overlapping interval placer."""

import random

import pytest

from gnav.model.interval import OpenInterval
from gnav.alignment.placer import IntervalPlacer, compute_centroid


def test_place_moves_to_nearer_side():
    placer = IntervalPlacer(margin = 5)
    assert placer.place(OpenInterval(0, 10)) == OpenInterval(0, 10)
    # overlaps; closer to the right extent (15)
    assert placer.place(OpenInterval(5, 15)) == OpenInterval(15, 25)
    # overlaps; closer to the left extent (-5)
    assert placer.place(OpenInterval(0, 4)) == OpenInterval(-9, -5)
    # free space is used as is
    assert placer.place(OpenInterval(100, 110)) == OpenInterval(100, 110)

    assert placer.retrieve_placements() == [
        OpenInterval(0, 10), OpenInterval(15, 25), OpenInterval(-9, -5), OpenInterval(100, 110),
    ]


def test_placements_never_overlap():
    rng = random.Random(42)
    placer = IntervalPlacer(margin = 3)
    for _ in range(200):
        start = rng.uniform(0, 500)
        placer.place(OpenInterval(start, start + rng.uniform(1, 40)))

    placements = sorted(placer.retrieve_placements(), key = lambda iv: iv.start)
    for left, right in zip(placements, placements[1:]):
        assert not left.overlaps(right)


def test_placement_keeps_length():
    placer = IntervalPlacer()
    for interval in [OpenInterval(0, 10), OpenInterval(2, 9), OpenInterval(3, 30)]:
        assert placer.place(interval).length == interval.length


def test_compute_centroid():
    assert compute_centroid([OpenInterval(0, 10), OpenInterval(20, 40)]) == pytest.approx(65 / 3)
    assert compute_centroid([OpenInterval(5, 5), OpenInterval(7, 7)]) == pytest.approx(6)
