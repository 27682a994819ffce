"""Tests for the in-memory and tabix-backed alignment sources."""

import asyncio
import json
import logging
import threading
import time

import pysam
import pytest

from gnav.model.interval import ChromosomeInterval
from gnav.model.feature import Feature
from gnav.model.navigation_context import NavigationContext
from gnav.model.displayed_region import DisplayedRegionModel
from gnav.alignment.sources import RecordListSource, GenomeAlignSource

from conftest import make_record


def genomealign_line(chrom, start, end, query_chr, query_start, query_end, record_id = 1):
    length = end - start
    details = {
        "id": record_id,
        "genomealign": {
            "chr": query_chr, "start": query_start, "stop": query_end, "strand": "+",
            "targetseq": "A" * length, "queryseq": "C" * length,
        },
    }
    return f"{chrom}\t{start}\t{end}\t{json.dumps(details)}"


@pytest.fixture
def genomealign_file(tmp_path):
    lines = [
        genomealign_line("chr1", 10, 20, "chrQ", 0, 10, 1),
        genomealign_line("chr1", 40, 70, "chrQ", 30, 60, 2),
        genomealign_line("chr1", 200, 210, "chrQ", 100, 110, 3),
    ]
    path = tmp_path / "hg38toQ.genomealign"
    path.write_text("\n".join(lines) + "\n")
    return pysam.tabix_index(str(path), preset = "bed", force = True)


def test_record_list_source_filters_to_region():
    nav_context = NavigationContext("hg", [Feature("chr1", ChromosomeInterval("chr1", 0, 100))])
    region = DisplayedRegionModel(nav_context, 0, 50)
    inside = make_record("in", "chr1", 40, 60, "chrQ", 0, 20, "A" * 20, "C" * 20)
    outside = make_record("out", "chr1", 60, 70, "chrQ", 20, 30, "A" * 10, "C" * 10)
    elsewhere = make_record("other", "chr2", 0, 10, "chrQ", 30, 40)
    source = RecordListSource("Q", [inside, outside, elsewhere])

    records = asyncio.run(source.fetch_alignment(region, None, False))
    assert records == [inside]

    records = asyncio.run(source.fetch_alignment(region, None, True))
    assert len(records) == 1
    assert records[0].name == "in"
    assert not records[0].has_sequences()


def test_parse_line():
    record = GenomeAlignSource.parse_line(genomealign_line("chr1", 10, 20, "chrQ", 0, 10, 5))
    assert record.name == "5"
    assert record.locus == ChromosomeInterval("chr1", 10, 20)
    assert record.query_locus == ChromosomeInterval("chrQ", 0, 10)

    assert GenomeAlignSource.parse_line("") is None
    assert GenomeAlignSource.parse_line("#chrom\tstart\tend\tdetails") is None


def test_parse_line_malformed(caplog):
    with caplog.at_level(logging.WARNING):
        assert GenomeAlignSource.parse_line("chr1\t10\t20") is None
        assert GenomeAlignSource.parse_line("chr1\t10\t20\t{not json") is None
        assert GenomeAlignSource.parse_line('chr1\t10\t20\t{"id": 1}') is None
    assert len(caplog.records) == 3


def test_genomealign_source_fetch(genomealign_file):
    source = GenomeAlignSource("Q", genomealign_file)
    try:
        records = source.fetch_loci([ChromosomeInterval("chr1", 0, 50)])
        assert [r.name for r in records] == ["1", "2"]
        assert records[0].target_seq == "A" * 10

        # record 2 overlaps both loci but comes back once
        records = source.fetch_loci([ChromosomeInterval("chr1", 0, 45), ChromosomeInterval("chr1", 65, 100)])
        assert [r.name for r in records] == ["1", "2"]

        assert source.fetch_loci([ChromosomeInterval("chrUn", 0, 1000)]) == []

        rough = source.fetch_loci([ChromosomeInterval("chr1", 195, 300)], is_rough = True)
        assert [r.name for r in rough] == ["3"]
        assert not rough[0].has_sequences()
    finally:
        source.cleanup()
    assert source.tabix is None


def test_genomealign_source_async(genomealign_file):
    nav_context = NavigationContext("hg", [Feature("chr1", ChromosomeInterval("chr1", 0, 100))])
    region = DisplayedRegionModel(nav_context, 50, 100)
    source = GenomeAlignSource("Q", genomealign_file)
    try:
        records = asyncio.run(source.fetch_alignment(region, None, False))
    finally:
        source.cleanup()
    assert [r.name for r in records] == ["2"]


class ThreadTrackingSource(GenomeAlignSource):
    """Notes which threads read the file, and how many at once."""

    def __init__(self, query_genome, filepath):
        super().__init__(query_genome, filepath)
        self.threads = set()
        self.active = 0
        self.most_active = 0
        self._lock = threading.Lock()

    def fetch_loci(self, loci, is_rough = False):
        with self._lock:
            self.active += 1
            self.most_active = max(self.most_active, self.active)
            self.threads.add(threading.get_ident())
        try:
            time.sleep(0.01)
            return super().fetch_loci(loci, is_rough)
        finally:
            with self._lock:
                self.active -= 1


def test_genomealign_source_reads_one_at_a_time(genomealign_file):
    nav_context = NavigationContext("hg", [Feature("chr1", ChromosomeInterval("chr1", 0, 300))])
    regions = [DisplayedRegionModel(nav_context, start, start + 50) for start in (0, 30, 170, 190)]
    source = ThreadTrackingSource("Q", genomealign_file)

    async def fetch_all():
        return await asyncio.gather(*(source.fetch_alignment(region, None, False) for region in regions))

    try:
        results = asyncio.run(fetch_all())
    finally:
        source.cleanup()

    assert [[r.name for r in records] for records in results] == [["1", "2"], ["2"], ["3"], ["3"]]
    assert source.most_active == 1
    assert len(source.threads) == 1


def test_genomealign_source_without_index(tmp_path, caplog):
    path = tmp_path / "plain.genomealign"
    path.write_text(genomealign_line("chr1", 10, 20, "chrQ", 0, 10) + "\n")
    with caplog.at_level(logging.WARNING):
        source = GenomeAlignSource("Q", str(path))
        assert source.fetch_loci([ChromosomeInterval("chr1", 0, 100)]) == []
    assert source.tabix is None
    assert any("No index" in r.getMessage() for r in caplog.records)
