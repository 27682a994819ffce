"""Tests for alignment records and their visible segments."""

import json

import pytest

from gnav.model.interval import OpenInterval, ChromosomeInterval
from gnav.model.feature import FeatureSegment
from gnav.alignment.record import AlignmentRecord, AlignmentSegment

from conftest import make_record

TARGET = "ACGTA--CGTAC"   # 10 bases
QUERY = "ACG-AGGCGTA-"    # 10 bases


def genomealign_row(strand = "-"):
    details = {
        "id": 7,
        "genomealign": {
            "chr": "chrQ", "start": 100, "stop": 110, "strand": strand,
            "targetseq": TARGET, "queryseq": QUERY,
        },
    }
    return ["chr1", "10", "20", json.dumps(details)]


def test_from_genomealign():
    record = AlignmentRecord.from_genomealign(genomealign_row())
    assert record.name == "7"
    assert record.locus == ChromosomeInterval("chr1", 10, 20)
    assert record.query_locus == ChromosomeInterval("chrQ", 100, 110)
    assert record.is_reverse_strand_query()
    assert record.target_seq == TARGET
    assert record.query_seq == QUERY
    assert record.has_sequences()


def test_from_genomealign_accepts_dict():
    chrom, start, end, details = genomealign_row("+")
    details = json.loads(details)
    del details["genomealign"]["targetseq"]
    del details["genomealign"]["queryseq"]
    record = AlignmentRecord.from_genomealign((chrom, start, end, details))
    assert not record.has_sequences()
    assert not record.is_reverse_strand_query()


def test_record_needs_query_locus():
    with pytest.raises(TypeError):
        AlignmentRecord("x", ChromosomeInterval("chr1", 0, 10))


def test_records_are_replaced_not_modified():
    record = AlignmentRecord.from_genomealign(genomealign_row())
    stripped = record.without_sequences()
    assert stripped is not record
    assert not stripped.has_sequences()
    assert record.target_seq == TARGET

    longer = record.clone(target_seq = TARGET + "--", query_seq = QUERY + "AA")
    assert longer.query_locus == record.query_locus
    assert record.target_seq == TARGET
    with pytest.raises(AttributeError):
        record.target_seq = ""


def test_segment_sequence_interval():
    record = AlignmentRecord.from_genomealign(genomealign_row())
    segment = AlignmentSegment(record, 2, 6)
    assert segment.sequence_interval == OpenInterval(2, 8)
    assert segment.get_target_sequence() == "GTA--C"
    assert segment.get_query_sequence() == "G-AGGC"

    whole = AlignmentSegment(record)
    assert whole.sequence_interval == OpenInterval(0, len(TARGET))


def test_query_locus_reverse_strand():
    record = AlignmentRecord.from_genomealign(genomealign_row("-"))
    segment = AlignmentSegment(record, 2, 6)
    # counted: 2 query bases precede the segment, 5 are in it, read from the query end
    assert segment.get_query_locus_fine() == ChromosomeInterval("chrQ", 103, 108)
    # estimated from the segment's share of the record
    assert segment.get_query_locus() == ChromosomeInterval("chrQ", 104, 108)


def test_query_locus_forward_strand():
    record = AlignmentRecord.from_genomealign(genomealign_row("+"))
    segment = AlignmentSegment(record, 2, 6)
    assert segment.get_query_locus_fine() == ChromosomeInterval("chrQ", 102, 107)
    assert segment.get_query_locus() == ChromosomeInterval("chrQ", 102, 106)


def test_query_locus_without_sequences():
    record = make_record("r", "chr1", 1000, 2000, "chrQ", 0, 500)
    segment = AlignmentSegment.from_feature_segment(FeatureSegment(record, 500, 1000))
    assert segment.record is record
    assert segment.sequence_interval == OpenInterval(0, 0)
    assert segment.get_query_locus() == ChromosomeInterval("chrQ", 250, 500)
