
import json
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Sequence

from gnav.model.interval import OpenInterval, ChromosomeInterval
from gnav.model.feature import Feature, FeatureSegment, REVERSE_STRAND, NO_STRAND
from gnav.alignment.strings import count_bases, index_of_base

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class AlignmentRecord(Feature):
    """One aligned block between the primary (target) and a query genome.

    target_seq and query_seq are equal-length gapped strings; they are empty
    when only the loci were fetched.
    """
    query_locus: Optional[ChromosomeInterval] = None
    query_strand: str = NO_STRAND
    target_seq: str = ""
    query_seq: str = ""

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.query_locus, ChromosomeInterval):
            raise TypeError(f"Alignment record {self.name!r} needs a query locus")

    @classmethod
    def from_genomealign(cls, row: Sequence[Any]) -> 'AlignmentRecord':
        """Build a record from a genomealign row.

        The row is (chrom, start, end, details), where details is a dict or a
        JSON string holding an "id" and a "genomealign" object with the query
        chr/start/stop/strand and the targetseq/queryseq strings.
        """
        chrom, start, end, details = row[0], int(row[1]), int(row[2]), row[3]
        if isinstance(details, str):
            details = json.loads(details)
        align: Dict[str, Any] = details["genomealign"]
        return cls(
            name = str(details.get("id", "")),
            locus = ChromosomeInterval(chrom, start, end),
            strand = details.get("strand", NO_STRAND),
            query_locus = ChromosomeInterval(align["chr"], int(align["start"]), int(align["stop"])),
            query_strand = align.get("strand", NO_STRAND),
            target_seq = align.get("targetseq") or "",
            query_seq = align.get("queryseq") or "",
        )

    def is_reverse_strand_query(self) -> bool:
        return self.query_strand == REVERSE_STRAND

    def has_sequences(self) -> bool:
        return bool(self.target_seq)

    def clone(self, **changes) -> 'AlignmentRecord':
        return replace(self, **changes)

    def without_sequences(self) -> 'AlignmentRecord':
        return replace(self, target_seq = "", query_seq = "")


class AlignmentSegment(FeatureSegment):
    """The visible part of an alignment record.

    Besides the relative target coordinates, keeps the matching index range of
    the gapped strings, so both sequences can be cut to what is visible.
    """

    def __init__(self, record: AlignmentRecord, relative_start = 0, relative_end = None):
        super().__init__(record, relative_start, relative_end)
        self.sequence_interval = OpenInterval(
            index_of_base(record.target_seq, self.relative_start),
            index_of_base(record.target_seq, self.relative_end),
        )

    @classmethod
    def from_feature_segment(cls, segment: FeatureSegment) -> 'AlignmentSegment':
        return cls(segment.feature, segment.relative_start, segment.relative_end)

    @property
    def record(self) -> AlignmentRecord:
        return self.feature

    def get_target_sequence(self) -> str:
        start, end = self.sequence_interval
        return self.record.target_seq[start:end]

    def get_query_sequence(self) -> str:
        start, end = self.sequence_interval
        return self.record.query_seq[start:end]

    def get_query_locus(self) -> ChromosomeInterval:
        """Query locus of the visible part, estimated proportionally.

        Needs no sequences, so it works on loci-only (rough mode) records.
        """
        query = self.record.query_locus
        record_length = self.record.length
        if record_length <= 0:
            return query
        start_fraction = self.relative_start / record_length
        end_fraction = self.relative_end / record_length
        if self.record.is_reverse_strand_query():
            start = query.end - end_fraction * query.length
            end = query.end - start_fraction * query.length
        else:
            start = query.start + start_fraction * query.length
            end = query.start + end_fraction * query.length
        return ChromosomeInterval(query.chr, round(start), round(end))

    def get_query_locus_fine(self) -> ChromosomeInterval:
        """Query locus of the visible part, counted base by base from the query string."""
        query = self.record.query_locus
        start_index = self.sequence_interval.start
        bases_before = count_bases(self.record.query_seq[:start_index])
        visible_bases = count_bases(self.get_query_sequence())
        if self.record.is_reverse_strand_query():
            end = query.end - bases_before
            return ChromosomeInterval(query.chr, end - visible_bases, end)
        start = query.start + bases_before
        return ChromosomeInterval(query.chr, start, start + visible_bases)
