"""Build alignment records from raw sequences using Biopython."""

import logging

from Bio import Align
from Bio.Seq import reverse_complement

from gnav.config import GAP_CHAR
from gnav.model.interval import ChromosomeInterval
from gnav.model.feature import FORWARD_STRAND, REVERSE_STRAND
from gnav.alignment.record import AlignmentRecord

logger = logging.getLogger(__name__)

_default_scores = {
    "mode": "global",
    "match_score": 1,
    "mismatch_score": -0.9,
    "open_gap_score": -2,
    "extend_gap_score": -0.5,
}


def get_scores(scores):
    sc = _default_scores.copy()
    sc.update(scores)
    return sc


def align_sequences(target_seq: str, query_seq: str, **scores):
    """Globally align two sequences; returns the gapped target and query strings."""
    aligner = Align.PairwiseAligner(**get_scores(scores))
    best = aligner.align(target_seq, query_seq)[0]
    target_algn, query_algn = best[0], best[1]
    if GAP_CHAR != "-":
        target_algn = target_algn.replace("-", GAP_CHAR)
        query_algn = query_algn.replace("-", GAP_CHAR)
    logger.debug(f"aligned {len(target_seq)}bp to {len(query_seq)}bp, score {best.score:0.1f}")
    return target_algn, query_algn


def align_to_record(target_seq: str, query_seq: str,
                    target_locus: ChromosomeInterval, query_locus: ChromosomeInterval,
                    query_strand = FORWARD_STRAND, name = "", **scores) -> AlignmentRecord:
    """Align a target and a query sequence into an AlignmentRecord.

    Args:
        target_seq: primary genome bases of target_locus
        query_seq: query genome bases of query_locus, as read from the forward strand
        target_locus: where target_seq comes from
        query_locus: where query_seq comes from
        query_strand: "-" to align the reverse complement of query_seq
        name: record name
        **scores: PairwiseAligner settings overriding the defaults

    Raises:
        ValueError: if a sequence length does not match its locus
    """
    if len(target_seq) != target_locus.length:
        raise ValueError(f"Target sequence has {len(target_seq)} bases but {target_locus} spans {target_locus.length}")
    if len(query_seq) != query_locus.length:
        raise ValueError(f"Query sequence has {len(query_seq)} bases but {query_locus} spans {query_locus.length}")

    if query_strand == REVERSE_STRAND:
        query_seq = reverse_complement(query_seq)

    target_algn, query_algn = align_sequences(target_seq, query_seq, **scores)

    return AlignmentRecord(
        name = name,
        locus = target_locus,
        strand = FORWARD_STRAND,
        query_locus = query_locus,
        query_strand = query_strand,
        target_seq = target_algn,
        query_seq = query_algn,
    )
