"""Layout of genome alignments against the primary genome's view.

Given the current view and one alignment source per query genome, computes
where every aligned block is drawn on the primary axis, where the matching
query genome bases are drawn, and a navigation axis for each query genome
that lines up with the drawing.

Two modes, picked from the zoom level:

- fine mode (few bases per pixel): base-accurate.  Insertions relative to the
  primary genome open gaps in the primary axis; when several query genomes
  are shown, every track gets the widest gap any of them asked for, so all
  tracks stay in register.
- rough mode: records are merged by proximity in the query genome and each
  merged block is drawn once, centered under the primary segments it came
  from.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from gnav.config import (GAP_CHAR, MAX_FINE_MODE_BASES_PER_PIXEL, MARGIN, MIN_GAP_LENGTH,
                         MERGE_PIXEL_DISTANCE, MIN_MERGE_DRAW_WIDTH, PX_PER_LABEL_CHAR)
from gnav.model.interval import OpenInterval, ChromosomeInterval
from gnav.model.feature import Feature, REVERSE_STRAND, FORWARD_STRAND, make_gap
from gnav.model.navigation_context import NavigationContext
from gnav.model.displayed_region import DisplayedRegionModel
from gnav.model.drawing import LinearDrawingModel, ViewExpansion
from gnav.model.feature_placer import FeaturePlacer
from gnav.alignment.record import AlignmentRecord, AlignmentSegment
from gnav.alignment.strings import (SequenceSegment, segment_sequence, make_base_number_lookup,
                                    count_bases, index_of_base)
from gnav.alignment.nav_builder import NavContextBuilder, GapDescriptor
from gnav.alignment.placer import IntervalPlacer, compute_centroid
from gnav.alignment.sources import AlignmentSource
from gnav.utils import nice_bp_count

logger = logging.getLogger(__name__)


@dataclass
class PlacedSequenceSegment(SequenceSegment):
    x_span: Optional[OpenInterval] = None


@dataclass
class PlacedAlignment:
    record: AlignmentRecord
    visible_part: AlignmentSegment
    context_span: OpenInterval
    target_x_span: OpenInterval
    query_x_span: Optional[OpenInterval] = None
    # fine mode only
    target_segments: Optional[List[PlacedSequenceSegment]] = None
    query_segments: Optional[List[PlacedSequenceSegment]] = None


@dataclass
class QueryGenomePiece:
    query_feature: Feature
    query_x_span: OpenInterval


@dataclass
class PlacedMergedAlignment(QueryGenomePiece):
    segments: List[PlacedAlignment]
    target_x_span: OpenInterval


@dataclass
class GapText:
    """Size labels for the space between two consecutive placements."""
    target_gap_text: str
    target_x_span: OpenInterval
    target_text_x_span: OpenInterval
    query_gap_text: str
    query_x_span: OpenInterval
    query_text_x_span: OpenInterval
    shift_target: bool  # label overruns its gap or was moved off center
    shift_query: bool


@dataclass
class Alignment:
    """Layout of one query genome against the primary genome."""
    is_fine_mode: bool
    primary_vis_data: ViewExpansion
    query_region: DisplayedRegionModel
    draw_data: list  # PlacedAlignment in fine mode, PlacedMergedAlignment in rough mode
    primary_genome: str
    query_genome: str
    bases_per_pixel: float
    draw_gap_text: Optional[List[GapText]] = None
    plot_strand: Optional[str] = None


@dataclass
class MultiAlignment:
    """Alignments keyed by query genome, tagged with the request that made them."""
    request_id: int
    alignments: Dict[str, Alignment] = field(default_factory = dict)

    def __getitem__(self, query_genome) -> Alignment:
        return self.alignments[query_genome]

    def __contains__(self, query_genome):
        return query_genome in self.alignments

    def __iter__(self) -> Iterator[str]:
        return iter(self.alignments)

    def __len__(self):
        return len(self.alignments)


@dataclass
class TrackRecords:
    query: str
    records: List[AlignmentRecord]


class MultiAlignmentViewCalculator:
    """Computes alignment layouts for a set of query genomes.

    Every call to multi_align is a new request.  Requests may overlap; only the
    most recent one returns a result, older ones return None once their
    fetches settle.
    """

    def __init__(self, primary_genome: str, sources: Sequence[AlignmentSource],
                 feature_placer: Optional[FeaturePlacer] = None):
        self.primary_genome = primary_genome
        self._sources = list(sources)
        self._feature_placer = feature_placer or FeaturePlacer()
        self._latest_request = 0

    def cleanup(self):
        for source in self._sources:
            source.cleanup()

    def is_current(self, result: Optional[MultiAlignment]) -> bool:
        return result is not None and result.request_id == self._latest_request

    async def multi_align(self, vis_data: ViewExpansion) -> Optional[MultiAlignment]:
        """Lay out every query genome for a view.

        Returns:
            MultiAlignment, or None if a newer request was issued while this
            one was fetching
        """
        self._latest_request += 1
        request_id = self._latest_request

        if vis_data.vis_region.get_width() <= 0 or vis_data.vis_width <= 0:
            logger.debug(f"request {request_id}: empty view, nothing to lay out")
            return MultiAlignment(request_id, {source.query_genome: self._empty_alignment(source.query_genome, vis_data)
                                               for source in self._sources})

        draw_model = LinearDrawingModel(vis_data.vis_region, vis_data.vis_width)
        is_fine_mode = draw_model.x_width_to_bases(1) < MAX_FINE_MODE_BASES_PER_PIXEL
        logger.debug(f"request {request_id}: {'fine' if is_fine_mode else 'rough'} mode, "
                     f"{draw_model.x_width_to_bases(1):.2f} bases/px")

        if is_fine_mode:
            tracks = await self._fetch_tracks(vis_data.vis_region, vis_data, False)
        else:
            tracks = await self._fetch_tracks(vis_data.view_window_region, vis_data, True)

        if request_id != self._latest_request:
            logger.debug(f"request {request_id} superseded by {self._latest_request}; discarding")
            return None

        result = MultiAlignment(request_id)
        if is_fine_mode:
            tracks, all_gaps = self.refine_records(tracks, vis_data)
            primary_vis_data = self.calculate_primary_vis(all_gaps, vis_data)
            for track in tracks:
                result.alignments[track.query] = self.align_fine(
                    track.query, track.records, vis_data, primary_vis_data, all_gaps)
        else:
            for track in tracks:
                result.alignments[track.query] = self.align_rough(track.query, track.records, vis_data)
        return result

    def _empty_alignment(self, query: str, vis_data: ViewExpansion) -> Alignment:
        return Alignment(
            is_fine_mode = False,
            primary_vis_data = vis_data,
            query_region = DisplayedRegionModel(NavigationContext(query, [])),
            draw_data = [],
            primary_genome = self.primary_genome,
            query_genome = query,
            bases_per_pixel = 0,
        )

    async def _fetch_tracks(self, region: DisplayedRegionModel, vis_data: ViewExpansion,
                            is_rough: bool) -> List[TrackRecords]:
        """Fetch all sources at once; a failed source contributes no records."""
        results = await asyncio.gather(
            *(source.fetch_alignment(region, vis_data, is_rough) for source in self._sources),
            return_exceptions = True,
        )
        tracks = []
        for source, result in zip(self._sources, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                logger.warning(f"Fetching alignment for {source.query_genome} failed: {result}")
                result = []
            logger.debug(f"{source.query_genome}: {len(result)} records")
            tracks.append(TrackRecords(source.query_genome, list(result)))
        return tracks

    def refine_records(self, tracks: List[TrackRecords],
                       vis_data: ViewExpansion) -> Tuple[List[TrackRecords], List[GapDescriptor]]:
        """Harmonize primary-axis gaps across tracks.

        Each position gets the largest gap any track needs there.  With more
        than one track, every track's sequences are padded with gap characters
        wherever its own gap falls short, so all of them match the shared axis.
        Records are replaced, never modified.

        Returns:
            new track list, and the harmonized gaps sorted by context base
        """
        refined = []
        all_gaps: Dict[int, int] = {}
        for track in tracks:
            placements = self._compute_context_locations(track.records, vis_data)
            track_gaps: Dict[int, int] = {}
            for gap in self._get_primary_genome_gaps(placements, MIN_GAP_LENGTH):
                track_gaps[gap.context_base] = max(track_gaps.get(gap.context_base, 0), gap.length)
            for base, length in track_gaps.items():
                all_gaps[base] = max(all_gaps.get(base, 0), length)
            refined.append((track, placements, track_gaps))

        harmonized = [GapDescriptor(base, length) for base, length in sorted(all_gaps.items())]
        logger.debug(f"{len(harmonized)} harmonized gaps across {len(tracks)} tracks")

        if len(refined) < 2:
            return tracks, harmonized

        new_tracks = []
        for track, placements, track_gaps in refined:
            # string position -> gap length, per record; a record shown at
            # several axis positions still gets cloned once
            splices: Dict[int, Dict[int, int]] = {}
            for base, length in all_gaps.items():
                missing = length - track_gaps.get(base, 0)
                if missing <= 0:
                    continue
                for placement in placements:
                    if placement.context_span.start < base < placement.context_span.end:
                        position = self._splice_position(placement, base)
                        record_splices = splices.setdefault(id(placement.record), {})
                        record_splices[position] = max(record_splices.get(position, 0), missing)

            records = [self._splice_gaps(record, splices.get(id(record), {})) for record in track.records]
            new_tracks.append(TrackRecords(track.query, records))
        return new_tracks, harmonized

    @staticmethod
    def _splice_position(placement: PlacedAlignment, context_base: int) -> int:
        """Index in the record's gapped strings where a gap before context_base goes."""
        visible = placement.visible_part
        insert_index = index_of_base(visible.get_target_sequence(), context_base - placement.context_span.start)
        return visible.sequence_interval.start + insert_index

    @staticmethod
    def _splice_gaps(record: AlignmentRecord, splices: Dict[int, int]) -> AlignmentRecord:
        """A copy of record with gap characters inserted into both sequences."""
        if not splices:
            return record
        target_seq, query_seq = record.target_seq, record.query_seq
        # from the right, so earlier string indices stay valid
        for position, length in sorted(splices.items(), reverse = True):
            gap_string = GAP_CHAR * length
            target_seq = target_seq[:position] + gap_string + target_seq[position:]
            query_seq = query_seq[:position] + gap_string + query_seq[position:]
        return record.clone(target_seq = target_seq, query_seq = query_seq)

    def calculate_primary_vis(self, all_gaps: List[GapDescriptor], vis_data: ViewExpansion) -> ViewExpansion:
        """The view expansion re-expressed on a primary axis with all gaps inserted."""
        builder = NavContextBuilder(vis_data.vis_region.nav_context).set_gaps(all_gaps)
        new_nav_context = builder.build()

        def convert(region: DisplayedRegionModel):
            start, end = region.get_context_coordinates()
            return DisplayedRegionModel(new_nav_context, builder.convert_old_coordinates(start),
                                        builder.convert_old_coordinates(end))

        new_vis_region = convert(vis_data.vis_region)
        new_view_window_region = convert(vis_data.view_window_region)
        if new_view_window_region.get_width() > 0:
            pixels_per_base = vis_data.view_window.length / new_view_window_region.get_width()
        else:
            pixels_per_base = vis_data.vis_width / max(1, vis_data.vis_region.get_width())
        new_vis_width = new_vis_region.get_width() * pixels_per_base
        new_draw_model = LinearDrawingModel(new_vis_region, new_vis_width)

        return ViewExpansion(
            vis_region = new_vis_region,
            vis_width = new_vis_width,
            view_window_region = new_view_window_region,
            view_window = new_draw_model.base_span_to_x_span(new_view_window_region.get_context_coordinates()),
        )

    def align_fine(self, query: str, records: List[AlignmentRecord], old_vis_data: ViewExpansion,
                   vis_data: ViewExpansion, all_gaps: List[GapDescriptor]) -> Alignment:
        """Base-accurate layout of one query genome.

        Args:
            query: query genome name
            records: harmonized records of this genome
            old_vis_data: view expansion on the original primary axis
            vis_data: view expansion on the gapped primary axis
            all_gaps: the harmonized gaps that turn one axis into the other
        """
        draw_model = LinearDrawingModel(vis_data.vis_region, vis_data.vis_width)

        # place against the original axis, then move onto the gapped one
        placements = self._compute_context_locations(records, old_vis_data)
        builder = NavContextBuilder(old_vis_data.vis_region.nav_context).set_gaps(all_gaps)
        for placement in placements:
            old_span = placement.context_span
            context_span = OpenInterval(builder.convert_old_coordinates(old_span.start),
                                        builder.convert_old_coordinates(old_span.end))
            x_span = draw_model.base_span_to_x_span(context_span)
            placement.context_span = context_span
            placement.target_x_span = x_span
            placement.query_x_span = x_span
            placement.target_segments = self._place_sequence_segments(
                placement.visible_part.get_target_sequence(), MIN_GAP_LENGTH, x_span.start, draw_model)
            placement.query_segments = self._place_sequence_segments(
                placement.visible_part.get_query_sequence(), MIN_GAP_LENGTH, x_span.start, draw_model)

        placements.sort(key = lambda p: p.target_x_span.start)
        gap_texts = self._make_gap_texts(placements)

        query_pieces = self._get_query_pieces(placements)
        return Alignment(
            is_fine_mode = True,
            primary_vis_data = vis_data,
            query_region = self._make_query_genome_region(query, query_pieces, vis_data.vis_width, draw_model),
            draw_data = placements,
            primary_genome = self.primary_genome,
            query_genome = query,
            bases_per_pixel = draw_model.x_width_to_bases(1),
            draw_gap_text = gap_texts,
        )

    def _make_gap_texts(self, placements: List[PlacedAlignment]) -> List[GapText]:
        """Labels for the primary and query distance between consecutive placements."""
        gap_texts = []
        target_placer = IntervalPlacer(MARGIN)
        query_placer = IntervalPlacer(MARGIN)
        for last, placement in zip(placements, placements[1:]):
            target_text = _target_gap_text(last.record, placement.record)
            query_text = _query_gap_text(last.record, placement.record)

            target_gap_x = OpenInterval(last.target_x_span.end, max(last.target_x_span.end, placement.target_x_span.start))
            query_gap_x = OpenInterval(last.query_x_span.end, max(last.query_x_span.end, placement.query_x_span.start))

            target_text_x, shift_target = self._place_label(target_text, target_gap_x, target_placer)
            query_text_x, shift_query = self._place_label(query_text, query_gap_x, query_placer)
            gap_texts.append(GapText(
                target_gap_text = target_text,
                target_x_span = target_gap_x,
                target_text_x_span = target_text_x,
                query_gap_text = query_text,
                query_x_span = query_gap_x,
                query_text_x_span = query_text_x,
                shift_target = shift_target,
                shift_query = shift_query,
            ))
        return gap_texts

    @staticmethod
    def _place_label(text: str, gap_x_span: OpenInterval, placer: IntervalPlacer):
        """Center a label on a gap.

        Returns its span, and whether it is shifted off its centered spot:
        either it overruns the gap or the placer moved it aside.
        """
        center = 0.5 * (gap_x_span.start + gap_x_span.end)
        half_width = 0.5 * len(text) * PX_PER_LABEL_CHAR
        preferred = OpenInterval(center - half_width, center + half_width)
        overruns = preferred.start <= gap_x_span.start or preferred.end >= gap_x_span.end
        placed = placer.place(preferred)
        return placed, overruns or placed != preferred

    def align_rough(self, query: str, records: List[AlignmentRecord], vis_data: ViewExpansion) -> Alignment:
        """Merged-locus layout of one query genome.

        Records close together in the query genome are merged into one block,
        drawn centered under the primary segments it came from.  Largest
        blocks are placed first; blocks too narrow to see are dropped.
        """
        draw_model = LinearDrawingModel(vis_data.vis_region, vis_data.vis_width)
        merge_distance = draw_model.x_width_to_bases(MERGE_PIXEL_DISTANCE)

        # more bases on the reverse strand => plot reversed
        aggregate_strand = sum(-r.length if r.is_reverse_strand_query() else r.length for r in records)
        plot_strand = REVERSE_STRAND if aggregate_strand < 0 else FORWARD_STRAND

        placements = self._compute_context_locations(records, vis_data)
        merges = ChromosomeInterval.merge_advanced(
            placements, merge_distance, lambda p: p.visible_part.get_query_locus())
        merges.sort(key = lambda merge: merge.locus.length, reverse = True)

        placer = IntervalPlacer(MARGIN)
        draw_data: List[PlacedMergedAlignment] = []
        for merge in merges:
            merge_draw_width = draw_model.bases_to_x_width(merge.locus.length)
            if merge_draw_width < MIN_MERGE_DRAW_WIDTH:
                logger.debug(f"dropping {merge.locus}: {merge_draw_width:.1f}px wide")
                continue

            segments: List[PlacedAlignment] = merge.sources
            target_spans = [p.target_x_span for p in segments]
            center = compute_centroid(target_spans)
            half_width = 0.5 * merge_draw_width
            merge_x_span = placer.place(OpenInterval(center - half_width, center + half_width))

            query_loci = [p.visible_part.get_query_locus() for p in segments]
            loci_x_spans = self._place_internal_loci(
                merge.locus, query_loci, merge_x_span, plot_strand == REVERSE_STRAND, draw_model)
            for placement, x_span in zip(segments, loci_x_spans):
                placement.query_x_span = x_span

            draw_data.append(PlacedMergedAlignment(
                query_feature = Feature(str(merge.locus), merge.locus, plot_strand),
                query_x_span = merge_x_span,
                segments = segments,
                target_x_span = OpenInterval(min(s.start for s in target_spans), max(s.end for s in target_spans)),
            ))

        return Alignment(
            is_fine_mode = False,
            primary_vis_data = vis_data,
            query_region = self._make_query_genome_region(query, draw_data, vis_data.vis_width, draw_model),
            draw_data = draw_data,
            primary_genome = self.primary_genome,
            query_genome = query,
            bases_per_pixel = draw_model.x_width_to_bases(1),
            plot_strand = plot_strand,
        )

    def _compute_context_locations(self, records: List[AlignmentRecord],
                                   vis_data: ViewExpansion) -> List[PlacedAlignment]:
        """Primary-axis placements of records; query x spans are left unset."""
        placed = self._feature_placer.place_features(records, vis_data.vis_region, vis_data.vis_width)
        return [
            PlacedAlignment(
                record = p.feature,
                visible_part = AlignmentSegment.from_feature_segment(p.visible_part),
                context_span = p.context_location,
                target_x_span = p.x_span,
            )
            for p in placed
        ]

    @staticmethod
    def _get_primary_genome_gaps(placements: List[PlacedAlignment], min_gap_length) -> List[GapDescriptor]:
        """Gap runs in the visible target sequences, as primary-axis insertions."""
        gaps = []
        for placement in placements:
            target_seq = placement.visible_part.get_target_sequence()
            lookup = make_base_number_lookup(target_seq, placement.context_span.start)
            for segment in segment_sequence(target_seq, min_gap_length, only_gaps = True):
                gaps.append(GapDescriptor(lookup[segment.index], segment.length))
        return gaps

    @staticmethod
    def _place_sequence_segments(sequence: str, min_gap_length, start_x: float,
                                 draw_model: LinearDrawingModel) -> List[PlacedSequenceSegment]:
        segments = sorted(segment_sequence(sequence, min_gap_length), key = lambda s: s.index)
        placed = []
        x = start_x
        for segment in segments:
            if segment.is_gap:
                bases = segment.length
            else:
                bases = count_bases(sequence[segment.index:segment.index + segment.length])
            width = draw_model.bases_to_x_width(bases)
            placed.append(PlacedSequenceSegment(segment.is_gap, segment.index, segment.length,
                                                x_span = OpenInterval(x, x + width)))
            x += width
        return placed

    @staticmethod
    def _get_query_pieces(placements: List[PlacedAlignment]) -> List[QueryGenomePiece]:
        """One query genome piece per ungapped run of each placed query sequence."""
        pieces = []
        for placement in placements:
            record = placement.record
            is_reverse = record.is_reverse_strand_query()
            query_seq = placement.visible_part.get_query_sequence()
            fine_locus = placement.visible_part.get_query_locus_fine()
            if is_reverse:
                lookup = make_base_number_lookup(query_seq, fine_locus.end, True)
            else:
                lookup = make_base_number_lookup(query_seq, fine_locus.start)

            for segment in placement.query_segments or []:
                if segment.is_gap:
                    continue
                base = lookup[segment.index]
                length = count_bases(query_seq[segment.index:segment.index + segment.length])
                if is_reverse:
                    locus = ChromosomeInterval(record.query_locus.chr, base - length, base)
                else:
                    locus = ChromosomeInterval(record.query_locus.chr, base, base + length)
                pieces.append(QueryGenomePiece(Feature(str(locus), locus, record.query_strand), segment.x_span))
        return pieces

    @staticmethod
    def _make_query_genome_region(query: str, pieces: Sequence[QueryGenomePiece], vis_width: float,
                                  draw_model: LinearDrawingModel) -> DisplayedRegionModel:
        """Navigation axis for the query genome matching the drawn pieces.

        Pieces are laid out left to right; the pixel space between two pieces
        becomes a gap of the equivalent number of bases, labelled with its
        size when the neighbouring loci are not contiguous in the query genome.
        """
        features = []
        x = 0
        prev_locus = None
        for piece in sorted(pieces, key = lambda p: p.query_x_span.start):
            locus = piece.query_feature.locus
            gap_bases = round(draw_model.x_width_to_bases(piece.query_x_span.start - x))
            if gap_bases >= 1:
                label = None
                if prev_locus is not None and not _loci_touch(locus, prev_locus):
                    label = f"{nice_bp_count(gap_bases)} gap"
                features.append(make_gap(gap_bases, label))
            features.append(piece.query_feature)
            x = max(x, piece.query_x_span.end)
            prev_locus = locus

        final_gap_bases = round(draw_model.x_width_to_bases(vis_width - x))
        if final_gap_bases > 0:
            features.append(make_gap(final_gap_bases))
        return DisplayedRegionModel(NavigationContext(query, features))

    @staticmethod
    def _place_internal_loci(parent_locus: ChromosomeInterval, loci: List[ChromosomeInterval],
                             parent_x_span: OpenInterval, draw_reverse: bool,
                             draw_model: LinearDrawingModel) -> List[OpenInterval]:
        """Pixel spans of loci inside their merged block, by offset from the block's start."""
        x_spans = []
        for locus in loci:
            x_offset = draw_model.bases_to_x_width(locus.start - parent_locus.start)
            x_width = draw_model.bases_to_x_width(locus.length)
            if draw_reverse:
                x_end = parent_x_span.end - x_offset
                x_start = max(x_end - x_width, parent_x_span.start)
                x_end = min(x_end, parent_x_span.end)
            else:
                x_start = parent_x_span.start + x_offset
                x_end = min(x_start + x_width, parent_x_span.end)
                x_start = max(x_start, parent_x_span.start)
            x_spans.append(OpenInterval(x_start, max(x_start, x_end)))
        return x_spans


def _target_gap_text(last: AlignmentRecord, record: AlignmentRecord) -> str:
    if last.locus.chr != record.locus.chr:
        return "not connected"
    distance = record.locus.start - last.locus.end
    return ("" if distance >= 0 else "overlap ") + nice_bp_count(abs(distance))


def _query_gap_text(last: AlignmentRecord, record: AlignmentRecord) -> str:
    if last.query_locus.chr != record.query_locus.chr:
        return "not connected"
    last_reverse = last.is_reverse_strand_query()
    if last_reverse != record.is_reverse_strand_query():
        return "reverse direction"
    if last_reverse:
        distance = last.query_locus.start - record.query_locus.end
    else:
        distance = record.query_locus.start - last.query_locus.end
    return ("" if distance >= 0 else "overlap ") + nice_bp_count(abs(distance))


def _loci_touch(locus1: ChromosomeInterval, locus2: ChromosomeInterval) -> bool:
    if locus1.chr != locus2.chr:
        return False
    return locus1.end == locus2.start or locus2.end == locus1.start
