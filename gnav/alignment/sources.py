"""Where alignment records come from.

An AlignmentSource fetches the records of one query genome that overlap a
region of the primary genome.  Sources own their I/O, retry and timeout
policy; the view calculator only awaits them.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Iterable, List, Optional, TYPE_CHECKING

import pysam

from gnav.model.interval import ChromosomeInterval
from gnav.alignment.record import AlignmentRecord

if TYPE_CHECKING:
    from gnav.model.displayed_region import DisplayedRegionModel
    from gnav.model.drawing import ViewExpansion

logger = logging.getLogger(__name__)


class AlignmentSource(ABC):
    """Fetches alignment records between the primary genome and one query genome."""

    def __init__(self, query_genome: str):
        self.query_genome = query_genome

    @abstractmethod
    async def fetch_alignment(self, region: 'DisplayedRegionModel', view_expansion: 'ViewExpansion',
                              is_rough: bool) -> List[AlignmentRecord]:
        """Records overlapping the genomic loci of a region.

        Args:
            region: region of the primary genome to fetch
            view_expansion: the full view being laid out
            is_rough: only loci are needed; sequences may be left out
        """
        pass

    def cleanup(self):
        pass


class RecordListSource(AlignmentSource):
    """Serves records held in memory."""

    def __init__(self, query_genome: str, records: Iterable[AlignmentRecord]):
        super().__init__(query_genome)
        self.records = list(records)

    async def fetch_alignment(self, region, view_expansion, is_rough):
        loci = region.get_genome_intervals()
        found = [r for r in self.records if any(r.locus.get_overlap(locus) for locus in loci)]
        if is_rough:
            found = [r.without_sequences() for r in found]
        return found


class GenomeAlignSource(AlignmentSource):
    """Reads a bgzipped, tabix-indexed genomealign file.

    Each line is chrom, start, end and a JSON column describing the query
    locus and the gapped target/query sequences.  Reads run one at a
    time on the source's own worker thread, so the tabix handle never sees two
    threads.
    """

    def __init__(self, query_genome: str, filepath: str):
        super().__init__(query_genome)
        self.filepath = Path(filepath).absolute()
        self._executor = ThreadPoolExecutor(max_workers = 1)

        self.tabix: Optional[pysam.TabixFile] = None
        index_file = Path(str(self.filepath) + '.tbi')
        if index_file.exists():
            try:
                self.tabix = pysam.TabixFile(str(self.filepath))
                logger.info(f"Using indexed access for {self.filepath}")
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to open tabix index: {e}")
        else:
            logger.warning(f"No index found for {self.filepath}.")

    async def fetch_alignment(self, region, view_expansion, is_rough):
        loop = asyncio.get_running_loop()
        loci = region.get_genome_intervals()
        return await loop.run_in_executor(self._executor, partial(self.fetch_loci, loci, is_rough))

    def fetch_loci(self, loci: List[ChromosomeInterval], is_rough = False) -> List[AlignmentRecord]:
        if not self.tabix:
            logger.warning(f"No tabix index for {self.filepath}")
            return []

        records = []
        seen = set()
        for locus in loci:
            if locus.chr not in self.tabix.contigs:
                continue
            for line in self.tabix.fetch(locus.chr, locus.start, locus.end):
                # a record spanning two loci comes back twice
                if line in seen:
                    continue
                seen.add(line)
                record = self.parse_line(line)
                if record is None:
                    continue
                records.append(record.without_sequences() if is_rough else record)
        return records

    @staticmethod
    def parse_line(line: str) -> Optional[AlignmentRecord]:
        if not line or line.startswith(('#', 'track')):
            return None
        parts = line.rstrip("\n").split("\t", 3)
        if len(parts) < 4:
            logger.warning(f"Skipping short genomealign line: {line[:80]!r}")
            return None
        try:
            return AlignmentRecord.from_genomealign(parts)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping malformed genomealign line ({e}): {line[:80]!r}")
            return None

    def cleanup(self):
        self._executor.shutdown(wait = True)
        if self.tabix is not None:
            self.tabix.close()
            self.tabix = None
