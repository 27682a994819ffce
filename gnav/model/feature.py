
import logging
from dataclasses import dataclass
from typing import Optional, Union

from gnav.model.interval import ChromosomeInterval

logger = logging.getLogger(__name__)

FORWARD_STRAND = "+"
REVERSE_STRAND = "-"
NO_STRAND = "."


@dataclass(frozen=True, eq=False)
class Feature:
    """A named genomic locus; the unit from which a navigation axis is built.

    Features compare by identity, so two features with the same locus are still
    distinct entries of a navigation context.
    """
    name: str
    locus: ChromosomeInterval
    strand: str = NO_STRAND

    def __post_init__(self):
        if not isinstance(self.locus, ChromosomeInterval):
            raise TypeError(f"Feature {self.name!r} needs a ChromosomeInterval locus, got {type(self.locus).__name__}")

    @property
    def length(self):
        return self.locus.length

    @property
    def chr(self):
        return self.locus.chr

    def is_forward_strand(self):
        return self.strand == FORWARD_STRAND

    def is_reverse_strand(self):
        return self.strand == REVERSE_STRAND

    def __str__(self):
        return f"{self.name} ({self.locus}, {self.strand})"


@dataclass(frozen=True, eq=False)
class Gap:
    """Axis filler with a length but no genomic locus."""
    length: int
    label: Optional[str] = None

    def __post_init__(self):
        if self.length < 0:
            raise ValueError(f"Gap length must be non-negative, got {self.length}")

    @property
    def name(self):
        return self.label or ""

    def __str__(self):
        return self.label or "gap"


NavEntry = Union[Feature, Gap]


def make_gap(length, label = None) -> Gap:
    return Gap(length, label)


def is_gap(entry) -> bool:
    return isinstance(entry, Gap)


class FeatureSegment:
    """A part of a feature (or gap), in coordinates relative to it.

    Relative coordinates count from the feature's genomic start, whichever
    strand it is on.
    """

    def __init__(self, feature: NavEntry, relative_start = 0, relative_end = None):
        if relative_end is None:
            relative_end = feature.length
        if relative_start < 0 or relative_end > feature.length or relative_end < relative_start:
            raise ValueError(f"Invalid segment [{relative_start}, {relative_end}) of entry with length {feature.length}")
        self.feature = feature
        self.relative_start = relative_start
        self.relative_end = relative_end

    @property
    def name(self):
        return self.feature.name

    @property
    def length(self):
        return self.relative_end - self.relative_start

    @property
    def is_gap(self):
        return is_gap(self.feature)

    def get_locus(self) -> Optional[ChromosomeInterval]:
        """The genomic locus this segment covers; None for gaps."""
        if self.is_gap:
            return None
        locus = self.feature.locus
        return ChromosomeInterval(locus.chr, locus.start + self.relative_start, locus.start + self.relative_end)

    def to_string_with_other(self, other: 'FeatureSegment'):
        """Combined name spanning from this segment to another one."""
        return f"{self.name}:{self.relative_start}-{other.name}:{other.relative_end}"

    def __str__(self):
        if self.is_gap:
            return str(self.feature)
        return f"{self.name}:{self.relative_start}-{self.relative_end}"

    def __repr__(self):
        return f"FeatureSegment({self})"
