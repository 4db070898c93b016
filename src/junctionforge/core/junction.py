"""Annotated junction record.

An AnnotatedJunction is an immutable value built up while a junction is
compared against the transcripts around it. It starts empty (no overlaps,
no known sites, anchor "N"), each transcript comparison produces a new
value with ``attrs.evolve``, and a final pass fills in the anchor code and
annotation label.

Coordinates:
    ``start`` is the junction start as read (0-based first intronic base,
    which is also the 1-based last base of the donor-side exon). ``end``
    is the junction end plus one, i.e. the 1-based first base of the
    acceptor-side exon. The conversion happens once, in ``from_interval``.

Example:
    >>> from junctionforge.utils.intervals import IntervalRecord
    >>> from junctionforge.core.junction import AnnotatedJunction
    >>> rec = AnnotatedJunction.from_interval(IntervalRecord("chr1", 200, 250, strand="+"))
    >>> rec.end, rec.anchor
    (251, 'N')
"""

from __future__ import annotations

from typing import Iterable

import attrs

from junctionforge.utils.intervals import UNKNOWN_STRAND, IntervalRecord

# =============================================================================
# Constants
# =============================================================================

ANCHOR_NOVEL = "N"
ANCHOR_DONOR = "D"
ANCHOR_ACCEPTOR = "A"
ANCHOR_DONOR_ACCEPTOR = "DA"
ANCHOR_NOVEL_DONOR_ACCEPTOR = "NDA"

ANCHOR_CODES = (
    ANCHOR_NOVEL,
    ANCHOR_DONOR,
    ANCHOR_ACCEPTOR,
    ANCHOR_DONOR_ACCEPTOR,
    ANCHOR_NOVEL_DONOR_ACCEPTOR,
)

HEADER_COLUMNS = [
    "chrom",
    "start",
    "end",
    "name",
    "score",
    "strand",
    "splice_site",
    "acceptors_skipped",
    "exons_skipped",
    "donors_skipped",
    "anchor",
    "known_donor",
    "known_acceptor",
    "known_junction",
    "genes",
    "transcripts",
]
VARIANT_INFO_COLUMN = "variant_info"

MISSING = "NA"


def header_columns(variant_info: bool = False) -> list[str]:
    """Output column names.

    Args:
        variant_info: Append the variant_info column.
    """
    if variant_info:
        return HEADER_COLUMNS + [VARIANT_INFO_COLUMN]
    return list(HEADER_COLUMNS)


def _join_ids(ids: Iterable[str]) -> str:
    ordered = sorted(ids)
    return ",".join(ordered) if ordered else MISSING


# =============================================================================
# Record
# =============================================================================


@attrs.frozen(slots=True, eq=True, order=False)
class AnnotatedJunction:
    """Annotation result for one junction.

    Attributes:
        chrom: Chromosome name.
        start: Junction start (see module docstring).
        end: Junction end plus one (see module docstring).
        name: Junction name from the source.
        score: Junction score from the source, kept verbatim.
        strand: "+", "-" or ".".
        fields: Extra source columns.
        transcripts_overlap: Transcripts whose span overlaps the junction.
        genes_overlap: Genes of those transcripts.
        exons_skipped: Exons lying strictly inside the intron.
        acceptors_skipped: Acceptor positions strictly inside the intron.
        donors_skipped: Donor positions strictly inside the intron.
        anchor: One of ANCHOR_CODES.
        splice_site: Flanking intron bases, e.g. "GT-AG"; empty until fetched.
        known_donor: Donor site coincides with an annotated exon boundary.
        known_acceptor: Acceptor site coincides with an annotated exon boundary.
        known_junction: Both sites matched in one transcript, in order.
        annotation: Coarse label derived from the anchor and skip counts.
        variant_info: Opaque value carried through to the output.
    """

    chrom: str
    start: int
    end: int
    name: str = "."
    score: str = "0"
    strand: str = UNKNOWN_STRAND
    fields: tuple[str, ...] = attrs.field(default=(), converter=tuple)
    transcripts_overlap: frozenset[str] = attrs.field(factory=frozenset, converter=frozenset)
    genes_overlap: frozenset[str] = attrs.field(factory=frozenset, converter=frozenset)
    exons_skipped: frozenset[str] = attrs.field(factory=frozenset, converter=frozenset)
    acceptors_skipped: frozenset[int] = attrs.field(factory=frozenset, converter=frozenset)
    donors_skipped: frozenset[int] = attrs.field(factory=frozenset, converter=frozenset)
    anchor: str = ANCHOR_NOVEL
    splice_site: str = ""
    known_donor: bool = False
    known_acceptor: bool = False
    known_junction: bool = False
    annotation: str = ""
    variant_info: str = ""

    @classmethod
    def from_interval(cls, junction: IntervalRecord, variant_info: str = "") -> AnnotatedJunction:
        """Create an empty record from a junction as read from the source.

        The stored end becomes ``junction.end + 1`` so that it names the
        first base of the acceptor-side exon.

        Args:
            junction: Junction interval (intron, 0-based half-open).
            variant_info: Value for the variant_info column.

        Returns:
            AnnotatedJunction with all sets empty and anchor "N".
        """
        return cls(
            chrom=junction.chrom,
            start=junction.start,
            end=junction.end + 1,
            name=junction.name,
            score=junction.score,
            strand=junction.strand,
            fields=junction.fields,
            variant_info=variant_info,
        )

    def reset(self) -> AnnotatedJunction:
        """Return the same junction with every annotation cleared."""
        return AnnotatedJunction(
            chrom=self.chrom,
            start=self.start,
            end=self.end,
            name=self.name,
            score=self.score,
            strand=self.strand,
            fields=self.fields,
            variant_info=self.variant_info,
        )

    @property
    def sort_key(self) -> tuple[str, int, int]:
        """(chrom, start, end) total order used for sorted output."""
        return (self.chrom, self.start, self.end)

    def __lt__(self, other: AnnotatedJunction) -> bool:
        if not isinstance(other, AnnotatedJunction):
            return NotImplemented
        return self.sort_key < other.sort_key

    def to_row(self, variant_info: bool = False) -> list[str]:
        """Render the record as output columns.

        Args:
            variant_info: Append the variant_info column.

        Returns:
            Column values matching ``header_columns(variant_info)``.
        """
        row = [
            self.chrom,
            str(self.start),
            str(self.end),
            self.name,
            self.score,
            self.strand,
            self.splice_site,
            str(len(self.acceptors_skipped)),
            str(len(self.exons_skipped)),
            str(len(self.donors_skipped)),
            self.anchor,
            str(int(self.known_donor)),
            str(int(self.known_acceptor)),
            str(int(self.known_junction)),
            _join_ids(self.genes_overlap),
            _join_ids(self.transcripts_overlap),
        ]
        if variant_info:
            row.append(self.variant_info)
        return row

    def format(self, variant_info: bool = False) -> str:
        """Render the record as one tab-separated line (no newline)."""
        return "\t".join(self.to_row(variant_info))
