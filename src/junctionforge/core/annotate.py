"""Junction annotation against a gene model.

For each junction the engine looks up the transcripts whose span overlaps
it, compares the junction boundaries with each transcript's exon
boundaries, and folds the per-transcript results into one
AnnotatedJunction.

Matching frame:
    A junction record's ``start`` equals the 0-based exclusive ``end`` of
    the exon on its left, and its ``end`` equals ``start + 1`` of the exon
    on its right (see junctionforge.core.junction). Exon positions recorded
    in the skipped sets are 1-based.

Strand:
    On "+" the left boundary is the donor and the right boundary the
    acceptor; on "-" the roles swap. One matcher serves both strands and
    a StrandRoles value says which side is which.

Key components:
- StrandRoles: donor/acceptor side mapping per strand
- TranscriptMatch: result of comparing one transcript
- match_exons: the boundary scan
- apply_match / finalize: pure record transitions
- classify_anchor: anchor rule table
- JunctionAnnotator: engine bound to a gene model and optional genome

Example:
    >>> from junctionforge.core.annotate import JunctionAnnotator
    >>> from junctionforge.io.gff import GeneModelIndex
    >>> from junctionforge.io.bed import iter_junctions
    >>>
    >>> annotator = JunctionAnnotator(GeneModelIndex.load("genes.gtf"))
    >>> for record in annotator.annotate_all(iter_junctions("junctions.bed")):
    ...     print(record.format())
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence

import attrs

from junctionforge.core.junction import (
    ANCHOR_ACCEPTOR,
    ANCHOR_DONOR,
    ANCHOR_DONOR_ACCEPTOR,
    ANCHOR_NOVEL,
    ANCHOR_NOVEL_DONOR_ACCEPTOR,
    AnnotatedJunction,
)
from junctionforge.utils.intervals import IntervalRecord, is_well_formed

if TYPE_CHECKING:
    from junctionforge.io.fasta import GenomeAccessor
    from junctionforge.io.gff import GeneModelIndex, TranscriptModel

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Junctions submitted to the thread pool at a time
DEFAULT_BATCH_SIZE = 10_000

# Intronic bases read at each end of the junction
SPLICE_SITE_WINDOW = 2

LABEL_KNOWN = "known"
LABEL_EXON_SKIPPING = "exon_skipping"
LABEL_NOVEL_COMBINATION = "novel_combination"
LABEL_ALTERNATIVE_ACCEPTOR = "alternative_acceptor"
LABEL_ALTERNATIVE_DONOR = "alternative_donor"
LABEL_NOVEL_INTRAGENIC = "novel_intragenic"
LABEL_INTERGENIC = "intergenic"


# =============================================================================
# Strand Roles
# =============================================================================


@attrs.frozen
class StrandRoles:
    """Which junction boundary is the donor on a given strand.

    Attributes:
        strand: "+" or "-".
        left_is_donor: True when the lower-coordinate boundary is the donor.
    """

    strand: str
    left_is_donor: bool

    def donor_acceptor(self, left: frozenset[int], right: frozenset[int]) -> tuple[frozenset[int], frozenset[int]]:
        """Order a (left, right) pair as (donor, acceptor)."""
        return (left, right) if self.left_is_donor else (right, left)


PLUS_STRAND = StrandRoles(strand="+", left_is_donor=True)
MINUS_STRAND = StrandRoles(strand="-", left_is_donor=False)

STRAND_ROLES = {
    "+": PLUS_STRAND,
    "-": MINUS_STRAND,
}


# =============================================================================
# Matching
# =============================================================================


@attrs.frozen
class TranscriptMatch:
    """Comparison of one transcript's exons with one junction.

    Attributes:
        transcript_id: Transcript compared.
        gene_id: Its gene.
        roles: Strand roles of the transcript.
        left_exon: Index of the exon whose end meets the junction start.
        right_exon: Index of the exon whose start meets the junction end.
        exons_inside: Identifiers of exons strictly inside the intron.
        starts_inside: 1-based exon starts strictly inside the intron.
        ends_inside: 1-based exon ends strictly inside the intron.
    """

    transcript_id: str
    gene_id: str
    roles: StrandRoles
    left_exon: int | None = None
    right_exon: int | None = None
    exons_inside: frozenset[str] = frozenset()
    starts_inside: frozenset[int] = frozenset()
    ends_inside: frozenset[int] = frozenset()

    @property
    def known_donor(self) -> bool:
        side = self.left_exon if self.roles.left_is_donor else self.right_exon
        return side is not None

    @property
    def known_acceptor(self) -> bool:
        side = self.right_exon if self.roles.left_is_donor else self.left_exon
        return side is not None

    @property
    def known_junction(self) -> bool:
        """Both boundaries matched, left exon before right exon.

        In genomic order the left exon must precede the right one; on "-"
        this is the same as the donor exon preceding the acceptor exon in
        transcript order.
        """
        if self.left_exon is None or self.right_exon is None:
            return False
        return self.left_exon < self.right_exon

    @property
    def donors_skipped(self) -> frozenset[int]:
        # Exon ends are donors on "+", exon starts on "-"
        donors, _ = self.roles.donor_acceptor(self.ends_inside, self.starts_inside)
        return donors

    @property
    def acceptors_skipped(self) -> frozenset[int]:
        _, acceptors = self.roles.donor_acceptor(self.ends_inside, self.starts_inside)
        return acceptors


def exon_id(seqid: str, start: int, end: int) -> str:
    """Coordinate identifier for an exon (1-based inclusive)."""
    return f"{seqid}:{start + 1}-{end}"


def match_exons(
    seqid: str,
    exons: Sequence[tuple[int, int]],
    junction_start: int,
    junction_end: int,
) -> tuple[int | None, int | None, frozenset[str], frozenset[int], frozenset[int]]:
    """Scan genomically ordered exons against junction boundaries.

    Args:
        seqid: Chromosome, used for exon identifiers.
        exons: (start, end) tuples, 0-based half-open, sorted.
        junction_start: Record start (last base of the left exon, 1-based).
        junction_end: Record end (first base of the right exon, 1-based).

    Returns:
        (left_exon, right_exon, exons_inside, starts_inside, ends_inside).
    """
    left_exon: int | None = None
    right_exon: int | None = None
    exons_inside: set[str] = set()
    starts_inside: set[int] = set()
    ends_inside: set[int] = set()

    for i, (start, end) in enumerate(exons):
        first_base = start + 1
        last_base = end

        if last_base < junction_start:
            continue
        if first_base > junction_end:
            break

        if last_base == junction_start and left_exon is None:
            left_exon = i
        if first_base == junction_end and right_exon is None:
            right_exon = i

        start_inside = junction_start < first_base < junction_end
        end_inside = junction_start < last_base < junction_end
        if start_inside:
            starts_inside.add(first_base)
        if end_inside:
            ends_inside.add(last_base)
        if start_inside and end_inside:
            exons_inside.add(exon_id(seqid, start, end))

    return (
        left_exon,
        right_exon,
        frozenset(exons_inside),
        frozenset(starts_inside),
        frozenset(ends_inside),
    )


def match_transcript(
    transcript: TranscriptModel,
    record: AnnotatedJunction,
    exons: Sequence[tuple[int, int]] | None = None,
) -> TranscriptMatch:
    """Compare one transcript with a junction record.

    Args:
        transcript: Transcript to compare.
        record: Junction record.
        exons: Genomically sorted exons; sorted from the transcript if None.

    Raises:
        KeyError: If the transcript strand is not "+" or "-".
    """
    roles = STRAND_ROLES[transcript.strand]
    left, right, inside, starts, ends = match_exons(
        transcript.seqid,
        exons if exons is not None else sorted(transcript.exons),
        record.start,
        record.end,
    )
    return TranscriptMatch(
        transcript_id=transcript.transcript_id,
        gene_id=transcript.parent_gene,
        roles=roles,
        left_exon=left,
        right_exon=right,
        exons_inside=inside,
        starts_inside=starts,
        ends_inside=ends,
    )


# =============================================================================
# Record Transitions
# =============================================================================


def apply_match(record: AnnotatedJunction, match: TranscriptMatch) -> AnnotatedJunction:
    """Fold one transcript comparison into a record.

    Flags are OR'd and sets are unioned, so the order in which transcripts
    are applied does not change the result.
    """
    return attrs.evolve(
        record,
        transcripts_overlap=record.transcripts_overlap | {match.transcript_id},
        genes_overlap=record.genes_overlap | {match.gene_id},
        exons_skipped=record.exons_skipped | match.exons_inside,
        donors_skipped=record.donors_skipped | match.donors_skipped,
        acceptors_skipped=record.acceptors_skipped | match.acceptors_skipped,
        known_donor=record.known_donor or match.known_donor,
        known_acceptor=record.known_acceptor or match.known_acceptor,
        known_junction=record.known_junction or match.known_junction,
    )


def classify_anchor(known_donor: bool, known_acceptor: bool, overlaps_gene: bool) -> str:
    """Anchor code from the known-site flags.

    Args:
        known_donor: Donor matches an annotated boundary.
        known_acceptor: Acceptor matches an annotated boundary.
        overlaps_gene: At least one transcript overlaps the junction.

    Returns:
        "DA", "D", "A", "NDA" or "N".
    """
    if known_donor and known_acceptor:
        return ANCHOR_DONOR_ACCEPTOR
    if known_donor:
        return ANCHOR_DONOR
    if known_acceptor:
        return ANCHOR_ACCEPTOR
    if overlaps_gene:
        return ANCHOR_NOVEL_DONOR_ACCEPTOR
    return ANCHOR_NOVEL


def annotation_label(record: AnnotatedJunction) -> str:
    """Coarse description of how the junction relates to the gene model."""
    if record.known_junction:
        return LABEL_KNOWN
    if record.anchor == ANCHOR_DONOR_ACCEPTOR:
        return LABEL_EXON_SKIPPING if record.exons_skipped else LABEL_NOVEL_COMBINATION
    if record.anchor == ANCHOR_DONOR:
        return LABEL_ALTERNATIVE_ACCEPTOR
    if record.anchor == ANCHOR_ACCEPTOR:
        return LABEL_ALTERNATIVE_DONOR
    if record.anchor == ANCHOR_NOVEL_DONOR_ACCEPTOR:
        return LABEL_NOVEL_INTRAGENIC
    return LABEL_INTERGENIC


def finalize(record: AnnotatedJunction) -> AnnotatedJunction:
    """Fill in the anchor code and annotation label."""
    anchor = classify_anchor(
        record.known_donor,
        record.known_acceptor,
        bool(record.genes_overlap or record.transcripts_overlap),
    )
    record = attrs.evolve(record, anchor=anchor)
    return attrs.evolve(record, annotation=annotation_label(record))


# =============================================================================
# Engine
# =============================================================================


class JunctionAnnotator:
    """Annotates junctions against a gene model and optional reference.

    The gene model index and genome are only read, so one annotator can
    serve several threads.

    Attributes:
        gene_models: Transcript index to compare against.
        genome: Reference used for splice-site bases, or None.
        skip_single_exon_genes: Ignore transcripts with a single exon.
        carry_variant_info: Copy the last extra source column to variant_info.

    Example:
        >>> annotator = JunctionAnnotator(index, genome=genome)
        >>> record = annotator.annotate(IntervalRecord("chr1", 200, 250, strand="+"))
        >>> record.anchor, record.splice_site
        ('DA', 'GT-AG')
    """

    def __init__(
        self,
        gene_models: GeneModelIndex,
        genome: GenomeAccessor | None = None,
        skip_single_exon_genes: bool = True,
        carry_variant_info: bool = False,
    ) -> None:
        self.gene_models = gene_models
        self.genome = genome
        self.skip_single_exon_genes = skip_single_exon_genes
        self.carry_variant_info = carry_variant_info
        self._malformed: set[str] = set()
        self._malformed_lock = threading.Lock()

    def annotate(self, junction: IntervalRecord) -> AnnotatedJunction:
        """Annotate one junction.

        Args:
            junction: Junction interval as read from the source.

        Returns:
            Finalized AnnotatedJunction. Junctions without any overlapping
            transcript come back with anchor "N".
        """
        variant_info = ""
        if self.carry_variant_info and junction.fields:
            variant_info = junction.fields[-1]

        record = AnnotatedJunction.from_interval(junction, variant_info=variant_info)
        record = self.annotate_with_gene_models(record)
        if self.genome is not None:
            record = self.get_splice_site(record)
        return record

    def annotate_with_gene_models(self, record: AnnotatedJunction) -> AnnotatedJunction:
        """Compare a record with every transcript around it and finalize."""
        # Closed range [start, end] in the matching frame, as 0-based half-open
        transcripts = self.gene_models.transcripts_overlapping(
            record.chrom,
            max(0, record.start - 1),
            record.end,
        )
        for transcript in transcripts:
            record = self.check_for_overlap(transcript, record)
        return finalize(record)

    def check_for_overlap(
        self,
        transcript: TranscriptModel,
        record: AnnotatedJunction,
    ) -> AnnotatedJunction:
        """Apply one transcript to a record, or return it unchanged.

        Single-exon transcripts (when skipped), transcripts on the other
        strand of a stranded junction, and transcripts with malformed
        exons leave the record as it is.
        """
        if self.skip_single_exon_genes and transcript.n_exons == 1:
            return record

        if transcript.strand not in STRAND_ROLES:
            logger.debug(f"Transcript {transcript.transcript_id} has no strand, skipping")
            return record

        if record.strand in STRAND_ROLES and record.strand != transcript.strand:
            return record

        # Exons may be listed in transcript order
        exons = sorted(transcript.exons)
        if not is_well_formed(exons):
            # Workers share the set; warn once per transcript
            with self._malformed_lock:
                first = transcript.transcript_id not in self._malformed
                self._malformed.add(transcript.transcript_id)
            if first:
                logger.warning(
                    f"Transcript {transcript.transcript_id} has overlapping or empty exons, "
                    "ignoring it"
                )
            return record

        return apply_match(record, match_transcript(transcript, record, exons))

    def get_splice_site(self, record: AnnotatedJunction) -> AnnotatedJunction:
        """Read the intronic bases at both ends of the junction.

        The result reads 5' to 3' on the junction strand, e.g. "GT-AG".
        A failed lookup leaves splice_site empty.
        """
        if self.genome is None:
            return record

        left = (record.start, record.start + SPLICE_SITE_WINDOW)
        # record.end is one past the intron end
        right = (record.end - 1 - SPLICE_SITE_WINDOW, record.end - 1)

        try:
            if record.strand == "-":
                donor = self.genome.get_sequence(record.chrom, *right, strand="-")
                acceptor = self.genome.get_sequence(record.chrom, *left, strand="-")
            else:
                donor = self.genome.get_sequence(record.chrom, *left)
                acceptor = self.genome.get_sequence(record.chrom, *right)
        except (KeyError, ValueError) as e:
            logger.warning(f"Could not read splice site for {record.chrom}:{record.start}-{record.end}: {e}")
            return record

        return attrs.evolve(record, splice_site=f"{donor}-{acceptor}")

    def annotate_all(
        self,
        junctions: Iterable[IntervalRecord],
        workers: int = 1,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> Iterator[AnnotatedJunction]:
        """Annotate a stream of junctions, preserving input order.

        Args:
            junctions: Junction intervals.
            workers: Number of threads; 1 annotates in the calling thread.
            batch_size: Junctions handed to the pool at a time.

        Yields:
            AnnotatedJunction objects in input order.
        """
        if workers <= 1:
            for junction in junctions:
                yield self.annotate(junction)
            return

        iterator = iter(junctions)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            while True:
                batch = list(itertools.islice(iterator, batch_size))
                if not batch:
                    break
                yield from executor.map(self.annotate, batch)
