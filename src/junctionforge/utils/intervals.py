"""Genomic interval records and overlap helpers.

This module provides the interval record shared by the junction source,
the annotation engine and the report writer, plus the small set of
overlap predicates the engine needs.

Coordinate conventions:
    - IntervalRecord: 0-based half-open, as read from BED
    - Exon tuples: 0-based half-open (start, end)

Example:
    >>> from junctionforge.utils.intervals import IntervalRecord, overlaps
    >>> rec = IntervalRecord("chr1", 200, 250, name="JUNC1", strand="+")
    >>> rec.end - rec.start
    50
    >>> overlaps((100, 200), (150, 300))
    True
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

# =============================================================================
# Constants
# =============================================================================

VALID_STRANDS = ("+", "-")
UNKNOWN_STRAND = "."


# =============================================================================
# Data Structures
# =============================================================================


class IntervalRecord(NamedTuple):
    """A named, stranded genomic interval.

    Attributes:
        chrom: Chromosome/contig identifier.
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        name: Record name (BED column 4).
        score: Score as written in the source (BED column 5).
        strand: "+", "-" or "." when unknown.
        fields: Any columns following the standard ones.
    """

    chrom: str
    start: int
    end: int
    name: str = "."
    score: str = "0"
    strand: str = UNKNOWN_STRAND
    fields: tuple[str, ...] = ()


# =============================================================================
# Overlap Operations
# =============================================================================


def overlaps(a: tuple[int, int], b: tuple[int, int]) -> bool:
    """Check if two half-open intervals overlap.

    Args:
        a: First (start, end) interval.
        b: Second (start, end) interval.

    Returns:
        True if intervals share at least one base.
    """
    return a[0] < b[1] and b[0] < a[1]


def is_well_formed(exons: Sequence[tuple[int, int]]) -> bool:
    """Check that exons are non-empty, sorted and non-overlapping.

    Args:
        exons: (start, end) tuples in genomic order.

    Returns:
        True if every exon has start < end and no exon overlaps the next.
    """
    previous_end = None
    for start, end in exons:
        if start >= end:
            return False
        if previous_end is not None and start < previous_end:
            return False
        previous_end = end
    return True
