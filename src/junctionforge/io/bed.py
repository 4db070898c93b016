"""BED junction file reading.

Junction calls arrive either as plain BED6 intervals covering the intron
or as BED12 records, as written by junction extractors, whose two blocks
are the read anchors flanking the intron. Both are streamed lazily as
IntervalRecord objects covering the intron only.

Example:
    >>> from junctionforge.io.bed import iter_junctions
    >>> for junction in iter_junctions("junctions.bed"):
    ...     print(junction.chrom, junction.start, junction.end, junction.strand)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from junctionforge.utils.intervals import UNKNOWN_STRAND, VALID_STRANDS, IntervalRecord

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

BED6_COLUMNS = 6
BED12_COLUMNS = 12

# BED12 column indices
COL_BLOCK_COUNT = 9
COL_BLOCK_SIZES = 10

SKIP_PREFIXES = ("#", "track", "browser")


class JunctionFormatError(ValueError):
    """Raised when a junction line cannot be parsed."""


# =============================================================================
# Parsing
# =============================================================================


def adjust_junction_ends(chrom_start: int, chrom_end: int, block_sizes: str) -> tuple[int, int]:
    """Trim the flanking anchor blocks from a BED12 junction.

    The first and last blocks are the anchors; any blocks between them
    lie inside the intron span and are ignored.

    Args:
        chrom_start: BED chromStart of the whole record.
        chrom_end: BED chromEnd of the whole record.
        block_sizes: BED blockSizes column (comma-separated).

    Returns:
        (start, end) of the intron, 0-based half-open.

    Raises:
        ValueError: If fewer than two block sizes are present.
    """
    sizes = [int(s) for s in block_sizes.split(",") if s.strip()]
    if len(sizes) < 2:
        raise ValueError(f"BED12 junction needs two blocks, got {block_sizes!r}")
    return chrom_start + sizes[0], chrom_end - sizes[-1]


def parse_junction_line(line: str, line_number: int = 0) -> IntervalRecord:
    """Parse one BED6/BED12 line into an intron IntervalRecord.

    Args:
        line: Raw BED line.
        line_number: Line number for error messages.

    Returns:
        IntervalRecord spanning the intron.

    Raises:
        JunctionFormatError: If the line is not a valid junction.
    """
    parts = line.rstrip("\r\n").split("\t")
    if len(parts) < BED6_COLUMNS:
        raise JunctionFormatError(
            f"Line {line_number}: expected at least {BED6_COLUMNS} columns, got {len(parts)}"
        )

    try:
        start = int(parts[1])
        end = int(parts[2])
        extra_from = BED6_COLUMNS
        if len(parts) >= BED12_COLUMNS and int(parts[COL_BLOCK_COUNT]) >= 2:
            start, end = adjust_junction_ends(start, end, parts[COL_BLOCK_SIZES])
            extra_from = BED12_COLUMNS
    except ValueError as e:
        raise JunctionFormatError(f"Line {line_number}: {e}") from e

    if start < 0 or start > end:
        raise JunctionFormatError(f"Line {line_number}: invalid interval {start}-{end}")

    strand = parts[5] if parts[5] in VALID_STRANDS else UNKNOWN_STRAND

    return IntervalRecord(
        chrom=parts[0],
        start=start,
        end=end,
        name=parts[3],
        score=parts[4],
        strand=strand,
        fields=tuple(parts[extra_from:]),
    )


def iter_junctions(bed_path: Path | str) -> Iterator[IntervalRecord]:
    """Stream junctions from a BED file.

    Args:
        bed_path: Path to BED6 or BED12 junction file.

    Yields:
        IntervalRecord objects, one per junction line.

    Raises:
        FileNotFoundError: If file doesn't exist.
        JunctionFormatError: On the first malformed line.
    """
    bed_path = Path(bed_path)
    if not bed_path.exists():
        raise FileNotFoundError(f"Junction file not found: {bed_path}")
    return _iter_bed_lines(bed_path)


def _iter_bed_lines(bed_path: Path) -> Iterator[IntervalRecord]:
    with open(bed_path) as f:
        for line_number, line in enumerate(f, 1):
            if not line.strip() or line.startswith(SKIP_PREFIXES):
                continue
            yield parse_junction_line(line, line_number)


def read_junctions(bed_path: Path | str) -> list[IntervalRecord]:
    """Load all junctions from a BED file.

    Args:
        bed_path: Path to BED file.

    Returns:
        List of IntervalRecord objects.
    """
    junctions = list(iter_junctions(bed_path))
    logger.info(f"Loaded {len(junctions)} junctions from {Path(bed_path).name}")
    return junctions
