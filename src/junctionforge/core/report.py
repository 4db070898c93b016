"""Annotated junction output.

Writes annotated junctions as a tab-separated table with one header line
and keeps running counts for the end-of-run summary.

Example:
    >>> from junctionforge.core.report import JunctionReportWriter
    >>> with JunctionReportWriter("annotated.tsv", variant_info=False) as writer:
    ...     for record in records:
    ...         writer.write(record)
"""

from __future__ import annotations

import logging
import sys
from collections import Counter
from pathlib import Path
from typing import IO, Any, Iterable

import attrs

from junctionforge.core.junction import ANCHOR_CODES, AnnotatedJunction, header_columns

logger = logging.getLogger(__name__)

STDOUT = "-"


# =============================================================================
# Writer
# =============================================================================


class JunctionReportWriter:
    """Write annotated junctions to a TSV file or stream.

    The header is written on first use, so an empty run still produces a
    header line. Header and rows always agree on the variant_info column.

    Attributes:
        variant_info: Whether the variant_info column is written.
        n_written: Number of rows written so far.
    """

    def __init__(
        self,
        output: Path | str | IO[str] = STDOUT,
        variant_info: bool = False,
    ) -> None:
        """Initialize the writer.

        Args:
            output: Output path, "-" for stdout, or an open text stream.
            variant_info: Append the variant_info column.
        """
        self.variant_info = variant_info
        self.n_written = 0
        self._header_written = False

        if isinstance(output, (str, Path)):
            if str(output) == STDOUT:
                self._file: IO[str] | None = sys.stdout
                self._owns_file = False
                self.path: Path | None = None
            else:
                self.path = Path(output)
                self._file = open(self.path, "w")
                self._owns_file = True
        else:
            self._file = output
            self._owns_file = False
            self.path = None

    def __enter__(self) -> JunctionReportWriter:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Flush and, if opened here, close the output."""
        if self._file is None:
            return
        if not self._header_written:
            self.write_header()
        if self._owns_file:
            self._file.close()
            logger.info(f"Wrote {self.n_written} annotated junctions to {self.path}")
        else:
            self._file.flush()
        self._file = None

    def write_header(self) -> None:
        """Write the header line."""
        if self._file is None:
            raise RuntimeError("Writer is closed")
        self._file.write("\t".join(header_columns(self.variant_info)) + "\n")
        self._header_written = True

    def write(self, record: AnnotatedJunction) -> None:
        """Write one annotated junction."""
        if not self._header_written:
            self.write_header()
        assert self._file is not None
        self._file.write(record.format(self.variant_info) + "\n")
        self.n_written += 1

    def write_all(self, records: Iterable[AnnotatedJunction]) -> None:
        """Write several annotated junctions."""
        for record in records:
            self.write(record)


def write_annotated_junctions(
    records: Iterable[AnnotatedJunction],
    output: Path | str | IO[str],
    variant_info: bool = False,
) -> int:
    """Write annotated junctions in one call.

    Returns:
        Number of rows written.
    """
    with JunctionReportWriter(output, variant_info=variant_info) as writer:
        writer.write_all(records)
        return writer.n_written


# =============================================================================
# Summary
# =============================================================================


@attrs.define
class JunctionSummary:
    """Running counts over annotated junctions.

    Attributes:
        total: Junctions seen.
        anchors: Count per anchor code.
        known_donors: Junctions with a known donor.
        known_acceptors: Junctions with a known acceptor.
        known_junctions: Junctions matching an annotated intron.
        with_skipped_exons: Junctions skipping at least one exon.
        with_splice_site: Junctions with splice-site bases.
    """

    total: int = 0
    anchors: Counter = attrs.Factory(Counter)
    known_donors: int = 0
    known_acceptors: int = 0
    known_junctions: int = 0
    with_skipped_exons: int = 0
    with_splice_site: int = 0

    def update(self, record: AnnotatedJunction) -> AnnotatedJunction:
        """Count one record and hand it back, so it can wrap a stream."""
        self.total += 1
        self.anchors[record.anchor] += 1
        self.known_donors += record.known_donor
        self.known_acceptors += record.known_acceptor
        self.known_junctions += record.known_junction
        self.with_skipped_exons += bool(record.exons_skipped)
        self.with_splice_site += bool(record.splice_site)
        return record

    def to_dict(self) -> dict[str, int]:
        """Flat dictionary with one entry per anchor code."""
        data = {
            "total": self.total,
            "known_donors": self.known_donors,
            "known_acceptors": self.known_acceptors,
            "known_junctions": self.known_junctions,
            "with_skipped_exons": self.with_skipped_exons,
            "with_splice_site": self.with_splice_site,
        }
        for code in ANCHOR_CODES:
            data[f"anchor_{code}"] = self.anchors.get(code, 0)
        return data


def summarize(records: Iterable[AnnotatedJunction]) -> JunctionSummary:
    """Summarize a collection of annotated junctions."""
    summary = JunctionSummary()
    for record in records:
        summary.update(record)
    return summary
