"""FASTA file handling for reference sequences.

This module provides random access to reference sequences stored in
FASTA format, using pyfaidx for indexed lookup. It is the sequence
provider the annotation engine uses to read splice-site bases.

Example:
    >>> from junctionforge.io.fasta import GenomeAccessor
    >>> with GenomeAccessor("genome.fa") as genome:
    ...     genome.get_sequence("chr1", 200, 202)
    'GT'
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

import pyfaidx

Strand = Literal["+", "-"]

logger = logging.getLogger(__name__)

# =============================================================================
# Complement Table
# =============================================================================

COMPLEMENT_TABLE = str.maketrans(
    "ACGTacgtNnRYSWKMBDHVryswkmbdhv",
    "TGCAtgcaNnYRSWMKVHDByrswmkvhdb",
)


def reverse_complement(sequence: str) -> str:
    """Get the reverse complement of a DNA sequence.

    Handles IUPAC ambiguity codes and preserves case.

    Args:
        sequence: DNA sequence string.

    Returns:
        Reverse complement sequence.
    """
    return sequence.translate(COMPLEMENT_TABLE)[::-1]


# =============================================================================
# Main Accessor Class
# =============================================================================


class GenomeAccessor:
    """Indexed FASTA access using pyfaidx.

    Attributes:
        path: Path to the FASTA file.

    Example:
        >>> genome = GenomeAccessor("genome.fa")
        >>> seq = genome.get_sequence("chr1", 1000, 2000)
        >>> rc_seq = genome.get_sequence("chr1", 1000, 2000, strand="-")
    """

    def __init__(self, fasta_path: Path | str) -> None:
        """Initialize the genome accessor.

        Args:
            fasta_path: Path to FASTA file. Will create .fai index if needed.

        Raises:
            FileNotFoundError: If FASTA file doesn't exist.
        """
        self.path = Path(fasta_path)
        if not self.path.exists():
            raise FileNotFoundError(f"FASTA file not found: {self.path}")

        self._fasta: pyfaidx.Fasta | None = None
        self._scaffold_lengths: dict[str, int] = {}

        self._open()

    def _open(self) -> None:
        """Open the FASTA file with pyfaidx."""
        # pyfaidx will create index if it doesn't exist
        self._fasta = pyfaidx.Fasta(
            str(self.path),
            sequence_always_upper=True,
            rebuild=False,
        )
        self._scaffold_lengths = {
            seqid: len(self._fasta[seqid]) for seqid in self._fasta.keys()
        }

        logger.info(
            f"Opened FASTA: {self.path.name}, "
            f"{len(self._scaffold_lengths)} scaffolds, "
            f"{sum(self._scaffold_lengths.values()):,} bp total"
        )

    def __enter__(self) -> GenomeAccessor:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the FASTA file."""
        if self._fasta is not None:
            self._fasta.close()
            self._fasta = None

    def get_sequence(
        self,
        seqid: str,
        start: int,
        end: int,
        strand: Strand = "+",
    ) -> str:
        """Get sequence for region (0-based, half-open coordinates).

        Args:
            seqid: Scaffold/chromosome name.
            start: Start position (0-based, inclusive).
            end: End position (0-based, exclusive).
            strand: Strand (+ or -). Returns reverse complement if "-".

        Returns:
            Sequence string.

        Raises:
            KeyError: If seqid not in FASTA.
            ValueError: If coordinates are invalid.
        """
        if self._fasta is None:
            raise RuntimeError("FASTA file not opened")

        if seqid not in self:
            raise KeyError(f"Unknown scaffold: {seqid}")

        scaffold_length = self._scaffold_lengths[seqid]
        if start < 0:
            raise ValueError(f"Start position cannot be negative: {start}")
        if end > scaffold_length:
            raise ValueError(
                f"End position {end} exceeds scaffold length {scaffold_length}"
            )
        if start >= end:
            raise ValueError(f"Start ({start}) must be less than end ({end})")

        sequence = str(self._fasta[seqid][start:end])

        if strand == "-":
            sequence = reverse_complement(sequence)

        return sequence

    def __contains__(self, seqid: str) -> bool:
        """Check if scaffold exists in FASTA."""
        return seqid in self._scaffold_lengths
