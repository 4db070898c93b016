"""Input/output handlers for junctionforge.

This module provides readers for the file formats the annotator consumes:

- GFF3/GTF: Gene model files
- BED: Junction calls (BED6 or BED12)
- FASTA: Reference sequence

Example:
    >>> from junctionforge.io import GeneModelIndex, iter_junctions
    >>> index = GeneModelIndex.load("genes.gtf")
    >>> junctions = iter_junctions("junctions.bed")
"""

from junctionforge.io.bed import JunctionFormatError, iter_junctions, read_junctions
from junctionforge.io.fasta import GenomeAccessor, reverse_complement
from junctionforge.io.gff import (
    GeneModel,
    GeneModelError,
    GeneModelIndex,
    GeneModelParser,
    TranscriptModel,
)

__all__: list[str] = [
    "GeneModel",
    "GeneModelError",
    "GeneModelIndex",
    "GeneModelParser",
    "GenomeAccessor",
    "JunctionFormatError",
    "TranscriptModel",
    "iter_junctions",
    "read_junctions",
    "reverse_complement",
]
