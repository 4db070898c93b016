"""Core annotation logic for junctionforge.

This module contains the junction record and the engine that compares
junctions with a gene model:

- Annotated junction record and output columns
- Strand-aware exon boundary matching
- Anchor classification
- Splice-site sequence lookup
- Output writing and run summaries

Example:
    >>> from junctionforge.core import JunctionAnnotator, JunctionReportWriter
"""

from junctionforge.core.annotate import (
    JunctionAnnotator,
    StrandRoles,
    TranscriptMatch,
    apply_match,
    classify_anchor,
    finalize,
    match_exons,
)
from junctionforge.core.junction import ANCHOR_CODES, AnnotatedJunction, header_columns
from junctionforge.core.report import (
    JunctionReportWriter,
    JunctionSummary,
    summarize,
    write_annotated_junctions,
)

__all__: list[str] = [
    "ANCHOR_CODES",
    "AnnotatedJunction",
    "JunctionAnnotator",
    "JunctionReportWriter",
    "JunctionSummary",
    "StrandRoles",
    "TranscriptMatch",
    "apply_match",
    "classify_anchor",
    "finalize",
    "header_columns",
    "match_exons",
    "summarize",
    "write_annotated_junctions",
]
