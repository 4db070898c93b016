"""GFF3/GTF gene model handling.

This module parses GFF3 and GTF annotation files into gene models and
provides the region index the annotation engine queries for transcripts.

Features:
    - Parse GFF3 (ID/Parent hierarchy) and GTF (gene_id/transcript_id)
    - Synthesize transcripts and genes implied only by exon lines
    - Convert 1-based inclusive coordinates to 0-based half-open
    - Region queries for transcripts overlapping a junction

Example:
    >>> from junctionforge.io.gff import GeneModelIndex
    >>> index = GeneModelIndex.load("annotations.gtf")
    >>> for tx in index.transcripts_overlapping("chr1", 1000, 5000):
    ...     print(tx.transcript_id, tx.strand, tx.n_exons)
"""

from __future__ import annotations

import bisect
import logging
import re
from collections import defaultdict
from pathlib import Path
from typing import Any, Iterator, Literal

import attrs

from junctionforge.utils.intervals import overlaps

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# GFF3/GTF column indices
COL_SEQID = 0
COL_SOURCE = 1
COL_TYPE = 2
COL_START = 3
COL_END = 4
COL_STRAND = 6
COL_ATTRIBUTES = 8

FEATURE_TYPES_GENE = {"gene"}
FEATURE_TYPES_TRANSCRIPT = {"mRNA", "transcript", "ncRNA", "lnc_RNA"}
FEATURE_TYPES_EXON = {"exon"}

GTF_ATTRIBUTE_RE = re.compile(r'\s*([^\s;]+)\s+"([^"]*)"\s*;?')

AnnotationFormat = Literal["gff3", "gtf"]


class GeneModelError(Exception):
    """Raised when a gene model file cannot be used."""


# =============================================================================
# Data Models
# =============================================================================


@attrs.define(slots=True)
class TranscriptModel:
    """Represents a transcript with its exons.

    Attributes:
        transcript_id: Unique transcript identifier.
        parent_gene: Parent gene ID.
        seqid: Scaffold/chromosome name.
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        strand: Strand (+ or -).
        source: Annotation source.
        exons: List of (start, end) tuples for exons, genomic order.
        attributes: Additional attributes from the file.
    """

    transcript_id: str
    parent_gene: str
    seqid: str
    start: int
    end: int
    strand: str
    source: str = "."
    exons: list[tuple[int, int]] = attrs.Factory(list)
    attributes: dict[str, str] = attrs.Factory(dict)

    @property
    def n_exons(self) -> int:
        """Number of exons."""
        return len(self.exons)


@attrs.define(slots=True)
class GeneModel:
    """Represents a gene with its transcripts.

    Attributes:
        gene_id: Unique gene identifier.
        seqid: Scaffold/chromosome name.
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        strand: Strand (+ or -).
        source: Annotation source.
        transcripts: List of transcript models.
        attributes: Additional attributes from the file.
    """

    gene_id: str
    seqid: str
    start: int
    end: int
    strand: str
    source: str = "."
    transcripts: list[TranscriptModel] = attrs.Factory(list)
    attributes: dict[str, str] = attrs.Factory(dict)


# =============================================================================
# Attribute Parsing
# =============================================================================


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse GFF3 attribute string into dictionary.

    Args:
        attr_string: Semicolon-separated key=value pairs.

    Returns:
        Dictionary of attribute key-value pairs.
    """
    attributes: dict[str, str] = {}
    if not attr_string or attr_string == ".":
        return attributes

    for item in attr_string.split(";"):
        item = item.strip()
        if not item or "=" not in item:
            continue
        key, value = item.split("=", 1)
        # URL decode
        value = value.replace("%3B", ";").replace("%3D", "=").replace("%26", "&")
        value = value.replace("%2C", ",")
        attributes[key] = value

    return attributes


def parse_gtf_attributes(attr_string: str) -> dict[str, str]:
    """Parse GTF attribute string into dictionary.

    Repeated keys (e.g. several ``tag`` entries) keep the first value.

    Args:
        attr_string: ``key "value";`` pairs.

    Returns:
        Dictionary of attribute key-value pairs.
    """
    attributes: dict[str, str] = {}
    if not attr_string or attr_string == ".":
        return attributes

    for match in GTF_ATTRIBUTE_RE.finditer(attr_string):
        attributes.setdefault(match.group(1), match.group(2))
    return attributes


def detect_format(path: Path | str) -> AnnotationFormat:
    """Guess whether an annotation file is GFF3 or GTF.

    The attribute column of the first feature line decides; the file
    suffix is used when no feature line is conclusive.

    Args:
        path: Annotation file path.

    Returns:
        "gff3" or "gtf".
    """
    path = Path(path)
    with open(path) as f:
        for line in f:
            if not line.strip() or line.startswith("#"):
                continue
            parts = line.rstrip("\n").split("\t")
            if len(parts) < 9:
                continue
            attr_string = parts[COL_ATTRIBUTES]
            if GTF_ATTRIBUTE_RE.match(attr_string) and "=" not in attr_string.split(";")[0]:
                return "gtf"
            if "=" in attr_string:
                return "gff3"

    suffixes = [s.lower() for s in path.suffixes]
    return "gtf" if ".gtf" in suffixes else "gff3"


# =============================================================================
# Parser
# =============================================================================


class GeneModelParser:
    """Parse a GFF3 or GTF file into gene models.

    Handles:
    - Parent-child relationships (GFF3 ``Parent``, GTF ids)
    - Multiple transcripts per gene
    - Transcripts and genes implied only by exon lines

    Example:
        >>> parser = GeneModelParser("annotations.gff3")
        >>> for gene in parser.iter_genes():
        ...     print(gene.gene_id, len(gene.transcripts))
    """

    def __init__(
        self,
        path: Path | str,
        annotation_format: AnnotationFormat | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            path: Path to GFF3/GTF file.
            annotation_format: Force "gff3" or "gtf"; detected if None.

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Gene model file not found: {self.path}")

        self.format: AnnotationFormat = annotation_format or detect_format(self.path)
        self._genes: dict[str, GeneModel] | None = None

    def _parse_line(self, line: str, line_number: int) -> dict[str, Any] | None:
        """Parse a single feature line.

        Returns:
            Parsed feature dictionary or None for comments/empty/malformed.
        """
        line = line.strip()
        if not line or line.startswith("#"):
            return None

        parts = line.split("\t")
        if len(parts) < 9:
            logger.warning(f"Malformed line {line_number} (expected 9 columns): {line[:50]}...")
            return None

        try:
            # 1-based inclusive -> 0-based half-open
            start = int(parts[COL_START]) - 1
            end = int(parts[COL_END])
        except ValueError as e:
            logger.warning(f"Error parsing line {line_number}: {e}")
            return None

        if self.format == "gtf":
            attributes = parse_gtf_attributes(parts[COL_ATTRIBUTES])
        else:
            attributes = parse_attributes(parts[COL_ATTRIBUTES])

        return {
            "seqid": parts[COL_SEQID],
            "source": parts[COL_SOURCE],
            "type": parts[COL_TYPE],
            "start": start,
            "end": end,
            "strand": parts[COL_STRAND],
            "attributes": attributes,
        }

    def _feature_ids(self, feature: dict[str, Any]) -> tuple[str | None, list[str]]:
        """Return (own id, parent ids) for a feature."""
        ftype = feature["type"]
        attributes = feature["attributes"]

        if self.format == "gtf":
            gene_id = attributes.get("gene_id")
            transcript_id = attributes.get("transcript_id")
            if ftype in FEATURE_TYPES_GENE:
                return gene_id, []
            if ftype in FEATURE_TYPES_TRANSCRIPT:
                return transcript_id, [gene_id] if gene_id else []
            return None, [transcript_id] if transcript_id else []

        parent = attributes.get("Parent", "")
        return attributes.get("ID"), parent.split(",") if parent else []

    def _build_genes(self) -> dict[str, GeneModel]:
        """Build gene models from the annotation file."""
        gene_features: dict[str, dict] = {}
        transcript_features: dict[str, dict] = {}
        transcript_parents: dict[str, str] = {}
        exons_by_transcript: dict[str, list[dict]] = defaultdict(list)

        with open(self.path) as f:
            for line_number, line in enumerate(f, 1):
                feature = self._parse_line(line, line_number)
                if feature is None:
                    continue

                ftype = feature["type"]
                feature_id, parent_ids = self._feature_ids(feature)

                if ftype in FEATURE_TYPES_GENE and feature_id:
                    gene_features[feature_id] = feature

                elif ftype in FEATURE_TYPES_TRANSCRIPT and feature_id:
                    transcript_features[feature_id] = feature
                    if parent_ids:
                        transcript_parents[feature_id] = parent_ids[0]

                elif ftype in FEATURE_TYPES_EXON:
                    for parent_id in parent_ids:
                        exons_by_transcript[parent_id].append(feature)
                    if self.format == "gtf" and parent_ids:
                        gene_id = feature["attributes"].get("gene_id")
                        if gene_id:
                            transcript_parents.setdefault(parent_ids[0], gene_id)

        # GTF files commonly carry exon lines only
        for tx_id, exon_list in exons_by_transcript.items():
            if tx_id in transcript_features:
                continue
            first = exon_list[0]
            transcript_features[tx_id] = {
                **first,
                "start": min(e["start"] for e in exon_list),
                "end": max(e["end"] for e in exon_list),
                "attributes": {},
            }

        transcripts: dict[str, TranscriptModel] = {}
        for tx_id, tf in transcript_features.items():
            transcript = TranscriptModel(
                transcript_id=tx_id,
                parent_gene=transcript_parents.get(tx_id, tx_id),
                seqid=tf["seqid"],
                start=tf["start"],
                end=tf["end"],
                strand=tf["strand"],
                source=tf["source"],
                exons=sorted((e["start"], e["end"]) for e in exons_by_transcript.get(tx_id, [])),
                attributes=tf["attributes"],
            )
            if not transcript.exons:
                logger.debug(f"Transcript {tx_id} has no exons, skipping")
                continue
            transcripts[tx_id] = transcript

        genes: dict[str, GeneModel] = {}
        for gene_id, gf in gene_features.items():
            genes[gene_id] = GeneModel(
                gene_id=gene_id,
                seqid=gf["seqid"],
                start=gf["start"],
                end=gf["end"],
                strand=gf["strand"],
                source=gf["source"],
                attributes=gf["attributes"],
            )

        for transcript in transcripts.values():
            gene = genes.get(transcript.parent_gene)
            if gene is None:
                gene = GeneModel(
                    gene_id=transcript.parent_gene,
                    seqid=transcript.seqid,
                    start=transcript.start,
                    end=transcript.end,
                    strand=transcript.strand,
                    source=transcript.source,
                )
                genes[gene.gene_id] = gene
            gene.start = min(gene.start, transcript.start)
            gene.end = max(gene.end, transcript.end)
            gene.transcripts.append(transcript)

        logger.info(
            f"Parsed {len(genes)} genes, {len(transcripts)} transcripts "
            f"from {self.path.name} ({self.format.upper()})"
        )
        return genes

    def _ensure_parsed(self) -> None:
        """Ensure the file has been parsed."""
        if self._genes is None:
            self._genes = self._build_genes()

    def iter_genes(self) -> Iterator[GeneModel]:
        """Iterate over genes with their transcripts.

        Yields:
            GeneModel objects.
        """
        self._ensure_parsed()
        assert self._genes is not None
        yield from self._genes.values()


# =============================================================================
# Region Index
# =============================================================================


class GeneModelIndex:
    """Read-only per-chromosome index of transcripts.

    Transcripts are kept sorted by start so a region query only scans the
    window that can overlap it. The index is never mutated after
    construction, so one instance can be shared by worker threads.

    Example:
        >>> index = GeneModelIndex.load("genes.gff3")
        >>> txs = index.transcripts_overlapping("chr1", 199, 251)
    """

    def __init__(self, genes: list[GeneModel]) -> None:
        by_seqid: dict[str, list[TranscriptModel]] = defaultdict(list)
        for gene in genes:
            for transcript in gene.transcripts:
                by_seqid[transcript.seqid].append(transcript)

        self._transcripts: dict[str, list[TranscriptModel]] = {}
        self._starts: dict[str, list[int]] = {}
        self._max_span: dict[str, int] = {}
        for seqid, transcripts in by_seqid.items():
            transcripts.sort(key=lambda t: (t.start, t.end, t.transcript_id))
            self._transcripts[seqid] = transcripts
            self._starts[seqid] = [t.start for t in transcripts]
            self._max_span[seqid] = max(t.end - t.start for t in transcripts)

        self.n_genes = len(genes)

    @classmethod
    def load(
        cls,
        path: Path | str,
        annotation_format: AnnotationFormat | None = None,
    ) -> GeneModelIndex:
        """Parse a GFF3/GTF file and index its transcripts.

        Args:
            path: Annotation file path.
            annotation_format: Force "gff3" or "gtf"; detected if None.

        Returns:
            GeneModelIndex instance.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            GeneModelError: If no transcript with exons was found.
        """
        parser = GeneModelParser(path, annotation_format=annotation_format)
        genes = list(parser.iter_genes())
        index = cls(genes)
        if index.n_transcripts == 0:
            raise GeneModelError(f"No transcripts with exons found in {parser.path}")
        return index

    @property
    def n_transcripts(self) -> int:
        """Total number of indexed transcripts."""
        return sum(len(txs) for txs in self._transcripts.values())

    def __contains__(self, seqid: str) -> bool:
        return seqid in self._transcripts

    def transcripts_overlapping(
        self,
        seqid: str,
        start: int,
        end: int,
    ) -> list[TranscriptModel]:
        """Get all transcripts overlapping a region.

        Args:
            seqid: Scaffold name.
            start: Start position (0-based).
            end: End position (0-based, exclusive).

        Returns:
            Overlapping transcripts ordered by (start, end, transcript_id).
            Empty for an unknown chromosome.
        """
        if seqid not in self:
            return []
        transcripts = self._transcripts[seqid]

        starts = self._starts[seqid]
        lo = bisect.bisect_left(starts, start - self._max_span[seqid])
        hi = bisect.bisect_left(starts, end)

        return [t for t in transcripts[lo:hi] if overlaps((t.start, t.end), (start, end))]
