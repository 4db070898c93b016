"""Pytest configuration and shared fixtures for junctionforge tests.

This module contains fixtures that are shared across multiple test modules.
Fixtures are organized by category:

- FASTA fixtures: A small reference with known splice-site bases
- Gene model fixtures: The same gene model as GFF3 and GTF
- Junction fixtures: BED6 and BED12 junction files

Gene model (1-based inclusive, as written in the files):

    chr1 gene1 (+)  tx1 exons 101-200, 251-300, 351-400
                    tx2 exons 101-200, 351-400
    chr1 gene2 (-)  tx3 exons 601-700, 801-900
    chr1 gene3 (+)  tx4 exon  1001-1100 (single exon)
    chr2 gene4 (+)  tx5 exons 51-150, 251-400

Reference bases (0-based half-open) placed at the introns of tx1 and tx3:

    chr1[200:202] = GT    chr1[248:250] = AG    chr1[348:350] = AG
    chr1[700:702] = CT    chr1[798:800] = AC    (GT-AG on the minus strand)
"""

from pathlib import Path

import pytest

# =============================================================================
# Sequence Helpers
# =============================================================================

CHR1_LENGTH = 1200
CHR2_LENGTH = 500

SPLICE_SITE_BASES = {
    200: "GT",
    248: "AG",
    348: "AG",
    700: "CT",
    798: "AC",
}


def _background(length: int) -> list[str]:
    """Deterministic filler sequence without GT/AG dinucleotides."""
    return list(("CCAA" * (length // 4 + 1))[:length])


def _write_fasta(path: Path, sequences: dict[str, str]) -> Path:
    with open(path, "w") as f:
        for seqid, seq in sequences.items():
            f.write(f">{seqid}\n")
            # Write in 80-character lines
            for i in range(0, len(seq), 80):
                f.write(seq[i : i + 80] + "\n")
    return path


# =============================================================================
# FASTA Fixtures
# =============================================================================


@pytest.fixture
def synthetic_fasta(tmp_path: Path) -> Path:
    """Create a synthetic FASTA file for testing.

    Creates a small genome with two scaffolds:
    - chr1: 1200 bp, with splice-site bases at the tx1 and tx3 introns
    - chr2: 500 bp
    """
    chr1 = _background(CHR1_LENGTH)
    for position, bases in SPLICE_SITE_BASES.items():
        chr1[position : position + len(bases)] = list(bases)

    sequences = {
        "chr1": "".join(chr1),
        "chr2": "".join(_background(CHR2_LENGTH)),
    }
    return _write_fasta(tmp_path / "test_genome.fa", sequences)


# =============================================================================
# Gene Model Fixtures
# =============================================================================


GFF3_LINES = [
    "##gff-version 3",
    "chr1\ttest\tgene\t101\t400\t.\t+\t.\tID=gene1;Name=GENE1",
    "chr1\ttest\tmRNA\t101\t400\t.\t+\t.\tID=tx1;Parent=gene1",
    "chr1\ttest\texon\t101\t200\t.\t+\t.\tID=tx1.exon1;Parent=tx1,tx2",
    "chr1\ttest\texon\t251\t300\t.\t+\t.\tID=tx1.exon2;Parent=tx1",
    "chr1\ttest\texon\t351\t400\t.\t+\t.\tID=tx1.exon3;Parent=tx1,tx2",
    "chr1\ttest\tmRNA\t101\t400\t.\t+\t.\tID=tx2;Parent=gene1",
    "chr1\ttest\tgene\t601\t900\t.\t-\t.\tID=gene2",
    "chr1\ttest\tmRNA\t601\t900\t.\t-\t.\tID=tx3;Parent=gene2",
    # Minus-strand exons in transcript order
    "chr1\ttest\texon\t801\t900\t.\t-\t.\tParent=tx3",
    "chr1\ttest\texon\t601\t700\t.\t-\t.\tParent=tx3",
    "chr1\ttest\tgene\t1001\t1100\t.\t+\t.\tID=gene3",
    "chr1\ttest\tmRNA\t1001\t1100\t.\t+\t.\tID=tx4;Parent=gene3",
    "chr1\ttest\texon\t1001\t1100\t.\t+\t.\tParent=tx4",
    "chr2\ttest\tgene\t51\t400\t.\t+\t.\tID=gene4",
    "chr2\ttest\tmRNA\t51\t400\t.\t+\t.\tID=tx5;Parent=gene4",
    "chr2\ttest\texon\t51\t150\t.\t+\t.\tParent=tx5",
    "chr2\ttest\texon\t251\t400\t.\t+\t.\tParent=tx5",
]

GTF_LINES = [
    '#!genome-build test',
    'chr1\ttest\ttranscript\t101\t400\t.\t+\t.\tgene_id "gene1"; transcript_id "tx1";',
    'chr1\ttest\texon\t101\t200\t.\t+\t.\tgene_id "gene1"; transcript_id "tx1"; exon_number "1";',
    'chr1\ttest\texon\t251\t300\t.\t+\t.\tgene_id "gene1"; transcript_id "tx1"; exon_number "2";',
    'chr1\ttest\texon\t351\t400\t.\t+\t.\tgene_id "gene1"; transcript_id "tx1"; exon_number "3";',
    'chr1\ttest\texon\t101\t200\t.\t+\t.\tgene_id "gene1"; transcript_id "tx2";',
    'chr1\ttest\texon\t351\t400\t.\t+\t.\tgene_id "gene1"; transcript_id "tx2";',
    'chr1\ttest\texon\t801\t900\t.\t-\t.\tgene_id "gene2"; transcript_id "tx3";',
    'chr1\ttest\texon\t601\t700\t.\t-\t.\tgene_id "gene2"; transcript_id "tx3";',
    'chr1\ttest\texon\t1001\t1100\t.\t+\t.\tgene_id "gene3"; transcript_id "tx4";',
    'chr2\ttest\texon\t51\t150\t.\t+\t.\tgene_id "gene4"; transcript_id "tx5";',
    'chr2\ttest\texon\t251\t400\t.\t+\t.\tgene_id "gene4"; transcript_id "tx5";',
]


@pytest.fixture
def synthetic_gff3(tmp_path: Path) -> Path:
    """Create a GFF3 file with the gene model described above."""
    gff_path = tmp_path / "genes.gff3"
    gff_path.write_text("\n".join(GFF3_LINES) + "\n")
    return gff_path


@pytest.fixture
def synthetic_gtf(tmp_path: Path) -> Path:
    """Create a GTF file with the same gene model, mostly exon lines."""
    gtf_path = tmp_path / "genes.gtf"
    gtf_path.write_text("\n".join(GTF_LINES) + "\n")
    return gtf_path


# =============================================================================
# Junction Fixtures
# =============================================================================


# name -> (chrom, start, end, strand); intron coordinates, 0-based half-open
JUNCTIONS = {
    "known": ("chr1", 200, 250, "+"),
    "skip": ("chr1", 200, 350, "+"),
    "donor_only": ("chr1", 200, 260, "+"),
    "acceptor_only": ("chr1", 220, 250, "+"),
    "novel": ("chr1", 210, 240, "+"),
    "minus": ("chr1", 700, 800, "-"),
    "no_chrom": ("chr3", 100, 200, "+"),
    "single_exon": ("chr1", 1020, 1050, "+"),
    "intergenic": ("chr1", 500, 550, "+"),
}


@pytest.fixture
def junction_bed(tmp_path: Path) -> Path:
    """Create a BED6 junction file, one line per entry in JUNCTIONS."""
    bed_path = tmp_path / "junctions.bed"
    with open(bed_path, "w") as f:
        f.write("track name=junctions\n")
        for i, (name, (chrom, start, end, strand)) in enumerate(JUNCTIONS.items(), 1):
            f.write(f"{chrom}\t{start}\t{end}\t{name}\t{i * 10}\t{strand}\n")
    return bed_path


@pytest.fixture
def junction_bed_with_variants(tmp_path: Path) -> Path:
    """Create a BED6 junction file with an extra variant column."""
    bed_path = tmp_path / "junctions_variants.bed"
    with open(bed_path, "w") as f:
        f.write("chr1\t200\t250\tknown\t5\t+\tsample1\tchr1:225:A>G\n")
        f.write("chr1\t700\t800\tminus\t7\t-\tsample1\tchr1:750:C>T\n")
    return bed_path


@pytest.fixture
def junction_bed12(tmp_path: Path) -> Path:
    """Create a BED12 junction file whose blocks flank the known introns."""
    bed_path = tmp_path / "junctions12.bed"
    with open(bed_path, "w") as f:
        f.write("# junctions with anchors\n")
        f.write("chr1\t190\t260\tJUNC1\t12\t+\t190\t260\t255,0,0\t2\t10,10\t0,60\n")
        f.write("chr1\t680\t830\tJUNC2\t3\t-\t680\t830\t255,0,0\t2\t20,30\t0,120\n")
    return bed_path


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
