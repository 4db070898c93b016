"""Unit tests for junctionforge.io.fasta module.

Tests cover:
- GenomeAccessor initialization and indexing
- Sequence extraction with strand awareness
- Coordinate validation
- reverse_complement
"""

from pathlib import Path

import pytest

from junctionforge.io.fasta import GenomeAccessor, reverse_complement


# =============================================================================
# Utility Function Tests
# =============================================================================


class TestReverseComplement:
    """Tests for reverse_complement function."""

    def test_simple_sequence(self) -> None:
        """Test reverse complement of a simple sequence."""
        assert reverse_complement("ACGT") == "ACGT"
        assert reverse_complement("AAAA") == "TTTT"
        assert reverse_complement("ATCGATCG") == "CGATCGAT"

    def test_splice_site_dinucleotides(self) -> None:
        """Test the minus-strand forms of canonical sites."""
        assert reverse_complement("AC") == "GT"
        assert reverse_complement("CT") == "AG"

    def test_case_preservation(self) -> None:
        """Test that case is preserved."""
        assert reverse_complement("AcGt") == "aCgT"

    def test_iupac_ambiguity(self) -> None:
        """Test handling of IUPAC ambiguity codes."""
        assert reverse_complement("R") == "Y"
        assert reverse_complement("N") == "N"

    def test_empty_sequence(self) -> None:
        """Test reverse complement of empty sequence."""
        assert reverse_complement("") == ""


# =============================================================================
# GenomeAccessor Tests
# =============================================================================


class TestGenomeAccessorInit:
    """Tests for GenomeAccessor initialization."""

    def test_init_success(self, synthetic_fasta: Path) -> None:
        """Test successful initialization."""
        genome = GenomeAccessor(synthetic_fasta)

        assert genome.path == synthetic_fasta
        assert "chr1" in genome
        assert "chr3" not in genome
        genome.close()

    def test_init_creates_index(self, synthetic_fasta: Path) -> None:
        """Test that a .fai index is created."""
        with GenomeAccessor(synthetic_fasta):
            pass

        assert Path(str(synthetic_fasta) + ".fai").exists()

    def test_init_missing_file(self, tmp_path: Path) -> None:
        """Test initialization with missing file."""
        with pytest.raises(FileNotFoundError):
            GenomeAccessor(tmp_path / "missing.fa")

    def test_scaffold_bounds(self, synthetic_fasta: Path) -> None:
        """Test lookups are bounded by the indexed scaffold length."""
        with GenomeAccessor(synthetic_fasta) as genome:
            assert len(genome.get_sequence("chr2", 498, 500)) == 2
            with pytest.raises(ValueError, match="exceeds scaffold length 500"):
                genome.get_sequence("chr2", 499, 501)
            with pytest.raises(KeyError):
                genome.get_sequence("chr3", 0, 2)


class TestGenomeAccessorGetSequence:
    """Tests for sequence extraction."""

    def test_plus_strand(self, synthetic_fasta: Path) -> None:
        """Test extracting bases on the forward strand."""
        with GenomeAccessor(synthetic_fasta) as genome:
            assert genome.get_sequence("chr1", 200, 202) == "GT"
            assert genome.get_sequence("chr1", 248, 250) == "AG"

    def test_minus_strand(self, synthetic_fasta: Path) -> None:
        """Test extracting the reverse complement."""
        with GenomeAccessor(synthetic_fasta) as genome:
            assert genome.get_sequence("chr1", 798, 800, strand="-") == "GT"
            assert genome.get_sequence("chr1", 700, 702, strand="-") == "AG"

    def test_uppercase(self, tmp_path: Path) -> None:
        """Test soft-masked sequence is returned upper case."""
        path = tmp_path / "soft.fa"
        path.write_text(">chr1\nacgtACGT\n")

        with GenomeAccessor(path) as genome:
            assert genome.get_sequence("chr1", 0, 4) == "ACGT"

    def test_unknown_scaffold(self, synthetic_fasta: Path) -> None:
        """Test that an unknown scaffold raises KeyError."""
        with GenomeAccessor(synthetic_fasta) as genome:
            with pytest.raises(KeyError):
                genome.get_sequence("chr3", 0, 2)

    def test_out_of_bounds(self, synthetic_fasta: Path) -> None:
        """Test coordinates past the scaffold end raise ValueError."""
        with GenomeAccessor(synthetic_fasta) as genome:
            with pytest.raises(ValueError):
                genome.get_sequence("chr2", 499, 502)

    def test_negative_start(self, synthetic_fasta: Path) -> None:
        """Test negative start raises ValueError."""
        with GenomeAccessor(synthetic_fasta) as genome:
            with pytest.raises(ValueError):
                genome.get_sequence("chr1", -1, 2)

    def test_empty_region(self, synthetic_fasta: Path) -> None:
        """Test start == end raises ValueError."""
        with GenomeAccessor(synthetic_fasta) as genome:
            with pytest.raises(ValueError):
                genome.get_sequence("chr1", 10, 10)

    def test_closed_accessor(self, synthetic_fasta: Path) -> None:
        """Test reading after close raises RuntimeError."""
        genome = GenomeAccessor(synthetic_fasta)
        genome.close()

        with pytest.raises(RuntimeError):
            genome.get_sequence("chr1", 0, 2)
