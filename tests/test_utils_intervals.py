"""Unit tests for junctionforge.utils.intervals module."""

from junctionforge.utils.intervals import (
    IntervalRecord,
    is_well_formed,
    overlaps,
)


class TestIntervalRecord:
    """Tests for IntervalRecord."""

    def test_defaults(self) -> None:
        """Test default name, score, strand and fields."""
        rec = IntervalRecord("chr1", 200, 250)

        assert rec.name == "."
        assert rec.score == "0"
        assert rec.strand == "."
        assert rec.fields == ()


class TestOverlaps:
    """Tests for the overlap predicate."""

    def test_half_open(self) -> None:
        """Test half-open overlap excludes touching intervals."""
        assert overlaps((100, 200), (150, 300))
        assert not overlaps((100, 200), (200, 300))


class TestIsWellFormed:
    """Tests for exon structure validation."""

    def test_sorted_disjoint(self) -> None:
        """Test a normal exon list."""
        assert is_well_formed([(100, 200), (250, 300)])

    def test_adjacent(self) -> None:
        """Test exons that touch are allowed."""
        assert is_well_formed([(100, 200), (200, 300)])

    def test_overlapping(self) -> None:
        """Test overlapping exons are rejected."""
        assert not is_well_formed([(100, 200), (150, 300)])

    def test_empty_exon(self) -> None:
        """Test zero-length exons are rejected."""
        assert not is_well_formed([(100, 100)])

    def test_no_exons(self) -> None:
        """Test an empty list is trivially well formed."""
        assert is_well_formed([])
