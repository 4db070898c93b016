"""Utility functions for junctionforge.

This module provides common utilities used across junctionforge:

- Interval records and overlap predicates
- Logging configuration

Example:
    >>> from junctionforge.utils import IntervalRecord
    >>> rec = IntervalRecord("chr1", 200, 250, strand="+")
"""

from junctionforge.utils.intervals import (
    IntervalRecord,
    is_well_formed,
    overlaps,
)

__all__ = [
    "IntervalRecord",
    "is_well_formed",
    "overlaps",
]
