"""junctionforge: splice junction annotation against a reference gene model.

junctionforge compares RNA-seq junction calls with annotated transcripts
and reports, per junction, whether its donor and acceptor sites are
known, which genes and transcripts it overlaps, which exons it skips,
and the intronic bases at both ends.

Example:
    >>> import junctionforge
    >>> junctionforge.__version__
    '0.1.0'

Modules:
    io: Readers for GFF3/GTF, BED junctions and FASTA
    core: Junction record, annotation engine and output
    config: Configuration
    utils: Interval records and logging
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
