"""Configuration management for junctionforge.

Configuration can come from:
- Default values
- A TOML file with an ``[annotate]`` table
- Command-line arguments (applied on top by the CLI)

Example:
    >>> from junctionforge.config import Config
    >>> config = Config.load("junctionforge.toml")
    >>> config.annotate.skip_single_exon_genes
    True

Example file::

    [annotate]
    skip_single_exon_genes = false
    reference_path = "genome.fa"
    workers = 4
"""

import tomllib
from pathlib import Path
from typing import Any

import attrs

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_SKIP_SINGLE_EXON_GENES = True
DEFAULT_OUTPUT = "-"
DEFAULT_WORKERS = 1


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class AnnotateConfig:
    """Configuration for junction annotation.

    Attributes:
        skip_single_exon_genes: Ignore single-exon transcripts.
        reference_path: Reference FASTA for splice-site bases, or None.
        output_destination: Output path, "-" for stdout.
        variant_info: Write the variant_info column.
        sort_output: Sort rows by (chrom, start, end) before writing.
        workers: Annotation threads.
    """

    skip_single_exon_genes: bool = attrs.field(
        default=DEFAULT_SKIP_SINGLE_EXON_GENES, validator=attrs.validators.instance_of(bool)
    )
    reference_path: str | None = attrs.field(
        default=None, validator=attrs.validators.optional(attrs.validators.instance_of(str))
    )
    output_destination: str = attrs.field(
        default=DEFAULT_OUTPUT, validator=attrs.validators.instance_of(str)
    )
    variant_info: bool = attrs.field(default=False, validator=attrs.validators.instance_of(bool))
    sort_output: bool = attrs.field(default=False, validator=attrs.validators.instance_of(bool))
    workers: int = attrs.field(default=DEFAULT_WORKERS, validator=attrs.validators.instance_of(int))

    @workers.validator
    def _check_workers(self, attribute: attrs.Attribute, value: int) -> None:
        if isinstance(value, bool):
            raise TypeError(f"workers must be an integer, got {value!r}")
        if value < 1:
            raise ValueError(f"workers must be at least 1, got {value}")


@attrs.define
class Config:
    """Main configuration container for junctionforge.

    Attributes:
        annotate: Junction annotation configuration.
    """

    annotate: AnnotateConfig = attrs.Factory(AnnotateConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Config":
        """Load configuration from a TOML file.

        Args:
            path: Path to configuration file. If None, returns defaults.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file has unknown keys or bad values.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Build configuration from a nested dictionary.

        Raises:
            ValueError: If a section or key is unknown, or a value has the
                wrong type.
        """
        unknown_sections = set(data) - {"annotate"}
        if unknown_sections:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown_sections)}")

        section = data.get("annotate", {})
        if not isinstance(section, dict):
            raise ValueError("[annotate] must be a table")
        known = {a.name for a in attrs.fields(AnnotateConfig)}
        unknown_keys = set(section) - known
        if unknown_keys:
            raise ValueError(f"Unknown [annotate] keys: {sorted(unknown_keys)}")

        try:
            return cls(annotate=AnnotateConfig(**section))
        except TypeError as e:
            raise ValueError(f"Invalid [annotate] value: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return attrs.asdict(self)
