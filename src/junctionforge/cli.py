"""Command-line interface for junctionforge.

This module provides the main entry point for the junctionforge CLI tool.
It uses Click to define commands.

Commands:
    annotate: Annotate junctions with a gene model (and reference bases)

Example:
    $ junctionforge --help
    $ junctionforge annotate junctions.bed genes.gtf -r genome.fa -o annotated.tsv
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from junctionforge import __version__
from junctionforge.utils.logging import setup_logging

# Rich console on stderr; annotated rows may go to stdout
console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__, prog_name="junctionforge")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """junctionforge: Annotate splice junctions with a reference gene model.

    Each junction is classified by whether its donor and acceptor sites
    match annotated exon boundaries, which genes and transcripts it
    overlaps, and which exons and splice sites it skips.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# =============================================================================
# annotate command
# =============================================================================


@main.command()
@click.argument("junctions", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("gene_model", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-r",
    "--reference",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Reference FASTA; adds splice-site bases (e.g. GT-AG).",
)
@click.option(
    "-o",
    "--output",
    type=str,
    default=None,
    help="Output TSV file. [default: stdout]",
)
@click.option(
    "-S",
    "--keep-single-exon-genes",
    is_flag=True,
    help="Compare junctions with single-exon transcripts too.",
)
@click.option(
    "-E",
    "--variant-info",
    is_flag=True,
    help="Carry the last extra BED column into a variant_info column.",
)
@click.option(
    "--sort",
    "sort_output",
    is_flag=True,
    help="Sort output by chrom, start, end.",
)
@click.option(
    "-j",
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of annotation threads. [default: 1]",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML configuration file ([annotate] table).",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a debug log to this file.",
)
@click.option(
    "-v",
    "--verbose",
    "verbose_flag",
    is_flag=True,
    help="Enable verbose output.",
)
@click.pass_context
def annotate(
    ctx: click.Context,
    junctions: Path,
    gene_model: Path,
    reference: Optional[Path],
    output: Optional[str],
    keep_single_exon_genes: bool,
    variant_info: bool,
    sort_output: bool,
    workers: Optional[int],
    config_path: Optional[Path],
    log_file: Optional[Path],
    verbose_flag: bool,
) -> None:
    """Annotate JUNCTIONS (BED6/BED12) using GENE_MODEL (GTF/GFF3).

    \b
    Output columns:
    chrom, start, end, name, score, strand, splice_site,
    acceptors_skipped, exons_skipped, donors_skipped, anchor,
    known_donor, known_acceptor, known_junction, genes, transcripts
    [, variant_info]

    \b
    Anchor codes:
    DA  - donor and acceptor both annotated
    D   - donor annotated only
    A   - acceptor annotated only
    NDA - overlaps a gene but neither site annotated
    N   - no overlapping gene

    \b
    Examples:
        $ junctionforge annotate junctions.bed genes.gtf -o annotated.tsv
        $ junctionforge annotate junctions.bed genes.gff3 -r genome.fa --sort -j 4
    """
    from junctionforge.config import Config
    from junctionforge.core.annotate import JunctionAnnotator
    from junctionforge.core.report import JunctionReportWriter, JunctionSummary
    from junctionforge.io.bed import JunctionFormatError, iter_junctions
    from junctionforge.io.fasta import GenomeAccessor
    from junctionforge.io.gff import GeneModelError, GeneModelIndex
    from junctionforge.utils.logging import ProgressLogger, Timer, get_logger

    verbose = ctx.obj.get("verbose", False) or verbose_flag
    quiet = ctx.obj.get("quiet", False)

    setup_logging(verbosity=0 if quiet else (2 if verbose else 1), log_file=log_file)
    logger = get_logger("junctionforge.cli")

    try:
        config = Config.load(config_path).annotate
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    # Command-line flags override the configuration file
    if keep_single_exon_genes:
        config.skip_single_exon_genes = False
    if variant_info:
        config.variant_info = True
    if sort_output:
        config.sort_output = True
    if workers is not None:
        config.workers = workers
    if output is not None:
        config.output_destination = output
    if reference is not None:
        config.reference_path = str(reference)

    if not quiet:
        console.print(f"[blue]Junctions:[/blue] {junctions}")
        console.print(f"[blue]Gene model:[/blue] {gene_model}")
        if config.reference_path:
            console.print(f"[blue]Reference:[/blue] {config.reference_path}")
        console.print(f"[blue]Output:[/blue] {config.output_destination}")

    genome: GenomeAccessor | None = None
    summary = JunctionSummary()

    try:
        with Timer("Annotation", logger):
            # Everything that can fail at startup happens before any row is written
            index = GeneModelIndex.load(gene_model)
            if config.reference_path:
                genome = GenomeAccessor(config.reference_path)
            source = iter_junctions(junctions)

            annotator = JunctionAnnotator(
                index,
                genome=genome,
                skip_single_exon_genes=config.skip_single_exon_genes,
                carry_variant_info=config.variant_info,
            )

            progress = ProgressLogger(logger)
            records = (
                summary.update(record)
                for record in annotator.annotate_all(source, workers=config.workers)
            )
            if config.sort_output:
                records = iter(sorted(records))

            with JunctionReportWriter(
                config.output_destination,
                variant_info=config.variant_info,
            ) as writer:
                for record in records:
                    writer.write(record)
                    progress.update()
            progress.finish()

    except (FileNotFoundError, GeneModelError, JunctionFormatError, OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback

            traceback.print_exc()
        raise SystemExit(1)
    finally:
        if genome is not None:
            genome.close()

    if not quiet:
        _print_summary(summary)


def _print_summary(summary) -> None:
    """Print the run summary as a rich table."""
    from junctionforge.core.junction import ANCHOR_CODES

    table = Table(title="Annotation Summary")
    table.add_column("Category", style="cyan")
    table.add_column("Junctions", justify="right")

    table.add_row("Total", f"{summary.total:,}")
    for code in ANCHOR_CODES:
        table.add_row(f"Anchor {code}", f"{summary.anchors.get(code, 0):,}")
    table.add_row("Known donor", f"{summary.known_donors:,}")
    table.add_row("Known acceptor", f"{summary.known_acceptors:,}")
    table.add_row("Known junction", f"{summary.known_junctions:,}")
    table.add_row("Skipping exons", f"{summary.with_skipped_exons:,}")

    console.print("")
    console.print(table)


if __name__ == "__main__":
    main()
