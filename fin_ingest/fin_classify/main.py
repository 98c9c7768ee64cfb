"""fin-spend-mix CLI entrypoint."""

from __future__ import annotations

from pathlib import Path

import click

from fin_ingest.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context

from .evaluate import evaluate_labeled_rows, format_report, load_labeled_rows, write_mismatches

DEFAULT_MISMATCHES_PATH = Path("reports/spend-mix-mismatches.csv")


@click.group(help="Essential vs. flex spend classification tools.")
@common_cli_options
def main(cli_ctx: CLIContext) -> None:
    cli_ctx.logger.debug(f"Configuration source: {cli_ctx.config.source_path}")


@main.command("evaluate")
@click.option(
    "--file",
    "labeled_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Labeled CSV with an expected_class column.",
)
@click.option(
    "--errors",
    "errors_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_MISMATCHES_PATH,
    show_default=True,
    help="Where to write misclassified rows.",
)
@click.option("--delimiter", default=None, help="Field delimiter if the file is not comma-separated.")
@handle_cli_errors
@pass_cli_context
def evaluate_command(
    cli_ctx: CLIContext,
    labeled_file: Path,
    errors_path: Path,
    delimiter: str | None,
) -> None:
    """Report classifier accuracy against a labeled transaction file."""

    rows = load_labeled_rows(labeled_file, delimiter=delimiter)
    cli_ctx.logger.debug(f"Loaded {len(rows)} labeled rows from {labeled_file}")
    result = evaluate_labeled_rows(rows)

    for line in format_report(result):
        click.echo(line)

    written = write_mismatches(result.mismatches, errors_path)
    if written is None:
        cli_ctx.logger.success("No misclassifications detected in the provided dataset.")
        return
    cli_ctx.logger.info(f"Misclassifications written to {written}")
    cli_ctx.logger.info(f"Total mismatches: {len(result.mismatches)}")


if __name__ == "__main__":  # pragma: no cover
    main()
