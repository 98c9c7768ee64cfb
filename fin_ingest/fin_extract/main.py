"""fin-ingest CLI entrypoint."""

from __future__ import annotations

import csv
import json
from io import StringIO
from pathlib import Path
from typing import Any

import click

from fin_ingest.fin_classify.spend_mix import classify_transaction
from fin_ingest.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context

from .parsers.pdf_loader import extract_lines
from .pipeline import ingest_path
from .types import ParsedTransaction, ParseResult

CSV_FIELDS = ("date", "name", "merchant_name", "amount", "category")


class ExtractDefaultGroup(click.Group):
    """Click group that falls back to a default command when none is provided."""

    def __init__(self, *args, default_command: str | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._default_command = default_command

    def resolve_command(self, ctx: click.Context, args: list[str]):
        if self._default_command is None or not args:
            return super().resolve_command(ctx, args)

        cmd = super().get_command(ctx, args[0])
        if cmd is not None:
            return super().resolve_command(ctx, args)

        return super().resolve_command(ctx, [self._default_command] + args)


@click.group(
    help="Convert bank and card statements (CSV or PDF) into normalized transactions.",
    cls=ExtractDefaultGroup,
    default_command="extract",
)
@common_cli_options
def main(cli_ctx: CLIContext) -> None:
    cli_ctx.logger.debug(f"Configuration source: {cli_ctx.config.source_path}")


@main.command("extract")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "declared_format",
    type=click.Choice(["csv", "pdf"], case_sensitive=False),
    help="Statement format (default: sniffed from the file).",
)
@click.option("--output", "output_path", type=click.Path(dir_okay=False, path_type=Path), help="Write output to file.")
@click.option("--stdout", is_flag=True, help="Write output to stdout.")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of CSV.")
@click.option(
    "--with-classification",
    is_flag=True,
    help="Add an essential/flex spend_class column (not part of the stored record).",
)
@handle_cli_errors
@pass_cli_context
def extract_command(
    cli_ctx: CLIContext,
    statement_file: Path,
    declared_format: str | None,
    output_path: Path | None,
    stdout: bool,
    as_json: bool,
    with_classification: bool,
) -> None:
    """Extract transactions from STATEMENT_FILE."""

    if output_path and stdout:
        raise click.UsageError("Cannot use both --output and --stdout simultaneously.")

    result = ingest_path(
        statement_file,
        declared_format=declared_format.lower() if declared_format else None,
        settings=cli_ctx.config.extraction,
    )
    for message in result.errors:
        cli_ctx.logger.warning(message)
    if not result.transactions:
        raise click.ClickException("No transactions were extracted from the statement.")

    cli_ctx.logger.info(
        f"File: {statement_file.name} | Transactions: {len(result.transactions)} | "
        f"Warnings: {len(result.errors)}"
    )

    output_format = "json" if as_json else cli_ctx.config.output.format
    payload = _render(result, output_format, with_classification=with_classification)

    if stdout:
        click.echo(payload, nl=False)
        cli_ctx.logger.success("Extraction complete. Output sent to stdout.")
        return

    if output_path is None:
        output_path = cli_ctx.config.output.directory / f"{statement_file.stem}.{output_format}"
        cli_ctx.logger.info(f"No --output provided; defaulting to {output_path}.")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload, encoding="utf-8")
    cli_ctx.logger.success(f"Extraction complete. Output written to {output_path}.")


@main.command("lines")
@click.argument("pdf_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@handle_cli_errors
@pass_cli_context
def lines_command(cli_ctx: CLIContext, pdf_file: Path) -> None:
    """Print the reconstructed text lines of PDF_FILE (layout debugging aid)."""

    lines = extract_lines(pdf_file.read_bytes(), settings=cli_ctx.config.extraction.pdf)
    if not lines:
        cli_ctx.logger.warning("No text layer found; scanned PDFs are not supported.")
        return
    for index, line in enumerate(lines):
        click.echo(f"{index:>4} p{line.page_number} y={line.top:7.2f}  {line.text}")
    cli_ctx.logger.info(f"{len(lines)} lines reconstructed.")


def _render(result: ParseResult, output_format: str, *, with_classification: bool) -> str:
    rows = [_row(txn, with_classification) for txn in result.transactions]
    if output_format == "json":
        return json.dumps({"transactions": rows, "errors": result.errors}, indent=2) + "\n"

    fieldnames = list(CSV_FIELDS) + (["spend_class"] if with_classification else [])
    buffer = StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for row in rows:
        writer.writerow({key: "" if row[key] is None else row[key] for key in fieldnames})
    return buffer.getvalue()


def _row(txn: ParsedTransaction, with_classification: bool) -> dict[str, Any]:
    row = txn.to_dict()
    if with_classification:
        row["spend_class"] = classify_transaction(txn)
    return row


if __name__ == "__main__":  # pragma: no cover
    main()
