"""CLI for the chart-form observation engine."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from chart_form import __version__
from chart_form.config import get_log_level, get_template_registry_path
from chart_form.diagnostics import ProcessingStatus
from chart_form.errors import ChartFormError, ConfigurationError, ValidationError
from chart_form.io import read_submissions, write_jsonl
from chart_form.pipeline import ObservationPipeline, PipelineConfig
from chart_form.registry import load_template

app = typer.Typer(
    name="chart-form",
    help="Validation and observation generation for clinical forms.",
    no_args_is_help=True,
)
console = Console()

DEFAULT_SCHEMA_PATH = Path("schemas") / "form_template.schema.json"


def version_callback(value: bool) -> None:
    if value:
        console.print(f"chart-form version {__version__}")
        raise typer.Exit()


def configure_logging() -> None:
    logging.basicConfig(
        level=get_log_level().upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """chart-form: Validation and observation generation for clinical forms."""
    configure_logging()


@app.command()
def run(
    input_path: Annotated[
        Path,
        typer.Option("--in", "-i", help="Input JSONL file of submissions"),
    ],
    output_path: Annotated[
        Path,
        typer.Option("--out", "-o", help="Output JSONL file of observations"),
    ],
    template: Annotated[
        str,
        typer.Option("--template", "-t", help="Template ID"),
    ],
    template_version: Annotated[
        str | None,
        typer.Option("--template-version", help="Template version (default: latest)"),
    ] = None,
    template_registry: Annotated[
        Path | None,
        typer.Option(
            "--template-registry",
            envvar="CHART_FORM_TEMPLATE_REGISTRY",
            help="Path to template registry",
        ),
    ] = None,
    summary: Annotated[
        Path | None,
        typer.Option("--summary", "-s", help="Per-submission summary JSONL path"),
    ] = None,
    deterministic_ids: Annotated[
        bool,
        typer.Option("--deterministic-ids", help="Derive observation IDs from the input"),
    ] = False,
) -> None:
    """Validate submissions and write the observations they generate.

    Each input line holds encounter_id, patient_id, observer_id,
    observed_at and data. Rejected submissions are reported and skipped.
    """
    if template_registry is None:
        template_registry = get_template_registry_path()

    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(1)

    if not template_registry.exists():
        console.print(f"[red]Error:[/red] Template registry not found: {template_registry}")
        raise typer.Exit(1)

    try:
        pipeline = ObservationPipeline(
            PipelineConfig(
                template_registry_path=template_registry,
                template_schema_path=DEFAULT_SCHEMA_PATH if DEFAULT_SCHEMA_PATH.exists() else None,
                deterministic_ids=deterministic_ids,
            )
        )
        form_template = pipeline.get_template(template, template_version)
    except ChartFormError as e:
        console.print(f"[red]Error loading template:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[bold]chart-form[/bold] v{__version__}")
    console.print(f"  Input: {input_path}")
    console.print(f"  Output: {output_path}")
    console.print(f"  Template: {form_template.template_id}@{form_template.version}")

    observations = []
    summaries = []
    accepted = 0
    rejected = 0

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Processing submissions...", total=None)

        try:
            for line_num, submission in read_submissions(input_path):
                try:
                    validation = pipeline.validate_submission(form_template, submission.data)
                except ValidationError as e:
                    rejected += 1
                    console.print(f"[yellow]Rejected line {line_num}:[/yellow] {e}")
                    summaries.append(
                        {
                            "line": line_num,
                            "encounter_id": submission.encounter_id,
                            "status": ProcessingStatus.FAILED.value,
                            "errors": e.to_dict(),
                        }
                    )
                    continue

                result = pipeline.generate_observations(
                    form_template,
                    validation.validated_data,
                    encounter_id=submission.encounter_id,
                    patient_id=submission.patient_id,
                    observer_id=submission.observer_id,
                    observed_at=submission.observed_at,
                    field_count=validation.field_count,
                )
                accepted += 1
                observations.extend(result.observations)
                summaries.append(
                    {
                        "line": line_num,
                        "encounter_id": submission.encounter_id,
                        "status": result.diagnostics.status.value,
                        "summary": result.summary.model_dump(),
                        "warnings": [w.model_dump() for w in result.diagnostics.warnings],
                    }
                )
                progress.update(task, description=f"Processed {line_num} submissions...")
        except ValueError as e:
            console.print(f"[red]Error reading input:[/red] {e}")
            raise typer.Exit(1)

    written = write_jsonl(output_path, observations)
    if summary:
        write_jsonl(summary, summaries)

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  [green]Accepted:[/green] {accepted}")
    if rejected:
        console.print(f"  [red]Rejected:[/red] {rejected}")
    console.print(f"  Observations written: {written}")


@app.command()
def validate(
    template_path: Annotated[
        Path,
        typer.Argument(help="Path to the template file"),
    ],
    schema_path: Annotated[
        Path | None,
        typer.Option("--schema", "-s", help="Path to the schema file"),
    ] = None,
) -> None:
    """Check a template file against the schema and its own cross-references."""
    if not template_path.exists():
        console.print(f"[red]Error:[/red] Template file not found: {template_path}")
        raise typer.Exit(1)

    if schema_path is None:
        schema_path = DEFAULT_SCHEMA_PATH

    if not schema_path.exists():
        console.print(f"[red]Error:[/red] Schema file not found: {schema_path}")
        raise typer.Exit(1)

    with open(template_path) as f:
        data = json.load(f)

    with open(schema_path) as f:
        schema = json.load(f)

    try:
        load_template(data, schema, source=str(template_path))
        console.print(f"[green]Valid:[/green] {template_path}")
    except ConfigurationError as e:
        console.print(f"[red]Invalid:[/red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
