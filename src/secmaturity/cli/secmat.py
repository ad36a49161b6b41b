"""secmat - security maturity scoring from the command line."""

from __future__ import annotations

import sys
from pathlib import Path

import click

INPUT_OPTIONS = [
    click.option("--project", "-p", type=click.Path(exists=True, file_okay=False), default=".", help="Project path"),
    click.option("--catalog", "-c", type=str, help="Taxonomy catalog file (YAML/JSON)"),
    click.option("--answers", "-a", type=str, help="Answer store file (YAML/JSON)"),
    click.option("--framework", "frameworks", multiple=True, help="Restrict to framework id (repeatable)"),
    click.option("--threshold", type=float, help="Critical gap score threshold"),
    click.option("--ci", is_flag=True, help="CI mode: exit 2 when critical gaps exist"),
]


def input_options(func):
    for option in reversed(INPUT_OPTIONS):
        func = option(func)
    return func


@click.group()
def secmat_cli() -> None:
    """Security maturity self-assessment scoring."""


@secmat_cli.command()
@click.option("--project", "-p", type=click.Path(exists=True, file_okay=False), required=True)
def init(project: str) -> None:
    """Initialize .secmaturity/ in a project directory."""
    from ..core.runner import initialize_project

    initialize_project(Path(project))


@secmat_cli.command()
@input_options
@click.option("--output-format", "-f", type=click.Choice(["table", "markdown", "json"]))
@click.option("--output", "-o", type=str, help="Write report to this file")
@click.option("--top", type=int, help="Number of critical gaps to show")
@click.option("--roadmap", "with_roadmap", is_flag=True, help="Include remediation roadmap")
def score(
    project: str,
    catalog: str | None,
    answers: str | None,
    frameworks: tuple[str, ...],
    threshold: float | None,
    ci: bool,
    output_format: str | None,
    output: str | None,
    top: int | None,
    with_roadmap: bool,
) -> None:
    """Compute maturity scores, coverage and critical gaps."""
    from ..core.runner import run_assessment

    exit_code = run_assessment(
        project_path=Path(project),
        catalog_path=catalog,
        answers_path=answers,
        frameworks=list(frameworks),
        output_format=output_format,
        output_path=output,
        top_gaps=top,
        threshold=threshold,
        with_roadmap=with_roadmap,
        ci=ci,
    )
    sys.exit(exit_code)


@secmat_cli.command()
@input_options
@click.option("--top", type=int, default=20, help="Number of critical gaps to show")
def gaps(
    project: str,
    catalog: str | None,
    answers: str | None,
    frameworks: tuple[str, ...],
    threshold: float | None,
    ci: bool,
    top: int,
) -> None:
    """Show the ranked critical gaps and the remediation roadmap."""
    from ..core.runner import run_assessment

    exit_code = run_assessment(
        project_path=Path(project),
        catalog_path=catalog,
        answers_path=answers,
        frameworks=list(frameworks),
        output_format="table",
        top_gaps=top,
        threshold=threshold,
        with_roadmap=True,
        ci=ci,
    )
    sys.exit(exit_code)


def main() -> None:
    secmat_cli()


if __name__ == "__main__":
    main()
