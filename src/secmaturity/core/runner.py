"""Assessment runner: loads inputs, invokes the engine, renders output.

Host-side glue for the CLI. The engine modules stay free of I/O; everything
that touches files or the console lives here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .. import __version__
from ..catalog.loader import CatalogError, load_answers, load_catalog
from ..formatters.report import export_assessment_json, generate_assessment_report, pct
from ..models.metrics import Assessment, RoadmapItem
from .aggregation import compute_assessment
from .config import (
    CONFIG_DIR,
    config_ids,
    config_int,
    config_section,
    get_effective_config,
    settings_from_config,
)
from .roadmap import generate_roadmap

console = Console()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_GAPS = 2


def initialize_project(project_path: Path) -> None:
    """Initialize the .secmaturity directory with a starter config."""
    cfg_dir = project_path / CONFIG_DIR
    (cfg_dir / "reports").mkdir(parents=True, exist_ok=True)

    config_path = cfg_dir / "config.yaml"
    if not config_path.exists():
        config_path.write_text(
            "# Security maturity assessment configuration\n"
            "\n"
            f"secmaturity_version: \"{__version__}\"\n"
            "\n"
            "project:\n"
            f'  name: "{project_path.name}"\n'
            '  catalog: "catalog.yaml"\n'
            '  answers: "answers.yaml"\n'
            "\n"
            "scoring:\n"
            "  gap_threshold: 0.5\n"
            "\n"
            "frameworks:\n"
            "  selected: []\n",
            encoding="utf-8",
        )

    console.print(f"  [green]Initialized[/green] {CONFIG_DIR}/ in {project_path.name}")


def _resolve_input(project_path: Path, explicit: Optional[str], configured: str, label: str) -> Path:
    value = explicit or configured
    if not value:
        raise CatalogError(f"No {label} file given (use --{label} or project.{label} in config)")
    path = Path(value)
    return path if path.is_absolute() else project_path / path


def _print_warnings(assessment: Assessment) -> None:
    for issue in assessment.integrity_issues:
        detail = f" ({issue.detail})" if issue.detail else ""
        console.print(f"  [yellow]WARN[/yellow] {issue.kind}: {issue.ref}{detail}")


def _print_summary(assessment: Assessment, top_gaps: int, roadmap: list[RoadmapItem]) -> None:
    overall = assessment.overall
    console.print()
    console.print("  [bold cyan]SECURITY MATURITY[/bold cyan]")
    console.print(
        f"  Score:     [white]{pct(overall.score)}[/white] "
        f"(Level {overall.maturity_level.level} - {overall.maturity_level.name})"
    )
    console.print(f"  Coverage:  [white]{pct(overall.coverage)}[/white] ({overall.answered_count}/{overall.total_count})")
    console.print(f"  Evidence:  [white]{pct(overall.evidence_readiness)}[/white]")
    console.print(f"  Gaps:      [white]{overall.critical_gap_count}[/white]")
    console.print()

    table = Table(title="Domains")
    for column in ("Domain", "Score", "Maturity", "Coverage", "Gaps"):
        table.add_column(column)
    for d in assessment.domains:
        table.add_row(d.name, pct(d.score), d.maturity_level.name, pct(d.coverage), str(d.critical_gap_count))
    console.print(table)

    if assessment.critical_gaps and top_gaps > 0:
        gap_table = Table(title="Critical Gaps")
        for column in ("Question", "Subcategory", "Criticality", "Owner", "Score"):
            gap_table.add_column(column)
        for gap in assessment.critical_gaps[:top_gaps]:
            gap_table.add_row(
                gap.question_id,
                gap.subcat_name,
                gap.criticality.value,
                gap.ownership_type or "-",
                pct(gap.score),
            )
        console.print(gap_table)

    if roadmap:
        road_table = Table(title="Roadmap")
        for column in ("Priority", "Timeframe", "Domain", "Action", "Effort"):
            road_table.add_column(column)
        for item in roadmap:
            road_table.add_row(item.priority, item.timeframe, item.domain_name, item.action, item.effort)
        console.print(road_table)


def run_assessment(
    project_path: Path,
    catalog_path: Optional[str] = None,
    answers_path: Optional[str] = None,
    frameworks: Optional[list[str]] = None,
    output_format: Optional[str] = None,
    output_path: Optional[str] = None,
    top_gaps: Optional[int] = None,
    threshold: Optional[float] = None,
    with_roadmap: bool = False,
    ci: bool = False,
) -> int:
    """Run one assessment and render it. Returns a process exit code."""
    overrides: dict = {}
    if frameworks:
        overrides["frameworks"] = {"selected": list(frameworks)}
    if threshold is not None:
        overrides["scoring"] = {"gap_threshold": threshold}
    if output_format:
        overrides["output"] = {"format": output_format}
    if top_gaps is not None:
        overrides.setdefault("output", {})["top_gaps"] = top_gaps

    try:
        config = get_effective_config(project_path, cli_overrides=overrides)
        project_cfg = config_section(config, "project")
        settings = settings_from_config(config)
        selected = config_ids(config, "frameworks", "selected")
        disabled = config_ids(config, "questions", "disabled")
        max_items = config_int(config, "roadmap", "max_items", 10)
        per_domain = config_int(config, "roadmap", "per_domain", 3)
        fmt = config_section(config, "output").get("format") or "table"
        shown_gaps = config_int(config, "output", "top_gaps", 10)
        catalog = load_catalog(_resolve_input(project_path, catalog_path, project_cfg.get("catalog", ""), "catalog"))
        answers = load_answers(_resolve_input(project_path, answers_path, project_cfg.get("answers", ""), "answers"))
    except (CatalogError, ValueError) as e:
        console.print(f"  [red]ERROR[/red] {e}")
        return EXIT_ERROR

    assessment = compute_assessment(
        catalog,
        answers,
        selected_frameworks=selected or None,
        disabled_questions=disabled or None,
        settings=settings,
    )

    roadmap: list[RoadmapItem] = []
    if with_roadmap:
        roadmap = generate_roadmap(assessment.critical_gaps, max_items=max_items, per_domain=per_domain)

    _print_warnings(assessment)

    if fmt == "json":
        target = Path(output_path) if output_path else project_path / CONFIG_DIR / "reports" / "assessment.json"
        export_assessment_json(assessment, target, roadmap if with_roadmap else None)
        console.print(f"  [green]OK[/green] Wrote {target}")
    elif fmt == "markdown":
        report = generate_assessment_report(
            assessment,
            project_name=project_cfg.get("name", "") or project_path.name,
            top_gaps=shown_gaps,
            roadmap=roadmap,
        )
        if output_path:
            target = Path(output_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(report, encoding="utf-8")
            console.print(f"  [green]OK[/green] Wrote {target}")
        else:
            console.print(report, markup=False, highlight=False)
    else:
        _print_summary(assessment, shown_gaps, roadmap)

    if ci and assessment.critical_gaps:
        return EXIT_GAPS
    return EXIT_OK
