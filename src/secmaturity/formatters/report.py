"""Assessment report generation: markdown summary and JSON export."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from ..models.metrics import Assessment, MetricNode, RoadmapItem


def pct(value: Optional[float]) -> str:
    """Format a ratio as a whole percentage; undefined renders as 0%."""
    return f"{round((value or 0.0) * 100)}%"


def _node_row(node: MetricNode) -> str:
    return (
        f"| {node.name} | {pct(node.score)} | {node.maturity_level.name} | "
        f"{node.answered_count}/{node.total_count} | {pct(node.coverage)} | "
        f"{node.critical_gap_count} |"
    )


def _node_table(title: str, nodes: Sequence[MetricNode]) -> list[str]:
    if not nodes:
        return []
    lines = [f"## {title}", ""]
    lines.append("| Name | Score | Maturity | Answered | Coverage | Critical Gaps |")
    lines.append("|------|-------|----------|----------|----------|---------------|")
    lines.extend(_node_row(n) for n in nodes)
    lines.append("")
    return lines


def generate_assessment_report(
    assessment: Assessment,
    project_name: str = "",
    top_gaps: Optional[int] = 10,
    roadmap: Optional[Sequence[RoadmapItem]] = None,
) -> str:
    """Generate the markdown maturity report."""
    overall = assessment.overall
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    lines: list[str] = []
    lines.append("# Security Maturity Report")
    lines.append("")
    if project_name:
        lines.append(f"**Project:** {project_name}")
    lines.append(f"**Date:** {timestamp}")
    lines.append(
        f"**Overall Score:** {pct(overall.score)} "
        f"(Level {overall.maturity_level.level} - {overall.maturity_level.name})"
    )
    lines.append(f"**Coverage:** {pct(overall.coverage)} ({overall.answered_count}/{overall.total_count})")
    lines.append(f"**Evidence Readiness:** {pct(overall.evidence_readiness)}")
    lines.append(f"**Critical Gaps:** {overall.critical_gap_count}")
    if assessment.active_frameworks:
        lines.append(f"**Frameworks:** {', '.join(assessment.active_frameworks)}")
    lines.append("")

    lines.extend(_node_table("Domains", assessment.domains))
    for domain in assessment.domains:
        if not domain.subcategories:
            continue
        lines.extend(_node_table(f"{domain.name} - Subcategories", domain.subcategories))
    lines.extend(_node_table("Standard Functions", assessment.standard_functions))
    lines.extend(_node_table("Ownership", assessment.ownership))
    lines.extend(_node_table("Frameworks", assessment.frameworks))
    lines.extend(_node_table("Framework Categories", assessment.framework_categories))

    gaps = assessment.critical_gaps
    shown = gaps if top_gaps is None else gaps[:top_gaps]
    if shown:
        lines.append("## Critical Gaps")
        lines.append("")
        if len(shown) < len(gaps):
            lines.append(f"Showing {len(shown)} of {len(gaps)}.")
            lines.append("")
        for gap in shown:
            lines.append(f"### {gap.question_id}: {gap.subcat_name} [{gap.criticality.value}]")
            lines.append(f"**Domain:** {gap.domain_name}")
            if gap.ownership_type:
                lines.append(f"**Owner:** {gap.ownership_type}")
            lines.append(f"**Response:** {gap.response.value} ({pct(gap.score)})")
            lines.append(f"\n{gap.question_text}")
            lines.append("")

    if roadmap:
        lines.append("## Roadmap")
        lines.append("")
        lines.append("| Priority | Timeframe | Domain | Action | Effort | Owner |")
        lines.append("|----------|-----------|--------|--------|--------|-------|")
        for item in roadmap:
            lines.append(
                f"| {item.priority} | {item.timeframe} | {item.domain_name} | "
                f"{item.action} | {item.effort} | {item.ownership_type or '-'} |"
            )
        lines.append("")

    if assessment.integrity_issues:
        lines.append("## Data Integrity Warnings")
        lines.append("")
        for issue in assessment.integrity_issues:
            detail = f" ({issue.detail})" if issue.detail else ""
            lines.append(f"- `{issue.kind}`: {issue.ref}{detail}")
        lines.append("")

    lines.append("---")
    lines.append(f"*Generated at {timestamp}*")

    return "\n".join(lines)


def assessment_to_dict(assessment: Assessment, roadmap: Optional[Sequence[RoadmapItem]] = None) -> dict:
    data = assessment.model_dump(mode="json")
    if roadmap is not None:
        data["roadmap"] = [item.model_dump(mode="json") for item in roadmap]
    return data


def export_assessment_json(
    assessment: Assessment,
    output_path: Path,
    roadmap: Optional[Sequence[RoadmapItem]] = None,
) -> Path:
    """Write the assessment to a JSON file (UTF-8, no BOM)."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(assessment_to_dict(assessment, roadmap), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return output_path
