"""Remediation roadmap built from the ranked critical gaps."""

from __future__ import annotations

from typing import Sequence

from ..models.metrics import CriticalGap, RoadmapItem
from ..models.taxonomy import Criticality

SEVERE_SCORE = 0.25

PRIORITY_ORDER = {"immediate": 0, "short": 1, "medium": 2}

TIMEFRAMES = {
    "immediate": "0-30 days",
    "short": "30-60 days",
    "medium": "60-90 days",
}


def gap_priority(gap: CriticalGap) -> str:
    critical = gap.criticality == Criticality.CRITICAL
    severe = gap.score < SEVERE_SCORE
    if critical and severe:
        return "immediate"
    if critical or severe:
        return "short"
    return "medium"


def generate_roadmap(
    gaps: Sequence[CriticalGap],
    max_items: int = 10,
    per_domain: int = 3,
) -> list[RoadmapItem]:
    """Turn ranked gaps into at most ``max_items`` prioritized actions.

    Gaps keep their ranked order within a domain; at most ``per_domain``
    items are taken from each domain.
    """
    by_domain: dict[str, list[CriticalGap]] = {}
    for gap in gaps:
        by_domain.setdefault(gap.domain_id, []).append(gap)

    items: list[RoadmapItem] = []
    for domain_gaps in by_domain.values():
        for gap in domain_gaps[:max(0, per_domain)]:
            if len(items) >= max_items:
                break
            priority = gap_priority(gap)
            items.append(RoadmapItem(
                priority=priority,
                timeframe=TIMEFRAMES[priority],
                domain_id=gap.domain_id,
                domain_name=gap.domain_name,
                action=f"Implement control: {gap.subcat_name}",
                impact="High risk impact" if gap.criticality == Criticality.CRITICAL else "Medium risk impact",
                effort="high" if gap.score < SEVERE_SCORE else "low",
                ownership_type=gap.ownership_type,
                question_id=gap.question_id,
            ))

    items.sort(key=lambda item: PRIORITY_ORDER[item.priority])
    return items
