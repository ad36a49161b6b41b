"""Tests for core/roadmap.py."""

from __future__ import annotations

from secmaturity.core.roadmap import TIMEFRAMES, gap_priority, generate_roadmap
from secmaturity.models.answer import Response
from secmaturity.models.metrics import CriticalGap
from secmaturity.models.taxonomy import Criticality


def _gap(qid: str, domain: str = "D", criticality: Criticality = Criticality.CRITICAL,
         score: float = 0.0) -> CriticalGap:
    return CriticalGap(
        question_id=qid,
        question_text=f"{qid}?",
        subcat_id=f"S-{qid}",
        subcat_name=f"Control {qid}",
        domain_id=domain,
        domain_name=f"Domain {domain}",
        criticality=criticality,
        ownership_type="GRC",
        score=score,
        response=Response.NEGATIVE if score == 0.0 else Response.PARTIAL,
    )


class TestGapPriority:
    def test_critical_and_severe_is_immediate(self):
        assert gap_priority(_gap("A", score=0.0)) == "immediate"

    def test_critical_only_is_short(self):
        assert gap_priority(_gap("A", score=0.5)) == "short"

    def test_severe_only_is_short(self):
        assert gap_priority(_gap("A", criticality=Criticality.HIGH, score=0.0)) == "short"

    def test_neither_is_medium(self):
        assert gap_priority(_gap("A", criticality=Criticality.HIGH, score=0.5)) == "medium"


class TestGenerateRoadmap:
    def test_empty(self):
        assert generate_roadmap([]) == []

    def test_item_fields(self):
        (item,) = generate_roadmap([_gap("Q2")])
        assert item.priority == "immediate"
        assert item.timeframe == TIMEFRAMES["immediate"]
        assert item.action == "Implement control: Control Q2"
        assert item.impact == "High risk impact"
        assert item.effort == "high"
        assert item.ownership_type == "GRC"
        assert item.domain_name == "Domain D"

    def test_per_domain_cap(self):
        gaps = [_gap(f"A{i}", domain="A") for i in range(5)] + [_gap("B0", domain="B")]
        items = generate_roadmap(gaps, per_domain=3)
        assert [i.question_id for i in items] == ["A0", "A1", "A2", "B0"]

    def test_max_items(self):
        gaps = [_gap(f"{d}{i}", domain=d) for d in "ABCDE" for i in range(3)]
        assert len(generate_roadmap(gaps, max_items=10)) == 10

    def test_sorted_by_priority_stable(self):
        gaps = [
            _gap("M", criticality=Criticality.HIGH, score=0.5),
            _gap("S", criticality=Criticality.HIGH, score=0.0),
            _gap("I", score=0.0),
        ]
        items = generate_roadmap(gaps)
        assert [i.question_id for i in items] == ["I", "S", "M"]
        assert items[2].effort == "low"
        assert items[2].impact == "Medium risk impact"
