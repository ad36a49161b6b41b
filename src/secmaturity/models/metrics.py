"""Engine output data models.

Every rollup level shares the ``MetricNode`` fields so renderers can treat
overall, domain, subcategory, ownership, framework, framework-category and
standard-function nodes alike.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .answer import EvidenceStatus, Response
from .taxonomy import Criticality


class MaturityLevel(BaseModel):
    level: int
    name: str
    color: str


class MetricNode(BaseModel):
    key: str
    name: str
    answered_count: int = 0
    scored_count: int = 0
    total_count: int = 0
    coverage: float = 0.0
    score: Optional[float] = None
    evidence_readiness: Optional[float] = None
    maturity_level: MaturityLevel
    critical_gap_count: int = 0

    @property
    def display_score(self) -> float:
        return self.score if self.score is not None else 0.0


class SubcategoryNode(MetricNode):
    domain_id: str
    criticality: Criticality
    weight: float
    ownership_type: Optional[str] = None


class DomainNode(MetricNode):
    standard_tag: Optional[str] = None
    weight: float = 1.0
    subcategories: list[SubcategoryNode] = []


class CriticalGap(BaseModel):
    question_id: str
    question_text: str
    subcat_id: str
    subcat_name: str
    domain_id: str
    domain_name: str
    criticality: Criticality
    ownership_type: Optional[str] = None
    standard_tag: Optional[str] = None
    score: float
    response: Response
    evidence: Optional[EvidenceStatus] = None


class IntegrityIssue(BaseModel):
    """A catalog or answer reference that did not resolve."""

    kind: str
    ref: str
    detail: str = ""


class RoadmapItem(BaseModel):
    priority: str
    timeframe: str
    domain_id: str
    domain_name: str
    action: str
    impact: str
    effort: str
    ownership_type: Optional[str] = None
    question_id: str


class Assessment(BaseModel):
    """Complete engine output for one (catalog, answers, filter) snapshot."""

    overall: MetricNode
    domains: list[DomainNode] = []
    ownership: list[MetricNode] = []
    frameworks: list[MetricNode] = []
    framework_categories: list[MetricNode] = []
    standard_functions: list[MetricNode] = []
    critical_gaps: list[CriticalGap] = []
    integrity_issues: list[IntegrityIssue] = []
    active_frameworks: list[str] = []
