"""Aggregation engine: folds scored questions into metric nodes.

Counts, coverage, evidence readiness and gap counts of any node come from a
flat tally over the questions the node contains. Scores differ by level:

- Subcategory, Ownership, Framework, FrameworkCategory: flat mean of question
  scores.
- Domain: weighted mean of subcategory scores (weight = subcategory weight).
- Overall and StandardFunction: weighted mean of domain scores (weight = mean
  weight of the domain's subcategories).

Nodes without a defined score are left out of their parent's weighted mean
but still count toward its totals. Sums use ``math.fsum`` so results do not
depend on iteration order.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from ..models.answer import Answer
from ..models.metrics import Assessment, DomainNode, MetricNode, SubcategoryNode
from ..models.taxonomy import Catalog, Domain, Subcategory
from .config import EngineSettings
from .gaps import select_critical_gaps
from .maturity import MaturityBand, classify
from .scope import Scope, first_by_id, resolve_scope
from .scoring import ScoredQuestion, score_placed

logger = logging.getLogger(__name__)


@dataclass
class Tally:
    total: int = 0
    answered: int = 0
    scores: list[float] = field(default_factory=list)
    evidence: list[float] = field(default_factory=list)
    gaps: int = 0

    def add(self, scored: ScoredQuestion, is_gap: bool = False) -> None:
        self.total += 1
        if scored.result.answered:
            self.answered += 1
        if scored.result.score is not None:
            self.scores.append(scored.result.score)
        if scored.result.evidence_score is not None:
            self.evidence.append(scored.result.evidence_score)
        if is_gap:
            self.gaps += 1

    @property
    def coverage(self) -> float:
        return self.answered / self.total if self.total > 0 else 0.0

    @property
    def mean_score(self) -> Optional[float]:
        return mean(self.scores)

    @property
    def evidence_readiness(self) -> Optional[float]:
        return mean(self.evidence)


def mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return math.fsum(values) / len(values)


def weighted_mean(pairs: Iterable[tuple[Optional[float], float]]) -> Optional[float]:
    """Weighted mean over (score, weight) pairs, skipping undefined scores."""
    defined = [(s, w) for s, w in pairs if s is not None and w > 0]
    total_weight = math.fsum(w for _, w in defined)
    if total_weight <= 0:
        return None
    return math.fsum(s * w for s, w in defined) / total_weight


def effective_weight(weight: float, default: float = 1.0) -> float:
    """Weights that are not positive finite numbers fall back to the default."""
    if weight is None or not math.isfinite(weight) or weight <= 0:
        return default
    return weight


def tally(scored: Iterable[ScoredQuestion], gap_ids: frozenset[str] = frozenset()) -> Tally:
    result = Tally()
    for s in scored:
        result.add(s, s.question_id in gap_ids)
    return result


def _bounded(score: Optional[float]) -> Optional[float]:
    if score is None or math.isnan(score):
        return None
    return min(1.0, max(0.0, score))


def _node_fields(
    key: str,
    name: str,
    counts: Tally,
    score: Optional[float],
    bands: Sequence[MaturityBand],
) -> dict:
    score = _bounded(score)
    return {
        "key": key,
        "name": name,
        "answered_count": counts.answered,
        "scored_count": len(counts.scores),
        "total_count": counts.total,
        "coverage": counts.coverage,
        "score": score,
        "evidence_readiness": counts.evidence_readiness,
        "maturity_level": classify(score, bands),
        "critical_gap_count": counts.gaps,
    }


def flat_node(
    key: str,
    name: str,
    scored: Iterable[ScoredQuestion],
    gap_ids: frozenset[str],
    bands: Sequence[MaturityBand],
) -> MetricNode:
    counts = tally(scored, gap_ids)
    return MetricNode(**_node_fields(key, name, counts, counts.mean_score, bands))


# ---------------------------------------------------------------------------
# Taxonomy levels
# ---------------------------------------------------------------------------

def subcategory_node(
    subcat: Subcategory,
    scored: Iterable[ScoredQuestion],
    gap_ids: frozenset[str],
    settings: EngineSettings,
) -> SubcategoryNode:
    counts = tally(scored, gap_ids)
    return SubcategoryNode(
        **_node_fields(subcat.subcat_id, subcat.name, counts, counts.mean_score, settings.bands),
        domain_id=subcat.domain_id,
        criticality=subcat.criticality,
        weight=effective_weight(subcat.weight, settings.default_weight),
        ownership_type=subcat.ownership_type,
    )


def domain_weight(subcats: Sequence[Subcategory], default: float = 1.0) -> float:
    """Mean weight of a domain's subcategories."""
    if not subcats:
        return default
    return math.fsum(effective_weight(s.weight, default) for s in subcats) / len(subcats)


def domain_node(
    domain: Domain,
    subcats: Sequence[Subcategory],
    scored: Sequence[ScoredQuestion],
    gap_ids: frozenset[str],
    settings: EngineSettings,
) -> DomainNode:
    by_subcat: dict[str, list[ScoredQuestion]] = {s.subcat_id: [] for s in subcats}
    for s in scored:
        by_subcat.setdefault(s.placed.subcategory.subcat_id, []).append(s)

    children = [
        subcategory_node(subcat, by_subcat[subcat.subcat_id], gap_ids, settings)
        for subcat in subcats
    ]
    score = weighted_mean((child.score, child.weight) for child in children)
    counts = tally(scored, gap_ids)

    return DomainNode(
        **_node_fields(domain.domain_id, domain.name, counts, score, settings.bands),
        standard_tag=domain.standard_tag,
        weight=domain_weight(subcats, settings.default_weight),
        subcategories=children,
    )


def domain_nodes(
    catalog: Catalog,
    scored: Sequence[ScoredQuestion],
    gap_ids: frozenset[str],
    settings: EngineSettings,
) -> list[DomainNode]:
    """One node per catalog domain, ordered by display rank then catalog order."""
    subcats, _ = first_by_id(catalog.subcategories, lambda s: s.subcat_id)
    domains, _ = first_by_id(catalog.domains, lambda d: d.domain_id)

    subcats_by_domain: dict[str, list[Subcategory]] = {}
    for subcat in subcats.values():
        subcats_by_domain.setdefault(subcat.domain_id, []).append(subcat)

    scored_by_domain: dict[str, list[ScoredQuestion]] = {}
    for s in scored:
        scored_by_domain.setdefault(s.placed.domain.domain_id, []).append(s)

    ordered = sorted(enumerate(domains.values()), key=lambda pair: (pair[1].order, pair[0]))
    return [
        domain_node(
            domain,
            subcats_by_domain.get(domain.domain_id, []),
            scored_by_domain.get(domain.domain_id, []),
            gap_ids,
            settings,
        )
        for _, domain in ordered
    ]


def overall_node(
    domains: Sequence[DomainNode],
    scored: Sequence[ScoredQuestion],
    gap_ids: frozenset[str],
    settings: EngineSettings,
) -> MetricNode:
    score = weighted_mean((d.score, d.weight) for d in domains)
    return MetricNode(**_node_fields("overall", "Overall", tally(scored, gap_ids), score, settings.bands))


def standard_function_nodes(
    domains: Sequence[DomainNode],
    scored: Sequence[ScoredQuestion],
    gap_ids: frozenset[str],
    settings: EngineSettings,
) -> list[MetricNode]:
    """Group domains by their external-standard tag and fold like Overall."""
    groups: dict[str, list[DomainNode]] = {}
    for d in domains:
        if d.standard_tag:
            groups.setdefault(d.standard_tag, []).append(d)

    nodes: list[MetricNode] = []
    for tag, members in groups.items():
        member_ids = {d.key for d in members}
        counts = tally((s for s in scored if s.placed.domain.domain_id in member_ids), gap_ids)
        score = weighted_mean((d.score, d.weight) for d in members)
        nodes.append(MetricNode(**_node_fields(tag, tag, counts, score, settings.bands)))
    return nodes


# ---------------------------------------------------------------------------
# Cross-cutting dimensions
# ---------------------------------------------------------------------------

def ownership_nodes(
    scored: Sequence[ScoredQuestion],
    gap_ids: frozenset[str],
    settings: EngineSettings,
) -> list[MetricNode]:
    """Flat regrouping by ownership tag, ignoring domain boundaries."""
    groups: dict[str, list[ScoredQuestion]] = {}
    for s in scored:
        if s.placed.ownership_type:
            groups.setdefault(s.placed.ownership_type, []).append(s)
    return [
        flat_node(owner, owner, members, gap_ids, settings.bands)
        for owner, members in groups.items()
    ]


def framework_nodes(
    scope: Scope,
    scored: Sequence[ScoredQuestion],
    gap_ids: frozenset[str],
    settings: EngineSettings,
) -> list[MetricNode]:
    """One node per active framework; a question counts toward each of its frameworks."""
    return [
        flat_node(
            fid,
            fw.name,
            [s for s in scored if fid in s.placed.frameworks],
            gap_ids,
            settings.bands,
        )
        for fid, fw in scope.active.items()
    ]


def framework_category_nodes(
    catalog: Catalog,
    scope: Scope,
    scored: Sequence[ScoredQuestion],
    gap_ids: frozenset[str],
    settings: EngineSettings,
) -> list[MetricNode]:
    """One node per category of active frameworks; each question counted once."""
    categories: dict[str, set[str]] = {}
    for fid, fw in scope.active.items():
        if fw.category:
            categories.setdefault(fw.category, set()).add(fid)

    return [
        flat_node(
            category,
            catalog.category_name(category),
            [s for s in scored if members.intersection(s.placed.frameworks)],
            gap_ids,
            settings.bands,
        )
        for category, members in categories.items()
    ]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def compute_assessment(
    catalog: Catalog,
    answers: Mapping[str, Answer],
    selected_frameworks: Optional[Iterable[str]] = None,
    disabled_questions: Optional[Iterable[str]] = None,
    settings: Optional[EngineSettings] = None,
) -> Assessment:
    """Compute every rollup for one (catalog, answers, filter) snapshot.

    Pure: inputs are not mutated and nothing is cached between calls.
    """
    settings = settings or EngineSettings()
    scope = resolve_scope(catalog, selected_frameworks, disabled_questions, answers)
    scored = score_placed(scope.questions, answers)

    gaps = select_critical_gaps(scored, settings.gap_threshold)
    gap_ids = frozenset(g.question_id for g in gaps)

    domains = domain_nodes(catalog, scored, gap_ids, settings)
    overall = overall_node(domains, scored, gap_ids, settings)

    logger.debug(
        "Assessment over %d in-scope questions: %d answered, %d gaps, %d integrity issues",
        overall.total_count,
        overall.answered_count,
        len(gaps),
        len(scope.issues),
    )

    return Assessment(
        overall=overall,
        domains=domains,
        ownership=ownership_nodes(scored, gap_ids, settings),
        frameworks=framework_nodes(scope, scored, gap_ids, settings),
        framework_categories=framework_category_nodes(catalog, scope, scored, gap_ids, settings),
        standard_functions=standard_function_nodes(domains, scored, gap_ids, settings),
        critical_gaps=gaps,
        integrity_issues=scope.issues,
        active_frameworks=list(scope.active),
    )
