"""Critical gap ranking.

A critical gap is an in-scope question with a defined score below the
threshold whose subcategory is High or Critical. Unanswered and
NotApplicable questions are coverage gaps, not maturity gaps, and never
appear here. The ranker always returns the complete ordered list;
truncation is left to the caller.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ..models.answer import Answer
from ..models.metrics import CriticalGap
from ..models.taxonomy import Catalog, Criticality
from .config import DEFAULT_GAP_THRESHOLD
from .scope import resolve_scope
from .scoring import ScoredQuestion, score_placed

GAP_CRITICALITIES = frozenset({Criticality.HIGH, Criticality.CRITICAL})


def is_critical_gap(scored: ScoredQuestion, threshold: float = DEFAULT_GAP_THRESHOLD) -> bool:
    score = scored.result.score
    if score is None or scored.answer is None or scored.answer.response is None:
        return False
    if scored.placed.subcategory.criticality not in GAP_CRITICALITIES:
        return False
    return score < threshold


def _sort_key(scored: ScoredQuestion) -> tuple[int, float, int]:
    # Critical before High, worst score first, then catalog order.
    return (
        -scored.placed.subcategory.criticality.rank,
        scored.result.score if scored.result.score is not None else 0.0,
        scored.placed.position,
    )


def _to_gap(scored: ScoredQuestion) -> CriticalGap:
    placed = scored.placed
    return CriticalGap(
        question_id=placed.question.question_id,
        question_text=placed.question.text,
        subcat_id=placed.subcategory.subcat_id,
        subcat_name=placed.subcategory.name,
        domain_id=placed.domain.domain_id,
        domain_name=placed.domain.name,
        criticality=placed.subcategory.criticality,
        ownership_type=placed.ownership_type,
        standard_tag=placed.domain.standard_tag,
        score=scored.result.score,
        response=scored.answer.response,
        evidence=scored.answer.evidence,
    )


def select_critical_gaps(
    scored: Iterable[ScoredQuestion],
    threshold: float = DEFAULT_GAP_THRESHOLD,
) -> list[CriticalGap]:
    """Filter and order already-scored questions into the gap list."""
    hits = [s for s in scored if is_critical_gap(s, threshold)]
    hits.sort(key=_sort_key)
    return [_to_gap(s) for s in hits]


def rank_critical_gaps(
    catalog: Catalog,
    answers: Mapping[str, Answer],
    selected_frameworks: Optional[Iterable[str]] = None,
    disabled_questions: Optional[Iterable[str]] = None,
    threshold: float = DEFAULT_GAP_THRESHOLD,
) -> list[CriticalGap]:
    """Rank critical gaps directly from a catalog snapshot and answer set."""
    scope = resolve_scope(catalog, selected_frameworks, disabled_questions)
    return select_critical_gaps(score_placed(scope.questions, answers), threshold)
