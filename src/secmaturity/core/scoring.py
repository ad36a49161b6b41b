"""Scoring primitives: one answer in, one numeric contribution out."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ..models.answer import Answer, EvidenceStatus, Response
from .scope import PlacedQuestion

RESPONSE_SCORES: dict[Response, Optional[float]] = {
    Response.POSITIVE: 1.0,
    Response.PARTIAL: 0.5,
    Response.NEGATIVE: 0.0,
    Response.NOT_APPLICABLE: None,
}

EVIDENCE_SCORES: dict[EvidenceStatus, float] = {
    EvidenceStatus.SUFFICIENT: 1.0,
    EvidenceStatus.PARTIAL: 0.5,
    EvidenceStatus.INSUFFICIENT: 0.0,
}


def score_of(response: Optional[Response]) -> Optional[float]:
    """Numeric value of a response, or None when it is excluded from averages."""
    if response is None:
        return None
    return RESPONSE_SCORES.get(response)


def evidence_score_of(
    response: Optional[Response],
    evidence: Optional[EvidenceStatus],
) -> Optional[float]:
    """Evidence-readiness contribution; only defined for scored responses."""
    if score_of(response) is None:
        return None
    if evidence is None:
        return 0.0
    return EVIDENCE_SCORES.get(evidence, 0.0)


@dataclass(frozen=True)
class QuestionScore:
    question_id: str
    answered: bool
    score: Optional[float]
    evidence_score: Optional[float]


def score_question(question_id: str, answer: Optional[Answer]) -> QuestionScore:
    if answer is None or answer.response is None:
        return QuestionScore(question_id, False, None, None)
    return QuestionScore(
        question_id=question_id,
        answered=True,
        score=score_of(answer.response),
        evidence_score=evidence_score_of(answer.response, answer.evidence),
    )


@dataclass(frozen=True)
class ScoredQuestion:
    placed: PlacedQuestion
    result: QuestionScore
    answer: Optional[Answer]

    @property
    def question_id(self) -> str:
        return self.placed.question.question_id


def score_placed(
    questions: Iterable[PlacedQuestion],
    answers: Mapping[str, Answer],
) -> list[ScoredQuestion]:
    scored: list[ScoredQuestion] = []
    for placed in questions:
        answer = answers.get(placed.question.question_id)
        scored.append(ScoredQuestion(
            placed=placed,
            result=score_question(placed.question.question_id, answer),
            answer=answer,
        ))
    return scored
