"""Answer store data models.

Enum aliases accept the values stored by earlier versions of the product
(``Sim``/``Parcial``/``Não``/``NA``) so exported answer sets load unchanged.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Response(str, Enum):
    POSITIVE = "Positive"
    PARTIAL = "Partial"
    NEGATIVE = "Negative"
    NOT_APPLICABLE = "NotApplicable"


class EvidenceStatus(str, Enum):
    SUFFICIENT = "Sufficient"
    PARTIAL = "Partial"
    INSUFFICIENT = "Insufficient"


RESPONSE_ALIASES: dict[str, Optional[Response]] = {
    "positive": Response.POSITIVE,
    "yes": Response.POSITIVE,
    "sim": Response.POSITIVE,
    "partial": Response.PARTIAL,
    "parcial": Response.PARTIAL,
    "negative": Response.NEGATIVE,
    "no": Response.NEGATIVE,
    "não": Response.NEGATIVE,
    "nao": Response.NEGATIVE,
    "notapplicable": Response.NOT_APPLICABLE,
    "not applicable": Response.NOT_APPLICABLE,
    "na": Response.NOT_APPLICABLE,
    "n/a": Response.NOT_APPLICABLE,
    "": None,
}

# "NA" evidence means nothing was recorded, not a fourth status.
EVIDENCE_ALIASES: dict[str, Optional[EvidenceStatus]] = {
    "sufficient": EvidenceStatus.SUFFICIENT,
    "yes": EvidenceStatus.SUFFICIENT,
    "sim": EvidenceStatus.SUFFICIENT,
    "partial": EvidenceStatus.PARTIAL,
    "parcial": EvidenceStatus.PARTIAL,
    "insufficient": EvidenceStatus.INSUFFICIENT,
    "no": EvidenceStatus.INSUFFICIENT,
    "não": EvidenceStatus.INSUFFICIENT,
    "nao": EvidenceStatus.INSUFFICIENT,
    "na": None,
    "n/a": None,
    "": None,
}


def _normalize(value: object, aliases: dict, label: str) -> object:
    if isinstance(value, bool):
        # YAML 1.1 reads bare yes/no as booleans.
        value = "yes" if value else "no"
    if value is None or not isinstance(value, str):
        return value
    key = value.strip().lower()
    if key in aliases:
        return aliases[key]
    raise ValueError(f"Unknown {label} value: {value!r}")


class Answer(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    question_id: str
    response: Optional[Response] = None
    evidence: Optional[EvidenceStatus] = None
    notes: str = ""
    evidence_links: list[str] = []
    updated_at: Optional[datetime] = None

    @field_validator("response", mode="before")
    @classmethod
    def _parse_response(cls, value: object) -> object:
        return _normalize(value, RESPONSE_ALIASES, "response")

    @field_validator("evidence", mode="before")
    @classmethod
    def _parse_evidence(cls, value: object) -> object:
        return _normalize(value, EVIDENCE_ALIASES, "evidence")

    @property
    def is_answered(self) -> bool:
        return self.response is not None
