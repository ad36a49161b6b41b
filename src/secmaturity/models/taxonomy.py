"""Taxonomy catalog data models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Criticality(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return CRITICALITY_RANK[self]


CRITICALITY_RANK: dict[Criticality, int] = {
    Criticality.LOW: 0,
    Criticality.MEDIUM: 1,
    Criticality.HIGH: 2,
    Criticality.CRITICAL: 3,
}


class CatalogModel(BaseModel):
    # YAML reads bare ids such as 101 as integers.
    model_config = ConfigDict(coerce_numbers_to_str=True)


class Domain(CatalogModel):
    domain_id: str
    name: str
    standard_tag: Optional[str] = None
    order: int = 0


class Subcategory(CatalogModel):
    subcat_id: str
    domain_id: str
    name: str
    criticality: Criticality = Criticality.MEDIUM
    weight: float = 1.0
    ownership_type: Optional[str] = None
    framework_refs: list[str] = []


class Question(CatalogModel):
    question_id: str
    text: str
    subcat_id: str
    domain_id: str
    ownership_type: Optional[str] = None
    frameworks: list[str] = []


class Framework(CatalogModel):
    """An external standard that questions count toward.

    ``aliases`` are wildcard patterns (``*``) matched case-insensitively
    against free-text question references such as ``"NIST AI RMF GOVERN 1.1"``.
    """

    framework_id: str
    name: str
    category: str = ""
    enabled: bool = True
    aliases: list[str] = []


class Catalog(CatalogModel):
    """Snapshot of the taxonomy used for one computation."""

    domains: list[Domain] = []
    subcategories: list[Subcategory] = []
    questions: list[Question] = []
    frameworks: list[Framework] = []
    category_names: dict[str, str] = {}

    def category_name(self, category: str) -> str:
        return self.category_names.get(category, category)
