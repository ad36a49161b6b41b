"""Scope resolution: which questions count toward a computation, and where.

A question is in scope when it is not disabled, its subcategory and domain
resolve in the catalog, and either
- at least one of its resolved frameworks is active, or
- it resolves to no framework at all and no framework filter is applied.

A framework is active when it is enabled and, if the caller restricted the
selection, selected. References that do not resolve are reported as
integrity issues and otherwise ignored. Duplicate ids keep their first
definition.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional, TypeVar

from ..models.answer import Answer
from ..models.metrics import IntegrityIssue
from ..models.taxonomy import Catalog, Domain, Framework, Question, Subcategory

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PlacedQuestion:
    position: int
    question: Question
    subcategory: Subcategory
    domain: Domain
    frameworks: tuple[str, ...]
    ownership_type: Optional[str]


@dataclass
class Scope:
    active: dict[str, Framework]
    questions: list[PlacedQuestion]
    issues: list[IntegrityIssue] = field(default_factory=list)
    restricted: bool = False


def match_pattern(ref: str, pattern: str) -> bool:
    """Test a framework reference against an alias pattern.

    Supports exact (case-insensitive) matches and ``*`` wildcards.
    """
    if "*" in pattern:
        regex = "^" + re.escape(pattern).replace(r"\*", ".*") + "$"
        return bool(re.match(regex, ref, re.IGNORECASE))
    return ref.lower() == pattern.lower()


def resolve_framework_ref(ref: str, frameworks: Iterable[Framework]) -> Optional[str]:
    """Map a question's framework reference to a framework id.

    Exact ids win over names, names over aliases; first catalog match wins.
    """
    frameworks = list(frameworks)
    for fw in frameworks:
        if fw.framework_id == ref:
            return fw.framework_id
    for fw in frameworks:
        if fw.name.lower() == ref.lower():
            return fw.framework_id
    for fw in frameworks:
        if any(match_pattern(ref, alias) for alias in fw.aliases):
            return fw.framework_id
    return None


def effective_framework_refs(question: Question, subcategory: Subcategory) -> list[str]:
    """Question references plus those inherited from its subcategory, deduplicated."""
    refs: list[str] = []
    for ref in list(question.frameworks) + list(subcategory.framework_refs):
        if ref and ref not in refs:
            refs.append(ref)
    return refs


def as_id_list(values: object) -> list[str]:
    """Normalize an id filter: None, a single id, or a list of ids."""
    if values is None:
        return []
    if isinstance(values, str):
        return [values] if values else []
    if isinstance(values, (list, tuple, set, frozenset)):
        return [str(v) for v in values if v is not None and v != ""]
    raise ValueError(f"Expected an id or a list of ids, got {type(values).__name__}: {values!r}")


def first_by_id(items: Iterable[T], key: Callable[[T], str]) -> tuple[dict[str, T], list[str]]:
    """Index items by id; the first definition wins. Also returns the duplicated ids."""
    unique: dict[str, T] = {}
    duplicates: list[str] = []
    for item in items:
        item_id = key(item)
        if item_id in unique:
            duplicates.append(item_id)
        else:
            unique[item_id] = item
    return unique, duplicates


def active_frameworks(
    catalog: Catalog,
    selected_frameworks: Optional[Iterable[str]] = None,
) -> dict[str, Framework]:
    selected = set(as_id_list(selected_frameworks))
    frameworks, _ = first_by_id(catalog.frameworks, lambda fw: fw.framework_id)
    return {
        fid: fw
        for fid, fw in frameworks.items()
        if fw.enabled and (not selected or fid in selected)
    }


class _IssueLog:
    def __init__(self) -> None:
        self.issues: list[IntegrityIssue] = []
        self._seen: set[tuple[str, str]] = set()

    def add(self, kind: str, ref: str, detail: str = "") -> None:
        if (kind, ref) in self._seen:
            return
        self._seen.add((kind, ref))
        logger.debug("Integrity issue %s: %s %s", kind, ref, detail)
        self.issues.append(IntegrityIssue(kind=kind, ref=ref, detail=detail))


def resolve_scope(
    catalog: Catalog,
    selected_frameworks: Optional[Iterable[str]] = None,
    disabled_questions: Optional[Iterable[str]] = None,
    answers: Optional[Mapping[str, Answer]] = None,
) -> Scope:
    """Place every in-scope question in the taxonomy, in catalog order."""
    log = _IssueLog()
    selected = as_id_list(selected_frameworks)
    disabled = set(as_id_list(disabled_questions))
    known_frameworks, duplicate_frameworks = first_by_id(catalog.frameworks, lambda fw: fw.framework_id)
    domains, duplicate_domains = first_by_id(catalog.domains, lambda d: d.domain_id)
    subcats, duplicate_subcats = first_by_id(catalog.subcategories, lambda s: s.subcat_id)

    for fid in duplicate_frameworks:
        log.add("duplicate_framework", fid, "later definition ignored")
    for did in duplicate_domains:
        log.add("duplicate_domain", did, "later definition ignored")
    for sid in duplicate_subcats:
        log.add("duplicate_subcategory", sid, "later definition ignored")

    for fid in selected:
        if fid not in known_frameworks:
            log.add("unknown_framework", fid, "selected framework not in catalog")

    active = active_frameworks(catalog, selected)
    resolved_refs: dict[str, Optional[str]] = {}

    placed: list[PlacedQuestion] = []
    seen_ids: set[str] = set()

    for position, question in enumerate(catalog.questions):
        qid = question.question_id
        if qid in seen_ids:
            log.add("duplicate_question", qid, "later definition ignored")
            continue
        seen_ids.add(qid)
        if qid in disabled:
            continue

        subcat = subcats.get(question.subcat_id)
        if subcat is None:
            log.add("unknown_subcategory", question.subcat_id, f"referenced by {qid}")
            continue
        domain = domains.get(subcat.domain_id)
        if domain is None:
            log.add("unknown_domain", subcat.domain_id, f"referenced by {subcat.subcat_id}")
            continue
        if question.domain_id and question.domain_id != subcat.domain_id:
            log.add(
                "domain_mismatch",
                qid,
                f"question says {question.domain_id}, subcategory says {subcat.domain_id}",
            )

        resolved: list[str] = []
        for ref in effective_framework_refs(question, subcat):
            if ref not in resolved_refs:
                resolved_refs[ref] = resolve_framework_ref(ref, catalog.frameworks)
            fid = resolved_refs[ref]
            if fid is None:
                log.add("unknown_framework", ref, f"referenced by {qid}")
            elif fid not in resolved:
                resolved.append(fid)

        if resolved:
            in_scope = any(fid in active for fid in resolved)
        else:
            in_scope = not selected
        if not in_scope:
            continue

        placed.append(PlacedQuestion(
            position=position,
            question=question,
            subcategory=subcat,
            domain=domain,
            frameworks=tuple(fid for fid in resolved if fid in active),
            ownership_type=question.ownership_type or subcat.ownership_type,
        ))

    if answers:
        for qid in answers:
            if qid not in seen_ids:
                log.add("orphan_answer", qid, "answer for a question not in the catalog")

    return Scope(active=active, questions=placed, issues=log.issues, restricted=bool(selected))
