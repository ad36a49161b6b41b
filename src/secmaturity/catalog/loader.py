"""Catalog and answer file loading.

This is the persistence boundary: files are parsed with PyYAML (JSON is a
YAML subset) and validated into pydantic models. Malformed records are
rejected here so the engine only ever sees well-typed inputs.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from ..models.answer import Answer
from ..models.taxonomy import Catalog


class CatalogError(ValueError):
    """Raised when a catalog or answer file cannot be loaded."""


def _read_document(path: Path) -> object:
    if not path.exists():
        raise CatalogError(f"File not found: {path}")
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8-sig"))
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML/JSON in {path}: {e}") from e


def load_catalog(path: Path) -> Catalog:
    """Load a taxonomy snapshot (domains, subcategories, questions, frameworks)."""
    data = _read_document(path) or {}
    if not isinstance(data, dict):
        raise CatalogError(f"Catalog must be a mapping at top level: {path}")
    try:
        return Catalog.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog {path}: {e}") from e


def parse_answers(data: object) -> dict[str, Answer]:
    """Build the answer mapping from a list of records or a ``{id: record}`` mapping."""
    if data is None:
        return {}
    if isinstance(data, dict) and "answers" in data:
        data = data["answers"]

    records: list[dict] = []
    if isinstance(data, dict):
        for qid, record in data.items():
            entry = dict(record or {})
            entry.setdefault("question_id", str(qid))
            records.append(entry)
    elif isinstance(data, list):
        records = [dict(r) for r in data]
    else:
        raise CatalogError("Answers must be a list or a mapping")

    answers: dict[str, Answer] = {}
    for record in records:
        answer = Answer.model_validate(record)
        answers[answer.question_id] = answer
    return answers


def load_answers(path: Path) -> dict[str, Answer]:
    """Load the answer store keyed by question id; later records win."""
    data = _read_document(path)
    try:
        return parse_answers(data)
    except CatalogError:
        raise
    except (TypeError, ValueError) as e:
        raise CatalogError(f"Invalid answers {path}: {e}") from e
