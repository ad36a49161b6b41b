"""Shared fixtures for secmaturity tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from secmaturity.models.answer import Answer
from secmaturity.models.taxonomy import Catalog


def make_answers(responses: dict[str, object], evidence: dict[str, object] | None = None) -> dict[str, Answer]:
    """Build an answer store from ``{question_id: response}``."""
    evidence = evidence or {}
    return {
        qid: Answer(question_id=qid, response=resp, evidence=evidence.get(qid))
        for qid, resp in responses.items()
    }


@pytest.fixture
def catalog_data() -> dict:
    """One domain, a weighted Critical subcategory and a Low subcategory."""
    return {
        "domains": [
            {"domain_id": "D", "name": "Governance", "standard_tag": "GOVERN", "order": 1},
        ],
        "subcategories": [
            {
                "subcat_id": "S1", "domain_id": "D", "name": "Risk Ownership",
                "criticality": "Critical", "weight": 2.0, "ownership_type": "GRC",
            },
            {
                "subcat_id": "S2", "domain_id": "D", "name": "Awareness",
                "criticality": "Low", "weight": 1.0, "ownership_type": "Engineering",
            },
        ],
        "questions": [
            {"question_id": "Q1", "text": "Is AI risk owned?", "subcat_id": "S1", "domain_id": "D",
             "frameworks": ["FW_A", "FW_B"]},
            {"question_id": "Q2", "text": "Is risk reviewed?", "subcat_id": "S1", "domain_id": "D",
             "frameworks": ["FW_A"]},
            {"question_id": "Q3", "text": "Is training run?", "subcat_id": "S2", "domain_id": "D",
             "frameworks": ["FW_C"]},
            {"question_id": "Q4", "text": "Is training tracked?", "subcat_id": "S2", "domain_id": "D",
             "frameworks": ["FW_B"]},
        ],
        "frameworks": [
            {"framework_id": "FW_A", "name": "Framework A", "category": "baseline"},
            {"framework_id": "FW_B", "name": "Framework B", "category": "baseline"},
            {"framework_id": "FW_C", "name": "Framework C", "category": "privacy"},
        ],
        "category_names": {"baseline": "Security Baseline"},
    }


@pytest.fixture
def catalog(catalog_data: dict) -> Catalog:
    return Catalog.model_validate(catalog_data)


@pytest.fixture
def scenario_answers() -> dict[str, Answer]:
    """S1 = [Positive, Negative], S2 = [Positive, Positive]."""
    return make_answers(
        {"Q1": "Positive", "Q2": "Negative", "Q3": "Positive", "Q4": "Positive"},
        {"Q1": "Sufficient", "Q3": "Partial", "Q4": "Insufficient"},
    )


@pytest.fixture
def project_dir(tmp_path: Path, catalog_data: dict) -> Path:
    """A project directory with catalog.yaml and answers.yaml on disk."""
    project = tmp_path / "assessment"
    project.mkdir()
    (project / "catalog.yaml").write_text(yaml.safe_dump(catalog_data, sort_keys=False), encoding="utf-8")
    (project / "answers.yaml").write_text(
        "answers:\n"
        "  - question_id: Q1\n"
        "    response: Positive\n"
        "    evidence: Sufficient\n"
        "  - question_id: Q2\n"
        "    response: Negative\n"
        "  - question_id: Q3\n"
        "    response: Positive\n"
        "  - question_id: Q4\n"
        "    response: Positive\n",
        encoding="utf-8",
    )
    return project


@pytest.fixture
def initialized_project(project_dir: Path) -> Path:
    """A project with .secmaturity/config.yaml pointing at its input files."""
    cfg_dir = project_dir / ".secmaturity"
    cfg_dir.mkdir()
    (cfg_dir / "config.yaml").write_text(
        'project:\n  name: "test-assessment"\n  catalog: "catalog.yaml"\n  answers: "answers.yaml"\n',
        encoding="utf-8",
    )
    return project_dir


@pytest.fixture
def answers_for():
    """Factory fixture wrapping ``make_answers``."""
    return make_answers
