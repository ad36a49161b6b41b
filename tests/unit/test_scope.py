"""Tests for core/scope.py."""

from __future__ import annotations

import pytest

from secmaturity.core.scope import (
    active_frameworks,
    as_id_list,
    effective_framework_refs,
    match_pattern,
    resolve_framework_ref,
    resolve_scope,
)
from secmaturity.models.taxonomy import Catalog, Framework, Question, Subcategory


def _ids(scope) -> list[str]:
    return [p.question.question_id for p in scope.questions]


def _kinds(scope) -> set[str]:
    return {i.kind for i in scope.issues}


class TestMatchPattern:
    def test_exact_case_insensitive(self):
        assert match_pattern("LGPD", "lgpd") is True

    def test_wildcard_match(self):
        assert match_pattern("NIST AI RMF GOVERN 1.1", "nist ai rmf*") is True

    def test_wildcard_no_match(self):
        assert match_pattern("ISO 27001 A.5.1", "NIST*") is False

    def test_wildcard_any(self):
        assert match_pattern("anything", "*") is True


class TestResolveFrameworkRef:
    def _frameworks(self) -> list[Framework]:
        return [
            Framework(framework_id="NIST_AI_RMF", name="NIST AI RMF", aliases=["NIST AI RMF *"]),
            Framework(framework_id="ISO_27001", name="ISO/IEC 27001", aliases=["ISO 27001*", "ISO/IEC 27001*"]),
        ]

    def test_by_id(self):
        assert resolve_framework_ref("ISO_27001", self._frameworks()) == "ISO_27001"

    def test_by_name(self):
        assert resolve_framework_ref("nist ai rmf", self._frameworks()) == "NIST_AI_RMF"

    def test_by_alias(self):
        assert resolve_framework_ref("NIST AI RMF GOVERN 1.1", self._frameworks()) == "NIST_AI_RMF"
        assert resolve_framework_ref("ISO 27001 A.5.1", self._frameworks()) == "ISO_27001"

    def test_unknown(self):
        assert resolve_framework_ref("MITRE ATLAS", self._frameworks()) is None


class TestEffectiveFrameworkRefs:
    def test_inherits_subcategory_refs_without_duplicates(self):
        question = Question(question_id="Q", text="t", subcat_id="S", domain_id="D", frameworks=["A", "B"])
        subcat = Subcategory(subcat_id="S", domain_id="D", name="s", framework_refs=["B", "C"])
        assert effective_framework_refs(question, subcat) == ["A", "B", "C"]


class TestActiveFrameworks:
    def test_enabled_only(self, catalog_data):
        catalog_data["frameworks"][1]["enabled"] = False
        active = active_frameworks(Catalog.model_validate(catalog_data))
        assert list(active) == ["FW_A", "FW_C"]

    def test_selection_restricts(self, catalog: Catalog):
        assert list(active_frameworks(catalog, ["FW_C"])) == ["FW_C"]

    def test_empty_selection_means_all(self, catalog: Catalog):
        assert list(active_frameworks(catalog, [])) == ["FW_A", "FW_B", "FW_C"]


class TestResolveScope:
    def test_all_questions_in_scope_by_default(self, catalog: Catalog):
        scope = resolve_scope(catalog)
        assert _ids(scope) == ["Q1", "Q2", "Q3", "Q4"]
        assert scope.issues == []
        assert scope.restricted is False

    def test_selection_keeps_questions_with_any_selected_framework(self, catalog: Catalog):
        scope = resolve_scope(catalog, ["FW_B"])
        assert _ids(scope) == ["Q1", "Q4"]
        assert scope.questions[0].frameworks == ("FW_B",)

    def test_disabled_framework_drops_only_exclusive_questions(self, catalog_data):
        catalog_data["frameworks"][0]["enabled"] = False  # FW_A
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        # Q1 is also in FW_B; Q2 only counts toward FW_A
        assert _ids(scope) == ["Q1", "Q3", "Q4"]
        assert scope.questions[0].frameworks == ("FW_B",)

    def test_untagged_question_in_scope_without_filter(self, catalog_data):
        catalog_data["questions"][3]["frameworks"] = []
        catalog = Catalog.model_validate(catalog_data)
        assert "Q4" in _ids(resolve_scope(catalog))
        assert "Q4" not in _ids(resolve_scope(catalog, ["FW_A"]))

    def test_disabled_questions_excluded(self, catalog: Catalog):
        scope = resolve_scope(catalog, disabled_questions={"Q2"})
        assert _ids(scope) == ["Q1", "Q3", "Q4"]

    def test_unknown_subcategory_excluded_and_reported(self, catalog_data):
        catalog_data["questions"][1]["subcat_id"] = "GONE"
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        assert "Q2" not in _ids(scope)
        assert "unknown_subcategory" in _kinds(scope)

    def test_unknown_domain_excluded_and_reported(self, catalog_data):
        catalog_data["subcategories"][1]["domain_id"] = "GONE"
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        assert _ids(scope) == ["Q1", "Q2"]
        assert "unknown_domain" in _kinds(scope)

    def test_unknown_framework_reference_ignored(self, catalog_data):
        catalog_data["questions"][2]["frameworks"] = ["MITRE ATLAS"]
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        assert "Q3" in _ids(scope)
        assert [(i.kind, i.ref) for i in scope.issues] == [("unknown_framework", "MITRE ATLAS")]

    def test_unknown_selected_framework_reported(self, catalog: Catalog):
        scope = resolve_scope(catalog, ["NOPE"])
        assert _ids(scope) == []
        assert "unknown_framework" in _kinds(scope)

    def test_orphan_answers_reported(self, catalog: Catalog, answers_for):
        scope = resolve_scope(catalog, answers=answers_for({"Q1": "Positive", "Q99": "Negative"}))
        assert [(i.kind, i.ref) for i in scope.issues] == [("orphan_answer", "Q99")]

    def test_domain_mismatch_placed_by_subcategory(self, catalog_data):
        catalog_data["domains"].append({"domain_id": "OTHER", "name": "Other"})
        catalog_data["questions"][0]["domain_id"] = "OTHER"
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        assert scope.questions[0].domain.domain_id == "D"
        assert "domain_mismatch" in _kinds(scope)

    def test_duplicate_question_ids(self, catalog_data):
        catalog_data["questions"].append(dict(catalog_data["questions"][0]))
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        assert _ids(scope) == ["Q1", "Q2", "Q3", "Q4"]
        assert "duplicate_question" in _kinds(scope)

    def test_ownership_falls_back_to_subcategory(self, catalog_data):
        catalog_data["questions"][0]["ownership_type"] = "Executive"
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        owners = [p.ownership_type for p in scope.questions]
        assert owners == ["Executive", "GRC", "Engineering", "Engineering"]

    def test_catalog_not_mutated(self, catalog: Catalog):
        before = catalog.model_dump()
        resolve_scope(catalog, ["FW_A"], {"Q1"})
        assert catalog.model_dump() == before

    def test_duplicate_subcategory_first_definition_wins(self, catalog_data):
        catalog_data["subcategories"].append(
            {"subcat_id": "S1", "domain_id": "D", "name": "Shadow", "criticality": "Low", "ownership_type": "Ops"}
        )
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        assert scope.questions[0].subcategory.name == "Risk Ownership"
        assert scope.questions[0].ownership_type == "GRC"
        assert [(i.kind, i.ref) for i in scope.issues] == [("duplicate_subcategory", "S1")]

    def test_duplicate_domain_first_definition_wins(self, catalog_data):
        catalog_data["domains"].append({"domain_id": "D", "name": "Shadow", "order": 0})
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        assert {p.domain.name for p in scope.questions} == {"Governance"}
        assert [(i.kind, i.ref) for i in scope.issues] == [("duplicate_domain", "D")]

    def test_duplicate_framework_first_definition_wins(self, catalog_data):
        catalog_data["frameworks"].append({"framework_id": "FW_A", "name": "Shadow", "enabled": False})
        scope = resolve_scope(Catalog.model_validate(catalog_data))
        assert scope.active["FW_A"].name == "Framework A"
        assert "duplicate_framework" in _kinds(scope)

    def test_single_selected_framework_string(self, catalog: Catalog):
        scope = resolve_scope(catalog, "FW_B")
        assert _ids(scope) == ["Q1", "Q4"]
        assert scope.issues == []

    def test_single_disabled_question_string(self, catalog: Catalog):
        assert _ids(resolve_scope(catalog, disabled_questions="Q2")) == ["Q1", "Q3", "Q4"]


class TestAsIdList:
    def test_none_and_empty(self):
        assert as_id_list(None) == []
        assert as_id_list("") == []

    def test_single_id(self):
        assert as_id_list("FW_A") == ["FW_A"]

    def test_list_skips_blanks_and_stringifies(self):
        assert as_id_list(["FW_A", None, "", 101]) == ["FW_A", "101"]

    def test_mapping_rejected(self):
        with pytest.raises(ValueError):
            as_id_list({"FW_A": True})
