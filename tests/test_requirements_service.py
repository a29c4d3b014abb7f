# =============================================================================
# tests/test_requirements_service.py - Company requirement lookup
# =============================================================================
# Lookup falls through: exact (company, role) row, any-role row, on-campus
# placement via the LLM, fresh LLM generation, generic defaults.
# The database session and the LLM client are mocked.
# =============================================================================

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from studentpath.services.requirements_service import (
    DEFAULT_SECTIONS, GENERIC_REQUIREMENTS, custom_company_id, generate_company_requirements,
    resolve_requirements,
)

MODULE = "studentpath.services.requirements_service"


def result(row):
    res = MagicMock()
    res.fetchone.return_value = row
    return res


def requirement_row(company_id="tcs_digital", role="SDE", **overrides):
    mapping = {
        "company_id": company_id,
        "company_name": "TCS",
        "role": role,
        "required_skills": ["java", "sql"],
        "keywords": ["agile"],
        "project_expectations": "Two projects",
        "min_experience_months": 0,
        "preferred_sections": ["Education", "Skills"],
    }
    mapping.update(overrides)
    return SimpleNamespace(_mapping=mapping)


LLM_REPLY = {
    "required_skills": ["python", "sql"],
    "keywords": ["finance", "risk"],
    "project_expectations": "Quant projects",
    "min_experience_months": 6,
    "preferred_sections": ["Education", "Projects"],
}


@pytest.fixture
def llm():
    with patch(f"{MODULE}.get_llm_client") as get_client:
        yield get_client.return_value


# =============================================================================
# Lookup order
# =============================================================================

class TestResolveRequirements:

    def test_exact_role_row_wins(self, fake_db, llm):
        fake_db.db.execute.side_effect = [result(requirement_row())]

        with patch(f"{MODULE}.get_db_session", fake_db.session):
            req = resolve_requirements("tcs_digital", None, "SDE")

        assert req["company_id"] == "tcs_digital"
        assert req["required_skills"] == ["java", "sql"]
        assert fake_db.db.execute.call_count == 1
        llm.complete_json.assert_not_called()

    def test_any_role_row_is_relabelled(self, fake_db, llm):
        row = requirement_row(role="Analyst", keywords=json.dumps(["excel", "sql"]))
        fake_db.db.execute.side_effect = [result(None), result(row)]

        with patch(f"{MODULE}.get_db_session", fake_db.session):
            req = resolve_requirements("tcs_digital", None, "SDE")

        assert req["role"] == "SDE"
        # Older rows store JSON text
        assert req["keywords"] == ["excel", "sql"]
        llm.complete_json.assert_not_called()

    def test_placement_uses_placement_company_and_role(self, fake_db):
        placement = SimpleNamespace(company_name="Infosys", role="System Engineer")
        fake_db.db.execute.side_effect = [result(None), result(None), result(placement)]

        with patch(f"{MODULE}.get_db_session", fake_db.session), \
             patch(f"{MODULE}.generate_company_requirements", return_value={"company_id": "x"}) as generate:
            req = resolve_requirements("placement_7", None, "")

        assert req == {"company_id": "x"}
        generate.assert_called_once_with("Infosys", "System Engineer")
        assert fake_db.db.execute.call_args_list[2][0][1] == {"id": 7}

    def test_placement_keeps_requested_name_and_role(self, fake_db):
        placement = SimpleNamespace(company_name="Infosys", role="System Engineer")
        fake_db.db.execute.side_effect = [result(None), result(None), result(placement)]

        with patch(f"{MODULE}.get_db_session", fake_db.session), \
             patch(f"{MODULE}.generate_company_requirements", return_value={}) as generate:
            resolve_requirements("placement_7", "Infosys BPM", "SDE")

        generate.assert_called_once_with("Infosys BPM", "SDE")

    def test_unknown_placement_generates_by_id(self, fake_db):
        fake_db.db.execute.side_effect = [result(None), result(None), result(None)]

        with patch(f"{MODULE}.get_db_session", fake_db.session), \
             patch(f"{MODULE}.generate_company_requirements", return_value={}) as generate:
            resolve_requirements("placement_abc", None, "SDE")

        assert fake_db.db.execute.call_args_list[2][0][1] == {"id": -1}
        generate.assert_called_once_with("placement_abc", "SDE")

    def test_custom_company_skips_database_lookup(self, fake_db, llm):
        llm.complete_json.return_value = LLM_REPLY

        with patch(f"{MODULE}.get_db_session", fake_db.session):
            req = resolve_requirements("custom", "Goldman Sachs", "Analyst")

        assert req["company_id"] == "custom_goldman_sachs"
        assert req["required_skills"] == ["python", "sql"]
        # Only the cache insert touches the database
        assert fake_db.db.execute.call_count == 1

    def test_nothing_known_generates_for_unknown_company(self):
        with patch(f"{MODULE}.generate_company_requirements", return_value={}) as generate:
            resolve_requirements(None, None, "SDE")

        generate.assert_called_once_with("Unknown Company", "SDE")

    def test_llm_failure_ends_in_generic_requirements(self, fake_db, llm):
        fake_db.db.execute.side_effect = [result(None), result(None)]
        llm.complete_json.side_effect = RuntimeError("timeout")

        with patch(f"{MODULE}.get_db_session", fake_db.session):
            req = resolve_requirements("unlisted_co", "Unlisted", "SDE")

        assert req["company_id"] == "custom_unlisted"
        assert req["required_skills"] == GENERIC_REQUIREMENTS["required_skills"]
        assert req["preferred_sections"] == DEFAULT_SECTIONS


# =============================================================================
# LLM generation
# =============================================================================

class TestGenerateCompanyRequirements:

    def test_generated_requirements_are_cached(self, fake_db, llm):
        llm.complete_json.return_value = LLM_REPLY

        with patch(f"{MODULE}.get_db_session", fake_db.session):
            req = generate_company_requirements("Goldman Sachs", "Analyst")

        assert req["min_experience_months"] == 6
        params = fake_db.db.execute.call_args[0][1]
        assert params["company_id"] == "custom_goldman_sachs"
        assert json.loads(params["required_skills"]) == ["python", "sql"]

    @pytest.mark.parametrize("reply", [["python"], "not json", 42, None])
    def test_non_object_reply_returns_generic(self, fake_db, llm, reply):
        llm.complete_json.return_value = reply

        with patch(f"{MODULE}.get_db_session", fake_db.session):
            req = generate_company_requirements("Acme", "SDE")

        assert req == {"company_id": "custom_acme", "company_name": "Acme", "role": "SDE", **GENERIC_REQUIREMENTS}
        fake_db.db.execute.assert_not_called()

    def test_badly_typed_fields_are_coerced(self, fake_db, llm):
        llm.complete_json.return_value = {
            "required_skills": "python, sql",
            "keywords": ["agile", 3, {"nested": True}, None],
            "project_expectations": None,
            "min_experience_months": "six",
        }

        with patch(f"{MODULE}.get_db_session", fake_db.session):
            req = generate_company_requirements("Acme", "SDE")

        assert req["required_skills"] == []
        assert req["keywords"] == ["agile", "3"]
        assert req["project_expectations"] == ""
        assert req["min_experience_months"] == 0
        assert req["preferred_sections"] == DEFAULT_SECTIONS

    def test_cache_failure_still_returns_requirements(self, fake_db, llm):
        llm.complete_json.return_value = LLM_REPLY
        fake_db.db.execute.side_effect = RuntimeError("db down")

        with patch(f"{MODULE}.get_db_session", fake_db.session):
            req = generate_company_requirements("Acme", "SDE")

        assert req["keywords"] == ["finance", "risk"]


class TestCustomCompanyId:

    @pytest.mark.parametrize("name,expected", [
        ("Goldman Sachs", "custom_goldman_sachs"),
        ("AT&T", "custom_at_t"),
        ("JPMorgan Chase & Co.", "custom_jpmorgan_chase___co_"),
    ])
    def test_slug(self, name, expected):
        assert custom_company_id(name) == expected
