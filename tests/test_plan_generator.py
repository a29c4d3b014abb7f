# =============================================================================
# tests/test_plan_generator.py - Plan parsing, fallback and LLM errors
# =============================================================================

import json
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from studentpath.core.exceptions import ExternalServiceError, RateLimitExceededError
from studentpath.services.plan_generator import (
    PlanRequest, build_plan_prompt, fallback_plan, generate_plan, parse_plan_response,
)


@pytest.fixture
def plan_request():
    return PlanRequest(
        track_type="placement",
        target_id="comp-1",
        target_name="Google",
        required_skills=["DSA", "System Design", "Python"],
        student_skills={"DSA": 4, "Python": 2},
        time_remaining_weeks=4,
    )


class TestParsing:

    def test_fenced_json_is_parsed(self, plan_request):
        body = {"summary": "Go", "milestones": [{"week": 1, "tasks": ["a"]}], "tips": ["t"]}
        plan = parse_plan_response(f"Here you go\n```json\n{json.dumps(body)}\n```", plan_request)

        assert plan["summary"] == "Go"
        assert plan["milestones"] == body["milestones"]
        assert plan["totalWeeks"] == 4
        assert plan["skillGaps"][1] == {"skill": "System Design", "current": 0, "required": 5}

    def test_garbage_falls_back(self, plan_request):
        plan = parse_plan_response("not json at all", plan_request)
        assert plan["summary"].startswith("A 4-week preparation plan for Google")


class TestFallbackPlan:

    def test_largest_gaps_first(self, plan_request):
        plan = fallback_plan(plan_request)
        focus = [m["targetSkills"][0] for m in plan["milestones"]]
        # gaps: System Design 5, Python 3, DSA 1
        assert focus == ["System Design", "Python", "DSA", "System Design"]

    def test_last_weeks_are_mock_tests(self, plan_request):
        plan = fallback_plan(plan_request)
        last_tasks = [m["tasks"][-1] for m in plan["milestones"]]
        assert last_tasks[0].startswith("Build a small project")
        assert last_tasks[1:] == ["Take a mock test"] * 3

    def test_at_most_twelve_weeks(self, plan_request):
        plan_request.time_remaining_weeks = 20
        assert len(fallback_plan(plan_request)["milestones"]) == 12

    def test_no_skills_focuses_on_target(self):
        request = PlanRequest(
            track_type="higher-studies", target_id="gate", target_name="GATE",
            required_skills=[], student_skills={}, time_remaining_weeks=2,
        )
        assert fallback_plan(request)["milestones"][0]["title"] == "Focus: GATE"


class TestGeneratePlan:

    def test_prompt_mentions_target(self, plan_request):
        assert "Google" in build_plan_prompt(plan_request)

    @patch("studentpath.services.plan_generator.GeneratedPlanStore")
    @patch("studentpath.services.plan_generator.get_llm_client")
    def test_empty_response_is_error(self, mock_client, _):
        mock_client.return_value._call_api.return_value = ""
        with pytest.raises(ExternalServiceError) as exc:
            generate_plan(PlanRequest(
                track_type="placement", target_id="x", target_name="X",
                required_skills=["a"], student_skills={},
            ))
        assert exc.value.status_code == 500

    @patch("studentpath.services.plan_generator.get_llm_client")
    def test_provider_rate_limit_maps_to_429(self, mock_client, plan_request):
        response = httpx.Response(429, request=httpx.Request("POST", "https://api.test/v1/chat/completions"))
        mock_client.return_value._call_api.side_effect = openai.RateLimitError(
            "slow down", response=response, body=None
        )
        with pytest.raises(RateLimitExceededError) as exc:
            generate_plan(plan_request)
        assert exc.value.status_code == 429

    @patch("studentpath.services.plan_generator.GeneratedPlanStore")
    @patch("studentpath.services.plan_generator.get_llm_client")
    def test_unparseable_answer_stored_as_fallback(self, mock_client, mock_store, plan_request):
        mock_client.return_value._call_api.return_value = "sorry, no json"

        plan = generate_plan(plan_request, user_id=9)

        assert plan["milestones"]
        mock_store.return_value.insert.assert_called_once_with("comp-1", plan, True, 9)
