# =============================================================================
# tests/test_career_routes.py - Career track endpoints
# =============================================================================

from unittest.mock import patch

import pytest

from studentpath.core.exceptions import ExternalServiceError, TaskAlreadyCompletedError
from studentpath.schemas.schemas import UserRole

ROUTES = "studentpath.api.routes.career_routes"

PLAN_BODY = {
    "trackType": "placement",
    "targetId": "comp-1",
    "targetName": "Google",
    "requiredSkills": ["DSA"],
    "studentSkills": {"DSA": 2},
}


class TestExams:

    def test_all_exams(self, client):
        data = client.get("/api/career-tracks/exams").json()["data"]
        assert {e["id"] for e in data} >= {"gate", "cat", "gre"}

    def test_by_category(self, client):
        data = client.get("/api/career-tracks/exams", params={"category": "Management"}).json()["data"]
        assert [e["id"] for e in data] == ["cat"]

    def test_unknown_exam(self, client):
        response = client.get("/api/career-tracks/exams", params={"id": "nope"})
        assert response.status_code == 404
        assert response.json()["detail"] == "Exam not found"


class TestGeneratePlan:

    @pytest.mark.parametrize("missing", ["trackType", "targetName", "requiredSkills", "studentSkills"])
    def test_missing_fields(self, client, login_as, missing):
        login_as(UserRole.student)
        body = {k: v for k, v in PLAN_BODY.items() if k != missing}

        response = client.post("/api/career-tracks/generate-plan", json=body)

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Missing required fields")

    def test_bad_track_type(self, client, login_as):
        login_as(UserRole.student)
        response = client.post("/api/career-tracks/generate-plan", json={**PLAN_BODY, "trackType": "sabbatical"})
        assert response.json()["detail"] == "trackType must be 'placement' or 'higher-studies'"

    def test_plan_returned(self, client, login_as):
        login_as(UserRole.student, user_id=8)

        with patch(f"{ROUTES}.generate_plan", return_value={"summary": "ok"}) as mock_generate:
            response = client.post("/api/career-tracks/generate-plan", json=PLAN_BODY)

        assert response.json() == {"success": True, "data": {"summary": "ok"}}
        plan_request, user_id = mock_generate.call_args.args
        assert plan_request.target_name == "Google"
        assert user_id == 8

    def test_llm_failure_is_reported(self, client, login_as):
        login_as(UserRole.student)

        error = ExternalServiceError("llm", "No response from AI.", status_code=500)
        with patch(f"{ROUTES}.generate_plan", side_effect=error):
            response = client.post("/api/career-tracks/generate-plan", json=PLAN_BODY)

        assert response.status_code == 500
        assert response.json()["detail"] == "No response from AI."


class TestMyPlan:

    def test_complete_task_requires_ids(self, client, login_as):
        login_as(UserRole.student)
        response = client.post("/api/career-tracks/my-plan/complete-task", json={"taskId": 3})
        assert response.status_code == 400
        assert response.json()["detail"] == "taskId and planId are required"

    def test_completed_task_is_404(self, client, login_as):
        login_as(UserRole.student)

        with patch(f"{ROUTES}.gamification.complete_task", side_effect=TaskAlreadyCompletedError(3)):
            response = client.post("/api/career-tracks/my-plan/complete-task", json={"taskId": 3, "planId": 1})

        assert response.status_code == 404
        assert response.json()["code"] == "TASK_NOT_FOUND"

    def test_existing_plan_not_duplicated(self, client, login_as):
        login_as(UserRole.student)

        with patch(f"{ROUTES}.gamification.find_plan_for_target", return_value=12), \
             patch(f"{ROUTES}.gamification.add_plan") as mock_add:
            response = client.post(
                "/api/career-tracks/my-plan/add",
                json={"targetId": "comp-1", "targetName": "Google", "milestones": [{"week": 1, "tasks": ["a"]}]},
            )

        assert response.json()["alreadyExists"] is True
        assert response.json()["planId"] == 12
        mock_add.assert_not_called()

    def test_delete_missing_plan(self, client, login_as):
        login_as(UserRole.student)

        with patch(f"{ROUTES}.gamification.delete_plan", return_value=False):
            response = client.delete("/api/career-tracks/my-plan/77")

        assert response.status_code == 404

    def test_adjust_difficulty_checks_owner(self, client, login_as):
        login_as(UserRole.student)

        with patch(f"{ROUTES}.gamification.find_plan_for_student", return_value=False), \
             patch(f"{ROUTES}.gamification.adjust_difficulty") as mock_adjust:
            response = client.post("/api/career-tracks/my-plan/5/adjust-difficulty")

        assert response.status_code == 404
        mock_adjust.assert_not_called()


class TestReviews:

    def test_review_needs_rating_and_comment(self, client, login_as):
        login_as(UserRole.student)
        response = client.post("/api/career-tracks/companies/1/reviews", json={"rating": 4})
        assert response.json()["detail"] == "Rating and comment are required"

    def test_review_schedules_extraction(self, client, login_as):
        login_as(UserRole.student, user_id=3)

        with patch(f"{ROUTES}.placement_service.add_company_review", return_value=1) as mock_add, \
             patch(f"{ROUTES}.run_extraction_in_background") as mock_extract:
            response = client.post(
                "/api/career-tracks/companies/9/reviews",
                json={"rating": 5, "comment": "Two coding rounds"},
            )

        assert response.status_code == 200
        assert mock_add.call_args.args[:2] == (9, 3)
        mock_extract.assert_called_once_with(9)


class TestCronReminder:

    def test_wrong_secret(self, client):
        response = client.post("/api/career-tracks/cron/task-reminder", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_counts_failures(self, client):
        rows = [
            {"email": "a@example.com", "name": "A", "pending_count": 2, "target_name": "Google"},
            {"email": "b@example.com", "name": "B", "pending_count": 1, "target_name": "GATE"},
        ]

        with patch(f"{ROUTES}.gamification.get_pending_reminders", return_value=rows), \
             patch(f"{ROUTES}.send_task_reminder_email", side_effect=[None, ExternalServiceError("smtp", "down")]):
            response = client.post(
                "/api/career-tracks/cron/task-reminder",
                headers={"Authorization": "Bearer test-cron-secret"},
            )

        assert response.json() == {"success": True, "message": "Reminders sent: 1, failed: 1", "total": 2}
