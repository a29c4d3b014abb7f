# =============================================================================
# tests/test_resume_routes.py - Resume upload and analysis endpoints
# =============================================================================

from types import SimpleNamespace
from unittest.mock import patch

from studentpath.core.exceptions import ExternalServiceError
from studentpath.schemas.schemas import UserRole

ROUTES = "studentpath.api.routes.resume_routes"


def fake_row(**values):
    """Minimal stand-in for a SQLAlchemy Row."""
    return SimpleNamespace(_mapping=values, **values)


class TestUpload:

    def test_no_file(self, client, login_as):
        login_as(UserRole.student)
        response = client.post("/api/resume/upload")
        assert response.status_code == 400
        assert response.json()["detail"] == "No file uploaded"

    def test_wrong_type(self, client, login_as):
        login_as(UserRole.student)
        response = client.post("/api/resume/upload", files={"file": ("cv.txt", b"hello", "text/plain")})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid file type. Only PDF and DOCX files are accepted."

    def test_unparseable_file_still_stored(self, client, login_as, fake_db):
        login_as(UserRole.student, user_id=6)
        fake_db.db.execute.return_value.fetchone.return_value = SimpleNamespace(id=21, created_at=None)

        with patch(f"{ROUTES}.get_db_session", fake_db.session), \
             patch(f"{ROUTES}.upload_file", return_value="https://bucket/resumes/r.pdf"), \
             patch(f"{ROUTES}.RawResumeService"):
            response = client.post(
                "/api/resume/upload",
                files={"file": ("cv.pdf", b"%PDF-broken", "application/pdf")},
            )

        assert response.status_code == 200
        resume = response.json()["resume"]
        assert resume["id"] == 21
        assert resume["file_type"] == "pdf"
        assert resume["parsed_text_preview"] == ""


class TestAnalyze:

    def test_missing_fields(self, client, login_as):
        login_as(UserRole.student)
        response = client.post("/api/resume/analyze", json={"resumeId": 1})
        assert response.json()["detail"] == "Missing required fields: resumeId, targetRole"

    def test_missing_company(self, client, login_as):
        login_as(UserRole.student)
        response = client.post("/api/resume/analyze", json={"resumeId": 1, "targetRole": "SDE"})
        assert response.json()["detail"] == "Missing required field: companyId or companyName"

    def test_resume_of_someone_else(self, client, login_as, fake_db):
        login_as(UserRole.student)
        fake_db.db.execute.return_value.fetchone.return_value = None

        with patch(f"{ROUTES}.get_db_session", fake_db.session):
            response = client.post(
                "/api/resume/analyze",
                json={"resumeId": 1, "targetRole": "SDE", "companyName": "Acme"},
            )

        assert response.status_code == 404

    def test_unreadable_resume(self, client, login_as, fake_db):
        login_as(UserRole.student)
        fake_db.db.execute.return_value.fetchone.return_value = fake_row(
            id=1, parsed_text="", file_url="https://bucket/r.pdf", file_type="pdf",
        )

        with patch(f"{ROUTES}.get_db_session", fake_db.session), \
             patch(f"{ROUTES}.download_file", side_effect=ExternalServiceError("storage", "gone")):
            response = client.post(
                "/api/resume/analyze",
                json={"resumeId": 1, "targetRole": "SDE", "companyName": "Acme"},
            )

        assert response.status_code == 400
        assert response.json()["detail"] == "Resume text could not be extracted. Please re-upload your resume."


class TestCompare:

    def test_requires_resume_id(self, client, login_as):
        login_as(UserRole.student)
        response = client.get("/api/resume/compare")
        assert response.status_code == 400
