# =============================================================================
# tests/test_review_extraction.py - Review extraction and aggregation
# =============================================================================
# LLM calls are mocked; aggregation is pure.
# =============================================================================

from unittest.mock import patch

import pytest

from studentpath.core.exceptions import ExternalServiceError, ValidationFailedError
from studentpath.schemas.schemas import UserRole
from studentpath.services import review_extraction
from studentpath.services.review_extraction import aggregate_extractions


def ext(skills=(), rounds=(), total=3, difficulty="Medium", confidence=0.5):
    return {
        "skills": list(skills),
        "rounds": list(rounds),
        "totalRounds": total,
        "difficultyLevel": difficulty,
        "confidenceScore": confidence,
    }


class TestAggregateExtractions:

    def test_empty_input_defaults(self):
        assert aggregate_extractions([]) == {
            "skills": [],
            "rounds": [],
            "totalRounds": 0,
            "difficultyLevel": "Medium",
            "confidenceScore": 0,
        }

    def test_skills_below_threshold_dropped(self):
        # 6 reviews -> threshold ceil(1.2) = 2
        extractions = [
            ext(skills=["DSA", "Java"]),
            ext(skills=["dsa", "DBMS"]),
            ext(skills=[" Dsa "]),
            ext(skills=["dbms"]),
            ext(),
            ext(),
        ]
        result = aggregate_extractions(extractions)
        assert result["skills"] == ["Dsa", "Dbms"]

    def test_single_review_keeps_everything(self):
        result = aggregate_extractions([ext(skills=["python"], rounds=[{"name": "aptitude test", "type": "Written"}])])
        assert result["skills"] == ["Python"]
        assert result["rounds"] == [{"name": "Aptitude test", "type": "Written"}]

    def test_round_type_comes_from_first_mention(self):
        extractions = [
            ext(rounds=[{"name": "Technical Interview", "type": "Technical"}]),
            ext(rounds=[{"name": "technical interview", "type": "HR"}]),
        ]
        result = aggregate_extractions(extractions)
        assert result["rounds"] == [{"name": "Technical interview", "type": "Technical"}]

    def test_total_rounds_rounds_half_up(self):
        result = aggregate_extractions([ext(total=2), ext(total=3)])
        assert result["totalRounds"] == 3

    def test_difficulty_is_confidence_weighted(self):
        extractions = [
            ext(difficulty="Easy", confidence=0.9),
            ext(difficulty="Hard", confidence=0.5),
            ext(difficulty="Hard", confidence=0.5),
        ]
        assert aggregate_extractions(extractions)["difficultyLevel"] == "Hard"

    def test_difficulty_tie_goes_to_harder_level(self):
        extractions = [
            ext(difficulty="Medium", confidence=0.5),
            ext(difficulty="Hard", confidence=0.5),
        ]
        assert aggregate_extractions(extractions)["difficultyLevel"] == "Hard"

    def test_confidence_is_mean_rounded_half_up(self):
        result = aggregate_extractions([ext(confidence=0.5), ext(confidence=0.75)])
        assert result["confidenceScore"] == 0.63


class TestExtraction:

    @patch("studentpath.services.review_extraction.ReviewExtractionStore")
    @patch("studentpath.services.review_extraction.get_llm_client")
    def test_missing_fields_get_defaults(self, mock_client, mock_store):
        mock_client.return_value.complete_json.return_value = {"skills": ["DSA"]}

        result = review_extraction.extract_from_review({"id": 1, "rating": 4, "comment": "ok"}, placement_id=3)

        assert result == ext(skills=["DSA"], total=0, difficulty="Medium", confidence=0.5)
        mock_store.return_value.insert.assert_called_once()

    @patch("studentpath.services.review_extraction.get_llm_client")
    def test_llm_failure_raises(self, mock_client):
        mock_client.return_value.complete_json.side_effect = ValueError("bad json")

        with pytest.raises(ExternalServiceError):
            review_extraction.extract_from_review({"id": 1, "rating": 4})

    @patch("studentpath.services.review_extraction.get_reviews_for_extraction", return_value=[])
    def test_no_reviews_is_a_validation_error(self, _):
        with pytest.raises(ValidationFailedError) as exc:
            review_extraction.run_placement_extraction(7)
        assert exc.value.status_code == 400

    @patch("studentpath.services.review_extraction.run_placement_extraction")
    def test_background_run_swallows_failures(self, mock_run):
        mock_run.side_effect = ExternalServiceError("llm", "down")
        # Must not raise
        review_extraction.run_extraction_in_background(7)
        mock_run.assert_called_once_with(7)


class TestMalformedExtraction:

    @patch("studentpath.services.review_extraction.ReviewExtractionStore")
    @patch("studentpath.services.review_extraction.get_llm_client")
    def test_numeric_strings_are_coerced(self, mock_client, _):
        mock_client.return_value.complete_json.return_value = {
            "skills": ["DSA", 7, None],
            "rounds": [{"name": "HR", "type": "HR"}, "Coding"],
            "totalRounds": "3",
            "confidenceScore": "0.8",
        }

        result = review_extraction.extract_from_review({"id": 1, "rating": 4})

        assert result["skills"] == ["DSA"]
        assert result["rounds"] == [{"name": "HR", "type": "HR"}]
        assert result["totalRounds"] == 3
        assert result["confidenceScore"] == 0.8
        assert aggregate_extractions([result])["totalRounds"] == 3

    @patch("studentpath.services.review_extraction.ReviewExtractionStore")
    @patch("studentpath.services.review_extraction.get_llm_client")
    def test_unusable_values_fall_back_to_defaults(self, mock_client, _):
        mock_client.return_value.complete_json.return_value = {
            "skills": "DSA, Java",
            "rounds": {"name": "HR"},
            "totalRounds": "three",
            "difficultyLevel": ["Hard"],
            "confidenceScore": "high",
        }

        result = review_extraction.extract_from_review({"id": 1, "rating": 4})

        assert result == ext(total=0, difficulty="Medium", confidence=0.5)

    @pytest.mark.parametrize("reply", [["not", "a", "dict"], "plain text", 42])
    @patch("studentpath.services.review_extraction.get_llm_client")
    def test_non_object_reply_raises(self, mock_client, reply):
        mock_client.return_value.complete_json.return_value = reply

        with pytest.raises(ExternalServiceError):
            review_extraction.extract_from_review({"id": 1, "rating": 4})

    @patch("studentpath.services.review_extraction.save_extraction")
    @patch("studentpath.services.review_extraction.get_reviews_for_extraction")
    @patch("studentpath.services.review_extraction.get_llm_client")
    def test_route_reports_bad_reply_as_service_error(self, mock_client, mock_reviews, mock_save, client, login_as):
        login_as(UserRole.student)
        mock_reviews.return_value = [{"id": 1, "rating": 4, "comment": "fine"}]
        mock_client.return_value.complete_json.return_value = ["not", "a", "dict"]

        response = client.post("/api/career-tracks/companies/5/extract")

        assert response.status_code == 502
        assert response.json()["code"] == "EXTERNAL_SERVICE_ERROR"
        mock_save.assert_not_called()
