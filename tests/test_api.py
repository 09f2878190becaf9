# tests/test_api.py

"""
API Endpoint Tests - FastAPI endpoints over mocked repositories
"""

import pytest
from fastapi import status

from speechcoach.core.exceptions import DatabaseConnectionException, EntityNotFoundException


# HEALTH / ROOT


class TestHealthEndpoint:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["taxonomy"] == "healthy: 110 skills"

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "running"


# SKILLS


class TestSkillsEndpoints:

    def test_list_skills_grouped_by_range(self, client):
        response = client.get("/api/v1/skills")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total_skills"] == 110
        assert [c["category"] for c in data["categories"]] == [
            "Nervousness", "Voice", "Body Language", "Expressions", "Language", "Ultimate Level",
        ]
        assert sum(len(c["skills"]) for c in data["categories"]) == 110

    def test_get_skill(self, client):
        response = client.get("/api/v1/skills/25")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == "Filler sounds"
        assert data["category"] == "Voice"
        assert data["listed_category"] == "Language"
        assert data["is_good_skill"] is False

    def test_unknown_skill_404(self, client):
        response = client.get("/api/v1/skills/111")
        assert response.status_code == status.HTTP_404_NOT_FOUND


# EVALUATION SCORES


class TestScoresEndpoints:

    def test_get_scores(self, client, skill_score_repo, sample_evaluation_id, scenario_a_rows):
        skill_score_repo.get_by_evaluation_id.return_value = scenario_a_rows

        response = client.get(f"/api/v1/evaluations/{sample_evaluation_id}/scores")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        categories = {c["category"]: c for c in data["categories"]}
        assert categories["Nervousness"]["raw_points"] == -4.0
        assert categories["Voice"]["score"] == 80.0
        assert data["final"]["final_score"] == 22.0
        assert data["final"]["divider_source"] == "default"
        assert data["final"]["score_calculation"] == "4.00 ÷ 0.1818 = 22.00"

    def test_get_scores_not_found(self, client, evaluation_repo, sample_evaluation_id):
        evaluation_repo.get_custom_divider.side_effect = EntityNotFoundException("Evaluation", sample_evaluation_id)
        response = client.get(f"/api/v1/evaluations/{sample_evaluation_id}/scores")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_database_unavailable_503(self, client, skill_score_repo, sample_evaluation_id):
        skill_score_repo.get_by_evaluation_id.side_effect = DatabaseConnectionException()
        response = client.get(f"/api/v1/evaluations/{sample_evaluation_id}/scores")
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_invalid_evaluation_id_422(self, client):
        response = client.get("/api/v1/evaluations/not-a-uuid/scores")
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_save_scores(self, client, skill_score_repo, sample_evaluation_id):
        response = client.post(
            f"/api/v1/evaluations/{sample_evaluation_id}/scores",
            json={"scores": [
                {"skill_id": 7, "actual_score": 8},
                {"skill_id": 999, "actual_score": 1},
            ]},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["skipped_skill_ids"] == [999]
        assert data["rows_written"] == 1
        skill_score_repo.upsert_manual_scores.assert_called_once()

    def test_save_scores_requires_rows(self, client, sample_evaluation_id):
        response = client.post(f"/api/v1/evaluations/{sample_evaluation_id}/scores", json={"scores": []})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# AI ANALYSIS


class TestAnalysisEndpoints:

    def test_preview(self, client, skill_score_repo, sample_evaluation_id, sample_analysis):
        response = client.post(
            f"/api/v1/evaluations/{sample_evaluation_id}/analysis/preview",
            json={"analysis": sample_analysis["analysis"]},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        mapped = {e["key"]: e for e in data["mapped_entries"]}
        assert mapped["tricolon"]["skill_id"] == 95
        assert mapped["filler_language"]["score"] == -3.0
        skill_score_repo.upsert_ai_scores.assert_not_called()

    def test_preview_raw_response(self, client, sample_evaluation_id):
        response = client.post(
            f"/api/v1/evaluations/{sample_evaluation_id}/analysis/preview",
            json={"raw_response": '```json\n{"analysis": {"tricolon": {"score": 6}}}\n```'},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["categories"][0]["raw_points"] == 6.0

    def test_preview_unparseable_raw_response_400(self, client, sample_evaluation_id):
        response = client.post(
            f"/api/v1/evaluations/{sample_evaluation_id}/analysis/preview",
            json={"raw_response": "sorry, no analysis"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_preview_requires_exactly_one_source(self, client, sample_evaluation_id):
        response = client.post(f"/api/v1/evaluations/{sample_evaluation_id}/analysis/preview", json={})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_commit(self, client, skill_score_repo, sample_evaluation_id, sample_analysis):
        response = client.post(
            f"/api/v1/evaluations/{sample_evaluation_id}/analysis/commit",
            json={"analysis": sample_analysis["analysis"]},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["rows_written"] == 2
        skill_score_repo.upsert_ai_scores.assert_called_once()

    def test_commit_nothing_mapped_400(self, client, sample_evaluation_id):
        response = client.post(
            f"/api/v1/evaluations/{sample_evaluation_id}/analysis/commit",
            json={"analysis": {"made_up": {"score": 1}}},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


# DIVIDER


class TestDividerEndpoint:

    def test_set_divider(self, client, skill_score_repo, evaluation_repo, sample_evaluation_id, scenario_a_rows):
        skill_score_repo.get_by_evaluation_id.return_value = scenario_a_rows

        response = client.put(f"/api/v1/evaluations/{sample_evaluation_id}/divider", json={"divider": 0.5})

        assert response.status_code == status.HTTP_200_OK
        final = response.json()["final"]
        assert final["final_score"] == 8.0
        assert final["divider"] == 0.5
        assert final["divider_source"] == "custom"
        evaluation_repo.update_divider.assert_called_once()

    @pytest.mark.parametrize("divider,message", [
        (0, "Divider must be greater than zero"),
        (-5, "Divider must be greater than zero"),
        ("NaN", "Divider must be a valid number"),
        ("abc", "Divider must be a valid number"),
        (None, "Divider must be a valid number"),
    ])
    def test_invalid_divider_400(self, client, evaluation_repo, sample_evaluation_id, divider, message):
        response = client.put(f"/api/v1/evaluations/{sample_evaluation_id}/divider", json={"divider": divider})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"]["message"] == message
        evaluation_repo.update_divider.assert_not_called()

    def test_divider_unknown_evaluation_404(self, client, evaluation_repo, sample_evaluation_id):
        evaluation_repo.update_divider.side_effect = EntityNotFoundException("Evaluation", sample_evaluation_id)
        response = client.put(f"/api/v1/evaluations/{sample_evaluation_id}/divider", json={"divider": 1.5})
        assert response.status_code == status.HTTP_404_NOT_FOUND


# CRITICAL SKILLS


class TestCriticalSkillsEndpoints:

    def test_get(self, client, evaluation_repo, sample_evaluation_id):
        evaluation_repo.get_critical_skills.return_value = [95, 1]
        response = client.get(f"/api/v1/evaluations/{sample_evaluation_id}/critical-skills")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["strengths"] == [{"id": 95, "name": "Tricolon", "category": "Language"}]
        assert data["improvements"] == [{"id": 1, "name": "Swaying", "category": "Nervousness"}]

    def test_put(self, client, evaluation_repo, sample_evaluation_id):
        response = client.put(
            f"/api/v1/evaluations/{sample_evaluation_id}/critical-skills",
            json={"skill_ids": [88, 88, 500, 7]},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["skill_ids"] == [7, 88]
        evaluation_repo.update_critical_skills.assert_called_once()
