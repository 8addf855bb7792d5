"""Tests for project endpoints, analytics and roadmap."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.core.errors import DraftGenerationError
from app.core.schemas_hypotheses import HypothesisDraft
from tests.fixtures_hypotheses import (
    OTHER_USER_ID,
    PROJECT_ID,
    TEST_USER_ID,
    make_hypothesis,
    make_project,
)


@pytest.fixture
def client(authed_app, owned_project):
    return TestClient(authed_app)


class TestCreateProject:
    def test_create_without_seeding(self, client):
        with patch("app.api.projects.create_project", return_value=make_project()) as mock_create, \
             patch("app.api.projects.generate_hypothesis_drafts") as mock_generate:
            response = client.post("/v1/projects/", json={"name": "Receipt automation"})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(PROJECT_ID)
        assert data["generated_hypotheses"] == 0
        assert mock_create.call_args.kwargs["user_id"] == TEST_USER_ID
        assert mock_create.call_args.kwargs["status"] == "未着手"
        mock_generate.assert_not_called()

    def test_create_with_seeded_hypotheses(self, client):
        drafts = [
            HypothesisDraft(title=f"Draft {i}", impact=3, uncertainty=4, confidence=2)
            for i in range(5)
        ]

        with patch("app.api.projects.create_project", return_value=make_project()), \
             patch(
                 "app.api.projects.generate_hypothesis_drafts",
                 new=AsyncMock(return_value=drafts),
             ) as mock_generate, \
             patch(
                 "app.api.projects.create_hypotheses",
                 side_effect=lambda pid, payloads, created_by: payloads,
             ) as mock_insert:
            response = client.post(
                "/v1/projects/",
                json={"name": "Receipt automation", "auto_generate_hypotheses": True},
            )

        assert response.status_code == 200
        assert response.json()["generated_hypotheses"] == 5
        assert mock_generate.call_args.kwargs["count"] == 5
        payloads = mock_insert.call_args[0][1]
        assert payloads[0]["title"] == "Draft 0"
        assert payloads[0]["status"] == "未検証"

    def test_seed_failure_keeps_project(self, client):
        with patch("app.api.projects.create_project", return_value=make_project()) as mock_create, \
             patch(
                 "app.api.projects.generate_hypothesis_drafts",
                 new=AsyncMock(side_effect=DraftGenerationError("AI draft request failed")),
             ), \
             patch("app.api.projects.create_hypotheses") as mock_insert:
            response = client.post(
                "/v1/projects/",
                json={"name": "Receipt automation", "auto_generate_hypotheses": True},
            )

        assert response.status_code == 502
        assert "Project created" in response.json()["detail"]
        mock_create.assert_called_once()
        mock_insert.assert_not_called()

    def test_invalid_status(self, client):
        response = client.post("/v1/projects/", json={"name": "X", "status": "archived"})

        assert response.status_code == 422


class TestReadProjects:
    def test_list_owned_projects(self, client):
        with patch("app.api.projects.list_projects", return_value=[make_project()]) as mock_list:
            response = client.get("/v1/projects/", params={"search": "receipt"})

        assert response.status_code == 200
        assert response.json()["total"] == 1
        mock_list.assert_called_once_with(TEST_USER_ID, status=None, search="receipt")

    def test_get_with_count(self, client):
        with patch("app.api.projects.count_project_hypotheses", return_value=7):
            response = client.get(f"/v1/projects/{PROJECT_ID}")

        assert response.status_code == 200
        assert response.json()["hypothesis_count"] == 7

    def test_get_missing(self, client):
        with patch("app.api.access.get_project", return_value=None):
            response = client.get(f"/v1/projects/{uuid4()}")

        assert response.status_code == 404


class TestUpdateProject:
    def test_update_status(self, client):
        with patch(
            "app.api.projects.update_project", return_value=make_project(status="進行中")
        ) as mock_update:
            response = client.patch(f"/v1/projects/{PROJECT_ID}", json={"status": "進行中"})

        assert response.status_code == 200
        assert response.json()["status"] == "進行中"
        mock_update.assert_called_once_with(PROJECT_ID, {"status": "進行中"})

    def test_empty_update(self, client):
        response = client.patch(f"/v1/projects/{PROJECT_ID}", json={})

        assert response.status_code == 400

    def test_missing_project(self, client):
        with patch("app.api.access.get_project", return_value=None), \
             patch("app.api.projects.update_project") as mock_update:
            response = client.patch(f"/v1/projects/{PROJECT_ID}", json={"name": "New"})

        assert response.status_code == 404
        mock_update.assert_not_called()


class TestAnalytics:
    def test_dashboard_numbers(self, client):
        hypotheses = [
            make_hypothesis(status="成立", impact=5, uncertainty=4),
            make_hypothesis(status="未検証", impact=1, uncertainty=2),
        ]
        validations = [{"hypothesis_id": hypotheses[0]["id"], "result": "成功"}]
        kpis = [{"id": str(uuid4()), "name": "Signups", "current_value": 30, "target_value": 60}]

        with patch("app.api.projects.list_hypotheses", return_value=hypotheses), \
             patch(
                 "app.api.projects.list_validations_for_hypotheses", return_value=validations
             ) as mock_validations, \
             patch("app.api.projects.list_active_kpis", return_value=kpis):
            response = client.get(f"/v1/projects/{PROJECT_ID}/analytics")

        assert response.status_code == 200
        data = response.json()
        assert data["hypotheses_total"] == 2
        assert data["hypothesis_statuses"] == {"成立": 1, "未検証": 1}
        assert data["validation_results"] == {"成功": 1}
        assert data["avg_impact"] == 3.0
        assert data["kpis"][0]["progress"] == 50.0
        mock_validations.assert_called_once_with([h["id"] for h in hypotheses])

    def test_kpi_failure_still_renders(self, client):
        with patch("app.api.projects.list_hypotheses", return_value=[]), \
             patch("app.api.projects.list_validations_for_hypotheses", return_value=[]), \
             patch("app.api.projects.list_active_kpis", side_effect=OSError("kpi table missing")):
            response = client.get(f"/v1/projects/{PROJECT_ID}/analytics")

        assert response.status_code == 200
        assert response.json()["kpis"] == []


class TestRoadmap:
    def test_roadmap(self, client):
        first = make_hypothesis(title="first", impact=5, uncertainty=5)
        second = make_hypothesis(title="second", impact=2, uncertainty=2)

        with patch("app.api.projects.list_hypotheses", return_value=[second, first]), \
             patch(
                 "app.api.projects.list_validations_for_hypotheses",
                 return_value=[{"hypothesis_id": first["id"]}],
             ):
            response = client.get(f"/v1/projects/{PROJECT_ID}/roadmap")

        assert response.status_code == 200
        data = response.json()
        assert [s["title"] for s in data["steps"]] == ["first", "second"]
        assert [s["step_status"] for s in data["steps"]] == ["completed", "current"]
        assert data["current_step"] == 1
        assert data["progress"] == 50


class TestOtherUsersProject:
    @pytest.fixture
    def foreign(self, owned_project):
        """Layered over the owned project so the other owner wins."""
        with patch(
            "app.api.access.get_project",
            return_value=make_project(user_id=str(OTHER_USER_ID)),
        ):
            yield

    def test_get_is_404(self, client, foreign):
        with patch("app.api.projects.count_project_hypotheses") as mock_count:
            response = client.get(f"/v1/projects/{PROJECT_ID}")

        assert response.status_code == 404
        mock_count.assert_not_called()

    def test_update_is_404(self, client, foreign):
        with patch("app.api.projects.update_project") as mock_update:
            response = client.patch(f"/v1/projects/{PROJECT_ID}", json={"name": "Mine now"})

        assert response.status_code == 404
        mock_update.assert_not_called()

    @pytest.mark.parametrize("view", ["analytics", "roadmap"])
    def test_views_are_404(self, client, foreign, view):
        with patch("app.api.projects.list_hypotheses") as mock_list:
            response = client.get(f"/v1/projects/{PROJECT_ID}/{view}")

        assert response.status_code == 404
        mock_list.assert_not_called()
