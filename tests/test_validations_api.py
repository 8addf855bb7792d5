"""Tests for validation endpoints and hypothesis updates driven by validations."""

from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.core.errors import ConflictError
from tests.fixtures_hypotheses import OTHER_USER_ID, TEST_USER_ID, make_hypothesis, make_project


@pytest.fixture
def client(authed_app, owned_project):
    return TestClient(authed_app)


@pytest.fixture
def hypothesis():
    row = make_hypothesis(status="検証中", confidence=2)
    with patch("app.api.hypothesis_helpers.get_hypothesis", return_value=row):
        yield row


def _validation(hypothesis_id, **fields):
    return {
        "id": str(uuid4()),
        "hypothesis_id": hypothesis_id,
        "method": "interview",
        "result": "成功",
        "created_at": "2025-06-02T10:00:00+00:00",
        **fields,
    }


class TestCreateValidation:
    def test_validation_only(self, client, hypothesis):
        validation = _validation(hypothesis["id"])

        with patch(
            "app.api.validations.create_validation", return_value=validation
        ) as mock_create, patch("app.api.hypothesis_helpers.record_version") as mock_record:
            response = client.post(
                f"/v1/hypotheses/{hypothesis['id']}/validations",
                json={"method": "interview", "result": "成功"},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["validation"]["id"] == validation["id"]
        assert data["hypothesis"] is None
        assert data["recorded_version"] is None
        mock_create.assert_called_once()
        assert mock_create.call_args[0][1] == {"method": "interview", "result": "成功"}
        mock_record.assert_not_called()

    def test_update_is_versioned_with_validation_as_cause(self, client, hypothesis):
        validation = _validation(hypothesis["id"])
        version = {
            "id": str(uuid4()),
            "hypothesis_id": hypothesis["id"],
            "version_number": 4,
            "status": hypothesis["status"],
            "reason": "Five of six interviewees confirmed",
        }
        updated = {**hypothesis, "status": "成立", "confidence": 4}

        with patch("app.api.validations.create_validation", return_value=validation), \
             patch(
                 "app.api.hypothesis_helpers.record_version", return_value=version
             ) as mock_record, \
             patch(
                 "app.api.hypothesis_helpers.update_hypothesis", return_value=updated
             ) as mock_update:
            response = client.post(
                f"/v1/hypotheses/{hypothesis['id']}/validations",
                json={
                    "method": "interview",
                    "hypothesis_update": {
                        "status": "成立",
                        "confidence": 4,
                        "reason": "Five of six interviewees confirmed",
                    },
                },
            )

        assert response.status_code == 200
        data = response.json()
        assert data["hypothesis"]["status"] == "成立"
        assert data["recorded_version"]["version_number"] == 4

        record_kwargs = mock_record.call_args.kwargs
        assert mock_record.call_args[0][0] == hypothesis
        assert record_kwargs["validation_id"] == validation["id"]
        assert record_kwargs["reason"] == "Five of six interviewees confirmed"
        assert record_kwargs["actor_id"] == str(TEST_USER_ID)
        mock_update.assert_called_once_with(
            hypothesis["id"], {"status": "成立", "confidence": 4}
        )

    def test_conflict_keeps_validation_and_skips_update(self, client, hypothesis):
        validation = _validation(hypothesis["id"])

        with patch(
            "app.api.validations.create_validation", return_value=validation
        ) as mock_create, patch(
            "app.api.hypothesis_helpers.record_version",
            side_effect=ConflictError(hypothesis["id"], 3),
        ), patch("app.api.hypothesis_helpers.update_hypothesis") as mock_update:
            response = client.post(
                f"/v1/hypotheses/{hypothesis['id']}/validations",
                json={"method": "survey", "hypothesis_update": {"status": "否定"}},
            )

        assert response.status_code == 207
        data = response.json()
        assert data["validation"]["id"] == validation["id"]
        assert data["hypothesis"] is None
        assert data["hypothesis_update_error"]["status_code"] == 409
        assert "retry" in data["hypothesis_update_error"]["detail"]
        mock_create.assert_called_once()
        mock_update.assert_not_called()

    def test_empty_hypothesis_update_saves_nothing(self, client, hypothesis):
        with patch("app.api.validations.create_validation") as mock_create:
            response = client.post(
                f"/v1/hypotheses/{hypothesis['id']}/validations",
                json={"method": "survey", "hypothesis_update": {"reason": "no change"}},
            )

        assert response.status_code == 400
        mock_create.assert_not_called()

    def test_null_clears_confidence(self, client, hypothesis):
        validation = _validation(hypothesis["id"])

        with patch("app.api.validations.create_validation", return_value=validation), \
             patch("app.api.hypothesis_helpers.record_version", return_value={
                 "id": str(uuid4()), "hypothesis_id": hypothesis["id"], "version_number": 1,
             }), \
             patch(
                 "app.api.hypothesis_helpers.update_hypothesis",
                 return_value={**hypothesis, "confidence": None},
             ) as mock_update:
            response = client.post(
                f"/v1/hypotheses/{hypothesis['id']}/validations",
                json={"method": "survey", "hypothesis_update": {"confidence": None}},
            )

        assert response.status_code == 200
        mock_update.assert_called_once_with(hypothesis["id"], {"confidence": None})

    def test_null_status_rejected(self, client, hypothesis):
        with patch("app.api.validations.create_validation") as mock_create:
            response = client.post(
                f"/v1/hypotheses/{hypothesis['id']}/validations",
                json={"method": "survey", "hypothesis_update": {"status": None}},
            )

        assert response.status_code == 422
        mock_create.assert_not_called()

    def test_method_required(self, client, hypothesis):
        response = client.post(
            f"/v1/hypotheses/{hypothesis['id']}/validations", json={"result": "成功"}
        )

        assert response.status_code == 422

    def test_unknown_hypothesis(self, client):
        with patch("app.api.hypothesis_helpers.get_hypothesis", return_value=None), \
             patch("app.api.validations.create_validation") as mock_create:
            response = client.post(
                f"/v1/hypotheses/{uuid4()}/validations", json={"method": "interview"}
            )

        assert response.status_code == 404
        mock_create.assert_not_called()


class TestListValidations:
    def test_list(self, client, hypothesis):
        hypothesis_id = hypothesis["id"]
        rows = [_validation(hypothesis_id), _validation(hypothesis_id, result=None)]

        with patch("app.api.validations.list_validations", return_value=rows):
            response = client.get(f"/v1/hypotheses/{hypothesis_id}/validations")

        assert response.status_code == 200
        assert response.json()["total"] == 2

    def test_store_failure(self, client, hypothesis):
        with patch("app.api.validations.list_validations", side_effect=OSError("down")):
            response = client.get(f"/v1/hypotheses/{hypothesis['id']}/validations")

        assert response.status_code == 500


class TestUpdateValidation:
    def test_update(self, client, hypothesis):
        validation = _validation(hypothesis["id"])
        updated = {**validation, "learnings": "Price is the blocker"}

        with patch("app.api.access.get_validation", return_value=validation), \
             patch("app.api.validations.update_validation", return_value=updated) as mock_update:
            response = client.patch(
                f"/v1/validations/{validation['id']}",
                json={"learnings": "Price is the blocker"},
            )

        assert response.status_code == 200
        assert response.json()["learnings"] == "Price is the blocker"
        assert mock_update.call_args[0][1] == {"learnings": "Price is the blocker"}

    def test_empty_update(self, client):
        response = client.patch(f"/v1/validations/{uuid4()}", json={})

        assert response.status_code == 400

    def test_unknown_validation(self, client):
        with patch("app.api.access.get_validation", return_value=None), \
             patch("app.api.validations.update_validation") as mock_update:
            response = client.patch(f"/v1/validations/{uuid4()}", json={"result": "失敗"})

        assert response.status_code == 404
        mock_update.assert_not_called()


class TestOtherUsersProject:
    @pytest.fixture
    def foreign(self, owned_project):
        """Layered over the owned project so the other owner wins."""
        with patch(
            "app.api.access.get_project",
            return_value=make_project(user_id=str(OTHER_USER_ID)),
        ):
            yield

    def test_create_is_404(self, client, hypothesis, foreign):
        with patch("app.api.validations.create_validation") as mock_create:
            response = client.post(
                f"/v1/hypotheses/{hypothesis['id']}/validations", json={"method": "interview"}
            )

        assert response.status_code == 404
        mock_create.assert_not_called()

    def test_list_is_404(self, client, hypothesis, foreign):
        with patch("app.api.validations.list_validations") as mock_list:
            response = client.get(f"/v1/hypotheses/{hypothesis['id']}/validations")

        assert response.status_code == 404
        mock_list.assert_not_called()

    def test_edit_is_404(self, client, hypothesis, foreign):
        validation = _validation(hypothesis["id"])

        with patch("app.api.access.get_validation", return_value=validation), \
             patch("app.api.validations.update_validation") as mock_update:
            response = client.patch(
                f"/v1/validations/{validation['id']}", json={"result": "失敗"}
            )

        assert response.status_code == 404
        mock_update.assert_not_called()
