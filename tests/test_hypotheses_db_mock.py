"""Tests for hypotheses, validations and projects database operations with mocked Supabase."""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest


def _mock_client(module: str):
    patcher = patch(f"app.db.{module}.get_supabase")
    mock_get_supabase = patcher.start()
    mock_client = MagicMock()
    mock_get_supabase.return_value = mock_client
    return patcher, mock_client


@pytest.fixture
def mock_supabase():
    """Fixture to mock Supabase client for hypotheses."""
    patcher, client = _mock_client("hypotheses")
    yield client
    patcher.stop()


@pytest.fixture
def mock_validations_supabase():
    patcher, client = _mock_client("validations")
    yield client
    patcher.stop()


@pytest.fixture
def mock_projects_supabase():
    patcher, client = _mock_client("projects")
    yield client
    patcher.stop()


class TestHypotheses:
    def test_list_without_status_filter(self, mock_supabase):
        from app.db.hypotheses import list_hypotheses

        project_id = uuid4()
        chain = mock_supabase.table.return_value.select.return_value.eq.return_value
        chain.order.return_value.execute.return_value = MagicMock(data=[{"id": "h1"}])

        result = list_hypotheses(project_id)

        assert result == [{"id": "h1"}]
        mock_supabase.table.return_value.select.return_value.eq.assert_called_with(
            "project_id", str(project_id)
        )
        chain.eq.assert_not_called()

    def test_list_with_status_filter(self, mock_supabase):
        from app.db.hypotheses import list_hypotheses

        chain = mock_supabase.table.return_value.select.return_value.eq.return_value
        chain.eq.return_value.order.return_value.execute.return_value = MagicMock(data=[])

        assert list_hypotheses(uuid4(), status="成立") == []
        chain.eq.assert_called_with("status", "成立")

    def test_get_missing_returns_none(self, mock_supabase):
        from app.db.hypotheses import get_hypothesis

        chain = mock_supabase.table.return_value.select.return_value.eq.return_value
        chain.limit.return_value.execute.return_value = MagicMock(data=[])

        assert get_hypothesis(uuid4()) is None

    def test_bulk_create_stamps_project_and_creator(self, mock_supabase):
        from app.db.hypotheses import create_hypotheses

        project_id = uuid4()
        user_id = uuid4()
        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[{"id": "h1"}, {"id": "h2"}]
        )

        created = create_hypotheses(
            project_id, [{"title": "A"}, {"title": "B"}], created_by=user_id
        )

        assert len(created) == 2
        rows = mock_supabase.table.return_value.insert.call_args[0][0]
        assert all(r["project_id"] == str(project_id) for r in rows)
        assert all(r["created_by"] == str(user_id) for r in rows)

    def test_bulk_create_empty_skips_insert(self, mock_supabase):
        from app.db.hypotheses import create_hypotheses

        assert create_hypotheses(uuid4(), []) == []
        mock_supabase.table.return_value.insert.assert_not_called()

    def test_create_without_creator_omits_column(self, mock_supabase):
        from app.db.hypotheses import create_hypothesis

        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[{"id": "h1", "title": "A"}]
        )

        assert create_hypothesis(uuid4(), {"title": "A"})["id"] == "h1"
        rows = mock_supabase.table.return_value.insert.call_args[0][0]
        assert "created_by" not in rows[0]

    def test_update_requires_fields(self, mock_supabase):
        from app.db.hypotheses import update_hypothesis

        with pytest.raises(ValueError):
            update_hypothesis(uuid4(), {})
        mock_supabase.table.assert_not_called()

    def test_update_missing_hypothesis(self, mock_supabase):
        from app.db.hypotheses import update_hypothesis

        chain = mock_supabase.table.return_value.update.return_value.eq.return_value
        chain.execute.return_value = MagicMock(data=[])

        with pytest.raises(ValueError, match="not found"):
            update_hypothesis(uuid4(), {"title": "New"})

    def test_update_success(self, mock_supabase):
        from app.db.hypotheses import update_hypothesis

        chain = mock_supabase.table.return_value.update.return_value.eq.return_value
        chain.execute.return_value = MagicMock(data=[{"id": "h1", "title": "New"}])

        assert update_hypothesis("h1", {"title": "New"})["title"] == "New"
        mock_supabase.table.return_value.update.assert_called_once_with({"title": "New"})


class TestValidations:
    def test_create_links_hypothesis(self, mock_validations_supabase):
        from app.db.validations import create_validation

        hypothesis_id = uuid4()
        mock_validations_supabase.table.return_value.insert.return_value.execute.return_value = (
            MagicMock(data=[{"id": "v1", "method": "interview"}])
        )

        result = create_validation(hypothesis_id, {"method": "interview"})

        assert result["id"] == "v1"
        data = mock_validations_supabase.table.return_value.insert.call_args[0][0]
        assert data["hypothesis_id"] == str(hypothesis_id)

    def test_list_for_no_hypotheses_skips_query(self, mock_validations_supabase):
        from app.db.validations import list_validations_for_hypotheses

        assert list_validations_for_hypotheses([]) == []
        mock_validations_supabase.table.assert_not_called()


class TestProjects:
    def test_update_filters_unknown_fields(self, mock_projects_supabase):
        from app.db.projects import update_project

        chain = mock_projects_supabase.table.return_value.update.return_value.eq.return_value
        chain.execute.return_value = MagicMock(data=[{"id": "p1", "name": "N"}])

        update_project("p1", {"name": "N", "user_id": "someone-else", "status": None})

        mock_projects_supabase.table.return_value.update.assert_called_once_with({"name": "N"})

    def test_update_with_only_unknown_fields(self, mock_projects_supabase):
        from app.db.projects import update_project

        with pytest.raises(ValueError):
            update_project("p1", {"user_id": "x"})

    def test_count_hypotheses(self, mock_projects_supabase):
        from app.db.projects import count_project_hypotheses

        chain = mock_projects_supabase.table.return_value.select.return_value.eq.return_value
        chain.execute.return_value = MagicMock(count=4)

        assert count_project_hypotheses(uuid4()) == 4
        mock_projects_supabase.table.assert_called_with("hypotheses")
