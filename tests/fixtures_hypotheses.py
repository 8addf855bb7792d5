"""Deterministic ids and sample rows for hypothesis tracker tests."""

from uuid import UUID, uuid4

# Fixed deterministic IDs for repeatable tests
TEST_USER_ID = UUID("5f0c1a8e-2b7d-4c39-9e41-7a6d3b2c1f00")
PROJECT_ID = UUID("97e0dc34-feb9-48ca-a3a3-ba104d9e8203")
OTHER_USER_ID = UUID("c2d4e6f8-0a1b-4c3d-8e5f-6a7b8c9d0e1f")


def make_hypothesis(**fields):
    """A hypothesis row as the store returns it."""
    return {
        "id": str(uuid4()),
        "project_id": str(PROJECT_ID),
        "title": "Founders want automated bookkeeping",
        "type": "課題仮説",
        "assumption": "Founders spend hours on receipts",
        "solution": "Receipt capture app",
        "expected_effect": "Save 5h per month",
        "status": "未検証",
        "impact": 3,
        "uncertainty": 3,
        "confidence": 3,
        "created_at": "2025-06-01T09:00:00+00:00",
        **fields,
    }


def make_project(**fields):
    """A project row as the store returns it."""
    return {
        "id": str(PROJECT_ID),
        "name": "Receipt automation",
        "description": "Bookkeeping for solo founders",
        "status": "未着手",
        "user_id": str(TEST_USER_ID),
        "organization_id": None,
        "created_at": "2025-06-01T09:00:00+00:00",
        **fields,
    }
