"""Hypothesis version history database operations.

Rows in ``hypothesis_versions`` are append-only. The table carries a
``UNIQUE (hypothesis_id, version_number)`` constraint (see
``migrations/0001_hypothesis_tracker.sql``); a duplicate insert is reported
as :class:`ConflictError`.
"""

from typing import Any
from uuid import UUID

from postgrest.exceptions import APIError

from app.core.errors import ConflictError
from app.core.logging import get_logger
from app.db.supabase_client import UNIQUE_VIOLATION, get_supabase

logger = get_logger(__name__)


def get_max_version_number(hypothesis_id: UUID | str) -> int | None:
    """
    Get the highest recorded version number for a hypothesis.

    Args:
        hypothesis_id: Hypothesis UUID

    Returns:
        Highest version_number, or None if the hypothesis has no history

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("hypothesis_versions")
            .select("version_number")
            .eq("hypothesis_id", str(hypothesis_id))
            .order("version_number", desc=True)
            .limit(1)
            .execute()
        )

        rows = response.data or []
        if not rows:
            return None
        return rows[0]["version_number"]

    except Exception as e:
        logger.error(
            f"Failed to read latest version for hypothesis {hypothesis_id}: {e}",
            extra={"hypothesis_id": str(hypothesis_id)},
        )
        raise


def insert_hypothesis_version(version_row: dict[str, Any]) -> dict[str, Any]:
    """
    Insert one hypothesis version snapshot.

    Args:
        version_row: Row to insert; must contain hypothesis_id and version_number

    Returns:
        Inserted row as dict

    Raises:
        ConflictError: If the version number is already taken for the hypothesis
        Exception: If database operation fails for any other reason
    """
    supabase = get_supabase()
    hypothesis_id = str(version_row["hypothesis_id"])
    version_number = version_row["version_number"]

    try:
        response = supabase.table("hypothesis_versions").insert(version_row).execute()

        if not response.data:
            raise ValueError("No data returned from insert_hypothesis_version")

        version = response.data[0]
        logger.info(
            f"Recorded version {version_number} of hypothesis {hypothesis_id}",
            extra={"hypothesis_id": hypothesis_id, "version_number": version_number},
        )
        return version

    except APIError as e:
        if e.code == UNIQUE_VIOLATION:
            logger.warning(
                f"Version {version_number} of hypothesis {hypothesis_id} already exists",
                extra={"hypothesis_id": hypothesis_id, "version_number": version_number},
            )
            raise ConflictError(hypothesis_id, version_number) from e
        logger.error(
            f"Failed to insert hypothesis version: {e}",
            extra={"hypothesis_id": hypothesis_id, "version_number": version_number},
        )
        raise

    except Exception as e:
        logger.error(
            f"Failed to insert hypothesis version: {e}",
            extra={"hypothesis_id": hypothesis_id, "version_number": version_number},
        )
        raise


def list_hypothesis_versions(hypothesis_id: UUID | str) -> list[dict[str, Any]]:
    """
    List the full version history of a hypothesis, oldest first.

    Args:
        hypothesis_id: Hypothesis UUID

    Returns:
        List of version rows ordered by version_number ascending

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("hypothesis_versions")
            .select("*")
            .eq("hypothesis_id", str(hypothesis_id))
            .order("version_number")
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(
            f"Failed to list versions for hypothesis {hypothesis_id}: {e}",
            extra={"hypothesis_id": str(hypothesis_id)},
        )
        raise


def get_hypothesis_version(
    hypothesis_id: UUID | str,
    version_number: int,
) -> dict[str, Any] | None:
    """
    Get a single version of a hypothesis.

    Args:
        hypothesis_id: Hypothesis UUID
        version_number: Version to fetch

    Returns:
        Version row, or None if not found

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("hypothesis_versions")
            .select("*")
            .eq("hypothesis_id", str(hypothesis_id))
            .eq("version_number", version_number)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    except Exception as e:
        logger.error(
            f"Failed to get version {version_number} of hypothesis {hypothesis_id}: {e}",
            extra={"hypothesis_id": str(hypothesis_id), "version_number": version_number},
        )
        raise
