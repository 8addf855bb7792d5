"""
Hypothesis version history.

Before a hypothesis is overwritten, its current state is copied into an
immutable ``hypothesis_versions`` row. Version numbers per hypothesis run
1, 2, 3, ... without gaps or duplicates:

- the next number is derived from the highest recorded one
- the store rejects a duplicate ``(hypothesis_id, version_number)``
- on such a conflict the read-then-insert sequence is repeated, a bounded
  number of times, against the fresh maximum

Usage:
    from app.core.hypothesis_versioning import record_version

    version = record_version(old_hypothesis, validation_id=vid, reason="...", actor_id=uid)
    update_hypothesis(old_hypothesis["id"], changes)

Recording never touches the live hypothesis; applying the change is the
caller's job and should only happen once recording succeeded.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from app.core.config import get_settings
from app.core.errors import ConflictError, InsertFailure, InvalidInput, ReadFailure
from app.db.hypothesis_versions import (
    get_hypothesis_version,
    get_max_version_number,
    insert_hypothesis_version,
    list_hypothesis_versions,
)

# Hypothesis fields copied into every snapshot
VERSIONED_FIELDS = (
    "title",
    "type",
    "assumption",
    "solution",
    "expected_effect",
    "impact",
    "uncertainty",
    "confidence",
)


@dataclass
class FieldChange:
    """Represents a change to a single versioned field."""
    field_name: str
    old_value: Any
    new_value: Any
    change_type: str  # "added", "removed", "modified"

    def to_dict(self) -> dict:
        return {
            "field": self.field_name,
            "old": self.old_value,
            "new": self.new_value,
            "type": self.change_type,
        }


@dataclass
class VersionDiff:
    """Represents the diff between two snapshots of a hypothesis."""
    hypothesis_id: str
    from_version: int
    to_version: int | None  # None means the live hypothesis
    changes: list[FieldChange]
    summary: str

    @property
    def has_changes(self) -> bool:
        return len(self.changes) > 0

    @property
    def changed_fields(self) -> list[str]:
        return [c.field_name for c in self.changes]

    def to_dict(self) -> dict:
        return {
            "hypothesis_id": self.hypothesis_id,
            "from_version": self.from_version,
            "to_version": self.to_version,
            "changes": [c.to_dict() for c in self.changes],
            "summary": self.summary,
            "has_changes": self.has_changes,
        }


def build_version_row(
    hypothesis: dict[str, Any],
    version_number: int,
    validation_id: UUID | str | None = None,
    reason: str | None = None,
    actor_id: UUID | str | None = None,
) -> dict[str, Any]:
    """
    Build the snapshot row for one version of a hypothesis.

    ``updated_by`` is only present when an actor is known; leaving the key out
    lets the column keep its server default instead of an explicit null.
    """
    row: dict[str, Any] = {
        "hypothesis_id": str(hypothesis["id"]),
        "version_number": version_number,
    }
    for field_name in VERSIONED_FIELDS:
        row[field_name] = hypothesis.get(field_name)

    row["based_on_validation_id"] = str(validation_id) if validation_id else None
    row["reason"] = reason or ""

    if actor_id:
        row["updated_by"] = str(actor_id)

    return row


def record_version(
    hypothesis: dict[str, Any],
    validation_id: UUID | str | None = None,
    reason: str | None = None,
    actor_id: UUID | str | None = None,
    max_attempts: int | None = None,
) -> dict[str, Any]:
    """
    Snapshot the current state of a hypothesis as its next version.

    Args:
        hypothesis: Current (pre-update) hypothesis row; must carry ``id``
        validation_id: Validation that motivated the change (optional)
        reason: Free-text reason for the change (optional)
        actor_id: User making the change (optional)
        max_attempts: Total read-then-insert attempts when the version number
            is taken concurrently (defaults to VERSION_RECORD_MAX_ATTEMPTS)

    Returns:
        The inserted version row

    Raises:
        InvalidInput: If the hypothesis has no id
        ReadFailure: If the latest version number cannot be read
        ConflictError: If every attempt lost a concurrent race
        InsertFailure: If the insert fails for any other reason
    """
    hypothesis_id = hypothesis.get("id") if isinstance(hypothesis, dict) else None
    if not hypothesis_id:
        raise InvalidInput("Hypothesis must have an id to be versioned")

    if max_attempts is None:
        max_attempts = get_settings().VERSION_RECORD_MAX_ATTEMPTS
    if max_attempts < 1:
        raise InvalidInput("max_attempts must be at least 1")

    conflict: ConflictError | None = None

    for _ in range(max_attempts):
        try:
            latest = get_max_version_number(hypothesis_id)
        except Exception as e:
            raise ReadFailure(
                f"Could not read version history of hypothesis {hypothesis_id}"
            ) from e

        row = build_version_row(
            hypothesis,
            (latest or 0) + 1,
            validation_id=validation_id,
            reason=reason,
            actor_id=actor_id,
        )

        try:
            return insert_hypothesis_version(row)
        except ConflictError as e:
            conflict = e
        except Exception as e:
            raise InsertFailure(
                f"Could not record version {row['version_number']} of hypothesis {hypothesis_id}"
            ) from e

    raise conflict


def get_history(hypothesis_id: UUID | str) -> list[dict[str, Any]]:
    """Get every recorded version of a hypothesis, oldest first."""
    return list_hypothesis_versions(hypothesis_id)


def get_version(hypothesis_id: UUID | str, version_number: int) -> dict[str, Any] | None:
    """Get one recorded version of a hypothesis, or None."""
    return get_hypothesis_version(hypothesis_id, version_number)


def compute_field_changes(
    old_data: dict[str, Any],
    new_data: dict[str, Any],
) -> list[FieldChange]:
    """Compute changes of the versioned fields between two snapshots."""
    changes = []

    for field_name in VERSIONED_FIELDS:
        old_value = old_data.get(field_name)
        new_value = new_data.get(field_name)

        if old_value == new_value:
            continue

        if old_value in (None, ""):
            change_type = "added"
        elif new_value in (None, ""):
            change_type = "removed"
        else:
            change_type = "modified"

        changes.append(FieldChange(field_name, old_value, new_value, change_type))

    return changes


def summarize_changes(changes: list[FieldChange]) -> str:
    """One-line human summary of a list of field changes."""
    if not changes:
        return "No changes"

    names = [c.field_name for c in changes]
    if len(names) <= 3:
        return f"Changed {', '.join(names)}"
    return f"Changed {', '.join(names[:3])} and {len(names) - 3} more"


def compare_versions(
    old_snapshot: dict[str, Any],
    new_snapshot: dict[str, Any],
) -> VersionDiff:
    """
    Compare two snapshots of the same hypothesis.

    Either side may be a stored version row or the live hypothesis row; a row
    without ``version_number`` is treated as the live state.
    """
    hypothesis_id = old_snapshot.get("hypothesis_id") or old_snapshot.get("id")
    changes = compute_field_changes(old_snapshot, new_snapshot)

    return VersionDiff(
        hypothesis_id=str(hypothesis_id),
        from_version=old_snapshot.get("version_number", 0),
        to_version=new_snapshot.get("version_number"),
        changes=changes,
        summary=summarize_changes(changes),
    )
