"""Project analytics and validation roadmap.

Pure functions over rows already loaded from the store, so the dashboard and
roadmap endpoints stay a thin fetch-then-compute layer.
"""

from typing import Any

from app.core.priority import rank_hypotheses

DEFAULT_HYPOTHESIS_STATUS = "未検証"
DEFAULT_VALIDATION_RESULT = "未完了"


def _average(values: list[Any]) -> float | None:
    numbers = [v for v in values if isinstance(v, (int, float)) and not isinstance(v, bool)]
    if not numbers:
        return None
    return sum(numbers) / len(numbers)


def kpi_progress(current_value: float | None, target_value: float | None) -> float:
    """Progress towards a KPI target in percent, capped at 100."""
    if not target_value or current_value is None:
        return 0.0
    return min(current_value / target_value * 100, 100.0)


def compute_project_stats(
    hypotheses: list[dict[str, Any]],
    validations: list[dict[str, Any]],
    kpis: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """
    Aggregate the analytics dashboard numbers of one project.

    Args:
        hypotheses: Hypothesis rows of the project
        validations: Validation rows; rows of other projects are ignored
        kpis: Active KPI metric rows (optional)

    Returns:
        Dict with totals, status/result breakdowns, averages and KPI progress
    """
    statuses: dict[str, int] = {}
    for h in hypotheses:
        status = h.get("status") or DEFAULT_HYPOTHESIS_STATUS
        statuses[status] = statuses.get(status, 0) + 1

    hypothesis_ids = {h["id"] for h in hypotheses if h.get("id")}
    project_validations = [v for v in validations if v.get("hypothesis_id") in hypothesis_ids]

    results: dict[str, int] = {}
    for v in project_validations:
        result = v.get("result") or DEFAULT_VALIDATION_RESULT
        results[result] = results.get(result, 0) + 1

    timestamps = [
        h.get("updated_at") or h.get("created_at")
        for h in hypotheses
        if h.get("updated_at") or h.get("created_at")
    ]

    kpi_rows = [
        {**kpi, "progress": kpi_progress(kpi.get("current_value"), kpi.get("target_value"))}
        for kpi in (kpis or [])
    ]

    return {
        "hypotheses_total": len(hypotheses),
        "hypothesis_statuses": statuses,
        "validations_total": len(project_validations),
        "validation_results": results,
        "avg_impact": _average([h.get("impact") for h in hypotheses]),
        "avg_uncertainty": _average([h.get("uncertainty") for h in hypotheses]),
        "avg_confidence": _average([h.get("confidence") for h in hypotheses]),
        "last_updated": max(timestamps) if timestamps else None,
        "kpis": kpi_rows,
    }


def build_roadmap(
    hypotheses: list[dict[str, Any]],
    validations: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    Lay hypotheses out as validation steps in priority order.

    A step with at least one validation is ``completed``. The current step is
    the one right after the leading run of completed steps (clamped to the
    last step); unvalidated steps after it are ``locked``.

    Returns:
        Dict with ``steps``, ``current_step`` and ``progress`` (0-100)
    """
    counts: dict[str, int] = {}
    for v in validations:
        hid = v.get("hypothesis_id")
        if hid:
            counts[hid] = counts.get(hid, 0) + 1

    ranked = rank_hypotheses(hypotheses)
    if not ranked:
        return {"steps": [], "current_step": 0, "progress": 0}

    validated = [counts.get(r.hypothesis.get("id"), 0) for r in ranked]

    current = 0
    for count in validated:
        if count == 0:
            break
        current += 1
    current = min(current, len(ranked) - 1)

    steps = []
    for index, (entry, count) in enumerate(zip(ranked, validated)):
        if count > 0:
            state = "completed"
        elif index == current:
            state = "current"
        else:
            state = "locked"

        steps.append(
            {
                **entry.to_dict(),
                "validations_count": count,
                "step_status": state,
            }
        )

    completed = sum(1 for count in validated if count > 0)

    return {
        "steps": steps,
        "current_step": current,
        "progress": round(completed / len(ranked) * 100),
    }
