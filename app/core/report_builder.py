"""Report drafts built from a project's hypotheses, validations and KPIs.

Each report type lays the project's figures out as text sections. Sections
the team has to write themselves (conclusions, issues, next steps) carry a
prompt to fill them in. Like project_analytics, everything here works on
rows that were already loaded.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from app.core.errors import InvalidInput
from app.core.project_analytics import build_roadmap
from app.core.schemas_reports import REPORT_TYPE_LABELS

CONCLUDED_STATUSES = ("成立", "否定")
IN_PROGRESS_STATUS = "検証中"
RECENT_ACTIVITY_DAYS = 30
KEY_VALIDATION_LIMIT = 10


def _section(title: str, text: str) -> dict[str, Any]:
    return {"type": "text", "content": {"title": title, "text": text}}


def _placeholder(title: str) -> dict[str, Any]:
    return _section(title, f"ここに{title}を入力してください。")


def format_report_date(moment: datetime) -> str:
    """Japanese long date, e.g. 2025年6月1日."""
    return f"{moment.year}年{moment.month}月{moment.day}日"


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _overview(project: dict[str, Any], subject: str) -> dict[str, Any]:
    text = f"このレポートは{project.get('name')}プロジェクトの{subject}をまとめたものです。"
    if project.get("description"):
        text += f"\n\n{project['description']}"
    return _section("概要", text)


def _group_by_hypothesis(validations: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    grouped: dict[str, list[dict[str, Any]]] = {}
    for v in validations:
        grouped.setdefault(str(v.get("hypothesis_id")), []).append(v)
    return grouped


def _hypothesis_validation_sections(
    project: dict[str, Any],
    hypotheses: list[dict[str, Any]],
    validations: list[dict[str, Any]],
    kpis: list[dict[str, Any]],
    now: datetime,
) -> list[dict[str, Any]]:
    concluded = [h for h in hypotheses if h.get("status") in CONCLUDED_STATUSES]

    if not concluded:
        pending = "\n".join(f"・{h.get('title')}" for h in hypotheses) or "なし"
        return [
            _overview(project, "仮説検証状況"),
            _section(
                "仮説検証サマリー",
                f"現在、検証済みの仮説はありません。全{len(hypotheses)}件の仮説が未検証状態です。",
            ),
            _section("未検証の仮説", pending),
            _placeholder("次のステップ"),
        ]

    held = sum(1 for h in concluded if h.get("status") == "成立")
    by_hypothesis = _group_by_hypothesis(validations)

    sections = [
        _overview(project, "仮説検証結果"),
        _section(
            "仮説検証サマリー",
            f"全{len(hypotheses)}件の仮説のうち、{len(concluded)}件が検証済みです。\n\n"
            f"成立: {held}件\n"
            f"否定: {len(concluded) - held}件\n"
            f"未検証: {len(hypotheses) - len(concluded)}件",
        ),
    ]

    for h in concluded:
        attempts = by_hypothesis.get(str(h.get("id")), [])
        details = "\n".join(
            f"{i}. {v.get('method') or ''}：{v.get('result') or ''}"
            for i, v in enumerate(attempts, start=1)
        )
        sections.append(
            _section(
                f"仮説: {h.get('title')}",
                f"状態: {h.get('status')}\n\n"
                f"前提: {h.get('assumption') or 'なし'}\n\n"
                f"解決策: {h.get('solution') or 'なし'}\n\n"
                f"期待される効果: {h.get('expected_effect') or 'なし'}\n\n"
                f"検証回数: {len(attempts)}回\n\n"
                f"検証詳細:\n{details or 'なし'}",
            )
        )

    sections.append(_placeholder("結論と次のステップ"))
    return sections


def _kpi_line(kpi: dict[str, Any]) -> str:
    unit = f" {kpi['unit']}" if kpi.get("unit") else ""
    current = kpi.get("current_value")
    target = kpi.get("target_value")
    current_text = "未設定" if current is None else f"{current}{unit}"
    target_text = "未設定" if target is None else f"{target}{unit}"
    return f"- {kpi.get('name')}: {current_text} / 目標 {target_text}"


def _progress_sections(
    project: dict[str, Any],
    hypotheses: list[dict[str, Any]],
    validations: list[dict[str, Any]],
    kpis: list[dict[str, Any]],
    now: datetime,
) -> list[dict[str, Any]]:
    since = now - timedelta(days=RECENT_ACTIVITY_DAYS)
    recent = []
    for v in validations:
        created = _parse_timestamp(v.get("created_at"))
        if created is not None and created >= since:
            recent.append(v)

    concluded = sum(1 for h in hypotheses if h.get("status") in CONCLUDED_STATUSES)
    in_progress = sum(1 for h in hypotheses if h.get("status") == IN_PROGRESS_STATUS)

    summary = (
        f"仮説総数: {len(hypotheses)}件\n"
        f"検証済み仮説: {concluded}件\n"
        f"進行中仮説: {in_progress}件\n\n"
        f"直近の検証アクティビティ: {len(recent)}件"
    )
    if kpis:
        summary += "\n\nKPI指標達成状況:\n" + "\n".join(_kpi_line(kpi) for kpi in kpis)

    return [
        _overview(project, "進捗状況"),
        _section("プロジェクト進捗サマリー", summary),
        _placeholder("今月の主な成果"),
        _placeholder("現在の課題"),
        _placeholder("次月のアクション"),
    ]


def _roadmap_sections(
    project: dict[str, Any],
    hypotheses: list[dict[str, Any]],
    validations: list[dict[str, Any]],
    kpis: list[dict[str, Any]],
    now: datetime,
) -> list[dict[str, Any]]:
    steps = build_roadmap(hypotheses, validations)["steps"]

    if not steps:
        return [
            _overview(project, "ロードマップ"),
            _section("ロードマップ状況", "現在、ロードマップに載せる仮説がありません。"),
            _section(
                "次のステップ",
                "仮説を登録し、優先度の高いものから段階的に検証を進めることをお勧めします。",
            ),
        ]

    def step_state(step: dict[str, Any]) -> str:
        if step["validations_count"] == 0:
            return "未着手"
        if step.get("status") in CONCLUDED_STATUSES:
            return f"完了（{step['status']}）"
        return "検証中"

    states = [step_state(step) for step in steps]
    completed = sum(1 for s in states if s.startswith("完了"))
    in_progress = states.count("検証中")
    progress = round(completed / len(steps) * 100)

    sections = [
        _overview(project, "仮説ロードマップの進捗状況"),
        _section(
            "ロードマップ進捗サマリー",
            f"全{len(steps)}ステップのうち、{completed}ステップが完了しています（進捗率{progress}%）。\n\n"
            f"- 完了ステップ: {completed}件\n"
            f"- 検証中ステップ: {in_progress}件\n"
            f"- 未着手ステップ: {len(steps) - completed - in_progress}件",
        ),
    ]

    for index, (step, state) in enumerate(zip(steps, states), start=1):
        sections.append(
            _section(
                f"ステップ {index}: {step.get('title')}",
                f"状態: {state}\n\n"
                f"優先度: {step['priority_label']}（{step['priority_score']}）\n\n"
                f"内容: {step.get('assumption') or 'なし'}\n\n"
                f"解決策: {step.get('solution') or 'なし'}\n\n"
                f"期待される効果: {step.get('expected_effect') or 'なし'}\n\n"
                f"検証回数: {step['validations_count']}回",
            )
        )

    sections.append(_placeholder("今後の課題と方向性"))
    return sections


def _final_sections(
    project: dict[str, Any],
    hypotheses: list[dict[str, Any]],
    validations: list[dict[str, Any]],
    kpis: list[dict[str, Any]],
    now: datetime,
) -> list[dict[str, Any]]:
    held = {str(h.get("id")): h for h in hypotheses if h.get("status") == "成立"}
    rejected = sum(1 for h in hypotheses if h.get("status") == "否定")

    key_validations = sorted(
        (v for v in validations if str(v.get("hypothesis_id")) in held),
        key=lambda v: v.get("created_at") or "",
        reverse=True,
    )[:KEY_VALIDATION_LIMIT]

    summary = (
        f"このレポートは{project.get('name')}プロジェクトの成果と学びをまとめた最終報告書です。"
    )
    if project.get("description"):
        summary += f"\n\n{project['description']}"
    summary += (
        f"\n\nプロジェクト期間を通じて、全{len(hypotheses)}件の仮説を検証し、"
        f"{len(held)}件が成立、{rejected}件が否定されました。"
    )

    findings = "\n\n".join(
        f"{i}. {held[str(v.get('hypothesis_id'))].get('title')}：{v.get('result') or '結果なし'}"
        for i, v in enumerate(key_validations, start=1)
    ) or "該当する検証結果がありません。"

    return [
        _section("エグゼクティブサマリー", summary),
        _section(
            "主要な発見と検証結果",
            f"プロジェクトから得られた主要な発見と洞察は以下の通りです：\n\n{findings}",
        ),
        _placeholder("市場機会と可能性"),
        _placeholder("結論と推奨アクション"),
        _placeholder("次のステップ"),
    ]


SECTION_BUILDERS: dict[str, Callable[..., list[dict[str, Any]]]] = {
    "hypothesis_validation": _hypothesis_validation_sections,
    "progress": _progress_sections,
    "roadmap": _roadmap_sections,
    "final": _final_sections,
}


def build_report(
    report_type: str,
    project: dict[str, Any],
    hypotheses: list[dict[str, Any]],
    validations: list[dict[str, Any]],
    kpis: list[dict[str, Any]] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Draft a report of the given type.

    Args:
        report_type: hypothesis_validation, progress, roadmap or final
        project: Project row (name, description)
        hypotheses: Hypothesis rows of the project
        validations: Validation rows of those hypotheses
        kpis: KPI metric rows (used by the progress report)
        now: Report date (defaults to the current UTC time)

    Returns:
        Dict with ``title`` and ``content`` (``{"sections": [...]}``)

    Raises:
        InvalidInput: If the report type is unknown or a hypothesis has a corrupt score
    """
    builder = SECTION_BUILDERS.get(report_type)
    if builder is None:
        raise InvalidInput(f"Unknown report type: {report_type!r}")

    now = now or datetime.now(timezone.utc)
    sections = builder(project, hypotheses, validations, kpis or [], now)

    label = REPORT_TYPE_LABELS[report_type]

    return {
        "title": f"{project.get('name')} {label} ({format_report_date(now)})",
        "content": {"sections": sections},
    }
