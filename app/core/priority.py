"""Priority scoring and ranking of hypotheses.

A hypothesis is urgent to validate when it matters a lot and we know little
about it: ``score = impact * uncertainty``. Scores are derived on read and
never stored.
"""

from dataclasses import dataclass
from typing import Any, Literal

from app.core.errors import InvalidInput

PriorityLabel = Literal["High", "Medium", "Low"]

# Lower bounds of each band, evaluated from the top
HIGH_PRIORITY_THRESHOLD = 20
MEDIUM_PRIORITY_THRESHOLD = 15


@dataclass
class RankedHypothesis:
    """A hypothesis together with its derived priority."""
    hypothesis: dict[str, Any]
    score: int
    label: PriorityLabel

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.hypothesis,
            "priority_score": self.score,
            "priority_label": self.label,
        }


def _require_int(hypothesis: dict[str, Any], field_name: str) -> int:
    value = hypothesis.get(field_name)
    # NUMERIC columns and JSON clients can hand over 4.0 for 4
    if isinstance(value, float) and value.is_integer():
        return int(value)
    # bool is an int subclass but never a valid score input
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(
            f"Hypothesis {hypothesis.get('id', '?')} has non-numeric {field_name}: {value!r}"
        )
    return value


def priority_score(hypothesis: dict[str, Any]) -> int:
    """
    Compute the priority score of a hypothesis.

    Integral floats such as 4.0 count as integers; the 1-5 range of the
    inputs is not re-checked here.

    Raises:
        InvalidInput: If impact or uncertainty is missing, boolean, a string
            or a fractional number
    """
    return _require_int(hypothesis, "impact") * _require_int(hypothesis, "uncertainty")


def priority_label(score: int) -> PriorityLabel:
    """Classify a priority score into High (>=20), Medium (>=15) or Low."""
    if score >= HIGH_PRIORITY_THRESHOLD:
        return "High"
    if score >= MEDIUM_PRIORITY_THRESHOLD:
        return "Medium"
    return "Low"


def rank_hypotheses(hypotheses: list[dict[str, Any]]) -> list[RankedHypothesis]:
    """
    Rank hypotheses by descending priority score.

    Ties keep their input order.

    Raises:
        InvalidInput: If any hypothesis has non-numeric impact or uncertainty
    """
    scored = []
    for hypothesis in hypotheses:
        score = priority_score(hypothesis)
        scored.append(RankedHypothesis(hypothesis, score, priority_label(score)))

    # sorted() is stable
    return sorted(scored, key=lambda ranked: ranked.score, reverse=True)
