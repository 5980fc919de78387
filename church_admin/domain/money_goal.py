"""
Money goal accounting rules

Pure functions only: no session, no ORM queries. Everything here works on
ORM rows, plain mappings or bare numbers so that the API read model, the
summary endpoint and the export fold share one implementation.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional

GOAL_STATUS_ACTIVE = "active"
GOAL_STATUS_COMPLETED = "completed"
GOAL_STATUS_CANCELLED = "cancelled"
GOAL_STATUSES = (GOAL_STATUS_ACTIVE, GOAL_STATUS_COMPLETED, GOAL_STATUS_CANCELLED)

UNKNOWN_EDITOR = "Unknown"

# (public field name recorded in history, model attribute)
TRACKED_FIELDS = (
    ("name", "name"),
    ("amountGoal", "amount_goal"),
    ("years", "years"),
    ("status", "status"),
    ("categoryId", "category_id"),
)


def _read(source: Any, attr: str, default: Any = None) -> Any:
    if isinstance(source, Mapping):
        return source.get(attr, default)
    return getattr(source, attr, default)


# ============================================================================
# Contribution aggregation / progress
# ============================================================================


def sum_contributions(contributions: Iterable[Any]) -> float:
    """
    Sum the amounts of one goal's contributions

    Args:
        contributions: ORM rows / mappings with an ``amount`` field, or numbers

    Returns:
        Sum of amounts (0.0 for an empty sequence)
    """
    total = 0.0
    for contribution in contributions:
        if isinstance(contribution, (int, float)):
            total += contribution
        else:
            total += _read(contribution, "amount", 0)
    return total


def _percentage(reached: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return max(0.0, min(100.0, reached / target * 100))


@dataclass(frozen=True)
class GoalProgress:
    """Contribution-derived figures of one goal"""
    total_contributions: float
    progress_percentage: float
    remaining_amount: float

    @property
    def reached_goal(self) -> float:
        return self.total_contributions


def compute_progress(amount_goal: float, total_contributions: float) -> GoalProgress:
    """
    Turn a target and a reached amount into progress figures.

    A zero (or negative) target yields 0% instead of dividing by zero.
    Percentage is clamped to [0, 100], remaining amount floored at 0.
    """
    return GoalProgress(
        total_contributions=total_contributions,
        progress_percentage=_percentage(total_contributions, amount_goal),
        remaining_amount=max(0.0, amount_goal - total_contributions),
    )


def goal_progress(goal: Any) -> GoalProgress:
    """Progress of a goal row (or mapping) with its loaded contributions"""
    total = sum_contributions(_read(goal, "contributions", None) or [])
    return compute_progress(_read(goal, "amount_goal", 0), total)


# ============================================================================
# Summary
# ============================================================================


class GoalFigures(NamedTuple):
    """Minimal per-goal input of the summary fold"""
    amount_goal: float
    total_contributions: float
    status: str


@dataclass(frozen=True)
class GoalSummary:
    total_goals: int = 0
    active_goals: int = 0
    completed_goals: int = 0
    total_target_amount: float = 0.0
    total_reached_amount: float = 0.0
    overall_progress: float = 0.0


def summarize_goals(goals: Iterable[Any]) -> GoalSummary:
    """
    Fold per-goal figures into cross-goal totals

    Args:
        goals: GoalFigures, or any row/mapping exposing ``amount_goal``,
            ``total_contributions`` and ``status``

    Returns:
        GoalSummary. Reached amount is a sum of per-goal sums, overall
        progress is 0 when the aggregate target is 0.
    """
    total_goals = 0
    active_goals = 0
    completed_goals = 0
    total_target = 0.0
    total_reached = 0.0

    for goal in goals:
        status = _read(goal, "status")
        total_goals += 1
        if status == GOAL_STATUS_ACTIVE:
            active_goals += 1
        elif status == GOAL_STATUS_COMPLETED:
            completed_goals += 1
        total_target += _read(goal, "amount_goal", 0)
        total_reached += _read(goal, "total_contributions", 0)

    return GoalSummary(
        total_goals=total_goals,
        active_goals=active_goals,
        completed_goals=completed_goals,
        total_target_amount=total_target,
        total_reached_amount=total_reached,
        overall_progress=_percentage(total_reached, total_target),
    )


# ============================================================================
# Edit history
# ============================================================================


@dataclass(frozen=True)
class FieldChange:
    field: str
    previous_value: Any
    new_value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "previousValue": self.previous_value,
            "newValue": self.new_value,
        }


@dataclass(frozen=True)
class EditHistoryEntry:
    """One audit record: who changed which tracked fields, and when"""
    timestamp: str
    edited_by: Any
    editor_name: str
    changes: List[FieldChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "editedBy": self.edited_by,
            "editorName": self.editor_name,
            "changes": [c.to_dict() for c in self.changes],
        }


def resolve_editor_name(name: Optional[str], email: Optional[str]) -> str:
    """Display name of an editor: name, else email, else "Unknown" """
    return name or email or UNKNOWN_EDITOR


def diff_goal_changes(current: Any, payload: Mapping[str, Any]) -> List[FieldChange]:
    """
    Compare an update payload against the stored goal

    Args:
        current: goal row or mapping keyed by model attribute
        payload: supplied values keyed by model attribute; a missing key
            means "not supplied", None is a real value

    Returns:
        Changes in TRACKED_FIELDS order; keys outside TRACKED_FIELDS are ignored
    """
    changes = []
    for public_name, attr in TRACKED_FIELDS:
        if attr not in payload:
            continue
        previous = _read(current, attr)
        proposed = payload[attr]
        if proposed != previous:
            changes.append(FieldChange(public_name, previous, proposed))
    return changes


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with milliseconds and Z suffix: 2024-05-01T10:00:00.000Z"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_history_entry(
    changes: List[FieldChange],
    editor_id: Any,
    editor_name: str,
    now: Optional[datetime] = None
) -> EditHistoryEntry:
    if now is None:
        now = datetime.now(timezone.utc)
    return EditHistoryEntry(
        timestamp=format_timestamp(now),
        edited_by=editor_id,
        editor_name=editor_name,
        changes=list(changes),
    )


def parse_edit_history(raw: Optional[str]) -> List[Dict[str, Any]]:
    """Deserialize the stored history; None or empty string gives []"""
    if not raw:
        return []
    history = json.loads(raw)
    return history if isinstance(history, list) else []


def serialize_edit_history(history: List[Dict[str, Any]]) -> str:
    return json.dumps(history, ensure_ascii=False)


def append_history_entry(
    history: List[Dict[str, Any]],
    entry: EditHistoryEntry
) -> List[Dict[str, Any]]:
    """Return a new list with the entry appended; the input list is left as is"""
    return [*history, entry.to_dict()]
