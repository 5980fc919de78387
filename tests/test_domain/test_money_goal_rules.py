"""
Tests for money goal accounting rules (progress, summary, edit history)
"""
import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from church_admin.domain.money_goal import (
    GoalFigures,
    UNKNOWN_EDITOR,
    append_history_entry,
    build_history_entry,
    compute_progress,
    diff_goal_changes,
    format_timestamp,
    goal_progress,
    parse_edit_history,
    resolve_editor_name,
    serialize_edit_history,
    sum_contributions,
    summarize_goals,
)


# ============================================================================
# Contribution aggregation
# ============================================================================


def test_sum_contributions_empty():
    assert sum_contributions([]) == 0.0


def test_sum_contributions_mixed_sources():
    """Rows, mappings and bare numbers are all accepted"""
    rows = [SimpleNamespace(amount=100.0), {"amount": 50.0}, 25]
    assert sum_contributions(rows) == 175.0


def test_sum_contributions_is_order_sensitive_float_sum():
    """Plain sequential float addition, no rounding"""
    assert sum_contributions([0.1, 0.2]) == 0.1 + 0.2


# ============================================================================
# Progress
# ============================================================================


def test_progress_half_way():
    progress = compute_progress(1000.0, 250.0)
    assert progress.total_contributions == 250.0
    assert progress.reached_goal == 250.0
    assert progress.progress_percentage == 25.0
    assert progress.remaining_amount == 750.0


def test_progress_overshoot_is_capped():
    """Reached above target: 100%, nothing remaining"""
    progress = compute_progress(500.0, 800.0)
    assert progress.progress_percentage == 100.0
    assert progress.remaining_amount == 0.0


def test_progress_zero_target_is_zero_percent():
    progress = compute_progress(0.0, 100.0)
    assert progress.progress_percentage == 0.0
    assert progress.remaining_amount == 0.0


def test_progress_negative_reached_is_floored_at_zero():
    progress = compute_progress(100.0, -20.0)
    assert progress.progress_percentage == 0.0
    assert progress.remaining_amount == 120.0


def test_goal_progress_reads_loaded_contributions():
    goal = SimpleNamespace(
        amount_goal=200.0,
        contributions=[SimpleNamespace(amount=50.0), SimpleNamespace(amount=100.0)],
    )
    progress = goal_progress(goal)
    assert progress.total_contributions == 150.0
    assert progress.progress_percentage == 75.0
    assert progress.remaining_amount == 50.0


def test_goal_progress_without_contributions():
    progress = goal_progress({"amount_goal": 300.0, "contributions": None})
    assert progress.total_contributions == 0.0
    assert progress.remaining_amount == 300.0


# ============================================================================
# Summary
# ============================================================================


def test_summary_two_goals():
    summary = summarize_goals([
        GoalFigures(1000.0, 1000.0, "completed"),
        GoalFigures(500.0, 250.0, "active"),
    ])
    assert summary.total_goals == 2
    assert summary.active_goals == 1
    assert summary.completed_goals == 1
    assert summary.total_target_amount == 1500.0
    assert summary.total_reached_amount == 1250.0
    assert summary.overall_progress == pytest.approx(83.3333333, rel=1e-6)
    assert summary.overall_progress == min(100.0, 1250.0 / 1500.0 * 100)


def test_summary_cancelled_goals_count_only_in_total():
    summary = summarize_goals([
        GoalFigures(100.0, 0.0, "cancelled"),
        GoalFigures(100.0, 50.0, "active"),
    ])
    assert summary.total_goals == 2
    assert summary.active_goals == 1
    assert summary.completed_goals == 0
    assert summary.total_target_amount == 200.0


def test_summary_empty_set():
    summary = summarize_goals([])
    assert summary.total_goals == 0
    assert summary.total_target_amount == 0.0
    assert summary.overall_progress == 0.0


def test_summary_overall_progress_capped():
    summary = summarize_goals([GoalFigures(100.0, 400.0, "completed")])
    assert summary.overall_progress == 100.0


def test_summary_accepts_detailed_goal_dicts():
    """Same fold over already-fetched goals gives the same figures"""
    figures = [GoalFigures(1000.0, 0.1 + 0.2, "active"), GoalFigures(300.0, 0.7, "active")]
    detailed = [
        {"amount_goal": g.amount_goal, "total_contributions": g.total_contributions,
         "status": g.status, "name": "x"}
        for g in figures
    ]
    assert summarize_goals(detailed) == summarize_goals(figures)


# ============================================================================
# Edit history
# ============================================================================


def test_diff_records_only_changed_fields():
    """amountGoal 100 -> 150, name resubmitted unchanged: one change"""
    current = {"name": "Roof", "amount_goal": 100.0, "years": 2024, "status": "active", "category_id": None}
    changes = diff_goal_changes(current, {"name": "Roof", "amount_goal": 150.0})

    assert len(changes) == 1
    assert changes[0].field == "amountGoal"
    assert changes[0].previous_value == 100.0
    assert changes[0].new_value == 150.0


def test_diff_no_changes():
    current = {"name": "Roof", "amount_goal": 100.0, "years": 2024, "status": "active", "category_id": 3}
    assert diff_goal_changes(current, {"name": "Roof", "years": 2024, "category_id": 3}) == []


def test_diff_ignores_omitted_and_untracked_fields():
    current = {"name": "Roof", "amount_goal": 100.0, "years": 2024, "status": "active", "category_id": None}
    changes = diff_goal_changes(current, {"description": "new", "created_by": 9})
    assert changes == []


def test_diff_explicit_none_is_a_change():
    current = SimpleNamespace(name="Roof", amount_goal=100.0, years=2024, status="active", category_id=4)
    changes = diff_goal_changes(current, {"category_id": None})
    assert [(c.field, c.previous_value, c.new_value) for c in changes] == [("categoryId", 4, None)]


def test_diff_follows_tracked_field_order():
    current = {"name": "A", "amount_goal": 1.0, "years": 2024, "status": "active", "category_id": None}
    payload = {"status": "completed", "name": "B", "years": 2025}
    assert [c.field for c in diff_goal_changes(current, payload)] == ["name", "years", "status"]


def test_editor_name_fallbacks():
    assert resolve_editor_name("Pasteur Rakoto", "p@church.mg") == "Pasteur Rakoto"
    assert resolve_editor_name(None, "p@church.mg") == "p@church.mg"
    assert resolve_editor_name("", None) == UNKNOWN_EDITOR


def test_format_timestamp_utc_milliseconds():
    moment = datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)
    assert format_timestamp(moment) == "2024-05-01T10:00:00.123Z"


def test_history_entry_shape():
    current = {"name": "Roof", "amount_goal": 100.0, "years": 2024, "status": "active", "category_id": None}
    changes = diff_goal_changes(current, {"amount_goal": 150.0})
    entry = build_history_entry(
        changes,
        editor_id=7,
        editor_name="Pasteur Rakoto",
        now=datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc),
    )

    assert entry.to_dict() == {
        "timestamp": "2024-05-01T10:00:00.000Z",
        "editedBy": 7,
        "editorName": "Pasteur Rakoto",
        "changes": [{"field": "amountGoal", "previousValue": 100.0, "newValue": 150.0}],
    }


def test_parse_missing_history():
    assert parse_edit_history(None) == []
    assert parse_edit_history("") == []


def test_parse_non_list_history():
    assert parse_edit_history('{"unexpected": true}') == []


def test_append_keeps_previous_entries():
    first = build_history_entry([], editor_id=1, editor_name="A",
                                now=datetime(2024, 1, 1, tzinfo=timezone.utc))
    second = build_history_entry([], editor_id=2, editor_name="B",
                                 now=datetime(2024, 1, 2, tzinfo=timezone.utc))

    history = append_history_entry([], first)
    updated = append_history_entry(history, second)

    assert len(history) == 1
    assert [e["editedBy"] for e in updated] == [1, 2]


def test_serialized_history_round_trip_keeps_unicode():
    entry = build_history_entry([], editor_id=1, editor_name="Fanorenana Trano")
    raw = serialize_edit_history(append_history_entry([], entry))
    assert "Fanorenana" in raw
    assert parse_edit_history(raw) == json.loads(raw)
