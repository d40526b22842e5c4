"""Tests for goal progress and lifecycle."""

import pytest
from datetime import date, datetime, timedelta
from trackpro_analytics.analysis.event_policy import Direction
from trackpro_analytics.analysis.goals import (
    Goal,
    GoalStatus,
    Milestone,
    complete,
    complete_milestone,
    days_remaining,
    edit,
    ingest_record,
    progress_percent,
    reached_milestones,
    resolve_direction,
    status,
    supersede,
    update_progress,
    upcoming_deadlines,
)
from trackpro_analytics.analysis.personal_records import PerformanceRecord
from trackpro_analytics.errors import InvalidGoalError

TODAY = date(2025, 6, 1)


def sprint_goal(**overrides) -> Goal:
    values = dict(
        id="g1",
        title="Break 10.5",
        baseline_value=11.5,
        current_value=11.0,
        target_value=10.5,
        deadline=TODAY + timedelta(days=30),
        event="100m",
    )
    values.update(overrides)
    return Goal(**values)


def jump_goal(**overrides) -> Goal:
    values = dict(
        id="g2",
        title="Jump 7.5m",
        baseline_value=7.0,
        current_value=7.0,
        target_value=7.5,
        deadline=TODAY + timedelta(days=60),
        event="Long Jump",
    )
    values.update(overrides)
    return Goal(**values)


class TestProgress:
    """Test progress percentage."""

    def test_lower_is_better_halfway(self):
        """Test baseline 11.5, target 10.5, current 11.0 on the 100m."""
        assert progress_percent(sprint_goal()) == 50.0

    def test_higher_is_better(self):
        assert progress_percent(jump_goal(current_value=7.25)) == pytest.approx(50.0)
        assert progress_percent(jump_goal(current_value=7.5)) == 100.0

    def test_clamped(self):
        """Test that regression and overshoot stay in [0, 100]."""
        assert progress_percent(sprint_goal(current_value=12.0)) == 0.0
        assert progress_percent(sprint_goal(current_value=10.2)) == 100.0
        assert progress_percent(jump_goal(current_value=6.5)) == 0.0
        assert progress_percent(jump_goal(current_value=8.0)) == 100.0

    def test_monotonic_higher_is_better(self):
        """Test that a better current value never lowers progress."""
        previous = -1.0
        for current in (6.5, 7.0, 7.1, 7.3, 7.45, 7.5, 7.9):
            pct = progress_percent(jump_goal(current_value=current))
            assert pct >= previous
            previous = pct

    def test_monotonic_lower_is_better(self):
        """Test that a faster time never lowers progress."""
        previous = -1.0
        for current in (12.0, 11.5, 11.3, 11.0, 10.7, 10.5, 10.1):
            pct = progress_percent(sprint_goal(current_value=current))
            assert pct >= previous
            previous = pct

    def test_zero_width_range(self):
        """Test that baseline == target never divides by zero."""
        assert progress_percent(sprint_goal(baseline_value=10.5, current_value=10.5)) == 100.0
        assert progress_percent(sprint_goal(baseline_value=10.5, current_value=10.4)) == 100.0
        assert progress_percent(sprint_goal(baseline_value=10.5, current_value=10.8)) == 0.0

    def test_target_worse_than_baseline_rejected(self):
        """Test that a goal pointing the wrong way cannot be built or edited into."""
        with pytest.raises(InvalidGoalError):
            sprint_goal(target_value=12.0)
        with pytest.raises(InvalidGoalError):
            jump_goal(target_value=6.5)
        with pytest.raises(InvalidGoalError):
            edit(sprint_goal(), target_value=11.8)

    def test_status_never_raises_for_built_goals(self):
        """Test that derived status and deadlines are total over valid goals."""
        goals = [sprint_goal(id="a", deadline=TODAY - timedelta(days=3)), jump_goal(id="b")]
        assert [status(g, TODAY) for g in goals] == [GoalStatus.OVERDUE, GoalStatus.ACTIVE]
        assert [g.id for g in upcoming_deadlines(goals, TODAY, 90)] == ["a", "b"]

    def test_metric_goal(self):
        """Test a free-standing goal with an explicit direction."""
        goal = Goal(
            id="g3", title="Train 12 weeks", baseline_value=0, current_value=3, target_value=12,
            deadline=TODAY, metric_name="training weeks", direction=Direction.HIGHER_IS_BETTER,
        )
        assert progress_percent(goal) == pytest.approx(25.0)


class TestDirection:
    """Test direction resolution."""

    def test_event_direction_wins(self):
        assert resolve_direction(sprint_goal()) is Direction.LOWER_IS_BETTER
        assert resolve_direction(sprint_goal(direction=Direction.LOWER_IS_BETTER)) is Direction.LOWER_IS_BETTER

    def test_conflicting_direction_raises(self):
        with pytest.raises(InvalidGoalError):
            resolve_direction(sprint_goal(direction=Direction.HIGHER_IS_BETTER))

    def test_metric_without_direction_raises(self):
        with pytest.raises(InvalidGoalError):
            Goal(id="g3", title="Weeks", baseline_value=0, current_value=0, target_value=12,
                 deadline=TODAY, metric_name="training weeks")

    def test_invalid_construction(self):
        """Test that goals without a subject or with stored overdue status are rejected."""
        with pytest.raises(InvalidGoalError):
            sprint_goal(event=None)
        with pytest.raises(InvalidGoalError):
            sprint_goal(status=GoalStatus.OVERDUE)
        with pytest.raises(InvalidGoalError):
            sprint_goal(current_value=float("nan"))


class TestStatus:
    """Test the derived status and transitions."""

    def test_days_remaining(self):
        goal = sprint_goal()
        assert days_remaining(goal, TODAY) == 30
        assert days_remaining(goal, datetime(2025, 7, 2, 9, 30)) == -1

    def test_active_and_overdue(self):
        goal = sprint_goal()
        assert status(goal, TODAY) is GoalStatus.ACTIVE
        assert status(goal, goal.deadline) is GoalStatus.ACTIVE
        assert status(goal, goal.deadline + timedelta(days=1)) is GoalStatus.OVERDUE

    def test_reached_goal_is_never_overdue(self):
        goal = sprint_goal(current_value=10.5)
        assert status(goal, goal.deadline + timedelta(days=10)) is GoalStatus.ACTIVE

    def test_update_progress_completes(self):
        """Test that reaching 100% commits the goal as completed."""
        goal = update_progress(sprint_goal(), 10.9)
        assert goal.status is GoalStatus.ACTIVE
        assert goal.current_value == 10.9

        goal = update_progress(goal, 10.45)
        assert goal.status is GoalStatus.COMPLETED

    def test_completed_is_sticky(self):
        """Test that a completed goal stays completed after a regression or its deadline."""
        goal = update_progress(sprint_goal(), 10.4)
        goal = update_progress(goal, 11.4)
        assert goal.status is GoalStatus.COMPLETED
        assert status(goal, goal.deadline + timedelta(days=100)) is GoalStatus.COMPLETED

    def test_complete(self):
        goal = complete(sprint_goal())
        assert goal.status is GoalStatus.COMPLETED
        assert complete(goal) is goal
        with pytest.raises(InvalidGoalError):
            complete(sprint_goal(status=GoalStatus.ARCHIVED))

    def test_edit_reactivates_overdue_goal(self):
        """Test that extending the deadline moves an overdue goal back to active."""
        goal = sprint_goal()
        late = goal.deadline + timedelta(days=5)
        assert status(goal, late) is GoalStatus.OVERDUE

        extended = edit(goal, deadline=late + timedelta(days=30))
        assert status(extended, late) is GoalStatus.ACTIVE

        eased = edit(goal, target_value=11.0)
        assert status(eased, late) is GoalStatus.ACTIVE

    def test_edit_terminal_raises(self):
        with pytest.raises(InvalidGoalError):
            edit(complete(sprint_goal()), target_value=10.0)


class TestRecordsAndSupersede:
    """Test goal interaction with records and other goals."""

    def test_ingest_better_record(self):
        record = PerformanceRecord.create("100m", 10.8, datetime(2025, 6, 2, 18, 0))
        goal = ingest_record(sprint_goal(), record)
        assert goal.current_value == 10.8
        assert progress_percent(goal) == pytest.approx(70.0)

    def test_ingest_ignores_worse_or_other_event(self):
        goal = sprint_goal()
        assert ingest_record(goal, PerformanceRecord.create("100m", 11.2, datetime(2025, 6, 2))) is goal
        assert ingest_record(goal, PerformanceRecord.create("200m", 21.0, datetime(2025, 6, 2))) is goal

    def test_ingest_completes(self):
        goal = ingest_record(jump_goal(), PerformanceRecord.create("lj", 7.6, datetime(2025, 6, 2)))
        assert goal.status is GoalStatus.COMPLETED

    def test_supersede_archives_open_goals_for_event(self):
        """Test that only open goals for the same event are archived."""
        old_sprint = sprint_goal(id="a")
        done_sprint = sprint_goal(id="b", status=GoalStatus.COMPLETED)
        jump = jump_goal(id="c")
        new_sprint = sprint_goal(id="d", target_value=10.3)

        result = supersede([old_sprint, done_sprint, jump], new_sprint)

        by_id = {g.id: g for g in result}
        assert by_id["a"].status is GoalStatus.ARCHIVED
        assert by_id["b"].status is GoalStatus.COMPLETED
        assert by_id["c"].status is GoalStatus.ACTIVE
        assert result[-1] is new_sprint

    def test_archived_goal_ignores_new_records(self):
        """Test that a superseded goal keeps the value it was archived with."""
        old = sprint_goal(id="old", current_value=11.5)
        archived = supersede([old], sprint_goal(id="new", target_value=10.3))[0]
        assert archived.status is GoalStatus.ARCHIVED

        record = PerformanceRecord.create("100m", 11.1, datetime(2025, 6, 2, 18, 0))
        result = ingest_record(archived, record)

        assert result is archived
        assert result.current_value == 11.5

    def test_archived_goal_cannot_be_updated(self):
        with pytest.raises(InvalidGoalError):
            update_progress(sprint_goal(status=GoalStatus.ARCHIVED), 10.9)

    def test_upcoming_deadlines(self):
        soon = sprint_goal(id="soon", deadline=TODAY + timedelta(days=5))
        later = sprint_goal(id="later", deadline=TODAY + timedelta(days=40))
        overdue = jump_goal(id="overdue", deadline=TODAY - timedelta(days=2))
        done = jump_goal(id="done", deadline=TODAY + timedelta(days=1), status=GoalStatus.COMPLETED)

        upcoming = upcoming_deadlines([later, soon, overdue, done], TODAY, 14)

        assert [g.id for g in upcoming] == ["overdue", "soon"]


class TestMilestones:
    """Test milestone tracking."""

    def setup_method(self):
        self.goal = sprint_goal(milestones=(
            Milestone(id="m1", title="Sub 11.2", target_value=11.2),
            Milestone(id="m2", title="Sub 10.9", target_value=10.9),
        ))

    def test_reached_milestones(self):
        assert reached_milestones(self.goal) == []
        reached = reached_milestones(update_progress(self.goal, 11.1))
        assert [m.id for m in reached] == ["m1"]

    def test_complete_milestone(self):
        goal = complete_milestone(self.goal, "m1", datetime(2025, 6, 10, 7, 0))
        assert goal.milestones[0].completed
        assert goal.milestones[0].completed_on == date(2025, 6, 10)
        assert not goal.milestones[1].completed

        with pytest.raises(InvalidGoalError):
            complete_milestone(self.goal, "missing", TODAY)
