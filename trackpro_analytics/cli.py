"""Command-line interface for the TrackPro analytics tool."""

import json
import logging
import sys
from datetime import date, datetime, timedelta

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .config import config
from .errors import TrackProError
from .db import Repository, get_db
from .analysis import compliance as compliance_calc
from .analysis import goals as goal_tracker
from .analysis import personal_records as pr_tracker
from .analysis import training_plan as plan_model
from .analysis.event_policy import Direction, all_policies, format_value, resolve
from .analysis.recovery import (
    REQUIRED_CHANNELS,
    OPTIONAL_CHANNELS,
    RecoveryDailyScore,
    RecoveryScoreAggregator,
    RecoverySubMetrics,
    band_for,
)

console = Console()

DATE = click.DateTime(formats=["%Y-%m-%d"])

BAND_STYLES = {
    "Excellent": "green",
    "Good": "cyan",
    "Moderate": "yellow",
    "Poor": "red",
}

STATUS_STYLES = {
    "active": "cyan",
    "completed": "green",
    "overdue": "red",
    "archived": "dim",
}


def _day(value) -> date:
    """Click date option -> date, defaulting to today."""
    if value is None:
        return date.today()
    return value.date() if isinstance(value, datetime) else value


def _fail(message: str):
    console.print(f"[red]❌ {message}[/red]")
    sys.exit(1)


def _repo() -> Repository:
    return click.get_current_context().obj


@click.group()
@click.option("--db-url", default=None, help="Database URL (defaults to DATABASE_URL)")
@click.option("--user", default="default", help="User ID for stored data")
@click.pass_context
def cli(ctx, db_url, user):
    """TrackPro Performance & Training Analytics."""
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
    try:
        config.validate()
    except ValueError as e:
        _fail(f"Configuration Error: {e}")
    ctx.obj = Repository(get_db(db_url), user_id=user)


@cli.command()
@click.option("--category", type=click.Choice(["Sprints", "Jumps", "Throws", "Distance"]), help="Filter by category")
def events(category):
    """List supported events and how they are scored."""
    table = Table(title="Events", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Event")
    table.add_column("Category")
    table.add_column("Unit")
    table.add_column("Better")

    for policy in all_policies():
        if category and policy.category.value != category:
            continue
        better = "lower" if policy.direction is Direction.LOWER_IS_BETTER else "higher"
        table.add_row(policy.event_id, policy.name, policy.category.value, policy.unit.value, better)

    console.print(table)


# Performance records

@cli.group()
def record():
    """Record performances and view personal bests."""


@record.command("add")
@click.argument("event")
@click.argument("value", type=float)
@click.option("--date", "recorded_on", type=DATE, help="Date of the performance (YYYY-MM-DD)")
@click.option("--competition", help="Competition type (Training, Meet, Championship)")
@click.option("--location", help="Where the performance took place")
@click.option("--weather", help="Weather conditions")
@click.option("--notes", help="Free-form notes")
def record_add(event, value, recorded_on, competition, location, weather, notes):
    """Add a performance record, e.g. `record add 100m 11.24`."""
    repo = _repo()
    recorded_at = recorded_on or datetime.now().replace(microsecond=0)

    try:
        context = None
        if any((competition, location, weather, notes)):
            context = pr_tracker.RecordContext(
                competition_type=competition, location=location, weather=weather, notes=notes
            )
        new_record = pr_tracker.PerformanceRecord.create(event, value, recorded_at, context=context)
        previous = repo.list_records(new_record.event)
        gain = pr_tracker.improvement(previous, new_record)
        stored = repo.add_record(new_record)

        for goal in repo.list_goals():
            updated = goal_tracker.ingest_record(goal, stored)
            if updated != goal:
                repo.save_goal(updated)
                console.print(f"[cyan]🎯 Goal '{goal.title}' now at "
                              f"{goal_tracker.progress_percent(updated):.0f}%[/cyan]")
    except TrackProError as e:
        _fail(str(e))

    console.print(f"[green]✅ Recorded {stored.event}: {format_value(stored.event, stored.value)}[/green]")
    if gain is None:
        console.print("[bold green]🏆 First mark for this event![/bold green]")
    elif gain > 0:
        console.print(f"[bold green]🏆 New personal best! Improved by {gain:.2f} {stored.unit.value}[/bold green]")


@record.command("best")
@click.argument("event", required=False)
def record_best(event):
    """Show personal bests (all events, or one)."""
    repo = _repo()

    try:
        if event:
            best = pr_tracker.personal_best(repo.list_records(event), event)
            if best is None:
                console.print(f"[orange1]No records for {resolve(event).name} yet[/orange1]")
                return
            bests = {best.event: best}
        else:
            bests = pr_tracker.personal_bests(repo.list_records())
    except TrackProError as e:
        _fail(str(e))

    if not bests:
        console.print("[orange1]No records yet[/orange1]")
        return

    table = Table(title="Personal Bests", box=box.ROUNDED)
    table.add_column("Event")
    table.add_column("Best", justify="right", style="bold green")
    table.add_column("Date")
    for name, best in bests.items():
        table.add_row(name, format_value(name, best.value), best.recorded_at.strftime("%Y-%m-%d"))
    console.print(table)


@record.command("list")
@click.option("--event", help="Only show one event")
def record_list(event):
    """List recorded performances with PB markers."""
    repo = _repo()
    try:
        records = repo.list_records(event)
        pb_history = set()
        for name in {r.event for r in records}:
            pb_history.update(r.id for r in pr_tracker.progression(records, name))
    except TrackProError as e:
        _fail(str(e))

    table = Table(title="Performance Records", box=box.ROUNDED)
    table.add_column("Date")
    table.add_column("Event")
    table.add_column("Result", justify="right")
    table.add_column("PB", justify="center")
    for r in records:
        table.add_row(
            r.recorded_at.strftime("%Y-%m-%d"),
            r.event,
            format_value(r.event, r.value),
            "🏆" if r.id in pb_history else "",
        )
    console.print(table)


# Compliance

@cli.group()
def supplement():
    """Log supplement intake and view adherence."""


@supplement.command("log")
@click.argument("subject_id")
@click.option("--date", "on", type=DATE, help="Day of the entry (defaults to today)")
@click.option("--missed", is_flag=True, help="Log the day as not taken")
def supplement_log(subject_id, on, missed):
    """Log whether a supplement was taken. Re-logging a day overwrites it."""
    entry = compliance_calc.ComplianceEntry(subject_id=subject_id, date=_day(on), fulfilled=not missed)
    _repo().log_compliance(entry)
    state = "missed" if missed else "taken"
    console.print(f"[green]✅ {subject_id} {state} on {entry.date.isoformat()}[/green]")


@supplement.command("compliance")
@click.argument("subject_id")
@click.option("--days", default=None, type=click.IntRange(0, 365), help="Trailing window in days")
@click.option("--as-of", type=DATE, help="Last day of the window (defaults to today)")
def supplement_compliance(subject_id, days, as_of):
    """Show the adherence rate and current streak for a supplement."""
    window = config.COMPLIANCE_WINDOW_DAYS if days is None else days
    as_of = _day(as_of)
    entries = _repo().list_compliance(subject_id)

    rate = compliance_calc.compliance_rate(entries, subject_id, window, as_of)
    streak = compliance_calc.current_streak(entries, subject_id, as_of)

    style = "green" if rate >= 80 else "yellow" if rate >= 50 else "red"
    console.print(Panel.fit(
        f"[{style}]{rate:.0f}%[/{style}] compliance over the last {window} days\n"
        f"🔥 Current streak: {streak} day{'s' if streak != 1 else ''}",
        title=f"💊 {subject_id}",
    ))


# Recovery

@cli.group()
def recovery():
    """Log wellness metrics and view recovery scores."""


def _channel_options(func):
    for channel in reversed(REQUIRED_CHANNELS + OPTIONAL_CHANNELS):
        flag = "--" + channel.replace("_", "-")
        func = click.option(flag, channel, type=click.FloatRange(0, 10), help=f"{channel} (0-10)")(func)
    return func


@recovery.command("log")
@click.option("--date", "on", type=DATE, help="Day of the metrics (defaults to today)")
@click.option("--notes", help="Free-form notes")
@_channel_options
def recovery_log(on, notes, **channels):
    """Log a day's sub-metrics. Stress and soreness: lower is better."""
    score = RecoveryDailyScore(date=_day(on), sub_metrics=RecoverySubMetrics(**channels))
    _repo().log_recovery(score, notes=notes)
    console.print(f"[green]✅ Recovery metrics logged for {score.date.isoformat()}[/green]")

    missing = score.sub_metrics.missing_channels()
    if missing:
        console.print(f"[orange1]⚠️  Still missing: {', '.join(missing)}[/orange1]")


def _aggregator() -> RecoveryScoreAggregator:
    return RecoveryScoreAggregator(config.get_recovery_weights())


@recovery.command("score")
@click.option("--date", "on", type=DATE, help="Day to score (defaults to today)")
def recovery_score(on):
    """Show the recovery score for one day."""
    day = _day(on)
    logged = _repo().list_recovery(day, day)
    if not logged:
        _fail(f"No recovery metrics logged for {day.isoformat()}")

    try:
        score = logged[-1].aggregate_with(_aggregator())
    except TrackProError as e:
        _fail(f"{e}. Log them with `recovery log --date {day.isoformat()}`")

    style = BAND_STYLES[score.band.label]
    console.print(Panel.fit(
        f"[bold {style}]{score.value:.1f}[/bold {style}] / 10  ({score.band.label})",
        title=f"🔋 Recovery {day.isoformat()}",
    ))


@recovery.command("trend")
@click.option("--days", default=7, type=click.IntRange(1, 90), help="Number of days to show")
@click.option("--as-of", type=DATE, help="Last day of the trend (defaults to today)")
def recovery_trend(days, as_of):
    """Show the daily recovery series, average and recommendations."""
    end = _day(as_of)
    start = end - timedelta(days=days - 1)
    logged = _repo().list_recovery(start, end)
    aggregator = _aggregator()

    complete = [s for s in logged if not s.sub_metrics.missing_channels()]
    skipped = len(logged) - len(complete)

    table = Table(title=f"Recovery Trend ({start.isoformat()} → {end.isoformat()})", box=box.ROUNDED)
    table.add_column("Date")
    table.add_column("Score", justify="right")
    table.add_column("Band")
    for point in aggregator.weekly_trend(complete):
        band = band_for(point.value)
        style = BAND_STYLES[band.label]
        table.add_row(point.date.isoformat(), f"{point.value:.1f}", f"[{style}]{band.label}[/{style}]")
    console.print(table)

    if skipped:
        console.print(f"[orange1]⚠️  {skipped} day(s) with incomplete metrics not scored[/orange1]")

    average = aggregator.weekly_average(complete)
    if average is not None:
        console.print(f"Average: [bold]{average:.1f}[/bold]")

    for rec in aggregator.recommendations(logged, lookback=config.RECOMMENDATION_LOOKBACK_DAYS):
        items = "\n".join(f"• {item}" for item in rec.action_items)
        console.print(Panel(f"{rec.description}\n{items}", title=f"{rec.title} ({rec.priority.name.title()})"))


# Goals

@cli.group()
def goal():
    """Set goals and track progress."""


@goal.command("add")
@click.argument("title")
@click.option("--event", help="Linked event (direction comes from the event)")
@click.option("--metric", help="Metric name for goals not tied to an event")
@click.option("--direction", type=click.Choice(["higher", "lower"]), help="Required with --metric")
@click.option("--baseline", type=float, required=True, help="Starting value")
@click.option("--current", type=float, help="Current value (defaults to baseline)")
@click.option("--target", type=float, required=True, help="Target value")
@click.option("--deadline", type=DATE, required=True, help="Deadline (YYYY-MM-DD)")
def goal_add(title, event, metric, direction, baseline, current, target, deadline):
    """Create a goal. A new goal for an event archives the open one."""
    repo = _repo()
    if event and metric:
        _fail("Use either --event or --metric, not both")

    directions = {"higher": Direction.HIGHER_IS_BETTER, "lower": Direction.LOWER_IS_BETTER}
    try:
        new_goal = goal_tracker.Goal(
            id="new",
            title=title,
            baseline_value=baseline,
            current_value=baseline if current is None else current,
            target_value=target,
            deadline=_day(deadline),
            event=resolve(event).name if event else None,
            metric_name=metric,
            direction=directions.get(direction),
            created_on=date.today(),
        )
        stored = repo.add_goal(new_goal)
    except TrackProError as e:
        _fail(str(e))

    console.print(f"[green]✅ Goal #{stored.id} created: {stored.title}[/green]")


@goal.command("update")
@click.argument("goal_id")
@click.argument("value", type=float)
def goal_update(goal_id, value):
    """Record a new current value for a goal."""
    repo = _repo()
    existing = repo.get_goal(goal_id)
    if existing is None:
        _fail(f"No goal #{goal_id}")

    try:
        updated = goal_tracker.update_progress(existing, value)
        repo.save_goal(updated)
        percent = goal_tracker.progress_percent(updated)
    except TrackProError as e:
        _fail(str(e))

    console.print(f"Goal #{goal_id}: [bold]{percent:.0f}%[/bold]")
    if updated.status is goal_tracker.GoalStatus.COMPLETED and existing.status is not updated.status:
        console.print("[bold green]🏆 Goal completed![/bold green]")


@goal.command("complete")
@click.argument("goal_id")
def goal_complete(goal_id):
    """Mark a goal as completed."""
    repo = _repo()
    existing = repo.get_goal(goal_id)
    if existing is None:
        _fail(f"No goal #{goal_id}")

    try:
        repo.save_goal(goal_tracker.complete(existing))
    except TrackProError as e:
        _fail(str(e))
    console.print(f"[green]✅ Goal #{goal_id} completed[/green]")


@goal.command("show")
@click.option("--as-of", type=DATE, help="Evaluate status as of this day (defaults to today)")
@click.option("--all", "show_all", is_flag=True, help="Include archived goals")
def goal_show(as_of, show_all):
    """Show goals with progress, days remaining and status."""
    repo = _repo()
    as_of = _day(as_of)

    table = Table(title="Goals", box=box.ROUNDED)
    table.add_column("#", style="dim")
    table.add_column("Goal")
    table.add_column("Current", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Days left", justify="right")
    table.add_column("Status")

    try:
        for g in repo.list_goals():
            state = goal_tracker.status(g, as_of)
            if state is goal_tracker.GoalStatus.ARCHIVED and not show_all:
                continue
            style = STATUS_STYLES[state.value]
            if g.event:
                current, target = format_value(g.event, g.current_value), format_value(g.event, g.target_value)
            else:
                current, target = f"{g.current_value:g}", f"{g.target_value:g}"
            table.add_row(
                g.id,
                g.title,
                current,
                target,
                f"{goal_tracker.progress_percent(g):.0f}%",
                str(goal_tracker.days_remaining(g, as_of)),
                f"[{style}]{state.value}[/{style}]",
            )
        upcoming = goal_tracker.upcoming_deadlines(repo.list_goals(), as_of, config.DEADLINE_LOOKAHEAD_DAYS)
    except TrackProError as e:
        _fail(str(e))

    console.print(table)
    if upcoming:
        names = ", ".join(f"#{g.id} ({g.deadline.isoformat()})" for g in upcoming)
        console.print(f"[orange1]⏰ Deadlines within {config.DEADLINE_LOOKAHEAD_DAYS} days: {names}[/orange1]")


# Training plans

@cli.group()
def plan():
    """Work with training plans."""


@plan.command("validate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def plan_validate(file):
    """Check a JSON training plan for structural problems."""
    try:
        with open(file) as f:
            training_plan = plan_model.plan_from_dict(json.load(f))
    except (KeyError, ValueError, TypeError) as e:
        _fail(f"Could not read plan: {e}")

    errors = plan_model.validate(training_plan)
    if errors:
        for error in errors:
            console.print(f"[red]• {error}[/red]")
        _fail(f"{len(errors)} problem(s) in plan '{training_plan.name}'")

    stats = plan_model.training_stats(training_plan)
    console.print(f"[green]✅ Plan '{training_plan.name}' is valid "
                  f"({len(training_plan.sessions)} sessions)[/green]")
    console.print(f"Completed: {stats.completed_sessions} sessions, {stats.total_hours:.1f} h, "
                  f"avg RPE {stats.average_rpe:.1f}")

    entries = plan_model.session_compliance(training_plan, date.today())
    if entries:
        rate = compliance_calc.compliance_rate(
            entries, training_plan.id, config.COMPLIANCE_WINDOW_DAYS, date.today()
        )
        console.print(f"Session compliance (last {config.COMPLIANCE_WINDOW_DAYS} days): {rate:.0f}%")


def main():
    cli()


if __name__ == "__main__":
    main()
