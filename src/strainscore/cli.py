"""CLI for the strainscore scoring engine.

Every command reads a JSON list of daily records (the shape produced by
``DailyRecord.to_dict``) and scores or describes one day of it.
"""

import json
import logging
from datetime import date, datetime

import click

from strainscore.models import DailyRecord, StressSummary, WorkoutRecord

_DAY_FIELDS = (
    "strain", "recovery", "sleep_duration", "sleep_efficiency",
    "sleep_consistency", "sleep_debt", "hrv", "resting_hr",
    "respiratory_rate", "vo2_max", "steps", "active_calories",
)
_WORKOUT_FIELDS = (
    "duration_min", "distance_m", "active_calories", "avg_hr", "max_hr",
    "hr_samples", "stroke",
)


def _parse_workout(raw: dict) -> WorkoutRecord:
    return WorkoutRecord(
        activity=raw["activity"],
        start=datetime.fromisoformat(raw["start"]),
        end=datetime.fromisoformat(raw["end"]),
        **{k: raw[k] for k in _WORKOUT_FIELDS if raw.get(k) is not None},
    )


def _parse_day(raw: dict) -> DailyRecord:
    stress = raw.get("stress")
    return DailyRecord(
        date=date.fromisoformat(raw["date"]),
        sleep_start=datetime.fromisoformat(raw["sleep_start"]) if raw.get("sleep_start") else None,
        sleep_end=datetime.fromisoformat(raw["sleep_end"]) if raw.get("sleep_end") else None,
        workouts=[_parse_workout(w) for w in raw.get("workouts", [])],
        stress=StressSummary(**stress) if stress else None,
        **{k: raw[k] for k in _DAY_FIELDS if raw.get(k) is not None},
    )


def load_history(path: str) -> list[DailyRecord]:
    """Read a history file, raising ClickException on malformed input."""
    try:
        with open(path) as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValueError("expected a JSON list of daily records")
        return sorted((_parse_day(d) for d in raw), key=lambda r: r.date)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        raise click.ClickException(f"Could not read {path}: {exc}") from exc


def _fmt(value: float | None) -> str:
    return f"{value:.1f}" if value is not None else "-"


def _target_day(history: list[DailyRecord], day: str | None) -> date:
    if day is not None:
        try:
            return date.fromisoformat(day)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--date") from exc
    if not history:
        raise click.ClickException("History is empty.")
    return history[-1].date


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log calculator details to stderr.")
def main(verbose: bool) -> None:
    """strainscore - strain, recovery and stress scoring."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("history_json", type=click.Path(exists=True))
@click.option("--date", "day", default=None, help="Day to score (default: last day in file).")
@click.option("--max-hr", default=190.0, help="Max heart rate.")
@click.option("--resting-hr", default=60.0, help="Resting heart rate.")
def score(history_json: str, day: str | None, max_hr: float, resting_hr: float) -> None:
    """Score one day against the rest of the history."""
    from strainscore.analytics.pipeline import DaySignals, ScoringEngine
    from strainscore.models import HeartRateProfile

    history = load_history(history_json)
    target = _target_day(history, day)
    today = next((r for r in history if r.date == target), None)
    if today is None:
        raise click.ClickException(f"No record for {target.isoformat()}.")

    signals = DaySignals(
        hrv=today.hrv,
        resting_hr=today.resting_hr,
        respiratory_rate=today.respiratory_rate,
        vo2_max=today.vo2_max,
        steps=today.steps,
        active_calories=today.active_calories,
        sleep_duration=today.sleep_duration,
        sleep_efficiency=today.sleep_efficiency,
        sleep_start=today.sleep_start,
        sleep_end=today.sleep_end,
    )
    record = ScoringEngine().score_day(
        target,
        signals,
        workouts=today.workouts,
        history=[r for r in history if r.date < target],
        profile=HeartRateProfile(max_hr=max_hr, resting_hr=resting_hr),
    )
    record.stress = today.stress
    click.echo(json.dumps(record.to_dict(), indent=2))


@main.command()
@click.argument("history_json", type=click.Path(exists=True))
@click.option("--date", "day", default=None, help="Day to describe (default: last day in file).")
def features(history_json: str, day: str | None) -> None:
    """Print the feature vector for one day (absent features are null)."""
    from strainscore.analytics.features import derive_features

    history = load_history(history_json)
    target = _target_day(history, day)
    try:
        fv = derive_features(target, history)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(fv.to_dict(), indent=2))


@main.command()
@click.argument("history_json", type=click.Path(exists=True))
@click.option("--date", "day", default=None, help="Day the baseline is for (default: last day in file).")
def baseline(history_json: str, day: str | None) -> None:
    """Print the personal baseline used to score one day."""
    from strainscore.analytics.baseline import compute_baseline

    history = load_history(history_json)
    snap = compute_baseline(history, _target_day(history, day))
    if snap is None:
        click.echo("Baseline unavailable: not enough days with HRV and resting HR.")
        return

    acwr = snap.acwr
    click.echo(f"  HRV:        {_fmt(snap.hrv_mean)} ms (sd {_fmt(snap.hrv_std)})")
    click.echo(f"  Resting HR: {_fmt(snap.rhr_mean)} bpm (sd {_fmt(snap.rhr_std)})")
    click.echo(f"  Acute:      {_fmt(snap.acute_strain)}")
    click.echo(f"  Chronic:    {_fmt(snap.chronic_strain)}")
    if acwr is not None:
        click.echo(f"  ACWR:       {acwr:.2f} ({snap.acwr_status().value})")
        click.echo(f"              {snap.acwr_status().description}")
    click.echo(f"  Days:       {snap.days_of_data}")


if __name__ == "__main__":
    main()
