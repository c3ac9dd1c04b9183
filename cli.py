import argparse
import datetime
import sys
from typing import Optional

from algorithms import (
    MathTools,
    ProgressionBase,
    ProgressionEngine,
    ProgressionType,
    RecordState,
    StrengthMetrics,
    TempoTools,
    WeightConverter,
    WeightUnit,
)
from config import APP_VERSION, YamlConfig, configure_logging, load_settings


def show_e1rm(weight: float, reps: int, unit: WeightUnit = "kg") -> None:
    kg = WeightConverter.to_kg(weight, unit)
    e1rm = StrengthMetrics.calculate_e1rm(kg, reps)
    print(
        f"{MathTools.format_number(weight)} {unit} x {reps} reps "
        f"-> e1RM {WeightConverter.format_weight(e1rm, unit)}"
    )
    if e1rm:
        print(f"Intensity: {StrengthMetrics.intensity_percentage(kg, e1rm)}%")


def show_preview(
    base: ProgressionBase,
    progression_type: str,
    weeks: int,
    baseline: Optional[float],
    unit: WeightUnit = "kg",
) -> None:
    baseline_kg = WeightConverter.to_kg(baseline, unit) if baseline else None
    for week in range(1, weeks + 1):
        row = ProgressionEngine.apply_progression(
            base, week, progression_type, weeks, baseline_kg
        )
        weight = row.target_weight
        if row.target_weight_kg is not None:
            weight = WeightConverter.format_weight(row.target_weight_kg, unit, sep=" ")
        print(
            f"Week {week}: {row.target_sets} x {row.target_reps} "
            f"@ {weight or '-'} rest {row.rest_seconds}s"
            + (f"  [{row.progression_note}]" if row.progression_note else "")
        )


def show_week(start: str, weeks: int) -> None:
    week = ProgressionEngine.calculate_week_number(start, weeks)
    print(f"Week {week} of {weeks}")


def show_pr(
    weight: float,
    reps: int,
    best_e1rm: Optional[float],
    max_weight: Optional[float],
    unit: WeightUnit = "kg",
) -> None:
    def kg(value: Optional[float]) -> Optional[float]:
        return None if value is None else WeightConverter.to_kg(value, unit)

    check = StrengthMetrics.check_for_pr(
        kg(weight), reps, RecordState(e1rm=kg(best_e1rm), max_weight=kg(max_weight))
    )
    print(f"e1RM: {WeightConverter.format_weight(check.new_e1rm, unit)}")
    print(f"e1RM PR: {'yes' if check.is_e1rm_pr else 'no'}")
    print(f"Max weight PR: {'yes' if check.is_max_weight_pr else 'no'}")


def show_tempo(text: str, reps: Optional[int]) -> None:
    tempo = TempoTools.parse_tempo(text)
    if tempo is None:
        raise ValueError(f"invalid tempo {text!r}, expected four digits like 3110")
    print(TempoTools.tempo_description(tempo))
    print(f"{TempoTools.tempo_rep_duration(tempo)}s per rep")
    if reps:
        print(f"{TempoTools.time_under_tension(tempo, reps)}s under tension for {reps} reps")


def convert_weight(weight: float, unit: WeightUnit) -> None:
    other = "lb" if unit == "kg" else "kg"
    kg = WeightConverter.to_kg(weight, unit)
    print(
        f"{MathTools.format_number(weight)} {unit} = "
        f"{WeightConverter.format_weight(kg, other, sep=' ')}"
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Training calculation utilities")
    parser.add_argument("--settings", default="settings.yaml")
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--unit", choices=["kg", "lb"], default=None)
    parser.add_argument("--version", action="version", version=APP_VERSION)
    sub = parser.add_subparsers(dest="cmd", required=True)

    e1rm = sub.add_parser("e1rm")
    e1rm.add_argument("--weight", type=float, required=True)
    e1rm.add_argument("--reps", type=int, required=True)

    prev = sub.add_parser("preview")
    prev.add_argument("--sets", type=int, default=3)
    prev.add_argument("--reps", default="8-12")
    prev.add_argument("--weight-label", default="")
    prev.add_argument("--rest", type=int, default=90)
    prev.add_argument(
        "--type",
        choices=[t.value for t in ProgressionType],
        default=ProgressionType.NONE.value,
    )
    prev.add_argument("--weeks", type=int, default=None)
    prev.add_argument("--baseline", type=float, default=None)

    week = sub.add_parser("week")
    week.add_argument("--start", default=datetime.date.today().isoformat())
    week.add_argument("--weeks", type=int, default=None)

    pr = sub.add_parser("pr")
    pr.add_argument("--weight", type=float, required=True)
    pr.add_argument("--reps", type=int, required=True)
    pr.add_argument("--best-e1rm", type=float, default=None)
    pr.add_argument("--max-weight", type=float, default=None)

    tempo = sub.add_parser("tempo")
    tempo.add_argument("--tempo", required=True)
    tempo.add_argument("--reps", type=int, default=None)

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--from-unit", choices=["kg", "lb"], default=None)

    setting = sub.add_parser("set")
    setting.add_argument("key")
    setting.add_argument("value")

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
        configure_logging(args.log_level or settings.log_level)
        unit = args.unit or settings.weight_unit
        if args.cmd == "e1rm":
            show_e1rm(args.weight, args.reps, unit)
        elif args.cmd == "preview":
            base = ProgressionBase(args.sets, args.reps, args.weight_label, args.rest)
            show_preview(
                base,
                args.type,
                args.weeks or settings.default_total_weeks,
                args.baseline,
                unit,
            )
        elif args.cmd == "week":
            show_week(args.start, args.weeks or settings.default_total_weeks)
        elif args.cmd == "pr":
            show_pr(args.weight, args.reps, args.best_e1rm, args.max_weight, unit)
        elif args.cmd == "tempo":
            show_tempo(args.tempo, args.reps)
        elif args.cmd == "convert":
            convert_weight(args.weight, args.from_unit or unit)
        elif args.cmd == "set":
            YamlConfig(args.settings).update(args.key, args.value)
            print(f"{args.key} = {args.value}")
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
