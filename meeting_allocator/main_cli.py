# meeting_allocator/main_cli.py
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from datetime import datetime

from meeting_allocator.config import DEFAULT_CONFIG, AppConfig
from meeting_allocator.domain.errors import DataIntegrityError, ScheduleIntegrityViolation
from meeting_allocator.domain.timegrid import get_zone
from meeting_allocator.io_layer.json_store import assignment_to_dict, read_result_json, write_result_json
from meeting_allocator.io_layer.paths import InputPaths
from meeting_allocator.io_layer.xlsx_reader import XlsxReader
from meeting_allocator.optimization.pipeline import solve_schedule
from meeting_allocator.reporting.diff import find_diffs
from meeting_allocator.reporting.export_xlsx import export_result_xlsx
from meeting_allocator.reporting.report import build_person_summary, build_print_view, build_unassigned_table


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Assign meetings to time slots and rooms")
    p.add_argument("--log-level", default="INFO", help="logging level (DEBUG, INFO, WARNING)")
    sub = p.add_subparsers(dest="command")

    run = sub.add_parser("run", help="schedule the catalog in a workbook")
    run.add_argument("--workbook", required=True, help="input xlsx (slots, locations, orders, meetings, ...)")
    run.add_argument("--version", required=True, help="label of this run; output is out/result.<version>.json")
    run.add_argument("--compare-version", default=None, help="previous run to diff against")
    run.add_argument("--title", default="")
    run.add_argument("--out-dir", default=DEFAULT_CONFIG.output.out_dir)
    run.add_argument("--report", default=None, help="tabular report xlsx")
    run.add_argument("--random", action="store_true", help="run randomized search if meetings remain unassigned")
    run.add_argument("--iterations", type=int, default=DEFAULT_CONFIG.search.random_iterations)
    run.add_argument("--seed", type=int, default=None)
    run.add_argument("--refine-limit", type=int, default=DEFAULT_CONFIG.search.refine_max_unassigned,
                     help="skip refinement when more meetings than this are unassigned")
    run.add_argument("--capacity", type=int, default=DEFAULT_CONFIG.capacity.capacity)
    run.add_argument("--timezone", default=DEFAULT_CONFIG.timezone_name)

    diff = sub.add_parser("check-diff", help="compare an output with an earlier version")
    diff.add_argument("--version", required=True)
    diff.add_argument("--compare-version", required=True)
    diff.add_argument("--out-dir", default=DEFAULT_CONFIG.output.out_dir)
    return p


def build_config(args) -> AppConfig:
    cfg = DEFAULT_CONFIG
    return replace(
        cfg,
        timezone_name=args.timezone,
        capacity=replace(cfg.capacity, capacity=args.capacity),
        search=replace(
            cfg.search,
            refine_max_unassigned=args.refine_limit,
            random_enabled=args.random,
            random_iterations=args.iterations,
            random_seed=args.seed,
        ),
        output=replace(
            cfg.output,
            version=args.version,
            compare_version=args.compare_version,
            title=args.title,
            out_dir=args.out_dir,
        ),
    )


def cmd_run(args) -> int:
    cfg = build_config(args)
    paths = InputPaths(workbook=args.workbook, report_file=args.report)
    print(f"Starting scheduling for {cfg.output.version}...")

    try:
        data = XlsxReader(cfg=cfg).build_input_data(paths)
    except (ValueError, FileNotFoundError) as e:
        print(f"[ERROR] {e}")
        return 1

    try:
        outcome = solve_schedule(data, cfg)
    except DataIntegrityError as e:
        print(f"[ERROR] {e.message}")
        return 1
    except ScheduleIntegrityViolation as e:
        # nothing has been written yet
        print(f"[ERROR] {e.message}")
        return 3

    for w in outcome.warnings:
        print(f"[WARN] {w.message}")

    result = outcome.result
    records = [assignment_to_dict(a) for a in result.assignments]
    diffs = find_diffs(records, cfg.output.last_output_path)
    timestamp = datetime.now(tz=get_zone(cfg.timezone_name)).isoformat()
    out_path = write_result_json(
        cfg.output.output_path,
        version=cfg.output.version,
        title=cfg.output.title,
        timestamp=timestamp,
        updated_meetings=[d.to_dict() for d in diffs],
        assignments=result.assignments,
    )
    print(f"Results saved to {out_path}")

    if paths.report_file:
        export_result_xlsx(paths.report_file, {
            "result": build_print_view(result.assignments),
            "unassigned": build_unassigned_table(outcome.unassigned),
            "person_summary": build_person_summary(result.assignments),
        })
        print(f"Report saved to {paths.report_file}")

    print(f"[RESULT] '{result.strategy_name}': assigned {result.count}/{outcome.total}")
    for d in diffs:
        print(f"  moved: {d.name} ({d.label}): {d.previous_slot} -> {d.new_slot}")
    for issue in outcome.issues:
        print(f"[WARN] {issue.message}")
    for m in outcome.unassigned:
        rank = m.scores.rank if m.scores else "-"
        print(f"  {m.name} ({rank}): {', '.join(m.participants)}")
    return 0


def cmd_check_diff(args) -> int:
    out_dir = args.out_dir
    cfg = replace(DEFAULT_CONFIG, output=replace(
        DEFAULT_CONFIG.output, version=args.version, compare_version=args.compare_version, out_dir=out_dir,
    ))
    new_path = cfg.output.output_path
    print(f"Comparing {new_path} with {cfg.output.last_output_path}...")
    if not new_path.exists():
        print(f"[ERROR] New file not found at {new_path}")
        return 1

    diffs = find_diffs(read_result_json(new_path), cfg.output.last_output_path)
    if not diffs:
        print("No differences found.")
        return 0
    print(f"{len(diffs)} updated meetings found:")
    for d in diffs:
        print(f"- {d.name} ({d.label}): {d.previous_slot} -> {d.new_slot}")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    if args.command == "run":
        return cmd_run(args)
    if args.command == "check-diff":
        return cmd_check_diff(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
