"""
Command-line interface for the lecture timetable generator.

Usage examples:
    python -m timetable_app.cli --config data/sample_department.json
    python -m timetable_app.cli --config cfg.json --out options.json --seed 7
    python -m timetable_app.cli --config cfg.json --strategy cpsat --options 3

Exit codes:
    0  options produced and at least one placed every lecture
    1  bad arguments, unreadable config, or precheck found blocking errors
    2  every option left some lectures unplaced
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from timetable_app.io_json import ConfigError, load_config, save_options
from timetable_app.models import Config, STRATEGIES
from timetable_app.solver.api import generate
from timetable_app.solver.precheck import precheck
from timetable_app.solver.result import Option


def _print_option(opt: Option, cfg: Config) -> None:
    week = cfg.constraints.week
    print(f"\nOption {opt.id}  [{opt.status}]  seed={opt.seed}  "
          f"placed {opt.placed_count}/{opt.stats.get('total', '?')}  "
          f"unplaced {len(opt.unplaced)}  clashes {opt.clashes}")
    for slot in week.slots():
        for a in opt.schedule.at(slot):
            flag = "  CLASH!" if a.is_clash else ("  (pinned)" if a.pinned else "")
            print(f"  [{slot.day:<9} {slot.period}]  {a.batch:<8} {a.subject}  |  "
                  f"{a.teacher}  |  {a.room}{flag}")
    for u in opt.unplaced:
        print(f"  [UNPLACED] {u.subject} ({u.lecture_id}) for {u.batch}: {u.reason}")
    for s in opt.suggestions:
        print(f"  [SUGGEST] {s}")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Lecture timetable generator — command-line mode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  timetable-cli --config data/sample_department.json\n"
            "  timetable-cli --config cfg.json --out options.json --seed 42\n"
        ),
    )
    parser.add_argument("--config", required=True, metavar="FILE",
                        help="path to the department/constraints config JSON")
    parser.add_argument("--out", default=None, metavar="FILE",
                        help="write the generated options as JSON (optional)")
    parser.add_argument("--options", type=int, default=None, metavar="N",
                        help="number of options to generate (default: from config, else 2)")
    parser.add_argument("--seed", type=int, default=None,
                        help="random seed; the same seed reproduces the same options")
    parser.add_argument("--strategy", default=None, choices=list(STRATEGIES),
                        help="placement search [greedy = first-fit heuristic, "
                             "cpsat = OR-Tools exact model]  (default: from config)")
    parser.add_argument("--parallel", action="store_true", default=None,
                        help="compute options on a thread pool")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet",   action="store_true", help="warnings only")
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")

    # ── 1. load config ────────────────────────────────────────────────────────
    try:
        cfg = load_config(args.config)
    except FileNotFoundError:
        print(f"[ERROR] File not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    except (ConfigError, ValueError) as e:
        print(f"[ERROR] Could not load config: {e}", file=sys.stderr)
        sys.exit(1)

    # ── 2. precheck: report problems before generating ───────────────────────
    errors, warnings = precheck(cfg.roster, cfg.resources, cfg.constraints)
    for w in warnings:
        print(f"[WARNING] {w}")
    if errors:
        print(
            f"\n[ERROR] {len(errors)} precheck error(s) found — "
            "no timetable can be produced until these are fixed:\n",
            file=sys.stderr,
        )
        for i, err in enumerate(errors, 1):
            print(f"  {i}. {err}", file=sys.stderr)
        sys.exit(1)

    # ── 3. generate ───────────────────────────────────────────────────────────
    options = generate(cfg.roster, cfg.resources, cfg.constraints,
                       num_options=args.options, seed=args.seed,
                       strategy=args.strategy, parallel=args.parallel)
    if not options:
        print("[ERROR] Generation produced no options; see the log above.", file=sys.stderr)
        sys.exit(1)

    # ── 4. print summary ──────────────────────────────────────────────────────
    for opt in options:
        _print_option(opt, cfg)

    # ── 5. write output file (optional) ──────────────────────────────────────
    if args.out:
        save_options(options, args.out)
        print(f"\nOptions written to: {args.out}")

    sys.exit(0 if any(not o.unplaced for o in options) else 2)


if __name__ == "__main__":
    main()
