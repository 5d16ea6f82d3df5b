#!/usr/bin/env python3
"""Command line runner for MediTracker.

Subcommands mirror the interactive commands of the tracker:

    add     -n NAME -q QTY -e YYYY-MM-DD [-dM D] [-dA D] [-dE D] [-r TEXT] [-rep N]
    list    [-t]                          catalog, or today's doses with -t
    view    -l N | -n TEXT | -q MAX | -e YEAR | -r TEXT
    delete  -l N
    take    -l N [-m | -a | -e]           no period flag selects unscheduled doses
    untake  -l N [-m | -a | -e]
    export  [--out FILE.csv] [--dry-run 1]
    shell                                 read commands from stdin until `exit`

Exit codes: 0 ok, 1 command rejected (reported), 2 usage, 3 save file error.
"""
from __future__ import annotations

import argparse
import logging
import shlex
import sys
from decimal import Decimal, InvalidOperation
from typing import Optional, TextIO

import pandas as pd

from ..domains.common import fields as F
from ..domains.common.errors import FileReadWriteError, MediTrackerError
from ..domains.common.io import export_path
from ..domains.common.period import Period
from ..domains.config import load_config
from ..lib.io_guards import write_csv
from ..tracker import Tracker, open_tracker

logger = logging.getLogger("meditracker.cli")

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_USAGE = 2
EXIT_FILE = 3

LIST_PERIODS = (Period.MORNING, Period.AFTERNOON, Period.EVENING, Period.NONE)


def _amount(value: str) -> Decimal:
    try:
        parsed = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"'{value}' is not a number")
    if not parsed.is_finite() or parsed < 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be a non-negative number")
    return parsed


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a whole number")
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"'{value}' must be at least 1")
    return parsed


def _add_period_flags(p: argparse.ArgumentParser) -> None:
    g = p.add_mutually_exclusive_group()
    g.add_argument("-m", dest="period", action="store_const", const=Period.MORNING, help="Morning dose")
    g.add_argument("-a", dest="period", action="store_const", const=Period.AFTERNOON, help="Afternoon dose")
    g.add_argument("-e", dest="period", action="store_const", const=Period.EVENING, help="Evening dose")
    p.set_defaults(period=Period.NONE)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="meditracker", allow_abbrev=False)
    parser.add_argument("--config", default=None, help="YAML config file (default: config/meditracker.yaml)")
    sub = parser.add_subparsers(dest="cmd")

    p_add = sub.add_parser("add", help="Add a medication", allow_abbrev=False)
    p_add.add_argument("-n", "--name", required=True, help="Medication name")
    p_add.add_argument("-q", "--quantity", required=True, type=_amount, help="Quantity on hand")
    p_add.add_argument("-e", "--expiry", required=True, help="Expiry date YYYY-MM-DD")
    p_add.add_argument("-dM", "--dosage-morning", dest="dosage_morning", type=_amount, default=Decimal("0"))
    p_add.add_argument("-dA", "--dosage-afternoon", dest="dosage_afternoon", type=_amount, default=Decimal("0"))
    p_add.add_argument("-dE", "--dosage-evening", dest="dosage_evening", type=_amount, default=Decimal("0"))
    p_add.add_argument("-r", "--remarks", default="", help="Free text remarks")
    p_add.add_argument("-rep", "--repeat", type=_positive_int, default=1, help="Take every N days (default: 1)")

    p_list = sub.add_parser("list", help="List medications")
    p_list.add_argument("-t", "--today", action="store_true", help="List today's doses by period")

    p_view = sub.add_parser("view", help="View or search medications", allow_abbrev=False)
    g = p_view.add_mutually_exclusive_group(required=True)
    g.add_argument("-l", "--list-index", dest="index", type=int, help="Position in the medication list")
    g.add_argument("-n", "--name", help="Name contains (case-insensitive)")
    g.add_argument("-q", "--quantity", type=_amount, help="Quantity at most")
    g.add_argument("-e", "--expiry", type=int, help="Expiring in or before this year")
    g.add_argument("-r", "--remarks", help="Remarks contain (case-insensitive)")

    p_del = sub.add_parser("delete", help="Delete a medication")
    p_del.add_argument("-l", "--list-index", dest="index", type=int, required=True)

    for name, help_text in (("take", "Mark a dose as taken"), ("untake", "Revert a taken dose")):
        p = sub.add_parser(name, help=help_text, allow_abbrev=False)
        p.add_argument("-l", "--list-index", dest="index", type=int, required=True)
        _add_period_flags(p)

    p_exp = sub.add_parser("export", help="Export the catalog as CSV")
    p_exp.add_argument("--out", default=None, help="Target CSV (default: <data_dir>/exports/medications.csv)")
    p_exp.add_argument("--dry-run", type=int, default=0, help="If 1 only print what would be written")

    sub.add_parser("shell", help="Interactive mode; reads commands until 'exit'")
    return parser


# ============================================================================
# Command handlers
# ============================================================================

def _cmd_add(tracker: Tracker, args) -> int:
    medication = tracker.medications.new_record(
        name=args.name.strip(),
        quantity=args.quantity,
        dosage_morning=args.dosage_morning,
        dosage_afternoon=args.dosage_afternoon,
        dosage_evening=args.dosage_evening,
        expiry_date=args.expiry,
        remarks=args.remarks,
        repeat=args.repeat,
    )
    tracker.add_medication(medication)
    tracker.presenter.show_info(f"Medication has been added: {medication.name}")
    return EXIT_OK


def _cmd_list(tracker: Tracker, args) -> int:
    if args.today:
        tracker.presenter.show_intake({p: tracker.daily.by_period(p) for p in LIST_PERIODS})
    else:
        tracker.presenter.show_records(tracker.medications)
    return EXIT_OK


def _cmd_view(tracker: Tracker, args) -> int:
    meds = tracker.medications
    if args.index is not None:
        tracker.presenter.show_record(meds.get_by_position(args.index), position=args.index)
        return EXIT_OK
    if args.name is not None:
        matches = meds.find_by_name_contains(args.name)
    elif args.quantity is not None:
        matches = meds.find_by_quantity_at_most(args.quantity)
    elif args.expiry is not None:
        matches = meds.find_by_expiry_year_at_most(args.expiry)
    else:
        matches = meds.find_by_remarks_contains(args.remarks)
    tracker.presenter.show_records(matches)
    return EXIT_OK


def _cmd_delete(tracker: Tracker, args) -> int:
    removed = tracker.medications.remove_by_position(args.index)
    tracker.presenter.show_info(f"Medication has been deleted: {removed.name}")
    return EXIT_OK


def _cmd_take(tracker: Tracker, args) -> int:
    record = tracker.daily.take(args.index, args.period)
    tracker.presenter.show_info(f"Medication taken: {record.medication_name}")
    return EXIT_OK


def _cmd_untake(tracker: Tracker, args) -> int:
    record = tracker.daily.untake(args.index, args.period)
    tracker.presenter.show_info(f"Medication untaken: {record.medication_name}")
    return EXIT_OK


def _cmd_export(tracker: Tracker, args) -> int:
    out = args.out or export_path(tracker.cfg.data_dir)
    df = pd.DataFrame([m.to_fields() for m in tracker.medications], columns=list(F.MEDICATION_KEYS))
    write_csv(df, out, dry_run=bool(args.dry_run))
    if not args.dry_run:
        print(f"[DONE] Exported {len(df)} medication(s) -> {out}")
    return EXIT_OK


HANDLERS = {
    "add": _cmd_add,
    "list": _cmd_list,
    "view": _cmd_view,
    "delete": _cmd_delete,
    "take": _cmd_take,
    "untake": _cmd_untake,
    "export": _cmd_export,
}


def dispatch(tracker: Tracker, args) -> int:
    """Run one parsed command; tracker errors are reported, not raised."""
    handler = HANDLERS.get(args.cmd)
    if handler is None:
        return EXIT_USAGE
    try:
        return handler(tracker, args)
    except FileReadWriteError as e:
        tracker.presenter.show_error(e)
        return EXIT_FILE
    except MediTrackerError as e:
        logger.debug(f"{args.cmd} rejected: {e}")
        tracker.presenter.show_error(e)
        return EXIT_REJECTED


def run_shell(tracker: Tracker, parser: argparse.ArgumentParser, stream: Optional[TextIO] = None) -> int:
    """Read commands line by line and dispatch them until `exit` or EOF."""
    stream = stream or sys.stdin
    rc = EXIT_OK
    for line in stream:
        line = line.strip()
        if not line:
            continue
        if line in ("exit", "quit", "bye"):
            break
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            print(f"[error] {e}")
            continue
        try:
            args = parser.parse_args(tokens)
        except SystemExit:
            # argparse already printed the usage error
            continue
        if args.cmd in (None, "shell"):
            print("[error] expected one of: " + ", ".join(HANDLERS))
            continue
        rc = dispatch(tracker, args)
    return rc


def main(argv: list[str] | None = None, stdin: Optional[TextIO] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as se:
        return int(se.code) if isinstance(se.code, int) else EXIT_USAGE

    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"[error] {e}")
        return EXIT_USAGE
    lvl = getattr(logging, str(cfg.log_level).upper(), logging.WARNING)
    logging.basicConfig(level=lvl, format="[%(asctime)s] %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    if args.cmd is None:
        parser.print_help()
        return EXIT_USAGE

    try:
        tracker = open_tracker(cfg)
    except FileReadWriteError as e:
        print(f"[error] {e}")
        return EXIT_FILE

    if args.cmd == "shell":
        return run_shell(tracker, parser, stdin)
    return dispatch(tracker, args)


if __name__ == "__main__":
    raise SystemExit(main())
