from __future__ import annotations

import argparse

from cli.common import EXIT_OK, EXIT_USAGE, fail, open_history
from cli.ui import format_table, human_size, prompt_yes_no
from sonar_report.config import AppConfig


def run_history(args: argparse.Namespace, cfg: AppConfig) -> int:
    history = open_history(cfg)
    action = args.history_action

    if action == "list":
        records = history.list()
        if args.project_key:
            records = [r for r in records if r.project_key == args.project_key]
        if not records:
            print(f"No saved reports in {cfg.storage_path}.")
            return EXIT_OK
        rows = [
            (
                r.id,
                r.project_key,
                r.branch or "-",
                r.format,
                human_size(r.file_size),
                r.generated_at_dt.strftime("%Y-%m-%d %H:%M:%S"),
            )
            for r in records
        ]
        print(format_table(["ID", "PROJECT", "BRANCH", "FORMAT", "SIZE", "GENERATED (UTC)"], rows))
        return EXIT_OK

    if action == "show":
        try:
            path = history.file_path(args.report_id)
        except KeyError:
            return fail(f"No saved report with id {args.report_id}")
        if args.path:
            print(path)
            return EXIT_OK
        try:
            print(path.read_text(encoding="utf-8"))
        except OSError as e:
            return fail(f"Could not read {path}: {e}")
        return EXIT_OK

    if action == "delete":
        try:
            history.delete(args.report_id)
        except KeyError:
            return fail(f"No saved report with id {args.report_id}")
        print(f"🗑️ Deleted report {args.report_id}")
        return EXIT_OK

    if action == "clear":
        if not args.yes and not prompt_yes_no(f"Delete all saved reports in {cfg.storage_path}?"):
            print("Aborted.")
            return EXIT_OK
        n = history.clear()
        print(f"🗑️ Deleted {n} report(s)")
        return EXIT_OK

    if action == "clean":
        days = cfg.retention_days if args.days is None else args.days
        if days < 0:
            return fail("--days must be >= 0", EXIT_USAGE)
        n = history.clean_old(days)
        print(f"🧹 Deleted {n} report(s) older than {days} day(s)")
        return EXIT_OK

    return fail(f"Unknown history action: {action}", EXIT_USAGE)
