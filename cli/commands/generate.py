from __future__ import annotations

import argparse
from pathlib import Path

from cli.common import EXIT_FAILED, EXIT_OK, build_client, fail, open_history
from cli.ui import choose_from_menu, human_size
from pipeline.report import ReportGenerationError, ReportGenerator, render_report
from sonar_report.config import AppConfig, ReportDefaults, load_report_defaults
from sonar_report.domain import ReportOptions
from sonar_report.io import write_text_atomic
from tools.sonar.api import SonarAPIError


def _pick(flag, default):
    return default if flag is None else flag


def run_generate(args: argparse.Namespace, cfg: AppConfig) -> int:
    defaults = load_report_defaults(args.config) if args.config else ReportDefaults()
    fmt = args.format or defaults.format
    options = ReportOptions(
        include_code_snippets=bool(_pick(args.include_code_snippets, defaults.include_code_snippets)),
        include_how_to_fix=bool(_pick(args.include_how_to_fix, defaults.include_how_to_fix)),
    )

    client = build_client(cfg)

    project_key = args.project_key
    if not project_key:
        try:
            projects = client.get_projects()
        except SonarAPIError as e:
            return fail(f"Could not list projects: {e}")
        project_key = choose_from_menu(
            "Choose a project:",
            {str(p.get("key")): str(p.get("name") or p.get("key")) for p in projects if p.get("key")},
        )

    print("\n🚀 Generating report")
    print(f"  SonarQube : {cfg.sonar.host}")
    print(f"  Project   : {project_key}")
    print(f"  Branch    : {args.branch or '(main)'}")
    print(f"  Format    : {fmt}")
    print(f"  Snippets  : {'yes' if options.include_code_snippets else 'no'}")
    print(f"  How to fix: {'yes' if options.include_how_to_fix else 'no'}")

    try:
        report = ReportGenerator(client).generate(project_key, args.branch or "", options)
    except ReportGenerationError as e:
        return fail(f"Report generation failed ({e.stage}): {e.cause}", EXIT_FAILED)

    content = render_report(report, fmt)

    if not args.no_save:
        try:
            record = open_history(cfg).save(report, content, fmt)
        except OSError as e:
            return fail(f"Could not save report to {cfg.storage_path}: {e}", EXIT_FAILED)
        print(f"\n✅ Report saved: {record.file_path} ({human_size(record.file_size)}, id={record.id})")

    if args.output:
        out = Path(args.output).expanduser()
        try:
            write_text_atomic(out, content)
        except OSError as e:
            return fail(f"Could not write report to {out}: {e}", EXIT_FAILED)
        print(f"✅ Report written: {out}")

    if args.no_save and not args.output:
        print(content)

    gate = report.quality_gate_status or "NONE"
    print(f"  Quality gate: {gate} | issues: {report.total_issues} | hotspots: {report.total_hotspots}")
    return EXIT_OK
