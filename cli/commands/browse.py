from __future__ import annotations

import argparse

from cli.common import EXIT_OK, build_client, fail
from cli.ui import format_table
from sonar_report.config import AppConfig
from tools.sonar.api import SonarAPIError


def run_projects(args: argparse.Namespace, cfg: AppConfig) -> int:
    client = build_client(cfg)
    try:
        client.validate()
    except SonarAPIError as e:
        return fail(f"Cannot reach SonarQube at {cfg.sonar.host}: {e}")
    try:
        projects = client.get_projects()
    except SonarAPIError as e:
        return fail(f"Could not list projects: {e}")

    needle = (args.name_filter or "").lower()
    if needle:
        projects = [
            p for p in projects
            if needle in str(p.get("key") or "").lower() or needle in str(p.get("name") or "").lower()
        ]

    if not projects:
        print("No projects found.")
        return EXIT_OK

    rows = [
        (p.get("key") or "", p.get("name") or "", p.get("lastAnalysisDate") or "-")
        for p in projects
    ]
    print(format_table(["KEY", "NAME", "LAST ANALYSIS"], rows))
    print(f"\n{len(rows)} project(s)")
    return EXIT_OK


def run_branches(args: argparse.Namespace, cfg: AppConfig) -> int:
    try:
        branches = build_client(cfg).get_branches(args.project_key)
    except SonarAPIError as e:
        return fail(f"Could not list branches for {args.project_key}: {e}")

    if not branches:
        print(f"No branches found for {args.project_key}.")
        return EXIT_OK

    rows = []
    for b in branches:
        status = b.get("status") if isinstance(b.get("status"), dict) else {}
        rows.append(
            (
                b.get("name") or "",
                "yes" if b.get("isMain") else "",
                status.get("qualityGateStatus") or "-",
                b.get("analysisDate") or "-",
            )
        )
    print(format_table(["BRANCH", "MAIN", "QUALITY GATE", "LAST ANALYSIS"], rows))
    return EXIT_OK
