import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from typing import List
from unittest import mock

import report_cli
from sonar_report.io import ReportHistory


class _FakeSonar:
    def __init__(self, *, gate_fails: bool = False) -> None:
        self.gate_fails = gate_fails

    def validate(self):
        return None

    def get_projects(self):
        return [{"key": "proj", "name": "My Project"}, {"key": "other", "name": "Other"}]

    def get_branches(self, project_key):
        return [{"name": "main", "isMain": True}]

    def get_quality_gate_status(self, project_key, branch=""):
        if self.gate_fails:
            raise RuntimeError("HTTP 403")
        return {"status": "OK", "conditions": []}

    def get_measures(self, project_key, branch="", metric_keys=()):
        return [{"metric": "bugs", "value": "0"}]

    def get_issues(self, project_key, branch="", max_results=500):
        issue = {"key": "I1", "rule": "py:S1", "severity": "MAJOR", "type": "BUG", "message": "m", "component": "proj:a.py", "line": 4}
        return [issue], 1

    def get_hotspots(self, project_key, branch="", max_results=100):
        return [], 0

    def get_analyses(self, project_key, branch="", limit=1):
        return []

    def get_rule(self, rule_key):
        return {"mdDesc": "How to fix: rename it."}

    def get_source_code(self, component, from_line, to_line):
        return [(n, "x") for n in range(from_line, to_line + 1)]


class TestReportCli(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.storage = self.root / "reports"
        self.env_file = self.root / "missing.env"
        patcher = mock.patch.dict(os.environ, {"REPORT_STORAGE_PATH": str(self.storage)}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._td.cleanup)

    def _run(self, argv: List[str]) -> int:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = report_cli.main(["--env-file", str(self.env_file)] + argv)
        self.stdout, self.stderr = out.getvalue(), err.getvalue()
        return code

    def test_generate_saves_to_history_and_output(self) -> None:
        out_path = self.root / "out" / "report.html"
        with mock.patch("cli.commands.generate.build_client", return_value=_FakeSonar()):
            code = self._run(["generate", "--project-key", "proj", "--format", "html", "--output", str(out_path)])

        self.assertEqual(0, code)
        records = ReportHistory(self.storage).list()
        self.assertEqual(1, len(records))
        self.assertEqual("html", records[0].format)
        self.assertEqual("main", records[0].branch)
        self.assertTrue(out_path.read_text(encoding="utf-8").startswith("<!doctype html>"))

    def test_generate_uses_yaml_defaults_unless_overridden(self) -> None:
        cfg = self.root / "report.yaml"
        cfg.write_text("format: html\ninclude_code_snippets: false\n", encoding="utf-8")
        with mock.patch("cli.commands.generate.build_client", return_value=_FakeSonar()):
            code = self._run(["generate", "--project-key", "proj", "--config", str(cfg), "--format", "md"])

        self.assertEqual(0, code)
        record = ReportHistory(self.storage).list()[0]
        self.assertEqual("md", record.format)
        content = Path(record.file_path).read_text(encoding="utf-8")
        self.assertNotIn("Problematic Code", content)
        self.assertIn("rename it.", content)

    def test_generation_failure_exit_code(self) -> None:
        with mock.patch("cli.commands.generate.build_client", return_value=_FakeSonar(gate_fails=True)):
            code = self._run(["generate", "--project-key", "proj"])

        self.assertEqual(1, code)
        self.assertIn("quality_gate", self.stderr)
        self.assertEqual([], ReportHistory(self.storage).list())

    def test_config_error_exit_code(self) -> None:
        os.environ["SONARQUBE_URL"] = "ftp://nope"
        self.assertEqual(2, self._run(["history", "list"]))

        del os.environ["SONARQUBE_URL"]
        cfg = self.root / "bad.yaml"
        cfg.write_text("format: pdf\n", encoding="utf-8")
        self.assertEqual(2, self._run(["generate", "--project-key", "proj", "--config", str(cfg)]))

    def test_generate_json_output(self) -> None:
        out_path = self.root / "report.json"
        with mock.patch("cli.commands.generate.build_client", return_value=_FakeSonar()):
            code = self._run(["generate", "--project-key", "proj", "--format", "json", "--output", str(out_path)])

        self.assertEqual(0, code)
        data = json.loads(out_path.read_text(encoding="utf-8"))
        self.assertEqual("proj", data["project_key"])
        self.assertEqual("rename it.", data["issues_by_severity"]["MAJOR"][0]["how_to_fix"])
        record = ReportHistory(self.storage).list()[0]
        self.assertEqual("json", record.format)
        self.assertTrue(record.file_name.endswith(".json"))

    def test_unwritable_storage_is_a_one_line_failure(self) -> None:
        blocker = self.root / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        os.environ["REPORT_STORAGE_PATH"] = str(blocker / "reports")
        with mock.patch("cli.commands.generate.build_client", return_value=_FakeSonar()):
            code = self._run(["generate", "--project-key", "proj"])

        self.assertEqual(1, code)
        self.assertIn("Could not save report", self.stderr)
        self.assertNotIn("Traceback", self.stderr)

    def test_unwritable_output_is_a_one_line_failure(self) -> None:
        blocker = self.root / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        with mock.patch("cli.commands.generate.build_client", return_value=_FakeSonar()):
            code = self._run(["generate", "--project-key", "proj", "--no-save", "--output", str(blocker / "r.md")])

        self.assertEqual(1, code)
        self.assertIn("Could not write report", self.stderr)

    def test_history_on_unwritable_storage(self) -> None:
        blocker = self.root / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        os.environ["REPORT_STORAGE_PATH"] = str(blocker / "reports")
        self.assertEqual(1, self._run(["history", "list"]))
        self.assertTrue(self.stderr.startswith("❌"))

    def test_projects_filter(self) -> None:
        with mock.patch("cli.commands.browse.build_client", return_value=_FakeSonar()):
            code = self._run(["projects", "--filter", "my"])

        self.assertEqual(0, code)
        self.assertIn("proj", self.stdout)
        self.assertNotIn("other", self.stdout)
        self.assertIn("1 project(s)", self.stdout)

    def test_projects_unreachable_server(self) -> None:
        from tools.sonar.api import SonarAPIError

        fake = _FakeSonar()
        fake.validate = mock.Mock(side_effect=SonarAPIError("/api/system/status", "connection refused"))
        with mock.patch("cli.commands.browse.build_client", return_value=fake):
            code = self._run(["projects"])

        self.assertEqual(1, code)
        self.assertIn("Cannot reach SonarQube", self.stderr)

    def test_history_commands(self) -> None:
        with mock.patch("cli.commands.generate.build_client", return_value=_FakeSonar()):
            self.assertEqual(0, self._run(["generate", "--project-key", "proj"]))
        record = ReportHistory(self.storage).list()[0]

        self.assertEqual(0, self._run(["history", "list"]))
        self.assertIn(record.id, self.stdout)

        self.assertEqual(0, self._run(["history", "show", record.id]))
        self.assertIn("SonarQube Analysis Report", self.stdout)

        self.assertEqual(1, self._run(["history", "show", "nope"]))

        self.assertEqual(0, self._run(["history", "clean", "--days", "30"]))
        self.assertEqual(1, len(ReportHistory(self.storage).list()))

        self.assertEqual(0, self._run(["history", "delete", record.id]))
        self.assertEqual([], ReportHistory(self.storage).list())

        self.assertEqual(0, self._run(["history", "clear", "--yes"]))


if __name__ == "__main__":
    unittest.main()
