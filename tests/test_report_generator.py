import threading
import unittest
from typing import Any, Dict, List, Optional, Tuple

from pipeline.report.generator import ReportGenerationError, ReportGenerator
from sonar_report.domain import ReportOptions


def _issue(i: int, severity: str, issue_type: str = "CODE_SMELL", rule: str = "py:S100") -> Dict[str, Any]:
    return {
        "key": f"AX{i}",
        "rule": rule,
        "severity": severity,
        "type": issue_type,
        "message": f"issue {i}",
        "component": f"proj:src/m{i}.py",
        "line": 10,
        "textRange": {"startLine": 10, "endLine": 11},
        "effort": "5min",
    }


class _FakeSonar:
    """In-memory stand-in for SonarClient."""

    def __init__(
        self,
        *,
        issues: Optional[List[Dict[str, Any]]] = None,
        issues_total: Optional[int] = None,
        hotspots: Optional[List[Dict[str, Any]]] = None,
        hotspots_total: Optional[int] = None,
        branches: Optional[List[Dict[str, Any]]] = None,
        fail: Tuple[str, ...] = (),
    ) -> None:
        self.issues = issues or []
        self.issues_total = len(self.issues) if issues_total is None else issues_total
        self.hotspots = hotspots or []
        self.hotspots_total = len(self.hotspots) if hotspots_total is None else hotspots_total
        self.branches = branches or []
        self.fail = set(fail)
        self.calls: List[Tuple[str, Any]] = []
        self._lock = threading.Lock()

    def _record(self, name: str, *args: Any) -> None:
        with self._lock:
            self.calls.append((name, args))
        if name in self.fail:
            raise RuntimeError(f"{name} exploded")

    def calls_to(self, name: str) -> List[Any]:
        return [args for n, args in self.calls if n == name]

    def get_projects(self):
        self._record("get_projects")
        return [{"key": "other", "name": "Other"}, {"key": "proj", "name": "My Project"}]

    def get_branches(self, project_key):
        self._record("get_branches", project_key)
        return self.branches

    def get_quality_gate_status(self, project_key, branch=""):
        self._record("get_quality_gate_status", project_key, branch)
        return {
            "status": "ERROR",
            "conditions": [
                {"metricKey": "new_coverage", "status": "ERROR", "actualValue": "12.5", "errorThreshold": "80", "comparator": "LT"}
            ],
        }

    def get_measures(self, project_key, branch="", metric_keys=()):
        self._record("get_measures", project_key, branch)
        return [{"metric": "bugs", "value": "3"}, {"metric": "sqale_index", "value": "90"}]

    def get_issues(self, project_key, branch="", max_results=500):
        self._record("get_issues", project_key, branch, max_results)
        return self.issues[:max_results], self.issues_total

    def get_hotspots(self, project_key, branch="", max_results=100):
        self._record("get_hotspots", project_key, branch, max_results)
        return self.hotspots[:max_results], self.hotspots_total

    def get_analyses(self, project_key, branch="", limit=1):
        self._record("get_analyses", project_key, branch, limit)
        return [{"key": "A1", "date": "2024-05-01T10:00:00+0000"}]

    def get_rule(self, rule_key):
        self._record("get_rule", rule_key)
        return {"mdDesc": "How to fix: do the right thing."}

    def get_source_code(self, component, from_line, to_line):
        self._record("get_source_code", component, from_line, to_line)
        return [(n, f"line {n}") for n in range(from_line, to_line + 1)]


class TestReportGenerator(unittest.TestCase):
    def test_builds_model_from_upstream_data(self) -> None:
        issues = [_issue(0, "MAJOR", "BUG"), _issue(1, "BLOCKER", "VULNERABILITY"), _issue(2, "MAJOR")]
        hotspots = [
            {"key": "H1", "vulnerabilityProbability": "HIGH", "securityCategory": "sql-injection", "component": "proj:a.py", "line": 3},
            {"key": "H2", "vulnerabilityProbability": "LOW", "securityCategory": "weak-cryptography", "component": "proj:b.py"},
            {"key": "H3", "vulnerabilityProbability": "HIGH", "securityCategory": "xss", "component": "proj:c.py"},
        ]
        client = _FakeSonar(issues=issues, hotspots=hotspots)

        report = ReportGenerator(client).generate("proj", "develop")

        self.assertEqual("My Project", report.project_name)
        self.assertEqual("develop", report.branch)
        self.assertEqual("ERROR", report.quality_gate_status)
        self.assertEqual("new_coverage", report.quality_gate_conditions[0].metric)
        self.assertEqual("3", report.metrics.bugs)
        self.assertEqual("1h 30min", report.metrics.technical_debt)
        self.assertEqual("2024-05-01T10:00:00+0000", report.analysis_date)
        self.assertEqual({"BUG": 1, "VULNERABILITY": 1, "CODE_SMELL": 1}, report.issues_by_type)
        self.assertEqual(["BLOCKER", "MAJOR"], report.sorted_severities())
        self.assertEqual(["AX0", "AX2"], [f.key for f in report.issues_by_severity["MAJOR"]])
        self.assertEqual({"HIGH": 2, "LOW": 1}, report.hotspots_by_priority)
        self.assertEqual("src/m0.py", report.issues_by_severity["MAJOR"][0].component)
        # No branch lookup when the caller names one.
        self.assertEqual([], client.calls_to("get_branches"))

    def test_returned_collections_are_read_only(self) -> None:
        hotspots = [{"key": "H1", "vulnerabilityProbability": "HIGH", "component": "proj:a.py"}]
        report = ReportGenerator(_FakeSonar(issues=[_issue(0, "MAJOR")], hotspots=hotspots)).generate("proj", "main")

        with self.assertRaises(TypeError):
            report.issues_by_type["BUG"] = 5  # type: ignore[index]
        with self.assertRaises(TypeError):
            report.issues_by_severity["INFO"] = ()  # type: ignore[index]
        with self.assertRaises(TypeError):
            report.hotspots_by_priority["LOW"] = 1  # type: ignore[index]
        self.assertIsInstance(report.issues_by_severity["MAJOR"], tuple)

    def test_enrichment_is_applied_to_findings(self) -> None:
        client = _FakeSonar(issues=[_issue(0, "MAJOR"), _issue(1, "MAJOR")])

        report = ReportGenerator(client).generate("proj", "main")

        for f in report.issues_by_severity["MAJOR"]:
            self.assertIn("> 10: line 10", f.code_snippet)
            self.assertEqual("do the right thing.", f.how_to_fix)
        self.assertEqual(1, len(client.calls_to("get_rule")))

    def test_upstream_totals_survive_caps(self) -> None:
        issues = [_issue(i, "MINOR") for i in range(600)]
        client = _FakeSonar(issues=issues, issues_total=1234, hotspots_total=0)

        report = ReportGenerator(client).generate("proj", "main", ReportOptions(False, False))

        self.assertEqual(1234, report.total_issues)
        self.assertEqual(500, len(report.all_findings()))
        self.assertEqual(500, client.calls_to("get_issues")[0][2])
        self.assertEqual(100, client.calls_to("get_hotspots")[0][2])

    def test_enrichment_capped_per_severity(self) -> None:
        issues = [_issue(i, "MAJOR") for i in range(15)] + [_issue(100 + i, "MINOR") for i in range(3)]
        client = _FakeSonar(issues=issues)

        report = ReportGenerator(client).generate("proj", "main", ReportOptions(include_how_to_fix=False))

        self.assertEqual(13, len(client.calls_to("get_source_code")))
        major = report.issues_by_severity["MAJOR"]
        self.assertTrue(all(f.code_snippet for f in major[:10]))
        self.assertTrue(all(not f.code_snippet for f in major[10:]))
        self.assertTrue(all(f.code_snippet for f in report.issues_by_severity["MINOR"]))

    def test_severity_grouping_covers_each_finding_once(self) -> None:
        sevs = ["INFO", "MAJOR", "BLOCKER", "WEIRD", "MINOR", "CRITICAL", "MAJOR", "INFO"]
        issues = [_issue(i, s, "BUG" if i % 2 else "CODE_SMELL") for i, s in enumerate(sevs)]
        client = _FakeSonar(issues=issues)

        report = ReportGenerator(client).generate("proj", "main", ReportOptions(False, False))

        keys = [f.key for f in report.all_findings()]
        self.assertEqual(sorted(i["key"] for i in issues), sorted(keys))
        self.assertEqual(len(issues), len(set(keys)))
        self.assertEqual(len(issues), sum(report.issues_by_type.values()))
        self.assertEqual(["BLOCKER", "CRITICAL", "MAJOR", "MINOR", "INFO", "WEIRD"], report.sorted_severities())

    def test_main_branch_resolution(self) -> None:
        client = _FakeSonar(branches=[{"name": "feature", "isMain": False}, {"name": "trunk", "isMain": True}])

        report = ReportGenerator(client).generate("proj")

        self.assertEqual("trunk", report.branch)
        self.assertEqual(("proj", "trunk"), client.calls_to("get_quality_gate_status")[0])

    def test_branch_lookup_failure_is_tolerated(self) -> None:
        client = _FakeSonar(fail=("get_branches",))

        report = ReportGenerator(client).generate("proj")

        self.assertEqual("", report.branch)

    def test_unknown_project_falls_back_to_key(self) -> None:
        report = ReportGenerator(_FakeSonar()).generate("nope", "main")
        self.assertEqual("nope", report.project_name)

    def test_fatal_stages(self) -> None:
        for method, stage in [
            ("get_projects", "projects"),
            ("get_quality_gate_status", "quality_gate"),
            ("get_measures", "measures"),
            ("get_issues", "issues"),
        ]:
            with self.subTest(stage=stage):
                client = _FakeSonar(fail=(method,))
                with self.assertRaises(ReportGenerationError) as ctx:
                    ReportGenerator(client).generate("proj", "main")
                self.assertEqual(stage, ctx.exception.stage)
                self.assertIsInstance(ctx.exception.__cause__, RuntimeError)
                self.assertIn(stage.replace("_", " "), str(ctx.exception))

    def test_tolerated_stages(self) -> None:
        client = _FakeSonar(
            issues=[_issue(0, "MAJOR")],
            hotspots=[{"key": "H1", "vulnerabilityProbability": "HIGH"}],
            fail=("get_hotspots", "get_analyses", "get_rule", "get_source_code"),
        )

        report = ReportGenerator(client).generate("proj", "main")

        self.assertEqual(0, report.total_hotspots)
        self.assertEqual((), report.hotspots)
        self.assertIsNone(report.analysis_date)
        finding = report.issues_by_severity["MAJOR"][0]
        self.assertEqual("", finding.code_snippet)
        self.assertEqual("", finding.how_to_fix)


if __name__ == "__main__":
    unittest.main()
