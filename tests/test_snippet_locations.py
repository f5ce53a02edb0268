import unittest
from typing import List, Tuple

from pipeline.report.locations import fetch_code_snippet, format_snippet, resolve_snippet_range


class _RecordingSource:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, int, int]] = []

    def get_source_code(self, component: str, from_line: int, to_line: int) -> List[Tuple[int, str]]:
        self.calls.append((component, from_line, to_line))
        return [(n, f"code {n}") for n in range(from_line, to_line + 1)]


class TestResolveSnippetRange(unittest.TestCase):
    def test_header_issue_uses_flow_location(self) -> None:
        issue = {
            "component": "proj:src/a.py",
            "line": 1,
            "textRange": {"startLine": 1, "endLine": 1},
            "flows": [
                {"locations": [{"component": "proj:src/b.py", "textRange": {"startLine": 40, "endLine": 42}}]}
            ],
        }
        rng = resolve_snippet_range(issue)
        self.assertEqual("proj:src/b.py", rng.component)
        self.assertEqual((40, 42), (rng.start_line, rng.end_line))

    def test_flow_ignored_when_issue_is_below_header(self) -> None:
        issue = {
            "component": "proj:src/a.py",
            "textRange": {"startLine": 12, "endLine": 14},
            "flows": [{"locations": [{"textRange": {"startLine": 80, "endLine": 80}}]}],
        }
        rng = resolve_snippet_range(issue)
        self.assertEqual(("proj:src/a.py", 12, 14), (rng.component, rng.start_line, rng.end_line))

    def test_flow_inside_header_is_ignored(self) -> None:
        issue = {
            "component": "proj:src/a.py",
            "line": 2,
            "flows": [{"locations": [{"textRange": {"startLine": 3, "endLine": 3}}]}],
        }
        rng = resolve_snippet_range(issue)
        self.assertEqual((2, 2), (rng.start_line, rng.end_line))


class TestFetchCodeSnippet(unittest.TestCase):
    def test_line_zero_requests_file_head(self) -> None:
        src = _RecordingSource()
        out = fetch_code_snippet(src, {"component": "proj:src/a.py"})
        self.assertEqual([("proj:src/a.py", 1, 10)], src.calls)
        self.assertTrue(all(line.startswith("  ") for line in out.split("\n")))
        self.assertEqual(10, len(out.split("\n")))

    def test_context_and_marking(self) -> None:
        src = _RecordingSource()
        out = fetch_code_snippet(src, {"component": "proj:src/a.py", "textRange": {"startLine": 12, "endLine": 13}})
        self.assertEqual([("proj:src/a.py", 9, 16)], src.calls)
        lines = out.split("\n")
        self.assertEqual("  9: code 9", lines[0])
        self.assertEqual("> 12: code 12", lines[3])
        self.assertEqual("> 13: code 13", lines[4])
        self.assertEqual("  16: code 16", lines[-1])

    def test_context_clamped_at_first_line(self) -> None:
        src = _RecordingSource()
        fetch_code_snippet(src, {"component": "proj:src/a.py", "line": 2})
        self.assertEqual([("proj:src/a.py", 1, 5)], src.calls)

    def test_no_component_no_fetch(self) -> None:
        src = _RecordingSource()
        self.assertEqual("", fetch_code_snippet(src, {"line": 5}))
        self.assertEqual([], src.calls)

    def test_format_snippet_strips_html(self) -> None:
        out = format_snippet([(11, "x = 1"), (12, "<span class='k'>if</span> a &lt; b")], mark_from=12, mark_to=12)
        self.assertEqual("  11: x = 1\n> 12: if a < b", out)


if __name__ == "__main__":
    unittest.main()
