import unittest

from tools.sonar.rules import (
    MAX_GUIDANCE_CHARS,
    extract_how_to_fix,
    guidance_from_rule,
    rule_description_text,
    strip_html,
    strip_html_tags,
)


class TestHowToFixExtraction(unittest.TestCase):
    def test_how_to_fix_prefix(self) -> None:
        self.assertEqual("Use X instead.", extract_how_to_fix("How to fix: Use X instead."))

    def test_first_paragraph_only(self) -> None:
        desc = "Intro text.\n\nHow to fix: Close the stream.\n\nMore details here."
        self.assertEqual("Close the stream.", extract_how_to_fix(desc))

    def test_compliant_solution(self) -> None:
        desc = "Bad things happen.\n\nCompliant solution: use a constant"
        self.assertEqual("use a constant", extract_how_to_fix(desc))

    def test_no_match_long_description_is_truncated(self) -> None:
        desc = "x" * 600
        out = extract_how_to_fix(desc)
        self.assertEqual(MAX_GUIDANCE_CHARS, len(out))
        self.assertEqual("x" * 497 + "...", out)

    def test_no_match_short_description_is_returned(self) -> None:
        self.assertEqual("Just a note.", extract_how_to_fix("Just a note."))


class TestRuleDescription(unittest.TestCase):
    def test_strip_html(self) -> None:
        self.assertEqual("a < b & c", strip_html_tags("<p>a &lt; b</p> &amp; c"))
        self.assertEqual("one two", strip_html("<p>one</p>\n\n  <p>two</p>"))

    def test_prefers_markdown_then_html(self) -> None:
        self.assertEqual("md text", rule_description_text({"mdDesc": "md text", "htmlDesc": "<p>html</p>"}))
        self.assertEqual("html text", rule_description_text({"htmlDesc": "<p>html <b>text</b></p>"}))
        self.assertEqual("", rule_description_text(None))

    def test_markdown_description_with_html_is_stripped(self) -> None:
        rule = {"mdDesc": "<h2>How to fix</h2>\n<p>Use X instead.</p>"}
        self.assertEqual("Use X instead.", guidance_from_rule(rule))

    def test_markdown_description_entities_are_decoded(self) -> None:
        self.assertEqual("use a < b", guidance_from_rule({"mdDesc": "How to fix: use a &lt; b"}))

    def test_markdown_description_keeps_paragraph_breaks(self) -> None:
        rule = {"mdDesc": "<p>Intro.</p>\n\n<h2>How to fix</h2>\n<p>Close it.</p>\n\n<p>See also.</p>"}
        self.assertEqual("Close it.", guidance_from_rule(rule))
        self.assertIn("\n\n", rule_description_text(rule))

    def test_markdown_description_of_only_tags_falls_back_to_html(self) -> None:
        rule = {"mdDesc": "<p></p>", "htmlDesc": "<p>html <b>text</b></p>"}
        self.assertEqual("html text", rule_description_text(rule))

    def test_description_sections_prefer_how_to_fix(self) -> None:
        rule = {
            "descriptionSections": [
                {"key": "root_cause", "content": "<p>Why it is bad</p>"},
                {"key": "how_to_fix", "content": "<p>Use a <code>with</code> block.</p>"},
            ]
        }
        self.assertEqual("Use a with block.", guidance_from_rule(rule))


if __name__ == "__main__":
    unittest.main()
