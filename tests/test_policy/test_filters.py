"""Unit tests for regex filter chains.

Tests for IgnoreFilterChain and CleanFilterChain including soft-fail
compilation, first-match reasons and the clean-every-URL policy.
"""

import unittest

from lectiod.core.constants import FilterKind
from lectiod.policy.filters import CleanFilterChain, IgnoreFilterChain, RegexRule


class TestRegexRule(unittest.TestCase):
    """Test suite for RegexRule."""

    def test_compile_keeps_source(self):
        rule = RegexRule.compile(r"^utm_")
        self.assertEqual(rule.pattern, r"^utm_")
        self.assertTrue(rule.matches("utm_source"))
        self.assertFalse(rule.matches("source_utm"))

    def test_matches_anywhere(self):
        """Patterns are searched, not anchored, like the configured regexes expect."""
        rule = RegexRule.compile("https://t.co")
        self.assertTrue(rule.matches("see https://t.co/abc"))


class TestFilterChainBuild(unittest.TestCase):
    """Test chain construction."""

    def setUp(self):
        self.errors = []

    def test_build_keeps_order(self):
        chain = IgnoreFilterChain.build(["a", "b", "c"], self.errors.append)
        self.assertEqual(chain.patterns, ("a", "b", "c"))
        self.assertEqual(len(chain), 3)
        self.assertEqual(self.errors, [])

    def test_bad_pattern_is_skipped_and_recorded(self):
        """A bad regex yields a one-rule chain and exactly one error."""
        chain = IgnoreFilterChain.build(["(bad", "good$"], self.errors.append)

        self.assertEqual(chain.patterns, ("good$",))
        self.assertEqual(len(self.errors), 1)
        self.assertIn("(bad", self.errors[0])
        self.assertTrue(self.errors[0].startswith("Error adding regexp '(bad' to ignore list: "))

    def test_bad_clean_pattern_names_clean_list(self):
        CleanFilterChain.build(["[unclosed"], self.errors.append)
        self.assertEqual(len(self.errors), 1)
        self.assertIn("to clean list", self.errors[0])

    def test_bad_pattern_does_not_abort_remaining(self):
        chain = CleanFilterChain.build(["^a", "(", "^b", "*", "^c"], self.errors.append)
        self.assertEqual(chain.patterns, ("^a", "^b", "^c"))
        self.assertEqual(len(self.errors), 2)

    def test_empty_patterns_are_ignored(self):
        chain = IgnoreFilterChain.build(["", "x"], self.errors.append)
        self.assertEqual(chain.patterns, ("x",))
        self.assertEqual(self.errors, [])

    def test_kinds(self):
        self.assertEqual(IgnoreFilterChain.kind, FilterKind.IGNORE)
        self.assertEqual(CleanFilterChain.kind, FilterKind.CLEAN)


class TestFilterChainMatching(unittest.TestCase):
    """Test first-match semantics."""

    def test_first_matching_rule_is_reported(self):
        chain = IgnoreFilterChain.build([r"example\.com", r"https://"], lambda m: None)
        matched, reason = chain.matches("https://example.com/page")

        self.assertTrue(matched)
        self.assertEqual(reason, r"Matched Ignore Rule `example\.com`")

    def test_later_rule_reported_when_first_misses(self):
        chain = IgnoreFilterChain.build(["nomatch", "page"], lambda m: None)
        self.assertEqual(
            chain.matches("https://example.com/page"),
            (True, "Matched Ignore Rule `page`"),
        )

    def test_no_match(self):
        chain = IgnoreFilterChain.build(["nomatch"], lambda m: None)
        self.assertEqual(chain.matches("https://example.com"), (False, ""))

    def test_empty_chain_matches_nothing(self):
        chain = IgnoreFilterChain()
        self.assertEqual(chain.matches("anything"), (False, ""))
        self.assertEqual(len(chain), 0)

    def test_ignore_policy_hook(self):
        chain = IgnoreFilterChain.build(["https://t.co"], lambda m: None)
        self.assertEqual(
            chain.is_ignored("https://t.co/xyz"),
            (True, "Matched Ignore Rule `https://t.co`"),
        )

    def test_clean_reason_label(self):
        chain = CleanFilterChain.build(["^utm_"], lambda m: None)
        self.assertEqual(
            chain.should_strip_param("utm_source"),
            (True, "Matched cleaner rule `^utm_`"),
        )
        self.assertEqual(chain.should_strip_param("id"), (False, ""))


class TestCleanChainPolicy(unittest.TestCase):
    """Clean chains attempt to clean every URL."""

    def test_should_clean_any_url_always_true(self):
        self.assertTrue(CleanFilterChain().should_clean_any_url())
        self.assertTrue(CleanFilterChain.build(["^utm_"], lambda m: None).should_clean_any_url())

    def test_should_clean_is_url_independent(self):
        chain = CleanFilterChain()
        self.assertTrue(chain.should_clean("https://example.com/"))
        self.assertTrue(chain.should_clean("https://example.com/?a=1"))


if __name__ == "__main__":
    unittest.main()
