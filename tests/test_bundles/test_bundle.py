"""Unit tests for ConfigurationBundle.

Tests construction from directives, soft-fail regex compilation and
loading from external configuration sources.
"""

import tempfile
import unittest
from pathlib import Path

from lectiod.bundles.bundle import ConfigurationBundle
from lectiod.core.config import default_bundle_settings
from lectiod.core.models import HarvestDirectives, StorageSettings


class TestConfigurationBundle(unittest.TestCase):
    """Test bundle construction."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def make_bundle(self, ignore=(), clean=(), follow=True, storage=None, errors=()):
        return ConfigurationBundle(
            "TEST",
            HarvestDirectives(
                ignore_urls_regexprs=list(ignore),
                remove_params_from_urls_regexprs=list(clean),
                follow_html_redirects=follow,
            ),
            storage or StorageSettings(type="memory"),
            errors=errors,
        )

    def test_default_directives_build_cleanly(self):
        settings = default_bundle_settings(storage_base_path=str(self.base / "store"))
        bundle = ConfigurationBundle.from_settings(settings)

        self.assertEqual(bundle.errors, ())
        self.assertEqual(len(bundle.ignore_chain), 2)
        self.assertEqual(len(bundle.clean_chain), 1)
        self.assertTrue(bundle.follow_html_redirects)
        self.assertTrue(bundle.store.is_valid)

    def test_default_ignore_rules(self):
        bundle = ConfigurationBundle.from_settings(
            default_bundle_settings(storage_base_path=str(self.base / "store"))
        )

        ignored, reason = bundle.ignore_chain.is_ignored("https://twitter.com/someone/status/123")
        self.assertTrue(ignored)
        self.assertIn("status", reason)

        ignored, reason = bundle.ignore_chain.is_ignored("https://t.co/abc")
        self.assertEqual((ignored, reason), (True, "Matched Ignore Rule `https://t.co`"))

        self.assertEqual(bundle.ignore_chain.is_ignored("https://example.com/"), (False, ""))

    def test_default_clean_rule(self):
        bundle = ConfigurationBundle.from_settings(
            default_bundle_settings(storage_base_path=str(self.base / "store"))
        )
        self.assertTrue(bundle.clean_chain.should_strip_param("utm_source")[0])
        self.assertFalse(bundle.clean_chain.should_strip_param("page")[0])

    def test_bad_regex_recorded_not_fatal(self):
        bundle = self.make_bundle(ignore=["(bad", "good$"])

        self.assertEqual(bundle.ignore_chain.patterns, ("good$",))
        self.assertEqual(len(bundle.errors), 1)
        self.assertIn("(bad", bundle.errors[0])

    def test_errors_from_both_chains_accumulate_in_order(self):
        bundle = self.make_bundle(ignore=["("], clean=["["], errors=["loader problem"])

        self.assertEqual(len(bundle.errors), 3)
        self.assertEqual(bundle.errors[0], "loader problem")
        self.assertIn("ignore list", bundle.errors[1])
        self.assertIn("clean list", bundle.errors[2])

    def test_errors_view_is_read_only(self):
        bundle = self.make_bundle()
        self.assertIsInstance(bundle.errors, tuple)
        bundle.record_error("late")
        self.assertEqual(bundle.errors, ("late",))

    def test_storage_target_kept_verbatim(self):
        storage = StorageSettings.filesystem(str(self.base / "files"))
        bundle = self.make_bundle(storage=storage)

        self.assertIs(bundle.storage_target, storage)
        self.assertTrue((self.base / "files").is_dir())

    def test_storage_failure_does_not_prevent_construction(self):
        blocker = self.base / "blocker"
        blocker.write_text("x")
        bundle = self.make_bundle(storage=StorageSettings.filesystem(str(blocker)))

        self.assertFalse(bundle.store.is_valid)
        self.assertFalse(bundle.summary().storage_valid)

    def test_summary(self):
        bundle = self.make_bundle(ignore=["a", "("], clean=["b"], follow=False)
        summary = bundle.summary()

        self.assertEqual(summary.name, "TEST")
        self.assertEqual(summary.ignore_patterns, ("a", "("))
        self.assertEqual(summary.clean_patterns, ("b",))
        self.assertFalse(summary.follow_html_redirects)
        self.assertEqual(len(summary.errors), 1)
        self.assertEqual(summary.to_dict()["harvest"]["ignore_urls_regexprs"], ["a", "("])


class TestBundleLoading(unittest.TestCase):
    """Test building bundles from configuration files."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_dir = Path(self.temp_dir.name)
        self.provider = lambda name: [str(self.config_dir)]

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_load_from_file(self):
        (self.config_dir / "TENANT.yaml").write_text(
            "harvest:\n"
            "  ignore_urls_regexprs: ['(broken', 'example']\n"
            "  remove_params_from_urls_regexprs: ['^ref$']\n"
            "  follow_html_redirects: false\n"
        )
        bundle = ConfigurationBundle.load("TENANT", self.provider)

        self.assertEqual(bundle.name, "TENANT")
        self.assertEqual(bundle.ignore_chain.patterns, ("example",))
        self.assertEqual(bundle.clean_chain.patterns, ("^ref$",))
        self.assertFalse(bundle.follow_html_redirects)
        self.assertEqual(bundle.storage_target.type, "memory")
        self.assertEqual(len(bundle.errors), 1)

    def test_load_unreadable_file_uses_fallback(self):
        (self.config_dir / "BROKEN.yaml").write_text("harvest: [")
        fallback = default_bundle_settings("BROKEN", storage_base_path=str(self.config_dir / "store"))
        bundle = ConfigurationBundle.load("BROKEN", self.provider, fallback=fallback)

        self.assertEqual(len(bundle.errors), 1)
        self.assertEqual(len(bundle.ignore_chain), 2)


if __name__ == "__main__":
    unittest.main()
