"""Unit tests for ResourceClassifier.

Tests the per-candidate decision order, projected fields and the
aggregate result set.
"""

import unittest

from lectiod.classifier.classifier import ResourceClassifier, category_of
from lectiod.core.constants import ResourceCategory
from lectiod.core.models import HarvestedResource, IgnoredResource, InvalidResource
from lectiod.harvester.base import HarvestedCandidate


def valid(original, **kwargs):
    kwargs.setdefault("final_url", original)
    kwargs.setdefault("resolved_url", original)
    kwargs.setdefault("cleaned_url", original)
    return HarvestedCandidate(original_url=original, **kwargs)


class TestClassify(unittest.TestCase):
    """Test single candidate classification."""

    def setUp(self):
        self.classifier = ResourceClassifier()

    def test_invalid_url(self):
        resource = self.classifier.classify(
            HarvestedCandidate(original_url="not a url", url_valid=False)
        )
        self.assertEqual(resource, InvalidResource(url="not a url", reason="Invalid URL"))

    def test_invalid_url_wins_over_everything(self):
        resource = self.classifier.classify(HarvestedCandidate(
            original_url="x",
            url_valid=False,
            destination_valid=False,
            ignored=True,
            ignore_reason="Matched Ignore Rule `x`",
        ))
        self.assertEqual(resource.reason, "Invalid URL")

    def test_invalid_destination_without_ignore_reason(self):
        resource = self.classifier.classify(
            HarvestedCandidate(original_url="http://nowhere", destination_valid=False)
        )
        self.assertIsInstance(resource, InvalidResource)
        self.assertEqual(resource.url, "http://nowhere")
        self.assertEqual(resource.reason, "Invalid URL Destination: unknown reason")

    def test_invalid_destination_uses_ignore_reason(self):
        resource = self.classifier.classify(HarvestedCandidate(
            original_url="http://nowhere",
            destination_valid=False,
            ignored=True,
            ignore_reason="Matched Ignore Rule `nowhere`",
        ))
        self.assertIsInstance(resource, InvalidResource)
        self.assertEqual(
            resource.reason,
            "Invalid URL Destination: Matched Ignore Rule `nowhere`",
        )

    def test_ignored(self):
        resource = self.classifier.classify(valid(
            "https://t.co/abc",
            ignored=True,
            ignore_reason="Matched Ignore Rule `https://t.co`",
        ))
        self.assertIsInstance(resource, IgnoredResource)
        self.assertEqual(resource.reason, "Ignored: Matched Ignore Rule `https://t.co`")
        self.assertEqual(resource.urls.original, "https://t.co/abc")
        self.assertEqual(resource.urls.final, "https://t.co/abc")

    def test_harvested_cleaned(self):
        resource = self.classifier.classify(valid(
            "https://example.com/?utm_source=x",
            cleaned=True,
            clean_reason="Matched cleaner rule `^utm_`",
            cleaned_url="https://example.com/",
        ))
        self.assertIsInstance(resource, HarvestedResource)
        self.assertTrue(resource.is_cleaned)
        self.assertFalse(resource.is_html_redirect)
        self.assertIsNone(resource.redirect_url)
        self.assertEqual(resource.urls.original, "https://example.com/?utm_source=x")
        self.assertEqual(resource.urls.cleaned, "https://example.com/")

    def test_redirect_url_only_when_redirecting(self):
        redirect = self.classifier.classify(valid(
            "https://example.com/r",
            html_redirect=True,
            redirect_url="https://example.com/target",
        ))
        self.assertTrue(redirect.is_html_redirect)
        self.assertEqual(redirect.redirect_url, "https://example.com/target")

        plain = self.classifier.classify(valid(
            "https://example.com/r",
            redirect_url="https://example.com/ignored",
        ))
        self.assertIsNone(plain.redirect_url)

    def test_missing_urls_become_empty(self):
        resource = self.classifier.classify(HarvestedCandidate(original_url="https://example.com"))
        self.assertEqual(resource.urls.final, "")
        self.assertEqual(resource.urls.resolved, "")
        self.assertEqual(resource.urls.cleaned, "")

    def test_category_of(self):
        self.assertEqual(category_of(InvalidResource("x", "r")), ResourceCategory.INVALID)
        self.assertEqual(
            category_of(self.classifier.classify(valid("a", ignored=True))),
            ResourceCategory.IGNORED,
        )
        self.assertEqual(category_of(self.classifier.classify(valid("a"))), ResourceCategory.HARVESTED)


class TestClassifyAll(unittest.TestCase):
    """Test the aggregate result set."""

    def setUp(self):
        self.classifier = ResourceClassifier()
        self.candidates = [
            valid("https://b.example.com"),
            HarvestedCandidate(original_url="bad", url_valid=False),
            valid("https://a.example.com"),
            valid("https://t.co/x", ignored=True, ignore_reason="Matched Ignore Rule `https://t.co`"),
            HarvestedCandidate(original_url="http://nowhere", destination_valid=False),
            valid("https://b.example.com"),
        ]

    def test_every_candidate_in_exactly_one_list(self):
        result = self.classifier.classify_all("text", self.candidates)

        self.assertEqual(result.total, len(self.candidates))
        self.assertEqual(len(result.invalid), 2)
        self.assertEqual(len(result.ignored), 1)
        self.assertEqual(len(result.harvested), 3)

    def test_order_preserved_and_duplicates_kept(self):
        result = self.classifier.classify_all("text", self.candidates)

        self.assertEqual(
            [r.urls.original for r in result.harvested],
            ["https://b.example.com", "https://a.example.com", "https://b.example.com"],
        )
        self.assertEqual([r.url for r in result.invalid], ["bad", "http://nowhere"])

    def test_text_carried_through(self):
        result = self.classifier.classify_all("original text", [])
        self.assertEqual(result.text, "original text")
        self.assertEqual(result.total, 0)

    def test_statistics(self):
        result = self.classifier.classify_all("text", self.candidates)
        self.assertEqual(
            self.classifier.get_statistics(result),
            {"total_urls": 6, "invalid_count": 2, "ignored_count": 1, "harvested_count": 3},
        )

    def test_to_dict(self):
        result = self.classifier.classify_all("text", self.candidates[:2])
        data = result.to_dict()

        self.assertEqual(data["text"], "text")
        self.assertEqual(data["invalid"], [{"url": "bad", "reason": "Invalid URL"}])
        self.assertEqual(data["harvested"][0]["urls"]["original"], "https://b.example.com")
        self.assertEqual(data["ignored"], [])


if __name__ == "__main__":
    unittest.main()
