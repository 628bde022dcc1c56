"""URL candidate classification.

This package sorts harvested candidates into disjoint categories:
- ResourceClassifier: decision tree for a single candidate
- ClassificationPipeline: runs the harvesting engine, then classifies
"""

from lectiod.classifier.classifier import ResourceClassifier, category_of
from lectiod.classifier.pipeline import ClassificationPipeline

__all__ = [
    "ClassificationPipeline",
    "ResourceClassifier",
    "category_of",
]
