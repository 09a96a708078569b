"""Labeling strategy implementations used by the document classifier."""

from .base import LabelingStrategy
from .vocabulary_strategy import VocabularyStrategy

__all__ = [
    "LabelingStrategy",
    "VocabularyStrategy",
]
