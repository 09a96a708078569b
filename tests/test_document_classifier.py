from __future__ import annotations

from collections import deque
from typing import Iterable

import pytest

from models.document import MetadataEntry, StructureElement
from models.vocabulary_record import Vocabulary, VocabularyRecord
from services.class_assignment import ClassAssignmentPolicy
from services.document_classifier import DocumentClassifier
from services.strategies import LabelingStrategy, VocabularyStrategy


class DummyStrategy(LabelingStrategy):
    def __init__(self, labels: Iterable[str]):
        self._labels = deque(labels)

    def labels_for(self, element: StructureElement) -> Iterable[str]:  # noqa: ARG002
        if not self._labels:
            return []
        return [self._labels.popleft()]


class FailingStrategy(LabelingStrategy):
    def labels_for(self, element: StructureElement) -> Iterable[str]:  # noqa: ARG002
        raise KeyError("Unknown vocabulary 'missing'")


class FakeVocabularies:
    def __init__(self, vocabulary: Vocabulary):
        self._vocabulary = vocabulary

    def records(self, name: str):
        assert name == self._vocabulary.name
        return list(self._vocabulary.records)


def _element(title: str | None) -> StructureElement:
    metadata = [MetadataEntry("TitleDocMain", title)] if title is not None else []
    return StructureElement(type="Monograph", metadata=metadata)


def test_document_classifier_merges_strategies():
    classifier = DocumentClassifier([DummyStrategy(["Work"]), DummyStrategy(["Finance "]), DummyStrategy([""])])
    labels = classifier.classify(_element(None))
    assert labels == ["Finance", "Work"]


def test_document_classifier_propagates_strategy_errors():
    classifier = DocumentClassifier([DummyStrategy(["Work"]), FailingStrategy()])
    with pytest.raises(KeyError, match="missing"):
        classifier.classify(_element(None))


def test_vocabulary_strategy_uses_title():
    vocabulary = Vocabulary(
        name="classes",
        records=[
            VocabularyRecord(id="1", fields={"terms": "history+book", "class": "HistoryBook"}),
            VocabularyRecord(id="2", fields={"terms": "science;tech", "class": "SciTech"}),
            VocabularyRecord(id="3", fields={"terms": "poetry", "class": "Poetry"}),
        ],
    )
    strategy = VocabularyStrategy(ClassAssignmentPolicy(), FakeVocabularies(vocabulary), "classes", "TitleDocMain")
    classifier = DocumentClassifier([strategy])
    assert classifier.classify(_element("A history book about tech")) == ["HistoryBook", "SciTech"]
    assert classifier.classify(_element(None)) == []
