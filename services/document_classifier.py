from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Set

from models.document import StructureElement
from services.strategies import LabelingStrategy

LOGGER = logging.getLogger(__name__)


class DocumentClassifier:
    """Combine the labels of several labeling strategies.

    Strategy errors (an unreadable or unknown vocabulary) propagate: an empty
    result must mean "nothing matched", never "the rules could not be loaded".
    """

    def __init__(self, strategies: Sequence[LabelingStrategy]):
        self.strategies = list(strategies)

    def classify(self, element: StructureElement) -> List[str]:
        labels: Set[str] = set()
        for strategy in self.strategies:
            found = list(strategy.labels_for(element))
            LOGGER.debug("%s labels: %s", type(strategy).__name__, found)
            labels.update(found)
        cleaned = self._clean(labels)
        LOGGER.info("%s classified as %s", element.type, cleaned)
        return cleaned

    def _clean(self, labels: Iterable[str]) -> List[str]:
        return sorted({label.strip() for label in labels if label and label.strip()})
