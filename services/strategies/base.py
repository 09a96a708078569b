from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from models.document import StructureElement


class LabelingStrategy(ABC):
    """Strategy interface for deriving class labels from a structure element."""

    @abstractmethod
    def labels_for(self, element: StructureElement) -> Iterable[str]:
        """Return zero or more labels for the supplied element."""
        raise NotImplementedError
