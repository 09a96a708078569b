from __future__ import annotations

import logging
from typing import Iterable

from models.document import StructureElement
from services.class_assignment import ClassAssignmentPolicy
from services.vocabulary_service import VocabularyService

from .base import LabelingStrategy

LOGGER = logging.getLogger(__name__)


class VocabularyStrategy(LabelingStrategy):
    """Match the element's title against every rule of a vocabulary."""

    def __init__(
        self,
        policy: ClassAssignmentPolicy,
        vocabularies: VocabularyService,
        vocabulary_name: str,
        subject_field: str,
    ):
        self._policy = policy
        self._vocabularies = vocabularies
        self._vocabulary_name = vocabulary_name
        self._subject_field = subject_field

    def labels_for(self, element: StructureElement) -> Iterable[str]:
        values = element.values_of(self._subject_field)
        subject = values[-1] if values else ""
        if not subject:
            LOGGER.info("No %s metadata found, nothing to classify", self._subject_field)
            return []
        records = self._vocabularies.records(self._vocabulary_name)
        return self._policy.assign_records(records, subject)
