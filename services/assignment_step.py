from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from services.document_classifier import DocumentClassifier
from services.metadata_service import MetadataService

LOGGER = logging.getLogger(__name__)


class StepError(RuntimeError):
    """Raised when a metadata document cannot be read or written."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


@dataclass(slots=True)
class StepResult:
    path: Path
    subject: str
    labels: List[str] = field(default_factory=list)
    removed: int = 0
    written: bool = False


class ClassAssignmentStep:
    """Replace the class metadata of a document with the classes its title matches."""

    def __init__(
        self,
        metadata: MetadataService,
        classifier: DocumentClassifier,
        title_field: str,
        class_field: str,
    ):
        self._metadata = metadata
        self._classifier = classifier
        self._title_field = title_field
        self._class_field = class_field

    def run(self, path: Path, dry_run: bool = False) -> StepResult:
        try:
            document = self._metadata.read(path)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise StepError(path, f"cannot read metadata ({exc})") from exc

        logical = document.logical
        subject = self._metadata.subject_for(logical, self._title_field)
        # Classify before touching the document so a vocabulary failure leaves it as it was.
        try:
            labels = self._classifier.classify(logical)
        except (OSError, ValueError, KeyError) as exc:
            raise StepError(path, f"cannot classify ({exc})") from exc
        removed = self._metadata.replace_values(logical, self._class_field, labels)
        result = StepResult(path=path, subject=subject, labels=labels, removed=removed)

        if dry_run:
            LOGGER.info("[dry-run] %s would get %s", path, labels)
            return result

        try:
            self._metadata.write(document)
        except (OSError, TypeError, ValueError) as exc:
            raise StepError(path, f"cannot write metadata ({exc})") from exc
        result.written = True
        LOGGER.info("Assigned %s to %s (removed %s old entries)", labels, path, removed)
        return result
