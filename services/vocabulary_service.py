from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Dict, List

from models.vocabulary_record import Vocabulary, VocabularyRecord

LOGGER = logging.getLogger(__name__)


class VocabularyService:
    """Read-only access to vocabularies stored in a JSON file."""

    def __init__(self, vocabulary_file: Path):
        self.vocabulary_file = vocabulary_file
        self._vocabularies: Dict[str, Vocabulary] | None = None

    def reload(self) -> None:
        if not self.vocabulary_file.exists():
            raise FileNotFoundError(f"Missing vocabulary file: {self.vocabulary_file}")
        data = json.loads(self.vocabulary_file.read_text(encoding="utf-8"))
        vocabularies: Dict[str, Vocabulary] = {}
        for item in data.get("vocabularies", []):
            name = item.get("name")
            if not name:
                LOGGER.warning("Ignoring vocabulary without a name in %s", self.vocabulary_file)
                continue
            records = [
                VocabularyRecord(
                    id=str(entry.get("id", index)),
                    fields={key: str(value) for key, value in (entry.get("fields") or {}).items() if value is not None},
                )
                for index, entry in enumerate(item.get("records", []))
            ]
            vocabularies[name] = Vocabulary(name=name, records=records)
        self._vocabularies = vocabularies
        LOGGER.info("Loaded %s vocabularies from %s", len(vocabularies), self.vocabulary_file)

    def names(self) -> List[str]:
        return sorted(self._loaded())

    def find_by_name(self, name: str) -> Vocabulary:
        vocabularies = self._loaded()
        if name not in vocabularies:
            available = ", ".join(self.names()) or "none"
            raise KeyError(f"Unknown vocabulary '{name}'. Available vocabularies: {available}")
        return vocabularies[name]

    def records(self, name: str) -> List[VocabularyRecord]:
        return list(self.find_by_name(name).records)

    def digest(self, name: str) -> str:
        """Stable hash of a vocabulary's records; changes whenever a rule or class changes."""

        payload = [[record.id, record.fields] for record in self.find_by_name(name).records]
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()

    def _loaded(self) -> Dict[str, Vocabulary]:
        if self._vocabularies is None:
            self.reload()
        return self._vocabularies or {}
