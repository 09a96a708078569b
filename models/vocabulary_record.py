from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


class MissingFieldError(KeyError):
    """Raised when a vocabulary record has no usable value for a field."""

    def __init__(self, record_id: str, field_name: str):
        super().__init__(f"Record {record_id} has no value for field '{field_name}'")
        self.record_id = record_id
        self.field_name = field_name

    def __str__(self) -> str:
        return str(self.args[0])


@dataclass(slots=True)
class VocabularyRecord:
    """A single vocabulary entry with named string fields."""

    id: str
    fields: Dict[str, str] = field(default_factory=dict)

    def field_value(self, name: str) -> str:
        value = self.fields.get(name)
        if value is None or not str(value).strip():
            raise MissingFieldError(self.id, name)
        return str(value)


@dataclass(slots=True)
class Vocabulary:
    name: str
    records: List[VocabularyRecord] = field(default_factory=list)
