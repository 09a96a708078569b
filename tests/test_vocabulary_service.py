from __future__ import annotations

import json

import pytest

from models.vocabulary_record import MissingFieldError
from services.vocabulary_service import VocabularyService


def test_find_by_name(vocabulary_file) -> None:
    service = VocabularyService(vocabulary_file)
    vocabulary = service.find_by_name("classes")
    assert len(vocabulary.records) == 4
    assert vocabulary.records[0].id == "1"
    assert vocabulary.records[0].field_value("class") == "HistoryBook"
    assert service.names() == ["classes", "empty"]


def test_unknown_vocabulary_lists_available(vocabulary_file) -> None:
    service = VocabularyService(vocabulary_file)
    with pytest.raises(KeyError, match="classes, empty"):
        service.find_by_name("missing")


def test_missing_field_raises(vocabulary_file) -> None:
    record = VocabularyService(vocabulary_file).records("classes")[3]
    with pytest.raises(MissingFieldError) as excinfo:
        record.field_value("terms")
    assert excinfo.value.field_name == "terms"
    assert str(excinfo.value) == "Record 4 has no value for field 'terms'"


def test_missing_file(tmp_path) -> None:
    service = VocabularyService(tmp_path / "nope.json")
    with pytest.raises(FileNotFoundError):
        service.records("classes")


def test_digest_changes_with_rules(vocabulary_file) -> None:
    before = VocabularyService(vocabulary_file).digest("classes")
    assert VocabularyService(vocabulary_file).digest("classes") == before

    payload = json.loads(vocabulary_file.read_text(encoding="utf-8"))
    payload["vocabularies"][0]["records"][0]["fields"]["terms"] = "history+novel"
    vocabulary_file.write_text(json.dumps(payload), encoding="utf-8")

    service = VocabularyService(vocabulary_file)
    assert service.digest("classes") != before
    assert service.digest("empty") != service.digest("classes")
