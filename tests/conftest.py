from __future__ import annotations

import json
from pathlib import Path

import pytest


VOCABULARIES = {
    "vocabularies": [
        {
            "name": "classes",
            "records": [
                {"id": 1, "fields": {"terms": "history+book", "class": "HistoryBook"}},
                {"id": 2, "fields": {"terms": "science;tech", "class": "SciTech"}},
                {"id": 3, "fields": {"terms": "poe*", "class": "Poetry"}},
                {"id": 4, "fields": {"class": "NoTerms"}},
            ],
        },
        {"name": "empty", "records": []},
    ]
}


def write_document(path: Path, title: str | None, classes=(), anchor: bool = False) -> Path:
    metadata = [{"type": "TitleDocMain", "value": title}] if title is not None else []
    metadata += [{"type": "Classification", "value": value} for value in classes]
    volume = {"type": "Volume", "metadata": metadata}
    if anchor:
        payload = {"type": "MultiVolumeWork", "anchor": True, "metadata": [], "children": [volume]}
    else:
        payload = {"type": "Monograph", "metadata": metadata}
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def vocabulary_file(tmp_path: Path) -> Path:
    path = tmp_path / "vocabularies.json"
    path.write_text(json.dumps(VOCABULARIES), encoding="utf-8")
    return path


@pytest.fixture
def document_factory(tmp_path: Path):
    def factory(name: str, title: str | None, classes=(), anchor: bool = False) -> Path:
        return write_document(tmp_path / name, title, classes=classes, anchor=anchor)

    return factory


ENV_VARS = (
    "VOCABULARY_FILE",
    "VOCABULARY",
    "CLASS_FIELD",
    "TERMS_FIELD",
    "METADATA_TITLE",
    "METADATA_CLASS",
    "MAX_WORKERS",
    "LOG_DIR",
    "LOG_LEVEL",
    "STATS_FILE",
    "DB_PATH",
    "PROFILES_FILE",
)


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch):
    # load_dotenv writes straight into os.environ, so clear leftovers from earlier tests.
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("STATS_FILE", str(tmp_path / "data" / "stats.json"))
    monkeypatch.setenv("DB_PATH", str(tmp_path / "data" / "db.sqlite"))
    monkeypatch.setenv("PROFILES_FILE", str(tmp_path / "profiles.json"))
    return tmp_path
