from __future__ import annotations

from collections import Counter

from services.statistics_service import StatisticsService


def test_record_run_accumulates(tmp_path):
    stats = StatisticsService(tmp_path / "stats.json")
    stats.record_run("classes", 2, 0, Counter({"SciTech": 2}))
    stats.record_run("classes", 1, 1, Counter({"SciTech": 1, "Poetry": 1}))
    stats.record_run("subjects", 1, 0, {})

    snapshot = stats.snapshot()
    assert snapshot["runs"] == 3
    assert snapshot["documents"] == 4
    assert snapshot["failures"] == 1
    assert snapshot["labels"] == {"SciTech": 3, "Poetry": 1}
    assert snapshot["vocabularies"]["classes"]["runs"] == 2
    assert snapshot["vocabularies"]["subjects"]["labels"] == {}


def test_corrupt_stats_file_is_reset(tmp_path):
    path = tmp_path / "stats.json"
    path.write_text("{broken", encoding="utf-8")
    assert StatisticsService(path).snapshot() == {}
