from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Mapping

LOGGER = logging.getLogger(__name__)


class StatisticsService:
    """Very small JSON-backed stats store."""

    def __init__(self, stats_file: Path):
        self._stats_file = stats_file
        self._stats_file.touch(exist_ok=True)
        if not self._stats_file.read_text(encoding="utf-8").strip():
            self._stats_file.write_text(json.dumps({}), encoding="utf-8")

    def _read(self) -> Dict:
        try:
            return json.loads(self._stats_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            LOGGER.warning("Stats file was corrupt, resetting %s", self._stats_file)
            self._stats_file.write_text(json.dumps({}), encoding="utf-8")
            return {}

    def _write(self, payload: Dict) -> None:
        self._stats_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def record_run(
        self,
        vocabulary: str,
        documents: int,
        failures: int,
        label_counts: Mapping[str, int],
    ) -> None:
        stats = self._read()
        self._bump(stats, documents, failures, label_counts)
        self._bump(self._vocabulary_bucket(stats, vocabulary), documents, failures, label_counts)
        self._write(stats)

    def snapshot(self) -> Dict:
        return self._read()

    def _bump(self, bucket: Dict, documents: int, failures: int, label_counts: Mapping[str, int]) -> None:
        bucket["runs"] = bucket.get("runs", 0) + 1
        bucket["documents"] = bucket.get("documents", 0) + documents
        bucket["failures"] = bucket.get("failures", 0) + failures
        labels = Counter(bucket.get("labels", {}))
        for label, count in label_counts.items():
            labels[label] += count
        bucket["labels"] = dict(labels)

    def _vocabulary_bucket(self, stats: Dict, vocabulary: str) -> Dict:
        vocabularies = stats.setdefault("vocabularies", {})
        return vocabularies.setdefault(vocabulary, {})
