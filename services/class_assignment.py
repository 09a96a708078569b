from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from models.vocabulary_record import MissingFieldError, VocabularyRecord
from utils.rule_compiler import RuleCompileError
from utils.rules_engine import RulesEngine

LOGGER = logging.getLogger(__name__)

RulePair = Tuple[Optional[str], Optional[str]]


class ClassAssignmentPolicy:
    """Collect the labels of every (rule, label) pair whose rule matches a subject."""

    def __init__(
        self,
        rules_engine: Optional[RulesEngine] = None,
        terms_field: str = "terms",
        class_field: str = "class",
        max_workers: int = 1,
    ):
        self.rules_engine = rules_engine or RulesEngine()
        self.terms_field = terms_field
        self.class_field = class_field
        self.max_workers = max(1, max_workers)

    def assign(self, records: Iterable[RulePair], subject: str) -> Set[str]:
        pairs = list(records)
        if self.max_workers == 1 or len(pairs) < 2:
            return self._assign_chunk(pairs, subject)

        chunks = _chunked(pairs, self.max_workers)
        labels: Set[str] = set()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            for partial in pool.map(lambda chunk: self._assign_chunk(chunk, subject), chunks):
                labels |= partial
        return labels

    def assign_records(self, records: Iterable[VocabularyRecord], subject: str) -> Set[str]:
        pairs: List[RulePair] = []
        for record in records:
            try:
                pairs.append((record.field_value(self.terms_field), record.field_value(self.class_field)))
            except MissingFieldError as exc:
                LOGGER.warning("Skipping vocabulary record: %s", exc)
        return self.assign(pairs, subject)

    def _assign_chunk(self, pairs: Sequence[RulePair], subject: str) -> Set[str]:
        labels: Set[str] = set()
        for rule, label in pairs:
            if not (rule and rule.strip() and label and label.strip()):
                LOGGER.warning("Skipping record with missing rule or label: (%r, %r)", rule, label)
                continue
            try:
                if self.rules_engine.match(rule, subject):
                    labels.add(label.strip())
            except RuleCompileError as exc:
                LOGGER.warning("Skipping rule for label %s: %s", label, exc)
        return labels


def _chunked(pairs: Sequence[RulePair], parts: int) -> List[Sequence[RulePair]]:
    size = -(-len(pairs) // parts)
    return [pairs[start : start + size] for start in range(0, len(pairs), size)]
