from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from models.rule import CompiledPredicate
from utils.rule_compiler import RuleCompiler

LOGGER = logging.getLogger(__name__)


def is_match(predicate: CompiledPredicate, text: Optional[str]) -> bool:
    """True if at least one clause has all of its terms somewhere in ``text``."""

    if not text or predicate.is_empty:
        return False
    return any(clause.matches(text) for clause in predicate.clauses)


class RulesEngine:
    """Compiles rules once and evaluates them against subject texts."""

    def __init__(self, compiler: Optional[RuleCompiler] = None):
        self._compiler = compiler or RuleCompiler()
        self._cache: Dict[str, CompiledPredicate] = {}
        self._lock = threading.Lock()

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def predicate_for(self, rule: str) -> CompiledPredicate:
        with self._lock:
            cached = self._cache.get(rule)
        if cached is not None:
            return cached
        predicate = self._compiler.compile(rule)
        with self._lock:
            # Another worker may have compiled the same rule meanwhile; both results are equal.
            return self._cache.setdefault(rule, predicate)

    def match(self, rule: str, text: Optional[str]) -> bool:
        matched = is_match(self.predicate_for(rule), text)
        LOGGER.debug("Rule %r %s %r", rule, "matches" if matched else "does not match", text)
        return matched

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


_DEFAULT_ENGINE = RulesEngine()


def match(rule: str, text: Optional[str]) -> bool:
    return _DEFAULT_ENGINE.match(rule, text)
