from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class Term:
    """One AND-term of a clause, compiled to a whole-word pattern."""

    text: str
    regex: Optional[str]
    pattern: Optional[re.Pattern[str]] = field(default=None, compare=False, repr=False)

    @property
    def satisfiable(self) -> bool:
        return self.pattern is not None

    def found_in(self, text: str) -> bool:
        if self.pattern is None:
            return False
        return self.pattern.search(text) is not None


@dataclass(frozen=True, slots=True)
class Clause:
    """OR-alternative: every term must be present somewhere in the text."""

    terms: Tuple[Term, ...]

    @property
    def satisfiable(self) -> bool:
        return bool(self.terms) and all(term.satisfiable for term in self.terms)

    def matches(self, text: str) -> bool:
        return self.satisfiable and all(term.found_in(text) for term in self.terms)


@dataclass(frozen=True, slots=True)
class CompiledPredicate:
    """Normalized OR-of-ANDs form of a classification rule."""

    clauses: Tuple[Clause, ...]
    rule: str = field(default="", compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.clauses

    def describe(self) -> str:
        if not self.clauses:
            return "<never>"
        parts = []
        for clause in self.clauses:
            terms = " AND ".join(term.text or "<empty>" for term in clause.terms)
            parts.append(f"({terms})" if len(clause.terms) > 1 else terms)
        return " OR ".join(parts)
