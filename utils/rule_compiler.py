"""Compile classification rules into OR-of-AND predicates.

Rule syntax::

    history+book;science    (history AND book) OR science
    mus*                    "mus" followed by zero or more word characters

Every term is matched as a whole word and case-insensitively.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from models.rule import Clause, CompiledPredicate, Term

LOGGER = logging.getLogger(__name__)

OR_SEPARATOR = ";"
AND_SEPARATOR = "+"
WILDCARD = "*"

_WORD_START = r"(?<!\w)"
_WORD_END = r"(?!\w)"
_WILDCARD_REGEX = r"\w*"
_WHITESPACE = re.compile(r"\s+")


class RuleCompileError(ValueError):
    """Raised when a term cannot be turned into a valid pattern."""

    def __init__(self, rule: str, term: str, reason: str):
        super().__init__(f"Cannot compile term '{term}' of rule '{rule}': {reason}")
        self.rule = rule
        self.term = term


def _split(rule: str) -> List[List[str]]:
    clauses: List[List[str]] = []
    current: List[str] = []
    buffer: List[str] = []
    for char in rule:
        if char == OR_SEPARATOR:
            current.append("".join(buffer))
            clauses.append(current)
            current, buffer = [], []
        elif char == AND_SEPARATOR:
            current.append("".join(buffer))
            buffer = []
        else:
            buffer.append(char)
    current.append("".join(buffer))
    clauses.append(current)

    # "a;b;" (also "a;b; " from text fields) means the same as "a;b"
    if len(clauses) > 1 and [term.strip() for term in clauses[-1]] == [""]:
        clauses.pop()
    return clauses


def term_regex(term: str) -> Optional[str]:
    """Return the whole-word regex for a term, or None if it has no literal part."""

    if not term.replace(WILDCARD, "").strip():
        return None
    pieces = []
    for index, fragment in enumerate(term.split(WILDCARD)):
        if index:
            pieces.append(_WILDCARD_REGEX)
        words = _WHITESPACE.split(fragment)
        pieces.append(r"\s+".join(re.escape(word) for word in words))
    return f"{_WORD_START}{''.join(pieces)}{_WORD_END}"


def _compile_term(rule: str, raw: str) -> Term:
    text = _WHITESPACE.sub(" ", raw.strip())
    regex = term_regex(text)
    if regex is None:
        LOGGER.warning("Rule '%s' contains an empty term; its clause will never match", rule)
        return Term(text=text, regex=None)
    try:
        pattern = re.compile(regex, re.IGNORECASE)
    except re.error as exc:
        raise RuleCompileError(rule, text, str(exc)) from exc
    return Term(text=text, regex=regex, pattern=pattern)


def compile_rule(rule: str) -> CompiledPredicate:
    """Parse ``rule`` into a :class:`CompiledPredicate`.

    An empty rule yields a predicate without clauses, which never matches.
    """

    if not rule or not rule.strip():
        return CompiledPredicate(clauses=(), rule=rule or "")
    clauses = tuple(
        Clause(terms=tuple(_compile_term(rule, raw) for raw in raw_terms))
        for raw_terms in _split(rule)
    )
    return CompiledPredicate(clauses=clauses, rule=rule)


class RuleCompiler:
    """Object wrapper around :func:`compile_rule` for injection in services."""

    def compile(self, rule: str) -> CompiledPredicate:
        return compile_rule(rule)
