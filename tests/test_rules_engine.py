from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from utils.rule_compiler import compile_rule
from utils.rules_engine import RulesEngine, is_match, match


def test_whole_word_matching() -> None:
    assert match("cat", "the cat sat") is True
    assert match("cat", "category") is False
    assert match("cat", "bobcat") is False


def test_case_insensitive() -> None:
    assert match("Cat", "CAT") is True
    assert match("straße", "STRASSE") is False
    assert match("Über", "über alles") is True


def test_or_semantics() -> None:
    assert match("a;b", "b") is True
    assert match("a;b", "c") is False


def test_and_semantics_ignore_order() -> None:
    assert match("a+b", "a and b here") is True
    assert match("a+b", "b and a here") is True
    assert match("a+b", "only a here") is False


def test_mixed_precedence() -> None:
    assert match("a+b;c", "c present") is True
    assert match("a+b;c", "a present") is False


def test_wildcard() -> None:
    assert match("mus*", "museum") is True
    assert match("mus*", "music hall") is True
    assert match("mus*", "mus") is True
    assert match("te*t", "test") is True
    assert match("te*t", "tea") is False
    assert match("mus*", "amuse") is False


def test_phrase_terms_tolerate_whitespace() -> None:
    assert match("world war", "the World  War\nyears") is True
    assert match("world war", "world of war") is False


def test_special_characters_are_literal() -> None:
    assert match("c.d", "c.d") is True
    assert match("c.d", "cxd") is False
    assert match("(1900)", "printed (1900) in Vienna") is True


def test_empty_predicate_and_empty_text() -> None:
    assert match("", "anything") is False
    assert match("a", "") is False
    assert is_match(compile_rule("a"), None) is False


def test_empty_term_never_matches_everything() -> None:
    assert match("a;;b", "nothing relevant") is False
    assert match("a;;b", "b") is True
    assert match("a+", "a") is False
    assert match("*", "some words") is False


def test_engine_caches_compiled_rules() -> None:
    engine = RulesEngine()
    first = engine.predicate_for("a+b")
    assert engine.predicate_for("a+b") is first
    engine.match("c", "c")
    assert engine.cache_size == 2
    engine.clear()
    assert engine.cache_size == 0


def test_matching_is_deterministic_across_threads() -> None:
    engine = RulesEngine()
    rules = ["history+book", "science;tech", "mus*", "cat"]
    text = "a history book about tech in the museum"
    expected = [engine.match(rule, text) for rule in rules]
    with ThreadPoolExecutor(max_workers=4) as pool:
        runs = list(pool.map(lambda _: [engine.match(rule, text) for rule in rules], range(20)))
    assert all(run == expected for run in runs)
    assert expected == [True, True, True, False]
