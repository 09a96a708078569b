from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import click
import schedule
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from services.assignment_step import ClassAssignmentStep, StepError, StepResult
from services.class_assignment import ClassAssignmentPolicy
from services.document_classifier import DocumentClassifier
from services.metadata_service import MetadataService
from services.persistence_service import ProcessedStore, compute_fingerprint
from services.statistics_service import StatisticsService
from services.strategies import VocabularyStrategy
from services.vocabulary_service import VocabularyService
from utils.config import AppConfig, ProfileConfig, load_config
from utils.logger import configure_logging
from utils.rule_compiler import RuleCompileError
from utils.rules_engine import RulesEngine


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class AppContext:
    config: AppConfig
    profile: ProfileConfig
    rules_engine: RulesEngine
    vocabularies: VocabularyService
    step: ClassAssignmentStep
    stats: StatisticsService
    processed_store: ProcessedStore
    console: Console


def build_context(env_file: str, profile_name: str | None, trace_rules: bool = False) -> AppContext:
    config = load_config(env_file)
    configure_logging(config.log_dir, config.log_level, trace_rules=trace_rules)
    profile = config.get_profile(profile_name)

    rules_engine = RulesEngine()
    policy = ClassAssignmentPolicy(
        rules_engine,
        terms_field=profile.terms_field,
        class_field=profile.class_field,
        max_workers=config.max_workers,
    )
    vocabularies = VocabularyService(config.vocabulary_file)
    strategies = [VocabularyStrategy(policy, vocabularies, profile.vocabulary, profile.metadata_title)]
    step = ClassAssignmentStep(
        MetadataService(),
        DocumentClassifier(strategies),
        title_field=profile.metadata_title,
        class_field=profile.metadata_class,
    )

    return AppContext(
        config=config,
        profile=profile,
        rules_engine=rules_engine,
        vocabularies=vocabularies,
        step=step,
        stats=StatisticsService(config.stats_file),
        processed_store=ProcessedStore(config.db_path),
        console=Console(),
    )


@click.group()
@click.option("--env-file", default=".env", show_default=True, help="Path to the .env file")
@click.option("--profile", help="Profile name defined in profiles.json")
@click.option("--trace-rules", is_flag=True, help="Log every rule decision at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, env_file: str, profile: Optional[str], trace_rules: bool) -> None:
    """Assign vocabulary classes to documents by matching rules against their titles."""

    try:
        ctx.obj = build_context(env_file, profile, trace_rules)
    except KeyError as exc:  # invalid profile
        raise click.BadParameter(str(exc), param_hint="--profile") from exc


@cli.command("match")
@click.argument("rule")
@click.argument("text")
@click.pass_context
def match_rule(ctx: click.Context, rule: str, text: str) -> None:
    """Check whether RULE matches TEXT (exit code 1 when it does not)."""

    app: AppContext = ctx.obj
    try:
        matched = app.rules_engine.match(rule, text)
    except RuleCompileError as exc:
        raise click.BadParameter(str(exc), param_hint="RULE") from exc
    if matched:
        app.console.print("[bold green]match[/bold green]")
    else:
        app.console.print("[yellow]no match[/yellow]")
        ctx.exit(1)


@cli.command("explain")
@click.argument("rule")
@click.pass_obj
def explain_rule(app: AppContext, rule: str) -> None:
    """Show the clauses and patterns RULE compiles to."""

    try:
        predicate = app.rules_engine.predicate_for(rule)
    except RuleCompileError as exc:
        raise click.BadParameter(str(exc), param_hint="RULE") from exc

    if predicate.is_empty:
        app.console.print("[yellow]Empty rule, it never matches.[/yellow]")
        return

    table = Table(title=escape(predicate.describe()))
    table.add_column("Clause")
    table.add_column("Term")
    table.add_column("Pattern", overflow="fold")
    for number, clause in enumerate(predicate.clauses, start=1):
        for term in clause.terms:
            pattern = escape(term.regex) if term.regex else "[red]never matches[/red]"
            table.add_row(str(number), escape(term.text) or "<empty>", pattern)
    app.console.print(table)


@cli.command("assign")
@click.argument("documents", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--dry-run/--apply", default=False, help="Preview classes without writing metadata")
@click.option("--skip-unchanged", is_flag=True, help="Ignore documents unchanged since their last classification")
@click.pass_obj
def assign_classes(app: AppContext, documents: tuple[Path, ...], dry_run: bool, skip_unchanged: bool) -> None:
    """Assign vocabulary classes to the given metadata documents."""

    _check_vocabulary(app)
    results, failures, skipped = _perform_assign(app, documents, dry_run=dry_run, skip_unchanged=skip_unchanged)
    if results:
        app.console.print(_build_result_table(results, dry_run))
    else:
        app.console.print("[yellow]No documents were classified.[/yellow]")
    if skipped:
        app.console.print(f"[dim]{skipped} documents skipped because neither they nor the vocabulary changed.[/dim]")
    if failures:
        app.console.print(f"[bold red]{failures} documents failed, see the log for details.[/bold red]")
        raise SystemExit(1)


@cli.command("stats")
@click.pass_obj
def stats(app: AppContext) -> None:
    """Display local activity statistics."""

    snapshot = app.stats.snapshot()
    if not snapshot:
        app.console.print("No stats recorded yet.")
        return

    table = Table(title="Global stats")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Runs", str(snapshot.get("runs", 0)))
    table.add_row("Documents", str(snapshot.get("documents", 0)))
    table.add_row("Failures", str(snapshot.get("failures", 0)))
    labels = snapshot.get("labels", {})
    if labels:
        table.add_row("Class counts", _format_counts(labels))
    app.console.print(table)

    vocabularies = snapshot.get("vocabularies", {})
    if vocabularies:
        vocab_table = Table(title="Per-vocabulary stats")
        vocab_table.add_column("Vocabulary")
        vocab_table.add_column("Runs")
        vocab_table.add_column("Documents")
        vocab_table.add_column("Classes")
        for name, data in vocabularies.items():
            vocab_table.add_row(
                name,
                str(data.get("runs", 0)),
                str(data.get("documents", 0)),
                _format_counts(data.get("labels", {})) or "-",
            )
        app.console.print(vocab_table)

    recent = app.processed_store.recent_entries(limit=10)
    if recent:
        recent_table = Table(title="Recently classified documents")
        recent_table.add_column("Classified at")
        recent_table.add_column("Vocabulary")
        recent_table.add_column("Document", overflow="fold")
        recent_table.add_column("Classes")
        for entry in recent:
            recent_table.add_row(
                entry.classified_at.strftime("%Y-%m-%d %H:%M"),
                entry.vocabulary,
                escape(entry.document),
                escape(", ".join(entry.labels)) or "-",
            )
        app.console.print(recent_table)


@cli.command("schedule")
@click.option(
    "--directory",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory holding *.json metadata documents",
)
@click.option("--interval", type=int, default=15, show_default=True, help="Interval in minutes")
@click.option("--dry-run/--apply", default=False, help="Preview classes without writing metadata")
@click.pass_obj
def schedule_tasks(app: AppContext, directory: Path, interval: int, dry_run: bool) -> None:
    """Classify new or changed documents of a directory on an interval using the schedule library."""

    _check_vocabulary(app)

    def job() -> None:
        try:
            app.vocabularies.reload()
            app.vocabularies.find_by_name(app.profile.vocabulary)
        except (OSError, ValueError, KeyError) as exc:
            LOGGER.error("Cannot load vocabularies, skipping this run: %s", exc)
            return
        documents = sorted(directory.glob("*.json"))
        results, failures, skipped = _perform_assign(app, documents, dry_run=dry_run, skip_unchanged=True)
        summary = _format_counts(_count_labels(results)) or "none"
        prefix = "would assign" if dry_run else "assigned"
        app.console.print(
            f"\\[scheduler] {prefix} {summary} to {len(results)} document(s) "
            f"(skipped {skipped}, failed {failures})."
        )

    schedule.every(interval).minutes.do(job)

    app.console.print(
        f"Scheduling class assignment every {interval} minute(s) for {directory}. Press Ctrl+C to stop."
    )
    try:
        while True:
            schedule.run_pending()
            time.sleep(1)
    except KeyboardInterrupt:
        app.console.print("Scheduler stopped.")


def main() -> None:
    cli(standalone_mode=True)


def _check_vocabulary(app: AppContext) -> None:
    try:
        app.vocabularies.find_by_name(app.profile.vocabulary)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    except KeyError as exc:
        raise click.BadParameter(str(exc.args[0]), param_hint="--profile") from exc


def _perform_assign(
    app: AppContext,
    documents: Iterable[Path],
    dry_run: bool,
    skip_unchanged: bool,
) -> tuple[List[StepResult], int, int]:
    vocabulary = app.profile.vocabulary
    vocabulary_digest = app.vocabularies.digest(vocabulary)
    results: List[StepResult] = []
    failures = 0
    skipped = 0

    for path in documents:
        key = str(path.resolve())
        fingerprint = _fingerprint(path, vocabulary_digest)
        if skip_unchanged and fingerprint and app.processed_store.is_current(vocabulary, key, fingerprint):
            skipped += 1
            continue
        try:
            result = app.step.run(path, dry_run=dry_run)
        except StepError as exc:
            LOGGER.error("Class assignment failed: %s", exc)
            failures += 1
            continue
        results.append(result)
        if not dry_run:
            written = _fingerprint(path, vocabulary_digest)
            if written:
                app.processed_store.record(vocabulary, key, written, result.labels)

    if not dry_run and (results or failures):
        app.stats.record_run(vocabulary, len(results), failures, _count_labels(results))
    return results, failures, skipped


def _fingerprint(path: Path, vocabulary_digest: str) -> Optional[str]:
    try:
        return compute_fingerprint(path.read_bytes(), vocabulary_digest)
    except OSError:
        return None


def _count_labels(results: Iterable[StepResult]) -> Counter[str]:
    counts: Counter[str] = Counter()
    for result in results:
        counts.update(result.labels)
    return counts


def _format_counts(counts) -> str:
    return ", ".join(f"{label}: {count}" for label, count in counts.items())


def _build_result_table(results: List[StepResult], dry_run: bool) -> Table:
    title = "Class assignment (dry-run)" if dry_run else "Class assignment"
    table = Table(title=title, show_lines=False)
    table.add_column("Document", overflow="fold")
    table.add_column("Title")
    table.add_column("Classes")
    table.add_column("Removed")
    for result in results:
        table.add_row(
            escape(str(result.path)),
            escape(result.subject) or "-",
            escape(", ".join(result.labels)) or "-",
            str(result.removed),
        )
    return table


if __name__ == "__main__":
    main()
