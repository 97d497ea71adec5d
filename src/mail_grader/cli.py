"""
Command-line interface for Mail Grader.

Provides `grade` to flag writing issues in a newsletter and `improve` to
line up a rewrite against the original, side by side.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .aligner import align
from .analyzer import AnalysisCancelled, AnalysisResult, analyze
from .config import AnalysisOptions, ConfigError
from .draft_pairs import parse_draft_pairs, rewrite_to_pairs
from .llm_client import LLMClientError, create_llm_client
from .models import AlignmentResult, Document, SegmentKind, severity_of
from .rules import RuleSet

console = Console()

SEVERITY_STYLES = {
    "high": "bold red",
    "medium": "yellow",
    "low": "cyan",
    "informational": "dim",
}


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """
    Mail Grader - Grade newsletter drafts before you hit send.

    Examples:

        mail-grader grade draft.txt

        mail-grader grade draft.html --html --json

        mail-grader improve draft.txt --pairs rewrite.txt
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--html", "is_html", is_flag=True, default=False, help="Treat FILE as HTML.")
@click.option("--max-words", type=int, default=None, help="Sentence length limit (default: 25).")
@click.option("--max-emoji", type=int, default=None, help="Emoji allowed per sentence (default: 2).")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the full result as JSON.")
@click.pass_context
def grade(
    ctx: click.Context,
    file: Path,
    is_html: bool,
    max_words: Optional[int],
    max_emoji: Optional[int],
    as_json: bool,
) -> None:
    """Flag spam, fluff, hedging and other issues in FILE."""
    verbose = ctx.obj.get("verbose", False)
    try:
        options = AnalysisOptions.from_dict({
            "max_sentence_words": max_words,
            "max_emoji": max_emoji,
        })
        content = _read_text(file)
        document = Document.from_html(content) if is_html else Document(plain_text=content)
        result = analyze(document, RuleSet(options))
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    except AnalysisCancelled as e:
        console.print(f"[red]Analysis cancelled:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    _display_analysis(result, file)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--pairs",
    "pairs_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File with <old_draft>/<optimized_draft> pairs.",
)
@click.option(
    "--rewritten",
    "rewritten_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File with a full rewrite of FILE.",
)
@click.option(
    "--api-key",
    type=str,
    envvar="ANTHROPIC_API_KEY",
    help="Anthropic API key. Can also be set via ANTHROPIC_API_KEY env var.",
)
@click.option("--audience", type=str, default=None, help="Intended audience of the newsletter.")
@click.option("--goal", type=str, default=None, help="Goal of the newsletter.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the alignment as JSON.")
@click.pass_context
def improve(
    ctx: click.Context,
    file: Path,
    pairs_file: Optional[Path],
    rewritten_file: Optional[Path],
    api_key: Optional[str],
    audience: Optional[str],
    goal: Optional[str],
    as_json: bool,
) -> None:
    """Line up a rewrite of FILE against the original."""
    verbose = ctx.obj.get("verbose", False)
    if pairs_file and rewritten_file:
        console.print("[red]Error:[/red] Provide only one of --pairs or --rewritten")
        sys.exit(1)

    original = _read_text(file)
    issues = []
    try:
        if pairs_file:
            parsed = parse_draft_pairs(_read_text(pairs_file))
            pairs, issues = parsed.pairs, parsed.issues
        elif rewritten_file:
            pairs = rewrite_to_pairs(original, _read_text(rewritten_file))
        elif api_key:
            with console.status("[bold green]Rewriting with Claude..."):
                parsed = create_llm_client(api_key=api_key).improve(original, audience=audience, goal=goal)
            pairs, issues = parsed.pairs, parsed.issues
        else:
            console.print("[red]Error:[/red] Must provide --pairs, --rewritten or --api-key")
            sys.exit(1)
    except LLMClientError as e:
        console.print(f"[red]LLM error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)

    alignment = align(original, pairs)

    if as_json:
        payload = alignment.to_dict()
        payload["parseIssues"] = [i.to_dict() for i in issues]
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    for issue in issues:
        console.print(f"[yellow]Warning:[/yellow] {issue.description}")
    _display_alignment(alignment)


def _display_analysis(result: AnalysisResult, file: Path) -> None:
    """Display sentence issues and the grade."""
    summary = result.summary
    console.print(Panel.fit(
        f"[bold blue]Mail Grader[/bold blue]\n"
        f"{file.name}: grade [bold]{summary.grade}[/bold] ({summary.score}/100)",
        border_style="blue",
    ))

    if result.per_sentence:
        table = Table(title="Sentence Issues", show_header=True)
        table.add_column("#", style="dim", justify="right")
        table.add_column("Sentence")
        table.add_column("Issues")

        for group in result.per_sentence:
            kinds = ", ".join(
                f"[{SEVERITY_STYLES[severity_of(f.kind).value]}]{f.kind.value}[/]"
                for f in _unique_kinds(group.findings)
            )
            table.add_row(str(group.sentence.index + 1), escape(group.sentence.text), kinds)
        console.print(table)
    else:
        console.print("\n[green]No sentence issues found.[/green]")

    if result.document_findings:
        console.print("\n[bold]Document notes[/bold]")
        for finding in result.document_findings:
            console.print(f"  - {finding.kind.value}: {json.dumps(finding.detail.to_dict())}")

    metrics = result.metrics
    console.print(
        f"\n[cyan]Words:[/cyan] {metrics.word_count}  "
        f"[cyan]Sentences:[/cyan] {metrics.sentence_count}  "
        f"[cyan]Reading grade:[/cyan] {metrics.flesch_kincaid_grade}"
    )
    for issue in result.processing_issues:
        console.print(f"[yellow]Warning:[/yellow] {issue.description}")


def _unique_kinds(findings):
    seen = set()
    for finding in findings:
        if finding.kind not in seen:
            seen.add(finding.kind)
            yield finding


def _display_alignment(alignment: AlignmentResult) -> None:
    """Display matched pairs as an original/improved table."""
    console.print(Panel.fit(
        f"[bold blue]Mail Grader[/bold blue]\n"
        f"{len(alignment.matched)} change(s), {alignment.skipped_count} skipped",
        border_style="blue",
    ))

    table = Table(title="Original vs Improved", show_header=True)
    table.add_column("Original", style="red")
    table.add_column("Improved", style="green")

    added = {s.pair_id: s.text for s in alignment.improved if s.kind == SegmentKind.ADDED}
    for segment in alignment.original:
        if segment.kind == SegmentKind.REMOVED:
            table.add_row(escape(segment.text), escape(added.get(segment.pair_id, "")))
    console.print(table)

    for miss in alignment.skipped:
        console.print(f"[yellow]Skipped:[/yellow] {miss.description}")


def run_cli() -> None:
    """Entry point for the CLI."""
    main()


if __name__ == "__main__":
    run_cli()
