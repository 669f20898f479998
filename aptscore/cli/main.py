"""Main CLI entry point for aptscore."""

import json
import sys
from pathlib import Path
from typing import NoReturn

import click
import yaml
from rich.console import Console
from rich.table import Table

from aptscore import __version__
from aptscore.core.exceptions import AptScoreError
from aptscore.core.logging import configure_logging
from aptscore.core.settings import AptScoreSettings, get_settings
from aptscore.loader import DocumentLoader, ScoringDocument
from aptscore.scoring.analysis import analysis_to_dict, analyze_score
from aptscore.scoring.models import RankingsSummary, ScoreResult
from aptscore.scoring.pipeline import calculate_with_pipeline, family_pipeline
from aptscore.scoring.ranking import rank_entities
from aptscore.scoring.strategies import STRATEGY_GUIDELINES, get_registry
from aptscore.statistics import (
    RelativeEvaluator,
    RelativeScore,
    entity_scores_from_rankings,
)

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 2

PIPELINES = {"family": family_pipeline}


class AppContext:
    """Context object holding the effective settings."""

    def __init__(self) -> None:
        self.settings: AptScoreSettings | None = None
        self.verbose: bool = False

    def get_settings(self) -> AptScoreSettings:
        if self.settings is None:
            self.settings = get_settings()
        return self.settings


pass_app = click.make_pass_decorator(AppContext, ensure=True)


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    help="Path to aptscore.config.yaml configuration file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
@click.version_option(version=__version__, prog_name="aptscore")
@click.pass_context
def cli(ctx: click.Context, config_file: Path | None, verbose: bool) -> None:
    """aptscore - weighted multi-factor scoring and ranking.

    Examples:

      # Score every entity in a document
      aptscore score apartments.yaml --strategy=geometric_mean

      # Rank entities and print the top 5 as JSON
      aptscore rank apartments.yaml --limit=5 --json

      # Compare one entity against the rest
      aptscore relative apartments.yaml apt-3
    """
    ctx.ensure_object(AppContext)
    app = ctx.obj
    app.verbose = verbose

    try:
        app.settings = get_settings(config_file=config_file)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    configure_logging(
        level="DEBUG" if verbose else app.settings.effective_log_level,
        json_output=app.settings.logging.json_output,
        log_file=app.settings.logging.file,
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _load_document(file: Path) -> ScoringDocument:
    return DocumentLoader().load_file(file)


def _resolve_strategy(
    option: str | None, document: ScoringDocument, settings: AptScoreSettings
) -> str:
    """Pick the strategy: command option, then document, then settings."""
    return option or document.strategy or settings.default_strategy


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(EXIT_ERROR)


def _create_breakdown_table(title: str, result: ScoreResult) -> Table:
    """Create a Rich table with a per-factor breakdown of a result."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Factor", style="green", no_wrap=True)
    table.add_column("Raw", justify="right")
    table.add_column("Weight", style="yellow", justify="right")
    table.add_column("Weighted", style="blue", justify="right")
    for item in result.factors:
        table.add_row(
            item.factor.display_name,
            f"{item.raw_score:.1f}",
            f"{item.weight * 100:.1f}%",
            f"{item.weighted_score:.2f}",
        )
    return table


def _create_rankings_table(title: str) -> Table:
    """Create a Rich table for ranking display."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Rank", justify="right")
    table.add_column("ID", style="green", no_wrap=True)
    table.add_column("Name")
    table.add_column("Location", style="magenta")
    table.add_column("Score", style="yellow", justify="right")
    table.add_column("Percentile", justify="right")
    table.add_column("Grade")
    return table


@cli.command(name="score")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--strategy", "-s", type=str, help="Aggregation strategy")
@click.option(
    "--pipeline",
    "pipeline_name",
    type=click.Choice(sorted(PIPELINES)),
    help="Use a calculation pipeline instead of a strategy",
)
@click.option("--entity", "entity_id", type=str, help="Score only this entity")
@click.option("--analyze", is_flag=True, help="Show strengths and weaknesses")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@pass_app
def score_cmd(
    app: AppContext,
    file: Path,
    strategy: str | None,
    pipeline_name: str | None,
    entity_id: str | None,
    analyze: bool,
    as_json: bool,
) -> None:
    """Score the entities in FILE.

    FILE is a YAML or JSON document with weights and entities.

    Exit Codes:

      0 - Success
      2 - Error (invalid document, unknown strategy, etc.)
    """
    settings = app.get_settings()
    try:
        document = _load_document(file)
        entities = document.entities
        if entity_id is not None:
            entity = document.get_entity(entity_id)
            if entity is None:
                _fail(f"Entity not found: {entity_id}")
            entities = [entity]

        results: list[tuple[str, ScoreResult]] = []
        if pipeline_name:
            pipeline = PIPELINES[pipeline_name]()
            for entity in entities:
                results.append(
                    (
                        entity.id,
                        calculate_with_pipeline(
                            entity.scores, document.weights, pipeline
                        ),
                    )
                )
        else:
            scorer = get_registry().create(
                _resolve_strategy(strategy, document, settings)
            )
            for entity in entities:
                results.append(
                    (entity.id, scorer.calculate(entity.scores, document.weights))
                )
    except AptScoreError as e:
        _fail(str(e))

    if as_json:
        payload = []
        for rid, result in results:
            item = {"id": rid, **result.to_dict()}
            if analyze:
                item["analysis"] = analysis_to_dict(analyze_score(result))
            payload.append(item)
        click.echo(json.dumps(payload, indent=2))
        sys.exit(EXIT_SUCCESS)

    console = Console()
    for rid, result in results:
        label = result.pipeline_name or result.strategy
        console.print(
            f"[bold]{rid}[/bold]: {result.total_score:.2f} "
            f"(grade {result.grade.value}, {label})"
        )
        if result.steps_applied:
            console.print(f"  Steps: {', '.join(result.steps_applied)}")
        if entity_id is not None:
            console.print(_create_breakdown_table(f"Breakdown: {rid}", result))
        if analyze:
            analysis = analyze_score(result)
            strengths = ", ".join(f.display_name for f in analysis.strengths)
            weaknesses = ", ".join(f.display_name for f in analysis.weaknesses)
            console.print(f"  Strengths: {strengths or '-'}")
            console.print(f"  Weaknesses: {weaknesses or '-'}")
            for tip in analysis.improvement_tips:
                console.print(f"  - {tip}")
    sys.exit(EXIT_SUCCESS)


@cli.command(name="rank")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--strategy", "-s", type=str, help="Aggregation strategy")
@click.option(
    "--limit",
    "-n",
    type=int,
    default=0,
    help="Show only the top N entities (0 shows all)",
)
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@pass_app
def rank_cmd(
    app: AppContext,
    file: Path,
    strategy: str | None,
    limit: int,
    as_json: bool,
) -> None:
    """Rank the entities in FILE, best first.

    Exit Codes:

      0 - Success
      2 - Error (invalid document, failed entity, etc.)
    """
    settings = app.get_settings()
    try:
        document = _load_document(file)
        summary = rank_entities(
            document.entities,
            document.weights,
            _resolve_strategy(strategy, document, settings),
        )
    except AptScoreError as e:
        _fail(str(e))

    if as_json:
        data = summary.to_dict()
        if limit > 0:
            data["rankings"] = data["rankings"][:limit]
        click.echo(json.dumps(data, indent=2))
        sys.exit(EXIT_SUCCESS)

    _print_rankings(summary, limit, settings.scoring.percentile_precision)
    sys.exit(EXIT_SUCCESS)


def _print_rankings(summary: RankingsSummary, limit: int, precision: int) -> None:
    """Output rankings to console."""
    console = Console()
    table = _create_rankings_table(f"Rankings ({summary.strategy})")
    for ranking in summary.top(limit):
        table.add_row(
            str(ranking.rank),
            ranking.entity.id,
            ranking.entity.name,
            ranking.entity.location or "-",
            f"{ranking.score:.2f}",
            f"{ranking.percentile:.{precision}f}",
            ranking.result.grade.value,
        )
    console.print(table)
    console.print(
        f"\nTotal: {summary.total_entities} entities, "
        f"range {summary.min_score:.2f}-{summary.max_score:.2f}, "
        f"average {summary.average_score:.2f}"
    )


@cli.command(name="relative")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.argument("target_id", type=str)
@click.option("--strategy", "-s", type=str, help="Aggregation strategy")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@pass_app
def relative_cmd(
    app: AppContext,
    file: Path,
    target_id: str,
    strategy: str | None,
    as_json: bool,
) -> None:
    """Compare TARGET_ID with every entity in FILE.

    Exit Codes:

      0 - Success
      2 - Error (unknown target, invalid document, etc.)
    """
    settings = app.get_settings()
    try:
        document = _load_document(file)
        summary = rank_entities(
            document.entities,
            document.weights,
            _resolve_strategy(strategy, document, settings),
        )
        group = entity_scores_from_rankings(summary)
        target = next((member for member in group if member.id == target_id), None)
        if target is None:
            _fail(f"Entity not found: {target_id}")

        evaluator = RelativeEvaluator.from_settings(settings)
        relative = evaluator.evaluate_relative(target, group)
        similar = evaluator.find_similar(target, group)
    except AptScoreError as e:
        _fail(str(e))

    if as_json:
        data = relative.model_dump(mode="json")
        data["similar"] = [member.id for member in similar]
        click.echo(json.dumps(data, indent=2))
        sys.exit(EXIT_SUCCESS)

    _print_relative(relative, [m.id for m in similar], settings)
    sys.exit(EXIT_SUCCESS)


def _print_relative(
    relative: RelativeScore, similar: list[str], settings: AptScoreSettings
) -> None:
    """Output a relative evaluation to console."""
    precision = settings.scoring.percentile_precision
    console = Console()
    console.print(
        f"[bold]{relative.entity_id}[/bold]: {relative.absolute_score:.2f} "
        f"(rank {relative.group_rank} of {relative.distribution.count}, "
        f"percentile {relative.percentile_rank:.{precision}f})"
    )

    table = Table(
        title="Group distribution", show_header=True, header_style="bold cyan"
    )
    for column in ("Mean", "Median", "Std Dev", "Min", "Q1", "Q3", "Max"):
        table.add_column(column, justify="right")
    dist = relative.distribution
    table.add_row(
        *(
            f"{value:.2f}"
            for value in (
                dist.mean,
                dist.median,
                dist.std_dev,
                dist.min,
                dist.q1,
                dist.q3,
                dist.max,
            )
        )
    )
    console.print(table)

    comparison = relative.comparison
    console.print(
        f"Better: {comparison.better_than_count}  "
        f"Worse: {comparison.worse_than_count}  "
        f"Similar: {comparison.similar_count}"
    )
    console.print(f"Similar entities: {', '.join(similar) or '-'}")


@cli.command(name="strategies")
def strategies_cmd() -> None:
    """List registered aggregation strategies."""
    registry = get_registry()
    console = Console()
    table = Table(title="Strategies", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="green", no_wrap=True)
    table.add_column("Name")
    table.add_column("Best for", style="dim")
    for strategy_type in registry.list_strategies():
        strategy_class = registry.get_strategy_class(strategy_type)
        guide = STRATEGY_GUIDELINES.get(strategy_type)
        table.add_row(
            strategy_type,
            strategy_class.name,
            guide.best_for if guide else "",
        )
    console.print(table)


@cli.command(name="config")
@pass_app
def config_cmd(app: AppContext) -> None:
    """Show the effective configuration."""
    click.echo(yaml.safe_dump(app.get_settings().to_dict(), sort_keys=False))


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
