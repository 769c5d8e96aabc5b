"""CLI interface for diffpos"""

import logging
from pathlib import Path
from typing import List, Optional

import click
import yaml
from click.core import ParameterSource

from diffpos.application.placement_service import PlacementReport, SuggestionPlacementService
from diffpos.domain.models.comment import Suggestion
from diffpos.domain.resolvers.position_resolver import DiffPositionResolver
from diffpos.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from diffpos.infrastructure.hosting.factory import ReviewHostFactory

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def load_suggestions(path: Path) -> List[Suggestion]:
    """Load suggestions from a YAML file

    The file holds either a list of mappings or a mapping with a
    ``suggestions`` list. Each mapping needs ``file`` (or ``file_path``),
    ``pattern`` and ``body``; ``severity`` and ``regex`` are optional.

    Raises:
        ValueError: If the file does not have that shape
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("suggestions") or []
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of suggestions")

    suggestions = []
    for index, item in enumerate(data, 1):
        if not isinstance(item, dict):
            raise ValueError(f"{path}: suggestion #{index} must be a mapping")
        try:
            suggestions.append(Suggestion.from_dict(item))
        except ValueError as e:
            raise ValueError(f"{path}: suggestion #{index}: {e}") from e
    return suggestions


def _load_config(ctx) -> ConfigManager:
    try:
        return ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)


def _create_resolver(
    config_manager: ConfigManager,
    numbering: Optional[str] = None,
    file_match: Optional[str] = None,
    ignore_case: Optional[bool] = None,
) -> DiffPositionResolver:
    """Create resolver from config with CLI overrides applied"""
    resolver_config = config_manager.get_resolver_config()
    overrides = {}
    if numbering:
        overrides["numbering"] = numbering
    if file_match:
        overrides["file_match"] = file_match
    if ignore_case is not None:
        overrides["ignore_case"] = ignore_case
    if overrides:
        resolver_config = resolver_config.model_copy(update=overrides)
    logger.debug(f"Resolver settings: {resolver_config.model_dump()}")
    return DiffPositionResolver.from_config(resolver_config)


def _output_placement_report(report: PlacementReport) -> None:
    """Output placement results to console"""
    stats = report.stats()

    for suggestion, comment in report.placed:
        click.echo(f"placed   {comment.file_path}:{comment.position}  {suggestion.pattern!r}")
    for suggestion, resolution in report.skipped:
        click.echo(f"skipped  {suggestion.file_path}  {suggestion.pattern!r}: {resolution.reason}")
    for suggestion, comment in report.failed:
        click.echo(f"failed   {comment.file_path}:{comment.position}  {suggestion.pattern!r}", err=True)

    click.echo("\n" + "=" * 80)
    click.echo("Placement Statistics")
    click.echo("=" * 80)
    click.echo(f"Total suggestions: {stats['total_suggestions']}")
    click.echo(f"Placed: {stats['placed']}")
    click.echo(f"Skipped: {stats['skipped']}")
    if report.submitted:
        click.echo(f"Comments submitted: {stats['comments_posted']}")
        if stats["failed"] > 0:
            click.echo(f"Failed to submit: {stats['failed']}", err=True)
    else:
        click.echo("(Dry run - comments not submitted)")


numbering_option = click.option(
    "--numbering",
    type=click.Choice(["cumulative", "per_hunk"], case_sensitive=False),
    help="Position numbering across hunks. Overrides config.",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .diffpos.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """diffpos - map code patterns to pull request diff positions"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("diff", type=click.File("r", encoding="utf-8"))
@click.argument("target_file", type=str)
@click.argument("pattern", type=str)
@click.option("--regex", is_flag=True, help="Treat PATTERN as a regular expression")
@numbering_option
@click.option(
    "--file-match",
    type=click.Choice(["path", "substring"], case_sensitive=False),
    help="How TARGET_FILE is matched against file headers. Overrides config.",
)
@click.option(
    "--ignore-case/--match-case",
    "-i",
    default=False,
    help="Case-insensitive (or case-sensitive) pattern matching. Overrides config.",
)
@click.pass_context
def resolve(
    ctx,
    diff,
    target_file: str,
    pattern: str,
    regex: bool,
    numbering: Optional[str],
    file_match: Optional[str],
    ignore_case: Optional[bool],
):
    """Print the diff position of the first line matching PATTERN.

    DIFF: Path to a unified diff, or - for stdin
    """
    verbose = ctx.obj.get("verbose", False)
    config_manager = _load_config(ctx)
    # Only an explicit --ignore-case/--match-case overrides the config file
    if ctx.get_parameter_source("ignore_case") == ParameterSource.DEFAULT:
        ignore_case = None
    resolver = _create_resolver(config_manager, numbering, file_match, ignore_case)

    try:
        resolution = resolver.resolve(diff.read(), target_file, pattern, regex=True if regex else None)
    except ValueError as e:
        _die(str(e), verbose=verbose, exc=e)

    if not resolution.is_found:
        _die(f"{target_file}: {resolution.reason}", verbose=verbose)

    logger.debug(f"Matched line: {resolution.content!r}")
    click.echo(resolution.position)


@cli.command()
@click.argument("diff", type=click.File("r", encoding="utf-8"))
@click.argument("target_file", type=str)
@numbering_option
@click.pass_context
def positions(ctx, diff, target_file: str, numbering: Optional[str]):
    """Print new-file line numbers with their diff positions.

    DIFF: Path to a unified diff, or - for stdin
    """
    config_manager = _load_config(ctx)
    resolver = _create_resolver(config_manager, numbering)

    mapping = resolver.map_positions(diff.read(), target_file)
    if not mapping:
        _die(f"{target_file}: no lines with a diff position", verbose=ctx.obj.get("verbose", False))

    for new_line, position in sorted(mapping.items()):
        click.echo(f"{new_line}\t{position}")


@cli.command()
@click.argument("suggestions_file", type=click.Path(exists=True, path_type=Path))
@click.argument("pull_request_id", type=str)
@click.option("--commit-id", required=True, help="Commit SHA the diff belongs to")
@click.option(
    "--host",
    type=click.Choice(["local", "url"], case_sensitive=False),
    help="Review host type. Overrides config.",
)
@click.option("--diff", "diff_path", type=click.Path(exists=True, path_type=Path), help="Diff file (local host)")
@click.option("--outbox", type=click.Path(path_type=Path), help="JSON-lines file receiving submitted comments")
@numbering_option
@click.option("--no-post", is_flag=True, help="Don't submit comments (dry run)")
@click.pass_context
def place(
    ctx,
    suggestions_file: Path,
    pull_request_id: str,
    commit_id: str,
    host: Optional[str],
    diff_path: Optional[Path],
    outbox: Optional[Path],
    numbering: Optional[str],
    no_post: bool,
):
    """Place review suggestions on a pull request diff.

    SUGGESTIONS_FILE: YAML list of suggestions (file, pattern, body)
    PULL_REQUEST_ID: Pull request identifier understood by the host
    """
    verbose = ctx.obj.get("verbose", False)
    logger.info(f"Placing suggestions from {suggestions_file} on pull request {pull_request_id}")

    try:
        config_manager = _load_config(ctx)
        resolver = _create_resolver(config_manager, numbering)

        host_config = config_manager.get_host_config().model_dump()
        host_config["retry"] = config_manager.get_retry_config().model_dump()
        if diff_path:
            host_config["diff_path"] = str(diff_path)
        if outbox:
            host_config["outbox"] = str(outbox)
        host_type = (host or host_config["type"]).lower()
        if diff_path and host_type != "local":
            _die(f"--diff can only be used with the local host (host is {host_type})", verbose=verbose)

        try:
            review_host = ReviewHostFactory.create(host_type, host_config)
        except ValueError as e:
            _die(str(e), verbose=verbose, exc=e)

        try:
            suggestions = load_suggestions(suggestions_file)
        except ValueError as e:
            _die(str(e), verbose=verbose, exc=e)

        service = SuggestionPlacementService(review_host, resolver)
        report = service.place(
            pull_request_id=pull_request_id,
            suggestions=suggestions,
            commit_id=commit_id,
            submit=not no_post,
        )
        _output_placement_report(report)

    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
