"""
Command-line interface for tunequiz.

This module implements the CLI using Click, exposing the quiz pipeline
and its admin operations. rich-click is used for the help output.

Commands:
    tunequiz quiz --category kpop                 Generate a casual quiz (5 questions)
    tunequiz quiz --category kpop --difficulty hard
    tunequiz quiz --category jpop --count 8 --json
    tunequiz quiz --category kpop --refresh       Bypass the cache
    tunequiz categories                           List configured categories
    tunequiz warm                                 Check every category against YouTube
    tunequiz validate <playlist-id>               Check a playlist id

Global Options:
    --config <path>     config.yaml to use (default: ./config.yaml if present)
    --log-dir <dir>     Also write log files to this directory
    --verbose           Show debug output on the console

Exit Codes:
    0   Success
    1   Configuration error or unexpected error
    2   No quiz could be generated (no content, not enough tracks)
    3   Playlist id is not valid
    130 Interrupted by user
"""

import json
import sys
from pathlib import Path
from typing import Callable, Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.MAX_WIDTH = 100

from tunequiz import __version__
from tunequiz.catalog.models import FetchResult
from tunequiz.core import (
    ConfigurationError,
    TuneQuizError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from tunequiz.quiz import DIFFICULTY_QUESTION_COUNTS, QuizService

logger = get_logger(__name__)


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml if present)"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    metavar="<dir>",
    help="Write full, error and provider-failure logs to this directory"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show debug output"
)
@click.version_option(__version__, prog_name="tunequiz")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    log_dir: Optional[Path],
    verbose: bool
) -> None:
    """
    tunequiz: Build music-guessing quizzes from YouTube playlists.

    Each category maps to a playlist. Tracks are fetched, cleaned up and
    cached, then turned into four-choice "name that song" questions.

    \b
    EXAMPLES:
        tunequiz quiz --category kpop --difficulty medium
        tunequiz quiz --category jpop --count 8 --json
        tunequiz validate PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["log_dir"] = log_dir
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option(
    "--category", "-c",
    required=True,
    metavar="<key>",
    help="Category key, e.g. kpop"
)
@click.option(
    "--difficulty", "-d",
    type=click.Choice(sorted(DIFFICULTY_QUESTION_COUNTS), case_sensitive=False),
    default=None,
    help="casual (5), medium (10) or hard (15 questions)"
)
@click.option(
    "--count", "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Exact number of questions (overrides --difficulty)"
)
@click.option(
    "--refresh",
    is_flag=True,
    help="Fetch from YouTube even if the category is cached"
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the quiz as JSON"
)
@click.pass_context
def quiz(
    ctx: click.Context,
    category: str,
    difficulty: Optional[str],
    count: Optional[int],
    refresh: bool,
    as_json: bool
) -> None:
    """Generate a quiz for a category."""
    def action(service: QuizService) -> int:
        response = service.build_quiz(
            category,
            question_count=count,
            difficulty=difficulty,
            refresh=refresh
        )

        if as_json:
            click.echo(json.dumps(response.to_dict(), ensure_ascii=False, indent=2))
            return 0 if response.success else 2

        if not response.success:
            click.echo(f"Error: {response.error.message}", err=True)
            if response.error.retry_hint:
                click.echo(f"Hint: {response.error.retry_hint}", err=True)
            return 2

        if response.notice:
            click.echo(f"Note: {response.notice}", err=True)

        click.echo(f"{response.category}: {response.total} questions ({response.provenance.value})")
        for number, question in enumerate(response.questions, start=1):
            window = question.playback_window
            click.echo(f"\n{number}. [{window.start}s-{window.end}s] {question.track_id}")
            for index, choice in enumerate(question.choices):
                marker = "*" if index == question.correct_answer_index else " "
                click.echo(f"   {marker} {chr(ord('A') + index)}) {choice}")
        return 0

    _run(ctx, action)


@cli.command()
@click.pass_context
def categories(ctx: click.Context) -> None:
    """List configured categories and their cache state."""
    def action(service: QuizService) -> int:
        for summary in service.list_categories():
            status = "ok" if summary.configured else "placeholder id"
            click.echo(
                f"{summary.emoji} {summary.key:<10} {summary.name:<12} "
                f"{summary.collection_id}  ({status})"
            )
        return 0

    _run(ctx, action)


@cli.command()
@click.pass_context
def warm(ctx: click.Context) -> None:
    """
    Provider check for every category.

    Fetches each category once and reports where its tracks came from:
    YouTube or the bundled fallback. The cache only lives for this
    process, so nothing stays warm after the command exits.
    """
    def action(service: QuizService) -> int:
        results = service.warm_cache()

        logger.info("=" * 60)
        logger.info("PROVIDER CHECK")
        logger.info("=" * 60)
        for key, outcome in results.items():
            if isinstance(outcome, FetchResult):
                logger.info(f"{key:<12} {outcome.total_count:>4} tracks  ({outcome.provenance.value})")
            else:
                logger.info(f"{key:<12} failed: {outcome.message}")
        logger.info("=" * 60)

        failed = sum(1 for o in results.values() if not isinstance(o, FetchResult))
        return 2 if failed == len(results) and results else 0

    _run(ctx, action)


@cli.command()
@click.argument("collection_id", metavar="<playlist-id>")
@click.pass_context
def validate(ctx: click.Context, collection_id: str) -> None:
    """Check that a playlist id exists and is readable."""
    def action(service: QuizService) -> int:
        result = service.validate_collection_id(collection_id)
        if result.valid:
            click.echo(f"{collection_id}: valid")
            return 0
        click.echo(f"{collection_id}: invalid ({result.error})", err=True)
        return 3

    _run(ctx, action)


def _run(ctx: click.Context, action: Callable[[QuizService], int]) -> None:
    """
    Load configuration, set up logging, build the service and run action.

    Exits the process with the code returned by action, or with an error
    code when the pipeline raises.
    """
    options = ctx.obj or {}
    exit_code = 0

    try:
        config = load_config(options.get("config_path"))
        setup_logging(options.get("log_dir"), level="DEBUG" if options.get("verbose") else "INFO")
        service = QuizService.from_config(config)
        exit_code = action(service)

    except ConfigurationError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        exit_code = 1

    except TuneQuizError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        exit_code = 2

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        exit_code = 130

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        exit_code = 1

    finally:
        shutdown_logging()

    sys.exit(exit_code)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `tunequiz` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
