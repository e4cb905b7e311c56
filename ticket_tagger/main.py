"""
Main entry point for the Ticket Tagger.

Orchestrates the classify-and-tag flow:
1. Load the training corpus
2. Classify the ticket by TF-IDF similarity
3. Post the resulting tag to DevRev
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import click
import httpx
from pydantic import ValidationError

from .config import get_config, AppConfig, ClassifierConfig
from .data_sources import load_training_examples, TrainingDataError
from .classifier import TicketClassifier, ClassificationError
from .models import ClassificationResult, TagOutcome, Ticket, TrainingExample
from .tagger import tag_ticket


DEFAULT_TICKET_ID = "12345"
DEFAULT_TICKET_CONTENT = "Feature request to add dark mode"


def build_log_handlers() -> list[logging.Handler]:
    """
    Create console handlers: records below ERROR go to stdout,
    ERROR and above go to stderr.
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(lambda record: record.levelno < logging.ERROR)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)

    return [stdout_handler, stderr_handler]


def setup_logging(level: str) -> None:
    """
    Configure application logging.

    Unknown level names fall back to INFO; validate_config reports them.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=build_log_handlers(),
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Error during pipeline execution."""
    pass


def validate_config(config: AppConfig, require_api_key: bool = True) -> None:
    """
    Validate configuration before running.

    Args:
        config: Application configuration.
        require_api_key: Whether tagging credentials are needed.

    Raises:
        PipelineError: If configuration is invalid.
    """
    errors = config.validate(require_api_key=require_api_key)
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        raise PipelineError(
            f"Configuration validation failed with {len(errors)} error(s)"
        )


def classify_and_tag(
    ticket: Ticket,
    config: Optional[AppConfig] = None,
    examples: Optional[Sequence[TrainingExample]] = None,
    dry_run: bool = False,
    transport: Optional[httpx.BaseTransport] = None,
) -> tuple[ClassificationResult, Optional[TagOutcome]]:
    """
    Classify a ticket and submit the resulting tag.

    Args:
        ticket: The ticket to classify.
        config: Optional configuration override.
        examples: Optional corpus; loaded from configuration when None.
        dry_run: If True, classify only and skip the tagging request.
        transport: Optional httpx transport for the tagging request.

    Returns:
        Tuple of (classification, tag outcome). The outcome is None on a
        dry run. Tagging failures are reported in the outcome, never raised.

    Raises:
        PipelineError: If the corpus cannot be loaded or classification fails.
    """
    if config is None:
        config = get_config()

    if examples is None:
        try:
            examples = load_training_examples(config.classifier.training_data_path)
        except TrainingDataError as e:
            raise PipelineError(f"Training data load failed: {e}") from e

    try:
        classifier = TicketClassifier(examples)
        result = classifier.classify(ticket.content)
    except ClassificationError as e:
        raise PipelineError(f"Classification failed: {e}") from e

    logger.info(f"Ticket {ticket.id}: {result.reasoning}")

    if dry_run:
        logger.info("Skipping tagging (--dry-run flag)")
        return result, None

    outcome = tag_ticket(
        config.tagger,
        ticket.id,
        [result.label],
        result.reasoning,
        transport=transport,
    )
    return result, outcome


@click.command()
@click.option(
    "--ticket-id",
    default=DEFAULT_TICKET_ID,
    show_default=True,
    help="Identifier of the ticket to tag",
)
@click.option(
    "--content",
    default=DEFAULT_TICKET_CONTENT,
    show_default=True,
    help="Ticket text to classify",
)
@click.option(
    "--training-data",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with labeled training examples",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Classify only, without calling the tagging API",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging",
)
@click.option(
    "--validate-only",
    is_flag=True,
    default=False,
    help="Only validate configuration without tagging",
)
def main(
    ticket_id: str,
    content: str,
    training_data: Optional[Path],
    dry_run: bool,
    debug: bool,
    validate_only: bool,
) -> None:
    """
    Ticket Tagger.

    Classifies a support ticket against labeled examples using TF-IDF
    similarity and tags it through the DevRev API.
    """
    try:
        config = get_config()

        if training_data:
            config = AppConfig(
                tagger=config.tagger,
                classifier=ClassifierConfig(training_data_path=training_data),
                log_level=config.log_level,
            )

        if debug:
            config = AppConfig(
                tagger=config.tagger,
                classifier=config.classifier,
                log_level="DEBUG",
            )

        setup_logging(config.log_level)

        if validate_only:
            logger.info("Validating configuration...")
            validate_config(config)
            logger.info("Configuration is valid!")
            return

        validate_config(config, require_api_key=not dry_run)

        try:
            ticket = Ticket(id=ticket_id, content=content)
        except ValidationError as e:
            raise PipelineError(f"Invalid ticket: {e}") from e

        result, outcome = classify_and_tag(ticket, config, dry_run=dry_run)

        if dry_run:
            click.echo(f"{ticket.id}: {result.label} ({result.score:.4f})")
        elif outcome is not None and not outcome.success:
            click.echo(f"Tagging failed for ticket {ticket.id}: {outcome.describe()}", err=True)
            sys.exit(1)

    except PipelineError as e:
        click.echo(f"Pipeline failed: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        if debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
