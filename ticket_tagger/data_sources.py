"""
Training data sources for the Ticket Tagger.

Provides the built-in reference corpus and loads alternative corpora
from YAML files.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .models import TrainingExample


logger = logging.getLogger(__name__)


DEFAULT_TRAINING_EXAMPLES: tuple[TrainingExample, ...] = (
    TrainingExample(text="Request for new feature", label="feature request"),
    TrainingExample(text="Bug in the login page", label="bug report"),
)


class TrainingDataError(Exception):
    """Error when loading the training corpus."""
    pass


def parse_training_data(content: str) -> list[TrainingExample]:
    """
    Parse YAML content into a list of training examples.

    Accepted layouts:
    - a top-level list of entries
    - a mapping with an ``examples`` or ``training_data`` list

    Each entry needs ``text`` and ``label``; ``type`` is accepted in place
    of ``label``. Malformed entries are skipped with a warning.

    Args:
        content: Raw YAML string.

    Returns:
        Parsed examples in file order.

    Raises:
        TrainingDataError: If the YAML is invalid or yields no examples.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise TrainingDataError(f"Invalid YAML: {e}") from e

    entries: Optional[list[Any]] = None
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        for key in ("examples", "training_data"):
            if isinstance(data.get(key), list):
                entries = data[key]
                break

    if not entries:
        raise TrainingDataError("No training examples found")

    examples = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping training entry {idx}: not a mapping")
            continue

        label = entry.get("label", entry.get("type"))
        try:
            examples.append(TrainingExample(
                text=str(entry.get("text", "")),
                label=str(label) if label is not None else "",
            ))
        except ValidationError as e:
            logger.warning(f"Skipping malformed training entry {idx}: {e}")
            continue

    if not examples:
        raise TrainingDataError("No usable training examples found")

    logger.info(f"Parsed {len(examples)} training examples")
    logger.debug(f"Labels: {[ex.label for ex in examples]}")

    return examples


def load_training_examples(path: Optional[Path] = None) -> list[TrainingExample]:
    """
    Load the training corpus.

    Args:
        path: Optional YAML file. The built-in corpus is returned when None.

    Returns:
        List of training examples.

    Raises:
        TrainingDataError: If the file cannot be read or parsed.
    """
    if path is None:
        return list(DEFAULT_TRAINING_EXAMPLES)

    logger.info(f"Loading training data from {path}")

    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise TrainingDataError(f"Cannot read {path}: {e}") from e

    return parse_training_data(content)
