"""
TF-IDF ticket classifier for the Ticket Tagger.

Scores ticket text against a fixed corpus of labeled examples and
selects the label of the most similar example.

The vectorizer is fitted once when the classifier is built. Scoring only
transforms the incoming text, so repeated calls never change the corpus
statistics.
"""

import logging
from typing import Sequence

from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import linear_kernel

from .models import ClassificationResult, TrainingExample


logger = logging.getLogger(__name__)


class ClassificationError(Exception):
    """Error during ticket classification."""
    pass


def build_reasoning(label: str) -> str:
    """Human-readable justification for a classification."""
    return f"Ticket classified as '{label}' based on text similarity."


class TicketClassifier:
    """
    Nearest-example classifier over TF-IDF vectors.

    Similarity is the cosine between the ticket vector and each example
    vector. Examples are visited in corpus order and a later example only
    replaces the current best on a strictly greater score, so the first
    example wins ties. Scores are accepted without any threshold.
    """

    # Initial best score; any real cosine similarity beats it
    SCORE_SENTINEL = -1.0

    def __init__(self, examples: Sequence[TrainingExample]):
        """
        Fit the vectorizer on the example texts.

        Args:
            examples: Labeled examples, in tie-break order.

        Raises:
            ClassificationError: If the corpus is empty or has no vocabulary.
        """
        if not examples:
            raise ClassificationError("Training corpus is empty")

        self._examples = tuple(examples)
        self._vectorizer = TfidfVectorizer()

        try:
            self._matrix = self._vectorizer.fit_transform(
                [ex.text for ex in self._examples]
            )
        except ValueError as e:
            raise ClassificationError(f"Cannot build TF-IDF index: {e}") from e

        logger.info(
            f"Initialized classifier with {len(self._examples)} examples, "
            f"{len(self._vectorizer.vocabulary_)} terms"
        )

    @property
    def examples(self) -> tuple[TrainingExample, ...]:
        return self._examples

    @property
    def labels(self) -> list[str]:
        return [ex.label for ex in self._examples]

    def score(self, content: str) -> list[float]:
        """
        Score content against every example.

        Args:
            content: Free-text ticket content.

        Returns:
            One similarity score per example, in corpus order.

        Raises:
            ClassificationError: If vectorizing the content fails.
        """
        try:
            vector = self._vectorizer.transform([content])
        except ValueError as e:
            raise ClassificationError(f"Cannot vectorize ticket content: {e}") from e

        # Rows are L2-normalized, so the dot product is the cosine similarity
        return [float(s) for s in linear_kernel(vector, self._matrix).ravel()]

    def classify(self, content: str) -> ClassificationResult:
        """
        Classify ticket content.

        Args:
            content: Free-text ticket content (may be empty).

        Returns:
            ClassificationResult with the best label, its score and reasoning.
        """
        best_label = ""
        best_score = self.SCORE_SENTINEL

        for example, score in zip(self._examples, self.score(content)):
            logger.debug(f"Score for '{example.label}': {score:.4f}")
            if score > best_score:
                best_score = score
                best_label = example.label

        result = ClassificationResult(
            label=best_label,
            score=best_score,
            reasoning=build_reasoning(best_label),
        )

        logger.info(f"Classified as '{result.label}' (score: {result.score:.4f})")
        return result
