"""Similarity-related data models."""

from dataclasses import dataclass

from repolens.types.repos import Repository

TEXT_WEIGHT = 0.5
LANGUAGE_WEIGHT = 0.3
TOPIC_WEIGHT = 0.4
ACTIVITY_WEIGHT = 0.2


@dataclass(frozen=True)
class SimilarityScore:
    """Blended similarity between two repositories.

    Each component is the raw signal in [0, 1]; ``total`` applies the
    fixed weights, so it lies roughly in [0, 1.4].
    """

    text: float
    language: float
    topics: float
    activity: float

    @property
    def total(self) -> float:
        return (
            self.text * TEXT_WEIGHT
            + self.language * LANGUAGE_WEIGHT
            + self.topics * TOPIC_WEIGHT
            + self.activity * ACTIVITY_WEIGHT
        )


@dataclass(frozen=True)
class RankedRepository:
    """A candidate repository with its score against a subject."""

    repository: Repository
    score: SimilarityScore
