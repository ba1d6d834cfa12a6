"""Repository similarity, ranking and classification."""

from repolens.similarity.expertise import classify_expertise_areas, expertise_area
from repolens.similarity.ranker import RepositoryRanker
from repolens.similarity.tfidf import (
    TfIdfEngine,
    cosine_similarity,
    repository_document,
    tokenize,
)

__all__ = [
    "TfIdfEngine",
    "tokenize",
    "cosine_similarity",
    "repository_document",
    "RepositoryRanker",
    "classify_expertise_areas",
    "expertise_area",
]
