"""
Multi-signal repository similarity and ranking.

Blends TF-IDF text similarity with language match, topic overlap and
star-activity closeness. Engines and pair scores are kept in the shared
TTL cache for a few minutes, since the candidate pool changes slowly.
"""

import hashlib
import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

from repolens.similarity.tfidf import TfIdfEngine, repository_document
from repolens.types.repos import Repository
from repolens.types.similarity import RankedRepository, SimilarityScore

if TYPE_CHECKING:
    from repolens.cache import TTLCache

SIMILARITY_TTL = 300.0


def language_match(repo_a: Repository, repo_b: Repository) -> float:
    """1.0 when both repositories declare the same primary language."""
    if repo_a.language and repo_a.language == repo_b.language:
        return 1.0
    return 0.0


def topic_jaccard(repo_a: Repository, repo_b: Repository) -> float:
    """Jaccard overlap of topic sets; 0 when neither side has topics."""
    topics_a = set(repo_a.topics)
    topics_b = set(repo_b.topics)
    union = topics_a | topics_b
    if not union:
        return 0.0
    return len(topics_a & topics_b) / len(union)


def activity_closeness(repo_a: Repository, repo_b: Repository) -> float:
    """Closeness of star counts on a log10 scale, in [0, 1]."""
    activity_a = math.log10(repo_a.stargazers_count + 1)
    activity_b = math.log10(repo_b.stargazers_count + 1)
    highest = max(activity_a, activity_b)
    if highest <= 0:
        return 0.0
    return 1 - abs(activity_a - activity_b) / highest


def corpus_fingerprint(corpus: Sequence[Repository]) -> str:
    """Stable hash of a corpus' documents, independent of order."""
    digest = hashlib.sha256()
    for document in sorted(repository_document(repo) for repo in corpus):
        digest.update(document.encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()[:16]


class RepositoryRanker:
    """Scores and ranks repositories against each other."""

    def __init__(
        self,
        cache: "TTLCache",
        pair_ttl: float = SIMILARITY_TTL,
        vector_ttl: float = SIMILARITY_TTL,
    ) -> None:
        """
        Initialize the ranker.

        Args:
            cache: Shared TTL cache for engines and pair scores
            pair_ttl: Seconds a pair score stays cached
            vector_ttl: Seconds a corpus engine and its vectors stay cached
        """
        self.cache = cache
        self.pair_ttl = pair_ttl
        self.vector_ttl = vector_ttl

    def engine_for(
        self, corpus: Sequence[Repository], fingerprint: str | None = None
    ) -> TfIdfEngine:
        """Return the cached TF-IDF engine for a corpus, building it if needed."""
        key = f"tfidf:{fingerprint or corpus_fingerprint(corpus)}"
        engine = self.cache.get(key)
        if engine is None:
            engine = TfIdfEngine.from_repositories(corpus)
            self.cache.set(key, engine, self.vector_ttl)
        return engine

    def similarity(
        self,
        repo_a: Repository,
        repo_b: Repository,
        corpus: Sequence[Repository],
    ) -> SimilarityScore:
        """
        Blended similarity of two repositories.

        Args:
            repo_a: First repository
            repo_b: Second repository
            corpus: Candidate set the IDF table is built over

        Returns:
            SimilarityScore with per-signal components
        """
        fingerprint = corpus_fingerprint(corpus)
        return self._score(repo_a, repo_b, self.engine_for(corpus, fingerprint), fingerprint)

    def _score(
        self,
        repo_a: Repository,
        repo_b: Repository,
        engine: TfIdfEngine,
        fingerprint: str,
    ) -> SimilarityScore:
        low, high = sorted((repo_a.id, repo_b.id))
        key = f"similarity:{low}:{high}:{fingerprint}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        score = SimilarityScore(
            text=engine.similarity(repository_document(repo_a), repository_document(repo_b)),
            language=language_match(repo_a, repo_b),
            topics=topic_jaccard(repo_a, repo_b),
            activity=activity_closeness(repo_a, repo_b),
        )
        self.cache.set(key, score, self.pair_ttl)
        return score

    def rank_similar(
        self,
        repository: Repository,
        candidate_pool: Sequence[Repository],
        limit: int = 5,
    ) -> list[RankedRepository]:
        """
        Rank candidates by similarity to a repository.

        The repository itself is excluded. The IDF corpus is the pool plus
        the repository; it is fingerprinted once per ranking.

        Returns:
            At most ``limit`` candidates, highest total score first
        """
        candidates = [repo for repo in candidate_pool if repo.id != repository.id]
        if not candidates:
            return []
        corpus = [repository, *candidates]
        fingerprint = corpus_fingerprint(corpus)
        engine = self.engine_for(corpus, fingerprint)
        ranked = [
            RankedRepository(
                repository=candidate,
                score=self._score(repository, candidate, engine, fingerprint),
            )
            for candidate in candidates
        ]
        ranked.sort(key=lambda item: item.score.total, reverse=True)
        return ranked[:limit]
