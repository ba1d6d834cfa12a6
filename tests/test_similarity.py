"""
Property-based tests for TF-IDF similarity, the ranker and expertise
classification.
"""

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from repolens.cache import TTLCache
from repolens.similarity import (
    RepositoryRanker,
    TfIdfEngine,
    classify_expertise_areas,
    cosine_similarity,
    expertise_area,
    repository_document,
    tokenize,
)
from repolens.similarity import ranker as ranker_module
from repolens.similarity.ranker import activity_closeness, topic_jaccard
from repolens.testing import FakeClock, create_mock_repository
from repolens.types.repos import Repository

WORDS = ["react", "dashboard", "python", "neural", "network", "parser", "compiler",
         "graph", "database", "server", "client", "widget", "shell", "config"]

vector_strategy = st.dictionaries(
    st.sampled_from(WORDS),
    st.one_of(st.just(0.0), st.floats(min_value=0.001, max_value=10)),
    max_size=8,
)
document_strategy = st.lists(st.sampled_from(WORDS), min_size=1, max_size=12).map(" ".join)


@given(a=vector_strategy, b=vector_strategy)
@settings(max_examples=100)
def test_cosine_symmetric_and_bounded(a: dict, b: dict) -> None:
    """Cosine similarity is symmetric and within [0, 1] for non-negative vectors."""
    forward = cosine_similarity(a, b)
    assert forward == pytest.approx(cosine_similarity(b, a))
    assert -1e-9 <= forward <= 1 + 1e-9


@given(a=vector_strategy)
@settings(max_examples=100)
def test_cosine_self_similarity(a: dict) -> None:
    """A non-zero vector is maximally similar to itself; a zero vector scores 0."""
    if any(a.values()):
        assert cosine_similarity(a, a) == pytest.approx(1.0)
    else:
        assert cosine_similarity(a, a) == 0.0


@given(docs=st.lists(document_strategy, min_size=1, max_size=8))
@settings(max_examples=100)
def test_idf_extremes(docs: list[str]) -> None:
    """A term in every document weighs 0; a term in exactly one of N weighs ln(N)."""
    engine = TfIdfEngine(docs)
    idf = engine.inverse_document_frequency()
    token_sets = [set(tokenize(doc)) for doc in docs]

    for term, weight in idf.items():
        containing = sum(term in tokens for tokens in token_sets)
        if containing == len(docs):
            assert weight == pytest.approx(0.0)
        if containing == 1:
            assert weight == pytest.approx(math.log(len(docs)))


@given(a=document_strategy, b=document_strategy)
@settings(max_examples=100)
def test_document_similarity_symmetric(a: str, b: str) -> None:
    engine = TfIdfEngine([a, b, "unrelated words entirely"])
    assert engine.similarity(a, b) == pytest.approx(engine.similarity(b, a))


class TestTokenize:
    def test_drops_short_words_stop_words_and_punctuation(self) -> None:
        assert tokenize("The React-based UI for a dashboard, with charts!") == [
            "react", "based", "dashboard", "charts",
        ]

    def test_empty(self) -> None:
        assert tokenize(None) == []
        assert tokenize("") == []


class TestTfIdfEngine:
    def test_term_frequency(self) -> None:
        engine = TfIdfEngine(["graph graph parser"])
        tf = engine.term_frequency("graph graph parser")
        assert tf == {"graph": pytest.approx(2 / 3), "parser": pytest.approx(1 / 3)}

    def test_unknown_terms_weigh_zero(self) -> None:
        engine = TfIdfEngine(["graph parser", "graph compiler"])
        vector = engine.tf_idf("graph unknownterm")
        assert vector["unknownterm"] == 0.0
        assert vector["graph"] == 0.0

    def test_vectors_memoized_by_content(self) -> None:
        engine = TfIdfEngine(["graph parser", "graph compiler"])
        first = engine.tf_idf("graph parser")
        assert engine.tf_idf("graph parser") is first

    def test_long_documents_with_shared_prefix_are_distinct(self) -> None:
        prefix = "parser " * 20
        engine = TfIdfEngine([prefix + "compiler", prefix + "database", "graph"])
        assert engine.tf_idf(prefix + "compiler") != engine.tf_idf(prefix + "database")

    def test_identical_documents(self) -> None:
        engine = TfIdfEngine(["neural network", "shell config", "graph database"])
        assert engine.similarity("neural network", "neural network") == pytest.approx(1.0)


class TestSignals:
    def test_topic_jaccard(self) -> None:
        a = create_mock_repository(1, "a", topics=["react", "ui", "charts"])
        b = create_mock_repository(2, "b", topics=["react", "charts", "d3"])
        c = create_mock_repository(3, "c")

        assert topic_jaccard(a, b) == pytest.approx(2 / 4)
        assert topic_jaccard(c, c) == 0.0

    def test_activity_closeness(self) -> None:
        a = create_mock_repository(1, "a", stargazers_count=99)
        b = create_mock_repository(2, "b", stargazers_count=9)
        zero = create_mock_repository(3, "c", stargazers_count=0)

        assert activity_closeness(a, b) == pytest.approx(0.5)
        assert activity_closeness(zero, zero) == 0.0


class TestRepositoryRanker:
    def test_score_components(self, sample_repositories: list[Repository]) -> None:
        ranker = RepositoryRanker(TTLCache())
        react, vue = sample_repositories[0], sample_repositories[1]

        score = ranker.similarity(react, vue, sample_repositories)

        assert score.language == 1.0
        assert score.topics == pytest.approx(1 / 3)
        assert 0 < score.text < 1
        assert score.total == pytest.approx(
            0.5 * score.text + 0.3 * score.language + 0.4 * score.topics + 0.2 * score.activity
        )

    def test_language_requires_both_set(self) -> None:
        ranker = RepositoryRanker(TTLCache())
        a = create_mock_repository(1, "a")
        b = create_mock_repository(2, "b")

        assert ranker.similarity(a, b, [a, b]).language == 0.0

    def test_pair_scores_cached_in_either_order(self, sample_repositories: list[Repository]) -> None:
        cache = TTLCache()
        ranker = RepositoryRanker(cache)
        a, b = sample_repositories[0], sample_repositories[2]

        first = ranker.similarity(a, b, sample_repositories)
        entries = len(cache)

        assert ranker.similarity(b, a, sample_repositories) is first
        assert len(cache) == entries

    def test_cache_expiry(self, sample_repositories: list[Repository]) -> None:
        clock = FakeClock()
        cache = TTLCache(clock=clock)
        ranker = RepositoryRanker(cache, pair_ttl=300, vector_ttl=300)
        ranker.similarity(sample_repositories[0], sample_repositories[1], sample_repositories)

        clock.advance(300)

        assert cache.cleanup() == 2

    def test_rank_similar(self, sample_repositories: list[Repository]) -> None:
        ranker = RepositoryRanker(TTLCache())
        subject = sample_repositories[0]

        ranked = ranker.rank_similar(subject, sample_repositories, limit=2)

        assert len(ranked) == 2
        assert ranked[0].repository.name == "vue-dashboard"
        assert all(item.repository.id != subject.id for item in ranked)
        assert ranked[0].score.total >= ranked[1].score.total

    def test_rank_similar_fingerprints_corpus_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        pool = [
            create_mock_repository(i, f"repo-{i}", language="Go", stargazers_count=i)
            for i in range(1, 201)
        ]
        calls = []
        original = ranker_module.corpus_fingerprint

        def counting(corpus):
            calls.append(len(corpus))
            return original(corpus)

        monkeypatch.setattr(ranker_module, "corpus_fingerprint", counting)
        ranker = RepositoryRanker(TTLCache())

        ranked = ranker.rank_similar(pool[0], pool, limit=3)

        assert len(ranked) == 3
        assert calls == [200]

    def test_rank_similar_empty_pool(self, sample_repository: Repository) -> None:
        ranker = RepositoryRanker(TTLCache())
        assert ranker.rank_similar(sample_repository, [sample_repository]) == []


def test_repository_document() -> None:
    repo = create_mock_repository(1, "widget", description="A small widget", topics=["ui", "kit"])
    assert repository_document(repo) == "widget A small widget ui kit"


class TestExpertise:
    @pytest.mark.parametrize("kwargs,label", [
        ({"name": "portfolio", "language": "TypeScript"}, "Web Development"),
        ({"name": "thing", "topics": ["flutter"]}, "Mobile Development"),
        ({"name": "thing", "language": "Kotlin"}, "Mobile Development"),
        ({"name": "payments-api", "language": "Go"}, "Backend Development"),
        ({"name": "thing", "topics": ["pytorch"], "language": "Python"}, "AI/ML"),
        ({"name": "string-utils", "language": "Rust"}, "Libraries & Tools"),
        ({"name": "notes", "topics": ["jupyter"]}, "Data Science"),
        ({"name": "notes", "language": "R"}, "Data Science"),
        ({"name": "notes", "language": "Haskell"}, "Haskell Development"),
        ({"name": "notes"}, "General Development"),
    ])
    def test_single_labels(self, kwargs: dict, label: str) -> None:
        name = kwargs.pop("name")
        assert expertise_area(create_mock_repository(1, name, **kwargs)) == label

    def test_first_matching_rule_wins(self) -> None:
        repo = create_mock_repository(1, "mobile-api", topics=["android"], language="Kotlin")
        assert expertise_area(repo) == "Mobile Development"

    def test_web_name_beats_backend(self) -> None:
        # "backend" appears in the web rule's name keywords first
        repo = create_mock_repository(1, "backend-service")
        assert expertise_area(repo) == "Web Development"

    def test_top_labels_by_frequency(self) -> None:
        repos = [
            create_mock_repository(1, "notes", language="Haskell"),
            create_mock_repository(2, "site", language="HTML"),
            create_mock_repository(3, "blog", language="CSS"),
            create_mock_repository(4, "misc"),
            create_mock_repository(5, "scratch", language="Haskell"),
            create_mock_repository(6, "shop-frontend"),
        ]

        assert classify_expertise_areas(repos) == [
            "Web Development", "Haskell Development", "General Development",
        ]
        assert classify_expertise_areas(repos, top_n=1) == ["Web Development"]

    def test_ties_keep_first_encounter_order(self) -> None:
        repos = [
            create_mock_repository(1, "notes", language="Elixir"),
            create_mock_repository(2, "misc"),
        ]
        assert classify_expertise_areas(repos) == ["Elixir Development", "General Development"]

    def test_empty(self) -> None:
        assert classify_expertise_areas([]) == []
