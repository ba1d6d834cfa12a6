"""
TF-IDF text similarity over repository metadata.

Each repository becomes one document (name, description and topics). The
IDF table is built over a candidate corpus, so terms shared by every
candidate carry no weight.
"""

import hashlib
import math
import re
from collections import Counter
from collections.abc import Iterable, Mapping

from repolens.types.repos import Repository

STOP_WORDS = frozenset({
    "the", "is", "at", "which", "on", "and", "a", "to", "as", "are", "was",
    "will", "be", "been", "have", "has", "had", "do", "does", "did", "can",
    "could", "should", "would", "may", "might", "must", "shall", "with",
    "for", "of", "in", "by", "from", "up", "about", "into", "through",
    "during", "before", "after", "above", "below", "between", "among",
    "this", "that", "these", "those", "i", "me", "my", "myself", "we", "our",
    "ours", "ourselves", "you", "your", "yours", "yourself", "yourselves",
    "he", "him", "his", "himself", "she", "her", "hers", "herself", "it",
    "its", "itself", "they", "them", "their", "theirs", "themselves",
})

_NON_WORD = re.compile(r"[^\w\s]")

TfIdfVector = dict[str, float]


def repository_document(repo: Repository) -> str:
    """Text used to represent a repository: name, description, topics."""
    return f"{repo.name} {repo.description or ''} {' '.join(repo.topics)}"


def tokenize(text: str | None) -> list[str]:
    """
    Split text into lowercase content words.

    Non-word characters become spaces; tokens of two characters or fewer
    and stop words are dropped.
    """
    if not text:
        return []
    words = _NON_WORD.sub(" ", text.lower()).split()
    return [word for word in words if len(word) > 2 and word not in STOP_WORDS]


def cosine_similarity(vec_a: Mapping[str, float], vec_b: Mapping[str, float]) -> float:
    """
    Cosine similarity of two sparse vectors.

    Missing terms count as zero. Returns 0 when either vector has zero
    norm.
    """
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for term in vec_a.keys() | vec_b.keys():
        a = vec_a.get(term, 0.0)
        b = vec_b.get(term, 0.0)
        dot += a * b
        norm_a += a * a
        norm_b += b * b

    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def _document_key(document: str) -> str:
    return hashlib.sha256(document.encode("utf-8")).hexdigest()


class TfIdfEngine:
    """TF-IDF model over a fixed corpus of documents."""

    def __init__(self, documents: Iterable[str]) -> None:
        self.documents = list(documents)
        self._token_sets = [set(tokenize(doc)) for doc in self.documents]
        self.vocabulary: set[str] = set().union(*self._token_sets)
        self._idf: dict[str, float] | None = None
        self._vectors: dict[str, TfIdfVector] = {}

    @classmethod
    def from_repositories(cls, repositories: Iterable[Repository]) -> "TfIdfEngine":
        return cls(repository_document(repo) for repo in repositories)

    tokenize = staticmethod(tokenize)
    cosine_similarity = staticmethod(cosine_similarity)

    def term_frequency(self, document: str) -> dict[str, float]:
        """Token counts divided by the document's token count."""
        words = tokenize(document)
        if not words:
            return {}
        total = len(words)
        return {word: count / total for word, count in Counter(words).items()}

    def inverse_document_frequency(self) -> dict[str, float]:
        """
        ``ln(total_docs / docs_containing_term)`` for every vocabulary term.

        A term in every document gets 0; a term in one document of N gets
        ``ln(N)``.
        """
        if self._idf is None:
            total_docs = len(self.documents)
            document_frequency: Counter[str] = Counter()
            for tokens in self._token_sets:
                document_frequency.update(tokens)
            self._idf = {
                term: math.log(total_docs / max(document_frequency[term], 1))
                for term in self.vocabulary
            }
        return self._idf

    def tf_idf(
        self, document: str, idf: Mapping[str, float] | None = None
    ) -> TfIdfVector:
        """
        TF-IDF vector of a document, memoized by the document's content hash.

        Terms missing from the IDF table weigh 0. Only vectors built
        against the engine's own IDF table are memoized.
        """
        own_idf = self.inverse_document_frequency()
        if idf is None:
            idf = own_idf
        memoize = idf is own_idf

        key = _document_key(document)
        if memoize and key in self._vectors:
            return self._vectors[key]

        vector = {
            term: tf * idf.get(term, 0.0)
            for term, tf in self.term_frequency(document).items()
        }
        if memoize:
            self._vectors[key] = vector
        return vector

    def similarity(self, document_a: str, document_b: str) -> float:
        """Cosine similarity of two documents' TF-IDF vectors."""
        idf = self.inverse_document_frequency()
        return cosine_similarity(self.tf_idf(document_a, idf), self.tf_idf(document_b, idf))
