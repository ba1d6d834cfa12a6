"""Expertise-area tagging from repository metadata."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from repolens.types.repos import Repository


@dataclass(frozen=True)
class ExpertiseRule:
    """A project-type label and the metadata that triggers it."""

    label: str
    topics: frozenset[str]
    name_keywords: tuple[str, ...]
    languages: frozenset[str] = frozenset()

    def matches(self, repo: Repository) -> bool:
        if any(topic.lower() in self.topics for topic in repo.topics):
            return True
        name = repo.name.lower()
        if any(keyword in name for keyword in self.name_keywords):
            return True
        return repo.language in self.languages


# Order matters: a repository gets the first label whose rule matches.
EXPERTISE_RULES = (
    ExpertiseRule(
        "Web Development",
        frozenset({"web", "website", "frontend", "backend", "html", "css", "react", "vue", "angular"}),
        ("website", "web", "app", "frontend", "backend", "react", "vue"),
        frozenset({"HTML", "CSS", "JavaScript", "TypeScript"}),
    ),
    ExpertiseRule(
        "Mobile Development",
        frozenset({"mobile", "android", "ios", "react-native", "flutter", "swift", "kotlin"}),
        ("mobile", "android", "ios", "flutter"),
        frozenset({"Swift", "Kotlin", "Dart"}),
    ),
    ExpertiseRule(
        "Backend Development",
        frozenset({"api", "backend", "server", "microservice", "rest", "graphql"}),
        ("api", "server", "backend", "service"),
    ),
    ExpertiseRule(
        "AI/ML",
        frozenset({"ai", "ml", "machine-learning", "data-science", "tensorflow", "pytorch", "sklearn"}),
        ("ai", "ml", "data", "neural", "learning", "model"),
    ),
    ExpertiseRule(
        "Libraries & Tools",
        frozenset({"library", "package", "framework", "tool", "cli", "npm", "pip"}),
        ("lib", "tool", "util", "cli", "helper"),
    ),
    ExpertiseRule(
        "Data Science",
        frozenset({"data", "analytics", "visualization", "jupyter", "notebook"}),
        ("data", "analysis", "chart", "graph"),
        frozenset({"R", "Jupyter Notebook"}),
    ),
)


def expertise_area(repo: Repository) -> str:
    """Project-type label of a single repository."""
    for rule in EXPERTISE_RULES:
        if rule.matches(repo):
            return rule.label
    if repo.language in ("JavaScript", "TypeScript"):
        return "JavaScript Development"
    if repo.language:
        return f"{repo.language} Development"
    return "General Development"


def classify_expertise_areas(
    repositories: Iterable[Repository], top_n: int = 5
) -> list[str]:
    """
    Most frequent project-type labels across repositories.

    Ties keep the order in which labels were first encountered.
    """
    counts = Counter(expertise_area(repo) for repo in repositories)
    return [label for label, _ in counts.most_common(top_n)]
