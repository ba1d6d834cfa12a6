#!/usr/bin/env python3
"""
Basic RepoLens usage example.

Runs offline against the in-memory GitHub from ``repolens.testing``.
Run with: python examples/basic_usage.py
"""

import asyncio

from repolens import RepoLensClient, RepoLensError, ValidationError
from repolens.testing import FakeGitHub, make_contributor_payload, make_repo_payload

print("=== RepoLens Basic Usage Example ===\n")

github = FakeGitHub()
github.add_repositories("octocat", [
    make_repo_payload(1, "react-dashboard", language="JavaScript",
                      description="Admin dashboard built with React",
                      topics=["react", "dashboard"], stargazers_count=40),
    make_repo_payload(2, "vue-dashboard", language="JavaScript",
                      description="Admin dashboard built with Vue",
                      topics=["vue", "dashboard"], stargazers_count=35),
    make_repo_payload(3, "neural-style", language="Python",
                      description="Neural style transfer in PyTorch",
                      topics=["pytorch", "deep-learning"], stargazers_count=900),
])
github.add_contributors("octocat", "neural-style", [
    make_contributor_payload("octocat", 120),
    make_contributor_payload("alice", 14),
])


async def main() -> None:
    async with RepoLensClient(http_transport=github.transport()) as client:
        # 1. Fetch and cache
        print("1. Fetching repositories...")
        result = await client.repos.fetch_all("octocat")
        for repo in result.repositories:
            print(f"   {repo.full_name:28} {repo.language or '-':12} stars={repo.stargazers_count}")
        again = await client.repos.fetch_all("octocat")
        print(f"   Second fetch cached: {again.cached}")
        print(f"   Requests sent to GitHub: {github.call_count()}\n")

        # 2. Similarity
        print("2. Repositories similar to react-dashboard...")
        for item in await client.similar_repositories("octocat", "react-dashboard"):
            print(f"   {item.repository.name:20} score={item.score.total:.3f}")
        print()

        # 3. Expertise
        print("3. Expertise areas...")
        print(f"   {await client.expertise_areas('octocat')}\n")

        # 4. Contributors
        print("4. Top contributors...")
        for summary in await client.top_contributors("octocat"):
            print(f"   {summary.login}: {summary.total_contributions} contributions")
        print()

        # 5. Errors
        print("5. Handling errors...")
        try:
            await client.repos.fetch_all("-not-a-user-")
        except ValidationError as e:
            print(f"   {e.code}: {e.message}")
        outcome = await client.repos.try_fetch_all("ghost")
        print(f"   {outcome.error.kind.value}: {outcome.error.message}")
        print(f"   Suggestions: {list(outcome.error.suggestions)}\n")

        # 6. Budget
        print("6. Rate limit...")
        status = await client.rate_limit.get()
        print(f"   {status.remaining}/{status.limit} remaining ({status.percentage_used}% used)")
        print(f"   Cache: {client.cache.stats().to_dict()}")


try:
    asyncio.run(main())
except RepoLensError as e:
    print(f"Unexpected error: {e}")
    raise

print("\n=== Example complete ===")
