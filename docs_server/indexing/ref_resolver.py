"""Resolve the git ref matching a package's published version."""
import asyncio
import logging
from typing import Dict, Iterable, Optional

import httpx
import nodesemver

from .github_client import GitHubClient
from .registry import RegistryClient

logger = logging.getLogger(__name__)

VERSION_PREFIX = "v"


def branch_range(branch: str) -> str:
    """Branch name as a semver range: exactly one leading 'v' is dropped."""
    if branch.startswith(VERSION_PREFIX):
        return branch[len(VERSION_PREFIX):]
    return branch


def branch_satisfies(version: str, branch: str) -> bool:
    """Whether `version` satisfies the range named by `branch`."""
    try:
        return bool(nodesemver.satisfies(version, branch_range(branch)))
    except (ValueError, TypeError):
        # branches like 'master' are not ranges
        return False


class RefResolver:
    """
    Picks the branch whose name, read as a semver range, contains the
    version published on npm. Falls back to the default ref on any failure.
    """

    def __init__(
        self,
        registry: RegistryClient,
        github: GitHubClient,
        default_ref: str = "master",
        repo_owner: str = "yahoo",
    ):
        self.registry = registry
        self.github = github
        self.default_ref = default_ref
        self.repo_owner = repo_owner

    async def resolve(self, package: str, repo: Optional[str] = None) -> str:
        """
        Resolve the ref for a package.

        Args:
            package: npm package name
            repo: Repository to list branches of (default: {owner}/{package})

        Returns:
            Matching branch name, or the default ref
        """
        repo = repo or f"{self.repo_owner}/{package}"

        try:
            version = await self.registry.latest_version(package)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"npm request failed for {package}: {e}; using {self.default_ref}")
            return self.default_ref

        if not version:
            logger.warning(f"No published version for {package}; using {self.default_ref}")
            return self.default_ref

        try:
            branches = await self.github.list_branches(repo)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"GitHub branches failed for {repo}: {e}; using {self.default_ref}")
            return self.default_ref

        ref = self.default_ref
        for branch in branches:
            matched = branch_satisfies(version, branch)
            logger.debug(f"Checking branch {branch} of {repo} against {package}@{version}: {matched}")
            # last match wins
            if matched:
                ref = branch

        if ref == self.default_ref:
            logger.info(f"No branch of {repo} matches {package}@{version}; using {ref}")
        else:
            logger.info(f"Resolved {package}@{version} to branch {ref} of {repo}")
        return ref

    async def resolve_all(self, repos: Iterable[str]) -> Dict[str, str]:
        """
        Resolve refs for several repositories concurrently.

        The package name is the repository name. One repository's failure
        never affects another's result.
        """
        repos = sorted(set(repos))
        refs = await asyncio.gather(
            *(self.resolve(repo.split("/")[-1], repo=repo) for repo in repos)
        )
        return dict(zip(repos, refs))
