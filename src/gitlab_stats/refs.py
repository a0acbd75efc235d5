"""Branch and tag resolution for commits."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from .gitlab.client import GitLabClient
from .models import Commit, Project, RefEntry

UNKNOWN = "unknown"
MERGE_PREFIX = "Merge branch"
MERGE_BRANCH_RE = re.compile(r"Merge branch '([^']+)'")


@dataclass(frozen=True)
class ResolvedRefs:
    branch: str = UNKNOWN
    tag: str = UNKNOWN


def _first(refs: Iterable[RefEntry], ref_type: str) -> str:
    return next((r.name for r in refs if r.type == ref_type), UNKNOWN)


def select_refs(refs: list[RefEntry], message: str) -> ResolvedRefs:
    """Pick the first branch and tag, letting a merge message name the branch."""
    branch = _first(refs, "branch")
    tag = _first(refs, "tag")

    if message.startswith(MERGE_PREFIX):
        match = MERGE_BRANCH_RE.search(message)
        if match:
            branch = match.group(1)

    return ResolvedRefs(branch=branch, tag=tag)


async def resolve_refs(client: GitLabClient, project: Project, commit: Commit) -> ResolvedRefs:
    refs = await client.get_commit_refs(project, commit)
    return select_refs(refs, commit.message)
