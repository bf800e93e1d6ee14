import logging
from dataclasses import dataclass
from typing import Optional, Union

from dulwich.errors import NotCommitError
from dulwich.objects import Commit, Tag
from dulwich.objectspec import AmbiguousShortId, parse_commit
from dulwich.repo import Repo

from .results import NOT_FOUND, NotFound

logger = logging.getLogger(__name__)

DEFAULT_BRANCHES = ("main", "master")


@dataclass(frozen=True)
class Revision:
    sha: str
    name: Optional[str] = None


def _peel(repo: Repo, obj):
    while isinstance(obj, Tag):
        obj = repo[obj.object[1]]
    return obj


def _lookup(repo: Repo, revision: str) -> Union[Commit, NotFound]:
    try:
        obj = _peel(repo, parse_commit(repo, revision.encode("utf-8")))
    except (KeyError, ValueError, AmbiguousShortId, NotCommitError) as exc:
        logger.debug("could not resolve %r: %r", revision, exc)
        return NOT_FOUND
    if not isinstance(obj, Commit):
        return NOT_FOUND
    return obj


def find_default_branch(repo: Repo) -> Union[Revision, NotFound]:
    for candidate in DEFAULT_BRANCHES:
        commit = _lookup(repo, candidate)
        if commit is not NOT_FOUND:
            return Revision(sha=commit.id.decode("ascii"), name=candidate)
    logger.debug("no default branch in %s (tried %s)", repo.path, ", ".join(DEFAULT_BRANCHES))
    return NOT_FOUND


def resolve_revision(repo: Repo, revision: str) -> Union[Revision, NotFound]:
    """Resolve a branch, tag or hash to the commit it denotes.

    An empty ``revision`` falls back to the default branch. Every kind of
    failure comes back as ``NOT_FOUND``.
    """
    if not revision:
        return find_default_branch(repo)
    commit = _lookup(repo, revision)
    if commit is NOT_FOUND:
        return NOT_FOUND
    sha = commit.id.decode("ascii")
    return Revision(sha=sha, name=None if sha.startswith(revision) else revision)


def find_commit(repo: Repo, commit_id: str) -> Union[Commit, NotFound]:
    """Look up a commit by full or unique short hash, ignoring ref names."""
    if not commit_id:
        return NOT_FOUND
    revision = resolve_revision(repo, commit_id)
    if revision is NOT_FOUND or not revision.sha.startswith(commit_id):
        return NOT_FOUND
    return repo[revision.sha.encode("ascii")]
