import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from django.conf import settings
from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedRepository:
    name: str
    repo: Repo


def repository_name(path: str) -> str:
    name = os.path.basename(os.path.normpath(path))
    if name.endswith(".git") and len(name) > 4:
        name = name[:-4]
    return name


def load_repositories(root: str) -> Mapping[str, NamedRepository]:
    """Open every git repository directly below ``root``."""
    repos = {}
    if not os.path.isdir(root):
        logger.warning("repository root %s does not exist", root)
        return MappingProxyType(repos)

    for entry in sorted(os.listdir(root)):
        path = os.path.join(root, entry)
        if not os.path.isdir(path):
            continue
        try:
            repo = Repo(path)
        except NotGitRepository:
            logger.debug("skipping %s: not a git repository", path)
            continue
        name = repository_name(path)
        if name in repos:
            logger.warning("skipping %s: name %r is already taken", path, name)
            continue
        repos[name] = NamedRepository(name=name, repo=repo)

    logger.info("loaded %d repositories from %s", len(repos), root)
    return MappingProxyType(repos)


@dataclass(frozen=True)
class Site:
    title: str
    description: str
    host: str
    repositories: Mapping[str, NamedRepository] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_settings(cls) -> "Site":
        return cls(
            title=settings.SMITHY_TITLE,
            description=settings.SMITHY_DESCRIPTION,
            host=settings.SMITHY_HOST,
            repositories=load_repositories(settings.SMITHY_ROOT),
        )

    def find_repo(self, name: str) -> Optional[NamedRepository]:
        return self.repositories.get(name)

    def sorted_repositories(self) -> list[NamedRepository]:
        return sorted(self.repositories.values(), key=lambda r: r.name)

    def context(self) -> dict:
        return {"title": self.title, "description": self.description, "host": self.host}
