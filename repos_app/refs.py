from dataclasses import dataclass
from typing import Iterable, Iterator

from dulwich.errors import RefFormatError
from dulwich.repo import Repo

from .results import StoreError

HEADS_PREFIX = "refs/heads/"
TAGS_PREFIX = "refs/tags/"


@dataclass(frozen=True)
class Reference:
    kind: str
    name: str
    target: str

    @property
    def short_name(self) -> str:
        for prefix in (HEADS_PREFIX, TAGS_PREFIX):
            if self.name.startswith(prefix):
                return self.name[len(prefix):]
        return self.name


def iter_references(repo: Repo, prefix: str, kind: str) -> Iterator[Reference]:
    refs = repo.refs.as_dict(prefix.rstrip("/").encode())
    for name, target in refs.items():
        yield Reference(
            kind=kind,
            name=prefix + name.decode("utf-8", errors="replace"),
            target=target.decode("ascii"),
        )


def collect_references(iterator: Iterable[Reference]) -> list[Reference]:
    """Drain ``iterator`` into a list ordered by full reference name.

    Any failure while iterating aborts the whole listing.
    """
    refs = []
    try:
        for ref in iterator:
            refs.append(ref)
    except (KeyError, OSError, RefFormatError) as exc:
        raise StoreError(f"failed to list references: {exc}") from exc
    refs.sort(key=lambda ref: ref.name)
    return refs


def list_branches(repo: Repo) -> list[Reference]:
    return collect_references(iter_references(repo, HEADS_PREFIX, "branch"))


def list_tags(repo: Repo) -> list[Reference]:
    return collect_references(iter_references(repo, TAGS_PREFIX, "tag"))
