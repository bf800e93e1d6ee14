import stat
from dataclasses import dataclass
from typing import Optional, Union

from dulwich.object_store import BaseObjectStore
from dulwich.objects import S_ISGITLINK, Blob, Commit, Tree

from .render import highlight
from .results import NOT_FOUND, NotFound, StoreError

README_NAMES = (
    "README.md",
    "README",
    "README.markdown",
    "readme.md",
    "readme.markdown",
    "readme",
)


@dataclass(frozen=True)
class TreeItem:
    name: str
    mode: int
    sha: str

    @property
    def kind(self) -> str:
        if S_ISGITLINK(self.mode):
            return "submodule"
        if stat.S_ISLNK(self.mode):
            return "symlink"
        if stat.S_ISDIR(self.mode):
            return "tree"
        return "file"

    @property
    def is_file(self) -> bool:
        return stat.S_ISREG(self.mode)


@dataclass
class Root:
    entries: list[TreeItem]


@dataclass
class Directory:
    parent_path: str
    name: str
    entries: list[TreeItem]


@dataclass
class File:
    parent_path: str
    entry: TreeItem
    content: bytes
    highlighted: str

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


def tree_items(tree: Tree) -> list[TreeItem]:
    return [
        TreeItem(
            name=entry.path.decode("utf-8", errors="replace"),
            mode=entry.mode,
            sha=entry.sha.decode("ascii"),
        )
        for entry in tree.iteritems()
    ]


def parent_path(path: str) -> str:
    return path.strip("/").rpartition("/")[0]


def load_root_tree(store: BaseObjectStore, commit: Commit) -> Tree:
    try:
        tree = store[commit.tree]
    except KeyError as exc:
        raise StoreError(f"tree {commit.tree!r} of commit {commit.id!r} is missing") from exc
    if not isinstance(tree, Tree):
        raise StoreError(f"object {commit.tree!r} of commit {commit.id!r} is not a tree")
    return tree


def lookup_path(store: BaseObjectStore, tree: Tree, path: str) -> Optional[tuple[int, bytes]]:
    """Resolve ``path`` below ``tree`` to ``(mode, sha)``, or None.

    Segments are matched literally: an empty one (leading, trailing or
    doubled slash) never matches.
    """
    mode, sha = stat.S_IFDIR, tree.id
    parts = path.split("/")
    if "" in parts:
        return None
    for part in parts:
        if not stat.S_ISDIR(mode):
            return None
        current = store[sha]
        if not isinstance(current, Tree):
            return None
        try:
            mode, sha = current[part.encode("utf-8")]
        except KeyError:
            return None
    return mode, sha


def navigate(store: BaseObjectStore, commit: Commit, path: str) -> Union[Root, Directory, File, NotFound]:
    """Resolve ``path`` inside ``commit`` to a directory listing or a file.

    Exactly one of ``Root``, ``Directory``, ``File`` or ``NOT_FOUND`` comes
    back. A commit whose root tree cannot be read raises ``StoreError``.
    """
    root = load_root_tree(store, commit)
    if not path:
        return Root(entries=tree_items(root))

    try:
        found = lookup_path(store, root, path)
    except KeyError as exc:
        raise StoreError(f"broken tree below {root.id!r}") from exc
    if found is None:
        return NOT_FOUND
    mode, sha = found
    name = path.rpartition("/")[2]

    if stat.S_ISREG(mode):
        blob = store[sha] if sha in store else None
        if not isinstance(blob, Blob):
            return NOT_FOUND
        entry = TreeItem(name=name, mode=mode, sha=sha.decode("ascii"))
        content = blob.as_raw_string()
        return File(
            parent_path=parent_path(path),
            entry=entry,
            content=content,
            highlighted=highlight(name, content.decode("utf-8", errors="replace")),
        )

    subtree = store[sha] if sha in store else None
    if not isinstance(subtree, Tree):
        return NOT_FOUND
    return Directory(parent_path=parent_path(path), name=name, entries=tree_items(subtree))


def read_readme(store: BaseObjectStore, commit: Commit) -> Optional[str]:
    root = load_root_tree(store, commit)
    for candidate in README_NAMES:
        try:
            mode, sha = root[candidate.encode("utf-8")]
        except KeyError:
            continue
        blob = store[sha] if sha in store else None
        if stat.S_ISREG(mode) and isinstance(blob, Blob):
            return blob.as_raw_string().decode("utf-8", errors="replace")
    return None
