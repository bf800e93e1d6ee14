"""Commit diffs: the tree changes of a commit, as HTML or as a mailbox patch."""
import math
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from django.utils.html import escape
from dulwich.diff_tree import RenameDetector, TreeChange, tree_changes
from dulwich.object_store import BaseObjectStore
from dulwich.objects import Commit
from dulwich.patch import write_object_diff

from .helpers import author_datetime, commit_encoding, decode_text, split_identity
from .results import StoreError, Unprocessable

PATCH_FROM_DATE = "Mon Sep 17 00:00:00 2001"
STAT_LINE_LENGTH = 72


@dataclass
class FilePatch:
    old_path: Optional[str]
    new_path: Optional[str]
    text: str
    additions: int
    deletions: int

    @property
    def name(self) -> str:
        if self.old_path and self.new_path and self.old_path != self.new_path:
            return f"{self.old_path} => {self.new_path}"
        return self.new_path or self.old_path or ""


def diff_trees(store: BaseObjectStore, old_tree: Optional[bytes], new_tree: bytes) -> list[TreeChange]:
    try:
        return list(
            tree_changes(store, old_tree, new_tree, rename_detector=RenameDetector(store))
        )
    except KeyError as exc:
        raise StoreError(f"missing object while diffing {old_tree!r}..{new_tree!r}") from exc


def get_changes(store: BaseObjectStore, commit: Commit) -> list[TreeChange]:
    """Changes introduced by ``commit`` relative to its first parent.

    A root commit is compared with the empty tree, so every file shows up
    as added.
    """
    parent_tree = None
    if commit.parents:
        try:
            parent_tree = store[commit.parents[0]].tree
        except KeyError as exc:
            raise StoreError(f"parent of {commit.id!r} is missing") from exc
    return diff_trees(store, parent_tree, commit.tree)


def _path(entry) -> Optional[str]:
    if entry is None or entry.path is None:
        return None
    return entry.path.decode("utf-8", errors="replace")


def file_patch(store: BaseObjectStore, change: TreeChange) -> FilePatch:
    old, new = change.old, change.new
    buf = BytesIO()
    try:
        write_object_diff(
            buf,
            store,
            (old.path, old.mode, old.sha) if old else (None, None, None),
            (new.path, new.mode, new.sha) if new else (None, None, None),
        )
    except KeyError as exc:
        raise StoreError(f"cannot diff {_path(old) or _path(new)}") from exc
    text = buf.getvalue().decode("utf-8", errors="replace")

    additions = deletions = 0
    in_hunk = False
    for line in text.splitlines():
        if line.startswith("@@"):
            in_hunk = True
        elif not in_hunk:
            continue
        elif line.startswith("+"):
            additions += 1
        elif line.startswith("-"):
            deletions += 1
    return FilePatch(_path(old), _path(new), text, additions, deletions)


def patch_html(patch: FilePatch) -> str:
    out = []
    in_hunk = False
    for line in patch.text.splitlines():
        if line.startswith("@@"):
            in_hunk = True
            css = "diff-hunk"
        elif not in_hunk:
            css = "diff-header"
        elif line.startswith("+"):
            css = "diff-add"
        elif line.startswith("-"):
            css = "diff-del"
        else:
            css = "diff-context"
        out.append(f'<span class="{css}">{escape(line)}</span>')
    return "\n".join(out)


def format_changes(store: BaseObjectStore, changes: list[TreeChange]) -> str:
    """Render every change as an HTML unified diff, separated by blank lines."""
    return "\n\n".join(patch_html(file_patch(store, change)) for change in changes)


def format_stats(patches: list[FilePatch]) -> str:
    if not patches:
        return " 0 files changed\n"
    longest_name = max(len(p.name) for p in patches)
    longest_change = max(p.additions + p.deletions for p in patches)
    histogram = STAT_LINE_LENGTH - (longest_name + 5)
    scale = longest_change / histogram if longest_change > histogram > 0 else 1.0

    lines = []
    for p in patches:
        bar = "+" * math.floor(p.additions / scale) + "-" * math.floor(p.deletions / scale)
        lines.append(f" {p.name.ljust(longest_name)} | {p.additions + p.deletions} {bar}".rstrip())

    additions = sum(p.additions for p in patches)
    deletions = sum(p.deletions for p in patches)
    summary = f" {len(patches)} file{'s' if len(patches) != 1 else ''} changed"
    if additions:
        summary += f", {additions} insertion{'s' if additions != 1 else ''}(+)"
    if deletions:
        summary += f", {deletions} deletion{'s' if deletions != 1 else ''}(-)"
    lines.append(summary)
    return "\n".join(lines) + "\n"


def format_patch_date(commit: Commit) -> str:
    when = author_datetime(commit)
    return f"{when:%a}, {when.day} {when:%b %Y %H:%M:%S %z}"


def format_patch(store: BaseObjectStore, commit: Commit) -> str:
    """Render ``commit`` as a mailbox patch against its first parent.

    Root commits are refused with ``Unprocessable``.
    """
    if not commit.parents:
        raise Unprocessable(f"commit {commit.id.decode('ascii')} has no parent")
    try:
        parent = store[commit.parents[0]]
    except KeyError as exc:
        raise StoreError(f"parent of {commit.id!r} is missing") from exc

    patches = [file_patch(store, change) for change in diff_trees(store, parent.tree, commit.tree)]
    encoding = commit_encoding(commit)
    name, email = split_identity(decode_text(commit.author, encoding))
    message = decode_text(commit.message, encoding).rstrip("\n")

    header = "\n".join([
        f"From {commit.id.decode('ascii')} {PATCH_FROM_DATE}",
        f"From: {name} <{email}>",
        f"Date: {format_patch_date(commit)}",
        f"Subject: [PATCH] {message}",
    ])
    body = "".join(p.text for p in patches)
    return f"{header}\n---\n{format_stats(patches)}\n{body}"
