# Shared pytest fixtures: Django settings and on-disk git repositories built with dulwich

import os
import tempfile

import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'smithy_core.settings')
os.environ.setdefault('SMITHY_ROOT', tempfile.mkdtemp(prefix='smithy-root-'))
django.setup()

import pytest
from django.test import RequestFactory
from dulwich.index import commit_tree
from dulwich.objects import Blob, Commit, Tag
from dulwich.repo import Repo

from repos_app.repositories import NamedRepository, Site

AUTHOR = b'Jane Doe <jane@example.com>'
START_TIME = 1600000000  # Sun, 13 Sep 2020 12:26:40 UTC

FILE_MODE = 0o100644
SYMLINK_MODE = 0o120000
SUBMODULE_MODE = 0o160000


class RepoBuilder:
    # Writes blobs, trees and commits straight into a dulwich object store

    def __init__(self, path):
        self.repo = Repo.init(str(path), mkdir=True)
        self.clock = START_TIME

    @property
    def store(self):
        return self.repo.object_store

    def tree(self, files):
        # files maps 'dir/name' to bytes, or to (mode, bytes-or-sha) for special entries
        blobs = []
        for path, value in files.items():
            mode = FILE_MODE
            if isinstance(value, tuple):
                mode, value = value
            if mode == SUBMODULE_MODE:
                sha = value
            else:
                blob = Blob.from_string(value)
                self.store.add_object(blob)
                sha = blob.id
            blobs.append((path.encode(), sha, mode))
        return commit_tree(self.store, blobs)

    def commit(self, files, message='change', branch='main', parents=None,
               tree=None, timezone=0, update_ref=True):
        ref = b'refs/heads/' + branch.encode()
        if parents is None:
            parents = [self.repo.refs[ref]] if ref in self.repo.refs else []
        self.clock += 60
        commit = Commit()
        commit.tree = tree if tree is not None else self.tree(files)
        commit.parents = parents
        commit.author = commit.committer = AUTHOR
        commit.author_time = commit.commit_time = self.clock
        commit.author_timezone = commit.commit_timezone = timezone
        commit.encoding = b'UTF-8'
        commit.message = message.encode() + b'\n'
        self.store.add_object(commit)
        if update_ref:
            self.repo.refs[ref] = commit.id
        return commit

    def tag(self, name, commit):
        self.repo.refs[b'refs/tags/' + name.encode()] = commit.id

    def annotated_tag(self, name, commit):
        tag = Tag()
        tag.name = name.encode()
        tag.object = (Commit, commit.id)
        tag.tagger = AUTHOR
        tag.tag_time = self.clock
        tag.tag_timezone = 0
        tag.message = b'release\n'
        self.store.add_object(tag)
        self.repo.refs[b'refs/tags/' + name.encode()] = tag.id
        return tag


@pytest.fixture
def builder(tmp_path):
    # A fresh, empty repository named 'demo'
    return RepoBuilder(tmp_path / 'demo')


@pytest.fixture
def demo_repo(builder):
    # Two commits on main, a feature branch and a tag
    builder.commit({
        'README.md': b'# Demo\n\nA *small* project.\n',
        'src/app.py': b'def main():\n    return 1\n',
        'src/lib/util.py': b'X = 1\n',
    }, message='Initial import')
    second = builder.commit({
        'README.md': b'# Demo\n\nA *small* project.\n',
        'src/app.py': b'def main():\n    return 2\n',
        'src/lib/util.py': b'X = 1\n',
        'notes.unknownext': b'<b>plain</b>\n',
    }, message='Return two\n\nAnd add notes.')
    builder.commit({'README.md': b'feature\n'}, branch='feature', parents=[second.id])
    builder.tag('v1.0', second)
    return builder


@pytest.fixture
def site(demo_repo):
    named = NamedRepository(name='demo', repo=demo_repo.repo)
    return Site(title='Smithy', description='test forge', host='localhost',
                repositories={'demo': named})


@pytest.fixture
def rf():
    return RequestFactory()
