# Unit tests for repos_app/trees.py

import pytest

from conftest import SUBMODULE_MODE, SYMLINK_MODE
from repos_app.results import NOT_FOUND, StoreError
from repos_app.trees import Directory, File, Root, navigate, parent_path, read_readme


@pytest.fixture
def head(demo_repo):
    return demo_repo.repo[b'refs/heads/main']


def all_paths(store, tree, prefix=''):
    for entry in tree.iteritems():
        path = prefix + entry.path.decode()
        yield path
        obj = store[entry.sha] if entry.sha in store else None
        if obj is not None and obj.type_name == b'tree':
            yield from all_paths(store, obj, path + '/')


class TestNavigate:

    def test_root(self, demo_repo, head):
        result = navigate(demo_repo.store, head, '')
        assert isinstance(result, Root)
        root = demo_repo.store[head.tree]
        assert [e.name for e in result.entries] == [e.path.decode() for e in root.iteritems()]
        assert [e.name for e in result.entries] == ['README.md', 'notes.unknownext', 'src']

    def test_directory(self, demo_repo, head):
        result = navigate(demo_repo.store, head, 'src/lib')
        assert isinstance(result, Directory)
        assert result.name == 'lib'
        assert result.parent_path == 'src'
        assert [e.name for e in result.entries] == ['util.py']

    def test_top_level_directory_has_empty_parent(self, demo_repo, head):
        result = navigate(demo_repo.store, head, 'src')
        assert isinstance(result, Directory)
        assert result.parent_path == ''
        assert {e.kind for e in result.entries} == {'file', 'tree'}

    def test_file(self, demo_repo, head):
        result = navigate(demo_repo.store, head, 'src/app.py')
        assert isinstance(result, File)
        assert result.content == b'def main():\n    return 2\n'
        assert result.parent_path == 'src'
        assert result.entry.name == 'app.py'
        assert 'highlight' in result.highlighted

    def test_unknown_extension_is_plain(self, demo_repo, head):
        result = navigate(demo_repo.store, head, 'notes.unknownext')
        assert isinstance(result, File)
        assert result.highlighted == '<pre>&lt;b&gt;plain&lt;/b&gt;\n</pre>'

    @pytest.mark.parametrize('path', [
        'missing',
        'src/missing.py',
        'README.md/inner',
        'src/app.py/x',
        'SRC',
        './src',
        'src/../README.md',
    ])
    def test_not_found(self, demo_repo, head, path):
        assert navigate(demo_repo.store, head, path) is NOT_FOUND

    @pytest.mark.parametrize('path', ['src/', '/src', 'src//app.py', 'src/lib/', '/'])
    def test_empty_segments_do_not_match(self, demo_repo, head, path):
        assert navigate(demo_repo.store, head, path) is NOT_FOUND

    def test_symlink_and_submodule(self, builder):
        commit = builder.commit({
            'link': (SYMLINK_MODE, b'target'),
            'vendor/dep': (SUBMODULE_MODE, b'1' * 40),
        })
        assert navigate(builder.store, commit, 'link') is NOT_FOUND
        assert navigate(builder.store, commit, 'vendor/dep') is NOT_FOUND
        assert navigate(builder.store, commit, 'vendor/dep/file') is NOT_FOUND
        kinds = {e.name: e.kind for e in navigate(builder.store, commit, 'vendor').entries}
        assert kinds == {'dep': 'submodule'}

    def test_missing_root_tree(self, builder):
        commit = builder.commit({}, tree=b'2' * 40)
        with pytest.raises(StoreError):
            navigate(builder.store, commit, '')

    def test_files_and_directories_are_exclusive(self, builder):
        commit = builder.commit({
            'a.txt': b'a\n',
            'd/b.txt': b'b\n',
            'd/e/c.txt': b'c\n',
            'link': (SYMLINK_MODE, b'a.txt'),
            'mod': (SUBMODULE_MODE, b'3' * 40),
            'run.sh': (0o100755, b'#!/bin/sh\n'),
        })
        store = builder.store
        for path in all_paths(store, store[commit.tree]):
            result = navigate(store, commit, path)
            entry_mode = store[commit.tree].lookup_path(store.__getitem__, path.encode())[0]
            if entry_mode in (0o100644, 0o100755):
                assert isinstance(result, File), path
            elif entry_mode == 0o040000:
                assert isinstance(result, Directory), path
            else:
                assert result is NOT_FOUND, path


class TestHelpers:

    def test_parent_path(self):
        assert parent_path('a/b/c') == 'a/b'
        assert parent_path('a') == ''

    def test_read_readme(self, demo_repo, head):
        assert read_readme(demo_repo.store, head).startswith('# Demo')

    def test_read_readme_missing(self, builder):
        commit = builder.commit({'main.c': b'int main;\n'})
        assert read_readme(builder.store, commit) is None

    def test_read_readme_fallback_name(self, builder):
        commit = builder.commit({'readme': b'hello\n'})
        assert read_readme(builder.store, commit) == 'hello\n'
