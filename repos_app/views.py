import logging

from django.http import Http404, HttpRequest, HttpResponse, HttpResponseRedirect
from django.shortcuts import render
from django.utils.safestring import mark_safe
from django.views.defaults import server_error
from dulwich.walk import ORDER_DATE

from .diffs import format_changes, format_patch, get_changes
from .helpers import parse_commit
from .refs import list_branches, list_tags
from .render import highlight_css, render_markdown
from .repositories import NamedRepository, Site
from .results import NOT_FOUND, StoreError, Unprocessable
from .revisions import find_commit, find_default_branch, resolve_revision
from .trees import Directory, File, Root, navigate, read_readme

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def make_template_context(site: Site, extra: dict) -> dict:
    context = {"site": site.context()}
    context.update(extra)
    return context


def get_repo_or_404(site: Site, name: str) -> NamedRepository:
    repo = site.find_repo(name)
    if repo is None:
        raise Http404("unknown repository")
    return repo


def http500(request: HttpRequest, exc: Exception) -> HttpResponse:
    logger.error("%s %s failed: %s", request.method, request.path, exc, exc_info=exc)
    return server_error(request)


def index_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    return render(request, "smithy/index.html", make_template_context(site, {
        "repos": site.sorted_repositories(),
    }))


def repo_index_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    repo = get_repo_or_404(site, url_parts[0])
    try:
        branches = list_branches(repo.repo)
        tags = list_tags(repo.repo)
        main = find_default_branch(repo.repo)
        if main is NOT_FOUND:
            raise StoreError(f"{repo.name} has no 'main' or 'master' branch")
        readme = read_readme(repo.repo.object_store, repo.repo[main.sha.encode("ascii")])
    except StoreError as exc:
        return http500(request, exc)

    return render(request, "smithy/repo.html", make_template_context(site, {
        "repo_name": repo.name,
        "branches": branches,
        "tags": tags,
        "default_branch": main.name,
        "readme": mark_safe(render_markdown(readme)) if readme else "",
    }))


def refs_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    repo = get_repo_or_404(site, url_parts[0])
    try:
        branches = list_branches(repo.repo)
        tags = list_tags(repo.repo)
    except StoreError as exc:
        return http500(request, exc)

    return render(request, "smithy/refs.html", make_template_context(site, {
        "repo_name": repo.name,
        "branches": branches,
        "tags": tags,
    }))


def tree_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    repo = get_repo_or_404(site, url_parts[0])
    ref_name = url_parts[1] if len(url_parts) > 1 else ""
    tree_path = url_parts[2] if len(url_parts) > 2 else ""

    revision = resolve_revision(repo.repo, ref_name)
    if revision is NOT_FOUND:
        raise Http404("unknown revision")
    ref_name = ref_name or revision.name

    commit = repo.repo[revision.sha.encode("ascii")]
    try:
        result = navigate(repo.repo.object_store, commit, tree_path)
    except StoreError as exc:
        return http500(request, exc)

    context = {
        "repo_name": repo.name,
        "ref_name": ref_name,
        "path": tree_path,
    }
    if isinstance(result, Root):
        context["files"] = result.entries
    elif isinstance(result, Directory):
        context.update({
            "parent_path": result.parent_path,
            "sub_tree": result.name,
            "files": result.entries,
        })
    elif isinstance(result, File):
        context.update({
            "file": result.entry,
            "parent_path": result.parent_path,
            "contents": result.text,
            "contents_highlighted": mark_safe(result.highlighted),
            "highlight_css": mark_safe(highlight_css()),
        })
        return render(request, "smithy/blob.html", make_template_context(site, context))
    else:
        raise Http404("unknown path")
    return render(request, "smithy/tree.html", make_template_context(site, context))


def log_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    repo = get_repo_or_404(site, url_parts[0])
    ref_name = url_parts[1]
    revision = resolve_revision(repo.repo, ref_name)
    if revision is NOT_FOUND:
        raise Http404("unknown revision")

    walker = repo.repo.get_walker(
        include=[revision.sha.encode("ascii")], max_entries=PAGE_SIZE, order=ORDER_DATE
    )
    try:
        commits = [parse_commit(entry.commit) for entry in walker]
    except KeyError as exc:
        return http500(request, StoreError(f"broken history below {revision.sha}: {exc}"))

    return render(request, "smithy/log.html", make_template_context(site, {
        "repo_name": repo.name,
        "ref_name": ref_name,
        "commits": commits,
    }))


def log_default_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    repo = get_repo_or_404(site, url_parts[0])
    main = find_default_branch(repo.repo)
    if main is NOT_FOUND:
        raise Http404("no default branch")
    return HttpResponseRedirect(f"{request.path.rstrip('/')}/{main.name}", status=308)


def commit_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    repo = get_repo_or_404(site, url_parts[0])
    commit = find_commit(repo.repo, url_parts[1])
    if commit is NOT_FOUND:
        raise Http404("unknown commit")

    store = repo.repo.object_store
    try:
        changes = format_changes(store, get_changes(store, commit))
    except StoreError as exc:
        return http500(request, exc)

    return render(request, "smithy/commit.html", make_template_context(site, {
        "repo_name": repo.name,
        "commit": parse_commit(commit),
        "changes": mark_safe(changes),
    }))


def patch_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    repo = get_repo_or_404(site, url_parts[0])
    commit = find_commit(repo.repo, url_parts[1])
    if commit is NOT_FOUND:
        raise Http404("unknown commit")

    try:
        patch = format_patch(repo.repo.object_store, commit)
    except (StoreError, Unprocessable) as exc:
        return http500(request, exc)
    return HttpResponse(patch, content_type="text/plain; charset=utf-8")
