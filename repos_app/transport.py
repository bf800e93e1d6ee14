"""Hands ``/git/<repo>/...`` requests to dulwich's smart/dumb HTTP server."""
import logging
from io import BytesIO

from django.http import HttpRequest, HttpResponse
from dulwich.server import DictBackend
from dulwich.web import HTTPGitApplication

from .repositories import Site

logger = logging.getLogger(__name__)

GIT_PREFIX = "/git"

# read-only: clients may clone and fetch, never push
READ_ONLY_HANDLERS = {b"git-receive-pack": None}


def make_git_application(site: Site) -> HTTPGitApplication:
    backend = DictBackend({"/" + name: named.repo for name, named in site.repositories.items()})
    return HTTPGitApplication(backend, handlers=READ_ONLY_HANDLERS)


def git_view(request: HttpRequest, site: Site, url_parts: list) -> HttpResponse:
    environ = dict(request.environ)
    environ["PATH_INFO"] = request.path_info[len(GIT_PREFIX):]
    environ["REQUEST_METHOD"] = request.method
    environ["QUERY_STRING"] = request.META.get("QUERY_STRING", "")
    environ["wsgi.input"] = BytesIO(request.body)
    environ.pop("HTTP_TRANSFER_ENCODING", None)

    started = {}
    body = []

    def start_response(status, headers, exc_info=None):
        started["status"] = status
        started["headers"] = headers
        return body.append

    for chunk in make_git_application(site)(environ, start_response):
        body.append(chunk)

    status = int(started.get("status", "500").split(" ", 1)[0])
    logger.debug("git %s %s -> %d", request.method, environ["PATH_INFO"], status)
    response = HttpResponse(b"".join(body), status=status)
    for name, value in started.get("headers", []):
        response[name] = value
    return response
