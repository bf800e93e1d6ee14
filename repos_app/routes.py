import re
from typing import Callable, NamedTuple, Sequence

from django.http import Http404, HttpRequest, HttpResponse

from .repositories import Site

# Repository and ref names: no slashes, spaces or shell metacharacters.
LABEL = r"[a-zA-Z0-9\-~\.]+"
STATIC_PREFIX = "/static/"

Handler = Callable[[HttpRequest, Site, list], HttpResponse]


class Route(NamedTuple):
    pattern: re.Pattern
    handler: Handler


def route(regex: str, handler: Handler) -> Route:
    return Route(re.compile(regex), handler)


def match_route(routes: Sequence[Route], path: str):
    """Return ``(route, segments)`` for the first route matching ``path``."""
    for candidate in routes:
        match = candidate.pattern.match(path)
        if match is None:
            continue
        return candidate, [group or "" for group in match.groups()]
    return None, []


class Dispatcher:
    """Django view sending every request to the first matching route."""

    def __init__(self, routes: Sequence[Route], site: Site, static_handler):
        self.routes = tuple(routes)
        self.site = site
        self.static_handler = static_handler

    def __call__(self, request: HttpRequest) -> HttpResponse:
        path = request.path_info
        if path.startswith(STATIC_PREFIX):
            return self.static_handler(request, path[len(STATIC_PREFIX):])

        matched, segments = match_route(self.routes, path)
        if matched is None:
            raise Http404("no route")
        return matched.handler(request, self.site, segments)
