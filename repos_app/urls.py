from functools import partial

from django.conf import settings
from django.urls import re_path
from django.views.decorators.csrf import csrf_exempt
from django.views.static import serve

from . import transport, views
from .repositories import Site
from .routes import LABEL, Dispatcher, route

app_name = 'repos_app'


def compile_routes():
    # First match wins: keep specific patterns ahead of the ones they overlap.
    return (
        route(r'^/$', views.index_view),
        route(r'^/(' + LABEL + r')$', views.repo_index_view),
        route(r'^/git/(' + LABEL + r')', transport.git_view),
        route(r'^/(' + LABEL + r')/refs$', views.refs_view),
        route(r'^/(' + LABEL + r')/log$', views.log_default_view),
        route(r'^/(' + LABEL + r')/log/(' + LABEL + r')$', views.log_view),
        route(r'^/(' + LABEL + r')/commit/([a-z0-9]+)$', views.commit_view),
        route(r'^/(' + LABEL + r')/commit/([a-z0-9]+)\.patch$', views.patch_view),
        route(r'^/(' + LABEL + r')/tree$', views.tree_view),
        route(r'^/(' + LABEL + r')/tree/(' + LABEL + r')$', views.tree_view),
        route(r'^/(' + LABEL + r')/tree/(' + LABEL + r')/(.*)$', views.tree_view),
    )


dispatcher = Dispatcher(
    compile_routes(),
    Site.from_settings(),
    partial(serve, document_root=settings.SMITHY_STATIC_ROOT),
)

urlpatterns = [
    re_path(r'^.*$', csrf_exempt(dispatcher), name='dispatch'),
]
