from django.apps import AppConfig


class ReposAppConfig(AppConfig):
    name = 'repos_app'
    verbose_name = 'Repositories'
