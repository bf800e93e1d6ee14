from django.urls import include, path

urlpatterns = [
    path('', include('repos_app.urls', namespace='repos_app')),
]
