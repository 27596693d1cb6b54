from django.urls import re_path
from .views import graphql_view

urlpatterns = [
    # Accept the endpoint with and without the trailing slash; POSTs cannot follow APPEND_SLASH redirects
    re_path(r'^graphql/?$', graphql_view, name='graphql'),
]
