from django.conf import settings
from django.contrib import admin
from django.contrib.staticfiles.urls import staticfiles_urlpatterns
from django.urls import include
from django.urls import path
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from drf_spectacular.views import SpectacularAPIView
from drf_spectacular.views import SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView
from rest_framework_simplejwt.views import TokenRefreshView
from rest_framework_simplejwt.views import TokenVerifyView

from .health import health as health_view

JWT_TAG = "JWT Authentication"


@extend_schema_view(post=extend_schema(tags=[JWT_TAG]))
class AccessTokenView(TokenObtainPairView):
    """Issue the access/refresh pair; the access token is what the Socket.IO
    ``authenticate`` event carries."""


@extend_schema_view(post=extend_schema(tags=[JWT_TAG]))
class RefreshTokenView(TokenRefreshView):
    """Clients call this after receiving ``auth_error: jwt_expired``."""


@extend_schema_view(post=extend_schema(tags=[JWT_TAG]))
class VerifyTokenView(TokenVerifyView):
    pass


auth_patterns = [
    path("create/", AccessTokenView.as_view(), name="jwt-create"),
    path("refresh/", RefreshTokenView.as_view(), name="jwt-refresh"),
    path("verify/", VerifyTokenView.as_view(), name="jwt-verify"),
]

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),
    path("health/", health_view, name="health"),
    # REST API, namespace 'api_v1'
    path("api/v1/", include(("config.api_router", "api"), namespace="api_v1")),
    path("api/v1/auth/jwt/", include(auth_patterns)),
    path("api/v1/schema/", SpectacularAPIView.as_view(), name="api-schema-v1"),
    path(
        "api/v1/docs/",
        SpectacularSwaggerView.as_view(url_name="api-schema-v1"),
        name="api-docs-v1",
    ),
]
if settings.DEBUG:
    # Uvicorn does not serve static files on its own
    urlpatterns += staticfiles_urlpatterns()
