from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from escort_directory.messaging.api.views import MessageViewSet
from escort_directory.users.api.views import UserPresenceViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserPresenceViewSet, basename="users")
router.register("messages", MessageViewSet, basename="messages")


app_name = "api"
urlpatterns = router.urls
