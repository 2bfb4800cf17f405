from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from escort_directory.users.models import User

from .serializers import UserPresenceSerializer


@extend_schema_view(
    presence=extend_schema(tags=["Users"]),
    online=extend_schema(tags=["Users"]),
)
class UserPresenceViewSet(GenericViewSet):
    """Durable presence flags as last written by the realtime server."""

    serializer_class = UserPresenceSerializer
    queryset = User.objects.filter(is_active=True)

    @action(detail=True)
    def presence(self, request, pk=None):
        serializer = self.get_serializer(self.get_object())
        return Response(status=status.HTTP_200_OK, data=serializer.data)

    @action(detail=False)
    def online(self, request):
        queryset = self.get_queryset().filter(is_online=True).order_by("username")
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)
