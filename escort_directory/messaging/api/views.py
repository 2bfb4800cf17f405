from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models import Case
from django.db.models import Count
from django.db.models import F
from django.db.models import OuterRef
from django.db.models import Q
from django.db.models import Subquery
from django.db.models import When
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from drf_spectacular.utils import inline_serializer
from rest_framework import mixins
from rest_framework import serializers
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from escort_directory.messaging.models import Message

from .serializers import ConversationSerializer
from .serializers import MessageSerializer


@extend_schema_view(
    list=extend_schema(tags=["Messages"]),
    retrieve=extend_schema(tags=["Messages"]),
)
class MessageViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    """Message history for the authenticated user.

    Messages are written by the realtime relay; this viewset only reads.

    - list: messages the user sent or received, newest first
    - conversation: history with one other user, oldest first
    - conversations: one entry per partner with the latest message
    - unread_count: number of unread messages addressed to the user
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer

    def get_queryset(self):
        user = self.request.user
        return Message.objects.filter(Q(sender=user) | Q(recipient=user))

    @extend_schema(tags=["Messages"])
    @action(
        detail=False,
        methods=["get"],
        url_path=r"conversation/(?P<user_id>\d+)",
    )
    def conversation(self, request, user_id=None):
        me = request.user.pk
        queryset = Message.objects.filter(
            Q(sender_id=me, recipient_id=user_id) | Q(sender_id=user_id, recipient_id=me),
        ).order_by("-created_at", "-pk")
        page = self.paginate_queryset(queryset)
        if page is not None:
            # Pages are cut newest-first, then shown oldest-first.
            data = MessageSerializer(list(reversed(page)), many=True).data
            return self.get_paginated_response(data)
        data = MessageSerializer(list(reversed(list(queryset))), many=True).data
        return Response(data)

    @extend_schema(tags=["Messages"], responses=ConversationSerializer(many=True))
    @action(detail=False, methods=["get"])
    def conversations(self, request):
        me = request.user.pk
        partners = (
            self.get_queryset()
            .annotate(
                partner=Case(
                    When(sender_id=me, then=F("recipient_id")),
                    default=F("sender_id"),
                ),
            )
            .order_by()
            .values_list("partner", flat=True)
            .distinct()
        )
        latest_with_partner = (
            Message.objects.filter(
                Q(sender_id=me, recipient_id=OuterRef("pk"))
                | Q(sender_id=OuterRef("pk"), recipient_id=me),
            )
            .order_by("-created_at", "-pk")
            .values("pk")[:1]
        )
        latest_ids = dict(
            get_user_model()
            .objects.filter(pk__in=partners)
            .annotate(latest_id=Subquery(latest_with_partner))
            .values_list("pk", "latest_id"),
        )
        latest = Message.objects.in_bulk(list(latest_ids.values()))
        unread = dict(
            Message.objects.filter(recipient_id=me, is_read=False)
            .order_by()
            .values("sender_id")
            .annotate(unread=Count("pk"))
            .values_list("sender_id", "unread"),
        )

        rows = [
            {
                "userId": str(partner),
                "lastMessage": latest[message_id],
                "unreadCount": unread.get(partner, 0),
            }
            for partner, message_id in latest_ids.items()
        ]
        rows.sort(
            key=lambda row: (row["lastMessage"].created_at, row["lastMessage"].pk),
            reverse=True,
        )
        return Response(ConversationSerializer(rows, many=True).data)

    @extend_schema(
        tags=["Messages"],
        responses=inline_serializer(
            name="UnreadCount",
            fields={"count": serializers.IntegerField()},
        ),
    )
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        count = Message.objects.filter(recipient=request.user, is_read=False).count()
        return Response({"count": count}, status=status.HTTP_200_OK)
