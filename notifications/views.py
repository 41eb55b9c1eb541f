from rest_framework import generics, status
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse

from .models import Notification
from .serializers import NotificationSerializer


class NotificationListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user)


@extend_schema(request=None, responses={200: NotificationSerializer, 404: OpenApiResponse(description="Not yours or missing")})
class NotificationReadView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk: int):
        note = Notification.objects.filter(pk=pk, user=request.user).first()
        if not note:
            return Response({"detail": "Notification not found."}, status=status.HTTP_404_NOT_FOUND)
        if not note.is_read:
            note.is_read = True
            note.save(update_fields=["is_read"])
        return Response(NotificationSerializer(note).data)


@extend_schema(request=None, responses={200: OpenApiResponse(description="{updated}")})
class NotificationReadAllView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request):
        updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
        return Response({"updated": updated})
