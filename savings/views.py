from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import HasSavingsCategory, IsAdminOnly, IsApprovedUser
from .models import MemberSavingsTarget, Quarter
from .serializers import MemberSavingsTargetSerializer, QuarterSerializer
from .services import QuarterRegistry


class QuarterViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Quarter.objects.all()
    serializer_class = QuarterSerializer

    def get_permissions(self):
        permissions = [IsAuthenticated(), IsApprovedUser()]
        if self.action in ("create", "activate"):
            permissions.append(IsAdminOnly())
        return permissions

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        quarter = QuarterRegistry().activate(self.get_object())
        return Response(
            {
                "message": (
                    f"Q{quarter.quarter_number} {quarter.year} has been set "
                    "as the active quarter."
                ),
                "quarter": QuarterSerializer(quarter).data,
            },
            status=status.HTTP_200_OK,
        )


class MemberSavingsTargetListView(ListAPIView):
    serializer_class = MemberSavingsTargetSerializer
    permission_classes = [IsAuthenticated, IsApprovedUser, HasSavingsCategory]

    def get_queryset(self):
        return MemberSavingsTarget.objects.filter(
            user=self.request.user
        ).select_related("quarter")


class CurrentSavingsTargetView(APIView):
    permission_classes = [IsAuthenticated, IsApprovedUser, HasSavingsCategory]

    def get(self, request):
        quarter = QuarterRegistry().current_active_quarter()
        if quarter is None:
            raise NotFound("No active quarter found.")

        target = MemberSavingsTarget.objects.filter(
            user=request.user,
            quarter=quarter,
        ).first()
        if target is None:
            raise NotFound("No savings target set for the active quarter.")

        return Response(MemberSavingsTargetSerializer(target).data)
