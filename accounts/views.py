import logging

from django.contrib.auth import authenticate, get_user_model
from django.db import transaction
from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .permissions import IsAdminOnly
from .serializers import MemberCategorySerializer, UserProfileSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


# ====================================================
# LOGIN
# ====================================================
class LoginView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        email = request.data.get("email")
        password = request.data.get("password")

        if isinstance(email, str):
            email = email.strip().lower()

        if not email or not password:
            return Response(
                {"error": "Email and password are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        user = authenticate(request, email=email, password=password)

        if not user:
            return Response(
                {"error": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        if not user.is_active:
            return Response(
                {"error": "Account not activated"},
                status=status.HTTP_403_FORBIDDEN,
            )

        if not user.is_superuser and not user.is_approved:
            return Response(
                {"error": "Account is awaiting admin approval."},
                status=status.HTTP_403_FORBIDDEN,
            )

        refresh = RefreshToken.for_user(user)
        logger.info(f"Member {user.pk} logged in")

        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "role": user.role,
                "user_id": user.id,
                "full_name": f"{user.first_name} {user.last_name}",
                "savings_category": user.savings_category,
                "is_superuser": user.is_superuser,
            },
            status=status.HTTP_200_OK,
        )


# ====================================================
# MEMBER CATEGORY (ADMIN)
# ====================================================
class MemberCategoryUpdateView(APIView):
    """
    Change a member's savings category.

    Saving the member fires the savings target signal, so the member's
    target for the active quarter follows the new category.
    """
    permission_classes = [IsAuthenticated, IsAdminOnly]

    def patch(self, request, pk):
        member = get_object_or_404(User, pk=pk)

        serializer = MemberCategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        old_category = member.savings_category
        new_category = serializer.validated_data["savings_category"]

        # Category and target change together or not at all
        with transaction.atomic():
            member.savings_category = new_category
            member.save(update_fields=["savings_category"])

        logger.info(
            f"Admin {request.user.pk} changed member {member.pk} category "
            f"from {old_category or '-'} to {new_category}"
        )

        if old_category:
            message = (
                f"Member category updated from {old_category} to "
                f"{new_category} successfully."
            )
        else:
            message = f"Member category set to {new_category} successfully."

        return Response(
            {
                "message": message,
                "member": UserProfileSerializer(member).data,
            },
            status=status.HTTP_200_OK,
        )

    put = patch


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserProfileSerializer(request.user).data)
