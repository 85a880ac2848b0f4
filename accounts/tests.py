from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.tokens import RefreshToken

from savings.exceptions import PersistenceError
from savings.models import MemberSavingsTarget, Quarter

User = get_user_model()


# -------------------------
# Login Tests
# -------------------------
class LoginTests(APITestCase):

    def setUp(self):
        self.url = reverse("login")

    def test_approved_member_logs_in(self):
        User.objects.create_user(
            email="member@test.com",
            password="pass12345",
            is_approved=True,
            savings_category="B",
        )
        response = self.client.post(
            self.url, {"email": " Member@Test.com ", "password": "pass12345"}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)
        self.assertEqual(response.data["role"], "MEMBER")
        self.assertEqual(response.data["savings_category"], "B")

    def test_login_requires_email_and_password(self):
        response = self.client.post(self.url, {"email": "member@test.com"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_wrong_password(self):
        User.objects.create_user(
            email="member@test.com",
            password="pass12345",
            is_approved=True,
        )
        response = self.client.post(
            self.url, {"email": "member@test.com", "password": "nope"}
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_fails_if_not_approved(self):
        User.objects.create_user(
            email="pending@test.com",
            password="pass12345",
            is_approved=False,
        )
        response = self.client.post(
            self.url, {"email": "pending@test.com", "password": "pass12345"}
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_login_fails_if_inactive(self):
        User.objects.create_user(
            email="inactive@test.com",
            password="pass12345",
            is_approved=True,
            is_active=False,
        )
        response = self.client.post(
            self.url, {"email": "inactive@test.com", "password": "pass12345"}
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"], "Account not activated")

    def test_me_returns_profile(self):
        user = User.objects.create_user(
            email="me@test.com",
            password="pass12345",
            first_name="Me",
            last_name="Member",
            is_approved=True,
        )
        refresh = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

        response = self.client.get(reverse("me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["full_name"], "Me Member")
        self.assertIsNone(response.data["savings_category"])


# -------------------------
# Member Category Tests
# -------------------------
class MemberCategoryTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@test.com",
            password="adminpass",
            role="ADMIN",
            is_approved=True,
        )
        self.member = User.objects.create_user(
            email="member@test.com",
            password="pass12345",
            is_approved=True,
        )
        self.url = reverse("member-category", args=[self.member.id])

        refresh = RefreshToken.for_user(self.admin)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    def test_admin_sets_category_and_target(self):
        quarter = Quarter.objects.create(year=2026, quarter_number=3, status="active")

        response = self.client.patch(self.url, {"savings_category": "A"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Member category set to A successfully.")
        self.assertEqual(response.data["member"]["savings_category"], "A")

        target = MemberSavingsTarget.objects.get(user=self.member, quarter=quarter)
        self.assertEqual(target.monthly_target, Decimal("500.00"))

    def test_admin_changes_category(self):
        quarter = Quarter.objects.create(year=2026, quarter_number=3, status="active")
        self.client.patch(self.url, {"savings_category": "A"}, format="json")

        response = self.client.patch(self.url, {"savings_category": "B"}, format="json")

        self.assertEqual(
            response.data["message"],
            "Member category updated from A to B successfully.",
        )
        target = MemberSavingsTarget.objects.get(user=self.member, quarter=quarter)
        self.assertEqual(target.monthly_target, Decimal("300.00"))

    def test_category_change_without_active_quarter(self):
        response = self.client.patch(self.url, {"savings_category": "C"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.member.refresh_from_db()
        self.assertEqual(self.member.savings_category, "C")
        self.assertFalse(MemberSavingsTarget.objects.exists())

    def test_invalid_category(self):
        response = self.client.patch(self.url, {"savings_category": "Z"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("savings_category", response.data)

    def test_unknown_member(self):
        url = reverse("member-category", args=[999999])
        response = self.client.patch(url, {"savings_category": "A"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_member_cannot_change_category(self):
        refresh = RefreshToken.for_user(self.member)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

        response = self.client.patch(self.url, {"savings_category": "A"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.member.refresh_from_db()
        self.assertIsNone(self.member.savings_category)

    def test_failed_target_save_rolls_back_category(self):
        Quarter.objects.create(year=2026, quarter_number=3, status="active")

        with patch.object(
            MemberSavingsTarget.objects,
            "update_or_create",
            side_effect=DatabaseError("database is locked"),
        ):
            with self.assertRaises(PersistenceError):
                self.client.patch(self.url, {"savings_category": "A"}, format="json")

        self.member.refresh_from_db()
        self.assertIsNone(self.member.savings_category)
        self.assertFalse(MemberSavingsTarget.objects.exists())
