from datetime import date
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from savings.models import MemberSavingsTarget, Quarter
from savings.periods import period_bounds, quarter_number_for
from savings.services import QuarterRegistry

User = get_user_model()


# =========================
# Model Tests
# =========================
class QuarterModelTests(TestCase):
    def test_derives_name_and_dates(self):
        quarter = Quarter.objects.create(year=2026, quarter_number=2)

        self.assertEqual(quarter.name, "Q2 2026")
        self.assertEqual(quarter.start_date, date(2026, 5, 1))
        self.assertEqual(quarter.end_date, date(2026, 8, 31))
        self.assertEqual(quarter.status, "upcoming")

    def test_keeps_explicit_dates(self):
        quarter = Quarter.objects.create(
            year=2026,
            quarter_number=1,
            start_date=date(2026, 1, 15),
            end_date=date(2026, 4, 15),
        )
        self.assertEqual(quarter.start_date, date(2026, 1, 15))
        self.assertEqual(quarter.end_date, date(2026, 4, 15))

    def test_quarter_number_out_of_range_fails_validation(self):
        quarter = Quarter(year=2026, quarter_number=4)
        with self.assertRaises(ValidationError):
            quarter.clean()

    def test_only_one_quarter_can_be_active(self):
        Quarter.objects.create(year=2026, quarter_number=1, status="active")

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Quarter.objects.create(year=2026, quarter_number=2, status="active")

    def test_duplicate_quarter_rejected(self):
        Quarter.objects.create(year=2026, quarter_number=1)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Quarter.objects.create(year=2026, quarter_number=1)

    def test_quarterly_target(self):
        user = User.objects.create_user(email="q@test.com", password="testpass123")
        quarter = Quarter.objects.create(year=2026, quarter_number=1)
        target = MemberSavingsTarget.objects.create(
            user=user,
            quarter=quarter,
            monthly_target=Decimal("500.00"),
        )
        self.assertEqual(target.quarterly_target, Decimal("2000.00"))


class PeriodTests(SimpleTestCase):
    def test_quarter_number_for(self):
        self.assertEqual(quarter_number_for(date(2026, 1, 1)), 1)
        self.assertEqual(quarter_number_for(date(2026, 4, 30)), 1)
        self.assertEqual(quarter_number_for(date(2026, 5, 1)), 2)
        self.assertEqual(quarter_number_for(date(2026, 12, 31)), 3)

    def test_period_bounds(self):
        self.assertEqual(
            period_bounds(2024, 1),
            (date(2024, 1, 1), date(2024, 4, 30)),
        )
        self.assertEqual(
            period_bounds(2026, 3),
            (date(2026, 9, 1), date(2026, 12, 31)),
        )


# =========================
# Quarter Registry Tests
# =========================
class QuarterRegistryTests(TestCase):
    def setUp(self):
        self.registry = QuarterRegistry()

    def test_no_active_quarter(self):
        Quarter.objects.create(year=2026, quarter_number=1, status="completed")
        self.assertIsNone(self.registry.current_active_quarter())

    def test_activate_deactivates_others(self):
        first = Quarter.objects.create(year=2026, quarter_number=1, status="active")
        second = Quarter.objects.create(year=2026, quarter_number=2)

        self.registry.activate(second)

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual(first.status, "inactive")
        self.assertEqual(second.status, "active")
        self.assertEqual(self.registry.current_active_quarter(), second)

    def test_ensure_creates_quarter_when_none_exist(self):
        quarter, action = self.registry.ensure_current_quarter(date(2026, 10, 17))

        self.assertEqual(action, "created")
        self.assertEqual(quarter.year, 2026)
        self.assertEqual(quarter.quarter_number, 3)
        self.assertEqual(quarter.status, "active")
        self.assertEqual(quarter.end_date, date(2026, 12, 31))

    def test_ensure_activates_most_recent_quarter(self):
        Quarter.objects.create(year=2025, quarter_number=1, status="inactive")
        latest = Quarter.objects.create(year=2025, quarter_number=3, status="completed")

        quarter, action = self.registry.ensure_current_quarter(date(2026, 10, 17))

        self.assertEqual(action, "activated")
        self.assertEqual(quarter.pk, latest.pk)
        self.assertEqual(Quarter.objects.filter(status="active").count(), 1)

    def test_ensure_leaves_other_statuses_untouched(self):
        completed = Quarter.objects.create(year=2025, quarter_number=3, status="completed")
        shareout = Quarter.objects.create(year=2026, quarter_number=1, status="shareout")
        latest = Quarter.objects.create(year=2026, quarter_number=2, status="inactive")

        quarter, action = self.registry.ensure_current_quarter(date(2026, 10, 17))

        self.assertEqual(action, "activated")
        self.assertEqual(quarter.pk, latest.pk)
        completed.refresh_from_db()
        shareout.refresh_from_db()
        self.assertEqual(completed.status, "completed")
        self.assertEqual(shareout.status, "shareout")
        self.assertTrue(shareout.is_shareout_period)

    def test_ensure_keeps_existing_active_quarter(self):
        active = Quarter.objects.create(year=2026, quarter_number=2, status="active")

        quarter, action = self.registry.ensure_current_quarter(date(2026, 10, 17))

        self.assertEqual(action, "existing")
        self.assertEqual(quarter, active)
        self.assertEqual(Quarter.objects.count(), 1)


# =========================
# API Tests
# =========================
class QuarterAPITests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@test.com",
            password="testpass123",
            role="ADMIN",
            is_approved=True,
        )
        self.member = User.objects.create_user(
            email="member@test.com",
            password="testpass123",
            role="MEMBER",
            is_approved=True,
        )

    def test_list_quarters_newest_first(self):
        Quarter.objects.create(year=2025, quarter_number=3)
        Quarter.objects.create(year=2026, quarter_number=1)
        self.client.force_authenticate(user=self.member)

        response = self.client.get(reverse("quarter-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([q["name"] for q in response.data], ["Q1 2026", "Q3 2025"])

    def test_quarter_flags_follow_status(self):
        Quarter.objects.create(year=2026, quarter_number=1, status="shareout")
        Quarter.objects.create(year=2026, quarter_number=2, status="active")
        self.client.force_authenticate(user=self.member)

        response = self.client.get(reverse("quarter-list"))

        active, shareout = response.data
        self.assertTrue(active["is_active"])
        self.assertFalse(active["is_shareout_period"])
        self.assertFalse(shareout["is_active"])
        self.assertTrue(shareout["is_shareout_period"])

    def test_unapproved_member_cannot_list(self):
        pending = User.objects.create_user(email="pending@test.com", password="testpass123")
        self.client.force_authenticate(user=pending)

        response = self.client.get(reverse("quarter-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_inactive_quarter(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse("quarter-list"),
            {"year": 2026, "quarter_number": 2},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["name"], "Q2 2026")
        self.assertEqual(response.data["status"], "inactive")

    def test_duplicate_quarter_returns_error(self):
        Quarter.objects.create(year=2026, quarter_number=2)
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse("quarter-list"),
            {"year": 2026, "quarter_number": 2},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Q2 2026 already exists.", str(response.data))

    def test_invalid_quarter_number_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse("quarter-list"),
            {"year": 2026, "quarter_number": 4},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("quarter_number", response.data)

    def test_member_cannot_create_quarter(self):
        self.client.force_authenticate(user=self.member)

        response = self.client.post(
            reverse("quarter-list"),
            {"year": 2026, "quarter_number": 2},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_activates_quarter(self):
        old = Quarter.objects.create(year=2026, quarter_number=1, status="active")
        new = Quarter.objects.create(year=2026, quarter_number=2)
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(reverse("quarter-activate", args=[new.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data["message"],
            "Q2 2026 has been set as the active quarter.",
        )
        old.refresh_from_db()
        self.assertEqual(old.status, "inactive")

    def test_member_cannot_activate_quarter(self):
        quarter = Quarter.objects.create(year=2026, quarter_number=2)
        self.client.force_authenticate(user=self.member)

        response = self.client.post(reverse("quarter-activate", args=[quarter.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        quarter.refresh_from_db()
        self.assertEqual(quarter.status, "upcoming")


class SavingsTargetAPITests(APITestCase):
    def setUp(self):
        self.member = User.objects.create_user(
            email="saver@test.com",
            password="testpass123",
            is_approved=True,
        )
        self.quarter = Quarter.objects.create(year=2026, quarter_number=3, status="active")

    def test_member_sees_own_targets(self):
        self.member.savings_category = "A"
        self.member.save()
        other = User.objects.create_user(
            email="other@test.com",
            password="testpass123",
            is_approved=True,
        )
        other.savings_category = "C"
        other.save()
        self.client.force_authenticate(user=self.member)

        response = self.client.get(reverse("savings-target-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["monthly_target"], "500.00")
        self.assertEqual(response.data[0]["quarterly_target"], "2000.00")
        self.assertEqual(response.data[0]["quarter"]["name"], "Q3 2026")

    def test_member_without_category_is_blocked(self):
        self.client.force_authenticate(user=self.member)

        response = self.client.get(reverse("savings-target-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            response.data["detail"],
            "Please select a SACCO category to continue.",
        )

    def test_current_target(self):
        self.member.savings_category = "B"
        self.member.save()
        self.client.force_authenticate(user=self.member)

        response = self.client.get(reverse("savings-target-current"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["monthly_target"], "300.00")

    def test_current_target_without_active_quarter(self):
        self.member.savings_category = "B"
        self.member.save()
        self.quarter.status = "completed"
        self.quarter.save()
        self.client.force_authenticate(user=self.member)

        response = self.client.get(reverse("savings-target-current"))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requires_authentication(self):
        response = self.client.get(reverse("savings-target-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


# =========================
# Management Command Tests
# =========================
class CheckQuartersCommandTests(TestCase):
    def test_creates_active_quarter_when_none_exist(self):
        out = StringIO()
        call_command("check_quarters", date="2026-10-17", stdout=out)

        quarter = Quarter.objects.get()
        self.assertEqual(quarter.name, "Q3 2026")
        self.assertEqual(quarter.status, "active")
        self.assertIn("Created: Q3 2026 - active", out.getvalue())

    def test_activates_latest_quarter(self):
        Quarter.objects.create(year=2026, quarter_number=1, status="completed")
        Quarter.objects.create(year=2026, quarter_number=2, status="inactive")

        out = StringIO()
        call_command("check_quarters", date="2026-10-17", stdout=out)

        self.assertEqual(Quarter.objects.get(status="active").quarter_number, 2)
        self.assertIn("Set Q2 2026 to active status", out.getvalue())
        self.assertEqual(Quarter.objects.get(quarter_number=1).status, "completed")

    def test_leaves_active_quarter_alone(self):
        Quarter.objects.create(year=2026, quarter_number=2, status="active")

        out = StringIO()
        call_command("check_quarters", stdout=out)

        self.assertEqual(Quarter.objects.count(), 1)
        self.assertIn("- Q2 2026", out.getvalue())

    def test_invalid_date(self):
        err = StringIO()
        call_command("check_quarters", date="17/10/2026", stdout=StringIO(), stderr=err)

        self.assertIn("Invalid date format", err.getvalue())
        self.assertFalse(Quarter.objects.exists())
