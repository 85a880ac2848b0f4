"""
Tests for the savings target rule.
Covers the rule against stub collaborators, the database-backed store
and the User save signals that trigger it.
"""
import json
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import Mock, patch

from django.contrib.auth import get_user_model
from django.core import serializers
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, override_settings

from savings.categories import CategoryConfig
from savings.exceptions import PersistenceError
from savings.models import MemberSavingsTarget, Quarter
from savings.services import (
    QuarterRegistry,
    SavingsTargetRule,
    SavingsTargetStore,
)

User = get_user_model()


# =========================
# Rule with stub collaborators
# =========================
class SavingsTargetRuleTests(SimpleTestCase):
    def setUp(self):
        self.categories = CategoryConfig({
            "A": {"monthly_savings": 500},
            "B": {},
            "Z": {"monthly_savings": 0},
        })
        self.quarters = Mock()
        self.quarters.current_active_quarter.return_value = SimpleNamespace(id=7)
        self.store = Mock()
        self.user = SimpleNamespace(id=3)

    def build_rule(self, categories=None):
        return SavingsTargetRule(
            categories=categories or self.categories,
            quarters=self.quarters,
            store=self.store,
        )

    def test_unchanged_category_touches_nothing(self):
        categories = Mock()
        self.build_rule(categories).on_user_updated(self.user, False, "A")

        categories.monthly_savings_for.assert_not_called()
        self.quarters.current_active_quarter.assert_not_called()
        self.store.upsert.assert_not_called()

    def test_empty_category_touches_nothing(self):
        categories = Mock()
        rule = self.build_rule(categories)

        rule.on_user_updated(self.user, True, None)
        rule.on_user_updated(self.user, True, "")

        categories.monthly_savings_for.assert_not_called()
        self.quarters.current_active_quarter.assert_not_called()
        self.store.upsert.assert_not_called()

    def test_category_without_amount_sets_no_target(self):
        rule = self.build_rule()

        rule.on_user_updated(self.user, True, "B")
        rule.on_user_updated(self.user, True, "Z")
        rule.on_user_updated(self.user, True, "unknown")

        self.store.upsert.assert_not_called()

    def test_no_active_quarter_sets_no_target(self):
        self.quarters.current_active_quarter.return_value = None

        self.build_rule().on_user_updated(self.user, True, "A")

        self.store.upsert.assert_not_called()

    def test_configured_category_upserts_once(self):
        self.build_rule().on_user_updated(self.user, True, "A")

        self.store.upsert.assert_called_once_with(3, 7, Decimal("500.00"))

    def test_persistence_error_propagates(self):
        self.store.upsert.side_effect = PersistenceError("storage unavailable")

        with self.assertRaises(PersistenceError):
            self.build_rule().on_user_updated(self.user, True, "A")

    def test_rule_returns_nothing(self):
        self.assertIsNone(self.build_rule().on_user_updated(self.user, True, "A"))


class CategoryConfigTests(SimpleTestCase):
    def test_amount_is_decimal(self):
        config = CategoryConfig({"A": {"monthly_savings": 500}})
        self.assertEqual(config.monthly_savings_for("A"), Decimal("500.00"))

    def test_missing_entries_have_no_amount(self):
        config = CategoryConfig({"B": {"monthly_savings": None}})
        self.assertIsNone(config.monthly_savings_for("B"))
        self.assertIsNone(config.monthly_savings_for("C"))
        self.assertIsNone(config.monthly_savings_for(None))

    @override_settings(SACCO_CATEGORIES={"C": {"monthly_savings": "100.5"}})
    def test_from_settings(self):
        config = CategoryConfig.from_settings()
        self.assertEqual(config.monthly_savings_for("C"), Decimal("100.50"))
        self.assertIsNone(config.monthly_savings_for("A"))


# =========================
# Database-backed store
# =========================
class SavingsTargetStoreTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="store@test.com",
            password="testpass123",
        )
        self.quarter = Quarter.objects.create(
            year=2026,
            quarter_number=1,
            status="active",
        )
        self.store = SavingsTargetStore()

    def test_upsert_creates_then_overwrites(self):
        self.store.upsert(self.user.id, self.quarter.id, Decimal("500.00"))
        self.store.upsert(self.user.id, self.quarter.id, Decimal("300.00"))

        targets = MemberSavingsTarget.objects.filter(user=self.user)
        self.assertEqual(targets.count(), 1)
        self.assertEqual(targets.first().monthly_target, Decimal("300.00"))

    def test_database_failure_raises_persistence_error(self):
        with patch.object(
            MemberSavingsTarget.objects,
            "update_or_create",
            side_effect=DatabaseError("database is locked"),
        ):
            with self.assertRaises(PersistenceError) as ctx:
                self.store.upsert(self.user.id, self.quarter.id, Decimal("500.00"))

        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)
        self.assertFalse(MemberSavingsTarget.objects.exists())

    def test_rule_is_idempotent(self):
        rule = SavingsTargetRule(
            categories=CategoryConfig({"A": {"monthly_savings": 500}}),
            quarters=QuarterRegistry(),
            store=self.store,
        )

        rule.on_user_updated(self.user, True, "A")
        rule.on_user_updated(self.user, True, "A")

        targets = MemberSavingsTarget.objects.filter(
            user=self.user,
            quarter=self.quarter,
        )
        self.assertEqual(targets.count(), 1)
        self.assertEqual(targets.first().monthly_target, Decimal("500.00"))


# =========================
# User save signals
# =========================
class UserCategorySignalTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="member@test.com",
            password="testpass123",
            first_name="Test",
            last_name="Member",
            is_approved=True,
        )

    def activate_quarter(self):
        return Quarter.objects.create(year=2026, quarter_number=3, status="active")

    def test_category_change_sets_target_for_active_quarter(self):
        quarter = self.activate_quarter()

        self.user.savings_category = "A"
        self.user.save()

        target = MemberSavingsTarget.objects.get(user=self.user, quarter=quarter)
        self.assertEqual(target.monthly_target, Decimal("500.00"))

    def test_switching_category_overwrites_target(self):
        quarter = self.activate_quarter()

        self.user.savings_category = "A"
        self.user.save()
        self.user.savings_category = "C"
        self.user.save()

        targets = MemberSavingsTarget.objects.filter(user=self.user, quarter=quarter)
        self.assertEqual(targets.count(), 1)
        self.assertEqual(targets.first().monthly_target, Decimal("100.00"))

    def test_no_active_quarter_sets_no_target(self):
        Quarter.objects.create(year=2026, quarter_number=2, status="inactive")

        self.user.savings_category = "A"
        self.user.save()

        self.assertFalse(MemberSavingsTarget.objects.exists())

    @override_settings(SACCO_CATEGORIES={"A": {"monthly_savings": 500}})
    def test_unconfigured_category_sets_no_target(self):
        self.activate_quarter()

        self.user.savings_category = "B"
        self.user.save()

        self.assertFalse(MemberSavingsTarget.objects.exists())

    def test_unrelated_save_does_not_call_rule(self):
        self.user.savings_category = "A"
        self.user.save()
        self.activate_quarter()

        with patch("savings.signals.build_savings_target_rule") as build:
            self.user.first_name = "Renamed"
            self.user.save()
            self.user.save(update_fields=["first_name"])

        rule = build.return_value
        for call in rule.on_user_updated.call_args_list:
            self.assertFalse(call.args[1])
        self.assertFalse(MemberSavingsTarget.objects.exists())

    def test_update_fields_without_category_skips_rule(self):
        self.activate_quarter()
        self.user.savings_category = "A"

        with patch("savings.signals.build_savings_target_rule") as build:
            self.user.save(update_fields=["first_name"])

        build.assert_not_called()

    def test_new_user_with_category_gets_no_target(self):
        self.activate_quarter()

        User.objects.create_user(
            email="newcomer@test.com",
            password="testpass123",
            savings_category="A",
        )

        self.assertFalse(MemberSavingsTarget.objects.exists())

    def test_clearing_category_keeps_existing_target(self):
        self.activate_quarter()
        self.user.savings_category = "B"
        self.user.save()

        self.user.savings_category = None
        self.user.save()

        target = MemberSavingsTarget.objects.get(user=self.user)
        self.assertEqual(target.monthly_target, Decimal("300.00"))

    def test_persistence_error_reaches_caller(self):
        self.activate_quarter()
        self.user.savings_category = "A"

        with patch.object(
            MemberSavingsTarget.objects,
            "update_or_create",
            side_effect=DatabaseError("disk full"),
        ):
            with self.assertRaises(PersistenceError):
                self.user.save()

    def test_fixture_load_sets_no_target(self):
        self.activate_quarter()
        fixture = json.dumps([{
            "model": "accounts.user",
            "pk": self.user.pk,
            "fields": {
                "email": self.user.email,
                "password": self.user.password,
                "is_approved": True,
                "savings_category": "A",
            },
        }])

        with patch("savings.signals.build_savings_target_rule") as build:
            for obj in serializers.deserialize("json", fixture):
                obj.save()

        build.assert_not_called()
        self.user.refresh_from_db()
        self.assertEqual(self.user.savings_category, "A")
        self.assertFalse(MemberSavingsTarget.objects.exists())
