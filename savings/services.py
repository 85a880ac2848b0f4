import logging

from django.db import DatabaseError, transaction

from .categories import CategoryConfig
from .exceptions import PersistenceError
from .models import MemberSavingsTarget, Quarter
from .periods import period_bounds, quarter_number_for

logger = logging.getLogger(__name__)


class QuarterRegistry:
    """
    Lookups and state changes for SACCO quarters.
    Only one quarter may be active at a time.
    """

    def current_active_quarter(self):
        return Quarter.objects.filter(status="active").first()

    def activate(self, quarter):
        with transaction.atomic():
            Quarter.objects.exclude(pk=quarter.pk).update(status="inactive")
            quarter.status = "active"
            quarter.save(update_fields=["status", "updated_at"])

        logger.info(f"{quarter} is now the active quarter")
        return quarter

    def ensure_current_quarter(self, today):
        """
        Make sure some quarter is active.

        With no quarters at all, the quarter containing ``today`` is created
        as active. With quarters but none active, the most recent one is
        activated and every other quarter keeps its status. Returns
        ``(quarter, action)`` where action is one of "created", "activated"
        or "existing".
        """
        active = self.current_active_quarter()
        if active is not None:
            return active, "existing"

        latest = Quarter.objects.order_by("-year", "-quarter_number").first()
        if latest is not None:
            latest.status = "active"
            latest.save(update_fields=["status", "updated_at"])
            logger.info(f"{latest} is now the active quarter")
            return latest, "activated"

        number = quarter_number_for(today)
        start, end = period_bounds(today.year, number)
        quarter = Quarter.objects.create(
            year=today.year,
            quarter_number=number,
            start_date=start,
            end_date=end,
            status="active",
        )
        logger.info(f"Created {quarter} as the active quarter")
        return quarter, "created"


class SavingsTargetStore:
    def upsert(self, user_id, quarter_id, monthly_target):
        """Create or overwrite the target for (user, quarter)."""
        try:
            with transaction.atomic():
                target, created = MemberSavingsTarget.objects.update_or_create(
                    user_id=user_id,
                    quarter_id=quarter_id,
                    defaults={"monthly_target": monthly_target},
                )
        except DatabaseError as exc:
            logger.error(
                f"Could not save savings target for user {user_id} "
                f"in quarter {quarter_id}: {exc}"
            )
            raise PersistenceError(
                f"Savings target for user {user_id} in quarter {quarter_id} "
                "was not saved"
            ) from exc

        return target


class SavingsTargetRule:
    """
    Keeps a member's savings target in step with their savings category.

    Whenever a member moves to a category that has a monthly savings amount
    and a quarter is active, the member's target for that quarter is set to
    the category amount. Everything else is a no-op.
    """

    def __init__(self, categories, quarters, store):
        self.categories = categories
        self.quarters = quarters
        self.store = store

    def on_user_updated(self, user, category_changed, new_category):
        if not category_changed or not new_category:
            return

        amount = self.categories.monthly_savings_for(new_category)
        if not amount:
            logger.info(
                f"Category {new_category} has no monthly savings; "
                f"no target set for user {user.id}"
            )
            return

        quarter = self.quarters.current_active_quarter()
        if quarter is None:
            logger.warning(
                f"No active quarter; no target set for user {user.id}"
            )
            return

        self.store.upsert(user.id, quarter.id, amount)
        logger.info(
            f"Savings target for user {user.id} in quarter {quarter.id} "
            f"set to {amount}/month (category {new_category})"
        )


def build_savings_target_rule():
    return SavingsTargetRule(
        categories=CategoryConfig.from_settings(),
        quarters=QuarterRegistry(),
        store=SavingsTargetStore(),
    )
