from decimal import Decimal

from django.conf import settings


class CategoryConfig:
    """
    Maps a member savings category to its configured monthly amount.

    Takes a plain mapping such as ``{"A": {"monthly_savings": 500}}`` so
    callers and tests can pass their own table; ``from_settings`` reads
    ``SACCO_CATEGORIES``.
    """

    def __init__(self, categories):
        self.categories = categories or {}

    @classmethod
    def from_settings(cls):
        return cls(getattr(settings, "SACCO_CATEGORIES", {}))

    def monthly_savings_for(self, category):
        """Return the monthly amount for ``category``, or None if it has none."""
        if not category:
            return None

        amount = (self.categories.get(category) or {}).get("monthly_savings")
        if not amount:
            return None

        return Decimal(str(amount)).quantize(Decimal("0.01"))
