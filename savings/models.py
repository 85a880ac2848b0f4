from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .constants import (
    MONTHS_PER_QUARTER,
    QUARTER_STATUS_CHOICES,
    QUARTERS_PER_YEAR,
)
from .periods import period_bounds, quarter_name

User = settings.AUTH_USER_MODEL


# =========================
# Quarter Model
# =========================
class Quarter(models.Model):
    name = models.CharField(max_length=50, blank=True)
    year = models.PositiveSmallIntegerField()
    quarter_number = models.PositiveSmallIntegerField(
        help_text="1, 2 or 3; each quarter spans four months",
    )
    start_date = models.DateField(blank=True)
    end_date = models.DateField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=QUARTER_STATUS_CHOICES,
        default="upcoming",
    )
    shareout_activated = models.BooleanField(default=False)
    shareout_date = models.DateField(
        null=True,
        blank=True,
        help_text="Date when the shareout for this quarter is scheduled",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year", "-quarter_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["year", "quarter_number"],
                name="unique_quarter_per_year",
            ),
            models.UniqueConstraint(
                fields=["status"],
                condition=models.Q(status="active"),
                name="single_active_quarter",
            ),
        ]

    def __str__(self):
        return self.name or quarter_name(self.year, self.quarter_number)

    @property
    def is_active(self):
        return self.status == "active"

    @property
    def is_shareout_period(self):
        return self.status == "shareout"

    def clean(self):
        if not (1 <= self.quarter_number <= QUARTERS_PER_YEAR):
            raise ValidationError(
                f"Quarter number must be between 1 and {QUARTERS_PER_YEAR}"
            )

    # -------------------------
    # Fill derived fields on save
    # -------------------------
    def save(self, *args, **kwargs):
        if not self.name:
            self.name = quarter_name(self.year, self.quarter_number)

        if not self.start_date or not self.end_date:
            start, end = period_bounds(self.year, self.quarter_number)
            self.start_date = self.start_date or start
            self.end_date = self.end_date or end

        super().save(*args, **kwargs)


# =========================
# MemberSavingsTarget Model
# =========================
class MemberSavingsTarget(models.Model):
    """Monthly savings a member is expected to make during a quarter."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="savings_targets",
    )
    quarter = models.ForeignKey(
        Quarter,
        on_delete=models.CASCADE,
        related_name="savings_targets",
    )
    monthly_target = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-quarter__year", "-quarter__quarter_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "quarter"],
                name="unique_savings_target_per_user_quarter",
            )
        ]

    def __str__(self):
        return f"{self.user} - {self.quarter} ({self.monthly_target}/month)"

    @property
    def quarterly_target(self):
        return Decimal(self.monthly_target) * MONTHS_PER_QUARTER
