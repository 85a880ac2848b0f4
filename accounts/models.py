from django.contrib.auth.models import AbstractUser
from django.db import models
from .managers import UserManager


class User(AbstractUser):
    username = None

    email = models.EmailField(unique=True)
    phone_number = models.CharField(max_length=20, blank=True, null=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    ROLE_CHOICES = (
        ("ADMIN", "Admin"),
        ("TREASURER", "Treasurer"),
        ("MEMBER", "Member"),
    )

    SAVINGS_CATEGORY_CHOICES = (
        ("A", "Category A"),
        ("B", "Category B"),
        ("C", "Category C"),
    )

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="MEMBER")
    is_approved = models.BooleanField(default=False)
    savings_category = models.CharField(
        max_length=1,
        choices=SAVINGS_CATEGORY_CHOICES,
        blank=True,
        null=True,
        help_text="Member savings category, drives the monthly savings target",
    )

    objects = UserManager()

    def __str__(self):
        return self.email
