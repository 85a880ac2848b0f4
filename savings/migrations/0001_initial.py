import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Quarter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, max_length=50)),
                ("year", models.PositiveSmallIntegerField()),
                ("quarter_number", models.PositiveSmallIntegerField(help_text="1, 2 or 3; each quarter spans four months")),
                ("start_date", models.DateField(blank=True)),
                ("end_date", models.DateField(blank=True)),
                ("status", models.CharField(choices=[("upcoming", "Upcoming"), ("active", "Active"), ("completed", "Completed"), ("inactive", "Inactive"), ("shareout", "Share-out")], default="upcoming", max_length=20)),
                ("shareout_activated", models.BooleanField(default=False)),
                ("shareout_date", models.DateField(blank=True, help_text="Date when the shareout for this quarter is scheduled", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-year", "-quarter_number"],
            },
        ),
        migrations.CreateModel(
            name="MemberSavingsTarget",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("monthly_target", models.DecimalField(decimal_places=2, max_digits=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("quarter", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="savings_targets", to="savings.quarter")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="savings_targets", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-quarter__year", "-quarter__quarter_number"],
            },
        ),
        migrations.AddConstraint(
            model_name="quarter",
            constraint=models.UniqueConstraint(fields=("year", "quarter_number"), name="unique_quarter_per_year"),
        ),
        migrations.AddConstraint(
            model_name="quarter",
            constraint=models.UniqueConstraint(condition=models.Q(("status", "active")), fields=("status",), name="single_active_quarter"),
        ),
        migrations.AddConstraint(
            model_name="membersavingstarget",
            constraint=models.UniqueConstraint(fields=("user", "quarter"), name="unique_savings_target_per_user_quarter"),
        ),
    ]
