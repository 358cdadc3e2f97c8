# Initial migration for Client, PointsTransaction and RewardIssuance

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        help_text="Client identifier shared with the client-management app (e.g. CLI-001)",
                        max_length=50,
                        unique=True,
                        verbose_name="code",
                    ),
                ),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("display_name", models.CharField(blank=True, max_length=200, verbose_name="display name")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                (
                    "enrolled_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name="enrolled at"),
                ),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "client",
                "verbose_name_plural": "clients",
                "ordering": ["enrolled_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="PointsTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                (
                    "delta",
                    models.BigIntegerField(
                        help_text="Positive for credits, negative for debits/expirations",
                        verbose_name="points",
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("earn_from_booking", "Earned from booking"),
                            ("manual_credit", "Manual credit"),
                            ("manual_debit", "Manual debit"),
                            ("expiration", "Expiration"),
                        ],
                        db_index=True,
                        max_length=20,
                        verbose_name="kind",
                    ),
                ),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "source_booking_ref",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Booking that produced this earn transaction",
                        max_length=100,
                        verbose_name="source booking",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        editable=False,
                        verbose_name="created at",
                    ),
                ),
                ("created_by", models.CharField(blank=True, max_length=100, verbose_name="created by")),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="points_transactions",
                        to="pointsman.client",
                        verbose_name="client",
                    ),
                ),
            ],
            options={
                "verbose_name": "points transaction",
                "verbose_name_plural": "points transactions",
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["client", "created_at"], name="pointsman_tx_client_created")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("delta", 0), _negated=True),
                        name="pointsman_tx_delta_nonzero",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("kind", "earn_from_booking"),
                            models.Q(("source_booking_ref", ""), _negated=True),
                        ),
                        fields=("source_booking_ref",),
                        name="pointsman_tx_one_earn_per_booking",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RewardIssuance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                (
                    "reward_kind",
                    models.CharField(
                        choices=[
                            ("points", "Bonus points"),
                            ("discount", "Discount"),
                            ("addon", "Free add-on"),
                            ("service", "Free service"),
                        ],
                        max_length=20,
                        verbose_name="reward",
                    ),
                ),
                (
                    "detail",
                    models.TextField(
                        blank=True,
                        help_text="What was given (e.g. '$10 off next visit')",
                        verbose_name="detail",
                    ),
                ),
                ("note", models.TextField(blank=True, verbose_name="note")),
                ("points", models.BigIntegerField(default=0, verbose_name="points")),
                ("tier_before", models.CharField(max_length=50, verbose_name="tier before")),
                ("tier_after", models.CharField(max_length=50, verbose_name="tier after")),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        editable=False,
                        verbose_name="created at",
                    ),
                ),
                ("created_by", models.CharField(blank=True, max_length=100, verbose_name="issued by")),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reward_issuances",
                        to="pointsman.client",
                        verbose_name="client",
                    ),
                ),
                (
                    "transaction",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reward_issuance",
                        to="pointsman.pointstransaction",
                        verbose_name="ledger transaction",
                    ),
                ),
            ],
            options={
                "verbose_name": "reward issuance",
                "verbose_name_plural": "reward issuances",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
