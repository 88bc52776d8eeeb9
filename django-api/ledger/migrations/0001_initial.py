import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Aggregate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("human_id", models.CharField(editable=False, max_length=64, unique=True)),
                ("kind", models.CharField(choices=[("ORDER", "Order"), ("BOOKING", "Booking")], max_length=20)),
                ("owner_id", models.CharField(max_length=64)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("CREATED", "Created"),
                            ("CONFIRMED", "Confirmed"),
                            ("PREPARING", "Preparing"),
                            ("READY", "Ready"),
                            ("DELIVERED", "Delivered"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        max_length=20,
                    ),
                ),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["owner_id", "kind", "-created_at"], name="aggregate_owner_kind_idx")],
            },
        ),
        migrations.CreateModel(
            name="CapacityHolder",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "kind",
                    models.CharField(
                        choices=[("PRODUCT", "Product"), ("EVENT", "Event"), ("MENU_ITEM", "Menu item")],
                        max_length=20,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("total_capacity", models.PositiveIntegerField()),
                ("available_capacity", models.PositiveIntegerField()),
                ("price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["kind", "-created_at"], name="holder_kind_created_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("available_capacity__gte", 0),
                            ("available_capacity__lte", models.F("total_capacity")),
                        ),
                        name="holder_available_within_total",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PendingItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("owner_id", models.CharField(max_length=64)),
                ("quantity", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "holder",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pending_items",
                        to="ledger.capacityholder",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("owner_id", "holder"), name="pending_item_unique_per_owner")
                ],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("position", models.PositiveIntegerField()),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price_snapshot", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "aggregate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to="ledger.aggregate",
                    ),
                ),
                (
                    "holder",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="ledger.capacityholder",
                    ),
                ),
            ],
            options={
                "ordering": ["aggregate", "position"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="reservation_quantity_positive")
                ],
            },
        ),
    ]
