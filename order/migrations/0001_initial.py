import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("pending", "Pending"),
    ("confirmed", "Confirmed"),
    ("preparing", "Preparing"),
    ("ready_for_pickup", "Ready For Pickup"),
    ("picked_up", "Picked Up"),
    ("on_the_way", "On The Way"),
    ("delivered", "Delivered"),
    ("cancelled", "Cancelled"),
    ("refunded", "Refunded"),
    ("assigned", "Assigned"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("merchant", "0001_initial"),
        ("meal", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_number", models.CharField(max_length=20, unique=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, db_default="pending", default="pending", max_length=20)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=12)),
                ("delivery_fee", models.DecimalField(decimal_places=2, max_digits=12)),
                ("tax", models.DecimalField(db_default=0, decimal_places=2, default=0, max_digits=12)),
                ("discount", models.DecimalField(db_default=0, decimal_places=2, default=0, max_digits=12)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("delivery_street", models.CharField(max_length=255)),
                ("delivery_city", models.CharField(max_length=100)),
                ("delivery_province", models.CharField(max_length=100)),
                ("delivery_postal_code", models.CharField(max_length=20)),
                ("delivery_latitude", models.FloatField()),
                ("delivery_longitude", models.FloatField()),
                ("delivery_notes", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("customer_name", models.CharField(max_length=120)),
                ("customer_phone", models.CharField(max_length=20)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("qris", "Qris"),
                            ("gopay", "Gopay"),
                            ("ovo", "Ovo"),
                            ("dana", "Dana"),
                            ("bank_transfer", "Bank Transfer"),
                            ("cash", "Cash"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        db_default="pending",
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("estimated_delivery_time", models.DateTimeField(blank=True, null=True)),
                ("actual_delivery_time", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("special_instructions", models.TextField(blank=True, db_default="", default="")),
                ("promo_code", models.CharField(blank=True, db_default="", default="", max_length=30)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "delivery_partner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="deliveries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="merchant.restaurant",
                    ),
                ),
            ],
            options={
                "db_table": "order",
                "indexes": [models.Index(fields=["status", "created_at"], name="order_status_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("quantity", models.PositiveIntegerField(db_default=1, default=1)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "spice_level",
                    models.CharField(
                        choices=[
                            ("mild", "Mild"),
                            ("medium", "Medium"),
                            ("spicy", "Spicy"),
                            ("extra_spicy", "Extra Spicy"),
                        ],
                        max_length=20,
                    ),
                ),
                ("special_instructions", models.CharField(blank=True, db_default="", default="", max_length=255)),
                (
                    "menu_item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to="meal.menuitem",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="order.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_item",
            },
        ),
        migrations.CreateModel(
            name="OrderItemTopping",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("quantity", models.PositiveIntegerField(db_default=1, default=1)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "order_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="toppings",
                        to="order.orderitem",
                    ),
                ),
                (
                    "topping",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to="meal.topping",
                    ),
                ),
            ],
            options={
                "db_table": "order_item_topping",
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("timestamp", models.DateTimeField()),
                ("notes", models.CharField(blank=True, db_default="", default="", max_length=255)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="order.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_status_history",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="OrderRating",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("food", models.PositiveSmallIntegerField()),
                ("delivery", models.PositiveSmallIntegerField()),
                ("overall", models.PositiveSmallIntegerField()),
                ("comment", models.TextField(blank=True, db_default="", default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rating",
                        to="order.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_rating",
            },
        ),
    ]
