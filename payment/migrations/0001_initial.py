import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("order", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("transaction_id", models.CharField(blank=True, db_default="", db_index=True, default="", max_length=64)),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("qris", "qris"),
                            ("gopay", "gopay"),
                            ("ovo", "ovo"),
                            ("dana", "dana"),
                            ("bank_transfer", "bank_transfer"),
                            ("cash", "cash"),
                        ],
                        max_length=20,
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("success", models.BooleanField()),
                ("note", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="order.order",
                    ),
                ),
            ],
            options={
                "db_table": "payment_transaction",
                "ordering": ["-created_at"],
            },
        ),
    ]
