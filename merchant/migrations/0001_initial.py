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
            name="Restaurant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True, db_default="", default="")),
                ("street", models.CharField(max_length=255)),
                ("city", models.CharField(max_length=100)),
                ("province", models.CharField(max_length=100)),
                ("postal_code", models.CharField(blank=True, db_default="", default="", max_length=20)),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                ("phone", models.CharField(max_length=20)),
                ("email", models.CharField(blank=True, db_default="", default="", max_length=254)),
                ("is_active", models.BooleanField(db_default=True, default=True)),
                ("is_verified", models.BooleanField(db_default=False, default=False)),
                ("business_license", models.CharField(blank=True, db_default="", default="", max_length=100)),
                ("rating", models.DecimalField(db_default=0, decimal_places=2, default=0, max_digits=3)),
                ("total_reviews", models.PositiveIntegerField(db_default=0, default=0)),
                ("delivery_radius_km", models.FloatField(db_default=5, default=5)),
                ("minimum_order", models.DecimalField(db_default=15000, decimal_places=2, default=15000, max_digits=12)),
                ("delivery_fee", models.DecimalField(db_default=5000, decimal_places=2, default=5000, max_digits=12)),
                ("average_preparation_time", models.PositiveIntegerField(db_default=20, default=20)),
                ("image_url", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("banner_url", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="restaurants",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "restaurant",
                "indexes": [models.Index(fields=["latitude", "longitude"], name="restaurant_coordinates_idx")],
            },
        ),
    ]
