import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

ROLE_CHOICES = [
    ("customer", "Customer"),
    ("restaurant_owner", "Restaurant owner"),
    ("delivery_partner", "Delivery partner"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="OtpCode",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("phone", models.CharField(db_index=True, max_length=20)),
                ("code_hash", models.CharField(max_length=128)),
                ("is_used", models.BooleanField(db_default=False, default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("expires_at", models.DateTimeField()),
            ],
            options={
                "db_table": "otp_code",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=ROLE_CHOICES, db_default="customer", default="customer", max_length=20)),
                ("full_name", models.CharField(max_length=120)),
                ("phone", models.CharField(max_length=20, unique=True)),
                ("is_verified", models.BooleanField(db_default=False, default=False)),
                ("profile_image", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("street", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("city", models.CharField(blank=True, db_default="", default="", max_length=100)),
                ("province", models.CharField(blank=True, db_default="", default="", max_length=100)),
                ("postal_code", models.CharField(blank=True, db_default="", default="", max_length=20)),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                (
                    "vehicle_type",
                    models.CharField(
                        blank=True,
                        choices=[("motorcycle", "Motorcycle"), ("bicycle", "Bicycle"), ("car", "Car")],
                        db_default="",
                        default="",
                        max_length=20,
                    ),
                ),
                ("vehicle_number", models.CharField(blank=True, db_default="", default="", max_length=30)),
                ("license_number", models.CharField(blank=True, db_default="", default="", max_length=50)),
                ("is_active_partner", models.BooleanField(db_default=False, default=False)),
                ("current_latitude", models.FloatField(blank=True, null=True)),
                ("current_longitude", models.FloatField(blank=True, null=True)),
                ("business_license", models.CharField(blank=True, db_default="", default="", max_length=100)),
                ("tax_number", models.CharField(blank=True, db_default="", default="", max_length=50)),
                ("fcm_token", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="userprofile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "user_profile",
            },
        ),
        migrations.CreateModel(
            name="UserSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_type", models.CharField(choices=ROLE_CHOICES + [("admin", "Admin")], max_length=20)),
                ("session_token", models.CharField(max_length=64, unique=True)),
                ("user_agent", models.CharField(blank=True, max_length=255, null=True)),
                ("client_ip", models.GenericIPAddressField(blank=True, null=True)),
                ("is_active", models.BooleanField(db_default=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("expires_at", models.DateTimeField()),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "user_session",
                "ordering": ["-created_at"],
            },
        ),
    ]
