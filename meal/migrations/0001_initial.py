import django.db.models.deletion
from django.db import migrations, models

SPICE_LEVEL_CHOICES = [
    ("mild", "Mild"),
    ("medium", "Medium"),
    ("spicy", "Spicy"),
    ("extra_spicy", "Extra Spicy"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("merchant", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True, db_default="", default="")),
                ("base_price", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("seblak_kerupuk", "Seblak Kerupuk"),
                            ("seblak_mie", "Seblak Mie"),
                            ("seblak_ceker", "Seblak Ceker"),
                            ("seblak_sosis", "Seblak Sosis"),
                            ("seblak_seafood", "Seblak Seafood"),
                        ],
                        max_length=20,
                    ),
                ),
                ("is_available", models.BooleanField(db_default=True, default=True)),
                ("image_url", models.CharField(blank=True, db_default="", default="", max_length=255)),
                ("preparation_time", models.PositiveIntegerField(db_default=15, default=15)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="menu",
                        to="merchant.restaurant",
                    ),
                ),
            ],
            options={
                "db_table": "menu_item",
            },
        ),
        migrations.CreateModel(
            name="Topping",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("protein", "Protein"),
                            ("vegetable", "Vegetable"),
                            ("noodle", "Noodle"),
                            ("extra", "Extra"),
                        ],
                        max_length=20,
                    ),
                ),
                ("is_available", models.BooleanField(db_default=True, default=True)),
                (
                    "menu_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="toppings",
                        to="meal.menuitem",
                    ),
                ),
            ],
            options={
                "db_table": "menu_topping",
            },
        ),
        migrations.CreateModel(
            name="SpiceLevel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("level", models.CharField(choices=SPICE_LEVEL_CHOICES, max_length=20)),
                ("name", models.CharField(blank=True, db_default="", default="", max_length=50)),
                ("price_adjustment", models.DecimalField(db_default=0, decimal_places=2, default=0, max_digits=12)),
                (
                    "menu_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="spice_levels",
                        to="meal.menuitem",
                    ),
                ),
            ],
            options={
                "db_table": "menu_spice_level",
                "unique_together": {("menu_item", "level")},
            },
        ),
    ]
