# merchant/models.py
from django.contrib.auth.models import User
from django.db import models


class Restaurant(models.Model):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='restaurants')
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True, default='', db_default='')

    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    province = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20, blank=True, default='', db_default='')
    latitude = models.FloatField()
    longitude = models.FloatField()

    phone = models.CharField(max_length=20)
    email = models.CharField(max_length=254, blank=True, default='', db_default='')
    is_active = models.BooleanField(default=True, db_default=True)
    is_verified = models.BooleanField(default=False, db_default=False)
    business_license = models.CharField(max_length=100, blank=True, default='', db_default='')

    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0, db_default=0)
    total_reviews = models.PositiveIntegerField(default=0, db_default=0)

    delivery_radius_km = models.FloatField(default=5, db_default=5)
    minimum_order = models.DecimalField(max_digits=12, decimal_places=2, default=15000, db_default=15000)
    delivery_fee = models.DecimalField(max_digits=12, decimal_places=2, default=5000, db_default=5000)
    average_preparation_time = models.PositiveIntegerField(default=20, db_default=20)

    image_url = models.CharField(max_length=255, blank=True, default='', db_default='')
    banner_url = models.CharField(max_length=255, blank=True, default='', db_default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'restaurant'
        indexes = [
            models.Index(fields=['latitude', 'longitude'], name='restaurant_coordinates_idx'),
        ]

    def __str__(self):
        return self.name
