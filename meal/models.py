# meal/models.py
from django.db import models

from merchant.models import Restaurant

MILD = 'mild'
MEDIUM = 'medium'
SPICY = 'spicy'
EXTRA_SPICY = 'extra_spicy'
SPICE_LEVELS = (MILD, MEDIUM, SPICY, EXTRA_SPICY)

MENU_CATEGORIES = ('seblak_kerupuk', 'seblak_mie', 'seblak_ceker', 'seblak_sosis', 'seblak_seafood')
TOPPING_CATEGORIES = ('protein', 'vegetable', 'noodle', 'extra')


def _choices(values):
    return [(value, value.replace('_', ' ').title()) for value in values]


class MenuItem(models.Model):
    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='menu')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='', db_default='')
    base_price = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=20, choices=_choices(MENU_CATEGORIES))
    is_available = models.BooleanField(default=True, db_default=True)
    image_url = models.CharField(max_length=255, blank=True, default='', db_default='')
    preparation_time = models.PositiveIntegerField(default=15, db_default=15)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'menu_item'

    def __str__(self):
        return f"{self.name} - Rp {self.base_price}"


class SpiceLevel(models.Model):
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name='spice_levels')
    level = models.CharField(max_length=20, choices=_choices(SPICE_LEVELS))
    name = models.CharField(max_length=50, blank=True, default='', db_default='')
    price_adjustment = models.DecimalField(max_digits=12, decimal_places=2, default=0, db_default=0)

    class Meta:
        db_table = 'menu_spice_level'
        unique_together = ['menu_item', 'level']


class Topping(models.Model):
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name='toppings')
    name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=20, choices=_choices(TOPPING_CATEGORIES))
    is_available = models.BooleanField(default=True, db_default=True)

    class Meta:
        db_table = 'menu_topping'

    def __str__(self):
        return f"{self.name} (+{self.price})"
