# order/models.py
from django.contrib.auth.models import User
from django.db import models

from meal.models import MenuItem, Topping, SPICE_LEVELS
from merchant.models import Restaurant

PENDING = 'pending'
CONFIRMED = 'confirmed'
PREPARING = 'preparing'
READY_FOR_PICKUP = 'ready_for_pickup'
ASSIGNED = 'assigned'
PICKED_UP = 'picked_up'
ON_THE_WAY = 'on_the_way'
DELIVERED = 'delivered'
CANCELLED = 'cancelled'
REFUNDED = 'refunded'

ORDER_STATUSES = (
    PENDING, CONFIRMED, PREPARING, READY_FOR_PICKUP, PICKED_UP,
    ON_THE_WAY, DELIVERED, CANCELLED, REFUNDED,
)
# ``assigned`` is only ever written by the delivery claim; it is kept out of
# the public status list and sits between ready_for_pickup and picked_up.
STORED_STATUSES = ORDER_STATUSES + (ASSIGNED,)

PAYMENT_METHODS = ('qris', 'gopay', 'ovo', 'dana', 'bank_transfer', 'cash')

PAYMENT_PENDING = 'pending'
PAYMENT_COMPLETED = 'completed'
PAYMENT_FAILED = 'failed'
PAYMENT_REFUNDED = 'refunded'
PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_COMPLETED, PAYMENT_FAILED, PAYMENT_REFUNDED)


def _choices(values):
    return [(value, value.replace('_', ' ').title()) for value in values]


class Order(models.Model):
    order_number = models.CharField(max_length=20, unique=True)
    customer = models.ForeignKey(User, on_delete=models.PROTECT, related_name='orders')
    restaurant = models.ForeignKey(Restaurant, on_delete=models.PROTECT, related_name='orders')
    delivery_partner = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='deliveries'
    )
    status = models.CharField(max_length=20, choices=_choices(STORED_STATUSES), default=PENDING, db_default=PENDING)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    delivery_fee = models.DecimalField(max_digits=12, decimal_places=2)
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=0, db_default=0)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=0, db_default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    delivery_street = models.CharField(max_length=255)
    delivery_city = models.CharField(max_length=100)
    delivery_province = models.CharField(max_length=100)
    delivery_postal_code = models.CharField(max_length=20)
    delivery_latitude = models.FloatField()
    delivery_longitude = models.FloatField()
    delivery_notes = models.CharField(max_length=255, blank=True, default='', db_default='')

    customer_name = models.CharField(max_length=120)
    customer_phone = models.CharField(max_length=20)

    payment_method = models.CharField(max_length=20, choices=_choices(PAYMENT_METHODS))
    payment_status = models.CharField(
        max_length=20, choices=_choices(PAYMENT_STATUSES), default=PAYMENT_PENDING, db_default=PAYMENT_PENDING
    )

    estimated_delivery_time = models.DateTimeField(null=True, blank=True)
    actual_delivery_time = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True, default='', db_default='')
    special_instructions = models.TextField(blank=True, default='', db_default='')
    promo_code = models.CharField(max_length=30, blank=True, default='', db_default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'order'
        indexes = [
            models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.order_number} [{self.status}] Rp {self.total_amount}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    menu_item = models.ForeignKey(MenuItem, on_delete=models.SET_NULL, null=True, blank=True)
    name = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField(default=1, db_default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    spice_level = models.CharField(max_length=20, choices=_choices(SPICE_LEVELS))
    special_instructions = models.CharField(max_length=255, blank=True, default='', db_default='')

    class Meta:
        db_table = 'order_item'

    def __str__(self):
        return f"{self.order_id} - {self.name} x {self.quantity}"


class OrderItemTopping(models.Model):
    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name='toppings')
    topping = models.ForeignKey(Topping, on_delete=models.SET_NULL, null=True, blank=True)
    name = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField(default=1, db_default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'order_item_topping'


class OrderStatusHistory(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='status_history')
    status = models.CharField(max_length=20, choices=_choices(STORED_STATUSES))
    timestamp = models.DateTimeField()
    notes = models.CharField(max_length=255, blank=True, default='', db_default='')

    class Meta:
        db_table = 'order_status_history'
        ordering = ['id']


class OrderRating(models.Model):
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name='rating')
    food = models.PositiveSmallIntegerField()
    delivery = models.PositiveSmallIntegerField()
    overall = models.PositiveSmallIntegerField()
    comment = models.TextField(blank=True, default='', db_default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_rating'
