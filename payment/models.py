# payment/models.py
from django.db import models

from order.models import Order, PAYMENT_METHODS


class PaymentTransaction(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='payments')
    transaction_id = models.CharField(max_length=64, db_index=True, blank=True, default='', db_default='')
    method = models.CharField(max_length=20, choices=[(method, method) for method in PAYMENT_METHODS])
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    success = models.BooleanField()
    note = models.CharField(max_length=255, blank=True, default='', db_default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payment_transaction'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.transaction_id} ({'ok' if self.success else 'failed'})"
