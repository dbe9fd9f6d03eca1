# login/models.py
from django.contrib.auth.models import User
from django.db import models

CUSTOMER = 'customer'
RESTAURANT_OWNER = 'restaurant_owner'
DELIVERY_PARTNER = 'delivery_partner'
ADMIN = 'admin'

USER_ROLES = (CUSTOMER, RESTAURANT_OWNER, DELIVERY_PARTNER)
VEHICLE_TYPES = ('motorcycle', 'bicycle', 'car')


class UserProfile(models.Model):
    ROLE_CHOICES = [
        (CUSTOMER, 'Customer'),
        (RESTAURANT_OWNER, 'Restaurant owner'),
        (DELIVERY_PARTNER, 'Delivery partner'),
    ]
    VEHICLE_CHOICES = [(vehicle, vehicle.title()) for vehicle in VEHICLE_TYPES]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='userprofile')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=CUSTOMER, db_default=CUSTOMER)
    full_name = models.CharField(max_length=120)
    phone = models.CharField(max_length=20, unique=True)
    is_verified = models.BooleanField(default=False, db_default=False)
    profile_image = models.CharField(max_length=255, blank=True, default='', db_default='')

    street = models.CharField(max_length=255, blank=True, default='', db_default='')
    city = models.CharField(max_length=100, blank=True, default='', db_default='')
    province = models.CharField(max_length=100, blank=True, default='', db_default='')
    postal_code = models.CharField(max_length=20, blank=True, default='', db_default='')
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    # delivery partners
    vehicle_type = models.CharField(max_length=20, choices=VEHICLE_CHOICES, blank=True, default='', db_default='')
    vehicle_number = models.CharField(max_length=30, blank=True, default='', db_default='')
    license_number = models.CharField(max_length=50, blank=True, default='', db_default='')
    is_active_partner = models.BooleanField(default=False, db_default=False)
    current_latitude = models.FloatField(null=True, blank=True)
    current_longitude = models.FloatField(null=True, blank=True)

    # restaurant owners
    business_license = models.CharField(max_length=100, blank=True, default='', db_default='')
    tax_number = models.CharField(max_length=50, blank=True, default='', db_default='')

    fcm_token = models.CharField(max_length=255, blank=True, default='', db_default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_profile'

    def __str__(self):
        return f"{self.full_name} ({self.get_role_display()})"


class UserSession(models.Model):
    USER_TYPE_CHOICES = UserProfile.ROLE_CHOICES + [(ADMIN, 'Admin')]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sessions')
    user_type = models.CharField(max_length=20, choices=USER_TYPE_CHOICES)
    session_token = models.CharField(max_length=64, unique=True)
    user_agent = models.CharField(max_length=255, blank=True, null=True)
    client_ip = models.GenericIPAddressField(blank=True, null=True)
    is_active = models.BooleanField(default=True, db_default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()

    class Meta:
        db_table = 'user_session'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user_id} [{self.user_type}]"


class OtpCode(models.Model):
    phone = models.CharField(max_length=20, db_index=True)
    code_hash = models.CharField(max_length=128)
    is_used = models.BooleanField(default=False, db_default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()

    class Meta:
        db_table = 'otp_code'
        ordering = ['-created_at']

    def __str__(self):
        return f"OTP {self.phone}"
