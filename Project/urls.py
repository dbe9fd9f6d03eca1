"""
URL configuration for the Seblak delivery API.

Every endpoint lives under ``/api/`` and answers JSON; ``/`` and ``/health``
are unauthenticated probes.
"""

from django.urls import path

from customer import views as customer_views
from home import views as home_views
from login import views as login_views
from merchant import views as merchant_views
from order import views as order_views
from payment import views as payment_views
from platforme import views as platform_views
from realtime import views as realtime_views
from register import views as register_views
from rider import views as rider_views

urlpatterns = [
    path("", home_views.index, name="index"),
    path("health", home_views.health, name="health"),

    path("api/auth/register", register_views.register, name="register"),
    path("api/auth/check-availability", register_views.check_availability, name="check_availability"),
    path("api/auth/send-otp", register_views.send_otp, name="send_otp"),
    path("api/auth/verify-otp", register_views.verify_otp, name="verify_otp"),
    path("api/auth/login", login_views.login, name="login"),
    path("api/auth/logout", login_views.logout, name="logout"),
    path("api/auth/profile", login_views.profile, name="profile"),
    path("api/auth/fcm-token", login_views.fcm_token, name="fcm_token"),

    path("api/restaurants", merchant_views.restaurants, name="restaurants"),
    path("api/restaurants/<int:restaurant_id>", merchant_views.restaurant_detail, name="restaurant_detail"),
    path("api/restaurants/<int:restaurant_id>/menu", merchant_views.add_menu_item, name="add_menu_item"),
    path("api/restaurants/<int:restaurant_id>/menu/<int:item_id>", merchant_views.menu_item, name="menu_item"),
    path("api/restaurants/<int:restaurant_id>/orders", merchant_views.restaurant_orders, name="restaurant_orders"),
    path(
        "api/restaurants/<int:restaurant_id>/orders/<int:order_id>/status",
        merchant_views.restaurant_order_status,
        name="restaurant_order_status",
    ),
    path("api/restaurants/<int:restaurant_id>/analytics", merchant_views.restaurant_analytics, name="restaurant_analytics"),

    path("api/orders", customer_views.create_order, name="create_order"),
    path("api/orders/my-orders", customer_views.customer_orders, name="customer_orders"),
    path("api/orders/<int:order_id>", order_views.order_detail, name="order_detail"),
    path("api/orders/<int:order_id>/status", order_views.update_order_status, name="update_order_status"),
    path("api/orders/<int:order_id>/cancel", customer_views.cancel_order, name="cancel_order"),
    path("api/orders/<int:order_id>/rate", customer_views.rate_order, name="rate_order"),

    path("api/delivery/available-orders", rider_views.available_orders, name="available_orders"),
    path("api/delivery/orders/<int:order_id>/accept", rider_views.accept_order, name="accept_order"),
    path("api/delivery/active", rider_views.active_deliveries, name="active_deliveries"),
    path("api/delivery/completed", rider_views.completed_deliveries, name="completed_deliveries"),
    path("api/delivery/earnings", rider_views.earnings, name="earnings"),
    path("api/delivery/location", rider_views.update_location, name="update_location"),
    path("api/delivery/status", rider_views.set_online_status, name="set_online_status"),

    path("api/payments/methods", payment_views.payment_methods, name="payment_methods"),
    path("api/payments/process", payment_views.process_payment, name="process_payment"),
    path("api/payments/verify/<int:order_id>", payment_views.verify_payment, name="verify_payment"),

    path("api/admin/stats", platform_views.stats, name="admin_stats"),
    path("api/admin/orders", platform_views.orders, name="admin_orders"),
    path("api/admin/orders/recent", platform_views.recent_orders, name="admin_recent_orders"),
    path("api/admin/orders/status-breakdown", platform_views.order_status_breakdown, name="admin_status_breakdown"),
    path("api/admin/orders/<int:order_id>/assign", platform_views.assign_partner, name="admin_assign_partner"),
    path("api/admin/revenue", platform_views.revenue, name="admin_revenue"),
    path("api/admin/restaurants", platform_views.restaurants, name="admin_restaurants"),
    path("api/admin/restaurants/top", platform_views.top_restaurants, name="admin_top_restaurants"),
    path("api/admin/restaurants/<int:restaurant_id>/approve", platform_views.approve_restaurant, name="admin_approve_restaurant"),
    path("api/admin/restaurants/<int:restaurant_id>/reject", platform_views.reject_restaurant, name="admin_reject_restaurant"),
    path("api/admin/users", platform_views.users, name="admin_users"),
    path("api/admin/users/<int:user_id>/suspend", platform_views.suspend_user, name="admin_suspend_user"),
    path("api/admin/users/<int:user_id>/unsuspend", platform_views.unsuspend_user, name="admin_unsuspend_user"),
    path("api/admin/delivery-partners", platform_views.delivery_partners, name="admin_delivery_partners"),

    path("api/realtime/connect", realtime_views.connect, name="realtime_connect"),
    path("api/realtime/<str:subscriber_id>/join", realtime_views.join, name="realtime_join"),
    path("api/realtime/<str:subscriber_id>/leave", realtime_views.leave, name="realtime_leave"),
    path("api/realtime/<str:subscriber_id>/events", realtime_views.events, name="realtime_events"),
    path("api/realtime/<str:subscriber_id>", realtime_views.disconnect, name="realtime_disconnect"),
]
