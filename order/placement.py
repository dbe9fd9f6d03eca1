import logging

from django.db import transaction
from django.utils import timezone

from meal.menu import pricing_catalog
from order import fanout
from order.lifecycle import record_history
from order.models import PAYMENT_PENDING, PENDING
from order.pricing import estimated_delivery_time, generate_order_number, quote_order
from order.queries import ORDER_ITEM_TABLE, ORDER_ITEM_TOPPING_TABLE, order_number_exists
from Project.api import NotFound, ValidationFailed
from Project.db_utils import ORDER_TABLE, db_datetime, execute_write, get_profile_by_user, get_restaurant

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


def _unique_order_number(now):
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number(now)
        if not order_number_exists(candidate):
            return candidate
    raise ValidationFailed('Could not allocate an order number, please retry')


def create_order(customer_id, data, notifier=None):
    """Price and persist a new order, then announce it to the restaurant.

    Returns the new order id. Nothing is written when pricing fails.
    """
    restaurant = get_restaurant(data.restaurant_id)
    if not restaurant or not restaurant['is_active']:
        raise NotFound('Restaurant not found')

    profile = get_profile_by_user(customer_id) or {}
    customer_name = (data.customer_name or profile.get('full_name') or '').strip()
    customer_phone = (data.customer_phone or profile.get('phone') or '').strip()
    if not customer_name or not customer_phone:
        raise ValidationFailed('Customer name and phone are required')

    menu = pricing_catalog(restaurant['id'], [line.menu_item_id for line in data.items])
    quote = quote_order(restaurant, menu, [line.to_request() for line in data.items], data.promo_code)

    preparation = max(
        [restaurant['average_preparation_time'] or 0]
        + [menu[line.menu_item_id]['preparation_time'] or 0 for line in quote.lines]
    )
    now = timezone.now()
    address = data.delivery_address

    with transaction.atomic():
        order_number = _unique_order_number(now)
        order_id = execute_write(
            f'''
            INSERT INTO {ORDER_TABLE}
                (order_number, customer_id, restaurant_id, status,
                 subtotal, delivery_fee, tax, discount, total_amount,
                 delivery_street, delivery_city, delivery_province, delivery_postal_code,
                 delivery_latitude, delivery_longitude, delivery_notes,
                 customer_name, customer_phone, payment_method, payment_status,
                 estimated_delivery_time, special_instructions, promo_code, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, %s, %s, %s, %s, %s, %s)
            ''',
            [
                order_number, customer_id, restaurant['id'], PENDING,
                quote.subtotal, quote.delivery_fee, quote.tax, quote.discount, quote.total,
                address.street, address.city, address.province, address.postal_code,
                address.latitude, address.longitude, address.notes,
                customer_name, customer_phone, data.payment_method, PAYMENT_PENDING,
                db_datetime(estimated_delivery_time(now, preparation)),
                data.special_instructions, quote.promo_code if quote.discount else '',
                db_datetime(now), db_datetime(now),
            ],
        )

        for line in quote.lines:
            item_id = execute_write(
                f'''
                INSERT INTO {ORDER_ITEM_TABLE}
                    (order_id, menu_item_id, name, quantity, unit_price, spice_level, special_instructions)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                ''',
                [order_id, line.menu_item_id, line.name, line.quantity, line.unit_price,
                 line.spice_level, line.special_instructions],
            )
            for topping in line.toppings:
                execute_write(
                    f'''
                    INSERT INTO {ORDER_ITEM_TOPPING_TABLE} (order_item_id, topping_id, name, quantity, unit_price)
                    VALUES (%s, %s, %s, %s, %s)
                    ''',
                    [item_id, topping.topping_id, topping.name, topping.quantity, topping.unit_price],
                )

        record_history(order_id, PENDING, 'Order placed', when=now)

    logger.info(f'Order {order_number} placed by customer {customer_id} at restaurant {restaurant["id"]}: Rp {quote.total}')
    fanout.publish(
        notifier,
        [fanout.restaurant_room(restaurant['id'])],
        fanout.NEW_ORDER,
        {
            'order_id': order_id,
            'order_number': order_number,
            'customer_name': customer_name,
            'total_amount': str(quote.total),
            'item_count': sum(line.quantity for line in quote.lines),
            'created_at': now.isoformat(),
        },
    )
    return order_id
