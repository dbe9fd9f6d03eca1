from Project.db_utils import (
    ORDER_TABLE,
    RESTAURANT_TABLE,
    build_in_clause,
    execute_fetchall,
    execute_fetchone,
    format_datetime,
    format_decimal,
)

ORDER_ITEM_TABLE = 'order_item'
ORDER_ITEM_TOPPING_TABLE = 'order_item_topping'
ORDER_HISTORY_TABLE = 'order_status_history'
ORDER_RATING_TABLE = 'order_rating'

ORDER_STATUS_DISPLAY = {
    'pending': 'Waiting for confirmation',
    'confirmed': 'Confirmed',
    'preparing': 'Being prepared',
    'ready_for_pickup': 'Ready for pickup',
    'assigned': 'Driver assigned',
    'picked_up': 'Picked up',
    'on_the_way': 'On the way',
    'delivered': 'Delivered',
    'cancelled': 'Cancelled',
    'refunded': 'Refunded',
}

ORDER_SELECT = f'''
    SELECT o.*,
           r.name AS restaurant_name,
           r.owner_id AS restaurant_owner_id,
           r.latitude AS restaurant_latitude,
           r.longitude AS restaurant_longitude,
           r.street AS restaurant_street,
           r.city AS restaurant_city,
           r.phone AS restaurant_phone
    FROM {ORDER_TABLE} o
    JOIN {RESTAURANT_TABLE} r ON o.restaurant_id = r.id
'''


def load_order(order_id):
    return execute_fetchone(f'{ORDER_SELECT} WHERE o.id = %s', [order_id])


def order_number_exists(order_number):
    row = execute_fetchone(f'SELECT id FROM {ORDER_TABLE} WHERE order_number = %s', [order_number])
    return row is not None


def fetch_order_page(conditions, params, page, limit, offset, order_by='o.created_at DESC, o.id DESC'):
    """Return ``(orders, total)`` for a filtered, paginated order listing."""
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ''
    count_row = execute_fetchone(
        f'''
        SELECT COUNT(*) AS total
        FROM {ORDER_TABLE} o
        JOIN {RESTAURANT_TABLE} r ON o.restaurant_id = r.id
        {where}
        ''',
        params,
    )
    rows = execute_fetchall(
        f'{ORDER_SELECT} {where} ORDER BY {order_by} LIMIT %s OFFSET %s',
        list(params) + [limit, offset],
    )
    attach_items(rows)
    return [serialize_order(row) for row in rows], count_row['total'] if count_row else 0


def attach_items(orders):
    if not orders:
        return orders
    order_map = {order['id']: order for order in orders}
    for order in orders:
        order['items'] = []

    order_ids = list(order_map.keys())
    placeholders = build_in_clause(order_ids)
    items = execute_fetchall(
        f'''
        SELECT id, order_id, menu_item_id, name, quantity, unit_price, spice_level, special_instructions
        FROM {ORDER_ITEM_TABLE}
        WHERE order_id IN ({placeholders})
        ORDER BY id
        ''',
        order_ids,
    )
    item_lookup = {}
    for item in items:
        entry = {
            'id': item['id'],
            'menu_item_id': item['menu_item_id'],
            'name': item['name'],
            'quantity': item['quantity'],
            'unit_price': format_decimal(item['unit_price']),
            'spice_level': item['spice_level'],
            'special_instructions': item['special_instructions'],
            'toppings': [],
        }
        order_map[item['order_id']]['items'].append(entry)
        item_lookup[item['id']] = entry

    if item_lookup:
        item_ids = list(item_lookup.keys())
        toppings = execute_fetchall(
            f'''
            SELECT order_item_id, topping_id, name, quantity, unit_price
            FROM {ORDER_ITEM_TOPPING_TABLE}
            WHERE order_item_id IN ({build_in_clause(item_ids)})
            ORDER BY id
            ''',
            item_ids,
        )
        for topping in toppings:
            item_lookup[topping['order_item_id']]['toppings'].append({
                'topping_id': topping['topping_id'],
                'name': topping['name'],
                'quantity': topping['quantity'],
                'unit_price': format_decimal(topping['unit_price']),
            })
    return orders


def _format_item_summary(items):
    return ', '.join(f"{item['name']} x{item['quantity']}" for item in items)


def serialize_order(row):
    items = row.get('items', [])
    payload = {
        'id': row['id'],
        'order_number': row['order_number'],
        'status': row['status'],
        'status_display': ORDER_STATUS_DISPLAY.get(row['status'], row['status']),
        'customer_id': row['customer_id'],
        'customer_name': row['customer_name'],
        'customer_phone': row['customer_phone'],
        'restaurant_id': row['restaurant_id'],
        'restaurant_name': row.get('restaurant_name'),
        'delivery_partner_id': row['delivery_partner_id'],
        'items': items,
        'item_summary': _format_item_summary(items),
        'subtotal': format_decimal(row['subtotal']),
        'delivery_fee': format_decimal(row['delivery_fee']),
        'tax': format_decimal(row['tax']),
        'discount': format_decimal(row['discount']),
        'total_amount': format_decimal(row['total_amount']),
        'promo_code': row['promo_code'],
        'delivery_address': {
            'street': row['delivery_street'],
            'city': row['delivery_city'],
            'province': row['delivery_province'],
            'postal_code': row['delivery_postal_code'],
            'latitude': row['delivery_latitude'],
            'longitude': row['delivery_longitude'],
            'notes': row['delivery_notes'],
        },
        'payment_method': row['payment_method'],
        'payment_status': row['payment_status'],
        'special_instructions': row['special_instructions'],
        'cancellation_reason': row['cancellation_reason'],
        'estimated_delivery_time': format_datetime(row['estimated_delivery_time']),
        'actual_delivery_time': format_datetime(row['actual_delivery_time']),
        'created_at': format_datetime(row['created_at']),
        'updated_at': format_datetime(row['updated_at']),
    }
    if 'distance_km' in row:
        payload['distance_km'] = row['distance_km']
    return payload


def get_status_history(order_id):
    rows = execute_fetchall(
        f'SELECT status, timestamp, notes FROM {ORDER_HISTORY_TABLE} WHERE order_id = %s ORDER BY id',
        [order_id],
    )
    return [{
        'status': row['status'],
        'timestamp': format_datetime(row['timestamp']),
        'notes': row['notes'],
    } for row in rows]


def get_rating(order_id):
    row = execute_fetchone(
        f'SELECT food, delivery, overall, comment, created_at FROM {ORDER_RATING_TABLE} WHERE order_id = %s',
        [order_id],
    )
    if not row:
        return None
    return {
        'food': row['food'],
        'delivery': row['delivery'],
        'overall': row['overall'],
        'comment': row['comment'],
        'created_at': format_datetime(row['created_at']),
    }


def get_order_detail(order_id, row=None):
    """Full order payload: lines with toppings, status history and rating."""
    row = row or load_order(order_id)
    if not row:
        return None
    attach_items([row])
    payload = serialize_order(row)
    payload['restaurant'] = {
        'id': row['restaurant_id'],
        'name': row['restaurant_name'],
        'phone': row['restaurant_phone'],
        'street': row['restaurant_street'],
        'city': row['restaurant_city'],
        'latitude': row['restaurant_latitude'],
        'longitude': row['restaurant_longitude'],
    }
    payload['status_history'] = get_status_history(row['id'])
    rating = get_rating(row['id'])
    payload['rating'] = rating
    payload['can_rate'] = row['status'] == 'delivered' and rating is None
    return payload
