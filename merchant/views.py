import logging
from datetime import datetime, time, timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from login.models import RESTAURANT_OWNER
from meal.menu import create_menu_item, delete_menu_item, get_menu, get_menu_item, update_menu_item
from meal.schemas import MenuItemCreate, MenuItemUpdate
from merchant.schemas import AnalyticsQuery, RestaurantCreate, RestaurantOrdersQuery, RestaurantSearch, RestaurantUpdate
from order.geo import within_radius
from order.lifecycle import Actor, transition_order
from order.queries import fetch_order_page, get_order_detail, load_order
from order.schemas import StatusUpdate
from Project.api import (
    ADMIN_ROLE,
    NotFound,
    api_view,
    current_role,
    ok,
    parse_body,
    parse_query,
    role_required,
)
from Project.db_utils import (
    ORDER_TABLE,
    RESTAURANT_TABLE,
    db_datetime,
    db_now,
    execute_fetchall,
    execute_fetchone,
    execute_non_query,
    execute_write,
    format_datetime,
    format_decimal,
    get_restaurant,
    get_restaurant_for_owner,
    paginate,
    to_decimal,
)

logger = logging.getLogger(__name__)

POPULAR_ITEMS_LIMIT = 5
UPDATABLE_FIELDS = (
    'name', 'description', 'phone', 'email', 'is_active', 'delivery_radius_km', 'minimum_order',
    'delivery_fee', 'average_preparation_time', 'image_url', 'banner_url',
)


def serialize_restaurant(row):
    payload = {
        'id': row['id'],
        'owner_id': row['owner_id'],
        'name': row['name'],
        'description': row['description'],
        'address': {
            'street': row['street'],
            'city': row['city'],
            'province': row['province'],
            'postal_code': row['postal_code'],
            'latitude': row['latitude'],
            'longitude': row['longitude'],
        },
        'phone': row['phone'],
        'email': row['email'],
        'is_active': bool(row['is_active']),
        'is_verified': bool(row['is_verified']),
        'rating': format_decimal(row['rating']),
        'total_reviews': row['total_reviews'],
        'delivery_radius_km': row['delivery_radius_km'],
        'minimum_order': format_decimal(row['minimum_order']),
        'delivery_fee': format_decimal(row['delivery_fee']),
        'average_preparation_time': row['average_preparation_time'],
        'image_url': row['image_url'],
        'banner_url': row['banner_url'],
        'created_at': format_datetime(row['created_at']),
    }
    if 'distance_km' in row:
        payload['distance_km'] = row['distance_km']
    return payload


def _get_managed_restaurant(request, restaurant_id):
    """The caller's restaurant, or any restaurant for admins; 404 otherwise."""
    if current_role(request) == ADMIN_ROLE:
        restaurant = get_restaurant(restaurant_id)
    else:
        restaurant = get_restaurant_for_owner(restaurant_id, request.user.id)
    if not restaurant:
        raise NotFound('Restaurant not found')
    return restaurant


def _search_restaurants(request):
    query = parse_query(request, RestaurantSearch)
    page, limit, offset = paginate(query.page, query.limit)

    conditions = ['is_active = %s']
    params = [True]
    if query.city:
        conditions.append('LOWER(city) = LOWER(%s)')
        params.append(query.city)
    if query.search:
        conditions.append('LOWER(name) LIKE LOWER(%s)')
        params.append(f'%{query.search}%')
    where = ' AND '.join(conditions)

    if query.latitude is not None:
        radius = query.radius or settings.DEFAULT_SEARCH_RADIUS_KM
        rows = execute_fetchall(f'SELECT * FROM {RESTAURANT_TABLE} WHERE {where}', params)
        nearby = sorted(within_radius(rows, query.latitude, query.longitude, radius), key=lambda row: row['distance_km'])
        total = len(nearby)
        rows = nearby[offset:offset + limit]
    else:
        total = execute_fetchone(f'SELECT COUNT(*) AS total FROM {RESTAURANT_TABLE} WHERE {where}', params)['total']
        rows = execute_fetchall(
            f'''
            SELECT * FROM {RESTAURANT_TABLE}
            WHERE {where}
            ORDER BY rating DESC, total_reviews DESC, id
            LIMIT %s OFFSET %s
            ''',
            params + [limit, offset],
        )

    return ok({
        'restaurants': [serialize_restaurant(row) for row in rows],
        'pagination': {'page': page, 'limit': limit, 'total': total},
    })


@role_required(RESTAURANT_OWNER)
def _create_restaurant(request):
    data = parse_body(request, RestaurantCreate)
    address = data.address
    now = db_now()
    restaurant_id = execute_write(
        f'''
        INSERT INTO {RESTAURANT_TABLE}
            (owner_id, name, description, street, city, province, postal_code, latitude, longitude,
             phone, email, is_active, is_verified, business_license, rating, total_reviews,
             delivery_radius_km, minimum_order, delivery_fee, average_preparation_time,
             image_url, banner_url, created_at, updated_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        ''',
        [
            request.user.id, data.name, data.description, address.street, address.city, address.province,
            address.postal_code, address.latitude, address.longitude, data.phone, data.email or '',
            True, False, data.business_license, to_decimal(0), 0, data.delivery_radius_km,
            to_decimal(data.minimum_order), to_decimal(data.delivery_fee), data.average_preparation_time,
            data.image_url, data.banner_url, now, now,
        ],
    )
    logger.info(f'Restaurant {restaurant_id} created by owner {request.user.id}')
    return ok({'restaurant': serialize_restaurant(get_restaurant(restaurant_id))},
              status=201, message='Restaurant created')


@api_view('GET', 'POST')
def restaurants(request):
    if request.method == 'POST':
        return _create_restaurant(request)
    return _search_restaurants(request)


def _update_restaurant(request, restaurant_id):
    restaurant = _get_managed_restaurant(request, restaurant_id)
    data = parse_body(request, RestaurantUpdate)
    changes = data.model_dump(exclude_unset=True, exclude_none=True, include=set(UPDATABLE_FIELDS))
    if data.address is not None:
        changes.update(data.address.model_dump())
    for field in ('minimum_order', 'delivery_fee'):
        if field in changes:
            changes[field] = to_decimal(changes[field])

    if changes:
        assignments = [f'{column} = %s' for column in changes] + ['updated_at = %s']
        execute_non_query(
            f"UPDATE {RESTAURANT_TABLE} SET {', '.join(assignments)} WHERE id = %s",
            list(changes.values()) + [db_now(), restaurant['id']],
        )
        logger.info(f"Restaurant {restaurant['id']} updated: {', '.join(sorted(changes))}")
    return ok({'restaurant': serialize_restaurant(get_restaurant(restaurant['id']))}, message='Restaurant updated')


@api_view('GET', 'PUT')
def restaurant_detail(request, restaurant_id):
    if request.method == 'PUT':
        return role_required(RESTAURANT_OWNER, ADMIN_ROLE)(_update_restaurant)(request, restaurant_id)

    restaurant = get_restaurant(restaurant_id)
    manager = request.user.is_authenticated and (
        current_role(request) == ADMIN_ROLE or (restaurant and restaurant['owner_id'] == request.user.id)
    )
    if not restaurant or (not restaurant['is_active'] and not manager):
        raise NotFound('Restaurant not found')

    payload = serialize_restaurant(restaurant)
    payload['menu'] = get_menu(restaurant['id'], available_only=not manager)
    return ok({'restaurant': payload})


@api_view('POST')
@role_required(RESTAURANT_OWNER, ADMIN_ROLE)
def add_menu_item(request, restaurant_id):
    restaurant = _get_managed_restaurant(request, restaurant_id)
    data = parse_body(request, MenuItemCreate)
    with transaction.atomic():
        item_id = create_menu_item(restaurant['id'], data)
    logger.info(f"Menu item {item_id} added to restaurant {restaurant['id']}")
    return ok({'menu_item': get_menu_item(restaurant['id'], item_id)}, status=201, message='Menu item added')


@api_view('PUT', 'DELETE')
@role_required(RESTAURANT_OWNER, ADMIN_ROLE)
def menu_item(request, restaurant_id, item_id):
    restaurant = _get_managed_restaurant(request, restaurant_id)
    if not get_menu_item(restaurant['id'], item_id):
        raise NotFound('Menu item not found')

    if request.method == 'DELETE':
        with transaction.atomic():
            delete_menu_item(item_id)
        logger.info(f"Menu item {item_id} removed from restaurant {restaurant['id']}")
        return ok(message='Menu item deleted')

    data = parse_body(request, MenuItemUpdate)
    with transaction.atomic():
        update_menu_item(item_id, data)
    return ok({'menu_item': get_menu_item(restaurant['id'], item_id)}, message='Menu item updated')


@api_view('GET')
@role_required(RESTAURANT_OWNER, ADMIN_ROLE)
def restaurant_orders(request, restaurant_id):
    restaurant = _get_managed_restaurant(request, restaurant_id)
    query = parse_query(request, RestaurantOrdersQuery)
    page, limit, offset = paginate(query.page, query.limit)

    conditions = ['o.restaurant_id = %s']
    params = [restaurant['id']]
    if query.status:
        conditions.append('o.status = %s')
        params.append(query.status)
    orders, total = fetch_order_page(conditions, params, page, limit, offset)
    return ok({'orders': orders, 'pagination': {'page': page, 'limit': limit, 'total': total}})


@api_view('PUT', 'PATCH')
@role_required(RESTAURANT_OWNER, ADMIN_ROLE)
def restaurant_order_status(request, restaurant_id, order_id):
    restaurant = _get_managed_restaurant(request, restaurant_id)
    order = load_order(order_id)
    if not order or order['restaurant_id'] != restaurant['id']:
        raise NotFound('Order not found')

    data = parse_body(request, StatusUpdate)
    transition_order(order_id, Actor.from_request(request), data.status,
                     notifier=request.notifier, reason=data.reason, notes=data.notes)
    return ok({'order': get_order_detail(order_id)}, message='Order status updated')


def _date_bounds(query):
    conditions, params = [], []
    if query.start_date:
        start = timezone.make_aware(datetime.combine(query.start_date, time.min))
        conditions.append('o.created_at >= %s')
        params.append(db_datetime(start))
    if query.end_date:
        end = timezone.make_aware(datetime.combine(query.end_date + timedelta(days=1), time.min))
        conditions.append('o.created_at < %s')
        params.append(db_datetime(end))
    return conditions, params


@api_view('GET')
@role_required(RESTAURANT_OWNER, ADMIN_ROLE)
def restaurant_analytics(request, restaurant_id):
    restaurant = _get_managed_restaurant(request, restaurant_id)
    query = parse_query(request, AnalyticsQuery)
    range_conditions, range_params = _date_bounds(query)
    where = ' AND '.join(['o.restaurant_id = %s'] + range_conditions)
    params = [restaurant['id']] + range_params

    by_status = execute_fetchall(
        f'SELECT o.status, COUNT(*) AS total FROM {ORDER_TABLE} o WHERE {where} GROUP BY o.status',
        params,
    )
    revenue = execute_fetchone(
        f'''
        SELECT COUNT(*) AS delivered, SUM(o.total_amount) AS revenue
        FROM {ORDER_TABLE} o
        WHERE {where} AND o.status = %s
        ''',
        params + ['delivered'],
    )
    popular = execute_fetchall(
        f'''
        SELECT oi.name, SUM(oi.quantity) AS quantity, COUNT(DISTINCT oi.order_id) AS orders
        FROM order_item oi
        JOIN {ORDER_TABLE} o ON oi.order_id = o.id
        WHERE {where} AND o.status NOT IN (%s, %s)
        GROUP BY oi.name
        ORDER BY quantity DESC, oi.name
        LIMIT %s
        ''',
        params + ['cancelled', 'refunded', POPULAR_ITEMS_LIMIT],
    )

    delivered = revenue['delivered'] or 0
    total_revenue = to_decimal(revenue['revenue'])
    average = total_revenue / delivered if delivered else total_revenue
    return ok({
        'analytics': {
            'restaurant_id': restaurant['id'],
            'total_orders': sum(row['total'] for row in by_status),
            'delivered_orders': delivered,
            'total_revenue': format_decimal(total_revenue),
            'average_order_value': format_decimal(average),
            'orders_by_status': {row['status']: row['total'] for row in by_status},
            'popular_items': [{
                'name': row['name'],
                'quantity': int(row['quantity'] or 0),
                'orders': row['orders'],
            } for row in popular],
            'rating': format_decimal(restaurant['rating']),
            'total_reviews': restaurant['total_reviews'],
            'start_date': query.start_date.isoformat() if query.start_date else None,
            'end_date': query.end_date.isoformat() if query.end_date else None,
        }
    })
