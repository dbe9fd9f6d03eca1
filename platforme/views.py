import logging
from datetime import datetime, time, timedelta

from django.db import transaction
from django.utils import timezone

from login.models import DELIVERY_PARTNER, USER_ROLES
from login.sessions import deactivate_user_sessions
from merchant.views import serialize_restaurant
from order.lifecycle import ACTIVE_DELIVERY_STATUSES, assign_partner as hand_over
from order.models import DELIVERED, ORDER_STATUSES, PENDING
from order.queries import fetch_order_page, get_order_detail
from platforme.schemas import (
    AdminOrdersQuery,
    AdminRestaurantsQuery,
    AdminUsersQuery,
    AssignPartnerRequest,
    DeliveryPartnersQuery,
    ModerationRequest,
    RecentOrdersQuery,
    RevenueQuery,
    TopRestaurantsQuery,
)
from Project.api import ADMIN_ROLE, NotFound, ValidationFailed, api_view, ok, parse_body, parse_query, role_required
from Project.db_utils import (
    ORDER_TABLE,
    PROFILE_TABLE,
    RESTAURANT_TABLE,
    build_in_clause,
    db_datetime,
    db_now,
    execute_fetchall,
    execute_fetchone,
    execute_non_query,
    format_datetime,
    format_decimal,
    get_restaurant,
    paginate,
    read_datetime,
    to_decimal,
)

logger = logging.getLogger(__name__)

admin_only = role_required(ADMIN_ROLE)


def _start_of_today():
    return timezone.make_aware(datetime.combine(timezone.localdate(), time.min))


@api_view('GET')
@admin_only
def stats(request):
    users = execute_fetchall(f'SELECT role, COUNT(*) AS total FROM {PROFILE_TABLE} GROUP BY role')
    users_by_role = {role: 0 for role in USER_ROLES}
    users_by_role.update({row['role']: row['total'] for row in users})

    restaurants = execute_fetchone(
        f'''
        SELECT COUNT(*) AS total,
               SUM(CASE WHEN is_active = %s THEN 1 ELSE 0 END) AS active,
               SUM(CASE WHEN is_verified = %s THEN 1 ELSE 0 END) AS verified
        FROM {RESTAURANT_TABLE}
        ''',
        [True, True],
    )
    orders = execute_fetchone(
        f'''
        SELECT COUNT(*) AS total,
               SUM(CASE WHEN status = %s THEN 1 ELSE 0 END) AS pending,
               SUM(CASE WHEN status = %s THEN 1 ELSE 0 END) AS delivered,
               SUM(CASE WHEN status = %s THEN total_amount ELSE 0 END) AS revenue,
               SUM(CASE WHEN created_at >= %s THEN 1 ELSE 0 END) AS today
        FROM {ORDER_TABLE}
        ''',
        [PENDING, DELIVERED, DELIVERED, db_datetime(_start_of_today())],
    )
    return ok({
        'stats': {
            'users': {'total': sum(users_by_role.values()), 'by_role': users_by_role},
            'restaurants': {
                'total': restaurants['total'] or 0,
                'active': restaurants['active'] or 0,
                'verified': restaurants['verified'] or 0,
            },
            'orders': {
                'total': orders['total'] or 0,
                'pending': orders['pending'] or 0,
                'delivered': orders['delivered'] or 0,
                'today': orders['today'] or 0,
            },
            'revenue': format_decimal(orders['revenue']),
        }
    })


@api_view('GET')
@admin_only
def orders(request):
    query = parse_query(request, AdminOrdersQuery)
    page, limit, offset = paginate(query.page, query.limit)
    conditions, params = [], []
    if query.status:
        conditions.append('o.status = %s')
        params.append(query.status)
    if query.restaurant_id:
        conditions.append('o.restaurant_id = %s')
        params.append(query.restaurant_id)
    rows, total = fetch_order_page(conditions, params, page, limit, offset)
    return ok({'orders': rows, 'pagination': {'page': page, 'limit': limit, 'total': total}})


@api_view('GET')
@admin_only
def recent_orders(request):
    query = parse_query(request, RecentOrdersQuery)
    rows, _ = fetch_order_page([], [], 1, query.limit, 0)
    return ok({'orders': rows})


@api_view('GET')
@admin_only
def order_status_breakdown(request):
    rows = execute_fetchall(f'SELECT status, COUNT(*) AS total FROM {ORDER_TABLE} GROUP BY status')
    breakdown = {status: 0 for status in ORDER_STATUSES}
    for row in rows:
        breakdown[row['status']] = row['total']
    return ok({'breakdown': breakdown, 'total': sum(breakdown.values())})


@api_view('GET')
@admin_only
def revenue(request):
    query = parse_query(request, RevenueQuery)
    today = timezone.localdate()
    first_day = today - timedelta(days=query.days - 1)
    start = timezone.make_aware(datetime.combine(first_day, time.min))

    rows = execute_fetchall(
        f'SELECT total_amount, created_at FROM {ORDER_TABLE} WHERE status = %s AND created_at >= %s',
        [DELIVERED, db_datetime(start)],
    )
    daily = {first_day + timedelta(days=offset): {'revenue': to_decimal(0), 'orders': 0} for offset in range(query.days)}
    for row in rows:
        day = timezone.localdate(read_datetime(row['created_at']))
        if day in daily:
            daily[day]['revenue'] += to_decimal(row['total_amount'])
            daily[day]['orders'] += 1

    series = [{
        'date': day.isoformat(),
        'revenue': format_decimal(bucket['revenue']),
        'orders': bucket['orders'],
    } for day, bucket in sorted(daily.items())]
    total = sum((bucket['revenue'] for bucket in daily.values()), to_decimal(0))
    return ok({'revenue': series, 'total': format_decimal(total), 'days': query.days})


@api_view('GET')
@admin_only
def top_restaurants(request):
    query = parse_query(request, TopRestaurantsQuery)
    rows = execute_fetchall(
        f'''
        SELECT r.id,
               r.name,
               r.city,
               r.rating,
               r.total_reviews,
               COUNT(o.id) AS total_orders,
               SUM(CASE WHEN o.status = %s THEN o.total_amount ELSE 0 END) AS revenue
        FROM {RESTAURANT_TABLE} r
        LEFT JOIN {ORDER_TABLE} o ON o.restaurant_id = r.id
        GROUP BY r.id, r.name, r.city, r.rating, r.total_reviews
        ORDER BY total_orders DESC, revenue DESC, r.id
        LIMIT %s
        ''',
        [DELIVERED, query.limit],
    )
    return ok({'restaurants': [{
        'id': row['id'],
        'name': row['name'],
        'city': row['city'],
        'rating': format_decimal(row['rating']),
        'total_reviews': row['total_reviews'],
        'total_orders': row['total_orders'],
        'revenue': format_decimal(row['revenue']),
    } for row in rows]})


@api_view('GET')
@admin_only
def restaurants(request):
    query = parse_query(request, AdminRestaurantsQuery)
    page, limit, offset = paginate(query.page, query.limit)
    conditions, params = [], []
    if query.is_verified is not None:
        conditions.append('is_verified = %s')
        params.append(query.is_verified)
    if query.is_active is not None:
        conditions.append('is_active = %s')
        params.append(query.is_active)
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ''

    total = execute_fetchone(f'SELECT COUNT(*) AS total FROM {RESTAURANT_TABLE} {where}', params)['total']
    rows = execute_fetchall(
        f'SELECT * FROM {RESTAURANT_TABLE} {where} ORDER BY created_at DESC, id DESC LIMIT %s OFFSET %s',
        params + [limit, offset],
    )
    return ok({
        'restaurants': [serialize_restaurant(row) for row in rows],
        'pagination': {'page': page, 'limit': limit, 'total': total},
    })


def _moderate_restaurant(request, restaurant_id, is_verified, is_active, action):
    restaurant = get_restaurant(restaurant_id)
    if not restaurant:
        raise NotFound('Restaurant not found')
    data = parse_body(request, ModerationRequest)
    execute_non_query(
        f'UPDATE {RESTAURANT_TABLE} SET is_verified = %s, is_active = %s, updated_at = %s WHERE id = %s',
        [is_verified, is_active, db_now(), restaurant_id],
    )
    logger.info(f"Restaurant {restaurant_id} {action} by admin {request.user.id}. {data.reason}".strip())
    return ok({'restaurant': serialize_restaurant(get_restaurant(restaurant_id))}, message=f'Restaurant {action}')


@api_view('PUT', 'POST')
@admin_only
def approve_restaurant(request, restaurant_id):
    return _moderate_restaurant(request, restaurant_id, True, True, 'approved')


@api_view('PUT', 'POST')
@admin_only
def reject_restaurant(request, restaurant_id):
    return _moderate_restaurant(request, restaurant_id, False, False, 'rejected')


def _serialize_user(row):
    return {
        'id': row['user_id'],
        'email': row['email'],
        'full_name': row['full_name'],
        'phone': row['phone'],
        'role': row['role'],
        'is_verified': bool(row['is_verified']),
        'is_active': bool(row['account_active']),
        'last_login': format_datetime(row['last_login']),
        'created_at': format_datetime(row['created_at']),
    }


def _profile_page(conditions, params, page, limit, offset):
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ''
    total = execute_fetchone(
        f'SELECT COUNT(*) AS total FROM {PROFILE_TABLE} up JOIN auth_user u ON up.user_id = u.id {where}',
        params,
    )['total']
    rows = execute_fetchall(
        f'''
        SELECT up.*, u.email, u.is_active AS account_active, u.last_login
        FROM {PROFILE_TABLE} up
        JOIN auth_user u ON up.user_id = u.id
        {where}
        ORDER BY up.created_at DESC, up.id DESC
        LIMIT %s OFFSET %s
        ''',
        params + [limit, offset],
    )
    return rows, total


@api_view('GET')
@admin_only
def users(request):
    query = parse_query(request, AdminUsersQuery)
    page, limit, offset = paginate(query.page, query.limit)
    conditions, params = [], []
    if query.role:
        conditions.append('up.role = %s')
        params.append(query.role)
    if query.is_active is not None:
        conditions.append('u.is_active = %s')
        params.append(query.is_active)
    rows, total = _profile_page(conditions, params, page, limit, offset)
    return ok({
        'users': [_serialize_user(row) for row in rows],
        'pagination': {'page': page, 'limit': limit, 'total': total},
    })


def _set_account_active(request, user_id, active):
    account = execute_fetchone('SELECT id, is_staff, is_superuser FROM auth_user WHERE id = %s', [user_id])
    if not account:
        raise NotFound('User not found')
    if account['is_staff'] or account['is_superuser']:
        raise ValidationFailed('Admin accounts cannot be suspended here')

    with transaction.atomic():
        execute_non_query('UPDATE auth_user SET is_active = %s WHERE id = %s', [active, user_id])
        if not active:
            deactivate_user_sessions(user_id)
    logger.info(f"User {user_id} {'reactivated' if active else 'suspended'} by admin {request.user.id}")


@api_view('PUT', 'POST')
@admin_only
def suspend_user(request, user_id):
    _set_account_active(request, user_id, False)
    return ok({'user_id': user_id, 'is_active': False}, message='User suspended')


@api_view('PUT', 'POST')
@admin_only
def unsuspend_user(request, user_id):
    _set_account_active(request, user_id, True)
    return ok({'user_id': user_id, 'is_active': True}, message='User reactivated')


@api_view('GET')
@admin_only
def delivery_partners(request):
    query = parse_query(request, DeliveryPartnersQuery)
    page, limit, offset = paginate(query.page, query.limit)
    conditions, params = ['up.role = %s'], [DELIVERY_PARTNER]
    if query.is_active is not None:
        conditions.append('up.is_active_partner = %s')
        params.append(query.is_active)
    rows, total = _profile_page(conditions, params, page, limit, offset)

    active_counts = {}
    partner_ids = [row['user_id'] for row in rows]
    if partner_ids:
        counts = execute_fetchall(
            f'''
            SELECT delivery_partner_id, COUNT(*) AS total
            FROM {ORDER_TABLE}
            WHERE delivery_partner_id IN ({build_in_clause(partner_ids)})
              AND status IN ({build_in_clause(ACTIVE_DELIVERY_STATUSES)})
            GROUP BY delivery_partner_id
            ''',
            partner_ids + list(ACTIVE_DELIVERY_STATUSES),
        )
        active_counts = {row['delivery_partner_id']: row['total'] for row in counts}

    partners = []
    for row in rows:
        partner = _serialize_user(row)
        partner.update({
            'vehicle_type': row['vehicle_type'],
            'vehicle_number': row['vehicle_number'],
            'is_online': bool(row['is_active_partner']),
            'current_latitude': row['current_latitude'],
            'current_longitude': row['current_longitude'],
            'active_deliveries': active_counts.get(row['user_id'], 0),
        })
        partners.append(partner)
    return ok({'delivery_partners': partners, 'pagination': {'page': page, 'limit': limit, 'total': total}})


@api_view('PUT', 'POST')
@admin_only
def assign_partner(request, order_id):
    data = parse_body(request, AssignPartnerRequest)
    hand_over(order_id, data.delivery_partner_id, notifier=request.notifier)
    return ok({'order': get_order_detail(order_id)}, message='Delivery partner assigned')
