import logging
from datetime import datetime, time, timedelta

from django.conf import settings
from django.utils import timezone

from login.models import DELIVERY_PARTNER
from order.geo import within_radius
from order.lifecycle import ACTIVE_DELIVERY_STATUSES, accept_order as claim
from order.models import DELIVERED, READY_FOR_PICKUP
from order.queries import ORDER_SELECT, attach_items, fetch_order_page, get_order_detail, serialize_order
from Project.api import NotFound, ValidationFailed, api_view, ok, parse_body, parse_query, role_required
from Project.db_utils import (
    ORDER_TABLE,
    PROFILE_TABLE,
    build_in_clause,
    db_datetime,
    db_now,
    execute_fetchall,
    execute_fetchone,
    execute_non_query,
    format_decimal,
    get_profile_by_user,
    paginate,
    to_decimal,
)
from rider.schemas import AvailableOrdersQuery, CompletedQuery, EarningsQuery, LocationUpdate, OnlineStatusUpdate

logger = logging.getLogger(__name__)

PERIOD_DAYS = {'week': 7, 'month': 30}


def _get_partner(user):
    partner = get_profile_by_user(user.id)
    if not partner or partner['role'] != DELIVERY_PARTNER:
        raise NotFound('Delivery partner profile does not exist')
    return partner


@api_view('GET')
@role_required(DELIVERY_PARTNER)
def available_orders(request):
    query = parse_query(request, AvailableOrdersQuery)
    latitude, longitude = query.latitude, query.longitude
    if latitude is None:
        partner = _get_partner(request.user)
        latitude, longitude = partner['current_latitude'], partner['current_longitude']
    if latitude is None or longitude is None:
        raise ValidationFailed('Current location is required to find nearby orders')

    rows = execute_fetchall(
        f'''
        {ORDER_SELECT}
        WHERE o.status = %s AND o.delivery_partner_id IS NULL
        ORDER BY o.created_at, o.id
        LIMIT %s
        ''',
        [READY_FOR_PICKUP, settings.AVAILABLE_ORDERS_PAGE_SIZE],
    )
    nearby = within_radius(rows, latitude, longitude, query.radius,
                           lat_key='restaurant_latitude', lon_key='restaurant_longitude')
    attach_items(nearby)
    return ok({'orders': [serialize_order(row) for row in nearby], 'radius_km': query.radius})


@api_view('POST', 'PUT')
@role_required(DELIVERY_PARTNER)
def accept_order(request, order_id):
    claim(order_id, request.user.id, notifier=request.notifier)
    return ok({'order': get_order_detail(order_id)}, message='Order accepted')


@api_view('GET')
@role_required(DELIVERY_PARTNER)
def active_deliveries(request):
    rows = execute_fetchall(
        f'''
        {ORDER_SELECT}
        WHERE o.delivery_partner_id = %s AND o.status IN ({build_in_clause(ACTIVE_DELIVERY_STATUSES)})
        ORDER BY o.updated_at DESC, o.id DESC
        ''',
        [request.user.id] + list(ACTIVE_DELIVERY_STATUSES),
    )
    attach_items(rows)
    return ok({'orders': [serialize_order(row) for row in rows]})


@api_view('GET')
@role_required(DELIVERY_PARTNER)
def completed_deliveries(request):
    query = parse_query(request, CompletedQuery)
    page, limit, offset = paginate(query.page, query.limit)
    orders, total = fetch_order_page(
        ['o.delivery_partner_id = %s', 'o.status = %s'],
        [request.user.id, DELIVERED],
        page, limit, offset,
        order_by='o.actual_delivery_time DESC, o.id DESC',
    )
    return ok({'orders': orders, 'pagination': {'page': page, 'limit': limit, 'total': total}})


def _period_start(period):
    now = timezone.now()
    if period == 'today':
        return timezone.make_aware(datetime.combine(timezone.localdate(now), time.min))
    if period in PERIOD_DAYS:
        return now - timedelta(days=PERIOD_DAYS[period])
    return None


@api_view('GET')
@role_required(DELIVERY_PARTNER)
def earnings(request):
    query = parse_query(request, EarningsQuery)
    conditions = ['delivery_partner_id = %s', 'status = %s']
    params = [request.user.id, DELIVERED]
    start = _period_start(query.period)
    if start is not None:
        conditions.append('actual_delivery_time >= %s')
        params.append(db_datetime(start))

    row = execute_fetchone(
        f'''
        SELECT COUNT(*) AS deliveries, SUM(delivery_fee) AS earnings
        FROM {ORDER_TABLE}
        WHERE {' AND '.join(conditions)}
        ''',
        params,
    )
    deliveries = row['deliveries'] or 0
    total = to_decimal(row['earnings'])
    return ok({
        'earnings': {
            'period': query.period,
            'total_earnings': format_decimal(total),
            'total_deliveries': deliveries,
            'average_per_delivery': format_decimal(total / deliveries if deliveries else 0),
        }
    })


@api_view('PUT', 'POST')
@role_required(DELIVERY_PARTNER)
def update_location(request):
    data = parse_body(request, LocationUpdate)
    updated = execute_non_query(
        f'''
        UPDATE {PROFILE_TABLE}
        SET current_latitude = %s, current_longitude = %s, updated_at = %s
        WHERE user_id = %s
        ''',
        [data.latitude, data.longitude, db_now(), request.user.id],
    )
    if not updated:
        raise NotFound('Delivery partner profile does not exist')
    return ok({'location': {'latitude': data.latitude, 'longitude': data.longitude}}, message='Location updated')


@api_view('PUT', 'POST')
@role_required(DELIVERY_PARTNER)
def set_online_status(request):
    data = parse_body(request, OnlineStatusUpdate)
    updated = execute_non_query(
        f'UPDATE {PROFILE_TABLE} SET is_active_partner = %s, updated_at = %s WHERE user_id = %s',
        [data.is_active, db_now(), request.user.id],
    )
    if not updated:
        raise NotFound('Delivery partner profile does not exist')
    logger.info(f"Delivery partner {request.user.id} is now {'online' if data.is_active else 'offline'}")
    return ok({'is_active': data.is_active}, message='Status updated')
