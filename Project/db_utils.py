from datetime import timezone as dt_timezone
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import connection
from django.utils import timezone
from django.utils.dateparse import parse_datetime

CENT = Decimal('0.01')


def dictfetchall(cursor):
    columns = [col[0] for col in cursor.description]
    return [dict(zip(columns, row)) for row in cursor.fetchall()]


def dictfetchone(cursor):
    row = cursor.fetchone()
    if row is None:
        return None
    columns = [col[0] for col in cursor.description]
    return dict(zip(columns, row))


def execute_fetchall(query, params=None):
    with connection.cursor() as cursor:
        cursor.execute(query, params or [])
        return dictfetchall(cursor)


def execute_fetchone(query, params=None):
    with connection.cursor() as cursor:
        cursor.execute(query, params or [])
        return dictfetchone(cursor)


def execute_write(query, params=None):
    with connection.cursor() as cursor:
        cursor.execute(query, params or [])
        return cursor.lastrowid


def execute_non_query(query, params=None):
    with connection.cursor() as cursor:
        cursor.execute(query, params or [])
        return cursor.rowcount


def quote_table(name):
    return connection.ops.quote_name(name)


def build_in_clause(values):
    return ','.join(['%s'] * len(values))


def db_datetime(value):
    """Adapt an aware datetime the same way the ORM stores it."""
    if value is None:
        return None
    return connection.ops.adapt_datetimefield_value(value)


def db_now():
    return db_datetime(timezone.now())


def read_datetime(value):
    """Normalise a datetime column read through a raw cursor to an aware value."""
    if value is None or value == '':
        return None
    if isinstance(value, str):
        value = parse_datetime(value)
        if value is None:
            return None
    if settings.USE_TZ and timezone.is_naive(value):
        value = timezone.make_aware(value, dt_timezone.utc)
    return value


def format_datetime(value):
    value = read_datetime(value)
    return value.isoformat() if value else None


def to_decimal(value):
    if value is None or value == '':
        return Decimal('0')
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_decimal(value):
    return str(to_decimal(value))


def paginate(page, limit, default_limit=10, max_limit=100):
    try:
        page = max(int(page or 1), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(limit or default_limit)
    except (TypeError, ValueError):
        limit = default_limit
    limit = min(max(limit, 1), max_limit)
    return page, limit, (page - 1) * limit


PROFILE_TABLE = 'user_profile'
RESTAURANT_TABLE = quote_table('restaurant')
ORDER_TABLE = quote_table('order')


def get_profile_by_user(user_id):
    query = f'''
        SELECT up.*,
               u.email,
               u.is_active AS account_active,
               u.is_staff,
               u.last_login
        FROM {PROFILE_TABLE} up
        JOIN auth_user u ON up.user_id = u.id
        WHERE up.user_id = %s
    '''
    return execute_fetchone(query, [user_id])


def get_restaurant(restaurant_id):
    return execute_fetchone(f'SELECT * FROM {RESTAURANT_TABLE} WHERE id = %s', [restaurant_id])


def get_restaurant_for_owner(restaurant_id, owner_id):
    query = f'SELECT * FROM {RESTAURANT_TABLE} WHERE id = %s AND owner_id = %s'
    return execute_fetchone(query, [restaurant_id, owner_id])
