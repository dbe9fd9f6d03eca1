import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from login.models import ADMIN, DELIVERY_PARTNER, RESTAURANT_OWNER
from Project.db_utils import (
    db_datetime,
    db_now,
    execute_non_query,
    execute_write,
    format_datetime,
)

logger = logging.getLogger(__name__)


def role_for(user_row, profile):
    """Role claim carried by a token: staff accounts act as admin."""
    if user_row.get('is_staff') or user_row.get('is_superuser'):
        return ADMIN
    return profile['role'] if profile else None


def _client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def issue_session(request, user_id, role):
    token = secrets.token_hex(32)
    now = timezone.now()
    expires_at = now + timedelta(days=settings.SESSION_TOKEN_TTL_DAYS)
    execute_write(
        '''
        INSERT INTO user_session (user_id, user_type, session_token, user_agent, client_ip, is_active, created_at, expires_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        ''',
        [
            user_id, role, token,
            (request.META.get('HTTP_USER_AGENT') or '')[:255],
            _client_ip(request),
            True,
            db_datetime(now),
            db_datetime(expires_at),
        ],
    )
    logger.info(f'Issued {role} session for user {user_id}')
    return token, expires_at


def deactivate_session(token):
    return execute_non_query(
        'UPDATE user_session SET is_active = %s WHERE session_token = %s',
        [False, token],
    )


def deactivate_user_sessions(user_id):
    return execute_non_query(
        'UPDATE user_session SET is_active = %s WHERE user_id = %s AND is_active = %s',
        [False, user_id, True],
    )


def stamp_last_login(user_id):
    execute_non_query('UPDATE auth_user SET last_login = %s WHERE id = %s', [db_now(), user_id])


def public_user(user_row, profile, role=None):
    """User payload safe to return to clients; never includes the password."""
    payload = {
        'id': user_row['id'],
        'email': user_row.get('email'),
        'role': role or role_for(user_row, profile),
        'is_active': bool(user_row.get('is_active', user_row.get('account_active', True))),
    }
    if not profile:
        payload['full_name'] = user_row.get('first_name') or user_row.get('username')
        return payload

    payload.update({
        'full_name': profile['full_name'],
        'phone': profile['phone'],
        'is_verified': bool(profile['is_verified']),
        'profile_image': profile['profile_image'],
        'address': {
            'street': profile['street'],
            'city': profile['city'],
            'province': profile['province'],
            'postal_code': profile['postal_code'],
            'latitude': profile['latitude'],
            'longitude': profile['longitude'],
        },
        'created_at': format_datetime(profile['created_at']),
    })
    if profile['role'] == DELIVERY_PARTNER:
        payload['delivery_info'] = {
            'vehicle_type': profile['vehicle_type'],
            'vehicle_number': profile['vehicle_number'],
            'license_number': profile['license_number'],
            'is_active': bool(profile['is_active_partner']),
            'current_latitude': profile['current_latitude'],
            'current_longitude': profile['current_longitude'],
        }
    if profile['role'] == RESTAURANT_OWNER:
        payload['business_info'] = {
            'business_license': profile['business_license'],
            'tax_number': profile['tax_number'],
        }
    return payload
