# login/views.py
import logging

from django.contrib.auth.hashers import check_password
from django.db import transaction

from login.models import DELIVERY_PARTNER, RESTAURANT_OWNER
from login.schemas import FcmTokenUpdate, LoginRequest, ProfileUpdate
from login.sessions import deactivate_session, issue_session, public_user, role_for, stamp_last_login
from Project.api import (
    AccessDenied,
    Conflict,
    NotFound,
    ValidationFailed,
    api_view,
    current_role,
    login_required,
    ok,
    parse_body,
)
from Project.db_utils import PROFILE_TABLE, db_now, execute_fetchone, execute_non_query, get_profile_by_user
from register.views import check_phone_exists

logger = logging.getLogger(__name__)

USER_COLUMNS = 'id, username, email, password, first_name, is_active, is_staff, is_superuser'


def _get_user_row(user_id):
    return execute_fetchone(f'SELECT {USER_COLUMNS} FROM auth_user WHERE id = %s', [user_id])


@api_view('POST')
def login(request):
    data = parse_body(request, LoginRequest)
    email = data.email.lower()

    user_row = execute_fetchone(f'SELECT {USER_COLUMNS} FROM auth_user WHERE LOWER(username) = %s', [email])
    if not user_row or not check_password(data.password, user_row['password']):
        logger.info(f'Failed login for {email}')
        raise ValidationFailed('Invalid email or password')
    if not user_row['is_active']:
        raise AccessDenied('Account is suspended')

    profile = get_profile_by_user(user_row['id'])
    role = role_for(user_row, profile)
    if role is None:
        raise ValidationFailed('User profile does not exist, please contact support')

    token, expires_at = issue_session(request, user_row['id'], role)
    stamp_last_login(user_row['id'])
    logger.info(f"User {user_row['id']} logged in as {role}")
    return ok({
        'token': token,
        'expires_at': expires_at.isoformat(),
        'user': public_user(user_row, profile, role=role),
    }, message='Login successful')


@api_view('POST')
@login_required
def logout(request):
    deactivate_session(request.session_token)
    logger.info(f'User {request.user.id} logged out')
    return ok(message='Logged out')


def _profile_changes(profile, data):
    changes = {}
    if data.full_name is not None:
        changes['full_name'] = data.full_name.strip()
    if data.phone is not None and data.phone != profile['phone']:
        if check_phone_exists(data.phone, exclude_user_id=profile['user_id']):
            raise Conflict('Phone number is already registered')
        changes['phone'] = data.phone
        changes['is_verified'] = False
    if data.profile_image is not None:
        changes['profile_image'] = data.profile_image
    if data.address is not None:
        changes.update(data.address.model_dump(exclude_unset=True))

    if data.delivery_info is not None:
        if profile['role'] != DELIVERY_PARTNER:
            raise ValidationFailed('Delivery information can only be set by delivery partners')
        changes.update(data.delivery_info.model_dump(exclude_unset=True, exclude_none=True))
    if data.business_info is not None:
        if profile['role'] != RESTAURANT_OWNER:
            raise ValidationFailed('Business information can only be set by restaurant owners')
        changes.update(data.business_info.model_dump(exclude_unset=True, exclude_none=True))
    return changes


@api_view('GET', 'PUT')
@login_required
def profile(request):
    user_row = _get_user_row(request.user.id)
    current = get_profile_by_user(request.user.id)

    if request.method == 'GET':
        return ok({'user': public_user(user_row, current, role=current_role(request))})

    if not current:
        raise NotFound('User profile does not exist')
    data = parse_body(request, ProfileUpdate)
    changes = _profile_changes(current, data)
    if changes:
        assignments = [f'{column} = %s' for column in changes] + ['updated_at = %s']
        with transaction.atomic():
            execute_non_query(
                f"UPDATE {PROFILE_TABLE} SET {', '.join(assignments)} WHERE user_id = %s",
                list(changes.values()) + [db_now(), request.user.id],
            )
            if 'full_name' in changes:
                execute_non_query(
                    'UPDATE auth_user SET first_name = %s WHERE id = %s',
                    [changes['full_name'][:150], request.user.id],
                )
        logger.info(f"Profile of user {request.user.id} updated: {', '.join(sorted(changes))}")

    return ok({'user': public_user(user_row, get_profile_by_user(request.user.id), role=current_role(request))},
              message='Profile updated')


@api_view('PUT')
@login_required
def fcm_token(request):
    data = parse_body(request, FcmTokenUpdate)
    updated = execute_non_query(
        f'UPDATE {PROFILE_TABLE} SET fcm_token = %s, updated_at = %s WHERE user_id = %s',
        [data.fcm_token, db_now(), request.user.id],
    )
    if not updated:
        raise NotFound('User profile does not exist')
    return ok(message='FCM token updated')
