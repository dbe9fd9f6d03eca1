# register/views.py
import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.db import connection, transaction
from django.utils import timezone

from login.models import DELIVERY_PARTNER, RESTAURANT_OWNER
from login.sessions import issue_session, public_user
from Project.api import Conflict, ValidationFailed, api_view, ok, parse_body, parse_query
from Project.db_utils import (
    PROFILE_TABLE,
    db_datetime,
    db_now,
    execute_fetchone,
    execute_non_query,
    execute_write,
    get_profile_by_user,
)
from register.schemas import AvailabilityQuery, RegisterRequest, SendOtpRequest, VerifyOtpRequest

logger = logging.getLogger(__name__)

OTP_LENGTH = 6


def check_email_exists(email):
    if not email:
        return False
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1 FROM auth_user WHERE LOWER(username) = LOWER(%s) LIMIT 1", [email])
        return cursor.fetchone() is not None


def check_phone_exists(phone, exclude_user_id=None):
    if not phone:
        return False
    query = f'SELECT user_id FROM {PROFILE_TABLE} WHERE phone = %s'
    params = [phone]
    if exclude_user_id is not None:
        query += ' AND user_id <> %s'
        params.append(exclude_user_id)
    return execute_fetchone(query, params) is not None


def create_user_with_sql(email, password, full_name):
    """Insert the auth_user row with a salted password hash and return its id."""
    return execute_write(
        """
        INSERT INTO auth_user
            (username, email, password, first_name, last_name, is_superuser, is_staff, is_active, date_joined)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        """,
        [email, email, make_password(password), full_name[:150], '', False, False, True, db_now()],
    )


def create_user_profile(user_id, data):
    address = data.address
    delivery = data.delivery_info
    now = db_now()
    return execute_write(
        f'''
        INSERT INTO {PROFILE_TABLE}
            (user_id, role, full_name, phone, is_verified, profile_image,
             street, city, province, postal_code, latitude, longitude,
             vehicle_type, vehicle_number, license_number, is_active_partner,
             business_license, tax_number, fcm_token, created_at, updated_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        ''',
        [
            user_id, data.role, data.full_name.strip(), data.phone, False, '',
            address.street if address else '',
            address.city if address else '',
            address.province if address else '',
            address.postal_code if address else '',
            address.latitude if address else None,
            address.longitude if address else None,
            (delivery.vehicle_type or '') if delivery and data.role == DELIVERY_PARTNER else '',
            (delivery.vehicle_number or '') if delivery and data.role == DELIVERY_PARTNER else '',
            (delivery.license_number or '') if delivery and data.role == DELIVERY_PARTNER else '',
            False,
            data.business_license if data.role == RESTAURANT_OWNER else '',
            data.tax_number if data.role == RESTAURANT_OWNER else '',
            '',
            now,
            now,
        ],
    )


@api_view('POST')
def register(request):
    data = parse_body(request, RegisterRequest)
    email = data.email.lower()
    logger.info(f"Registration request: email={email}, role={data.role}")

    if check_email_exists(email):
        raise Conflict('Email is already registered')
    if check_phone_exists(data.phone):
        raise Conflict('Phone number is already registered')

    with transaction.atomic():
        user_id = create_user_with_sql(email, data.password, data.full_name)
        create_user_profile(user_id, data)
        token, expires_at = issue_session(request, user_id, data.role)

    logger.info(f"User {user_id} registered as {data.role}")
    user_row = execute_fetchone('SELECT id, email, is_active, is_staff, is_superuser FROM auth_user WHERE id = %s', [user_id])
    return ok({
        'token': token,
        'expires_at': expires_at.isoformat(),
        'user': public_user(user_row, get_profile_by_user(user_id)),
    }, status=201, message='Registration successful')


@api_view('GET')
def check_availability(request):
    query = parse_query(request, AvailabilityQuery)
    if not query.email and not query.phone:
        raise ValidationFailed('Provide an email or a phone number')
    payload = {}
    if query.email:
        payload['email_available'] = not check_email_exists(query.email.lower())
    if query.phone:
        payload['phone_available'] = not check_phone_exists(query.phone)
    return ok(payload)


def generate_otp_code():
    return f'{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}'


def send_sms(phone, message):
    # no SMS gateway is wired up; the message only reaches the log
    logger.info(f'SMS to {phone}: {message}')


@api_view('POST')
def send_otp(request):
    data = parse_body(request, SendOtpRequest)
    code = generate_otp_code()
    now = timezone.now()
    expires_at = now + timedelta(seconds=settings.OTP_TTL_SECONDS)

    with transaction.atomic():
        execute_non_query('UPDATE otp_code SET is_used = %s WHERE phone = %s AND is_used = %s', [True, data.phone, False])
        execute_write(
            '''
            INSERT INTO otp_code (phone, code_hash, is_used, created_at, expires_at)
            VALUES (%s, %s, %s, %s, %s)
            ''',
            [data.phone, make_password(code), False, db_datetime(now), db_datetime(expires_at)],
        )

    send_sms(data.phone, f'Kode verifikasi Seblak kamu: {code}')
    logger.info(f'OTP issued for {data.phone}')
    return ok({'expires_in': settings.OTP_TTL_SECONDS}, message='OTP sent')


@api_view('POST')
def verify_otp(request):
    data = parse_body(request, VerifyOtpRequest)
    otp = execute_fetchone(
        '''
        SELECT id, code_hash
        FROM otp_code
        WHERE phone = %s AND is_used = %s AND expires_at > %s
        ORDER BY id DESC
        LIMIT 1
        ''',
        [data.phone, False, db_now()],
    )
    if not otp or not check_password(data.code, otp['code_hash']):
        raise ValidationFailed('Invalid or expired OTP')

    with transaction.atomic():
        execute_non_query('UPDATE otp_code SET is_used = %s WHERE id = %s', [True, otp['id']])
        verified = execute_non_query(
            f'UPDATE {PROFILE_TABLE} SET is_verified = %s, updated_at = %s WHERE phone = %s',
            [True, db_now(), data.phone],
        )

    logger.info(f'Phone {data.phone} verified')
    return ok({'verified': True, 'profile_updated': bool(verified)}, message='Phone number verified')
