import json
import logging
from functools import wraps

from django.db import IntegrityError
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from pydantic import ValidationError

logger = logging.getLogger(__name__)

ADMIN_ROLE = 'admin'


class ApiError(Exception):
    """An error that maps directly onto a JSON error response."""

    status = 400
    default_message = 'Bad request'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def as_response(self):
        payload = {'success': False, 'message': self.message}
        if self.details is not None:
            payload['details'] = self.details
        return JsonResponse(payload, status=self.status)


class ValidationFailed(ApiError):
    default_message = 'Validation error'


class Unauthorized(ApiError):
    status = 401
    default_message = 'Authentication required'


class AccessDenied(ApiError):
    status = 403
    default_message = 'Access denied'


class NotFound(ApiError):
    status = 404
    default_message = 'Not found'


class Conflict(ApiError):
    default_message = 'Duplicate field value'


def _validation_details(exc):
    return [{
        'field': '.'.join(str(part) for part in error['loc']),
        'message': error['msg'],
    } for error in exc.errors()]


def parse_body(request, schema):
    try:
        data = json.loads(request.body or b'{}')
    except (TypeError, ValueError):
        raise ValidationFailed('Malformed JSON body')
    if not isinstance(data, dict):
        raise ValidationFailed('JSON body must be an object')
    return schema.model_validate(data)


def parse_query(request, schema):
    return schema.model_validate({key: value for key, value in request.GET.items() if value != ''})


def ok(payload=None, status=200, message=None):
    body = {'success': True}
    if message:
        body['message'] = message
    if payload:
        body.update(payload)
    return JsonResponse(body, status=status)


def api_view(*methods):
    """Wrap a JSON endpoint: method check, CSRF exemption and error mapping."""
    allowed = {method.upper() for method in methods} or {'GET'}

    def decorator(view):
        @csrf_exempt
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.method not in allowed:
                return JsonResponse({'success': False, 'message': 'Invalid request method'}, status=405)
            try:
                return view(request, *args, **kwargs)
            except ApiError as exc:
                return exc.as_response()
            except ValidationError as exc:
                return ValidationFailed(details=_validation_details(exc)).as_response()
            except IntegrityError:
                logger.warning(f'{view.__name__}: integrity error', exc_info=True)
                return Conflict().as_response()
            except Exception:
                logger.exception(f'{view.__name__} failed')
                return JsonResponse({'success': False, 'message': 'Internal server error'}, status=500)
        return wrapper
    return decorator


def current_role(request):
    return getattr(request, 'user_role', None)


def role_required(*roles):
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                raise Unauthorized()
            if roles and current_role(request) not in roles:
                raise AccessDenied()
            return view(request, *args, **kwargs)
        return wrapper
    return decorator


def login_required(view):
    return role_required()(view)
