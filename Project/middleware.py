from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils.module_loading import import_string

from Project.db_utils import db_now, execute_fetchone

USER_FIELDS = (
    "id", "password", "last_login", "is_superuser", "username", "first_name",
    "last_name", "email", "is_staff", "is_active", "date_joined",
)


class BearerTokenMiddleware:
    """
    Authenticate API requests with an opaque session token.

    The token is read from ``Authorization: Bearer <token>`` first, then from
    the ``X-Session-Token`` header, the ``session_token`` query parameter and
    finally the session cookie. A matching active, unexpired ``user_session``
    row of an active account sets ``request.user`` and ``request.user_role``
    (the role claim recorded when the token was issued).
    """

    COOKIE_NAME = "seblak_session_token"
    AUTH_HEADER = "HTTP_AUTHORIZATION"
    HEADER_NAME = "HTTP_X_SESSION_TOKEN"
    QUERY_PARAM = "session_token"

    def __init__(self, get_response):
        self.get_response = get_response
        self.user_model = get_user_model()

    def __call__(self, request):
        request.user_role = None
        token = self.extract_token(request)
        record = self.lookup(token) if token else None

        if record:
            user = self.build_user(record)
            request.user = user
            request._cached_user = user  # noqa: SLF001
            request.session_token = token
            request.user_role = record["user_type"]

        response = self.get_response(request)

        if token and not record:
            response.delete_cookie(self.COOKIE_NAME)
        return response

    def lookup(self, token):
        columns = ", ".join(f"u.{name}" for name in USER_FIELDS)
        query = f"""
            SELECT s.user_type, {columns}
            FROM user_session s
            JOIN auth_user u ON u.id = s.user_id
            WHERE s.session_token = %s
              AND s.is_active = %s
              AND s.expires_at > %s
              AND u.is_active = %s
            LIMIT 1
        """
        return execute_fetchone(query, [token, True, db_now(), True])

    def build_user(self, record):
        user = self.user_model(**{name: record[name] for name in USER_FIELDS})
        user._state.adding = False  # type: ignore[attr-defined]
        user._state.db = "default"  # type: ignore[attr-defined]
        user.backend = "django.contrib.auth.backends.ModelBackend"
        return user

    def extract_token(self, request):
        header = request.META.get(self.AUTH_HEADER, "")
        if header.lower().startswith("bearer "):
            return header[7:].strip() or None
        return (
            request.META.get(self.HEADER_NAME)
            or request.GET.get(self.QUERY_PARAM)
            or request.COOKIES.get(self.COOKIE_NAME)
        )


class NotificationHubMiddleware:
    """Build the publish/subscribe hub once per handler and hand it to views."""

    def __init__(self, get_response):
        self.get_response = get_response
        hub_class = import_string(settings.NOTIFICATION_HUB_CLASS)
        self.hub = hub_class(max_pending=settings.NOTIFICATION_MAX_PENDING)

    def __call__(self, request):
        request.notifier = self.hub
        return self.get_response(request)
