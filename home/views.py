import logging
import time

from django.db import DatabaseError, connection
from django.http import JsonResponse

from Project.api import api_view, ok

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()
SERVICE_NAME = 'Seblak Delivery API'
API_VERSION = '1.0.0'


@api_view('GET')
def index(request):
    return ok({'service': SERVICE_NAME, 'version': API_VERSION}, message=f'{SERVICE_NAME} is running')


@api_view('GET')
def health(request):
    uptime = round(time.monotonic() - STARTED_AT, 2)
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
    except DatabaseError:
        logger.exception('Health check could not reach the database')
        return JsonResponse({
            'success': False,
            'status': 'unhealthy',
            'database': 'unreachable',
            'uptime_seconds': uptime,
        }, status=503)
    return ok({'status': 'healthy', 'database': 'connected', 'uptime_seconds': uptime, 'version': API_VERSION})
