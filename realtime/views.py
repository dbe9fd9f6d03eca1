"""
HTTP transport for the notification hub.

A client connects once to get a subscriber id, joins the rooms it is allowed
to watch and then polls ``events/<sid>``. Room membership follows the same
ownership rules as the REST endpoints.
"""
import logging

from login.models import DELIVERY_PARTNER
from order.lifecycle import Actor, is_participant
from order.queries import load_order
from Project.api import AccessDenied, NotFound, api_view, login_required, ok, parse_body
from Project.db_utils import get_restaurant
from Project.notifications import DELIVERY_SCOPE, ORDER_SCOPE, RESTAURANT_SCOPE, room_name
from realtime.schemas import RoomRequest

logger = logging.getLogger(__name__)


def _get_subscriber(request, subscriber_id):
    subscriber = request.notifier.get(subscriber_id)
    if subscriber is None or subscriber.user_id != request.user.id:
        raise NotFound('Subscriber not found')
    return subscriber


def _may_watch(actor, scope, entity_id):
    if actor.is_admin:
        return True
    if scope == ORDER_SCOPE:
        order = load_order(entity_id)
        if not order:
            raise NotFound('Order not found')
        return is_participant(order, actor)
    if scope == RESTAURANT_SCOPE:
        restaurant = get_restaurant(entity_id)
        if not restaurant:
            raise NotFound('Restaurant not found')
        return restaurant['owner_id'] == actor.user_id
    if scope == DELIVERY_SCOPE:
        return actor.role == DELIVERY_PARTNER and entity_id == actor.user_id
    return False


@api_view('POST')
@login_required
def connect(request):
    subscriber = request.notifier.connect(user_id=request.user.id)
    return ok({'subscriber_id': subscriber.subscriber_id}, status=201)


@api_view('POST')
@login_required
def join(request, subscriber_id):
    subscriber = _get_subscriber(request, subscriber_id)
    data = parse_body(request, RoomRequest)
    if not _may_watch(Actor.from_request(request), data.scope, data.id):
        raise AccessDenied('You are not allowed to watch this room')
    room = room_name(data.scope, data.id)
    request.notifier.join(subscriber.subscriber_id, room)
    return ok({'room': room, 'rooms': sorted(subscriber.rooms)})


@api_view('POST')
@login_required
def leave(request, subscriber_id):
    subscriber = _get_subscriber(request, subscriber_id)
    data = parse_body(request, RoomRequest)
    room = room_name(data.scope, data.id)
    request.notifier.leave(subscriber.subscriber_id, room)
    return ok({'room': room, 'rooms': sorted(subscriber.rooms)})


@api_view('GET')
@login_required
def events(request, subscriber_id):
    subscriber = _get_subscriber(request, subscriber_id)
    dropped = subscriber.dropped
    return ok({'events': request.notifier.poll(subscriber.subscriber_id), 'dropped': dropped})


@api_view('DELETE', 'POST')
@login_required
def disconnect(request, subscriber_id):
    _get_subscriber(request, subscriber_id)
    request.notifier.disconnect(subscriber_id)
    return ok(message='Disconnected')
