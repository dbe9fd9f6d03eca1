import logging

from Project.notifications import DELIVERY_SCOPE, ORDER_SCOPE, RESTAURANT_SCOPE, room_name

logger = logging.getLogger(__name__)

NEW_ORDER = 'new_order'
ORDER_STATUS_UPDATED = 'order_status_updated'
ORDER_CANCELLED = 'order_cancelled'
ORDER_ASSIGNED = 'order_assigned'
PAYMENT_COMPLETED = 'payment_completed'
ORDER_CONFIRMED = 'order_confirmed'


def order_room(order_id):
    return room_name(ORDER_SCOPE, order_id)


def restaurant_room(restaurant_id):
    return room_name(RESTAURANT_SCOPE, restaurant_id)


def delivery_room(partner_id):
    return room_name(DELIVERY_SCOPE, partner_id)


def publish(notifier, rooms, event, data):
    """Emit ``event`` to each room after the write has been committed.

    Delivery is best effort: a missing hub or a failing emit is logged and the
    caller carries on. Returns the number of subscribers reached.
    """
    if notifier is None:
        logger.warning(f'No notifier available, dropping {event}')
        return 0
    reached = 0
    for room in rooms:
        try:
            reached += notifier.emit(room, event, data)
        except Exception:
            logger.warning(f'Failed to emit {event} to {room}', exc_info=True)
    return reached
