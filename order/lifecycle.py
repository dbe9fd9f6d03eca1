"""
Order status machine.

Which role may move an order to which status lives in ``ROLE_TARGETS``;
``authorize_transition`` checks ownership first (403) and then the target
(400). Writes are conditional on the status that was authorized so two
concurrent updates cannot both succeed, and notifications go out only after
the write.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.utils import timezone

from login.models import ADMIN, CUSTOMER, DELIVERY_PARTNER, RESTAURANT_OWNER
from order import fanout
from order.models import (
    ASSIGNED,
    CANCELLED,
    CONFIRMED,
    DELIVERED,
    ON_THE_WAY,
    ORDER_STATUSES,
    PAYMENT_COMPLETED,
    PENDING,
    PICKED_UP,
    PREPARING,
    READY_FOR_PICKUP,
    REFUNDED,
)
from order.queries import ORDER_HISTORY_TABLE, ORDER_RATING_TABLE, load_order
from Project.api import AccessDenied, NotFound, ValidationFailed
from Project.db_utils import (
    ORDER_TABLE,
    RESTAURANT_TABLE,
    db_datetime,
    db_now,
    execute_fetchone,
    execute_non_query,
    execute_write,
    get_profile_by_user,
)

logger = logging.getLogger(__name__)

ROLE_TARGETS = {
    RESTAURANT_OWNER: frozenset({CONFIRMED, PREPARING, READY_FOR_PICKUP}),
    DELIVERY_PARTNER: frozenset({PICKED_UP, ON_THE_WAY, DELIVERED}),
    CUSTOMER: frozenset({CANCELLED}),
    ADMIN: frozenset(ORDER_STATUSES),
}

# forward path; cancelled and refunded are side exits
STATUS_SEQUENCE = (PENDING, CONFIRMED, PREPARING, READY_FOR_PICKUP, ASSIGNED, PICKED_UP, ON_THE_WAY, DELIVERED)
TERMINAL_STATUSES = frozenset({DELIVERED, CANCELLED, REFUNDED})
CUSTOMER_CANCELLABLE = frozenset({PENDING, CONFIRMED})
ACTIVE_DELIVERY_STATUSES = (ASSIGNED, PICKED_UP, ON_THE_WAY)
MIN_CANCEL_REASON_LENGTH = 5


class InvalidTransition(ValidationFailed):
    default_message = 'Invalid status transition'


class PaymentRequired(ValidationFailed):
    default_message = 'Payment must be completed before the order is confirmed'


class OrderNotAvailable(ValidationFailed):
    default_message = 'Order not available for pickup'


class StaleOrder(ValidationFailed):
    default_message = 'Order was updated by someone else, please retry'


class PartnerInactive(ValidationFailed):
    default_message = 'Delivery partner is not active'


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: str

    @classmethod
    def from_request(cls, request):
        return cls(user_id=request.user.id, role=getattr(request, 'user_role', None))

    @property
    def is_admin(self):
        return self.role == ADMIN


def allowed_targets(role):
    return ROLE_TARGETS.get(role, frozenset())


def is_participant(order, actor):
    """Whether ``actor`` may see ``order`` at all."""
    if actor.is_admin:
        return True
    if actor.role == CUSTOMER:
        return order['customer_id'] == actor.user_id
    if actor.role == RESTAURANT_OWNER:
        return order['restaurant_owner_id'] == actor.user_id
    if actor.role == DELIVERY_PARTNER:
        return order['delivery_partner_id'] == actor.user_id
    return False


def authorize_transition(order, actor, target):
    if not is_participant(order, actor):
        raise AccessDenied('You are not allowed to update this order')

    if target not in allowed_targets(actor.role):
        raise InvalidTransition(f'{actor.role} cannot set status {target}')

    current = order['status']
    if current == target:
        raise InvalidTransition(f'Order is already {current}')
    if actor.is_admin:
        return

    if current in TERMINAL_STATUSES:
        raise InvalidTransition(f'Order is already {current}')

    if actor.role == CUSTOMER and current not in CUSTOMER_CANCELLABLE:
        raise InvalidTransition('Order can only be cancelled while pending or confirmed')

    if current in STATUS_SEQUENCE and target in STATUS_SEQUENCE:
        if STATUS_SEQUENCE.index(target) < STATUS_SEQUENCE.index(current):
            raise InvalidTransition(f'Cannot move order from {current} back to {target}')

    if target == CONFIRMED and order['payment_status'] != PAYMENT_COMPLETED:
        raise PaymentRequired()


def record_history(order_id, status, notes='', when=None):
    execute_write(
        f'INSERT INTO {ORDER_HISTORY_TABLE} (order_id, status, timestamp, notes) VALUES (%s, %s, %s, %s)',
        [order_id, status, db_datetime(when or timezone.now()), notes or ''],
    )


def _get_order_or_404(order_id):
    order = load_order(order_id)
    if not order:
        raise NotFound('Order not found')
    return order


def _apply_transition(order, actor, target, reason=None, notes=''):
    """Conditional status write plus history row; caller owns the transaction."""
    now = timezone.now()
    assignments = ['status = %s', 'updated_at = %s']
    params = [target, db_datetime(now)]
    conditions = ['id = %s', 'status = %s']
    condition_params = [order['id'], order['status']]

    if target == DELIVERED:
        assignments.append('actual_delivery_time = %s')
        params.append(db_datetime(now))
    if target == CANCELLED and reason:
        assignments.append('cancellation_reason = %s')
        params.append(reason.strip())

    updated = execute_non_query(
        f"UPDATE {ORDER_TABLE} SET {', '.join(assignments)} WHERE {' AND '.join(conditions)}",
        params + condition_params,
    )
    if not updated:
        raise StaleOrder()

    record_history(order['id'], target, notes or reason or '', when=now)
    logger.info(f"Order {order['order_number']}: {order['status']} -> {target} by {actor.role} {actor.user_id}")
    return now


def _status_payload(order, target, actor, when):
    return {
        'order_id': order['id'],
        'order_number': order['order_number'],
        'status': target,
        'previous_status': order['status'],
        'updated_by': actor.role,
        'timestamp': when.isoformat(),
    }


def transition_order(order_id, actor, target, notifier=None, reason=None, notes=''):
    """Move an order to ``target`` on behalf of ``actor`` and notify the order room."""
    with transaction.atomic():
        order = _get_order_or_404(order_id)
        authorize_transition(order, actor, target)
        when = _apply_transition(order, actor, target, reason=reason, notes=notes)

    fanout.publish(notifier, [fanout.order_room(order['id'])], fanout.ORDER_STATUS_UPDATED,
                   _status_payload(order, target, actor, when))
    return load_order(order_id)


def cancel_order(order_id, actor, reason, notifier=None):
    reason = (reason or '').strip()
    if len(reason) < MIN_CANCEL_REASON_LENGTH:
        raise ValidationFailed(f'Cancellation reason must be at least {MIN_CANCEL_REASON_LENGTH} characters')

    with transaction.atomic():
        order = _get_order_or_404(order_id)
        authorize_transition(order, actor, CANCELLED)
        when = _apply_transition(order, actor, CANCELLED, reason=reason)

    payload = _status_payload(order, CANCELLED, actor, when)
    payload['reason'] = reason
    fanout.publish(
        notifier,
        [fanout.order_room(order['id']), fanout.restaurant_room(order['restaurant_id'])],
        fanout.ORDER_CANCELLED,
        payload,
    )
    return load_order(order_id)


def accept_order(order_id, partner_id, notifier=None):
    """Claim a ready order for a delivery partner in one conditional update."""
    profile = get_profile_by_user(partner_id)
    if not profile or profile['role'] != DELIVERY_PARTNER:
        raise AccessDenied('Only delivery partners can accept orders')
    if not profile['is_active_partner']:
        raise PartnerInactive()

    now = timezone.now()
    with transaction.atomic():
        claimed = execute_non_query(
            f'''
            UPDATE {ORDER_TABLE}
            SET delivery_partner_id = %s, status = %s, updated_at = %s
            WHERE id = %s AND status = %s AND delivery_partner_id IS NULL
            ''',
            [partner_id, ASSIGNED, db_datetime(now), order_id, READY_FOR_PICKUP],
        )
        if not claimed:
            _get_order_or_404(order_id)
            raise OrderNotAvailable()
        record_history(order_id, ASSIGNED, 'Accepted by delivery partner', when=now)

    order = load_order(order_id)
    logger.info(f"Order {order['order_number']} accepted by delivery partner {partner_id}")
    fanout.publish(
        notifier,
        [fanout.order_room(order_id), fanout.delivery_room(partner_id)],
        fanout.ORDER_ASSIGNED,
        {
            'order_id': order_id,
            'order_number': order['order_number'],
            'delivery_partner_id': partner_id,
            'partner_name': profile['full_name'],
            'status': ASSIGNED,
            'timestamp': now.isoformat(),
        },
    )
    return order


def assign_partner(order_id, partner_id, notifier=None):
    """Admin hand-off of an order to a delivery partner."""
    profile = get_profile_by_user(partner_id)
    if not profile or profile['role'] != DELIVERY_PARTNER:
        raise NotFound('Delivery partner not found')

    now = timezone.now()
    with transaction.atomic():
        order = _get_order_or_404(order_id)
        if order['status'] in TERMINAL_STATUSES:
            raise InvalidTransition(f"Order is already {order['status']}")
        status = ASSIGNED if order['status'] == READY_FOR_PICKUP else order['status']
        updated = execute_non_query(
            f'''
            UPDATE {ORDER_TABLE}
            SET delivery_partner_id = %s, status = %s, updated_at = %s
            WHERE id = %s AND status = %s
            ''',
            [partner_id, status, db_datetime(now), order_id, order['status']],
        )
        if not updated:
            raise StaleOrder()
        if status != order['status']:
            record_history(order_id, status, 'Assigned by admin', when=now)

    logger.info(f"Order {order['order_number']} assigned to delivery partner {partner_id} by admin")
    fanout.publish(
        notifier,
        [fanout.order_room(order_id), fanout.delivery_room(partner_id)],
        fanout.ORDER_ASSIGNED,
        {
            'order_id': order_id,
            'order_number': order['order_number'],
            'delivery_partner_id': partner_id,
            'partner_name': profile['full_name'],
            'status': status,
            'timestamp': now.isoformat(),
        },
    )
    return load_order(order_id)


def recompute_restaurant_rating(restaurant_id):
    row = execute_fetchone(
        f'''
        SELECT COUNT(r.id) AS total_reviews, AVG(r.overall) AS average
        FROM {ORDER_RATING_TABLE} r
        JOIN {ORDER_TABLE} o ON r.order_id = o.id
        WHERE o.restaurant_id = %s
        ''',
        [restaurant_id],
    )
    total = row['total_reviews'] or 0
    average = Decimal(str(row['average'])) if total else Decimal('0')
    average = average.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    execute_non_query(
        f'UPDATE {RESTAURANT_TABLE} SET rating = %s, total_reviews = %s, updated_at = %s WHERE id = %s',
        [average, total, db_now(), restaurant_id],
    )
    return average, total


def rate_order(order_id, customer_id, food, delivery, overall, comment=''):
    with transaction.atomic():
        order = _get_order_or_404(order_id)
        if order['customer_id'] != customer_id:
            raise AccessDenied('You can only rate your own orders')
        if order['status'] != DELIVERED:
            raise ValidationFailed('Only delivered orders can be rated')
        existing = execute_fetchone(f'SELECT id FROM {ORDER_RATING_TABLE} WHERE order_id = %s', [order_id])
        if existing:
            raise ValidationFailed('Order has already been rated')

        execute_write(
            f'''
            INSERT INTO {ORDER_RATING_TABLE} (order_id, food, delivery, overall, comment, created_at)
            VALUES (%s, %s, %s, %s, %s, %s)
            ''',
            [order_id, food, delivery, overall, comment or '', db_now()],
        )
        average, total = recompute_restaurant_rating(order['restaurant_id'])

    logger.info(f"Order {order['order_number']} rated {overall}; restaurant {order['restaurant_id']} now {average} over {total}")
    return {'restaurant_rating': str(average), 'total_reviews': total}
