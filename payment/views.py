import logging

from django.db import transaction
from django.utils import timezone

from login.models import CUSTOMER
from order import fanout
from order.lifecycle import StaleOrder, record_history
from order.models import CONFIRMED, PAYMENT_COMPLETED, PAYMENT_FAILED, PAYMENT_PENDING, PENDING
from order.queries import load_order
from payment import gateways
from payment.schemas import ProcessPaymentRequest, VerifyPaymentQuery
from Project.api import (
    ADMIN_ROLE,
    AccessDenied,
    NotFound,
    ValidationFailed,
    api_view,
    current_role,
    login_required,
    ok,
    parse_body,
    parse_query,
    role_required,
)
from Project.db_utils import (
    ORDER_TABLE,
    db_datetime,
    execute_fetchone,
    execute_non_query,
    execute_write,
    format_decimal,
    to_decimal,
)

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = (PAYMENT_PENDING, PAYMENT_FAILED)


@api_view('GET')
def payment_methods(request):
    return ok({'methods': gateways.PAYMENT_METHOD_INFO})


def _record_transaction(order_id, result, amount, when):
    execute_write(
        '''
        INSERT INTO payment_transaction (order_id, transaction_id, method, amount, success, note, created_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        ''',
        [order_id, result.transaction_id or '', result.method, amount, result.success,
         (result.note or result.error or '')[:255], db_datetime(when)],
    )


@api_view('POST')
@role_required(CUSTOMER)
def process_payment(request):
    data = parse_body(request, ProcessPaymentRequest)
    order = load_order(data.order_id)
    if not order:
        raise NotFound('Order not found')
    if order['customer_id'] != request.user.id:
        raise AccessDenied('You can only pay for your own orders')
    if order['payment_status'] not in PAYABLE_STATUSES:
        raise ValidationFailed(f"Payment is already {order['payment_status']}")
    if order['status'] != PENDING:
        raise ValidationFailed('Only pending orders can be paid')

    method = data.payment_method or order['payment_method']
    amount = to_decimal(order['total_amount'])
    result = gateways.process_payment(method, amount)
    now = timezone.now()

    with transaction.atomic():
        _record_transaction(order['id'], result, amount, now)
        if result.success:
            updated = execute_non_query(
                f'''
                UPDATE {ORDER_TABLE}
                SET payment_status = %s, payment_method = %s, status = %s, updated_at = %s
                WHERE id = %s AND status = %s AND payment_status = %s
                ''',
                [PAYMENT_COMPLETED, method, CONFIRMED, db_datetime(now), order['id'], PENDING, order['payment_status']],
            )
            if not updated:
                raise StaleOrder()
            record_history(order['id'], CONFIRMED, f'Payment completed via {method}', when=now)
        else:
            execute_non_query(
                f'UPDATE {ORDER_TABLE} SET payment_status = %s, updated_at = %s WHERE id = %s',
                [PAYMENT_FAILED, db_datetime(now), order['id']],
            )

    if not result.success:
        logger.info(f"Payment for order {order['order_number']} failed: {result.error}")
        raise ValidationFailed(result.error or 'Payment failed')

    logger.info(f"Order {order['order_number']} paid via {method}: {result.transaction_id}")
    event = {
        'order_id': order['id'],
        'order_number': order['order_number'],
        'transaction_id': result.transaction_id,
        'payment_method': method,
        'amount': format_decimal(amount),
        'status': CONFIRMED,
        'timestamp': now.isoformat(),
    }
    fanout.publish(request.notifier, [fanout.order_room(order['id'])], fanout.PAYMENT_COMPLETED, event)
    fanout.publish(request.notifier, [fanout.restaurant_room(order['restaurant_id'])], fanout.ORDER_CONFIRMED, event)

    return ok({
        'payment': {
            'order_id': order['id'],
            'transaction_id': result.transaction_id,
            'payment_method': method,
            'amount': format_decimal(amount),
            'payment_status': PAYMENT_COMPLETED,
            'note': result.note,
        }
    }, message='Payment successful')


@api_view('GET')
@login_required
def verify_payment(request, order_id):
    query = parse_query(request, VerifyPaymentQuery)
    order = load_order(order_id)
    if not order:
        raise NotFound('Order not found')
    if order['customer_id'] != request.user.id and current_role(request) != ADMIN_ROLE:
        raise AccessDenied('You can only verify your own payments')

    known = execute_fetchone(
        'SELECT id, success FROM payment_transaction WHERE order_id = %s AND transaction_id = %s',
        [order['id'], query.transaction_id],
    )
    return ok({
        'payment': {
            'order_id': order['id'],
            'transaction_id': query.transaction_id,
            'transaction_known': known is not None,
            'transaction_success': bool(known['success']) if known else False,
            'payment_status': order['payment_status'],
            'payment_method': order['payment_method'],
            'amount': format_decimal(order['total_amount']),
        }
    })
