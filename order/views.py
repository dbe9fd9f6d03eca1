from Project.api import AccessDenied, NotFound, api_view, login_required, ok, parse_body
from order.lifecycle import Actor, is_participant, transition_order
from order.queries import get_order_detail, load_order
from order.schemas import StatusUpdate


@api_view('GET')
@login_required
def order_detail(request, order_id):
    order = load_order(order_id)
    if not order:
        raise NotFound('Order not found')
    if not is_participant(order, Actor.from_request(request)):
        raise AccessDenied('You are not allowed to view this order')
    return ok({'order': get_order_detail(order_id, row=order)})


@api_view('PUT', 'PATCH')
@login_required
def update_order_status(request, order_id):
    data = parse_body(request, StatusUpdate)
    transition_order(
        order_id,
        Actor.from_request(request),
        data.status,
        notifier=request.notifier,
        reason=data.reason,
        notes=data.notes,
    )
    return ok({'order': get_order_detail(order_id)}, message='Order status updated')
