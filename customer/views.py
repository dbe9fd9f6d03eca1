from login.models import CUSTOMER
from order.lifecycle import Actor, cancel_order as cancel, rate_order as rate
from order.placement import create_order as place
from order.queries import fetch_order_page, get_order_detail
from order.schemas import CancelRequest, OrderCreate, OrderListQuery, RatingCreate
from Project.api import ADMIN_ROLE, api_view, ok, parse_body, parse_query, role_required
from Project.db_utils import paginate


@api_view('POST')
@role_required(CUSTOMER)
def create_order(request):
    data = parse_body(request, OrderCreate)
    order_id = place(request.user.id, data, notifier=request.notifier)
    return ok({'order': get_order_detail(order_id)}, status=201, message='Order placed')


@api_view('GET')
@role_required(CUSTOMER)
def customer_orders(request):
    query = parse_query(request, OrderListQuery)
    page, limit, offset = paginate(query.page, query.limit)
    conditions = ['o.customer_id = %s']
    params = [request.user.id]
    if query.status:
        conditions.append('o.status = %s')
        params.append(query.status)
    orders, total = fetch_order_page(conditions, params, page, limit, offset)
    return ok({'orders': orders, 'pagination': {'page': page, 'limit': limit, 'total': total}})


@api_view('PUT', 'POST')
@role_required(CUSTOMER, ADMIN_ROLE)
def cancel_order(request, order_id):
    data = parse_body(request, CancelRequest)
    cancel(order_id, Actor.from_request(request), data.reason, notifier=request.notifier)
    return ok({'order': get_order_detail(order_id)}, message='Order cancelled')


@api_view('POST')
@role_required(CUSTOMER)
def rate_order(request, order_id):
    data = parse_body(request, RatingCreate)
    result = rate(order_id, request.user.id, data.food, data.delivery, data.overall, data.comment)
    return ok(result, status=201, message='Thank you for your rating')
