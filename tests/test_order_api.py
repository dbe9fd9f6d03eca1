import re

import pytest

from tests.conftest import order_payload

pytestmark = pytest.mark.django_db


def test_single_portion_is_below_minimum(api, customer, restaurant, menu_item):
    response = api.post('/api/orders', order_payload(restaurant['id'], menu_item['id'], quantity=1),
                        token=customer['token'])
    assert response.status_code == 400
    assert response.json()['message'].startswith('Minimum order amount is')
    assert api.get('/api/orders/my-orders', token=customer['token']).json()['orders'] == []


def test_two_portions_are_priced_server_side(api, customer, restaurant, menu_item, place_order):
    order = place_order(customer, quantity=2)
    assert re.fullmatch(r'SEB\d{8}\d{5}', order['order_number'])
    assert order['status'] == 'pending'
    assert order['payment_status'] == 'pending'
    assert order['subtotal'] == '26000.00'
    assert order['tax'] == '2600.00'
    assert order['delivery_fee'] == '5000.00'
    assert order['discount'] == '0.00'
    assert order['total_amount'] == '33600.00'
    assert order['items'][0]['unit_price'] == '13000.00'
    assert order['customer_name'] == 'Customer 1'
    assert order['estimated_delivery_time'] is not None
    assert [entry['status'] for entry in order['status_history']] == ['pending']
    assert order['can_rate'] is False


def test_unavailable_topping_is_dropped(api, customer, menu_item, place_order):
    ceker, sosis = (topping['id'] for topping in menu_item['toppings'])
    order = place_order(customer, quantity=1, toppings=[ceker, sosis])
    line = order['items'][0]
    assert [topping['name'] for topping in line['toppings']] == ['Ceker']
    assert line['unit_price'] == '16000.00'
    assert order['subtotal'] == '16000.00'


def test_promo_code(api, customer, place_order):
    order = place_order(customer, promo_code='seblak10')
    assert order['discount'] == '2600.00'
    assert order['total_amount'] == '31000.00'


def test_unknown_item_is_rejected(api, customer, restaurant):
    response = api.post('/api/orders', order_payload(restaurant['id'], 9999), token=customer['token'])
    assert response.status_code == 400


def test_item_from_another_restaurant_is_rejected(api, customer, owner, make_restaurant, menu_item):
    other = make_restaurant(owner, name='Seblak Cabang Dua')
    response = api.post('/api/orders', order_payload(other['id'], menu_item['id']), token=customer['token'])
    assert response.status_code == 400


def test_only_customers_place_orders(api, owner, restaurant, menu_item):
    response = api.post('/api/orders', order_payload(restaurant['id'], menu_item['id']), token=owner['token'])
    assert response.status_code == 403


def test_inactive_restaurant_takes_no_orders(api, owner, customer, restaurant, menu_item):
    api.put(f"/api/restaurants/{restaurant['id']}", {'is_active': False}, token=owner['token'])
    response = api.post('/api/orders', order_payload(restaurant['id'], menu_item['id']), token=customer['token'])
    assert response.status_code == 404


def test_new_order_is_announced_to_restaurant(api, owner, customer, restaurant, place_order):
    sid = api.post('/api/realtime/connect', token=owner['token']).json()['subscriber_id']
    api.post(f'/api/realtime/{sid}/join', {'scope': 'restaurant', 'id': restaurant['id']}, token=owner['token'])

    order = place_order(customer)

    events = api.get(f'/api/realtime/{sid}/events', token=owner['token']).json()['events']
    assert [event['event'] for event in events] == ['new_order']
    assert events[0]['room'] == f"restaurant_{restaurant['id']}"
    assert events[0]['data']['order_number'] == order['order_number']
    assert events[0]['data']['total_amount'] == '33600.00'


def test_order_detail_visibility(api, customer, owner, make_user, partner, place_order):
    order = place_order(customer)
    url = f"/api/orders/{order['id']}"
    assert api.get(url, token=customer['token']).status_code == 200
    assert api.get(url, token=owner['token']).status_code == 200
    assert api.get(url, token=make_user('customer')['token']).status_code == 403
    assert api.get(url, token=partner['token']).status_code == 403
    assert api.get('/api/orders/424242', token=customer['token']).status_code == 404


def test_my_orders_pagination(api, customer, make_user, place_order):
    for quantity in (2, 3, 4):
        place_order(customer, quantity=quantity)
    place_order(make_user('customer'))

    body = api.get('/api/orders/my-orders', token=customer['token'], limit=2).json()
    assert body['pagination'] == {'page': 1, 'limit': 2, 'total': 3}
    assert len(body['orders']) == 2
    page_two = api.get('/api/orders/my-orders', token=customer['token'], limit=2, page=2).json()
    assert len(page_two['orders']) == 1


def test_owner_cannot_jump_to_picked_up(api, owner, customer, place_order):
    order = place_order(customer)
    response = api.put(f"/api/orders/{order['id']}/status", {'status': 'picked_up'}, token=owner['token'])
    assert response.status_code == 400
    detail = api.get(f"/api/orders/{order['id']}", token=customer['token']).json()['order']
    assert detail['status'] == 'pending'


def test_owner_cannot_confirm_unpaid_order(api, owner, customer, place_order):
    order = place_order(customer)
    response = api.put(f"/api/orders/{order['id']}/status", {'status': 'confirmed'}, token=owner['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Payment must be completed before the order is confirmed'


def test_status_update_notifies_every_order_watcher(api, owner, customer, place_order):
    order = place_order(customer)
    api.post('/api/payments/process', {'order_id': order['id']}, token=customer['token'])

    watchers = []
    for user in (customer, owner):
        sid = api.post('/api/realtime/connect', token=user['token']).json()['subscriber_id']
        api.post(f'/api/realtime/{sid}/join', {'scope': 'order', 'id': order['id']}, token=user['token'])
        watchers.append((sid, user))

    response = api.patch(f"/api/orders/{order['id']}/status", {'status': 'preparing', 'notes': 'Dimasak'},
                         token=owner['token'])
    assert response.status_code == 200

    received = [api.get(f'/api/realtime/{sid}/events', token=user['token']).json()['events'] for sid, user in watchers]
    assert received[0] == received[1]
    assert len(received[0]) == 1
    event = received[0][0]
    assert event['event'] == 'order_status_updated'
    assert event['data']['status'] == 'preparing'
    assert event['data']['previous_status'] == 'confirmed'
    assert event['data']['updated_by'] == 'restaurant_owner'


def test_history_records_every_step(api, customer, partner, place_order, advance_order):
    order = advance_order(place_order(customer), customer, 'delivered', partner=partner)
    assert [entry['status'] for entry in order['status_history']] == [
        'pending', 'confirmed', 'preparing', 'ready_for_pickup', 'assigned', 'picked_up', 'on_the_way', 'delivered',
    ]
    assert order['actual_delivery_time'] is not None
    assert order['delivery_partner_id'] == partner['id']
    assert order['can_rate'] is True


def test_customer_cancels_pending_order(api, customer, owner, restaurant, place_order):
    order = place_order(customer)
    sid = api.post('/api/realtime/connect', token=owner['token']).json()['subscriber_id']
    api.post(f'/api/realtime/{sid}/join', {'scope': 'restaurant', 'id': restaurant['id']}, token=owner['token'])

    response = api.put(f"/api/orders/{order['id']}/cancel", {'reason': 'Salah pilih menu'}, token=customer['token'])
    assert response.status_code == 200
    cancelled = response.json()['order']
    assert cancelled['status'] == 'cancelled'
    assert cancelled['cancellation_reason'] == 'Salah pilih menu'

    events = api.get(f'/api/realtime/{sid}/events', token=owner['token']).json()['events']
    assert [event['event'] for event in events] == ['order_cancelled']
    assert events[0]['data']['reason'] == 'Salah pilih menu'


def test_cancel_reason_is_required(api, customer, place_order):
    order = place_order(customer)
    response = api.post(f"/api/orders/{order['id']}/cancel", {'reason': 'gak'}, token=customer['token'])
    assert response.status_code == 400


def test_customer_cannot_cancel_while_preparing(api, customer, partner, place_order, advance_order):
    order = advance_order(place_order(customer), customer, 'preparing', partner=partner)
    response = api.put(f"/api/orders/{order['id']}/cancel", {'reason': 'Kelamaan nunggu'}, token=customer['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Order can only be cancelled while pending or confirmed'


def test_customer_cannot_cancel_someone_elses_order(api, customer, make_user, place_order):
    order = place_order(customer)
    response = api.put(f"/api/orders/{order['id']}/cancel", {'reason': 'Iseng saja'},
                       token=make_user('customer')['token'])
    assert response.status_code == 403


def test_generic_status_endpoint_cancels_without_reason(api, customer, place_order):
    order = place_order(customer)
    response = api.put(f"/api/orders/{order['id']}/status", {'status': 'cancelled'}, token=customer['token'])
    assert response.status_code == 200
    assert response.json()['order']['status'] == 'cancelled'


def test_cancelled_order_is_final(api, customer, place_order):
    order = place_order(customer)
    api.put(f"/api/orders/{order['id']}/cancel", {'reason': 'Salah alamat'}, token=customer['token'])
    response = api.put(f"/api/orders/{order['id']}/cancel", {'reason': 'Salah alamat'}, token=customer['token'])
    assert response.status_code == 400


def test_rating_flow(api, owner, customer, partner, restaurant, place_order, advance_order):
    first = advance_order(place_order(customer), customer, 'delivered', partner=partner)
    second = advance_order(place_order(customer), customer, 'delivered', partner=partner)

    response = api.post(f"/api/orders/{first['id']}/rate", {'food': 5, 'delivery': 4, 'overall': 5,
                                                            'comment': 'Pedasnya mantap'}, token=customer['token'])
    assert response.status_code == 201
    assert response.json()['restaurant_rating'] == '5.00'
    assert response.json()['total_reviews'] == 1

    response = api.post(f"/api/orders/{second['id']}/rate", {'food': 4, 'delivery': 4, 'overall': 4},
                        token=customer['token'])
    assert response.json()['restaurant_rating'] == '4.50'
    assert response.json()['total_reviews'] == 2

    listed = api.get(f"/api/restaurants/{restaurant['id']}").json()['restaurant']
    assert listed['rating'] == '4.50'
    assert listed['total_reviews'] == 2

    detail = api.get(f"/api/orders/{first['id']}", token=customer['token']).json()['order']
    assert detail['rating']['comment'] == 'Pedasnya mantap'
    assert detail['can_rate'] is False


def test_order_can_be_rated_once(api, customer, partner, place_order, advance_order):
    order = advance_order(place_order(customer), customer, 'delivered', partner=partner)
    url = f"/api/orders/{order['id']}/rate"
    assert api.post(url, {'food': 5, 'delivery': 5, 'overall': 5}, token=customer['token']).status_code == 201
    response = api.post(url, {'food': 1, 'delivery': 1, 'overall': 1}, token=customer['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Order has already been rated'


def test_undelivered_order_cannot_be_rated(api, customer, place_order):
    order = place_order(customer)
    response = api.post(f"/api/orders/{order['id']}/rate", {'food': 5, 'delivery': 5, 'overall': 5},
                        token=customer['token'])
    assert response.status_code == 400


def test_rating_bounds(api, customer, place_order):
    order = place_order(customer)
    response = api.post(f"/api/orders/{order['id']}/rate", {'food': 6, 'delivery': 0, 'overall': 5},
                        token=customer['token'])
    assert response.status_code == 400
    assert {detail['field'] for detail in response.json()['details']} == {'food', 'delivery'}
