import pytest

from tests.conftest import BANDUNG, JAKARTA

pytestmark = pytest.mark.django_db


@pytest.fixture
def ready_order(customer, partner, place_order, advance_order):
    return advance_order(place_order(customer), customer, 'ready_for_pickup', partner=partner)


def test_available_orders_use_stored_location(api, partner, ready_order, place_order, customer):
    place_order(customer, quantity=3)

    body = api.get('/api/delivery/available-orders', token=partner['token']).json()
    assert [order['id'] for order in body['orders']] == [ready_order['id']]
    assert body['orders'][0]['distance_km'] == pytest.approx(3.67, abs=0.05)
    assert body['radius_km'] == 10


def test_available_orders_outside_radius(api, partner, ready_order):
    response = api.get('/api/delivery/available-orders', token=partner['token'], radius=2)
    assert response.json()['orders'] == []

    response = api.get('/api/delivery/available-orders', token=partner['token'], **JAKARTA)
    assert response.json()['orders'] == []

    response = api.get('/api/delivery/available-orders', token=partner['token'], radius=150, **JAKARTA)
    assert response.status_code == 400


def test_available_orders_need_a_location(api, make_partner):
    partner = make_partner(location=None)
    response = api.get('/api/delivery/available-orders', token=partner['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Current location is required to find nearby orders'

    response = api.get('/api/delivery/available-orders', token=partner['token'], **BANDUNG)
    assert response.status_code == 200


def test_accept_assigns_partner_and_notifies(api, customer, partner, ready_order):
    sid = api.post('/api/realtime/connect', token=partner['token']).json()['subscriber_id']
    api.post(f'/api/realtime/{sid}/join', {'scope': 'delivery', 'id': partner['id']}, token=partner['token'])

    response = api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=partner['token'])
    assert response.status_code == 200
    order = response.json()['order']
    assert order['status'] == 'assigned'
    assert order['delivery_partner_id'] == partner['id']

    events = api.get(f'/api/realtime/{sid}/events', token=partner['token']).json()['events']
    assert [event['event'] for event in events] == ['order_assigned']
    assert events[0]['data']['delivery_partner_id'] == partner['id']

    assert api.get('/api/delivery/available-orders', token=partner['token']).json()['orders'] == []


def test_second_partner_cannot_accept(api, partner, make_partner, ready_order):
    assert api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=partner['token']).status_code == 200

    rival = make_partner()
    response = api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=rival['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Order not available for pickup'


def test_assigned_ready_order_cannot_be_claimed(api, admin, partner, make_partner, ready_order):
    api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=partner['token'])
    # admin moves it back while the partner stays attached
    response = api.put(f"/api/orders/{ready_order['id']}/status", {'status': 'ready_for_pickup'},
                       token=admin['token'])
    assert response.json()['order']['status'] == 'ready_for_pickup'
    assert response.json()['order']['delivery_partner_id'] == partner['id']

    rival = make_partner()
    response = api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=rival['token'])
    assert response.status_code == 400


def test_order_must_be_ready(api, customer, partner, place_order):
    order = place_order(customer)
    response = api.post(f"/api/delivery/orders/{order['id']}/accept", token=partner['token'])
    assert response.status_code == 400
    assert api.post('/api/delivery/orders/999999/accept', token=partner['token']).status_code == 404


def test_offline_partner_cannot_accept(api, make_partner, ready_order):
    offline = make_partner(online=False)
    response = api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=offline['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Delivery partner is not active'


@pytest.mark.parametrize('online', [False, True])
def test_status_endpoint_does_not_claim_orders(api, customer, make_partner, ready_order, online):
    rider = make_partner(online=online)
    url = f"/api/orders/{ready_order['id']}/status"
    assert api.put(url, {'status': 'picked_up'}, token=rider['token']).status_code == 403

    order = api.get(f"/api/orders/{ready_order['id']}", token=customer['token']).json()['order']
    assert order['status'] == 'ready_for_pickup'
    assert order['delivery_partner_id'] is None
    assert [entry['status'] for entry in order['status_history']][-1] == 'ready_for_pickup'


def test_only_partners_accept(api, customer, ready_order):
    assert api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=customer['token']).status_code == 403


def test_other_partner_cannot_progress_assigned_order(api, partner, make_partner, ready_order):
    api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=partner['token'])
    rival = make_partner()
    response = api.put(f"/api/orders/{ready_order['id']}/status", {'status': 'picked_up'}, token=rival['token'])
    assert response.status_code == 403


def test_partner_cannot_skip_back(api, partner, ready_order):
    api.post(f"/api/delivery/orders/{ready_order['id']}/accept", token=partner['token'])
    url = f"/api/orders/{ready_order['id']}/status"
    assert api.put(url, {'status': 'on_the_way'}, token=partner['token']).status_code == 200
    assert api.put(url, {'status': 'picked_up'}, token=partner['token']).status_code == 400
    assert api.put(url, {'status': 'ready_for_pickup'}, token=partner['token']).status_code == 400


def test_active_completed_and_earnings(api, customer, partner, place_order, advance_order):
    delivered = advance_order(place_order(customer), customer, 'delivered', partner=partner)
    active = advance_order(place_order(customer), customer, 'picked_up', partner=partner)

    body = api.get('/api/delivery/active', token=partner['token']).json()
    assert [order['id'] for order in body['orders']] == [active['id']]

    body = api.get('/api/delivery/completed', token=partner['token']).json()
    assert [order['id'] for order in body['orders']] == [delivered['id']]
    assert body['pagination']['total'] == 1

    for period in ('today', 'week', 'all'):
        earnings = api.get('/api/delivery/earnings', token=partner['token'], period=period).json()['earnings']
        assert earnings['total_deliveries'] == 1
        assert earnings['total_earnings'] == '5000.00'
        assert earnings['average_per_delivery'] == '5000.00'


def test_earnings_without_deliveries(api, partner):
    earnings = api.get('/api/delivery/earnings', token=partner['token']).json()['earnings']
    assert earnings == {'period': 'today', 'total_earnings': '0.00', 'total_deliveries': 0,
                        'average_per_delivery': '0.00'}


def test_location_and_online_status(api, partner):
    response = api.put('/api/delivery/location', {'latitude': -6.90, 'longitude': 107.60}, token=partner['token'])
    assert response.json()['location'] == {'latitude': -6.90, 'longitude': 107.60}

    assert api.put('/api/delivery/status', {'is_active': False}, token=partner['token']).json()['is_active'] is False
    info = api.get('/api/auth/profile', token=partner['token']).json()['user']['delivery_info']
    assert info['is_active'] is False
    assert info['current_latitude'] == -6.90

    assert api.put('/api/delivery/location', {'latitude': 95, 'longitude': 0}, token=partner['token']).status_code == 400
