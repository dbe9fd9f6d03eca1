import itertools
import json

import pytest
from django.contrib.auth.models import User

PASSWORD = 'rahasia123'
BANDUNG = {'latitude': -6.9175, 'longitude': 107.6191}
DAGO = {'latitude': -6.8850, 'longitude': 107.6135}
JAKARTA = {'latitude': -6.2088, 'longitude': 106.8456}


class Api:
    """Thin JSON wrapper around Django's test client."""

    def __init__(self, client):
        self.client = client

    def _headers(self, token):
        return {'HTTP_AUTHORIZATION': f'Bearer {token}'} if token else {}

    def get(self, path, token=None, **query):
        return self.client.get(path, data=query or None, **self._headers(token))

    def _send(self, method, path, token, data):
        handler = getattr(self.client, method)
        return handler(path, data=json.dumps(data or {}), content_type='application/json', **self._headers(token))

    def post(self, path, data=None, token=None):
        return self._send('post', path, token, data)

    def put(self, path, data=None, token=None):
        return self._send('put', path, token, data)

    def patch(self, path, data=None, token=None):
        return self._send('patch', path, token, data)

    def delete(self, path, token=None):
        return self.client.delete(path, **self._headers(token))

    @property
    def hub(self):
        # the hub lives on the client's handler, so any request exposes it
        return self.client.get('/').wsgi_request.notifier


@pytest.fixture(autouse=True)
def fast_password_hashing(settings):
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture
def api(client, db):
    return Api(client)


@pytest.fixture
def make_user(api):
    counter = itertools.count(1)

    def make(role='customer', **extra):
        n = next(counter)
        payload = {
            'email': f'{role}{n}@seblak.co.id',
            'phone': f'0812000{n:05d}',
            'password': PASSWORD,
            'full_name': f'{role.replace("_", " ").title()} {n}',
            'role': role,
            'address': {'street': 'Jl. Dago No. 1', 'city': 'Bandung', 'province': 'Jawa Barat',
                        'postal_code': '40135', **BANDUNG},
        }
        if role == 'delivery_partner':
            payload['delivery_info'] = {'vehicle_type': 'motorcycle', 'vehicle_number': f'D {n} SEB',
                                        'license_number': f'SIM-{n}'}
        if role == 'restaurant_owner':
            payload['business_license'] = f'SIUP-{n}'
        payload.update(extra)
        response = api.post('/api/auth/register', payload)
        assert response.status_code == 201, response.json()
        body = response.json()
        return {'id': body['user']['id'], 'token': body['token'], 'email': payload['email'], 'phone': payload['phone']}

    return make


@pytest.fixture
def customer(make_user):
    return make_user('customer')


@pytest.fixture
def owner(make_user):
    return make_user('restaurant_owner')


@pytest.fixture
def make_partner(api, make_user):
    def make(online=True, location=DAGO):
        partner = make_user('delivery_partner')
        if online:
            assert api.put('/api/delivery/status', {'is_active': True}, token=partner['token']).status_code == 200
        if location:
            assert api.put('/api/delivery/location', location, token=partner['token']).status_code == 200
        return partner

    return make


@pytest.fixture
def partner(make_partner):
    return make_partner()


@pytest.fixture
def admin(api, db):
    User.objects.create_user(username='admin@seblak.co.id', email='admin@seblak.co.id', password=PASSWORD,
                             is_staff=True)
    response = api.post('/api/auth/login', {'email': 'admin@seblak.co.id', 'password': PASSWORD})
    assert response.status_code == 200, response.json()
    body = response.json()
    return {'id': body['user']['id'], 'token': body['token']}


@pytest.fixture
def make_restaurant(api):
    def make(owner, **extra):
        payload = {
            'name': 'Seblak Teh Imas',
            'description': 'Seblak kerupuk khas Bandung',
            'address': {'street': 'Jl. Braga No. 7', 'city': 'Bandung', 'province': 'Jawa Barat',
                        'postal_code': '40111', **BANDUNG},
            'phone': '0227001234',
            'minimum_order': '15000',
            'delivery_fee': '5000',
            'average_preparation_time': 20,
        }
        payload.update(extra)
        response = api.post('/api/restaurants', payload, token=owner['token'])
        assert response.status_code == 201, response.json()
        return response.json()['restaurant']

    return make


@pytest.fixture
def make_menu_item(api):
    def make(owner, restaurant_id, **extra):
        payload = {
            'name': 'Seblak Kerupuk Original',
            'base_price': '12000',
            'category': 'seblak_kerupuk',
            'preparation_time': 15,
            'spice_levels': [
                {'level': 'mild', 'price_adjustment': '0'},
                {'level': 'medium', 'price_adjustment': '1000'},
                {'level': 'spicy', 'price_adjustment': '2000'},
            ],
            'toppings': [
                {'name': 'Ceker', 'price': '3000', 'category': 'protein'},
                {'name': 'Sosis', 'price': '2500', 'category': 'protein', 'is_available': False},
            ],
        }
        payload.update(extra)
        response = api.post(f'/api/restaurants/{restaurant_id}/menu', payload, token=owner['token'])
        assert response.status_code == 201, response.json()
        return response.json()['menu_item']

    return make


@pytest.fixture
def restaurant(owner, make_restaurant):
    return make_restaurant(owner)


@pytest.fixture
def menu_item(owner, restaurant, make_menu_item):
    return make_menu_item(owner, restaurant['id'])


def order_payload(restaurant_id, menu_item_id, quantity=2, spice_level='medium', toppings=(), **extra):
    payload = {
        'restaurant_id': restaurant_id,
        'items': [{
            'menu_item_id': menu_item_id,
            'quantity': quantity,
            'spice_level': spice_level,
            'toppings': [{'topping_id': topping_id, 'quantity': 1} for topping_id in toppings],
        }],
        'delivery_address': {'street': 'Jl. Dipatiukur No. 35', 'city': 'Bandung', 'province': 'Jawa Barat',
                             'postal_code': '40132', **DAGO},
        'payment_method': 'qris',
    }
    payload.update(extra)
    return payload


@pytest.fixture
def place_order(api, restaurant, menu_item):
    def place(customer, **kwargs):
        response = api.post('/api/orders', order_payload(restaurant['id'], menu_item['id'], **kwargs),
                            token=customer['token'])
        assert response.status_code == 201, response.json()
        return response.json()['order']

    return place


@pytest.fixture
def advance_order(api, owner, restaurant):
    """Drive an order through the normal lifecycle up to ``target``."""

    def advance(order, customer, target, partner=None):
        order_id = order['id']
        steps = ['confirmed', 'preparing', 'ready_for_pickup', 'assigned', 'picked_up', 'on_the_way', 'delivered']
        for step in steps[:steps.index(target) + 1]:
            if step == 'confirmed':
                response = api.post('/api/payments/process', {'order_id': order_id}, token=customer['token'])
            elif step in ('preparing', 'ready_for_pickup'):
                response = api.put(f'/api/orders/{order_id}/status', {'status': step}, token=owner['token'])
            elif step == 'assigned':
                response = api.post(f'/api/delivery/orders/{order_id}/accept', token=partner['token'])
            else:
                response = api.put(f'/api/orders/{order_id}/status', {'status': step}, token=partner['token'])
            assert response.status_code == 200, (step, response.json())
        return api.get(f'/api/orders/{order_id}', token=customer['token']).json()['order']

    return advance
