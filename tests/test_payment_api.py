import pytest

from payment import gateways
from payment.gateways import PaymentResult

pytestmark = pytest.mark.django_db


def test_payment_methods(api):
    methods = api.get('/api/payments/methods').json()['methods']
    assert [method['id'] for method in methods] == ['qris', 'gopay', 'ovo', 'dana', 'bank_transfer', 'cash']


@pytest.mark.parametrize('method,prefix', [('qris', 'QRIS_'), ('gopay', 'GOPAY_'), ('bank_transfer', 'BANK_'),
                                           ('cash', 'CASH_')])
def test_gateway_stubs(method, prefix):
    result = gateways.process_payment(method, 33600)
    assert result.success
    assert result.transaction_id.startswith(prefix)


def test_gateway_rejects_non_positive_amount():
    result = gateways.process_payment('ovo', 0)
    assert not result.success
    assert result.error == 'Invalid payment amount'


def test_unsupported_gateway():
    assert gateways.process_payment('bitcoin', 1000).error == 'Unsupported payment method: bitcoin'


def test_successful_payment_confirms_order(api, customer, owner, restaurant, place_order):
    order = place_order(customer)
    sids = {}
    for name, user, scope, entity in (('customer', customer, 'order', order['id']),
                                      ('owner', owner, 'restaurant', restaurant['id'])):
        sid = api.post('/api/realtime/connect', token=user['token']).json()['subscriber_id']
        api.post(f'/api/realtime/{sid}/join', {'scope': scope, 'id': entity}, token=user['token'])
        sids[name] = (sid, user)

    response = api.post('/api/payments/process', {'order_id': order['id'], 'payment_method': 'gopay'},
                        token=customer['token'])
    assert response.status_code == 200
    payment = response.json()['payment']
    assert payment['payment_status'] == 'completed'
    assert payment['amount'] == '33600.00'
    assert payment['transaction_id'].startswith('GOPAY_')

    detail = api.get(f"/api/orders/{order['id']}", token=customer['token']).json()['order']
    assert detail['status'] == 'confirmed'
    assert detail['payment_status'] == 'completed'
    assert detail['payment_method'] == 'gopay'

    sid, user = sids['customer']
    assert [e['event'] for e in api.get(f'/api/realtime/{sid}/events', token=user['token']).json()['events']] == [
        'payment_completed']
    sid, user = sids['owner']
    assert [e['event'] for e in api.get(f'/api/realtime/{sid}/events', token=user['token']).json()['events']] == [
        'order_confirmed']

    verify = api.get(f"/api/payments/verify/{order['id']}", token=customer['token'],
                     transaction_id=payment['transaction_id']).json()['payment']
    assert verify['transaction_known'] is True
    assert verify['transaction_success'] is True
    assert verify['payment_status'] == 'completed'


def test_order_cannot_be_paid_twice(api, customer, place_order):
    order = place_order(customer)
    assert api.post('/api/payments/process', {'order_id': order['id']}, token=customer['token']).status_code == 200
    response = api.post('/api/payments/process', {'order_id': order['id']}, token=customer['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Payment is already completed'


def test_failed_payment_can_be_retried(api, customer, place_order, monkeypatch):
    order = place_order(customer)
    monkeypatch.setitem(gateways.GATEWAYS, 'qris',
                        lambda amount: PaymentResult(False, None, 'qris', error='Saldo tidak cukup'))

    response = api.post('/api/payments/process', {'order_id': order['id']}, token=customer['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Saldo tidak cukup'
    detail = api.get(f"/api/orders/{order['id']}", token=customer['token']).json()['order']
    assert detail['status'] == 'pending'
    assert detail['payment_status'] == 'failed'

    monkeypatch.setitem(gateways.GATEWAYS, 'qris', gateways.pay_with_qris)
    response = api.post('/api/payments/process', {'order_id': order['id']}, token=customer['token'])
    assert response.status_code == 200
    assert response.json()['payment']['transaction_id'].startswith('QRIS_')


def test_cancelled_order_cannot_be_paid(api, customer, place_order):
    order = place_order(customer)
    api.put(f"/api/orders/{order['id']}/cancel", {'reason': 'Tidak jadi pesan'}, token=customer['token'])
    response = api.post('/api/payments/process', {'order_id': order['id']}, token=customer['token'])
    assert response.status_code == 400
    assert response.json()['message'] == 'Only pending orders can be paid'


def test_only_the_customer_pays(api, customer, make_user, owner, place_order):
    order = place_order(customer)
    other = make_user('customer')
    assert api.post('/api/payments/process', {'order_id': order['id']}, token=other['token']).status_code == 403
    assert api.post('/api/payments/process', {'order_id': order['id']}, token=owner['token']).status_code == 403
    assert api.post('/api/payments/process', {'order_id': 999999}, token=customer['token']).status_code == 404


def test_verify_unknown_transaction(api, customer, admin, make_user, place_order):
    order = place_order(customer)
    url = f"/api/payments/verify/{order['id']}"
    body = api.get(url, token=customer['token'], transaction_id='QRIS_1').json()['payment']
    assert body['transaction_known'] is False
    assert body['payment_status'] == 'pending'

    assert api.get(url, token=admin['token'], transaction_id='QRIS_1').status_code == 200
    assert api.get(url, token=make_user('customer')['token'], transaction_id='QRIS_1').status_code == 403
    assert api.get(url, token=customer['token']).status_code == 400
