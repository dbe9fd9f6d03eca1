import logging

import pytest
from django.conf import settings

from order import fanout
from Project.middleware import NotificationHubMiddleware
from Project.notifications import NotificationHub, room_name


def test_room_names():
    assert room_name('order', 7) == 'order_7'
    assert fanout.restaurant_room(3) == 'restaurant_3'
    assert fanout.delivery_room(9) == 'delivery_9'
    with pytest.raises(ValueError):
        room_name('kitchen', 1)


def test_members_of_a_room_receive_identical_events():
    hub = NotificationHub()
    first, second, outsider = hub.connect(), hub.connect(), hub.connect()
    hub.join(first.subscriber_id, 'order_1')
    hub.join(second.subscriber_id, 'order_1')
    hub.join(outsider.subscriber_id, 'order_2')

    assert hub.emit('order_1', 'order_status_updated', {'status': 'preparing'}) == 2

    first_events = hub.poll(first.subscriber_id)
    second_events = hub.poll(second.subscriber_id)
    assert len(first_events) == 1
    assert first_events == second_events
    assert first_events[0]['event'] == 'order_status_updated'
    assert first_events[0]['data'] == {'status': 'preparing'}
    assert hub.poll(outsider.subscriber_id) == []


def test_poll_drains_the_buffer():
    hub = NotificationHub()
    subscriber = hub.connect()
    hub.join(subscriber.subscriber_id, 'restaurant_1')
    hub.emit('restaurant_1', 'new_order', {'order_id': 1})
    assert len(hub.poll(subscriber.subscriber_id)) == 1
    assert hub.poll(subscriber.subscriber_id) == []


def test_full_buffer_drops_oldest_events():
    hub = NotificationHub(max_pending=2)
    subscriber = hub.connect()
    hub.join(subscriber.subscriber_id, 'order_1')
    for n in range(3):
        hub.emit('order_1', 'order_status_updated', {'n': n})

    events = hub.poll(subscriber.subscriber_id)
    assert [event['data']['n'] for event in events] == [1, 2]
    assert subscriber.dropped == 1


def test_disconnected_subscriber_misses_events():
    hub = NotificationHub()
    subscriber = hub.connect()
    hub.join(subscriber.subscriber_id, 'order_1')
    assert hub.disconnect(subscriber.subscriber_id)
    assert not hub.disconnect(subscriber.subscriber_id)
    assert hub.members('order_1') == set()
    assert hub.emit('order_1', 'order_cancelled', {}) == 0
    with pytest.raises(KeyError):
        hub.poll(subscriber.subscriber_id)


def test_leave_stops_delivery():
    hub = NotificationHub()
    subscriber = hub.connect()
    hub.join(subscriber.subscriber_id, 'order_1')
    hub.leave(subscriber.subscriber_id, 'order_1')
    hub.emit('order_1', 'order_status_updated', {})
    assert hub.poll(subscriber.subscriber_id) == []


def test_emitted_payload_is_copied():
    hub = NotificationHub()
    subscriber = hub.connect()
    hub.join(subscriber.subscriber_id, 'order_1')
    data = {'status': 'confirmed'}
    hub.emit('order_1', 'order_status_updated', data)
    data['status'] = 'cancelled'
    assert hub.poll(subscriber.subscriber_id)[0]['data'] == {'status': 'confirmed'}


def test_nested_payloads_are_not_shared_between_subscribers():
    hub = NotificationHub()
    first, second = hub.connect(), hub.connect()
    hub.join(first.subscriber_id, 'order_1')
    hub.join(second.subscriber_id, 'order_1')
    data = {'items': [{'name': 'Seblak Kerupuk', 'quantity': 2}]}
    hub.emit('order_1', 'new_order', data)
    data['items'][0]['quantity'] = 9

    first_event = hub.poll(first.subscriber_id)[0]
    first_event['data']['items'].append({'name': 'Ceker', 'quantity': 1})
    second_event = hub.poll(second.subscriber_id)[0]
    assert second_event['data'] == {'items': [{'name': 'Seblak Kerupuk', 'quantity': 2}]}


def test_publish_without_hub_is_a_no_op(caplog):
    with caplog.at_level(logging.WARNING, logger='order.fanout'):
        assert fanout.publish(None, ['order_1'], fanout.NEW_ORDER, {}) == 0
    assert 'dropping new_order' in caplog.text


def test_publish_survives_a_failing_room(caplog):
    class FlakyHub(NotificationHub):
        def emit(self, room, name, data):
            if room == 'order_1':
                raise RuntimeError('socket closed')
            return super().emit(room, name, data)

    hub = FlakyHub()
    subscriber = hub.connect()
    hub.join(subscriber.subscriber_id, 'restaurant_1')

    with caplog.at_level(logging.WARNING, logger='order.fanout'):
        reached = fanout.publish(hub, ['order_1', 'restaurant_1'], fanout.ORDER_CANCELLED, {'order_id': 1})

    assert reached == 1
    assert 'Failed to emit order_cancelled to order_1' in caplog.text
    assert [event['event'] for event in hub.poll(subscriber.subscriber_id)] == ['order_cancelled']


def test_each_handler_builds_its_own_hub(rf):
    first = NotificationHubMiddleware(lambda request: request.notifier)
    second = NotificationHubMiddleware(lambda request: request.notifier)
    assert first(rf.get('/')) is first(rf.get('/'))
    assert first(rf.get('/')) is not second(rf.get('/'))
    assert first.hub.max_pending == settings.NOTIFICATION_MAX_PENDING
