import pytest

from order.lifecycle import (
    Actor,
    InvalidTransition,
    PaymentRequired,
    ROLE_TARGETS,
    allowed_targets,
    authorize_transition,
    is_participant,
)
from order.models import ORDER_STATUSES
from Project.api import AccessDenied

CUSTOMER_ID, OWNER_ID, PARTNER_ID, OTHER_ID, ADMIN_ID = 1, 2, 3, 4, 5

customer = Actor(CUSTOMER_ID, 'customer')
owner = Actor(OWNER_ID, 'restaurant_owner')
partner = Actor(PARTNER_ID, 'delivery_partner')
admin = Actor(ADMIN_ID, 'admin')


def make_order(status='pending', payment_status='completed', delivery_partner_id=None):
    return {
        'id': 100,
        'order_number': 'SEB2026101800001',
        'status': status,
        'payment_status': payment_status,
        'customer_id': CUSTOMER_ID,
        'restaurant_owner_id': OWNER_ID,
        'delivery_partner_id': delivery_partner_id,
    }


def test_role_table():
    assert allowed_targets('restaurant_owner') == {'confirmed', 'preparing', 'ready_for_pickup'}
    assert allowed_targets('delivery_partner') == {'picked_up', 'on_the_way', 'delivered'}
    assert allowed_targets('customer') == {'cancelled'}
    assert allowed_targets('admin') == set(ORDER_STATUSES)
    assert allowed_targets('stranger') == frozenset()
    assert set(ROLE_TARGETS) == {'restaurant_owner', 'delivery_partner', 'customer', 'admin'}


def test_owner_cannot_mark_pending_order_picked_up():
    with pytest.raises(InvalidTransition):
        authorize_transition(make_order('pending'), owner, 'picked_up')


@pytest.mark.parametrize('current,target', [
    ('confirmed', 'preparing'),
    ('preparing', 'ready_for_pickup'),
    ('confirmed', 'ready_for_pickup'),
])
def test_owner_moves_forward(current, target):
    authorize_transition(make_order(current), owner, target)


def test_owner_cannot_move_backwards():
    with pytest.raises(InvalidTransition):
        authorize_transition(make_order('ready_for_pickup'), owner, 'preparing')


def test_confirming_requires_completed_payment():
    with pytest.raises(PaymentRequired):
        authorize_transition(make_order('pending', payment_status='pending'), owner, 'confirmed')


def test_other_owner_is_forbidden():
    with pytest.raises(AccessDenied):
        authorize_transition(make_order('confirmed'), Actor(OTHER_ID, 'restaurant_owner'), 'preparing')


@pytest.mark.parametrize('current', ['pending', 'confirmed'])
def test_customer_cancels_early_orders(current):
    authorize_transition(make_order(current), customer, 'cancelled')


@pytest.mark.parametrize('current', ['preparing', 'ready_for_pickup', 'on_the_way'])
def test_customer_cannot_cancel_later(current):
    with pytest.raises(InvalidTransition):
        authorize_transition(make_order(current), customer, 'cancelled')


def test_customer_cannot_cancel_someone_elses_order():
    with pytest.raises(AccessDenied):
        authorize_transition(make_order('pending'), Actor(OTHER_ID, 'customer'), 'cancelled')


def test_customer_cannot_confirm():
    with pytest.raises(InvalidTransition):
        authorize_transition(make_order('pending'), customer, 'confirmed')


def test_partner_picks_up_assigned_order():
    authorize_transition(make_order('assigned', delivery_partner_id=PARTNER_ID), partner, 'picked_up')


@pytest.mark.parametrize('current', ['ready_for_pickup', 'preparing'])
def test_partner_cannot_claim_through_status_change(current):
    with pytest.raises(AccessDenied):
        authorize_transition(make_order(current), partner, 'picked_up')


def test_partner_cannot_touch_another_partners_order():
    with pytest.raises(AccessDenied):
        authorize_transition(make_order('assigned', delivery_partner_id=OTHER_ID), partner, 'picked_up')


def test_delivered_is_terminal_for_non_admins():
    with pytest.raises(InvalidTransition):
        authorize_transition(make_order('delivered', delivery_partner_id=PARTNER_ID), partner, 'on_the_way')


def test_same_status_is_rejected_even_for_admin():
    with pytest.raises(InvalidTransition):
        authorize_transition(make_order('preparing'), admin, 'preparing')


@pytest.mark.parametrize('current,target', [
    ('delivered', 'refunded'),
    ('cancelled', 'pending'),
    ('pending', 'confirmed'),
])
def test_admin_may_set_any_status(current, target):
    authorize_transition(make_order(current, payment_status='pending'), admin, target)


def test_participants():
    order = make_order('assigned', delivery_partner_id=PARTNER_ID)
    assert is_participant(order, customer)
    assert is_participant(order, owner)
    assert is_participant(order, partner)
    assert is_participant(order, admin)
    assert not is_participant(order, Actor(OTHER_ID, 'customer'))
    assert not is_participant(order, Actor(OTHER_ID, 'delivery_partner'))
