"""
Order pricing.

Prices are resolved against the restaurant's own menu, never taken from the
client: unit price = base price + spice adjustment + available toppings.
Money is handled as ``Decimal`` rounded to two places.
"""
import random
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from Project.api import ValidationFailed

CENT = Decimal('0.01')
ZERO = Decimal('0')
TAX_RATE = Decimal('0.10')
DELIVERY_BUFFER_MINUTES = 30
PROMO_CODES = {'SEBLAK10': Decimal('0.10')}
ORDER_NUMBER_PREFIX = 'SEB'


class ItemUnavailable(ValidationFailed):
    default_message = 'Menu item not found or unavailable'


class BelowMinimumOrder(ValidationFailed):
    default_message = 'Order is below the minimum order amount'


def money(value) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class ToppingRequest:
    topping_id: int
    quantity: int = 1


@dataclass
class LineRequest:
    menu_item_id: int
    quantity: int
    spice_level: str
    toppings: List[ToppingRequest] = field(default_factory=list)
    special_instructions: str = ''


@dataclass
class PricedTopping:
    topping_id: int
    name: str
    quantity: int
    unit_price: Decimal


@dataclass
class PricedLine:
    menu_item_id: int
    name: str
    quantity: int
    spice_level: str
    unit_price: Decimal
    toppings: List[PricedTopping]
    special_instructions: str = ''

    @property
    def line_total(self) -> Decimal:
        return money(self.unit_price * self.quantity)


@dataclass
class OrderQuote:
    lines: List[PricedLine]
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    promo_code: str = ''


def price_line_item(menu_item: Optional[dict], request: LineRequest) -> PricedLine:
    """Resolve the unit price of one requested line against its menu item.

    ``menu_item`` carries ``spice_levels`` (level -> adjustment) and
    ``toppings`` (topping id -> topping dict). Unknown or unavailable toppings
    are dropped without error.
    """
    if not menu_item or not menu_item.get('is_available'):
        raise ItemUnavailable(f'Menu item {request.menu_item_id} not found or unavailable')

    unit_price = money(menu_item['base_price'])
    unit_price += money(menu_item.get('spice_levels', {}).get(request.spice_level, ZERO))

    toppings = []
    catalog = menu_item.get('toppings', {})
    for wanted in request.toppings:
        topping = catalog.get(wanted.topping_id)
        if not topping or not topping.get('is_available'):
            continue
        price = money(topping['price'])
        toppings.append(PricedTopping(
            topping_id=topping['id'],
            name=topping['name'],
            quantity=wanted.quantity,
            unit_price=price,
        ))
        unit_price += price * wanted.quantity

    return PricedLine(
        menu_item_id=menu_item['id'],
        name=menu_item['name'],
        quantity=request.quantity,
        spice_level=request.spice_level,
        unit_price=money(unit_price),
        toppings=toppings,
        special_instructions=request.special_instructions or '',
    )


def promo_discount(subtotal: Decimal, promo_code: Optional[str]) -> Decimal:
    rate = PROMO_CODES.get((promo_code or '').strip().upper())
    if rate is None:
        return ZERO
    return money(subtotal * rate)


def quote_order(restaurant: dict, menu: Dict[int, dict], items: List[LineRequest],
                promo_code: Optional[str] = None) -> OrderQuote:
    lines = [price_line_item(menu.get(item.menu_item_id), item) for item in items]
    subtotal = money(sum((line.line_total for line in lines), ZERO))

    minimum = money(restaurant['minimum_order'])
    if subtotal < minimum:
        raise BelowMinimumOrder(f'Minimum order amount is Rp {minimum:,.0f}')

    delivery_fee = money(restaurant['delivery_fee'])
    tax = money(subtotal * TAX_RATE)
    # the total never goes below zero
    discount = min(promo_discount(subtotal, promo_code), subtotal + delivery_fee + tax)
    total = subtotal + delivery_fee + tax - discount

    return OrderQuote(
        lines=lines,
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        tax=tax,
        discount=discount,
        total=money(total),
        promo_code=(promo_code or '').strip(),
    )


def estimated_delivery_time(created_at, preparation_minutes):
    return created_at + timedelta(minutes=int(preparation_minutes or 0) + DELIVERY_BUFFER_MINUTES)


def generate_order_number(now, rng=random):
    return f"{ORDER_NUMBER_PREFIX}{now.strftime('%Y%m%d')}{rng.randint(0, 99999):05d}"
