"""
Payment gateway stubs.

Each supported method maps to a function that takes the amount to charge and
returns a ``PaymentResult``. None of them talk to a real provider: they mint a
``<PREFIX>_<epoch millis>`` transaction id and approve any positive amount.
"""
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

logger = logging.getLogger(__name__)

PAYMENT_METHOD_INFO = [
    {'id': 'qris', 'name': 'QRIS', 'description': 'Scan QR code from any banking or e-wallet app', 'type': 'qr'},
    {'id': 'gopay', 'name': 'GoPay', 'description': 'Pay with your GoPay balance', 'type': 'ewallet'},
    {'id': 'ovo', 'name': 'OVO', 'description': 'Pay with your OVO balance', 'type': 'ewallet'},
    {'id': 'dana', 'name': 'DANA', 'description': 'Pay with your DANA balance', 'type': 'ewallet'},
    {'id': 'bank_transfer', 'name': 'Bank Transfer', 'description': 'Transfer to a virtual account', 'type': 'bank'},
    {'id': 'cash', 'name': 'Cash on Delivery', 'description': 'Pay the driver when the order arrives', 'type': 'cash'},
]


@dataclass
class PaymentResult:
    success: bool
    transaction_id: Optional[str]
    method: str
    note: str = ''
    error: Optional[str] = None


def _transaction_id(prefix):
    return f'{prefix}_{int(time.time() * 1000)}'


def _charge(prefix, method, amount, note):
    if Decimal(amount) <= 0:
        return PaymentResult(False, None, method, error='Invalid payment amount')
    transaction_id = _transaction_id(prefix)
    logger.info(f'{method} payment of Rp {amount} approved: {transaction_id}')
    return PaymentResult(True, transaction_id, method, note=note)


def pay_with_qris(amount):
    return _charge('QRIS', 'qris', amount, 'QRIS payment received')


def pay_with_gopay(amount):
    return _charge('GOPAY', 'gopay', amount, 'GoPay payment received')


def pay_with_ovo(amount):
    return _charge('OVO', 'ovo', amount, 'OVO payment received')


def pay_with_dana(amount):
    return _charge('DANA', 'dana', amount, 'DANA payment received')


def pay_with_bank_transfer(amount):
    return _charge('BANK', 'bank_transfer', amount, 'Virtual account transfer received')


def pay_with_cash(amount):
    return _charge('CASH', 'cash', amount, 'Collect cash on delivery')


GATEWAYS = {
    'qris': pay_with_qris,
    'gopay': pay_with_gopay,
    'ovo': pay_with_ovo,
    'dana': pay_with_dana,
    'bank_transfer': pay_with_bank_transfer,
    'cash': pay_with_cash,
}


def process_payment(method, amount):
    gateway = GATEWAYS.get(method)
    if gateway is None:
        return PaymentResult(False, None, method, error=f'Unsupported payment method: {method}')
    return gateway(amount)
