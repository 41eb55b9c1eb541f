"""
Checkout: turns a cart into pending orders plus one pending payment.

Prices always come from the catalog; a ``price`` sent by the client is never
read. Everything happens in one DB transaction, so a failure leaves nothing
behind. Checkout never notifies anyone: the paid notification belongs to the
payment callback.
"""
from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.conf import settings
from django.db import transaction

from affiliates.models import Affiliate
from core.models import SiteSetting
from payments.models import Payment
from services.models import Service
from services.pricing import percent_of, floor_percent_of, validate_price
from .details import EngagementDetails, DigitalDetails, to_json
from .models import Order

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = {"payoneer"}


class CheckoutError(Exception):
    pass


@dataclass(frozen=True)
class CheckoutItem:
    service_id: int
    quantity: int
    link: str = ""


@dataclass
class CheckoutResult:
    transaction_id: str
    subtotal: int
    tax_amount: int
    amount_due: int
    orders: List[Order]
    payment: Payment


def new_transaction_id() -> str:
    return f"TXN-{int(time.time() * 1000)}-{secrets.token_hex(6).upper()}"


def current_tax_rate() -> Decimal:
    raw = SiteSetting.get_value("taxRate", default=settings.DEFAULT_TAX_RATE)
    try:
        rate = Decimal(str(raw))
    except InvalidOperation:
        rate = None
    if rate is None or not rate.is_finite():
        logger.warning("Invalid taxRate setting %r; falling back to %s", raw, settings.DEFAULT_TAX_RATE)
        rate = Decimal(str(settings.DEFAULT_TAX_RATE))
    return min(max(rate, Decimal(0)), Decimal(100)).quantize(Decimal("0.01"))


def _resolve_affiliate(code: Optional[str], user) -> Optional[Affiliate]:
    if not code:
        return None
    aff = Affiliate.objects.filter(referral_code=code.strip(), is_active=True).first()
    if aff is None or aff.user_id == user.id:
        return None
    return aff


def place_checkout(user, items: List[CheckoutItem], payment_method: str, referral_code: str | None = None) -> CheckoutResult:
    if not items:
        raise CheckoutError("Cart is empty.")
    if (payment_method or "").lower() not in SUPPORTED_METHODS:
        raise CheckoutError(f"Unsupported payment method '{payment_method}'.")

    with transaction.atomic():
        catalog = Service.objects.in_bulk({i.service_id for i in items})
        affiliate = _resolve_affiliate(referral_code, user)
        tx_id = new_transaction_id()

        orders: List[Order] = []
        subtotal = 0
        for item in items:
            service = catalog.get(item.service_id)
            if service is None:
                raise CheckoutError(f"Service {item.service_id} not found.")
            if not service.is_active:
                raise CheckoutError(f"Service {service.name} is unavailable.")
            if item.quantity < 1:
                raise CheckoutError("Quantity must be at least 1.")

            if service.is_digital:
                details = DigitalDetails(quantity=item.quantity, unit_price=service.price)
            else:
                link = (item.link or "").strip()
                if not link:
                    raise CheckoutError(f"A link is required for {service.name}.")
                details = EngagementDetails(quantity=item.quantity, link=link, unit_price=service.price)

            item_total = service.price * item.quantity
            if not validate_price(item_total):
                raise CheckoutError(f"Invalid total for service {service.id}.")
            subtotal += item_total

            order = Order(
                user=user,
                service=service,
                status="pending",
                total_amount=item_total,
                transaction_id=tx_id,
                details=to_json(details),
            )
            if affiliate is not None:
                order.affiliate = affiliate
                order.commission_amount = floor_percent_of(item_total, affiliate.commission_rate)
                order.commission_status = "pending"
            order.save()
            orders.append(order)

        rate = current_tax_rate()
        tax = percent_of(subtotal, rate)
        payment = Payment.objects.create(
            user=user,
            transaction_id=tx_id,
            amount=subtotal + tax,
            tax_rate=rate,
            currency=settings.STORE_CURRENCY,
            method="payoneer",
            status="pending",
        )

    logger.info("Checkout %s: %s order(s), subtotal=%s tax=%s", tx_id, len(orders), subtotal, tax)
    return CheckoutResult(
        transaction_id=tx_id,
        subtotal=subtotal,
        tax_amount=tax,
        amount_due=subtotal + tax,
        orders=orders,
        payment=payment,
    )
